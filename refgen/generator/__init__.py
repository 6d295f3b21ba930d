"""refgen code generator."""

from .config import Config as Config
from .driver import Context as Context
from .driver import collect as collect
from .driver import emit as emit
from .driver import generate as generate
from .driver import process_package as process_package
from .errors import *
from .ident import Identifier as Identifier
from .ident import parse_ident as parse_ident
from .ident import parse_type as parse_type
from .parser import parse as parse
from .parser import parse_type_expr as parse_type_expr
from .policy import FieldPolicy as FieldPolicy
from .policy import Variant as Variant
from .policy import resolve as resolve
from .types import *
