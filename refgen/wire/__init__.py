"""Runtime support imported by generated reference modules."""

from .serialization import DecodeError as DecodeError
from .serialization import MarshalError as MarshalError
from .serialization import RawMessage as RawMessage
from .serialization import SerializationError as SerializationError
from .serialization import decode as decode
from .serialization import decode_object as decode_object
from .serialization import encode as encode
from .serialization import expect_object as expect_object
from .serialization import is_empty as is_empty
from .shapes import Map as Map
from .shapes import Named as Named
from .shapes import Pointer as Pointer
from .shapes import Shape as Shape
from .shapes import Slice as Slice
