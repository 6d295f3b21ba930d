"""Type definitions for declaration parsing and code generation."""

from dataclasses import dataclass

from dataclasses_json import DataClassJsonMixin


@dataclass
class NameExpr(DataClassJsonMixin):
    """A plain type name, e.g. ``Msg`` or ``string``."""

    name: str


@dataclass
class SelectorExpr(DataClassJsonMixin):
    """A package-qualified type name, e.g. ``pkg.Msg``."""

    parts: list[str]


@dataclass
class StarExpr(DataClassJsonMixin):
    """A pointer to another type: ``*elem``."""

    elem: "TypeExpr"


@dataclass
class SliceExpr(DataClassJsonMixin):
    """A dynamic slice of another type: ``[]elem``."""

    elem: "TypeExpr"


@dataclass
class ArrayExpr(DataClassJsonMixin):
    """A fixed-length array: ``[length]elem``.

    The grammar accepts it so that it can be rejected with a proper error.
    """

    length: int
    elem: "TypeExpr"


@dataclass
class MapExpr(DataClassJsonMixin):
    """A map type: ``map[key]value``."""

    key: "TypeExpr"
    value: "TypeExpr"


TypeExpr = NameExpr | SelectorExpr | StarExpr | SliceExpr | ArrayExpr | MapExpr


@dataclass
class FieldDecl(DataClassJsonMixin):
    """Represents one field line of a struct.

    A field line may declare several names sharing one type and tag,
    e.g. ``A, B string``.
    """

    names: list[str]
    type: TypeExpr
    tag: str | None = None


@dataclass
class StructDecl(DataClassJsonMixin):
    """Represents a struct type declaration."""

    name: str
    fields: list[FieldDecl]
    unit: str


@dataclass
class AliasDecl(DataClassJsonMixin):
    """Represents a named non-struct type, e.g. ``type Int int``."""

    name: str
    type: TypeExpr
    unit: str


TypeDecl = StructDecl | AliasDecl


@dataclass
class SourceUnit(DataClassJsonMixin):
    """Represents one parsed declaration file."""

    name: str
    package: str
    decls: list[TypeDecl]

    @property
    def structs(self) -> list[StructDecl]:
        return [d for d in self.decls if isinstance(d, StructDecl)]

    @property
    def aliases(self) -> list[AliasDecl]:
        return [d for d in self.decls if isinstance(d, AliasDecl)]


BUILTIN_TYPES = frozenset(
    [
        "any",
        "bool",
        "byte",
        "float32",
        "float64",
        "int",
        "int8",
        "int16",
        "int32",
        "int64",
        "rune",
        "string",
        "uint",
        "uint8",
        "uint16",
        "uint32",
        "uint64",
        "uintptr",
    ]
)

# Qualified names whose implementation ships with the wire runtime
RUNTIME_TYPES = frozenset(["json.RawMessage"])


def is_builtin(name: str) -> bool:
    """Check if a name is a builtin type name."""
    return name in BUILTIN_TYPES


def is_exported(name: str) -> bool:
    """Check if a name is visible outside its package (upper-case initial)."""
    return name[:1].isupper()
