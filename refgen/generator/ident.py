"""Type expression parsing into canonical identifier descriptors."""

from __future__ import annotations

from dataclasses import dataclass

from .errors import TypeSyntaxError
from .naming import LayerKind, composite_name, written_form
from .parser import parse_type_expr
from .types import (
    ArrayExpr,
    MapExpr,
    NameExpr,
    SelectorExpr,
    SliceExpr,
    StarExpr,
    TypeExpr,
    is_exported,
)


@dataclass(frozen=True)
class Layer:
    """One compounding layer of a type expression."""

    kind: LayerKind
    key: Identifier | None = None  # map layers only


@dataclass(frozen=True)
class Identifier:
    """Canonical description of a type expression.

    ``name`` is the written form (``[]*pkg.Msg``) and ``base`` the composite
    name (``ArrayOfPtrToMsg``). ``layers`` lists the pointer, slice and map
    layers outside-in. For maps, ``key`` describes the outermost map's key
    while every other field describes the value side.
    """

    name: str
    base: str
    indirects: int
    dims: int
    key: Identifier | None = None
    type_name: str = ""
    package: str = ""
    layers: tuple[Layer, ...] = ()

    @property
    def qualified(self) -> str:
        """The innermost type name including its package path."""
        if self.package:
            return f"{self.package}.{self.type_name}"
        return self.type_name

    def nullable(self) -> bool:
        return self.indirects > 0 or self.dims > 0 or self.key is not None

    def is_exported(self) -> bool:
        return is_exported(self.type_name)

    def indirect(self) -> Identifier:
        """Return the descriptor of a pointer to this type."""
        return _build((Layer(LayerKind.POINTER), *self.layers), self.type_name, self.package)


def _build(layers: tuple[Layer, ...], type_name: str, package: str) -> Identifier:
    qualified = f"{package}.{type_name}" if package else type_name
    keys = [layer.key for layer in layers if layer.key is not None]
    return Identifier(
        name=written_form(layers, qualified),
        base=composite_name(layers, type_name),
        indirects=sum(1 for layer in layers if layer.kind == LayerKind.POINTER),
        dims=sum(1 for layer in layers if layer.kind == LayerKind.SLICE),
        key=keys[0] if keys else None,
        type_name=type_name,
        package=package,
        layers=layers,
    )


def _qualified(parts: list[str]) -> tuple[str, str]:
    """Split ``a.b.Name`` into its package path and final name."""
    package = ""
    for part in parts[:-1]:
        package = f"{package}.{part}" if package else part
    return package, parts[-1]


def _descend(expr: TypeExpr) -> tuple[tuple[Layer, ...], str, str]:
    if isinstance(expr, NameExpr):
        return (), expr.name, ""
    if isinstance(expr, SelectorExpr):
        package, name = _qualified(expr.parts)
        return (), name, package
    if isinstance(expr, StarExpr):
        layers, name, package = _descend(expr.elem)
        return (Layer(LayerKind.POINTER), *layers), name, package
    if isinstance(expr, SliceExpr):
        layers, name, package = _descend(expr.elem)
        return (Layer(LayerKind.SLICE), *layers), name, package
    if isinstance(expr, ArrayExpr):
        raise TypeSyntaxError(f"only dynamic slices are supported, not [{expr.length}]")
    if isinstance(expr, MapExpr):
        key = parse_ident(expr.key)
        layers, name, package = _descend(expr.value)
        return (Layer(LayerKind.MAP, key), *layers), name, package
    raise TypeSyntaxError(f"unsupported type expression: {expr!r}")


def parse_ident(expr: TypeExpr) -> Identifier:
    """Decompose a type expression into its descriptor."""
    layers, name, package = _descend(expr)
    return _build(layers, name, package)


def parse_type(text: str) -> Identifier:
    """Parse type expression text such as ``map[string]*pkg.Msg``."""
    return parse_ident(parse_type_expr(text))
