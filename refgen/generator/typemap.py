"""Mapping of type descriptors to Python annotations, defaults and decode shapes."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .errors import TypeLookupError, TypeSyntaxError
from .ident import Identifier, Layer
from .naming import LayerKind
from .types import AliasDecl, is_builtin

if TYPE_CHECKING:
    from .driver import Context

# Generated modules import the wire runtime under this name
RUNTIME_ALIAS = "_wire"

# Map builtin declaration types to Python type annotations
PRIMITIVE_TYPE_MAP = {
    "any": "Any",
    "bool": "bool",
    "byte": "int",
    "float32": "float",
    "float64": "float",
    "int": "int",
    "int8": "int",
    "int16": "int",
    "int32": "int",
    "int64": "int",
    "rune": "int",
    "string": "str",
    "uint": "int",
    "uint8": "int",
    "uint16": "int",
    "uint32": "int",
    "uint64": "int",
    "uintptr": "int",
}

# Qualified names implemented by the wire runtime
RUNTIME_TYPE_MAP = {
    "json.RawMessage": f"{RUNTIME_ALIAS}.RawMessage",
}

ZERO_VALUES = {
    "bool": "False",
    "float": "0.0",
    "int": "0",
    "str": '""',
}

MAP_KEY_TYPES = frozenset(["int", "str"])


def _alias(ctx: Context, ident: Identifier) -> Identifier | None:
    if ident.package:
        return None
    decl = ctx.types.get(ident.type_name)
    if isinstance(decl, AliasDecl):
        return ctx.aliases[ident.type_name]
    return None


def _named(ctx: Context, ident: Identifier, expand: bool) -> str:
    if ident.package:
        return RUNTIME_TYPE_MAP.get(ident.qualified, ident.qualified)
    if is_builtin(ident.type_name):
        return PRIMITIVE_TYPE_MAP[ident.type_name]
    if ident.type_name not in ctx.types:
        raise TypeLookupError(f"No type found for: {ident.type_name}")
    target = _alias(ctx, ident) if expand else None
    if target is not None:
        return annotation(ctx, target, expand=True)
    return ident.type_name


def _annotate(ctx: Context, layers: tuple[Layer, ...], ident: Identifier, expand: bool) -> str:
    if not layers:
        return _named(ctx, ident, expand)

    layer, inner = layers[0], _annotate(ctx, layers[1:], ident, expand)
    if layer.kind == LayerKind.POINTER:
        return inner if inner.endswith(" | None") else f"{inner} | None"
    if layer.kind == LayerKind.SLICE:
        return f"list[{inner}]"
    assert layer.key is not None
    return f"dict[{annotation(ctx, layer.key, expand)}, {inner}]"


def annotation(ctx: Context, ident: Identifier, expand: bool = False) -> str:
    """Python annotation for a descriptor.

    With ``expand`` declared aliases are replaced by what they stand for,
    which is what alias assignments themselves need.
    """
    return _annotate(ctx, ident.layers, ident, expand)


def zero(ctx: Context, ident: Identifier) -> str:
    """Dataclass default expressing the zero value of a descriptor."""
    if ident.layers:
        kind = ident.layers[0].kind
        if kind == LayerKind.SLICE:
            return "field(default_factory=list)"
        if kind == LayerKind.MAP:
            return "field(default_factory=dict)"
        return "None"

    if ident.package:
        return "None"
    if is_builtin(ident.type_name):
        return ZERO_VALUES.get(PRIMITIVE_TYPE_MAP[ident.type_name], "None")

    target = _alias(ctx, ident)
    if target is not None:
        return zero(ctx, target)
    return f"field(default_factory=lambda: {ident.type_name}())"


def field_annotation(ctx: Context, ident: Identifier) -> str:
    """Annotation of a dataclass field, optional when its zero value is ``None``."""
    ann = annotation(ctx, ident)
    if zero(ctx, ident) == "None" and ann != "Any" and not ann.endswith(" | None"):
        return f"{ann} | None"
    return ann


def _key_shape(ctx: Context, key: Identifier) -> str:
    target = _alias(ctx, key)
    if target is not None:
        return _key_shape(ctx, target)
    python_type = PRIMITIVE_TYPE_MAP.get(key.type_name) if not key.package else None
    if key.layers or python_type not in MAP_KEY_TYPES:
        raise TypeSyntaxError(f"Unsupported map key type: {key.name}")
    return f"{RUNTIME_ALIAS}.Named({python_type})"


def _shape(ctx: Context, layers: tuple[Layer, ...], ident: Identifier) -> str:
    if not layers:
        target = _alias(ctx, ident)
        if target is not None:
            return shape(ctx, target)
        name = _named(ctx, ident, expand=False)
        return f"{RUNTIME_ALIAS}.Named({'object' if name == 'Any' else name})"

    layer, inner = layers[0], _shape(ctx, layers[1:], ident)
    if layer.kind == LayerKind.POINTER:
        return f"{RUNTIME_ALIAS}.Pointer({inner})"
    if layer.kind == LayerKind.SLICE:
        return f"{RUNTIME_ALIAS}.Slice({inner})"
    assert layer.key is not None
    return f"{RUNTIME_ALIAS}.Map({_key_shape(ctx, layer.key)}, {inner})"


def shape(ctx: Context, ident: Identifier) -> str:
    """Expression building the runtime decode shape of a descriptor."""
    return _shape(ctx, ident.layers, ident)
