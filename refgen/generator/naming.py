"""Written-form and composite-name synthesis for type descriptors."""

from __future__ import annotations

from collections.abc import Sequence
from enum import StrEnum, auto
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .ident import Layer


class LayerKind(StrEnum):
    """Kind of one compounding layer of a type expression."""

    POINTER = auto()
    SLICE = auto()
    MAP = auto()


def capitalize(name: str) -> str:
    """Upper-case the first letter of a name, leaving the rest alone."""
    return name[:1].upper() + name[1:]


def written_form(layers: Sequence[Layer], qualified: str) -> str:
    """Rebuild the surface syntax of a type from its layers, outside-in."""
    tokens: list[str] = []
    for layer in layers:
        if layer.kind == LayerKind.POINTER:
            tokens.append("*")
        elif layer.kind == LayerKind.SLICE:
            tokens.append("[]")
        else:
            assert layer.key is not None
            tokens.append(f"map[{layer.key.name}]")
    return "".join(tokens) + qualified


def composite_name(layers: Sequence[Layer], type_name: str) -> str:
    """Build the canonical base name of a type from its layers, outside-in.

    Pointers outside every slice or map do not contribute, so ``*Msg`` and
    ``Msg`` share the base name ``Msg`` while ``[]*Msg`` becomes
    ``ArrayOfPtrToMsg``.
    """
    tokens: list[str] = []
    for layer in layers:
        if layer.kind == LayerKind.POINTER:
            if tokens:
                tokens.append("PtrTo")
        elif layer.kind == LayerKind.SLICE:
            tokens.append("ArrayOf")
        else:
            assert layer.key is not None
            tokens.append(f"MapOf{capitalize(layer.key.base)}To")

    if not tokens:
        return type_name
    return "".join(tokens) + capitalize(type_name)
