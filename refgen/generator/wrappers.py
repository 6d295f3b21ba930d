"""Reference wrapper type generation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .config import Config
from .ident import Identifier, parse_type
from .typemap import annotation, zero

if TYPE_CHECKING:
    from .driver import Context


@dataclass(frozen=True)
class WrapperType:
    """One generated wrapper pairing an identifier with an optional value."""

    name: str
    ident: Identifier  # referenced type
    value: Identifier  # shape stored in ``Value``
    value_annotation: str
    id_annotation: str
    id_zero: str


def wrapper_name(config: Config, ident: Identifier) -> str:
    """Name of the wrapper generated for a referenced type."""
    return ident.base + config.ref_suffix


def wrapper_type(ctx: Context, ident: Identifier) -> WrapperType:
    """Build the wrapper model for one referenced type.

    A type that cannot already be unset gets one added pointer layer.
    """
    value = ident if ident.nullable() else ident.indirect()
    value_annotation = annotation(ctx, value)
    if not value_annotation.endswith(" | None"):
        value_annotation += " | None"

    id_ident = parse_type(ctx.config.id_type)
    return WrapperType(
        name=wrapper_name(ctx.config, ident),
        ident=ident,
        value=value,
        value_annotation=value_annotation,
        id_annotation=annotation(ctx, id_ident),
        id_zero=zero(ctx, id_ident),
    )


def wrapper_types(ctx: Context) -> list[WrapperType]:
    """Wrapper models for every referenced type, ordered by canonical name."""
    return [wrapper_type(ctx, ctx.generate[base]) for base in sorted(ctx.generate)]
