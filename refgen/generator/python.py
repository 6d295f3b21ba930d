"""Python module generator for reference packages."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from jinja2 import Environment, PackageLoader

from .marshal import gen_assign, gen_marshal
from .types import AliasDecl, StructDecl
from .typemap import annotation, field_annotation, zero
from .wrappers import wrapper_name, wrapper_types

if TYPE_CHECKING:
    from .driver import Context

env = Environment(
    loader=PackageLoader("refgen.generator", "templates"),
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
    line_comment_prefix="%%",
    line_statement_prefix="%",
)

template = env.get_template("python.py.j2")


@dataclass(frozen=True)
class StructField:
    name: str
    annotation: str
    default: str


@dataclass(frozen=True)
class StructType:
    name: str
    fields: list[StructField]
    marshal: str
    assign: str


@dataclass(frozen=True)
class AliasType:
    name: str
    target: str


def _struct_type(ctx: Context, decl: StructDecl) -> StructType:
    members = ctx.marshal[decl.name]
    fields: list[StructField] = []
    for member in members:
        if member.wired and member.policy is not None and member.policy.is_reference:
            ann = f"{wrapper_name(ctx.config, member.ident)} | None"
            fields.append(StructField(member.name, ann, "None"))
        else:
            ann = field_annotation(ctx, member.ident)
            fields.append(StructField(member.name, ann, zero(ctx, member.ident)))

    return StructType(
        name=decl.name,
        fields=fields,
        marshal=gen_marshal(members),
        assign=gen_assign(ctx, members),
    )


def render(ctx: Context) -> str:
    """Render a collected package to Python source code."""
    structs = [_struct_type(ctx, d) for d in ctx.types.values() if isinstance(d, StructDecl)]
    aliases = [
        AliasType(d.name, annotation(ctx, ctx.aliases[d.name], expand=True))
        for d in ctx.types.values()
        if isinstance(d, AliasDecl)
    ]

    return template.render(
        package=ctx.package,
        units=ctx.units,
        runtime_import=ctx.config.runtime_import,
        dependencies=sorted(ctx.dependencies),
        wrappers=wrapper_types(ctx),
        structs=structs,
        aliases=aliases,
    )
