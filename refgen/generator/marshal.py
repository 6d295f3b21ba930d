"""Marshal and unmarshal code generation for aggregate types.

The generated ``marshal`` walks fields in declaration order and writes one
flat JSON object. An emitted-field counter places exactly one separator
before every entry but the first. Reference fields write only the side
selected by their variant: ``value`` writes the wrapped value under the wire
name when the wrapper has one, ``id`` writes the identifier under the
reference name when it is non-empty.

The generated ``_assign`` reads a decoded object back: the wire name first,
then, for reference fields only, the reference name.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .ident import Identifier, parse_type
from .policy import FieldPolicy, Variant
from .typemap import RUNTIME_ALIAS, shape
from .wrappers import wrapper_name

if TYPE_CHECKING:
    from .driver import Context

INDENT = "    "


@dataclass(frozen=True)
class Member:
    """One field name of a struct with its descriptor and policy.

    ``policy`` is ``None`` for unexported names, which never reach the wire.
    """

    name: str
    ident: Identifier
    policy: FieldPolicy | None

    @property
    def wired(self) -> bool:
        return self.policy is not None and not self.policy.omit


def _key(name: str) -> str:
    return repr(json.dumps(name) + ":")


def _indent(lines: Sequence[str]) -> list[str]:
    return [INDENT + line for line in lines]


def _gen_marshal_field(member: Member) -> list[str]:
    policy = member.policy
    assert policy is not None
    attr = f"self.{member.name}"

    if policy.is_reference and policy.variant == Variant.VALUE:
        condition = f"{attr} is not None and {attr}.has_value()"
        key, value = policy.wire_name, f"{attr}.Value"
    elif policy.is_reference:
        condition = f"{attr} is not None and not {RUNTIME_ALIAS}.is_empty({attr}.Id)"
        key, value = policy.id_name, f"{attr}.Id"
    elif policy.omit_empty:
        condition = f"not {RUNTIME_ALIAS}.is_empty({attr})"
        key, value = policy.wire_name, attr
    else:
        condition = None
        key, value = policy.wire_name, attr

    body = [
        "if _n:",
        INDENT + '_buf.append(",")',
        f"_buf.append({_key(key)} + {RUNTIME_ALIAS}.encode({value}))",
        "_n += 1",
    ]
    if condition is None:
        return body
    return [f"if {condition}:", *_indent(body)]


def gen_marshal(members: Sequence[Member]) -> str:
    """Generate the body of a struct's ``marshal`` method."""
    wired = [m for m in members if m.wired]
    if not wired:
        return 'return b"{}"'

    lines = ['_buf = ["{"]', "_n = 0"]
    for member in wired:
        lines.extend(_gen_marshal_field(member))
    lines.append('_buf.append("}")')
    lines.append('return "".join(_buf).encode("utf-8")')
    return "\n".join(lines)


def _gen_assign_field(ctx: Context, member: Member) -> list[str]:
    policy = member.policy
    assert policy is not None
    attr = f"self.{member.name}"
    decoded = f"{RUNTIME_ALIAS}.decode(_raw, {shape(ctx, member.ident)})"

    lines = [f"_raw = fields.get({policy.wire_name!r})", "if _raw is not None:"]
    if not policy.is_reference:
        lines.append(f"{INDENT}{attr} = {decoded}")
        return lines

    wrapper = wrapper_name(ctx.config, member.ident)
    id_decoded = f"{RUNTIME_ALIAS}.decode(_raw, {shape(ctx, parse_type(ctx.config.id_type))})"
    lines.extend(
        [
            f"{INDENT}{attr} = {wrapper}.from_value({decoded})",
            "else:",
            f"{INDENT}_raw = fields.get({policy.id_name!r})",
            f"{INDENT}if _raw is not None:",
            f"{INDENT * 2}{attr} = {wrapper}.from_id({id_decoded})",
        ]
    )
    return lines


def gen_assign(ctx: Context, members: Sequence[Member]) -> str:
    """Generate the body of a struct's ``_assign`` method."""
    lines: list[str] = []
    for member in members:
        if member.wired:
            lines.extend(_gen_assign_field(ctx, member))
    return "\n".join(lines) if lines else "pass"
