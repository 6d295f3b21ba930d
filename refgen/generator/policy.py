"""Field marshal policies derived from struct tags."""

import json
import re
from dataclasses import dataclass
from enum import StrEnum

from .errors import AmbiguousTagError, PolicyError
from .types import FieldDecl, is_exported

# key:"value" pairs of a struct tag
_TAG_PAIR = re.compile(r'([^\s:"]+):"((?:[^"\\]|\\.)*)"')

OMIT = "-"
OMIT_EMPTY = "omitempty"


class Variant(StrEnum):
    """Which side of a reference a field puts on the wire."""

    ID = "id"
    VALUE = "value"


@dataclass(frozen=True)
class FieldPolicy:
    """How one field is marshaled and unmarshaled."""

    wire_name: str
    id_name: str = ""
    variant: Variant | None = None  # None for plain fields
    is_reference: bool = False
    omit: bool = False
    omit_empty: bool = False


def lookup(tag: str | None, key: str) -> str:
    """Return the value stored under ``key`` in a struct tag, or ``""``."""
    if not tag:
        return ""
    for match in _TAG_PAIR.finditer(tag):
        if match.group(1) == key:
            return json.loads(f'"{match.group(2)}"')
    return ""


def split_tag(value: str) -> tuple[str, list[str]]:
    """Split ``name,flag,flag`` into the name and its flags."""
    name, _, flags = value.partition(",")
    return name, flags.split(",") if flags else []


def _omitted(wire_tag: str, ref_tag: str) -> bool:
    for tag in (wire_tag, ref_tag):
        name, flags = split_tag(tag)
        if name == OMIT or OMIT in flags:
            return True
    return False


def resolve(wire_tag: str, ref_tag: str, name: str) -> FieldPolicy:
    """Resolve the policy for one field name from its two tag values."""
    if _omitted(wire_tag, ref_tag):
        return FieldPolicy(wire_name=name, omit=True)

    wire_name, wire_flags = split_tag(wire_tag)
    ref_name, ref_flags = split_tag(ref_tag)

    wire_name = wire_name or name
    omit_empty = OMIT_EMPTY in wire_flags

    if not ref_tag:
        return FieldPolicy(wire_name=wire_name, omit_empty=omit_empty)

    if not ref_name:
        raise PolicyError(f"Reference tag of field {name} has no identifier name")
    if len(ref_flags) > 1:
        raise PolicyError(f"Reference tag of field {name} has more than one variant: {ref_tag}")

    flag = ref_flags[0] if ref_flags else Variant.ID.value
    try:
        variant = Variant(flag)
    except ValueError:
        raise PolicyError(f"Invalid marshaling option for field {name}: {flag}") from None

    return FieldPolicy(
        wire_name=wire_name,
        id_name=ref_name,
        variant=variant,
        is_reference=True,
        omit_empty=omit_empty,
    )


def resolve_field(
    field: FieldDecl, wire_key: str = "json", ref_key: str = "ref"
) -> list[tuple[str, FieldPolicy]]:
    """Resolve the policy of every exported name declared by a field line.

    Unexported names are skipped.
    """
    wire_tag = lookup(field.tag, wire_key)
    ref_tag = lookup(field.tag, ref_key)

    named = split_tag(wire_tag)[0] != "" or ref_tag != ""
    if named and len(field.names) > 1 and not _omitted(wire_tag, ref_tag):
        raise AmbiguousTagError(
            f"Field list {', '.join(field.names)} has {len(field.names)} identifiers for one tag"
        )

    return [
        (name, resolve(wire_tag, ref_tag, name)) for name in field.names if is_exported(name)
    ]
