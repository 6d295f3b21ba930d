"""Runtime shape descriptors for decoding wire values.

Generated ``unmarshal`` code describes the declared shape of every field with
these dataclasses so that nested values can be decoded without inspecting
annotations at runtime.
"""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class Named:
    """A value of a concrete Python type."""

    type: Any


@dataclass(frozen=True, slots=True)
class Pointer:
    """An optional value; ``null`` decodes to ``None``."""

    elem: "Shape"


@dataclass(frozen=True, slots=True)
class Slice:
    """A list of values of one shape."""

    elem: "Shape"


@dataclass(frozen=True, slots=True)
class Map:
    """An object whose keys and values each have one shape."""

    key: "Shape"
    value: "Shape"


Shape = Named | Pointer | Slice | Map
