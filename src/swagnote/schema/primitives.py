"""Static translation of Go primitive type names to Swagger wire types.

A primitive never produces a ``definitions`` entry: it always documents as
the fixed ``(type, format)`` pair below. ``interface`` covers
``interface{}`` and ``any``; ``undefined`` is the sentinel for types that
cannot be documented at all, and a property carrying it is dropped.
"""

from __future__ import annotations

from typing import NamedTuple, Optional

from swagnote.source.typeexpr import TIME_TYPE

UNDEFINED = "undefined"
INTERFACE = "interface"
FILE = "file"


class WireType(NamedTuple):
    type: str
    format: Optional[str] = None


_INT64 = WireType("integer", "int64")
_INT32 = WireType("integer", "int32")

PRIMITIVES: dict[str, WireType] = {
    "bool": WireType("boolean"),
    "int": _INT64,
    "int8": _INT32,
    "int16": _INT32,
    "int32": _INT32,
    "int64": _INT64,
    "uint": _INT64,
    "uint8": _INT32,
    "uint16": _INT32,
    "uint32": _INT32,
    "uint64": _INT64,
    "uintptr": _INT64,
    "byte": _INT32,
    "rune": _INT32,
    "float32": WireType("number", "float"),
    "float64": WireType("number", "double"),
    "complex64": WireType("number"),
    "complex128": WireType("number"),
    "string": WireType("string"),
    "error": WireType("string"),
    TIME_TYPE: WireType("string", "date-time"),
    "time.Time": WireType("string", "date-time"),
    FILE: WireType("file"),
    INTERFACE: WireType("object"),
    "interface{}": WireType("object"),
    "any": WireType("object"),
}


def is_primitive(name: str) -> bool:
    return name == UNDEFINED or name in PRIMITIVES


def wire_type(name: str) -> Optional[WireType]:
    """Return the wire type of a primitive, ``None`` for ``undefined`` and non-primitives."""
    return PRIMITIVES.get(name)
