"""Type/schema resolution engine."""

from swagnote.schema.primitives import PRIMITIVES, WireType, is_primitive, wire_type
from swagnote.schema.resolver import TypeResolver, canonical_id, parse_struct_tag

__all__ = [
    "PRIMITIVES",
    "TypeResolver",
    "WireType",
    "canonical_id",
    "is_primitive",
    "parse_struct_tag",
    "wire_type",
]
