"""Tests for the primitive type table."""

from __future__ import annotations

import pytest

from swagnote.schema import PRIMITIVES, WireType, is_primitive, wire_type


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("bool", WireType("boolean")),
        ("int", WireType("integer", "int64")),
        ("int32", WireType("integer", "int32")),
        ("uint64", WireType("integer", "int64")),
        ("byte", WireType("integer", "int32")),
        ("float32", WireType("number", "float")),
        ("float64", WireType("number", "double")),
        ("string", WireType("string")),
        ("Time", WireType("string", "date-time")),
        ("time.Time", WireType("string", "date-time")),
        ("interface{}", WireType("object")),
        ("file", WireType("file")),
    ],
)
def test_wire_types(name: str, expected: WireType) -> None:
    assert wire_type(name) == expected


def test_undefined_is_primitive_without_wire_type() -> None:
    assert is_primitive("undefined")
    assert wire_type("undefined") is None


def test_named_types_are_not_primitive() -> None:
    assert not is_primitive("Pet")
    assert wire_type("models.Pet") is None


def test_every_entry_has_a_swagger_type() -> None:
    allowed = {"boolean", "integer", "number", "string", "file", "object"}
    assert {w.type for w in PRIMITIVES.values()} <= allowed
