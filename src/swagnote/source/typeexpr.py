"""Go type expressions as a closed set of variants.

Every type the scanner meets in a field, a type definition or an
annotation is reduced to one of:

* :class:`Primitive` -- a predeclared Go type (``int64``, ``string`` ...)
  or ``time.Time``.
* :class:`Ident` -- a named type of the current package.
* :class:`Qualified` -- ``pkg.Name``, where ``pkg`` is an import alias or
  an absolute package path.
* :class:`ArrayOf` -- slices and fixed-size arrays.
* :class:`MapOf` -- maps; only the value type is documented.
* :class:`Wildcard` -- ``interface{...}`` and ``any``.
* :class:`StructType` -- a struct literal type with its fields.
* :class:`Unsupported` -- channels and function types.

Pointers are transparent: ``*T`` parses to the variant of ``T``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional, Union

from swagnote.source.lexer import IDENT, NEWLINE, NUMBER, OP, Token, tokenize

BUILTIN_TYPES = frozenset(
    {
        "bool",
        "uint", "uint8", "uint16", "uint32", "uint64", "uintptr",
        "int", "int8", "int16", "int32", "int64",
        "float32", "float64",
        "complex64", "complex128",
        "string", "byte", "rune", "error",
    }
)

TIME_TYPE = "Time"


@dataclass(frozen=True)
class Primitive:
    name: str


@dataclass(frozen=True)
class Ident:
    name: str


@dataclass(frozen=True)
class Qualified:
    package: str
    name: str


@dataclass(frozen=True)
class ArrayOf:
    elem: TypeExpr


@dataclass(frozen=True)
class MapOf:
    key: TypeExpr
    value: TypeExpr


@dataclass(frozen=True)
class Wildcard:
    pass


@dataclass(frozen=True)
class Unsupported:
    text: str


@dataclass(frozen=True)
class FieldDecl:
    """One line of a struct body.

    ``names`` is empty for an embedded (anonymous) field. ``tag`` is the
    raw struct tag without its quotes, ``comment`` the field's doc or
    trailing line comment.
    """

    names: tuple[str, ...]
    type: TypeExpr
    tag: Optional[str] = None
    comment: Optional[str] = None
    line: int = 0

    @property
    def embedded(self) -> bool:
        return not self.names


@dataclass(frozen=True)
class StructType:
    fields: tuple[FieldDecl, ...] = field(default=())


TypeExpr = Union[Primitive, Ident, Qualified, ArrayOf, MapOf, Wildcard, StructType, Unsupported]


def type_name(expr: TypeExpr) -> Optional[str]:
    """Return the written name of a named type, ``None`` for composite types."""
    if isinstance(expr, (Primitive, Ident)):
        return expr.name
    if isinstance(expr, Qualified):
        return f"{expr.package}.{expr.name}"
    return None


def element_type(expr: TypeExpr) -> TypeExpr:
    """Unwrap arrays and maps down to the innermost element type."""
    while isinstance(expr, (ArrayOf, MapOf)):
        expr = expr.elem if isinstance(expr, ArrayOf) else expr.value
    return expr


class TypeSyntaxError(ValueError):
    """Raised when tokens do not form a Go type expression."""


def parse_type(text: str) -> TypeExpr:
    """Parse a standalone type expression such as ``[]*models.Pet``."""
    tokens = [t for t in tokenize(text)[0] if t.kind != NEWLINE]
    if not tokens:
        raise TypeSyntaxError("empty type expression")
    expr, pos = parse_type_tokens(tokens, 0)
    if pos != len(tokens):
        raise TypeSyntaxError(f"unexpected {tokens[pos].value!r} in type {text!r}")
    return expr


FieldsParser = Callable[[list[Token]], tuple["FieldDecl", ...]]


def parse_type_tokens(
    tokens: list[Token], pos: int, fields_parser: Optional[FieldsParser] = None
) -> tuple[TypeExpr, int]:
    """Parse one type expression starting at ``tokens[pos]``.

    Args:
        tokens: Token list; newlines are skipped only inside brackets.
        pos: Index of the first token of the type.
        fields_parser: Callable turning the tokens of a struct body into a
            tuple of :class:`FieldDecl`. When ``None`` struct bodies are
            skipped and yield an empty :class:`StructType`.

    Returns:
        The parsed expression and the index just past it.
    """
    tok = _peek(tokens, pos)
    if tok is None:
        raise TypeSyntaxError("unexpected end of type")

    if tok.value == "*":
        return parse_type_tokens(tokens, pos + 1, fields_parser)

    if tok.value == "(":
        inner, pos = parse_type_tokens(tokens, pos + 1, fields_parser)
        return inner, _expect(tokens, pos, ")")

    if tok.value == "[":
        pos += 1
        while _peek(tokens, pos) is not None and tokens[pos].value != "]":
            pos += 1  # array length, if any
        pos = _expect(tokens, pos, "]")
        elem, pos = parse_type_tokens(tokens, pos, fields_parser)
        return ArrayOf(elem), pos

    if tok.kind == OP and tok.value == "<-":
        _, pos = parse_type_tokens(tokens, pos + 2, fields_parser)
        return Unsupported("chan"), pos

    if tok.kind != IDENT:
        raise TypeSyntaxError(f"unexpected {tok.value!r} in type")

    if tok.value == "map":
        pos = _expect(tokens, pos + 1, "[")
        key, pos = parse_type_tokens(tokens, pos, fields_parser)
        pos = _expect(tokens, pos, "]")
        value, pos = parse_type_tokens(tokens, pos, fields_parser)
        return MapOf(key, value), pos

    if tok.value == "chan":
        pos += 1
        if _peek(tokens, pos) is not None and tokens[pos].value == "<-":
            pos += 1
        _, pos = parse_type_tokens(tokens, pos, fields_parser)
        return Unsupported("chan"), pos

    if tok.value == "func":
        pos = _skip_balanced(tokens, _expect_at(tokens, pos + 1, "("))
        nxt = _peek(tokens, pos)
        if nxt is not None and nxt.value == "(":
            pos = _skip_balanced(tokens, pos)
        elif nxt is not None and _starts_type(nxt):
            _, pos = parse_type_tokens(tokens, pos, fields_parser)
        return Unsupported("func"), pos

    if tok.value == "interface":
        return Wildcard(), _skip_balanced(tokens, _expect_at(tokens, pos + 1, "{"))

    if tok.value == "struct":
        start = _expect_at(tokens, pos + 1, "{")
        end = _skip_balanced(tokens, start)
        fields = fields_parser(tokens[start + 1 : end - 1]) if fields_parser else ()
        return StructType(tuple(fields)), end

    if tok.value == "any":
        return Wildcard(), pos + 1

    name = tok.value
    pos += 1
    nxt = _peek(tokens, pos)
    if nxt is not None and nxt.value == "." and _peek(tokens, pos + 1) is not None:
        qualifier, name = name, tokens[pos + 1].value
        pos += 2
        pos = _skip_type_args(tokens, pos)
        if qualifier == "time" and name == TIME_TYPE:
            return Primitive(TIME_TYPE), pos
        return Qualified(qualifier, name), pos

    pos = _skip_type_args(tokens, pos)
    if name in BUILTIN_TYPES:
        return Primitive(name), pos
    return Ident(name), pos


def _starts_type(tok: Token) -> bool:
    return tok.kind == IDENT or tok.value in ("*", "[", "(", "<-")


def _skip_type_args(tokens: list[Token], pos: int) -> int:
    """Skip ``[T, U]`` generic instantiation arguments after a type name."""
    tok = _peek(tokens, pos)
    after = _peek(tokens, pos + 1)
    if tok is not None and tok.value == "[" and after is not None and after.value != "]":
        if after.kind == NUMBER:
            return pos
        return _skip_balanced(tokens, pos)
    return pos


def _skip_balanced(tokens: list[Token], pos: int) -> int:
    """Skip from an opening bracket at *pos* to just past its partner."""
    pairs = {"(": ")", "[": "]", "{": "}"}
    stack = [pairs[tokens[pos].value]]
    pos += 1
    while stack:
        if pos >= len(tokens):
            raise TypeSyntaxError("unbalanced brackets in type")
        tok = tokens[pos]
        if tok.kind == OP:
            if tok.value in pairs:
                stack.append(pairs[tok.value])
            elif tok.value == stack[-1]:
                stack.pop()
        pos += 1
    return pos


def _peek(tokens: list[Token], pos: int) -> Optional[Token]:
    """Return the token at *pos*, or ``None`` at the end or at a newline."""
    if pos < len(tokens) and tokens[pos].kind != NEWLINE:
        return tokens[pos]
    return None


def _expect_at(tokens: list[Token], pos: int, value: str) -> int:
    tok = _peek(tokens, pos)
    if tok is None or tok.value != value:
        raise TypeSyntaxError(f"expected {value!r} in type")
    return pos


def _expect(tokens: list[Token], pos: int, value: str) -> int:
    return _expect_at(tokens, pos, value) + 1
