"""Tokenizer for Go source text.

Produces just enough structure for the declaration scanner: identifiers,
literals, operators and newlines, with comments split off into their own
list so that doc comments can be matched to the declarations below them.
No semicolon insertion is performed; the scanner works on newlines.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

_TOKEN_RE = re.compile(
    r"""
    (?P<line_comment>//[^\n]*)
    |(?P<block_comment>/\*.*?\*/)
    |(?P<raw_string>`[^`]*`)
    |(?P<string>"(?:[^"\\\n]|\\.)*")
    |(?P<char>'(?:[^'\\\n]|\\.)*')
    |(?P<newline>\n)
    |(?P<space>[ \t\r\f]+)
    |(?P<ident>[^\W\d]\w*)
    |(?P<number>\d[\w.]*)
    |(?P<op>\.\.\.|<-|:=|&&|\|\||<<=?|>>=?|&\^=?|\+\+|--|[-+*/%&|^<>=!]=?|[{}()\[\];,.:~])
    |(?P<other>.)
    """,
    re.VERBOSE | re.DOTALL,
)

IDENT = "ident"
NUMBER = "number"
STRING = "string"
RAW_STRING = "raw_string"
CHAR = "char"
OP = "op"
NEWLINE = "newline"
OTHER = "other"


@dataclass(frozen=True)
class Token:
    kind: str
    value: str
    line: int


@dataclass(frozen=True)
class Comment:
    """A ``//`` or ``/* */`` comment.

    ``own_line`` is true when nothing but whitespace precedes the comment
    on its first line; only such comments form doc comments.
    """

    text: str
    line: int
    end_line: int
    own_line: bool

    def lines(self) -> list[str]:
        """Return the comment body split into lines, markers stripped."""
        if self.text.startswith("//"):
            return [self.text[2:].strip()]
        body = self.text[2:-2]
        result = []
        for raw in body.splitlines():
            stripped = raw.strip()
            if stripped.startswith("*"):
                stripped = stripped[1:].strip()
            result.append(stripped)
        return result


def tokenize(source: str) -> tuple[list[Token], list[Comment]]:
    """Split Go *source* into significant tokens and comments.

    Returns:
        A ``(tokens, comments)`` pair. ``tokens`` keeps newlines (as
        ``NEWLINE`` tokens) because Go statements end at line breaks;
        whitespace is dropped.
    """
    tokens: list[Token] = []
    comments: list[Comment] = []
    line = 1
    line_has_code = False

    for match in _TOKEN_RE.finditer(source):
        kind = match.lastgroup
        value = match.group()
        newlines = value.count("\n")

        if kind in ("line_comment", "block_comment"):
            comments.append(Comment(value, line, line + newlines, not line_has_code))
        elif kind == NEWLINE:
            tokens.append(Token(NEWLINE, value, line))
            line_has_code = False
        elif kind != "space":
            tokens.append(Token(kind, value, line))
            line_has_code = True

        line += newlines
        if newlines and kind != NEWLINE:
            # A block comment or raw string spanning lines ends mid-line.
            line_has_code = kind == RAW_STRING

    return tokens, comments


def unquote(token: Token) -> str:
    """Return the contents of a string literal token."""
    if token.kind == RAW_STRING:
        return token.value[1:-1]
    if token.kind == STRING:
        return re.sub(r"\\(.)", r"\1", token.value[1:-1])
    return token.value
