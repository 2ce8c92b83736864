"""Token-based scanner extracting declarations from Go source files.

Walks the top level of each file and records the package clause, import
specs, type declarations (struct fields included) and function
declarations together with the doc comment directly above them. Function
bodies, ``var`` and ``const`` blocks are skipped without being parsed.

The scanner is deliberately forgiving: a declaration it cannot make sense
of is logged at debug level and skipped, never fatal.

See :class:`GoSourceScanner` for the main entry point.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from swagnote.source.lexer import (
    IDENT,
    NEWLINE,
    NUMBER,
    RAW_STRING,
    STRING,
    Comment,
    Token,
    tokenize,
    unquote,
)
from swagnote.source.model import FuncDecl, ImportDecl, PackageDecls, SourceFile, TypeDecl
from swagnote.source.typeexpr import (
    FieldDecl,
    TypeSyntaxError,
    Unsupported,
    parse_type_tokens,
)

logger = logging.getLogger(__name__)

_OPENERS = {"(": ")", "[": "]", "{": "}"}


def is_package_file(path: Path) -> bool:
    """Return True for the ``.go`` files the Go tool would compile into a package."""
    name = path.name
    return (
        path.is_file()
        and not name.startswith(".")
        and name.endswith(".go")
        and not name.endswith("_test.go")
    )


class GoSourceScanner:
    """Scan Go files and directories into :class:`~swagnote.source.model.SourceFile` records.

    Example::

        scanner = GoSourceScanner()
        decls = scanner.scan_package(Path("src/github.com/acme/api/models"))
        print(sorted(decls.types))
    """

    def scan_package(self, directory: Path) -> PackageDecls:
        """Scan every package file directly inside *directory*, in name order.

        Files that cannot be read are logged and skipped.
        """
        decls = PackageDecls()
        for path in sorted(p for p in directory.iterdir() if is_package_file(p)):
            try:
                source_file = self.scan_file(path)
            except OSError as exc:
                logger.warning("Skipping unreadable file %s: %s", path, exc)
                continue
            decls.files.append(source_file)
            if not decls.name:
                decls.name = source_file.package
        return decls

    def scan_file(self, path: Path) -> SourceFile:
        """Read and scan a single Go file.

        Raises:
            OSError: If the file cannot be read.
        """
        source = path.read_text(encoding="utf-8", errors="replace")
        return self.scan_source(source, str(path))

    def scan_source(self, source: str, path: str = "") -> SourceFile:
        """Scan Go source text that did not come from disk."""
        tokens, comments = tokenize(source)
        return _FileParser(tokens, comments, path).parse()


class _FileParser:
    """Single-use parser over the tokens of one file."""

    def __init__(self, tokens: list[Token], comments: list[Comment], path: str) -> None:
        self.tokens = tokens
        self.pos = 0
        self.result = SourceFile(path=path)
        self.result.comments = [line for c in comments for line in c.lines()]
        self._doc_groups = _doc_groups(comments)
        self._trailing = {
            c.line: " ".join(c.lines()).strip() for c in comments if not c.own_line
        }

    # ------------------------------------------------------------------ #
    # Top level
    # ------------------------------------------------------------------ #

    def parse(self) -> SourceFile:
        while self.pos < len(self.tokens):
            tok = self.tokens[self.pos]
            if tok.kind == NEWLINE or tok.value == ";":
                self.pos += 1
            elif tok.kind == IDENT and tok.value == "package":
                self.result.package = self._value_at(self.pos + 1)
                self.pos += 2
            elif tok.kind == IDENT and tok.value == "import":
                self.pos += 1
                self._group(self._parse_import_spec)
            elif tok.kind == IDENT and tok.value == "type":
                self.pos += 1
                self._group(self._parse_type_spec)
            elif tok.kind == IDENT and tok.value == "func":
                self._parse_func()
            else:
                self._skip_statement()
        return self.result

    def _group(self, parse_spec) -> None:
        """Parse a single spec or a parenthesised group of specs."""
        if self._value_at(self.pos) != "(":
            parse_spec()
            return
        self.pos += 1
        while self.pos < len(self.tokens):
            tok = self.tokens[self.pos]
            if tok.value == ")":
                self.pos += 1
                return
            if tok.kind == NEWLINE or tok.value == ";":
                self.pos += 1
                continue
            parse_spec()

    def _parse_import_spec(self) -> None:
        alias: Optional[str] = None
        tok = self.tokens[self.pos]
        if tok.kind not in (STRING, RAW_STRING):
            alias = tok.value
            self.pos += 1
            tok = self.tokens[self.pos] if self.pos < len(self.tokens) else tok
        if tok.kind in (STRING, RAW_STRING):
            self.result.imports.append(ImportDecl(path=unquote(tok), alias=alias))
        self._skip_statement()

    def _parse_type_spec(self) -> None:
        start = self.pos
        name_tok = self.tokens[self.pos]
        if name_tok.kind != IDENT:
            self._skip_statement()
            return
        self.pos += 1
        if self._looks_like_type_params():
            self.pos = self._skip_balanced(self.pos)
        if self._value_at(self.pos) == "=":
            self.pos += 1
        try:
            underlying, self.pos = parse_type_tokens(self.tokens, self.pos, self._parse_fields)
        except TypeSyntaxError as exc:
            logger.debug("Skipping type %s in %s: %s", name_tok.value, self.result.path, exc)
            self.pos = start
            self._skip_statement()
            return
        self.result.types.append(
            TypeDecl(name=name_tok.value, underlying=underlying, file=self.result.path, line=name_tok.line)
        )

    def _looks_like_type_params(self) -> bool:
        """Tell ``type List[T any] ...`` apart from ``type Buf [N]byte``."""
        if self._value_at(self.pos) != "[":
            return False
        first = self._token_at(self.pos + 1)
        second = self._token_at(self.pos + 2)
        return (
            first is not None
            and first.kind == IDENT
            and second is not None
            and second.value not in ("]", ".")
        )

    def _parse_func(self) -> None:
        func_tok = self.tokens[self.pos]
        self.pos += 1
        receiver: Optional[str] = None
        if self._value_at(self.pos) == "(":
            end = self._skip_balanced(self.pos)
            receiver = _receiver_type(self.tokens[self.pos + 1 : end - 1])
            self.pos = end
        name_tok = self._token_at(self.pos)
        if name_tok is None or name_tok.kind != IDENT:
            self._skip_statement()
            return
        self.pos += 1

        # Signature up to the body or the end of line.
        while self.pos < len(self.tokens):
            tok = self.tokens[self.pos]
            if tok.kind == NEWLINE:
                break
            if tok.value in ("interface", "struct") and self._value_at(self.pos + 1) == "{":
                self.pos = self._skip_balanced(self.pos + 1)
            elif tok.value == "{":
                self.pos = self._skip_balanced(self.pos)
                break
            elif tok.value in _OPENERS:
                self.pos = self._skip_balanced(self.pos)
            else:
                self.pos += 1

        self.result.functions.append(
            FuncDecl(
                name=name_tok.value,
                doc=self._doc_for(func_tok.line),
                receiver=receiver,
                file=self.result.path,
                line=func_tok.line,
            )
        )

    # ------------------------------------------------------------------ #
    # Struct bodies
    # ------------------------------------------------------------------ #

    def _parse_fields(self, body: list[Token]) -> tuple[FieldDecl, ...]:
        fields: list[FieldDecl] = []
        for line in _split_lines(body):
            field = self._parse_field(line)
            if field is not None:
                fields.append(field)
        return tuple(fields)

    def _parse_field(self, tokens: list[Token]) -> Optional[FieldDecl]:
        tag: Optional[str] = None
        if tokens[-1].kind in (STRING, RAW_STRING):
            tag = unquote(tokens[-1])
            tokens = tokens[:-1]
        if not tokens:
            return None

        first = tokens[0]
        names: list[str] = []
        start = 0
        if first.kind == IDENT and not _is_embedded(tokens):
            names.append(first.value)
            start = 1
            while start + 1 < len(tokens) and tokens[start].value == ",":
                names.append(tokens[start + 1].value)
                start += 2

        try:
            field_type, _ = parse_type_tokens(tokens, start, self._parse_fields)
        except TypeSyntaxError:
            field_type = Unsupported(" ".join(t.value for t in tokens[start:]))

        comment = self._trailing.get(first.line) or " ".join(self._doc_for(first.line)) or None
        return FieldDecl(
            names=tuple(names), type=field_type, tag=tag, comment=comment, line=first.line
        )

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _doc_for(self, line: int) -> list[str]:
        return list(self._doc_groups.get(line - 1, []))

    def _token_at(self, pos: int) -> Optional[Token]:
        return self.tokens[pos] if pos < len(self.tokens) else None

    def _value_at(self, pos: int) -> str:
        tok = self._token_at(pos)
        return tok.value if tok is not None else ""

    def _skip_balanced(self, pos: int) -> int:
        return _skip_balanced(self.tokens, pos)

    def _skip_statement(self) -> None:
        """Advance past the current statement: the next newline at bracket depth zero."""
        while self.pos < len(self.tokens):
            tok = self.tokens[self.pos]
            if tok.kind == NEWLINE or tok.value == ";":
                self.pos += 1
                return
            if tok.value in _OPENERS:
                self.pos = self._skip_balanced(self.pos)
            elif tok.value in (")", "]", "}"):
                # Closing bracket of an enclosing group: leave it to the caller.
                return
            else:
                self.pos += 1


def _skip_balanced(tokens: list[Token], pos: int) -> int:
    """Return the index just past the bracket matching ``tokens[pos]``."""
    stack = [_OPENERS[tokens[pos].value]]
    pos += 1
    while stack and pos < len(tokens):
        value = tokens[pos].value
        if tokens[pos].kind not in (STRING, RAW_STRING):
            if value in _OPENERS:
                stack.append(_OPENERS[value])
            elif value == stack[-1]:
                stack.pop()
        pos += 1
    return pos


def _split_lines(body: list[Token]) -> list[list[Token]]:
    """Split struct body tokens into field lines at depth-zero newlines."""
    lines: list[list[Token]] = []
    current: list[Token] = []
    depth = 0
    for tok in body:
        if tok.kind not in (STRING, RAW_STRING):
            if tok.value in _OPENERS:
                depth += 1
            elif tok.value in (")", "]", "}"):
                depth -= 1
        if depth == 0 and (tok.kind == NEWLINE or tok.value == ";"):
            if current:
                lines.append(current)
            current = []
            continue
        current.append(tok)
    if current:
        lines.append(current)
    return lines


def _is_embedded(tokens: list[Token]) -> bool:
    """Return True when a field line declares an embedded type rather than a named field."""
    if len(tokens) == 1:
        return True
    second = tokens[1]
    if second.value == ".":
        return True
    if second.value == "[":
        # ``Base[T]`` is embedded; ``Items []T`` and ``Buf [4]byte`` are named.
        third = tokens[2] if len(tokens) > 2 else None
        if third is None or third.value == "]" or third.kind == NUMBER:
            return False
        return _skip_balanced(tokens, 1) >= len(tokens)
    return False


def _receiver_type(tokens: list[Token]) -> Optional[str]:
    """Return the type name from receiver tokens such as ``c *Controller``."""
    names = []
    for tok in tokens:
        if tok.value == "[":
            break
        if tok.kind == IDENT:
            names.append(tok.value)
    return names[-1] if names else None


def _doc_groups(comments: list[Comment]) -> dict[int, list[str]]:
    """Group own-line comments with no blank line between them, keyed by end line."""
    groups: dict[int, list[str]] = {}
    lines: list[str] = []
    end = -2
    for comment in comments:
        if not comment.own_line:
            continue
        if comment.line != end + 1:
            lines = []
        lines = lines + comment.lines()
        end = comment.end_line
        groups[end] = lines
    return groups
