"""Grammar of the ``@tag`` comment annotations.

A comment line is either empty, free text (ignored), or a case-insensitive
``@tag`` followed by tag-specific content. The content is split by
:func:`tokenize` into words, quoted strings, ``[bracketed]`` and
``{braced}`` tokens, and one rule per tag turns those tokens into a clause
record. Rules either return a clause or raise
:class:`~swagnote.exceptions.AnnotationSyntaxError`; they never touch the
document. Applying clauses is the job of
:class:`~swagnote.annotations.operation.OperationParser` and
:class:`~swagnote.annotations.general.GeneralInfoParser`.

Operation tags::

    @router      /pets/{id} [get]
    @resource    pets "Everything about your pets"
    @title       Find pet by id
    @description Returns a single pet
    @success     200 {object} models.Pet "the pet"
    @failure     404 {object} models.Error "not found"
    @param       id path int true "pet id"
    @accept      json,xml
    @produce     json
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Optional, Union

from swagnote.exceptions import AnnotationSyntaxError
from swagnote.models import HTTPMethod

WORD = "word"
QUOTED = "quoted"
BRACKET = "bracket"
BRACE = "brace"

_TOKEN_RE = re.compile(r'"(?P<quoted>[^"]*)"|(?P<unterminated>"[^"]*$)|(?P<word>[^\s"]+)')

_TAG_RE = re.compile(r"^(@\w+)(?:\s+(.*))?$", re.DOTALL)

PARAM_LOCATIONS = {
    "path": "path",
    "query": "query",
    "body": "body",
    "header": "header",
    "form": "formData",
    "formdata": "formData",
}

MEDIA_TYPES = {
    "json": "application/json",
    "xml": "text/xml",
    "plain": "text/plain",
    "html": "text/html",
    "mpfd": "multipart/form-data",
}

_MEDIA_TYPE_RE = re.compile(r"^[\w.+-]+/[\w.+-]+$")


@dataclass(frozen=True)
class Token:
    kind: str
    value: str


def tokenize(content: str) -> list[Token]:
    """Split tag content into tokens.

    Raises:
        AnnotationSyntaxError: On an unterminated quoted string.
    """
    tokens: list[Token] = []
    for match in _TOKEN_RE.finditer(content):
        if match.group("unterminated") is not None:
            raise AnnotationSyntaxError(f"Unterminated quoted string in {content!r}")
        if match.group("quoted") is not None:
            tokens.append(Token(QUOTED, match.group("quoted")))
            continue
        word = match.group("word")
        if len(word) >= 2 and word.startswith("[") and word.endswith("]"):
            tokens.append(Token(BRACKET, word[1:-1]))
        elif len(word) >= 2 and word.startswith("{") and word.endswith("}"):
            tokens.append(Token(BRACE, word[1:-1]))
        else:
            tokens.append(Token(WORD, word))
    return tokens


def split_tag(line: str) -> Optional[tuple[str, str]]:
    """Return ``(tag, content)`` for an annotation line, ``None`` for anything else.

    The tag comes back lowercased and with its ``@``; comment markers and
    surrounding whitespace are stripped.
    """
    text = line.strip()
    if text.startswith("//"):
        text = text[2:].strip()
    match = _TAG_RE.match(text)
    if match is None:
        return None
    return match.group(1).lower(), (match.group(2) or "").strip()


# --- Clause records ---


@dataclass(frozen=True)
class RouterClause:
    path: str
    method: HTTPMethod


@dataclass(frozen=True)
class ResourceClause:
    name: str
    description: Optional[str] = None


@dataclass(frozen=True)
class TextClause:
    """``@title`` or ``@description`` free text."""

    tag: str
    text: str


@dataclass(frozen=True)
class ResponseClause:
    code: str
    kind: Optional[str]
    type_name: str
    description: str = ""


@dataclass(frozen=True)
class ParamClause:
    name: str
    location: str
    type_name: str
    required: bool
    description: Optional[str] = None


@dataclass(frozen=True)
class MediaClause:
    """``@accept``/``@consume`` (``tag == "@accept"``) or ``@produce``."""

    tag: str
    media_types: tuple[str, ...]


Clause = Union[RouterClause, ResourceClause, TextClause, ResponseClause, ParamClause, MediaClause]


# --- Rules ---


def _description(tokens: list[Token]) -> Optional[str]:
    """Prefer the first quoted token; fall back to the remaining words."""
    for tok in tokens:
        if tok.kind == QUOTED:
            return tok.value
    words = " ".join(tok.value for tok in tokens)
    return words or None


def parse_router(content: str) -> RouterClause:
    tokens = tokenize(content)
    if not tokens or tokens[0].kind != WORD:
        raise AnnotationSyntaxError(f"Can not parse router comment {content!r}: missing path")
    methods = [tok.value for tok in tokens[1:] if tok.kind == BRACKET]
    if not methods:
        raise AnnotationSyntaxError(f"Can not parse router comment {content!r}: missing [method]")
    try:
        method = HTTPMethod(methods[-1].strip().lower())
    except ValueError:
        raise AnnotationSyntaxError(
            f"Can not parse router comment {content!r}: unknown method {methods[-1]!r}"
        ) from None
    return RouterClause(path=tokens[0].value, method=method)


def parse_resource(content: str) -> ResourceClause:
    tokens = tokenize(content)
    if not tokens or tokens[0].kind == QUOTED:
        return ResourceClause(name="others", description=_description(tokens))
    description = next((tok.value for tok in tokens[1:] if tok.kind == QUOTED), None)
    return ResourceClause(name=tokens[0].value, description=description or None)


def parse_response(content: str) -> ResponseClause:
    tokens = tokenize(content)
    if len(tokens) < 2:
        raise AnnotationSyntaxError(f"Can not parse response comment {content!r}")
    code = tokens[0].value.lower()
    if tokens[0].kind != WORD or not (code.isdigit() or code == "default"):
        raise AnnotationSyntaxError(
            f"Can not parse response comment {content!r}: code must be a number or default"
        )
    pos = 1
    kind: Optional[str] = None
    if tokens[pos].kind == BRACE:
        kind = tokens[pos].value.strip().lower() or None
        pos += 1
    if pos >= len(tokens) or tokens[pos].kind != WORD:
        raise AnnotationSyntaxError(f"Can not parse response comment {content!r}: missing type")
    return ResponseClause(
        code=code,
        kind=kind,
        type_name=tokens[pos].value,
        description=_description(tokens[pos + 1 :]) or "",
    )


def parse_param(content: str) -> ParamClause:
    tokens = tokenize(content)
    if len(tokens) < 4 or any(tok.kind != WORD for tok in tokens[:4]):
        raise AnnotationSyntaxError(
            f"Can not parse param comment {content!r}: expected name, location, type and required"
        )
    name, location, type_name, required = (tok.value for tok in tokens[:4])
    in_ = PARAM_LOCATIONS.get(location.lower())
    if in_ is None:
        raise AnnotationSyntaxError(
            f"Can not parse param comment {content!r}: unknown location {location!r}"
        )
    return ParamClause(
        name=name,
        location=in_,
        type_name=type_name,
        required=required.lower() in ("true", "required"),
        description=_description(tokens[4:]),
    )


def parse_media(tag: str, content: str) -> MediaClause:
    found: list[str] = []
    for raw in content.split(","):
        token = raw.strip()
        media_type = MEDIA_TYPES.get(token.lower())
        if media_type is None and _MEDIA_TYPE_RE.match(token):
            media_type = token.lower()
        if media_type is not None and media_type not in found:
            found.append(media_type)
    return MediaClause(tag="@produce" if tag == "@produce" else "@accept", media_types=tuple(found))


_RULES: dict[str, Callable[[str, str], Clause]] = {
    "@router": lambda tag, content: parse_router(content),
    "@resource": lambda tag, content: parse_resource(content),
    "@title": TextClause,
    "@description": TextClause,
    "@success": lambda tag, content: parse_response(content),
    "@failure": lambda tag, content: parse_response(content),
    "@param": lambda tag, content: parse_param(content),
    "@accept": parse_media,
    "@consume": parse_media,
    "@produce": parse_media,
}


def parse_line(line: str) -> Optional[Clause]:
    """Parse one operation comment line.

    Returns:
        The clause, or ``None`` for empty lines, free text and unknown tags.

    Raises:
        AnnotationSyntaxError: If a known tag's content does not fit its grammar.
    """
    split = split_tag(line)
    if split is None:
        return None
    tag, content = split
    rule = _RULES.get(tag)
    if rule is None:
        return None
    return rule(tag, content)
