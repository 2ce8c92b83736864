"""Annotation protocol: grammar of ``@tag`` comment lines and the parsers applying them."""

from swagnote.annotations.general import GeneralInfoParser
from swagnote.annotations.grammar import parse_line, split_tag, tokenize
from swagnote.annotations.operation import OperationParser, ParsedOperation

__all__ = [
    "GeneralInfoParser",
    "OperationParser",
    "ParsedOperation",
    "parse_line",
    "split_tag",
    "tokenize",
]
