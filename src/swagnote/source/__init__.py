"""Go source model: tokenizer, type expressions, declaration scanner and providers."""

from swagnote.source.model import FuncDecl, ImportDecl, PackageDecls, SourceFile, TypeDecl
from swagnote.source.provider import FileSystemProvider, InMemoryProvider, SourceModelProvider
from swagnote.source.scanner import GoSourceScanner

__all__ = [
    "FileSystemProvider",
    "FuncDecl",
    "GoSourceScanner",
    "ImportDecl",
    "InMemoryProvider",
    "PackageDecls",
    "SourceFile",
    "SourceModelProvider",
    "TypeDecl",
]
