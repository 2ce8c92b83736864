"""Declarations the scanner extracts from one Go package.

These records are the whole interface between the source layer and the
rest of swagnote: the type engine only ever sees :class:`TypeDecl`, the
annotation parser only :class:`FuncDecl`, and the import graph only
:class:`ImportDecl`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from swagnote.source.typeexpr import FieldDecl, StructType, TypeExpr


@dataclass
class ImportDecl:
    """An import spec. ``alias`` is ``None`` when no explicit name is given."""

    path: str
    alias: Optional[str] = None

    @property
    def local_name(self) -> Optional[str]:
        """The name the importing file refers to the package by.

        Explicit aliases win; blank (``_``) and dot imports have no usable
        name and fall back to the last path segment.
        """
        if self.alias and self.alias not in ("_", "."):
            return self.alias
        return self.path.rstrip("/").split("/")[-1]


@dataclass
class TypeDecl:
    """A ``type Name <underlying>`` declaration."""

    name: str
    underlying: TypeExpr
    file: str = ""
    line: int = 0

    @property
    def is_struct(self) -> bool:
        return isinstance(self.underlying, StructType)

    @property
    def fields(self) -> tuple[FieldDecl, ...]:
        if isinstance(self.underlying, StructType):
            return self.underlying.fields
        return ()


@dataclass
class FuncDecl:
    """A function or method declaration with the comment lines above it.

    ``receiver`` is the receiver's type name with any pointer stripped, or
    ``None`` for a plain function.
    """

    name: str
    doc: list[str] = field(default_factory=list)
    receiver: Optional[str] = None
    file: str = ""
    line: int = 0


@dataclass
class SourceFile:
    """Everything the scanner keeps from one ``.go`` file."""

    path: str
    package: str = ""
    imports: list[ImportDecl] = field(default_factory=list)
    types: list[TypeDecl] = field(default_factory=list)
    functions: list[FuncDecl] = field(default_factory=list)
    comments: list[str] = field(default_factory=list)


@dataclass
class PackageDecls:
    """The merged declarations of every file of one package, in source order."""

    name: str = ""
    files: list[SourceFile] = field(default_factory=list)

    @property
    def imports(self) -> list[ImportDecl]:
        return [imp for f in self.files for imp in f.imports]

    @property
    def functions(self) -> list[FuncDecl]:
        return [fn for f in self.files for fn in f.functions]

    @property
    def types(self) -> dict[str, TypeDecl]:
        return {decl.name: decl for f in self.files for decl in f.types}

    def type(self, name: str) -> Optional[TypeDecl]:
        for f in self.files:
            for decl in f.types:
                if decl.name == name:
                    return decl
        return None
