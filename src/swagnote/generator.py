"""Orchestrate one documentation run.

:class:`Generator` wires the run-scoped collaborators together -- package
cache, import graph, type resolver, annotation parsers and document
assembler -- then:

1. applies the document-level annotations of the main API file;
2. expands the configured API packages into their sub-packages;
3. parses the doc comment of every controller declaration, in source order.

Everything the run creates lives on the generator and is thrown away with
it, so two runs never share state.

Example::

    config = GeneratorConfig(api_packages=["github.com/acme/api/controllers"],
                             search_roots=[os.environ["GOPATH"]])
    result = Generator(config).run()
    print(result.document.to_dict()["paths"].keys())
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from swagnote.annotations import GeneralInfoParser, OperationParser
from swagnote.document import DocumentAssembler
from swagnote.exceptions import ConfigError, EnvironmentError_, ResolutionError
from swagnote.models import (
    Diagnostic,
    GenerationResult,
    GeneratorConfig,
    Severity,
    SwaggerDocument,
)
from swagnote.packages import ImportGraph, PackageCache
from swagnote.schema import TypeResolver
from swagnote.source import FileSystemProvider, FuncDecl, SourceModelProvider

logger = logging.getLogger(__name__)


class Generator:
    """Build a Swagger document from annotated Go packages.

    Args:
        config: Run settings.
        provider: Source model provider. Defaults to a
            :class:`~swagnote.source.FileSystemProvider` built from *config*.

    Raises:
        ConfigError: If ``controller_class`` or ``ignore`` is not a valid
            regular expression.
        EnvironmentError_: If the default provider cannot be built.
    """

    def __init__(self, config: GeneratorConfig, provider: Optional[SourceModelProvider] = None):
        self.config = config
        try:
            self._controller_re = (
                re.compile(config.controller_class) if config.controller_class else None
            )
        except re.error as exc:
            raise ConfigError(
                f"The controller class option is not a valid regular expression: {exc}"
            ) from exc

        if provider is None:
            provider = FileSystemProvider(
                search_roots=config.search_roots,
                goroot=config.goroot,
                module_root=config.module_root,
                vendor_dir=config.vendor_dir,
                exclude=config.exclude,
            )
        self.provider = provider

        self.document = SwaggerDocument()
        self.assembler = DocumentAssembler(self.document)
        self.cache = PackageCache(provider)
        self.imports = ImportGraph(self.cache, config.ignore)
        self.resolver = TypeResolver(
            self.cache, self.imports, self.assembler, config.marshal_types
        )
        self.operations = OperationParser(self.resolver, self.assembler)
        self.diagnostics: list[Diagnostic] = []

    def is_controller(self, func: FuncDecl) -> bool:
        """Return True if *func* should be searched for operation annotations.

        With no ``controller_class`` configured every declaration qualifies;
        otherwise only methods whose receiver type name matches it.
        """
        if self._controller_re is None:
            return True
        return func.receiver is not None and bool(self._controller_re.search(func.receiver))

    def run(self) -> GenerationResult:
        """Run the whole pipeline and return the document with its diagnostics.

        Raises:
            EnvironmentError_: If the main API file cannot be read.
        """
        if self.config.main_api_file:
            self.parse_general_info(self.config.main_api_file)

        for package_id in self.config.api_packages:
            if self.cache.resolve(package_id) is None:
                self._report(f"Can not find package {package_id}", package_id)

        for package_id in self.cache.scan_packages(self.config.api_packages):
            self.parse_api_description(package_id)

        diagnostics = [*self.diagnostics, *self.resolver.diagnostics, *self.operations.diagnostics]
        logger.info(
            "Documented %d paths and %d definitions with %d diagnostics",
            len(self.document.paths), len(self.document.definitions), len(diagnostics),
        )
        return GenerationResult(document=self.document, diagnostics=diagnostics)

    def parse_general_info(self, path: str) -> None:
        try:
            lines = self.provider.file_comments(path)
        except OSError as exc:
            raise EnvironmentError_(f"Can not read main API file {path}: {exc}") from exc
        GeneralInfoParser(self.document).parse_lines(lines)

    def parse_api_description(self, package_id: str) -> None:
        """Document every controller declaration of one package."""
        try:
            decls = self.cache.declarations(package_id)
        except ResolutionError as exc:
            self._report(str(exc), package_id)
            return
        logger.debug("Parsing %d declarations of %s", len(decls.functions), package_id)
        for func in decls.functions:
            if self.is_controller(func):
                self.operations.parse_declaration(func, package_id)

    def _report(self, message: str, package_id: str) -> None:
        self.diagnostics.append(
            Diagnostic(severity=Severity.ERROR, message=message, package=package_id)
        )
