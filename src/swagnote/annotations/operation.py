"""Turn the doc comment of a controller method into an operation.

:class:`OperationParser` walks the comment lines of one
:class:`~swagnote.source.model.FuncDecl` in written order, parses each with
:func:`~swagnote.annotations.grammar.parse_line` and applies the clause to
a fresh :class:`~swagnote.models.OperationObject`. Type names found in
``@param``, ``@success`` and ``@failure`` go through the
:class:`~swagnote.schema.resolver.TypeResolver`, which may add definitions.
``@resource`` adds to the tag catalogue.

Once every line is parsed, the operation is attached at each ``@router``
path and method. A line that fails is reported as a diagnostic and skipped;
the rest of the declaration is still documented.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from swagnote.annotations.grammar import (
    Clause,
    MediaClause,
    ParamClause,
    ResourceClause,
    ResponseClause,
    RouterClause,
    TextClause,
    parse_line,
)
from swagnote.document import DocumentAssembler
from swagnote.exceptions import AnnotationSyntaxError, ResolutionError
from swagnote.models import (
    Diagnostic,
    ItemsObject,
    OperationObject,
    ParameterObject,
    ResponseObject,
    SchemaObject,
    Severity,
    definition_ref,
)
from swagnote.schema.primitives import UNDEFINED, wire_type
from swagnote.schema.resolver import TypeResolver
from swagnote.source.model import FuncDecl

logger = logging.getLogger(__name__)


@dataclass
class ParsedOperation:
    """An operation and the routes it was declared for."""

    operation: OperationObject
    routes: list[RouterClause] = field(default_factory=list)


class OperationParser:
    """Parse controller doc comments and fold the results into the document.

    Args:
        resolver: Resolves type names used by ``@param`` and responses.
        document: Receives tags and the finished operations.
    """

    def __init__(self, resolver: TypeResolver, document: DocumentAssembler) -> None:
        self.resolver = resolver
        self.document = document
        self.diagnostics: list[Diagnostic] = []

    def parse_declaration(self, func: FuncDecl, package_id: str) -> ParsedOperation:
        """Parse the doc comment of *func* and attach the operation at its routes."""
        parsed = self.parse_lines(func.doc, package_id, declaration=func.name)
        for route in parsed.routes:
            self.document.attach(route.path, route.method, parsed.operation)
        return parsed

    def parse_lines(
        self, lines: list[str], package_id: str, declaration: Optional[str] = None
    ) -> ParsedOperation:
        """Parse comment *lines* without attaching anything to the path table."""
        parsed = ParsedOperation(operation=OperationObject(package=package_id))
        for line in lines:
            try:
                clause = parse_line(line)
                if clause is not None:
                    self._apply(clause, parsed, package_id)
            except AnnotationSyntaxError as exc:
                self._report(Severity.WARNING, str(exc), package_id, declaration, line)
            except ResolutionError as exc:
                self._report(Severity.ERROR, str(exc), package_id, declaration, line)
        return parsed

    def _apply(self, clause: Clause, parsed: ParsedOperation, package_id: str) -> None:
        operation = parsed.operation
        if isinstance(clause, RouterClause):
            parsed.routes.append(clause)
        elif isinstance(clause, ResourceClause):
            self.document.add_tag(clause.name, clause.description)
            if clause.name not in operation.tags:
                operation.tags.append(clause.name)
        elif isinstance(clause, TextClause):
            if clause.tag == "@title":
                operation.summary = clause.text
            else:
                operation.description = clause.text
        elif isinstance(clause, ResponseClause):
            operation.responses[clause.code] = self._response(clause, package_id)
        elif isinstance(clause, ParamClause):
            operation.parameters.append(self._parameter(clause, package_id))
        elif isinstance(clause, MediaClause):
            target = operation.produces if clause.tag == "@produce" else operation.consumes
            for media_type in clause.media_types:
                if media_type not in target:
                    target.append(media_type)

    def _response(self, clause: ResponseClause, package_id: str) -> ResponseObject:
        registered = self.resolver.register_type(clause.type_name, package_id)
        schema = SchemaObject()
        wire = wire_type(registered)
        if clause.kind == "array" and clause.code == "200":
            schema.type = "array"
            schema.items = self._items(registered)
        elif self.document.has_definition(registered):
            schema.ref = definition_ref(registered)
        elif wire is not None:
            schema.type = wire.type
            schema.format = wire.format
        else:
            schema.type = clause.kind or "object"
        return ResponseObject(description=clause.description, schema_=schema)

    def _items(self, registered: str) -> ItemsObject:
        if self.document.has_definition(registered):
            return ItemsObject(ref=definition_ref(registered))
        wire = wire_type(registered)
        if wire is not None:
            return ItemsObject(type=wire.type, format=wire.format)
        return ItemsObject(type="object")

    def _parameter(self, clause: ParamClause, package_id: str) -> ParameterObject:
        registered = self.resolver.register_type(clause.type_name, package_id)
        param = ParameterObject(
            name=clause.name,
            in_=clause.location,
            required=clause.required,
            description=clause.description,
        )
        wire = wire_type(registered)
        is_definition = self.document.has_definition(registered)
        if clause.location == "body":
            if is_definition:
                param.schema_ = SchemaObject(ref=definition_ref(registered))
            elif wire is not None:
                param.schema_ = SchemaObject(type=wire.type, format=wire.format)
            else:
                param.schema_ = SchemaObject(type="object")
        elif wire is not None:
            param.type = wire.type
            param.format = wire.format
        elif is_definition:
            param.schema_ = SchemaObject(ref=definition_ref(registered))
        elif registered != UNDEFINED:
            param.type = registered
        return param

    def _report(
        self,
        severity: Severity,
        message: str,
        package_id: str,
        declaration: Optional[str],
        line: str,
    ) -> None:
        logger.info(
            "Can not parse comment for function: %s, package: %s, got error: %s",
            declaration, package_id, message,
        )
        self.diagnostics.append(
            Diagnostic(
                severity=severity,
                message=message,
                package=package_id,
                declaration=declaration,
                line=line.strip(),
            )
        )
