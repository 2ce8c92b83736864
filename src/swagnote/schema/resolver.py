"""Resolve Go type names into Swagger ``definitions`` entries.

:class:`TypeResolver` is the engine behind every type mentioned in an
annotation. Given a name and the package it was written in, it either
returns a primitive name (documented inline from
:mod:`swagnote.schema.primitives`) or locates the declaration, builds a
:class:`~swagnote.models.SchemaObject` for it and every named type it
reaches, merges them into the document's definitions and returns the
canonical id.

Recursion is guarded by a per-call *resolving* set keyed by canonical id:
meeting a type that is already being resolved yields a ``$ref`` to it
without descending again, so self-referential and mutually recursive
types terminate. Finished nodes are memoised for the whole run. Embedded
structs are flattened under a separate guard, so a type being resolved
higher up is still copied into the struct that embeds it.

Failures inside a nested field drop that one property and are recorded as
warning diagnostics. A failure on the name passed to
:meth:`TypeResolver.register_type` itself propagates as
:class:`~swagnote.exceptions.ResolutionError`.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Union

from swagnote.exceptions import ResolutionError, TypeResolutionError
from swagnote.models import (
    DEFAULT_MARSHAL_TYPES,
    DEFINITIONS_PREFIX,
    Diagnostic,
    ItemsObject,
    PropertyObject,
    SchemaObject,
    Severity,
    definition_ref,
)
from swagnote.packages import ImportGraph, PackageCache
from swagnote.schema.primitives import INTERFACE, UNDEFINED, is_primitive, wire_type
from swagnote.source.model import TypeDecl
from swagnote.source.typeexpr import (
    ArrayOf,
    FieldDecl,
    Ident,
    MapOf,
    Primitive,
    Qualified,
    StructType,
    TypeExpr,
    Unsupported,
    Wildcard,
    element_type,
    type_name,
)

if TYPE_CHECKING:
    from swagnote.document import DocumentAssembler

logger = logging.getLogger(__name__)

_TAG_RE = re.compile(r'([^\s:"]+):"((?:[^"\\]|\\.)*)"')


@dataclass
class FieldTag:
    """What a struct tag says about how a field is documented."""

    name: Optional[str] = None
    required: bool = False
    description: Optional[str] = None
    excluded: bool = False


def parse_struct_tag(tag: Optional[str]) -> FieldTag:
    """Read the ``json`` (or ``thrift``), ``required`` and ``description`` keys of a struct tag.

    Example::

        >>> parse_struct_tag('json:"pet_id,required" description:"Unique id"')
        FieldTag(name='pet_id', required=True, description='Unique id', excluded=False)
    """
    values: dict[str, str] = {}
    for key, value in _TAG_RE.findall(tag or ""):
        values.setdefault(key, value)

    result = FieldTag()
    text = values.get("json") or values.get("thrift") or ""
    parts = text.split(",")
    if text == "-":
        result.excluded = True
        return result
    if parts[0]:
        result.name = parts[0]
    result.required = "required" in parts[1:] or bool(values.get("required"))
    result.description = values.get("description") or None
    return result


def canonical_id(package_id: str, name: str) -> str:
    """Join a package path and a local type name into a definitions key."""
    return ".".join([*package_id.split("/"), name])


class TypeResolver:
    """Turn type names into primitives or definitions entries.

    Args:
        cache: The run's package cache.
        imports: The run's import graph.
        document: Receives every finished node through
            :meth:`~swagnote.document.DocumentAssembler.merge_definition`.
        marshal_types: Type names that marshal themselves, mapped to the
            primitive they serialise as.
    """

    def __init__(
        self,
        cache: PackageCache,
        imports: ImportGraph,
        document: DocumentAssembler,
        marshal_types: Optional[dict[str, str]] = None,
    ) -> None:
        self.cache = cache
        self.imports = imports
        self.document = document
        self.marshal_types = dict(DEFAULT_MARSHAL_TYPES if marshal_types is None else marshal_types)
        self.translations: dict[str, str] = {}
        self.diagnostics: list[Diagnostic] = []
        self._completed: dict[str, SchemaObject] = {}
        self._produced: list[str] = []

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    def register_type(self, name: str, current_package: str) -> str:
        """Resolve *name* as written in *current_package*.

        Leading ``*`` and ``[]`` are ignored: callers decide themselves
        whether a reference is to an array.

        Returns:
            A primitive name (``"int64"``, ``"Time"``, ``"interface"`` ...)
            or the canonical id of the definitions entry.

        Raises:
            ResolutionError: If the type or its package cannot be found.
        """
        name = _strip_modifiers(name)
        if name in self.marshal_types:
            return self.marshal_types[name]
        if is_primitive(name):
            return name

        self._produced = []
        result = self._resolve_named(name, current_package, set())
        self._drop_dangling_refs(current_package)
        return result

    # ------------------------------------------------------------------ #
    # Declarations
    # ------------------------------------------------------------------ #

    def _find(self, name: str, current_package: str) -> tuple[TypeDecl, str]:
        """Locate the declaration of *name* and the package id that declares it."""
        if "." not in name:
            decl = self.cache.declarations(current_package).type(name)
            if decl is None:
                raise TypeResolutionError(
                    f"Can not find definition of {name} model. Current package {current_package}"
                )
            return decl, current_package

        qualifier, local = name.rsplit(".", 1)

        # First assume the qualifier is an absolute package path.
        for package_id in dict.fromkeys([qualifier, qualifier.replace(".", "/")]):
            if self.cache.resolve(package_id, report=False) is None:
                continue
            decl = self.cache.declarations(package_id).type(local)
            if decl is not None:
                return decl, package_id

        candidates = self.imports.candidates(current_package, qualifier)
        if not candidates:
            raise TypeResolutionError(
                f"Package {qualifier} is not imported to {current_package}"
            )
        for package_id in candidates:
            if self.cache.resolve(package_id) is None:
                continue
            decl = self.cache.declarations(package_id).type(local)
            if decl is not None:
                return decl, package_id
        raise TypeResolutionError(
            f"Can not find definition of {local} model in package {', '.join(candidates)}"
        )

    def _resolve_named(self, name: str, current_package: str, resolving: set[str]) -> str:
        decl, package_id = self._find(name, current_package)
        cid = canonical_id(package_id, decl.name)

        if cid in self.translations:
            return self.translations[cid]
        if cid in self._completed:
            self._merge(cid, self._completed[cid])
            return cid
        if cid in resolving:
            return cid

        underlying = decl.underlying
        resolving.add(cid)
        try:
            if isinstance(underlying, StructType):
                schema = SchemaObject(type="object")
                self._collect_fields(underlying.fields, package_id, schema, resolving, cid, {cid})
            elif isinstance(underlying, (ArrayOf, MapOf)):
                items = self._items_for(element_type(underlying), package_id, resolving)
                if items is None:
                    self.translations[cid] = UNDEFINED
                    return UNDEFINED
                schema = SchemaObject(type="array", items=items)
            else:
                # A definition over another named type documents as that type.
                target = self._resolve_expr(underlying, package_id, resolving)
                self.translations[cid] = target
                logger.debug("Type %s translates to %s", cid, target)
                return target
        finally:
            resolving.discard(cid)

        self._completed[cid] = schema
        self._merge(cid, schema)
        return cid

    def _merge(self, cid: str, schema: SchemaObject) -> None:
        self.document.merge_definition(cid, schema)
        if cid not in self._produced:
            self._produced.append(cid)

    # ------------------------------------------------------------------ #
    # Struct fields
    # ------------------------------------------------------------------ #

    def _collect_fields(
        self,
        fields: tuple[FieldDecl, ...],
        package_id: str,
        schema: SchemaObject,
        resolving: set[str],
        owner: str,
        flattening: set[str],
    ) -> None:
        for field in fields:
            tag = parse_struct_tag(field.tag)
            if tag.excluded:
                continue

            names = field.names
            if field.embedded:
                if tag.name is None:
                    self._flatten(field, package_id, schema, resolving, owner, flattening)
                    continue
                # A tagged embedded field is serialised as a named one.
                written = type_name(field.type) or ""
                names = (written.rsplit(".", 1)[-1],)

            for go_name in names:
                name = tag.name or go_name
                try:
                    prop = self._property_for_expr(field.type, package_id, resolving)
                except ResolutionError as exc:
                    self._warn(f"Field {go_name} dropped: {exc}", package_id, owner)
                    continue
                if prop is None:
                    logger.debug("Field %s of %s has an undocumentable type", go_name, owner)
                    continue
                description = tag.description or field.comment
                if description:
                    prop.description = description
                schema.properties[name] = prop
                if tag.required and name not in schema.required:
                    schema.required.append(name)

    def _flatten(
        self,
        field: FieldDecl,
        package_id: str,
        schema: SchemaObject,
        resolving: set[str],
        owner: str,
        flattening: set[str],
    ) -> None:
        """Copy the fields of an embedded struct into *schema*.

        *flattening* holds the structs already being copied into *owner*, so
        a type embedding itself stops there. The embedded type is not marked
        as resolving: a field naming it still gets its own definition.
        """
        written = type_name(field.type)
        if written is None or isinstance(field.type, Primitive):
            return
        try:
            decl, embedded_package = self._find(written, package_id)
        except ResolutionError as exc:
            self._warn(f"Embedded type {written} dropped: {exc}", package_id, owner)
            return
        cid = canonical_id(embedded_package, decl.name)
        if cid in flattening or not isinstance(decl.underlying, StructType):
            return
        flattening.add(cid)
        try:
            self._collect_fields(
                decl.fields, embedded_package, schema, resolving, owner, flattening
            )
        finally:
            flattening.discard(cid)

    def _property_for_expr(
        self, expr: TypeExpr, package_id: str, resolving: set[str]
    ) -> Optional[PropertyObject]:
        if isinstance(expr, (ArrayOf, MapOf)):
            items = self._items_for(element_type(expr), package_id, resolving)
            if items is None:
                return None
            return PropertyObject(type="array", items=items)
        if isinstance(expr, StructType):
            return PropertyObject(type="object")
        return _property_from(self._resolve_expr(expr, package_id, resolving))

    def _items_for(
        self, expr: TypeExpr, package_id: str, resolving: set[str]
    ) -> Optional[ItemsObject]:
        if isinstance(expr, StructType):
            return ItemsObject(type="object")
        target = self._resolve_expr(expr, package_id, resolving)
        if target == UNDEFINED:
            return None
        wire = wire_type(target)
        if wire is not None:
            return ItemsObject(type=wire.type, format=wire.format)
        return ItemsObject(ref=definition_ref(target))

    def _resolve_expr(self, expr: TypeExpr, package_id: str, resolving: set[str]) -> str:
        """Return the primitive name or canonical id a non-composite type expression stands for."""
        if isinstance(expr, Primitive):
            return expr.name
        if isinstance(expr, Wildcard):
            return INTERFACE
        if isinstance(expr, Unsupported):
            return UNDEFINED
        if isinstance(expr, (Ident, Qualified)):
            if expr.name in self.marshal_types:
                return self.marshal_types[expr.name]
            return self._resolve_named(type_name(expr) or expr.name, package_id, resolving)
        if isinstance(expr, (ArrayOf, MapOf)):
            return self._resolve_expr(element_type(expr), package_id, resolving)
        return INTERFACE

    # ------------------------------------------------------------------ #
    # Diagnostics
    # ------------------------------------------------------------------ #

    def _drop_dangling_refs(self, package_id: str) -> None:
        """Settle the ``$ref`` pointers of the nodes produced by one registration.

        A reference taken to a type while it was still resolving may name a
        type that turned out to be a translation; it is pointed at the
        translation target. A property still pointing at no definitions
        entry afterwards is removed.
        """
        definitions = self.document.definitions
        for cid in self._produced:
            schema = definitions.get(cid)
            if schema is None:
                continue
            for name, prop in list(schema.properties.items()):
                documented = self._retarget(prop) and (
                    prop.items is None or self._retarget(prop.items)
                )
                missing = [
                    ref for ref in prop.refs()
                    if ref[len(DEFINITIONS_PREFIX):] not in definitions
                ]
                if documented and not missing:
                    continue
                del schema.properties[name]
                if name in schema.required:
                    schema.required.remove(name)
                reason = f"{missing[0]} was never defined" if missing else "its type is undefined"
                self._warn(f"Property {name} dropped: {reason}", package_id, cid)
        self._produced = []

    def _retarget(self, node: Union[PropertyObject, ItemsObject]) -> bool:
        """Follow a translated ``$ref`` to what the type documents as.

        Returns ``False`` when the translation leads to an undocumentable type.
        """
        if not node.ref:
            return True
        target = self.translations.get(node.ref[len(DEFINITIONS_PREFIX):])
        if target is None:
            return True
        if target == UNDEFINED:
            return False
        wire = wire_type(target)
        if wire is None:
            node.ref = definition_ref(target)
        else:
            node.ref = None
            node.type, node.format = wire.type, wire.format
        return True

    def _warn(self, message: str, package_id: str, declaration: str) -> None:
        logger.info("%s: %s", declaration, message)
        self.diagnostics.append(
            Diagnostic(
                severity=Severity.WARNING,
                message=message,
                package=package_id,
                declaration=declaration,
            )
        )


def _strip_modifiers(name: str) -> str:
    name = name.strip()
    while name.startswith(("*", "[]")):
        name = name[1:] if name.startswith("*") else name[2:]
    return name


def _property_from(registered: str) -> Optional[PropertyObject]:
    if registered == UNDEFINED:
        return None
    wire = wire_type(registered)
    if wire is not None:
        return PropertyObject(type=wire.type, format=wire.format)
    return PropertyObject(ref=definition_ref(registered))
