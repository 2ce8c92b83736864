"""Assemble the Swagger document: path table, tag catalogue and definitions.

The assembler is the only writer of the :class:`~swagnote.models.SwaggerDocument`
during a run. Its folding rules keep the output deterministic:

* a path item is created the first time its path is seen;
* a method slot is filled only while empty, so the first operation
  declared for a ``(path, method)`` pair wins;
* tags are unique by name, and a later description only fills an empty one;
* definitions merge additively: new properties are added, existing ones are
  replaced by the later resolution, ``required`` names accumulate.
"""

from __future__ import annotations

import logging
from typing import Optional

from swagnote.models import (
    HTTPMethod,
    OperationObject,
    PathItemObject,
    SchemaObject,
    SwaggerDocument,
    TagObject,
)

logger = logging.getLogger(__name__)


class DocumentAssembler:
    """Collect operations, tags and definitions into one document."""

    def __init__(self, document: Optional[SwaggerDocument] = None) -> None:
        self.document = document or SwaggerDocument()

    @property
    def definitions(self) -> dict[str, SchemaObject]:
        return self.document.definitions

    def attach(self, path: str, method: HTTPMethod, operation: OperationObject) -> bool:
        """Place *operation* at ``paths[path][method]`` unless the slot is taken.

        Returns:
            ``True`` if the operation was placed, ``False`` if an earlier
            operation already holds the slot.
        """
        item = self.document.paths.get(path)
        if item is None:
            item = PathItemObject()
            self.document.paths[path] = item
        if item.operation(method) is not None:
            logger.info("Operation %s %s already documented, keeping the first", method.value.upper(), path)
            return False
        setattr(item, method.value, operation)
        return True

    def add_tag(self, name: str, description: Optional[str] = None) -> None:
        for tag in self.document.tags:
            if tag.name == name:
                if description and not tag.description:
                    tag.description = description
                return
        self.document.tags.append(TagObject(name=name, description=description or None))

    def has_definition(self, canonical_id: str) -> bool:
        return canonical_id in self.document.definitions

    def merge_definition(self, canonical_id: str, schema: SchemaObject) -> None:
        """Merge *schema* into the definitions entry *canonical_id*."""
        existing = self.document.definitions.get(canonical_id)
        if existing is None:
            self.document.definitions[canonical_id] = schema.model_copy(deep=True)
            return
        for name, prop in schema.properties.items():
            existing.properties[name] = prop.model_copy(deep=True)
        for name in schema.required:
            if name not in existing.required:
                existing.required.append(name)
        if existing.type is None:
            existing.type = schema.type
        if existing.items is None and schema.items is not None:
            existing.items = schema.items.model_copy(deep=True)
