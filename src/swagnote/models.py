"""Canonical Pydantic models shared across all swagnote modules.

The models fall into three groups:

**Document models** -- the Swagger 2.0 output, serialised with
``by_alias=True`` so that ``$ref``, ``in``, ``schema``, ``basePath`` and
``termsOfService`` appear verbatim:
    :class:`SwaggerDocument`, :class:`InfoObject`, :class:`ContactObject`,
    :class:`LicenseObject`, :class:`TagObject`, :class:`PathItemObject`,
    :class:`OperationObject`, :class:`ParameterObject`,
    :class:`ResponseObject`, :class:`SchemaObject`, :class:`PropertyObject`
    and :class:`ItemsObject`.

**Run results** -- :class:`Severity`, :class:`Diagnostic` and
:class:`GenerationResult`.

**Configuration** -- :class:`GeneratorConfig`, loaded and layered by
:mod:`swagnote.config`.
"""

from __future__ import annotations

import enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

SWAGGER_VERSION = "2.0"

DEFINITIONS_PREFIX = "#/definitions/"


def definition_ref(canonical_id: str) -> str:
    """Return the ``$ref`` pointer for a definitions entry."""
    return DEFINITIONS_PREFIX + canonical_id


# --- Document models ---


class ContactObject(BaseModel):
    name: Optional[str] = None
    url: Optional[str] = None
    email: Optional[str] = None


class LicenseObject(BaseModel):
    name: Optional[str] = None
    url: Optional[str] = None


class InfoObject(BaseModel):
    """The document-level *Info Object*, filled from the main API file."""

    model_config = ConfigDict(populate_by_name=True)

    title: str = ""
    description: Optional[str] = None
    terms_of_service: Optional[str] = Field(default=None, alias="termsOfService")
    contact: ContactObject = Field(default_factory=ContactObject)
    license: LicenseObject = Field(default_factory=LicenseObject)
    version: Optional[str] = None


class TagObject(BaseModel):
    name: str
    description: Optional[str] = None


class ItemsObject(BaseModel):
    """Element descriptor of an array: a primitive wire type or a ``$ref``."""

    model_config = ConfigDict(populate_by_name=True)

    ref: Optional[str] = Field(default=None, alias="$ref")
    type: Optional[str] = None
    format: Optional[str] = None


class PropertyObject(BaseModel):
    """One named property of a definitions entry."""

    model_config = ConfigDict(populate_by_name=True)

    ref: Optional[str] = Field(default=None, alias="$ref")
    type: Optional[str] = None
    format: Optional[str] = None
    description: Optional[str] = None
    items: Optional[ItemsObject] = None

    def refs(self) -> list[str]:
        """Return every ``$ref`` pointer this property carries."""
        found = [self.ref] if self.ref else []
        if self.items is not None and self.items.ref:
            found.append(self.items.ref)
        return found


class SchemaObject(BaseModel):
    """A definitions entry, or the schema of a response or body parameter."""

    model_config = ConfigDict(populate_by_name=True)

    ref: Optional[str] = Field(default=None, alias="$ref")
    type: Optional[str] = None
    format: Optional[str] = None
    required: list[str] = Field(default_factory=list)
    properties: dict[str, PropertyObject] = Field(default_factory=dict)
    items: Optional[ItemsObject] = None


class ParameterObject(BaseModel):
    """A single operation parameter built from a ``@param`` line."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    in_: str = Field(alias="in")
    description: Optional[str] = None
    required: bool = False
    type: Optional[str] = None
    format: Optional[str] = None
    schema_: Optional[SchemaObject] = Field(default=None, alias="schema")


class ResponseObject(BaseModel):
    """A response entry built from a ``@success`` or ``@failure`` line."""

    model_config = ConfigDict(populate_by_name=True)

    description: str = ""
    schema_: Optional[SchemaObject] = Field(default=None, alias="schema")


class OperationObject(BaseModel):
    """The documentation record for one routed method + path.

    ``package`` is the Go package that declared the controller; it is
    needed to resolve type names found in the comments and is never
    serialised.
    """

    tags: list[str] = Field(default_factory=list)
    summary: Optional[str] = None
    description: Optional[str] = None
    consumes: list[str] = Field(default_factory=list)
    produces: list[str] = Field(default_factory=list)
    parameters: list[ParameterObject] = Field(default_factory=list)
    responses: dict[str, ResponseObject] = Field(default_factory=dict)
    package: str = Field(default="", exclude=True)


class HTTPMethod(str, enum.Enum):
    """HTTP methods that a Swagger 2.0 path item can hold."""

    GET = "get"
    PUT = "put"
    POST = "post"
    DELETE = "delete"
    OPTIONS = "options"
    HEAD = "head"
    PATCH = "patch"


class PathItemObject(BaseModel):
    """At most one operation per HTTP method for a single path."""

    get: Optional[OperationObject] = None
    put: Optional[OperationObject] = None
    post: Optional[OperationObject] = None
    delete: Optional[OperationObject] = None
    options: Optional[OperationObject] = None
    head: Optional[OperationObject] = None
    patch: Optional[OperationObject] = None

    def operation(self, method: HTTPMethod) -> Optional[OperationObject]:
        return getattr(self, method.value)


class SwaggerDocument(BaseModel):
    """Root aggregate of the generated documentation."""

    model_config = ConfigDict(populate_by_name=True)

    swagger: str = SWAGGER_VERSION
    info: InfoObject = Field(default_factory=InfoObject)
    host: Optional[str] = None
    base_path: Optional[str] = Field(default=None, alias="basePath")
    schemes: list[str] = Field(default_factory=list)
    paths: dict[str, PathItemObject] = Field(default_factory=dict)
    definitions: dict[str, SchemaObject] = Field(default_factory=dict)
    tags: list[TagObject] = Field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Serialise to a plain dict with empty values pruned.

        ``paths`` is always present, as Swagger 2.0 requires it.
        """
        data = _prune(self.model_dump(mode="json", by_alias=True, exclude_none=True))
        data.setdefault("paths", {})
        return data


def _prune(value: Any) -> Any:
    """Drop empty dicts and lists from a dumped model tree."""
    if isinstance(value, dict):
        pruned = {k: _prune(v) for k, v in value.items()}
        return {k: v for k, v in pruned.items() if v not in ({}, [])}
    if isinstance(value, list):
        return [_prune(v) for v in value]
    return value


# --- Run results ---


class Severity(str, enum.Enum):
    WARNING = "warning"
    ERROR = "error"


class Diagnostic(BaseModel):
    """A problem found during a run, attached to the declaration it came from."""

    severity: Severity
    message: str
    package: Optional[str] = None
    declaration: Optional[str] = None
    line: Optional[str] = None

    def __str__(self) -> str:
        where = ".".join(p for p in (self.package, self.declaration) if p)
        text = f"{where}: {self.message}" if where else self.message
        if self.line:
            text += f' (in "{self.line}")'
        return text


class GenerationResult(BaseModel):
    """The document produced by one run plus every diagnostic raised on the way."""

    document: SwaggerDocument
    diagnostics: list[Diagnostic] = Field(default_factory=list)

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == Severity.ERROR]

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == Severity.WARNING]


# --- Configuration ---


DEFAULT_MARSHAL_TYPES: dict[str, str] = {
    "NullString": "string",
    "NullInt64": "int64",
    "NullFloat64": "float64",
    "NullBool": "bool",
}


class GeneratorConfig(BaseModel):
    """Settings for one documentation run.

    Built by :func:`~swagnote.config.resolve_config` from CLI flags,
    environment variables, the project config file and these defaults.
    """

    api_packages: list[str] = Field(
        default_factory=list,
        description="Go package ids whose controllers are documented, sub-packages included",
    )
    main_api_file: Optional[str] = Field(
        default=None, description="Go file holding the document-level annotations"
    )
    output_path: str = Field(default="swagger.json", description="Where the document is written")
    output_format: str = Field(default="json", description="Output format: json or yaml")
    controller_class: str = Field(
        default="", description="Regular expression matched against receiver type names"
    )
    ignore: str = Field(default="", description="Regular expression of import paths to ignore")
    search_roots: list[str] = Field(
        default_factory=list, description="GOPATH-style roots, each holding a src/ tree"
    )
    goroot: Optional[str] = None
    module_root: Optional[str] = Field(
        default=None, description="Directory holding go.mod for module-mode lookups"
    )
    vendor_dir: str = "vendor"
    marshal_types: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_MARSHAL_TYPES))
    exclude: list[str] = Field(
        default_factory=list, description="Gitignore-style patterns of package dirs to skip"
    )
    strict: bool = Field(default=False, description="Treat error diagnostics as fatal")
