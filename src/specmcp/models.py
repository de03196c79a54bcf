"""Canonical Pydantic models shared across all specmcp modules.

This is the single source of truth for data shapes in the project. The models
fall into three groups:

**Registry models** -- produced by the loader and indexer, held by the
:class:`~specmcp.registry.SpecRegistry`:
    :class:`HTTPMethod`, :class:`DocumentVersion`, :class:`IndexedOperation`,
    and :class:`LoadedSpec`.

**Boundary models** -- exchanged with the outside world:
    :class:`SourceEntry` (bootstrap configuration) and
    :class:`ValidationResult` (standalone document validation).

**Presentation models** -- produced on demand for the agent:
    :class:`RequestExample`.

Document payloads (``raw``, ``dereferenced``, ``raw_operation``) are typed
``Any`` so that Pydantic stores them by reference instead of rebuilding
them during validation.
"""

from __future__ import annotations

import enum
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class HTTPMethod(str, enum.Enum):
    """HTTP verbs recognised in an OpenAPI/Swagger *Path Item Object*.

    Declaration order is the canonical indexing order: iterating the enum
    yields get, put, post, delete, options, head, patch, trace.
    """

    GET = "get"
    PUT = "put"
    POST = "post"
    DELETE = "delete"
    OPTIONS = "options"
    HEAD = "head"
    PATCH = "patch"
    TRACE = "trace"


class DocumentVersion(str, enum.Enum):
    """Document family detected from the ``swagger``/``openapi`` field."""

    SWAGGER_2 = "swagger-2.0"
    OPENAPI_3_0 = "openapi-3.0"
    OPENAPI_3_1 = "openapi-3.1"


class IndexedOperation(BaseModel):
    """One HTTP operation (one verb at one path template) of a loaded spec.

    Records are shared between the registry and every caller that receives
    them, so the model is frozen. ``raw_operation`` points into the owning
    spec's dereferenced document and must not be mutated.
    """

    model_config = ConfigDict(frozen=True)

    spec_id: str
    operation_id: Optional[str] = None
    method: HTTPMethod
    path: str
    tags: Optional[list[str]] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    raw_operation: Any = Field(default=None, repr=False, exclude=True)

    @property
    def key(self) -> str:
        """Resource key: the operationId, or ``method:path`` when absent."""
        if self.operation_id:
            return self.operation_id
        return f"{self.method.value}:{self.path}"


class LoadedSpec(BaseModel):
    """A document loaded into the registry under a caller-chosen id.

    ``operations`` is always rebuilt from ``dereferenced`` as a whole; a
    reload produces a brand new ``LoadedSpec`` rather than mutating this one.
    """

    id: str
    source: str = Field(description="URL or file path the document was loaded from")
    version: DocumentVersion
    raw: Any = Field(default=None, repr=False)
    dereferenced: Any = Field(default=None, repr=False)
    loaded_at: datetime
    operations: list[IndexedOperation] = Field(default_factory=list)

    @property
    def info(self) -> dict[str, Any]:
        info = self.dereferenced.get("info") if isinstance(self.dereferenced, dict) else None
        return info if isinstance(info, dict) else {}

    @property
    def title(self) -> Optional[str]:
        return self.info.get("title")

    @property
    def api_version(self) -> Optional[str]:
        version = self.info.get("version")
        return None if version is None else str(version)

    @property
    def paths_count(self) -> int:
        paths = self.dereferenced.get("paths") if isinstance(self.dereferenced, dict) else None
        return len(paths) if isinstance(paths, dict) else 0


class SourceEntry(BaseModel):
    """One bootstrap entry: load the document at ``source`` under ``id``.

    Accepts ``urlOrPath`` (the key used by ``openapi-sources.json``) or
    ``source``.

    Example::

        SourceEntry.model_validate({"id": "petstore", "urlOrPath": "petstore.yaml"})
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(min_length=1)
    source: str = Field(alias="urlOrPath", min_length=1)


class ValidationResult(BaseModel):
    """Outcome of validating a document without registering it."""

    valid: bool
    source: str
    version: Optional[str] = Field(
        default=None, description="Declared swagger/openapi version string"
    )
    info: dict[str, Any] = Field(default_factory=dict)
    error: Optional[str] = None


class RequestExample(BaseModel):
    """A fully resolved sample request for one operation, in two renderings."""

    spec_id: str
    operation_id: Optional[str] = None
    method: HTTPMethod
    path: str = Field(description="Path template as declared in the document")
    base_url: str
    url: str = Field(description="Resolved URL including query string")
    query: dict[str, Any] = Field(default_factory=dict)
    headers: dict[str, str] = Field(default_factory=dict)
    body: Any = None
    curl: str
    script: str
