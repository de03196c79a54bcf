"""Registry operations shaped as JSON-ready tool results.

:class:`SpecTools` is what the MCP server exposes as tools. Each method
wraps one registry (or loader) call and returns a payload an agent can read
directly. Load failures never cross this boundary as exceptions: ``add``
and ``reload`` report them as ``{"ok": False, "error": "..."}``. An
operation that cannot be resolved is reported as
``{"error": "Operation not found"}``.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Optional

from specmcp.examples import build_request_example, render_request_example
from specmcp.exceptions import LoadError, NotFoundError
from specmcp.models import IndexedOperation, LoadedSpec, ValidationResult
from specmcp.parser.document import open_document
from specmcp.parser.loader import validate_document
from specmcp.registry import SpecRegistry
from specmcp.resources import operation_uri, spec_uri

logger = logging.getLogger(__name__)

OPERATION_NOT_FOUND = "Operation not found"

Validator = Callable[[str], Awaitable[ValidationResult]]


class SpecTools:
    """Tool handlers bound to one :class:`~specmcp.registry.SpecRegistry`.

    Args:
        registry: The registry every handler reads and mutates.
        validator: Standalone document validator; defaults to
            :func:`~specmcp.parser.loader.validate_document`.
    """

    def __init__(self, registry: SpecRegistry, validator: Optional[Validator] = None) -> None:
        self._registry = registry
        self._validator = validator or validate_document

    @property
    def registry(self) -> SpecRegistry:
        return self._registry

    # ------------------------------------------------------------------ #
    # Spec lifecycle
    # ------------------------------------------------------------------ #

    async def add_spec(self, spec_id: str, source: str) -> dict[str, Any]:
        try:
            spec = await self._registry.add(spec_id, source)
        except LoadError as exc:
            logger.warning("add_spec %s failed: %s", spec_id, exc)
            return {"ok": False, "id": spec_id, "source": source, "error": str(exc)}
        return {"ok": True, **_load_summary(spec)}

    async def reload_spec(self, spec_id: str) -> dict[str, Any]:
        try:
            spec = await self._registry.reload(spec_id)
        except (LoadError, NotFoundError) as exc:
            logger.warning("reload_spec %s failed: %s", spec_id, exc)
            return {"ok": False, "id": spec_id, "error": str(exc)}
        return {"ok": True, **_load_summary(spec)}

    def remove_spec(self, spec_id: str) -> dict[str, Any]:
        removed = self._registry.remove(spec_id)
        message = f"Removed: {spec_id}" if removed else f"Not found: {spec_id}"
        return {"id": spec_id, "removed": removed, "message": message}

    async def validate_spec(self, source: str) -> dict[str, Any]:
        result = await self._validator(source)
        return result.model_dump(exclude_none=True)

    def list_specs(self) -> list[dict[str, Any]]:
        return [_spec_summary(spec) for spec in self._registry.list()]

    # ------------------------------------------------------------------ #
    # Operations
    # ------------------------------------------------------------------ #

    def list_operations(
        self,
        spec_id: Optional[str] = None,
        tag: Optional[str] = None,
        method: Optional[str] = None,
        path_pattern: Optional[str] = None,
        text: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[dict[str, Any]]:
        """Search operations; raises InvalidUsageError on a bad path pattern."""
        ops = self._registry.search_operations(
            spec_id=spec_id,
            tag=tag,
            method=method,
            path_pattern=path_pattern,
            text=text,
            limit=limit,
        )
        return [
            {
                "spec_id": op.spec_id,
                "operation_id": op.operation_id,
                "method": op.method.value,
                "path": op.path,
                "summary": op.summary,
                "tags": op.tags,
            }
            for op in ops
        ]

    def get_operation(
        self,
        spec_id: Optional[str] = None,
        operation_id: Optional[str] = None,
        method: Optional[str] = None,
        path: Optional[str] = None,
    ) -> dict[str, Any]:
        op = self._registry.find_operation(
            spec_id=spec_id, operation_id=operation_id, method=method, path=path
        )
        if op is None:
            return {"error": OPERATION_NOT_FOUND}
        return {
            "spec_id": op.spec_id,
            "method": op.method.value,
            "path": op.path,
            "operation_id": op.operation_id,
            "summary": op.summary,
            "tags": op.tags,
            "operation": op.raw_operation,
            "resources": _resource_links(op, include_spec=True),
        }

    def generate_request_example(
        self,
        spec_id: Optional[str] = None,
        operation_id: Optional[str] = None,
        method: Optional[str] = None,
        path: Optional[str] = None,
        server_index: int = 0,
    ) -> str:
        """Markdown with cURL and Python examples, or the not-found message."""
        op = self._registry.find_operation(
            spec_id=spec_id, operation_id=operation_id, method=method, path=path
        )
        spec = self._registry.get(op.spec_id) if op else None
        if op is None or spec is None:
            return OPERATION_NOT_FOUND

        example = build_request_example(spec, op, server_index=server_index)
        links = "\n".join(
            f"- {name}: {uri}" for name, uri in _resource_links(op).items()
        )
        return f"{render_request_example(example)}\n\n[resources]\n{links}"


def _load_summary(spec: LoadedSpec) -> dict[str, Any]:
    return {
        "id": spec.id,
        "source": spec.source,
        "operations": len(spec.operations),
        "loaded_at": spec.loaded_at.isoformat(),
    }


def _spec_summary(spec: LoadedSpec) -> dict[str, Any]:
    document = open_document(spec.dereferenced, spec.version)
    return {
        "id": spec.id,
        "source": spec.source,
        "title": spec.title,
        "version": spec.api_version,
        "format": spec.version.value,
        "servers": document.server_urls(),
        "paths_count": spec.paths_count,
        "operations": len(spec.operations),
        "loaded_at": spec.loaded_at.isoformat(),
    }


def _resource_links(op: IndexedOperation, include_spec: bool = False) -> dict[str, str]:
    links = {"operation": operation_uri(op)}
    if include_spec:
        links["spec"] = spec_uri(op.spec_id)
    return links
