"""Read-only resources addressed by ``openapi://`` URIs.

Three resource shapes are served:

* ``openapi://{spec_id}/spec`` -- the dereferenced document.
* ``openapi://{spec_id}/operations`` -- the lightweight operation list.
* ``openapi://{spec_id}/operations/{operation_key}`` -- one operation,
  keyed by its operationId or by ``method:path``.

URI template variables cannot contain ``/``, so ``method:path`` keys are
percent-encoded in URIs (see :func:`operation_uri`) and decoded by
:func:`resolve_operation_key`.
"""

from __future__ import annotations

from typing import Any, Optional
from urllib.parse import quote, unquote

from specmcp.exceptions import NotFoundError
from specmcp.models import IndexedOperation, LoadedSpec
from specmcp.registry import SpecRegistry

SCHEME = "openapi"


def spec_uri(spec_id: str) -> str:
    return f"{SCHEME}://{spec_id}/spec"


def operations_uri(spec_id: str) -> str:
    return f"{SCHEME}://{spec_id}/operations"


def operation_uri(op: IndexedOperation) -> str:
    return f"{SCHEME}://{op.spec_id}/operations/{quote(op.key, safe=':')}"


def resolve_operation_key(spec: LoadedSpec, key: str) -> Optional[IndexedOperation]:
    """Find the operation of *spec* addressed by *key*.

    An operationId match wins; otherwise *key* is split at its first colon
    into a method (any case) and an exact path.
    """
    key = unquote(key)
    for op in spec.operations:
        if op.operation_id == key:
            return op

    method, sep, path = key.partition(":")
    if not sep:
        return None
    wanted = method.lower()
    return next(
        (op for op in spec.operations if op.method.value == wanted and op.path == path),
        None,
    )


def _require_spec(registry: SpecRegistry, spec_id: str) -> LoadedSpec:
    spec = registry.get(spec_id)
    if spec is None:
        raise NotFoundError(f"Spec not found: {spec_id}")
    return spec


def spec_document(registry: SpecRegistry, spec_id: str) -> Any:
    """The dereferenced document of *spec_id*.

    Raises:
        NotFoundError: If *spec_id* is not loaded.
    """
    return _require_spec(registry, spec_id).dereferenced


def spec_operations(registry: SpecRegistry, spec_id: str) -> list[dict[str, Any]]:
    """Operation summaries of *spec_id*, in index order.

    Raises:
        NotFoundError: If *spec_id* is not loaded.
    """
    spec = _require_spec(registry, spec_id)
    return [
        {
            "operation_id": op.operation_id,
            "method": op.method.value,
            "path": op.path,
            "tags": op.tags,
            "summary": op.summary,
        }
        for op in spec.operations
    ]


def operation_detail(
    registry: SpecRegistry, spec_id: str, operation_key: str
) -> dict[str, Any]:
    """Full detail of one operation, including its raw definition.

    Raises:
        NotFoundError: If the spec or the operation key is unknown.
    """
    spec = _require_spec(registry, spec_id)
    op = resolve_operation_key(spec, operation_key)
    if op is None:
        raise NotFoundError(f"Operation not found for key: {unquote(operation_key)}")
    return {
        "spec_id": op.spec_id,
        "method": op.method.value,
        "path": op.path,
        "operation_id": op.operation_id,
        "tags": op.tags,
        "summary": op.summary,
        "description": op.description,
        "operation": op.raw_operation,
    }
