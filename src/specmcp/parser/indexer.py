"""Flatten a dereferenced document into an ordered list of operations.

The single public entry point is :func:`index_operations`. Paths are
visited in declaration order and, within each path, verbs in the canonical
order of :class:`~specmcp.models.HTTPMethod` (get, put, post, delete,
options, head, patch, trace). The ordering is therefore stable for a given
document revision, which search truncation and listings rely on.

Only verbs explicitly declared on a *Path Item Object* produce a record.
Path-level keys such as ``parameters``, ``summary`` or ``servers`` never do.
"""

from __future__ import annotations

from typing import Any, Optional

from specmcp.models import HTTPMethod, IndexedOperation


def index_operations(spec_id: str, document: dict[str, Any]) -> list[IndexedOperation]:
    """Build the operation index of one document.

    Args:
        spec_id: Id of the owning :class:`~specmcp.models.LoadedSpec`.
        document: The dereferenced document.

    Returns:
        One :class:`~specmcp.models.IndexedOperation` per declared
        path + verb pair. Each record's ``raw_operation`` is the operation
        object from *document* itself, not a copy.

    Example::

        ops = index_operations("petstore", dereferenced)
        for op in ops:
            print(f"{op.method.value.upper()} {op.path}")
    """
    paths = document.get("paths")
    if not isinstance(paths, dict):
        return []

    operations: list[IndexedOperation] = []
    for path, path_item in paths.items():
        if not isinstance(path_item, dict):
            continue

        for method in HTTPMethod:
            operation = path_item.get(method.value)
            if not isinstance(operation, dict):
                continue

            operations.append(
                IndexedOperation(
                    spec_id=spec_id,
                    operation_id=_text(operation.get("operationId")),
                    method=method,
                    path=str(path),
                    tags=_tags(operation.get("tags")),
                    summary=_text(operation.get("summary")),
                    description=_text(operation.get("description")),
                    raw_operation=operation,
                )
            )

    return operations


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


def _tags(value: Any) -> Optional[list[str]]:
    if not isinstance(value, list):
        return None
    return [str(tag) for tag in value]
