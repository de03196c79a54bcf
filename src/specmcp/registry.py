"""In-memory store of loaded specs plus operation resolution and search.

:class:`SpecRegistry` owns the mapping from spec id to
:class:`~specmcp.models.LoadedSpec`. It is an ordinary object: create one
and pass it to every consumer (tool layer, server, bootstrap). Several
independent registries can live side by side, which keeps tests isolated.

Loading is asynchronous and only suspends while the loader performs I/O.
A (re)load installs its new entry with a single mapping assignment once the
operation index is complete, so readers see either the previous entry or
the new one, never a partially indexed spec. Lookups and searches are
synchronous and read-only; the records they return are the registry's own
shared instances.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional

from specmcp.exceptions import InvalidUsageError, NotFoundError
from specmcp.models import IndexedOperation, LoadedSpec
from specmcp.parser.indexer import index_operations
from specmcp.parser.loader import LoadedDocument, load_and_dereference

logger = logging.getLogger(__name__)

Loader = Callable[[str], Awaitable[LoadedDocument]]


class SpecRegistry:
    """Spec store keyed by caller-chosen ids.

    Args:
        loader: Coroutine function returning the raw and dereferenced forms
            of a document source. Defaults to
            :func:`~specmcp.parser.loader.load_and_dereference`.

    Example::

        registry = SpecRegistry()
        await registry.add("petstore", "https://petstore3.swagger.io/api/v3/openapi.json")
        op = registry.find_operation(operation_id="getPetById")
        ops = registry.search_operations(tag="pet", method="GET", limit=10)
    """

    def __init__(self, loader: Optional[Loader] = None) -> None:
        self._specs: dict[str, LoadedSpec] = {}
        self._loader = loader or load_and_dereference

    def __len__(self) -> int:
        return len(self._specs)

    def __contains__(self, spec_id: object) -> bool:
        return spec_id in self._specs

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    async def add(self, spec_id: str, source: str) -> LoadedSpec:
        """Load *source*, index it, and store it under *spec_id*.

        An existing entry with the same id is replaced.

        Raises:
            LoadError: If the loader cannot fetch or parse *source*. The
                registry is left unchanged.
        """
        logger.debug("Loading spec %s from %s", spec_id, source)
        document = await self._loader(source)
        spec = LoadedSpec(
            id=spec_id,
            source=source,
            version=document.version,
            raw=document.raw,
            dereferenced=document.dereferenced,
            loaded_at=datetime.now(timezone.utc),
            operations=index_operations(spec_id, document.dereferenced),
        )
        self._specs[spec_id] = spec
        logger.info(
            "Loaded spec %s (%s, %d operations)", spec_id, source, len(spec.operations)
        )
        return spec

    def get(self, spec_id: str) -> Optional[LoadedSpec]:
        return self._specs.get(spec_id)

    def list(self) -> list[LoadedSpec]:
        """All loaded specs, in insertion order."""
        return list(self._specs.values())

    async def reload(self, spec_id: str) -> LoadedSpec:
        """Reload *spec_id* from the source it was added with.

        Raises:
            NotFoundError: If *spec_id* is not loaded.
            LoadError: If the source can no longer be loaded; the previous
                entry stays in place.
        """
        existing = self._specs.get(spec_id)
        if existing is None:
            raise NotFoundError(f"Spec not found: {spec_id}")
        return await self.add(spec_id, existing.source)

    def remove(self, spec_id: str) -> bool:
        """Delete *spec_id*. Returns ``False`` when it was not loaded."""
        if self._specs.pop(spec_id, None) is None:
            return False
        logger.info("Removed spec %s", spec_id)
        return True

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    def operations(self, spec_id: Optional[str] = None) -> list[IndexedOperation]:
        """The search space: one spec's operations, or every spec's.

        An unknown *spec_id* yields an empty list.
        """
        if spec_id:
            spec = self._specs.get(spec_id)
            return list(spec.operations) if spec else []
        return [op for spec in self._specs.values() for op in spec.operations]

    def find_operation(
        self,
        spec_id: Optional[str] = None,
        operation_id: Optional[str] = None,
        method: Optional[str] = None,
        path: Optional[str] = None,
    ) -> Optional[IndexedOperation]:
        """Resolve exactly one operation.

        1. With *operation_id*: a unique match is returned. Several matches
           (an operationId shared across specs, or duplicated in one) are
           not disambiguated here; resolution falls through.
        2. With both *method* (any case) and *path* (exact template
           string): the first match in index order.
        3. Otherwise ``None``.
        """
        haystack = self.operations(spec_id)

        if operation_id:
            matches = [op for op in haystack if op.operation_id == operation_id]
            if len(matches) == 1:
                return matches[0]

        if method and path:
            wanted = method.lower()
            return next(
                (op for op in haystack if op.path == path and op.method.value == wanted),
                None,
            )

        return None

    def search_operations(
        self,
        spec_id: Optional[str] = None,
        tag: Optional[str] = None,
        method: Optional[str] = None,
        path_pattern: Optional[str] = None,
        text: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[IndexedOperation]:
        """Filter operations; every given filter must match.

        Filters apply in this order: *tag* membership, *method* (any case),
        *path_pattern* (regular expression searched anywhere in the path),
        *text* (case-insensitive substring of summary, description,
        operationId, or path), then *limit* keeps the first N results.
        A non-positive *limit* is ignored.

        Raises:
            InvalidUsageError: If *path_pattern* is not a valid regular
                expression.
        """
        result = self.operations(spec_id)

        if tag:
            result = [op for op in result if op.tags and tag in op.tags]
        if method:
            wanted = method.lower()
            result = [op for op in result if op.method.value == wanted]
        if path_pattern:
            try:
                pattern = re.compile(path_pattern)
            except re.error as exc:
                raise InvalidUsageError(
                    f"Invalid path pattern {path_pattern!r}: {exc}"
                ) from exc
            result = [op for op in result if pattern.search(op.path)]
        if text:
            needle = text.lower()
            result = [op for op in result if _mentions(op, needle)]
        if limit is not None and limit > 0:
            result = result[:limit]

        return result


def _mentions(op: IndexedOperation, needle: str) -> bool:
    fields = (op.summary, op.description, op.operation_id, op.path)
    return any(needle in (value or "").lower() for value in fields)
