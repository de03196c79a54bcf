"""Environment-driven configuration and bootstrap of the initial spec list.

specmcp keeps no state on disk; everything it knows at startup comes from
the environment:

* ``OPENAPI_SOURCES`` -- either a JSON array literal or a path to a JSON
  file, each element an ``{"id": ..., "urlOrPath": ...}`` object (see
  :class:`~specmcp.models.SourceEntry`).
* ``./openapi-sources.json`` -- read when ``OPENAPI_SOURCES`` is unset and
  the file exists in the working directory.
* ``SPECMCP_HTTP_TIMEOUT`` -- timeout in seconds for fetching remote
  documents (default ``30``).

:func:`read_sources` resolves and validates the list; :func:`bootstrap`
loads every entry into a registry, logging and skipping entries that fail.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from pydantic import TypeAdapter, ValidationError

from specmcp.exceptions import ConfigError, LoadError
from specmcp.models import LoadedSpec, SourceEntry

if TYPE_CHECKING:
    from specmcp.registry import SpecRegistry

logger = logging.getLogger(__name__)

SOURCES_ENV_VAR = "OPENAPI_SOURCES"
DEFAULT_SOURCES_FILE = "openapi-sources.json"
TIMEOUT_ENV_VAR = "SPECMCP_HTTP_TIMEOUT"
DEFAULT_HTTP_TIMEOUT = 30.0

_SOURCES_ADAPTER = TypeAdapter(list[SourceEntry])


def http_timeout() -> float:
    """Return the HTTP timeout for remote documents, in seconds.

    Raises:
        ConfigError: If ``SPECMCP_HTTP_TIMEOUT`` is not a positive number.
    """
    raw = os.environ.get(TIMEOUT_ENV_VAR, "").strip()
    if not raw:
        return DEFAULT_HTTP_TIMEOUT
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigError(f"{TIMEOUT_ENV_VAR} must be a number, got {raw!r}") from exc
    if value <= 0:
        raise ConfigError(f"{TIMEOUT_ENV_VAR} must be positive, got {raw!r}")
    return value


def read_sources(
    value: Optional[str] = None,
    cwd: Optional[Path] = None,
) -> list[SourceEntry]:
    """Resolve the bootstrap source list.

    Precedence: the explicit *value* (CLI flag), then ``OPENAPI_SOURCES``,
    then ``openapi-sources.json`` in *cwd*. A value that starts with ``[``
    is parsed as a JSON array; anything else is treated as a file path.

    Args:
        value: Explicit JSON array or file path. ``None`` falls back to the
            environment.
        cwd: Directory searched for the default file. Defaults to the
            process working directory.

    Returns:
        The validated entries, in declaration order. Empty when nothing is
        configured.

    Raises:
        ConfigError: If the list cannot be read, is not valid JSON, or an
            entry is malformed.
    """
    if value is None:
        value = os.environ.get(SOURCES_ENV_VAR)

    if value and value.strip():
        if value.lstrip().startswith("["):
            text = value
            origin = SOURCES_ENV_VAR
        else:
            path = Path(value).expanduser()
            text = _read_file(path)
            origin = str(path)
    else:
        path = (cwd or Path.cwd()) / DEFAULT_SOURCES_FILE
        if not path.is_file():
            return []
        text = _read_file(path)
        origin = str(path)

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON in {origin}: {exc}") from exc

    try:
        return _SOURCES_ADAPTER.validate_python(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid source list in {origin}: {exc}") from exc


def _read_file(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Failed to read source list {path}: {exc}") from exc


async def bootstrap(
    registry: SpecRegistry,
    value: Optional[str] = None,
    cwd: Optional[Path] = None,
) -> list[LoadedSpec]:
    """Load every configured source into *registry*.

    Never raises: an unreadable source list is logged and treated as empty,
    and each entry that fails to load is logged and skipped.

    Returns:
        The specs that loaded successfully, in declaration order.
    """
    try:
        entries = read_sources(value, cwd=cwd)
    except ConfigError as exc:
        logger.warning("Failed to read bootstrap sources: %s", exc)
        return []

    loaded: list[LoadedSpec] = []
    for entry in entries:
        try:
            spec = await registry.add(entry.id, entry.source)
        except LoadError as exc:
            logger.warning("[bootstrap] failed to load %s from %s: %s", entry.id, entry.source, exc)
            continue
        logger.info("[bootstrap] loaded spec %s from %s", entry.id, entry.source)
        loaded.append(spec)
    return loaded
