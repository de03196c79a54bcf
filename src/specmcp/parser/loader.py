"""Load OpenAPI/Swagger documents from a URL or a local file.

This module handles all I/O for fetching documents and converting them into
Python dictionaries. It supports both JSON and YAML with automatic format
detection, identifies the document family (Swagger 2.0, OpenAPI 3.0,
OpenAPI 3.1), and hands the parsed tree to
:func:`~specmcp.parser.resolver.resolve_refs`.

The public functions are:

* :func:`load_document` -- fetch and parse one document.
* :func:`detect_version` -- classify a parsed document.
* :func:`load_and_dereference` -- the registry's loader: raw form,
  dereferenced form, and version in one call.
* :func:`validate_document` -- structural validation that reports instead
  of raising; nothing is registered.

Remote fetches are asynchronous (:class:`httpx.AsyncClient`); file reads
run in a worker thread so the event loop only suspends on I/O.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, NamedTuple, Optional

import httpx
import yaml

from specmcp.config import http_timeout
from specmcp.exceptions import ConfigError, LoadError
from specmcp.models import DocumentVersion, ValidationResult
from specmcp.parser.resolver import resolve_refs


class LoadedDocument(NamedTuple):
    """A document in both its parsed and its dereferenced form."""

    raw: dict[str, Any]
    dereferenced: dict[str, Any]
    version: DocumentVersion


def is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


async def load_document(source: str, timeout: Optional[float] = None) -> dict[str, Any]:
    """Load a document from a URL or file path.

    Args:
        source: An ``http(s)://`` URL or a local file path.
        timeout: HTTP timeout in seconds; defaults to
            :func:`~specmcp.config.http_timeout`.

    Returns:
        The parsed document.

    Raises:
        LoadError: If the source cannot be fetched or parsed.
    """
    if is_url(source):
        return await _load_from_url(source, timeout)
    return await _load_from_file(source)


async def _load_from_url(url: str, timeout: Optional[float] = None) -> dict[str, Any]:
    """Fetch a document over HTTP(S), using the content type as a format hint."""
    if timeout is None:
        try:
            timeout = http_timeout()
        except ConfigError as exc:
            raise LoadError(f"Cannot fetch {url}: {exc}") from exc

    try:
        async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:
            response = await client.get(url)
            response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise LoadError(
            f"HTTP {exc.response.status_code} fetching document from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise LoadError(f"Failed to fetch document from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    hint = ""
    if "json" in content_type:
        hint = "json"
    elif "yaml" in content_type or "yml" in content_type:
        hint = "yaml"

    return parse_content(response.text, hint=hint, origin=url)


async def _load_from_file(path: str) -> dict[str, Any]:
    file_path = Path(path).expanduser()
    if not file_path.is_file():
        raise LoadError(f"Document file not found: {path}")
    content = await asyncio.to_thread(read_file, file_path)
    return parse_content(content, hint=format_hint(file_path), origin=path)


def read_file(file_path: Path) -> str:
    """Read a document file as UTF-8 text.

    Raises:
        LoadError: If the file cannot be read, is not UTF-8, or is empty.
    """
    try:
        content = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise LoadError(f"Failed to read document file {file_path}: {exc}") from exc
    if not content.strip():
        raise LoadError(f"Document file is empty: {file_path}")
    return content


def _fetch_file(file_path: Path) -> dict[str, Any]:
    """Load a file referenced by a relative ``$ref``."""
    if not file_path.is_file():
        raise LoadError(f"Referenced document not found: {file_path}")
    return parse_content(read_file(file_path), hint=format_hint(file_path), origin=str(file_path))


def format_hint(file_path: Path) -> str:
    suffix = file_path.suffix.lower()
    if suffix == ".json":
        return "json"
    if suffix in (".yaml", ".yml"):
        return "yaml"
    return ""


def parse_content(content: str, hint: str = "", origin: str = "document") -> dict[str, Any]:
    """Parse content as JSON or YAML.

    JSON is tried first unless the hint says YAML; valid JSON is also valid
    YAML, but the JSON parser is stricter and gives better messages.

    Args:
        content: The raw text.
        hint: ``"json"``, ``"yaml"``, or ``""`` for auto-detection.
        origin: Source description used in error messages.

    Raises:
        LoadError: If the content is neither JSON nor YAML, or is not a
            mapping at the top level.
    """
    json_error: Exception | None = None

    if hint != "yaml":
        try:
            return _expect_mapping(json.loads(content), origin)
        except json.JSONDecodeError as exc:
            if hint == "json":
                raise LoadError(f"Invalid JSON in {origin}: {exc}") from exc
            json_error = exc

    try:
        return _expect_mapping(yaml.safe_load(content), origin)
    except yaml.YAMLError as exc:
        msg = f"Failed to parse {origin} as JSON or YAML"
        if json_error:
            msg += f"\n  JSON error: {json_error}"
        msg += f"\n  YAML error: {exc}"
        raise LoadError(msg) from exc


def _expect_mapping(result: Any, origin: str) -> dict[str, Any]:
    if not isinstance(result, dict):
        kind = type(result).__name__ if result is not None else "empty document"
        raise LoadError(f"{origin} must be a JSON/YAML object (got {kind})")
    return result


def declared_version(document: dict[str, Any]) -> Optional[str]:
    """Return the raw ``swagger`` or ``openapi`` version string, if any."""
    for field in ("openapi", "swagger"):
        if field in document and document[field] is not None:
            return str(document[field])
    return None


def detect_version(document: dict[str, Any]) -> DocumentVersion:
    """Classify a parsed document as Swagger 2.0, OpenAPI 3.0, or OpenAPI 3.1.

    Future 3.x minor versions are treated as 3.1, the newest known shape.

    Raises:
        LoadError: If the version field is missing or unsupported.
    """
    if "swagger" in document:
        version = str(document["swagger"])
        if version == "2.0":
            return DocumentVersion.SWAGGER_2
        raise LoadError(f"Unsupported Swagger version: {version}. Only 2.0 is supported.")

    openapi_version = document.get("openapi")
    if openapi_version is None:
        raise LoadError(
            "Missing 'openapi' or 'swagger' field. Is this an OpenAPI document?"
        )

    version = str(openapi_version)
    if version == "3.0" or version.startswith("3.0."):
        return DocumentVersion.OPENAPI_3_0
    if version.startswith("3."):
        return DocumentVersion.OPENAPI_3_1
    raise LoadError(
        f"Unsupported OpenAPI version: {version}. "
        "Swagger 2.0 and OpenAPI 3.x are supported."
    )


def check_structure(document: dict[str, Any], version: DocumentVersion) -> None:
    """Check the top-level objects every supported version requires.

    Raises:
        LoadError: On the first structural problem found.
    """
    info = document.get("info")
    if not isinstance(info, dict):
        raise LoadError("Missing or invalid 'info' object")
    for field in ("title", "version"):
        if field not in info:
            raise LoadError(f"'info' object is missing required field '{field}'")

    paths = document.get("paths")
    if paths is None:
        # OpenAPI 3.1 allows webhook-only or component-only documents.
        if version == DocumentVersion.OPENAPI_3_1 and (
            "webhooks" in document or "components" in document
        ):
            return
        raise LoadError("Missing 'paths' object")
    if not isinstance(paths, dict):
        raise LoadError("'paths' must be an object")
    for path, path_item in paths.items():
        if not str(path).startswith("/"):
            raise LoadError(f"Path '{path}' must begin with '/'")
        if not isinstance(path_item, dict):
            raise LoadError(f"Path item for '{path}' must be an object")


async def load_and_dereference(source: str) -> LoadedDocument:
    """Load *source* and return its raw and dereferenced forms.

    This is the default loader of :class:`~specmcp.registry.SpecRegistry`.
    The raw document is left untouched; the dereferenced one is a new tree
    in which ``$ref`` pointers are replaced by their targets.

    Raises:
        LoadError: If the document cannot be fetched, parsed, classified,
            or dereferenced.
    """
    raw = await load_document(source)
    version = detect_version(raw)
    paths = raw.get("paths")
    if paths is not None and not isinstance(paths, dict):
        raise LoadError("'paths' must be an object")
    if is_url(source):
        dereferenced = resolve_refs(raw)
    else:
        dereferenced = resolve_refs(raw, location=source, fetch=_fetch_file)
    return LoadedDocument(raw=raw, dereferenced=dereferenced, version=version)


async def validate_document(source: str) -> ValidationResult:
    """Validate the document at *source* without registering it.

    Loads, classifies, and dereferences the document, then checks its
    top-level structure. Failures are reported, not raised.

    Returns:
        A :class:`~specmcp.models.ValidationResult`; on success it carries
        the declared version string and the ``info`` block.
    """
    try:
        loaded = await load_and_dereference(source)
        check_structure(loaded.dereferenced, loaded.version)
    except LoadError as exc:
        return ValidationResult(valid=False, source=source, error=str(exc))

    return ValidationResult(
        valid=True,
        source=source,
        version=declared_version(loaded.raw),
        info=loaded.dereferenced.get("info", {}),
    )
