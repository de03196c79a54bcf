"""Version-specific views over a dereferenced document.

Swagger 2.0 and OpenAPI 3.x describe the same concepts with different
shapes: base URLs come from ``host``/``basePath``/``schemes`` in one and
from ``servers`` in the other, and request bodies are either an
``in: body`` parameter or a ``requestBody`` object. :func:`open_document`
picks the matching view once, at the boundary, and every consumer talks
to the common :class:`ApiDocument` interface instead of inspecting the
structure itself.
"""

from __future__ import annotations

import re
from typing import Any, NamedTuple, Optional

from specmcp.models import DocumentVersion

_SERVER_VARIABLE_RE = re.compile(r"\{([^}]+)\}")


class BodyMedia(NamedTuple):
    """The request-body media type chosen for example generation.

    ``media`` is a *Media Type Object* shaped mapping: it may hold
    ``example``, ``examples``, and ``schema``.
    """

    content_type: str
    media: dict[str, Any]


class ApiDocument:
    """Common interface over a dereferenced document."""

    version: DocumentVersion

    def __init__(self, document: dict[str, Any]) -> None:
        self._document = document

    @property
    def info(self) -> dict[str, Any]:
        info = self._document.get("info")
        return info if isinstance(info, dict) else {}

    def server_urls(self) -> list[str]:
        """Base URLs in declaration order. Never empty; ``["/"]`` at least."""
        raise NotImplementedError

    def request_body(self, operation: dict[str, Any]) -> Optional[BodyMedia]:
        """The first declared request-body media type, or ``None``."""
        raise NotImplementedError

    def parameters(self, path: str, operation: dict[str, Any]) -> list[dict[str, Any]]:
        """Effective parameters of *operation* declared under *path*.

        Path-level parameters apply to every operation of the path;
        operation-level parameters override them when they share the same
        ``name`` and ``in`` values.
        """
        paths = self._document.get("paths")
        path_item = paths.get(path) if isinstance(paths, dict) else None
        path_params = path_item.get("parameters") if isinstance(path_item, dict) else None
        return merge_parameters(
            _parameter_list(path_params), _parameter_list(operation.get("parameters"))
        )


class OpenAPIDocument(ApiDocument):
    """View over an OpenAPI 3.0 or 3.1 document."""

    def __init__(
        self,
        document: dict[str, Any],
        version: DocumentVersion = DocumentVersion.OPENAPI_3_1,
    ) -> None:
        super().__init__(document)
        self.version = version

    def server_urls(self) -> list[str]:
        servers = self._document.get("servers")
        if not isinstance(servers, list) or not servers:
            return ["/"]
        urls = [_server_url(server) for server in servers if isinstance(server, dict)]
        return urls or ["/"]

    def request_body(self, operation: dict[str, Any]) -> Optional[BodyMedia]:
        body = operation.get("requestBody")
        if not isinstance(body, dict):
            return None
        content = body.get("content")
        if not isinstance(content, dict) or not content:
            return None
        content_type, media = next(iter(content.items()))
        return BodyMedia(str(content_type), media if isinstance(media, dict) else {})


class SwaggerDocument(ApiDocument):
    """View over a Swagger 2.0 document."""

    version = DocumentVersion.SWAGGER_2

    def server_urls(self) -> list[str]:
        host = self._document.get("host")
        base_path = self._document.get("basePath") or ""
        if not host:
            return [base_path or "/"]
        schemes = self._document.get("schemes")
        if not isinstance(schemes, list) or not schemes:
            schemes = ["https"]
        return [f"{scheme}://{host}{base_path}" for scheme in schemes]

    def request_body(self, operation: dict[str, Any]) -> Optional[BodyMedia]:
        body_param = next(
            (p for p in _parameter_list(operation.get("parameters")) if p.get("in") == "body"),
            None,
        )
        if body_param is None:
            return None
        consumes = operation.get("consumes") or self._document.get("consumes")
        content_type = consumes[0] if isinstance(consumes, list) and consumes else "application/json"
        media: dict[str, Any] = {}
        schema = body_param.get("schema")
        if isinstance(schema, dict):
            media["schema"] = schema
        if "x-example" in body_param:
            media["example"] = body_param["x-example"]
        return BodyMedia(str(content_type), media)


def open_document(
    document: dict[str, Any], version: DocumentVersion
) -> ApiDocument:
    """Return the view matching *version*."""
    if version == DocumentVersion.SWAGGER_2:
        return SwaggerDocument(document)
    return OpenAPIDocument(document, version)


def merge_parameters(
    path_params: list[dict[str, Any]],
    op_params: list[dict[str, Any]],
) -> list[dict[str, Any]]:
    """Merge path-level and operation-level parameters.

    Operation-level parameters override path-level parameters with the same
    name and location (``in`` field).
    """
    overridden = {(p.get("name", ""), p.get("in", "")) for p in op_params}
    merged = [
        p for p in path_params if (p.get("name", ""), p.get("in", "")) not in overridden
    ]
    merged.extend(op_params)
    return merged


def _parameter_list(value: Any) -> list[dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [p for p in value if isinstance(p, dict)]


def _server_url(server: dict[str, Any]) -> str:
    """Server URL with ``{variable}`` placeholders replaced by their defaults."""
    url = str(server.get("url") or "/")
    variables = server.get("variables")
    if not isinstance(variables, dict):
        return url

    def _default(match: re.Match[str]) -> str:
        variable = variables.get(match.group(1))
        if isinstance(variable, dict) and "default" in variable:
            return str(variable["default"])
        return match.group(0)

    return _SERVER_VARIABLE_RE.sub(_default, url)
