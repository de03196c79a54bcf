"""Render sample requests as a cURL command and a Python ``httpx`` script.

This module is a presentation layer: it never issues a request. The
renderers take a fully resolved request (base URL, method, filled path,
query map, headers, optional body). Both forms

* apply query parameters onto the URL with percent-encoding,
* uppercase the method,
* include only the headers actually supplied, and
* carry the body as pretty-printed JSON only when it is not ``None``.

:func:`build_request_example` assembles such a request for one indexed
operation, sampling parameter values and the body from the document.
"""

from __future__ import annotations

import json
import re
from typing import Any, Mapping, Optional

import httpx

from specmcp.models import IndexedOperation, LoadedSpec, RequestExample
from specmcp.parser.document import open_document
from specmcp.rendering import render
from specmcp.sampler import build_sample_from_schema

_PATH_PARAM_RE = re.compile(r"\{([^}]+)\}")
_ID_SUFFIX_RE = re.compile(r"(id|Id|ID)$")

DEFAULT_ACCEPT = "application/json"


def fill_path_params(path: str) -> str:
    """Replace ``{name}`` placeholders in *path* with sample values.

    Names ending in ``id``, ``Id`` or ``ID`` become ``123``; every other
    placeholder becomes ``sample``.

    Example::

        >>> fill_path_params("/pets/{petId}/{name}")
        '/pets/123/sample'
    """

    def _replace(match: re.Match[str]) -> str:
        return "123" if _ID_SUFFIX_RE.search(match.group(1)) else "sample"

    return _PATH_PARAM_RE.sub(_replace, path)


def build_url(
    base_url: str,
    path: str,
    query: Optional[Mapping[str, Any]] = None,
) -> str:
    """Join *base_url* and *path* and apply *query*.

    Trailing slashes of the base are dropped before the path is appended.
    ``None`` query values are skipped; lists repeat the parameter; mappings
    are sent as compact JSON.
    """
    url = httpx.URL(base_url.rstrip("/") + path)
    params = {
        name: _query_value(value)
        for name, value in (query or {}).items()
        if value is not None
    }
    if params:
        url = url.copy_merge_params(params)
    return str(url)


def _query_value(value: Any) -> Any:
    if isinstance(value, dict):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)
    if isinstance(value, (list, tuple)):
        return [_query_value(item) for item in value]
    return value


def _pretty_json(body: Any) -> str:
    # YAML timestamps (example: 2024-01-15) arrive as date objects
    return json.dumps(body, indent=2, ensure_ascii=False, default=str)


def build_curl_example(
    base_url: str,
    method: str,
    path: str,
    query: Optional[Mapping[str, Any]] = None,
    headers: Optional[Mapping[str, str]] = None,
    body: Any = None,
) -> str:
    """Render the request as a multi-line ``curl`` invocation."""
    lines = [f'curl -X {method.upper()} "{build_url(base_url, path, query)}"']
    for name, value in (headers or {}).items():
        lines.append(f'  -H "{name}: {value}"')
    if body is not None:
        lines.append(f"  -d '{_pretty_json(body)}'")
    return " \\\n".join(lines)


def build_script_example(
    base_url: str,
    method: str,
    path: str,
    query: Optional[Mapping[str, Any]] = None,
    headers: Optional[Mapping[str, str]] = None,
    body: Any = None,
) -> str:
    """Render the request as a runnable Python script using ``httpx``.

    The body is embedded as a raw JSON block parsed with :func:`json.loads`;
    single quotes inside it are written as ``\\u0027`` so the raw string
    literal always terminates where the template expects.
    """
    headers_literal = ""
    if headers:
        entries = "".join(f"    {name!r}: {value!r},\n" for name, value in headers.items())
        headers_literal = "{\n" + entries + "}"

    body_json = None
    if body is not None:
        body_json = _pretty_json(body).replace("'", "\\u0027")

    return render(
        "request_script.py.j2",
        method_literal=repr(method.upper()),
        url_literal=repr(build_url(base_url, path, query)),
        headers_literal=headers_literal,
        body_json=body_json,
    )


def sample_parameter(parameter: Mapping[str, Any]) -> Any:
    """Pick a sample value for one query parameter.

    Order: the parameter's ``example``, its first ``examples`` value, the
    schema's ``example`` or ``default``, a Swagger 2 ``default``, then the
    literal ``"sample"``.
    """
    if parameter.get("example") is not None:
        return parameter["example"]

    examples = parameter.get("examples")
    if isinstance(examples, dict) and examples:
        first = next(iter(examples.values()))
        if isinstance(first, dict) and first.get("value") is not None:
            return first["value"]

    schema = parameter.get("schema")
    if isinstance(schema, dict):
        for key in ("example", "default"):
            if schema.get(key) is not None:
                return schema[key]

    if parameter.get("default") is not None:
        return parameter["default"]
    return "sample"


def sample_body(media: Mapping[str, Any]) -> Any:
    """Pick a sample body from a *Media Type Object*.

    Order: ``example``, the ``value`` of the first ``examples`` entry, a
    value synthesized from ``schema``. ``None`` when none is declared.
    """
    if "example" in media:
        return media["example"]

    examples = media.get("examples")
    if isinstance(examples, dict) and examples:
        first = next(iter(examples.values()))
        return first.get("value") if isinstance(first, dict) else None

    if "schema" in media:
        return build_sample_from_schema(media["schema"])
    return None


def build_request_example(
    spec: LoadedSpec,
    operation: IndexedOperation,
    server_index: int = 0,
) -> RequestExample:
    """Assemble a sample request for *operation* and render both forms.

    Args:
        spec: The spec that owns *operation*.
        operation: The operation to exemplify.
        server_index: Which declared server to target; clamped to the
            available range.

    Returns:
        A :class:`~specmcp.models.RequestExample`. The ``Accept`` header is
        always ``application/json``; ``Content-Type`` is set only when the
        operation declares a request body.
    """
    document = open_document(spec.dereferenced, spec.version)
    servers = document.server_urls()
    base_url = servers[min(max(server_index, 0), len(servers) - 1)]

    raw = operation.raw_operation if isinstance(operation.raw_operation, dict) else {}
    query: dict[str, Any] = {}
    for parameter in document.parameters(operation.path, raw):
        # header and cookie parameters are left out; path ones are filled below
        if parameter.get("in") == "query" and parameter.get("name"):
            query[str(parameter["name"])] = sample_parameter(parameter)

    headers: dict[str, str] = {}
    body: Any = None
    media = document.request_body(raw)
    if media is not None:
        headers["Content-Type"] = media.content_type
        body = sample_body(media.media)
    headers["Accept"] = DEFAULT_ACCEPT

    path = fill_path_params(operation.path)
    method = operation.method.value

    return RequestExample(
        spec_id=operation.spec_id,
        operation_id=operation.operation_id,
        method=operation.method,
        path=operation.path,
        base_url=base_url,
        url=build_url(base_url, path, query),
        query=query,
        headers=headers,
        body=body,
        curl=build_curl_example(base_url, method, path, query, headers, body),
        script=build_script_example(base_url, method, path, query, headers, body),
    )


def render_request_example(example: RequestExample) -> str:
    """Render *example* as the Markdown report shown to the agent."""
    return render(
        "request_example.md.j2",
        method=example.method.value,
        path=example.path,
        operation_id=example.operation_id,
        curl=example.curl,
        script=example.script,
    )
