"""MCP server wiring: tools, resources, and prompts over one registry.

:func:`build_server` registers every :class:`~specmcp.tools.SpecTools`
handler as a tool, the ``openapi://`` resources from
:mod:`specmcp.resources`, and the prompt templates from
:mod:`specmcp.prompts` on a :class:`~mcp.server.fastmcp.FastMCP` instance.
:func:`serve` bootstraps the configured sources and runs the stdio
transport.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Optional

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.prompts import base

from specmcp import prompts, resources
from specmcp.config import bootstrap
from specmcp.prompts import PromptMessage
from specmcp.registry import SpecRegistry
from specmcp.tools import SpecTools

logger = logging.getLogger(__name__)

SERVER_NAME = "openapi-mcp-server"


def build_server(registry: SpecRegistry) -> FastMCP:
    """Create a FastMCP server exposing *registry*."""
    tools = SpecTools(registry)
    mcp = FastMCP(SERVER_NAME, instructions=_instructions())

    # --- tools ---

    @mcp.tool(
        name="add_spec",
        description="Load and index an OpenAPI/Swagger document from a URL or local path",
    )
    async def add_spec(spec_id: str, url_or_path: str) -> dict[str, Any]:
        return await tools.add_spec(spec_id, url_or_path)

    @mcp.tool(name="remove_spec", description="Remove a loaded spec by id")
    def remove_spec(spec_id: str) -> dict[str, Any]:
        return tools.remove_spec(spec_id)

    @mcp.tool(name="reload_spec", description="Reload and reindex a spec from its original source")
    async def reload_spec(spec_id: str) -> dict[str, Any]:
        return await tools.reload_spec(spec_id)

    @mcp.tool(
        name="validate_spec",
        description="Validate a document (URL or path) without loading it into the registry",
    )
    async def validate_spec(url_or_path: str) -> dict[str, Any]:
        return await tools.validate_spec(url_or_path)

    @mcp.tool(name="list_specs", description="List all loaded spec ids and summaries")
    def list_specs() -> list[dict[str, Any]]:
        return tools.list_specs()

    @mcp.tool(
        name="list_operations",
        description=(
            "List operations from one spec or across all specs. "
            "Filter by tag, method, path regex, or text."
        ),
    )
    def list_operations(
        spec_id: Optional[str] = None,
        tag: Optional[str] = None,
        method: Optional[str] = None,
        path_pattern: Optional[str] = None,
        text: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[dict[str, Any]]:
        return tools.list_operations(
            spec_id=spec_id,
            tag=tag,
            method=method,
            path_pattern=path_pattern,
            text=text,
            limit=limit,
        )

    @mcp.tool(
        name="get_operation",
        description=(
            "Get a single operation by (spec_id + operation_id) or by "
            "(spec_id + method + path). If spec_id is omitted, operation_id "
            "must be globally unique."
        ),
    )
    def get_operation(
        spec_id: Optional[str] = None,
        operation_id: Optional[str] = None,
        method: Optional[str] = None,
        path: Optional[str] = None,
    ) -> dict[str, Any]:
        return tools.get_operation(
            spec_id=spec_id, operation_id=operation_id, method=method, path=path
        )

    @mcp.tool(
        name="generate_request_example",
        description="Generate cURL and Python examples for an operation with sample values",
    )
    def generate_request_example(
        spec_id: Optional[str] = None,
        operation_id: Optional[str] = None,
        method: Optional[str] = None,
        path: Optional[str] = None,
        server_index: int = 0,
    ) -> str:
        return tools.generate_request_example(
            spec_id=spec_id,
            operation_id=operation_id,
            method=method,
            path=path,
            server_index=server_index,
        )

    # --- resources ---

    @mcp.resource(
        "openapi://{spec_id}/spec",
        name="openapi-spec",
        description="Dereferenced OpenAPI/Swagger document",
        mime_type="application/json",
    )
    def spec_resource(spec_id: str) -> str:
        return _dumps(resources.spec_document(registry, spec_id))

    @mcp.resource(
        "openapi://{spec_id}/operations",
        name="openapi-operations",
        description="Indexed operations for a spec",
        mime_type="application/json",
    )
    def operations_resource(spec_id: str) -> str:
        return _dumps(resources.spec_operations(registry, spec_id))

    @mcp.resource(
        "openapi://{spec_id}/operations/{operation_key}",
        name="openapi-operation",
        description="Single operation, keyed by operationId or percent-encoded method:path",
        mime_type="application/json",
    )
    def operation_resource(spec_id: str, operation_key: str) -> str:
        return _dumps(resources.operation_detail(registry, spec_id, operation_key))

    # --- prompts ---

    @mcp.prompt(
        name="api_overview",
        description="Summarize an OpenAPI document: servers, main resources, representative endpoints.",
    )
    def api_overview(spec_json: str) -> list[base.Message]:
        return _to_messages(prompts.api_overview_messages(spec_json))

    @mcp.prompt(
        name="api_request_drafter",
        description="Draft practical request examples (cURL / Python) for an operation.",
    )
    def api_request_drafter(operation_json: str) -> list[base.Message]:
        return _to_messages(prompts.api_request_drafter_messages(operation_json))

    return mcp


def serve(sources: Optional[str] = None) -> None:
    """Bootstrap *sources* into a fresh registry and serve it over stdio."""
    registry = SpecRegistry()
    loaded = asyncio.run(bootstrap(registry, sources))
    logger.info("Bootstrapped %d spec(s)", len(loaded))
    server = build_server(registry)
    logger.info("%s (stdio) ready", SERVER_NAME)
    server.run(transport="stdio")


def _dumps(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)


def _to_messages(messages: list[PromptMessage]) -> list[base.Message]:
    return [
        base.AssistantMessage(m.text) if m.role == "assistant" else base.UserMessage(m.text)
        for m in messages
    ]


def _instructions() -> str:
    return (
        "OpenAPI registry. Load documents with add_spec, discover operations with "
        "list_operations, inspect one with get_operation, and draft requests with "
        "generate_request_example. Resources: openapi://{spec_id}/spec, "
        "openapi://{spec_id}/operations, openapi://{spec_id}/operations/{operation_key}."
    )
