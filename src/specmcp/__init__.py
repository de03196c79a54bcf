"""specmcp -- Index OpenAPI/Swagger documents and serve them to LLM agents.

This package loads one or more OpenAPI 3.x or Swagger 2.0 documents into an
in-memory :class:`~specmcp.registry.SpecRegistry`, flattens every document
into addressable operations, and exposes discovery, inspection, and
sample-request generation over the Model Context Protocol.

Typical workflow::

    OPENAPI_SOURCES='[{"id": "petstore", "urlOrPath": "petstore.yaml"}]' \\
        specmcp serve

Modules:
    registry: The spec store plus operation resolution and search.
    models: Pydantic models shared across the entire package.
    sampler: Representative values synthesized from JSON-Schema fragments.
    examples: cURL and Python request examples for indexed operations.
    tools: Structured payloads for the MCP tool surface.
    server: FastMCP wiring (tools, resources, prompts).
    config: Bootstrap source list resolution.
    exceptions: Exception hierarchy with exit-code mapping.
"""

__version__ = "1.0.0"
