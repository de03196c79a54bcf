"""Prompt templates that embed a spec or an operation for a language model.

Each prompt renders to a short conversation: an assistant message fixing
the role, then a user message carrying the instructions and the embedded
JSON (taken from an ``openapi://`` resource). The server turns these
messages into MCP prompt messages.
"""

from __future__ import annotations

from typing import NamedTuple

from specmcp.rendering import render


class PromptMessage(NamedTuple):
    role: str
    text: str


API_OVERVIEW_ROLE = "You are an API architect. Summarize the given OpenAPI document concisely."
REQUEST_DRAFTER_ROLE = (
    "You are an engineer helping to implement an API client. "
    "Write near-runnable request examples with explanatory comments."
)


def api_overview_messages(spec_json: str) -> list[PromptMessage]:
    """Messages asking for a summary of the document in *spec_json*."""
    return [
        PromptMessage("assistant", API_OVERVIEW_ROLE),
        PromptMessage("user", render("api_overview.md.j2", spec_json=spec_json)),
    ]


def api_request_drafter_messages(operation_json: str) -> list[PromptMessage]:
    """Messages asking for request examples of the operation in *operation_json*."""
    return [
        PromptMessage("assistant", REQUEST_DRAFTER_ROLE),
        PromptMessage(
            "user", render("api_request_drafter.md.j2", operation_json=operation_json)
        ),
    ]
