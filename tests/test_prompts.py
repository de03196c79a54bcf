"""Tests for specmcp.prompts."""

from __future__ import annotations

import json

from specmcp.prompts import (
    API_OVERVIEW_ROLE,
    REQUEST_DRAFTER_ROLE,
    api_overview_messages,
    api_request_drafter_messages,
)


class TestApiOverview:
    def test_messages(self) -> None:
        spec_json = json.dumps({"openapi": "3.0.0", "info": {"title": "T"}})
        messages = api_overview_messages(spec_json)

        assert [m.role for m in messages] == ["assistant", "user"]
        assert messages[0].text == API_OVERVIEW_ROLE
        assert "Server URLs" in messages[1].text
        assert messages[1].text.endswith(spec_json)

    def test_json_is_embedded_verbatim(self) -> None:
        payload = '{"description": "<b>&amp;</b>"}'
        assert payload in api_overview_messages(payload)[1].text


class TestApiRequestDrafter:
    def test_messages(self) -> None:
        operation_json = json.dumps({"operationId": "listPets"})
        messages = api_request_drafter_messages(operation_json)

        assert messages[0].role == "assistant"
        assert messages[0].text == REQUEST_DRAFTER_ROLE
        assert messages[1].role == "user"
        assert "cURL" in messages[1].text
        assert "Python httpx" in messages[1].text
        assert operation_json in messages[1].text
