"""Tests for specmcp.examples."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from specmcp.examples import (
    build_curl_example,
    build_request_example,
    build_script_example,
    build_url,
    fill_path_params,
    render_request_example,
    sample_body,
    sample_parameter,
)
from specmcp.registry import SpecRegistry
from specmcp.sampler import NIL_UUID


# ---------------------------------------------------------------------------
# fill_path_params
# ---------------------------------------------------------------------------


class TestFillPathParams:
    def test_id_suffix_and_other_names(self) -> None:
        assert fill_path_params("/pets/{petId}/{name}") == "/pets/123/sample"

    @pytest.mark.parametrize("name", ["id", "userId", "accountID", "paid"])
    def test_id_suffix_variants(self, name: str) -> None:
        assert fill_path_params("/x/{" + name + "}") == "/x/123"

    @pytest.mark.parametrize("name", ["identity", "slug", "iD"])
    def test_other_names(self, name: str) -> None:
        assert fill_path_params("/x/{" + name + "}") == "/x/sample"

    def test_path_without_placeholders(self) -> None:
        assert fill_path_params("/health") == "/health"


# ---------------------------------------------------------------------------
# build_url
# ---------------------------------------------------------------------------


class TestBuildUrl:
    def test_strips_trailing_slashes(self) -> None:
        assert build_url("https://api.example.com/v1//", "/pets") == "https://api.example.com/v1/pets"

    def test_query_encoding(self) -> None:
        url = build_url("https://h.example", "/s", {"q": "a b&c", "n": 2})
        params = httpx.URL(url).params
        assert params["q"] == "a b&c"
        assert params["n"] == "2"

    def test_none_values_skipped(self) -> None:
        assert build_url("https://h.example", "/s", {"a": None}) == "https://h.example/s"

    def test_booleans_lowercase(self) -> None:
        assert build_url("https://h.example", "/s", {"flag": True}) == "https://h.example/s?flag=true"

    def test_lists_repeat_and_mappings_are_json(self) -> None:
        url = build_url("https://h.example", "/s", {"id": [1, 2], "filter": {"a": 1}})
        params = httpx.URL(url).params
        assert params.get_list("id") == ["1", "2"]
        assert params["filter"] == '{"a":1}'


# ---------------------------------------------------------------------------
# cURL and script renderers
# ---------------------------------------------------------------------------


class TestCurlExample:
    def test_get_without_body(self) -> None:
        curl = build_curl_example(
            "https://h.example", "get", "/pets", {"limit": 5}, {"Accept": "application/json"}
        )
        assert curl == (
            'curl -X GET "https://h.example/pets?limit=5" \\\n'
            '  -H "Accept: application/json"'
        )

    def test_post_with_body(self) -> None:
        curl = build_curl_example(
            "https://h.example",
            "post",
            "/pets",
            headers={"Content-Type": "application/json"},
            body={"name": "Rex"},
        )
        lines = curl.split(" \\\n")
        assert lines[0] == 'curl -X POST "https://h.example/pets"'
        assert lines[1] == '  -H "Content-Type: application/json"'
        assert lines[2] == "  -d '{\n  \"name\": \"Rex\"\n}'"

    def test_no_headers_no_body(self) -> None:
        assert build_curl_example("https://h.example", "delete", "/pets/1") == (
            'curl -X DELETE "https://h.example/pets/1"'
        )


class TestScriptExample:
    def test_script_without_body(self) -> None:
        script = build_script_example(
            "https://h.example", "get", "/pets", headers={"Accept": "application/json"}
        )
        assert "import json" not in script
        assert "import httpx" in script
        assert "'GET'" in script
        assert "'https://h.example/pets'" in script
        assert "'Accept': 'application/json'" in script
        assert "json=payload" not in script
        compile(script, "<example>", "exec")

    def test_script_with_body(self) -> None:
        script = build_script_example(
            "https://h.example", "post", "/pets", body={"name": "O'Brien"}
        )
        assert script.startswith("import json")
        assert "json=payload" in script
        assert "headers=" not in script
        assert "O\\u0027Brien" in script
        compile(script, "<example>", "exec")


# ---------------------------------------------------------------------------
# Parameter and body sampling
# ---------------------------------------------------------------------------


class TestSampleParameter:
    def test_parameter_example(self) -> None:
        assert sample_parameter({"name": "q", "example": "cats", "schema": {"example": "dogs"}}) == "cats"

    def test_first_examples_value(self) -> None:
        param = {"name": "q", "examples": {"one": {"value": "v1"}, "two": {"value": "v2"}}}
        assert sample_parameter(param) == "v1"

    def test_schema_example_then_default(self) -> None:
        assert sample_parameter({"schema": {"example": 3, "default": 4}}) == 3
        assert sample_parameter({"schema": {"default": 4}}) == 4

    def test_swagger_default(self) -> None:
        assert sample_parameter({"name": "page", "type": "integer", "default": 1}) == 1

    def test_fallback(self) -> None:
        assert sample_parameter({"name": "q", "schema": {"type": "integer"}}) == "sample"


class TestSampleBody:
    def test_media_example(self) -> None:
        assert sample_body({"example": {"a": 1}, "schema": {"type": "object"}}) == {"a": 1}

    def test_first_examples_value(self) -> None:
        assert sample_body({"examples": {"x": {"value": [1]}}}) == [1]

    def test_schema_sampled(self) -> None:
        assert sample_body({"schema": {"type": "integer"}}) == 0

    def test_nothing_declared(self) -> None:
        assert sample_body({}) is None


# ---------------------------------------------------------------------------
# build_request_example
# ---------------------------------------------------------------------------


class TestBuildRequestExample:
    """Assemble requests for operations of loaded specs."""

    def test_get_with_query_parameters(self, loaded_registry: SpecRegistry) -> None:
        spec = loaded_registry.get("petstore")
        op = loaded_registry.find_operation(spec_id="petstore", operation_id="listPets")
        example = build_request_example(spec, op)

        assert example.base_url == "https://api.petstore.example.com/v1"
        assert example.query == {"limit": 10, "status": "available"}
        assert example.url == "https://api.petstore.example.com/v1/pets?limit=10&status=available"
        assert example.headers == {"Accept": "application/json"}
        assert example.body is None
        assert "-d" not in example.curl

    def test_post_with_sampled_body(self, loaded_registry: SpecRegistry) -> None:
        spec = loaded_registry.get("petstore")
        op = loaded_registry.find_operation(spec_id="petstore", operation_id="createPet")
        example = build_request_example(spec, op)

        assert example.headers == {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        assert example.body == {
            "id": 0,
            "name": "Rex",
            "tag": "string",
            "status": "available",
            "owner_id": NIL_UUID,
        }
        assert "-d '" in example.curl
        assert "json=payload" in example.script

    def test_path_filled_and_parameter_example_used(self, loaded_registry: SpecRegistry) -> None:
        spec = loaded_registry.get("petstore")
        op = loaded_registry.find_operation(spec_id="petstore", operation_id="listOrders")
        example = build_request_example(spec, op)

        assert example.path == "/stores/{storeId}/orders"
        assert example.url == "https://api.petstore.example.com/v1/stores/123/orders?since=2024-01-01"

    def test_server_index_selects_and_clamps(self, loaded_registry: SpecRegistry) -> None:
        spec = loaded_registry.get("petstore")
        op = loaded_registry.find_operation(spec_id="petstore", operation_id="deletePet")

        second = build_request_example(spec, op, server_index=1)
        assert second.url == "http://localhost:8080/v1/pets/123"

        clamped = build_request_example(spec, op, server_index=99)
        assert clamped.base_url == second.base_url

    def test_swagger_operation(self, loaded_registry: SpecRegistry) -> None:
        spec = loaded_registry.get("users")
        op = loaded_registry.find_operation(spec_id="users", operation_id="createUser")
        example = build_request_example(spec, op)

        assert example.base_url == "https://api.example.com/v1"
        assert example.headers["Content-Type"] == "application/x-www-form-urlencoded"
        assert example.body == {"id": NIL_UUID, "email": "string", "active": True}

    def test_swagger_query_default(self, loaded_registry: SpecRegistry) -> None:
        spec = loaded_registry.get("users")
        op = loaded_registry.find_operation(spec_id="users", operation_id="listUsers")
        assert build_request_example(spec, op).url == "https://api.example.com/v1/users?page=1"

    def test_widget_example(self, registry: SpecRegistry) -> None:
        asyncio.run(registry.add("widgets", "widgets"))
        op = registry.find_operation(operation_id="getWidget")
        example = build_request_example(registry.get("widgets"), op)

        assert example.url == "https://widgets.example.com/widgets/123"
        assert example.headers == {"Accept": "application/json"}
        assert example.body is None
        assert '-H "Accept: application/json"' in example.curl


    def test_yaml_date_example_in_body(self, tmp_path) -> None:
        document = tmp_path / "events.yaml"
        document.write_text(
            "openapi: 3.0.3\n"
            "info: {title: Events, version: '1'}\n"
            "servers:\n"
            "  - url: 'https://events.example.com'\n"
            "paths:\n"
            "  /events:\n"
            "    post:\n"
            "      operationId: createEvent\n"
            "      requestBody:\n"
            "        content:\n"
            "          application/json:\n"
            "            schema:\n"
            "              type: object\n"
            "              properties:\n"
            "                starts_on: {type: string, format: date, example: 2024-01-15}\n"
            "      responses: {'201': {description: Created}}\n",
            encoding="utf-8",
        )
        registry = SpecRegistry()
        asyncio.run(registry.add("events", str(document)))
        op = registry.find_operation(operation_id="createEvent")
        example = build_request_example(registry.get("events"), op)

        assert '"starts_on": "2024-01-15"' in example.curl
        assert '"starts_on": "2024-01-15"' in example.script
        assert example.model_dump(mode="json")["body"] == {"starts_on": "2024-01-15"}


class TestRenderRequestExample:
    def test_markdown_sections(self, loaded_registry: SpecRegistry) -> None:
        spec = loaded_registry.get("petstore")
        op = loaded_registry.find_operation(spec_id="petstore", operation_id="showPetById")
        text = render_request_example(build_request_example(spec, op))

        assert text.startswith("# GET /pets/{petId} (operationId: showPetById)")
        assert "## cURL\n\n```bash\ncurl -X GET" in text
        assert "## Python (httpx)\n\n```python\nimport httpx" in text
        assert text.endswith("```")

    def test_heading_without_operation_id(self, registry: SpecRegistry, memory_loader) -> None:
        memory_loader.documents["anon"] = {
            "openapi": "3.1.0",
            "info": {"title": "Anon", "version": "1"},
            "paths": {"/ping": {"head": {}}},
        }
        asyncio.run(registry.add("anon", "anon"))
        op = registry.find_operation(spec_id="anon", method="HEAD", path="/ping")
        text = render_request_example(build_request_example(registry.get("anon"), op))
        assert text.splitlines()[0] == "# HEAD /ping"
        assert 'curl -X HEAD "/ping"' in text
