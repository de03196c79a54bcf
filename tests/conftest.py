"""Shared test fixtures for specmcp.

Provides raw fixture documents, an in-memory document loader for the
registry, pre-populated registries, output state management, and a CLI
runner. These fixtures are automatically discovered by pytest and
available to all test modules without explicit imports.

Coroutines are driven with :func:`asyncio.run` from synchronous tests.
"""

from __future__ import annotations

import asyncio
import copy
import json
import logging
from pathlib import Path
from typing import Any, Callable

import pytest

from specmcp.exceptions import LoadError
from specmcp.output import OutputFormat, OutputManager, reset_output, set_output
from specmcp.parser.loader import LoadedDocument, detect_version
from specmcp.parser.resolver import resolve_refs
from specmcp.registry import SpecRegistry


FIXTURES_DIR = Path(__file__).parent / "fixtures"


def load_fixture(name: str) -> dict[str, Any]:
    with open(FIXTURES_DIR / name) as f:
        return json.load(f)


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time.  When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale
    ("I/O operation on closed file").  Resetting forces a fresh manager
    to be created on next use.
    """
    yield
    reset_output()


@pytest.fixture(autouse=True)
def _restore_root_logger() -> None:
    """Undo log handlers installed by the CLI callback during a test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture(autouse=True)
def _isolated_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's bootstrap configuration out of every test."""
    monkeypatch.delenv("OPENAPI_SOURCES", raising=False)
    monkeypatch.delenv("SPECMCP_HTTP_TIMEOUT", raising=False)
    monkeypatch.chdir(tmp_path)


# ---------------------------------------------------------------------------
# Raw document fixtures (plain dicts loaded from JSON files)
# ---------------------------------------------------------------------------


@pytest.fixture
def petstore_raw() -> dict[str, Any]:
    """Raw petstore OpenAPI 3.0 document."""
    return load_fixture("petstore_3.0.json")


@pytest.fixture
def swagger_raw() -> dict[str, Any]:
    """Raw Swagger 2.0 users document."""
    return load_fixture("swagger_2.0.json")


@pytest.fixture
def widgets_raw() -> dict[str, Any]:
    """Raw single-operation widgets document."""
    return load_fixture("widgets.json")


@pytest.fixture
def petstore_path() -> str:
    return str(FIXTURES_DIR / "petstore_3.0.json")


@pytest.fixture
def swagger_path() -> str:
    return str(FIXTURES_DIR / "swagger_2.0.json")


@pytest.fixture
def widgets_path() -> str:
    return str(FIXTURES_DIR / "widgets.json")


# ---------------------------------------------------------------------------
# Registry fixtures
# ---------------------------------------------------------------------------


class MemoryLoader:
    """Registry loader serving documents from a dict, keyed by source.

    ``documents`` may be edited between calls to simulate a source that
    changes (or disappears) between a load and a reload. ``calls`` records
    every requested source.
    """

    def __init__(self, documents: dict[str, dict[str, Any]]) -> None:
        self.documents = documents
        self.calls: list[str] = []

    async def __call__(self, source: str) -> LoadedDocument:
        self.calls.append(source)
        if source not in self.documents:
            raise LoadError(f"Document file not found: {source}")
        raw = copy.deepcopy(self.documents[source])
        return LoadedDocument(
            raw=raw, dereferenced=resolve_refs(raw), version=detect_version(raw)
        )


@pytest.fixture
def memory_loader(
    petstore_raw: dict[str, Any],
    swagger_raw: dict[str, Any],
    widgets_raw: dict[str, Any],
) -> MemoryLoader:
    """A loader knowing the sources ``petstore``, ``swagger`` and ``widgets``."""
    return MemoryLoader(
        {"petstore": petstore_raw, "swagger": swagger_raw, "widgets": widgets_raw}
    )


@pytest.fixture
def registry(memory_loader: MemoryLoader) -> SpecRegistry:
    """An empty registry backed by :class:`MemoryLoader`."""
    return SpecRegistry(loader=memory_loader)


@pytest.fixture
def loaded_registry(registry: SpecRegistry) -> SpecRegistry:
    """A registry holding ``petstore`` (OpenAPI 3.0) and ``users`` (Swagger 2.0)."""
    asyncio.run(registry.add("petstore", "petstore"))
    asyncio.run(registry.add("users", "swagger"))
    return registry


@pytest.fixture
def add_specs(registry: SpecRegistry) -> Callable[..., SpecRegistry]:
    """Factory adding ``(spec_id, source)`` pairs to :func:`registry`."""

    def _add(*pairs: tuple[str, str]) -> SpecRegistry:
        for spec_id, source in pairs:
            asyncio.run(registry.add(spec_id, source))
        return registry

    return _add


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a quiet PLAIN-format output manager for the test."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def json_output() -> OutputManager:
    """Install a JSON-format output manager for the test."""
    output = OutputManager(format=OutputFormat.JSON)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
