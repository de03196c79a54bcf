"""Typer application and CLI entry point for specmcp.

The ``serve`` command is the normal way to run specmcp: it bootstraps the
configured sources and speaks MCP over stdio. The remaining commands
(``validate``, ``operations``, ``example``) run the same loader, search and
example builder against a single document, which is handy for checking a
source before pointing an agent at it.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. :class:`~specmcp.exceptions.SpecmcpError` instances are
reported on stderr and mapped to their ``exit_code``.

See Also:
    :mod:`specmcp.config`: Bootstrap source resolution.
    :mod:`specmcp.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import asyncio
import signal
import sys
from typing import Any, Optional

import typer

from specmcp import __version__
from specmcp.exceptions import InvalidUsageError, SpecmcpError
from specmcp.exit_codes import EXIT_GENERIC_FAILURE, EXIT_LOAD_ERROR, EXIT_NOT_FOUND
from specmcp.registry import SpecRegistry

app = typer.Typer(
    name="specmcp",
    help="Serve OpenAPI/Swagger documents to language-model agents over MCP.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

# Spec id used by the single-document commands.
LOCAL_SPEC_ID = "local"


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"specmcp {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output and logging."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~specmcp.output.OutputManager` and the
    stderr log handler from CLI flags.

    Args:
        version: If ``True``, print the version string and exit.
        json_output: Force JSON output format.
        plain_output: Force plain-text output format.
        no_color: Disable all colour and Rich markup.
        quiet: Suppress non-essential diagnostic output.
        verbose: Enable debug-level diagnostics and log records.
    """
    from specmcp.output import OutputFormat, OutputManager, configure_logging, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))
    configure_logging(verbose=verbose, no_color=no_color)


# ------------------------------------------------------------------ #
# Commands
# ------------------------------------------------------------------ #


@app.command("serve")
def serve_command(
    sources: Optional[str] = typer.Option(
        None,
        "--sources",
        "-s",
        help="JSON array or path to a JSON file of {id, urlOrPath} entries. "
        "Overrides OPENAPI_SOURCES.",
    ),
) -> None:
    """Bootstrap the configured specs and serve them over MCP stdio."""
    from specmcp.output import info
    from specmcp.server import serve

    info("Serving MCP over stdio (Ctrl-C to stop)")
    serve(sources)


@app.command("validate")
def validate_command(
    source: str = typer.Argument(help="URL or path of the document."),
) -> None:
    """Check that SOURCE parses as Swagger 2.0 or OpenAPI 3.x."""
    from specmcp.output import format_response, warning
    from specmcp.parser import validate_document

    result = asyncio.run(validate_document(source))
    format_response(result.model_dump(exclude_none=True))
    if not result.valid:
        warning(f"{source} is not a usable OpenAPI document")
        raise typer.Exit(code=EXIT_LOAD_ERROR)


@app.command("operations")
def operations_command(
    source: str = typer.Argument(help="URL or path of the document."),
    tag: Optional[str] = typer.Option(None, "--tag", "-t", help="Only operations with this tag."),
    method: Optional[str] = typer.Option(None, "--method", "-m", help="HTTP method, any case."),
    path_pattern: Optional[str] = typer.Option(
        None, "--path-pattern", "-p", help="Regular expression searched in the path."
    ),
    text: Optional[str] = typer.Option(
        None, "--text", help="Substring of summary, description, operationId, or path."
    ),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", help="Maximum results."),
) -> None:
    """List the operations of SOURCE, optionally filtered."""
    from specmcp.output import print_table

    registry = _load_single(source)
    ops = registry.search_operations(
        spec_id=LOCAL_SPEC_ID,
        tag=tag,
        method=method,
        path_pattern=path_pattern,
        text=text,
        limit=limit,
    )
    rows = [
        [
            op.method.value.upper(),
            op.path,
            op.operation_id or "",
            ", ".join(op.tags or []),
            op.summary or "",
        ]
        for op in ops
    ]
    print_table(
        ["Method", "Path", "Operation ID", "Tags", "Summary"],
        rows,
        title=f"Operations ({len(rows)})",
    )


@app.command("example")
def example_command(
    source: str = typer.Argument(help="URL or path of the document."),
    operation_id: Optional[str] = typer.Option(
        None, "--operation-id", "-o", help="operationId of the operation."
    ),
    method: Optional[str] = typer.Option(None, "--method", "-m", help="HTTP method."),
    path: Optional[str] = typer.Option(None, "--path", "-p", help="Path template, e.g. /pets/{petId}."),
    server_index: int = typer.Option(0, "--server-index", help="Which declared server to target."),
) -> None:
    """Print cURL and Python request examples for one operation of SOURCE."""
    from specmcp.examples import build_request_example, render_request_example
    from specmcp.output import OutputFormat, error, format_response, get_output, print_data

    if not operation_id and not (method and path):
        raise InvalidUsageError("Pass --operation-id, or both --method and --path.")

    registry = _load_single(source)
    op = registry.find_operation(
        spec_id=LOCAL_SPEC_ID, operation_id=operation_id, method=method, path=path
    )
    spec = registry.get(LOCAL_SPEC_ID)
    if op is None or spec is None:
        error("Operation not found")
        raise typer.Exit(code=EXIT_NOT_FOUND)

    example = build_request_example(spec, op, server_index=server_index)
    if get_output().format == OutputFormat.JSON:
        format_response(example.model_dump(mode="json"))
    else:
        print_data(render_request_example(example))


def _load_single(source: str) -> SpecRegistry:
    """A fresh registry holding only *source*, under :data:`LOCAL_SPEC_ID`."""
    from specmcp.output import debug

    registry = SpecRegistry()
    spec = asyncio.run(registry.add(LOCAL_SPEC_ID, source))
    debug(f"Loaded {source}: {spec.version.value}, {len(spec.operations)} operations")
    return registry


# ------------------------------------------------------------------ #
# Entry point
# ------------------------------------------------------------------ #


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def main() -> None:
    """CLI entry point invoked by the ``specmcp`` console script.

    :class:`~specmcp.exceptions.SpecmcpError` instances cause a clean exit
    with the error's ``exit_code``. Anything else is reported and exits
    with a generic failure.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app(standalone_mode=True)
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except SpecmcpError as exc:
        from specmcp.output import error

        error(str(exc))
        sys.exit(exc.exit_code)
    except Exception as exc:
        from specmcp.output import error

        error(f"Unexpected error: {exc}")
        sys.exit(EXIT_GENERIC_FAILURE)
