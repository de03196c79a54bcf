"""Exception hierarchy for specmcp.

All exceptions inherit from :class:`SpecmcpError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`specmcp.exit_codes`.
The CLI entry point catches ``SpecmcpError`` and exits with the matching
code; the MCP tool layer turns load failures into structured payloads.

Subclass hierarchy::

    SpecmcpError (exit 1)
    +-- InvalidUsageError   (exit 2)
    +-- NotFoundError       (exit 4)
    +-- LoadError           (exit 7)
    +-- ConfigError         (exit 1)

Ambiguous lookups are deliberately *not* an error: an operationId shared by
several operations simply resolves to ``None``.
"""

from specmcp.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_LOAD_ERROR,
    EXIT_NOT_FOUND,
)


class SpecmcpError(Exception):
    """Base exception for all specmcp errors.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(SpecmcpError):
    """Raised for invalid caller input, such as a malformed path pattern."""

    exit_code = EXIT_INVALID_USAGE


class NotFoundError(SpecmcpError):
    """Raised when a spec id or resource key is unknown."""

    exit_code = EXIT_NOT_FOUND


class LoadError(SpecmcpError):
    """Raised when a document cannot be fetched, parsed, or dereferenced."""

    exit_code = EXIT_LOAD_ERROR


class ConfigError(SpecmcpError):
    """Raised when the bootstrap source list cannot be read or validated."""

    exit_code = EXIT_GENERIC_FAILURE
