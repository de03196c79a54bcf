"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~specmcp.exceptions.SpecmcpError` subclass.

Example::

    $ specmcp validate missing.yaml
    $ echo $?
    7   # EXIT_LOAD_ERROR -- the document could not be loaded
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments (e.g. a bad regex)."""

EXIT_NOT_FOUND = 4
"""The requested spec, operation, or resource is not known."""

EXIT_LOAD_ERROR = 7
"""The OpenAPI document could not be fetched, parsed, or dereferenced."""
