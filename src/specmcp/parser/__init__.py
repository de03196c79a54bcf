"""Document parser -- load, dereference, classify, and index OpenAPI documents.

This sub-package turns a document source (local file or remote URL, JSON or
YAML, Swagger 2.0 or OpenAPI 3.x) into the pieces the registry stores.

Typical usage::

    from specmcp.parser import index_operations, load_and_dereference

    loaded = await load_and_dereference("petstore.yaml")
    operations = index_operations("petstore", loaded.dereferenced)

Sub-modules:

* :mod:`~specmcp.parser.loader` -- I/O layer, format detection, version
  detection, and standalone validation.
* :mod:`~specmcp.parser.resolver` -- ``$ref`` dereferencing with cycle
  detection.
* :mod:`~specmcp.parser.document` -- per-version views (servers, request
  bodies, parameters).
* :mod:`~specmcp.parser.indexer` -- flattening into
  :class:`~specmcp.models.IndexedOperation` records.
"""

from specmcp.parser.document import ApiDocument, open_document
from specmcp.parser.indexer import index_operations
from specmcp.parser.loader import (
    LoadedDocument,
    detect_version,
    load_and_dereference,
    load_document,
    validate_document,
)

__all__ = [
    "ApiDocument",
    "LoadedDocument",
    "detect_version",
    "index_operations",
    "load_and_dereference",
    "load_document",
    "open_document",
    "validate_document",
]
