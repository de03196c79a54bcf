"""Dereference ``$ref`` JSON Reference pointers in OpenAPI/Swagger documents.

Documents use ``$ref`` pointers (e.g. ``{"$ref": "#/components/schemas/Pet"}``)
to avoid repetition. :func:`resolve_refs` builds a new tree in which every
pointer is replaced by the object it targets:

* **Internal** references (``#/...``) are followed within the document.
* **Relative file** references (``common.yaml#/Pet``) are followed when the
  document itself was loaded from a file; the referenced files are fetched
  through the caller-supplied ``fetch`` function.
* **Remote** references (``https://...``) are rejected with
  :class:`~specmcp.exceptions.LoadError`.

Every distinct target is resolved once and the result is shared by all
pointers to it. A pointer that refers back to a target currently being
resolved (a cycle, common in tree-shaped schemas) is kept as a
``{"$ref": ...}`` mapping at the cycle point.

The input document is never mutated.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Optional
from urllib.parse import unquote

from specmcp.exceptions import LoadError

Fetch = Callable[[Path], dict[str, Any]]

_ROOT = "<root>"


def resolve_refs(
    document: dict[str, Any],
    location: Optional[str] = None,
    fetch: Optional[Fetch] = None,
) -> dict[str, Any]:
    """Return a dereferenced copy of *document*.

    Args:
        document: The parsed document, as returned by
            :func:`~specmcp.parser.loader.load_document`.
        location: Filesystem path the document was read from. Required for
            relative file references; ``None`` allows internal references
            only.
        fetch: Loads a referenced file. Required for relative file
            references.

    Returns:
        A new tree with all resolvable ``$ref`` pointers replaced.

    Raises:
        LoadError: If a pointer targets a missing location, or refers to a
            remote or otherwise unsupported document.

    Example::

        raw = {"paths": {"/pets": {"get": {"responses": {
            "200": {"$ref": "#/components/responses/Pets"}}}}},
            "components": {"responses": {"Pets": {"description": "ok"}}}}
        resolve_refs(raw)["paths"]["/pets"]["get"]["responses"]["200"]
        # {'description': 'ok'}
    """
    return _Dereferencer(document, location, fetch).run()


class _Dereferencer:
    """Single-use walker holding the document cache and resolved targets."""

    def __init__(
        self,
        document: dict[str, Any],
        location: Optional[str],
        fetch: Optional[Fetch],
    ) -> None:
        self._root_key = str(Path(location).expanduser().resolve()) if location else _ROOT
        self._documents: dict[str, Any] = {self._root_key: document}
        self._resolved: dict[str, Any] = {}
        self._fetch = fetch

    def run(self) -> dict[str, Any]:
        return self._walk(self._documents[self._root_key], self._root_key, ())

    def _walk(self, node: Any, doc_key: str, stack: tuple[str, ...]) -> Any:
        if isinstance(node, dict):
            ref = node.get("$ref")
            if isinstance(ref, str):
                return self._dereference(ref, doc_key, stack)
            return {key: self._walk(value, doc_key, stack) for key, value in node.items()}
        if isinstance(node, list):
            return [self._walk(item, doc_key, stack) for item in node]
        return node

    def _dereference(self, ref: str, doc_key: str, stack: tuple[str, ...]) -> Any:
        target_key, pointer = self._locate(ref, doc_key)
        absolute = f"{target_key}#{pointer}"
        if absolute in stack:
            return {"$ref": ref}
        if absolute in self._resolved:
            return self._resolved[absolute]

        target = follow_pointer(self._document(target_key), pointer, ref)
        resolved = self._walk(target, target_key, stack + (absolute,))
        self._resolved[absolute] = resolved
        return resolved

    def _locate(self, ref: str, doc_key: str) -> tuple[str, str]:
        """Split *ref* into (document key, JSON pointer)."""
        if ref.startswith("#"):
            return doc_key, ref[1:]

        file_part, _, fragment = ref.partition("#")
        if "://" in file_part:
            raise LoadError(f"Remote $ref not supported: {ref}")
        if doc_key == _ROOT or self._fetch is None:
            raise LoadError(
                f"External $ref not supported: {ref}. "
                "Relative file references require a document loaded from a file."
            )
        target = (Path(doc_key).parent / unquote(file_part)).resolve()
        return str(target), fragment

    def _document(self, key: str) -> Any:
        if key not in self._documents:
            if self._fetch is None:
                raise LoadError(f"No loader available for referenced document {key}")
            self._documents[key] = self._fetch(Path(key))
        return self._documents[key]


def follow_pointer(document: Any, pointer: str, ref: str) -> Any:
    """Navigate *document* along an RFC 6901 JSON Pointer.

    The pointer comes from a URI fragment, so percent-escapes are decoded
    before ``~1`` (``/``) and ``~0`` (``~``) are unescaped.

    Args:
        document: The document to navigate.
        pointer: The pointer, e.g. ``"/components/schemas/Pet"``. An empty
            pointer addresses the whole document.
        ref: The original ``$ref`` string, for error messages.

    Raises:
        LoadError: If any segment does not exist.
    """
    if pointer == "":
        return document
    if not pointer.startswith("/"):
        raise LoadError(f"Cannot resolve $ref '{ref}': invalid JSON pointer '{pointer}'")

    current: Any = document
    for raw_segment in pointer[1:].split("/"):
        segment = unquote(raw_segment).replace("~1", "/").replace("~0", "~")
        if isinstance(current, dict):
            if segment not in current:
                raise LoadError(f"Cannot resolve $ref '{ref}': key '{segment}' not found")
            current = current[segment]
        elif isinstance(current, list):
            try:
                current = current[int(segment)]
            except (ValueError, IndexError) as exc:
                raise LoadError(
                    f"Cannot resolve $ref '{ref}': invalid array index '{segment}'"
                ) from exc
        else:
            raise LoadError(
                f"Cannot resolve $ref '{ref}': cannot navigate into {type(current).__name__}"
            )
    return current
