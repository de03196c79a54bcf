"""Synthesize representative values from JSON-Schema fragments.

:func:`build_sample_from_schema` turns a schema (as found in a dereferenced
OpenAPI document) into one plausible value without consulting live data.
It is a best-effort synthesizer, not a validator: it never raises and does
not check bounds, patterns, or required sets.

Precedence, first match wins:

1. recursion depth beyond ``max_depth`` gives ``None``;
2. an explicit ``example``;
3. an explicit ``default``;
4. the first value of a non-empty ``enum``;
5. a value chosen by ``type`` (first entry when ``type`` is a list), or by
   ``oneOf``/``anyOf``/``allOf`` when no type is recognised.

Dereferenced schemas may still be cyclic, so the depth is carried as an
explicit argument and bounded by ``max_depth``.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

MAX_SAMPLE_DEPTH = 4
"""Deepest nesting level that still produces a value."""

NIL_UUID = "00000000-0000-0000-0000-000000000000"


def build_sample_from_schema(
    schema: Any,
    depth: int = 0,
    max_depth: int = MAX_SAMPLE_DEPTH,
) -> Any:
    """Return one representative value for *schema*.

    Args:
        schema: A schema mapping. Anything else (including an empty
            mapping) produces ``None``.
        depth: Nesting level of *schema*; children are sampled at
            ``depth + 1``.
        max_depth: Levels beyond this produce ``None``.

    Example::

        >>> build_sample_from_schema({
        ...     "type": "object",
        ...     "properties": {"n": {"type": "integer"}, "tags": {"type": "array"}},
        ... })
        {'n': 0, 'tags': [None]}
    """
    if not isinstance(schema, dict) or not schema or depth > max_depth:
        return None

    if "example" in schema:
        return schema["example"]
    if "default" in schema:
        return schema["default"]

    enum = schema.get("enum")
    if isinstance(enum, list) and enum:
        return enum[0]

    schema_type = _first_type(schema.get("type"))

    if schema_type == "string":
        return _sample_string(schema.get("format"))
    if schema_type in ("integer", "number"):
        return 0
    if schema_type == "boolean":
        return True
    if schema_type == "array":
        items = schema.get("items")
        return [build_sample_from_schema(items if items is not None else {}, depth + 1, max_depth)]
    if schema_type == "object":
        properties = schema.get("properties")
        if not isinstance(properties, dict):
            return {}
        return {
            name: build_sample_from_schema(prop, depth + 1, max_depth)
            for name, prop in properties.items()
        }

    return _sample_composition(schema, depth, max_depth)


def _first_type(value: Any) -> Optional[str]:
    if isinstance(value, list):
        return value[0] if value and isinstance(value[0], str) else None
    return value if isinstance(value, str) else None


def _sample_string(fmt: Any) -> str:
    if fmt == "date-time":
        now = datetime.now(timezone.utc)
        return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")
    if fmt == "date":
        return datetime.now(timezone.utc).date().isoformat()
    if fmt == "uuid":
        return NIL_UUID
    return "string"


def _sample_composition(schema: dict[str, Any], depth: int, max_depth: int) -> Any:
    """Fallback for schemas without a recognised ``type``."""
    for keyword in ("oneOf", "anyOf"):
        members = schema.get(keyword)
        if isinstance(members, list) and members and members[0]:
            return build_sample_from_schema(members[0], depth + 1, max_depth)

    members = schema.get("allOf")
    if isinstance(members, list) and members:
        merged: dict[str, Any] = {}
        for member in members:
            value = build_sample_from_schema(member, depth + 1, max_depth)
            # non-object members contribute nothing
            if isinstance(value, dict):
                merged.update(value)
        return merged

    return None
