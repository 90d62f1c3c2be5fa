"""Serialize structural types into JSON Schema documents.

The single public function is :func:`to_schema`. It is total: every input,
including ``None`` and nodes with unknown tags, yields a schema dict.

Dispatch happens in a fixed priority order, so a value that matches several
shapes (a :class:`~clientsmith.openapi.nodes.TypeNode` is also "an object")
always resolves the same way:

1. ``None`` -> ``{"type": "any"}``
2. ``str`` -> ``$ref`` when it starts with ``#``, else a primitive ``type``
3. ``literal`` -> single-value ``enum``
4. ``record`` -> object with ``additionalProperties``
5. ``array`` -> array, ``items`` is ``{}`` without an element type
6. ``union`` -> ``anyOf``
7. ``intersection`` -> ``allOf``
8. other tagged nodes -> their first child
9. anything else -> closed object with one property per field
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from clientsmith.openapi.nodes import TypeNode

REF_SIGIL = "#"


def to_schema(node: Any) -> dict[str, Any]:
    """Convert a structural type into a JSON Schema dict.

    Args:
        node: ``None``, a type name or reference string, a
            :class:`~clientsmith.openapi.nodes.TypeNode`, or a mapping of
            field names to structural types.

    Returns:
        A new JSON Schema dict. Never raises for well-typed input.

    Example::

        >>> to_schema({"items": array("#/Item")})
        {'type': 'object', 'properties': {'items': {'type': 'array',
        'items': {'$ref': '#/Item'}}}, 'additionalProperties': False}
    """
    if node is None:
        return {"type": "any"}
    if isinstance(node, str):
        if node.startswith(REF_SIGIL):
            return {"$ref": node}
        return {"type": node}
    if isinstance(node, TypeNode):
        return _node_to_schema(node)

    fields = node.items() if isinstance(node, Mapping) else ()
    return {
        "type": "object",
        "properties": {key: to_schema(value) for key, value in fields},
        "additionalProperties": False,
    }


def _node_to_schema(node: TypeNode) -> dict[str, Any]:
    """Serialize a tagged node (rules 3 to 8)."""
    children = node.types
    if node.kind == "literal":
        return {"enum": [node.value], "type": children[0] if children else None}
    if node.kind == "record":
        return {
            "type": "object",
            "additionalProperties": to_schema(children[0] if children else None),
        }
    if node.kind == "array":
        return {"type": "array", "items": to_schema(children[0]) if children else {}}
    if node.kind == "union":
        return {"anyOf": [to_schema(child) for child in children]}
    if node.kind == "intersection":
        return {"allOf": [to_schema(child) for child in children]}
    # Wrapper around its children: only the first one is kept.
    return to_schema(children[0]) if children else {}
