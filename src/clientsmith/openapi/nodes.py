"""Structural type model -- recursive, schema-language independent data shapes.

A structural type is one of:

* ``None`` -- the universal ("any") type.
* a ``str`` -- a reference when it starts with ``#`` (``"#/components/schemas/Pet"``),
  otherwise the name of a primitive type (``"string"``, ``"integer"``).
* a :class:`TypeNode` -- a tagged node (``literal``, ``record``, ``array``,
  ``union``, ``intersection``) whose children live in the ordered ``types``
  tuple. Nodes with any other ``kind`` are wrappers around their children.
* a mapping -- a composite object type, field name to child type.

Definition files spell nodes as mappings carrying a ``$types`` key::

    response:
      items:
        kind: array
        $types: ["#/components/schemas/Pet"]

:func:`coerce_type_node` turns that raw data into the Python representation.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date
from typing import Any, Union

TYPES_KEY = "$types"
"""Key marking a tagged node in raw definition data."""


@dataclass(frozen=True)
class TypeNode:
    """A tagged structural type node.

    Attributes:
        kind: The node tag (``literal``, ``record``, ``array``, ``union``,
            ``intersection`` or any wrapper kind).
        types: Ordered children. For ``literal`` the first child is the
            primitive type name of ``value``.
        optional: Whether the value may be absent where it is used.
        value: The fixed value of a ``literal`` node.
    """

    kind: str
    types: tuple[Any, ...] = ()
    optional: bool = False
    value: Any = None


StructuralType = Union[TypeNode, Mapping, str, None]


def literal(value: Any, primitive: str) -> TypeNode:
    """Build a ``literal`` node for *value* of primitive type *primitive*."""
    return TypeNode("literal", (primitive,), value=value)


def record(value_type: StructuralType) -> TypeNode:
    """Build a string-keyed ``record`` node with *value_type* values."""
    return TypeNode("record", (value_type,))


def array(item_type: StructuralType = None, *, untyped: bool = False) -> TypeNode:
    """Build an ``array`` node.

    Pass ``untyped=True`` for an array without a declared element type; it
    serializes to an array with unconstrained items.
    """
    return TypeNode("array", () if untyped else (item_type,))


def union(*types: StructuralType) -> TypeNode:
    return TypeNode("union", tuple(types))


def intersection(*types: StructuralType) -> TypeNode:
    return TypeNode("intersection", tuple(types))


def coerce_type_node(raw: Any) -> Any:
    """Convert raw JSON/YAML data into structural types.

    Mappings carrying a ``$types`` key become :class:`TypeNode` instances
    (``kind`` defaults to an empty wrapper tag), other mappings become
    composites whose values are coerced recursively. YAML dates and timestamps
    become ISO 8601 strings. Existing nodes, strings, ``None`` and other
    scalars pass through unchanged.

    Args:
        raw: Data as read from a definition file.

    Returns:
        The structural type representation of *raw*.
    """
    if isinstance(raw, TypeNode):
        return raw
    if isinstance(raw, Mapping):
        if TYPES_KEY in raw:
            return TypeNode(
                kind=str(raw.get("kind", "")),
                types=tuple(coerce_type_node(child) for child in raw[TYPES_KEY] or ()),
                optional=bool(raw.get("optional", False)),
                value=_json_scalar(raw.get("value")),
            )
        return {key: coerce_type_node(value) for key, value in raw.items()}
    return _json_scalar(raw)


def _json_scalar(value: Any) -> Any:
    # yaml.safe_load reads unquoted 2024-01-01 as a date
    if isinstance(value, date):
        return value.isoformat()
    return value
