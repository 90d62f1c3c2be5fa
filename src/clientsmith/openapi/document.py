"""Assemble a complete OpenAPI 3.1 document around a ``paths`` object.

Schemas produced by :class:`~clientsmith.openapi.evaluator.PydanticEvaluator`
carry named models in local ``$defs`` blocks while their ``$ref`` values
already point at ``#/components/schemas/<Model>``. :func:`build_document`
moves every ``$defs`` entry into ``components.schemas`` so those references
resolve.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Optional, Sequence

from clientsmith.models import ServerInfo

logger = logging.getLogger(__name__)

OPENAPI_VERSION = "3.1.0"


def build_document(
    paths: dict[str, Any],
    title: str,
    version: str,
    description: Optional[str] = None,
    servers: Optional[Sequence[ServerInfo]] = None,
) -> dict[str, Any]:
    """Wrap *paths* into an OpenAPI document.

    Args:
        paths: The result of :meth:`~clientsmith.openapi.paths.Paths.get_paths`.
            It is not modified.
        title: ``info.title``.
        version: ``info.version``.
        description: Optional ``info.description``.
        servers: Optional server entries.

    Returns:
        The document dict. ``components`` is present only when at least one
        ``$defs`` block was hoisted.
    """
    info: dict[str, Any] = {"title": title, "version": version}
    if description:
        info["description"] = description

    definitions: dict[str, Any] = {}
    hoisted = hoist_definitions(copy.deepcopy(paths), definitions)

    document: dict[str, Any] = {"openapi": OPENAPI_VERSION, "info": info}
    if servers:
        document["servers"] = [server.model_dump(exclude_none=True) for server in servers]
    document["paths"] = hoisted
    if definitions:
        document["components"] = {"schemas": definitions}
    return document


def hoist_definitions(node: Any, definitions: dict[str, Any]) -> Any:
    """Remove ``$defs`` blocks from *node* in place, collecting them into *definitions*.

    Nested ``$defs`` (inside hoisted definitions) are hoisted as well. When two
    blocks define the same name, the first definition is kept.

    Returns:
        *node*, for chaining.
    """
    if isinstance(node, dict):
        local = node.pop("$defs", None)
        if isinstance(local, dict):
            for name, schema in local.items():
                if name in definitions:
                    logger.debug("Definition '%s' already hoisted, keeping the first", name)
                    continue
                definitions[name] = schema
                hoist_definitions(schema, definitions)
        for value in node.values():
            hoist_definitions(value, definitions)
    elif isinstance(node, list):
        for item in node:
            hoist_definitions(item, definitions)
    return node
