"""Accumulate routes and build the OpenAPI ``paths`` object.

:class:`Paths` is an ordered-append builder: routes are registered with
:meth:`Paths.add_path` and the terminal :meth:`Paths.get_paths` coroutine turns
them into a ``path -> method -> operation`` mapping.

Responses are merged eagerly while routes are added. For every
``(status_code, content_type)`` pair:

* the first item creates the response with a ``Response for <code>``
  description and optional string-typed headers;
* an item with a new content type under an existing status adds a sibling
  ``content`` entry;
* an item for an existing pair is compared with the stored schema by canonical
  JSON. Equal schemas are coalesced, a differing one turns the entry into
  ``oneOf: [existing, new]``, and later distinct schemas are appended to that
  ``oneOf`` list.

``application/octet-stream`` content always serializes as a binary string.

Parameters are produced when the paths are built, awaiting the
:class:`~clientsmith.openapi.evaluator.Evaluator` one selector at a time in
declaration order.
"""

from __future__ import annotations

import copy
import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence

from clientsmith.models import (
    HTTPMethod,
    ResponseItem,
    RouteDefinition,
    Selector,
    SemanticSource,
)
from clientsmith.openapi.evaluator import Evaluator, PydanticEvaluator
from clientsmith.openapi.serializer import to_schema

logger = logging.getLogger(__name__)

METHODS: tuple[str, ...] = tuple(m.value for m in HTTPMethod)

OCTET_STREAM = "application/octet-stream"

SEMANTIC_SOURCE_TO_LOCATION: dict[SemanticSource, str] = {
    SemanticSource.QUERIES: "query",
    SemanticSource.QUERY: "query",
    SemanticSource.HEADERS: "header",
    SemanticSource.PARAMS: "path",
}

OnOperation = Callable[[str, str, str, dict[str, Any]], Optional[dict[str, Any]]]
"""Hook ``(source_file, method, path, operation) -> paths fragment or None``."""


def is_http_method(name: str) -> bool:
    """Return ``True`` for the methods routes are commonly declared with."""
    return name in ("get", "post", "put", "delete", "patch")


@dataclass(frozen=True)
class _OperationRecord:
    source_file: str
    name: str
    path: str
    method: str
    selectors: tuple[Selector, ...]
    responses: dict[str, Any]
    tags: Optional[tuple[str, ...]] = None
    description: Optional[str] = None


class Paths:
    """Builder for the ``paths`` object of an OpenAPI document.

    Args:
        evaluator: Turns selector validation expressions into schemas.
            Defaults to :class:`~clientsmith.openapi.evaluator.PydanticEvaluator`.
        common_module: Shared-definitions module passed to every evaluation.
        on_operation: Optional hook called once per operation right after it
            is inserted. A returned paths fragment is merged into the result.

    Example::

        paths = Paths()
        paths.add_path("listPets", "/pets", "get", selectors, responses, "pets.py")
        document_paths = asyncio.run(paths.get_paths())
    """

    def __init__(
        self,
        evaluator: Optional[Evaluator] = None,
        common_module: Optional[str] = None,
        on_operation: Optional[OnOperation] = None,
    ) -> None:
        self._evaluator = evaluator or PydanticEvaluator()
        self._common_module = common_module
        self._on_operation = on_operation
        self._operations: list[_OperationRecord] = []

    def add_path(
        self,
        name: str,
        path: str,
        method: HTTPMethod | str,
        selectors: Sequence[Selector],
        responses: Sequence[ResponseItem],
        source_file: str,
        tags: Optional[Sequence[str]] = None,
        description: Optional[str] = None,
    ) -> Paths:
        """Register one operation.

        Every call appends a new operation; registering the same name twice
        produces two entries, the later one winning in :meth:`get_paths`.

        Returns:
            ``self`` so calls can be chained.
        """
        method_name = HTTPMethod(method.lower()).value
        self._operations.append(
            _OperationRecord(
                source_file=source_file,
                name=name,
                path=path,
                method=method_name,
                selectors=tuple(selectors),
                responses=_responses_object(responses),
                tags=tuple(tags) if tags is not None else None,
                description=description,
            )
        )
        logger.debug("Registered %s %s (%s)", method_name.upper(), path, name)
        return self

    def add_route(self, route: RouteDefinition) -> Paths:
        """Register a :class:`~clientsmith.models.RouteDefinition`."""
        return self.add_path(
            route.name,
            route.path,
            route.method,
            route.selectors,
            route.responses,
            route.source_file,
            tags=route.tags,
            description=route.description,
        )

    async def get_paths(self) -> dict[str, Any]:
        """Build the ``paths`` object from every registered operation.

        Returns:
            A new ``{path: {method: operation}}`` dict. Nothing in it is
            shared with the builder's internal state.

        Raises:
            EvaluationError: If a selector expression cannot be evaluated.
        """
        result: dict[str, Any] = {}
        for record in self._operations:
            parameters, body_props = await self._selectors_to_parameters(record.selectors)
            operation: dict[str, Any] = {
                "operationId": record.name,
                "parameters": parameters,
            }
            if record.tags is not None:
                operation["tags"] = list(record.tags)
            if record.description is not None:
                operation["description"] = record.description
            if body_props:
                operation["requestBody"] = {
                    "content": {
                        "application/json": {
                            "schema": {"type": "object", "properties": body_props},
                        },
                    },
                }
            if record.responses:
                operation["responses"] = copy.deepcopy(record.responses)

            result.setdefault(record.path, {})[record.method] = operation
            if self._on_operation is not None:
                fragment = self._on_operation(
                    record.source_file, record.method, record.path, operation
                )
                _merge_paths(result, fragment or {})
        return result

    async def _selectors_to_parameters(
        self, selectors: Sequence[Selector]
    ) -> tuple[list[dict[str, Any]], dict[str, Any]]:
        parameters: list[dict[str, Any]] = []
        body_props: dict[str, Any] = {}
        for selector in selectors:
            schema = await self._evaluator.evaluate(selector.against, self._common_module)
            if selector.source == SemanticSource.BODY:
                body_props[selector.name] = schema
                continue
            parameters.append(
                {
                    "in": SEMANTIC_SOURCE_TO_LOCATION[selector.source],
                    "name": selector.name,
                    "required": selector.required,
                    "schema": schema,
                }
            )
        return parameters, body_props


def _canonical(schema: Any) -> str:
    return json.dumps(schema, sort_keys=True)


def _item_schema(item: ResponseItem) -> dict[str, Any]:
    if item.content_type == OCTET_STREAM:
        return {"type": "string", "format": "binary"}
    if item.response_type is None:
        return {}
    return to_schema(item.response_type)


def _responses_object(items: Sequence[ResponseItem]) -> dict[str, Any]:
    """Merge response items into an OpenAPI ``responses`` object."""
    responses: dict[str, Any] = {}
    for item in items:
        content_type = item.content_type
        schema = _item_schema(item)
        response = responses.get(item.status_code)
        if response is None:
            response = {
                "description": f"Response for {item.status_code}",
                "content": {content_type: {"schema": schema}},
            }
            if item.headers:
                response["headers"] = {
                    header: {"schema": {"type": "string"}} for header in item.headers
                }
            responses[item.status_code] = response
            continue

        content = response["content"]
        if content_type not in content:
            content[content_type] = {"schema": schema}
            continue

        existing = content[content_type]["schema"]
        if "oneOf" in existing:
            known = {_canonical(option) for option in existing["oneOf"]}
            if _canonical(schema) not in known:
                existing["oneOf"].append(schema)
        elif _canonical(existing) != _canonical(schema):
            content[content_type]["schema"] = {"oneOf": [existing, schema]}
    return responses


def _merge_paths(target: dict[str, Any], fragment: dict[str, Any]) -> None:
    """Merge a paths fragment into *target*, one path item at a time."""
    for path, methods in fragment.items():
        target.setdefault(path, {}).update(methods)
