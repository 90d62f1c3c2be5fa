"""OpenAPI description-document builder.

This sub-package turns route definitions into the ``paths`` object of an
OpenAPI 3.1 document.

Typical usage::

    import asyncio

    from clientsmith.openapi import Paths, build_document

    paths = Paths(common_module="myapi.shared")
    for route in definition.routes:
        paths.add_route(route)
    document = build_document(asyncio.run(paths.get_paths()), "Pets", "1.0.0")

Sub-modules:

* :mod:`~clientsmith.openapi.nodes` -- The structural type model.
* :mod:`~clientsmith.openapi.serializer` -- Structural type to JSON Schema.
* :mod:`~clientsmith.openapi.evaluator` -- Validation expression to JSON Schema.
* :mod:`~clientsmith.openapi.paths` -- The :class:`Paths` builder and
  response merging.
* :mod:`~clientsmith.openapi.document` -- Full document assembly.
"""

from clientsmith.openapi.document import build_document
from clientsmith.openapi.evaluator import Evaluator, PydanticEvaluator
from clientsmith.openapi.paths import Paths, is_http_method
from clientsmith.openapi.serializer import to_schema

__all__ = [
    "Evaluator",
    "Paths",
    "PydanticEvaluator",
    "build_document",
    "is_http_method",
    "to_schema",
]
