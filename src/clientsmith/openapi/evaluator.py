"""Evaluate validation expressions into JSON Schema.

Validation expressions are Python type expressions written against a fixed
vocabulary (``typing``, ``typing_extensions`` and ``pydantic`` names listed in
:data:`EXPRESSION_IMPORTS`), for example::

    Annotated[int, Field(ge=1, le=100)]
    TypedDict('CreatePet', {'name': str, 'tag': NotRequired[str]})
    list[common.Pet]

The :class:`Evaluator` protocol is the single service boundary between the
core and expression execution. :class:`PydanticEvaluator`, the default,
executes each expression in a brand-new module namespace and converts the
resulting type with :class:`pydantic.TypeAdapter`.

**Trust boundary**: evaluation executes the expression as Python code. Only
feed it definition files you would be willing to ``import``.

Results are not memoized. The same expression used by two selectors is
evaluated twice.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Protocol

from pydantic import TypeAdapter

from clientsmith.exceptions import EvaluationError

logger = logging.getLogger(__name__)

EXPRESSION_IMPORTS: tuple[str, ...] = (
    "from typing import Annotated, Any, Literal, Optional, Union",
    "from pydantic import BaseModel, Field, create_model",
    "from typing_extensions import NotRequired, Required, TypedDict",
)
"""Import lines visible to every expression.

Generated schema modules start with the same lines so that an expression
means the same thing at generation time and inside the generated client.
"""

COMMON_NAME = "common"
"""Name the shared-definitions module is bound to inside expressions."""

OPTIONAL_SUFFIX = " | None"
"""Optional qualifier stripped from expressions before evaluation."""

REF_TEMPLATE = "#/components/schemas/{model}"


class Evaluator(Protocol):
    """Turns a validation expression into its canonical JSON Schema."""

    async def evaluate(
        self, expression: str, common_module: Optional[str] = None
    ) -> dict[str, Any]:
        """Evaluate *expression* and return its JSON Schema without ``$schema``.

        Args:
            expression: The validation-expression source.
            common_module: Importable name of the shared-definitions module,
                bound as ``common`` while evaluating.

        Raises:
            EvaluationError: If no schema can be produced.
        """
        ...


def strip_optional(expression: str) -> str:
    """Remove a trailing optional qualifier (``" | None"``) from *expression*.

    Parameter optionality is carried by the selector's ``required`` flag, so
    the qualifier would only add a ``null`` branch to the schema.
    """
    stripped = expression.rstrip()
    if stripped.endswith(OPTIONAL_SUFFIX):
        return stripped[: -len(OPTIONAL_SUFFIX)]
    return expression


def build_module_source(expression: str, common_module: Optional[str] = None) -> str:
    """Assemble the source of the throwaway module that evaluates *expression*."""
    lines = list(EXPRESSION_IMPORTS)
    if common_module:
        lines.append(f"import {common_module} as {COMMON_NAME}")
    lines.append(f"schema = {strip_optional(expression)}")
    return "\n".join(lines)


class PydanticEvaluator:
    """Default :class:`Evaluator` backed by :class:`pydantic.TypeAdapter`.

    Every call compiles a fresh module (the expression imports, the optional
    ``common`` import and ``schema = <expression>``) and executes it in an
    empty namespace, so nothing one expression defines is visible to the
    next one.

    Args:
        ref_template: Template for ``$ref`` values of named models; defaults
            to OpenAPI component references.
    """

    def __init__(self, ref_template: str = REF_TEMPLATE) -> None:
        self._ref_template = ref_template

    async def evaluate(
        self, expression: str, common_module: Optional[str] = None
    ) -> dict[str, Any]:
        source = build_module_source(expression, common_module)
        logger.debug("Evaluating expression %r", expression)
        namespace: dict[str, Any] = {"__name__": "clientsmith_expression"}
        try:
            exec(compile(source, "<expression>", "exec"), namespace)
            schema = TypeAdapter(namespace["schema"]).json_schema(
                ref_template=self._ref_template
            )
        except Exception as exc:
            raise EvaluationError(
                f"Cannot evaluate expression {expression!r}: {exc}"
            ) from exc
        schema.pop("$schema", None)
        return schema
