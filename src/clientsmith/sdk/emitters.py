"""Ordered-append builders for the generated registry and schema modules.

Each builder collects import lines and entries while the compiler walks the
spec, then renders its module once with :meth:`complete`. A completed builder
is frozen: further additions raise :class:`RuntimeError`, so a finished
module can never drift from what was rendered.

The registries and the dispatch table are keyed by :class:`EndpointKey`.
Its string form (``[variant ]METHOD path``) is the only key representation
that reaches generated code, which keeps every table aligned.
"""

from __future__ import annotations

from typing import NamedTuple

from clientsmith.openapi.evaluator import EXPRESSION_IMPORTS
from clientsmith.sdk.boilerplate import render
from clientsmith.sdk.naming import py_literal, remove_duplicates


class EndpointKey(NamedTuple):
    """Registry key of one operation variant.

    Attributes:
        variant: Content-type variant tag, empty for the default variant.
        method: HTTP method in any case; rendered uppercased.
        path: The operation path template.
    """

    variant: str
    method: str
    path: str

    def __str__(self) -> str:
        prefix = f"{self.variant} " if self.variant else ""
        return f"{prefix}{self.method.upper()} {self.path}"


class _ModuleBuilder:
    template_name: str = ""
    base_imports: tuple[str, ...] = ()

    def __init__(self) -> None:
        self._imports: list[str] = list(self.base_imports)
        self._entries: list[tuple[str, str]] = []
        self._completed = False

    def add_import(self, line: str) -> None:
        self._check_open()
        self._imports.append(line)

    def _add_entry(self, name: str, code: str) -> None:
        self._check_open()
        self._entries.append((name, code))

    def _check_open(self) -> None:
        if self._completed:
            raise RuntimeError(f"{type(self).__name__} is already complete")

    def complete(self) -> str:
        """Render the module and freeze the builder."""
        self._completed = True
        return render(
            self.template_name,
            imports=remove_duplicates(self._imports),
            entries=list(self._entries),
            **self._context(),
        )

    def _context(self) -> dict[str, object]:
        return {}


class _EndpointTable(_ModuleBuilder):
    def add_endpoint(self, key: EndpointKey, entry: str) -> None:
        """Add the entry for *key*; *entry* is Python source."""
        self._add_entry(py_literal(str(key)), entry)


class EndpointRegistry(_EndpointTable):
    """``endpoints.py`` -- key to declared input, output and error types."""

    template_name = "endpoints.py.j2"
    base_imports = (
        "from typing import Any, NamedTuple, Union",
        "from .parser import ParseError",
    )


class StreamEndpointRegistry(_EndpointTable):
    """``stream_endpoints.py`` -- key to input and output of streaming operations."""

    template_name = "stream_endpoints.py.j2"
    base_imports = ("from typing import Any, NamedTuple",)


class DispatchTable(_EndpointTable):
    """``schemas.py`` -- key to the input schema and a request builder."""

    template_name = "schemas.py.j2"
    base_imports = (
        "from typing import Any, Callable, NamedTuple",
        "from .request import formdata, json, to_request, urlencoded",
    )


class SchemaModule(_ModuleBuilder):
    """``inputs/<group>.py`` -- one validation schema per operation.

    Starts with :data:`~clientsmith.openapi.evaluator.EXPRESSION_IMPORTS`, the
    vocabulary expressions were evaluated with.
    """

    template_name = "inputs.py.j2"
    base_imports = EXPRESSION_IMPORTS

    def __init__(self, group: str) -> None:
        super().__init__()
        self._group = group

    def add_schema(self, identifier: str, code: str) -> None:
        self._add_entry(identifier, code)

    def _context(self) -> dict[str, object]:
        return {"group": self._group}
