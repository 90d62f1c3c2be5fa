"""Jinja2 templates for generated modules and the pass-through runtime files.

Every generated file is rendered from a template in ``sdk/templates/``:

* ``endpoints.py.j2``, ``stream_endpoints.py.j2``, ``schemas.py.j2`` and
  ``inputs.py.j2`` are filled in by the builders in
  :mod:`~clientsmith.sdk.emitters`.
* ``request.py.j2``, ``parser.py.j2``, ``response.py.j2`` and the package
  ``__init__`` files are runtime modules copied into every client unchanged.
* ``client.py.j2`` is rendered from the client name, header options and
  security scheme.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape

from clientsmith.models import ClientSpec
from clientsmith.sdk.naming import pascal_case, py_literal, snake_case


TEMPLATE_DIR = Path(__file__).parent / "templates"
"""Path to the Jinja2 template directory (``sdk/templates/``)."""

RUNTIME_FILES: dict[str, str] = {
    "__init__.py": "package_init.py.j2",
    "inputs/__init__.py": "inputs_init.py.j2",
    "outputs/__init__.py": "outputs_init.py.j2",
    "request.py": "request.py.j2",
    "parser.py": "parser.py.j2",
    "response.py": "response.py.j2",
}
"""Runtime artifacts copied verbatim, keyed by their path in the client."""


@lru_cache(maxsize=1)
def create_environment() -> Environment:
    """Create the Jinja2 environment for the client templates.

    Templates produce Python source, so autoescaping is disabled for
    ``.py.j2`` files. Block trimming and lstrip keep the generated code free
    of stray blank lines.
    """
    return Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=select_autoescape(disabled_extensions=("py.j2",)),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


def render(template_name: str, **context: Any) -> str:
    """Render one template from ``sdk/templates/`` with *context*."""
    return create_environment().get_template(template_name).render(**context)


def runtime_artifacts(spec: ClientSpec) -> dict[str, str]:
    """Return the runtime modules every generated client ships with.

    Args:
        spec: The client spec; only ``name``, ``options`` and
            ``security_scheme`` are read, for ``client.py``.

    Returns:
        A mapping from relative file path to file contents.
    """
    artifacts = {path: render(template) for path, template in RUNTIME_FILES.items()}
    artifacts["client.py"] = render_client(spec)
    return artifacts


def render_client(spec: ClientSpec) -> str:
    """Render ``client.py`` for *spec*.

    Each entry of ``spec.options`` becomes a keyword argument of the client
    constructor that is sent as a header; a bearer security scheme adds a
    ``token`` argument.
    """
    options = [
        {"param": snake_case(name), "header": py_literal(name), "schema": option.schema_}
        for name, option in spec.options.items()
    ]
    return render(
        "client.py.j2",
        class_name=pascal_case(f"{spec.name or 'api'} client"),
        options=options,
        bearer=spec.security_scheme is not None,
    )
