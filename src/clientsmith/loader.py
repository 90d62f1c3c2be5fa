"""Load definition files from a URL, a local file, or stdin.

A definition file is a YAML or JSON document describing the API: document
metadata, the ``routes`` that feed the OpenAPI builder and the ``groups`` of
operations the client compiler consumes. :func:`load_definition` reads it,
parses it and validates it into an :class:`~clientsmith.models.ApiDefinition`.

Every failure (unreadable source, unparsable content, validation errors) is
reported as a :class:`~clientsmith.exceptions.SpecificationError`.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any

import httpx
import yaml
from pydantic import ValidationError

from clientsmith.exceptions import SpecificationError
from clientsmith.models import ApiDefinition

logger = logging.getLogger(__name__)


def load_definition(source: str) -> ApiDefinition:
    """Load and validate a definition from a URL, file path, or ``-`` for stdin.

    Args:
        source: An ``http(s)://`` URL, a file path, or ``-``.

    Returns:
        The validated definition.

    Raises:
        SpecificationError: If the source cannot be read, parsed or validated.

    Example::

        definition = load_definition("petstore.yaml")
        print(definition.title, len(definition.routes))
    """
    raw = load_raw(source)
    try:
        definition = ApiDefinition.model_validate(raw)
    except ValidationError as exc:
        raise SpecificationError(f"Invalid definition {source}:\n{exc}") from exc
    logger.debug(
        "Loaded definition %s with %d routes and %d groups",
        source,
        len(definition.routes),
        len(definition.groups),
    )
    return definition


def load_raw(source: str) -> dict[str, Any]:
    """Read *source* and parse it into a plain dict without validating it."""
    if source == "-":
        return _read_stdin()
    if source.startswith(("http://", "https://")):
        return _fetch_url(source)
    return _read_file(source)


def _read_stdin() -> dict[str, Any]:
    try:
        content = sys.stdin.read()
    except OSError as exc:
        raise SpecificationError(f"Failed to read from stdin: {exc}") from exc
    if not content.strip():
        raise SpecificationError("No input received from stdin")
    return parse_content(content)


def _fetch_url(url: str) -> dict[str, Any]:
    try:
        response = httpx.get(url, timeout=30.0, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SpecificationError(
            f"HTTP {exc.response.status_code} fetching definition from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise SpecificationError(f"Failed to fetch definition from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    hint = "json" if "json" in content_type else ""
    return parse_content(response.text, hint=hint)


def _read_file(path: str) -> dict[str, Any]:
    file_path = Path(path)
    if not file_path.is_file():
        raise SpecificationError(f"Definition file not found: {path}")
    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SpecificationError(f"Failed to read definition file {path}: {exc}") from exc
    if not content.strip():
        raise SpecificationError(f"Definition file is empty: {path}")

    hint = "json" if file_path.suffix.lower() == ".json" else ""
    return parse_content(content, hint=hint)


def parse_content(content: str, hint: str = "") -> dict[str, Any]:
    """Parse *content* as JSON when hinted, otherwise as YAML.

    YAML is a superset of JSON, so unhinted JSON documents parse as well.

    Raises:
        SpecificationError: If the content is not a mapping or cannot be parsed.
    """
    if hint == "json":
        try:
            result = json.loads(content)
        except json.JSONDecodeError as exc:
            raise SpecificationError(f"Invalid JSON: {exc}") from exc
    else:
        try:
            result = yaml.safe_load(content)
        except yaml.YAMLError as exc:
            raise SpecificationError(f"Invalid YAML: {exc}") from exc

    if not isinstance(result, dict):
        kind = type(result).__name__ if result is not None else "empty document"
        raise SpecificationError(f"Definition must be a mapping (got {kind})")
    return result
