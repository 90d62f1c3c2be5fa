"""Shared test fixtures for clientsmith.

Provides reusable fixtures for loading the definition fixtures, a stub
evaluator for the paths builder, isolated config environments, output state
management and a CLI runner. These fixtures are automatically discovered by
pytest and available to all test modules without explicit imports.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

import pytest
import yaml

from clientsmith.models import ApiDefinition
from clientsmith.output import OutputManager, reset_output, set_output


FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Auto-reset global state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager holds consoles bound to the sys.stdout/sys.stderr of
    the moment it was created. CliRunner swaps those streams, so a manager
    surviving a CLI test would write to closed files.
    """
    yield
    reset_output()


@pytest.fixture(autouse=True)
def _reset_package_logger() -> None:
    """Undo the handler the CLI installs on the ``clientsmith`` logger.

    The CLI stops propagation, which would hide records from ``caplog`` in
    later tests.
    """
    yield
    package_logger = logging.getLogger("clientsmith")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
    package_logger.setLevel(logging.NOTSET)
    package_logger.propagate = True


# ---------------------------------------------------------------------------
# Definition fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def petstore_path() -> Path:
    return FIXTURES_DIR / "petstore.yaml"


@pytest.fixture
def petstore_raw(petstore_path: Path) -> dict[str, Any]:
    """Raw petstore definition as loaded from YAML."""
    with open(petstore_path, encoding="utf-8") as f:
        return yaml.safe_load(f)


@pytest.fixture
def petstore(petstore_raw: dict[str, Any]) -> ApiDefinition:
    """Validated petstore definition."""
    return ApiDefinition.model_validate(petstore_raw)


# ---------------------------------------------------------------------------
# Evaluator fixtures
# ---------------------------------------------------------------------------


class StubEvaluator:
    """Evaluator that maps an expression to ``{"type": expression}``.

    Records every ``(expression, common_module)`` call in order so tests can
    check evaluation order and arguments.
    """

    def __init__(self, schemas: Optional[dict[str, dict[str, Any]]] = None) -> None:
        self.schemas = schemas or {}
        self.calls: list[tuple[str, Optional[str]]] = []

    async def evaluate(
        self, expression: str, common_module: Optional[str] = None
    ) -> dict[str, Any]:
        self.calls.append((expression, common_module))
        if expression in self.schemas:
            return dict(self.schemas[expression])
        return {"type": expression}


@pytest.fixture
def stub_evaluator() -> StubEvaluator:
    return StubEvaluator()


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run the test from an empty working directory without CLIENTSMITH_* variables.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    for var in [
        "CLIENTSMITH_OUTPUT",
        "CLIENTSMITH_COMMON_MODULE",
        "CLIENTSMITH_NAME",
    ]:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a quiet, colourless OutputManager for the duration of a test."""
    output = OutputManager(no_color=True, quiet=True)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
