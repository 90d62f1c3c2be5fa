"""Generator configuration, precedence resolution, and atomic artifact writes.

This module handles everything clientsmith reads from or writes to disk
besides the definition file itself:

* **Project config** -- an optional ``./clientsmith.json`` holding
  :class:`~clientsmith.models.GeneratorConfig` fields. See
  :func:`load_project_config`.
* **Precedence resolution** -- :func:`resolve_config` merges CLI flags,
  environment variables, the project config and defaults into the effective
  :class:`~clientsmith.models.GeneratorConfig`.
* **Output** -- :func:`write_artifacts` writes the generated client files and
  :func:`write_file` a single file (the OpenAPI document).

All file writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`), so an interrupted run never leaves a half-written
module behind.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Mapping, Optional

from pydantic import ValidationError

from clientsmith.exceptions import ConfigError, InvalidUsageError
from clientsmith.models import GeneratorConfig

logger = logging.getLogger(__name__)

_PROJECT_CONFIG_FILENAME = "clientsmith.json"
_ENV_PREFIX = "CLIENTSMITH_"


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write *data* to *path* through a temp file in the same directory.

    ``os.replace`` then swaps the temp file in, which is an atomic rename on
    POSIX. The temp file is removed if anything fails before the rename.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    handle = None
    tmp_path: Optional[str] = None
    try:
        handle = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = handle.name
        handle.write(data)
        handle.flush()
        os.fsync(handle.fileno())
        handle.close()
        handle = None
        os.replace(tmp_path, path)
    except BaseException:
        if handle is not None:
            handle.close()
        if tmp_path is not None and os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise


def write_file(path: Path, data: str) -> None:
    """Atomically write one file.

    Raises:
        ConfigError: If the file cannot be written.
    """
    try:
        _atomic_write(path, data)
    except OSError as exc:
        raise ConfigError(f"Cannot write {path}: {exc}") from exc


def write_artifacts(artifacts: Mapping[str, str], output_dir: str | Path) -> list[Path]:
    """Write generated artifacts under *output_dir*.

    Args:
        artifacts: Relative path to file contents, as returned by
            :func:`~clientsmith.sdk.compiler.generate_client_sdk`.
        output_dir: Root directory of the generated client package.

    Returns:
        The written paths, in artifact order.

    Raises:
        ConfigError: If an artifact path escapes *output_dir* or a file
            cannot be written.
    """
    root = Path(output_dir).resolve()
    written = []
    for relative, content in artifacts.items():
        target = (root / relative).resolve()
        if root not in target.parents:
            raise ConfigError(f"Artifact path {relative!r} escapes {root}")
        write_file(target, content)
        logger.debug("Wrote %s", target)
        written.append(target)
    return written


# --- Project-local config ---


def load_project_config() -> Optional[dict[str, Any]]:
    """Load project-local configuration from ``./clientsmith.json``.

    Returns:
        The parsed JSON object, or ``None`` if the file does not exist.

    Raises:
        ConfigError: If the file exists but is not a JSON object.
    """
    path = Path.cwd() / _PROJECT_CONFIG_FILENAME
    if not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Invalid project config at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid project config at {path}: expected a JSON object")
    return data


# --- Precedence resolution ---


def resolve_config(
    cli_output: Optional[str] = None,
    cli_common_module: Optional[str] = None,
    cli_name: Optional[str] = None,
) -> GeneratorConfig:
    """Resolve the generator config with the full precedence chain.

    Precedence (high to low):
        1. CLI flags (``cli_output``, ``cli_common_module``, ``cli_name``)
        2. Environment variables (``CLIENTSMITH_OUTPUT``,
           ``CLIENTSMITH_COMMON_MODULE``, ``CLIENTSMITH_NAME``)
        3. Project config (``./clientsmith.json``)
        4. Defaults

    Raises:
        ConfigError: If the project config or an environment variable is invalid.
        InvalidUsageError: If a CLI flag holds an invalid value.
    """
    values: dict[str, Any] = dict(load_project_config() or {})

    cli_values = {
        "output": cli_output,
        "common_module": cli_common_module,
        "name": cli_name,
    }
    for field_name, cli_value in cli_values.items():
        env_value = os.environ.get(f"{_ENV_PREFIX}{field_name.upper()}")
        if env_value:
            values[field_name] = env_value
        if cli_value is not None:
            values[field_name] = cli_value

    try:
        return GeneratorConfig.model_validate(values)
    except ValidationError as exc:
        fields = {error["loc"][0] for error in exc.errors() if error["loc"]}
        if any(cli_values.get(str(name)) is not None for name in fields):
            raise InvalidUsageError(f"Invalid command-line option:\n{exc}") from exc
        raise ConfigError(f"Invalid generator configuration:\n{exc}") from exc
