"""Tests for clientsmith.app -- the generate and openapi commands."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
import yaml

from clientsmith import __version__
from clientsmith.app import app


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _write_definition(root: Path, raw: dict[str, Any]) -> str:
    path = root / "api.yaml"
    path.write_text(yaml.safe_dump(raw), encoding="utf-8")
    return str(path)


# ---------------------------------------------------------------------------
# Global options
# ---------------------------------------------------------------------------


class TestGlobalOptions:
    def test_version(self, cli_runner) -> None:
        result = cli_runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"clientsmith {__version__}" in result.output

    def test_no_args_shows_help(self, cli_runner) -> None:
        result = cli_runner.invoke(app, [])
        assert "generate" in result.output
        assert "openapi" in result.output


# ---------------------------------------------------------------------------
# generate
# ---------------------------------------------------------------------------


class TestGenerate:
    def test_writes_client(self, cli_runner, isolated_config: Path, petstore_path: Path) -> None:
        out = isolated_config / "sdk"
        result = cli_runner.invoke(
            app, ["--no-color", "generate", str(petstore_path), "--output", str(out)]
        )
        assert result.exit_code == 0, result.output
        assert (out / "endpoints.py").is_file()
        assert (out / "inputs" / "pets.py").is_file()
        assert "Generated 12 files" in result.output

    def test_default_output_directory(
        self, cli_runner, isolated_config: Path, petstore_path: Path
    ) -> None:
        result = cli_runner.invoke(app, ["generate", str(petstore_path)])
        assert result.exit_code == 0, result.output
        assert (isolated_config / "client" / "client.py").is_file()

    def test_output_from_environment(
        self,
        cli_runner,
        isolated_config: Path,
        petstore_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setenv("CLIENTSMITH_OUTPUT", str(isolated_config / "from-env"))
        result = cli_runner.invoke(app, ["generate", str(petstore_path)])
        assert result.exit_code == 0, result.output
        assert (isolated_config / "from-env" / "schemas.py").is_file()

    def test_dry_run_writes_nothing(
        self, cli_runner, isolated_config: Path, petstore_path: Path
    ) -> None:
        result = cli_runner.invoke(app, ["generate", str(petstore_path), "--dry-run"])
        assert result.exit_code == 0, result.output
        assert "File\tBytes" in result.stdout
        assert "inputs/pets.py\t" in result.stdout
        assert not (isolated_config / "client").exists()

    def test_name_and_common_module_overrides(
        self, cli_runner, isolated_config: Path, petstore_raw: dict[str, Any]
    ) -> None:
        raw = dict(petstore_raw)
        raw["groups"] = {
            "pets": [
                {
                    **petstore_raw["groups"]["pets"][0],
                    "imports": [{"named_imports": [{"name": "Pet"}]}],
                }
            ]
        }
        definition = _write_definition(isolated_config, raw)
        out = isolated_config / "sdk"
        result = cli_runner.invoke(
            app,
            [
                "generate",
                definition,
                "--output",
                str(out),
                "--name",
                "smith",
                "--common-module",
                "smith.shared",
            ],
        )
        assert result.exit_code == 0, result.output
        assert "class SmithClient:" in (out / "client.py").read_text(encoding="utf-8")
        pets = (out / "inputs" / "pets.py").read_text(encoding="utf-8")
        assert "from smith.shared import Pet\n" in pets
        assert "import smith.shared as common\n" in pets

    def test_unknown_source_exits_with_specification_error(
        self, cli_runner, isolated_config: Path, petstore_raw: dict[str, Any]
    ) -> None:
        raw = dict(petstore_raw)
        operation = dict(petstore_raw["groups"]["pets"][0])
        operation["inputs"] = {"session": {"source": "cookie"}}
        raw["groups"] = {"pets": [operation]}
        definition = _write_definition(isolated_config, raw)

        result = cli_runner.invoke(app, ["--no-color", "generate", definition])
        assert result.exit_code == 7
        assert "Unknown source cookie in session" in result.output
        assert not (isolated_config / "client").exists()

    def test_bad_common_module_is_usage_error(
        self, cli_runner, isolated_config: Path, petstore_path: Path
    ) -> None:
        result = cli_runner.invoke(
            app,
            ["--no-color", "generate", str(petstore_path), "--common-module", "my-api/shared"],
        )
        assert result.exit_code == 2
        assert "dotted module path" in result.output
        assert not (isolated_config / "client").exists()

    def test_definition_without_groups_warns(self, cli_runner, isolated_config: Path) -> None:
        definition = _write_definition(isolated_config, {"title": "Empty"})
        result = cli_runner.invoke(app, ["--no-color", "generate", definition, "--dry-run"])
        assert result.exit_code == 0, result.output
        assert "Warning:" in result.output
        assert "declares no groups" in result.output

    def test_missing_definition(self, cli_runner, isolated_config: Path) -> None:
        result = cli_runner.invoke(app, ["--no-color", "generate", "missing.yaml"])
        assert result.exit_code == 7
        assert "Definition file not found" in result.output

    def test_invalid_project_config(
        self, cli_runner, isolated_config: Path, petstore_path: Path
    ) -> None:
        (isolated_config / "clientsmith.json").write_text("{broken", encoding="utf-8")
        result = cli_runner.invoke(app, ["--no-color", "generate", str(petstore_path)])
        assert result.exit_code == 1
        assert "Invalid project config" in result.output

    def test_verbose_logs_progress(
        self, cli_runner, isolated_config: Path, petstore_path: Path
    ) -> None:
        result = cli_runner.invoke(
            app, ["--verbose", "--no-color", "generate", str(petstore_path), "--dry-run"]
        )
        assert result.exit_code == 0, result.output
        assert "Compiled operation listPets" in result.output

    def test_quiet_hides_success(
        self, cli_runner, isolated_config: Path, petstore_path: Path
    ) -> None:
        result = cli_runner.invoke(app, ["--quiet", "generate", str(petstore_path)])
        assert result.exit_code == 0, result.output
        assert "Generated" not in result.output


# ---------------------------------------------------------------------------
# openapi
# ---------------------------------------------------------------------------


class TestOpenapi:
    def test_prints_document(self, cli_runner, isolated_config: Path, petstore_path: Path) -> None:
        result = cli_runner.invoke(app, ["openapi", str(petstore_path)])
        assert result.exit_code == 0, result.output
        document = json.loads(result.stdout)
        assert document["openapi"] == "3.1.0"
        assert document["info"] == {
            "title": "Petstore",
            "version": "1.0.0",
            "description": "A sample pet store.",
        }
        assert document["servers"] == [
            {"url": "https://petstore.example.com/v1", "description": "Production"}
        ]
        assert document["paths"]["/pets"]["get"]["tags"] == ["pets"]

    def test_writes_document(self, cli_runner, isolated_config: Path, petstore_path: Path) -> None:
        target = isolated_config / "out" / "openapi.json"
        result = cli_runner.invoke(
            app, ["--no-color", "openapi", str(petstore_path), "--output", str(target)]
        )
        assert result.exit_code == 0, result.output
        assert json.loads(target.read_text(encoding="utf-8"))["info"]["title"] == "Petstore"
        assert "Wrote OpenAPI document" in result.output

    def test_output_from_project_config(
        self, cli_runner, isolated_config: Path, petstore_path: Path
    ) -> None:
        (isolated_config / "clientsmith.json").write_text(
            json.dumps({"openapi_output": "spec/openapi.json"}), encoding="utf-8"
        )
        result = cli_runner.invoke(app, ["openapi", str(petstore_path)])
        assert result.exit_code == 0, result.output
        assert (isolated_config / "spec" / "openapi.json").is_file()

    def test_evaluation_error_exit_code(
        self, cli_runner, isolated_config: Path, petstore_raw: dict[str, Any]
    ) -> None:
        raw = dict(petstore_raw)
        route = dict(petstore_raw["routes"][0])
        route["selectors"] = [{"name": "q", "against": "NoSuchType", "source": "query"}]
        raw["routes"] = [route]
        definition = _write_definition(isolated_config, raw)

        result = cli_runner.invoke(app, ["--no-color", "openapi", definition])
        assert result.exit_code == 8
        assert "NoSuchType" in result.output

    def test_definition_without_routes_warns(self, cli_runner, isolated_config: Path) -> None:
        definition = _write_definition(isolated_config, {"title": "Empty"})
        target = isolated_config / "openapi.json"
        result = cli_runner.invoke(
            app, ["--no-color", "openapi", definition, "--output", str(target)]
        )
        assert result.exit_code == 0, result.output
        assert "declares no routes" in result.output
        assert json.loads(target.read_text(encoding="utf-8"))["paths"] == {}

    def test_invalid_common_module_in_definition(
        self, cli_runner, isolated_config: Path, petstore_raw: dict[str, Any]
    ) -> None:
        definition = _write_definition(isolated_config, {**petstore_raw, "common_module": "my-shared"})
        result = cli_runner.invoke(app, ["--no-color", "openapi", definition])
        assert result.exit_code == 7
        assert "dotted module path" in result.output
        assert "Cannot evaluate" not in result.output
