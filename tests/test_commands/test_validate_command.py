"""Tests for ``swagctl validate``."""

from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from swagctl.app import app
from swagctl.commands import usage

FIXTURES_DIR = Path(__file__).parent.parent / "fixtures"


class TestValidateCommand:
    def test_valid_openapi3(self, cli_runner: CliRunner, petstore_file: Path) -> None:
        result = cli_runner.invoke(app, ["validate", str(petstore_file)])
        assert result.exit_code == 0
        assert result.stdout == f"{petstore_file} is valid.\n"

    def test_valid_swagger2(self, cli_runner: CliRunner, swagger2_file: Path) -> None:
        result = cli_runner.invoke(app, ["validate", str(swagger2_file)])
        assert result.exit_code == 0
        assert result.stdout.endswith("is valid.\n")

    def test_valid_yaml(self, cli_runner: CliRunner) -> None:
        spec = FIXTURES_DIR / "petstore_3.0.yaml"
        result = cli_runner.invoke(app, ["validate", str(spec)])
        assert result.exit_code == 0, result.stdout
        assert result.stdout == f"{spec} is valid.\n"

    def test_invalid_spec_lists_errors(self, cli_runner: CliRunner, invalid_file: Path) -> None:
        result = cli_runner.invoke(app, ["--no-color", "validate", str(invalid_file)])
        assert result.exit_code == 8
        lines = result.stdout.splitlines()
        assert lines
        assert all(line.startswith("/") for line in lines)
        assert any(line.startswith("/info:") and "version" in line for line in lines)
        assert "validation error(s)" in result.stderr

    def test_dangling_ref_is_invalid(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        spec = tmp_path / "dangling.json"
        spec.write_text(
            json.dumps(
                {
                    "openapi": "3.0.3",
                    "info": {"title": "Dangling", "version": "1.0.0"},
                    "paths": {
                        "/pets": {
                            "get": {
                                "responses": {
                                    "200": {
                                        "description": "ok",
                                        "content": {
                                            "application/json": {
                                                "schema": {"$ref": "#/components/schemas/Nope"}
                                            }
                                        },
                                    }
                                }
                            }
                        }
                    },
                }
            )
        )
        result = cli_runner.invoke(app, ["--no-color", "validate", str(spec)])
        assert result.exit_code == 8
        assert "Unresolvable $ref '#/components/schemas/Nope'" in result.stdout

    def test_missing_file(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        result = cli_runner.invoke(app, ["--no-color", "validate", str(tmp_path / "nope.json")])
        assert result.exit_code == 7
        assert "Spec file not found" in result.stderr

    def test_unparseable_file(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        broken = tmp_path / "broken.json"
        broken.write_text('{"openapi": ')
        result = cli_runner.invoke(app, ["--no-color", "validate", str(broken)])
        assert result.exit_code == 7

    def test_no_file_prints_usage(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(app, ["--no-color", "validate"])
        assert result.exit_code == 2
        assert usage("validate") in result.stderr
