"""Tests for ``swagctl edit``.

uvicorn is replaced with a mock so no server is started; the tests check
what the command would have served and where.
"""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from typer.testing import CliRunner

from swagctl.app import app


@pytest.fixture
def uvicorn_run(monkeypatch: pytest.MonkeyPatch, isolated_config: Path) -> MagicMock:
    run = MagicMock()
    monkeypatch.setattr("swagctl.editor.server.uvicorn.run", run)
    return run


class TestEditCommand:
    def test_default_listen(self, cli_runner: CliRunner, petstore_file: Path, uvicorn_run: MagicMock) -> None:
        result = cli_runner.invoke(app, ["--no-color", "edit", str(petstore_file)])

        assert result.exit_code == 0, result.stderr
        uvicorn_run.assert_called_once()
        args, kwargs = uvicorn_run.call_args
        assert args == ("swagctl.editor.server:create_app_from_env",)
        assert kwargs["factory"] is True
        assert (kwargs["host"], kwargs["port"]) == ("127.0.0.1", 3000)
        assert kwargs["log_level"] == "info"
        assert "reload" not in kwargs
        assert os.environ["SWAGGER_API_FILE"] == str(petstore_file)
        assert os.environ["SWAGGER_LOAD_EDITOR"] == "1"
        assert "Editor listening on http://127.0.0.1:3000" in result.stderr

    def test_listen_option(self, cli_runner: CliRunner, petstore_file: Path, uvicorn_run: MagicMock) -> None:
        result = cli_runner.invoke(app, ["edit", str(petstore_file), "--listen", "http://*:5000"])
        assert result.exit_code == 0, result.stderr
        kwargs = uvicorn_run.call_args.kwargs
        assert (kwargs["host"], kwargs["port"]) == ("0.0.0.0", 5000)

    def test_listen_from_environment(
        self, cli_runner: CliRunner, petstore_file: Path, uvicorn_run: MagicMock
    ) -> None:
        result = cli_runner.invoke(
            app, ["edit", str(petstore_file)], env={"SWAGCTL_EDITOR_LISTEN": "http://localhost:8080"}
        )
        assert result.exit_code == 0, result.stderr
        kwargs = uvicorn_run.call_args.kwargs
        assert (kwargs["host"], kwargs["port"]) == ("localhost", 8080)

    def test_reload_watches_spec_directory(
        self, cli_runner: CliRunner, petstore_file: Path, uvicorn_run: MagicMock
    ) -> None:
        result = cli_runner.invoke(app, ["edit", str(petstore_file), "-w"])
        assert result.exit_code == 0, result.stderr
        kwargs = uvicorn_run.call_args.kwargs
        assert kwargs["reload"] is True
        assert kwargs["reload_dirs"] == [str(petstore_file.resolve().parent)]
        assert "*.yaml" in kwargs["reload_includes"]

    def test_verbose_logs_debug(self, cli_runner: CliRunner, petstore_file: Path, uvicorn_run: MagicMock) -> None:
        result = cli_runner.invoke(app, ["-v", "edit", str(petstore_file)])
        assert result.exit_code == 0, result.stderr
        assert uvicorn_run.call_args.kwargs["log_level"] == "debug"

    def test_without_file(self, cli_runner: CliRunner, uvicorn_run: MagicMock) -> None:
        result = cli_runner.invoke(app, ["edit"])
        assert result.exit_code == 0, result.stderr
        assert os.environ["SWAGGER_API_FILE"] == ""

    def test_environment_file_wins(
        self, cli_runner: CliRunner, petstore_file: Path, swagger2_file: Path, uvicorn_run: MagicMock
    ) -> None:
        result = cli_runner.invoke(
            app,
            ["--no-color", "edit", str(petstore_file)],
            env={"SWAGGER_API_FILE": str(swagger2_file)},
        )
        assert result.exit_code == 0, result.stderr
        assert f"editing {swagger2_file} instead of {petstore_file}" in result.stderr

    def test_unsupported_listen_scheme(
        self, cli_runner: CliRunner, petstore_file: Path, uvicorn_run: MagicMock
    ) -> None:
        result = cli_runner.invoke(
            app, ["--no-color", "edit", str(petstore_file), "--listen", "https://*:443"]
        )
        assert result.exit_code == 2
        assert "only http:// is supported" in result.stderr
        uvicorn_run.assert_not_called()
