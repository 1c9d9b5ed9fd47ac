"""Fixtures shared by every swagctl test module.

Specs come from ``tests/fixtures/`` as raw dicts, parsed models or writable
copies under ``tmp_path``. Every test runs with swagctl's environment
variables cleared and with fresh output and logging state.
"""

from __future__ import annotations

import json
import logging
import shutil
from pathlib import Path
from typing import Any

import pytest
from typer.testing import CliRunner

from swagctl.models import ParsedSpec
from swagctl.output import reset_output


FIXTURES_DIR = Path(__file__).parent / "fixtures"

_ENV_VARS = (
    "SWAGGER_API_FILE",
    "SWAGGER_BASE_URL",
    "SWAGGER_LOAD_EDITOR",
    "SWAGCTL_TIMEOUT",
    "SWAGCTL_MAX_RETRIES",
    "SWAGCTL_VERIFY_SSL",
    "SWAGCTL_EDITOR_LISTEN",
    "NO_COLOR",
    "PAGER",
)


# ---------------------------------------------------------------------------
# Auto-reset global state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Drop the OutputManager and the Rich log handler after each test.

    Both hold the streams CliRunner swapped in, which are closed once the
    invocation ends.
    """
    yield
    reset_output()
    logger = logging.getLogger("swagctl")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove swagctl's environment variables for the duration of a test.

    Commands export ``SWAGGER_API_FILE`` themselves; setting each variable
    through monkeypatch first makes sure it is removed again afterwards.
    """
    for var in _ENV_VARS:
        monkeypatch.setenv(var, "")
        monkeypatch.delenv(var)


# ---------------------------------------------------------------------------
# Raw spec fixtures (plain dicts loaded from JSON files)
# ---------------------------------------------------------------------------


@pytest.fixture
def petstore_30_raw() -> dict[str, Any]:
    """petstore_3.0.json as loaded, $ref pointers intact."""
    with open(FIXTURES_DIR / "petstore_3.0.json") as f:
        return json.load(f)


@pytest.fixture
def petstore_20_raw() -> dict[str, Any]:
    """petstore_2.0.json as loaded."""
    with open(FIXTURES_DIR / "petstore_2.0.json") as f:
        return json.load(f)


# ---------------------------------------------------------------------------
# Parsed spec fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def petstore_spec(petstore_30_raw: dict[str, Any]) -> ParsedSpec:
    """Parsed petstore 3.0 spec."""
    from swagctl.parser.extractor import extract_spec

    return extract_spec(petstore_30_raw, "3.0.3")


@pytest.fixture
def swagger2_spec(petstore_20_raw: dict[str, Any]) -> ParsedSpec:
    """Parsed petstore Swagger 2.0 spec."""
    from swagctl.parser.extractor import extract_spec

    return extract_spec(petstore_20_raw, "2.0")


# ---------------------------------------------------------------------------
# Spec files copied into tmp_path
# ---------------------------------------------------------------------------


@pytest.fixture
def petstore_file(tmp_path: Path) -> Path:
    """A writable copy of the petstore 3.0 fixture."""
    target = tmp_path / "petstore.json"
    shutil.copy(FIXTURES_DIR / "petstore_3.0.json", target)
    return target


@pytest.fixture
def swagger2_file(tmp_path: Path) -> Path:
    """A writable copy of the petstore Swagger 2.0 fixture."""
    target = tmp_path / "swagger.json"
    shutil.copy(FIXTURES_DIR / "petstore_2.0.json", target)
    return target


@pytest.fixture
def invalid_file(tmp_path: Path) -> Path:
    """A spec that parses but fails meta-schema validation."""
    target = tmp_path / "invalid.json"
    shutil.copy(FIXTURES_DIR / "invalid_3.0.json", target)
    return target


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the XDG config and data homes into *tmp_path* and chdir there.

    Nothing reads the real user config, and a ``swagctl.json`` written to
    the returned directory becomes the project config.
    """
    config_dir = tmp_path / "config"
    data_dir = tmp_path / "data"
    config_dir.mkdir()
    data_dir.mkdir()

    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_dir))
    monkeypatch.setenv("XDG_DATA_HOME", str(data_dir))
    monkeypatch.setattr("swagctl.config._uses_xdg", lambda: True)
    monkeypatch.chdir(tmp_path)

    return tmp_path


# ---------------------------------------------------------------------------
# CLI runner
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner(isolated_config: Path) -> CliRunner:
    """A Typer CliRunner that keeps stderr separate from stdout.

    Depends on :func:`isolated_config` so the root callback never reads the
    real user or project config.
    """
    try:
        return CliRunner(mix_stderr=False)
    except TypeError:
        # Click 8.2 dropped mix_stderr; stderr is always captured separately.
        return CliRunner()
