"""Where swagctl keeps its settings and how the layers are combined.

Settings come from five layers, highest first:

1. command-line flags (``-b``, ``--listen``, ``--json``/``--plain``)
2. environment variables, see :data:`ENV_OVERRIDES`
3. ``./swagctl.json`` in the working directory
4. ``config.json`` in :func:`get_config_dir`
5. the defaults on :class:`~swagctl.models.GlobalConfig`

The project and user files share one shape. :func:`atomic_write` is also
used by the editor to save spec files.
"""

from __future__ import annotations

import contextlib
import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Any, Callable, Optional

from swagctl.exceptions import ConfigError
from swagctl.models import GlobalConfig

_APP_NAME = "swagctl"
USER_CONFIG_FILE = "config.json"
PROJECT_CONFIG_FILE = "swagctl.json"

API_FILE_ENV = "SWAGGER_API_FILE"
"""Spec file used by ``client`` and ``edit`` when set."""

BASE_URL_ENV = "SWAGGER_BASE_URL"
"""Base URL override for ``client``."""

LOAD_EDITOR_ENV = "SWAGGER_LOAD_EDITOR"
"""Set to ``1`` by ``edit`` before the editor app factory runs."""


# --- Directories ---


def _uses_xdg() -> bool:
    system = platform.system()
    return system == "Linux" or system.endswith("BSD")


def _xdg_dir(env_var: str, *default: str) -> Path:
    root = os.environ.get(env_var) or Path.home().joinpath(*default)
    return Path(root) / _APP_NAME


def _created(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_config_dir() -> Path:
    """``$XDG_CONFIG_HOME/swagctl`` on Linux and BSD, ``~/.swagctl`` elsewhere."""
    if _uses_xdg():
        return _created(_xdg_dir("XDG_CONFIG_HOME", ".config"))
    return _created(Path.home() / f".{_APP_NAME}")


def get_data_dir() -> Path:
    """Directory for crash logs.

    ``$XDG_DATA_HOME/swagctl`` on Linux and BSD, ``~/.swagctl/logs``
    elsewhere. Created on first use.
    """
    if _uses_xdg():
        return _created(_xdg_dir("XDG_DATA_HOME", ".local", "share"))
    return _created(Path.home() / f".{_APP_NAME}" / "logs")


def atomic_write(path: Path, data: str) -> None:
    """Replace *path* with *data* so readers never see a partial file.

    *data* goes to a hidden sibling first, is fsynced and then renamed over
    *path*. The sibling is removed if any step fails.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        with contextlib.suppress(FileNotFoundError):
            os.unlink(tmp_name)
        raise


# --- Files ---


def _read_object(path: Path, label: str) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Invalid {label} at {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid {label} at {path}: expected a JSON object")
    return data


def load_global_config() -> GlobalConfig:
    """Read the user config file, or return defaults when there is none.

    Raises:
        ConfigError: The file is not a JSON object of the right shape.
    """
    path = get_config_dir() / USER_CONFIG_FILE
    if not path.is_file():
        return GlobalConfig()
    data = _read_object(path, "global config")
    try:
        return GlobalConfig.model_validate(data)
    except ValueError as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def load_project_config() -> Optional[dict[str, Any]]:
    """Raw contents of ``./swagctl.json``, or ``None`` if it does not exist.

    The shape is checked by :func:`resolve_config` after merging.
    """
    path = Path.cwd() / PROJECT_CONFIG_FILE
    if not path.is_file():
        return None
    return _read_object(path, "project config")


def _merged(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    result = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            value = _merged(result[key], value)
        result[key] = value
    return result


# --- Environment ---


def _as_text(name: str, raw: str) -> str:
    return raw


def _as_int(name: str, raw: str) -> int:
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None


def _as_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    raise ConfigError(f"{name} must be a boolean, got {raw!r}")


ENV_OVERRIDES: tuple[tuple[str, str, str, Callable[[str, str], Any]], ...] = (
    (BASE_URL_ENV, "request", "base_url", _as_text),
    ("SWAGCTL_TIMEOUT", "request", "timeout", _as_int),
    ("SWAGCTL_MAX_RETRIES", "request", "max_retries", _as_int),
    ("SWAGCTL_VERIFY_SSL", "request", "verify_ssl", _as_bool),
    ("SWAGCTL_EDITOR_LISTEN", "editor", "listen", _as_text),
)
"""``(variable, section, field, parser)`` rows applied by :func:`resolve_config`.

Unset and empty variables are skipped.
"""


def resolve_config(
    cli_base_url: Optional[str] = None,
    cli_listen: Optional[str] = None,
    cli_format: Optional[str] = None,
) -> GlobalConfig:
    """Combine every settings layer into the effective configuration.

    Args:
        cli_base_url: ``client -b`` value.
        cli_listen: ``edit --listen`` value.
        cli_format: ``json`` or ``plain`` from the root flags.

    Raises:
        ConfigError: A config file is malformed or an environment value
            cannot be parsed.
    """
    config = load_global_config()

    project = load_project_config()
    if project is not None:
        try:
            config = GlobalConfig.model_validate(_merged(config.model_dump(mode="json"), project))
        except ValueError as exc:
            raise ConfigError(f"Invalid project config: {exc}") from exc

    for name, section, field, parse in ENV_OVERRIDES:
        raw = os.environ.get(name)
        if raw:
            setattr(getattr(config, section), field, parse(name, raw))

    flags = (
        ("request", "base_url", cli_base_url),
        ("editor", "listen", cli_listen),
        ("output", "format", cli_format),
    )
    for section, field, value in flags:
        if value is not None:
            setattr(getattr(config, section), field, value)

    return config
