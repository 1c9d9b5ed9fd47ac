"""Edit command -- serve the browser-based spec editor."""

from __future__ import annotations

import os
from typing import Optional

import typer

from swagctl.commands import fail
from swagctl.config import API_FILE_ENV, resolve_config
from swagctl.editor import run_editor
from swagctl.exceptions import SwagctlError
from swagctl.output import get_output, info, warning


def edit_command(
    file: Optional[str] = typer.Argument(
        None, help="Spec file to edit. Omit to start with an empty document."
    ),
    listen: Optional[str] = typer.Option(
        None, "--listen", "-l", help="Listen URL, e.g. http://*:5000."
    ),
    reload: bool = typer.Option(
        False, "--reload", "-w", help="Restart the server when the spec file changes."
    ),
) -> None:
    """Edit an API file in your browser.

    ``SWAGGER_API_FILE`` takes precedence over FILE. The server is uvicorn;
    only the listen address and reloading are configurable, other uvicorn
    options are not passed through.

    Example::

        swagctl edit petstore.json --listen http://*:5000
    """
    env_file = os.environ.get(API_FILE_ENV)
    if env_file and file and file != env_file:
        warning(f"{API_FILE_ENV} is set; editing {env_file} instead of {file}")
    spec_file = env_file or file

    try:
        config = resolve_config(cli_listen=listen)
        info(f"Editor listening on {config.editor.listen}")
        run_editor(
            spec_file,
            listen=config.editor.listen,
            reload=reload,
            log_level="debug" if get_output().is_verbose else "info",
        )
    except SwagctlError as exc:
        raise fail(exc) from None
