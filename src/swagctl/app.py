"""The ``swagctl`` command.

The root callback reads the global flags, resolves configuration and
installs the :class:`~swagctl.output.OutputManager` every action writes
through; the actions themselves live in :mod:`swagctl.commands`. With no
action, the usage of every action is printed.

:func:`main` is the console-script entry point. It is the last line of
defence: a :class:`~swagctl.exceptions.SwagctlError` that escapes a command
still exits with its code, and anything else leaves a traceback in a crash
log under :func:`~swagctl.config.get_data_dir`.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer
from rich.logging import RichHandler

from swagctl import __version__
from swagctl.commands import fail, full_usage
from swagctl.commands.client import CONTEXT_SETTINGS, client_command
from swagctl.commands.docs import doc_command, view_command
from swagctl.commands.edit import edit_command
from swagctl.commands.validate import validate_command
from swagctl.config import get_data_dir, resolve_config
from swagctl.exceptions import SwagctlError
from swagctl.exit_codes import EXIT_GENERIC_FAILURE
from swagctl.output import OutputFormat, OutputManager, error, get_output, set_output

EXIT_INTERRUPTED = 130

app = typer.Typer(
    name="swagctl",
    help="Interface with Swagger 2.0 and OpenAPI 3.x spec files.",
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("client", context_settings=CONTEXT_SETTINGS)(client_command)
app.command("edit")(edit_command)
app.command("doc")(doc_command)
app.command("view")(view_command)
app.command("validate")(validate_command)


def _print_version(value: bool) -> None:
    if value:
        typer.echo(f"swagctl {__version__}")
        raise typer.Exit()


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False, "--version", callback=_print_version, is_eager=True, help="Show version and exit."
    ),
    json_output: bool = typer.Option(False, "--json", help="Print response bodies as JSON."),
    plain_output: bool = typer.Option(False, "--plain", help="Never use Rich rendering."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Hide status messages."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug messages."),
    output_file: Optional[str] = typer.Option(
        None, "-o", "--output", help="Write output to this file instead of stdout."
    ),
) -> None:
    """Interface with Swagger 2.0 and OpenAPI 3.x spec files."""
    flag_format = "json" if json_output else "plain" if plain_output else None

    # Errors below are reported through a manager built from the flags
    # alone, since the configured one does not exist yet.
    set_output(OutputManager(no_color=no_color, quiet=quiet, verbose=verbose))
    try:
        config = resolve_config(cli_format=flag_format)
    except SwagctlError as exc:
        raise fail(exc) from None

    set_output(
        OutputManager(
            format=OutputFormat(config.output.format),
            no_color=no_color,
            quiet=quiet,
            verbose=verbose,
            use_pager=config.output.pager,
            output_file=output_file,
        )
    )
    _configure_logging(verbose)

    if ctx.invoked_subcommand is None:
        typer.echo(full_usage(), nl=False)


def _configure_logging(verbose: bool) -> None:
    """Route ``swagctl.*`` records to stderr through a single RichHandler.

    Calling this again replaces the handler, so repeated invocations in one
    process do not print every record twice.
    """
    logger = logging.getLogger("swagctl")
    for old in [h for h in logger.handlers if isinstance(h, RichHandler)]:
        logger.removeHandler(old)

    logger.addHandler(
        RichHandler(console=get_output().stderr_console, show_time=verbose, show_path=verbose)
    )
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.propagate = False


def _cancelled() -> None:
    sys.stderr.write("\nCancelled.\n")
    sys.exit(EXIT_INTERRUPTED)


def _setup_signal_handlers() -> None:
    def on_sigint(signum: int, frame: Any) -> None:
        _cancelled()

    signal.signal(signal.SIGINT, on_sigint)


def _write_crash_log(exc: BaseException) -> str:
    """Save the traceback of *exc* and return the log's path."""
    logs = get_data_dir() / "logs"
    logs.mkdir(parents=True, exist_ok=True)
    path = logs / f"crash-{datetime.now():%Y%m%d-%H%M%S}.log"
    path.write_text("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)))
    return str(path)


def main() -> None:
    """Run the ``swagctl`` console script."""
    _setup_signal_handlers()
    try:
        app()
    except KeyboardInterrupt:
        _cancelled()
    except SwagctlError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
    except Exception as exc:
        error(f"Unexpected error. Debug log: {_write_crash_log(exc)}")
        sys.exit(EXIT_GENERIC_FAILURE)
