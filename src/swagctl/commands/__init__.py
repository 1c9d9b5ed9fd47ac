"""Built-in swagctl actions.

Each module defines one Typer command function; :mod:`swagctl.app`
registers them on the root application:

* ``client`` -- :func:`swagctl.commands.client.client_command`
* ``edit`` -- :func:`swagctl.commands.edit.edit_command`
* ``doc`` / ``view`` -- :mod:`swagctl.commands.docs`
* ``validate`` -- :func:`swagctl.commands.validate.validate_command`

This module also holds the one-line usage of every action and the helper
the commands use to turn a :class:`~swagctl.exceptions.SwagctlError` into
an error message and exit code.
"""

from __future__ import annotations

import typer

from swagctl.exceptions import SwagctlError
from swagctl.output import error

USAGE: dict[str, str] = {
    "client": "Usage: swagctl client path/to/spec.json <method> [args]",
    "edit": "Usage: swagctl edit [path/to/spec.json] [--listen URL]",
    "doc": "Usage: swagctl doc path/to/spec.json",
    "view": "Usage: swagctl view path/to/spec.json",
    "validate": "Usage: swagctl validate path/to/spec.json",
}

_USAGE_COMMENTS: dict[str, str] = {
    "client": "Make a request to an API described by a spec",
    "edit": "Edit an API file in your browser",
    "doc": "Write Markdown documentation to STDOUT",
    "view": "Read the documentation in a pager",
    "validate": "Validate an API file",
}


def usage(action: str) -> str:
    """Return the one-line usage for *action*.

    Raises:
        KeyError: If *action* is not a swagctl action.
    """
    try:
        return USAGE[action]
    except KeyError:
        raise KeyError(f"No usage for '{action}'") from None


def full_usage() -> str:
    """Usage text for all actions, each under a one-line comment."""
    blocks = [f"  # {_USAGE_COMMENTS[action]}\n  {line}" for action, line in USAGE.items()]
    return "Usage:\n\n" + "\n\n".join(blocks) + "\n"


def fail(exc: SwagctlError) -> typer.Exit:
    """Print *exc* as an error and return the :class:`typer.Exit` to raise.

    Example::

        except SwagctlError as exc:
            raise fail(exc) from None
    """
    error(str(exc))
    return typer.Exit(code=exc.exit_code)
