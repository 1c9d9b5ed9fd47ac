"""Client command -- call an API operation described by a spec file.

Implements ``swagctl client``. Everything after the action is read from the
raw argument list rather than declared as Typer parameters, because the
method name and its arguments are only known once the spec is loaded::

    swagctl client petstore.json                      # list methods
    swagctl client petstore.json list_pets help       # method docs
    swagctl client petstore.json list_pets limit=10   # call it

When ``SWAGGER_API_FILE`` is set the spec file is taken from there and the
first argument is the method name, which lets shell wrappers pin a spec.
"""

from __future__ import annotations

import json
import os
import re
from typing import Any, Optional

import typer

from swagctl.client import DynamicClient
from swagctl.client.response import format_api_response, status_error
from swagctl.commands import fail
from swagctl.config import API_FILE_ENV, resolve_config
from swagctl.docs import render_operation_markdown
from swagctl.exceptions import InvalidUsageError, SwagctlError
from swagctl.output import debug, print_data, print_markdown, warning
from swagctl.parser import open_spec


CLIENT_USAGE = """\
Usage:
  # Call a method with arguments
  swagctl client path/to/spec.json <method> [args]

  # List methods
  swagctl client path/to/spec.json

  # Get documentation for a method
  swagctl client path/to/spec.json <method> help

  # Specify spec and/or base URL from environment.
  # Useful for shell wrappers
  SWAGGER_API_FILE=path/to/spec.json swagctl client <method>
  SWAGGER_BASE_URL=https://example.com/1.0 swagctl client <method>

  # Example arguments
  swagctl client path/to/spec.json list_pets '{"limit":10}'
  swagctl client path/to/spec.json list_pets limit=10 owner=joe
  swagctl client path/to/spec.json -b https://example.com/1.0 list_pets limit=10 owner=joe
"""

CONTEXT_SETTINGS = {"allow_extra_args": True, "ignore_unknown_options": True}

_NON_WORD_RE = re.compile(r"\W")
_KEY_VALUE_RE = re.compile(r"^(\w+)=(.*)$", re.DOTALL)
_INT_RE = re.compile(r"^[-+]?\d+$")
_FLOAT_RE = re.compile(r"^[-+]?(\d+\.\d*|\.\d+|\d+)([eE][-+]?\d+)?$")


def client_command(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None, "-b", "--base-url", help="Base URL for the API (overrides the spec)."
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", "-n", help="Print the request instead of sending it."
    ),
) -> None:
    """Call a method of the API described by a spec file.

    Arguments are ``key=value`` pairs (numbers are converted) and/or JSON
    objects. ``help`` after the method name prints its documentation.

    Raises:
        typer.Exit: With the error's exit code on failure, or the
            status-specific code when the API answers with an error.

    Example::

        swagctl client petstore.json list_pets limit=10
        swagctl client petstore.json show_pet_by_id '{"petId": 1}'
    """
    args = list(ctx.args)

    spec_file = os.environ.get(API_FILE_ENV)
    if not spec_file:
        if not args:
            print_data(CLIENT_USAGE.rstrip("\n"))
            return
        spec_file = args.pop(0)
        os.environ[API_FILE_ENV] = spec_file

    method = args.pop(0) if args else None

    try:
        if not method or _NON_WORD_RE.search(method):
            client = DynamicClient(open_spec(spec_file))
            print_data("\n".join(client.operations))
            return

        if "help" in args:
            print_markdown(render_operation_markdown(open_spec(spec_file), method))
            return

        call_args = parse_call_args(args)
        config = resolve_config(cli_base_url=base_url)
        client = DynamicClient.generate(spec_file, config=config.request, dry_run=dry_run)
        debug(f"Calling {method} on {client.base_url}")
        response = client.call(method, call_args)
    except SwagctlError as exc:
        raise fail(exc) from None

    format_api_response(response)
    exc = status_error(response)
    if exc is not None:
        raise fail(exc)


def parse_call_args(args: list[str]) -> dict[str, Any]:
    """Turn command-line arguments into the argument dict of a call.

    * ``{...}`` is decoded as a JSON object and merged in.
    * ``key=value`` sets *key*; numeric values become ``int`` or ``float``.
    * Anything else is skipped with a warning.

    Raises:
        InvalidUsageError: On malformed JSON.
    """
    call_args: dict[str, Any] = {}
    for arg in args:
        if arg.startswith("{"):
            try:
                call_args.update(json.loads(arg))
            except json.JSONDecodeError as exc:
                raise InvalidUsageError(f"Invalid JSON argument {arg!r}: {exc.msg}") from exc
            continue

        match = _KEY_VALUE_RE.match(arg)
        if match:
            call_args[match.group(1)] = coerce_number(match.group(2))
            continue

        warning(f"Ignoring argument: {arg}")
    return call_args


def coerce_number(value: str) -> Any:
    """Return *value* as an ``int`` or ``float`` when it looks like one."""
    if _INT_RE.match(value):
        return int(value)
    if _FLOAT_RE.match(value):
        return float(value)
    return value
