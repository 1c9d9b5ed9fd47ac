"""Validate command -- check a spec against the Swagger/OpenAPI meta-schema."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from swagctl.commands import fail, usage
from swagctl.exceptions import InvalidUsageError, SpecInvalidError, SwagctlError
from swagctl.output import print_data
from swagctl.parser import load_spec
from swagctl.parser.validator import validate_spec


def validate_command(
    file: Optional[str] = typer.Argument(None, help="Spec file, URL, or '-' for stdin."),
) -> None:
    """Validate an API file.

    Prints ``<file> is valid.`` or one ``<json pointer>: <message>`` line per
    error. Exits with 8 when the spec is invalid and 7 when it cannot be
    loaded.

    Example::

        swagctl validate petstore.json
    """
    try:
        if not file:
            raise InvalidUsageError(usage("validate"))
        errors = validate_spec(load_spec(file), base_uri=_base_uri(file))
        if errors:
            print_data("\n".join(errors))
            raise SpecInvalidError(file, errors)
    except SwagctlError as exc:
        raise fail(exc) from None

    print_data(f"{file} is valid.")


def _base_uri(source: str) -> str:
    if source == "-":
        return ""
    if source.startswith(("http://", "https://")):
        return source
    return Path(source).resolve().as_uri()
