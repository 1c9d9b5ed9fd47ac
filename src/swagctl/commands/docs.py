"""Documentation commands -- ``doc`` and ``view``.

``swagctl doc`` writes the Markdown reference for a spec to stdout (or to
``-o FILE``). ``swagctl view`` renders the same Markdown for the terminal
and shows it in ``$PAGER``; when stdout is not a terminal it prints the
text directly.
"""

from __future__ import annotations

from typing import Optional

import typer

from swagctl.commands import fail, usage
from swagctl.docs import render_markdown
from swagctl.exceptions import InvalidUsageError, SwagctlError
from swagctl.output import print_data, print_markdown
from swagctl.parser import open_spec


def _markdown_for(file: Optional[str], action: str) -> str:
    if not file:
        raise InvalidUsageError(usage(action))
    spec = open_spec(file)
    return render_markdown(spec)


def doc_command(
    file: Optional[str] = typer.Argument(None, help="Spec file, URL, or '-' for stdin."),
) -> None:
    """Write Markdown documentation for a spec to STDOUT.

    Example::

        swagctl doc petstore.json > petstore.md
    """
    try:
        markdown = _markdown_for(file, "doc")
    except SwagctlError as exc:
        raise fail(exc) from None
    print_data(markdown.rstrip("\n"))


def view_command(
    file: Optional[str] = typer.Argument(None, help="Spec file, URL, or '-' for stdin."),
) -> None:
    """Read the documentation for a spec in a pager.

    Example::

        PAGER=more swagctl view petstore.json
    """
    try:
        markdown = _markdown_for(file, "view")
    except SwagctlError as exc:
        raise fail(exc) from None
    print_markdown(markdown, paged=True)
