"""Terminal output for swagctl.

Data -- response bodies, method lists, documentation -- goes to stdout (or
to the ``-o`` file) and nothing else does: status lines, warnings, errors and
debug messages all go to stderr, so ``swagctl client spec.json list_pets |
jq`` keeps working.

Colour is off with ``--no-color``, with ``NO_COLOR`` set to any value, or
with ``TERM=dumb``. Rich rendering is used only when stdout is a terminal;
piped output is plain text.

Commands call the module-level helpers (:func:`info`, :func:`error`,
:func:`print_data`, ...), which delegate to the :class:`OutputManager`
installed by the root callback through :func:`set_output`.
"""

from __future__ import annotations

import io
import json
import os
import subprocess
import sys
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.markdown import Markdown
from rich.syntax import Syntax
from rich.text import Text

DEFAULT_PAGER = "less -FIRX"


class OutputFormat(str, Enum):
    """How response bodies are printed.

    ``AUTO`` becomes ``RICH`` on a colour terminal and ``PLAIN`` otherwise.
    """

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class OutputManager:
    """Routes data to stdout and diagnostics to stderr.

    Args:
        format: Body format; ``AUTO`` is resolved on construction.
        no_color: Disable colour. Also forced by ``NO_COLOR``/``TERM=dumb``.
        quiet: Hide :meth:`info` messages.
        verbose: Show :meth:`debug` messages.
        use_pager: Let :meth:`paged_output` start ``$PAGER``.
        output_file: Write data here instead of stdout.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
        use_pager: bool = True,
        output_file: Optional[str] = None,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose
        self._use_pager = use_pager
        self._output_file = output_file

        if format == OutputFormat.AUTO:
            format = OutputFormat.RICH if _is_tty() and not self._no_color else OutputFormat.PLAIN
        self._format = format

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=format == OutputFormat.RICH,
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    @property
    def is_verbose(self) -> bool:
        return self._verbose

    @property
    def stderr_console(self) -> Console:
        """Console for diagnostics; the logging handler writes here too."""
        return self._stderr

    # ------------------------------------------------------------------ #
    # Data
    # ------------------------------------------------------------------ #

    def print_data(self, text: str) -> None:
        """Write *text*, newline-terminated, to stdout or append it to the output file."""
        if not text.endswith("\n"):
            text += "\n"
        if self._output_file:
            with open(self._output_file, "a", encoding="utf-8") as f:
                f.write(text)
        else:
            sys.stdout.write(text)
            sys.stdout.flush()

    def format_response(self, data: Any, content_type: str = "application/json") -> None:
        """Print a response body.

        Structured data is printed as indented JSON, syntax-highlighted in
        RICH mode. A string is re-indented when it holds JSON and either the
        format is JSON or *content_type* says so; other text is printed as
        received. With an output file the body replaces the file's contents.
        """
        if isinstance(data, str) and (self._format == OutputFormat.JSON or "json" in content_type):
            data = _decode_json(data)
        text = _to_text(data)

        if self._output_file:
            with open(self._output_file, "w", encoding="utf-8") as f:
                f.write(text if text.endswith("\n") else text + "\n")
        elif self._format != OutputFormat.RICH:
            self.print_data(text)
        elif isinstance(data, (dict, list)):
            self._stdout.print(Syntax(text, "json", theme="monokai", word_wrap=True))
        else:
            self._stdout.print(text, markup=False, highlight=False)

    def render_markdown_text(self, markdown: str, width: Optional[int] = None) -> str:
        """Render Markdown with Rich and return the terminal text.

        ANSI styles are kept unless colour is off; ``less -R`` shows them.
        """
        buffer = io.StringIO()
        console = Console(
            file=buffer,
            no_color=self._no_color,
            force_terminal=not self._no_color,
            width=width or self._stdout.width,
        )
        console.print(Markdown(markdown))
        return buffer.getvalue()

    def print_markdown(self, markdown: str, paged: bool = False) -> None:
        """Print Markdown, rendered in RICH mode and as source otherwise.

        With *paged*, the result goes through :meth:`paged_output`. An
        output file always receives the Markdown source.
        """
        if self._output_file:
            self.print_data(markdown)
            return

        text = markdown
        if self._format == OutputFormat.RICH:
            text = self.render_markdown_text(markdown)

        if paged:
            self.paged_output(text)
        elif self._format == OutputFormat.RICH:
            sys.stdout.write(text)
            sys.stdout.flush()
        else:
            self.print_data(text)

    def paged_output(self, text: str) -> None:
        """Show *text* in ``$PAGER`` (default ``less -FIRX``).

        Prints to stdout instead when paging is off, stdout is not a
        terminal, or the pager cannot be started.
        """
        if not self._use_pager or not _is_tty():
            self.print_data(text)
            return

        try:
            proc = subprocess.Popen(
                os.environ.get("PAGER") or DEFAULT_PAGER,
                shell=True,
                stdin=subprocess.PIPE,
                encoding="utf-8",
            )
            proc.communicate(input=text)
        except (OSError, BrokenPipeError):
            self.print_data(text)

    # ------------------------------------------------------------------ #
    # Diagnostics
    # ------------------------------------------------------------------ #

    def info(self, message: str) -> None:
        """Status message; hidden by ``--quiet``."""
        if not self._quiet:
            self._diagnostic(message)

    def warning(self, message: str) -> None:
        self._diagnostic(message, label="Warning:", style="yellow")

    def error(self, message: str) -> None:
        self._diagnostic(message, label="Error:", style="bold red")

    def debug(self, message: str) -> None:
        """Shown only with ``--verbose``."""
        if self._verbose:
            self._diagnostic(f"[debug] {message}", style="dim")

    def _diagnostic(self, message: str, label: str = "", style: str = "") -> None:
        if self._no_color:
            print(f"{label} {message}" if label else message, file=sys.stderr, flush=True)
            return

        # Text instead of markup: messages often contain brackets.
        line = Text()
        if label:
            line.append(f"{label} ", style=style)
            line.append(message)
        else:
            line.append(message, style=style or None)
        self._stderr.print(line, highlight=False, soft_wrap=True)


def _decode_json(text: str) -> Any:
    try:
        return json.loads(text)
    except ValueError:
        return text


def _to_text(data: Any) -> str:
    if isinstance(data, str):
        return data
    return json.dumps(data, indent=2, ensure_ascii=False, default=str)


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """True when ``NO_COLOR`` is set (to anything) or ``TERM`` is ``dumb``."""
    return "NO_COLOR" in os.environ or os.environ.get("TERM") == "dumb"


# ------------------------------------------------------------------ #
# Global instance
# ------------------------------------------------------------------ #

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed :class:`OutputManager`, creating a default one if needed."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Drop the installed manager. Tests call this between CLI invocations."""
    global _output
    _output = None


def format_response(data: Any, content_type: str = "application/json") -> None:
    get_output().format_response(data, content_type)


def print_data(text: str) -> None:
    get_output().print_data(text)


def print_markdown(markdown: str, paged: bool = False) -> None:
    get_output().print_markdown(markdown, paged=paged)


def info(message: str) -> None:
    get_output().info(message)


def warning(message: str) -> None:
    get_output().warning(message)


def error(message: str) -> None:
    get_output().error(message)


def debug(message: str) -> None:
    get_output().debug(message)
