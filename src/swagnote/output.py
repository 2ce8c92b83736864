"""Terminal output for the swagnote CLI.

Two streams, two jobs:

* **stdout** carries data only: the rendered document for ``--output -``
  and the tables of ``swagnote inspect``. It stays pipeable.
* **stderr** carries progress, diagnostics and errors, through a Rich
  console shared with the logging handler.

Tables come out as a Rich table on an interactive terminal, as
tab-separated lines when piped (or with ``--plain``), and as a JSON array
with ``--json``. ``NO_COLOR``, ``TERM=dumb`` and ``--no-color`` turn colour
off.

The CLI callback builds one :class:`OutputManager` and installs it with
:func:`set_output`; commands use the module-level helpers.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from swagnote.models import Diagnostic, Severity


class OutputFormat(str, Enum):
    """Format of tables written to stdout."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


# level -> (prefix, rich style)
_LEVELS: dict[str, tuple[str, str]] = {
    "info": ("", ""),
    "success": ("", "green"),
    "warning": ("Warning:", "yellow"),
    "error": ("Error:", "bold red"),
    "debug": ("[debug]", "dim"),
}


class OutputManager:
    """Stream and format choices for one CLI invocation.

    Args:
        format: Table format. ``AUTO`` picks ``RICH`` on a colour-capable
            TTY and ``PLAIN`` otherwise.
        no_color: Disable colour and markup on both streams.
        quiet: Drop info and success messages.
        verbose: Show debug messages.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose
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
    def stderr_console(self) -> Console:
        """The stderr console, shared with the logging handler."""
        return self._stderr

    # ------------------------------------------------------------------ #
    # stdout
    # ------------------------------------------------------------------ #

    def print_data(self, text: str) -> None:
        """Write *text* to stdout unchanged, ending it with a newline."""
        if not text.endswith("\n"):
            text += "\n"
        sys.stdout.write(text)
        sys.stdout.flush()

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Print *rows* under *headers* in the active format.

        The title is only shown by the Rich table; JSON and plain output
        hold nothing but the rows.
        """
        if self._format == OutputFormat.JSON:
            records = [dict(zip(headers, row)) for row in rows]
            self.print_data(json.dumps(records, indent=2, ensure_ascii=False))
            return
        if self._format == OutputFormat.PLAIN:
            self.print_data("\n".join("\t".join(line) for line in [headers, *rows]))
            return

        table = Table(title=title, header_style="bold cyan")
        for index, header in enumerate(headers):
            table.add_column(header, style="bold" if index == 0 else None)
        for row in rows:
            table.add_row(*map(escape, row))
        self._stdout.print(table)

    # ------------------------------------------------------------------ #
    # stderr
    # ------------------------------------------------------------------ #

    def info(self, message: str) -> None:
        if not self._quiet:
            self._emit("info", message)

    def success(self, message: str) -> None:
        if not self._quiet:
            self._emit("success", message)

    def warning(self, message: str) -> None:
        self._emit("warning", message)

    def error(self, message: str) -> None:
        self._emit("error", message)

    def debug(self, message: str) -> None:
        if self._verbose:
            self._emit("debug", message)

    def diagnostics(self, diagnostics: list[Diagnostic]) -> None:
        """Print every diagnostic of a run, then a one-line count.

        Errors and warnings are never suppressed by ``--quiet``; the count
        is.
        """
        errors = 0
        for diagnostic in diagnostics:
            if diagnostic.severity == Severity.ERROR:
                errors += 1
                self.error(str(diagnostic))
            else:
                self.warning(str(diagnostic))
        if diagnostics:
            self.info(f"{errors} error(s), {len(diagnostics) - errors} warning(s)")

    def _emit(self, level: str, message: str) -> None:
        prefix, style = _LEVELS[level]
        if self._no_color:
            print(f"{prefix} {message}" if prefix else message, file=sys.stderr, flush=True)
            return
        text = escape(message)
        if prefix:
            text = f"{escape(prefix)} {text}"
        self._stderr.print(f"[{style}]{text}[/{style}]" if style else text)


def _is_tty() -> bool:
    isatty = getattr(sys.stdout, "isatty", None)
    return bool(isatty and isatty())


def _should_disable_color() -> bool:
    """True when ``NO_COLOR`` is set, whatever its value, or ``TERM=dumb``."""
    return "NO_COLOR" in os.environ or os.environ.get("TERM") == "dumb"


# ------------------------------------------------------------------ #
# Process-wide manager
# ------------------------------------------------------------------ #

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed manager, creating a default one on first use."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Forget the installed manager. The test-suite calls this between tests."""
    global _output
    _output = None


def print_data(text: str) -> None:
    get_output().print_data(text)


def print_table(headers: list[str], rows: list[list[str]], title: Optional[str] = None) -> None:
    get_output().print_table(headers, rows, title)


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def error(message: str) -> None:
    get_output().error(message)


def debug(message: str) -> None:
    get_output().debug(message)


def diagnostics(items: list[Diagnostic]) -> None:
    get_output().diagnostics(items)
