"""Console output with strict stdout/stderr discipline.

* **stdout** -- primary data only: the OpenAPI document, the dry-run artifact
  listing. This is what downstream tools pipe and parse.
* **stderr** -- diagnostics (status, warnings, errors). Never mixed into the
  data stream.
* **Colour control** -- respects ``NO_COLOR``, ``TERM=dumb`` and the
  ``--no-color`` CLI flag.

:class:`OutputManager` holds the Rich consoles and the quiet/verbose flags.
The CLI creates one in :func:`~clientsmith.app.main_callback` and installs it
with :func:`set_output`; everything else calls the module-level helpers.
"""

from __future__ import annotations

import json
import os
import sys
from typing import Any, Optional

from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table


class OutputManager:
    """Routes data to stdout and diagnostics to stderr.

    Args:
        no_color: Disable colour and Rich markup.
        quiet: Suppress informational and success messages.
        verbose: Show debug messages.
    """

    def __init__(self, no_color: bool = False, quiet: bool = False, verbose: bool = False) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose
        self._rich = _is_tty() and not self._no_color
        self._stdout = Console(file=sys.stdout, no_color=self._no_color)
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def is_quiet(self) -> bool:
        return self._quiet

    @property
    def is_verbose(self) -> bool:
        return self._verbose

    # --- Data output (stdout) ---

    def print_data(self, text: str) -> None:
        """Print raw text to stdout."""
        print(text, file=sys.stdout, flush=True)

    def print_json(self, data: Any) -> None:
        """Print *data* as indented JSON, syntax-highlighted on a colour terminal."""
        text = json.dumps(data, indent=2, ensure_ascii=False)
        if self._rich:
            self._stdout.print(Syntax(text, "json", theme="monokai", word_wrap=True))
        else:
            self.print_data(text)

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Print rows as a Rich table, or as tab-separated lines when piped."""
        if not self._rich:
            self.print_data("\t".join(headers))
            for row in rows:
                self.print_data("\t".join(row))
            return
        table = Table(title=title, show_header=True, header_style="bold cyan")
        for header in headers:
            table.add_column(header)
        for row in rows:
            table.add_row(*row)
        self._stdout.print(table)

    # --- Diagnostics (stderr) ---

    def info(self, message: str) -> None:
        if not self._quiet:
            self._diagnostic(message, escape(message))

    def success(self, message: str) -> None:
        if not self._quiet:
            self._diagnostic(message, f"[green]{escape(message)}[/green]")

    def warning(self, message: str) -> None:
        """Print a warning. Not suppressed by ``--quiet``."""
        self._diagnostic(f"Warning: {message}", f"[yellow]Warning:[/yellow] {escape(message)}")

    def error(self, message: str) -> None:
        """Print an error. Never suppressed."""
        self._diagnostic(f"Error: {message}", f"[bold red]Error:[/bold red] {escape(message)}")

    def debug(self, message: str) -> None:
        """Print a debug message, only with ``--verbose``."""
        if self._verbose:
            self._diagnostic(f"[debug] {message}", f"[dim]\\[debug] {escape(message)}[/dim]")

    def _diagnostic(self, plain: str, markup: str) -> None:
        if self._no_color:
            print(plain, file=sys.stderr, flush=True)
        else:
            self._stderr.print(markup, highlight=False)


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """True when ``NO_COLOR`` is set (any value) or ``TERM=dumb``."""
    return os.environ.get("NO_COLOR") is not None or os.environ.get("TERM") == "dumb"


# --- Global output instance (set during app startup) ---

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed :class:`OutputManager`, creating a default one lazily."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Drop the installed manager. Used by the test suite between tests."""
    global _output
    _output = None


# --- Convenience functions that use the global instance ---


def print_data(text: str) -> None:
    get_output().print_data(text)


def print_json(data: Any) -> None:
    get_output().print_json(data)


def print_table(headers: list[str], rows: list[list[str]], title: Optional[str] = None) -> None:
    get_output().print_table(headers, rows, title)


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def warning(message: str) -> None:
    get_output().warning(message)


def error(message: str) -> None:
    get_output().error(message)


def debug(message: str) -> None:
    get_output().debug(message)
