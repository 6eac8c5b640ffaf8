"""Terminal output: response data on stdout, diagnostics on stderr.

Data (response bodies, tables) is the only thing written to stdout, so
``restcache --json request GET /items | jq`` always sees clean JSON.
Diagnostics go to stderr through six channels:

=========  ==============  ==========================
channel    plain prefix    shown
=========  ==============  ==========================
info       (none)          unless ``--quiet``
success    (none)          unless ``--quiet``
suggest    ``→``           unless ``--quiet``
warning    ``Warning:``    always
error      ``Error:``      always
debug      ``[debug]``     only with ``--verbose``
=========  ==============  ==========================

Library code (the cache store, the policy coordinator, the API facade)
logs through the module-level helpers, which delegate to the global
:class:`OutputManager`.  The CLI installs a configured manager per
invocation; an embedding application can install its own with
:func:`set_output`.  ``NO_COLOR`` and ``TERM=dumb`` disable colour.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any, NamedTuple, Optional

from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table
from rich.text import Text


class OutputFormat(str, Enum):
    """``AUTO`` resolves to ``RICH`` on a colour TTY and ``PLAIN`` otherwise."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class _Channel(NamedTuple):
    prefix: str
    style: str
    hidden_when_quiet: bool
    verbose_only: bool = False


_CHANNELS: dict[str, _Channel] = {
    "info": _Channel("", "", True),
    "success": _Channel("", "green", True),
    "suggest": _Channel("→ ", "dim", True),
    "warning": _Channel("Warning: ", "yellow", False),
    "error": _Channel("Error: ", "bold red", False),
    "debug": _Channel("[debug] ", "dim", False, verbose_only=True),
}


class OutputManager:
    """Writes response data and diagnostics for one CLI invocation.

    Args:
        format: Data format; ``AUTO`` is resolved once, here.
        no_color: Disable colour even on a TTY.
        quiet: Hide info, success and suggest lines.
        verbose: Show debug lines.
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
            rich = _is_tty() and not self._no_color
            format = OutputFormat.RICH if rich else OutputFormat.PLAIN
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

    # --- stdout ---

    def format_response(self, data: Any) -> None:
        """Write a delivered body: a decoded object, a string, or ``None``."""
        if self._format == OutputFormat.JSON:
            if isinstance(data, str):
                try:
                    data = json.loads(data)
                except json.JSONDecodeError:
                    self._emit(data)
                    return
            self._emit(json.dumps(data, indent=2, ensure_ascii=False, default=str))
        elif self._format == OutputFormat.PLAIN:
            for line in _plain_lines(data):
                self._emit(line)
        elif isinstance(data, (dict, list)):
            body = json.dumps(data, indent=2, ensure_ascii=False, default=str)
            self._stdout.print(Syntax(body, "json", theme="monokai", word_wrap=True))
        elif data is not None:
            self._stdout.print(Text(str(data)))

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Write rows as a Rich table, a JSON array of objects, or TSV."""
        if self._format == OutputFormat.JSON:
            records = [dict(zip(headers, row)) for row in rows]
            self._emit(json.dumps(records, indent=2, ensure_ascii=False))
        elif self._format == OutputFormat.PLAIN:
            for row in [headers, *rows]:
                self._emit("\t".join(row))
        else:
            table = Table(*headers, title=title, header_style="bold cyan")
            for row in rows:
                table.add_row(*row)
            self._stdout.print(table)

    def _emit(self, text: str) -> None:
        print(text, file=sys.stdout, flush=True)

    # --- stderr ---

    def info(self, message: str) -> None:
        self._diagnose("info", message)

    def success(self, message: str) -> None:
        self._diagnose("success", message)

    def suggest(self, message: str) -> None:
        self._diagnose("suggest", message)

    def warning(self, message: str) -> None:
        self._diagnose("warning", message)

    def error(self, message: str) -> None:
        self._diagnose("error", message)

    def debug(self, message: str) -> None:
        self._diagnose("debug", message)

    def _diagnose(self, channel: str, message: str) -> None:
        prefix, style, hidden_when_quiet, verbose_only = _CHANNELS[channel]
        if (hidden_when_quiet and self._quiet) or (verbose_only and not self._verbose):
            return
        if self._no_color:
            print(f"{prefix}{message}", file=sys.stderr, flush=True)
        else:
            # Text, not markup: messages carry URLs and bodies with brackets.
            self._stderr.print(Text(prefix, style=style or "bold") + Text(message, style=style))


def _plain_lines(data: Any) -> list[str]:
    if data is None:
        return []
    if isinstance(data, dict):
        return [f"{key}\t{value}" for key, value in data.items()]
    if isinstance(data, list):
        return [
            "\t".join(str(v) for v in item.values()) if isinstance(item, dict) else str(item)
            for item in data
        ]
    return [str(data)]


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """True when ``NO_COLOR`` is set to anything or ``TERM=dumb``."""
    return os.environ.get("NO_COLOR") is not None or os.environ.get("TERM") == "dumb"


# --- global instance ---

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
    global _output
    _output = None


def format_response(data: Any) -> None:
    get_output().format_response(data)


def print_table(headers: list[str], rows: list[list[str]], title: Optional[str] = None) -> None:
    get_output().print_table(headers, rows, title)


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def suggest(message: str) -> None:
    get_output().suggest(message)


def warning(message: str) -> None:
    get_output().warning(message)


def error(message: str) -> None:
    get_output().error(message)


def debug(message: str) -> None:
    get_output().debug(message)
