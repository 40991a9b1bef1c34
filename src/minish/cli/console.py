"""Stderr console for CLI diagnostics, rendered with Rich when present.

The shell itself writes plain text to stdout through the console
engine.  Banners from ``doctor``, log records and error-boundary
messages go to stderr through this module so they never interleave
with command output.  Rich is imported lazily so ``--help`` and
``--version`` keep working without it.
"""

from __future__ import annotations

import re
import sys
from typing import Any

from minish.exceptions import EnvironmentError, MinishError

_MARKUP_RE = re.compile(r"(?<!\\)\[/?[a-z][a-z ]*\]")


def _load_rich_console_class() -> type[Any]:
    """Return ``rich.console.Console`` or raise ``EnvironmentError``."""
    try:
        from rich.console import Console
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "rich is not installed. Install with: pip install rich",
        ) from exc
    return Console


def get_rich_console() -> Any:
    """Create a Rich console targeting stderr."""
    console_class = _load_rich_console_class()
    return console_class(stderr=True)


def escape_markup(text: str) -> str:
    """Escape square brackets so Rich prints *text* literally."""
    return text.replace("[", "\\[")


def strip_markup(text: str) -> str:
    """Remove simple ``[style]...[/style]`` tags for plain output."""
    return _MARKUP_RE.sub("", text).replace("\\[", "[")


class _StderrConsole:
    """``print``-compatible stderr writer; plain text when Rich is missing."""

    def print(self, *objects: object) -> None:
        try:
            rich_console = get_rich_console()
        except EnvironmentError:
            print(*(strip_markup(str(obj)) for obj in objects), file=sys.stderr)
            return
        rich_console.print(*objects)

    def error(self, exc: MinishError) -> None:
        """Render a known error and its hint."""
        self.print(f"[bold red]Error:[/bold red] {escape_markup(str(exc))}")
        if exc.hint:
            self.print(f"[yellow]Hint:[/yellow] {escape_markup(exc.hint)}")


console = _StderrConsole()
