"""``minish doctor``: terminal capability diagnostics.

Reports whether the current process can run the shell interactively:
Python and prompt_toolkit versions, whether stdin/stdout are terminals
(masked input needs both) and whether ctrl+z suspension is available.
"""

from __future__ import annotations

import platform
import signal
import sys
from typing import TextIO

from minish.cli import exit_codes
from minish.cli.console import console, strip_markup
from minish.version import __version__

Check = tuple[str, str, str]

_OK = "[green]OK[/green]"
_WARN = "[yellow]WARN[/yellow]"
_FAIL = "[red]FAIL[/red]"


# ---------------------------------------------------------------------------
# Diagnostic collectors
# ---------------------------------------------------------------------------

def _python_version_check() -> Check:
    version = platform.python_version()
    ok = sys.version_info[:2] >= (3, 10)
    return "Python", version, _OK if ok else "[red]FAIL (>=3.10 required)[/red]"


def _prompt_toolkit_check() -> Check:
    try:
        from prompt_toolkit import __version__ as ptk_version
    except ImportError:
        return "prompt_toolkit", "NOT INSTALLED", _FAIL
    return "prompt_toolkit", ptk_version, _OK


def _isatty(stream: TextIO | None) -> bool:
    try:
        return stream is not None and stream.isatty()
    except ValueError:
        return False


def _stream_check(label: str, stream: TextIO | None) -> Check:
    if _isatty(stream):
        return label, "terminal", _OK
    return label, "not a terminal", _WARN


def _masked_input_check(stdin: TextIO | None, stdout: TextIO | None) -> Check:
    if _isatty(stdin) and _isatty(stdout):
        return "Masked input", "supported", _OK
    return "Masked input", "unavailable (needs a terminal)", _WARN


def _suspend_check() -> Check:
    if hasattr(signal, "SIGTSTP"):
        return "Suspend", "ctrl+z supported", _OK
    return "Suspend", f"not available on {platform.system()}", _WARN


def collect_checks(stdin: TextIO | None = None, stdout: TextIO | None = None) -> list[Check]:
    """Run every check against *stdin*/*stdout* (the process streams by default)."""
    stdin = stdin if stdin is not None else sys.stdin
    stdout = stdout if stdout is not None else sys.stdout
    return [
        ("minish", __version__, _OK),
        _python_version_check(),
        _prompt_toolkit_check(),
        _stream_check("stdin", stdin),
        _stream_check("stdout", stdout),
        _masked_input_check(stdin, stdout),
        _suspend_check(),
    ]


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

def _print_plain_table(checks: list[Check]) -> None:
    print("\nminish doctor", file=sys.stderr)
    print("=" * 60, file=sys.stderr)
    print(f"{'Component':<16} {'Value':<32} {'Status':<8}", file=sys.stderr)
    print("-" * 60, file=sys.stderr)
    for label, value, status in checks:
        print(f"{label:<16} {value:<32} {strip_markup(status):<8}", file=sys.stderr)
    print(file=sys.stderr)


def run_doctor() -> int:
    """Render the diagnostics table.

    Returns
    -------
    int
        :data:`exit_codes.SUCCESS` unless a required check failed, then
        :data:`exit_codes.GENERAL_ERROR`.  Warnings do not fail.
    """
    checks = collect_checks()
    has_failure = any("FAIL" in status for _, _, status in checks)

    try:
        from rich.table import Table
    except ModuleNotFoundError:
        _print_plain_table(checks)
    else:
        table = Table(
            title="minish doctor",
            show_header=True,
            header_style="bold cyan",
            border_style="dim",
        )
        table.add_column("Component", style="bold", min_width=16)
        table.add_column("Value", min_width=20)
        table.add_column("Status", justify="center", min_width=8)
        for label, value, status in checks:
            table.add_row(label, value, status)
        console.print()
        console.print(table)
        console.print()

    if has_failure:
        console.print("[bold red]Some checks failed.[/bold red]")
        return exit_codes.GENERAL_ERROR
    console.print("[bold green]All required checks passed.[/bold green]")
    return exit_codes.SUCCESS
