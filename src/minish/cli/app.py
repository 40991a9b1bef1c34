"""CLI application entry point for minish.

This module is the error boundary of the ``minish`` console script.
It catches :class:`~minish.exceptions.MinishError`,
``KeyboardInterrupt`` and any unexpected ``Exception``, renders them on
stderr and returns well-defined exit codes.  ``SystemExit`` raised by
the shell itself (``quit``, ctrl+c, end of input) passes through with
its own status.
"""

from __future__ import annotations

import argparse
import sys

from minish.cli import exit_codes
from minish.cli.console import console, escape_markup
from minish.core.dispatcher import DEFAULT_PROMPT
from minish.exceptions import MinishError
from minish.version import __version__


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    """Construct the top-level argument parser.

    * ``minish``: run the demo shell
    * ``minish doctor``: terminal diagnostics
    * ``minish --version``
    """
    parser = argparse.ArgumentParser(
        prog="minish",
        description="Minimal interactive command shell.",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "target",
        nargs="?",
        default=None,
        help="'doctor' prints terminal diagnostics instead of starting the shell.",
    )
    parser.add_argument(
        "--prompt",
        default=DEFAULT_PROMPT,
        help="Prompt shown before each command (default: %(default)r).",
    )
    parser.add_argument(
        "--ignore-backslash",
        action="store_true",
        help="Treat backslashes in command lines as ordinary characters.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log debug information to stderr.",
    )
    return parser


# ---------------------------------------------------------------------------
# Command dispatch
# ---------------------------------------------------------------------------

def _handle_shell(prompt: str, ignore_backslash: bool) -> int:
    """Run the demo shell on stdin/stdout until the process exits."""
    from minish.cli.demo import WELCOME, build_demo_shell
    from minish.shell import get_default_shell

    shell = build_demo_shell(get_default_shell())
    for line in WELCOME:
        shell.write(line)
    shell.run(prompt, ignore_backslash=ignore_backslash)
    return exit_codes.SUCCESS


def _handle_doctor() -> int:
    """Dispatch the ``doctor`` diagnostics command."""
    from minish.cli.doctor import run_doctor

    return run_doctor()


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    """Run the minish CLI.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.

    Returns
    -------
    int
        OS process exit code.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    from minish.cli.logging_setup import configure_logging

    configure_logging(args.verbose)

    if args.target is not None:
        if args.target.lower() != "doctor":
            parser.error(f"unknown target {args.target!r} (expected 'doctor')")
        return _handle_doctor()

    return _handle_shell(args.prompt, args.ignore_backslash)


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def cli() -> None:
    """Top-level error boundary invoked by the console-script entry point."""
    try:
        code = main()
        sys.exit(code)
    except MinishError as exc:
        console.error(exc)
        sys.exit(exit_codes.GENERAL_ERROR)
    except KeyboardInterrupt:
        console.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        console.print(
            "[bold red]Internal error in minish.[/bold red] "
            "Run again with --verbose and report the output.\n"
            f"  {type(exc).__name__}: {escape_markup(str(exc))}"
        )
        sys.exit(exit_codes.UNEXPECTED_ERROR)
