"""Exit-code constants used by the CLI layer.

Centralised here so that every exit path uses a well-known, tested
value rather than magic integers scattered across the codebase.
"""

from __future__ import annotations

from minish.core.engine import END_OF_INPUT_EXIT_STATUS, INTERRUPT_EXIT_STATUS

SUCCESS: int = END_OF_INPUT_EXIT_STATUS
"""Clean exit: the user quit or input ended."""

GENERAL_ERROR: int = 1
"""A known MinishError was caught. User-facing message was displayed."""

KEYBOARD_INTERRUPT: int = INTERRUPT_EXIT_STATUS
"""User pressed Ctrl+C.  Follows POSIX convention (128 + SIGINT=2)."""

UNEXPECTED_ERROR: int = 2
"""An unhandled exception escaped all known error boundaries."""
