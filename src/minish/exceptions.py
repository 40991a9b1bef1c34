"""Custom exception hierarchy for minish.

Boundary errors (bad call shapes, misuse of the console state machine)
are raised synchronously to the caller.  Faults raised by command
handlers never escape the dispatch loop; they are wrapped in
:class:`HandlerFaultError`, reported on the shell output and the loop
carries on.

Hierarchy
---------
MinishError
├── IllegalStateError
├── ConcurrencyViolationError
├── TypeMismatchError        (also a TypeError)
├── EmptyCommandError        (also a ValueError)
├── UnsupportedOperationError
├── HandlerFaultError
├── TokenizeError
└── EnvironmentError
"""

from __future__ import annotations


class MinishError(Exception):
    """Base exception for all minish errors."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Console state machine --------------------------------------------------

class IllegalStateError(MinishError):
    """Raised when a console is used again after it was closed."""


class ConcurrencyViolationError(MinishError):
    """Raised when a prompt is requested while another one is pending."""


class UnsupportedOperationError(MinishError):
    """Raised when masked input is requested on a non-interactive stream pair."""


# --- Call-site validation ---------------------------------------------------

class TypeMismatchError(MinishError, TypeError):
    """Raised when a prompt, name, help text or handler has the wrong type."""


class EmptyCommandError(MinishError, ValueError):
    """Raised when a command is registered under an empty name."""


# --- Dispatch ---------------------------------------------------------------

class HandlerFaultError(MinishError):
    """A command handler raised while it was being dispatched."""

    def __init__(self, command: str, cause: BaseException) -> None:
        super().__init__(str(cause) or type(cause).__name__)
        self.command: str = command
        self.__cause__ = cause


class TokenizeError(MinishError):
    """Raised when a command line cannot be split into words."""


# --- Environment / tooling --------------------------------------------------

class EnvironmentError(MinishError):
    """Raised when an optional runtime dependency is not available."""
