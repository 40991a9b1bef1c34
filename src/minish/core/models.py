"""Domain models for minish.

Value objects shared by the console engine, the dispatcher and the
infrastructure adapters.  No I/O, no third-party imports.
"""

from __future__ import annotations

import enum
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from minish.core.context import CommandContext


FALLBACK_COMMAND: str = "_"
"""Registry key of the handler used when no other name matches."""

HELP_COMMAND: str = "help"
"""Command name that lists registered commands unless it is overridden."""


Handler = Callable[["CommandContext"], Any]
"""A command handler.  May return an awaitable, which is then scheduled."""


# ---------------------------------------------------------------------------
# Console state
# ---------------------------------------------------------------------------

class ConsoleState(enum.Enum):
    """States of :class:`~minish.core.engine.ConsoleEngine`."""

    NONE = "none"
    IDLE = "idle"
    PROMPTING_LINE = "prompting-line"
    PROMPTING_MASKED = "prompting-masked"
    CLOSED = "closed"


# ---------------------------------------------------------------------------
# Raw keypress descriptor
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class KeyDescriptor:
    """Description of one keystroke delivered by a key stream."""

    name: str | None = None
    """Logical key name (``"a"``, ``"return"``, ``"backspace"`` ...)."""

    ctrl: bool = False
    meta: bool = False
    shift: bool = False


# ---------------------------------------------------------------------------
# Prompt options
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class QuestionOptions:
    """Options for a plain line prompt."""

    no_space: bool = False
    """Do not append a space after a non-empty prompt."""


@dataclass(frozen=True, slots=True)
class PasswordOptions(QuestionOptions):
    """Options for a masked prompt."""

    password_char: str = "*"
    """Glyph echoed per character.  Empty string echoes nothing."""


# ---------------------------------------------------------------------------
# Registry entry and parsed arguments
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class CommandEntry:
    """A registered command.  ``handler is None`` marks a recognised no-op."""

    handler: Handler | None = None
    help: str | None = None


@dataclass(frozen=True, slots=True)
class ParsedArgs:
    """Result of option parsing: positional words and flag values."""

    positional: list[str] = field(default_factory=list)
    options: dict[str, Any] = field(default_factory=dict)
