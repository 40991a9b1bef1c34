"""Core layer: console state machine, command registry and dispatch.

Rules
-----
* No imports from ``cli`` or ``infra``.
* Terminal access only through the protocols in :mod:`minish.core.protocols`.
* Never blocks: every wait is a future resolved from the event loop.
"""

from minish.core.context import CommandContext
from minish.core.dispatcher import Dispatcher
from minish.core.engine import ConsoleEngine
from minish.core.masked_input import MaskedInput
from minish.core.models import (
    FALLBACK_COMMAND,
    HELP_COMMAND,
    CommandEntry,
    ConsoleState,
    KeyDescriptor,
    ParsedArgs,
    PasswordOptions,
    QuestionOptions,
)
from minish.core.protocols import KeyStream, LineEditor, OptionParser, Tokenizer
from minish.core.registry import CommandRegistry

__all__: list[str] = [
    "FALLBACK_COMMAND",
    "HELP_COMMAND",
    "CommandContext",
    "CommandEntry",
    "CommandRegistry",
    "ConsoleEngine",
    "ConsoleState",
    "Dispatcher",
    "KeyDescriptor",
    "KeyStream",
    "LineEditor",
    "MaskedInput",
    "OptionParser",
    "ParsedArgs",
    "PasswordOptions",
    "QuestionOptions",
    "Tokenizer",
]
