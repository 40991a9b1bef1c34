"""minish: a minimal interactive command shell.

Prompts for lines, reads masked secrets and dispatches command names to
registered handlers on top of an asyncio event loop.
"""

from minish.core.context import CommandContext
from minish.core.models import FALLBACK_COMMAND, PasswordOptions, QuestionOptions
from minish.shell import Shell, create_shell, get_default_shell
from minish.version import __version__

__all__: list[str] = [
    "FALLBACK_COMMAND",
    "CommandContext",
    "PasswordOptions",
    "QuestionOptions",
    "Shell",
    "__version__",
    "create_shell",
    "get_default_shell",
]
