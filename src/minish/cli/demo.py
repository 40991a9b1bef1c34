"""Demo command set served by the ``minish`` console script.

Shows every handler style the shell supports: synchronous handlers,
callback-style prompts, ``async`` handlers awaiting prompts, aliases
and the ``"_"`` fallback.
"""

from __future__ import annotations

from minish.core.context import CommandContext
from minish.core.models import FALLBACK_COMMAND
from minish.shell import Shell

WELCOME: tuple[str, ...] = (
    "Welcome to minish.",
    "Type 'help' to see a list of available commands.",
)


def build_demo_shell(shell: Shell) -> Shell:
    """Register the demo commands on *shell* and return it."""

    @shell.handles("hello")
    def hello(context: CommandContext) -> None:
        context.write("Hello world!")
        context.end()

    @shell.handles("echo", help="Shows arguments and options")
    def echo(context: CommandContext) -> None:
        context.write(context.args, context.options)
        context.end()

    @shell.handles("ask", help="Asks a question")
    def ask(context: CommandContext) -> None:
        def on_reply(reply: str) -> None:
            context.write("Your name is:", reply)
            context.end()

        shell.question("What's your name?", on_reply)

    @shell.handles("passwd", help="Asks for a password without revealing its characters")
    async def passwd(context: CommandContext) -> None:
        secret = await shell.password("Type a secret password:")
        reply = await shell.question("Type 'show' to display the password:")
        if reply == "show":
            context.write("The password was:", secret)
        context.end()

    @shell.handles("quit", "exit", help="Exits the shell")
    def leave(context: CommandContext) -> None:
        context.write("Ending...")
        shell.exit()

    @shell.handles(FALLBACK_COMMAND)
    def unknown(context: CommandContext) -> None:
        context.fail(f"Command '{context.command}' not supported")

    return shell
