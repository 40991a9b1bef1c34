"""Embedding surface: the :class:`Shell` facade and its default instance.

This module is the composition root.  It wires the core console
engine, registry and dispatcher to the infrastructure adapters and
validates every call shape at the boundary, so the core only ever sees
one typed signature per operation.

Usage::

    from minish import get_default_shell

    shell = get_default_shell()

    @shell.handles("hello", help="Greets the world")
    def hello(context):
        context.write("Hello world!")
        context.end()

    shell.run("> ")
"""

from __future__ import annotations

import asyncio
import atexit
import functools
import logging
import sys
from collections.abc import Callable, Iterable
from typing import Any, TextIO, overload

from minish.core.dispatcher import DEFAULT_PROMPT, Dispatcher
from minish.core.engine import ConsoleEngine
from minish.core.models import ConsoleState, Handler, PasswordOptions, QuestionOptions
from minish.core.protocols import KeyStream, LineEditorFactory, OptionParser, Tokenizer
from minish.core.registry import CommandRegistry
from minish.exceptions import TypeMismatchError
from minish.infra.line_editor import BufferedLineEditor
from minish.infra.option_parser import parse_options
from minish.infra.terminal import TerminalKeyStream
from minish.infra.tokenizer import tokenize

logger = logging.getLogger(__name__)

ReplyCallback = Callable[[str], Any]


def _require_prompt(prompt: object) -> str:
    if not isinstance(prompt, str):
        raise TypeMismatchError(
            f"Prompt must be a string, got {type(prompt).__name__}",
        )
    return prompt


def _deliver(callback: ReplyCallback, future: asyncio.Future[str]) -> None:
    # Aborted prompts never reach the callback.
    if future.cancelled():
        return
    callback(future.result())


class Shell:
    """Interactive command shell bound to one input/output stream pair.

    Parameters
    ----------
    input:
        Key stream to read from.  Defaults to a
        :class:`~minish.infra.terminal.TerminalKeyStream` over stdin.
    output:
        Text stream to write to.  Defaults to :data:`sys.stdout`.
    line_editor_factory, tokenizer, option_parser:
        Replaceable collaborators; the infra adapters by default.
    loop:
        Event loop to run on.
    exit_process:
        Called with an exit status when the console terminates the
        process (ctrl+c, end of input, :meth:`exit`).  Defaults to
        :func:`sys.exit`.
    """

    def __init__(
        self,
        input: KeyStream | None = None,
        output: TextIO | None = None,
        *,
        line_editor_factory: LineEditorFactory | None = None,
        tokenizer: Tokenizer | None = None,
        option_parser: OptionParser | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
        exit_process: Callable[[int], Any] | None = None,
    ) -> None:
        self._exit_process: Callable[[int], Any] = exit_process or sys.exit
        self._engine = ConsoleEngine(
            input if input is not None else TerminalKeyStream(sys.stdin),
            output if output is not None else sys.stdout,
            line_editor_factory=line_editor_factory or BufferedLineEditor,
            loop=loop,
            exit_process=self._exit_process,
        )
        self._registry = CommandRegistry()
        self._dispatcher = Dispatcher(
            self._engine,
            self._registry,
            tokenizer=tokenizer or tokenize,
            option_parser=option_parser or parse_options,
        )

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def engine(self) -> ConsoleEngine:
        return self._engine

    @property
    def registry(self) -> CommandRegistry:
        return self._registry

    @property
    def state(self) -> ConsoleState:
        return self._engine.state

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._engine.loop

    # ------------------------------------------------------------------
    # Command registration
    # ------------------------------------------------------------------

    @overload
    def command(self, names: str | Iterable[str], help: Handler | None = None) -> Shell: ...

    @overload
    def command(
        self, names: str | Iterable[str], help: str | None, handler: Handler | None,
    ) -> Shell: ...

    def command(
        self,
        names: str | Iterable[str],
        help: str | Handler | None = None,
        handler: Handler | None = None,
    ) -> Shell:
        """Register *handler* under one or more *names*.

        Accepts ``command(names, handler)`` and ``command(names, help,
        handler)``.  Without a handler the names become recognised
        no-op commands, which route to the ``"_"`` fallback.
        """
        if handler is None and callable(help):
            help, handler = None, help
        if help is not None and not isinstance(help, str):
            raise TypeMismatchError("Help must be a string")
        if handler is not None and not callable(handler):
            raise TypeMismatchError("Handler must be a function")

        if isinstance(names, str):
            name_list = [names]
        else:
            try:
                name_list = list(names)
            except TypeError:
                raise TypeMismatchError(
                    f"Command names must be a string or a list of strings, "
                    f"got {type(names).__name__}",
                ) from None
        for name in name_list:
            if not isinstance(name, str):
                raise TypeMismatchError(
                    f"Command name must be a string, got {type(name).__name__}",
                )
        self._registry.register(name_list, handler, help)
        return self

    def handles(self, *names: str, help: str | None = None) -> Callable[[Handler], Handler]:
        """Decorator form of :meth:`command`."""

        def decorator(handler: Handler) -> Handler:
            self.command(list(names), help, handler)
            return handler

        return decorator

    # ------------------------------------------------------------------
    # Command loop
    # ------------------------------------------------------------------

    def prompt(self, prompt: str = DEFAULT_PROMPT, *, ignore_backslash: bool = False) -> None:
        """Set the prompt and start reading commands."""
        self._dispatcher.start(_require_prompt(prompt), ignore_backslash=ignore_backslash)

    def run(self, prompt: str = DEFAULT_PROMPT, *, ignore_backslash: bool = False) -> None:
        """Start the command loop and run the event loop until the process exits."""
        loop = self._engine.loop
        try:
            self.prompt(prompt, ignore_backslash=ignore_backslash)
            loop.run_forever()
        finally:
            self.close()

    def help(self) -> None:
        """Write the aligned list of registered commands."""
        self._dispatcher.help()

    # ------------------------------------------------------------------
    # Ad-hoc prompts
    # ------------------------------------------------------------------

    def question(
        self,
        prompt: str,
        options: QuestionOptions | ReplyCallback | None = None,
        callback: ReplyCallback | None = None,
    ) -> asyncio.Future[str] | None:
        """Ask for a line of text.

        With a *callback* the reply is passed to it and ``None`` is
        returned; otherwise the future is returned for ``await``.
        """
        options, callback = self._split_options(options, callback, QuestionOptions)
        future = self._engine.ask_line(_require_prompt(prompt), options)
        return self._attach(future, callback)

    def password(
        self,
        prompt: str,
        options: PasswordOptions | ReplyCallback | None = None,
        callback: ReplyCallback | None = None,
    ) -> asyncio.Future[str] | None:
        """Ask for a secret without echoing it.

        The callback is never invoked when the entry is aborted; an
        awaited future raises :class:`asyncio.CancelledError` instead.
        """
        options, callback = self._split_options(options, callback, PasswordOptions)
        future = self._engine.ask_masked(_require_prompt(prompt), options)
        return self._attach(future, callback)

    @staticmethod
    def _split_options(
        options: Any,
        callback: ReplyCallback | None,
        options_type: type[QuestionOptions],
    ) -> tuple[Any, ReplyCallback | None]:
        if callback is None and callable(options):
            options, callback = None, options
        if options is not None and not isinstance(options, options_type):
            raise TypeMismatchError(
                f"Options must be {options_type.__name__}, got {type(options).__name__}",
            )
        if callback is not None and not callable(callback):
            raise TypeMismatchError("Callback must be a function")
        return options, callback

    @staticmethod
    def _attach(
        future: asyncio.Future[str],
        callback: ReplyCallback | None,
    ) -> asyncio.Future[str] | None:
        if callback is None:
            return future
        future.add_done_callback(functools.partial(_deliver, callback))
        return None

    # ------------------------------------------------------------------
    # Output and shutdown
    # ------------------------------------------------------------------

    def write(self, *objects: object) -> None:
        """Write *objects* separated by spaces, followed by a newline."""
        self._engine.write(*objects)

    def close(self) -> None:
        """Close the console.  Safe to call more than once."""
        if self._engine.state is not ConsoleState.CLOSED:
            self._engine.close()

    def exit(self, code: int = 0) -> None:
        """Close the shell and terminate the process with *code*."""
        self.close()
        self._exit_process(code)


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

def create_shell(
    input: KeyStream | None = None,
    output: TextIO | None = None,
    **kwargs: Any,
) -> Shell:
    """Create an independent :class:`Shell` bound to *input* and *output*."""
    return Shell(input, output, **kwargs)


@functools.cache
def get_default_shell() -> Shell:
    """Return the process-wide shell on stdin/stdout, created on first use.

    The instance is closed at interpreter exit, which restores the
    terminal mode.
    """
    shell = Shell()
    atexit.register(shell.close)
    logger.debug("default shell created")
    return shell
