"""Command dispatch loop.

One iteration: ask the console for a line, tokenize it, split off the
command name, parse the remaining words into positional arguments and
options, resolve the name against the registry and invoke the handler
with a fresh :class:`~minish.core.context.CommandContext`.

The loop does not resume when a handler returns.  It resumes only when
the context's ``end``/``fail``/``execute`` runs, which may happen
synchronously or after any amount of later asynchronous work.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Sequence
from functools import partial

from minish.core.context import CommandContext
from minish.core.engine import ConsoleEngine
from minish.core.models import HELP_COMMAND, Handler, QuestionOptions
from minish.core.protocols import OptionParser, Tokenizer
from minish.core.registry import CommandRegistry
from minish.exceptions import HandlerFaultError, TokenizeError

logger = logging.getLogger(__name__)

DEFAULT_PROMPT: str = "> "


class Dispatcher:
    """Drives the read / tokenize / parse / lookup / invoke / wait loop."""

    def __init__(
        self,
        engine: ConsoleEngine,
        registry: CommandRegistry,
        *,
        tokenizer: Tokenizer,
        option_parser: OptionParser,
    ) -> None:
        self._engine = engine
        self._registry = registry
        self._tokenizer = tokenizer
        self._option_parser = option_parser
        self._prompt: str = DEFAULT_PROMPT
        self._ignore_backslash: bool = False

    # ------------------------------------------------------------------
    # Loop control
    # ------------------------------------------------------------------

    def start(self, prompt: str = DEFAULT_PROMPT, *, ignore_backslash: bool = False) -> None:
        """Remember the prompt settings and issue the first prompt."""
        self._prompt = prompt or DEFAULT_PROMPT
        self._ignore_backslash = ignore_backslash
        self.next()

    def next(self) -> None:
        """Prompt for the next command line."""
        future = self._engine.ask_line(self._prompt, QuestionOptions(no_space=True))
        future.add_done_callback(self._on_line)

    def _on_line(self, future: asyncio.Future[str]) -> None:
        if future.cancelled():
            logger.debug("command prompt cancelled, loop stopped")
            return
        self.run_line(future.result())

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def run_line(self, line: str) -> None:
        """Tokenize *line* and run the command it names."""
        try:
            tokens = self._tokenizer(line, ignore_backslash=self._ignore_backslash)
        except TokenizeError as exc:
            self._engine.write("Error:", exc)
            self.next()
            return

        if not tokens:
            self.next()
            return
        self.execute(tokens[0], tokens[1:])

    def execute(self, name: str, args: Sequence[str]) -> None:
        """Run command *name* with already tokenized *args*."""
        parsed = self._option_parser(args)

        if not name:
            self.next()
            return

        entry = self._registry.lookup(name)
        handler: Handler | None = entry.handler if entry is not None else None

        if handler is None and name == HELP_COMMAND:
            self.help()
            self.next()
            return

        if handler is None:
            handler = self._registry.fallback

        if handler is None:
            self._engine.write(f"Command '{name}' not supported.")
            self.next()
            return

        logger.debug(
            "dispatching %r args=%r options=%r", name, parsed.positional, parsed.options,
        )
        context = CommandContext(self, name, list(parsed.positional), dict(parsed.options))
        try:
            result = handler(context)
        except Exception as exc:
            self._report_fault(context, exc)
            return

        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result, loop=self._engine.loop)
            task.add_done_callback(partial(self._on_handler_done, context))

    def _on_handler_done(self, context: CommandContext, task: asyncio.Future[object]) -> None:
        if task.cancelled():
            logger.debug("handler for %r cancelled", context.command)
            context.end()
            return
        exc = task.exception()
        if exc is not None:
            self._report_fault(context, exc)

    def _report_fault(self, context: CommandContext, exc: BaseException) -> None:
        fault = HandlerFaultError(context.command, exc)
        logger.debug("handler for %r raised", fault.command, exc_info=exc)
        self._engine.write("Error:", fault)
        context.end()

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def write(self, *objects: object) -> None:
        self._engine.write(*objects)

    def help(self) -> None:
        """Write the aligned command listing."""
        for line in self._registry.help_lines():
            self._engine.write(line)
