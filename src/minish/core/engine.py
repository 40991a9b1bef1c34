"""Console interaction engine.

:class:`ConsoleEngine` owns the raw key stream and the output stream,
wraps a line-editing collaborator and runs the state machine that
decides who sees each keystroke:

* ``NONE --initialize--> IDLE``
* ``IDLE --ask_line--> PROMPTING_LINE --line submitted--> IDLE``
* ``IDLE --ask_masked--> PROMPTING_MASKED --enter/abort--> IDLE``
* any state ``--editor close / ctrl+c--> CLOSED`` (terminal)

The engine's own keypress listener runs ahead of the line editor's.
Whatever listeners the editor installs on the key stream are detached
at initialization and replayed by the engine only while a plain line
is being read.  This lets masked input suppress the editor's echo and
lets ctrl+c / ctrl+z behave the same in every mode.

Nothing here blocks: prompts return :class:`asyncio.Future` objects
that are resolved from key stream callbacks on the event loop.
"""

from __future__ import annotations

import asyncio
import logging
import os
import signal
import sys
from collections.abc import Callable
from typing import Any, TextIO

from minish.core.masked_input import MaskedInput
from minish.core.models import ConsoleState, KeyDescriptor, PasswordOptions, QuestionOptions
from minish.core.protocols import KeypressListener, KeyStream, LineEditor, LineEditorFactory
from minish.exceptions import (
    ConcurrencyViolationError,
    IllegalStateError,
    UnsupportedOperationError,
)

logger = logging.getLogger(__name__)

INTERRUPT_EXIT_STATUS: int = 128 + int(signal.SIGINT)
"""Exit status used when ctrl+c terminates the process (POSIX 128 + SIGINT)."""

END_OF_INPUT_EXIT_STATUS: int = 0
"""Exit status used when the line editor closes because input ended."""


def _isatty(stream: Any) -> bool:
    isatty = getattr(stream, "isatty", None)
    if not callable(isatty):
        return False
    try:
        return bool(isatty())
    except ValueError:
        # Closed file objects raise instead of answering.
        return False


class ConsoleEngine:
    """State machine over one key stream / output stream pair.

    Parameters
    ----------
    input:
        Raw keypress source.  Owned exclusively by the engine once
        :meth:`initialize` has run.
    output:
        Text stream receiving prompts, echo and messages.
    line_editor_factory:
        Builds the line-editing collaborator for ``(input, output)``.
    loop:
        Event loop used for futures and key delivery.  Defaults to the
        running loop, or a new one when none is running.
    exit_process:
        Called with an exit status to terminate the host process.
    """

    def __init__(
        self,
        input: KeyStream,
        output: TextIO,
        *,
        line_editor_factory: LineEditorFactory,
        loop: asyncio.AbstractEventLoop | None = None,
        exit_process: Callable[[int], Any] = sys.exit,
    ) -> None:
        self._input = input
        self._output = output
        self._line_editor_factory = line_editor_factory
        self._loop = loop
        self._exit_process = exit_process

        self._state: ConsoleState = ConsoleState.NONE
        self._line_editor: LineEditor | None = None
        self._pending: asyncio.Future[str] | None = None
        self._keypress: KeypressListener | None = None
        self._borrowed: list[KeypressListener] = []
        self._attached: bool = False
        self._routes: dict[ConsoleState, KeypressListener] = {
            ConsoleState.PROMPTING_LINE: self._replay_to_line_editor,
            ConsoleState.PROMPTING_MASKED: self._feed_custom_handler,
        }

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def state(self) -> ConsoleState:
        return self._state

    @property
    def interactive(self) -> bool:
        """True when both streams are terminals (masked input is possible)."""
        return self._input.interactive and _isatty(self._output)

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            try:
                self._loop = asyncio.get_running_loop()
            except RuntimeError:
                self._loop = asyncio.new_event_loop()
        return self._loop

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self) -> None:
        """Create the line editor and take over the key stream (once)."""
        if self._state is ConsoleState.CLOSED:
            raise IllegalStateError("Console already closed")
        if self._state is not ConsoleState.NONE:
            return
        self._set_state(ConsoleState.IDLE)

        self._input.start(self.loop)
        before = self._input.keypress_listeners()

        self._line_editor = self._line_editor_factory(self._input, self._output)
        self._line_editor.once_close(self._on_line_editor_close)

        # Take ownership of whatever the editor attached; it is replayed
        # from _replay_to_line_editor only.
        for listener in self._input.keypress_listeners():
            if listener in before:
                continue
            self._input.remove_keypress_listener(listener)
            self._borrowed.append(listener)

        self._input.add_keypress_listener(self._on_keypress)
        self._attached = True
        logger.debug("console initialized, %d editor listener(s) borrowed", len(self._borrowed))

    def close(self) -> None:
        """Close the console and release the line editor.  Never exits."""
        self._set_state(ConsoleState.CLOSED)
        self._keypress = None
        self._cancel_pending()
        if self._line_editor is not None:
            self._line_editor.close()
        if self._attached:
            self._attached = False
            self._input.remove_keypress_listener(self._on_keypress)
            self._input.stop()

    # ------------------------------------------------------------------
    # Prompts
    # ------------------------------------------------------------------

    def ask_line(
        self,
        prompt: str,
        options: QuestionOptions | None = None,
    ) -> asyncio.Future[str]:
        """Prompt for one line; the future resolves with the submitted text."""
        options = options or QuestionOptions()
        future = self._prepare()
        assert self._line_editor is not None

        if prompt and not options.no_space:
            prompt += " "

        self._line_editor.once_line(self._on_line)
        self._line_editor.set_prompt(prompt)
        self._set_state(ConsoleState.PROMPTING_LINE)
        self._line_editor.prompt()
        return future

    def ask_masked(
        self,
        prompt: str,
        options: PasswordOptions | None = None,
    ) -> asyncio.Future[str]:
        """Prompt for a secret; the future resolves with the typed text.

        The future is cancelled when the entry is aborted.
        """
        if not self.interactive:
            raise UnsupportedOperationError(
                "Masked input is only supported on interactive terminals",
                hint="Run the shell from a terminal instead of a pipe or file.",
            )
        options = options or PasswordOptions()
        future = self._prepare()

        masked = MaskedInput(
            self._render,
            options.password_char,
            on_submit=self._finish_masked,
            on_abort=self._abort_masked,
        )
        self._keypress = masked.feed
        self._set_state(ConsoleState.PROMPTING_MASKED)

        if prompt:
            if not options.no_space:
                prompt += " "
            self._render(prompt)
        return future

    def write(self, *objects: object) -> None:
        """Write *objects* separated by spaces, followed by a newline."""
        self._render(" ".join(str(obj) for obj in objects) + "\n")

    # ------------------------------------------------------------------
    # Keypress interception
    # ------------------------------------------------------------------

    def _on_keypress(self, char: str | None, key: KeyDescriptor | None) -> None:
        if self._state is ConsoleState.CLOSED:
            return

        if key is not None and key.ctrl and not key.shift:
            if key.name == "c" and self._state is not ConsoleState.PROMPTING_MASKED:
                self._terminate(INTERRUPT_EXIT_STATUS)
                return
            if key.name == "z":
                self._suspend()
                return

        route = self._routes.get(self._state)
        if route is not None:
            route(char, key)

    def _replay_to_line_editor(self, char: str | None, key: KeyDescriptor | None) -> None:
        for listener in list(self._borrowed):
            listener(char, key)

    def _feed_custom_handler(self, char: str | None, key: KeyDescriptor | None) -> None:
        if self._keypress is not None:
            self._keypress(char, key)

    def _suspend(self) -> None:
        """Suspend the process on ctrl+z where the platform supports it."""
        if not hasattr(signal, "SIGTSTP"):
            return

        loop = self.loop
        stream = self._input

        def resume() -> None:
            loop.remove_signal_handler(signal.SIGCONT)
            stream.set_raw_mode(True)
            stream.resume()
            logger.debug("console resumed")

        # Runs on the loop once the process is continued, not inside the
        # signal frame.
        loop.add_signal_handler(signal.SIGCONT, resume)
        stream.pause()
        stream.set_raw_mode(False)
        logger.debug("console suspending")
        os.kill(os.getpid(), signal.SIGTSTP)

    # ------------------------------------------------------------------
    # Completion callbacks
    # ------------------------------------------------------------------

    def _on_line(self, line: str) -> None:
        future, self._pending = self._pending, None
        self._set_state(ConsoleState.IDLE)
        if future is not None and not future.done():
            future.set_result(line)

    def _finish_masked(self, value: str) -> None:
        self._keypress = None
        self._set_state(ConsoleState.IDLE)
        self._render("\r\n")
        future, self._pending = self._pending, None
        if future is not None and not future.done():
            future.set_result(value)

    def _abort_masked(self) -> None:
        self._keypress = None
        self._set_state(ConsoleState.IDLE)
        self._render("\r\n")
        self._cancel_pending()

    def _on_line_editor_close(self) -> None:
        if self._state is ConsoleState.CLOSED:
            return
        self._terminate(END_OF_INPUT_EXIT_STATUS)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _prepare(self) -> asyncio.Future[str]:
        if self._pending is not None:
            raise ConcurrencyViolationError("Already prompting")
        self.initialize()
        future: asyncio.Future[str] = self.loop.create_future()
        self._pending = future
        return future

    def _terminate(self, status: int) -> None:
        self._keypress = None
        self._cancel_pending()
        self._set_state(ConsoleState.CLOSED)
        self._render("\n")
        logger.debug("console terminating with status %d", status)
        self._exit_process(status)

    def _cancel_pending(self) -> None:
        future, self._pending = self._pending, None
        if future is not None and not future.done():
            future.cancel()

    def _render(self, text: str) -> None:
        self._output.write(text)
        self._output.flush()

    def _set_state(self, state: ConsoleState) -> None:
        if state is not self._state:
            logger.debug("console state %s -> %s", self._state.value, state.value)
        self._state = state
