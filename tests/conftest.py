"""Shared pytest fixtures and fakes for the minish test suite.

Guidelines
----------
* No test touches the real terminal: shells are built over
  :class:`FakeKeyStream` and an in-memory output.
* Every test gets its own event loop; :func:`drain` runs it until no
  callbacks are ready.
* Process exits are recorded, never performed.
"""

from __future__ import annotations

import asyncio
import io
import logging
from collections.abc import Callable, Iterator

import pytest

from minish.core.models import KeyDescriptor
from minish.shell import Shell


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------

class FakeKeyStream:
    """In-memory key stream; tests push keystrokes with :meth:`press`."""

    def __init__(self, interactive: bool = True) -> None:
        self.interactive = interactive
        self.listeners: list[Callable[..., None]] = []
        self.end_listeners: list[Callable[[], None]] = []
        self.started_on: asyncio.AbstractEventLoop | None = None
        self.stopped = False
        self.paused = False
        self.raw_mode = False

    def keypress_listeners(self) -> list[Callable[..., None]]:
        return list(self.listeners)

    def add_keypress_listener(self, listener: Callable[..., None]) -> None:
        self.listeners.append(listener)

    def remove_keypress_listener(self, listener: Callable[..., None]) -> None:
        if listener in self.listeners:
            self.listeners.remove(listener)

    def add_end_listener(self, listener: Callable[[], None]) -> None:
        self.end_listeners.append(listener)

    def remove_end_listener(self, listener: Callable[[], None]) -> None:
        if listener in self.end_listeners:
            self.end_listeners.remove(listener)

    def start(self, loop: asyncio.AbstractEventLoop) -> None:
        self.started_on = loop
        self.raw_mode = self.interactive

    def stop(self) -> None:
        self.stopped = True
        self.raw_mode = False

    def pause(self) -> None:
        self.paused = True

    def resume(self) -> None:
        self.paused = False

    def set_raw_mode(self, enabled: bool) -> None:
        self.raw_mode = enabled

    # -- test helpers --------------------------------------------------

    def press(
        self,
        char: str | None = None,
        *,
        name: str | None = None,
        ctrl: bool = False,
        meta: bool = False,
        shift: bool = False,
    ) -> None:
        key = KeyDescriptor(name, ctrl=ctrl, meta=meta, shift=shift)
        for listener in list(self.listeners):
            listener(char, key)

    def type(self, text: str) -> None:
        for ch in text:
            name = ch.lower() if ch.isalnum() else None
            self.press(ch, name=name, shift=ch.isupper())

    def enter(self) -> None:
        self.press("\r", name="return")

    def submit(self, text: str) -> None:
        self.type(text)
        self.enter()

    def ctrl(self, letter: str) -> None:
        self.press(chr(ord(letter) - 96), name=letter, ctrl=True)

    def end(self) -> None:
        for listener in list(self.end_listeners):
            listener()


class TerminalOutput(io.StringIO):
    """``StringIO`` that reports itself as a terminal."""

    def isatty(self) -> bool:
        return True


# ---------------------------------------------------------------------------
# Event loop helpers
# ---------------------------------------------------------------------------

def drain(loop: asyncio.AbstractEventLoop, rounds: int = 20) -> None:
    """Run *loop* until its ready callbacks are exhausted."""
    for _ in range(rounds):
        loop.call_soon(loop.stop)
        loop.run_forever()


@pytest.fixture
def loop() -> Iterator[asyncio.AbstractEventLoop]:
    event_loop = asyncio.new_event_loop()
    yield event_loop
    event_loop.close()


@pytest.fixture
def exits() -> list[int]:
    return []


@pytest.fixture
def keys() -> FakeKeyStream:
    return FakeKeyStream(interactive=True)


@pytest.fixture
def output() -> TerminalOutput:
    return TerminalOutput()


@pytest.fixture
def shell(
    keys: FakeKeyStream,
    output: TerminalOutput,
    loop: asyncio.AbstractEventLoop,
    exits: list[int],
) -> Shell:
    """Interactive shell over fakes, recording exit statuses in ``exits``."""
    return Shell(keys, output, loop=loop, exit_process=exits.append)


@pytest.fixture
def piped_shell(
    loop: asyncio.AbstractEventLoop,
    exits: list[int],
) -> tuple[Shell, FakeKeyStream, io.StringIO]:
    """Non-interactive shell: no echo, so output holds only prompts and messages."""
    stream = FakeKeyStream(interactive=False)
    out = io.StringIO()
    return Shell(stream, out, loop=loop, exit_process=exits.append), stream, out


@pytest.fixture
def run_pending(loop: asyncio.AbstractEventLoop) -> Callable[[], None]:
    """Return a no-argument callable that drains ``loop``."""
    return lambda: drain(loop)


@pytest.fixture
def make_keys() -> type[FakeKeyStream]:
    return FakeKeyStream


@pytest.fixture
def make_output() -> type[TerminalOutput]:
    return TerminalOutput


@pytest.fixture(autouse=True)
def _restore_minish_logger() -> Iterator[None]:
    """Undo handlers and levels installed by ``configure_logging``."""
    logger = logging.getLogger("minish")
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate
