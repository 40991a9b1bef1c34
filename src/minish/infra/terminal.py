"""Infrastructure: raw keypress stream over a terminal or pipe.

Bytes are read from the input file descriptor by an event-loop reader,
decoded incrementally as UTF-8 and parsed into key presses by
prompt_toolkit's VT100 parser.  Each key press is delivered to the
registered listeners as ``(data, KeyDescriptor)``.

On a terminal the descriptor is switched to raw mode so that ctrl+c,
ctrl+z and friends arrive as ordinary keystrokes.  Pipes and files are
read as-is.

Rules
-----
* No imports from ``cli``.
* No user-facing output; this stream only reads.
"""

from __future__ import annotations

import asyncio
import codecs
import contextlib
import logging
import os
import sys
from collections import deque
from collections.abc import Callable
from typing import TextIO

from prompt_toolkit.input.vt100_parser import Vt100Parser
from prompt_toolkit.key_binding.key_processor import KeyPress
from prompt_toolkit.keys import Keys

from minish.core.models import KeyDescriptor
from minish.core.protocols import KeypressListener

logger = logging.getLogger(__name__)

_READ_SIZE: int = 1024

_CONTROL_ALIASES: dict[str, str] = {
    "m": "return",
    "j": "enter",
    "h": "backspace",
    "i": "tab",
}


# ---------------------------------------------------------------------------
# Key mapping (pure)
# ---------------------------------------------------------------------------

def key_descriptor(key: Keys | str) -> KeyDescriptor:
    """Translate a prompt_toolkit key into a :class:`KeyDescriptor`.

    ``c-m``/``c-j``/``c-h``/``c-i`` become ``return``/``enter``/
    ``backspace``/``tab``; other ``c-<x>`` keys become *x* with
    ``ctrl`` set.  Literal characters keep their lower-case letter or
    digit as the name, with ``shift`` set for upper-case letters.
    """
    if isinstance(key, Keys):
        value = key.value
        if value.startswith("c-") and len(value) == 3:
            letter = value[2]
            if letter in _CONTROL_ALIASES:
                return KeyDescriptor(_CONTROL_ALIASES[letter])
            return KeyDescriptor(letter, ctrl=True)
        if value.startswith("s-"):
            return KeyDescriptor(value[2:], shift=True)
        return KeyDescriptor(value)

    if len(key) == 1 and key.isascii() and key.isalnum():
        return KeyDescriptor(key.lower(), shift=key.isupper())
    if key == " ":
        return KeyDescriptor("space")
    return KeyDescriptor(None)


# ---------------------------------------------------------------------------
# Stream
# ---------------------------------------------------------------------------

class TerminalKeyStream:
    """Keypress stream reading from a file-like object with a descriptor.

    Parameters
    ----------
    stdin:
        Input file object.  Defaults to :data:`sys.stdin`.
    """

    def __init__(self, stdin: TextIO | None = None) -> None:
        self._stdin = stdin if stdin is not None else sys.stdin
        self._fd: int = self._stdin.fileno()
        self._interactive: bool = self._stdin.isatty()

        self._keypress_listeners: list[KeypressListener] = []
        self._end_listeners: list[Callable[[], None]] = []
        self._queue: deque[KeyPress] = deque()
        self._parser = Vt100Parser(self._queue.append)
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

        self._loop: asyncio.AbstractEventLoop | None = None
        self._reading: bool = False
        self._paused: bool = False
        self._ended: bool = False
        self._raw = contextlib.ExitStack()
        self._raw_enabled: bool = False

    # ------------------------------------------------------------------
    # Listener registry
    # ------------------------------------------------------------------

    @property
    def interactive(self) -> bool:
        return self._interactive

    def keypress_listeners(self) -> list[KeypressListener]:
        return list(self._keypress_listeners)

    def add_keypress_listener(self, listener: KeypressListener) -> None:
        self._keypress_listeners.append(listener)

    def remove_keypress_listener(self, listener: KeypressListener) -> None:
        with contextlib.suppress(ValueError):
            self._keypress_listeners.remove(listener)

    def add_end_listener(self, listener: Callable[[], None]) -> None:
        self._end_listeners.append(listener)

    def remove_end_listener(self, listener: Callable[[], None]) -> None:
        with contextlib.suppress(ValueError):
            self._end_listeners.remove(listener)

    # ------------------------------------------------------------------
    # Flow control
    # ------------------------------------------------------------------

    def start(self, loop: asyncio.AbstractEventLoop) -> None:
        if self._loop is not None:
            return
        self._loop = loop
        self.set_raw_mode(True)
        self._add_reader()

    def stop(self) -> None:
        self._remove_reader()
        self.set_raw_mode(False)
        self._loop = None

    def pause(self) -> None:
        self._paused = True
        self._remove_reader()

    def resume(self) -> None:
        if not self._paused:
            return
        self._paused = False
        self._add_reader()
        if self._loop is not None and self._queue:
            self._loop.call_soon(self._drain)

    def set_raw_mode(self, enabled: bool) -> None:
        if not self._interactive or enabled == self._raw_enabled:
            return
        if enabled:
            from prompt_toolkit.input.vt100 import raw_mode

            self._raw.enter_context(raw_mode(self._fd))
        else:
            self._raw.close()
        self._raw_enabled = enabled

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def _add_reader(self) -> None:
        if self._loop is None or self._reading or self._paused or self._ended:
            return
        self._loop.add_reader(self._fd, self._on_readable)
        self._reading = True

    def _remove_reader(self) -> None:
        if self._loop is None or not self._reading:
            return
        self._loop.remove_reader(self._fd)
        self._reading = False

    def _on_readable(self) -> None:
        try:
            data = os.read(self._fd, _READ_SIZE)
        except BlockingIOError:
            return

        if not data:
            logger.debug("key stream reached end of input")
            self._ended = True
            self._remove_reader()
            self._parser.feed_and_flush(self._decoder.decode(b"", final=True))
            self._drain()
            for listener in list(self._end_listeners):
                listener()
            return

        self._parser.feed_and_flush(self._decoder.decode(data))
        self._drain()

    def _drain(self) -> None:
        while self._queue and not self._paused:
            key_press = self._queue.popleft()
            self._emit(key_press.data or None, key_descriptor(key_press.key))

    def _emit(self, char: str | None, key: KeyDescriptor) -> None:
        for listener in list(self._keypress_listeners):
            listener(char, key)

    def __repr__(self) -> str:
        return (
            f"TerminalKeyStream(fd={self._fd}, interactive={self._interactive}, "
            f"paused={self._paused})"
        )
