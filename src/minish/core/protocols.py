"""Protocols (interfaces) consumed by the core layer.

The console engine and the dispatcher depend only on these contracts.
Concrete adapters live in :mod:`minish.infra`; tests supply fakes.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
from typing import Protocol, TextIO

from minish.core.models import KeyDescriptor, ParsedArgs

KeypressListener = Callable[[str | None, KeyDescriptor | None], None]
"""Receives ``(raw_char_or_none, key_descriptor_or_none)`` per keystroke."""


class KeyStream(Protocol):
    """Raw keypress source.

    Listeners are invoked in registration order for every keystroke.
    The engine detaches listeners that a line editor installs and
    replays them itself, so :meth:`keypress_listeners` must return the
    very objects that were registered.
    """

    @property
    def interactive(self) -> bool:
        """Whether the stream is a terminal able to deliver single keystrokes."""
        ...  # pragma: no cover

    def keypress_listeners(self) -> list[KeypressListener]:
        """Return a snapshot of the registered keypress listeners."""
        ...  # pragma: no cover

    def add_keypress_listener(self, listener: KeypressListener) -> None: ...  # pragma: no cover

    def remove_keypress_listener(self, listener: KeypressListener) -> None: ...  # pragma: no cover

    def add_end_listener(self, listener: Callable[[], None]) -> None:
        """Register a callable invoked once when the input is exhausted."""
        ...  # pragma: no cover

    def remove_end_listener(self, listener: Callable[[], None]) -> None: ...  # pragma: no cover

    def start(self, loop: asyncio.AbstractEventLoop) -> None:
        """Begin delivering keystrokes from *loop*.  Idempotent."""
        ...  # pragma: no cover

    def stop(self) -> None:
        """Stop delivering keystrokes and restore the terminal."""
        ...  # pragma: no cover

    def pause(self) -> None: ...  # pragma: no cover

    def resume(self) -> None: ...  # pragma: no cover

    def set_raw_mode(self, enabled: bool) -> None: ...  # pragma: no cover


class LineEditor(Protocol):
    """Line-editing collaborator wrapped by the console engine.

    Implementations register their keypress listener(s) on the key
    stream while being constructed.
    """

    def once_line(self, listener: Callable[[str], None]) -> None:
        """Invoke *listener* with the next submitted line, then forget it."""
        ...  # pragma: no cover

    def once_close(self, listener: Callable[[], None]) -> None:
        """Invoke *listener* once when the editor closes."""
        ...  # pragma: no cover

    def set_prompt(self, prompt: str) -> None: ...  # pragma: no cover

    def prompt(self) -> None:
        """Display the current prompt and start accepting a line."""
        ...  # pragma: no cover

    def close(self) -> None: ...  # pragma: no cover


LineEditorFactory = Callable[[KeyStream, TextIO], LineEditor]


class Tokenizer(Protocol):
    """Splits a raw command line into words."""

    def __call__(self, line: str, ignore_backslash: bool = False) -> list[str]:
        ...  # pragma: no cover


class OptionParser(Protocol):
    """Turns already-tokenized words into positional and flag values."""

    def __call__(self, tokens: Sequence[str]) -> ParsedArgs:
        ...  # pragma: no cover
