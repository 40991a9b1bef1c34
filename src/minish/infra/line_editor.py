"""Infrastructure: line editor driven by keypress events.

Text editing is delegated to a prompt_toolkit :class:`Buffer` and
submitted lines are remembered in a prompt_toolkit :class:`History`.
Screen updates go through a :class:`Vt100_Output` over the shell's
output stream.

Supported keys:

* printable text is inserted at the cursor;
* left / right, home / end (also ctrl+b / ctrl+f, ctrl+a / ctrl+e);
* backspace, delete, ctrl+k (kill to end), ctrl+u (kill to start);
* up / down (also ctrl+p / ctrl+n) browse earlier lines;
* return / enter submits; ctrl+d on an empty line closes.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Callable
from typing import TextIO

from prompt_toolkit.buffer import Buffer
from prompt_toolkit.data_structures import Size
from prompt_toolkit.document import Document
from prompt_toolkit.history import History, InMemoryHistory
from prompt_toolkit.output.vt100 import Vt100_Output

from minish.core.models import KeyDescriptor
from minish.core.protocols import KeyStream

logger = logging.getLogger(__name__)


def _terminal_size() -> Size:
    columns, rows = shutil.get_terminal_size()
    return Size(rows=rows, columns=columns)


class BufferedLineEditor:
    """Line editor registered on a :class:`~minish.core.protocols.KeyStream`.

    The keypress listener is attached in the constructor, which lets
    the console engine detach it and replay it on its own terms.

    On interactive streams the line is echoed: appending at the end of
    the line writes only the new text, any other edit redraws the prompt
    and the line and puts the cursor back in place.  On pipes nothing is
    echoed, and the stream is paused after every submitted line and
    resumed by the next :meth:`prompt`, so buffered input is consumed
    one prompt at a time.

    Parameters
    ----------
    keys:
        Key stream to listen on.
    output:
        Text stream receiving the prompt and the echo.
    history:
        Where submitted lines are stored.  A fresh
        :class:`~prompt_toolkit.history.InMemoryHistory` by default.
    """

    def __init__(
        self,
        keys: KeyStream,
        output: TextIO,
        history: History | None = None,
    ) -> None:
        self._keys = keys
        self._screen = Vt100_Output(output, _terminal_size)
        self._echo: bool = keys.interactive
        self._prompt: str = ""
        self._history: History = history if history is not None else InMemoryHistory()
        self._buffer = Buffer(history=self._history, multiline=False)
        # Index into the history while browsing it, and the line that was
        # being typed before browsing started.
        self._recalled: int | None = None
        self._draft: str = ""
        self._line_listeners: list[Callable[[str], None]] = []
        self._close_listeners: list[Callable[[], None]] = []
        self._closed: bool = False

        self._named_keys: dict[str, Callable[[], object]] = {
            "left": self._buffer.cursor_left,
            "right": self._buffer.cursor_right,
            "home": self._cursor_home,
            "end": self._cursor_end,
            "delete": self._buffer.delete,
            "up": self._history_backward,
            "down": self._history_forward,
        }
        self._control_keys: dict[str, Callable[[], object]] = {
            "a": self._cursor_home,
            "e": self._cursor_end,
            "b": self._buffer.cursor_left,
            "f": self._buffer.cursor_right,
            "d": self._buffer.delete,
            "k": self._kill_to_end,
            "u": self._kill_to_start,
            "p": self._history_backward,
            "n": self._history_forward,
        }

        keys.add_keypress_listener(self._on_keypress)
        keys.add_end_listener(self.close)

    # ------------------------------------------------------------------
    # Collaborator interface
    # ------------------------------------------------------------------

    def once_line(self, listener: Callable[[str], None]) -> None:
        self._line_listeners.append(listener)

    def once_close(self, listener: Callable[[], None]) -> None:
        self._close_listeners.append(listener)

    def set_prompt(self, prompt: str) -> None:
        self._prompt = prompt

    def prompt(self) -> None:
        """Print the prompt (and any pending input) and accept keystrokes."""
        if self._closed:
            return
        if self._echo:
            self._screen.write_raw(self._prompt + self._buffer.text)
            self._screen.cursor_backward(self._cursor_offset())
        else:
            self._screen.write_raw(self._prompt)
        self._screen.flush()
        self._keys.resume()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._keys.remove_keypress_listener(self._on_keypress)
        self._keys.remove_end_listener(self.close)
        self._line_listeners.clear()
        listeners, self._close_listeners = self._close_listeners, []
        logger.debug("line editor closed")
        for listener in listeners:
            listener()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def text(self) -> str:
        """The line typed so far."""
        return self._buffer.text

    @property
    def cursor_position(self) -> int:
        return self._buffer.cursor_position

    @property
    def history(self) -> History:
        return self._history

    # ------------------------------------------------------------------
    # Keystrokes
    # ------------------------------------------------------------------

    def _on_keypress(self, char: str | None, key: KeyDescriptor | None) -> None:
        if self._closed:
            return
        name = key.name if key is not None else None

        if key is not None and key.meta:
            return
        if key is not None and key.ctrl:
            if name == "d" and not self._buffer.text:
                self.close()
                return
            action = self._control_keys.get(name or "")
            if action is not None:
                self._edit(action)
            return

        if name in ("return", "enter"):
            self._submit()
        elif name == "backspace":
            self._backspace()
        elif name in self._named_keys:
            self._edit(self._named_keys[name])
        elif char and (name is None or len(name) == 1 or name == "space"):
            # Remaining named keys (tab, function keys) carry control data.
            text = "".join(c for c in char if ord(c) >= 0x20)
            if text:
                self._insert(text)

    def _insert(self, text: str) -> None:
        at_end = self._cursor_offset() == 0
        self._buffer.insert_text(text)
        if not self._echo:
            return
        if at_end:
            self._write(text)
        else:
            self._redraw()

    def _backspace(self) -> None:
        if self._buffer.cursor_position == 0:
            return
        at_end = self._cursor_offset() == 0
        self._buffer.delete_before_cursor()
        if not self._echo:
            return
        if at_end:
            self._write("\b \b")
        else:
            self._redraw()

    def _edit(self, action: Callable[[], object]) -> None:
        action()
        self._redraw()

    def _cursor_home(self) -> None:
        self._buffer.cursor_position = 0

    def _cursor_end(self) -> None:
        self._buffer.cursor_position = len(self._buffer.text)

    def _kill_to_end(self) -> None:
        self._buffer.delete(len(self._buffer.text) - self._buffer.cursor_position)

    def _kill_to_start(self) -> None:
        self._buffer.delete_before_cursor(self._buffer.cursor_position)

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------
    # Buffer.history_backward() walks working lines that prompt_toolkit
    # only loads from inside a running Application, so browsing indexes
    # the history strings directly.

    def _history_backward(self) -> None:
        entries = self._history.get_strings()
        index = len(entries) if self._recalled is None else self._recalled
        if index == 0:
            return
        if self._recalled is None:
            self._draft = self._buffer.text
        self._recalled = index - 1
        self._show(entries[self._recalled])

    def _history_forward(self) -> None:
        if self._recalled is None:
            return
        entries = self._history.get_strings()
        index = self._recalled + 1
        if index >= len(entries):
            self._recalled = None
            self._show(self._draft)
        else:
            self._recalled = index
            self._show(entries[index])

    def _show(self, text: str) -> None:
        self._buffer.document = Document(text, len(text))

    # ------------------------------------------------------------------
    # Submission and rendering
    # ------------------------------------------------------------------

    def _submit(self) -> None:
        line = self._buffer.text
        self._buffer.append_to_history()
        self._buffer.reset()
        self._recalled = None
        self._draft = ""
        if self._echo:
            self._write("\r\n")
        if not self._keys.interactive:
            self._keys.pause()
        listeners, self._line_listeners = self._line_listeners, []
        for listener in listeners:
            listener(line)

    def _cursor_offset(self) -> int:
        return len(self._buffer.text) - self._buffer.cursor_position

    def _redraw(self) -> None:
        if not self._echo:
            return
        self._screen.write_raw("\r" + self._prompt + self._buffer.text)
        self._screen.erase_end_of_line()
        self._screen.cursor_backward(self._cursor_offset())
        self._screen.flush()

    def _write(self, text: str) -> None:
        self._screen.write_raw(text)
        self._screen.flush()
