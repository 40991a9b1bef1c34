"""Masked-input sub-machine used while the console reads a secret.

The engine hands every keystroke to :meth:`MaskedInput.feed` while it
is in ``PROMPTING_MASKED``.  The line editor never sees these events,
so nothing is echoed except the substitute glyph.
"""

from __future__ import annotations

from collections.abc import Callable

from minish.core.models import KeyDescriptor

ERASE_GLYPH: str = "\b \b"


class MaskedInput:
    """Accumulates a secret one keystroke at a time.

    Parameters
    ----------
    render:
        Writes raw text to the terminal.
    mask_char:
        Glyph rendered per accepted character.  Empty string renders
        nothing (silent mode); only the first character is used.
    on_submit:
        Called with the accumulated text when Enter is pressed.
    on_abort:
        Called when the entry is abandoned (ctrl+c, or ctrl+d on an
        empty buffer).
    """

    def __init__(
        self,
        render: Callable[[str], None],
        mask_char: str,
        on_submit: Callable[[str], None],
        on_abort: Callable[[], None],
    ) -> None:
        self._render = render
        self._mask: str = mask_char[:1]
        self._on_submit = on_submit
        self._on_abort = on_abort
        self._buffer: list[str] = []

    @property
    def silent(self) -> bool:
        return not self._mask

    @property
    def length(self) -> int:
        return len(self._buffer)

    def feed(self, char: str | None, key: KeyDescriptor | None) -> None:
        """Process one keystroke."""
        name: str | None = None
        if key is not None:
            name = key.name
            if key.ctrl and not key.shift:
                if name == "c":
                    self._abort()
                    return
                if name == "d":
                    # Only an empty entry can be abandoned with ctrl+d.
                    if not self._buffer:
                        self._abort()
                    return
                if name != "h":
                    return
                name = "backspace"
            elif key.meta or key.ctrl:
                return

        if name in ("return", "enter"):
            value = "".join(self._buffer)
            self._buffer.clear()
            self._on_submit(value)
        elif name == "backspace":
            if self._buffer:
                self._buffer.pop()
                if not self.silent:
                    self._render(ERASE_GLYPH)
        elif char:
            c = char[0]
            if ord(c) >= 0x20:
                self._buffer.append(c)
                if not self.silent:
                    self._render(self._mask)

    def _abort(self) -> None:
        self._buffer.clear()
        self._on_abort()
