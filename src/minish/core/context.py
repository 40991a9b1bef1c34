"""One-shot handle passed to every invoked command handler."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from minish.core.dispatcher import Dispatcher


class CommandContext:
    """Inputs of one command invocation plus its completion signals.

    Exactly one of :meth:`end`, :meth:`fail` and :meth:`execute` has an
    effect; the first one releases the context and every later call on
    it, including :meth:`write` and :meth:`help`, does nothing.
    """

    def __init__(
        self,
        dispatcher: Dispatcher,
        command: str,
        args: list[str],
        options: dict[str, Any],
    ) -> None:
        self._dispatcher: Dispatcher | None = dispatcher
        self.command: str = command
        self.args: list[str] = args
        self.options: dict[str, Any] = options

    def __repr__(self) -> str:
        return (
            f"CommandContext(command={self.command!r}, args={self.args!r}, "
            f"options={self.options!r}, active={self.active})"
        )

    @property
    def active(self) -> bool:
        return self._dispatcher is not None

    def write(self, *objects: object) -> None:
        """Write a line to the shell output."""
        if self._dispatcher is None:
            return
        self._dispatcher.write(*objects)

    def help(self) -> None:
        """Display the command listing."""
        if self._dispatcher is None:
            return
        self._dispatcher.help()

    def end(self) -> None:
        """Finish the command and let the shell prompt again."""
        dispatcher = self._release()
        if dispatcher is not None:
            dispatcher.next()

    def fail(self, err: BaseException | object) -> None:
        """Report *err* and finish the command."""
        if self._dispatcher is None:
            return
        if isinstance(err, BaseException):
            message = str(err) or type(err).__name__
        else:
            message = str(err)
        self.write(message)
        self.end()

    def execute(self, command: str, *args: str) -> None:
        """Finish the command and run *command* with pre-split *args*."""
        dispatcher = self._release()
        if dispatcher is not None:
            dispatcher.execute(str(command), [str(arg) for arg in args])

    def _release(self) -> Dispatcher | None:
        dispatcher, self._dispatcher = self._dispatcher, None
        return dispatcher
