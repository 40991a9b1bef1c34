"""Command registry: name -> (optional handler, optional help text)."""

from __future__ import annotations

from collections.abc import Iterable

from minish.core.models import FALLBACK_COMMAND, CommandEntry, Handler
from minish.exceptions import EmptyCommandError


class CommandRegistry:
    """Mapping from command names to :class:`CommandEntry` values.

    Registering the same handler under several names creates aliases.
    The reserved :data:`~minish.core.models.FALLBACK_COMMAND` key holds
    the handler used when nothing else matches; it is never listed.
    """

    def __init__(self) -> None:
        self._entries: dict[str, CommandEntry] = {}

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def register(
        self,
        names: str | Iterable[str],
        handler: Handler | None = None,
        help: str | None = None,
    ) -> None:
        """Register *handler* (or a no-op when ``None``) under *names*.

        Re-registering an existing name replaces its entry.
        """
        names = [names] if isinstance(names, str) else list(names)
        # All or nothing: a rejected call registers none of its names.
        if not all(names):
            raise EmptyCommandError("Empty command")
        for name in names:
            self._entries[name] = CommandEntry(
                handler=handler,
                help=help if name != FALLBACK_COMMAND else None,
            )

    def lookup(self, name: str) -> CommandEntry | None:
        return self._entries.get(name)

    @property
    def fallback(self) -> Handler | None:
        entry = self._entries.get(FALLBACK_COMMAND)
        return entry.handler if entry is not None else None

    def names(self) -> list[str]:
        """Registered names, fallback excluded, lexicographically sorted."""
        return sorted(name for name in self._entries if name != FALLBACK_COMMAND)

    def help_lines(self) -> list[str]:
        """One aligned ``name  help`` line per registered command."""
        names = self.names()
        if not names:
            return []
        width = max(len(name) for name in names) + 2
        return [
            f"{name.ljust(width)}{self._entries[name].help or ''}"
            for name in names
        ]
