"""Tests for the embedding facade (shell.py).

Coverage:
* Call-shape validation at the boundary.
* Registration overloads and the decorator form.
* Prompts with callbacks and futures.
* Instance independence and the cached default shell.
"""

from __future__ import annotations

import asyncio
from unittest.mock import MagicMock

import pytest

import minish
from minish import shell as shell_module
from minish.core.context import CommandContext
from minish.core.models import ConsoleState, PasswordOptions, QuestionOptions
from minish.exceptions import EmptyCommandError, TypeMismatchError
from minish.shell import Shell, create_shell, get_default_shell


def _handler(context: CommandContext) -> None:
    context.end()


# ---------------------------------------------------------------------------
# Package surface
# ---------------------------------------------------------------------------

class TestPackageExports:
    def test_public_names(self) -> None:
        assert minish.Shell is Shell
        assert minish.create_shell is create_shell
        assert minish.get_default_shell is get_default_shell
        assert minish.FALLBACK_COMMAND == "_"
        assert minish.CommandContext is CommandContext
        assert minish.QuestionOptions is QuestionOptions
        assert minish.PasswordOptions is PasswordOptions


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------

class TestCommand:
    def test_handler_in_second_position(self, shell: Shell) -> None:
        shell.command("hello", _handler)
        entry = shell.registry.lookup("hello")
        assert entry.handler is _handler
        assert entry.help is None

    def test_help_and_handler(self, shell: Shell) -> None:
        shell.command("hello", "Greets", _handler)
        assert shell.registry.lookup("hello").help == "Greets"

    def test_help_only(self, shell: Shell) -> None:
        shell.command("later", "Not yet")
        entry = shell.registry.lookup("later")
        assert entry.handler is None
        assert entry.help == "Not yet"

    def test_is_chainable(self, shell: Shell) -> None:
        assert shell.command("a", _handler).command("b", _handler) is shell
        assert shell.registry.names() == ["a", "b"]

    def test_aliases(self, shell: Shell) -> None:
        shell.command(("quit", "exit"), _handler)
        assert shell.registry.lookup("quit").handler is _handler
        assert shell.registry.lookup("exit").handler is _handler

    def test_non_string_help_raises(self, shell: Shell) -> None:
        with pytest.raises(TypeMismatchError, match="Help must be a string"):
            shell.command("x", 42)

    def test_non_callable_handler_raises(self, shell: Shell) -> None:
        with pytest.raises(TypeMismatchError, match="Handler must be a function"):
            shell.command("x", "help", "not a function")

    @pytest.mark.parametrize("names", [5, ["ok", 5]])
    def test_non_string_names_raise(self, shell: Shell, names: object) -> None:
        with pytest.raises(TypeMismatchError):
            shell.command(names, _handler)

    def test_type_mismatch_is_type_error(self, shell: Shell) -> None:
        with pytest.raises(TypeError):
            shell.command("x", 42)

    def test_empty_name_raises(self, shell: Shell) -> None:
        with pytest.raises(EmptyCommandError):
            shell.command("", _handler)


class TestHandlesDecorator:
    def test_registers_and_returns_function(self, shell: Shell) -> None:
        @shell.handles("hi", "hey", help="Says hi")
        def hi(context: CommandContext) -> None:
            context.end()

        assert callable(hi)
        assert shell.registry.lookup("hi").handler is hi
        assert shell.registry.lookup("hey").help == "Says hi"


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------

class TestQuestion:
    def test_returns_future(self, shell: Shell, keys, run_pending) -> None:
        future = shell.question("Name?")
        assert isinstance(future, asyncio.Future)
        keys.submit("ann")
        run_pending()
        assert future.result() == "ann"

    def test_callback_form(self, shell: Shell, keys, run_pending) -> None:
        replies: list[str] = []
        assert shell.question("Name?", replies.append) is None
        keys.submit("ann")
        assert replies == []
        run_pending()
        assert replies == ["ann"]

    def test_options_and_callback(self, shell: Shell, keys, output, run_pending) -> None:
        replies: list[str] = []
        shell.question("Name:", QuestionOptions(no_space=True), replies.append)
        keys.submit("x")
        run_pending()
        assert replies == ["x"]
        assert output.getvalue().startswith("Name:x")

    def test_non_string_prompt_raises(self, shell: Shell) -> None:
        with pytest.raises(TypeMismatchError, match="Prompt must be a string"):
            shell.question(42)

    def test_wrong_options_type_raises(self, shell: Shell) -> None:
        with pytest.raises(TypeMismatchError, match="Options must be QuestionOptions"):
            shell.question("Name?", {"no_space": True})

    def test_non_callable_callback_raises(self, shell: Shell) -> None:
        with pytest.raises(TypeMismatchError, match="Callback must be a function"):
            shell.question("Name?", None, "nope")

    def test_password_rejects_question_options(self, shell: Shell) -> None:
        with pytest.raises(TypeMismatchError, match="Options must be PasswordOptions"):
            shell.password("pw", QuestionOptions())

    def test_invalid_call_leaves_console_idle(self, shell: Shell) -> None:
        with pytest.raises(TypeMismatchError):
            shell.question(None)
        assert shell.state is ConsoleState.NONE


# ---------------------------------------------------------------------------
# Command loop
# ---------------------------------------------------------------------------

class TestLoop:
    def test_prompt_requires_string(self, shell: Shell) -> None:
        with pytest.raises(TypeMismatchError):
            shell.prompt(None)

    def test_run_until_loop_stops(self, shell: Shell, keys, loop, output) -> None:
        shell.command("stop", lambda context: loop.stop())
        loop.call_soon(keys.submit, "stop")
        shell.run("$ ")
        assert output.getvalue().startswith("$ stop\r\n")
        assert shell.state is ConsoleState.CLOSED
        assert keys.stopped

    def test_help_writes_listing(self, shell: Shell, output) -> None:
        shell.command("hello", "Greets", _handler)
        shell.help()
        assert output.getvalue() == "hello  Greets\n"

    def test_write(self, shell: Shell, output) -> None:
        shell.write("a", 1)
        assert output.getvalue() == "a 1\n"


class TestShutdown:
    def test_close_is_idempotent(self, shell: Shell, exits) -> None:
        shell.question("?")
        shell.close()
        shell.close()
        assert shell.state is ConsoleState.CLOSED
        assert exits == []

    def test_exit_closes_and_terminates(self, shell: Shell, exits) -> None:
        shell.exit(4)
        assert exits == [4]
        assert shell.state is ConsoleState.CLOSED

    def test_exit_default_code(self, shell: Shell, exits) -> None:
        shell.exit()
        assert exits == [0]

    def test_exit_defaults_to_sys_exit(self, make_keys, make_output, loop) -> None:
        shell = Shell(make_keys(), make_output(), loop=loop)
        with pytest.raises(SystemExit) as exc_info:
            shell.exit(5)
        assert exc_info.value.code == 5
        assert shell.state is ConsoleState.CLOSED


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

class TestFactories:
    def test_create_shell_instances_are_independent(self, make_keys, make_output, loop) -> None:
        first = create_shell(make_keys(), make_output(), loop=loop)
        second = create_shell(make_keys(), make_output(), loop=loop)
        first.command("only-first", _handler)
        assert "only-first" in first.registry
        assert "only-first" not in second.registry
        assert first.engine is not second.engine

    def test_default_shell_is_cached(self, monkeypatch: pytest.MonkeyPatch) -> None:
        fake_shell_class = MagicMock()
        registered = MagicMock()
        monkeypatch.setattr(shell_module, "Shell", fake_shell_class)
        monkeypatch.setattr(shell_module.atexit, "register", registered)
        get_default_shell.cache_clear()
        try:
            first = get_default_shell()
            second = get_default_shell()
        finally:
            get_default_shell.cache_clear()

        assert first is second
        fake_shell_class.assert_called_once_with()
        registered.assert_called_once_with(first.close)
