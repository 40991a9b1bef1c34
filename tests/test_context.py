"""Tests for the one-shot command context (core/context.py)."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from minish.core.context import CommandContext


@pytest.fixture
def dispatcher() -> MagicMock:
    return MagicMock()


@pytest.fixture
def context(dispatcher: MagicMock) -> CommandContext:
    return CommandContext(dispatcher, "deploy", ["prod"], {"force": True})


class TestInputs:
    def test_fields(self, context: CommandContext) -> None:
        assert context.command == "deploy"
        assert context.args == ["prod"]
        assert context.options == {"force": True}
        assert context.active

    def test_repr(self, context: CommandContext) -> None:
        assert repr(context) == (
            "CommandContext(command='deploy', args=['prod'], "
            "options={'force': True}, active=True)"
        )


class TestCompletion:
    def test_end_prompts_once(self, context: CommandContext, dispatcher: MagicMock) -> None:
        context.end()
        context.end()
        dispatcher.next.assert_called_once_with()
        assert not context.active

    def test_fail_with_string(self, context: CommandContext, dispatcher: MagicMock) -> None:
        context.fail("nope")
        dispatcher.write.assert_called_once_with("nope")
        dispatcher.next.assert_called_once_with()

    def test_fail_with_exception(self, context: CommandContext, dispatcher: MagicMock) -> None:
        context.fail(RuntimeError("bad"))
        dispatcher.write.assert_called_once_with("bad")

    def test_fail_with_bare_exception_uses_type_name(
        self, context: CommandContext, dispatcher: MagicMock
    ) -> None:
        context.fail(TimeoutError())
        dispatcher.write.assert_called_once_with("TimeoutError")

    def test_execute_stringifies_arguments(
        self, context: CommandContext, dispatcher: MagicMock
    ) -> None:
        context.execute("echo", "a", 1)
        dispatcher.execute.assert_called_once_with("echo", ["a", "1"])
        dispatcher.next.assert_not_called()

    @pytest.mark.parametrize(
        "first",
        [
            lambda ctx: ctx.end(),
            lambda ctx: ctx.fail("x"),
            lambda ctx: ctx.execute("other"),
        ],
        ids=["end", "fail", "execute"],
    )
    def test_everything_after_release_is_ignored(
        self, context: CommandContext, dispatcher: MagicMock, first
    ) -> None:
        first(context)
        dispatcher.reset_mock()

        context.write("late")
        context.help()
        context.end()
        context.fail("late")
        context.execute("late")

        assert dispatcher.method_calls == []


class TestOutput:
    def test_write_forwards(self, context: CommandContext, dispatcher: MagicMock) -> None:
        context.write("a", 1)
        dispatcher.write.assert_called_once_with("a", 1)

    def test_help_forwards(self, context: CommandContext, dispatcher: MagicMock) -> None:
        context.help()
        dispatcher.help.assert_called_once_with()
        assert context.active
