"""Unit tests for the user input executor."""

from __future__ import annotations

import pytest

from nodeweave.core.nodes import InputValidation, SelectOption, UserInputNode
from nodeweave.core.types import NodeStatus
from nodeweave.executors.user_input import UserInputExecutor, validate_input


def _node(**kwargs) -> UserInputNode:
    return UserInputNode(id="ask-1", name="Ask", prompt="Your answer?", **kwargs)


class ScriptedProvider:
    """Input provider that answers from a list and records validation errors."""

    def __init__(self, *answers) -> None:
        self._answers = list(answers)
        self.errors: list[str | None] = []

    async def __call__(self, node, context, error):
        self.errors.append(error)
        return self._answers.pop(0)


class TestValidateInput:
    """Tests for validate_input()."""

    def test_required(self) -> None:
        """Empty values fail only when required."""
        assert validate_input(_node(required=True), "") == "This field is required"
        assert validate_input(_node(required=True), None) == "This field is required"
        assert validate_input(_node(), "") is None

    def test_text_length(self) -> None:
        """Length bounds apply to text."""
        node = _node(validation=InputValidation(min_length=2, max_length=4))

        assert validate_input(node, "a") == "Must be at least 2 characters"
        assert validate_input(node, "abcde") == "Must be at most 4 characters"
        assert validate_input(node, "abc") is None

    def test_pattern(self) -> None:
        """Patterns must match."""
        node = _node(input_type="textarea", validation=InputValidation(pattern=r"^\d{3}$"))

        assert validate_input(node, "12a") == "Input does not match required pattern"
        assert validate_input(node, "123") is None

    def test_number(self) -> None:
        """Numbers are parsed and bounded."""
        node = _node(input_type="number", validation=InputValidation(min=1, max=10))

        assert validate_input(node, "abc") == "Invalid number"
        assert validate_input(node, "0") == "Value must be at least 1"
        assert validate_input(node, 11) == "Value must be at most 10"
        assert validate_input(node, "5.5") is None

    def test_select(self) -> None:
        """Selections must be one of the options."""
        node = _node(
            input_type="select",
            options=[SelectOption(label="One", value=1), SelectOption(label="Two", value=2)],
        )

        assert validate_input(node, 3) == "Invalid selection"
        assert validate_input(node, "2") is None
        assert validate_input(_node(input_type="select"), "x") == (
            "No options defined for select input"
        )


class TestUserInputExecutor:
    """Tests for UserInputExecutor."""

    @pytest.mark.asyncio
    async def test_default_value(self, settings) -> None:
        """A default value is used without prompting."""
        provider = ScriptedProvider("ignored")
        executor = UserInputExecutor(settings=settings, input_provider=provider)

        result = await executor.execute(_node(default_value="preset"), {})

        assert result.status == NodeStatus.SUCCESS
        assert result.output == "preset"
        assert result.variables == {"userInput": "preset"}
        assert provider.errors == []

    @pytest.mark.asyncio
    async def test_invalid_default_value(self, settings) -> None:
        """An invalid default fails the node."""
        executor = UserInputExecutor(settings=settings)

        result = await executor.execute(_node(input_type="number", default_value="x"), {})

        assert result.status == NodeStatus.FAILED
        assert result.error == "Invalid input: Invalid number"

    @pytest.mark.asyncio
    async def test_provider_answer(self, settings) -> None:
        """The provider's answer becomes the output."""
        executor = UserInputExecutor(settings=settings, input_provider=ScriptedProvider("Ana"))

        result = await executor.execute(_node(required=True), {})

        assert result.output == "Ana"

    @pytest.mark.asyncio
    async def test_reprompts_on_invalid_answer(self, settings) -> None:
        """Invalid answers are rejected with the reason passed back."""
        provider = ScriptedProvider("", "Ana")
        executor = UserInputExecutor(settings=settings, input_provider=provider)

        result = await executor.execute(_node(required=True), {})

        assert result.output == "Ana"
        assert provider.errors == [None, "This field is required"]

    @pytest.mark.asyncio
    async def test_attempt_limit(self, settings) -> None:
        """The node fails after too many invalid answers."""
        limited = settings.model_copy(update={"user_input_max_attempts": 2})
        executor = UserInputExecutor(settings=limited, input_provider=ScriptedProvider("a", "b"))
        node = _node(validation=InputValidation(min_length=5))

        result = await executor.execute(node, {})

        assert result.status == NodeStatus.FAILED
        assert result.error == (
            "Maximum validation attempts (2) exceeded: Must be at least 5 characters"
        )

    @pytest.mark.asyncio
    async def test_required_without_provider(self, settings) -> None:
        """Required input with no way to prompt fails."""
        executor = UserInputExecutor(settings=settings)

        result = await executor.execute(_node(required=True), {})

        assert result.status == NodeStatus.FAILED
        assert "requires IPC integration" in result.error

    @pytest.mark.asyncio
    async def test_optional_without_provider(self, settings) -> None:
        """Optional input with no way to prompt yields None."""
        executor = UserInputExecutor(settings=settings)

        result = await executor.execute(_node(), {})

        assert result.status == NodeStatus.SUCCESS
        assert result.variables == {"userInput": None}

    @pytest.mark.asyncio
    async def test_unsupported_input_type(self, settings) -> None:
        """Unknown input types fail."""
        executor = UserInputExecutor(settings=settings)

        result = await executor.execute(_node(input_type="date"), {})

        assert result.error == "Unsupported input type: date"
