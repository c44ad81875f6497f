"""User input executor."""

from __future__ import annotations

import re
from typing import Any, Awaitable, Callable

from nodeweave.context.manager import ContextManager
from nodeweave.core.config import EngineSettings
from nodeweave.core.context import ExecutionContext
from nodeweave.core.nodes import UserInputNode
from nodeweave.core.types import NodeExecutionResult
from nodeweave.errors.exceptions import NodeValidationError, UserInputError
from nodeweave.executors.base import NodeExecutor
from nodeweave.logging import get_logger

InputProvider = Callable[[UserInputNode, ExecutionContext, "str | None"], Awaitable[Any]]

INPUT_TYPES = ("text", "textarea", "number", "select")


def _fmt(number: float) -> str:
    return str(int(number)) if float(number).is_integer() else str(number)


def _is_empty(value: Any) -> bool:
    return value is None or value == ""


def validate_input(node: UserInputNode, value: Any) -> str | None:
    """Return why ``value`` is unacceptable for ``node``, or None if it is valid."""
    if _is_empty(value):
        return "This field is required" if node.required else None

    rules = node.validation
    if node.input_type == "number":
        if isinstance(value, bool):
            return "Invalid number"
        try:
            number = float(value)
        except (TypeError, ValueError):
            return "Invalid number"
        if number != number:
            return "Invalid number"
        if rules and rules.min is not None and number < rules.min:
            return f"Value must be at least {_fmt(rules.min)}"
        if rules and rules.max is not None and number > rules.max:
            return f"Value must be at most {_fmt(rules.max)}"

    elif node.input_type in ("text", "textarea"):
        text = str(value)
        if rules and rules.min_length is not None and len(text) < rules.min_length:
            return f"Must be at least {rules.min_length} characters"
        if rules and rules.max_length is not None and len(text) > rules.max_length:
            return f"Must be at most {rules.max_length} characters"
        if rules and rules.pattern and not re.search(rules.pattern, text):
            return "Input does not match required pattern"

    elif node.input_type == "select":
        if not node.options:
            return "No options defined for select input"
        values = [option.value for option in node.options]
        if value not in values and str(value) not in {str(v) for v in values}:
            return "Invalid selection"

    return None


class UserInputExecutor(NodeExecutor):
    """Executes ``user-input`` nodes.

    The node's default value is used when present. Otherwise the value
    comes from ``input_provider``, the host application's prompt, which
    is called again with the previous validation error until a valid
    value arrives or the attempt limit is reached.

    Args:
        input_provider: Async callable ``(node, context, validation_error)``
            returning the user's answer.
    """

    node_class = UserInputNode

    def __init__(
        self,
        context_manager: ContextManager | None = None,
        settings: EngineSettings | None = None,
        input_provider: InputProvider | None = None,
    ) -> None:
        super().__init__(context_manager, settings)
        self.input_provider = input_provider

    async def _prompt(self, node: UserInputNode, context: ExecutionContext) -> Any:
        max_attempts = self.settings.user_input_max_attempts
        error: str | None = None
        for attempt in range(1, max_attempts + 1):
            value = await self.input_provider(node, context, error)
            error = validate_input(node, value)
            if error is None:
                return value
            get_logger().warning(
                "Invalid user input, prompting again",
                node=node.id,
                attempt=attempt,
                reason=error,
            )
        raise UserInputError(
            f"Maximum validation attempts ({max_attempts}) exceeded: {error}",
            node_id=node.id,
        )

    async def _execute(
        self, node: UserInputNode, context: ExecutionContext
    ) -> NodeExecutionResult:
        if node.input_type not in INPUT_TYPES:
            raise NodeValidationError(
                f"Unsupported input type: {node.input_type}", node_id=node.id
            )

        if node.default_value is not None:
            value = node.default_value
            error = validate_input(node, value)
            if error:
                raise UserInputError(f"Invalid input: {error}", node_id=node.id)
        elif self.input_provider is not None:
            value = await self._prompt(node, context)
        elif node.required:
            raise UserInputError(
                "User input requires IPC integration, which is not available "
                "in this execution environment",
                node_id=node.id,
            )
        else:
            value = None

        return self.success(node, output=value, variables={"userInput": value})
