"""Conditional executor."""

from __future__ import annotations

from typing import Any

from nodeweave.context.expressions import evaluate, js_type_name
from nodeweave.core.context import ExecutionContext, scope_of
from nodeweave.core.nodes import ConditionalNode
from nodeweave.core.types import NodeExecutionResult
from nodeweave.errors.exceptions import ExpressionError, NodeWeaveError
from nodeweave.executors.base import NodeExecutor

CONDITION_TYPES = ("jsonpath", "javascript")


class ConditionalExecutor(NodeExecutor):
    """Executes ``conditional`` nodes.

    ``jsonpath`` conditions are single comparisons such as
    ``$.score >= 70``. ``javascript`` conditions are restricted
    expressions with ``context`` bound, e.g. ``context.items.length > 0``,
    and must evaluate to a boolean. Any failure yields a failed result
    with ``conditionResult`` set to False so callers can still branch.
    """

    node_class = ConditionalNode

    def _evaluate(self, node: ConditionalNode, context: ExecutionContext) -> bool:
        scope = scope_of(context)
        if node.condition_type == "jsonpath":
            return self.context_manager.evaluate_condition(node.condition, scope, strict=True)

        value: Any = evaluate(node.condition, {"context": scope})
        if not isinstance(value, bool):
            raise ExpressionError(
                f"JavaScript condition must return boolean, got {js_type_name(value)}",
                expression=node.condition,
            )
        return value

    async def _execute(
        self, node: ConditionalNode, context: ExecutionContext
    ) -> NodeExecutionResult:
        output: dict[str, Any] = {
            "conditionResult": False,
            "condition": node.condition,
            "conditionType": node.condition_type,
        }

        if node.condition_type not in CONDITION_TYPES:
            error = f"Unsupported condition type: {node.condition_type}"
        elif not node.condition.strip():
            error = "Condition is required"
        else:
            try:
                output["conditionResult"] = self._evaluate(node, context)
            except NodeWeaveError as e:
                error = str(e)
            else:
                return self.success(
                    node,
                    output=output,
                    variables={"conditionResult": output["conditionResult"]},
                )

        output["error"] = error
        return self.failure(
            node, error, output=output, variables={"conditionResult": False}
        )
