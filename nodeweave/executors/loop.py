"""Loop executor.

Iterates a ``forEach`` collection, a fixed ``count`` or a ``while``
condition. The body of each iteration (the nodes wired inside the loop)
belongs to the orchestrator, which supplies it as an async
``iteration_handler``. A frame is pushed on the context's loop stack for
the duration of the call and popped on every exit path.
"""

from __future__ import annotations

import traceback
from typing import Any, Awaitable, Callable

from nodeweave.context.manager import ContextManager
from nodeweave.core.config import EngineSettings
from nodeweave.core.context import ExecutionContext, loop_frame, scope_of, variables_of
from nodeweave.core.nodes import LoopNode
from nodeweave.core.types import (
    IterationResult,
    LoopFrame,
    LoopSummary,
    NodeExecutionResult,
    NodeStatus,
)
from nodeweave.errors.exceptions import ContextError, NodeValidationError
from nodeweave.executors.base import NodeExecutor
from nodeweave.logging import get_logger

IterationHandler = Callable[[LoopNode, ExecutionContext, LoopFrame], Awaitable[Any]]


class LoopExecutor(NodeExecutor):
    """Executes ``loop`` nodes.

    The iterator variable (and index variable, when configured) is written
    into the context variables before each iteration. A failed iteration
    stops the loop; the loop itself still succeeds and reports the failure
    in its summary.

    Args:
        iteration_handler: Runs one iteration body. Its return value is the
            iteration output; returning an IterationResult replaces the
            record entirely. Without a handler each iteration records the
            iterator value.
    """

    node_class = LoopNode

    def __init__(
        self,
        context_manager: ContextManager | None = None,
        settings: EngineSettings | None = None,
        iteration_handler: IterationHandler | None = None,
    ) -> None:
        super().__init__(context_manager, settings)
        self.iteration_handler = iteration_handler

    def _collection(self, node: LoopNode, context: ExecutionContext) -> list[Any]:
        if not node.collection:
            raise NodeValidationError("forEach loop requires a collection path", node_id=node.id)
        try:
            value = self.context_manager.evaluate_jsonpath(node.collection, scope_of(context))
        except ContextError as e:
            raise NodeValidationError(
                f"Failed to evaluate collection: {e}", node_id=node.id
            ) from e
        if not isinstance(value, (list, tuple)):
            raise NodeValidationError(
                f"Collection at {node.collection} is not an array", node_id=node.id
            )
        return list(value)

    @staticmethod
    def _count(node: LoopNode) -> int:
        count = node.count
        if isinstance(count, str) and count.strip().isdigit():
            count = int(count)
        if isinstance(count, bool) or not isinstance(count, int) or count < 1:
            raise NodeValidationError(
                "count loop requires a positive count value", node_id=node.id
            )
        return count

    async def _run_iteration(
        self,
        node: LoopNode,
        context: ExecutionContext,
        frame: LoopFrame,
        value: Any,
    ) -> IterationResult:
        index = frame.current_index
        variables = {node.iterator_variable: value}
        if node.index_variable:
            variables[node.index_variable] = index

        if self.iteration_handler is None:
            return IterationResult(
                iteration=index, variables=variables, output={"iteratorValue": value}
            )

        try:
            output = await self.iteration_handler(node, context, frame)
        except Exception as e:
            get_logger().debug("Loop iteration raised", node=node.id, trace=traceback.format_exc())
            return IterationResult(
                iteration=index,
                status=NodeStatus.FAILED,
                variables=variables,
                error=str(e) or type(e).__name__,
            )

        if isinstance(output, IterationResult):
            return output
        if isinstance(output, NodeExecutionResult):
            return IterationResult(
                iteration=index,
                status=output.status,
                variables=variables,
                output=output.output,
                error=output.error,
            )
        return IterationResult(iteration=index, variables=variables, output=output)

    async def _execute(self, node: LoopNode, context: ExecutionContext) -> NodeExecutionResult:
        loop_type = node.loop_type
        items: list[Any] | None = None
        count: int | None = None

        if loop_type == "forEach":
            items = self._collection(node, context)
        elif loop_type == "count":
            count = self._count(node)
        elif loop_type == "while":
            if not node.while_condition or not node.while_condition.strip():
                raise NodeValidationError("while loop requires a condition", node_id=node.id)
        else:
            raise NodeValidationError(f"Unknown loop type: {loop_type}", node_id=node.id)

        max_iterations = node.max_iterations or self.settings.default_max_iterations
        logger = get_logger()
        variables = variables_of(context)
        iterations: list[IterationResult] = []
        frame = LoopFrame(
            loop_node_id=node.id,
            iterator_variable=node.iterator_variable,
            index_variable=node.index_variable,
            total_items=len(items) if items is not None else count,
            collection_data=items,
        )

        with loop_frame(context, frame):
            index = 0
            while True:
                if items is not None:
                    if index >= len(items):
                        break
                    value = items[index]
                elif count is not None:
                    if index >= count:
                        break
                    value = index
                else:
                    if not self.context_manager.evaluate_condition(
                        node.while_condition, scope_of(context)
                    ):
                        break
                    if index >= max_iterations:
                        logger.warning(
                            "While loop reached max iterations", node=node.id, max=max_iterations
                        )
                        break
                    value = index

                frame.current_index = index
                variables[node.iterator_variable] = value
                if node.index_variable:
                    variables[node.index_variable] = index

                record = await self._run_iteration(node, context, frame, value)
                iterations.append(record)
                logger.loop_iteration(node.name, index, record.status == NodeStatus.SUCCESS)
                if record.status == NodeStatus.FAILED:
                    logger.warning("Loop iteration failed, stopping loop", node=node.id, iteration=index)
                    break
                index += 1

        summary = LoopSummary.from_iterations(iterations).to_dict()
        records = [record.to_dict() for record in iterations]
        last = records[-1] if records else None

        return self.success(
            node,
            output={
                "loopType": loop_type,
                "totalIterations": len(records),
                "iterations": records,
                "summary": summary,
            },
            variables={
                "iterationCount": len(records),
                "iterations": records,
                "lastIteration": last,
                "summary": summary,
            },
        )
