"""Executor registry for dispatching nodes by type."""

from __future__ import annotations

from typing import Any

from nodeweave.context.manager import ContextManager
from nodeweave.core.config import EngineSettings, get_settings
from nodeweave.core.context import ExecutionContext
from nodeweave.core.nodes import BaseNode
from nodeweave.core.types import NodeExecutionResult
from nodeweave.errors.exceptions import InvalidNodeTypeError
from nodeweave.executors.base import NodeExecutor
from nodeweave.executors.code import CodeExecutionExecutor
from nodeweave.executors.conditional import ConditionalExecutor
from nodeweave.executors.file import FileOperationExecutor
from nodeweave.executors.http import HttpRequestExecutor
from nodeweave.executors.loop import LoopExecutor
from nodeweave.executors.user_input import UserInputExecutor


class ExecutorRegistry:
    """Maps node types to the executors that run them.

    Example:
        >>> registry = create_default_registry()
        >>> result = await registry.execute(node, context)
    """

    def __init__(self, executors: list[NodeExecutor] | None = None) -> None:
        """Initialize with a list of executors."""
        self._executors: dict[str, NodeExecutor] = {}
        if executors:
            for executor in executors:
                self.register(executor)

    def register(self, executor: NodeExecutor) -> None:
        """Register an executor under its node type, replacing any previous one."""
        self._executors[executor.node_type] = executor

    def unregister(self, node_type: str) -> bool:
        """Unregister the executor for a node type. Returns True if found."""
        if node_type in self._executors:
            del self._executors[node_type]
            return True
        return False

    def get(self, node_type: str) -> NodeExecutor | None:
        """Get the executor for a node type."""
        return self._executors.get(node_type)

    @property
    def node_types(self) -> list[str]:
        """Node types that have an executor."""
        return list(self._executors.keys())

    async def execute(self, node: BaseNode, context: ExecutionContext) -> NodeExecutionResult:
        """Run ``node`` with the executor registered for its type.

        Raises:
            InvalidNodeTypeError: If no executor handles the node's type.
        """
        node_type = getattr(node, "type", type(node).__name__)
        executor = self._executors.get(node_type)
        if executor is None:
            raise InvalidNodeTypeError(type(self).__name__, str(node_type))
        return await executor.execute(node, context)

    def __len__(self) -> int:
        return len(self._executors)

    def __contains__(self, node_type: str) -> bool:
        return node_type in self._executors


def create_default_registry(
    settings: EngineSettings | None = None,
    context_manager: ContextManager | None = None,
    **options: Any,
) -> ExecutorRegistry:
    """Create a registry with all built-in executors.

    Args:
        settings: Engine settings shared by every executor.
        context_manager: Context manager shared by every executor.
        **options: Executor-specific collaborators: ``client`` (HTTP),
            ``process_runner`` (code), ``iteration_handler`` (loop) and
            ``input_provider`` (user input).
    """
    settings = settings or get_settings()
    manager = context_manager or ContextManager()

    return ExecutorRegistry(
        [
            CodeExecutionExecutor(manager, settings, process_runner=options.get("process_runner")),
            HttpRequestExecutor(manager, settings, client=options.get("client")),
            FileOperationExecutor(manager, settings),
            ConditionalExecutor(manager, settings),
            LoopExecutor(manager, settings, iteration_handler=options.get("iteration_handler")),
            UserInputExecutor(manager, settings, input_provider=options.get("input_provider")),
        ]
    )
