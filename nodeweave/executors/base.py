"""Node executor base class.

Every executor follows the same contract: ``execute(node, context)``
checks the node variant, runs the node and returns exactly one
NodeExecutionResult. Failures inside a node become failed results; only
a node of the wrong variant raises.
"""

from __future__ import annotations

import time
import traceback
from abc import ABC, abstractmethod
from typing import Any, ClassVar

from nodeweave.context.manager import ContextManager
from nodeweave.core.config import EngineSettings, get_settings
from nodeweave.core.context import ExecutionContext
from nodeweave.core.nodes import BaseNode
from nodeweave.core.types import NodeExecutionResult, NodeStatus
from nodeweave.errors.exceptions import InvalidNodeTypeError, NodeWeaveError
from nodeweave.logging import get_logger


class NodeExecutor(ABC):
    """Abstract base class for node executors.

    Subclasses set ``node_class`` to the node variant they accept and
    implement ``_execute``. Raising any exception from ``_execute``
    produces a failed result carrying the message and traceback.
    """

    node_class: ClassVar[type[BaseNode]]

    def __init__(
        self,
        context_manager: ContextManager | None = None,
        settings: EngineSettings | None = None,
    ) -> None:
        self.context_manager = context_manager or ContextManager()
        self.settings = settings or get_settings()

    @property
    def node_type(self) -> str:
        """The ``type`` value of the node variant this executor accepts."""
        return self.node_class.model_fields["type"].default

    def ensure_node_type(self, node: Any) -> None:
        """Raise InvalidNodeTypeError unless ``node`` is this executor's variant."""
        if not isinstance(node, self.node_class):
            node_type = getattr(node, "type", type(node).__name__)
            raise InvalidNodeTypeError(type(self).__name__, str(node_type))

    async def execute(self, node: BaseNode, context: ExecutionContext) -> NodeExecutionResult:
        """Execute ``node`` against ``context``.

        Raises:
            InvalidNodeTypeError: If ``node`` is not the accepted variant.
        """
        self.ensure_node_type(node)
        logger = get_logger()
        logger.node_start(node.name, self.node_type)
        started = time.monotonic()

        try:
            result = await self._execute(node, context)
        except NodeWeaveError as e:
            result = self.failure(node, str(e), error_stack=traceback.format_exc())
        except Exception as e:
            result = self.failure(
                node,
                f"{type(e).__name__}: {e}",
                error_stack=traceback.format_exc(),
            )

        duration_ms = int((time.monotonic() - started) * 1000)
        if result.error:
            logger.node_error(node.name, result.error)
        logger.node_end(node.name, duration_ms, result.status.value)
        return result

    @abstractmethod
    async def _execute(
        self, node: Any, context: ExecutionContext
    ) -> NodeExecutionResult:
        """Run the node. Implemented by each executor."""
        ...

    def success(
        self,
        node: BaseNode,
        output: Any = None,
        variables: dict[str, Any] | None = None,
    ) -> NodeExecutionResult:
        return NodeExecutionResult(
            node_id=node.id,
            node_name=node.name,
            status=NodeStatus.SUCCESS,
            output=output,
            variables=variables or {},
        )

    def failure(
        self,
        node: BaseNode,
        error: str,
        *,
        output: Any = None,
        variables: dict[str, Any] | None = None,
        error_stack: str | None = None,
    ) -> NodeExecutionResult:
        return NodeExecutionResult(
            node_id=node.id,
            node_name=node.name,
            status=NodeStatus.FAILED,
            output=output,
            variables=variables or {},
            error=error,
            error_stack=error_stack,
        )
