"""Code execution executor.

Runs JavaScript or Python written into a workflow node. With the sandbox
enabled, code is first scanned for dangerous patterns and JavaScript runs
in an isolated V8 context. With it disabled, JavaScript runs under the
host ``node`` binary with full access to the machine.
"""

from __future__ import annotations

from typing import Any

from nodeweave.context.manager import ContextManager
from nodeweave.core.config import EngineSettings
from nodeweave.core.context import ExecutionContext, scope_of
from nodeweave.core.nodes import CodeExecutionNode
from nodeweave.core.types import NodeExecutionResult
from nodeweave.errors.exceptions import NodeValidationError, SecurityViolationError
from nodeweave.executors.base import NodeExecutor
from nodeweave.logging import get_logger
from nodeweave.sandbox.javascript import IsolateRunner, NodeRunner
from nodeweave.sandbox.patterns import find_dangerous_pattern
from nodeweave.sandbox.process import ProcessRunner
from nodeweave.sandbox.python import PythonRunner

SUPPORTED_LANGUAGES = ("javascript", "python")


class CodeExecutionExecutor(NodeExecutor):
    """Executes ``code`` nodes.

    Example:
        >>> executor = CodeExecutionExecutor()
        >>> node = CodeExecutionNode(id="c1", name="Double", code="return context.value * 2;")
        >>> result = await executor.execute(node, {"value": 21})
        >>> result.variables["result"]["returnValue"]
        42
    """

    node_class = CodeExecutionNode

    def __init__(
        self,
        context_manager: ContextManager | None = None,
        settings: EngineSettings | None = None,
        process_runner: ProcessRunner | None = None,
    ) -> None:
        super().__init__(context_manager, settings)
        runner = process_runner or ProcessRunner(self.settings.kill_grace_ms)
        self._isolate = IsolateRunner()
        self._node = NodeRunner(runner, self.settings.node_executable)
        self._python = PythonRunner(runner, self.settings.python_executable)

    def _timeout_ms(self, node: CodeExecutionNode) -> int:
        return node.sandbox.cpu_timeout_ms or node.timeout_ms or self.settings.default_timeout_ms

    def _validate(self, node: CodeExecutionNode) -> None:
        if not node.code or not node.code.strip():
            raise NodeValidationError("Code is required", node_id=node.id)
        if node.language not in SUPPORTED_LANGUAGES:
            raise NodeValidationError(
                f"Unsupported language: {node.language}", node_id=node.id
            )

    def _scan(self, node: CodeExecutionNode) -> None:
        pattern = find_dangerous_pattern(
            node.code, node.language, node.sandbox.allowed_modules
        )
        if pattern is not None:
            message = (
                f"Code contains potentially dangerous pattern: "
                f"{pattern.description} ({pattern.regex})"
            )
            get_logger().security_block(node.name, message)
            raise SecurityViolationError(message, node_id=node.id)

    async def _execute(
        self, node: CodeExecutionNode, context: ExecutionContext
    ) -> NodeExecutionResult:
        self._validate(node)
        if node.sandbox.enabled:
            self._scan(node)

        payload: Any = scope_of(context)
        timeout_ms = self._timeout_ms(node)

        if node.language == "python":
            result = await self._python.run(node.code, payload, timeout_ms=timeout_ms)
        elif node.sandbox.enabled:
            result = await self._isolate.run(
                node.code,
                payload,
                timeout_ms=timeout_ms,
                memory_limit_mb=node.sandbox.memory_limit_mb,
            )
        else:
            get_logger().warning(
                "Running JavaScript without sandbox; code has full host access",
                node=node.id,
            )
            result = await self._node.run(node.code, payload, timeout_ms=timeout_ms)

        return self.success(
            node,
            output=result,
            variables={
                "result": result,
                "stdout": result["stdout"],
                "stderr": result["stderr"],
            },
        )
