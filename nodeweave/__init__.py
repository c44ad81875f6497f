"""NodeWeave - per-node execution engine for workflow automation.

NodeWeave runs individual workflow nodes (code, HTTP, file, conditional,
loop and user input) against a shared execution context, and resolves the
variables, JSONPath references and templates that wire nodes together.

Example:
    >>> from nodeweave import WorkflowExecutionContext, create_default_registry, parse_node
    >>> registry = create_default_registry()
    >>> node = parse_node({"id": "n1", "name": "Check", "type": "conditional",
    ...                    "condition": "{{score}} >= 70"})
    >>> ctx = WorkflowExecutionContext(variables={"score": 85})
    >>> result = await registry.execute(node, ctx)
    >>> result.output["conditionResult"]
    True
"""

__version__ = "0.1.0"

# Core exports
from nodeweave.core.config import EngineSettings, get_settings
from nodeweave.core.context import WorkflowExecutionContext, loop_frame
from nodeweave.core.nodes import (
    CodeExecutionNode,
    ConditionalNode,
    FileOperationNode,
    HttpRequestNode,
    LoopNode,
    UserInputNode,
    WorkflowNode,
    parse_node,
)
from nodeweave.core.types import (
    ContextConfig,
    ContextMapping,
    NodeExecutionResult,
    NodeStatus,
)
from nodeweave.context.manager import ContextManager

# Error exports
from nodeweave.errors.exceptions import (
    ContextError,
    InvalidNodeTypeError,
    NodeExecutionError,
    NodeWeaveError,
    NoResultsFoundError,
    SecurityViolationError,
    VariableNotFoundError,
)

__all__ = [
    # Version
    "__version__",
    # Core
    "EngineSettings",
    "get_settings",
    "WorkflowExecutionContext",
    "loop_frame",
    "ContextManager",
    # Nodes
    "CodeExecutionNode",
    "ConditionalNode",
    "FileOperationNode",
    "HttpRequestNode",
    "LoopNode",
    "UserInputNode",
    "WorkflowNode",
    "parse_node",
    # Types
    "ContextConfig",
    "ContextMapping",
    "NodeExecutionResult",
    "NodeStatus",
    # Errors
    "NodeWeaveError",
    "ContextError",
    "VariableNotFoundError",
    "NoResultsFoundError",
    "InvalidNodeTypeError",
    "NodeExecutionError",
    "SecurityViolationError",
]


def __getattr__(name: str):
    """Lazy import for executors, which pull in the V8 and HTTP stacks."""
    if name == "ExecutorRegistry":
        from nodeweave.executors import ExecutorRegistry
        return ExecutorRegistry
    elif name == "create_default_registry":
        from nodeweave.executors import create_default_registry
        return create_default_registry
    elif name == "NodeExecutor":
        from nodeweave.executors import NodeExecutor
        return NodeExecutor
    elif name == "CodeExecutionExecutor":
        from nodeweave.executors import CodeExecutionExecutor
        return CodeExecutionExecutor
    elif name == "HttpRequestExecutor":
        from nodeweave.executors import HttpRequestExecutor
        return HttpRequestExecutor
    elif name == "FileOperationExecutor":
        from nodeweave.executors import FileOperationExecutor
        return FileOperationExecutor
    elif name == "ConditionalExecutor":
        from nodeweave.executors import ConditionalExecutor
        return ConditionalExecutor
    elif name == "LoopExecutor":
        from nodeweave.executors import LoopExecutor
        return LoopExecutor
    elif name == "UserInputExecutor":
        from nodeweave.executors import UserInputExecutor
        return UserInputExecutor

    # Resilience
    elif name == "RetryPolicy":
        from nodeweave.resilience import RetryPolicy
        return RetryPolicy

    # Logging
    elif name == "get_logger":
        from nodeweave.logging import get_logger
        return get_logger
    elif name == "configure_logging":
        from nodeweave.logging import configure_logging
        return configure_logging
    elif name == "LogLevel":
        from nodeweave.logging import LogLevel
        return LogLevel

    raise AttributeError(f"module 'nodeweave' has no attribute '{name}'")
