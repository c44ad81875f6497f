"""NodeWeave exception hierarchy.

All exceptions inherit from NodeWeaveError for easy catching.
Each exception includes a `retryable` flag to indicate if the operation can be retried.

Executors convert every error below into a failed NodeExecutionResult,
except InvalidNodeTypeError which signals a wiring bug in the caller.
"""

from __future__ import annotations


class NodeWeaveError(Exception):
    """Base exception for all NodeWeave errors."""

    def __init__(self, message: str, *, retryable: bool = False) -> None:
        super().__init__(message)
        self.retryable = retryable


# Context Errors
class ContextError(NodeWeaveError):
    """Base class for variable resolution and expression errors."""

    def __init__(self, message: str, *, expression: str | None = None) -> None:
        super().__init__(message, retryable=False)
        self.expression = expression


class VariableNotFoundError(ContextError):
    """A {{name}} reference did not resolve."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Variable not found: {name}", expression=name)
        self.name = name


class NoResultsFoundError(ContextError):
    """A JSONPath expression matched nothing."""

    def __init__(self, expression: str) -> None:
        super().__init__(
            f"No results found for JSONPath: {expression}", expression=expression
        )


class ExpressionError(ContextError):
    """An expression could not be parsed or evaluated."""


class TransformError(ContextError):
    """A mapping transform failed to compile or raised."""

    def __init__(self, transform: str, reason: str) -> None:
        super().__init__(f"Transform failed ({transform}): {reason}", expression=transform)
        self.reason = reason


# Contract Errors
class InvalidNodeTypeError(NodeWeaveError):
    """An executor was handed a node of the wrong kind."""

    def __init__(self, executor_name: str, node_type: str) -> None:
        super().__init__(f"{executor_name} received invalid node type: {node_type}")
        self.executor_name = executor_name
        self.node_type = node_type


# Execution Errors
class NodeExecutionError(NodeWeaveError):
    """Base class for failures while executing a node."""

    def __init__(
        self,
        message: str,
        *,
        node_id: str | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message, retryable=retryable)
        self.node_id = node_id


class NodeValidationError(NodeExecutionError):
    """Node configuration is missing or invalid for the requested behaviour."""


class SecurityViolationError(NodeExecutionError):
    """Code or path rejected by a security check."""


class CodeExecutionError(NodeExecutionError):
    """User code failed while running."""


class CodeTimeoutError(CodeExecutionError):
    """User code exceeded its time budget and was killed."""

    def __init__(self, language: str, timeout_ms: int, *, node_id: str | None = None) -> None:
        super().__init__(
            f"{language} execution timed out after {timeout_ms}ms", node_id=node_id
        )
        self.language = language
        self.timeout_ms = timeout_ms


class ProcessSpawnError(CodeExecutionError):
    """The interpreter binary could not be started."""

    def __init__(self, executable: str, reason: str) -> None:
        super().__init__(f"Could not start '{executable}': {reason}")
        self.executable = executable


class HTTPRequestError(NodeExecutionError):
    """HTTP request could not be completed."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message, retryable=retryable)
        self.status_code = status_code


class RetryableStatusError(HTTPRequestError):
    """Server answered with a 5xx status. Can be retried."""

    def __init__(self, response: object, status_code: int) -> None:
        super().__init__(
            f"Server error {status_code}", status_code=status_code, retryable=True
        )
        self.response = response


class FileOperationError(NodeExecutionError):
    """Filesystem operation failed."""

    def __init__(self, message: str, *, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path


class UserInputError(NodeExecutionError):
    """User input could not be obtained or failed validation."""
