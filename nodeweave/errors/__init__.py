"""Error types for NodeWeave."""

from nodeweave.errors.exceptions import (
    CodeExecutionError,
    CodeTimeoutError,
    ContextError,
    ExpressionError,
    FileOperationError,
    HTTPRequestError,
    InvalidNodeTypeError,
    NodeExecutionError,
    NodeValidationError,
    NodeWeaveError,
    NoResultsFoundError,
    ProcessSpawnError,
    RetryableStatusError,
    SecurityViolationError,
    TransformError,
    UserInputError,
    VariableNotFoundError,
)

__all__ = [
    "CodeExecutionError",
    "CodeTimeoutError",
    "ContextError",
    "ExpressionError",
    "FileOperationError",
    "HTTPRequestError",
    "InvalidNodeTypeError",
    "NodeExecutionError",
    "NodeValidationError",
    "NodeWeaveError",
    "NoResultsFoundError",
    "ProcessSpawnError",
    "RetryableStatusError",
    "SecurityViolationError",
    "TransformError",
    "UserInputError",
    "VariableNotFoundError",
]
