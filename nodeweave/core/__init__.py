"""Core types, node descriptors, configuration and execution context."""

from nodeweave.core.config import EngineSettings, get_settings
from nodeweave.core.context import WorkflowExecutionContext, loop_frame
from nodeweave.core.nodes import (
    AgentWorkflowNode,
    AuthConfig,
    BaseNode,
    CodeExecutionNode,
    ConditionalNode,
    FileOperationNode,
    HttpRequestNode,
    InputValidation,
    LoopNode,
    RetryConfig,
    SandboxConfig,
    SelectOption,
    SubWorkflowNode,
    UserInputNode,
    WorkflowNode,
    parse_node,
)
from nodeweave.core.types import (
    ContextConfig,
    ContextMapping,
    ContextSnapshot,
    IterationResult,
    LoopFrame,
    LoopSummary,
    NodeContextResult,
    NodeExecutionResult,
    NodeStatus,
    VariableExtractionResult,
    VariableReference,
)

__all__ = [
    "AgentWorkflowNode",
    "AuthConfig",
    "BaseNode",
    "CodeExecutionNode",
    "ConditionalNode",
    "ContextConfig",
    "ContextMapping",
    "ContextSnapshot",
    "EngineSettings",
    "FileOperationNode",
    "HttpRequestNode",
    "InputValidation",
    "IterationResult",
    "LoopFrame",
    "LoopNode",
    "LoopSummary",
    "NodeContextResult",
    "NodeExecutionResult",
    "NodeStatus",
    "RetryConfig",
    "SandboxConfig",
    "SelectOption",
    "SubWorkflowNode",
    "UserInputNode",
    "VariableExtractionResult",
    "VariableReference",
    "WorkflowExecutionContext",
    "WorkflowNode",
    "get_settings",
    "loop_frame",
    "parse_node",
]
