"""Workflow node descriptors.

Nodes form a closed set of variants discriminated by their ``type``
field. Behaviour selectors such as ``language`` or ``operation`` are kept
as plain strings so that an unsupported value reaches its executor and is
reported as a failed result instead of being rejected while loading the
workflow definition.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Mapping, Union

from pydantic import Field, TypeAdapter

from nodeweave.core.types import CamelModel, ContextConfig


class Position(CamelModel):
    """Editor canvas position."""

    x: float = 0.0
    y: float = 0.0


class RetryConfig(CamelModel):
    """Retry settings for nodes that talk to the outside world."""

    max_retries: int = Field(0, ge=0, description="Additional attempts after the first")
    retry_delay_ms: int = Field(1000, ge=0, description="Delay before the first retry")
    backoff_multiplier: float = Field(2.0, ge=1.0, description="Delay growth per retry")


class BaseNode(CamelModel):
    """Fields common to every node variant."""

    id: str = Field(..., description="Unique node ID within the workflow")
    name: str = Field(..., description="Display name")
    description: str | None = None
    position: Position = Field(default_factory=Position)
    context_config: ContextConfig | None = None
    requires_approval: bool = False
    retry_config: RetryConfig | None = None
    timeout_ms: int | None = Field(None, gt=0)
    skip_condition: str | None = None


class SandboxConfig(CamelModel):
    """Restrictions applied to user code."""

    enabled: bool = True
    allowed_modules: list[str] = Field(default_factory=list)
    memory_limit_mb: int | None = Field(None, gt=0)
    cpu_timeout_ms: int | None = Field(None, gt=0)


class CodeExecutionNode(BaseNode):
    type: Literal["code"] = "code"
    language: str = "javascript"
    code: str = ""
    sandbox: SandboxConfig = Field(default_factory=SandboxConfig)


class AuthConfig(CamelModel):
    """HTTP authentication. ``type`` is one of none, basic, bearer, api-key."""

    type: str = "none"
    config: dict[str, str] = Field(default_factory=dict)


class HttpRequestNode(BaseNode):
    type: Literal["http"] = "http"
    method: str = "GET"
    url: str = ""
    headers: dict[str, str] = Field(default_factory=dict)
    body: str | dict[str, Any] | list[Any] | None = None
    response_type: str = "json"
    auth: AuthConfig | None = None


class FileOperationNode(BaseNode):
    type: Literal["file"] = "file"
    operation: str = "read"
    source_path: str | None = None
    target_path: str | None = None
    # Older definitions carry a single path for every operation
    path: str | None = None
    encoding: str = "utf8"
    content: str | None = None
    overwrite: bool = True
    require_project_folder: bool = True


class ConditionalNode(BaseNode):
    type: Literal["conditional"] = "conditional"
    condition: str = ""
    condition_type: str = "jsonpath"


class LoopNode(BaseNode):
    type: Literal["loop"] = "loop"
    loop_type: str = "forEach"
    collection: str | None = None
    while_condition: str | None = None
    max_iterations: int | None = Field(None, gt=0)
    count: Any = None
    iterator_variable: str = "item"
    index_variable: str | None = None


class InputValidation(CamelModel):
    pattern: str | None = None
    min_length: int | None = Field(None, ge=0)
    max_length: int | None = Field(None, ge=0)
    min: float | None = None
    max: float | None = None


class SelectOption(CamelModel):
    label: str
    value: Any


class UserInputNode(BaseNode):
    type: Literal["user-input"] = "user-input"
    prompt: str = ""
    input_type: str = "text"
    required: bool = False
    validation: InputValidation | None = None
    options: list[SelectOption] = Field(default_factory=list)
    default_value: Any = None


class AgentWorkflowNode(BaseNode):
    """Agent step executed by the orchestrator's agent runtime."""

    type: Literal["planning", "writing", "gate"]
    agent: str | None = None
    prompt: str = ""
    skill: str | None = None
    system_prompt: str | None = None
    provider: str | None = None
    gate: bool = False
    gate_condition: str | None = None


class SubWorkflowNode(BaseNode):
    """Reference to another workflow, run by the orchestrator."""

    type: Literal["subworkflow"] = "subworkflow"
    sub_workflow_id: str
    sub_workflow_version: int | None = None


WorkflowNode = Annotated[
    Union[
        CodeExecutionNode,
        HttpRequestNode,
        FileOperationNode,
        ConditionalNode,
        LoopNode,
        UserInputNode,
        AgentWorkflowNode,
        SubWorkflowNode,
    ],
    Field(discriminator="type"),
]

_node_adapter: TypeAdapter[Any] = TypeAdapter(WorkflowNode)


def parse_node(data: Mapping[str, Any]) -> BaseNode:
    """Validate a raw node definition into its typed variant.

    Raises:
        pydantic.ValidationError: If the type is unknown or fields are invalid.
    """
    return _node_adapter.validate_python(dict(data))
