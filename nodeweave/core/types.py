"""Core type definitions for NodeWeave.

This module defines the data structures shared by the context manager
and the node executors. All types use Pydantic for validation and
serialization. Field names are snake_case; the camelCase names used by
workflow definitions are accepted and emitted as aliases.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

_IDENTIFIER = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    """Base model accepting both snake_case and camelCase field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_dict(self) -> dict[str, Any]:
        """Dump using camelCase keys, as workflow definitions spell them."""
        return self.model_dump(by_alias=True, mode="python")


class NodeStatus(str, Enum):
    """Outcome of a single node execution."""

    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


class NodeExecutionResult(CamelModel):
    """Immutable outcome of one executor call."""

    model_config = ConfigDict(frozen=True)

    node_id: str = Field(..., description="ID of the executed node")
    node_name: str = Field(..., description="Display name of the executed node")
    timestamp: datetime = Field(default_factory=utc_now)
    status: NodeStatus = Field(..., description="Execution outcome")
    output: Any = Field(None, description="Primary output payload")
    variables: dict[str, Any] = Field(
        default_factory=dict,
        description="Named values exposed to downstream nodes",
    )
    error: str | None = Field(None, description="Error message if failed")
    error_stack: str | None = Field(None, description="Traceback if failed")

    @property
    def succeeded(self) -> bool:
        """Whether the node completed successfully."""
        return self.status == NodeStatus.SUCCESS


class ContextMapping(CamelModel):
    """Maps a source reference to a named input or output."""

    source: str = Field(..., description="{{variable}} or $.json.path")
    target: str = Field(..., description="Identifier the value is stored under")
    transform: str | None = Field(
        None, description="Single-argument function expression, e.g. 'x => x.length'"
    )

    @field_validator("target")
    @classmethod
    def _validate_target(cls, value: str) -> str:
        if not _IDENTIFIER.match(value):
            raise ValueError(f"target must be a valid identifier, got {value!r}")
        return value


class ContextConfig(CamelModel):
    """Per-node input/output mapping configuration."""

    mode: Literal["simple", "advanced"] = "simple"
    inputs: list[ContextMapping] = Field(default_factory=list)
    outputs: list[ContextMapping] = Field(default_factory=list)


class LoopFrame(CamelModel):
    """State of one active loop, pushed on the loop stack."""

    loop_node_id: str
    iterator_variable: str
    index_variable: str | None = None
    current_index: int = 0
    total_items: int | None = None
    collection_data: list[Any] | None = None


class IterationResult(CamelModel):
    """Record of one loop iteration."""

    iteration: int = Field(..., ge=0)
    status: NodeStatus = NodeStatus.SUCCESS
    timestamp: datetime = Field(default_factory=utc_now)
    variables: dict[str, Any] = Field(default_factory=dict)
    output: Any = None
    error: str | None = None


class LoopSummary(CamelModel):
    """Aggregate counts over all iterations of a loop."""

    total_iterations: int = 0
    success_count: int = 0
    failure_count: int = 0
    success_rate: float = 0.0

    @classmethod
    def from_iterations(cls, iterations: list[IterationResult]) -> LoopSummary:
        total = len(iterations)
        succeeded = sum(1 for it in iterations if it.status == NodeStatus.SUCCESS)
        return cls(
            total_iterations=total,
            success_count=succeeded,
            failure_count=total - succeeded,
            success_rate=succeeded / total if total else 0.0,
        )


class VariableReference(CamelModel):
    """A variable offered by the editor's variable browser."""

    node_id: str
    node_name: str
    variable_name: str
    path: str
    type: str
    value: Any = None


class NodeContextResult(CamelModel):
    """Result of building the context a node executes against."""

    success: bool
    context: dict[str, Any] = Field(default_factory=dict)
    missing_variables: list[str] = Field(default_factory=list)
    error: str | None = None


class VariableExtractionResult(CamelModel):
    """Variables extracted from a node's output."""

    success: bool
    variables: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: str | None = None


class ContextSnapshot(CamelModel):
    """Point-in-time copy of the workflow context, for debugging."""

    node_id: str
    node_name: str
    timestamp: datetime = Field(default_factory=utc_now)
    variables: dict[str, Any] = Field(default_factory=dict)
    node_outputs: dict[str, Any] = Field(default_factory=dict)
    loop_stack: list[LoopFrame] = Field(default_factory=list)
