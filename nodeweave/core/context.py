"""Workflow execution context.

The context is the one piece of mutable state shared between node
executions. Executors receive either a WorkflowExecutionContext or the
plain mapping produced by ``ContextManager.build_node_context``; the
helpers at the bottom of this module paper over the difference.
"""

from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime
from typing import Any, Iterator, MutableMapping, Union

from pydantic import Field

from nodeweave.core.types import (
    CamelModel,
    ContextSnapshot,
    LoopFrame,
    NodeExecutionResult,
    utc_now,
)


class WorkflowExecutionContext(CamelModel):
    """Mutable state of one workflow instance.

    Invariants:
        Every id in ``completed_nodes`` has an entry in ``node_outputs``.
        ``loop_stack`` holds one frame per loop currently executing.

    Example:
        >>> ctx = WorkflowExecutionContext(project_folder="/srv/project")
        >>> ctx.variables["title"] = "Dune"
        >>> ctx.record_result(result)
        >>> ctx.as_scope()["nodeOutputs"][result.node_id]["output"]
    """

    variables: dict[str, Any] = Field(default_factory=dict)
    node_outputs: dict[str, NodeExecutionResult] = Field(default_factory=dict)
    project_folder: str | None = None
    instance_id: str | None = None
    workflow_id: str | None = None
    current_node_id: str | None = None
    user_id: str | None = None
    completed_nodes: list[str] = Field(default_factory=list)
    loop_stack: list[LoopFrame] = Field(default_factory=list)
    mcp_data: dict[str, Any] = Field(
        default_factory=dict, description="External tool data, passed through untouched"
    )
    started_at: datetime = Field(default_factory=utc_now)

    def record_result(
        self, result: NodeExecutionResult, merge_variables: bool = True
    ) -> None:
        """Store a node result and mark the node completed."""
        self.node_outputs[result.node_id] = result
        if result.node_id not in self.completed_nodes:
            self.completed_nodes.append(result.node_id)
        if merge_variables:
            self.variables.update(result.variables)

    def as_scope(self) -> dict[str, Any]:
        """Plain-dict view used as the root for JSONPath evaluation.

        ``variables`` is the live dict so writes made while a loop runs
        are visible without rebuilding the scope.
        """
        return {
            "variables": self.variables,
            "nodeOutputs": {
                node_id: result.to_dict() for node_id, result in self.node_outputs.items()
            },
            "projectFolder": self.project_folder,
            "instanceId": self.instance_id,
            "workflowId": self.workflow_id,
            "currentNodeId": self.current_node_id,
            "userId": self.user_id,
            "completedNodes": list(self.completed_nodes),
            "loopStack": [frame.to_dict() for frame in self.loop_stack],
            "mcpData": self.mcp_data,
            "startedAt": self.started_at.isoformat(),
        }

    def snapshot(self, node_id: str, node_name: str) -> ContextSnapshot:
        return ContextSnapshot(
            node_id=node_id,
            node_name=node_name,
            variables=dict(self.variables),
            node_outputs={k: v.to_dict() for k, v in self.node_outputs.items()},
            loop_stack=[frame.model_copy() for frame in self.loop_stack],
        )


ExecutionContext = Union[WorkflowExecutionContext, MutableMapping[str, Any]]


def scope_of(context: ExecutionContext) -> MutableMapping[str, Any]:
    """Evaluation root for JSONPath and templates."""
    if isinstance(context, WorkflowExecutionContext):
        return context.as_scope()
    return context


def variables_of(context: ExecutionContext) -> dict[str, Any]:
    """Live, writable variable map of either context shape."""
    if isinstance(context, WorkflowExecutionContext):
        return context.variables
    variables = context.get("variables")
    if not isinstance(variables, dict):
        variables = {}
        context["variables"] = variables
    return variables


def loop_stack_of(context: ExecutionContext) -> list[Any]:
    if isinstance(context, WorkflowExecutionContext):
        return context.loop_stack
    stack = context.get("loopStack")
    if not isinstance(stack, list):
        stack = []
        context["loopStack"] = stack
    return stack


def project_folder_of(context: ExecutionContext) -> str | None:
    if isinstance(context, WorkflowExecutionContext):
        return context.project_folder
    return context.get("projectFolder")


@contextmanager
def loop_frame(context: ExecutionContext, frame: LoopFrame) -> Iterator[LoopFrame]:
    """Push ``frame`` for the duration of the block.

    The stack is truncated back to its entry depth on every exit path,
    including frames a misbehaving iteration body left behind.
    """
    stack = loop_stack_of(context)
    depth = len(stack)
    stack.append(frame)
    try:
        yield frame
    finally:
        del stack[depth:]
