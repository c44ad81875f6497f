"""Pytest configuration and fixtures for NodeWeave tests."""

from __future__ import annotations

import shutil
import sys
from typing import Any

import pytest

from nodeweave.context.manager import ContextManager
from nodeweave.core.config import EngineSettings
from nodeweave.core.context import WorkflowExecutionContext
from nodeweave.core.types import NodeExecutionResult, NodeStatus
from nodeweave.logging import configure_logging

requires_node = pytest.mark.skipif(
    shutil.which("node") is None, reason="node binary not installed"
)


@pytest.fixture(autouse=True)
def quiet_logging() -> None:
    """Keep test output clean; tests that inspect logs configure their own console."""
    configure_logging(enabled=False)


@pytest.fixture
def settings() -> EngineSettings:
    """Engine settings with short timeouts and the running interpreter."""
    return EngineSettings(
        default_timeout_ms=10000,
        http_timeout_ms=5000,
        python_executable=sys.executable,
        kill_grace_ms=200,
    )


@pytest.fixture
def context_manager() -> ContextManager:
    return ContextManager()


def make_result(
    node_id: str,
    node_name: str | None = None,
    output: Any = None,
    variables: dict[str, Any] | None = None,
    status: NodeStatus = NodeStatus.SUCCESS,
) -> NodeExecutionResult:
    """Build a node result as an orchestrator would record it."""
    return NodeExecutionResult(
        node_id=node_id,
        node_name=node_name or node_id,
        status=status,
        output=output,
        variables=variables or {},
    )


@pytest.fixture
def workflow_context(tmp_path) -> WorkflowExecutionContext:
    """Context with two completed nodes, a few globals and a project folder."""
    ctx = WorkflowExecutionContext(
        variables={"userName": "Ana", "score": 85, "threshold": "70"},
        project_folder=str(tmp_path),
        instance_id="inst-1",
        workflow_id="wf-1",
        mcp_data={"series": {"title": "Foundation", "books": 7}},
    )
    ctx.record_result(
        make_result(
            "fetch",
            "Fetch Books",
            output={"books": [{"title": "Dune", "year": 1965}, {"title": "Emma", "year": 1815}]},
            variables={"count": 2, "source": "library"},
        ),
        merge_variables=False,
    )
    ctx.record_result(
        make_result("summarize", "Summarize", output="two books", variables={"summary": "ok"}),
        merge_variables=False,
    )
    return ctx
