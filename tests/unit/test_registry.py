"""Unit tests for ExecutorRegistry."""

from __future__ import annotations

import pytest

import nodeweave
from nodeweave.core.nodes import ConditionalNode, SubWorkflowNode
from nodeweave.core.types import NodeStatus
from nodeweave.errors.exceptions import InvalidNodeTypeError
from nodeweave.executors import (
    ConditionalExecutor,
    ExecutorRegistry,
    LoopExecutor,
    create_default_registry,
)


class TestExecutorRegistry:
    """Tests for ExecutorRegistry."""

    def test_default_registry_types(self, settings) -> None:
        """All built-in node types have an executor."""
        registry = create_default_registry(settings)

        assert set(registry.node_types) == {
            "code",
            "http",
            "file",
            "conditional",
            "loop",
            "user-input",
        }
        assert len(registry) == 6
        assert "loop" in registry
        assert "subworkflow" not in registry

    def test_register_and_unregister(self, settings) -> None:
        """Executors are keyed by node type."""
        registry = ExecutorRegistry()
        executor = ConditionalExecutor(settings=settings)

        registry.register(executor)

        assert registry.get("conditional") is executor
        assert registry.unregister("conditional") is True
        assert registry.unregister("conditional") is False
        assert registry.get("conditional") is None

    def test_register_replaces(self, settings) -> None:
        """Registering the same type again replaces the executor."""
        first = LoopExecutor(settings=settings)
        second = LoopExecutor(settings=settings)
        registry = ExecutorRegistry([first])

        registry.register(second)

        assert registry.get("loop") is second
        assert len(registry) == 1

    def test_options_are_wired(self, settings) -> None:
        """Collaborators passed as options reach their executors."""

        async def handler(node, context, frame):
            return None

        registry = create_default_registry(settings, iteration_handler=handler)

        assert registry.get("loop").iteration_handler is handler

    @pytest.mark.asyncio
    async def test_execute_dispatches(self, settings) -> None:
        """execute runs the executor for the node's type."""
        registry = create_default_registry(settings)
        node = ConditionalNode(id="c", name="Check", condition="{{n}} == 1")

        result = await registry.execute(node, {"variables": {"n": 1}})

        assert result.status == NodeStatus.SUCCESS
        assert result.output["conditionResult"] is True

    @pytest.mark.asyncio
    async def test_execute_unknown_type(self, settings) -> None:
        """Node types without an executor raise."""
        registry = create_default_registry(settings)
        node = SubWorkflowNode(id="s", name="Sub", sub_workflow_id="wf-2")

        with pytest.raises(InvalidNodeTypeError) as exc_info:
            await registry.execute(node, {})

        assert str(exc_info.value) == "ExecutorRegistry received invalid node type: subworkflow"


class TestPackageExports:
    """Tests for the package's lazy exports."""

    def test_lazy_attributes(self) -> None:
        """Executors are reachable from the package root."""
        assert nodeweave.ExecutorRegistry is ExecutorRegistry
        assert nodeweave.create_default_registry is create_default_registry

    def test_unknown_attribute(self) -> None:
        """Unknown names raise AttributeError."""
        with pytest.raises(AttributeError):
            nodeweave.does_not_exist

    def test_exported_errors_derive_from_base(self) -> None:
        """Every exported error class is a NodeWeaveError and is importable."""
        errors = nodeweave.errors
        for name in errors.__all__:
            assert issubclass(getattr(errors, name), errors.NodeWeaveError)
        for name in ("ConfigurationError", "InvalidConfigError"):
            assert name not in errors.__all__
            assert name not in nodeweave.__all__
