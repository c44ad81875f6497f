"""Variable resolution, conditions, templates and input/output mapping."""

from nodeweave.context.expressions import compile_transform, evaluate
from nodeweave.context.manager import ContextManager

__all__ = ["ContextManager", "compile_transform", "evaluate"]
