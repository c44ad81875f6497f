"""Node executors."""

from nodeweave.executors.base import NodeExecutor
from nodeweave.executors.code import CodeExecutionExecutor
from nodeweave.executors.conditional import ConditionalExecutor
from nodeweave.executors.file import FileOperationExecutor
from nodeweave.executors.http import HttpRequestExecutor
from nodeweave.executors.loop import LoopExecutor
from nodeweave.executors.registry import ExecutorRegistry, create_default_registry
from nodeweave.executors.user_input import UserInputExecutor, validate_input

__all__ = [
    "CodeExecutionExecutor",
    "ConditionalExecutor",
    "ExecutorRegistry",
    "FileOperationExecutor",
    "HttpRequestExecutor",
    "LoopExecutor",
    "NodeExecutor",
    "UserInputExecutor",
    "create_default_registry",
    "validate_input",
]
