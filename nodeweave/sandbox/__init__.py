"""Code execution backends and the dangerous-pattern scan."""

from nodeweave.sandbox.javascript import IsolateRunner, NodeRunner
from nodeweave.sandbox.patterns import (
    DANGEROUS_PATTERNS,
    PATTERN_TABLE_VERSION,
    DangerousPattern,
    find_dangerous_pattern,
)
from nodeweave.sandbox.process import ProcessResult, ProcessRunner
from nodeweave.sandbox.python import PythonRunner

__all__ = [
    "DANGEROUS_PATTERNS",
    "PATTERN_TABLE_VERSION",
    "DangerousPattern",
    "IsolateRunner",
    "NodeRunner",
    "ProcessResult",
    "ProcessRunner",
    "PythonRunner",
    "find_dangerous_pattern",
]
