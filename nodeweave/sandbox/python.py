"""Python runner.

User code runs in a child interpreter. The workflow context arrives as
JSON on stdin and is exposed both as ``context`` and as module globals.
"""

from __future__ import annotations

import json
from typing import Any

from nodeweave.errors.exceptions import (
    CodeExecutionError,
    CodeTimeoutError,
    ProcessSpawnError,
)
from nodeweave.sandbox.process import ProcessRunner

_PRELUDE = """\
import json as _nw_json, sys as _nw_sys
context = _nw_json.loads(_nw_sys.stdin.read() or "null")
if isinstance(context, dict):
    globals().update(context)
del _nw_json, _nw_sys
"""


class PythonRunner:
    """Runs Python code in a separate interpreter process."""

    def __init__(self, runner: ProcessRunner, executable: str) -> None:
        self._runner = runner
        self._executable = executable

    async def run(self, code: str, context: Any, *, timeout_ms: int) -> dict[str, Any]:
        """Execute ``code`` and return stdout, stderr and returnValue.

        Python code has no return value; ``returnValue`` is always None.

        Raises:
            CodeTimeoutError: The process outlived ``timeout_ms`` and was killed.
            CodeExecutionError: Non-zero exit or missing interpreter.
        """
        try:
            result = await self._runner.run(
                [self._executable, "-c", _PRELUDE + code],
                stdin=json.dumps(context, default=str),
                timeout_ms=timeout_ms,
            )
        except ProcessSpawnError as e:
            raise CodeExecutionError(
                f"Python not found. Install Python 3 or set NODEWEAVE_PYTHON_EXECUTABLE "
                f"({self._executable}: {e})"
            ) from e

        if result.timed_out:
            raise CodeTimeoutError("Python", timeout_ms)
        if result.exit_code != 0:
            raise CodeExecutionError(
                f"Python execution failed with exit code {result.exit_code}: "
                f"{result.stderr.strip()}"
            )

        return {
            "stdout": result.stdout,
            "stderr": result.stderr,
            "returnValue": None,
        }
