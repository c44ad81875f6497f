"""JavaScript runners.

User code is the body of a function called with ``context`` and a
``console`` whose output is captured; whatever the body returns becomes
``returnValue``. The sandboxed runner evaluates that wrapper in a fresh
V8 isolate (mini-racer) with no Node APIs; the unsandboxed runner hands
it to the host ``node`` binary with full capabilities.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any

from py_mini_racer import JSOOMException, JSTimeoutException, MiniRacer

from nodeweave.errors.exceptions import CodeExecutionError, CodeTimeoutError
from nodeweave.sandbox.process import ProcessRunner

_RESULT_MARKER = "__NODEWEAVE_RESULT__"

_WRAPPER = """(function () {
  var __stdout = [], __stderr = [];
  var __format = function (args) {
    return Array.prototype.map.call(args, function (a) {
      return typeof a === 'string' ? a : JSON.stringify(a);
    }).join(' ');
  };
  var console = {
    log: function () { __stdout.push(__format(arguments)); },
    info: function () { __stdout.push(__format(arguments)); },
    warn: function () { __stderr.push(__format(arguments)); },
    error: function () { __stderr.push(__format(arguments)); }
  };
  var context = %(context_source)s;
  var __value = (function (context, console) {
%(code)s
  })(context, console);
  // undefined for functions, symbols and undefined itself
  var __json = JSON.stringify(__value);
  return JSON.stringify({
    stdout: __stdout.join('\\n'),
    stderr: __stderr.join('\\n'),
    returnValue: __json === undefined ? null : JSON.parse(__json)
  });
})()"""


def wrap_code(code: str, context_source: str) -> str:
    """Embed user code in the capture wrapper."""
    return _WRAPPER % {"context_source": context_source, "code": code}


def _context_literal(context: Any) -> str:
    # Double encoding yields a JS string literal that JSON.parse turns back into the value
    return "JSON.parse(%s)" % json.dumps(json.dumps(context, default=str))


class IsolateRunner:
    """Runs JavaScript in a throwaway V8 isolate."""

    def _run(self, source: str, timeout_ms: int, memory_limit_mb: int | None) -> str:
        ctx = MiniRacer()
        try:
            kwargs: dict[str, Any] = {"timeout_sec": timeout_ms / 1000}
            if memory_limit_mb:
                kwargs["max_memory"] = memory_limit_mb * 1024 * 1024
            return ctx.eval(source, **kwargs)
        finally:
            ctx.close()

    async def run(
        self,
        code: str,
        context: Any,
        *,
        timeout_ms: int,
        memory_limit_mb: int | None = None,
    ) -> dict[str, Any]:
        """Evaluate ``code`` and return stdout, stderr and returnValue.

        Raises:
            CodeTimeoutError: Evaluation exceeded ``timeout_ms``.
            CodeExecutionError: The code threw or exhausted its heap.
        """
        source = wrap_code(code, _context_literal(context))
        loop = asyncio.get_running_loop()
        try:
            raw = await loop.run_in_executor(
                None, self._run, source, timeout_ms, memory_limit_mb
            )
        except JSTimeoutException as e:
            raise CodeTimeoutError("JavaScript", timeout_ms) from e
        except JSOOMException as e:
            raise CodeExecutionError(
                f"JavaScript execution error: memory limit of {memory_limit_mb}MB exceeded"
            ) from e
        except Exception as e:
            raise CodeExecutionError(f"JavaScript execution error: {e}") from e
        return json.loads(raw)


class NodeRunner:
    """Runs JavaScript under the host node binary. Not sandboxed."""

    def __init__(self, runner: ProcessRunner, executable: str = "node") -> None:
        self._runner = runner
        self._executable = executable

    async def run(self, code: str, context: Any, *, timeout_ms: int) -> dict[str, Any]:
        source = (
            "process.stdout.write('\\n%s' + %s);"
            % (
                _RESULT_MARKER,
                wrap_code(code, "JSON.parse(require('fs').readFileSync(0, 'utf8'))"),
            )
        )
        result = await self._runner.run(
            [self._executable, "-e", source],
            stdin=json.dumps(context, default=str),
            timeout_ms=timeout_ms,
        )
        if result.timed_out:
            raise CodeTimeoutError("JavaScript", timeout_ms)
        if result.exit_code != 0 or _RESULT_MARKER not in result.stdout:
            message = result.stderr.strip() or f"exit code {result.exit_code}"
            raise CodeExecutionError(f"JavaScript execution error: {message}")

        prefix, _, payload = result.stdout.rpartition(_RESULT_MARKER)
        data = json.loads(payload)
        if prefix.strip():
            # Output written straight to process.stdout bypasses the captured console
            data["stdout"] = "\n".join(filter(None, [prefix.rstrip("\n"), data["stdout"]]))
        return data
