"""Subprocess execution with timeouts."""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Mapping

from nodeweave.errors.exceptions import ProcessSpawnError


@dataclass
class ProcessResult:
    """Captured outcome of a finished (or killed) process."""

    exit_code: int | None
    stdout: str
    stderr: str
    timed_out: bool
    duration_ms: int


class ProcessRunner:
    """Spawns interpreters for user code.

    Output is collected in full; on timeout the process gets SIGTERM,
    then SIGKILL once ``kill_grace_ms`` has passed.
    """

    def __init__(self, kill_grace_ms: int = 1000) -> None:
        self._kill_grace = kill_grace_ms / 1000

    async def run(
        self,
        argv: list[str],
        *,
        stdin: str | None = None,
        timeout_ms: int,
        env: Mapping[str, str] | None = None,
        cwd: str | None = None,
    ) -> ProcessResult:
        """Run ``argv`` to completion or until ``timeout_ms`` elapses.

        Raises:
            ProcessSpawnError: The executable does not exist or cannot be run.
        """
        started = time.monotonic()
        try:
            proc = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.PIPE if stdin is not None else asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=dict(env) if env is not None else None,
                cwd=cwd,
            )
        except (FileNotFoundError, PermissionError) as e:
            raise ProcessSpawnError(argv[0], str(e)) from e

        payload = stdin.encode("utf-8") if stdin is not None else None
        timed_out = False
        try:
            stdout, stderr = await asyncio.wait_for(
                proc.communicate(payload), timeout=timeout_ms / 1000
            )
        except asyncio.TimeoutError:
            timed_out = True
            stdout, stderr = await self._terminate(proc)

        return ProcessResult(
            exit_code=proc.returncode,
            stdout=stdout.decode("utf-8", errors="replace"),
            stderr=stderr.decode("utf-8", errors="replace"),
            timed_out=timed_out,
            duration_ms=int((time.monotonic() - started) * 1000),
        )

    async def _terminate(self, proc: asyncio.subprocess.Process) -> tuple[bytes, bytes]:
        try:
            proc.terminate()
        except ProcessLookupError:
            pass
        try:
            return await asyncio.wait_for(proc.communicate(), timeout=self._kill_grace)
        except asyncio.TimeoutError:
            try:
                proc.kill()
            except ProcessLookupError:
                pass
            return await proc.communicate()
