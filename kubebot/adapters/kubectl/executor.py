"""kubectl executor — runs a CommandInvocation as a subprocess."""

import asyncio
import sys
from datetime import datetime
from typing import Optional, Tuple

from kubebot.domain.models import CommandInvocation, ExecutionOutcome

MAX_STDERR_BYTES = 8192
_CHUNK = 65536


def _log(msg: str):
    print(msg, file=sys.stderr)


async def _terminate(proc) -> None:
    """Kill a still-running process and reap it."""
    if proc.returncode is not None:
        return
    try:
        proc.kill()
    except ProcessLookupError:
        pass
    await proc.wait()


async def _read_capped(stream, limit: int) -> Tuple[bytes, bool]:
    """Read until EOF or ``limit`` bytes. The flag is True when the cap was hit."""
    buf = bytearray()
    while len(buf) <= limit:
        chunk = await stream.read(min(_CHUNK, limit + 1 - len(buf)))
        if not chunk:
            return bytes(buf), False
        buf.extend(chunk)
    return bytes(buf[:limit]), True


async def _drain(stream, keep: int) -> bytes:
    """Read to EOF, keeping only the first ``keep`` bytes."""
    buf = bytearray()
    while True:
        chunk = await stream.read(_CHUNK)
        if not chunk:
            return bytes(buf)
        if len(buf) < keep:
            buf.extend(chunk[: keep - len(buf)])


class KubectlExecutor:
    """Runs invocations without a shell, one process per worker slot.

    ``max_concurrent`` bounds how many processes run at once; callers past
    that limit wait for a slot. Every process gets a hard ``timeout`` after
    which it is killed, not abandoned. Output past ``max_output_bytes`` is
    not buffered: the process is killed and the captured prefix returned.
    """

    def __init__(self, timeout: float = 30.0, max_concurrent: int = 4,
                 max_output_bytes: int = 65536):
        self.timeout = timeout
        self.max_concurrent = max_concurrent
        self.max_output_bytes = max_output_bytes
        self._slots: Optional[asyncio.Semaphore] = None
        self.running = 0

    def _semaphore(self) -> asyncio.Semaphore:
        # Created lazily so it binds to the running loop
        if self._slots is None:
            self._slots = asyncio.Semaphore(self.max_concurrent)
        return self._slots

    async def run(self, invocation: CommandInvocation) -> ExecutionOutcome:
        async with self._semaphore():
            self.running += 1
            try:
                return await self._run(invocation)
            finally:
                self.running -= 1

    async def _collect(self, proc) -> Tuple[bytes, bytes, bool]:
        """Read stdout up to the cap and stderr fully, then reap."""

        async def _stdout():
            data, capped = await _read_capped(proc.stdout, self.max_output_bytes)
            if capped:
                _log(f"[executor] output exceeded {self.max_output_bytes} bytes, killed pid={proc.pid}")
                await _terminate(proc)
            return data, capped

        (stdout, capped), stderr = await asyncio.gather(
            _stdout(), _drain(proc.stderr, MAX_STDERR_BYTES)
        )
        await proc.wait()
        return stdout, stderr, capped

    async def _run(self, invocation: CommandInvocation) -> ExecutionOutcome:
        started = datetime.now()
        try:
            proc = await asyncio.create_subprocess_exec(
                *invocation.argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            _log(f"[executor] failed to start {invocation.executable}: {e}")
            return ExecutionOutcome(succeeded=False, error_detail=f"Failed to start: {e}")

        try:
            stdout, stderr, capped = await asyncio.wait_for(self._collect(proc), timeout=self.timeout)
        except asyncio.TimeoutError:
            await _terminate(proc)
            _log(f"[executor] timeout after {self.timeout}s, killed pid={proc.pid}")
            return ExecutionOutcome(
                succeeded=False,
                error_detail=f"Timeout ({self.timeout:g}s)",
                exit_code=proc.returncode,
                timed_out=True,
            )
        except asyncio.CancelledError:
            await _terminate(proc)
            _log(f"[executor] cancelled, killed pid={proc.pid}")
            raise

        elapsed = (datetime.now() - started).total_seconds()
        if capped:
            return ExecutionOutcome(
                succeeded=True, raw_output=stdout, exit_code=proc.returncode, truncated=True
            )
        if proc.returncode == 0:
            _log(f"[executor] completed in {elapsed:.2f}s")
            return ExecutionOutcome(succeeded=True, raw_output=stdout, exit_code=0)

        err_text = stderr.decode("utf-8", errors="replace").strip()
        _log(f"[executor] exit code {proc.returncode} in {elapsed:.2f}s")
        return ExecutionOutcome(
            succeeded=False,
            raw_output=stdout,
            error_detail=err_text or None,
            exit_code=proc.returncode,
        )
