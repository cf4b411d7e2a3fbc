"""
CLIExecutor: Subprocess management for CLI agent execution.

Handles spawning, output capture, and timeout. stdin is closed at spawn
time since the prompt travels as an argument. stdout is bounded; stderr
is captured in full.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from coding_agent_hub.cli_agents.output_extractor import (
    MAX_BUFFER_SIZE,
    StdoutCollector,
)

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 64 * 1024


@dataclass
class CLIResult:
    """Result from a CLI execution."""

    stdout: str
    stderr: str
    return_code: Optional[int]
    timed_out: bool = False
    truncated: bool = False
    spawn_error: Optional[str] = None  # Set when the process never started
    error: Optional[str] = None  # Runtime error while the process was running


class CLIExecutor:
    """
    Executes CLI agents as subprocesses.

    Provides:
    - stdin closed immediately, stdout/stderr captured concurrently
    - stdout capped at max_output_size (excess dropped, process keeps running)
    - A single-shot timer that kills the process when the budget elapses
    """

    def __init__(self, max_output_size: int = MAX_BUFFER_SIZE):
        self._max_output_size = max_output_size

    async def execute(
        self,
        command: List[str],
        env: Dict[str, str],
        timeout_ms: int,
        cwd: Optional[str] = None,
    ) -> CLIResult:
        """
        Execute a CLI command as a subprocess.

        Args:
            command: Command and arguments to execute
            env: Environment variables for the subprocess
            timeout_ms: Maximum total execution time in milliseconds
            cwd: Working directory (optional)

        Returns:
            CLIResult with captured output and status flags
        """
        logger.debug(f"Executing: {command[0]} ({len(command) - 1} args)")
        logger.debug(f"CWD: {cwd}, timeout: {timeout_ms}ms")

        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                env=env,
                cwd=cwd,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except (OSError, ValueError) as e:
            # Command not found, permission denied, cwd not found, or a NUL
            # byte in an argument
            logger.error(f"Failed to spawn {command[0]}: {e}")
            return CLIResult(
                stdout="",
                stderr="",
                return_code=None,
                spawn_error=str(e),
            )

        return await self._communicate(process, timeout_ms)

    async def _communicate(
        self,
        process: asyncio.subprocess.Process,
        timeout_ms: int,
    ) -> CLIResult:
        """Drain both streams and wait for exit, racing the timeout."""
        loop = asyncio.get_running_loop()
        stdout = StdoutCollector(self._max_output_size)
        stderr_chunks: List[bytes] = []
        timeout_fired = asyncio.Event()

        def on_timeout() -> None:
            logger.warning(f"Timeout ({timeout_ms}ms) exceeded, killing process")
            self._kill(process)
            timeout_fired.set()

        completion = asyncio.ensure_future(
            self._run_to_exit(process, stdout.add, stderr_chunks.append)
        )
        timeout_wait = asyncio.ensure_future(timeout_fired.wait())
        timer = loop.call_later(timeout_ms / 1000, on_timeout)

        try:
            await asyncio.wait(
                {completion, timeout_wait}, return_when=asyncio.FIRST_COMPLETED
            )
        except asyncio.CancelledError:
            # MCP call was aborted - kill the subprocess
            logger.warning("Execution cancelled, killing subprocess")
            self._kill(process)
            completion.cancel()
            raise
        finally:
            timer.cancel()
            timeout_wait.cancel()

        if timeout_fired.is_set():
            # Timed out: partial output is discarded, even if the killed
            # process was already reaped
            completion.cancel()
            await asyncio.gather(completion, return_exceptions=True)
            await self._reap(process)
            return CLIResult(
                stdout="",
                stderr="",
                return_code=process.returncode,
                timed_out=True,
                truncated=stdout.truncated,
            )

        try:
            completion.result()
        except Exception as e:
            logger.error(f"Execution error: {e}")
            self._kill(process)
            await self._reap(process)
            return CLIResult(
                stdout="",
                stderr="",
                return_code=process.returncode,
                truncated=stdout.truncated,
                error=str(e),
            )

        return CLIResult(
            stdout=stdout.getvalue(),
            stderr=b"".join(stderr_chunks).decode("utf-8", errors="replace"),
            return_code=process.returncode,
            truncated=stdout.truncated,
        )

    async def _run_to_exit(
        self,
        process: asyncio.subprocess.Process,
        on_stdout: Callable[[bytes], None],
        on_stderr: Callable[[bytes], None],
    ) -> None:
        await asyncio.gather(
            self._drain(process.stdout, on_stdout),
            self._drain(process.stderr, on_stderr),
        )
        await process.wait()

    @staticmethod
    async def _drain(
        stream: Optional[asyncio.StreamReader],
        sink: Callable[[bytes], None],
    ) -> None:
        if stream is None:
            return
        while True:
            chunk = await stream.read(READ_CHUNK_SIZE)
            if not chunk:
                return
            sink(chunk)

    @staticmethod
    def _kill(process: asyncio.subprocess.Process) -> None:
        if process.returncode is not None:
            return
        try:
            process.kill()
        except ProcessLookupError:
            pass  # Already gone

    @staticmethod
    async def _reap(process: asyncio.subprocess.Process) -> None:
        # A killed process exits promptly; bound the wait anyway
        try:
            await asyncio.wait_for(process.wait(), timeout=5)
        except asyncio.TimeoutError:
            logger.warning(f"Process {process.pid} did not exit after kill")
