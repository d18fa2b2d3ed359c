"""External command execution."""

from __future__ import annotations

import asyncio
import logging
import shlex
import shutil
import time
from collections.abc import Callable, Sequence
from pathlib import Path

from pubz.execution.results import ExecutionResult

logger = logging.getLogger(__name__)

OutputCallback = Callable[[str], None]


async def _read_stream(
    stream: asyncio.StreamReader,
    callback: OutputCallback | None,
    buffer: list[str],
) -> None:
    """Read from stream line by line."""
    while True:
        line = await stream.readline()
        if not line:
            break
        decoded = line.decode("utf-8", errors="replace")
        buffer.append(decoded)
        if callback:
            callback(decoded.rstrip("\n"))


def format_command(command: str, args: Sequence[str]) -> str:
    return shlex.join([command, *args])


async def run_command(
    command: str,
    args: Sequence[str],
    cwd: Path,
    *,
    env: dict[str, str] | None = None,
    on_output: OutputCallback | None = None,
) -> ExecutionResult:
    """Run an executable and wait for it to exit.

    No shell is involved and no timeout is applied: a command that never
    exits blocks the caller.

    Args:
        command: Executable name or path.
        args: Arguments.
        cwd: Working directory.
        env: Full environment for the child; None inherits.
        on_output: Called with each line of combined output as it arrives.

    Returns:
        Execution result with combined stdout/stderr.
    """
    display = format_command(command, args)
    executable = shutil.which(command) or command
    logger.debug("Running %s in %s", display, cwd)
    start_time = time.monotonic()

    try:
        process = await asyncio.create_subprocess_exec(
            executable,
            *args,
            cwd=str(cwd),
            env=env,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
        )
    except OSError as e:
        duration_ms = int((time.monotonic() - start_time) * 1000)
        logger.debug("Could not start %s: %s", display, e)
        return ExecutionResult(display, -1, str(e), duration_ms)

    if process.stdout is None:
        raise RuntimeError("Process stdout is None")

    buffer: list[str] = []
    await _read_stream(process.stdout, on_output, buffer)
    exit_code = await process.wait()

    duration_ms = int((time.monotonic() - start_time) * 1000)
    logger.debug("%s exited with %s after %sms", display, exit_code, duration_ms)
    return ExecutionResult(display, exit_code, "".join(buffer), duration_ms)


class CommandRunner:
    """Runs external commands for the release pipeline.

    Commands run one at a time. ``echo`` streams a command's output to the
    configured callback while it is captured.

    Attributes:
        on_output: Line callback used for echoed commands.
        env: Environment for child processes; None inherits.
    """

    def __init__(
        self,
        on_output: OutputCallback | None = None,
        env: dict[str, str] | None = None,
    ) -> None:
        self.on_output = on_output
        self.env = env

    async def run(
        self,
        command: str,
        args: Sequence[str],
        cwd: Path,
        *,
        echo: bool = False,
    ) -> ExecutionResult:
        return await run_command(
            command,
            args,
            cwd,
            env=self.env,
            on_output=self.on_output if echo else None,
        )
