"""External command results."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ExecutionResult:
    """Outcome of one external command.

    Attributes:
        command: Command line as run, for display.
        exit_code: Process exit code; -1 if the process could not start.
        output: Combined stdout and stderr.
        duration_ms: Wall time in milliseconds.
    """

    command: str
    exit_code: int
    output: str = ""
    duration_ms: int = 0

    @property
    def success(self) -> bool:
        return self.exit_code == 0

    @property
    def failed(self) -> bool:
        return not self.success
