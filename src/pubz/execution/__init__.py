"""External command execution."""

from pubz.execution.results import ExecutionResult
from pubz.execution.runner import CommandRunner, format_command, run_command

__all__ = ["CommandRunner", "ExecutionResult", "format_command", "run_command"]
