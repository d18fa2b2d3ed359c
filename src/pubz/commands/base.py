"""Base command infrastructure."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Generic, TypeVar

from rich.console import Console

from pubz.config import PubzConfig
from pubz.execution import CommandRunner

TResult = TypeVar("TResult")


@dataclass
class CommandContext:
    """Context passed to all commands.

    Attributes:
        root: Workspace root directory.
        config: Workspace configuration.
        runner: Runner for external commands.
        console: Console for progress output.
        error_console: Console for errors and warnings.
        dry_run: If True, report mutating actions instead of performing them.
        verbose: If True, show detailed output.
    """

    root: Path
    config: PubzConfig
    runner: CommandRunner
    console: Console
    error_console: Console
    dry_run: bool = False
    verbose: bool = False


class Command(ABC, Generic[TResult]):
    """Base class for all pubz commands.

    Commands encapsulate the logic for a specific operation.
    They receive a context and return a result.
    """

    def __init__(self, context: CommandContext) -> None:
        """Initialize command.

        Args:
            context: Command context.
        """
        self.context = context
        self.config = context.config
        self.console = context.console

    @abstractmethod
    async def execute(self) -> TResult:
        """Execute the command.

        Returns:
            Command-specific result.
        """
        ...

    def validate(self) -> list[str]:
        """Validate that the command can be executed.

        Returns:
            List of validation errors (empty if valid).
        """
        return []
