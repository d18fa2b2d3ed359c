"""Command implementations."""

from pubz.commands.base import Command, CommandContext
from pubz.commands.release import (
    ReleaseCommand,
    ReleaseOptions,
    ReleaseResult,
    ReleaseStatus,
    Stage,
    handle_release_command,
    release,
)

__all__ = [
    "Command",
    "CommandContext",
    "ReleaseCommand",
    "ReleaseOptions",
    "ReleaseResult",
    "ReleaseStatus",
    "Stage",
    "handle_release_command",
    "release",
]
