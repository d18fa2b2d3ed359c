"""Git operations used by the release pipeline."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from pubz.errors import GitError
from pubz.execution import CommandRunner, ExecutionResult


async def run_git_command(
    runner: CommandRunner,
    args: list[str],
    cwd: Path,
    *,
    check: bool = True,
) -> ExecutionResult:
    """Run a git command.

    Args:
        runner: Command runner.
        args: Git command arguments (without 'git').
        cwd: Working directory.
        check: Raise on non-zero exit code.

    Returns:
        Execution result.

    Raises:
        GitError: If command fails and check is True.
    """
    result = await runner.run("git", args, cwd)
    if check and result.failed:
        if result.exit_code == -1:
            raise GitError("Git is not installed", command=result.command)
        raise GitError(
            result.output.strip() or f"Command failed with exit code {result.exit_code}",
            command=result.command,
        )
    return result


def parse_porcelain(output: str) -> list[str]:
    """Extract file paths from ``git status --porcelain`` output."""
    files = []
    for line in output.splitlines():
        if len(line) > 3 and line[2] == " ":
            path = line[3:]
            # Renames are reported as "old -> new"
            files.append(path.split(" -> ", 1)[-1])
    return files


async def get_uncommitted_files(runner: CommandRunner, cwd: Path) -> list[str]:
    """List files with uncommitted changes, untracked files included.

    Raises:
        GitError: If the directory is not a git repository.
    """
    result = await run_git_command(runner, ["status", "--porcelain"], cwd)
    return parse_porcelain(result.output)


async def commit_paths(
    runner: CommandRunner,
    cwd: Path,
    paths: Sequence[Path],
    message: str,
) -> None:
    """Stage the given paths and commit them."""
    relative = [str(p.relative_to(cwd)) if p.is_relative_to(cwd) else str(p) for p in paths]
    await run_git_command(runner, ["add", "--", *relative], cwd)
    await run_git_command(runner, ["commit", "-m", message], cwd)


async def commit_all(runner: CommandRunner, cwd: Path, message: str) -> None:
    """Stage every change in the working tree and commit it."""
    await run_git_command(runner, ["add", "-A"], cwd)
    await run_git_command(runner, ["commit", "-m", message], cwd)


async def create_tag(
    runner: CommandRunner,
    cwd: Path,
    tag: str,
    *,
    message: str | None = None,
) -> None:
    """Create a tag at HEAD.

    Args:
        runner: Command runner.
        cwd: Repository directory.
        tag: Tag name.
        message: Annotation; None creates a lightweight tag.

    Raises:
        GitError: If the tag cannot be created, e.g. it already exists.
    """
    args = ["tag", "-a", tag, "-m", message] if message else ["tag", tag]
    await run_git_command(runner, args, cwd)


async def push_tag(runner: CommandRunner, cwd: Path, tag: str, remote: str = "origin") -> None:
    """Push a single tag to a remote."""
    await run_git_command(runner, ["push", remote, tag], cwd)
