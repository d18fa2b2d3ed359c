"""Shared test fixtures for pubz tests."""

from __future__ import annotations

import io
import json
import subprocess
import tempfile
from collections.abc import Callable, Generator, Sequence
from pathlib import Path
from typing import Any

import pytest
from dotenv import load_dotenv
from rich.console import Console

from pubz.commands.base import CommandContext
from pubz.config import PubzConfig
from pubz.execution import CommandRunner, ExecutionResult, format_command

# Load .env from project root (doesn't override existing env vars)
load_dotenv(Path(__file__).parent.parent / ".env")


def write_json(path: Path, data: dict[str, Any]) -> Path:
    """Write a manifest the way package managers do."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2) + "\n")
    return path


def read_json(path: Path) -> dict[str, Any]:
    return json.loads(path.read_text())


class FakeRunner(CommandRunner):
    """Command runner that records invocations instead of spawning processes.

    Every command succeeds with empty output unless a response was scripted
    with ``respond``. The most recently scripted matching response wins; a
    response with ``times`` set is used up after that many matches.
    """

    def __init__(self) -> None:
        super().__init__()
        self.calls: list[tuple[str, list[str], Path, bool]] = []
        self._responses: list[dict[str, Any]] = []

    def respond(
        self,
        *prefix: str,
        exit_code: int = 0,
        output: str = "",
        cwd: Path | None = None,
        times: int | None = None,
    ) -> None:
        self._responses.append(
            {"prefix": prefix, "exit_code": exit_code, "output": output, "cwd": cwd, "times": times}
        )

    async def run(
        self,
        command: str,
        args: Sequence[str],
        cwd: Path,
        *,
        echo: bool = False,
    ) -> ExecutionResult:
        self.calls.append((command, list(args), Path(cwd), echo))
        argv = (command, *args)
        for response in reversed(self._responses):
            if response["times"] == 0:
                continue
            if argv[: len(response["prefix"])] != response["prefix"]:
                continue
            if response["cwd"] is not None and Path(cwd) != response["cwd"]:
                continue
            if response["times"] is not None:
                response["times"] -= 1
            return ExecutionResult(
                format_command(command, args), response["exit_code"], response["output"]
            )
        return ExecutionResult(format_command(command, args), 0, "")

    @property
    def commands(self) -> list[str]:
        """Recorded invocations as plain command lines."""
        return [" ".join([command, *args]) for command, args, _, _ in self.calls]

    def calls_to(self, command: str) -> list[tuple[str, list[str], Path, bool]]:
        return [call for call in self.calls if call[0] == command]


class FakePrompter:
    """Scripted stand-in for :class:`pubz.interactive.Prompter`.

    Args:
        confirms: Answers for successive confirmations; the prompt default is
            used once they run out. ``None`` means the operator cancelled.
        selects: Answers for successive single selections. A callable gets
            the options; ``None`` means the operator cancelled.
        multi: Package names to keep at multi-selection; None keeps everything.
    """

    def __init__(
        self,
        confirms: Sequence[bool | None] = (),
        selects: Sequence[Any] = (),
        multi: Sequence[str] | None = None,
    ) -> None:
        self.confirms = list(confirms)
        self.selects = list(selects)
        self.multi = multi
        self.asked: list[tuple[str, str]] = []

    def confirm(self, message: str, default: bool = True) -> bool | None:
        self.asked.append(("confirm", message))
        return self.confirms.pop(0) if self.confirms else default

    def select(self, message: str, options: Sequence[tuple[str, Any]], default_index: int = 0) -> Any:
        self.asked.append(("select", message))
        if self.selects:
            answer = self.selects.pop(0)
            return answer(options) if callable(answer) else answer
        return options[default_index][1]

    def multi_select(
        self, message: str, options: Sequence[tuple[str, Any]], all_selected: bool = True
    ) -> list[Any]:
        self.asked.append(("multi_select", message))
        if self.multi is None:
            return [value for _, value in options]
        return [value for _, value in options if value.name in self.multi]

    @property
    def messages(self) -> list[str]:
        return [message for _, message in self.asked]


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture
def console() -> Console:
    """Console that writes to memory without color."""
    return Console(file=io.StringIO(), width=200, color_system=None, highlight=False)


def console_text(console: Console) -> str:
    return console.file.getvalue()  # type: ignore[attr-defined]


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def workspace_dir(temp_dir: Path) -> Path:
    """Workspace with ``@acme/core`` and ``@acme/cli`` (which depends on core).

    Both packages are at 1.0.0 and their build artifacts exist.
    """
    write_json(
        temp_dir / "package.json",
        {"name": "acme", "private": True, "workspaces": ["packages/*"]},
    )

    core = temp_dir / "packages" / "core"
    write_json(
        core / "package.json",
        {"name": "@acme/core", "version": "1.0.0", "main": "./dist/index.js"},
    )
    (core / "dist").mkdir()
    (core / "dist" / "index.js").write_text("export {};\n")

    cli = temp_dir / "packages" / "cli"
    write_json(
        cli / "package.json",
        {
            "name": "@acme/cli",
            "version": "1.0.0",
            "bin": {"acme": "./dist/cli.js"},
            "dependencies": {"@acme/core": "^1.0.0", "chalk": "^5.0.0"},
        },
    )
    (cli / "dist").mkdir()
    (cli / "dist" / "cli.js").write_text("#!/usr/bin/env node\n")

    return temp_dir


@pytest.fixture
def make_context(
    fake_runner: FakeRunner, console: Console
) -> Callable[..., CommandContext]:
    """Build a command context for a workspace root."""

    def factory(root: Path, config: PubzConfig | None = None, **kwargs: Any) -> CommandContext:
        return CommandContext(
            root=root,
            config=config or PubzConfig(),
            runner=fake_runner,
            console=console,
            error_console=console,
            **kwargs,
        )

    return factory


def git(cwd: Path, *args: str) -> str:
    """Run git synchronously for test setup."""
    completed = subprocess.run(
        ["git", *args], cwd=cwd, check=True, capture_output=True, text=True
    )
    return completed.stdout


@pytest.fixture
def git_workspace(workspace_dir: Path) -> Path:
    """Workspace with git initialized and everything committed."""
    git(workspace_dir, "init", "-q")
    git(workspace_dir, "config", "user.email", "test@test.com")
    git(workspace_dir, "config", "user.name", "Test")
    git(workspace_dir, "config", "commit.gpgsign", "false")
    git(workspace_dir, "config", "tag.gpgsign", "false")
    git(workspace_dir, "add", "-A")
    git(workspace_dir, "commit", "-q", "-m", "Initial commit")
    return workspace_dir


@pytest.fixture
def make_prompter() -> type[FakePrompter]:
    return FakePrompter


@pytest.fixture
def output(console: Console) -> Callable[[], str]:
    """Everything printed to the test console so far."""
    return lambda: console_text(console)


@pytest.fixture
def run_git() -> Callable[..., str]:
    return git


@pytest.fixture
def write_manifest() -> Callable[[Path, dict[str, Any]], Path]:
    return write_json


@pytest.fixture
def read_manifest() -> Callable[[Path], dict[str, Any]]:
    return read_json
