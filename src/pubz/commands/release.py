"""Release pipeline: discover, order, version, build, publish, tag, push."""

from __future__ import annotations

import contextlib
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from pubz.commands.base import Command, CommandContext
from pubz.config import load_config
from pubz.errors import (
    BuildError,
    ConfigurationError,
    GitError,
    NoPublishablePackagesError,
    PublishError,
    PubzError,
    ReleaseError,
    UncommittedChangesError,
    VerificationError,
)
from pubz.execution import CommandRunner
from pubz.git import (
    commit_all,
    commit_paths,
    create_tag,
    get_uncommitted_files,
    push_tag,
)
from pubz.interactive import Prompter
from pubz.publish import find_missing_artifacts, publish_package, run_build
from pubz.versioning import (
    BumpType,
    VersionChange,
    bump_version,
    preview_bump,
    resolve_version_directive,
    update_all_versions,
)
from pubz.workspace import Package, Workspace, sort_by_dependency_order

MAX_LISTED_FILES = 10
RULE_WIDTH = 30


class Stage(Enum):
    """Pipeline stages in execution order."""

    PREFLIGHT = "preflight"
    DISCOVERY = "discovery"
    ORDERING = "ordering"
    SELECTION = "selection"
    VERSION = "version"
    REGISTRY = "registry"
    BUILD = "build"
    PUBLISH = "publish"
    TAG = "tag"
    PUSH = "push"
    DONE = "done"


class ReleaseStatus(Enum):
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


class ReleaseCancelled(Exception):
    """The operator declined to continue. Not an error."""


@dataclass
class ReleaseOptions:
    """Options for the release pipeline.

    Attributes:
        dry_run: Report every mutating action instead of performing it.
        registry: Registry URL; prompts (or uses the default) when unset.
        otp: One-time password forwarded to the publish command.
        skip_build: Skip build and artifact verification.
        yes: Pass confirmation gates but skip optional bump, tag and push.
        ci: Never prompt; requires ``version``.
        version: ``major``/``minor``/``patch`` or an explicit version.
    """

    dry_run: bool = False
    registry: str | None = None
    otp: str | None = None
    skip_build: bool = False
    yes: bool = False
    ci: bool = False
    version: str | None = None

    @property
    def skip_all_prompts(self) -> bool:
        return self.ci


@dataclass
class ReleaseResult:
    """Result of a release run."""

    status: ReleaseStatus = ReleaseStatus.COMPLETED
    stages: list[Stage] = field(default_factory=list)
    packages: list[str] = field(default_factory=list)
    old_version: str | None = None
    version: str | None = None
    registry: str | None = None
    changes: list[VersionChange] = field(default_factory=list)
    published: list[str] = field(default_factory=list)
    tag: str | None = None
    tag_created: bool = False
    tag_pushed: bool = False
    warnings: list[str] = field(default_factory=list)
    message: str | None = None
    error: PubzError | None = None

    @property
    def success(self) -> bool:
        return self.status is ReleaseStatus.COMPLETED

    @property
    def exit_code(self) -> int:
        return 1 if self.status is ReleaseStatus.FAILED else 0


class ReleaseCommand(Command[ReleaseResult]):
    """Publish every selected workspace package in dependency order.

    Stages run strictly one after another and every external side effect
    happens in publish order. A dry run walks the same stages and asks the
    same questions; only the mutating actions are replaced by reports.
    """

    def __init__(
        self,
        context: CommandContext,
        options: ReleaseOptions | None = None,
        prompter: Prompter | None = None,
    ) -> None:
        super().__init__(context)
        self.options = options or ReleaseOptions()
        self.prompter = prompter
        self.runner = context.runner
        self.root = context.root.resolve()
        self.result = ReleaseResult()
        self.workspace: Workspace | None = None
        self.packages: list[Package] = []

    @property
    def is_dry_run(self) -> bool:
        return self.options.dry_run or self.context.dry_run

    def validate(self) -> list[str]:
        errors = []
        if self.options.ci and not self.options.version:
            errors.append("--ci requires --version to be specified")
        if self.options.version is not None and not self.options.version.strip():
            errors.append("--version must not be empty")
        return errors

    def _stages(self) -> list[tuple[Stage, Callable[[], Awaitable[None]]]]:
        return [
            (Stage.PREFLIGHT, self._preflight),
            (Stage.DISCOVERY, self._discover),
            (Stage.ORDERING, self._order),
            (Stage.SELECTION, self._select),
            (Stage.VERSION, self._decide_version),
            (Stage.REGISTRY, self._select_registry),
            (Stage.BUILD, self._build),
            (Stage.PUBLISH, self._publish),
            (Stage.TAG, self._tag),
            (Stage.PUSH, self._push),
            (Stage.DONE, self._done),
        ]

    async def execute(self) -> ReleaseResult:
        """Run every stage until done, cancelled or aborted."""
        result = self.result

        if errors := self.validate():
            error = ConfigurationError("; ".join(errors))
            result.status = ReleaseStatus.FAILED
            result.error = error
            result.message = error.message
            return result

        try:
            for stage, step in self._stages():
                result.stages.append(stage)
                await step()
        except ReleaseCancelled as e:
            result.status = ReleaseStatus.CANCELLED
            result.message = str(e)
        except PubzError as e:
            result.status = ReleaseStatus.FAILED
            result.error = e
            result.message = e.message

        return result

    # -- helpers ---------------------------------------------------------

    def _require_prompter(self) -> Prompter:
        if self.prompter is None:
            raise ReleaseError("An interactive prompt is required; use --ci to run unattended")
        return self.prompter

    def _confirm(self, message: str, *, unattended: bool = True) -> bool:
        """Ask a yes/no question.

        ``--ci`` answers yes. ``--yes`` answers ``unattended``, so optional
        steps (bump, tag, push) are skipped while gates are passed.

        Raises:
            ReleaseCancelled: If the operator interrupts the prompt.
        """
        if self.options.ci:
            return True
        if self.options.yes:
            return unattended
        answer = self._require_prompter().confirm(message)
        if answer is None:
            raise ReleaseCancelled("Cancelled.")
        return answer

    def _heading(self, title: str) -> None:
        self.console.print()
        self.console.print(f"[bold cyan]{title}[/bold cyan]")
        self.console.print("[dim]" + "─" * RULE_WIDTH + "[/dim]")

    def _dry(self, message: str) -> None:
        self.console.print(f"  [yellow]\\[DRY RUN][/yellow] {message}")

    def _warn(self, message: str) -> None:
        self.result.warnings.append(message)
        self.context.error_console.print(f"[yellow]Warning:[/yellow] {escape(message)}")

    def _set_packages(self, packages: list[Package]) -> None:
        self.packages = packages
        self.result.packages = [p.name for p in packages]

    # -- stages ----------------------------------------------------------

    async def _preflight(self) -> None:
        if self.is_dry_run:
            self.console.print("[dim]Skipping uncommitted changes check (dry run)[/dim]")
            return

        files = await get_uncommitted_files(self.runner, self.root)
        if files:
            raise UncommittedChangesError(files)

    async def _discover(self) -> None:
        self.console.print("[cyan]Discovering packages...[/cyan]")
        self.workspace = Workspace.discover(self.root, self.config)
        publishable = self.workspace.publishable_packages
        if not publishable:
            raise NoPublishablePackagesError()
        self._set_packages(publishable)

    async def _order(self) -> None:
        strict = self.config.ordering.strict_cycles
        self._set_packages(sort_by_dependency_order(self.packages, strict=strict))

        count = len(self.packages)
        self.console.print(f"Found [bold green]{count}[/bold green] publishable package(s):")
        for pkg in self.packages:
            deps = ""
            if pkg.local_dependencies:
                deps = f" [dim](depends on: {escape(', '.join(pkg.local_dependencies))})[/dim]"
            self.console.print(
                f"  [dim]•[/dim] [cyan]{escape(pkg.name)}[/cyan][dim]@[/dim]"
                f"[yellow]{escape(pkg.version)}[/yellow]{deps}"
            )

    async def _select(self) -> None:
        if len(self.packages) <= 1 or self.options.skip_all_prompts:
            return

        selected = self._require_prompter().multi_select(
            "Select packages to publish:",
            [(pkg.label, pkg) for pkg in self.packages],
            all_selected=True,
        )
        if not selected:
            raise ReleaseCancelled("No packages selected.")

        strict = self.config.ordering.strict_cycles
        self._set_packages(sort_by_dependency_order(selected, strict=strict))

    async def _decide_version(self) -> None:
        current = self.packages[0].version
        self.result.old_version = current

        self._heading("Step 1: Version Management")
        self.console.print(f"Current version: [yellow]{escape(current)}[/yellow]")

        new_version = current
        if self.options.version:
            new_version, kind = resolve_version_directive(current, self.options.version)
            if kind is None:
                self.console.print(f"Using explicit version: [green]{escape(new_version)}[/green]")
            else:
                self.console.print(
                    f"Bumping version ({kind.value}): [yellow]{escape(current)}[/yellow] → "
                    f"[green]{escape(new_version)}[/green]"
                )
            await self._apply_version(new_version)
        elif self._confirm("Bump version before publishing?", unattended=False):
            kinds = (BumpType.PATCH, BumpType.MINOR, BumpType.MAJOR)
            kind = self._require_prompter().select(
                "Select version bump type:",
                [(f"{k.value} ({preview_bump(current, k)})", k) for k in kinds],
            )
            if kind is None:
                raise ReleaseCancelled("Version selection cancelled.")
            new_version = bump_version(current, kind)
            await self._apply_version(new_version)

        self.result.version = new_version

    async def _apply_version(self, new_version: str) -> None:
        self.console.print(f"Updating version to [green]{escape(new_version)}[/green] in all packages...")

        changes = update_all_versions(self.packages, new_version, dry_run=self.is_dry_run)
        self.result.changes.extend(changes)

        for change in changes:
            if change.old == change.new:
                continue
            target = escape(change.package)
            if change.is_dependency:
                target += f" {escape(change.field)}"
            text = f"{target}: {escape(change.old)} → {escape(change.new)}"
            if self.is_dry_run:
                self._dry(f"Would update {text}")
            else:
                self.console.print(f"  Updated {text}")

        for pkg in self.packages:
            pkg.version = new_version

        by_name = {p.name: p for p in self.packages}
        written = list(dict.fromkeys(by_name[c.package].manifest_path for c in changes if c.written))
        message = self.config.git.bump_commit_message.format(version=new_version)

        if self.is_dry_run:
            self._dry(f"Would commit version bump: {escape(message)}")
            return
        if not written:
            self.console.print("[dim]No manifest changes to commit[/dim]")
            return

        try:
            await commit_paths(self.runner, self.root, written, message)
        except GitError as e:
            raise ReleaseError(f"Failed to commit version bump: {e.message}") from e
        self.console.print(f"  Committed version bump: {escape(message)}")

    async def _select_registry(self) -> None:
        publish = self.config.publish
        registry = self.options.registry

        if not registry and not self.options.skip_all_prompts:
            names = list(publish.registries)
            registry = self._require_prompter().select(
                "Select publish target:",
                [(f"{name} ({url})", url) for name, url in publish.registries.items()],
                default_index=names.index(publish.default_registry),
            )
            if registry is None:
                raise ReleaseCancelled("Registry selection cancelled.")

        self.result.registry = registry or publish.default_registry_url
        self.console.print()
        self.console.print(f"Publishing to: [cyan]{escape(self.result.registry)}[/cyan]")

    async def _build(self) -> None:
        if self.options.skip_build:
            self.console.print("[dim]Skipping build (--skip-build)[/dim]")
            return

        self._heading("Step 2: Building Packages")
        build = self.config.build

        if self.is_dry_run:
            self._dry(f"Would run: {escape(' '.join([build.command, *build.args]))}")
        else:
            self.console.print("Running build...")
            outcome = await run_build(self.runner, self.root, build)
            if outcome.failed:
                raise BuildError(f"Build failed: {outcome.command} exited with {outcome.exit_code}")
            self.console.print("Build completed successfully")

        self.console.print("[cyan]Verifying builds...[/cyan]")
        missing: dict[str, list[str]] = {}
        for pkg in self.packages:
            if files := find_missing_artifacts(pkg, build.default_artifacts):
                missing[pkg.name] = files
                self.console.print(
                    f"  [red]✗[/red] {escape(pkg.name)}: missing {escape(', '.join(files))}"
                )
            else:
                self.console.print(f"  [green]✓[/green] {escape(pkg.name)} build verified")

        if not missing:
            return
        if self.is_dry_run:
            for name, files in missing.items():
                self._warn(f"{name} is missing {', '.join(files)} (build was not run)")
            return
        raise VerificationError(missing)

    async def _publish(self) -> None:
        self._heading("Step 3: Publishing")
        registry = self.result.registry or self.config.publish.default_registry_url
        version = self.result.version or ""

        self.console.print("About to publish the following packages:")
        for pkg in self.packages:
            self.console.print(
                f"  [dim]•[/dim] [cyan]{escape(pkg.name)}[/cyan][dim]@[/dim]"
                f"[yellow]{escape(version)}[/yellow]"
            )
        self.console.print(f"Registry: [cyan]{escape(registry)}[/cyan]")

        if not self._confirm("Continue?"):
            raise ReleaseCancelled("Publish cancelled.")

        for pkg in self.packages:
            if self.is_dry_run:
                self._dry(f"Would publish {escape(pkg.label)} to {escape(registry)}")
                continue

            self.console.print(f"Publishing {escape(pkg.label)}...")
            outcome = await publish_package(
                self.runner, pkg, self.config.publish, registry, self.options.otp
            )
            if outcome.failed:
                raise PublishError(
                    pkg.name,
                    f"Failed to publish {pkg.name} ({outcome.command} exited with "
                    f"{outcome.exit_code})",
                )
            self.result.published.append(pkg.name)
            self.console.print(f"  [green]✓[/green] {escape(pkg.name)} published successfully")

    async def _tag(self) -> None:
        git = self.config.git
        version = self.result.version or ""
        tag = git.tag_for(version)
        self.result.tag = tag

        if not self._confirm(f"Create a git tag for {tag}?", unattended=False):
            return

        if self.is_dry_run:
            self._dry(f"Would create git tag: {escape(tag)}")
            return

        self.console.print(f"[cyan]Creating git tag {escape(tag)}...[/cyan]")
        try:
            if await get_uncommitted_files(self.runner, self.root):
                self.console.print("Uncommitted changes detected. Committing...")
                message = git.release_commit_message.format(tag=tag, version=version)
                await commit_all(self.runner, self.root, message)
                self.console.print("  Changes committed")

            annotation = f"Release {tag}" if git.annotated_tags else None
            await create_tag(self.runner, self.root, tag, message=annotation)
        except GitError as e:
            self._warn(f"Failed to create tag {tag} (may already exist): {e.message}")
            return

        self.result.tag_created = True
        self.console.print(f"  Tag {escape(tag)} created")

    async def _push(self) -> None:
        tag = self.result.tag
        remote = self.config.git.remote
        if tag is None or not (self.result.tag_created or self.is_dry_run):
            return

        if not self._confirm(f"Push tag to {remote}?", unattended=False):
            self.console.print(
                f"Tag created locally. Push manually with: [dim]git push {escape(remote)} "
                f"{escape(tag)}[/dim]"
            )
            return

        if self.is_dry_run:
            self._dry(f"Would push git tag {escape(tag)} to {escape(remote)}")
            return

        try:
            await push_tag(self.runner, self.root, tag, remote)
        except GitError as e:
            self._warn(f"Failed to push tag {tag}: {e.message}")
            return

        self.result.tag_pushed = True
        self.console.print(f"  Tag {escape(tag)} pushed to {escape(remote)}")

    async def _done(self) -> None:
        self.console.print()
        self.console.print("[dim]" + "═" * RULE_WIDTH + "[/dim]")
        if self.is_dry_run:
            self.console.print("[yellow]Dry run complete.[/yellow] Run without --dry-run to publish.")
        else:
            self.console.print("[bold green]Publishing complete![/bold green]")
            self.console.print(
                f"Published version: [bold green]{escape(self.result.version or '')}[/bold green]"
            )


async def release(
    root: Path,
    *,
    runner: CommandRunner,
    console: Console,
    error_console: Console | None = None,
    prompter: Prompter | None = None,
    dry_run: bool = False,
    registry: str | None = None,
    otp: str | None = None,
    skip_build: bool = False,
    yes: bool = False,
    ci: bool = False,
    version: str | None = None,
) -> ReleaseResult:
    """Convenience function to run the release pipeline.

    Raises:
        ConfigurationError: If pubz.yaml is invalid.
    """
    context = CommandContext(
        root=root,
        config=load_config(root),
        runner=runner,
        console=console,
        error_console=error_console or console,
        dry_run=dry_run,
    )
    options = ReleaseOptions(
        dry_run=dry_run,
        registry=registry,
        otp=otp,
        skip_build=skip_build,
        yes=yes,
        ci=ci,
        version=version,
    )
    return await ReleaseCommand(context, options, prompter).execute()


def print_ci_usage(error_console: Console) -> None:
    error_console.print("[bold red]Error:[/bold red] --ci requires --version to be specified")
    error_console.print()
    error_console.print("[dim]Examples:[/dim]")
    for example in ("patch", "minor", "major", "1.2.3"):
        error_console.print(f"[dim]  pubz --ci --version {example}[/dim]")


def print_failure(result: ReleaseResult, error_console: Console) -> None:
    """Render a failed result with whatever detail its error carries."""
    error = result.error

    if isinstance(error, UncommittedChangesError):
        error_console.print("[bold red]Error:[/bold red] You have uncommitted changes:")
        for file in error.files[:MAX_LISTED_FILES]:
            error_console.print(f"  [yellow]{escape(file)}[/yellow]")
        if len(error.files) > MAX_LISTED_FILES:
            error_console.print(f"[dim]  ... and {len(error.files) - MAX_LISTED_FILES} more[/dim]")
        error_console.print("[dim]Please commit or stash your changes before publishing.[/dim]")
        return

    if isinstance(error, NoPublishablePackagesError):
        error_console.print("[yellow]No publishable packages found.[/yellow]")
        error_console.print("[dim]Make sure your packages:[/dim]")
        error_console.print('[dim]  - Have a package.json with a "name" field[/dim]')
        error_console.print('[dim]  - Do not have "private": true[/dim]')
        return

    if isinstance(error, PublishError):
        error_console.print(f"[bold red]Error:[/bold red] {escape(error.message)}")
        error_console.print("[red]Stopping publish process.[/red]")
        if result.published:
            error_console.print(
                f"[dim]Already published: {escape(', '.join(result.published))}[/dim]"
            )
        return

    error_console.print(f"[bold red]Error:[/bold red] {escape(result.message or 'Release failed')}")


async def handle_release_command(
    root: Path,
    *,
    console: Console,
    error_console: Console,
    options: ReleaseOptions,
    runner: CommandRunner | None = None,
    prompter: Prompter | None = None,
    verbose: bool = False,
) -> ReleaseResult:
    """Handle the release command from the CLI.

    Owns the prompter for the duration of the run unless one is supplied.

    Raises:
        typer.Exit: With code 1 on any fatal abort.
    """
    if options.ci and not options.version:
        print_ci_usage(error_console)
        raise typer.Exit(1)

    try:
        if options.dry_run:
            console.print("[bold yellow]DRY RUN MODE[/bold yellow][dim] - No actual changes will be made[/dim]")
        console.print("[bold]pubz[/bold][dim] - workspace package publisher[/dim]")
        console.print("[dim]" + "═" * RULE_WIDTH + "[/dim]")

        config = load_config(root)
        if runner is None:
            runner = CommandRunner(on_output=lambda line: console.out(line, highlight=False))
        context = CommandContext(
            root=root,
            config=config,
            runner=runner,
            console=console,
            error_console=error_console,
            dry_run=options.dry_run,
            verbose=verbose,
        )

        if prompter is not None or options.ci:
            scope: contextlib.AbstractContextManager[Prompter | None] = contextlib.nullcontext(
                prompter
            )
        else:
            scope = Prompter()

        with scope as active:
            result = await ReleaseCommand(context, options, active).execute()

    except typer.Exit:
        raise
    except PubzError as e:
        error_console.print(f"[bold red]Error:[/bold red] {escape(e.message)}")
        raise typer.Exit(1) from e
    except Exception as e:
        error_console.print_exception()
        raise typer.Exit(1) from e

    if result.status is ReleaseStatus.CANCELLED:
        console.print(f"[yellow]{escape(result.message or 'Cancelled.')}[/yellow]")
        raise typer.Exit(0)
    if result.status is ReleaseStatus.FAILED:
        print_failure(result, error_console)
        raise typer.Exit(1)

    console.print("[bold green]Done![/bold green]")
    return result
