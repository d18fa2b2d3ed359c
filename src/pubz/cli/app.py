"""pubz CLI application."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

from pubz.commands.release import ReleaseOptions, handle_release_command


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from pubz import __version__

        print(f"pubz {__version__}")
        raise typer.Exit()


app = typer.Typer(
    name="pubz",
    help="Publish workspace packages in dependency order",
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)

console = Console()
error_console = Console(stderr=True)


def setup_logging(verbose: bool = False) -> None:
    """Configure diagnostic logging on the error console.

    Args:
        verbose: Enable debug output.
    """
    level = logging.DEBUG if verbose else logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[
            RichHandler(
                console=error_console,
                show_time=verbose,
                show_path=verbose,
                rich_tracebacks=True,
                tracebacks_suppress=[typer],
            )
        ],
        force=True,
    )
    logging.getLogger("asyncio").setLevel(logging.WARNING)


@app.command()
def publish(
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Show what would be done without changing anything"),
    ] = False,
    registry: Annotated[
        str | None,
        typer.Option("--registry", help="Registry URL to publish to"),
    ] = None,
    otp: Annotated[
        str | None,
        typer.Option("--otp", help="One-time password for registry two-factor auth"),
    ] = None,
    skip_build: Annotated[
        bool,
        typer.Option("--skip-build", help="Skip the build and artifact verification"),
    ] = False,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmations and the optional bump, tag and push"),
    ] = False,
    ci: Annotated[
        bool,
        typer.Option("--ci", help="Run without any prompts (requires --version)"),
    ] = False,
    version: Annotated[
        str | None,
        typer.Option("--version", help="patch, minor, major, or an explicit version"),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Show debug logging"),
    ] = False,
    show_version: Annotated[  # noqa: ARG001
        bool,
        typer.Option("-V", help="Show pubz version and exit", callback=version_callback, is_eager=True),
    ] = False,
) -> None:
    """Build, version, publish and tag every package in the workspace."""
    setup_logging(verbose)

    options = ReleaseOptions(
        dry_run=dry_run,
        registry=registry,
        otp=otp,
        skip_build=skip_build,
        yes=yes,
        ci=ci,
        version=version,
    )

    asyncio.run(
        handle_release_command(
            Path.cwd(),
            console=console,
            error_console=error_console,
            options=options,
            verbose=verbose,
        )
    )


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
