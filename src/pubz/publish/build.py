"""Workspace build and artifact verification."""

from __future__ import annotations

from pathlib import Path

from pubz.config import BuildConfig
from pubz.execution import CommandRunner, ExecutionResult
from pubz.workspace.manifest import PackageManifest
from pubz.workspace.package import Package


async def run_build(runner: CommandRunner, root: Path, config: BuildConfig) -> ExecutionResult:
    """Run the workspace build once at the root, streaming its output."""
    return await runner.run(config.command, config.args, root, echo=True)


def collect_entry_artifacts(manifest: PackageManifest, defaults: list[str]) -> list[str]:
    """Files a manifest declares as entry points.

    ``main``, every ``bin`` entry and ``exports`` (string form, or the string
    value of ``exports["."]``) are collected. When none are declared,
    ``defaults`` is returned.
    """
    files: list[str] = []

    if manifest.main:
        files.append(manifest.main)

    if isinstance(manifest.bin, str):
        files.append(manifest.bin)
    elif isinstance(manifest.bin, dict):
        files.extend(manifest.bin.values())

    if isinstance(manifest.exports, str):
        files.append(manifest.exports)
    elif isinstance(manifest.exports, dict) and isinstance(manifest.exports.get("."), str):
        files.append(manifest.exports["."])

    return files or list(defaults)


def find_missing_artifacts(package: Package, defaults: list[str]) -> list[str]:
    """Declared artifacts of ``package`` that do not exist on disk."""
    return [
        file
        for file in collect_entry_artifacts(package.manifest, defaults)
        if not (package.path / file).exists()
    ]
