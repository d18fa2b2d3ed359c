"""Package discovery."""

from __future__ import annotations

import logging
from pathlib import Path

from pubz.errors import WorkspaceNotFoundError
from pubz.workspace.manifest import (
    MANIFEST_FILENAME,
    PackageManifest,
    RootManifest,
    find_manifest,
)
from pubz.workspace.package import Package
from pubz.workspace.patterns import expand_patterns

logger = logging.getLogger(__name__)

FALLBACK_PACKAGES_DIR = "packages"


def load_root_manifest(root: Path) -> RootManifest:
    """Load the workspace root manifest.

    Args:
        root: Workspace root directory.

    Returns:
        Parsed root manifest.

    Raises:
        WorkspaceNotFoundError: If the root has no manifest.
        ManifestError: If the manifest is malformed.
    """
    path = find_manifest(root)
    if path is None:
        raise WorkspaceNotFoundError(root)
    return RootManifest.load(path)


def find_package_dirs(root: Path, root_manifest: RootManifest) -> list[Path] | None:
    """Determine candidate member directories.

    Returns:
        Candidate directories, or None when the workspace declares no members
        and has no ``packages/`` directory.
    """
    patterns = root_manifest.workspace_patterns
    if patterns:
        logger.debug("Expanding workspace patterns: %s", patterns)
        return expand_patterns(root, patterns)

    packages_dir = root / FALLBACK_PACKAGES_DIR
    if packages_dir.is_dir():
        logger.debug("No workspaces declared, scanning %s", packages_dir)
        return sorted((p for p in packages_dir.iterdir() if p.is_dir()), key=lambda p: p.name)

    return None


def discover_packages(root: Path, root_manifest: RootManifest | None = None) -> list[Package]:
    """Discover every package in a workspace.

    Duplicate package names are not detected. Which duplicate wins in later
    stages is undefined.

    Args:
        root: Workspace root directory.
        root_manifest: Already-loaded root manifest, to avoid reading it again.

    Returns:
        Packages in discovery order with local dependencies resolved.

    Raises:
        WorkspaceNotFoundError: If the root has no manifest.
        ManifestError: If any manifest that exists is malformed.
    """
    root = root.resolve()
    if root_manifest is None:
        root_manifest = load_root_manifest(root)

    candidates = find_package_dirs(root, root_manifest)

    if candidates is None:
        if root_manifest.private:
            logger.debug("Private root without members, nothing to publish")
            return []
        manifest_path = root_manifest.path or root / MANIFEST_FILENAME
        manifest = PackageManifest.from_document(root_manifest.document, manifest_path)
        logger.debug("Single-package mode: %s", manifest.name)
        packages = [Package.from_manifest(manifest, root)]
    else:
        packages = []
        for directory in candidates:
            path = find_manifest(directory)
            if path is None:
                logger.debug("Skipping %s (no %s)", directory, MANIFEST_FILENAME)
                continue
            manifest = PackageManifest.load(path)
            packages.append(Package.from_manifest(manifest, directory.resolve()))

    names = {p.name for p in packages}
    for pkg in packages:
        pkg.resolve_local_dependencies(names)

    return packages
