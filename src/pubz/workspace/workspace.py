"""Workspace model."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from pubz.config import PubzConfig, load_config
from pubz.workspace.discovery import discover_packages, load_root_manifest
from pubz.workspace.manifest import RootManifest
from pubz.workspace.package import Package


@dataclass
class Workspace:
    """A source tree with a root manifest and its member packages.

    Attributes:
        root: Absolute workspace root.
        root_manifest: Parsed root manifest.
        packages: All discovered packages, private ones included.
        config: Workspace configuration.
    """

    root: Path
    root_manifest: RootManifest
    packages: list[Package] = field(default_factory=list)
    config: PubzConfig = field(default_factory=PubzConfig)

    @classmethod
    def discover(cls, path: Path | None = None, config: PubzConfig | None = None) -> Workspace:
        """Discover the workspace rooted at ``path`` (default: cwd).

        Raises:
            WorkspaceNotFoundError: If there is no root manifest.
            ManifestError: If a manifest is malformed.
            ConfigurationError: If pubz.yaml is invalid.
        """
        root = (path or Path.cwd()).resolve()
        root_manifest = load_root_manifest(root)
        if config is None:
            config = load_config(root)
        packages = discover_packages(root, root_manifest)
        return cls(root=root, root_manifest=root_manifest, packages=packages, config=config)

    @property
    def publishable_packages(self) -> list[Package]:
        """Packages that are not private, in discovery order."""
        return [p for p in self.packages if not p.is_private]

