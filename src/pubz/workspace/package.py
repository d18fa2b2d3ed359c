"""Discovered package model."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from pubz.workspace.manifest import PackageManifest


@dataclass(eq=False)
class Package:
    """A publishable unit found during discovery.

    ``version`` and ``local_dependencies`` may be refreshed in place during a
    run; nothing here outlives the process.

    Attributes:
        name: Package name from the manifest.
        version: Current version.
        path: Absolute package directory.
        manifest_path: Absolute path to the package's manifest.
        manifest: Parsed manifest, retained for the whole run.
        is_private: Private packages are never published.
        local_dependencies: Names of other packages from the same discovery run
            that this package depends on, in declaration order.
    """

    name: str
    version: str
    path: Path
    manifest_path: Path
    manifest: PackageManifest = field(repr=False)
    is_private: bool = False
    local_dependencies: list[str] = field(default_factory=list)

    @classmethod
    def from_manifest(cls, manifest: PackageManifest, path: Path) -> Package:
        """Build a package record from a loaded manifest."""
        return cls(
            name=manifest.name,
            version=manifest.version,
            path=path,
            manifest_path=manifest.path or path / "package.json",
            manifest=manifest,
            is_private=manifest.private,
        )

    @property
    def label(self) -> str:
        return f"{self.name}@{self.version}"

    def resolve_local_dependencies(self, names: set[str]) -> list[str]:
        """Recompute local dependencies against the names of a discovery batch."""
        self.local_dependencies = [n for n in self.manifest.dependency_names() if n in names]
        return self.local_dependencies
