"""Package manifest (package.json) models.

Manifests are parsed and validated exactly once. The raw JSON document is kept
alongside the typed model so that writes touch only the fields pubz owns and
preserve everything else, including key order.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from pathlib import Path
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, ValidationError

from pubz.errors import ManifestError

MANIFEST_FILENAME = "package.json"

# JSON key -> model attribute
DEPENDENCY_SECTIONS: dict[str, str] = {
    "dependencies": "dependencies",
    "devDependencies": "dev_dependencies",
    "peerDependencies": "peer_dependencies",
}

TManifest = TypeVar("TManifest", bound="_ManifestBase")


class WorkspacesConfig(BaseModel):
    """Structured form of the ``workspaces`` field."""

    model_config = ConfigDict(extra="allow")

    packages: list[str] = Field(default_factory=list)


class _ManifestBase(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    private: bool = False
    workspaces: list[str] | WorkspacesConfig | None = None
    dependencies: dict[str, str] = Field(default_factory=dict)
    dev_dependencies: dict[str, str] = Field(default_factory=dict, alias="devDependencies")
    peer_dependencies: dict[str, str] = Field(default_factory=dict, alias="peerDependencies")

    _document: dict[str, Any] = PrivateAttr(default_factory=dict)
    _path: Path | None = PrivateAttr(default=None)

    def model_post_init(self, __context: Any) -> None:
        self._document = self.model_dump(by_alias=True, exclude_unset=True)

    @classmethod
    def load(cls: type[TManifest], path: Path) -> TManifest:
        """Read and validate a manifest file.

        Args:
            path: Path to the manifest file.

        Returns:
            Validated manifest bound to ``path``.

        Raises:
            FileNotFoundError: If the file does not exist.
            ManifestError: If the file is not a valid manifest.
        """
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except UnicodeDecodeError as e:
            raise ManifestError(path, f"not valid UTF-8 ({e.reason})") from e
        except json.JSONDecodeError as e:
            raise ManifestError(path, f"invalid JSON ({e})") from e
        return cls.from_document(data, path)

    @classmethod
    def from_document(cls: type[TManifest], data: Any, path: Path) -> TManifest:
        """Validate an already-decoded JSON document.

        Raises:
            ManifestError: If the document is not a valid manifest.
        """
        if not isinstance(data, dict):
            raise ManifestError(path, "top-level value must be an object")

        try:
            manifest = cls.model_validate(data)
        except ValidationError as e:
            raise ManifestError(path, str(e)) from e

        manifest._document = data
        manifest._path = path
        return manifest

    @property
    def path(self) -> Path | None:
        return self._path

    @property
    def document(self) -> dict[str, Any]:
        """The raw JSON document as it will be written."""
        return self._document

    @property
    def workspace_patterns(self) -> list[str]:
        """Workspace glob patterns, whichever form the manifest uses."""
        if self.workspaces is None:
            return []
        if isinstance(self.workspaces, WorkspacesConfig):
            return list(self.workspaces.packages)
        return list(self.workspaces)

    def dependency_sections(self) -> Iterator[tuple[str, dict[str, str]]]:
        """Yield (JSON key, mapping) for each dependency section."""
        for key, attr in DEPENDENCY_SECTIONS.items():
            yield key, getattr(self, attr)

    def dependency_names(self) -> list[str]:
        """Names across all dependency sections, each listed once."""
        names: dict[str, None] = {}
        for _, deps in self.dependency_sections():
            names.update(dict.fromkeys(deps))
        return list(names)

    def set_dependency(self, section: str, name: str, spec: str) -> None:
        """Rewrite the range specifier of an existing dependency entry."""
        getattr(self, DEPENDENCY_SECTIONS[section])[name] = spec
        self._document.setdefault(section, {})[name] = spec

    def save(self, path: Path | None = None) -> Path:
        """Write the document back to disk.

        Args:
            path: Target path; defaults to the path the manifest was loaded from.

        Returns:
            The path written.
        """
        target = path or self._path
        if target is None:
            raise ManifestError(Path("<memory>"), "manifest has no file path")
        content = json.dumps(self._document, indent=2, ensure_ascii=False)
        target.write_text(content + "\n", encoding="utf-8")
        self._path = target
        return target


class RootManifest(_ManifestBase):
    """Workspace root manifest; name and version are optional."""

    name: str | None = None
    version: str | None = None


class PackageManifest(_ManifestBase):
    """Member package manifest."""

    name: str
    version: str
    main: str | None = None
    bin: str | dict[str, str] | None = None
    exports: str | dict[str, Any] | None = None

    def set_version(self, version: str) -> None:
        self.version = version
        self._document["version"] = version


def find_manifest(directory: Path) -> Path | None:
    """Return the manifest path in ``directory`` if it exists."""
    path = directory / MANIFEST_FILENAME
    return path if path.is_file() else None
