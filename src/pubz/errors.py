"""Exception hierarchy for pubz."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path


class PubzError(Exception):
    """Base class for all pubz errors.

    Attributes:
        message: Human-readable description of the failure.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(PubzError):
    """Invalid command-line options or workspace configuration."""


class WorkspaceNotFoundError(PubzError):
    """No root manifest in the workspace directory."""

    def __init__(self, root: Path) -> None:
        super().__init__(f"No package.json found in {root}")
        self.root = root


class ManifestError(PubzError):
    """A manifest file could not be parsed or failed validation."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Invalid manifest {path}: {reason}")
        self.path = path
        self.reason = reason


class VersionError(PubzError):
    """A version string is not a valid X.Y.Z triple."""


class CyclicDependencyError(PubzError):
    """Local dependencies form a cycle."""

    def __init__(self, cycle: Sequence[str]) -> None:
        super().__init__(f"Dependency cycle detected: {' -> '.join(cycle)}")
        self.cycle = list(cycle)


class GitError(PubzError):
    """A git command failed."""

    def __init__(self, message: str, command: str | None = None) -> None:
        super().__init__(message)
        self.command = command


class UncommittedChangesError(PubzError):
    """The working tree has uncommitted changes."""

    def __init__(self, files: Sequence[str]) -> None:
        super().__init__("You have uncommitted changes")
        self.files = list(files)


class NoPublishablePackagesError(PubzError):
    """Discovery found nothing that can be published."""

    def __init__(self) -> None:
        super().__init__("No publishable packages found")


class BuildError(PubzError):
    """The workspace build command failed."""


class VerificationError(PubzError):
    """One or more packages are missing declared build artifacts."""

    def __init__(self, missing: dict[str, list[str]]) -> None:
        details = "; ".join(f"{name}: {', '.join(files)}" for name, files in missing.items())
        super().__init__(f"Build verification failed ({details})")
        self.missing = missing


class PublishError(PubzError):
    """Publishing a package to the registry failed."""

    def __init__(self, package_name: str, message: str) -> None:
        super().__init__(message)
        self.package_name = package_name


class ReleaseError(PubzError):
    """A release step other than build or publish failed."""
