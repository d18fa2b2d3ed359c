"""pubz - workspace package publisher.

Publishes every package of a multi-package workspace in dependency order:
- Workspace discovery and dependency-ordered publishing
- Lockstep version bumps with local dependency rewriting
- Build verification before anything is published
- Git commit, tag and push of the release
"""

from pubz.commands import ReleaseCommand, ReleaseOptions, ReleaseResult, release
from pubz.config import PubzConfig, load_config
from pubz.errors import (
    BuildError,
    ConfigurationError,
    CyclicDependencyError,
    GitError,
    ManifestError,
    NoPublishablePackagesError,
    PublishError,
    PubzError,
    ReleaseError,
    UncommittedChangesError,
    VerificationError,
    VersionError,
    WorkspaceNotFoundError,
)
from pubz.execution import CommandRunner, ExecutionResult
from pubz.workspace import DependencyGraph, Package, Workspace

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Core
    "Workspace",
    "Package",
    "DependencyGraph",
    "PubzConfig",
    "load_config",
    # Release
    "ReleaseCommand",
    "ReleaseOptions",
    "ReleaseResult",
    "release",
    # Execution
    "CommandRunner",
    "ExecutionResult",
    # Errors
    "PubzError",
    "ConfigurationError",
    "WorkspaceNotFoundError",
    "ManifestError",
    "VersionError",
    "CyclicDependencyError",
    "GitError",
    "UncommittedChangesError",
    "NoPublishablePackagesError",
    "BuildError",
    "VerificationError",
    "PublishError",
    "ReleaseError",
]
