"""Version arithmetic and manifest rewriting."""

from pubz.versioning.semver import (
    BumpType,
    Version,
    bump_version,
    is_bump_directive,
    preview_bump,
    resolve_version_directive,
)
from pubz.versioning.updater import (
    VersionChange,
    apply_version,
    propagate_local_versions,
    rewrite_specifier,
    update_all_versions,
)

__all__ = [
    "BumpType",
    "Version",
    "VersionChange",
    "apply_version",
    "bump_version",
    "is_bump_directive",
    "preview_bump",
    "propagate_local_versions",
    "resolve_version_directive",
    "rewrite_specifier",
    "update_all_versions",
]
