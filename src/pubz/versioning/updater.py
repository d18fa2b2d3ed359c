"""Manifest version rewriting."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from pubz.workspace.package import Package

logger = logging.getLogger(__name__)

RANGE_PREFIXES = ("^", "~")


@dataclass(frozen=True)
class VersionChange:
    """A single field rewritten (or to be rewritten) in a manifest.

    Attributes:
        package: Package whose manifest changes.
        field: ``version`` or ``<section>.<dependency>``.
        old: Previous value.
        new: New value.
        written: False when the change was only reported (dry run) or was a no-op.
    """

    package: str
    field: str
    old: str
    new: str
    written: bool = False

    @property
    def is_dependency(self) -> bool:
        return self.field != "version"


def rewrite_specifier(old_spec: str, new_version: str) -> str:
    """Point a range specifier at ``new_version``, keeping a ``^`` or ``~`` prefix."""
    for prefix in RANGE_PREFIXES:
        if old_spec.startswith(prefix):
            return f"{prefix}{new_version}"
    return new_version


def apply_version(package: Package, new_version: str, *, dry_run: bool = False) -> VersionChange:
    """Set a package's own version field and persist the manifest.

    ``package.version`` is left untouched; the caller refreshes it.

    Args:
        package: Package to update.
        new_version: Version to write.
        dry_run: Report the change without writing.

    Returns:
        The change made or planned.
    """
    manifest = package.manifest
    old = manifest.version

    if dry_run:
        logger.info("[dry run] %s: version %s -> %s", package.name, old, new_version)
        return VersionChange(package.name, "version", old, new_version)

    if old == new_version:
        logger.debug("%s already at %s", package.name, new_version)
        return VersionChange(package.name, "version", old, new_version)

    manifest.set_version(new_version)
    manifest.save(package.manifest_path)
    logger.info("%s: version %s -> %s", package.name, old, new_version)
    return VersionChange(package.name, "version", old, new_version, written=True)


def propagate_local_versions(
    packages: Sequence[Package],
    new_version: str,
    *,
    dry_run: bool = False,
) -> list[VersionChange]:
    """Rewrite dependency specifiers that point at packages in the set.

    Every dependency section is considered. An entry is only rewritten when
    its new specifier differs from the current one, and each manifest is
    written at most once.

    Args:
        packages: The set being released.
        new_version: Version the set is moving to.
        dry_run: Report changes without writing.

    Returns:
        One change per rewritten dependency entry.
    """
    names = {p.name for p in packages}
    changes: list[VersionChange] = []

    for pkg in packages:
        modified = False
        for section, deps in pkg.manifest.dependency_sections():
            for dep_name, old_spec in list(deps.items()):
                if dep_name not in names:
                    continue
                new_spec = rewrite_specifier(old_spec, new_version)
                if new_spec == old_spec:
                    continue

                field = f"{section}.{dep_name}"
                if dry_run:
                    logger.info("[dry run] %s %s: %s -> %s", pkg.name, field, old_spec, new_spec)
                    changes.append(VersionChange(pkg.name, field, old_spec, new_spec))
                    continue

                pkg.manifest.set_dependency(section, dep_name, new_spec)
                changes.append(VersionChange(pkg.name, field, old_spec, new_spec, written=True))
                modified = True

        if modified:
            pkg.manifest.save(pkg.manifest_path)
            logger.info("Updated local dependency versions in %s", pkg.name)

    return changes


def update_all_versions(
    packages: Sequence[Package],
    new_version: str,
    *,
    dry_run: bool = False,
) -> list[VersionChange]:
    """Apply ``new_version`` to every package and its local dependency references."""
    changes = [apply_version(pkg, new_version, dry_run=dry_run) for pkg in packages]
    changes.extend(propagate_local_versions(packages, new_version, dry_run=dry_run))
    return changes
