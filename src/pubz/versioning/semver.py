"""Version parsing and bump arithmetic."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from pubz.errors import VersionError

VERSION_PATTERN = re.compile(r"^([0-9]+)\.([0-9]+)\.([0-9]+)$")


class BumpType(Enum):
    """Kind of version bump."""

    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"
    NONE = "none"

    @classmethod
    def from_str(cls, value: str) -> BumpType:
        """Parse a bump kind, case-insensitively.

        Raises:
            ValueError: If ``value`` is not a bump kind.
        """
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(f"Invalid bump type: {value}") from None


@dataclass(frozen=True, order=True)
class Version:
    """A plain X.Y.Z version.

    Pre-release and build metadata are not supported.
    """

    major: int
    minor: int
    patch: int

    @classmethod
    def parse(cls, version: str) -> Version:
        """Parse ``X.Y.Z``.

        Raises:
            VersionError: If the string is not three non-negative integers.
        """
        match = VERSION_PATTERN.match(version.strip())
        if not match:
            raise VersionError(f"Invalid version {version!r}: expected X.Y.Z")
        major, minor, patch = (int(part) for part in match.groups())
        return cls(major, minor, patch)

    def bump(self, kind: BumpType) -> Version:
        if kind is BumpType.MAJOR:
            return Version(self.major + 1, 0, 0)
        if kind is BumpType.MINOR:
            return Version(self.major, self.minor + 1, 0)
        if kind is BumpType.PATCH:
            return Version(self.major, self.minor, self.patch + 1)
        return self

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


def bump_version(version: str, kind: BumpType | str) -> str:
    """Compute the next version.

    ``none`` returns ``version`` unchanged without parsing it.

    Raises:
        VersionError: If a bump is requested on a malformed version.
    """
    if isinstance(kind, str):
        kind = BumpType.from_str(kind)
    if kind is BumpType.NONE:
        return version
    return str(Version.parse(version).bump(kind))


def preview_bump(version: str, kind: BumpType | str) -> str:
    """Describe a bump as ``old → new`` without applying it."""
    return f"{version} → {bump_version(version, kind)}"


def is_bump_directive(value: str) -> bool:
    """True for major, minor and patch."""
    return value.strip().lower() in {k.value for k in BumpType if k is not BumpType.NONE}


def resolve_version_directive(current: str, directive: str) -> tuple[str, BumpType | None]:
    """Turn a ``--version`` value into a concrete version.

    Args:
        current: Current reference version.
        directive: ``major``/``minor``/``patch`` or an explicit version.

    Returns:
        (new_version, bump_kind); bump_kind is None for explicit versions,
        which are used verbatim.
    """
    if is_bump_directive(directive):
        kind = BumpType.from_str(directive)
        return bump_version(current, kind), kind
    return directive.strip(), None
