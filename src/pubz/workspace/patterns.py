"""Workspace pattern expansion.

Only the forms workspaces use in practice are supported:

- ``dir/*``  immediate subdirectories of ``dir`` that contain a manifest
- ``dir/**`` the same, but subdirectories without a manifest are searched
  for nested manifests
- ``dir``    the directory itself, if it contains a manifest
"""

from __future__ import annotations

from pathlib import Path

from pubz.workspace.manifest import MANIFEST_FILENAME


def split_pattern(pattern: str) -> tuple[str, bool, bool]:
    """Split a workspace pattern into (base, has_wildcard, recursive)."""
    normalized = pattern.strip().rstrip("/")
    if normalized.startswith("./"):
        normalized = normalized[2:]
    if normalized.endswith("/**") or normalized == "**":
        return normalized[:-3] if normalized != "**" else "", True, True
    if normalized.endswith("/*") or normalized == "*":
        return normalized[:-2] if normalized != "*" else "", True, False
    return normalized, False, False


def _scan(base: Path, recursive: bool, visited: set[Path] | None = None) -> list[Path]:
    results: list[Path] = []
    # Symlinked directories can point back up the tree
    visited = set() if visited is None else visited
    real = base.resolve()
    if real in visited:
        return results
    visited.add(real)

    try:
        entries = sorted(base.iterdir(), key=lambda p: p.name)
    except (FileNotFoundError, NotADirectoryError):
        return results

    for entry in entries:
        if not entry.is_dir():
            continue
        if (entry / MANIFEST_FILENAME).is_file():
            results.append(entry)
        elif recursive and entry.name != "node_modules":
            results.extend(_scan(entry, recursive, visited))
    return results


def expand_pattern(root: Path, pattern: str) -> list[Path]:
    """Resolve a workspace pattern into package directories.

    Args:
        root: Workspace root directory.
        pattern: Pattern from the root manifest's ``workspaces`` field.

    Returns:
        Matching directories in name order. A base directory that does not
        exist yields nothing.
    """
    base, has_wildcard, recursive = split_pattern(pattern)
    base_path = root / base if base else root

    if not has_wildcard:
        if base_path.is_dir() and (base_path / MANIFEST_FILENAME).is_file():
            return [base_path]
        return []

    return _scan(base_path, recursive)


def expand_patterns(root: Path, patterns: list[str]) -> list[Path]:
    """Expand several patterns, keeping first-seen order and dropping repeats."""
    seen: dict[Path, None] = {}
    for pattern in patterns:
        for path in expand_pattern(root, pattern):
            seen.setdefault(path.resolve(), None)
    return list(seen)
