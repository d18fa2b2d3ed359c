"""Workspace discovery and dependency ordering."""

from pubz.workspace.discovery import discover_packages, load_root_manifest
from pubz.workspace.graph import DependencyGraph, sort_by_dependency_order
from pubz.workspace.manifest import PackageManifest, RootManifest
from pubz.workspace.package import Package
from pubz.workspace.workspace import Workspace

__all__ = [
    "DependencyGraph",
    "Package",
    "PackageManifest",
    "RootManifest",
    "Workspace",
    "discover_packages",
    "load_root_manifest",
    "sort_by_dependency_order",
]
