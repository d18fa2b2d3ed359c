"""Local dependency graph and publish ordering."""

from __future__ import annotations

from collections.abc import Sequence

from pubz.errors import CyclicDependencyError
from pubz.workspace.package import Package


class DependencyGraph:
    """Dependency relations between a set of packages.

    Only dependencies on packages inside the set are edges. Packages outside
    the set, including ones dropped by selection, are not ordering constraints.
    """

    def __init__(self, packages: Sequence[Package]) -> None:
        self.packages = list(packages)
        self._by_name = {p.name: p for p in self.packages}

    def get_dependencies(self, name: str) -> list[Package]:
        """Direct local dependencies of ``name`` within the set."""
        pkg = self._by_name[name]
        return [self._by_name[d] for d in pkg.local_dependencies if d in self._by_name]

    def find_cycle(self) -> list[str] | None:
        """Return the first dependency cycle found, or None.

        The cycle is reported as a path that starts and ends with the same name.
        """
        visiting: list[str] = []
        done: set[str] = set()

        def visit(pkg: Package) -> list[str] | None:
            if pkg.name in done:
                return None
            if pkg.name in visiting:
                return [*visiting[visiting.index(pkg.name) :], pkg.name]
            visiting.append(pkg.name)
            for dep in self.get_dependencies(pkg.name):
                if cycle := visit(dep):
                    return cycle
            visiting.pop()
            done.add(pkg.name)
            return None

        for pkg in self.packages:
            if cycle := visit(pkg):
                return cycle
        return None

    def topological_order(self, *, strict: bool = False) -> list[Package]:
        """Order packages so every dependency precedes its dependents.

        Depth-first over the input order; unrelated packages keep their
        relative input order. A package is marked visited before its
        dependencies are walked, so a cycle is cut at the first repeated
        package and every package still appears exactly once. Ordering inside
        a cycle is arbitrary.

        Args:
            strict: Raise instead of cutting cycles.

        Raises:
            CyclicDependencyError: If ``strict`` and the set contains a cycle.
        """
        if strict and (cycle := self.find_cycle()):
            raise CyclicDependencyError(cycle)

        ordered: list[Package] = []
        visited: set[str] = set()

        def visit(pkg: Package) -> None:
            if pkg.name in visited:
                return
            visited.add(pkg.name)
            for dep in self.get_dependencies(pkg.name):
                visit(dep)
            ordered.append(pkg)

        for pkg in self.packages:
            visit(pkg)
        return ordered


def sort_by_dependency_order(
    packages: Sequence[Package], *, strict: bool = False
) -> list[Package]:
    """Return ``packages`` in publish-safe order."""
    return DependencyGraph(packages).topological_order(strict=strict)
