"""Dependency graph of workspace packages."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Iterator
from pathlib import Path

from cargomelos.errors import CyclicDependencyError, PackageNotFoundError
from cargomelos.workspace.package import Package

logger = logging.getLogger(__name__)


def _normalize(path: Path) -> Path:
    return Path(os.path.normpath(path))


class WorkspaceGraph:
    """Packages keyed by manifest path, with local dependency edges.

    Only dependencies that resolve to a workspace member by path and are
    normal or build dependencies become edges. Registry dependencies that
    happen to share a member's name never do.

    Attributes:
        order: Manifest paths in topological order, dependencies first.
        index: Manifest path to package.
    """

    def __init__(
        self,
        order: list[Path],
        index: dict[Path, Package],
        edges: dict[Path, list[Path]],
    ) -> None:
        self.order = order
        self.index = index
        self._edges = edges
        self._by_name = {p.name: p for p in index.values()}

    @classmethod
    def build(cls, packages: Iterable[Package]) -> WorkspaceGraph:
        """Build the graph and a processing order.

        Packages are visited in the given order; each package's local
        dependencies are appended before the package itself.

        Raises:
            CyclicDependencyError: If local dependencies form a cycle.
        """
        packages = list(packages)
        index = {_normalize(p.manifest_path): p for p in packages}
        by_dir = {_normalize(p.path): p for p in packages}
        by_name = {p.name: p for p in packages}

        edges: dict[Path, list[Path]] = {}
        for key, pkg in index.items():
            targets: list[Path] = []
            for dep in pkg.dependencies:
                if not dep.affects_order or dep.local_path is None:
                    continue
                target = _resolve(dep.local_path, dep.package_name, by_dir, by_name)
                if target is None:
                    logger.warning(
                        "dependency %s of %s is not a workspace member, skipping",
                        dep.name,
                        pkg.name,
                    )
                    continue
                target_key = _normalize(target.manifest_path)
                if target_key not in targets:
                    targets.append(target_key)
            edges[key] = targets

        order = _topological_order(list(index), edges, index)
        return cls(order, index, edges)

    def __len__(self) -> int:
        return len(self.index)

    def __iter__(self) -> Iterator[Package]:
        return iter(self.packages_in_order())

    def packages_in_order(self) -> list[Package]:
        return [self.index[key] for key in self.order]

    def filter_publishable(self, order: list[Path] | None = None) -> list[Path]:
        """Drop private packages from an order, keeping the rest in place."""
        keys = self.order if order is None else order
        return [key for key in keys if not self.index[_normalize(key)].is_private]

    def get_package(self, name: str) -> Package:
        """Get a member by name.

        Raises:
            PackageNotFoundError: If no member has that name.
        """
        try:
            return self._by_name[name]
        except KeyError:
            raise PackageNotFoundError(name) from None

    def get_dependencies(self, name: str) -> list[Package]:
        """Direct local dependencies of a package."""
        key = _normalize(self.get_package(name).manifest_path)
        return [self.index[k] for k in self._edges[key]]

    def get_dependents(self, name: str) -> list[Package]:
        """Members that directly depend on a package."""
        key = _normalize(self.get_package(name).manifest_path)
        return [self.index[k] for k in self.order if key in self._edges[k]]


def _resolve(
    local_path: Path,
    package_name: str,
    by_dir: dict[Path, Package],
    by_name: dict[str, Package],
) -> Package | None:
    target = by_dir.get(_normalize(local_path))
    if target is None:
        target = by_name.get(package_name)
    return target


def _topological_order(
    keys: list[Path],
    edges: dict[Path, list[Path]],
    index: dict[Path, Package],
) -> list[Path]:
    # Depth-first with an explicit stack so deep graphs cannot hit the
    # recursion limit.
    order: list[Path] = []
    visited: set[Path] = set()

    for root in keys:
        if root in visited:
            continue

        path = [root]
        on_path = {root}
        stack = [(root, iter(edges[root]))]

        while stack:
            node, children = stack[-1]
            for child in children:
                if child in visited:
                    continue
                if child in on_path:
                    cycle = path[path.index(child) :] + [child]
                    raise CyclicDependencyError([index[k].name for k in cycle])
                path.append(child)
                on_path.add(child)
                stack.append((child, iter(edges[child])))
                break
            else:
                stack.pop()
                path.pop()
                on_path.discard(node)
                visited.add(node)
                order.append(node)

    return order
