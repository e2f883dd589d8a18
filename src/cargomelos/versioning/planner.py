"""Version planning with propagation to dependents."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from semantic_version import Version

from cargomelos.errors import PackageNotFoundError
from cargomelos.versioning.semver import requirement_matches

if TYPE_CHECKING:
    from cargomelos.workspace.graph import WorkspaceGraph
    from cargomelos.workspace.package import Package

logger = logging.getLogger(__name__)

# (name, current version, independent) -> new version, or None to skip.
# name is None when deciding the common version of all non-independent packages.
Decider = Callable[[str | None, Version, bool], Version | None]


@dataclass(frozen=True)
class PlannedVersion:
    """Old and new version of a planned package."""

    old: Version
    new: Version


@dataclass
class VersionPlan:
    """New versions chosen for a set of packages.

    Attributes:
        entries: Planned versions keyed by package name, in planning order.
        common_version: Version shared by every non-independent package, if
            any of them was planned.
    """

    entries: dict[str, PlannedVersion] = field(default_factory=dict)
    common_version: Version | None = None

    def new_versions(self) -> dict[str, Version]:
        return {name: planned.new for name, planned in self.entries.items()}

    def __contains__(self, name: object) -> bool:
        return name in self.entries

    def __len__(self) -> int:
        return len(self.entries)

    def __bool__(self) -> bool:
        return bool(self.entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)


def plan_versions(
    graph: WorkspaceGraph,
    changed: Iterable[str],
    decide: Decider,
) -> VersionPlan:
    """Choose new versions for changed packages and the dependents they break.

    Changed packages are split into a common group, which gets one version
    decided against the highest current version in the group, and
    independent packages, which are decided one by one. Any unplanned package
    whose requirement on a freshly planned dependency no longer matches is
    then planned as well, until no more packages are affected.

    Args:
        graph: Workspace graph.
        changed: Names of packages that changed.
        decide: Supplies new versions.

    Returns:
        The closed version plan.

    Raises:
        PackageNotFoundError: If a changed name is not a workspace member.
        VersionError: If a version or requirement cannot be parsed.
    """
    packages = graph.packages_in_order()
    names = {p.name for p in packages}
    changed = set(changed)
    unknown = sorted(changed - names)
    if unknown:
        raise PackageNotFoundError(unknown[0])

    plan = VersionPlan()
    common: Version | None = None
    worklist = [p for p in packages if p.name in changed]

    while worklist:
        common, planned = _plan_pass(worklist, decide, plan, common)
        if not planned:
            break
        worklist = [
            p for p in packages if p.name not in plan and _requirement_broken(p, planned)
        ]
        if worklist:
            logger.debug(
                "dependents needing a new version: %s", ", ".join(p.name for p in worklist)
            )

    plan.common_version = common
    return plan


def _plan_pass(
    worklist: list[Package],
    decide: Decider,
    plan: VersionPlan,
    common: Version | None,
) -> tuple[Version | None, dict[str, Version]]:
    same = [p for p in worklist if not p.is_independent]
    independent = [p for p in worklist if p.is_independent]
    planned: dict[str, Version] = {}

    if same:
        if common is None:
            current = max(p.semver for p in same)
            logger.info("current common version %s", current)
            common = decide(None, current, False)

        if common is not None:
            for pkg in same:
                plan.entries[pkg.name] = PlannedVersion(pkg.semver, common)
                planned[pkg.name] = common

    for pkg in independent:
        new_version = decide(pkg.name, pkg.semver, True)
        if new_version is None:
            logger.info("skipping %s", pkg.name)
            continue
        plan.entries[pkg.name] = PlannedVersion(pkg.semver, new_version)
        planned[pkg.name] = new_version

    return common, planned


def _requirement_broken(pkg: Package, planned: dict[str, Version]) -> bool:
    # registry dependencies may share a member's name, only path ones count
    for dep in pkg.local_dependencies:
        # inherited requirements are edited in the root manifest
        if dep.inherited or dep.requirement is None:
            continue
        new_version = planned.get(dep.package_name)
        if new_version is not None and not requirement_matches(dep.requirement, new_version):
            return True
    return False
