"""Detecting which packages changed since the last release."""

from __future__ import annotations

import fnmatch
import logging
import re
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING

from cargomelos.git.repo import get_changed_files, git_output

if TYPE_CHECKING:
    from cargomelos.workspace.package import Package
    from cargomelos.workspace.workspace import Workspace

logger = logging.getLogger(__name__)

SHA_PATTERN = re.compile(r"^([0-9a-f]{7,40})(-dirty)?$")
TAG_PATTERN = re.compile(r"^((?:.*@)?v?(.*))-(\d+)-g([0-9a-f]{7,40})(-dirty)?$")


@dataclass
class ChangeData:
    """What `git describe` says about HEAD.

    Attributes:
        since: Latest reachable tag, if any.
        version: Version part of that tag.
        sha: Abbreviated HEAD commit.
        count: Commits since the tag (or since the root when untagged).
        dirty: Whether the working tree has uncommitted changes.
    """

    since: str | None = None
    version: str | None = None
    sha: str = ""
    count: str = ""
    dirty: bool = False

    @property
    def is_released(self) -> bool:
        """HEAD is exactly the last tagged release with a clean tree."""
        return self.count == "0" and not self.dirty


def describe(root: Path, include_merged_tags: bool = False) -> ChangeData:
    """Describe HEAD relative to the most recent tag.

    Args:
        root: Repository directory.
        include_merged_tags: Also consider tags reachable only through merged
            branches.
    """
    args = ["describe", "--always", "--long", "--dirty", "--tags"]
    if not include_merged_tags:
        args.append("--first-parent")

    description = git_output(args, root, check=False)

    if (m := SHA_PATTERN.match(description)) is not None:
        sha = m.group(1)
        return ChangeData(
            sha=sha,
            dirty=m.group(2) is not None,
            count=git_output(["rev-list", "--count", sha], root, check=False),
        )

    if (m := TAG_PATTERN.match(description)) is not None:
        return ChangeData(
            since=m.group(1),
            version=m.group(2),
            count=m.group(3),
            sha=m.group(4),
            dirty=m.group(5) is not None,
        )

    return ChangeData()


def _touches(file_path: str, package_dir: PurePosixPath) -> bool:
    parts = PurePosixPath(file_path).parts
    return parts[: len(package_dir.parts)] == package_dir.parts


def get_changed_packages(
    workspace: Workspace,
    since: str | None,
    *,
    force: str | None = None,
    ignore_changes: str | None = None,
    include_private: bool = False,
) -> tuple[list[Package], list[Package]]:
    """Split workspace packages into changed and unchanged ones.

    Args:
        workspace: Workspace to inspect.
        since: Reference to diff against. None means no release exists yet,
            so every package counts as changed.
        force: Glob of package names that always count as changed.
        ignore_changes: Glob of file paths whose changes are ignored.
        include_private: Consider private packages too.

    Returns:
        Tuple of (changed, unchanged) packages, each sorted by name.
    """
    packages = sorted(workspace.packages.values(), key=lambda p: p.name)
    if not include_private:
        packages = [p for p in packages if not p.is_private]

    if since is None:
        return packages, []

    logger.info("looking for changes since %s", since)
    changed_files = get_changed_files(workspace.root, since)
    if ignore_changes:
        changed_files = [f for f in changed_files if not fnmatch.fnmatchcase(f, ignore_changes)]

    changed: list[Package] = []
    unchanged: list[Package] = []
    for pkg in packages:
        package_dir = PurePosixPath(pkg.path.relative_to(workspace.root).as_posix())
        if force and fnmatch.fnmatchcase(pkg.name, force):
            changed.append(pkg)
        elif any(_touches(f, package_dir) for f in changed_files):
            changed.append(pkg)
        else:
            unchanged.append(pkg)

    return changed, unchanged
