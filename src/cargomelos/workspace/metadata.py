"""Loading workspace packages from `cargo metadata`."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from cargomelos.cargo.client import run_cargo
from cargomelos.compat import read_toml
from cargomelos.errors import CargoError, PackageNotFoundError, WorkspaceNotFoundError
from cargomelos.workspace.package import Package

logger = logging.getLogger(__name__)

_DEPENDENCY_TABLES = ("dependencies", "build-dependencies", "dev-dependencies")


@dataclass
class WorkspaceMetadata:
    """The parts of `cargo metadata` output cargomelos uses.

    Attributes:
        root: Workspace root directory.
        packages: Workspace members, sorted by name.
        workspace_metadata: The `[workspace.metadata]` table, if any.
        member_ids: Package ids of the workspace members.
    """

    root: Path
    packages: list[Package]
    workspace_metadata: Any = None
    member_ids: list[str] = field(default_factory=list)


def load_metadata(manifest_path: Path | None = None, cwd: Path | None = None) -> WorkspaceMetadata:
    """Run `cargo metadata --no-deps` and parse the result.

    Raises:
        CargoError: If cargo fails or prints something that is not JSON.
        WorkspaceNotFoundError: If the workspace has no members.
    """
    args = ["metadata", "--no-deps", "--format-version", "1"]
    if manifest_path is not None:
        args += ["--manifest-path", str(manifest_path)]

    workdir = cwd or (manifest_path.parent if manifest_path else Path.cwd())
    stdout, stderr = run_cargo(workdir, args, echo=False)
    if not stdout:
        raise CargoError(stderr or "cargo metadata produced no output", args=args)

    try:
        data = json.loads(stdout)
    except ValueError as e:
        raise CargoError(f"invalid cargo metadata output: {e}", args=args) from e

    return parse_metadata(data)


def parse_metadata(data: dict[str, Any]) -> WorkspaceMetadata:
    """Build packages from a decoded `cargo metadata` document.

    Member ids without a package entry are reported and skipped.

    Raises:
        PackageNotFoundError: If a member lives outside the workspace root.
        WorkspaceNotFoundError: If no members remain.
    """
    root = Path(data["workspace_root"])
    by_id = {p["id"]: p for p in data.get("packages", [])}
    member_ids = list(data.get("workspace_members", []))

    packages: list[Package] = []
    for member_id in member_ids:
        pkg_data = by_id.get(member_id)
        if pkg_data is None:
            logger.warning("unable to find package with id %s", member_id)
            continue

        manifest_path = Path(pkg_data["manifest_path"])
        if not manifest_path.is_relative_to(root):
            raise PackageNotFoundError(
                pkg_data["name"],
                f"package {member_id} is not inside workspace {root}",
            )

        packages.append(
            Package.from_metadata(pkg_data, inherited=inherited_dependencies(manifest_path))
        )

    if not packages:
        raise WorkspaceNotFoundError(f"workspace at {root} has no members")

    packages.sort(key=lambda p: p.name)
    return WorkspaceMetadata(
        root=root,
        packages=packages,
        workspace_metadata=data.get("metadata"),
        member_ids=member_ids,
    )


def inherited_dependencies(manifest_path: Path) -> frozenset[str]:
    """Dependency keys declared with `workspace = true` in a manifest.

    `cargo metadata` reports inherited dependencies fully resolved, so the
    manifest itself is the only place that says they were inherited.
    """
    if not manifest_path.is_file():
        return frozenset()

    manifest = read_toml(manifest_path)
    tables = [manifest.get(name) for name in _DEPENDENCY_TABLES]
    for target in (manifest.get("target") or {}).values():
        if isinstance(target, dict):
            tables.extend(target.get(name) for name in _DEPENDENCY_TABLES)

    names = set()
    for table in tables:
        if not isinstance(table, dict):
            continue
        for key, value in table.items():
            if isinstance(value, dict) and value.get("workspace") is True:
                names.add(key)
    return frozenset(names)
