"""Workspace discovery."""

from __future__ import annotations

from pathlib import Path

from cargomelos.compat import read_toml
from cargomelos.config import WorkspaceConfig, load_config
from cargomelos.errors import ManifestError, WorkspaceNotFoundError
from cargomelos.workspace.graph import WorkspaceGraph
from cargomelos.workspace.metadata import WorkspaceMetadata, load_metadata
from cargomelos.workspace.package import Package

MANIFEST_NAME = "Cargo.toml"


def find_workspace_manifest(start: Path) -> Path:
    """Find the manifest of the workspace containing a directory.

    Walks up from `start` and returns the nearest `Cargo.toml` that has a
    `[workspace]` table, falling back to the nearest manifest at all (a
    single package is its own workspace).

    Raises:
        WorkspaceNotFoundError: If no manifest exists above `start`.
        ManifestError: If a manifest has a `workspace` key that is not a table.
    """
    start = start.resolve()
    nearest: Path | None = None

    for directory in (start, *start.parents):
        candidate = directory / MANIFEST_NAME
        if not candidate.is_file():
            continue
        if nearest is None:
            nearest = candidate

        workspace = read_toml(candidate).get("workspace")
        if workspace is None:
            continue
        if not isinstance(workspace, dict):
            raise ManifestError(f"`workspace` in {candidate} is not a table")
        return candidate

    if nearest is None:
        raise WorkspaceNotFoundError(f"could not find {MANIFEST_NAME} in {start} or any parent")
    return nearest


class Workspace:
    """A Cargo workspace: its members, dependency graph and settings."""

    def __init__(self, metadata: WorkspaceMetadata, config: WorkspaceConfig | None = None) -> None:
        self.metadata = metadata
        self.root = metadata.root
        self.config = config or load_config(metadata.root, metadata.workspace_metadata)
        self.graph = WorkspaceGraph.build(metadata.packages)
        self.packages: dict[str, Package] = {p.name: p for p in metadata.packages}

    @classmethod
    def discover(cls, path: Path | None = None, manifest_path: Path | None = None) -> Workspace:
        """Load the workspace containing `path` (default: current directory).

        Args:
            path: Directory to start searching from.
            manifest_path: Explicit manifest, skips the search.

        Raises:
            WorkspaceNotFoundError: If no workspace can be found.
            ManifestError: If the root manifest is malformed.
            CargoError: If `cargo metadata` fails.
            ConfigurationError: If the workspace settings are invalid.
        """
        if manifest_path is None:
            manifest_path = find_workspace_manifest(path or Path.cwd())
        return cls(load_metadata(manifest_path))

    @property
    def root_manifest(self) -> Path:
        return self.root / MANIFEST_NAME

    def get_package(self, name: str) -> Package:
        return self.graph.get_package(name)

    def root_member(self) -> Package | None:
        """The package whose manifest is the root manifest, if any."""
        for pkg in self.packages.values():
            if pkg.manifest_path == self.root_manifest:
                return pkg
        return None
