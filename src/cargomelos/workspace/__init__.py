"""Workspace discovery, packages and the dependency graph."""

from cargomelos.workspace.package import Dependency, DependencyKind, Package
from cargomelos.workspace.graph import WorkspaceGraph
from cargomelos.workspace.metadata import WorkspaceMetadata, load_metadata, parse_metadata
from cargomelos.workspace.workspace import Workspace, find_workspace_manifest

__all__ = [
    "Dependency",
    "DependencyKind",
    "Package",
    "Workspace",
    "WorkspaceGraph",
    "WorkspaceMetadata",
    "find_workspace_manifest",
    "load_metadata",
    "parse_metadata",
]
