"""cargomelos - release manager for Cargo workspaces.

A Melos-like release tool for Rust workspaces, providing:
- Workspace discovery from `cargo metadata`
- Publishing order along local path dependencies
- Version planning that follows broken requirements to dependents
- Manifest rewriting that keeps comments and formatting intact
- Git tagging and crate publishing
"""

from cargomelos.config import WorkspaceConfig, load_config
from cargomelos.errors import (
    BuildError,
    CargoError,
    CargoMelosError,
    ConfigurationError,
    CyclicDependencyError,
    GitError,
    ManifestError,
    PackageNotFoundError,
    PromptCancelledError,
    PublishError,
    PublishTimeoutError,
    RegistryError,
    UpdateError,
    VersionError,
    WorkspaceNotFoundError,
)
from cargomelos.versioning import VersionPlan, plan_versions, rewrite_manifest
from cargomelos.workspace import Package, Workspace, WorkspaceGraph

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Core
    "Workspace",
    "Package",
    "WorkspaceGraph",
    "WorkspaceConfig",
    "load_config",
    "VersionPlan",
    "plan_versions",
    "rewrite_manifest",
    # Errors
    "CargoMelosError",
    "ConfigurationError",
    "WorkspaceNotFoundError",
    "ManifestError",
    "PackageNotFoundError",
    "CyclicDependencyError",
    "VersionError",
    "CargoError",
    "UpdateError",
    "BuildError",
    "PublishError",
    "PublishTimeoutError",
    "RegistryError",
    "GitError",
    "PromptCancelledError",
]
