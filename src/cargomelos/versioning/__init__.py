"""Version bumping, planning and manifest rewriting."""

from cargomelos.versioning.manifest import change_versions, rename_packages, rewrite_manifest
from cargomelos.versioning.planner import Decider, PlannedVersion, VersionPlan, plan_versions
from cargomelos.versioning.semver import (
    BumpType,
    bump_version,
    custom_pre,
    inc_preid,
    parse_version,
    requirement_matches,
    version_choices,
)

__all__ = [
    # Semver
    "BumpType",
    "bump_version",
    "custom_pre",
    "inc_preid",
    "parse_version",
    "requirement_matches",
    "version_choices",
    # Planning
    "Decider",
    "PlannedVersion",
    "VersionPlan",
    "plan_versions",
    # Manifests
    "change_versions",
    "rename_packages",
    "rewrite_manifest",
]
