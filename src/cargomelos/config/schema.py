"""Configuration schema for cargomelos workspaces."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PackageConfig(BaseModel):
    """Per-package settings from `[package.metadata.workspaces]`.

    Attributes:
        independent: Version this package on its own instead of sharing the
            common workspace version.
    """

    model_config = ConfigDict(extra="ignore")

    independent: bool = False


class VersioningConfig(BaseModel):
    """Settings for the commit and tags created by `version`."""

    model_config = ConfigDict(extra="forbid")

    tag_prefix: str = Field(default="v", description="Prefix of the workspace-wide tag")
    individual_tag_prefix: str = Field(
        default="%n@",
        description="Prefix of per-package tags, %n is replaced by the package name",
    )
    commit_message: str = Field(
        default="Release %v",
        description="Commit message, %v is replaced by the common version",
    )
    git_remote: str = "origin"

    @field_validator("individual_tag_prefix")
    @classmethod
    def must_contain_name(cls, v: str) -> str:
        if "%n" not in v:
            raise ValueError("must contain '%n'")
        return v


class PublishConfig(BaseModel):
    """Settings for `publish`.

    Attributes:
        registry: Name of an alternative registry from the cargo config.
        poll_interval: Seconds between registry checks after an upload.
        timeout: Seconds to wait for an upload to show up in the registry.
        remove_dev_deps: Strip dev-dependencies while publishing when needed.
    """

    model_config = ConfigDict(extra="forbid")

    registry: str | None = None
    poll_interval: float = Field(default=2.0, gt=0)
    timeout: float = Field(default=300.0, gt=0)
    remove_dev_deps: bool = True


class WorkspaceConfig(BaseModel):
    """Workspace-wide settings.

    Read from `[workspace.metadata.workspaces]` in the root manifest and
    optionally overridden by a `cargomelos.yaml` next to it.
    """

    model_config = ConfigDict(extra="ignore")

    allow_branch: str | None = None
    no_individual_tags: bool = False
    versioning: VersioningConfig = Field(default_factory=VersioningConfig)
    publish: PublishConfig = Field(default_factory=PublishConfig)
