"""Package and dependency models built from `cargo metadata` output."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

from cargomelos.config import PackageConfig, load_package_config
from cargomelos.versioning.semver import parse_version

if TYPE_CHECKING:
    from semantic_version import Version


class DependencyKind(Enum):
    """Section a dependency is declared in."""

    NORMAL = "normal"
    BUILD = "build"
    DEVELOPMENT = "dev"

    @classmethod
    def from_metadata(cls, kind: str | None) -> DependencyKind:
        if kind is None:
            return cls.NORMAL
        return cls(kind)


@dataclass(frozen=True)
class Dependency:
    """A dependency declaration of a workspace package.

    Attributes:
        name: Name the dependency is declared under (the manifest key).
        kind: Dependency section.
        requirement: Version requirement as Cargo resolves it, or None for a
            path-only dependency.
        local_path: Directory of the dependency when it resolves by path.
        renamed_as: Real package name when declared with `package = "..."`.
        inherited: Declared with `workspace = true`; the requirement lives in
            the workspace root manifest.
    """

    name: str
    kind: DependencyKind = DependencyKind.NORMAL
    requirement: str | None = None
    local_path: Path | None = None
    renamed_as: str | None = None
    inherited: bool = False

    @property
    def package_name(self) -> str:
        """Name of the package this dependency refers to."""
        return self.renamed_as or self.name

    @property
    def is_local(self) -> bool:
        return self.local_path is not None

    @property
    def affects_order(self) -> bool:
        """Whether this dependency is an ordering edge."""
        return self.is_local and self.kind in (DependencyKind.NORMAL, DependencyKind.BUILD)

    @classmethod
    def from_metadata(cls, data: dict[str, Any], inherited: bool = False) -> Dependency:
        """Build from one entry of a package's `dependencies` list.

        Cargo reports the real package name as `name` and the alias, if any,
        as `rename`.
        """
        real_name = data["name"]
        alias = data.get("rename")
        requirement = data.get("req")
        if requirement in ("", "*"):
            requirement = None

        path = data.get("path")
        return cls(
            name=alias or real_name,
            kind=DependencyKind.from_metadata(data.get("kind")),
            requirement=requirement,
            local_path=Path(path) if path else None,
            renamed_as=real_name if alias else None,
            inherited=inherited,
        )


@dataclass
class Package:
    """A workspace member.

    `manifest_path` identifies the package; names are unique among members
    but registry dependencies can share them.
    """

    name: str
    version: str
    manifest_path: Path
    dependencies: list[Dependency] = field(default_factory=list)
    is_private: bool = False
    config: PackageConfig = field(default_factory=PackageConfig)
    description: str | None = None
    license: str | None = None
    license_file: str | None = None
    homepage: str | None = None
    documentation: str | None = None
    repository: str | None = None
    keywords: list[str] = field(default_factory=list)
    publish_registries: list[str] | None = None

    @property
    def path(self) -> Path:
        """Directory containing the manifest."""
        return self.manifest_path.parent

    @property
    def is_independent(self) -> bool:
        return self.config.independent

    @property
    def semver(self) -> Version:
        return parse_version(self.version)

    @property
    def local_dependencies(self) -> list[Dependency]:
        return [d for d in self.dependencies if d.is_local]

    @classmethod
    def from_metadata(
        cls,
        data: dict[str, Any],
        inherited: frozenset[str] = frozenset(),
    ) -> Package:
        """Build a package from one `cargo metadata` package object.

        Args:
            data: Package object from `cargo metadata --format-version 1`.
            inherited: Declared dependency names that use `workspace = true`.
        """
        name = data["name"]
        deps = [
            Dependency.from_metadata(d, inherited=(d.get("rename") or d["name"]) in inherited)
            for d in data.get("dependencies", [])
        ]
        publish = data.get("publish")

        return cls(
            name=name,
            version=data["version"],
            manifest_path=Path(data["manifest_path"]),
            dependencies=deps,
            is_private=publish is not None and len(publish) == 0,
            config=load_package_config(data.get("metadata"), name),
            description=data.get("description"),
            license=data.get("license"),
            license_file=data.get("license_file"),
            homepage=data.get("homepage"),
            documentation=data.get("documentation"),
            repository=data.get("repository"),
            keywords=list(data.get("keywords") or []),
            publish_registries=publish,
        )
