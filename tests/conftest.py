"""Shared test fixtures for cargomelos tests."""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest

from cargomelos.workspace import Dependency, DependencyKind, Package, Workspace, parse_metadata

ROOT_MANIFEST = """\
[workspace]
members = ["crates/*"]
resolver = "2"

[workspace.package]
version = "1.0.0"
edition = "2021"

[workspace.dependencies]
serde = "1.0"
"""

CORE_MANIFEST = """\
[package]
name = "core-lib"
version = "1.0.0" # the common version
edition.workspace = true
description = "Core types"
license = "MIT"

[dependencies]
serde = { workspace = true }
"""

UTIL_MANIFEST = """\
[package]
name = "util"
version = "1.0.0"
description = "Utilities"
license = "MIT"

[dependencies]
core-lib = { path = "../core", version = "1.0.0" }
"""

APP_MANIFEST = """\
[package]
name = "app"
version = "0.3.0"
description = "The application"
license = "MIT"

[package.metadata.workspaces]
independent = true

[dependencies]
util = { path = "../util", version = "1.0" }

[dev-dependencies]
core-lib = { path = "../core", version = "1.0.0" }
"""

INTERNAL_MANIFEST = """\
[package]
name = "internal"
version = "1.0.0"
publish = false

[dependencies]
core-lib = { path = "../core", version = "1" }
"""

MANIFESTS = {
    "core": CORE_MANIFEST,
    "util": UTIL_MANIFEST,
    "app": APP_MANIFEST,
    "internal": INTERNAL_MANIFEST,
}


def dependency_data(
    name: str,
    req: str = "*",
    *,
    kind: str | None = None,
    path: Path | None = None,
    rename: str | None = None,
) -> dict[str, Any]:
    """A dependency entry shaped like `cargo metadata` output."""
    return {
        "name": name,
        "source": None if path else "registry+https://github.com/rust-lang/crates.io-index",
        "req": req,
        "kind": kind,
        "rename": rename,
        "optional": False,
        "uses_default_features": True,
        "features": [],
        "target": None,
        "registry": None,
        "path": str(path) if path else None,
    }


def package_data(
    name: str,
    version: str,
    manifest_path: Path,
    dependencies: list[dict[str, Any]] | None = None,
    *,
    publish: list[str] | None = None,
    metadata: dict[str, Any] | None = None,
    **extra: Any,
) -> dict[str, Any]:
    """A package object shaped like `cargo metadata` output."""
    data = {
        "name": name,
        "version": version,
        "id": f"path+file://{manifest_path.parent}#{name}@{version}",
        "manifest_path": str(manifest_path),
        "dependencies": dependencies or [],
        "publish": publish,
        "metadata": metadata,
        "description": None,
        "license": None,
        "license_file": None,
        "homepage": None,
        "documentation": None,
        "repository": None,
        "keywords": [],
    }
    data.update(extra)
    return data


def workspace_metadata(root: Path, packages: list[dict[str, Any]], **extra: Any) -> dict[str, Any]:
    """A `cargo metadata` document for the given packages."""
    data = {
        "packages": packages,
        "workspace_members": [p["id"] for p in packages],
        "workspace_root": str(root),
        "target_directory": str(root / "target"),
        "metadata": None,
        "version": 1,
    }
    data.update(extra)
    return data


def make_package(
    name: str,
    version: str = "1.0.0",
    deps: list[Dependency] | None = None,
    *,
    root: Path = Path("/ws"),
    independent: bool = False,
    private: bool = False,
) -> Package:
    """An in-memory package living in `<root>/<name>`."""
    from cargomelos.config import PackageConfig

    return Package(
        name=name,
        version=version,
        manifest_path=root / name / "Cargo.toml",
        dependencies=deps or [],
        is_private=private,
        config=PackageConfig(independent=independent),
    )


def path_dep(
    name: str,
    requirement: str | None = None,
    *,
    root: Path = Path("/ws"),
    directory: str | None = None,
    kind: DependencyKind = DependencyKind.NORMAL,
    renamed_as: str | None = None,
    inherited: bool = False,
) -> Dependency:
    """A path dependency on `<root>/<directory or name>`."""
    return Dependency(
        name=name,
        kind=kind,
        requirement=requirement,
        local_path=root / (directory or renamed_as or name),
        renamed_as=renamed_as,
        inherited=inherited,
    )


@pytest.fixture
def cargo_workspace_dir(tmp_path: Path) -> Path:
    """A virtual Cargo workspace with four members on disk."""
    (tmp_path / "Cargo.toml").write_text(ROOT_MANIFEST)
    for directory, manifest in MANIFESTS.items():
        crate = tmp_path / "crates" / directory
        (crate / "src").mkdir(parents=True)
        (crate / "Cargo.toml").write_text(manifest)
        (crate / "src" / "lib.rs").write_text("")
    return tmp_path


@pytest.fixture
def cargo_metadata(cargo_workspace_dir: Path) -> dict[str, Any]:
    """`cargo metadata` output matching `cargo_workspace_dir`."""
    root = cargo_workspace_dir
    crates = root / "crates"

    def manifest(directory: str) -> Path:
        return crates / directory / "Cargo.toml"

    packages = [
        package_data(
            "core-lib",
            "1.0.0",
            manifest("core"),
            [dependency_data("serde", "^1.0")],
            description="Core types",
            license="MIT",
        ),
        package_data(
            "util",
            "1.0.0",
            manifest("util"),
            [dependency_data("core-lib", "^1.0.0", path=crates / "core")],
            description="Utilities",
            license="MIT",
        ),
        package_data(
            "app",
            "0.3.0",
            manifest("app"),
            [
                dependency_data("util", "^1.0", path=crates / "util"),
                dependency_data("core-lib", "^1.0.0", kind="dev", path=crates / "core"),
            ],
            metadata={"workspaces": {"independent": True}},
            description="The application",
            license="MIT",
        ),
        package_data(
            "internal",
            "1.0.0",
            manifest("internal"),
            [dependency_data("core-lib", "^1", path=crates / "core")],
            publish=[],
        ),
    ]
    return workspace_metadata(root, packages)


@pytest.fixture
def workspace(cargo_metadata: dict[str, Any]) -> Workspace:
    """Workspace loaded from `cargo_metadata` without running cargo."""
    return Workspace(parse_metadata(cargo_metadata))


def git(cwd: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", *args], cwd=cwd, capture_output=True, text=True, check=True
    )
    return result.stdout.strip()


@pytest.fixture
def git_workspace_dir(cargo_workspace_dir: Path) -> Path:
    """`cargo_workspace_dir` as a git repository with one commit."""
    git(cargo_workspace_dir, "init", "-q", "-b", "master")
    git(cargo_workspace_dir, "config", "user.email", "test@test.com")
    git(cargo_workspace_dir, "config", "user.name", "Test")
    git(cargo_workspace_dir, "config", "commit.gpgsign", "false")
    git(cargo_workspace_dir, "add", "-A")
    git(cargo_workspace_dir, "commit", "-q", "-m", "Initial commit")
    return cargo_workspace_dir


@pytest.fixture(autouse=True)
def reset_cargomelos_logger() -> Iterator[None]:
    """Undo logging set up by CLI invocations so caplog keeps working."""
    yield
    logger = logging.getLogger("cargomelos")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
