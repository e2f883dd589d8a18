"""Temporarily stripping dev-dependencies from a manifest while publishing."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from pathlib import Path

import tomlkit
from tomlkit.exceptions import TOMLKitError

from cargomelos.errors import ManifestError
from cargomelos.workspace.package import DependencyKind, Package

logger = logging.getLogger(__name__)

DEV_DEPENDENCIES = "dev-dependencies"


def strip_dev_dependencies(text: str) -> str:
    """Remove every `dev-dependencies` table, including target-specific ones.

    Raises:
        ManifestError: If the manifest is not valid TOML.
    """
    try:
        doc = tomlkit.parse(text)
    except TOMLKitError as e:
        raise ManifestError(f"unable to parse manifest: {e}") from e

    if DEV_DEPENDENCIES in doc:
        del doc[DEV_DEPENDENCIES]

    targets = doc.get("target")
    if isinstance(targets, dict):
        for target in targets.values():
            if isinstance(target, dict) and DEV_DEPENDENCIES in target:
                del target[DEV_DEPENDENCIES]

    return tomlkit.dumps(doc)


@contextmanager
def remove_dev_dependencies(manifest_path: Path) -> Iterator[None]:
    """Strip dev-dependencies for the duration of the block.

    The original bytes are written back when the block exits, whether it
    returns or raises.

    Raises:
        ManifestError: If the manifest is not valid TOML.
    """
    original = manifest_path.read_bytes()
    stripped = strip_dev_dependencies(original.decode("utf-8"))

    try:
        manifest_path.write_bytes(stripped.encode("utf-8"))
        yield
    finally:
        manifest_path.write_bytes(original)
        logger.debug("restored %s", manifest_path)


def should_remove_dev_deps(package: Package, members: Iterable[Package]) -> bool:
    """Whether publishing needs dev-dependencies removed first.

    Cargo refuses to publish when a dev-dependency points at a workspace
    member by path and also carries a version requirement, because that
    version may not be in the registry yet.
    """
    member_dirs = {os.path.normpath(m.path) for m in members}
    for dep in package.dependencies:
        if dep.kind is not DependencyKind.DEVELOPMENT or dep.local_path is None:
            continue
        if dep.requirement is not None and os.path.normpath(dep.local_path) in member_dirs:
            return True
    return False
