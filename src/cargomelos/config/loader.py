"""Configuration loading."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from cargomelos.config.schema import PackageConfig, WorkspaceConfig
from cargomelos.errors import ConfigurationError

CONFIG_FILENAME = "cargomelos.yaml"


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge two mappings, values from override win."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _workspaces_section(metadata: Any, source: str) -> dict[str, Any]:
    if metadata is None:
        return {}
    if not isinstance(metadata, dict):
        raise ConfigurationError("metadata must be a table", path=source)
    section = metadata.get("workspaces") or {}
    if not isinstance(section, dict):
        raise ConfigurationError("metadata.workspaces must be a table", path=source)
    return section


def load_yaml_config(path: Path) -> dict[str, Any]:
    """Load a cargomelos.yaml file.

    Args:
        path: Path to the YAML file.

    Returns:
        Parsed mapping (empty if the file is empty).

    Raises:
        ConfigurationError: If the file is not valid YAML or not a mapping.
    """
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigurationError(f"invalid YAML: {e}", path=str(path)) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError("configuration must be a mapping", path=str(path))
    return data


def load_config(root: Path, workspace_metadata: Any = None) -> WorkspaceConfig:
    """Load the workspace configuration.

    Settings from `[workspace.metadata.workspaces]` are applied first, then
    overridden by `cargomelos.yaml` at the workspace root when present.

    Args:
        root: Workspace root directory.
        workspace_metadata: The `metadata` table of the workspace, as reported
            by `cargo metadata`.

    Returns:
        Validated workspace configuration.

    Raises:
        ConfigurationError: If any source holds invalid settings.
    """
    data = _workspaces_section(workspace_metadata, "workspace.metadata")

    config_path = root / CONFIG_FILENAME
    if config_path.is_file():
        data = _merge(data, load_yaml_config(config_path))

    try:
        return WorkspaceConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(str(e), path=str(config_path)) from e


def load_package_config(package_metadata: Any, name: str) -> PackageConfig:
    """Load `[package.metadata.workspaces]` for a single package.

    Raises:
        ConfigurationError: If the settings are invalid.
    """
    data = _workspaces_section(package_metadata, f"{name} package.metadata")
    try:
        return PackageConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(str(e), path=f"{name} package.metadata.workspaces") from e
