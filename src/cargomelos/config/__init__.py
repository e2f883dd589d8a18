"""Configuration loading and schema."""

from cargomelos.config.loader import CONFIG_FILENAME, load_config, load_package_config
from cargomelos.config.schema import (
    PackageConfig,
    PublishConfig,
    VersioningConfig,
    WorkspaceConfig,
)

__all__ = [
    "CONFIG_FILENAME",
    "load_config",
    "load_package_config",
    "PackageConfig",
    "PublishConfig",
    "VersioningConfig",
    "WorkspaceConfig",
]
