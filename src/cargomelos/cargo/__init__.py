"""Cargo process, registry and publish helpers."""

from cargomelos.cargo.checks import basic_checks
from cargomelos.cargo.client import cargo_config_get, run_cargo
from cargomelos.cargo.dev_deps import remove_dev_dependencies, should_remove_dev_deps
from cargomelos.cargo.registry import RegistryClient, index_path, registry_index_url

__all__ = [
    "RegistryClient",
    "basic_checks",
    "cargo_config_get",
    "index_path",
    "registry_index_url",
    "remove_dev_dependencies",
    "run_cargo",
    "should_remove_dev_deps",
]
