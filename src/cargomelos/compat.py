"""Compatibility helpers for reading TOML across Python versions."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

# tomllib ships with Python 3.11+, tomli provides the same API before that
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib  # type: ignore[import-not-found]

from cargomelos.errors import ManifestError


def read_toml(path: Path) -> dict[str, Any]:
    """Parse a TOML file into plain Python data.

    Only used for inspection. Manifests are never written back from this data.

    Raises:
        ManifestError: If the file is not valid TOML.
    """
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ManifestError(f"{path}: {e}") from e


__all__ = ["read_toml", "tomllib"]
