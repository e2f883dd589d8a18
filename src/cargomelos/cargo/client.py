"""Running the cargo executable."""

from __future__ import annotations

import logging
import os
import subprocess
import sys
from pathlib import Path

from cargomelos.compat import tomllib
from cargomelos.errors import CargoError

logger = logging.getLogger(__name__)


def run_cargo(
    root: Path,
    args: list[str],
    env: dict[str, str] | None = None,
    *,
    echo: bool = True,
) -> tuple[str, str]:
    """Run cargo and capture its output.

    Cargo reports success or failure of `publish` and `update` on stderr
    rather than through exit codes we can rely on, so both streams are
    returned and the caller inspects them.

    Args:
        root: Working directory.
        args: Cargo arguments (without 'cargo').
        env: Extra environment variables.
        echo: Forward cargo's stderr to our stderr.

    Returns:
        Tuple of (stdout, stderr), both stripped.

    Raises:
        CargoError: If cargo cannot be started.
    """
    cmd = ["cargo", *args]
    logger.debug("cargo %s", " ".join(args))

    try:
        result = subprocess.run(
            cmd,
            cwd=root,
            capture_output=True,
            text=True,
            env={**os.environ, **(env or {})},
            check=False,
        )
    except OSError as e:
        raise CargoError(str(e), args=args) from e

    if echo and result.stderr:
        sys.stderr.write(result.stderr)

    logger.debug("cargo stderr: %s", result.stderr.strip())
    logger.debug("cargo stdout: %s", result.stdout.strip())
    return result.stdout.strip(), result.stderr.strip()


def cargo_config_get(root: Path, name: str) -> str:
    """Read a value from cargo's configuration, e.g. `registries.foo.index`.

    `cargo config get` is unstable, so it is unlocked with `RUSTC_BOOTSTRAP`.
    That matches cargo's own config lookup (project, home, environment)
    without reimplementing it.

    Raises:
        CargoError: If the output does not contain the value.
    """
    logger.debug("cargo config get %s", name)
    stdout, _ = run_cargo(
        root,
        ["-Z", "unstable-options", "config", "get", name],
        {"RUSTC_BOOTSTRAP": "1"},
        echo=False,
    )

    try:
        value = tomllib.loads(stdout)
        for key in name.split("."):
            value = value[key]
    except (tomllib.TOMLDecodeError, KeyError, TypeError) as e:
        raise CargoError(f"unexpected output from `cargo config get {name}`: {stdout!r}") from e

    if not isinstance(value, str):
        raise CargoError(f"`{name}` in the cargo config is not a string")
    return value
