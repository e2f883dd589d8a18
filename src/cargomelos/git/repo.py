"""Running git commands."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from cargomelos.errors import GitError

logger = logging.getLogger(__name__)


def run_git_command(
    args: list[str],
    cwd: Path | None = None,
    *,
    check: bool = True,
) -> subprocess.CompletedProcess[str]:
    """Run a git command synchronously.

    Args:
        args: Git command arguments (without 'git').
        cwd: Working directory.
        check: Raise on non-zero exit code.

    Returns:
        Completed process result.

    Raises:
        GitError: If git is missing, or the command fails and check is True.
    """
    cmd = ["git", *args]
    logger.debug("git %s", " ".join(args))

    try:
        result = subprocess.run(
            cmd,
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
        )
    except FileNotFoundError as e:
        raise GitError("Git is not installed") from e

    if check and result.returncode != 0:
        raise GitError(
            result.stderr.strip() or f"Command failed with exit code {result.returncode}",
            command=" ".join(cmd),
        )
    return result


def git_output(args: list[str], cwd: Path | None = None, *, check: bool = True) -> str:
    """Run a git command and return its stripped stdout."""
    return run_git_command(args, cwd, check=check).stdout.strip()


def get_current_branch(cwd: Path | None = None) -> str:
    """Get the current branch name (`HEAD` when detached)."""
    return git_output(["rev-parse", "--abbrev-ref", "HEAD"], cwd)


def get_changed_files(cwd: Path, since: str) -> list[str]:
    """Files changed since a reference, relative to `cwd`.

    Covers commits since the reference as well as uncommitted changes to
    tracked files.
    """
    output = git_output(["diff", "--name-only", "--relative", since], cwd)
    return [line for line in output.splitlines() if line]
