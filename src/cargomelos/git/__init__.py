"""Git integration."""

from cargomelos.git.changes import ChangeData, describe, get_changed_packages
from cargomelos.git.release import GitOptions
from cargomelos.git.repo import (
    get_changed_files,
    get_current_branch,
    git_output,
    run_git_command,
)

__all__ = [
    "ChangeData",
    "GitOptions",
    "describe",
    "get_changed_files",
    "get_changed_packages",
    "get_current_branch",
    "git_output",
    "run_git_command",
]
