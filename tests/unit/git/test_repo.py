"""Test git repo utilities."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from cargomelos.errors import GitError
from cargomelos.git.repo import (
    get_changed_files,
    get_current_branch,
    git_output,
    run_git_command,
)


def test_run_git_command_success() -> None:
    with patch("subprocess.run") as mock_run:
        mock_run.return_value = MagicMock(returncode=0, stdout="output", stderr="")

        result = run_git_command(["status"], cwd=Path("."))

        assert result.returncode == 0
        assert result.stdout == "output"
        assert mock_run.call_args[0][0] == ["git", "status"]
        assert mock_run.call_args[1]["check"] is False


def test_run_git_command_failure() -> None:
    with patch("subprocess.run") as mock_run:
        mock_run.return_value = MagicMock(returncode=1, stdout="", stderr="fatal: bad revision\n")

        with pytest.raises(GitError, match="fatal: bad revision") as exc_info:
            run_git_command(["log", "nope"])

        assert exc_info.value.command == "git log nope"


def test_run_git_command_failure_without_stderr() -> None:
    with patch("subprocess.run") as mock_run:
        mock_run.return_value = MagicMock(returncode=3, stdout="", stderr="")

        with pytest.raises(GitError, match="exit code 3"):
            run_git_command(["status"])


def test_run_git_command_unchecked() -> None:
    with patch("subprocess.run") as mock_run:
        mock_run.return_value = MagicMock(returncode=128, stdout="", stderr="fatal")

        result = run_git_command(["describe"], check=False)

        assert result.returncode == 128


def test_run_git_command_git_missing() -> None:
    with patch("subprocess.run", side_effect=FileNotFoundError("git")):
        with pytest.raises(GitError, match="Git is not installed"):
            run_git_command(["status"])


def test_git_output_strips() -> None:
    with patch("cargomelos.git.repo.run_git_command") as mock_run:
        mock_run.return_value = MagicMock(stdout="  main\n")
        assert git_output(["branch"]) == "main"


def test_get_current_branch() -> None:
    with patch("cargomelos.git.repo.run_git_command") as mock_run:
        mock_run.return_value = MagicMock(stdout="master\n")

        assert get_current_branch(Path(".")) == "master"
        assert mock_run.call_args[0][0] == ["rev-parse", "--abbrev-ref", "HEAD"]


def test_get_changed_files() -> None:
    with patch("cargomelos.git.repo.run_git_command") as mock_run:
        mock_run.return_value = MagicMock(stdout="crates/a/src/lib.rs\n\nCargo.lock\n")

        files = get_changed_files(Path("/ws"), "v1.0.0")

        assert files == ["crates/a/src/lib.rs", "Cargo.lock"]
        assert mock_run.call_args[0][0] == ["diff", "--name-only", "--relative", "v1.0.0"]


def test_get_changed_files_none() -> None:
    with patch("cargomelos.git.repo.run_git_command") as mock_run:
        mock_run.return_value = MagicMock(stdout="")
        assert get_changed_files(Path("/ws"), "HEAD") == []
