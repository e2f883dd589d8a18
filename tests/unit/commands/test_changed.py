"""Tests for changed command."""

from __future__ import annotations

import io
from unittest.mock import patch

import pytest
import typer
from rich.console import Console

from cargomelos.commands.base import CommandContext
from cargomelos.commands.changed import (
    ChangedCommand,
    ChangedOptions,
    changed_packages,
    handle_changed_command,
)
from cargomelos.errors import GitError
from cargomelos.git import ChangeData
from cargomelos.workspace import Workspace


def make_console() -> Console:
    return Console(file=io.StringIO(), width=200)


class TestChangedCommand:
    """Tests for ChangedCommand."""

    def test_since_last_tag(self, workspace: Workspace) -> None:
        util = workspace.get_package("util")

        with (
            patch("cargomelos.commands.changed.describe") as mock_describe,
            patch("cargomelos.commands.changed.get_changed_packages") as mock_changed,
        ):
            mock_describe.return_value = ChangeData(since="v1.0.0", count="2", sha="abc1234")
            mock_changed.return_value = ([util], [])

            result = ChangedCommand(CommandContext(workspace=workspace)).execute()

        assert result.since == "v1.0.0"
        assert [p.name for p in result.changed] == ["util"]
        assert not result.released
        mock_describe.assert_called_once_with(workspace.root, False)
        assert mock_changed.call_args[0] == (workspace, "v1.0.0")

    def test_head_already_released(self, workspace: Workspace) -> None:
        with (
            patch("cargomelos.commands.changed.describe") as mock_describe,
            patch("cargomelos.commands.changed.get_changed_packages") as mock_changed,
        ):
            mock_describe.return_value = ChangeData(since="v1.0.0", count="0", sha="abc1234")

            result = ChangedCommand(CommandContext(workspace=workspace)).execute()

        assert result.released
        assert result.changed == []
        mock_changed.assert_not_called()

    def test_explicit_since_skips_describe(self, workspace: Workspace) -> None:
        options = ChangedOptions(since="HEAD~2", force="util", ignore_changes="*.md", all=True)

        with (
            patch("cargomelos.commands.changed.describe") as mock_describe,
            patch("cargomelos.commands.changed.get_changed_packages") as mock_changed,
        ):
            mock_changed.return_value = ([], [])
            ChangedCommand(CommandContext(workspace=workspace), options).execute()

        mock_describe.assert_not_called()
        mock_changed.assert_called_once_with(
            workspace, "HEAD~2", force="util", ignore_changes="*.md", include_private=True
        )

    def test_never_released(self, workspace: Workspace) -> None:
        with (
            patch("cargomelos.commands.changed.describe") as mock_describe,
            patch("cargomelos.commands.changed.get_changed_packages") as mock_changed,
        ):
            mock_describe.return_value = ChangeData(sha="abc1234", count="4")
            mock_changed.return_value = ([], [])

            result = changed_packages(workspace, include_merged_tags=True)

        assert result.since is None
        mock_describe.assert_called_once_with(workspace.root, True)
        assert mock_changed.call_args[0] == (workspace, None)


class TestHandleChangedCommand:
    """Tests for handle_changed_command output."""

    def test_prints_changed(self, workspace: Workspace) -> None:
        console = make_console()
        util = workspace.get_package("util")

        with patch("cargomelos.commands.changed.get_changed_packages", return_value=([util], [])):
            handle_changed_command(
                workspace, console=console, error_console=make_console(), since="v1.0.0"
            )

        assert console.file.getvalue().strip() == "util"  # type: ignore[attr-defined]

    def test_released_message(self, workspace: Workspace) -> None:
        console = make_console()

        with patch("cargomelos.commands.changed.describe", return_value=ChangeData(count="0")):
            handle_changed_command(workspace, console=console, error_console=make_console())

        assert "already released" in console.file.getvalue()  # type: ignore[attr-defined]

    def test_git_error(self, workspace: Workspace) -> None:
        error_console = make_console()

        with (
            patch("cargomelos.commands.changed.get_changed_packages", side_effect=GitError("bad ref")),
            pytest.raises(typer.Exit),
        ):
            handle_changed_command(
                workspace, console=make_console(), error_console=error_console, since="nope"
            )

        assert "Error: bad ref" in error_console.file.getvalue()  # type: ignore[attr-defined]
