"""Changed command implementation."""

from __future__ import annotations

from dataclasses import dataclass

import typer
from rich.console import Console

from cargomelos.cli.output.table import print_packages
from cargomelos.commands.base import CommandContext, SyncCommand
from cargomelos.commands.list import PackageInfo
from cargomelos.errors import CargoMelosError
from cargomelos.git import describe, get_changed_packages
from cargomelos.workspace.workspace import Workspace


@dataclass
class ChangedResult:
    """Result of changed command.

    Attributes:
        since: Reference the changes were computed against, None when
            nothing was released yet.
        changed: Changed packages, sorted by name.
        released: HEAD is already the last release, nothing was inspected.
    """

    since: str | None
    changed: list[PackageInfo]
    released: bool = False


@dataclass
class ChangedOptions:
    """Options for changed command."""

    since: str | None = None
    include_merged_tags: bool = False
    force: str | None = None
    ignore_changes: str | None = None
    all: bool = False


class ChangedCommand(SyncCommand[ChangedResult]):
    """List packages that have changed since the last tagged release."""

    def __init__(self, context: CommandContext, options: ChangedOptions | None = None) -> None:
        super().__init__(context)
        self.options = options or ChangedOptions()

    def execute(self) -> ChangedResult:
        """Execute the changed command."""
        since = self.options.since

        if since is None:
            change_data = describe(self.workspace.root, self.options.include_merged_tags)
            if change_data.count == "0":
                return ChangedResult(since=None, changed=[], released=True)
            since = change_data.since

        changed, _ = get_changed_packages(
            self.workspace,
            since,
            force=self.options.force,
            ignore_changes=self.options.ignore_changes,
            include_private=self.options.all,
        )

        return ChangedResult(
            since=since,
            changed=[PackageInfo.from_package(self.workspace, pkg) for pkg in changed],
        )


def changed_packages(
    workspace: Workspace,
    *,
    since: str | None = None,
    include_merged_tags: bool = False,
    force: str | None = None,
    ignore_changes: str | None = None,
    all: bool = False,
) -> ChangedResult:
    """Convenience function to get changed packages.

    Args:
        workspace: Workspace to check.
        since: Git reference to use instead of the last tag.
        include_merged_tags: Also consider tags from merged branches.
        force: Glob of package names that always count as changed.
        ignore_changes: Glob of files whose changes are ignored.
        all: Include private packages.

    Returns:
        Changed result.
    """
    context = CommandContext(workspace=workspace)
    options = ChangedOptions(
        since=since,
        include_merged_tags=include_merged_tags,
        force=force,
        ignore_changes=ignore_changes,
        all=all,
    )
    return ChangedCommand(context, options).execute()


def handle_changed_command(
    workspace: Workspace,
    *,
    console: Console,
    error_console: Console,
    since: str | None = None,
    include_merged_tags: bool = False,
    force: str | None = None,
    ignore_changes: str | None = None,
    all: bool = False,
    long: bool = False,
    json_output: bool = False,
) -> None:
    try:
        result = changed_packages(
            workspace,
            since=since,
            include_merged_tags=include_merged_tags,
            force=force,
            ignore_changes=ignore_changes,
            all=all,
        )
    except CargoMelosError as e:
        error_console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1) from e

    if result.released:
        console.print("Current HEAD is already released, skipping change detection")
        return

    print_packages(
        console, result.changed, long=long, show_private=all, json_output=json_output
    )
