"""List command implementation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import typer
from rich.console import Console

from cargomelos.cli.output.table import print_packages
from cargomelos.commands.base import CommandContext, SyncCommand
from cargomelos.errors import CargoMelosError

if TYPE_CHECKING:
    from cargomelos.workspace import Package
    from cargomelos.workspace.workspace import Workspace


@dataclass
class PackageInfo:
    """Information about a package for display."""

    name: str
    version: str
    location: str
    private: bool
    independent: bool
    dependencies: list[str]
    dependents: list[str]

    @classmethod
    def from_package(cls, workspace: Workspace, pkg: Package) -> PackageInfo:
        graph = workspace.graph
        return cls(
            name=pkg.name,
            version=pkg.version,
            location=str(pkg.path.relative_to(workspace.root)),
            private=pkg.is_private,
            independent=pkg.is_independent,
            dependencies=[d.name for d in graph.get_dependencies(pkg.name)],
            dependents=[d.name for d in graph.get_dependents(pkg.name)],
        )


@dataclass
class ListResult:
    """Result of list command."""

    packages: list[PackageInfo]


@dataclass
class ListOptions:
    """Options for list command."""

    all: bool = False


class ListCommand(SyncCommand[ListResult]):
    """List packages in the workspace."""

    def __init__(self, context: CommandContext, options: ListOptions | None = None) -> None:
        super().__init__(context)
        self.options = options or ListOptions()

    def execute(self) -> ListResult:
        """Execute the list command."""
        packages = [
            p for p in self.workspace.packages.values() if self.options.all or not p.is_private
        ]
        infos = [PackageInfo.from_package(self.workspace, pkg) for pkg in packages]
        infos.sort(key=lambda p: p.name)

        return ListResult(packages=infos)


def list_packages(workspace: Workspace, *, all: bool = False) -> ListResult:
    """Convenience function to list packages.

    Args:
        workspace: Workspace to list.
        all: Include private packages.

    Returns:
        List result with package info.
    """
    context = CommandContext(workspace=workspace)
    cmd = ListCommand(context, ListOptions(all=all))
    return cmd.execute()


def handle_list_command(
    workspace: Workspace,
    *,
    console: Console,
    error_console: Console,
    all: bool = False,
    long: bool = False,
    json_output: bool = False,
) -> None:
    try:
        result = list_packages(workspace, all=all)
    except CargoMelosError as e:
        error_console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1) from e

    print_packages(
        console, result.packages, long=long, show_private=all, json_output=json_output
    )
