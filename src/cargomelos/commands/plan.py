"""Plan command implementation."""

from __future__ import annotations

from dataclasses import dataclass

import typer
from rich.console import Console

from cargomelos.cargo import RegistryClient
from cargomelos.cli.output.table import print_packages
from cargomelos.commands.base import CommandContext, SyncCommand
from cargomelos.commands.list import PackageInfo
from cargomelos.errors import CargoMelosError
from cargomelos.workspace import Package
from cargomelos.workspace.workspace import Workspace


class RegistryClients:
    """One registry client per registry name, created on first use."""

    def __init__(self, workspace: Workspace, registry: str | None, token: str | None) -> None:
        self.workspace = workspace
        self.registry = registry or workspace.config.publish.registry
        self.token = token
        self._clients: dict[str | None, RegistryClient] = {}

    def registry_for(self, pkg: Package) -> str | None:
        """Registry a package publishes to: the override, else its first allowed one."""
        if self.registry is not None:
            return self.registry
        if pkg.publish_registries:
            return pkg.publish_registries[0]
        return None

    def for_package(self, pkg: Package) -> RegistryClient:
        name = self.registry_for(pkg)
        if name not in self._clients:
            self._clients[name] = RegistryClient.for_registry(self.workspace.root, name, self.token)
        return self._clients[name]


@dataclass
class PlanResult:
    """Result of plan command."""

    packages: list[PackageInfo]


@dataclass
class PlanOptions:
    """Options for plan command."""

    skip_published: bool = False
    registry: str | None = None
    token: str | None = None


class PlanCommand(SyncCommand[PlanResult]):
    """List packages in publishing order."""

    def __init__(
        self,
        context: CommandContext,
        options: PlanOptions | None = None,
        clients: RegistryClients | None = None,
    ) -> None:
        super().__init__(context)
        self.options = options or PlanOptions()
        self.clients = clients or RegistryClients(
            self.workspace, self.options.registry, self.options.token
        )

    def execute(self) -> PlanResult:
        """Execute the plan command."""
        graph = self.workspace.graph
        packages = [graph.index[key] for key in graph.filter_publishable()]

        if self.options.skip_published:
            packages = [
                pkg
                for pkg in packages
                if not self.clients.for_package(pkg).is_published(pkg.name, pkg.version)
            ]

        return PlanResult(packages=[PackageInfo.from_package(self.workspace, p) for p in packages])


def plan(
    workspace: Workspace,
    *,
    skip_published: bool = False,
    registry: str | None = None,
    token: str | None = None,
) -> PlanResult:
    """Convenience function to compute the publishing order.

    Args:
        workspace: Workspace to plan.
        skip_published: Leave out versions the registry already has.
        registry: Registry to check instead of each package's default.
        token: Registry token.

    Returns:
        Plan result, dependencies first.
    """
    context = CommandContext(workspace=workspace)
    options = PlanOptions(skip_published=skip_published, registry=registry, token=token)
    return PlanCommand(context, options).execute()


def handle_plan_command(
    workspace: Workspace,
    *,
    console: Console,
    error_console: Console,
    skip_published: bool = False,
    registry: str | None = None,
    token: str | None = None,
    long: bool = False,
    json_output: bool = False,
) -> None:
    try:
        result = plan(workspace, skip_published=skip_published, registry=registry, token=token)
    except CargoMelosError as e:
        error_console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1) from e

    print_packages(console, result.packages, long=long, json_output=json_output)
