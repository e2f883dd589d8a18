"""Publish command implementation."""

from __future__ import annotations

import logging
from contextlib import nullcontext
from dataclasses import dataclass, field
from enum import Enum

import typer
from rich.console import Console
from rich.table import Table

from cargomelos.cargo import (
    basic_checks,
    remove_dev_dependencies,
    run_cargo,
    should_remove_dev_deps,
)
from cargomelos.commands.base import CommandContext, SyncCommand
from cargomelos.commands.plan import RegistryClients
from cargomelos.commands.version import (
    Confirmer,
    VersionCommand,
    VersionOptions,
    prompt_confirmer,
)
from cargomelos.errors import BuildError, CargoMelosError, PublishError
from cargomelos.versioning import Decider
from cargomelos.workspace import Package
from cargomelos.workspace.workspace import Workspace

logger = logging.getLogger(__name__)


class PublishStatus(Enum):
    """What happened to a package during publish."""

    PUBLISHED = "published"
    ALREADY_PUBLISHED = "already published"
    CHECKED = "can be published"
    CHECK_FAILED = "has problems"


@dataclass
class PackagePublish:
    """Outcome for a single package."""

    name: str
    version: str
    status: PublishStatus
    problems: list[str] = field(default_factory=list)


@dataclass
class PublishResult:
    """Result of publish command."""

    packages: list[PackagePublish] = field(default_factory=list)
    skipped: str | None = None
    cancelled: bool = False

    @property
    def published_count(self) -> int:
        return sum(1 for p in self.packages if p.status is PublishStatus.PUBLISHED)


@dataclass
class PublishOptions:
    """Options for publish command.

    Attributes:
        version: Versioning step settings.
        publish_as_is: Publish current versions without versioning first.
        no_verify: Pass `--no-verify` to cargo and skip dry-run builds.
        allow_dirty: Pass `--allow-dirty` to cargo.
        token: Registry token.
        registry: Registry to publish to instead of each package's default.
        no_remove_dev_deps: Never strip dev-dependencies.
        dry_run: Build and check packages without uploading.
        no_wait: Do not wait for each upload to appear in the registry.
    """

    version: VersionOptions = field(default_factory=VersionOptions)
    publish_as_is: bool = False
    no_verify: bool = False
    allow_dirty: bool = False
    token: str | None = None
    registry: str | None = None
    no_remove_dev_deps: bool = False
    dry_run: bool = False
    no_wait: bool = False


class PublishCommand(SyncCommand[PublishResult]):
    """Version packages, then publish them in dependency order."""

    def __init__(
        self,
        context: CommandContext,
        options: PublishOptions | None = None,
        *,
        decide: Decider | None = None,
        confirm: Confirmer | None = None,
        clients: RegistryClients | None = None,
    ) -> None:
        super().__init__(context)
        self.options = options or PublishOptions()
        self.decide = decide
        self.confirm = confirm
        self.clients = clients or RegistryClients(
            self.workspace, self.options.registry, self.options.token
        )

    @property
    def is_dry_run(self) -> bool:
        return self.options.dry_run or self.context.dry_run

    def packages_to_publish(self) -> tuple[list[tuple[Package, str]], PublishResult | None]:
        """Packages and the versions to publish them at, in publishing order.

        Runs the versioning step unless publishing as is. Returns an early
        result when versioning was skipped or cancelled.
        """
        graph = self.workspace.graph
        order = [graph.index[key] for key in graph.filter_publishable()]

        if self.options.publish_as_is:
            return [(pkg, pkg.version) for pkg in order], None

        version_cmd = VersionCommand(
            self.context, self.options.version, decide=self.decide, confirm=self.confirm
        )
        if errors := version_cmd.validate():
            raise CargoMelosError("; ".join(errors))

        versioned = version_cmd.execute()
        if versioned.skipped or versioned.cancelled:
            return [], PublishResult(skipped=versioned.skipped, cancelled=versioned.cancelled)

        new_versions = versioned.new_versions
        packages = [(pkg, str(new_versions[pkg.name])) for pkg in order if pkg.name in new_versions]
        return packages, None

    def try_build(self, pkg: Package) -> None:
        """Build a package to make sure it compiles.

        Raises:
            BuildError: If compilation fails.
        """
        _, stderr = run_cargo(
            self.workspace.root,
            ["build", "--manifest-path", str(pkg.manifest_path)],
            self.context.env,
        )
        if "could not compile" in stderr:
            raise BuildError(pkg.name)

    def check(self, pkg: Package, version: str) -> PackagePublish:
        logger.info("checking package %s", pkg.name)
        if self.options.no_verify:
            logger.info("skipping build of %s", pkg.name)
        else:
            self.try_build(pkg)

        problems = basic_checks(pkg)
        for problem in problems:
            logger.warning("%s: %s", pkg.name, problem)

        if problems:
            return PackagePublish(pkg.name, version, PublishStatus.CHECK_FAILED, problems)
        logger.info("%s can be published", pkg.name)
        return PackagePublish(pkg.name, version, PublishStatus.CHECKED)

    def publish_args(self, pkg: Package) -> list[str]:
        args = ["publish"]
        if self.options.no_verify:
            args.append("--no-verify")
        if self.options.allow_dirty:
            args.append("--allow-dirty")
        if self.clients.registry:
            args += ["--registry", self.clients.registry]
        if self.options.token:
            args += ["--token", self.options.token]
        args += ["--manifest-path", str(pkg.manifest_path)]
        return args

    def publish(self, pkg: Package, version: str) -> PackagePublish:
        """Upload one package unless the registry already has this version.

        Raises:
            PublishError: If cargo does not report a successful upload.
            PublishTimeoutError: If the upload never shows up in the registry.
        """
        name_ver = f"{pkg.name} v{version}"
        client = self.clients.for_package(pkg)

        if client.is_published(pkg.name, version):
            logger.info("already published %s", name_ver)
            return PackagePublish(pkg.name, version, PublishStatus.ALREADY_PUBLISHED)

        strip = (
            not self.options.no_remove_dev_deps
            and self.workspace.config.publish.remove_dev_deps
            and should_remove_dev_deps(pkg, self.workspace.packages.values())
        )
        if strip:
            logger.warning(
                "removing dev-deps of %s since some refer to workspace members with versions",
                name_ver,
            )

        with remove_dev_dependencies(pkg.manifest_path) if strip else nullcontext():
            _, stderr = run_cargo(self.workspace.root, self.publish_args(pkg), self.context.env)

        if "Uploading" not in stderr or "error:" in stderr:
            raise PublishError(pkg.name)

        logger.info("published %s", name_ver)

        if not self.options.no_wait:
            settings = self.workspace.config.publish
            client.wait_until_published(
                pkg.name, version, interval=settings.poll_interval, timeout=settings.timeout
            )

        return PackagePublish(pkg.name, version, PublishStatus.PUBLISHED)

    def execute(self) -> PublishResult:
        """Execute the publish command.

        Raises:
            CargoMelosError: On the first package that fails.
        """
        if self.is_dry_run:
            logger.warning("dry run performs fewer checks than `cargo publish --dry-run`")
            if not self.options.publish_as_is:
                logger.info("dry run doesn't perform versioning, skipping versioning step")
                self.options.publish_as_is = True

        packages, early = self.packages_to_publish()
        if early is not None:
            return early

        result = PublishResult()
        for pkg, version in packages:
            if self.is_dry_run:
                result.packages.append(self.check(pkg, version))
            else:
                result.packages.append(self.publish(pkg, version))

        return result


def publish(
    workspace: Workspace,
    options: PublishOptions | None = None,
    *,
    decide: Decider | None = None,
    confirm: Confirmer | None = None,
) -> PublishResult:
    """Convenience function to publish packages.

    Args:
        workspace: Workspace to publish.
        options: Publish options.
        decide: Supplies new versions for the versioning step.
        confirm: Approves the version plan.

    Returns:
        Publish result.
    """
    context = CommandContext(workspace=workspace, dry_run=bool(options and options.dry_run))
    cmd = PublishCommand(context, options, decide=decide, confirm=confirm)
    return cmd.execute()


def handle_publish_command(
    workspace: Workspace,
    options: PublishOptions,
    *,
    console: Console,
    error_console: Console,
) -> None:
    """Handle the publish command from the CLI."""
    try:
        result = publish(
            workspace, options, confirm=prompt_confirmer(console, yes=options.version.yes)
        )
    except CargoMelosError as e:
        error_console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1) from e

    if result.skipped:
        console.print(f"[yellow]{result.skipped}[/yellow]")
        return
    if result.cancelled:
        console.print("[yellow]Publishing cancelled.[/yellow]")
        return

    if options.dry_run:
        console.print("[yellow]Dry run - nothing was uploaded[/yellow]\n")

    table = Table()
    table.add_column("Package", style="cyan")
    table.add_column("Version", style="green")
    table.add_column("Status")

    for p in result.packages:
        status = p.status.value
        if p.problems:
            status += "\n" + "\n".join(f"[red]- {problem}[/red]" for problem in p.problems)
        table.add_row(p.name, p.version, status)

    console.print(table)

    if not options.dry_run:
        console.print(f"\n[green]Published {result.published_count} packages[/green]")
