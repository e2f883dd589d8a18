"""Version command implementation."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table
from semantic_version import Version

from cargomelos.cargo import run_cargo
from cargomelos.commands.base import CommandContext, SyncCommand
from cargomelos.errors import CargoMelosError, UpdateError
from cargomelos.git import GitOptions, describe, get_changed_packages
from cargomelos.versioning import (
    BumpType,
    Decider,
    VersionPlan,
    bump_version,
    change_versions,
    plan_versions,
)
from cargomelos.workspace.workspace import Workspace

logger = logging.getLogger(__name__)

ALREADY_RELEASED = "Current HEAD is already released, skipping versioning"
NO_CHANGES = "No changes detected, skipping versioning"
CONFIRM_MESSAGE = "Are you sure you want to create these versions?"

# Receives the plan, returns whether to go ahead with it.
Confirmer = Callable[[VersionPlan], bool]


@dataclass
class VersionOptions:
    """Options for version command.

    Attributes:
        bump: Apply this bump to everything instead of prompting.
        custom: Version to use with `BumpType.CUSTOM`.
        pre_id: Prerelease identifier.
        since: Git reference to diff against instead of the last tag.
        include_merged_tags: Also consider tags from merged branches.
        force: Glob of package names that always count as changed.
        ignore_changes: Glob of files whose changes are ignored.
        all: Also version private packages.
        exact: Pin dependency requirements with `=`.
        yes: Skip the confirmation.
        git: Commit, tag and push settings.
    """

    bump: BumpType | None = None
    custom: Version | None = None
    pre_id: str | None = None
    since: str | None = None
    include_merged_tags: bool = False
    force: str | None = None
    ignore_changes: str | None = None
    all: bool = False
    exact: bool = False
    yes: bool = False
    git: GitOptions = field(default_factory=GitOptions)


@dataclass
class VersionResult:
    """Result of version command.

    Attributes:
        plan: Versions that were applied, empty when nothing was done.
        skipped: Why versioning was skipped, if it was.
        cancelled: The user declined the plan.
        written: Manifests that were rewritten.
    """

    plan: VersionPlan = field(default_factory=VersionPlan)
    skipped: str | None = None
    cancelled: bool = False
    written: list[Path] = field(default_factory=list)

    @property
    def new_versions(self) -> dict[str, Version]:
        return self.plan.new_versions()


def flag_decider(options: VersionOptions) -> Decider:
    """Decide every version from the command line flags."""
    if options.bump is None:
        raise ValueError("a bump is required to decide versions without prompting")

    def decide(name: str | None, current: Version, independent: bool) -> Version | None:
        return bump_version(current, options.bump, preid=options.pre_id, custom=options.custom)

    return decide


def prompt_decider(options: VersionOptions) -> Decider:
    """Ask for every version interactively."""
    from cargomelos.interactive import select_new_version

    def decide(name: str | None, current: Version, independent: bool) -> Version | None:
        return select_new_version(current, name, options.pre_id)

    return decide


def prompt_confirmer(console: Console, *, yes: bool = False) -> Confirmer:
    """Show the planned changes and ask before applying them."""

    def confirm_plan(plan: VersionPlan) -> bool:
        table = Table(title="Changes")
        table.add_column("Package", style="cyan")
        table.add_column("Current", style="dim")
        table.add_column("Next", style="green")

        for name, planned in plan.entries.items():
            table.add_row(name, str(planned.old), str(planned.new))
        console.print(table)

        if yes:
            return True

        from cargomelos.interactive import confirm

        return confirm(CONFIRM_MESSAGE, default=False)

    return confirm_plan


class VersionCommand(SyncCommand[VersionResult]):
    """Bump versions of changed packages and their broken dependents."""

    def __init__(
        self,
        context: CommandContext,
        options: VersionOptions | None = None,
        *,
        decide: Decider | None = None,
        confirm: Confirmer | None = None,
    ) -> None:
        super().__init__(context)
        self.options = options or VersionOptions()
        if decide is None:
            decide = flag_decider(self.options) if self.options.bump else prompt_decider(self.options)
        self.decide = decide
        self.confirm = confirm or (lambda plan: True)

    def validate(self) -> list[str]:
        errors = []
        if self.options.bump is BumpType.CUSTOM and self.options.custom is None:
            errors.append("a custom version is required when bumping with 'custom'")
        if self.options.custom is not None and self.options.bump is not BumpType.CUSTOM:
            errors.append("a custom version can only be given with the 'custom' bump")
        return errors

    def find_changed(self) -> tuple[list[str], str | None]:
        """Names of changed packages, or a reason to skip versioning."""
        since = self.options.since

        if since is None:
            change_data = describe(self.workspace.root, self.options.include_merged_tags)
            if self.options.force is None and change_data.is_released:
                return [], ALREADY_RELEASED
            since = change_data.since

        changed, _ = get_changed_packages(
            self.workspace,
            since,
            force=self.options.force,
            ignore_changes=self.options.ignore_changes,
            include_private=self.options.all,
        )
        if not changed:
            return [], NO_CHANGES
        return [p.name for p in changed], None

    def write_manifests(self, plan: VersionPlan) -> list[Path]:
        """Rewrite member manifests, then the root manifest.

        The common version goes to `[workspace.package]` under the empty
        package name.
        """
        versions = plan.new_versions()
        with_common = dict(versions)
        if plan.common_version is not None:
            with_common[""] = plan.common_version

        root_member = self.workspace.root_member()
        written: list[Path] = []

        def rewrite(path: Path, name: str, new_versions: dict[str, Version]) -> None:
            text = path.read_bytes().decode("utf-8")
            new_text = change_versions(
                text, name, new_versions, self.options.exact, include_dev_deps=True
            )
            if new_text != text:
                path.write_bytes(new_text.encode("utf-8"))
                written.append(path)
                logger.debug("updated %s", path)

        for pkg in self.workspace.graph.packages_in_order():
            rewrite(pkg.manifest_path, pkg.name, with_common if pkg is root_member else versions)

        if root_member is None:
            rewrite(self.workspace.root_manifest, "", with_common)

        return written

    def update_lockfile(self) -> None:
        """Refresh workspace entries in Cargo.lock.

        Raises:
            UpdateError: If cargo reports an error.
        """
        _, stderr = run_cargo(self.workspace.root, ["update", "-w"], self.context.env)
        if "error:" in stderr:
            raise UpdateError()

    def execute(self) -> VersionResult:
        """Execute the version command.

        Raises:
            CargoMelosError: If any step fails.
        """
        root = self.workspace.root
        config = self.workspace.config
        git = self.options.git

        branch = git.validate(root, config)

        names, skipped = self.find_changed()
        if skipped:
            return VersionResult(skipped=skipped)

        plan = plan_versions(self.workspace.graph, names, self.decide)
        if not plan:
            return VersionResult(skipped=NO_CHANGES)

        if not self.confirm(plan):
            return VersionResult(plan=plan, cancelled=True)

        written = self.write_manifests(plan)
        self.update_lockfile()
        git.commit(root, plan.common_version, plan.new_versions(), branch, config)

        return VersionResult(plan=plan, written=written)


def version(
    workspace: Workspace,
    options: VersionOptions | None = None,
    *,
    decide: Decider | None = None,
    confirm: Confirmer | None = None,
) -> VersionResult:
    """Convenience function to version packages.

    Args:
        workspace: Workspace to version.
        options: Version options.
        decide: Supplies new versions; defaults to the flags or prompts.
        confirm: Approves the plan; defaults to yes.

    Returns:
        Version result.
    """
    context = CommandContext(workspace=workspace)
    cmd = VersionCommand(context, options, decide=decide, confirm=confirm)
    if errors := cmd.validate():
        raise CargoMelosError("; ".join(errors))
    return cmd.execute()


def handle_version_command(
    workspace: Workspace,
    options: VersionOptions,
    *,
    console: Console,
    error_console: Console,
) -> None:
    """Handle the version command from the CLI with the change table and confirmation."""
    try:
        result = version(workspace, options, confirm=prompt_confirmer(console, yes=options.yes))
    except CargoMelosError as e:
        error_console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1) from e

    if result.skipped:
        console.print(f"[yellow]{result.skipped}[/yellow]")
        return
    if result.cancelled:
        console.print("[yellow]Versioning cancelled.[/yellow]")
        return

    console.print(f"\n[green]Versioned {len(result.plan)} packages[/green]")
