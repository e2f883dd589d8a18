"""Rename command implementation."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

import typer
from rich.console import Console

from cargomelos.commands.base import CommandContext, SyncCommand
from cargomelos.errors import CargoMelosError, PackageNotFoundError
from cargomelos.versioning import rename_packages
from cargomelos.workspace.workspace import Workspace

logger = logging.getLogger(__name__)


@dataclass
class RenameResult:
    """Result of rename command.

    Attributes:
        renames: New names keyed by old name.
        written: Manifests that were (or, on a dry run, would be) rewritten.
    """

    renames: dict[str, str]
    written: list[Path] = field(default_factory=list)


@dataclass
class RenameOptions:
    """Options for rename command.

    Attributes:
        renames: Explicit new names keyed by old name.
        pattern: New name for every member, `%n` is replaced by the old name.
        all: Apply the pattern to private packages too.
    """

    renames: dict[str, str] = field(default_factory=dict)
    pattern: str | None = None
    all: bool = False


class RenameCommand(SyncCommand[RenameResult]):
    """Rename packages and every reference to them in the workspace."""

    def __init__(self, context: CommandContext, options: RenameOptions | None = None) -> None:
        super().__init__(context)
        self.options = options or RenameOptions()

    def validate(self) -> list[str]:
        errors = []
        if self.options.pattern is not None and "%n" not in self.options.pattern:
            errors.append("rename pattern must contain '%n'")
        if not self.options.renames and self.options.pattern is None:
            errors.append("nothing to rename")
        return errors

    def resolve_renames(self) -> dict[str, str]:
        """Work out the final old-to-new name mapping.

        Raises:
            PackageNotFoundError: If an old name is not a member.
            CargoMelosError: If a new name is already taken.
        """
        renames = dict(self.options.renames)

        if self.options.pattern is not None:
            for pkg in self.workspace.packages.values():
                if pkg.is_private and not self.options.all:
                    continue
                renames.setdefault(pkg.name, self.options.pattern.replace("%n", pkg.name))

        for old in renames:
            if old not in self.workspace.packages:
                raise PackageNotFoundError(old)

        kept = set(self.workspace.packages) - set(renames)
        seen: set[str] = set()
        for new in renames.values():
            if new in kept or new in seen:
                raise CargoMelosError(f"package {new} already exists")
            seen.add(new)

        return {old: new for old, new in renames.items() if old != new}

    def execute(self) -> RenameResult:
        """Execute the rename command."""
        renames = self.resolve_renames()
        result = RenameResult(renames=renames)
        if not renames:
            return result

        manifests = [(p.manifest_path, p.name) for p in self.workspace.graph.packages_in_order()]
        if self.workspace.root_member() is None:
            manifests.append((self.workspace.root_manifest, ""))

        for path, name in manifests:
            text = path.read_bytes().decode("utf-8")
            new_text = rename_packages(text, name, renames)
            if new_text == text:
                continue

            result.written.append(path)
            if self.context.dry_run:
                logger.info("would update %s", path)
            else:
                path.write_bytes(new_text.encode("utf-8"))
                logger.debug("updated %s", path)

        return result


def rename(
    workspace: Workspace,
    *,
    renames: dict[str, str] | None = None,
    pattern: str | None = None,
    all: bool = False,
    dry_run: bool = False,
) -> RenameResult:
    """Convenience function to rename packages.

    Args:
        workspace: Workspace to change.
        renames: New names keyed by old name.
        pattern: New name pattern for every member, with `%n` for the old name.
        all: Apply the pattern to private packages too.
        dry_run: Only report what would change.

    Returns:
        Rename result.
    """
    context = CommandContext(workspace=workspace, dry_run=dry_run)
    cmd = RenameCommand(context, RenameOptions(renames=renames or {}, pattern=pattern, all=all))
    if errors := cmd.validate():
        raise CargoMelosError("; ".join(errors))
    return cmd.execute()


def handle_rename_command(
    workspace: Workspace,
    *,
    console: Console,
    error_console: Console,
    from_names: list[str] | None = None,
    to_names: list[str] | None = None,
    pattern: str | None = None,
    all: bool = False,
    dry_run: bool = False,
) -> None:
    from_names = from_names or []
    to_names = to_names or []
    if len(from_names) != len(to_names):
        error_console.print("[red]Error:[/red] every --from needs a matching --to")
        raise typer.Exit(1)

    try:
        result = rename(
            workspace,
            renames=dict(zip(from_names, to_names)),
            pattern=pattern,
            all=all,
            dry_run=dry_run,
        )
    except CargoMelosError as e:
        error_console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1) from e

    if not result.renames:
        console.print("[yellow]Nothing to rename[/yellow]")
        return

    if dry_run:
        console.print("[yellow]Dry run - no files changed[/yellow]\n")

    for old, new in sorted(result.renames.items()):
        console.print(f"  {old} => [green]{new}[/green]")

    verb = "Would update" if dry_run else "Updated"
    console.print(f"\n{verb} {len(result.written)} manifests")
