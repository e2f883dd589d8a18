"""cargomelos CLI application."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

from cargomelos.errors import CargoMelosError
from cargomelos.workspace import Workspace

if TYPE_CHECKING:
    from cargomelos.commands import VersionOptions


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from cargomelos import __version__

        print(f"cargomelos {__version__}")
        raise typer.Exit()


app = typer.Typer(
    name="cargomelos",
    help="Release manager for Cargo workspaces",
    no_args_is_help=True,
    add_completion=False,
)

console = Console()
error_console = Console(stderr=True)


def configure_logging(verbose: bool = False) -> None:
    """Send cargomelos log records to stderr through rich."""
    logger = logging.getLogger("cargomelos")
    logger.handlers.clear()
    handler = RichHandler(
        console=error_console,
        show_time=False,
        show_path=False,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False


@app.callback()
def _app_callback(
    ctx: typer.Context,
    version: Annotated[  # noqa: ARG001
        bool,
        typer.Option("--version", "-V", help="Show version and exit", callback=version_callback),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug output"),
    ] = False,
    manifest_path: Annotated[
        Path | None,
        typer.Option("--manifest-path", help="Path to the workspace Cargo.toml"),
    ] = None,
) -> None:
    """Release manager for Cargo workspaces."""
    configure_logging(verbose)
    ctx.obj = manifest_path


def get_workspace(ctx: typer.Context) -> Workspace:
    """Load workspace from the current directory or `--manifest-path`."""
    try:
        return Workspace.discover(manifest_path=ctx.obj)
    except CargoMelosError as e:
        error_console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1) from e


LongOption = Annotated[bool, typer.Option("--long", "-l", help="Show extended information")]
AllOption = Annotated[
    bool, typer.Option("--all", "-a", help="Show private packages that are normally hidden")
]
JsonOption = Annotated[bool, typer.Option("--json", help="Output as JSON")]
IncludeMergedTagsOption = Annotated[
    bool, typer.Option("--include-merged-tags", help="Include tags from merged branches")
]
ForceOption = Annotated[
    str | None,
    typer.Option(
        "--force",
        metavar="PATTERN",
        help="Always include packages matched by glob even when there are no changes",
    ),
]
IgnoreChangesOption = Annotated[
    str | None,
    typer.Option("--ignore-changes", metavar="PATTERN", help="Ignore changes in files matched by glob"),
]
TokenOption = Annotated[
    str | None, typer.Option("--token", help="The token to use for accessing the registry")
]
RegistryOption = Annotated[
    str | None, typer.Option("--registry", help="The Cargo registry to use")
]


@app.command("list")
def list_cmd(
    ctx: typer.Context,
    long: LongOption = False,
    all: AllOption = False,
    json_output: JsonOption = False,
) -> None:
    """List workspace packages."""
    from cargomelos.commands import handle_list_command

    workspace = get_workspace(ctx)
    handle_list_command(
        workspace,
        console=console,
        error_console=error_console,
        all=all,
        long=long,
        json_output=json_output,
    )


@app.command()
def changed(
    ctx: typer.Context,
    since: Annotated[
        str | None,
        typer.Option("--since", help="Use this git reference instead of the last tag"),
    ] = None,
    include_merged_tags: IncludeMergedTagsOption = False,
    force: ForceOption = None,
    ignore_changes: IgnoreChangesOption = None,
    long: LongOption = False,
    all: AllOption = False,
    json_output: JsonOption = False,
) -> None:
    """List packages that have changed since the last tagged release."""
    from cargomelos.commands import handle_changed_command

    if since is not None and include_merged_tags:
        error_console.print("[red]Error:[/red] --since cannot be used with --include-merged-tags")
        raise typer.Exit(1)

    workspace = get_workspace(ctx)
    handle_changed_command(
        workspace,
        console=console,
        error_console=error_console,
        since=since,
        include_merged_tags=include_merged_tags,
        force=force,
        ignore_changes=ignore_changes,
        all=all,
        long=long,
        json_output=json_output,
    )


@app.command()
def plan(
    ctx: typer.Context,
    skip_published: Annotated[
        bool,
        typer.Option("--skip-published", help="Skip already published package versions"),
    ] = False,
    token: TokenOption = None,
    registry: RegistryOption = None,
    long: LongOption = False,
    json_output: JsonOption = False,
) -> None:
    """List packages in publishing order."""
    from cargomelos.commands import handle_plan_command

    workspace = get_workspace(ctx)
    handle_plan_command(
        workspace,
        console=console,
        error_console=error_console,
        skip_published=skip_published,
        registry=registry,
        token=token,
        long=long,
        json_output=json_output,
    )


def build_version_options(
    *,
    bump: str | None,
    custom: str | None,
    pre_id: str | None,
    since: str | None,
    include_merged_tags: bool,
    force: str | None,
    ignore_changes: str | None,
    all: bool,
    exact: bool,
    yes: bool,
    no_git_commit: bool,
    allow_branch: str | None,
    amend: bool,
    message: str | None,
    no_git_tag: bool,
    no_individual_tags: bool,
    no_global_tag: bool,
    tag_prefix: str | None,
    individual_tag_prefix: str | None,
    no_git_push: bool,
    git_remote: str | None,
) -> VersionOptions:
    """Turn command line values into `VersionOptions`, exiting on bad input."""
    from cargomelos.commands import VersionOptions
    from cargomelos.git import GitOptions
    from cargomelos.versioning import BumpType, parse_version

    try:
        bump_type = BumpType(bump.lower()) if bump else None
    except ValueError:
        error_console.print(f"[red]Invalid bump type:[/red] {bump}")
        raise typer.Exit(1) from None

    try:
        return VersionOptions(
            bump=bump_type,
            custom=parse_version(custom) if custom else None,
            pre_id=pre_id,
            since=since,
            include_merged_tags=include_merged_tags,
            force=force,
            ignore_changes=ignore_changes,
            all=all,
            exact=exact,
            yes=yes,
            git=GitOptions(
                no_git_commit=no_git_commit,
                allow_branch=allow_branch,
                amend=amend,
                message=message,
                no_git_tag=no_git_tag,
                no_individual_tags=no_individual_tags,
                no_global_tag=no_global_tag,
                tag_prefix=tag_prefix,
                individual_tag_prefix=individual_tag_prefix,
                no_git_push=no_git_push,
                git_remote=git_remote,
            ),
        )
    except CargoMelosError as e:
        error_console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1) from e


BumpArgument = Annotated[
    str | None,
    typer.Argument(
        help="Bump every version by this keyword (major, minor, patch, premajor, preminor, "
        "prepatch, skip, prerelease, custom) instead of prompting",
    ),
]
CustomArgument = Annotated[
    str | None,
    typer.Argument(help="Custom version when the bump is 'custom'"),
]
PreIdOption = Annotated[
    str | None, typer.Option("--pre-id", metavar="IDENTIFIER", help="Prerelease identifier")
]
SinceOption = Annotated[
    str | None,
    typer.Option("--since", help="Use this git reference instead of the last tag"),
]
VersionAllOption = Annotated[
    bool, typer.Option("--all", "-a", help="Also version private packages (never published)")
]
ExactOption = Annotated[
    bool, typer.Option("--exact", help="Pin inter-dependency versions exactly with `=`")
]
YesOption = Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation prompt")]
NoGitCommitOption = Annotated[
    bool, typer.Option("--no-git-commit", help="Do not commit version changes")
]
AllowBranchOption = Annotated[
    str | None,
    typer.Option(
        "--allow-branch", metavar="PATTERN", help="Only allow versioning on branches matching glob"
    ),
]
AmendOption = Annotated[
    bool, typer.Option("--amend", help="Amend the existing commit instead of creating a new one")
]
MessageOption = Annotated[
    str | None,
    typer.Option("--message", "-m", help="Commit message, %v is replaced by the version"),
]
NoGitTagOption = Annotated[bool, typer.Option("--no-git-tag", help="Do not tag versioned packages")]
NoIndividualTagsOption = Annotated[
    bool, typer.Option("--no-individual-tags", help="Do not tag individual versions")
]
NoGlobalTagOption = Annotated[
    bool, typer.Option("--no-global-tag", help="Do not create a global tag for the common version")
]
TagPrefixOption = Annotated[
    str | None, typer.Option("--tag-prefix", help="Prefix of the global tag")
]
IndividualTagPrefixOption = Annotated[
    str | None,
    typer.Option(
        "--individual-tag-prefix", help="Prefix of individual tags, must contain %n"
    ),
]
NoGitPushOption = Annotated[
    bool, typer.Option("--no-git-push", help="Do not push the commit and tags")
]
GitRemoteOption = Annotated[
    str | None, typer.Option("--git-remote", metavar="REMOTE", help="Remote to push to")
]


@app.command("version")
def version_cmd(
    ctx: typer.Context,
    bump: BumpArgument = None,
    custom: CustomArgument = None,
    pre_id: PreIdOption = None,
    since: SinceOption = None,
    include_merged_tags: IncludeMergedTagsOption = False,
    force: ForceOption = None,
    ignore_changes: IgnoreChangesOption = None,
    all: VersionAllOption = False,
    exact: ExactOption = False,
    yes: YesOption = False,
    no_git_commit: NoGitCommitOption = False,
    allow_branch: AllowBranchOption = None,
    amend: AmendOption = False,
    message: MessageOption = None,
    no_git_tag: NoGitTagOption = False,
    no_individual_tags: NoIndividualTagsOption = False,
    no_global_tag: NoGlobalTagOption = False,
    tag_prefix: TagPrefixOption = None,
    individual_tag_prefix: IndividualTagPrefixOption = None,
    no_git_push: NoGitPushOption = False,
    git_remote: GitRemoteOption = None,
) -> None:
    """Bump versions of changed packages and the packages depending on them."""
    from cargomelos.commands import handle_version_command

    options = build_version_options(
        bump=bump,
        custom=custom,
        pre_id=pre_id,
        since=since,
        include_merged_tags=include_merged_tags,
        force=force,
        ignore_changes=ignore_changes,
        all=all,
        exact=exact,
        yes=yes,
        no_git_commit=no_git_commit,
        allow_branch=allow_branch,
        amend=amend,
        message=message,
        no_git_tag=no_git_tag,
        no_individual_tags=no_individual_tags,
        no_global_tag=no_global_tag,
        tag_prefix=tag_prefix,
        individual_tag_prefix=individual_tag_prefix,
        no_git_push=no_git_push,
        git_remote=git_remote,
    )
    workspace = get_workspace(ctx)
    handle_version_command(workspace, options, console=console, error_console=error_console)


@app.command("publish")
def publish_cmd(
    ctx: typer.Context,
    bump: BumpArgument = None,
    custom: CustomArgument = None,
    pre_id: PreIdOption = None,
    since: SinceOption = None,
    include_merged_tags: IncludeMergedTagsOption = False,
    force: ForceOption = None,
    ignore_changes: IgnoreChangesOption = None,
    all: VersionAllOption = False,
    exact: ExactOption = False,
    yes: YesOption = False,
    no_git_commit: NoGitCommitOption = False,
    allow_branch: AllowBranchOption = None,
    amend: AmendOption = False,
    message: MessageOption = None,
    no_git_tag: NoGitTagOption = False,
    no_individual_tags: NoIndividualTagsOption = False,
    no_global_tag: NoGlobalTagOption = False,
    tag_prefix: TagPrefixOption = None,
    individual_tag_prefix: IndividualTagPrefixOption = None,
    no_git_push: NoGitPushOption = False,
    git_remote: GitRemoteOption = None,
    publish_as_is: Annotated[
        bool,
        typer.Option(
            "--publish-as-is",
            "--from-git",
            help="Publish packages from the current commit without versioning",
        ),
    ] = False,
    no_verify: Annotated[
        bool, typer.Option("--no-verify", help="Skip package verification (not recommended)")
    ] = False,
    allow_dirty: Annotated[
        bool,
        typer.Option("--allow-dirty", help="Allow dirty working directories to be published"),
    ] = False,
    token: TokenOption = None,
    registry: RegistryOption = None,
    no_remove_dev_deps: Annotated[
        bool,
        typer.Option("--no-remove-dev-deps", help="Don't remove dev-dependencies while publishing"),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Perform checks without uploading"),
    ] = False,
    no_wait: Annotated[
        bool,
        typer.Option("--no-wait", help="Don't wait for uploads to appear in the registry"),
    ] = False,
) -> None:
    """Version and publish packages in dependency order."""
    from cargomelos.commands import PublishOptions, handle_publish_command

    version_options = build_version_options(
        bump=bump,
        custom=custom,
        pre_id=pre_id,
        since=since,
        include_merged_tags=include_merged_tags,
        force=force,
        ignore_changes=ignore_changes,
        all=all,
        exact=exact,
        yes=yes,
        no_git_commit=no_git_commit,
        allow_branch=allow_branch,
        amend=amend,
        message=message,
        no_git_tag=no_git_tag,
        no_individual_tags=no_individual_tags,
        no_global_tag=no_global_tag,
        tag_prefix=tag_prefix,
        individual_tag_prefix=individual_tag_prefix,
        no_git_push=no_git_push,
        git_remote=git_remote,
    )
    options = PublishOptions(
        version=version_options,
        publish_as_is=publish_as_is,
        no_verify=no_verify,
        allow_dirty=allow_dirty,
        token=token,
        registry=registry,
        no_remove_dev_deps=no_remove_dev_deps,
        dry_run=dry_run,
        no_wait=no_wait,
    )
    workspace = get_workspace(ctx)
    handle_publish_command(workspace, options, console=console, error_console=error_console)


@app.command("rename")
def rename_cmd(
    ctx: typer.Context,
    pattern: Annotated[
        str | None,
        typer.Argument(help="New name for every package, %n is replaced by the current name"),
    ] = None,
    from_names: Annotated[
        list[str] | None,
        typer.Option("--from", "-f", help="Package to rename (repeatable)"),
    ] = None,
    to_names: Annotated[
        list[str] | None,
        typer.Option("--to", "-t", help="New name for the matching --from (repeatable)"),
    ] = None,
    all: Annotated[
        bool, typer.Option("--all", "-a", help="Also rename private packages with the pattern")
    ] = False,
    dry_run: Annotated[
        bool, typer.Option("--dry-run", help="Show what would be renamed")
    ] = False,
) -> None:
    """Rename packages and update every reference to them."""
    from cargomelos.commands import handle_rename_command

    workspace = get_workspace(ctx)
    handle_rename_command(
        workspace,
        console=console,
        error_console=error_console,
        from_names=from_names,
        to_names=to_names,
        pattern=pattern,
        all=all,
        dry_run=dry_run,
    )


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
