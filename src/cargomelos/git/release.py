"""Git steps of a release: branch validation, commit, tags and push."""

from __future__ import annotations

import fnmatch
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from cargomelos.errors import GitError
from cargomelos.git.repo import get_current_branch, git_output, run_git_command

if TYPE_CHECKING:
    from semantic_version import Version

    from cargomelos.config import WorkspaceConfig

logger = logging.getLogger(__name__)

DEFAULT_ALLOW_BRANCH = "master"
COMMIT_FOOTER = "Generated by cargomelos"


@dataclass
class GitOptions:
    """How `version` interacts with git.

    Prefixes, message and remote fall back to the workspace configuration
    when left as None.
    """

    no_git_commit: bool = False
    allow_branch: str | None = None
    amend: bool = False
    message: str | None = None
    no_git_tag: bool = False
    no_individual_tags: bool = False
    no_global_tag: bool = False
    tag_prefix: str | None = None
    individual_tag_prefix: str | None = None
    no_git_push: bool = False
    git_remote: str | None = None

    def __post_init__(self) -> None:
        if self.individual_tag_prefix is not None and "%n" not in self.individual_tag_prefix:
            raise GitError("individual tag prefix must contain '%n'")
        if self.amend and self.message is not None:
            raise GitError("a commit message cannot be given when amending")

    def remote(self, config: WorkspaceConfig) -> str:
        return self.git_remote or config.versioning.git_remote

    def validate(self, root: Path, config: WorkspaceConfig) -> str | None:
        """Check the repository is in a state we can release from.

        Returns:
            The current branch, or None when no commit will be made.

        Raises:
            GitError: If the repository has no commits, HEAD is detached, the
                branch is not allowed, or it is missing from or behind the
                remote.
        """
        if self.no_git_commit:
            return None

        result = run_git_command(
            ["rev-list", "--count", "--all", "--max-count=1"], root, check=False
        )
        if "not a git repository" in result.stderr:
            raise GitError("not a git repository", command="git rev-list")
        if result.stdout.strip() == "0":
            raise GitError("repository has no commits")

        branch = get_current_branch(root)
        if branch == "HEAD":
            raise GitError("not on a branch")

        allow_branch = self.allow_branch or config.allow_branch or DEFAULT_ALLOW_BRANCH
        test_branch = branch
        if branch == "main" and allow_branch == DEFAULT_ALLOW_BRANCH:
            test_branch = DEFAULT_ALLOW_BRANCH

        if not fnmatch.fnmatchcase(test_branch, allow_branch):
            raise GitError(f"branch {branch} is not allowed by pattern {allow_branch!r}")

        if not self.no_git_push:
            remote = self.remote(config)
            remote_branch = f"{remote}/{branch}"

            ref = git_output(
                ["show-ref", "--verify", f"refs/remotes/{remote_branch}"], root, check=False
            )
            if not ref:
                raise GitError(f"remote {remote} has no branch {branch}")

            run_git_command(["remote", "update"], root, check=False)

            behind = git_output(
                ["rev-list", "--left-only", "--count", f"{remote_branch}...{branch}"],
                root,
                check=False,
            )
            if behind != "0":
                raise GitError(f"local branch {branch} is behind upstream {remote_branch}")

        return branch

    def commit_message(
        self,
        config: WorkspaceConfig,
        common_version: Version | None,
        new_versions: Mapping[str, Version],
    ) -> str:
        template = self.message or config.versioning.commit_message
        released = "\n".join(f"{name}@{version}" for name, version in sorted(new_versions.items()))
        message = f"{template}\n\n{released}\n\n{COMMIT_FOOTER}"
        return message.replace(
            "%v", str(common_version) if common_version is not None else "independent packages"
        )

    def tags(
        self,
        config: WorkspaceConfig,
        common_version: Version | None,
        new_versions: Mapping[str, Version],
    ) -> list[str]:
        """Tags to create for a release, global tag first."""
        if self.no_git_tag:
            return []

        tags = []
        if not self.no_global_tag and common_version is not None:
            prefix = self.tag_prefix if self.tag_prefix is not None else config.versioning.tag_prefix
            tags.append(f"{prefix}{common_version}")

        if not (self.no_individual_tags or config.no_individual_tags):
            prefix = self.individual_tag_prefix or config.versioning.individual_tag_prefix
            for name, version in sorted(new_versions.items()):
                tags.append(f"{prefix.replace('%n', name)}{version}")
        return tags

    def commit(
        self,
        root: Path,
        common_version: Version | None,
        new_versions: Mapping[str, Version],
        branch: str | None,
        config: WorkspaceConfig,
    ) -> None:
        """Commit manifest changes, tag the release and push it.

        Raises:
            GitError: If any git step fails.
        """
        if self.no_git_commit:
            return
        if branch is None:
            raise GitError("cannot commit without a validated branch")

        logger.info("committing changes")
        run_git_command(["add", "-u"], root)

        if self.amend:
            run_git_command(["commit", "--amend", "--no-edit"], root)
        else:
            message = self.commit_message(config, common_version, new_versions)
            run_git_command(["commit", "-m", message], root)

        tags = self.tags(config, common_version, new_versions)
        if tags:
            logger.info("tagging")
        for tag in tags:
            run_git_command(["tag", tag, "-m", tag], root)

        if not self.no_git_push:
            remote = self.remote(config)
            logger.info("pushing to %s", remote)
            run_git_command(["push", "--follow-tags", remote, branch], root)
