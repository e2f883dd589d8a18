"""Interactive terminal prompts."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import questionary
from questionary import Style
from semantic_version import Version

from cargomelos.errors import PromptCancelledError, VersionError
from cargomelos.versioning.semver import custom_pre, inc_preid, parse_version, version_choices

SKIP = "skip"
CUSTOM_PRERELEASE = "custom-prerelease"
CUSTOM_VERSION = "custom-version"


def get_style() -> Style:
    """Style used for all prompts."""
    return Style(
        [
            ("qmark", "fg:#673ab7 bold"),
            ("question", "bold"),
            ("answer", "fg:#f44336 bold"),
            ("pointer", "fg:#673ab7 bold"),
            ("highlighted", "fg:#673ab7 bold"),
            ("selected", "fg:#cc5454"),
            ("separator", "fg:#cc5454"),
            ("instruction", "fg:#888888"),
        ]
    )


def _ask(fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    """Run a questionary prompt.

    Raises:
        PromptCancelledError: If the user cancels the prompt.
    """
    try:
        result = fn(*args, **kwargs).ask()
    except KeyboardInterrupt:
        result = None
    if result is None:
        raise PromptCancelledError()
    return result


def _validate_version(text: str) -> bool | str:
    try:
        parse_version(text)
    except VersionError:
        return "Not a valid semantic version"
    return True


def ask_prerelease_identifier(current: Version) -> str:
    """Ask for a prerelease identifier, suggesting the current one."""
    identifier, suggestion = custom_pre(current)
    answer = _ask(
        questionary.text,
        f"Enter a prerelease identifier (default: '{identifier}', yielding {suggestion})",
        default=identifier,
        style=get_style(),
    )
    return answer.strip() or identifier


def ask_custom_version() -> Version:
    answer = _ask(
        questionary.text,
        "Enter a custom version",
        validate=_validate_version,
        style=get_style(),
    )
    return parse_version(answer)


def select_new_version(
    current: Version,
    name: str | None = None,
    preid: str | None = None,
) -> Version | None:
    """Ask which version to move to.

    Args:
        current: Current version.
        name: Package name, or None for the common version.
        preid: Prerelease identifier for the pre* choices.

    Returns:
        The chosen version, or None to skip.

    Raises:
        PromptCancelledError: If the user cancels.
    """
    choices = [questionary.Choice(title=label, value=v) for label, v in version_choices(current, preid)]
    choices += [
        questionary.Choice(title=f"Skip (stays {current})", value=SKIP),
        questionary.Choice(title="Custom Prerelease", value=CUSTOM_PRERELEASE),
        questionary.Choice(title="Custom Version", value=CUSTOM_VERSION),
    ]

    target = f"for {name} " if name else ""
    selection = _ask(
        questionary.select,
        f"Select a new version {target}(currently {current})",
        choices=choices,
        style=get_style(),
        use_indicator=True,
    )

    if selection == SKIP:
        return None
    if selection == CUSTOM_PRERELEASE:
        identifier = preid if preid is not None else ask_prerelease_identifier(current)
        return inc_preid(current, identifier)
    if selection == CUSTOM_VERSION:
        return ask_custom_version()
    return selection


def confirm(message: str, default: bool = False) -> bool:
    """Ask a yes/no question. Cancelling counts as no."""
    try:
        answer = questionary.confirm(message, default=default, style=get_style()).ask()
    except KeyboardInterrupt:
        return False
    return bool(answer)
