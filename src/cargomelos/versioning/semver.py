"""Semantic versioning rules used when choosing new versions.

All functions here are pure: they build new `Version` objects and never
mutate their inputs.
"""

from __future__ import annotations

import re
from enum import Enum

import semantic_version
from semantic_version import Version

from cargomelos.errors import VersionError

DEFAULT_PREID = "alpha"

_WILDCARDS = {"*", "x", "X"}
_OPERATOR = re.compile(r"^(>=|<=|>|<|=|\^|~)?(.*)$")
_PRERELEASE_BODY = re.compile(r"^(\d+)\.(\d+)\.(\d+)-")


class BumpType(Enum):
    """Kinds of version bump, in the order they are offered in prompts."""

    PATCH = "patch"
    MINOR = "minor"
    MAJOR = "major"
    PREPATCH = "prepatch"
    PREMINOR = "preminor"
    PREMAJOR = "premajor"
    SKIP = "skip"
    PRERELEASE = "prerelease"
    CUSTOM = "custom"


def parse_version(text: str) -> Version:
    """Parse a full semantic version such as `1.2.3-rc.1`.

    Raises:
        VersionError: If the text is not a valid semantic version.
    """
    try:
        return Version(text.strip())
    except ValueError as e:
        raise VersionError(f"invalid version {text!r}: {e}") from e


def _is_numeric(identifier: str) -> bool:
    return identifier.isdigit()


def _with(
    version: Version,
    *,
    major: int | None = None,
    minor: int | None = None,
    patch: int | None = None,
    prerelease: tuple[str, ...] = (),
) -> Version:
    return Version(
        major=version.major if major is None else major,
        minor=version.minor if minor is None else minor,
        patch=version.patch if patch is None else patch,
        prerelease=prerelease,
        build=(),
    )


def _next_patch(version: Version) -> Version:
    return _with(version, patch=version.patch + 1)


def _next_minor(version: Version) -> Version:
    return _with(version, minor=version.minor + 1, patch=0)


def _next_major(version: Version) -> Version:
    return _with(version, major=version.major + 1, minor=0, patch=0)


def inc_patch(version: Version) -> Version:
    """Release the next patch, or finish a pending pre-release of it.

    `0.7.2` → `0.7.3`, `0.7.2-rc.0` → `0.7.2`.
    """
    if version.prerelease:
        return _with(version)
    return _next_patch(version)


def inc_minor(version: Version) -> Version:
    """Release the next minor, or finish a pre-release that already targets it.

    `0.7.2` → `0.8.0`, `0.7.0-rc.0` → `0.7.0`, `0.7.2-rc.0` → `0.8.0`.
    """
    if version.prerelease and version.patch == 0:
        return _with(version)
    return _next_minor(version)


def inc_major(version: Version) -> Version:
    """Release the next major, or finish a pre-release that already targets it.

    `0.7.2` → `1.0.0`, `1.0.0-rc.0` → `1.0.0`, `1.0.1-rc.0` → `2.0.0`.
    """
    if version.prerelease and version.minor == 0 and version.patch == 0:
        return _with(version)
    return _next_major(version)


def inc_pre(prerelease: tuple[str, ...], preid: str | None = None) -> tuple[str, ...]:
    """Start a fresh pre-release sequence, keeping the previous leading identifier."""
    if not prerelease:
        return (preid or DEFAULT_PREID, "0")
    if _is_numeric(prerelease[0]):
        return ("0",)
    return (prerelease[0], "0")


def inc_prepatch(version: Version, preid: str | None = None) -> Version:
    return _with(_next_patch(version), prerelease=inc_pre(version.prerelease, preid))


def inc_preminor(version: Version, preid: str | None = None) -> Version:
    return _with(_next_minor(version), prerelease=inc_pre(version.prerelease, preid))


def inc_premajor(version: Version, preid: str | None = None) -> Version:
    return _with(_next_major(version), prerelease=inc_pre(version.prerelease, preid))


def inc_preid(version: Version, preid: str) -> Version:
    """Continue (or start) a pre-release sequence named `preid`.

    Examples:
        `3.0.0` with `beta` → `3.0.1-beta.0`
        `3.0.0-beta.4` with `beta` → `3.0.0-beta.5`
        `3.0.0-alpha.19` with `beta` → `3.0.0-beta.0`
        `3.0.0-11.20.a.55.c` with `11` → `3.0.0-11.20.a.56.c`
    """
    pre = tuple(version.prerelease)

    if not pre:
        return _with(_next_patch(version), prerelease=(preid, "0"))

    first = pre[0]
    if not _is_numeric(first):
        if preid != first:
            return _with(version, prerelease=(preid, "0"))
        if len(pre) > 1 and _is_numeric(pre[1]):
            return _with(version, prerelease=(preid, str(int(pre[1]) + 1)))
        return _with(version, prerelease=(preid, "0"))

    if preid != first:
        return _with(version, prerelease=(preid, "0"))

    # increment the last numeric identifier, leaving the rest intact
    bumped = list(pre)
    for i in range(len(bumped) - 1, -1, -1):
        if _is_numeric(bumped[i]):
            bumped[i] = str(int(bumped[i]) + 1)
            break
    return _with(version, prerelease=tuple(bumped))


def custom_pre(version: Version) -> tuple[str, Version]:
    """Suggest a pre-release identifier and the version it would yield."""
    identifier = version.prerelease[0] if version.prerelease else DEFAULT_PREID
    return identifier, inc_preid(version, identifier)


def version_choices(version: Version, preid: str | None = None) -> list[tuple[str, Version]]:
    """Labelled candidate versions in prompt order (patch through premajor)."""
    candidates = [
        ("Patch", inc_patch(version)),
        ("Minor", inc_minor(version)),
        ("Major", inc_major(version)),
        ("Prepatch", inc_prepatch(version, preid)),
        ("Preminor", inc_preminor(version, preid)),
        ("Premajor", inc_premajor(version, preid)),
    ]
    return [(f"{label} ({v})", v) for label, v in candidates]


def bump_version(
    version: Version,
    bump: BumpType,
    *,
    preid: str | None = None,
    custom: Version | None = None,
) -> Version | None:
    """Apply a bump kind to a version.

    Returns:
        The new version, or None for `BumpType.SKIP`.

    Raises:
        VersionError: If `BumpType.CUSTOM` is requested without a version.
    """
    if bump is BumpType.SKIP:
        return None
    if bump is BumpType.CUSTOM:
        if custom is None:
            raise VersionError("a custom version is required for the 'custom' bump")
        return custom
    if bump is BumpType.PRERELEASE:
        identifier = preid if preid is not None else custom_pre(version)[0]
        return inc_preid(version, identifier)

    simple = {
        BumpType.PATCH: inc_patch,
        BumpType.MINOR: inc_minor,
        BumpType.MAJOR: inc_major,
    }
    if bump in simple:
        return simple[bump](version)

    pre = {
        BumpType.PREPATCH: inc_prepatch,
        BumpType.PREMINOR: inc_preminor,
        BumpType.PREMAJOR: inc_premajor,
    }
    return pre[bump](version, preid)


def _wildcard_range(body: str) -> str | None:
    """Translate `1.*` / `1.2.x` style requirements into explicit bounds."""
    parts = body.split(".")
    if not any(p in _WILDCARDS for p in parts):
        return None
    numbers = []
    for part in parts:
        if part in _WILDCARDS:
            break
        numbers.append(int(part))
    if not numbers:
        return "*"
    if len(numbers) == 1:
        return f">={numbers[0]}.0.0,<{numbers[0] + 1}.0.0"
    return f">={numbers[0]}.{numbers[1]}.0,<{numbers[0]}.{numbers[1] + 1}.0"


def _translate_comparator(comparator: str) -> str:
    match = _OPERATOR.match(comparator)
    if match is None:  # pragma: no cover - the pattern matches any string
        raise ValueError(comparator)
    op, body = match.group(1) or "", match.group(2)

    if not op:
        wildcard = _wildcard_range(body)
        if wildcard is not None:
            return wildcard
        return f"^{body}"
    if op == "=":
        return f"=={body}"
    return f"{op}{body}"


def _names_prerelease_of(requirement: str, version: Version) -> bool:
    """Whether some comparator carries a pre-release of `version`'s release."""
    release = (version.major, version.minor, version.patch)
    for comparator in requirement.split(","):
        match = _OPERATOR.match(comparator.replace(" ", ""))
        if match is None:  # pragma: no cover - the pattern matches any string
            continue
        body = _PRERELEASE_BODY.match(match.group(2))
        if body is not None and tuple(int(g) for g in body.groups()) == release:
            return True
    return False


def to_simple_spec(requirement: str) -> str:
    """Translate a Cargo version requirement into `SimpleSpec` syntax."""
    comparators = [c.replace(" ", "") for c in requirement.split(",")]
    translated = [_translate_comparator(c) for c in comparators if c]
    translated = [t for t in translated if t != "*"]
    return ",".join(translated) or "*"


def requirement_matches(requirement: str, version: Version) -> bool:
    """Check whether a Cargo version requirement accepts a version.

    Bare versions are caret requirements, `=x.y.z` is exact and `*` accepts
    any release, as in Cargo. A pre-release only matches when a comparator
    names a pre-release of the same `major.minor.patch`.

    Raises:
        VersionError: If the requirement cannot be parsed.
    """
    try:
        spec = semantic_version.SimpleSpec(to_simple_spec(requirement))
    except ValueError as e:
        raise VersionError(f"invalid version requirement {requirement!r}: {e}") from e
    if version.prerelease and not _names_prerelease_of(requirement, version):
        return False
    return spec.match(version)
