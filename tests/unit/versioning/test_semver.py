"""Tests for semantic version bumping."""

from __future__ import annotations

import pytest
from semantic_version import Version

from cargomelos.errors import VersionError
from cargomelos.versioning.semver import (
    BumpType,
    bump_version,
    custom_pre,
    inc_major,
    inc_minor,
    inc_patch,
    inc_preid,
    inc_premajor,
    inc_preminor,
    inc_prepatch,
    parse_version,
    requirement_matches,
    to_simple_spec,
    version_choices,
)


def v(text: str) -> Version:
    return Version(text)


class TestParseVersion:
    """Tests for parse_version."""

    def test_parses_prerelease(self) -> None:
        version = parse_version("1.2.3-rc.1")
        assert version == v("1.2.3-rc.1")

    def test_strips_whitespace(self) -> None:
        assert parse_version(" 0.1.0\n") == v("0.1.0")

    @pytest.mark.parametrize("text", ["1.2", "nope", "", "1.2.3.4"])
    def test_rejects_invalid(self, text: str) -> None:
        with pytest.raises(VersionError, match="invalid version"):
            parse_version(text)


class TestReleaseBumps:
    """Tests for patch, minor and major bumps."""

    def test_patch(self) -> None:
        assert inc_patch(v("0.7.2")) == v("0.7.3")

    def test_patch_finishes_prerelease(self) -> None:
        assert inc_patch(v("0.7.2-rc.0")) == v("0.7.2")

    def test_minor(self) -> None:
        assert inc_minor(v("0.7.2")) == v("0.8.0")

    def test_minor_finishes_prerelease_of_same_minor(self) -> None:
        assert inc_minor(v("0.7.0-rc.0")) == v("0.7.0")

    def test_minor_from_patch_prerelease(self) -> None:
        assert inc_minor(v("0.7.2-rc.0")) == v("0.8.0")

    def test_major(self) -> None:
        assert inc_major(v("0.7.2")) == v("1.0.0")

    def test_major_finishes_prerelease_of_same_major(self) -> None:
        assert inc_major(v("1.0.0-rc.0")) == v("1.0.0")

    def test_major_from_patch_prerelease(self) -> None:
        assert inc_major(v("1.0.1-rc.0")) == v("2.0.0")

    def test_inputs_are_not_mutated(self) -> None:
        current = v("1.2.3")
        inc_major(current)
        inc_prepatch(current)
        assert str(current) == "1.2.3"


class TestPreBumps:
    """Tests for prepatch, preminor and premajor bumps."""

    def test_prepatch_defaults_to_alpha(self) -> None:
        assert inc_prepatch(v("0.7.2")) == v("0.7.3-alpha.0")

    def test_prepatch_with_identifier(self) -> None:
        assert inc_prepatch(v("0.7.2"), "beta") == v("0.7.3-beta.0")

    def test_prepatch_keeps_current_identifier(self) -> None:
        assert inc_prepatch(v("0.7.2-rc.4"), "beta") == v("0.7.3-rc.0")

    def test_preminor(self) -> None:
        assert inc_preminor(v("0.7.2")) == v("0.8.0-alpha.0")

    def test_premajor(self) -> None:
        assert inc_premajor(v("0.7.2")) == v("1.0.0-alpha.0")


class TestIncPreid:
    """Tests for continuing prerelease sequences."""

    def test_starts_sequence_on_release(self) -> None:
        assert inc_preid(v("3.0.0"), "beta") == v("3.0.1-beta.0")

    def test_continues_same_identifier(self) -> None:
        assert inc_preid(v("3.0.0-beta.4"), "beta") == v("3.0.0-beta.5")

    def test_switches_identifier(self) -> None:
        assert inc_preid(v("3.0.0-alpha.19"), "beta") == v("3.0.0-beta.0")

    def test_identifier_without_number(self) -> None:
        assert inc_preid(v("3.0.0-beta"), "beta") == v("3.0.0-beta.0")

    def test_numeric_identifier_bumps_last_number(self) -> None:
        assert inc_preid(v("3.0.0-11.20.a.55.c"), "11") == v("3.0.0-11.20.a.56.c")

    def test_numeric_identifier_switched(self) -> None:
        assert inc_preid(v("3.0.0-11.20"), "rc") == v("3.0.0-rc.0")


class TestCustomPre:
    """Tests for custom_pre."""

    def test_release_suggests_alpha(self) -> None:
        assert custom_pre(v("1.0.0")) == ("alpha", v("1.0.1-alpha.0"))

    def test_prerelease_suggests_current_identifier(self) -> None:
        assert custom_pre(v("1.0.0-rc.2")) == ("rc", v("1.0.0-rc.3"))

    @pytest.mark.parametrize(
        ("current", "identifier", "expected"),
        [
            ("3.0.0-a", "a", "3.0.0-a.0"),
            ("3.0.0-a.11", "a", "3.0.0-a.12"),
            ("3.0.0-a.b", "a", "3.0.0-a.0"),
            ("3.0.0-a.b.1", "a", "3.0.0-a.0"),
            ("3.0.0-11", "11", "3.0.0-12"),
            ("3.0.0-11.a", "11", "3.0.0-12.a"),
            ("3.0.0-11.20", "11", "3.0.0-11.21"),
        ],
    )
    def test_prerelease_shapes(self, current: str, identifier: str, expected: str) -> None:
        assert custom_pre(v(current)) == (identifier, v(expected))


class TestVersionChoices:
    """Tests for version_choices."""

    def test_labels_and_order(self) -> None:
        choices = version_choices(v("1.0.0"))

        assert [label for label, _ in choices] == [
            "Patch (1.0.1)",
            "Minor (1.1.0)",
            "Major (2.0.0)",
            "Prepatch (1.0.1-alpha.0)",
            "Preminor (1.1.0-alpha.0)",
            "Premajor (2.0.0-alpha.0)",
        ]

    def test_preid_applies_to_pre_choices(self) -> None:
        choices = dict(version_choices(v("1.0.0"), "beta"))
        assert choices["Prepatch (1.0.1-beta.0)"] == v("1.0.1-beta.0")


class TestBumpVersion:
    """Tests for bump_version."""

    @pytest.mark.parametrize(
        ("bump", "expected"),
        [
            (BumpType.PATCH, "1.2.4"),
            (BumpType.MINOR, "1.3.0"),
            (BumpType.MAJOR, "2.0.0"),
            (BumpType.PREPATCH, "1.2.4-alpha.0"),
            (BumpType.PREMINOR, "1.3.0-alpha.0"),
            (BumpType.PREMAJOR, "2.0.0-alpha.0"),
            (BumpType.PRERELEASE, "1.2.4-alpha.0"),
        ],
    )
    def test_bumps(self, bump: BumpType, expected: str) -> None:
        assert bump_version(v("1.2.3"), bump) == v(expected)

    def test_skip_returns_none(self) -> None:
        assert bump_version(v("1.2.3"), BumpType.SKIP) is None

    def test_custom(self) -> None:
        assert bump_version(v("1.2.3"), BumpType.CUSTOM, custom=v("5.0.0")) == v("5.0.0")

    def test_custom_requires_version(self) -> None:
        with pytest.raises(VersionError, match="custom version is required"):
            bump_version(v("1.2.3"), BumpType.CUSTOM)

    def test_prerelease_continues_sequence(self) -> None:
        assert bump_version(v("1.0.0-beta.2"), BumpType.PRERELEASE) == v("1.0.0-beta.3")

    def test_prerelease_with_preid(self) -> None:
        assert bump_version(v("1.0.0"), BumpType.PRERELEASE, preid="rc") == v("1.0.1-rc.0")

    def test_bump_type_values_are_lowercase_keywords(self) -> None:
        assert BumpType("premajor") is BumpType.PREMAJOR


class TestRequirements:
    """Tests for Cargo requirement matching."""

    @pytest.mark.parametrize(
        ("requirement", "expected"),
        [
            ("1.2", "^1.2"),
            ("=1.0.0", "==1.0.0"),
            (">= 1.0, < 2.0", ">=1.0,<2.0"),
            ("*", "*"),
            ("1.*", ">=1.0.0,<2.0.0"),
            ("1.2.x", ">=1.2.0,<1.3.0"),
            ("~1.2", "~1.2"),
        ],
    )
    def test_to_simple_spec(self, requirement: str, expected: str) -> None:
        assert to_simple_spec(requirement) == expected

    @pytest.mark.parametrize(
        ("requirement", "version", "matches"),
        [
            ("1.0", "1.5.0", True),
            ("1.0.0", "2.0.0", False),
            ("^0.3.0", "0.3.9", True),
            ("0.3.0", "0.4.0", False),
            ("=1.0.0", "1.0.1", False),
            ("=1.0.0", "1.0.0", True),
            ("*", "9.9.9", True),
            ("1.*", "1.9.0", True),
            ("1.*", "2.0.0", False),
            (">=1.0, <2.0", "1.9.9", True),
            ("1.0.0", "1.0.1-alpha.0", False),
            (">=1.0.0-alpha.0", "1.0.0-alpha.1", True),
            (">=1.0.0-alpha.0", "1.0.1-alpha.0", False),
            ("=1.0.1-alpha.0", "1.0.1-alpha.0", True),
        ],
    )
    def test_requirement_matches(self, requirement: str, version: str, matches: bool) -> None:
        assert requirement_matches(requirement, v(version)) is matches

    def test_invalid_requirement(self) -> None:
        with pytest.raises(VersionError, match="invalid version requirement"):
            requirement_matches("not a version", v("1.0.0"))
