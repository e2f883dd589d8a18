"""Tests for pre-publish metadata checks."""

from __future__ import annotations

from pathlib import Path

import pytest

from cargomelos.cargo import basic_checks
from cargomelos.workspace import Package


def package(**fields: object) -> Package:
    defaults: dict[str, object] = {"description": "A crate", "license": "MIT"}
    defaults.update(fields)
    return Package(name="x", version="1.0.0", manifest_path=Path("/ws/x/Cargo.toml"), **defaults)


class TestBasicChecks:
    """Tests for basic_checks."""

    def test_valid_package(self) -> None:
        assert basic_checks(package(repository="https://github.com/me/x", keywords=["cli"])) == []

    def test_missing_description(self) -> None:
        assert basic_checks(package(description=None)) == ["'description' field should be set"]

    def test_missing_license(self) -> None:
        assert basic_checks(package(license=None)) == [
            "either 'license' or 'license-file' field should be set"
        ]

    def test_license_file_is_enough(self) -> None:
        assert basic_checks(package(license=None, license_file="LICENSE")) == []

    def test_description_too_long(self) -> None:
        problems = basic_checks(package(description="x" * 1001))
        assert problems == ["Description is too long (max 1000 characters)"]

    def test_bad_scheme(self) -> None:
        problems = basic_checks(package(homepage="ftp://example.com"))
        assert problems == [
            "URL for field `homepage` must begin with http:// or https:// (url: ftp://example.com)"
        ]

    def test_not_a_url(self) -> None:
        problems = basic_checks(package(documentation="docs"))
        assert "`documentation` is not a valid url: `docs`" in problems

    def test_too_many_keywords(self) -> None:
        problems = basic_checks(package(keywords=["a", "b", "c", "d", "e", "f"]))
        assert problems == ["Too many keywords (max 5 keywords)"]

    @pytest.mark.parametrize(
        ("keyword", "problem"),
        [
            ("x" * 21, "Keyword is too long (max 20 characters): " + "x" * 21),
            ("-cli", "Keyword contains invalid characters: -cli"),
            ("c li", "Keyword contains invalid characters: c li"),
            ("ünicode", "Keyword contains invalid characters: ünicode"),
        ],
    )
    def test_bad_keywords(self, keyword: str, problem: str) -> None:
        assert basic_checks(package(keywords=[keyword])) == [problem]

    def test_keyword_allowed_characters(self) -> None:
        assert basic_checks(package(keywords=["no_std", "web-assembly", "c++"])) == []
