"""Format-preserving edits of Cargo manifests.

Manifests are rewritten line by line with regular expressions instead of
being parsed and re-serialized, so comments, quoting, key spacing and line
endings of untouched lines survive byte for byte.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from enum import Enum, auto
from typing import TYPE_CHECKING

from cargomelos.versioning.semver import requirement_matches

if TYPE_CHECKING:
    from semantic_version import Version

CRLF = "\r\n"
LF = "\n"

_NAME_CHARS = r"[0-9A-Za-z\-_]+"
_PREFIX = r"""(target\.'?([^']+)'?\.|workspace\.)?"""

NAME = re.compile(rf"""^(\s*['"]?name['"]?\s*=\s*['"])({_NAME_CHARS})(['"].*)$""")
VERSION = re.compile(r"""^(\s*['"]?version['"]?\s*=\s*['"])([^'"]+)(['"].*)$""")
PACKAGE = re.compile(rf"""^(\s*['"]?package['"]?\s*=\s*['"])({_NAME_CHARS})(['"].*)$""")

DEP_TABLE = re.compile(rf"^\[{_PREFIX}dependencies]")
BUILD_DEP_TABLE = re.compile(rf"^\[{_PREFIX}build-dependencies]")
DEV_DEP_TABLE = re.compile(rf"^\[{_PREFIX}dev-dependencies]")
DEP_ENTRY = re.compile(rf"^\[{_PREFIX}dependencies\.({_NAME_CHARS})]")
BUILD_DEP_ENTRY = re.compile(rf"^\[{_PREFIX}build-dependencies\.({_NAME_CHARS})]")
DEV_DEP_ENTRY = re.compile(rf"^\[{_PREFIX}dev-dependencies\.({_NAME_CHARS})]")

DEP_DIRECT_VERSION = re.compile(
    rf"""^(\s*['"]?({_NAME_CHARS})['"]?\s*=\s*['"])([^'"]+)(['"].*)$"""
)
DEP_OBJ_VERSION = re.compile(
    rf"""^(\s*['"]?({_NAME_CHARS})['"]?\s*=\s*\{{.*['"]?version['"]?\s*=\s*['"])"""
    r"""([^'"]+)(['"].*}.*)$"""
)
DEP_OBJ_RENAME_VERSION = re.compile(
    rf"""^(\s*['"]?({_NAME_CHARS})['"]?\s*=\s*\{{.*['"]?version['"]?\s*=\s*['"])"""
    rf"""([^'"]+)(['"].*['"]?package['"]?\s*=\s*['"]({_NAME_CHARS})['"].*}}.*)$"""
)
DEP_OBJ_RENAME_BEFORE_VERSION = re.compile(
    rf"""^(\s*['"]?{_NAME_CHARS}['"]?\s*=\s*\{{.*['"]?package['"]?\s*=\s*['"]({_NAME_CHARS})['"]"""
    r""".*['"]?version['"]?\s*=\s*['"])([^'"]+)(['"].*}.*)$"""
)
DEP_DIRECT_NAME = re.compile(rf"""^(\s*['"]?({_NAME_CHARS})['"]?\s*=\s*)(['"][^'"]+['"])(.*)$""")
DEP_OBJ_NAME = re.compile(rf"""^(\s*['"]?({_NAME_CHARS})['"]?\s*=\s*\{{(.*[^\s])?)(\s*}}.*)$""")
DEP_OBJ_RENAME_NAME = re.compile(
    rf"""^(\s*['"]?{_NAME_CHARS}['"]?\s*=\s*\{{.*['"]?package['"]?\s*=\s*['"])"""
    rf"""({_NAME_CHARS})(['"].*}}.*)$"""
)
WORKSPACE_KEY = re.compile(r"""['"]?workspace['"]?\s*=\s*true""")


class _Context(Enum):
    START = auto()
    PACKAGE = auto()
    DEPENDENCIES = auto()
    ENTRY = auto()
    IRRELEVANT = auto()


class _Rewriter:
    def __init__(
        self,
        package_name: str,
        versions: Mapping[str, Version],
        renames: Mapping[str, str],
        exact: bool,
        include_dev_deps: bool,
    ) -> None:
        self.package_name = package_name
        self.versions = versions
        self.renames = renames
        self.exact = exact
        self.include_dev_deps = include_dev_deps

        self.context = _Context.START
        # key of the `[dependencies.<key>]` table being edited
        self.entry = ""
        # index of the last non-blank line of the current dependency entry
        self.entry_end = 0
        # `package = "..."` line owed to the current dependency table
        self.pending_package: str | None = None
        self.lines: list[str] = []

    def run(self, lines: list[str]) -> list[str]:
        for line in lines:
            stripped = line.strip()
            if stripped.startswith("["):
                self._header(stripped)
                self.lines.append(line)
                if self.context is _Context.ENTRY:
                    self.entry_end = len(self.lines) - 1
                continue

            self.lines.append(self._edit(line))
            if self.context is _Context.ENTRY and stripped:
                self.entry_end = len(self.lines) - 1

        self._flush_entry()
        return self.lines

    def _header(self, header: str) -> None:
        self._flush_entry()
        self.entry = ""

        if header.startswith("[package]") or header.startswith("[workspace.package]"):
            self.context = _Context.PACKAGE
        elif DEP_TABLE.match(header) or BUILD_DEP_TABLE.match(header):
            self.context = _Context.DEPENDENCIES
        elif DEV_DEP_TABLE.match(header):
            self.context = (
                _Context.DEPENDENCIES if self.include_dev_deps else _Context.IRRELEVANT
            )
        elif (m := DEP_ENTRY.match(header) or BUILD_DEP_ENTRY.match(header)) is not None:
            self._enter_entry(m.group(3))
        elif (m := DEV_DEP_ENTRY.match(header)) is not None and self.include_dev_deps:
            self._enter_entry(m.group(3))
        else:
            self.context = _Context.IRRELEVANT

    def _enter_entry(self, name: str) -> None:
        self.context = _Context.ENTRY
        self.entry = name
        self.pending_package = self.renames.get(name)

    def _flush_entry(self) -> None:
        if self.context is not _Context.ENTRY or self.pending_package is None:
            return
        self.lines.insert(self.entry_end + 1, f'package = "{self.pending_package}"')
        self.pending_package = None

    def _edit(self, line: str) -> str:
        if self.context is _Context.PACKAGE:
            return self._edit_package(line)
        if self.context is _Context.DEPENDENCIES:
            return self._edit_dependency(line)
        if self.context is _Context.ENTRY:
            return self._edit_entry(line)
        return line

    def _edit_package(self, line: str) -> str:
        if (m := NAME.match(line)) is not None:
            new_name = self.renames.get(self.package_name)
            if new_name is not None:
                return f"{m.group(1)}{new_name}{m.group(3)}"
        elif (m := VERSION.match(line)) is not None:
            new_version = self.versions.get(self.package_name)
            if new_version is not None:
                return f"{m.group(1)}{new_version}{m.group(3)}"
        return line

    def _new_requirement(
        self, name: str, requirement: str, prefix: str, suffix: str
    ) -> str | None:
        new_version = self.versions.get(name)
        if new_version is None:
            return None
        if self.exact:
            return f"{prefix}={new_version}{suffix}"
        if requirement_matches(requirement, new_version):
            return None
        return f"{prefix}{new_version}{suffix}"

    def _edit_dependency(self, line: str) -> str:
        # inherited declarations are edited in the workspace root manifest
        if WORKSPACE_KEY.search(line):
            return line

        edited = None
        if (m := DEP_DIRECT_VERSION.match(line)) is not None:
            edited = self._new_requirement(m.group(2), m.group(3), m.group(1), m.group(4))
        elif (m := DEP_OBJ_RENAME_VERSION.match(line)) is not None:
            edited = self._new_requirement(m.group(5), m.group(3), m.group(1), m.group(4))
        elif (m := DEP_OBJ_RENAME_BEFORE_VERSION.match(line)) is not None:
            edited = self._new_requirement(m.group(2), m.group(3), m.group(1), m.group(4))
        elif (m := DEP_OBJ_VERSION.match(line)) is not None:
            edited = self._new_requirement(m.group(2), m.group(3), m.group(1), m.group(4))
        if edited is not None:
            line = edited

        if not self.renames:
            return line

        if (m := DEP_DIRECT_NAME.match(line)) is not None:
            new_name = self.renames.get(m.group(2))
            if new_name is not None:
                return f'{m.group(1)}{{ version = {m.group(3)}, package = "{new_name}" }}{m.group(4)}'
        elif (m := DEP_OBJ_RENAME_NAME.match(line)) is not None:
            new_name = self.renames.get(m.group(2))
            if new_name is not None:
                return f"{m.group(1)}{new_name}{m.group(3)}"
        elif (m := DEP_OBJ_NAME.match(line)) is not None:
            new_name = self.renames.get(m.group(2))
            if new_name is not None:
                separator = "," if m.group(3) else ""
                return f'{m.group(1)}{separator} package = "{new_name}"{m.group(4)}'
        return line

    def _edit_entry(self, line: str) -> str:
        if WORKSPACE_KEY.search(line):
            self.pending_package = None
            return line

        if (m := PACKAGE.match(line)) is not None:
            self.pending_package = None
            real_name = m.group(2)
            new_name = self.renames.get(real_name)
            if new_name is not None:
                self.context = _Context.IRRELEVANT
                return f"{m.group(1)}{new_name}{m.group(3)}"
            self.entry = real_name
            return line

        if (m := VERSION.match(line)) is not None:
            edited = self._new_requirement(self.entry, m.group(2), m.group(1), m.group(3))
            if edited is not None:
                return edited
        return line


def _split_lines(text: str) -> tuple[list[str], bool]:
    terminated = text.endswith("\n")
    body = text[:-1] if terminated else text
    lines = [line[:-1] if line.endswith("\r") else line for line in body.split("\n")]
    return lines, terminated


def rewrite_manifest(
    text: str,
    package_name: str,
    versions: Mapping[str, Version],
    renames: Mapping[str, str],
    *,
    exact: bool = False,
    include_dev_deps: bool = False,
) -> str:
    """Apply version and rename edits to manifest text.

    Args:
        text: Manifest contents.
        package_name: Name of the package the manifest belongs to, or `""`
            for a virtual workspace manifest.
        versions: New versions keyed by package name.
        renames: New names keyed by current package name.
        exact: Pin dependency requirements to `=<version>` instead of only
            replacing requirements the new version no longer satisfies.
        include_dev_deps: Also edit `[dev-dependencies]` tables.

    Returns:
        The edited text. Identical to the input when nothing applies.

    Raises:
        VersionError: If a requirement on an edited line cannot be parsed.
    """
    if not text:
        return text

    lines, terminated = _split_lines(text)
    rewriter = _Rewriter(package_name, versions, renames, exact, include_dev_deps)
    new_lines = rewriter.run(lines)

    if new_lines == lines:
        return text

    newline = CRLF if CRLF in text else LF
    result = newline.join(new_lines)
    if terminated:
        result += newline
    return result


def change_versions(
    text: str,
    package_name: str,
    versions: Mapping[str, Version],
    exact: bool = False,
    *,
    include_dev_deps: bool = False,
) -> str:
    """Set new versions on a package and on its dependency requirements."""
    return rewrite_manifest(
        text, package_name, versions, {}, exact=exact, include_dev_deps=include_dev_deps
    )


def rename_packages(text: str, package_name: str, renames: Mapping[str, str]) -> str:
    """Rename a package and point its dependencies at renamed packages.

    Dependencies keep their declared key; the new name goes into `package`.
    """
    return rewrite_manifest(text, package_name, {}, renames, include_dev_deps=True)
