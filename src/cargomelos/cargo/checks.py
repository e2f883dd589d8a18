"""Pre-publish metadata checks."""

from __future__ import annotations

from typing import TYPE_CHECKING
from urllib.parse import urlparse

if TYPE_CHECKING:
    from cargomelos.workspace.package import Package

MAX_DESCRIPTION_LEN = 1000
MAX_KEYWORDS = 5
MAX_KEYWORD_LEN = 20

_KEYWORD_EXTRA_CHARS = set("_-+")


def _valid_keyword(keyword: str) -> bool:
    if not keyword or not (keyword[0].isascii() and keyword[0].isalnum()):
        return False
    return all((c.isascii() and c.isalnum()) or c in _KEYWORD_EXTRA_CHARS for c in keyword[1:])


def _check_url(url: str | None, field: str, problems: list[str]) -> None:
    if url is None:
        return

    # checked on the raw string, parsing normalizes some malformed URLs
    if not url.startswith(("http://", "https://")):
        problems.append(f"URL for field `{field}` must begin with http:// or https:// (url: {url})")

    try:
        parsed = urlparse(url)
    except ValueError:
        parsed = None
    if parsed is None or not parsed.scheme or not parsed.netloc:
        problems.append(f"`{field}` is not a valid url: `{url}`")


def basic_checks(package: Package) -> list[str]:
    """Check the metadata crates.io expects before publishing.

    Passing these checks does not guarantee the registry will accept the
    package.

    Returns:
        Problems found, empty if none.
    """
    problems: list[str] = []

    if package.description is None:
        problems.append("'description' field should be set")
    if package.license is None and package.license_file is None:
        problems.append("either 'license' or 'license-file' field should be set")

    if package.description is not None and len(package.description) > MAX_DESCRIPTION_LEN:
        problems.append(f"Description is too long (max {MAX_DESCRIPTION_LEN} characters)")

    _check_url(package.homepage, "homepage", problems)
    _check_url(package.documentation, "documentation", problems)
    _check_url(package.repository, "repository", problems)

    if len(package.keywords) > MAX_KEYWORDS:
        problems.append(f"Too many keywords (max {MAX_KEYWORDS} keywords)")

    for keyword in package.keywords:
        if len(keyword) > MAX_KEYWORD_LEN:
            problems.append(
                f"Keyword is too long (max {MAX_KEYWORD_LEN} characters): {keyword}"
            )
        elif not _valid_keyword(keyword):
            problems.append(f"Keyword contains invalid characters: {keyword}")

    return problems
