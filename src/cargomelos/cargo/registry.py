"""Querying a Cargo sparse registry index."""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable
from pathlib import Path

import requests

from cargomelos.cargo.client import cargo_config_get
from cargomelos.errors import CargoError, PublishTimeoutError, RegistryError

logger = logging.getLogger(__name__)

CRATES_IO_INDEX = "https://index.crates.io/"
SPARSE_PREFIX = "sparse+"
REQUEST_TIMEOUT = 30

# statuses a sparse index uses for crates it has never seen
_NOT_FOUND = {404, 410, 451}


def index_path(name: str) -> str:
    """Relative path of a crate's file in a registry index.

    >>> index_path("serde")
    'se/rd/serde'
    """
    name = name.lower()
    if len(name) <= 2:
        return f"{len(name)}/{name}"
    if len(name) == 3:
        return f"3/{name[0]}/{name}"
    return f"{name[:2]}/{name[2:4]}/{name}"


def registry_index_url(root: Path, registry: str | None) -> str:
    """Resolve the sparse index URL of a registry.

    Args:
        root: Workspace root, where cargo looks up its configuration.
        registry: Registry name from the cargo config, or None for crates.io.

    Raises:
        RegistryError: If the registry only has a git index.
    """
    if registry is None:
        return CRATES_IO_INDEX

    try:
        url = cargo_config_get(root, f"registries.{registry}.index")
    except CargoError as e:
        raise RegistryError(f"unable to find the index of registry {registry}: {e.message}") from e

    if not url.startswith(SPARSE_PREFIX):
        raise RegistryError(
            f"registry {registry} uses a git index ({url}), only sparse indexes are supported"
        )
    return url[len(SPARSE_PREFIX) :]


class RegistryClient:
    """Answers whether a crate version exists in a sparse registry index."""

    def __init__(
        self,
        index_url: str,
        token: str | None = None,
        cainfo: str | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.index_url = index_url.rstrip("/") + "/"
        self.session = session or requests.Session()
        # the index may lag behind an upload, never serve stale copies
        self.session.headers["Cache-Control"] = "no-cache"
        if token:
            self.session.headers["Authorization"] = token
        if cainfo:
            self.session.verify = cainfo

    @classmethod
    def for_registry(
        cls,
        root: Path,
        registry: str | None,
        token: str | None = None,
    ) -> RegistryClient:
        """Create a client using the cargo configuration of a workspace."""
        try:
            cainfo: str | None = cargo_config_get(root, "http.cainfo")
        except CargoError:
            cainfo = None
        return cls(registry_index_url(root, registry), token=token, cainfo=cainfo)

    def versions(self, name: str) -> list[str]:
        """All versions of a crate listed in the index (yanked included).

        Raises:
            RegistryError: If the index cannot be queried.
        """
        url = self.index_url + index_path(name)
        try:
            response = self.session.get(url, timeout=REQUEST_TIMEOUT)
        except requests.RequestException as e:
            raise RegistryError(f"unable to query {url}: {e}") from e

        if response.status_code in _NOT_FOUND:
            return []
        if response.status_code != 200:
            raise RegistryError(f"unable to query {url}: HTTP {response.status_code}")

        versions = []
        for line in response.text.splitlines():
            if not line.strip():
                continue
            try:
                versions.append(json.loads(line)["vers"])
            except (ValueError, KeyError) as e:
                raise RegistryError(f"malformed index entry for {name}: {line!r}") from e
        return versions

    def is_published(self, name: str, version: str) -> bool:
        published = version in self.versions(name)
        logger.debug("%s v%s published: %s", name, version, published)
        return published

    def wait_until_published(
        self,
        name: str,
        version: str,
        *,
        interval: float = 2.0,
        timeout: float = 300.0,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Poll the index until a version shows up.

        Raises:
            PublishTimeoutError: If the version is still missing after `timeout`
                seconds.
        """
        start = clock()
        logged = False

        while not self.is_published(name, version):
            if clock() - start > timeout:
                raise PublishTimeoutError(name, version, timeout)
            if not logged:
                logger.info("waiting for %s v%s to appear in the registry...", name, version)
                logged = True
            sleep(interval)
