"""Local NuGet package cache source (``~/.nuget/packages`` layout)."""
from __future__ import annotations

import logging
import os
from typing import Optional, Set

from ...common.logging_utils import extra_context, is_debug_enabled
from ...constants import Constants, default_cache_root
from ...errors import NuspecParseError
from .nuspec import parse_nuspec
from .results import FetchResult

logger = logging.getLogger(__name__)


class LocalCacheSource:
    """Enumerate versions and read nuspecs from the on-disk package cache.

    NuGet always stores packages in lowercase folders, so the id is lowercased
    before any path is built; case-sensitive filesystems still find them.
    """

    name = "local"

    def __init__(self, cache_root: Optional[str] = None):
        self.cache_root = cache_root or default_cache_root()

    def package_dir(self, package_id: str) -> str:
        return os.path.join(self.cache_root, package_id.lower())

    def nuspec_path(self, package_id: str, version: str) -> str:
        lowered = package_id.lower()
        return os.path.join(self.cache_root, lowered, version, f"{lowered}{Constants.NUSPEC_EXTENSION}")

    def list_versions(self, package_id: str) -> Set[str]:
        """Return the version folder names cached for ``package_id`` (empty when absent)."""
        try:
            with os.scandir(self.package_dir(package_id)) as entries:
                return {entry.name for entry in entries if entry.is_dir()}
        except (FileNotFoundError, NotADirectoryError):
            return set()
        except OSError as exc:
            logger.warning("Couldn't list local cache for %s: %s", package_id, exc)
            return set()

    def fetch_descriptor(self, package_id: str, version: str) -> FetchResult:
        path = self.nuspec_path(package_id, version)
        if not os.path.isfile(path):
            logger.error(
                "Package '%s', version %s does not contain nuspec in local cache (%s)",
                package_id, version, path,
            )
            return FetchResult.not_found(self.name, f"missing {path}")
        try:
            with open(path, "rb") as fh:
                descriptor = parse_nuspec(fh.read())
        except (OSError, NuspecParseError) as exc:
            # Local cache errors are not fatal: the registry gets a chance next.
            logger.info("Couldn't read nuspec for '%s', version %s: %s", package_id, version, exc)
            return FetchResult.failed(self.name, str(exc))

        if is_debug_enabled(logger):
            logger.debug(
                "Read nuspec from local cache",
                extra=extra_context(
                    event="fetch", component="local_cache", action="fetch_descriptor",
                    outcome="success", target=path,
                ),
            )
        return FetchResult.found(descriptor, self.name)
