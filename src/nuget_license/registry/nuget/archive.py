"""Fallback source: download the full .nupkg archive and read entries from it."""
from __future__ import annotations

import io
import logging
import zipfile
from typing import Optional

from ...common import http_client
from ...common.logging_utils import safe_url
from ...constants import Constants
from ...errors import NuspecParseError
from .nuspec import parse_nuspec
from .remote import RemoteSource
from .results import FetchResult

logger = logging.getLogger(__name__)


def _find_entry(archive: zipfile.ZipFile, entry_name: str) -> Optional[str]:
    """Locate ``entry_name`` in the archive, ignoring case and path separator style."""
    wanted = entry_name.replace("\\", "/").lstrip("/").lower()
    for name in archive.namelist():
        if name.replace("\\", "/").lower() == wanted:
            return name
    return None


class ArchiveSource(RemoteSource):
    """Read files from ``{archive_base}/{id}/{version}`` package archives."""

    name = "archive"

    def _download(self, package_id: str, version: str) -> Optional[zipfile.ZipFile]:
        url = self._url(package_id, version)
        logger.debug("Attempting to download: %s", safe_url(url))
        status, body = http_client.get_bytes(
            self.session, url, context=self.name, timeout=self.timeout, cancel_event=self.cancel_event
        )
        if body is None:
            if status:
                logger.warning("%s failed due to %s!", safe_url(url), status)
            return None
        try:
            return zipfile.ZipFile(io.BytesIO(body))
        except zipfile.BadZipFile as exc:
            logger.warning("%s is not a valid package archive: %s", safe_url(url), exc)
            return None

    def _read_entry(self, package_id: str, version: str, entry_name: str) -> Optional[bytes]:
        if not package_id.strip() or not version.strip():
            return None
        archive = self._download(package_id, version)
        if archive is None:
            return None
        with archive:
            member = _find_entry(archive, entry_name)
            if member is None:
                logger.debug("%s was not found in NuGet package: %s", entry_name, package_id)
                return None
            logger.debug("Attempting to read: %s", member)
            return archive.read(member)

    def fetch_descriptor(self, package_id: str, version: str) -> FetchResult:
        entry = f"{package_id}{Constants.NUSPEC_EXTENSION}"
        try:
            data = self._read_entry(package_id, version, entry)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            logger.warning("Couldn't read %s from %s %s: %s", entry, package_id, version, exc)
            return FetchResult.failed(self.name, str(exc))
        if data is None:
            return FetchResult.not_found(self.name, f"{entry} unavailable")
        try:
            return FetchResult.found(parse_nuspec(data), self.name)
        except NuspecParseError as exc:
            logger.error("Couldn't parse %s from package archive: %s", entry, exc)
            return FetchResult.failed(self.name, str(exc))

    def fetch_file(self, package_id: str, version: str, entry_name: str) -> Optional[str]:
        """Return a text file embedded in the package (e.g. a license file), or None."""
        try:
            data = self._read_entry(package_id, version, entry_name)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            # zlib.error, RuntimeError and NotImplementedError surface from corrupt or encrypted entries.
            logger.warning("Couldn't read %s from %s %s: %s", entry_name, package_id, version, exc)
            return None
        if data is None:
            return None
        return data.decode("utf-8-sig", errors="replace")
