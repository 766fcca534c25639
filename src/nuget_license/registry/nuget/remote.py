"""NuGet registry client: version index and nuspec download via the flat-container API."""
from __future__ import annotations

import logging
import threading
import urllib.parse
from typing import Optional, Set

import requests

from ...common import http_client
from ...common.logging_utils import extra_context, is_debug_enabled, safe_url
from ...constants import Constants
from ...errors import NuspecParseError
from .nuspec import parse_nuspec
from .results import FetchResult

logger = logging.getLogger(__name__)


class RemoteSource:
    """Common plumbing for sources backed by HTTP."""

    name = "remote"

    def __init__(
        self,
        session: requests.Session,
        base_url: str,
        *,
        timeout: float = Constants.REQUEST_TIMEOUT,
        cancel_event: Optional[threading.Event] = None,
    ):
        self.session = session
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.cancel_event = cancel_event

    def _url(self, *parts: str) -> str:
        # The flat container answers 404 for any uppercase letter in the path.
        quoted = (urllib.parse.quote(part.lower(), safe="") for part in parts)
        return "/".join([self.base_url, *quoted])


class RemoteRegistrySource(RemoteSource):
    """Resolve versions and nuspecs from ``{base}/{id}/index.json`` and ``{base}/{id}/{version}/{id}.nuspec``."""

    name = "registry"

    def list_versions(self, package_id: str) -> Set[str]:
        url = self._url(package_id, "index.json")
        status, data = http_client.get_json(
            self.session, url, context=self.name, timeout=self.timeout, cancel_event=self.cancel_event
        )
        if data is None:
            if status:
                logger.warning("%s failed due to %s!", safe_url(url), status)
            return set()
        versions = data.get("versions") if isinstance(data, dict) else None
        if not isinstance(versions, list):
            logger.warning('No "versions" property found in response to %s', safe_url(url))
            return set()
        return {v for v in versions if isinstance(v, str) and v}

    def fetch_descriptor(self, package_id: str, version: str) -> FetchResult:
        url = self._url(package_id, version, f"{package_id}{Constants.NUSPEC_EXTENSION}")
        res = http_client.safe_get(
            self.session, url, context=self.name, timeout=self.timeout, cancel_event=self.cancel_event
        )
        if res is None:
            return FetchResult.failed(self.name, f"no response from {safe_url(url)}")
        if not res.ok:
            logger.warning("%s failed due to %s!", safe_url(url), res.status_code)
            return FetchResult.not_found(self.name, f"HTTP {res.status_code}")
        try:
            descriptor = parse_nuspec(res.content)
        except NuspecParseError as exc:
            logger.error("Couldn't parse nuspec from %s: %s", safe_url(url), exc)
            return FetchResult.failed(self.name, str(exc))

        if is_debug_enabled(logger):
            logger.debug(
                "Received nuspec",
                extra=extra_context(
                    event="fetch", component="registry", action="fetch_descriptor",
                    outcome="success", target=safe_url(url),
                ),
            )
        return FetchResult.found(descriptor, self.name)
