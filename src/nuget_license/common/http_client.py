"""Shared HTTP helpers used by the registry and archive sources.

Encapsulates session setup and request/timeout error handling so source
modules avoid duplicating try/except blocks. Transport failures never exit
the process: they are logged and reported as ``None`` so the caller can fall
through to the next source.
"""
from __future__ import annotations

import json
import logging
import threading
from typing import Any, Optional, Tuple

import requests

from ..constants import Constants
from .logging_utils import extra_context, is_debug_enabled, safe_url, Timer

logger = logging.getLogger(__name__)

HEADERS_JSON = {"Accept": "application/json"}


def build_session(
    *,
    proxy_url: Optional[str] = None,
    proxy_system_auth: bool = False,
    ignore_ssl_errors: bool = False,
    max_redirects: int = Constants.MAX_REDIRECTS,
) -> requests.Session:
    """Create the requests session shared by all remote sources.

    Args:
        proxy_url: Optional proxy for both http and https traffic.
        proxy_system_auth: Let requests pick credentials from the environment
            (netrc, proxy env vars) instead of ignoring them.
        ignore_ssl_errors: Disable certificate verification.
        max_redirects: Upper bound on followed redirects.

    Returns:
        requests.Session: Configured session.
    """
    session = requests.Session()
    session.headers.update({"User-Agent": Constants.USER_AGENT})
    session.max_redirects = max_redirects
    session.trust_env = proxy_system_auth
    if proxy_url:
        session.proxies.update({"http": proxy_url, "https": proxy_url})
    if ignore_ssl_errors:
        session.verify = False
    return session


def safe_get(
    session: requests.Session,
    url: str,
    *,
    context: str,
    timeout: float = Constants.REQUEST_TIMEOUT,
    cancel_event: Optional[threading.Event] = None,
    **kwargs: Any,
) -> Optional[requests.Response]:
    """Perform a GET request with consistent error handling and DEBUG traces.

    Args:
        session: Session to issue the request with.
        url: Target URL.
        context: Human-readable source tag for logs (e.g., "registry", "archive").
        timeout: Request timeout in seconds; timeouts are not retried.
        cancel_event: When set before the call, no request is issued.
        **kwargs: Passed through to ``session.get``.

    Returns:
        The response, or None on cancellation, timeout or connection error.
    """
    safe_target = safe_url(url)
    if cancel_event is not None and cancel_event.is_set():
        logger.info("%s request to %s skipped: resolution cancelled", context, safe_target)
        return None

    with Timer() as t:
        if is_debug_enabled(logger):
            logger.debug(
                "HTTP request",
                extra=extra_context(
                    event="http_request", component="http_client", action="GET",
                    target=safe_target, context=context,
                ),
            )
        try:
            res = session.get(url, timeout=timeout, **kwargs)
        except requests.Timeout:
            logger.warning("%s request to %s timed out after %s seconds", context, safe_target, timeout)
            return None
        except requests.RequestException as exc:  # includes ConnectionError
            logger.warning("%s connection error for %s: %s", context, safe_target, exc)
            return None

    if is_debug_enabled(logger):
        logger.debug(
            "HTTP response",
            extra=extra_context(
                event="http_response", component="http_client", action="GET",
                outcome="success" if res.ok else "failure", status_code=res.status_code,
                duration_ms=t.duration_ms(), target=safe_target, context=context,
            ),
        )
    return res


def get_json(
    session: requests.Session,
    url: str,
    *,
    context: str,
    **kwargs: Any,
) -> Tuple[int, Optional[Any]]:
    """Perform GET and parse the JSON body.

    Returns:
        Tuple of (status_code, parsed_json_or_none); status is 0 when no
        response was received.
    """
    res = safe_get(session, url, context=context, headers=HEADERS_JSON, **kwargs)
    if res is None:
        return 0, None
    if not res.ok:
        return res.status_code, None
    try:
        return res.status_code, json.loads(res.text)
    except ValueError:
        logger.warning("%s returned invalid JSON from %s", context, safe_url(url))
        return res.status_code, None


def get_bytes(
    session: requests.Session,
    url: str,
    *,
    context: str,
    **kwargs: Any,
) -> Tuple[int, Optional[bytes]]:
    """Perform GET and buffer the whole body in memory.

    Returns:
        Tuple of (status_code, body_or_none).
    """
    res = safe_get(session, url, context=context, **kwargs)
    if res is None:
        return 0, None
    if not res.ok:
        return res.status_code, None
    return res.status_code, res.content

