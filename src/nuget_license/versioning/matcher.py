"""Pick the best candidate version for a NuGet version range."""
from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from ..common.logging_utils import extra_context, is_debug_enabled
from .range import NuGetVersion, parse_range, parse_version

logger = logging.getLogger(__name__)


def parse_candidates(candidates: Iterable[str]) -> List[NuGetVersion]:
    """Parse candidate strings, dropping the malformed ones."""
    parsed: List[NuGetVersion] = []
    for candidate in candidates:
        try:
            parsed.append(parse_version(candidate))
        except (TypeError, ValueError):
            if is_debug_enabled(logger):
                logger.debug(
                    "Discarding malformed candidate version",
                    extra=extra_context(
                        event="parse", component="matcher", action="parse_candidates",
                        outcome="invalid_version", target=str(candidate),
                    ),
                )
    return parsed


def pick_version(version_range: str, candidates: Iterable[str]) -> Optional[str]:
    """Return the highest candidate satisfying ``version_range``.

    Args:
        version_range: NuGet range expression (``[1.0,2.0)``, ``1.2.3``, ``1.*`` ...).
        candidates: Available version strings from a source.

    Returns:
        The winning candidate exactly as it was spelled in ``candidates``, or
        None when the range is invalid or nothing satisfies it.
    """
    try:
        spec = parse_range(version_range)
    except ValueError as exc:
        logger.warning("Invalid version range %r: %s", version_range, exc)
        return None

    matching = [ver for ver in parse_candidates(candidates) if spec.satisfies(ver)]
    if not matching:
        return None
    # Spelling breaks ties ("1.0" vs "1.0.0") so set iteration order never matters.
    best = max(matching, key=lambda ver: (ver.sort_key, ver.original))
    return best.original
