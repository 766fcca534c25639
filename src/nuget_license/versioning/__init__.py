"""NuGet version parsing and range matching."""

from .matcher import pick_version
from .range import NuGetVersion, VersionRange, parse_range, parse_version

__all__ = [
    "NuGetVersion",
    "VersionRange",
    "parse_range",
    "parse_version",
    "pick_version",
]
