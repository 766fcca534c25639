"""NuGet version and version-range parsing on top of semantic_version.

NuGet versions carry up to four numeric parts (``major.minor.patch.revision``)
plus optional prerelease and build labels. The first three parts and the
prerelease label are held in a ``semantic_version.Version``; the revision is
kept beside it so ``1.0.0.1`` still sorts above ``1.0.0``.

Supported range notation:

- ``1.2.3``          exact version
- ``[1.2.3]``        exact version
- ``[1.0,2.0)``      interval; ``[``/``]`` inclusive, ``(``/``)`` exclusive
- ``(,2.0]``, ``[1.0,)``   half-open intervals
- ``*``, ``1.*``, ``1.2.*``, ``1.2.3.*``   floating stable versions
- ``1.2.3-*``, ``1.2.3-beta*``             floating prerelease versions
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Tuple

import semantic_version

_VERSION_RE = re.compile(
    r"^(\d+)(?:\.(\d+))?(?:\.(\d+))?(?:\.(\d+))?"
    r"(?:-([0-9A-Za-z][0-9A-Za-z.\-]*))?"
    r"(?:\+([0-9A-Za-z.\-]+))?$"
)
_FLOAT_NUMERIC_RE = re.compile(r"^((?:\d+\.){0,3})\*$")
_FLOAT_PRERELEASE_RE = re.compile(r"^(\d+(?:\.\d+){0,3})-([0-9A-Za-z.\-]*)\*$")


@dataclass(frozen=True)
class NuGetVersion:
    """A parsed candidate version that remembers its original spelling."""
    version: semantic_version.Version
    revision: int
    original: str

    @property
    def is_prerelease(self) -> bool:
        return bool(self.version.prerelease)

    @property
    def sort_key(self) -> Tuple[int, int, int, int, semantic_version.Version]:
        # Revision ranks above the prerelease label: 1.0.0.2-beta > 1.0.0.1.
        label = semantic_version.Version(major=0, minor=0, patch=0, prerelease=self.version.prerelease, build=())
        return self.version.major, self.version.minor, self.version.patch, self.revision, label

    def __str__(self) -> str:
        return self.original


def parse_version(text: str) -> NuGetVersion:
    """Parse a NuGet version string.

    Raises:
        ValueError: when ``text`` is not a valid NuGet version.
    """
    if text is None:
        raise ValueError("Version string is None")
    stripped = text.strip()
    match = _VERSION_RE.match(stripped)
    if not match:
        raise ValueError(f"Invalid NuGet version: {text!r}")
    major, minor, patch, revision, prerelease, _build = match.groups()
    version = semantic_version.Version(
        major=int(major),
        minor=int(minor or 0),
        patch=int(patch or 0),
        prerelease=tuple(prerelease.split(".")) if prerelease else (),
        build=(),
    )
    return NuGetVersion(version=version, revision=int(revision or 0), original=stripped)


def _bump(numeric: str, parts: int) -> str:
    """Increment the last of ``parts`` numeric components and zero the rest."""
    pieces = [int(p) for p in numeric.split(".")][:parts]
    pieces[-1] += 1
    return ".".join(str(p) for p in pieces)


@dataclass(frozen=True)
class VersionRange:
    """Bounds of a NuGet version range; ``None`` bounds are open."""
    raw: str
    min_version: Optional[NuGetVersion] = None
    min_inclusive: bool = True
    max_version: Optional[NuGetVersion] = None
    max_inclusive: bool = False
    include_prerelease: bool = False

    @property
    def is_exact(self) -> bool:
        return (
            self.min_version is not None
            and self.max_version is not None
            and self.min_inclusive
            and self.max_inclusive
            and self.min_version.sort_key == self.max_version.sort_key
        )

    def satisfies(self, candidate: NuGetVersion) -> bool:
        if candidate.is_prerelease and not self.include_prerelease:
            return False
        key = candidate.sort_key
        if self.min_version is not None:
            low = self.min_version.sort_key
            if key < low or (key == low and not self.min_inclusive):
                return False
        if self.max_version is not None:
            high = self.max_version.sort_key
            if key > high or (key == high and not self.max_inclusive):
                return False
        return True


def _parse_interval(raw: str, text: str) -> VersionRange:
    if len(text) < 2 or text[-1] not in "])":
        raise ValueError(f"Unbalanced version range: {raw!r}")
    min_inclusive = text[0] == "["
    max_inclusive = text[-1] == "]"
    body = text[1:-1].strip()

    if "," not in body:
        if not (min_inclusive and max_inclusive) or not body:
            raise ValueError(f"Single-version range must use [x]: {raw!r}")
        exact = parse_version(body)
        return VersionRange(raw, exact, True, exact, True, exact.is_prerelease)

    low_text, high_text = (part.strip() for part in body.split(",", 1))
    if not low_text and not high_text:
        raise ValueError(f"Range without bounds: {raw!r}")
    low = parse_version(low_text) if low_text else None
    high = parse_version(high_text) if high_text else None
    if low is not None and high is not None and low.sort_key > high.sort_key:
        raise ValueError(f"Range minimum above maximum: {raw!r}")
    include_prerelease = bool((low and low.is_prerelease) or (high and high.is_prerelease))
    return VersionRange(raw, low, min_inclusive, high, max_inclusive, include_prerelease)


def _parse_float(raw: str, text: str) -> Optional[VersionRange]:
    if text in ("*", "*-*"):
        return VersionRange(raw, include_prerelease=text == "*-*")

    match = _FLOAT_NUMERIC_RE.match(text)
    if match:
        numeric = match.group(1).rstrip(".")
        if not numeric:
            return VersionRange(raw)
        depth = numeric.count(".") + 1
        low = parse_version(numeric)
        high = parse_version(_bump(numeric, depth))
        return VersionRange(raw, low, True, high, False)

    match = _FLOAT_PRERELEASE_RE.match(text)
    if match:
        numeric, label = match.group(1), match.group(2).rstrip(".-")
        parts = numeric.split(".")
        while len(parts) < 3:
            parts.append("0")
        padded = ".".join(parts)
        low = parse_version(f"{padded}-{label or '0'}")
        high = parse_version(f"{_bump(padded, len(parts))}-0")
        return VersionRange(raw, low, True, high, False, True)

    return None


def parse_range(raw: str) -> VersionRange:
    """Parse a NuGet version range expression.

    Raises:
        ValueError: when the expression is empty or malformed.
    """
    if raw is None or not raw.strip():
        raise ValueError("Empty version range")
    text = re.sub(r"\s+", "", raw)

    if text[0] in "[(":
        return _parse_interval(raw, text)

    if "*" in text:
        floating = _parse_float(raw, text)
        if floating is None:
            raise ValueError(f"Unsupported floating range: {raw!r}")
        return floating

    exact = parse_version(text)
    return VersionRange(raw, exact, True, exact, True, exact.is_prerelease)
