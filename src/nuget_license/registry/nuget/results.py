"""Tagged results returned by source fetch strategies."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ...constants import FetchStatus
from ...models import PackageDescriptor


@dataclass(frozen=True)
class FetchResult:
    """Outcome of one fetch attempt: found, not_found or error."""
    status: FetchStatus
    descriptor: Optional[PackageDescriptor] = None
    source: str = ""
    error: Optional[str] = None

    @classmethod
    def found(cls, descriptor: PackageDescriptor, source: str) -> "FetchResult":
        return cls(FetchStatus.FOUND, descriptor, source)

    @classmethod
    def not_found(cls, source: str, reason: Optional[str] = None) -> "FetchResult":
        return cls(FetchStatus.NOT_FOUND, None, source, reason)

    @classmethod
    def failed(cls, source: str, error: str) -> "FetchResult":
        return cls(FetchStatus.ERROR, None, source, error)

    @property
    def ok(self) -> bool:
        return self.status is FetchStatus.FOUND and self.descriptor is not None
