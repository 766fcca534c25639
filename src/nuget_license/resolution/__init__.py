"""Package resolution: caches, license normalization, transitive expansion and orchestration."""

from .cache import MemoCache, ResolutionContext
from .expander import TransitiveExpander
from .licensing import LicenseNormalizer, LicenseValidator, ValidationResult
from .orchestrator import Resolver, SourceTier

__all__ = [
    "LicenseNormalizer",
    "LicenseValidator",
    "MemoCache",
    "ResolutionContext",
    "Resolver",
    "SourceTier",
    "TransitiveExpander",
    "ValidationResult",
]
