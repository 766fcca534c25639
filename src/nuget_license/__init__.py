"""Resolve NuGet package references into licensed package metadata."""

from .config import ResolverOptions, load_options
from .errors import ConfigurationError, NuGetLicenseError
from .models import PackageDescriptor, PackageRequirement, ResolvedPackageMap
from .resolution import ResolutionContext, Resolver

__all__ = [
    "ConfigurationError",
    "NuGetLicenseError",
    "PackageDescriptor",
    "PackageRequirement",
    "ResolutionContext",
    "ResolvedPackageMap",
    "Resolver",
    "ResolverOptions",
    "load_options",
]

__version__ = "0.1.0"
