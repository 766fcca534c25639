"""Exception types raised by nuget_license."""


class NuGetLicenseError(Exception):
    """Base class for errors raised by this package."""


class ConfigurationError(NuGetLicenseError, ValueError):
    """Raised when resolver options are inconsistent; fails the run before resolution."""


class NuspecParseError(NuGetLicenseError):
    """Raised when a nuspec document cannot be decoded into a descriptor."""
