"""Constants used in the project."""

import os
from enum import Enum


class LicenseType(Enum):
    """Kinds of license declarations found in a nuspec.

    Args:
        Enum (string): Value of the nuspec ``license/@type`` attribute.
    """

    EXPRESSION = "expression"
    FILE = "file"


class FetchStatus(Enum):
    """Outcome tags for source fetch strategies."""

    FOUND = "found"
    NOT_FOUND = "not_found"
    ERROR = "error"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration defaults; not intended to provide behavior.
    """

    REGISTRY_URL_NUGET_FLAT = "https://api.nuget.org/v3-flatcontainer"
    ARCHIVE_URL_NUGET = "https://www.nuget.org/api/v2/package"
    NUGET_PACKAGE_PAGE_URL = "https://www.nuget.org/packages/{0}/{1}/License"
    DEPRECATED_LICENSE_URL = "https://aka.ms/deprecateLicenseUrl"

    ENV_NUGET_PACKAGES = "NUGET_PACKAGES"
    ENV_LOG_LEVEL = "NUGET_LICENSE_LOG_LEVEL"
    ENV_LOG_FORMAT = "NUGET_LICENSE_LOG_FORMAT"

    NUSPEC_EXTENSION = ".nuspec"
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    MAX_REDIRECTS = 5
    MAX_EXPANSION_DEPTH = 64
    USER_AGENT = "nuget-license/0.1"


def default_cache_root() -> str:
    """Return the local NuGet package cache root.

    ``NUGET_PACKAGES`` wins over the per-user ``~/.nuget/packages`` default.
    """
    override = os.environ.get(Constants.ENV_NUGET_PACKAGES)
    if override and override.strip():
        return override.strip()
    return os.path.join(os.path.expanduser("~"), ".nuget", "packages")
