"""NuGet registry package.

This package provides the NuGet package sources:
- local.py: versions and nuspecs from the on-disk package cache
- remote.py: versions and nuspecs from the flat-container registry API
- archive.py: nuspec and embedded files from downloaded .nupkg archives
- nuspec.py: namespace-agnostic nuspec decoding
- results.py: tagged fetch results
"""

from .archive import ArchiveSource
from .local import LocalCacheSource
from .nuspec import parse_nuspec
from .remote import RemoteRegistrySource
from .results import FetchResult

__all__ = [
    "ArchiveSource",
    "FetchResult",
    "LocalCacheSource",
    "RemoteRegistrySource",
    "parse_nuspec",
]
