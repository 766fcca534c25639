"""Builders and scripted sources shared by the test modules."""

import io
import struct
import zipfile
from collections import Counter
from typing import Dict, Iterable, Optional, Set, Tuple

from nuget_license.models import Dependency, DependencyGroup, PackageDescriptor
from nuget_license.registry.nuget.results import FetchResult

NUSPEC_NS = "http://schemas.microsoft.com/packaging/2013/05/nuspec.xsd"


def make_nuspec(
    package_id: str,
    version: str,
    *,
    license_expr: Optional[str] = None,
    license_type: str = "expression",
    license_url: Optional[str] = None,
    authors: str = "Someone",
    dependencies: Iterable[Tuple[str, str]] = (),
    target_framework: str = "net6.0",
) -> str:
    """Render a namespaced nuspec document."""
    parts = [
        '<?xml version="1.0" encoding="utf-8"?>',
        f'<package xmlns="{NUSPEC_NS}">',
        "<metadata>",
        f"<id>{package_id}</id>",
        f"<version>{version}</version>",
        f"<authors>{authors}</authors>",
        f"<description>{package_id} description</description>",
    ]
    if license_expr:
        parts.append(f'<license type="{license_type}">{license_expr}</license>')
    if license_url:
        parts.append(f"<licenseUrl>{license_url}</licenseUrl>")
    deps = list(dependencies)
    if deps:
        parts.append("<dependencies>")
        parts.append(f'<group targetFramework="{target_framework}">')
        for dep_id, dep_version in deps:
            parts.append(f'<dependency id="{dep_id}" version="{dep_version}" />')
        parts.append("</group>")
        parts.append("</dependencies>")
    parts.append("</metadata>")
    parts.append("</package>")
    return "\n".join(parts)


def make_nupkg(files: Dict[str, str], compression: int = zipfile.ZIP_STORED) -> bytes:
    """Build an in-memory package archive."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", compression) as archive:
        for name, content in files.items():
            archive.writestr(name, content)
    return buf.getvalue()


def make_corrupt_nupkg(entry_name: str, content: str) -> bytes:
    """Build a package archive whose deflated entry data is garbage.

    The directory stays intact, so the entry is found and only fails while
    being decompressed.
    """
    raw = make_nupkg({entry_name: content}, compression=zipfile.ZIP_DEFLATED)
    with zipfile.ZipFile(io.BytesIO(raw)) as archive:
        size = archive.getinfo(entry_name).compress_size
    data = bytearray(raw)
    name_len, extra_len = struct.unpack("<HH", data[26:30])
    start = 30 + name_len + extra_len
    data[start:start + size] = b"\xff" * size
    return bytes(data)


def descriptor(package_id: str, version: str, deps: Iterable[Tuple[str, str]] = (), **fields) -> PackageDescriptor:
    groups = ()
    deps = tuple(Dependency(id=d, version_range=v) for d, v in deps)
    if deps:
        groups = (DependencyGroup(target_framework="net6.0", dependencies=deps),)
    return PackageDescriptor(id=package_id, version=version, dependency_groups=groups, **fields)


class ScriptedSource:
    """In-memory stand-in for a version source plus descriptor fetcher.

    ``versions`` maps lowercased ids to version sets; ``descriptors`` maps
    ``(lower id, version)`` to a descriptor, or to an exception to raise.
    Every call is recorded so tests can assert on fetch counts.
    """

    def __init__(self, name: str, versions=None, descriptors=None):
        self.name = name
        self.versions: Dict[str, Set[str]] = {k.lower(): set(v) for k, v in (versions or {}).items()}
        self.descriptors = {(k[0].lower(), k[1]): v for k, v in (descriptors or {}).items()}
        self.list_calls: Counter = Counter()
        self.fetch_calls: Counter = Counter()

    def list_versions(self, package_id: str) -> Set[str]:
        self.list_calls[package_id.lower()] += 1
        return set(self.versions.get(package_id.lower(), set()))

    def fetch_descriptor(self, package_id: str, version: str) -> FetchResult:
        self.fetch_calls[(package_id.lower(), version)] += 1
        value = self.descriptors.get((package_id.lower(), version))
        if isinstance(value, Exception):
            raise value
        if value is None:
            return FetchResult.not_found(self.name)
        return FetchResult.found(value, self.name)

    def fetch_file(self, package_id: str, version: str, entry_name: str) -> Optional[str]:
        self.fetch_calls[(package_id.lower(), version, entry_name)] += 1
        value = self.descriptors.get((package_id.lower(), f"{version}:{entry_name}"))
        return value if isinstance(value, str) else None

    @property
    def total_calls(self) -> int:
        return sum(self.list_calls.values()) + sum(self.fetch_calls.values())

