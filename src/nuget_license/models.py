"""Data models for package requirements, descriptors and resolved package maps."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

from .constants import LicenseType


@dataclass(frozen=True)
class PackageRequirement:
    """A declared ``(name, version range)`` need produced by a project parser."""
    name: str
    version_range: str

    def is_valid(self) -> bool:
        return bool(self.name and self.name.strip() and self.version_range and self.version_range.strip())


@dataclass(frozen=True)
class LicenseInfo:
    """Inline license declaration of a nuspec (``<license type="...">text</license>``)."""
    text: Optional[str]
    type: Optional[str] = LicenseType.EXPRESSION.value

    def is_license_file(self) -> bool:
        return self.type == LicenseType.FILE.value and bool(self.text)


@dataclass(frozen=True)
class RepositoryInfo:
    """Source repository reference declared by a package."""
    url: str = ""
    commit: str = ""
    type: str = ""


@dataclass(frozen=True)
class Dependency:
    """One dependency entry of a dependency group."""
    id: str
    version_range: str

    @property
    def key(self) -> str:
        return package_key(self.id, self.version_range)


@dataclass(frozen=True)
class DependencyGroup:
    """Dependencies declared for one target framework ("" when ungrouped)."""
    target_framework: str = ""
    dependencies: Tuple[Dependency, ...] = ()


@dataclass(frozen=True)
class PackageDescriptor:
    """Resolved package metadata, shared by every requirement resolving to ``(id, version)``."""
    id: str
    version: str
    license: Optional[LicenseInfo] = None
    license_url: str = ""
    project_url: str = ""
    authors: Tuple[str, ...] = ()
    description: str = ""
    copyright: str = ""
    repository: RepositoryInfo = field(default_factory=RepositoryInfo)
    dependency_groups: Tuple[DependencyGroup, ...] = ()

    @classmethod
    def stub(cls, package_id: str, version: str) -> "PackageDescriptor":
        """Placeholder for a package that exists but whose metadata could not be fetched."""
        return cls(id=package_id, version=version)

    @property
    def license_text(self) -> Optional[str]:
        return self.license.text if self.license else None

    @property
    def is_stub(self) -> bool:
        return self == PackageDescriptor.stub(self.id, self.version)


def package_key(name: str, version: str) -> str:
    """Key used by ResolvedPackageMap: ``"name,version"``."""
    return f"{name},{version}"


class ResolvedPackageMap(Dict[str, PackageDescriptor]):
    """Per-project mapping of ``"name,version"`` to descriptors.

    Keys are never overwritten: the first descriptor stored under a key wins.
    """

    def add(self, key: str, descriptor: PackageDescriptor) -> bool:
        """Store ``descriptor`` unless ``key`` is already present; return True when stored."""
        if key in self:
            return False
        self[key] = descriptor
        return True

    def sorted_descriptors(self) -> Iterator[PackageDescriptor]:
        return iter(sorted(self.values(), key=lambda d: (d.id.lower(), d.version)))


@dataclass
class LibraryRepositoryInfo:
    url: str = ""
    commit: str = ""
    type: str = ""


@dataclass
class LibraryInfo:
    """Flattened package record handed to renderers and license validation."""
    package_name: str
    package_version: str
    package_url: str = ""
    copyright: str = ""
    authors: List[str] = field(default_factory=list)
    description: str = ""
    license_type: str = ""
    license_url: str = ""
    projects: Optional[str] = None
    repository: Optional[LibraryRepositoryInfo] = None

    @property
    def name_and_version(self) -> Tuple[str, str]:
        return self.package_name, self.package_version
