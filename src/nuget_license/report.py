"""Flatten per-project package maps into LibraryInfo records for renderers."""
from __future__ import annotations

import logging
from itertools import groupby
from typing import List, Mapping, Optional, Set, Tuple

from .config import ResolverOptions
from .models import LibraryInfo, LibraryRepositoryInfo, PackageDescriptor, ResolvedPackageMap
from .resolution.licensing import handle_deprecated_license_url

logger = logging.getLogger(__name__)


def _manual_entry(options: ResolverOptions, descriptor: PackageDescriptor) -> Optional[LibraryInfo]:
    for manual in options.manual_information:
        if manual.package_name == descriptor.id and manual.package_version == descriptor.version:
            return manual
    return None


def map_package_to_library_info(
    descriptor: PackageDescriptor, project: str, options: ResolverOptions
) -> LibraryInfo:
    """Build the flattened record for one descriptor; manual information wins where given."""
    license_type = descriptor.license_text or ""
    license_url = descriptor.license_url
    if license_url and not license_type.strip():
        license_type = options.license_url_mappings.get(license_url, license_type)

    manual = _manual_entry(options, descriptor)
    repository = LibraryRepositoryInfo(
        url=descriptor.repository.url,
        commit=descriptor.repository.commit,
        type=descriptor.repository.type,
    )
    return LibraryInfo(
        package_name=descriptor.id,
        package_version=descriptor.version,
        package_url=manual.package_url if manual and manual.package_url else descriptor.project_url,
        copyright=descriptor.copyright,
        authors=list(manual.authors) if manual and manual.authors else list(descriptor.authors),
        description=manual.description if manual and manual.description else descriptor.description,
        license_type=manual.license_type if manual and manual.license_type else license_type,
        license_url=manual.license_url if manual and manual.license_url else license_url,
        projects=project if options.include_project_file else None,
        repository=manual.repository if manual and manual.repository else repository,
    )


def _merge_unique(libraries: List[LibraryInfo], options: ResolverOptions) -> List[LibraryInfo]:
    def _key(info: LibraryInfo) -> Tuple[str, str]:
        return info.name_and_version

    merged: List[LibraryInfo] = []
    for _, group in groupby(sorted(libraries, key=_key), key=_key):
        items = list(group)
        first = items[0]
        projects = None
        if options.include_project_file:
            projects = ";".join(i.projects for i in items if i.projects)
        merged.append(
            LibraryInfo(
                package_name=first.package_name,
                package_version=first.package_version,
                package_url=first.package_url,
                copyright=first.copyright,
                authors=first.authors,
                description=first.description,
                license_type=first.license_type,
                license_url=first.license_url,
                projects=projects,
                repository=first.repository,
            )
        )
    return merged


def map_packages_to_library_info(
    packages: Mapping[str, ResolvedPackageMap], options: ResolverOptions
) -> List[LibraryInfo]:
    """Flatten ``{project: package map}`` into LibraryInfo records sorted by package name.

    Manual entries without a resolved package are appended; with
    ``unique_only`` duplicates across projects collapse into one record. The
    deprecated ``aka.ms/deprecateLicenseUrl`` placeholder is replaced by the
    package license page.
    """
    libraries: List[LibraryInfo] = []
    for project, package_map in packages.items():
        for descriptor in package_map.sorted_descriptors():
            libraries.append(map_package_to_library_info(descriptor, project, options))

    seen: Set[Tuple[str, str]] = {info.name_and_version for info in libraries}
    for manual in options.manual_information:
        if manual.name_and_version not in seen:
            libraries.append(manual)
            seen.add(manual.name_and_version)

    if options.unique_only:
        libraries = _merge_unique(libraries, options)
    libraries = handle_deprecated_license_url(libraries)

    logger.debug("Mapped %d libraries from %d projects", len(libraries), len(packages))
    return sorted(libraries, key=lambda info: info.package_name)
