"""Decode nuspec documents into PackageDescriptor instances.

Nuspec files come with several schema namespaces (2010/07, 2011/08, 2013/05
...). Elements are matched by local name only, so every flavor decodes the
same way.
"""
from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import List, Optional, Tuple, Union

from ...errors import NuspecParseError
from ...models import (
    Dependency,
    DependencyGroup,
    LicenseInfo,
    PackageDescriptor,
    RepositoryInfo,
)


def _local_name(tag: str) -> str:
    return tag.split("}", 1)[1] if "}" in tag else tag


def _strip_namespaces(root: ET.Element) -> None:
    for elem in root.iter():
        if isinstance(elem.tag, str):
            elem.tag = _local_name(elem.tag)
        for attr in [a for a in elem.attrib if "}" in a]:
            elem.attrib[_local_name(attr)] = elem.attrib.pop(attr)


def _text(parent: ET.Element, name: str) -> str:
    child = parent.find(name)
    if child is None or child.text is None:
        return ""
    return child.text.strip()


def _parse_license(metadata: ET.Element) -> Optional[LicenseInfo]:
    elem = metadata.find("license")
    if elem is None:
        return None
    text = (elem.text or "").strip()
    if not text:
        return None
    return LicenseInfo(text=text, type=(elem.get("type") or "expression").strip().lower())


def _parse_dependencies(elem: ET.Element) -> Tuple[Dependency, ...]:
    deps: List[Dependency] = []
    for dep in elem.findall("dependency"):
        dep_id = (dep.get("id") or "").strip()
        if dep_id:
            deps.append(Dependency(id=dep_id, version_range=(dep.get("version") or "").strip()))
    return tuple(deps)


def _parse_dependency_groups(metadata: ET.Element) -> Tuple[DependencyGroup, ...]:
    container = metadata.find("dependencies")
    if container is None:
        return ()
    groups: List[DependencyGroup] = []
    # Pre-2.0 nuspecs list <dependency> directly under <dependencies>.
    flat = _parse_dependencies(container)
    if flat:
        groups.append(DependencyGroup(target_framework="", dependencies=flat))
    for group in container.findall("group"):
        groups.append(
            DependencyGroup(
                target_framework=(group.get("targetFramework") or "").strip(),
                dependencies=_parse_dependencies(group),
            )
        )
    return tuple(groups)


def parse_nuspec(source: Union[str, bytes]) -> PackageDescriptor:
    """Parse nuspec markup into a descriptor.

    Args:
        source: Document text or raw bytes.

    Returns:
        PackageDescriptor: Decoded metadata.

    Raises:
        NuspecParseError: if the markup is malformed or lacks id/version.
    """
    try:
        root = ET.fromstring(source)
    except ET.ParseError as exc:
        raise NuspecParseError(f"Malformed nuspec: {exc}") from exc

    _strip_namespaces(root)
    metadata = root if root.tag == "metadata" else root.find("metadata")
    if metadata is None:
        raise NuspecParseError("Nuspec has no <metadata> element")

    package_id = _text(metadata, "id")
    version = _text(metadata, "version")
    if not package_id or not version:
        raise NuspecParseError("Nuspec metadata is missing id or version")

    authors = tuple(a.strip() for a in _text(metadata, "authors").split(",") if a.strip())

    repo_elem = metadata.find("repository")
    repository = RepositoryInfo()
    if repo_elem is not None:
        repository = RepositoryInfo(
            url=(repo_elem.get("url") or "").strip(),
            commit=(repo_elem.get("commit") or "").strip(),
            type=(repo_elem.get("type") or "").strip(),
        )

    return PackageDescriptor(
        id=package_id,
        version=version,
        license=_parse_license(metadata),
        license_url=_text(metadata, "licenseUrl"),
        project_url=_text(metadata, "projectUrl"),
        authors=authors,
        description=_text(metadata, "description"),
        copyright=_text(metadata, "copyright"),
        repository=repository,
        dependency_groups=_parse_dependency_groups(metadata),
    )
