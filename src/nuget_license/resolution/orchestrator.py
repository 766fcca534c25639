"""Resolve project requirements into descriptors: local cache first, then the registry."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Set

import requests

from ..common.http_client import build_session
from ..common.logging_utils import extra_context, is_debug_enabled
from ..config import ResolverOptions
from ..models import PackageDescriptor, PackageRequirement, ResolvedPackageMap, package_key
from ..registry.nuget.archive import ArchiveSource
from ..registry.nuget.local import LocalCacheSource
from ..registry.nuget.remote import RemoteRegistrySource
from ..registry.nuget.results import FetchResult
from ..versioning.matcher import pick_version
from .cache import ResolutionContext, descriptor_key, version_key
from .expander import TransitiveExpander
from .licensing import LicenseNormalizer

logger = logging.getLogger(__name__)

Fetcher = Callable[[str, str], FetchResult]


@dataclass(frozen=True)
class SourceTier:
    """One resolution tier: where versions come from and which fetchers to try, in order."""
    name: str
    list_versions: Callable[[str], Set[str]]
    fetchers: Sequence[Fetcher]
    stub_on_failure: bool = False


class Resolver:
    """Drive requirement resolution for projects.

    Tiers are tried in order. The first tier that resolves a version fixes
    it for the following tiers; a tier whose fetchers all fail hands over to
    the next one, and the last tier falls back to a stub descriptor so the
    package still shows up in the output.
    """

    def __init__(
        self,
        options: Optional[ResolverOptions] = None,
        context: Optional[ResolutionContext] = None,
        *,
        session: Optional[requests.Session] = None,
        local: Optional[LocalCacheSource] = None,
        registry: Optional[RemoteRegistrySource] = None,
        archive: Optional[ArchiveSource] = None,
    ):
        self.options = options or ResolverOptions()
        self.options.validate()
        self.context = context or ResolutionContext()

        if session is None and (registry is None or archive is None):
            session = build_session(
                proxy_url=self.options.proxy_url,
                proxy_system_auth=self.options.proxy_system_auth,
                ignore_ssl_errors=self.options.ignore_ssl_errors,
                max_redirects=self.options.max_redirects,
            )
        remote_kwargs = {"timeout": self.options.timeout, "cancel_event": self.context.cancel_event}
        self.local = local or LocalCacheSource(self.options.effective_cache_root)
        self.registry = registry or RemoteRegistrySource(session, self.options.registry_url, **remote_kwargs)
        self.archive = archive or ArchiveSource(session, self.options.archive_url, **remote_kwargs)

        self.normalizer = LicenseNormalizer(self.options, self.context, self.archive)
        self.expander = TransitiveExpander(self.options, self._resolve_into)
        self.tiers: List[SourceTier] = [
            SourceTier("local cache", self.local.list_versions, [self.local.fetch_descriptor]),
            SourceTier(
                "NuGet server",
                self.registry.list_versions,
                [self.registry.fetch_descriptor, self.archive.fetch_descriptor],
                stub_on_failure=True,
            ),
        ]

    def resolve_requirements(
        self, project: str, requirements: Iterable[PackageRequirement]
    ) -> ResolvedPackageMap:
        """Resolve one project's requirements into a fresh package map.

        Failures are contained per requirement: a package that cannot be
        resolved is logged and left out, the rest still resolve.
        """
        package_map = ResolvedPackageMap()
        self._resolve_into(project, list(requirements), package_map, 0)
        return package_map

    def resolve_projects(
        self, projects: Mapping[str, Iterable[PackageRequirement]]
    ) -> Dict[str, ResolvedPackageMap]:
        """Resolve several projects against the shared caches of this resolver."""
        results: Dict[str, ResolvedPackageMap] = {}
        for project, requirements in projects.items():
            logger.info("Project: %s", project)
            results[project] = self.resolve_requirements(project, requirements)
        return results

    def _resolve_into(
        self,
        project: str,
        requirements: List[PackageRequirement],
        package_map: ResolvedPackageMap,
        depth: int,
    ) -> None:
        for requirement in requirements:
            try:
                self._resolve_one(project, requirement, package_map, depth)
            except Exception:  # pylint: disable=broad-exception-caught
                # One bad package never aborts the rest of the project.
                logger.exception(
                    "Failed to resolve package '%s', version %s",
                    requirement.name, requirement.version_range,
                )

    def _resolve_one(
        self,
        project: str,
        requirement: PackageRequirement,
        package_map: ResolvedPackageMap,
        depth: int,
    ) -> None:
        name, version_range = requirement.name, requirement.version_range
        if name and self.options.is_filtered(name):
            logger.info("%s skipped by filter.", name)
            return
        if not requirement.is_valid():
            logger.info("Skipping invalid entry %s, version %s", name, version_range)
            return
        if depth > self.options.max_depth:
            logger.warning(
                "Package '%s', version %s exceeds maximum dependency depth %d; treated as not found",
                name, version_range, self.options.max_depth,
            )
            return
        if self.context.cancelled:
            logger.warning("Package '%s', version %s not resolved: resolution cancelled", name, version_range)
            return

        version: Optional[str] = None
        for tier in self.tiers:
            if version is None:
                version = self._resolve_version(tier, name, version_range)
                if version is None:
                    logger.info("Package '%s', version %s not found in %s", name, version_range, tier.name)
                    continue
                logger.info(
                    "Package '%s', version requirement %s resolved to version %s from %s",
                    name, version_range, version, tier.name,
                )

            key = package_key(name, version)
            if key in package_map:
                return
            descriptor = self._descriptor(tier, name, version)
            if descriptor is None:
                continue
            if package_map.add(key, descriptor):
                self.expander.expand(project, package_map, descriptor, depth)
            return

        if version is None:
            logger.warning("Package '%s', version %s not found in NuGet", name, version_range)

    def _resolve_version(self, tier: SourceTier, name: str, version_range: str) -> Optional[str]:
        return self.context.version_cache.get_or_compute(
            version_key(name, version_range),
            lambda: pick_version(version_range, tier.list_versions(name)),
            store_if=lambda resolved: resolved is not None,
        )

    def _descriptor(self, tier: SourceTier, name: str, version: str) -> Optional[PackageDescriptor]:
        key = descriptor_key(name, version)
        if key in self.context.descriptor_cache:
            logger.info("%s, version %s obtained from request cache.", name, version)
        return self.context.descriptor_cache.get_or_compute(
            key,
            lambda: self._fetch(tier, name, version),
            store_if=lambda descriptor: descriptor is not None,
        )

    def _fetch(self, tier: SourceTier, name: str, version: str) -> Optional[PackageDescriptor]:
        """Fold over the tier's fetchers; the first found descriptor wins."""
        for fetcher in tier.fetchers:
            try:
                result = fetcher(name, version)
            except Exception as exc:  # pylint: disable=broad-exception-caught
                logger.warning("Fetching '%s', version %s from %s failed: %s", name, version, tier.name, exc)
                result = FetchResult.failed(tier.name, str(exc))
            if is_debug_enabled(logger):
                logger.debug(
                    "Fetch attempt",
                    extra=extra_context(
                        event="fetch", component="orchestrator", action="fetch_descriptor",
                        outcome=result.status.value, target=f"{name} {version}", source=result.source,
                    ),
                )
            if result.ok:
                return self._normalize(result.descriptor)
        if self.context.cancelled:
            logger.warning("Package '%s', version %s not fetched: resolution cancelled", name, version)
            return None
        if tier.stub_on_failure:
            logger.warning("No metadata available for '%s', version %s; recording stub entry", name, version)
            return PackageDescriptor.stub(name, version)
        return None

    def _normalize(self, descriptor: PackageDescriptor) -> PackageDescriptor:
        try:
            return self.normalizer.normalize(descriptor)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            logger.warning(
                "License normalization failed for '%s', version %s: %s", descriptor.id, descriptor.version, exc
            )
            return descriptor
