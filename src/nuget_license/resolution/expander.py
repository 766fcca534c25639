"""Walk declared dependency groups and resolve them as new requirements."""
from __future__ import annotations

import logging
from typing import Callable, List

from ..config import ResolverOptions
from ..models import PackageDescriptor, PackageRequirement, ResolvedPackageMap

logger = logging.getLogger(__name__)

ResolveInto = Callable[[str, List[PackageRequirement], ResolvedPackageMap, int], None]


class TransitiveExpander:
    """Expand a descriptor's dependencies into the package map being built.

    The map itself is the visited set: a package is stored before its own
    dependencies are expanded, so cycles and diamonds resolve each distinct
    ``(id, version)`` once.
    """

    def __init__(self, options: ResolverOptions, resolve_into: ResolveInto):
        self.options = options
        self._resolve_into = resolve_into

    @property
    def enabled(self) -> bool:
        # A project.assets.json listing already holds every transitive package
        # with its resolved version; walking nuspec groups would add them again.
        return self.options.include_transitive and not self.options.use_project_assets_json

    def expand(
        self,
        project: str,
        package_map: ResolvedPackageMap,
        descriptor: PackageDescriptor,
        depth: int = 0,
    ) -> None:
        if not self.enabled:
            return
        for group in descriptor.dependency_groups:
            pending = [
                PackageRequirement(name=dep.id, version_range=dep.version_range)
                for dep in group.dependencies
                if dep.key not in package_map
            ]
            if not pending:
                continue
            logger.debug(
                "Expanding %d dependencies of %s %s (%s)",
                len(pending), descriptor.id, descriptor.version, group.target_framework or "any",
            )
            self._resolve_into(project, pending, package_map, depth + 1)
