"""License normalization for fetched descriptors, plus allowed/forbidden license validation."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Sequence

from ..common.logging_utils import extra_context, is_debug_enabled
from ..config import ResolverOptions
from ..constants import Constants, LicenseType
from ..models import LibraryInfo, LicenseInfo, PackageDescriptor
from ..registry.nuget.archive import ArchiveSource
from .cache import ResolutionContext, descriptor_key

logger = logging.getLogger(__name__)


class LicenseNormalizer:
    """Map license URLs to identifiers and fetch embedded license files when enforcing."""

    def __init__(
        self,
        options: ResolverOptions,
        context: ResolutionContext,
        archive: Optional[ArchiveSource] = None,
    ):
        self.options = options
        self.context = context
        self.archive = archive

    @property
    def mappings(self) -> Dict[str, str]:
        return self.options.license_url_mappings

    def normalize(self, descriptor: PackageDescriptor) -> PackageDescriptor:
        """Return ``descriptor`` with its license resolved from the URL table when needed.

        Only freshly fetched descriptors go through here; cached ones were
        normalized when first stored.
        """
        if descriptor.license_url and descriptor.license_text is None:
            mapped = self.mappings.get(descriptor.license_url)
            if mapped:
                descriptor = replace(
                    descriptor, license=LicenseInfo(text=mapped, type=LicenseType.EXPRESSION.value)
                )
                if is_debug_enabled(logger):
                    logger.debug(
                        "Mapped license URL",
                        extra=extra_context(
                            event="decision", component="licensing", action="normalize",
                            target=descriptor.id, outcome=mapped,
                        ),
                    )

        if descriptor.license is not None and descriptor.license.is_license_file() and self.options.enforce_license_types:
            self.ensure_license_file(descriptor)
        return descriptor

    def ensure_license_file(self, descriptor: PackageDescriptor) -> Optional[str]:
        """Download the embedded license file once per ``(id, version)``.

        A failed download is stored as None: the key counts as attempted and
        is never retried for the lifetime of the context.
        """
        key = descriptor_key(descriptor.id, descriptor.version)
        if key in self.context.license_file_cache:
            return self.context.license_file_cache.get(key)

        def _download() -> Optional[str]:
            if self.archive is None:
                return None
            try:
                text = self.archive.fetch_file(descriptor.id, descriptor.version, descriptor.license_text or "")
            except Exception as exc:  # pylint: disable=broad-exception-caught
                logger.warning(
                    "Couldn't download license file %s for %s %s: %s",
                    descriptor.license_text, descriptor.id, descriptor.version, exc,
                )
                return None
            if text is None:
                logger.warning(
                    "Couldn't download license file %s for %s %s",
                    descriptor.license_text, descriptor.id, descriptor.version,
                )
            return text

        return self.context.license_file_cache.get_or_compute(key, _download)


def handle_deprecated_license_url(libraries: Sequence[LibraryInfo]) -> List[LibraryInfo]:
    """Point the deprecated ``aka.ms/deprecateLicenseUrl`` placeholder at the package's license page."""
    for item in libraries:
        if item.license_url == Constants.DEPRECATED_LICENSE_URL:
            item.license_url = Constants.NUGET_PACKAGE_PAGE_URL.format(item.package_name, item.package_version)
    return list(libraries)


@dataclass
class ValidationResult:
    is_valid: bool
    invalid_packages: List[LibraryInfo] = field(default_factory=list)


class LicenseValidator:
    """Classify flattened libraries against allowed or forbidden license lists."""

    def __init__(self, options: ResolverOptions):
        self.options = options

    def _is_allowed(self, info: LibraryInfo) -> bool:
        for allowed in self.options.allowed_license_types:
            if info.license_url:
                mapped = self.options.license_url_mappings.get(info.license_url)
                if mapped is not None:
                    if allowed == mapped:
                        return True
                    continue
                if allowed.lower() in info.license_url.lower():
                    return True
            if allowed == info.license_type:
                return True
        return False

    def validate_allowed(self, libraries: Sequence[LibraryInfo]) -> ValidationResult:
        if not self.options.allowed_license_types:
            return ValidationResult(is_valid=True)
        invalid = [info for info in libraries if not self._is_allowed(info)]
        return ValidationResult(is_valid=not invalid, invalid_packages=invalid)

    def validate_forbidden(self, libraries: Sequence[LibraryInfo]) -> ValidationResult:
        if not self.options.forbidden_license_types:
            return ValidationResult(is_valid=True)
        forbidden = set(self.options.forbidden_license_types)
        invalid = [info for info in libraries if info.license_type in forbidden]
        return ValidationResult(is_valid=not invalid, invalid_packages=invalid)

    def validate(self, libraries: Sequence[LibraryInfo]) -> ValidationResult:
        if self.options.allowed_license_types:
            return self.validate_allowed(libraries)
        return self.validate_forbidden(libraries)
