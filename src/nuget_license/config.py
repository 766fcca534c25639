"""Resolver configuration: options dataclass plus YAML/JSON loaders."""
from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional, Pattern

import yaml

from .constants import Constants, default_cache_root
from .errors import ConfigurationError
from .models import LibraryInfo, LibraryRepositoryInfo

logger = logging.getLogger(__name__)


@dataclass
class ResolverOptions:  # pylint: disable=too-many-instance-attributes
    """Options steering package resolution and license handling."""
    package_filter: List[str] = field(default_factory=list)
    package_regex: Optional[str] = None
    include_transitive: bool = False
    use_project_assets_json: bool = False
    allowed_license_types: List[str] = field(default_factory=list)
    forbidden_license_types: List[str] = field(default_factory=list)
    license_url_mappings: Dict[str, str] = field(default_factory=dict)
    manual_information: List[LibraryInfo] = field(default_factory=list)
    unique_only: bool = False
    include_project_file: bool = False
    cache_root: Optional[str] = None
    registry_url: str = Constants.REGISTRY_URL_NUGET_FLAT
    archive_url: str = Constants.ARCHIVE_URL_NUGET
    timeout: float = Constants.REQUEST_TIMEOUT
    proxy_url: Optional[str] = None
    proxy_system_auth: bool = False
    ignore_ssl_errors: bool = False
    max_redirects: int = Constants.MAX_REDIRECTS
    max_depth: int = Constants.MAX_EXPANSION_DEPTH

    _compiled_regex: Optional[Pattern[str]] = field(default=None, init=False, repr=False, compare=False)

    @property
    def effective_cache_root(self) -> str:
        return self.cache_root or default_cache_root()

    @property
    def enforce_license_types(self) -> bool:
        return bool(self.allowed_license_types)

    @property
    def package_pattern(self) -> Optional[Pattern[str]]:
        if self.package_regex and self._compiled_regex is None:
            self._compiled_regex = re.compile(self.package_regex)
        return self._compiled_regex

    def is_filtered(self, name: str) -> bool:
        """True when ``name`` is excluded by the exact-name list or the regex filter."""
        lowered = name.lower()
        if any(f.lower() == lowered for f in self.package_filter):
            return True
        pattern = self.package_pattern
        return bool(pattern is not None and pattern.search(name))

    def validate(self) -> None:
        """Reject inconsistent options before any resolution starts.

        Raises:
            ConfigurationError: on conflicting or out-of-range options.
        """
        if self.allowed_license_types and self.forbidden_license_types:
            raise ConfigurationError("Allowed and forbidden license types are mutually exclusive")
        if self.package_regex:
            try:
                self._compiled_regex = re.compile(self.package_regex)
            except re.error as exc:
                raise ConfigurationError(f"Invalid package regex {self.package_regex!r}: {exc}") from exc
        if self.timeout <= 0:
            raise ConfigurationError("Timeout must be positive")
        if self.max_depth < 1:
            raise ConfigurationError("Maximum expansion depth must be at least 1")
        if self.max_redirects < 0:
            raise ConfigurationError("Maximum redirects cannot be negative")


def _read_document(path: str) -> Any:
    with open(path, "r", encoding="utf-8") as fh:
        if path.lower().endswith(".json"):
            return json.load(fh)
        return yaml.safe_load(fh)


def _manual_entry(raw: Dict[str, Any]) -> LibraryInfo:
    repo = raw.get("repository")
    return LibraryInfo(
        package_name=str(raw.get("package_name", "")),
        package_version=str(raw.get("package_version", "")),
        package_url=str(raw.get("package_url", "")),
        copyright=str(raw.get("copyright", "")),
        authors=list(raw.get("authors") or []),
        description=str(raw.get("description", "")),
        license_type=str(raw.get("license_type", "")),
        license_url=str(raw.get("license_url", "")),
        repository=LibraryRepositoryInfo(**repo) if isinstance(repo, dict) else None,
    )


def load_license_mappings(path: str) -> Dict[str, str]:
    """Load a license URL to license identifier table from YAML or JSON.

    Raises:
        ConfigurationError: when the file is unreadable or not a mapping.
    """
    try:
        data = _read_document(path)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Couldn't load license mappings from {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"License mappings in {path} must be a mapping")
    return {str(url): str(license_id) for url, license_id in data.items()}


def load_options(path: Optional[str] = None, **overrides: Any) -> ResolverOptions:
    """Build ResolverOptions from an optional YAML/JSON file plus keyword overrides.

    Keyword overrides take precedence over file values. The result is
    validated before being returned.

    Raises:
        ConfigurationError: when the file is unreadable or options conflict.
    """
    values: Dict[str, Any] = {}
    if path:
        if not os.path.isfile(path):
            raise ConfigurationError(f"Config file not found: {path}")
        try:
            data = _read_document(path) or {}
        except (OSError, ValueError, yaml.YAMLError) as exc:
            raise ConfigurationError(f"Failed to load config {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {path} must contain a mapping")
        values.update(data)
    values.update({k: v for k, v in overrides.items() if v is not None})

    known = {f.name for f in fields(ResolverOptions) if f.init}
    unknown = sorted(set(values) - known - {"license_url_mappings_file"})
    if unknown:
        logger.warning("Ignoring unknown configuration keys: %s", ", ".join(unknown))

    mappings_file = values.pop("license_url_mappings_file", None)
    if mappings_file:
        merged = load_license_mappings(mappings_file)
        merged.update(values.get("license_url_mappings") or {})
        values["license_url_mappings"] = merged
    if values.get("manual_information"):
        values["manual_information"] = [
            entry if isinstance(entry, LibraryInfo) else _manual_entry(entry)
            for entry in values["manual_information"]
        ]

    options = ResolverOptions(**{k: v for k, v in values.items() if k in known})
    options.validate()
    return options
