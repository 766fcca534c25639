"""Tests for the on-disk package cache source."""

import logging

from nuget_license.constants import FetchStatus
from nuget_license.registry.nuget.local import LocalCacheSource

from helpers import make_nuspec


class TestListVersions:
    """Test version enumeration from the cache layout."""

    def test_lists_version_folders(self, cache_root, add_cached_package):
        """Test that every version folder is reported."""
        add_cached_package("Newtonsoft.Json", "12.0.3")
        add_cached_package("Newtonsoft.Json", "13.0.1")

        source = LocalCacheSource(str(cache_root))

        assert source.list_versions("Newtonsoft.Json") == {"12.0.3", "13.0.1"}

    def test_id_is_lowercased(self, cache_root, add_cached_package):
        """Test that mixed-case ids find the lowercase folder."""
        add_cached_package("Serilog", "2.10.0")

        assert LocalCacheSource(str(cache_root)).list_versions("SERILOG") == {"2.10.0"}

    def test_missing_package_is_empty(self, cache_root):
        """Test that an uncached package yields no versions."""
        assert LocalCacheSource(str(cache_root)).list_versions("Nope") == set()

    def test_missing_cache_root_is_empty(self, tmp_path):
        """Test that a missing cache root behaves like an empty cache."""
        assert LocalCacheSource(str(tmp_path / "absent")).list_versions("A") == set()

    def test_files_are_not_versions(self, cache_root, add_cached_package):
        """Test that stray files next to version folders are ignored."""
        pkg_dir = add_cached_package("A", "1.0.0")
        (pkg_dir.parent / "stray.txt").write_text("x", encoding="utf-8")

        assert LocalCacheSource(str(cache_root)).list_versions("A") == {"1.0.0"}

    def test_env_var_sets_default_root(self, cache_root, add_cached_package, monkeypatch):
        """Test that NUGET_PACKAGES overrides the per-user default."""
        add_cached_package("A", "1.0.0")
        monkeypatch.setenv("NUGET_PACKAGES", str(cache_root))

        assert LocalCacheSource().list_versions("A") == {"1.0.0"}


class TestFetchDescriptor:
    """Test reading nuspecs from the cache."""

    def test_reads_nuspec(self, cache_root, add_cached_package):
        """Test a cached package decodes into a descriptor."""
        add_cached_package("Serilog", "2.10.0", make_nuspec("Serilog", "2.10.0", license_expr="Apache-2.0"))

        result = LocalCacheSource(str(cache_root)).fetch_descriptor("Serilog", "2.10.0")

        assert result.ok
        assert result.source == "local"
        assert result.descriptor.license_text == "Apache-2.0"

    def test_missing_nuspec_is_not_found(self, cache_root, add_cached_package, caplog):
        """Test that a version folder without nuspec is reported and logged."""
        add_cached_package("A", "1.0.0")

        with caplog.at_level(logging.ERROR):
            result = LocalCacheSource(str(cache_root)).fetch_descriptor("A", "1.0.0")

        assert result.status is FetchStatus.NOT_FOUND
        assert "does not contain nuspec" in caplog.text

    def test_corrupt_nuspec_is_error(self, cache_root, add_cached_package):
        """Test that an unreadable nuspec is a failure, not an exception."""
        add_cached_package("A", "1.0.0", "<package><metadata>")

        result = LocalCacheSource(str(cache_root)).fetch_descriptor("A", "1.0.0")

        assert result.status is FetchStatus.ERROR
        assert result.descriptor is None
