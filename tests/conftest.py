"""Shared fixtures for local package cache trees."""

from typing import Optional

import pytest


@pytest.fixture
def cache_root(tmp_path):
    """Empty local package cache directory."""
    root = tmp_path / "packages"
    root.mkdir()
    return root


@pytest.fixture
def add_cached_package(cache_root):
    """Write ``<root>/<id>/<version>/<id>.nuspec`` the way NuGet lays out its cache."""

    def _add(package_id: str, version: str, nuspec: Optional[str] = None):
        lowered = package_id.lower()
        pkg_dir = cache_root / lowered / version
        pkg_dir.mkdir(parents=True)
        if nuspec is not None:
            (pkg_dir / f"{lowered}.nuspec").write_text(nuspec, encoding="utf-8")
        return pkg_dir

    return _add
