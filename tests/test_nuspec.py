"""Tests for namespace-agnostic nuspec decoding."""

import pytest

from nuget_license.errors import NuspecParseError
from nuget_license.registry.nuget.nuspec import parse_nuspec

from helpers import make_nuspec

FULL_NUSPEC = """<?xml version="1.0" encoding="utf-8"?>
<package xmlns="http://schemas.microsoft.com/packaging/2013/05/nuspec.xsd">
  <metadata minClientVersion="2.12">
    <id>Newtonsoft.Json</id>
    <version>13.0.3</version>
    <authors>James Newton-King, Contributor Two</authors>
    <license type="expression">MIT</license>
    <licenseUrl>https://licenses.nuget.org/MIT</licenseUrl>
    <projectUrl>https://www.newtonsoft.com/json</projectUrl>
    <description>Json.NET is a popular high-performance JSON framework for .NET</description>
    <copyright>Copyright James Newton-King 2008</copyright>
    <repository type="git" url="https://github.com/JamesNK/Newtonsoft.Json.git" commit="0a2e291c" />
    <dependencies>
      <group targetFramework=".NETFramework2.0" />
      <group targetFramework=".NETStandard1.0">
        <dependency id="Microsoft.CSharp" version="4.3.0" exclude="Build,Analyzers" />
        <dependency id="NETStandard.Library" version="1.6.1" />
      </group>
    </dependencies>
  </metadata>
</package>
"""


class TestParseNuspec:
    """Test nuspec decoding."""

    def test_parses_all_fields(self):
        """Test that every descriptor field is populated."""
        desc = parse_nuspec(FULL_NUSPEC)

        assert desc.id == "Newtonsoft.Json"
        assert desc.version == "13.0.3"
        assert desc.authors == ("James Newton-King", "Contributor Two")
        assert desc.license.text == "MIT"
        assert desc.license.type == "expression"
        assert desc.license_url == "https://licenses.nuget.org/MIT"
        assert desc.project_url == "https://www.newtonsoft.com/json"
        assert desc.copyright == "Copyright James Newton-King 2008"
        assert desc.repository.url == "https://github.com/JamesNK/Newtonsoft.Json.git"
        assert desc.repository.commit == "0a2e291c"
        assert desc.repository.type == "git"

    def test_parses_dependency_groups(self):
        """Test grouped dependencies, including empty groups."""
        desc = parse_nuspec(FULL_NUSPEC)

        assert [g.target_framework for g in desc.dependency_groups] == [".NETFramework2.0", ".NETStandard1.0"]
        assert desc.dependency_groups[0].dependencies == ()
        deps = desc.dependency_groups[1].dependencies
        assert [(d.id, d.version_range) for d in deps] == [
            ("Microsoft.CSharp", "4.3.0"),
            ("NETStandard.Library", "1.6.1"),
        ]

    @pytest.mark.parametrize(
        "namespace",
        [
            "http://schemas.microsoft.com/packaging/2010/07/nuspec.xsd",
            "http://schemas.microsoft.com/packaging/2011/08/nuspec.xsd",
            "",
        ],
    )
    def test_namespace_is_ignored(self, namespace):
        """Test that every schema flavor decodes the same way."""
        xmlns = f' xmlns="{namespace}"' if namespace else ""
        doc = f"<package{xmlns}><metadata><id>A</id><version>1.0.0</version></metadata></package>"

        desc = parse_nuspec(doc)

        assert (desc.id, desc.version) == ("A", "1.0.0")

    def test_prefixed_namespace_is_ignored(self):
        """Test documents using a namespace prefix."""
        doc = (
            '<n:package xmlns:n="urn:nuspec"><n:metadata><n:id>A</n:id>'
            "<n:version>2.0.0</n:version></n:metadata></n:package>"
        )

        assert parse_nuspec(doc).version == "2.0.0"

    def test_flat_dependencies_become_untargeted_group(self):
        """Test legacy nuspecs listing dependencies without groups."""
        doc = (
            "<package><metadata><id>A</id><version>1.0.0</version>"
            '<dependencies><dependency id="B" version="[1.0,2.0)" /></dependencies>'
            "</metadata></package>"
        )

        groups = parse_nuspec(doc).dependency_groups

        assert len(groups) == 1
        assert groups[0].target_framework == ""
        assert groups[0].dependencies[0].version_range == "[1.0,2.0)"

    def test_license_file_type(self):
        """Test that file licenses are recognized."""
        desc = parse_nuspec(make_nuspec("A", "1.0.0", license_expr="LICENSE.txt", license_type="file"))

        assert desc.license.is_license_file()

    def test_missing_license_is_none(self):
        """Test that a nuspec without <license> has no license info."""
        desc = parse_nuspec(make_nuspec("A", "1.0.0", license_url="https://example.com/license"))

        assert desc.license is None
        assert desc.license_url == "https://example.com/license"

    def test_bytes_input(self):
        """Test that raw bytes are accepted."""
        assert parse_nuspec(make_nuspec("A", "1.0.0").encode("utf-8")).id == "A"

    def test_malformed_markup_raises(self):
        """Test that broken XML raises NuspecParseError."""
        with pytest.raises(NuspecParseError):
            parse_nuspec("<package><metadata>")

    def test_missing_id_raises(self):
        """Test that id and version are mandatory."""
        with pytest.raises(NuspecParseError):
            parse_nuspec("<package><metadata><version>1.0.0</version></metadata></package>")
