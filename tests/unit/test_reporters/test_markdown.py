"""Tests for the Markdown reporter."""

from pathlib import Path

import pytest

from license_harvester.models import CanonicalPackage, PackageMetadata
from license_harvester.reporters.markdown import MarkdownReporter


@pytest.fixture
def packages() -> list[CanonicalPackage]:
    """Return canonical packages in discovery order."""
    return [
        CanonicalPackage(
            name="Newtonsoft.Json",
            version="13.0.1",
            spec_licenses={"MIT"},
            install_path=Path("/pkgs/newtonsoft.json/13.0.1"),
            groups={"MyApp", "Tools"},
            package_manager="NuGet",
            metadata=PackageMetadata(
                authors="James Newton-King",
                homepage="https://www.newtonsoft.com/json",
                summary="Json.NET is a popular JSON framework for .NET",
                license_type="MIT",
                license_source="expression",
            ),
        ),
        CanonicalPackage(
            name="express",
            version="4.18.2",
            spec_licenses=set(),
            groups={"dependencies"},
            package_manager="npm",
        ),
    ]


def test_render_table_and_sections(packages: list[CanonicalPackage]) -> None:
    """Test that every package appears in the table and has a section."""
    output = MarkdownReporter().render(packages)

    assert "# Third-Party Licenses" in output
    assert "| Newtonsoft.Json | 13.0.1 | MIT License | MyApp, Tools |" in output
    assert "| express | 4.18.2 | unknown | dependencies |" in output
    assert "## Newtonsoft.Json 13.0.1" in output
    assert "- **Homepage:** https://www.newtonsoft.com/json" in output
    assert "- **Install path:** /pkgs/newtonsoft.json/13.0.1" in output
    assert "- **Install path:** not found" in output


def test_render_spdx_references(packages: list[CanonicalPackage]) -> None:
    """Test that single SPDX identifiers link to their spdx.org page."""
    packages.append(
        CanonicalPackage(
            name="Dual",
            version="1.0.0",
            spec_licenses={"MIT OR Apache-2.0"},
            package_manager="NuGet",
        )
    )

    output = MarkdownReporter().render(packages)

    assert "- **SPDX reference:** https://spdx.org/licenses/MIT.html" in output
    assert output.count("**SPDX reference:**") == 1


def test_render_sorted_by_name(packages: list[CanonicalPackage]) -> None:
    """Test that packages are listed alphabetically, ignoring case."""
    output = MarkdownReporter().render(packages)

    assert output.index("## express") < output.index("## Newtonsoft.Json")


def test_render_escapes_html(packages: list[CanonicalPackage]) -> None:
    """Test that metadata from package specs cannot inject HTML."""
    packages[0].metadata.authors = "<script>alert('xss')</script>"

    output = MarkdownReporter().render(packages)

    assert "<script>" not in output
    assert "&lt;script&gt;" in output


def test_write(packages: list[CanonicalPackage], tmp_path: Path) -> None:
    """Test that write stores the rendered document."""
    output_path = tmp_path / "THIRD_PARTY.md"

    MarkdownReporter().write(packages, output_path)

    assert "Newtonsoft.Json" in output_path.read_text(encoding="utf-8")


def test_custom_template(packages: list[CanonicalPackage], tmp_path: Path) -> None:
    """Test rendering with a user supplied template."""
    template = tmp_path / "custom.j2"
    template.write_text(
        "{% for p in packages %}{{ p.name }}={{ p.license_display }}\n{% endfor %}"
    )

    output = MarkdownReporter(template_path=template).render(packages)

    assert output == "express=unknown\nNewtonsoft.Json=MIT\n"


def test_format_properties() -> None:
    """Test the reporter's format name and extension."""
    reporter = MarkdownReporter()
    assert reporter.format_name == "markdown"
    assert reporter.default_extension == ".md"
