"""Pytest configuration and fixtures."""

import zipfile
from pathlib import Path

import pytest

from license_harvester.config import ScanConfig

MIT_TEXT = """MIT License

Copyright (c) 2007 James Newton-King

Permission is hereby granted, free of charge, to any person obtaining a copy of
this software and associated documentation files (the "Software"), to deal in
the Software without restriction, including without limitation the rights to
use, copy, modify, merge, publish, distribute, sublicense, and/or sell copies
of the Software, and to permit persons to whom the Software is furnished to do
so, subject to the following conditions:

The above copyright notice and this permission notice shall be included in all
copies or substantial portions of the Software.

THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY.
"""

APACHE_TEXT = """
                                 Apache License
                           Version 2.0, January 2004
                        http://www.apache.org/licenses/

   TERMS AND CONDITIONS FOR USE, REPRODUCTION, AND DISTRIBUTION

   1. Definitions.

      "License" shall mean the terms and conditions for use, reproduction,
      and distribution as defined by Sections 1 through 9 of this document.
"""


def make_nuspec(
    package_id: str = "Foo",
    version: str = "1.0.0",
    license_element: str = "",
    license_url: str | None = None,
    description: str = "Foo does things.\nMore details here.",
) -> str:
    """Build a nuspec document using the 2013/05 schema namespace."""
    license_url_element = (
        f"<licenseUrl>{license_url}</licenseUrl>" if license_url else ""
    )
    return f"""<?xml version="1.0" encoding="utf-8"?>
<package xmlns="http://schemas.microsoft.com/packaging/2013/05/nuspec.xsd">
  <metadata>
    <id>{package_id}</id>
    <version>{version}</version>
    <authors>Jane Doe</authors>
    <projectUrl>https://example.com/{package_id.lower()}</projectUrl>
    <description>{description}</description>
    {license_element}
    {license_url_element}
  </metadata>
</package>
"""


def make_nupkg(path: Path, nuspec: str, extra: dict[str, str] | None = None) -> Path:
    """Write a .nupkg archive holding a root nuspec and optional extra entries."""
    path.parent.mkdir(parents=True, exist_ok=True)
    package_id = path.name.split(".")[0]
    with zipfile.ZipFile(path, "w") as archive:
        archive.writestr(f"{package_id}.nuspec", nuspec)
        for member, content in (extra or {}).items():
            archive.writestr(member, content)
    return path


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """Create an empty project directory."""
    path = tmp_path / "project"
    path.mkdir()
    return path


@pytest.fixture
def packages_root(tmp_path: Path) -> Path:
    """Create an empty installed-packages directory."""
    path = tmp_path / "packages"
    path.mkdir()
    return path


@pytest.fixture
def scan_config(project_dir: Path, packages_root: Path) -> ScanConfig:
    """Return a ScanConfig rooted in temporary directories."""
    return ScanConfig(
        project_path=project_dir,
        packages_root=packages_root,
        archive_root=project_dir,
    )


@pytest.fixture
def mit_text() -> str:
    """Return the text of an MIT license."""
    return MIT_TEXT


@pytest.fixture
def apache_text() -> str:
    """Return the header of the Apache 2.0 license."""
    return APACHE_TEXT


@pytest.fixture
def nuspec_factory():
    """Return a builder for nuspec documents."""
    return make_nuspec


@pytest.fixture
def nupkg_factory():
    """Return a builder for .nupkg archives."""
    return make_nupkg


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the directory holding static test manifests."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def license_texts_dir(fixtures_dir: Path) -> Path:
    """Return the directory holding complete license texts."""
    return fixtures_dir / "licenses"
