"""Core data models for license_harvester.

This module defines the data structures shared by the manifest scanners,
the license resolvers and the aggregator: raw dependency declarations,
package metadata read from spec files, and the canonical package records
produced by a scan.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class RawDependency:
    """Immutable dependency declaration read from one manifest.

    Frozen for hashability. Identity is ``(name, version)``; the group is
    accumulated by the aggregator but is not part of the identity.

    Attributes:
        name: Package name (e.g., "Newtonsoft.Json").
        version: Exact version string (e.g., "13.0.1").
        group: Declaring unit, such as a project or assembly name.
        candidate_spec_paths: Ordered locations where the package's spec
            file might live.
        install_path: Installed package directory, when the manifest
            already knows it.
    """

    name: str
    version: str
    group: str
    candidate_spec_paths: tuple[Path, ...] = ()
    install_path: Optional[Path] = None

    @property
    def identity(self) -> tuple[str, str]:
        """Return the ``(name, version)`` key of this dependency."""
        return (self.name, self.version)


@dataclass(frozen=True)
class License:
    """A license recognised from license text.

    Attributes:
        spdx_id: SPDX identifier or expression (e.g., "MIT").
        name: Human-readable license name (e.g., "MIT License").
    """

    spdx_id: str
    name: str


@dataclass
class PackageMetadata:
    """Metadata extracted from a package spec file.

    ``license_type`` and ``license_url`` may both be set; the type can be
    back-filled later from a fetched license file.

    Attributes:
        authors: Optional author list as written in the package spec.
        homepage: Optional project URL.
        description: Optional full description.
        summary: First line of the description.
        license_type: Optional license identifier or expression.
        license_url: Optional URL pointing at the license text.
        license_source: Where ``license_type`` came from ("expression",
            "file", "url" or "manifest").
    """

    authors: Optional[str] = None
    homepage: Optional[str] = None
    description: Optional[str] = None
    summary: Optional[str] = None
    license_type: Optional[str] = None
    license_url: Optional[str] = None
    license_source: Optional[str] = None


@dataclass
class CanonicalPackage:
    """Deduplicated record for one ``(name, version)`` pair.

    Attributes:
        name: Package name.
        version: Package version.
        spec_licenses: Resolved license identifiers (empty when unknown).
        install_path: Installed package directory, None when not found.
        groups: Every group that declared this package.
        package_manager: Name of the package manager that reported it.
        metadata: Metadata the license was resolved from, if any.
    """

    name: str
    version: str
    spec_licenses: set[str] = field(default_factory=set)
    install_path: Optional[Path] = None
    groups: set[str] = field(default_factory=set)
    package_manager: Optional[str] = None
    metadata: Optional[PackageMetadata] = None

    @property
    def identity(self) -> tuple[str, str]:
        """Return the ``(name, version)`` key of this package."""
        return (self.name, self.version)

    @property
    def license_display(self) -> str:
        """Return the licenses joined for display, or "unknown"."""
        if not self.spec_licenses:
            return "unknown"
        return ", ".join(sorted(self.spec_licenses))


@dataclass
class ScanResult:
    """Outcome of a whole scan.

    Attributes:
        packages: Canonical packages in first-sighting order.
        warnings: Non-fatal problems met during the scan.
    """

    packages: list[CanonicalPackage] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
