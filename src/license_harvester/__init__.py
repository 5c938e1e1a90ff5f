"""License Harvester - dependency license discovery for .NET and npm projects.

This package reads NuGet ``packages.config`` files, .NET
``project.assets.json`` files and npm dependency trees, and resolves the
license of every package through its package spec, license file or license URL.
"""

__version__ = "0.1.0"

from license_harvester.models import (
    CanonicalPackage,
    License,
    PackageMetadata,
    RawDependency,
    ScanResult,
)

__all__ = [
    "__version__",
    "CanonicalPackage",
    "License",
    "PackageMetadata",
    "RawDependency",
    "ScanResult",
]
