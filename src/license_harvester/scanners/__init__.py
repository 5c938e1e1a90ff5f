"""Package manager scanners for the supported ecosystems.

This module provides scanners for extracting dependency declarations from
NuGet ``packages.config`` files, .NET ``project.assets.json`` files and npm
projects.
"""

from license_harvester.config import ScanConfig
from license_harvester.scanners.base import BasePackageManager
from license_harvester.scanners.dotnet import DotnetPackageManager
from license_harvester.scanners.npm import NpmPackageManager
from license_harvester.scanners.nuget import NugetPackageManager

__all__ = [
    "BasePackageManager",
    "DotnetPackageManager",
    "NpmPackageManager",
    "NugetPackageManager",
    "detect_package_managers",
    "get_package_manager",
]

# Registry of available scanners in detection order
_PACKAGE_MANAGERS: list[type[BasePackageManager]] = [
    NugetPackageManager,
    DotnetPackageManager,
    NpmPackageManager,
]


def detect_package_managers(config: ScanConfig) -> list[BasePackageManager]:
    """Return a scanner for every package manager used by the project.

    Args:
        config: Scan settings; ``project_path`` is inspected.

    Returns:
        Scanner instances in detection order (NuGet, dotnet, npm).
    """
    managers = [manager_cls(config) for manager_cls in _PACKAGE_MANAGERS]
    return [manager for manager in managers if manager.detected()]


def get_package_manager(name: str, config: ScanConfig) -> BasePackageManager:
    """Get a scanner by package manager name (case-insensitive).

    Raises:
        ValueError: If no scanner has that name.
    """
    for manager_cls in _PACKAGE_MANAGERS:
        manager = manager_cls(config)
        if manager.name.lower() == name.lower():
            return manager

    supported = ", ".join(cls(config).name for cls in _PACKAGE_MANAGERS)
    raise ValueError(
        f"No scanner available for '{name}'. Supported package managers: {supported}"
    )
