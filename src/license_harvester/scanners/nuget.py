"""Scanner for legacy NuGet ``packages.config`` projects.

Every ``packages.config`` below the project root (hidden directories
included) is one assembly; the directory holding it names the group::

    <packages>
      <package id="Newtonsoft.Json" version="13.0.1" targetFramework="net48" />
    </packages>

Package specs are read from ``<id>.<version>.nupkg`` archives found under
the archive root, or from the installed package directories.
"""

import logging
import shutil
import sys
from pathlib import Path
from typing import Optional
from xml.etree import ElementTree as ET

from license_harvester.cmd import CommandResult
from license_harvester.config import (
    DEFAULT_NUGET_BINARY,
    LEGACY_NUGET_BINARY,
    ScanConfig,
)
from license_harvester.exceptions import ManifestError
from license_harvester.models import PackageMetadata, RawDependency
from license_harvester.resolvers.nuspec import ARCHIVE_EXTENSION, SpecResolver
from license_harvester.scanners.base import BasePackageManager, installed_package_dir

logger = logging.getLogger(__name__)

MANIFEST_NAME = "packages.config"


class NugetPackageManager(BasePackageManager):
    """Scanner for NuGet ``packages.config`` manifests."""

    def __init__(
        self, config: ScanConfig, spec_resolver: Optional[SpecResolver] = None
    ) -> None:
        super().__init__(config)
        self.spec_resolver = spec_resolver or SpecResolver()
        self._archives: Optional[dict[str, Path]] = None

    @property
    def name(self) -> str:
        return "NuGet"

    @property
    def package_management_command(self) -> list[str]:
        if sys.platform == "win32":
            return ["nuget"]
        return ["mono", str(self.nuget_binary())]

    def nuget_binary(self) -> Path:
        """Return the nuget.exe to run; legacy ``.vcproj`` solutions need v3.5."""
        if self.config.nuget_binary is not None:
            return self.config.nuget_binary
        if any(self.project_path.rglob("*.vcproj")):
            return LEGACY_NUGET_BINARY
        return DEFAULT_NUGET_BINARY

    def possible_manifest_paths(self) -> list[Path]:
        paths: list[Path] = []

        vendored = sorted(self.project_path.glob(f"vendor/*{ARCHIVE_EXTENSION}"))
        if vendored:
            paths.append(vendored[0].parent)

        # A solution file is a good indicator of a .NET solution
        solutions = sorted(self.project_path.glob("*.sln"))
        if solutions:
            paths.append(solutions[0])

        paths.append(self.project_path / MANIFEST_NAME)
        paths.append(self.project_path / ".nuget")
        return paths

    def manifest_paths(self) -> list[Path]:
        return sorted(self.project_path.rglob(MANIFEST_NAME))

    def parse_manifest(self, path: Path) -> list[RawDependency]:
        """Parse a ``packages.config`` file.

        Args:
            path: The manifest. Its directory name becomes the group.

        Returns:
            One RawDependency per ``<package>`` element, in document order.

        Raises:
            FileNotFoundError: If the manifest does not exist.
            ManifestError: If the XML is malformed.
        """
        try:
            root = ET.parse(path).getroot()
        except ET.ParseError as e:
            raise ManifestError(path, f"malformed XML: {e}") from e

        group = path.parent.name
        dependencies = []

        for element in root.iter():
            if element.tag.rsplit("}", 1)[-1] != "package":
                continue

            name = element.get("id")
            version = element.get("version")
            if not name or not version:
                logger.warning(
                    "Skipping <package> without id or version in %s", path
                )
                continue

            dependencies.append(
                RawDependency(
                    name=name,
                    version=version,
                    group=group,
                    candidate_spec_paths=self._candidate_spec_paths(name, version),
                    install_path=self._install_dir(name, version),
                )
            )

        return dependencies

    def read_metadata(self, dependency: RawDependency) -> Optional[PackageMetadata]:
        return self.spec_resolver.read_first(dependency.candidate_spec_paths)

    def restore_commands(self) -> list[list[str]]:
        command = self.package_management_command
        solutions = sorted(self.project_path.glob("*.sln"))
        if len(solutions) > 1:
            return [[*command, "restore", solution.name] for solution in solutions]
        return [[*command, "restore"]]

    def installed(self) -> bool:
        if sys.platform == "win32":
            found = shutil.which("nuget") is not None
        else:
            found = shutil.which("mono") is not None and self.nuget_binary().exists()

        if found:
            logger.debug("%s is installed", self.name)
        else:
            logger.info("%s is not installed", self.name)
        return found

    def _run_restore(self, command: list[str]) -> CommandResult:
        """Run a restore, retrying with an explicit packages directory if asked to."""
        result = super()._run_restore(command)
        if result.success or "-PackagesDirectory" not in result.stderr:
            return result

        logger.warning("%s failed: %s", " ".join(command), result.stderr.strip())
        logger.info("%s: trying fallback prepare command", self.name)
        fallback = [*command, "-PackagesDirectory", str(self.config.packages_root)]
        return super()._run_restore(fallback)

    def _candidate_spec_paths(self, name: str, version: str) -> tuple[Path, ...]:
        """Return archives and installed spec files that may describe a package."""
        candidates = []

        archive = self._archive_index().get(f"{name}.{version}{ARCHIVE_EXTENSION}".lower())
        if archive is not None:
            candidates.append(archive)

        lower = name.lower()
        candidates.append(
            self.config.packages_root / lower / version.lower() / f"{lower}.nuspec"
        )
        candidates.append(
            self.project_path / "packages" / f"{name}.{version}" / f"{name}.nuspec"
        )
        return tuple(candidates)

    def _install_dir(self, name: str, version: str) -> Optional[Path]:
        """Return the installed package directory, or None if not found."""
        path = installed_package_dir(self.config.packages_root, name, version)
        if path is not None:
            return path

        # Solution-local packages folder used by packages.config restores
        local = self.project_path / "packages" / f"{name}.{version}"
        return local if local.is_dir() else None

    def _archive_index(self) -> dict[str, Path]:
        """Map lower-cased archive file names under the archive root to paths."""
        if self._archives is None:
            self._archives = {}
            root = self.config.nupkg_search_root
            for archive in sorted(root.rglob(f"*{ARCHIVE_EXTENSION}")):
                self._archives.setdefault(archive.name.lower(), archive)
        return self._archives
