"""Base interface for package manager scanners.

Each scanner knows where its ecosystem's manifests live, how to parse them
into raw dependency declarations, where the installed packages are, and
which command restores them. The aggregator and the license resolvers only
talk to this interface.
"""

import logging
import shutil
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterator, Optional

from license_harvester.aggregator import PackageAggregator
from license_harvester.cmd import CommandResult, run_command
from license_harvester.config import ScanConfig
from license_harvester.exceptions import ManifestError, RestoreCommandError
from license_harvester.models import CanonicalPackage, PackageMetadata, RawDependency

logger = logging.getLogger(__name__)


def installed_package_dir(packages_root: Path, name: str, version: str) -> Optional[Path]:
    """Return ``<packages_root>/<name lower>/<version>`` if it exists."""
    path = packages_root / name.lower() / version.lower()
    return path if path.is_dir() else None


class BasePackageManager(ABC):
    """Abstract base class for package manager scanners.

    Attributes:
        config: Scan settings.
        project_path: Root directory of the scanned project.
        warnings: Non-fatal problems met while preparing or parsing.
    """

    def __init__(self, config: ScanConfig) -> None:
        """Initialize the scanner.

        Args:
            config: Scan settings shared by every component.
        """
        self.config = config
        self.project_path = config.project_path
        self.warnings: list[str] = []

    @property
    @abstractmethod
    def name(self) -> str:
        """Return a human-readable name for this package manager.

        Returns:
            Name like "NuGet", "dotnet" or "npm".
        """
        ...

    @property
    @abstractmethod
    def package_management_command(self) -> list[str]:
        """Return the program (and fixed arguments) of this package manager."""
        ...

    @abstractmethod
    def possible_manifest_paths(self) -> list[Path]:
        """Return paths whose presence indicates this package manager is used."""
        ...

    @abstractmethod
    def manifest_paths(self) -> list[Path]:
        """Return the manifests to parse, in a deterministic order."""
        ...

    @abstractmethod
    def parse_manifest(self, path: Path) -> list[RawDependency]:
        """Parse one manifest into raw dependency declarations.

        Args:
            path: Manifest to parse.

        Returns:
            Dependencies in declaration order.

        Raises:
            FileNotFoundError: If the manifest does not exist.
            ManifestError: If the manifest cannot be parsed.
        """
        ...

    @abstractmethod
    def read_metadata(self, dependency: RawDependency) -> Optional[PackageMetadata]:
        """Return package spec metadata for a dependency, or None if unavailable."""
        ...

    @abstractmethod
    def restore_commands(self) -> list[list[str]]:
        """Return the commands that materialise dependencies on disk."""
        ...

    def detected(self) -> bool:
        """Return True if any of the possible manifest paths exists."""
        return any(path.exists() for path in self.possible_manifest_paths())

    def install_path(self, dependency: RawDependency) -> Optional[Path]:
        """Return the installed package directory, or None if not found."""
        return dependency.install_path

    def dependencies(self) -> Iterator[RawDependency]:
        """Yield dependencies from every manifest, in manifest order.

        A malformed manifest aborts the scan unless ``skip_malformed`` is
        configured, in which case it is recorded as a warning and skipped.
        """
        for path in self.manifest_paths():
            logger.debug("%s: parsing %s", self.name, path)
            try:
                dependencies = self.parse_manifest(path)
            except ManifestError as e:
                if not self.config.skip_malformed:
                    raise
                logger.warning("Skipping manifest: %s", e)
                self.warnings.append(str(e))
                continue
            yield from dependencies

    async def resolve_packages(self, aggregator: PackageAggregator) -> list[CanonicalPackage]:
        """Feed this package manager's dependencies into the aggregator.

        Returns:
            All packages the aggregator holds afterwards.
        """
        return await aggregator.aggregate(
            self.dependencies(),
            self.read_metadata,
            self.install_path,
            package_manager=self.name,
        )

    def installed(self) -> bool:
        """Return True if the package manager executable is available."""
        found = shutil.which(self.package_management_command[0]) is not None
        if found:
            logger.debug("%s is installed", self.name)
        else:
            logger.info("%s is not installed", self.name)
        return found

    def prepare(self) -> None:
        """Run the restore commands.

        Raises:
            RestoreCommandError: If a command fails and ``prepare_no_fail``
                is not set. Otherwise the failure becomes a warning.
        """
        for command in self.restore_commands():
            result = self._run_restore(command)
            if result.success:
                continue

            error = RestoreCommandError(
                result.command, result.returncode, result.stdout, result.stderr
            )
            if not self.config.prepare_no_fail:
                raise error

            logger.warning("%s", error)
            self.warnings.append(str(error))

    def _run_restore(self, command: list[str]) -> CommandResult:
        """Run one restore command in the project directory."""
        return run_command(
            command, cwd=self.project_path, timeout=self.config.command_timeout
        )
