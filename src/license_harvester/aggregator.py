"""Merge raw dependency declarations into canonical package records."""

import logging
from pathlib import Path
from typing import Callable, Iterable, Optional

from license_harvester.models import CanonicalPackage, PackageMetadata, RawDependency
from license_harvester.resolvers.waterfall import LicenseWaterfall

logger = logging.getLogger(__name__)

MetadataLookup = Callable[[RawDependency], Optional[PackageMetadata]]
InstallPathLookup = Callable[[RawDependency], Optional[Path]]


class PackageAggregator:
    """Collects packages keyed by ``(name, version)``.

    The first sighting of an identity resolves its metadata and license;
    later sightings only add their group. State accumulates across calls
    to :meth:`aggregate`, so several package managers can share one
    aggregator.

    Attributes:
        waterfall: License fallback chain applied on first sighting.
    """

    def __init__(self, waterfall: LicenseWaterfall) -> None:
        self.waterfall = waterfall
        self._packages: dict[tuple[str, str], CanonicalPackage] = {}

    @property
    def packages(self) -> list[CanonicalPackage]:
        """Return the packages in first-sighting order."""
        return list(self._packages.values())

    async def aggregate(
        self,
        dependencies: Iterable[RawDependency],
        metadata_lookup: MetadataLookup,
        install_path_lookup: Optional[InstallPathLookup] = None,
        package_manager: Optional[str] = None,
    ) -> list[CanonicalPackage]:
        """Merge dependencies into the collection.

        Dependencies are processed one at a time, in iteration order.

        Args:
            dependencies: Raw declarations to merge.
            metadata_lookup: Returns package spec metadata for a dependency.
            install_path_lookup: Returns the install directory for a
                dependency. Defaults to the dependency's own install_path.
            package_manager: Name recorded on newly created packages.

        Returns:
            All packages collected so far, in first-sighting order.
        """
        for dep in dependencies:
            existing = self._packages.get(dep.identity)
            if existing is not None:
                existing.groups.add(dep.group)
                continue

            install_path = (
                install_path_lookup(dep) if install_path_lookup else dep.install_path
            )
            metadata = await self.waterfall.resolve(metadata_lookup(dep), install_path)

            licenses = set()
            if metadata is not None and metadata.license_type:
                licenses.add(metadata.license_type)

            if install_path is None:
                logger.debug("Install path not found for %s %s", dep.name, dep.version)

            self._packages[dep.identity] = CanonicalPackage(
                name=dep.name,
                version=dep.version,
                spec_licenses=licenses,
                install_path=install_path,
                groups={dep.group},
                package_manager=package_manager,
                metadata=metadata,
            )

        return self.packages
