"""Scan a project with every detected package manager."""

import logging
from typing import Optional, Sequence

from license_harvester.aggregator import PackageAggregator
from license_harvester.config import ScanConfig
from license_harvester.models import ScanResult
from license_harvester.resolvers.fetcher import RemoteLicenseFetcher
from license_harvester.resolvers.license_file import LicenseFileLocator
from license_harvester.resolvers.waterfall import LicenseWaterfall
from license_harvester.scanners import BasePackageManager, detect_package_managers

logger = logging.getLogger(__name__)


async def harvest(
    config: ScanConfig,
    managers: Optional[Sequence[BasePackageManager]] = None,
) -> ScanResult:
    """Discover dependencies and resolve their licenses.

    Package managers are processed one after another and share a single
    aggregator, so a package reported twice is resolved once.

    Args:
        config: Scan settings.
        managers: Scanners to use. Defaults to every detected one.

    Returns:
        ScanResult with packages in discovery order and any warnings.

    Raises:
        RestoreCommandError: If preparing fails and ``prepare_no_fail`` is off.
        ManifestError: If a manifest is malformed and ``skip_malformed`` is off.
        CommandError: If a dependency listing command fails.
    """
    if managers is None:
        managers = detect_package_managers(config)

    if not managers:
        logger.warning("No supported package manager found in %s", config.project_path)
        return ScanResult()

    locator = LicenseFileLocator()
    result = ScanResult()

    async with RemoteLicenseFetcher(
        max_redirects=config.max_redirects, timeout=config.fetch_timeout
    ) as fetcher:
        aggregator = PackageAggregator(
            LicenseWaterfall(fetcher, locator, force_fetch=config.force_fetch)
        )

        for manager in managers:
            logger.info("Scanning %s dependencies", manager.name)
            if config.prepare:
                manager.prepare()
            await manager.resolve_packages(aggregator)
            result.warnings.extend(manager.warnings)

        result.packages = aggregator.packages

    resolved = sum(1 for package in result.packages if package.spec_licenses)
    logger.info(
        "Resolved licenses for %d/%d packages", resolved, len(result.packages)
    )
    return result
