"""License fallback chain.

Resolution strategy, each step tried only if the previous one yielded no
license:

1. Expression: ``<license type="expression">`` from the nuspec, verbatim.
2. File: the license file the nuspec references, classified locally.
3. URL: the nuspec ``licenseUrl`` fetched into the install directory and
   classified from the downloaded text.

Steps 1 and 2 happen while the nuspec is parsed; this module adds step 3.
"""

import dataclasses
import logging
from pathlib import Path
from typing import Optional

from license_harvester.models import PackageMetadata
from license_harvester.resolvers.fetcher import RemoteLicenseFetcher
from license_harvester.resolvers.license_file import LicenseFileLocator

logger = logging.getLogger(__name__)

FETCHED_LICENSE_NAME = "LICENSE.fetched"


class LicenseWaterfall:
    """Completes package metadata with the remote-URL fallback.

    Attributes:
        fetcher: Downloads license URLs.
        locator: Classifies downloaded license text.
        force_fetch: Re-download license files that are already cached.
    """

    def __init__(
        self,
        fetcher: RemoteLicenseFetcher,
        locator: Optional[LicenseFileLocator] = None,
        force_fetch: bool = False,
    ) -> None:
        self.fetcher = fetcher
        self.locator = locator or LicenseFileLocator()
        self.force_fetch = force_fetch

    async def resolve(
        self,
        metadata: Optional[PackageMetadata],
        install_path: Optional[Path],
    ) -> Optional[PackageMetadata]:
        """Resolve the license of one package.

        Args:
            metadata: Metadata read from the package spec, if any.
            install_path: Installed package directory, if found. The fetched
                license is cached there, so no fetch happens without it.

        Returns:
            The metadata, with ``license_type`` back-filled when the remote
            license could be classified, or None if there was no metadata.
        """
        if metadata is None:
            return None

        if metadata.license_type:
            logger.debug(
                "License %s already known from %s",
                metadata.license_type,
                metadata.license_source,
            )
            return metadata

        if not metadata.license_url:
            return metadata

        if install_path is None:
            logger.debug(
                "No install path, not fetching license from %s", metadata.license_url
            )
            return metadata

        destination = install_path / FETCHED_LICENSE_NAME
        fetched = await self.fetcher.fetch(
            metadata.license_url, destination, force=self.force_fetch
        )
        if not fetched:
            return metadata

        match = self.locator.locate(destination)
        if match is None:
            logger.debug("Fetched license %s was not recognised", destination)
            return metadata

        return dataclasses.replace(
            metadata, license_type=match.spdx_id, license_source="url"
        )
