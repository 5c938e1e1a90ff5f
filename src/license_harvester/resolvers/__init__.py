"""License resolvers for package specs, license files and license URLs.

This module provides the pieces of the license fallback chain: nuspec
parsing, local license file classification and remote license download.
"""

from license_harvester.resolvers.fetcher import RemoteLicenseFetcher, normalize_license_url
from license_harvester.resolvers.license_file import LicenseFileLocator
from license_harvester.resolvers.nuspec import SpecResolver
from license_harvester.resolvers.waterfall import FETCHED_LICENSE_NAME, LicenseWaterfall

__all__ = [
    "FETCHED_LICENSE_NAME",
    "LicenseFileLocator",
    "LicenseWaterfall",
    "RemoteLicenseFetcher",
    "SpecResolver",
    "normalize_license_url",
]
