"""Resolver for NuGet package spec (``.nuspec``) documents.

Spec files are read either from disk, beside an installed package, or from
inside a ``.nupkg`` archive. The ``<license>`` element decides how the
license is resolved: an expression is taken verbatim, a file reference is
handed to :class:`LicenseFileLocator`.
"""

import logging
import zipfile
from pathlib import Path, PurePosixPath
from typing import Iterable, Optional
from xml.etree import ElementTree as ET

from license_harvester.exceptions import SpecParseError
from license_harvester.models import License, PackageMetadata
from license_harvester.resolvers.license_file import (
    MAX_LICENSE_BYTES,
    LicenseFileLocator,
)

logger = logging.getLogger(__name__)

SPEC_EXTENSION = ".nuspec"
ARCHIVE_EXTENSION = ".nupkg"


def _local_name(tag: str) -> str:
    """Strip the XML namespace from an element tag."""
    return tag.rsplit("}", 1)[-1]


def _child(element: ET.Element, name: str) -> Optional[ET.Element]:
    """Return the first direct child with the given local name."""
    for child in element:
        if _local_name(child.tag) == name:
            return child
    return None


def _child_text(element: ET.Element, name: str) -> Optional[str]:
    """Return the stripped text of a direct child, or None if absent or empty."""
    child = _child(element, name)
    if child is None or child.text is None:
        return None
    text = child.text.strip()
    return text or None


def is_archive(path: Path) -> bool:
    """Return True if ``path`` names a ``.nupkg`` package archive."""
    return path.suffix.lower() == ARCHIVE_EXTENSION


def _archive_spec_member(archive: zipfile.ZipFile) -> Optional[str]:
    """Return the name of the root-level nuspec entry of an archive."""
    for member in archive.namelist():
        if "/" not in member and member.lower().endswith(SPEC_EXTENSION):
            return member
    return None


class SpecResolver:
    """Extracts package metadata from nuspec documents.

    Attributes:
        locator: Classifies license files referenced by ``<license type="file">``.
    """

    def __init__(self, locator: Optional[LicenseFileLocator] = None) -> None:
        self.locator = locator or LicenseFileLocator()

    def resolve(self, content: str | bytes, spec_path: Path) -> PackageMetadata:
        """Parse a nuspec document into PackageMetadata.

        Args:
            content: The nuspec XML.
            spec_path: Where the document came from. License file references
                are resolved relative to its directory, or inside the archive
                when it names a ``.nupkg``.

        Returns:
            PackageMetadata with whatever fields the document carries.

        Raises:
            SpecParseError: If the XML is malformed or has no ``<metadata>``.
        """
        try:
            root = ET.fromstring(content)
        except ET.ParseError as e:
            raise SpecParseError(f"Invalid nuspec XML in {spec_path}: {e}") from e

        meta = root if _local_name(root.tag) == "metadata" else _child(root, "metadata")
        if meta is None:
            raise SpecParseError(f"No <metadata> element in {spec_path}")

        description = _child_text(meta, "description")
        metadata = PackageMetadata(
            authors=_child_text(meta, "authors"),
            homepage=_child_text(meta, "projectUrl"),
            description=description,
            summary=description.splitlines()[0].strip() if description else None,
            license_url=_child_text(meta, "licenseUrl"),
        )

        license_element = _child(meta, "license")
        if license_element is not None:
            license_kind = license_element.get("type")
            license_text = (license_element.text or "").strip()

            if license_kind == "expression" and license_text:
                metadata.license_type = license_text
                metadata.license_source = "expression"
            elif license_kind == "file" and license_text:
                match = self._locate_license_file(spec_path, license_text)
                if match is not None:
                    metadata.license_type = match.spdx_id
                    metadata.license_source = "file"

        return metadata

    def read_spec(self, path: Path) -> Optional[bytes]:
        """Read nuspec content from a spec file or a package archive.

        Returns:
            The raw document, or None if the path does not exist, cannot be
            read, or the archive holds no nuspec entry.
        """
        if not path.is_file():
            return None

        try:
            if not is_archive(path):
                return path.read_bytes()

            with zipfile.ZipFile(path) as archive:
                member = _archive_spec_member(archive)
                if member is None:
                    logger.warning("No %s entry in %s", SPEC_EXTENSION, path)
                    return None
                return archive.read(member)
        except zipfile.BadZipFile as e:
            logger.warning("Invalid package archive %s: %s", path, e)
        except OSError as e:
            logger.warning("Could not read %s: %s", path, e)
        return None

    def read_first(self, candidate_paths: Iterable[Path]) -> Optional[PackageMetadata]:
        """Resolve metadata from the first usable candidate spec path.

        Missing files are skipped silently, unreadable and unparsable ones
        with a warning.

        Args:
            candidate_paths: Spec files or archives, in preference order.

        Returns:
            PackageMetadata from the first candidate that parses, or None.
        """
        for path in candidate_paths:
            content = self.read_spec(path)
            if content is None:
                continue

            try:
                return self.resolve(content, path)
            except SpecParseError as e:
                logger.warning("%s", e)
                continue

        return None

    def _locate_license_file(
        self, spec_path: Path, reference: str
    ) -> Optional[License]:
        """Classify the license file a nuspec points at."""
        if is_archive(spec_path):
            return self._locate_in_archive(spec_path, reference)

        return self.locator.locate(spec_path.parent / reference)

    def _locate_in_archive(
        self, archive_path: Path, reference: str
    ) -> Optional[License]:
        """Classify a license file stored inside a package archive."""
        member = str(PurePosixPath(reference.replace("\\", "/")))
        try:
            with zipfile.ZipFile(archive_path) as archive:
                with archive.open(member) as f:
                    raw = f.read(MAX_LICENSE_BYTES)
        except (KeyError, zipfile.BadZipFile, OSError) as e:
            logger.debug("License file %s not readable in %s: %s", member, archive_path, e)
            return None

        return self.locator.identify_text(raw.decode("utf-8", errors="replace"))
