"""Identify licenses from license files.

The locator accepts either a license file or a directory expected to hold
one, reads the text and matches it against anchor phrases of well-known
licenses. Short texts that are already an SPDX expression (as served by
licenses.nuget.org, for example) are accepted directly.
"""

import html
import logging
import re
from pathlib import Path
from typing import Optional

from license_harvester.models import License
from license_harvester.resolvers.spdx import license_name, parse_expression

logger = logging.getLogger(__name__)

MAX_LICENSE_BYTES = 256 * 1024
MAX_EXPRESSION_LENGTH = 200

# Conventional license file names, in lookup order
LICENSE_FILE_NAMES = (
    "LICENSE",
    "LICENSE.txt",
    "LICENSE.md",
    "LICENSE.rst",
    "LICENCE",
    "LICENCE.txt",
    "LICENCE.md",
    "COPYING",
    "COPYING.txt",
    "License.txt",
    "license.txt",
    "LICENSE.fetched",
)

# Ordered: more specific licenses must be checked before the ones whose
# phrases they also contain (BSL before MIT, BSD-3 before BSD-2).
# GNU licenses are matched separately since MPL and EPL texts cite them.
ANCHOR_PHRASES: tuple[tuple[str, tuple[str, ...]], ...] = (
    (
        "BSL-1.0",
        (
            "boost software license",
            "permission is hereby granted free of charge to any person or organization",
        ),
    ),
    (
        "MIT",
        (
            "permission is hereby granted free of charge",
            "the software is provided as is",
        ),
    ),
    (
        "Apache-2.0",
        ("apache license", "version 2 0"),
    ),
    (
        "BSD-3-Clause",
        (
            "redistribution and use in source and binary forms with or without modification",
            "neither the name of",
        ),
    ),
    (
        "BSD-2-Clause",
        (
            "redistribution and use in source and binary forms with or without modification",
            "this software is provided by the copyright holders and contributors as is",
        ),
    ),
    (
        "ISC",
        (
            "permission to use copy modify and or distribute this software for any purpose",
        ),
    ),
    (
        "MPL-2.0",
        ("mozilla public license version 2 0",),
    ),
    (
        "EPL-2.0",
        ("eclipse public license", "v 2 0"),
    ),
    (
        "MS-PL",
        ("microsoft public license",),
    ),
    (
        "CC0-1.0",
        ("cc0 1 0 universal",),
    ),
    (
        "Unlicense",
        ("this is free and unencumbered software released into the public domain",),
    ),
)

# Title lines of the full GNU license texts, after normalisation
GNU_TITLES: tuple[tuple[str, str], ...] = (
    ("gnu general public license version 3 29 june 2007", "GPL-3.0"),
    ("gnu general public license version 2 june 1991", "GPL-2.0"),
    ("gnu lesser general public license version 3 29 june 2007", "LGPL-3.0"),
    ("gnu lesser general public license version 2 1 february 1999", "LGPL-2.1"),
    ("gnu library general public license version 2 june 1991", "LGPL-2.0"),
    ("gnu affero general public license version 3 19 november 2007", "AGPL-3.0"),
)

_GNU_FAMILIES = {"": "GPL", "lesser ": "LGPL", "library ": "LGPL", "affero ": "AGPL"}
_GNU_VERSIONS = {"3": "3.0", "2 1": "2.1", "2": "2.0"}
_LATER = "or at your option any later version"

# Standard notice, e.g. "under the terms of the GNU General Public License as
# published by the Free Software Foundation, either version 3 of the License"
_GNU_NOTICE_RE = re.compile(
    r"gnu (lesser |library |affero )?general public license"
    r"(?: as published by the free software foundation)?"
    r"(?: either)? version (3|2 1|2)(?! \d)"
)

_TAG_RE = re.compile(r"<(script|style)\b.*?</\1>|<[^>]+>", re.IGNORECASE | re.DOTALL)
_NON_WORD_RE = re.compile(r"[^a-z0-9]+")


def _normalize(text: str) -> str:
    """Lowercase text and collapse punctuation and whitespace to single spaces."""
    return _NON_WORD_RE.sub(" ", text.lower()).strip()


def _strip_markup(text: str) -> str:
    """Remove HTML tags and entities from text that looks like a web page."""
    if "<" not in text or ">" not in text:
        return text
    return html.unescape(_TAG_RE.sub(" ", text))


def _gnu_license(normalized: str) -> Optional[str]:
    """Return the SPDX identifier of a GNU license text or notice.

    A full license text is recognised by its dated title line; otherwise
    the standard "as published by the Free Software Foundation" notice is
    used. The identifier is "-or-later" only when the text grants any
    later version of that same license.
    """
    titles = [
        (normalized.find(title), base)
        for title, base in GNU_TITLES
        if title in normalized
    ]
    if titles:
        _, base = min(titles)
        version = base.split("-")[1].replace(".", " ").removesuffix(" 0")
        if f"version {version} of the license {_LATER}" in normalized:
            return f"{base}-or-later"
        return f"{base}-only"

    match = _GNU_NOTICE_RE.search(normalized)
    if match is None:
        return None
    family, version = match.groups()
    base = f"{_GNU_FAMILIES[family or '']}-{_GNU_VERSIONS[version]}"
    if base not in {title_base for _, title_base in GNU_TITLES}:
        return None
    if _LATER in normalized[match.end() : match.end() + 60]:
        return f"{base}-or-later"
    return f"{base}-only"


class LicenseFileLocator:
    """Finds license files and classifies their text.

    Attributes:
        file_names: Names tried, in order, when given a directory.
    """

    def __init__(self, file_names: tuple[str, ...] = LICENSE_FILE_NAMES) -> None:
        self.file_names = file_names

    def locate(self, path: Path) -> Optional[License]:
        """Identify the license stored at ``path``.

        Args:
            path: A license file, or a directory expected to contain one.

        Returns:
            The matched License, or None if no file was found or the text
            is not recognised.
        """
        license_file = self.find_license_file(path)
        if license_file is None:
            logger.debug("No license file found at %s", path)
            return None

        try:
            with open(license_file, "rb") as f:
                raw = f.read(MAX_LICENSE_BYTES)
        except OSError as e:
            logger.warning("Could not read license file %s: %s", license_file, e)
            return None

        match = self.identify_text(raw.decode("utf-8", errors="replace"))
        if match is None:
            logger.debug("Unrecognised license text in %s", license_file)
        return match

    def find_license_file(self, path: Path) -> Optional[Path]:
        """Return the license file for a path, looking inside directories."""
        if path.is_file():
            return path
        if not path.is_dir():
            return None

        for file_name in self.file_names:
            candidate = path / file_name
            if candidate.is_file():
                return candidate
        return None

    def identify_text(self, text: str) -> Optional[License]:
        """Classify license text.

        Args:
            text: Plain-text or HTML license content.

        Returns:
            The matched License, or None.
        """
        text = _strip_markup(text).strip()
        if not text:
            return None

        if len(text) <= MAX_EXPRESSION_LENGTH:
            expression = parse_expression(text)
            if expression is not None:
                return expression

        normalized = _normalize(text)
        for spdx_id, phrases in ANCHOR_PHRASES:
            if all(phrase in normalized for phrase in phrases):
                return License(spdx_id=spdx_id, name=license_name(spdx_id))

        gnu_id = _gnu_license(normalized)
        if gnu_id is not None:
            return License(spdx_id=gnu_id, name=license_name(gnu_id))

        return None
