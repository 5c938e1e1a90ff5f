"""SPDX helpers: human-readable names and expression normalisation.

License texts and manifest fields are mapped to SPDX identifiers here so
that every resolver reports licenses the same way.
"""

import logging
from functools import lru_cache
from typing import Optional

from license_expression import ExpressionError, get_spdx_licensing

from license_harvester.models import License

logger = logging.getLogger(__name__)

SPDX = get_spdx_licensing()

# Common SPDX identifiers mapped to human-readable names
# Based on https://spdx.org/licenses/
SPDX_NAMES = {
    "MIT": "MIT License",
    "Apache-2.0": "Apache License 2.0",
    "GPL-3.0-only": "GNU General Public License v3.0 only",
    "GPL-3.0-or-later": "GNU General Public License v3.0 or later",
    "GPL-2.0-only": "GNU General Public License v2.0 only",
    "GPL-2.0-or-later": "GNU General Public License v2.0 or later",
    "LGPL-3.0-only": "GNU Lesser General Public License v3.0 only",
    "LGPL-3.0-or-later": "GNU Lesser General Public License v3.0 or later",
    "LGPL-2.1-only": "GNU Lesser General Public License v2.1 only",
    "LGPL-2.1-or-later": "GNU Lesser General Public License v2.1 or later",
    "LGPL-2.0-only": "GNU Library General Public License v2 only",
    "LGPL-2.0-or-later": "GNU Library General Public License v2 or later",
    "BSD-3-Clause": 'BSD 3-Clause "New" or "Revised" License',
    "BSD-2-Clause": 'BSD 2-Clause "Simplified" License',
    "ISC": "ISC License",
    "MPL-2.0": "Mozilla Public License 2.0",
    "EPL-2.0": "Eclipse Public License 2.0",
    "AGPL-3.0-only": "GNU Affero General Public License v3.0 only",
    "AGPL-3.0-or-later": "GNU Affero General Public License v3.0 or later",
    "BSL-1.0": "Boost Software License 1.0",
    "MS-PL": "Microsoft Public License",
    "CC0-1.0": "Creative Commons Zero v1.0 Universal",
    "Unlicense": "The Unlicense",
    "WTFPL": "Do What The F*ck You Want To Public License",
}


def license_name(spdx_id: str) -> str:
    """Return the human-readable name for an SPDX identifier.

    Unknown identifiers (and compound expressions) are returned unchanged.
    """
    return SPDX_NAMES.get(spdx_id, spdx_id)


def spdx_url(spdx_id: str) -> str:
    """Return the spdx.org reference page for an identifier."""
    return f"https://spdx.org/licenses/{spdx_id}.html"


@lru_cache(maxsize=1024)
def parse_expression(text: str) -> Optional[License]:
    """Parse text as a valid SPDX license expression.

    Args:
        text: Candidate expression such as "MIT" or "Apache-2.0 OR MIT".

    Returns:
        License carrying the normalised expression, or None if the text
        is not a known SPDX expression.
    """
    text = text.strip()
    if not text:
        return None

    try:
        parsed = SPDX.parse(text, validate=True)
    except ExpressionError as e:
        logger.debug("Not an SPDX expression: %r (%s)", text, e)
        return None

    if parsed is None:
        return None

    spdx_id = str(parsed).strip()
    return License(spdx_id=spdx_id, name=license_name(spdx_id))
