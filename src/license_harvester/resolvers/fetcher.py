"""Download remote license texts into a local cache file.

License URLs in package specs often point at a short link or a GitHub
"blob" page. The fetcher follows the redirect chain one hop at a time,
rewrites blob pages to their raw-content equivalent and stores the final
response body next to the installed package.
"""

import asyncio
import logging
import re
from pathlib import Path
from typing import Optional
from urllib.parse import urljoin

import aiohttp

from license_harvester.config import DEFAULT_FETCH_TIMEOUT, DEFAULT_MAX_REDIRECTS
from license_harvester.exceptions import (
    RedirectLimitError,
    RedirectLoopError,
    RemoteFetchError,
)

logger = logging.getLogger(__name__)

REDIRECT_STATUSES = frozenset({301, 302, 303, 307, 308})

_GITHUB_BLOB_RE = re.compile(
    r"^https?://(?:www\.)?github\.com/([^/]+)/([^/]+)/blob/(.+)$", re.IGNORECASE
)


def normalize_license_url(url: str) -> str:
    """Rewrite a GitHub blob view URL to its raw-content URL.

    Example:
        ``https://github.com/o/r/blob/main/LICENSE`` becomes
        ``https://raw.githubusercontent.com/o/r/main/LICENSE``.

    Other URLs are returned unchanged.
    """
    url = url.strip()
    match = _GITHUB_BLOB_RE.match(url)
    if match is None:
        return url
    owner, repo, rest = match.groups()
    return f"https://raw.githubusercontent.com/{owner}/{repo}/{rest}"


def _write_file(destination: Path, body: bytes) -> None:
    """Write ``body`` through a sibling temp file so readers never see a partial file."""
    tmp_path = destination.with_name(f"{destination.name}.tmp")
    try:
        tmp_path.write_bytes(body)
        tmp_path.replace(destination)
    except OSError:
        tmp_path.unlink(missing_ok=True)
        raise


class RemoteLicenseFetcher:
    """Fetches license files over HTTP with bounded redirect chasing.

    Manages a shared aiohttp.ClientSession for connection reuse. Use as an
    async context manager or call close() when done.

    Attributes:
        max_redirects: Redirect hops allowed per download.
        timeout: Total timeout in seconds for each request.
    """

    def __init__(
        self,
        max_redirects: int = DEFAULT_MAX_REDIRECTS,
        timeout: float = DEFAULT_FETCH_TIMEOUT,
    ) -> None:
        self.max_redirects = max_redirects
        self.timeout = timeout
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create the aiohttp session.

        Returns:
            The shared aiohttp ClientSession.
        """
        if self._session is None or self._session.closed:
            self._session = self._create_session()
        return self._session

    def _create_session(self) -> aiohttp.ClientSession:
        """Create a new aiohttp.ClientSession with the configured timeout."""
        return aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=self.timeout)
        )

    async def close(self) -> None:
        """Close the aiohttp session."""
        if self._session is not None and not self._session.closed:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "RemoteLicenseFetcher":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()

    async def fetch(self, url: str, destination: Path, force: bool = False) -> bool:
        """Make the license text behind ``url`` available at ``destination``.

        An existing destination is reused without any request unless
        ``force`` is set. Failures are logged and reported as False; they
        never propagate.

        Args:
            url: License URL from the package spec.
            destination: Cache file to write.
            force: Download even if the destination already exists.

        Returns:
            True if the destination holds license text afterwards.
        """
        if destination.exists() and not force:
            logger.debug("Using cached license file %s", destination)
            return True

        try:
            final_url = await self.download(url, destination)
        except (RemoteFetchError, aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning("Could not fetch license from %s: %s", url, e)
            return False
        except OSError as e:
            logger.warning("Could not write license file %s: %s", destination, e)
            return False

        logger.debug("Fetched license %s -> %s", final_url, destination)
        return True

    async def download(self, url: str, destination: Path) -> str:
        """Follow the redirect chain of ``url`` and save the final body.

        Args:
            url: URL to start from.
            destination: File that receives the response body.

        Returns:
            The URL the body was finally read from.

        Raises:
            RedirectLoopError: If a URL in the chain repeats.
            RedirectLimitError: If the chain exceeds ``max_redirects`` hops.
            RemoteFetchError: On a non-2xx response or a redirect without
                a Location header.
            aiohttp.ClientError: On network errors.
        """
        session = await self._get_session()
        current = normalize_license_url(url)
        visited = {current}
        hops = 0

        while True:
            async with session.get(current, allow_redirects=False) as response:
                if response.status in REDIRECT_STATUSES:
                    location = response.headers.get("Location")
                    if not location:
                        raise RemoteFetchError(
                            f"{current} answered {response.status} without a Location"
                        )
                    next_url = normalize_license_url(urljoin(current, location))
                elif 200 <= response.status < 300:
                    body = await response.read()
                    _write_file(destination, body)
                    return current
                else:
                    raise RemoteFetchError(
                        f"{current} answered with status {response.status}"
                    )

            logger.info("Redirect detected: %s -> %s", current, next_url)

            if next_url in visited:
                raise RedirectLoopError(
                    f"Redirect loop detected: {current} -> {next_url}"
                )

            hops += 1
            if hops > self.max_redirects:
                raise RedirectLimitError(
                    f"More than {self.max_redirects} redirects starting at {url}"
                )

            visited.add(next_url)
            current = next_url
