"""Scan configuration.

Every component receives its settings through :class:`ScanConfig`; the
platform defaults below are only consulted by the CLI.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

DEFAULT_MAX_REDIRECTS = 10
DEFAULT_FETCH_TIMEOUT = 30.0
DEFAULT_COMMAND_TIMEOUT = 600.0
DEFAULT_NUGET_BINARY = Path("/usr/local/bin/nuget.exe")
LEGACY_NUGET_BINARY = Path("/usr/local/bin/nugetv3.5.0.exe")


@dataclass(frozen=True)
class ScanConfig:
    """Settings for one scan.

    Attributes:
        project_path: Root directory of the project being scanned.
        packages_root: Directory holding installed NuGet packages.
        archive_root: Directory searched for ``.nupkg`` archives.
        prepare: Run each package manager's restore command first.
        prepare_no_fail: Downgrade restore failures to warnings.
        ignored_groups: Dependency groups to leave out (e.g. "devDependencies").
        npm_options: Extra arguments appended to ``npm list``.
        max_redirects: Redirect hops allowed when fetching a license URL.
        fetch_timeout: Total timeout in seconds for one license request.
        command_timeout: Timeout in seconds for external commands.
        skip_malformed: Skip unparsable manifests instead of aborting.
        force_fetch: Re-download license files already cached on disk.
        nuget_binary: Path to ``nuget.exe`` when run through mono.
    """

    project_path: Path
    packages_root: Path
    archive_root: Optional[Path] = None
    prepare: bool = False
    prepare_no_fail: bool = False
    ignored_groups: frozenset[str] = field(default_factory=frozenset)
    npm_options: Optional[str] = None
    max_redirects: int = DEFAULT_MAX_REDIRECTS
    fetch_timeout: float = DEFAULT_FETCH_TIMEOUT
    command_timeout: Optional[float] = DEFAULT_COMMAND_TIMEOUT
    skip_malformed: bool = False
    force_fetch: bool = False
    nuget_binary: Optional[Path] = None

    @property
    def nupkg_search_root(self) -> Path:
        """Return the directory searched for package archives."""
        return self.archive_root if self.archive_root is not None else self.project_path


def default_packages_root() -> Path:
    """Return the platform's global NuGet packages folder.

    Honours the ``NUGET_PACKAGES`` environment variable, otherwise
    ``~/.nuget/packages``.
    """
    override = os.environ.get("NUGET_PACKAGES")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".nuget" / "packages"
