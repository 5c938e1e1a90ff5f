"""Exception hierarchy for license_harvester."""

from pathlib import Path
from typing import Optional, Sequence


class LicenseHarvesterError(Exception):
    """Base class for all license_harvester errors."""


class ManifestError(LicenseHarvesterError, ValueError):
    """A manifest could not be parsed.

    Attributes:
        path: The manifest that failed.
    """

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        super().__init__(f"Invalid manifest {path}: {reason}")


class SpecParseError(LicenseHarvesterError, ValueError):
    """A package spec (nuspec) document could not be parsed."""


class CommandError(LicenseHarvesterError, RuntimeError):
    """An external command exited with a failing status.

    Attributes:
        command: The argument list that was run.
        returncode: Exit status, or None if the command never finished.
        stdout: Captured standard output.
        stderr: Captured standard error.
    """

    def __init__(
        self,
        command: Sequence[str],
        returncode: Optional[int],
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        self.command = list(command)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr

        message = f"Command '{' '.join(self.command)}' failed (exit {returncode})"
        if stderr.strip():
            message += f"\n{stderr.strip()}"
        if stdout.strip():
            message += f"\n{stdout.strip()}"
        super().__init__(message)


class RestoreCommandError(CommandError):
    """The restore/install command of a package manager failed."""


class RemoteFetchError(LicenseHarvesterError):
    """A remote license could not be downloaded."""


class RedirectLoopError(RemoteFetchError):
    """A redirect chain came back to a URL it had already visited."""


class RedirectLimitError(RemoteFetchError):
    """A redirect chain exceeded the configured number of hops."""
