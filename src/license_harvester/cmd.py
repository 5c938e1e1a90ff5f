"""Thin wrapper around external command execution."""

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandResult:
    """Captured outcome of an external command.

    Attributes:
        command: The argument list that was run.
        returncode: Exit status, or None when the command timed out.
        stdout: Captured standard output.
        stderr: Captured standard error.
    """

    command: tuple[str, ...]
    returncode: Optional[int]
    stdout: str = ""
    stderr: str = ""

    @property
    def success(self) -> bool:
        """Return True if the command exited with status 0."""
        return self.returncode == 0


def run_command(
    command: Sequence[str],
    cwd: Optional[Path] = None,
    timeout: Optional[float] = None,
) -> CommandResult:
    """Run a command and capture its output.

    A missing executable is reported as exit status 127 and a timeout as
    a None exit status; neither raises.

    Args:
        command: Program and arguments.
        cwd: Working directory for the command.
        timeout: Seconds to wait before giving up.

    Returns:
        CommandResult with the exit status and captured output.
    """
    logger.debug("Running %s in %s", " ".join(command), cwd or ".")
    try:
        completed = subprocess.run(
            list(command),
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except FileNotFoundError as e:
        return CommandResult(tuple(command), 127, "", str(e))
    except subprocess.TimeoutExpired:
        return CommandResult(
            tuple(command), None, "", f"timed out after {timeout} seconds"
        )

    return CommandResult(
        tuple(command), completed.returncode, completed.stdout, completed.stderr
    )
