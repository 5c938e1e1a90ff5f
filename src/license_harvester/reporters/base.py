"""Base interface for output reporters.

Reporters generate formatted output (Markdown, etc.) from canonical
package records.
"""

from abc import ABC, abstractmethod
from pathlib import Path

from license_harvester.models import CanonicalPackage


class BaseReporter(ABC):
    """Abstract base class for output reporters.

    Reporters take canonical package records and generate formatted
    output documents.
    """

    @abstractmethod
    def render(self, packages: list[CanonicalPackage]) -> str:
        """Render packages to formatted output.

        Args:
            packages: Canonical package records.

        Returns:
            Rendered output as a string.
        """
        ...

    def write(self, packages: list[CanonicalPackage], output_path: Path) -> None:
        """Render and write output to a file.

        Args:
            packages: Canonical package records.
            output_path: Path to write the output file.
        """
        content = self.render(packages)
        output_path.write_text(content, encoding="utf-8")

    @property
    @abstractmethod
    def format_name(self) -> str:
        """Return the output format name.

        Returns:
            Format name like "markdown".
        """
        ...

    @property
    @abstractmethod
    def default_extension(self) -> str:
        """Return the default file extension for this format.

        Returns:
            Extension like ".md".
        """
        ...
