"""Output reporters for scan results.

Reporters turn canonical package records into documents such as a
Markdown attribution file.
"""

from license_harvester.reporters.base import BaseReporter
from license_harvester.reporters.markdown import MarkdownReporter

__all__ = ["BaseReporter", "MarkdownReporter"]
