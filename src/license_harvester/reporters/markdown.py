"""Markdown reporter for license attribution files.

This module provides a reporter that renders canonical package records
into a Markdown document using Jinja2 templates.
"""

from datetime import datetime
from importlib.resources import files
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader, Template

from license_harvester.models import CanonicalPackage
from license_harvester.reporters.base import BaseReporter
from license_harvester.resolvers.spdx import license_name, spdx_url


def _add_filters(env: Environment) -> None:
    """Register the license filters templates can use."""
    env.filters["license_name"] = license_name
    env.filters["spdx_url"] = spdx_url


class MarkdownReporter(BaseReporter):
    """Reporter that generates Markdown license attribution files.

    Attributes:
        template: The Jinja2 template to use for rendering.
    """

    def __init__(self, template_path: Optional[Path] = None) -> None:
        """Initialize the Markdown reporter.

        Args:
            template_path: Optional path to a custom Jinja2 template.
                If not provided, uses the bundled template.
        """
        if template_path:
            env = Environment(
                loader=FileSystemLoader(template_path.parent),
                autoescape=True,
            )
            _add_filters(env)
            self.template = env.get_template(template_path.name)
        else:
            self.template = self._load_default_template()

    def _load_default_template(self) -> Template:
        """Load the bundled Jinja2 template from package resources."""
        template_content = (
            files("license_harvester.templates")
            .joinpath("licenses.md.j2")
            .read_text(encoding="utf-8")
        )
        env = Environment(autoescape=True)
        _add_filters(env)
        return env.from_string(template_content)

    def render(self, packages: list[CanonicalPackage]) -> str:
        """Render packages to Markdown, sorted by name then version."""
        ordered = sorted(packages, key=lambda p: (p.name.lower(), p.version))
        return self.template.render(
            packages=ordered,
            generated_at=datetime.now(),
        )

    @property
    def format_name(self) -> str:
        return "markdown"

    @property
    def default_extension(self) -> str:
        return ".md"
