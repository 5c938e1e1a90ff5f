"""Scanner for npm projects.

npm has no lock file this tool reads directly. Instead ``npm list --json
--long`` prints the installed dependency tree, which is flattened here::

    {
        "name": "my-app",
        "devDependencies": {"jest": "^29.0.0"},
        "dependencies": {
            "lodash": {
                "version": "4.17.21",
                "license": "MIT",
                "path": "/app/node_modules/lodash",
                "dependencies": {...}
            }
        }
    }
"""

import json
import logging
import shlex
from pathlib import Path
from typing import Any, Optional

from license_harvester.cmd import run_command
from license_harvester.config import ScanConfig
from license_harvester.exceptions import CommandError, ManifestError
from license_harvester.models import PackageMetadata, RawDependency
from license_harvester.scanners.base import BasePackageManager

logger = logging.getLogger(__name__)

MANIFEST_NAME = "package.json"
DEV_GROUP = "devDependencies"
PROD_GROUP = "dependencies"

# npm list exits with 1 when a peer dependency is unmet but still prints the tree
TOLERATED_LIST_STATUS = 1


def _license_from_node(node: dict[str, Any]) -> Optional[str]:
    """Return the license declared by a package node.

    Handles the ``"MIT"`` string form, the ``{"type": "MIT"}`` object form
    and the legacy ``"licenses": [{"type": ...}]`` list.
    """
    declared = node.get("license")
    if isinstance(declared, str) and declared.strip():
        return declared.strip()
    if isinstance(declared, dict) and declared.get("type"):
        return str(declared["type"])

    legacy = node.get("licenses")
    if isinstance(legacy, list):
        types = [
            str(item.get("type") if isinstance(item, dict) else item)
            for item in legacy
            if item
        ]
        if types:
            return " OR ".join(types)

    return None


def _author_from_node(node: dict[str, Any]) -> Optional[str]:
    """Return the author as a string."""
    author = node.get("author")
    if isinstance(author, dict):
        return author.get("name")
    return author or None


class NpmPackageManager(BasePackageManager):
    """Scanner for npm ``package.json`` projects."""

    def __init__(self, config: ScanConfig) -> None:
        super().__init__(config)
        self._metadata: dict[tuple[str, str], PackageMetadata] = {}
        self._npm_version: Optional[int] = None

    @property
    def name(self) -> str:
        return "npm"

    @property
    def package_management_command(self) -> list[str]:
        return ["npm"]

    def possible_manifest_paths(self) -> list[Path]:
        return [self.project_path / MANIFEST_NAME]

    def manifest_paths(self) -> list[Path]:
        return [path for path in self.possible_manifest_paths() if path.exists()]

    def parse_manifest(self, path: Path) -> list[RawDependency]:
        """List the installed tree next to ``path`` and flatten it.

        Raises:
            CommandError: If ``npm list`` fails with a status other than 1.
            ManifestError: If its output is not valid JSON.
        """
        command = self.list_command()
        result = run_command(
            command, cwd=path.parent, timeout=self.config.command_timeout
        )
        if not result.success and result.returncode != TOLERATED_LIST_STATUS:
            raise CommandError(
                result.command, result.returncode, result.stdout, result.stderr
            )
        if not result.success:
            logger.warning(
                "%s exited with 1 (unmet peer dependency), continuing",
                " ".join(command),
            )

        try:
            tree = json.loads(result.stdout)
        except json.JSONDecodeError as e:
            raise ManifestError(path, f"invalid npm list output: {e}") from e

        return self.flatten(tree)

    def flatten(self, tree: dict[str, Any]) -> list[RawDependency]:
        """Flatten an ``npm list`` tree depth-first, in declaration order.

        Each package is grouped by its top-level ancestor: "devDependencies"
        if that ancestor is a declared dev dependency, else "dependencies".
        Nodes without a version (missing or unmet) are skipped.
        """
        dev_names = set(tree.get(DEV_GROUP) or {})
        dependencies: list[RawDependency] = []

        for name, node in (tree.get("dependencies") or {}).items():
            group = DEV_GROUP if name in dev_names else PROD_GROUP
            if group in self.config.ignored_groups:
                continue
            self._walk(name, node, group, dependencies)

        return dependencies

    def _walk(
        self,
        key: str,
        node: dict[str, Any],
        group: str,
        out: list[RawDependency],
    ) -> None:
        """Append a node and its children to ``out``."""
        if not isinstance(node, dict):
            return

        name = node.get("name") or key
        version = node.get("version")
        if not version:
            logger.debug("Skipping %s without an installed version", name)
        else:
            install_path = Path(node["path"]) if node.get("path") else None
            dependency = RawDependency(
                name=name, version=version, group=group, install_path=install_path
            )
            description = node.get("description")
            self._metadata.setdefault(
                dependency.identity,
                PackageMetadata(
                    authors=_author_from_node(node),
                    homepage=node.get("homepage"),
                    description=description,
                    summary=description.splitlines()[0] if description else None,
                    license_type=_license_from_node(node),
                    license_source="manifest",
                ),
            )
            out.append(dependency)

        for child_key, child in (node.get("dependencies") or {}).items():
            self._walk(child_key, child, group, out)

    def read_metadata(self, dependency: RawDependency) -> Optional[PackageMetadata]:
        return self._metadata.get(dependency.identity)

    def npm_version(self) -> int:
        """Return the major version of the installed npm.

        Raises:
            CommandError: If ``npm -v`` fails.
        """
        if self._npm_version is None:
            command = [*self.package_management_command, "-v"]
            result = run_command(
                command, cwd=self.project_path, timeout=self.config.command_timeout
            )
            if not result.success:
                raise CommandError(
                    result.command, result.returncode, result.stdout, result.stderr
                )
            self._npm_version = int(result.stdout.strip().split(".")[0])
        return self._npm_version

    def production_flags(self) -> list[str]:
        """Return the flag that leaves out dev dependencies, if they are ignored."""
        if DEV_GROUP not in self.config.ignored_groups:
            return []
        # newer npm versions use --omit=dev instead of --production
        return ["--omit=dev"] if self.npm_version() >= 9 else ["--production"]

    def list_command(self) -> list[str]:
        """Return the ``npm list`` invocation for this project."""
        command = [
            *self.package_management_command,
            "list",
            "--json",
            "--long",
            "--legacy-peer-deps",
        ]
        if self.npm_version() >= 7:
            command.append("--all")
        command.extend(self.production_flags())
        if self.config.npm_options:
            command.extend(shlex.split(self.config.npm_options))
        return command

    def restore_commands(self) -> list[list[str]]:
        # --legacy-peer-deps works around peer conflicts with npm 7+
        return [
            [
                *self.package_management_command,
                "install",
                "--no-save",
                "--ignore-scripts",
                "--legacy-peer-deps",
                *self.production_flags(),
            ]
        ]
