"""Scanner for .NET ``project.assets.json`` files.

``dotnet restore`` writes one assets file per project (under ``obj/``).
It lists every resolved library and the package folders it was restored
into::

    {
        "libraries": {
            "Foo/1.0.0": {
                "type": "package",
                "path": "foo/1.0.0",
                "files": ["foo.1.0.0.nuspec", "lib/net6.0/Foo.dll"]
            },
            "MyLib/1.0.0": {"type": "project", "path": "../MyLib/MyLib.csproj"}
        },
        "packageFolders": {"/root/.nuget/packages/": {}},
        "project": {"restore": {"projectName": "MyApp"}}
    }
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional

from license_harvester.config import ScanConfig
from license_harvester.exceptions import ManifestError
from license_harvester.models import PackageMetadata, RawDependency
from license_harvester.resolvers.nuspec import SPEC_EXTENSION, SpecResolver
from license_harvester.scanners.base import BasePackageManager, installed_package_dir

logger = logging.getLogger(__name__)

MANIFEST_NAME = "project.assets.json"


class DotnetPackageManager(BasePackageManager):
    """Scanner for ``project.assets.json`` lock files.

    Libraries of type "project" are sibling projects of the same solution,
    not packages, and are left out.
    """

    def __init__(
        self, config: ScanConfig, spec_resolver: Optional[SpecResolver] = None
    ) -> None:
        super().__init__(config)
        self.spec_resolver = spec_resolver or SpecResolver()

    @property
    def name(self) -> str:
        return "dotnet"

    @property
    def package_management_command(self) -> list[str]:
        return ["dotnet"]

    def possible_manifest_paths(self) -> list[Path]:
        return sorted(self.project_path.glob("*.csproj"))

    def manifest_paths(self) -> list[Path]:
        return sorted(self.project_path.rglob(MANIFEST_NAME))

    def parse_manifest(self, path: Path) -> list[RawDependency]:
        """Parse a ``project.assets.json`` file.

        Args:
            path: The assets file.

        Returns:
            One RawDependency per non-project library, in file order.

        Raises:
            FileNotFoundError: If the file does not exist.
            ManifestError: If the JSON is invalid or lacks ``libraries`` or
                ``packageFolders``.
        """
        try:
            with open(path, "r", encoding="utf-8-sig") as f:
                manifest = json.load(f)
        except json.JSONDecodeError as e:
            raise ManifestError(path, f"invalid JSON: {e}") from e

        libraries = manifest.get("libraries") if isinstance(manifest, dict) else None
        package_folders = (
            manifest.get("packageFolders") if isinstance(manifest, dict) else None
        )
        if not isinstance(libraries, dict):
            raise ManifestError(path, "missing 'libraries' object")
        if not isinstance(package_folders, dict):
            raise ManifestError(path, "missing 'packageFolders' object")

        group = self._group(manifest, path)
        dependencies = []

        for key, library in libraries.items():
            if not isinstance(library, dict):
                raise ManifestError(path, f"library '{key}' is not an object")
            if library.get("type") == "project":
                continue

            name, _, version = key.partition("/")
            spec_paths = self.possible_spec_paths(key, library, package_folders)
            dependencies.append(
                RawDependency(
                    name=name,
                    version=version,
                    group=group,
                    candidate_spec_paths=spec_paths,
                    install_path=self._install_dir(name, version, spec_paths),
                )
            )

        return dependencies

    def possible_spec_paths(
        self, key: str, library: dict[str, Any], package_folders: dict[str, Any]
    ) -> tuple[Path, ...]:
        """Return every package folder joined with the library's spec file.

        Args:
            key: The ``"name/version"`` library key.
            library: The library entry.
            package_folders: The ``packageFolders`` object.

        Returns:
            Candidate spec paths, empty when the library ships no nuspec.
        """
        spec_filename = next(
            (f for f in library.get("files", []) if f.endswith(SPEC_EXTENSION)),
            None,
        )
        if spec_filename is None:
            return ()

        library_path = library.get("path") or key.lower()
        return tuple(
            Path(root) / library_path / spec_filename for root in package_folders
        )

    def read_metadata(self, dependency: RawDependency) -> Optional[PackageMetadata]:
        return self.spec_resolver.read_first(dependency.candidate_spec_paths)

    def restore_commands(self) -> list[list[str]]:
        return [[*self.package_management_command, "restore"]]

    def _install_dir(
        self, name: str, version: str, spec_paths: tuple[Path, ...]
    ) -> Optional[Path]:
        """Return the directory of the first existing nuspec, else the packages root entry."""
        for path in spec_paths:
            if path.exists():
                return path.parent
        return installed_package_dir(self.config.packages_root, name, version)

    def _group(self, manifest: dict[str, Any], path: Path) -> str:
        """Return the project that owns an assets file."""
        project = manifest.get("project") or {}
        project_name = (project.get("restore") or {}).get("projectName")
        if project_name:
            return project_name

        directory = path.parent
        if directory.name == "obj":
            directory = directory.parent
        return directory.name
