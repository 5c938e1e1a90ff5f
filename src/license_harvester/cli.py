"""Command-line interface for license_harvester.

Provides the main entry point and subcommands for listing dependency
licenses, writing attribution documents and inspecting which package
managers a project uses.
"""

import asyncio
import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from license_harvester.config import (
    DEFAULT_FETCH_TIMEOUT,
    DEFAULT_MAX_REDIRECTS,
    ScanConfig,
    default_packages_root,
)
from license_harvester.exceptions import LicenseHarvesterError
from license_harvester.harvest import harvest
from license_harvester.models import ScanResult
from license_harvester.reporters import MarkdownReporter
from license_harvester.scanners import (
    BasePackageManager,
    detect_package_managers,
    get_package_manager,
)

app = typer.Typer(
    name="license-harvester",
    help="Discover .NET and npm dependencies and resolve their licenses.",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)

# Configure logging
logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s: %(message)s",
)
logger = logging.getLogger("license_harvester")

ProjectPathOption = Annotated[
    Path,
    typer.Option(
        "--project-path",
        "-p",
        help="Project root to scan",
        exists=True,
        file_okay=False,
        resolve_path=True,
    ),
]
PackagesRootOption = Annotated[
    Optional[Path],
    typer.Option(
        "--packages-root",
        envvar="NUGET_PACKAGES",
        help="Installed NuGet packages folder (default: ~/.nuget/packages)",
    ),
]
PrepareOption = Annotated[
    bool,
    typer.Option("--prepare", help="Restore dependencies before scanning"),
]
PrepareNoFailOption = Annotated[
    bool,
    typer.Option(
        "--prepare-no-fail",
        help="Continue scanning when the restore command fails",
    ),
]
IgnoreGroupOption = Annotated[
    Optional[list[str]],
    typer.Option(
        "--ignore-group",
        help="Dependency group to leave out (repeatable, e.g. devDependencies)",
    ),
]
NpmOptionsOption = Annotated[
    Optional[str],
    typer.Option("--npm-options", help="Extra arguments for 'npm list'"),
]
MaxRedirectsOption = Annotated[
    int,
    typer.Option("--max-redirects", min=0, help="Redirect hops per license URL"),
]
TimeoutOption = Annotated[
    float,
    typer.Option("--timeout", min=0.1, help="Seconds allowed per license download"),
]
SkipMalformedOption = Annotated[
    bool,
    typer.Option(
        "--skip-malformed",
        help="Skip unparsable manifests with a warning instead of aborting",
    ),
]
ForceFetchOption = Annotated[
    bool,
    typer.Option("--force-fetch", help="Re-download cached license files"),
]
PackageManagerOption = Annotated[
    Optional[list[str]],
    typer.Option(
        "--package-manager",
        "-m",
        help="Scan only this package manager: NuGet, dotnet or npm (repeatable)",
    ),
]
VerboseOption = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Enable verbose output"),
]


def _setup_logging(verbose: bool) -> None:
    """Configure logging level based on verbosity flag."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.getLogger("license_harvester").setLevel(level)


def _build_config(
    project_path: Path,
    packages_root: Optional[Path],
    prepare: bool = False,
    prepare_no_fail: bool = False,
    ignore_group: Optional[list[str]] = None,
    npm_options: Optional[str] = None,
    max_redirects: int = DEFAULT_MAX_REDIRECTS,
    timeout: float = DEFAULT_FETCH_TIMEOUT,
    skip_malformed: bool = False,
    force_fetch: bool = False,
) -> ScanConfig:
    """Turn CLI options into a ScanConfig, filling in platform defaults."""
    return ScanConfig(
        project_path=project_path,
        packages_root=packages_root or default_packages_root(),
        archive_root=Path.cwd(),
        prepare=prepare,
        prepare_no_fail=prepare_no_fail,
        ignored_groups=frozenset(ignore_group or ()),
        npm_options=npm_options,
        max_redirects=max_redirects,
        fetch_timeout=timeout,
        skip_malformed=skip_malformed,
        force_fetch=force_fetch,
    )


def _select_managers(
    config: ScanConfig, names: Optional[list[str]]
) -> Optional[list[BasePackageManager]]:
    """Return the scanners named on the command line, or None to detect them."""
    if not names:
        return None
    try:
        return [get_package_manager(name, config) for name in names]
    except ValueError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)


def _run_harvest(
    config: ScanConfig, managers: Optional[list[BasePackageManager]] = None
) -> ScanResult:
    """Run a scan behind a spinner, exiting with code 1 on fatal errors."""
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Scanning and resolving licenses...", total=None)
        try:
            result = asyncio.run(harvest(config, managers))
        except FileNotFoundError as e:
            err_console.print(f"[red]Error:[/red] {e}")
            raise typer.Exit(code=1)
        except LicenseHarvesterError as e:
            err_console.print(f"[red]Error scanning {config.project_path}:[/red] {e}")
            raise typer.Exit(code=1)
        progress.update(task, completed=True)

    for warning in result.warnings:
        err_console.print(f"[yellow]Warning:[/yellow] {warning}")

    return result


@app.command("list")
def list_packages(
    project_path: ProjectPathOption = Path("."),
    packages_root: PackagesRootOption = None,
    prepare: PrepareOption = False,
    prepare_no_fail: PrepareNoFailOption = False,
    ignore_group: IgnoreGroupOption = None,
    npm_options: NpmOptionsOption = None,
    max_redirects: MaxRedirectsOption = DEFAULT_MAX_REDIRECTS,
    timeout: TimeoutOption = DEFAULT_FETCH_TIMEOUT,
    skip_malformed: SkipMalformedOption = False,
    force_fetch: ForceFetchOption = False,
    package_manager: PackageManagerOption = None,
    verbose: VerboseOption = False,
) -> None:
    """List dependencies with their resolved licenses."""
    _setup_logging(verbose)
    config = _build_config(
        project_path,
        packages_root,
        prepare,
        prepare_no_fail,
        ignore_group,
        npm_options,
        max_redirects,
        timeout,
        skip_malformed,
        force_fetch,
    )
    result = _run_harvest(config, _select_managers(config, package_manager))

    if not result.packages:
        console.print("[yellow]No packages found[/yellow]")
        raise typer.Exit(code=0)

    table = Table(title=f"{len(result.packages)} packages")
    table.add_column("Package")
    table.add_column("Version")
    table.add_column("Licenses")
    table.add_column("Groups")
    table.add_column("Install path")

    for package in result.packages:
        table.add_row(
            package.name,
            package.version,
            package.license_display,
            ", ".join(sorted(package.groups)),
            str(package.install_path) if package.install_path else "not found",
        )

    console.print(table)


@app.command()
def report(
    project_path: ProjectPathOption = Path("."),
    output: Annotated[
        Path,
        typer.Option("--output", "-o", help="Output file path"),
    ] = Path("licenses.md"),
    template: Annotated[
        Optional[Path],
        typer.Option(
            "--template",
            "-t",
            help="Custom Jinja2 template file",
            exists=True,
            readable=True,
        ),
    ] = None,
    packages_root: PackagesRootOption = None,
    prepare: PrepareOption = False,
    prepare_no_fail: PrepareNoFailOption = False,
    ignore_group: IgnoreGroupOption = None,
    npm_options: NpmOptionsOption = None,
    max_redirects: MaxRedirectsOption = DEFAULT_MAX_REDIRECTS,
    timeout: TimeoutOption = DEFAULT_FETCH_TIMEOUT,
    skip_malformed: SkipMalformedOption = False,
    force_fetch: ForceFetchOption = False,
    package_manager: PackageManagerOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Generate a Markdown license attribution document."""
    _setup_logging(verbose)
    config = _build_config(
        project_path,
        packages_root,
        prepare,
        prepare_no_fail,
        ignore_group,
        npm_options,
        max_redirects,
        timeout,
        skip_malformed,
        force_fetch,
    )
    result = _run_harvest(config, _select_managers(config, package_manager))

    if not result.packages:
        console.print("[yellow]No packages found[/yellow]")
        raise typer.Exit(code=0)

    resolved_count = sum(1 for p in result.packages if p.spec_licenses)
    console.print(
        f"Resolved licenses for [bold]{resolved_count}[/bold]/{len(result.packages)} packages"
    )

    reporter = MarkdownReporter(template_path=template)
    try:
        reporter.write(result.packages, output)
    except OSError as e:
        err_console.print(f"[red]Error writing output:[/red] {e}")
        raise typer.Exit(code=1)

    console.print(f"[green]Generated:[/green] {output}")


@app.command()
def detect(
    project_path: ProjectPathOption = Path("."),
    packages_root: PackagesRootOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Show the package managers a project uses and whether they are installed."""
    _setup_logging(verbose)
    config = _build_config(project_path, packages_root)
    managers = detect_package_managers(config)

    if not managers:
        console.print("[yellow]No supported package manager detected[/yellow]")
        raise typer.Exit(code=0)

    for manager in managers:
        status = (
            "[green]installed[/green]"
            if manager.installed()
            else "[red]not installed[/red]"
        )
        console.print(f"{manager.name}: {status}")


if __name__ == "__main__":
    app()
