from pathlib import Path

import pytest
from typer.testing import CliRunner

from license_harvester.cli import app
from license_harvester.exceptions import ManifestError
from license_harvester.models import CanonicalPackage, PackageMetadata, ScanResult
from license_harvester.scanners import NpmPackageManager

runner = CliRunner()


@pytest.fixture
def scan_result() -> ScanResult:
    """Return a scan result with one resolved and one unknown package."""
    return ScanResult(
        packages=[
            CanonicalPackage(
                name="test-package",
                version="1.0.0",
                spec_licenses={"MIT"},
                groups={"MyApp"},
                package_manager="NuGet",
                metadata=PackageMetadata(license_type="MIT", license_source="expression"),
            ),
            CanonicalPackage(
                name="mystery",
                version="0.1.0",
                groups={"MyApp"},
                package_manager="NuGet",
            ),
        ],
        warnings=["Invalid manifest Broken/packages.config: malformed XML"],
    )


@pytest.fixture
def mock_harvest(mocker, scan_result: ScanResult):
    """Mock the harvest coroutine used by the CLI."""
    return mocker.patch("license_harvester.cli.harvest", return_value=scan_result)


def test_report_command(tmp_path, mock_harvest):
    """Test the report command with mocked data."""
    output_file = tmp_path / "licenses.md"

    result = runner.invoke(
        app,
        [
            "report",
            "--project-path",
            str(tmp_path),
            "--packages-root",
            str(tmp_path / "pkgs"),
            "--output",
            str(output_file),
        ],
    )

    assert result.exit_code == 0
    assert "Generated:" in result.stdout
    assert "1/2" in result.stdout
    assert output_file.exists()

    content = output_file.read_text()
    assert "test-package" in content
    assert "MIT" in content
    assert "unknown" in content


def test_list_command(tmp_path, mock_harvest):
    """Test that list prints packages and warnings."""
    result = runner.invoke(app, ["list", "--project-path", str(tmp_path)])

    assert result.exit_code == 0
    assert "test-package" in result.stdout
    assert "mystery" in result.stdout
    assert "malformed" in result.output


def test_list_passes_options_to_config(tmp_path, mock_harvest):
    """Test that CLI options end up in the scan configuration."""
    result = runner.invoke(
        app,
        [
            "list",
            "--project-path",
            str(tmp_path),
            "--packages-root",
            str(tmp_path / "pkgs"),
            "--ignore-group",
            "devDependencies",
            "--max-redirects",
            "3",
            "--skip-malformed",
            "--force-fetch",
        ],
    )

    assert result.exit_code == 0
    config = mock_harvest.call_args.args[0]
    assert config.project_path == tmp_path.resolve()
    assert config.packages_root == tmp_path / "pkgs"
    assert config.ignored_groups == frozenset({"devDependencies"})
    assert config.max_redirects == 3
    assert config.skip_malformed
    assert config.force_fetch


def test_packages_root_from_environment(tmp_path, mock_harvest):
    """Test that NUGET_PACKAGES sets the packages root."""
    result = runner.invoke(
        app,
        ["list", "--project-path", str(tmp_path)],
        env={"NUGET_PACKAGES": str(tmp_path / "env-pkgs")},
    )

    assert result.exit_code == 0
    assert mock_harvest.call_args.args[0].packages_root == tmp_path / "env-pkgs"


def test_list_no_packages(tmp_path, mocker):
    """Test the message for a project without dependencies."""
    mocker.patch("license_harvester.cli.harvest", return_value=ScanResult())

    result = runner.invoke(app, ["list", "--project-path", str(tmp_path)])

    assert result.exit_code == 0
    assert "No packages found" in result.stdout


def test_fatal_error_exits_with_1(tmp_path, mocker):
    """Test that a malformed manifest aborts with exit code 1."""
    mocker.patch(
        "license_harvester.cli.harvest",
        side_effect=ManifestError(Path("packages.config"), "malformed XML"),
    )

    result = runner.invoke(app, ["list", "--project-path", str(tmp_path)])

    assert result.exit_code == 1
    assert "malformed" in result.output


def test_detect_command(tmp_path):
    """Test that detect lists the package managers in use."""
    (tmp_path / "package.json").write_text("{}")

    result = runner.invoke(app, ["detect", "--project-path", str(tmp_path)])

    assert result.exit_code == 0
    assert "npm:" in result.stdout


def test_detect_nothing(tmp_path):
    """Test detect on a project without manifests."""
    result = runner.invoke(app, ["detect", "--project-path", str(tmp_path)])

    assert result.exit_code == 0
    assert "No supported package manager detected" in result.stdout


def test_list_selected_package_manager(tmp_path, mock_harvest):
    """Test that --package-manager restricts the scan to the named scanner."""
    result = runner.invoke(
        app, ["list", "--project-path", str(tmp_path), "--package-manager", "NPM"]
    )

    assert result.exit_code == 0
    managers = mock_harvest.call_args.args[1]
    assert [type(m) for m in managers] == [NpmPackageManager]


def test_list_detects_without_package_manager(tmp_path, mock_harvest):
    """Test that every detected package manager is used by default."""
    result = runner.invoke(app, ["list", "--project-path", str(tmp_path)])

    assert result.exit_code == 0
    assert mock_harvest.call_args.args[1] is None


def test_unknown_package_manager(tmp_path, mock_harvest):
    """Test that an unsupported package manager name exits with code 1."""
    result = runner.invoke(
        app, ["report", "--project-path", str(tmp_path), "-m", "pip"]
    )

    assert result.exit_code == 1
    assert "No scanner available" in result.output
    mock_harvest.assert_not_called()
