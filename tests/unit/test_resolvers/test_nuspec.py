"""Tests for the nuspec resolver."""

from pathlib import Path

import pytest

from license_harvester.exceptions import SpecParseError
from license_harvester.resolvers.nuspec import SpecResolver


@pytest.fixture
def resolver() -> SpecResolver:
    """Return a SpecResolver with the default locator."""
    return SpecResolver()


class TestResolve:
    """Test suite for SpecResolver.resolve."""

    def test_license_expression(self, resolver: SpecResolver, nuspec_factory) -> None:
        """Test that a license expression is taken verbatim."""
        content = nuspec_factory(
            license_element='<license type="expression">MIT</license>'
        )

        metadata = resolver.resolve(content, Path("/pkgs/foo/1.0.0/foo.nuspec"))

        assert metadata.license_type == "MIT"
        assert metadata.license_source == "expression"
        assert metadata.authors == "Jane Doe"
        assert metadata.homepage == "https://example.com/foo"
        assert metadata.summary == "Foo does things."
        assert metadata.description == "Foo does things.\nMore details here."

    def test_compound_expression_verbatim(
        self, resolver: SpecResolver, nuspec_factory
    ) -> None:
        """Test that compound expressions are not rewritten."""
        content = nuspec_factory(
            license_element='<license type="expression">MIT OR Apache-2.0</license>'
        )

        metadata = resolver.resolve(content, Path("foo.nuspec"))

        assert metadata.license_type == "MIT OR Apache-2.0"

    def test_license_url_only(self, resolver: SpecResolver, nuspec_factory) -> None:
        """Test that a licenseUrl is kept for the remote fallback."""
        content = nuspec_factory(license_url="https://example.com/LICENSE")

        metadata = resolver.resolve(content, Path("foo.nuspec"))

        assert metadata.license_type is None
        assert metadata.license_url == "https://example.com/LICENSE"

    def test_expression_and_url(self, resolver: SpecResolver, nuspec_factory) -> None:
        """Test that both fields are reported when both are present."""
        content = nuspec_factory(
            license_element='<license type="expression">Apache-2.0</license>',
            license_url="https://licenses.nuget.org/Apache-2.0",
        )

        metadata = resolver.resolve(content, Path("foo.nuspec"))

        assert metadata.license_type == "Apache-2.0"
        assert metadata.license_url == "https://licenses.nuget.org/Apache-2.0"

    def test_license_file(
        self, resolver: SpecResolver, nuspec_factory, tmp_path: Path, mit_text: str
    ) -> None:
        """Test that a referenced license file is classified."""
        (tmp_path / "docs").mkdir()
        (tmp_path / "docs" / "LICENSE.txt").write_text(mit_text)
        content = nuspec_factory(
            license_element='<license type="file">docs/LICENSE.txt</license>'
        )

        metadata = resolver.resolve(content, tmp_path / "foo.nuspec")

        assert metadata.license_type == "MIT"
        assert metadata.license_source == "file"

    def test_license_file_missing(
        self, resolver: SpecResolver, nuspec_factory, tmp_path: Path
    ) -> None:
        """Test that a dangling license file reference leaves the type unset."""
        content = nuspec_factory(
            license_element='<license type="file">LICENSE.txt</license>'
        )

        metadata = resolver.resolve(content, tmp_path / "foo.nuspec")

        assert metadata.license_type is None
        assert metadata.license_source is None

    def test_license_file_in_archive(
        self,
        resolver: SpecResolver,
        nuspec_factory,
        nupkg_factory,
        tmp_path: Path,
        apache_text: str,
    ) -> None:
        """Test that a license file is read from inside a package archive."""
        content = nuspec_factory(
            license_element='<license type="file">LICENSE.txt</license>'
        )
        archive = nupkg_factory(
            tmp_path / "Foo.1.0.0.nupkg", content, {"LICENSE.txt": apache_text}
        )

        metadata = resolver.resolve(content, archive)

        assert metadata.license_type == "Apache-2.0"
        assert metadata.license_source == "file"

    def test_no_namespace(self, resolver: SpecResolver) -> None:
        """Test that spec documents without a namespace are understood."""
        content = (
            "<package><metadata><id>Foo</id><version>1.0.0</version>"
            "<authors>Someone</authors>"
            '<license type="expression">ISC</license>'
            "</metadata></package>"
        )

        metadata = resolver.resolve(content, Path("foo.nuspec"))

        assert metadata.license_type == "ISC"
        assert metadata.authors == "Someone"

    def test_malformed_xml(self, resolver: SpecResolver) -> None:
        """Test that malformed XML raises SpecParseError."""
        with pytest.raises(SpecParseError, match="Invalid nuspec XML"):
            resolver.resolve("<package><metadata>", Path("foo.nuspec"))

    def test_missing_metadata(self, resolver: SpecResolver) -> None:
        """Test that a document without metadata raises SpecParseError."""
        with pytest.raises(SpecParseError, match="No <metadata>"):
            resolver.resolve("<package></package>", Path("foo.nuspec"))


class TestReadFirst:
    """Test suite for reading candidate spec paths."""

    def test_skips_missing_candidates(
        self, resolver: SpecResolver, nuspec_factory, tmp_path: Path
    ) -> None:
        """Test that the first existing candidate wins."""
        spec = tmp_path / "foo.nuspec"
        spec.write_text(
            nuspec_factory(license_element='<license type="expression">MIT</license>')
        )

        metadata = resolver.read_first([tmp_path / "missing.nuspec", spec])

        assert metadata is not None
        assert metadata.license_type == "MIT"

    def test_skips_malformed_candidates(
        self, resolver: SpecResolver, nuspec_factory, tmp_path: Path, caplog
    ) -> None:
        """Test that an unparsable candidate is skipped with a warning."""
        broken = tmp_path / "broken.nuspec"
        broken.write_text("<package>")
        good = tmp_path / "good.nuspec"
        good.write_text(
            nuspec_factory(license_element='<license type="expression">MIT</license>')
        )

        metadata = resolver.read_first([broken, good])

        assert metadata is not None
        assert metadata.license_type == "MIT"
        assert "Invalid nuspec XML" in caplog.text

    def test_skips_unreadable_candidates(
        self, resolver: SpecResolver, nuspec_factory, tmp_path: Path, mocker, caplog
    ) -> None:
        """Test that a candidate that cannot be read is skipped with a warning."""
        denied = tmp_path / "denied.nuspec"
        denied.write_text(nuspec_factory())
        good = tmp_path / "good.nuspec"
        good.write_text(
            nuspec_factory(license_element='<license type="expression">MIT</license>')
        )
        read_bytes = Path.read_bytes

        def fake_read_bytes(path: Path) -> bytes:
            if path == denied:
                raise PermissionError(13, "Permission denied", str(path))
            return read_bytes(path)

        mocker.patch.object(Path, "read_bytes", autospec=True, side_effect=fake_read_bytes)

        metadata = resolver.read_first([denied, good])

        assert metadata is not None
        assert metadata.license_type == "MIT"
        assert "Permission denied" in caplog.text

    def test_reads_archive(
        self, resolver: SpecResolver, nuspec_factory, nupkg_factory, tmp_path: Path
    ) -> None:
        """Test that specs are read from .nupkg archives."""
        archive = nupkg_factory(
            tmp_path / "Foo.1.0.0.nupkg",
            nuspec_factory(
                license_element='<license type="expression">BSD-2-Clause</license>'
            ),
        )

        metadata = resolver.read_first([archive])

        assert metadata is not None
        assert metadata.license_type == "BSD-2-Clause"

    def test_invalid_archive(self, resolver: SpecResolver, tmp_path: Path) -> None:
        """Test that a corrupt archive is skipped."""
        archive = tmp_path / "Foo.1.0.0.nupkg"
        archive.write_bytes(b"not a zip file")

        assert resolver.read_first([archive]) is None

    def test_no_candidates(self, resolver: SpecResolver) -> None:
        """Test that no candidates yield no metadata."""
        assert resolver.read_first([]) is None
