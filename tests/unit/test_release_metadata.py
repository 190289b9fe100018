"""Unit tests for the release metadata provider."""

import pytest

from gradleforge.core.exceptions import DeclarationError
from gradleforge.services.release_metadata import ReleaseMetadataProvider, read_properties


@pytest.fixture
def flutter_project(temp_dir):
    """Create a Flutter project layout with pubspec.yaml and local.properties.

    Returns:
        Path: The android/app directory.
    """
    app_dir = temp_dir / "android" / "app"
    app_dir.mkdir(parents=True)
    (temp_dir / "pubspec.yaml").write_text("name: michaelesp32\nversion: 1.2.3+45\n")
    (temp_dir / "android" / "local.properties").write_text(
        "sdk.dir=/opt/android-sdk\n"
        "flutter.sdk=/opt/flutter\n"
        "flutter.versionName=2.0.0\n"
        "flutter.versionCode=60\n"
    )
    return app_dir


class TestReadProperties:
    """Tests for .properties parsing."""

    def test_separators_and_comments(self, temp_dir):
        path = temp_dir / "local.properties"
        path.write_text(
            "# written by Android Studio\n"
            "! legacy comment\n"
            "sdk.dir=C\\:\\\\Android\\\\Sdk\n"
            "flutter.versionCode: 12\n"
            "flutter.buildMode release\n"
        )

        properties = read_properties(path)

        assert properties["sdk.dir"] == "C:\\Android\\Sdk"
        assert properties["flutter.versionCode"] == "12"
        assert properties["flutter.buildMode"] == "release"
        assert len(properties) == 3

    def test_missing_file(self, temp_dir):
        with pytest.raises(DeclarationError):
            read_properties(temp_dir / "local.properties")


class TestReleaseMetadataProvider:
    """Tests for versionCode/versionName lookup order."""

    def test_pubspec_version(self, temp_dir):
        """Test splitting ``version: <name>+<code>``."""
        pubspec = temp_dir / "pubspec.yaml"
        pubspec.write_text("name: app\nversion: 1.2.3+45\n")

        info = ReleaseMetadataProvider(pubspec=pubspec).load()

        assert info.version_name == "1.2.3"
        assert info.version_code == 45

    def test_pubspec_without_build_number(self, temp_dir):
        pubspec = temp_dir / "pubspec.yaml"
        pubspec.write_text("version: 3.1.0\n")

        info = ReleaseMetadataProvider(pubspec=pubspec).load()

        assert info.version_name == "3.1.0"
        assert info.version_code == 1

    def test_local_properties_win_over_pubspec(self, flutter_project):
        provider = ReleaseMetadataProvider.discover(flutter_project, flutter_project / ".." / "..")

        info = provider.load()

        assert info.version_code == 60
        assert info.version_name == "2.0.0"

    def test_discover_relative_source_root(self, flutter_project):
        from pathlib import Path

        provider = ReleaseMetadataProvider.discover(flutter_project, Path("../.."))

        assert provider.pubspec is not None
        assert provider.pubspec.name == "pubspec.yaml"
        assert provider.local_properties is not None

    def test_explicit_values_win(self, flutter_project):
        provider = ReleaseMetadataProvider.discover(flutter_project, flutter_project / ".." / "..")

        info = provider.load(version_code=99, version_name="9.9.9")

        assert info.version_code == 99
        assert info.version_name == "9.9.9"

    def test_partial_explicit_value(self, flutter_project):
        provider = ReleaseMetadataProvider.discover(flutter_project, flutter_project / ".." / "..")

        info = provider.load(version_name="3.0.0-rc1")

        assert info.version_code == 60
        assert info.version_name == "3.0.0-rc1"

    def test_defaults_without_files(self):
        info = ReleaseMetadataProvider().load()

        assert info.version_code == 1
        assert info.version_name == "1.0"

    def test_non_integer_version_code(self, temp_dir):
        pubspec = temp_dir / "pubspec.yaml"
        pubspec.write_text("version: 1.0.0+beta\n")

        with pytest.raises(DeclarationError) as exc_info:
            ReleaseMetadataProvider(pubspec=pubspec).load()

        assert exc_info.value.field_name == "versionCode"

    def test_malformed_pubspec(self, temp_dir):
        pubspec = temp_dir / "pubspec.yaml"
        pubspec.write_text("version: [1, 2\n")

        with pytest.raises(DeclarationError):
            ReleaseMetadataProvider(pubspec=pubspec).load()
