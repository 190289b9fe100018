"""Test configuration for gradleforge."""

import tempfile
from pathlib import Path

import pytest

from gradleforge.core.config import GradleScriptConfig, ResolverConfig
from gradleforge.models.build import Declaration, VersionInfo

FLUTTER_APP_SCRIPT = '''plugins {
    id("com.android.application")
    id("kotlin-android")
    id("dev.flutter.flutter-gradle-plugin")
}

android {
    namespace = "com.example.michaelesp32"
    compileSdk = 35
    ndkVersion = "27.0.12077973"

    compileOptions {
        sourceCompatibility = JavaVersion.VERSION_11
        targetCompatibility = JavaVersion.VERSION_11
    }

    kotlinOptions {
        jvmTarget = JavaVersion.VERSION_11.toString()
    }

    defaultConfig {
        applicationId = "com.example.michaelesp32"
        minSdk = 21 // Explicitly set to ensure compatibility
        targetSdk = 35 // Matches compileSdk for modern APIs
        versionCode = flutter.versionCode
        versionName = flutter.versionName
    }

    buildTypes {
        release {
            signingConfig = signingConfigs.getByName("debug") // Retained for testing
        }
    }

    configurations {
        all {
            resolutionStrategy {
                force("androidx.core:core:1.9.0") // Ensures compatibility with lStar
            }
        }
    }
}

flutter {
    source = "../.."
}
'''


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests.

    Yields:
        Path: A Path object pointing to the temporary directory.
            The directory is automatically cleaned up after the test.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def flutter_app_script():
    """Return the app module build.gradle.kts of a Flutter Android wrapper."""
    return FLUTTER_APP_SCRIPT


@pytest.fixture
def declaration_data():
    """Declaration document equivalent to the Flutter wrapper script.

    Returns:
        dict: camelCase document as a JSON/YAML declaration file holds it.
    """
    return {
        "plugins": [
            "com.android.application",
            "kotlin-android",
            "dev.flutter.flutter-gradle-plugin",
        ],
        "applicationId": "com.example.michaelesp32",
        "namespace": "com.example.michaelesp32",
        "compileSdkVersion": 35,
        "targetSdkVersion": 35,
        "minSdkVersion": 21,
        "nativeToolchainVersion": "27.0.12077973",
        "languageCompatibility": {"source": "11", "target": "11"},
        "signingConfigs": ["debug"],
        "signingAssignment": {"release": "debug"},
        "dependencyOverrides": {"androidx.core:core": "1.9.0"},
        "sourceRoot": "../..",
    }


@pytest.fixture
def make_declaration(declaration_data):
    """Build a Declaration from the base document with some keys replaced.

    Returns:
        Callable: ``make_declaration(minSdkVersion=35)`` style factory.
    """

    def _make(**changes):
        return Declaration.model_validate({**declaration_data, **changes})

    return _make


@pytest.fixture
def declaration(make_declaration):
    """Create the base declaration."""
    return make_declaration()


@pytest.fixture
def version_info():
    """Release metadata held constant across a test."""
    return VersionInfo(version_code=7, version_name="1.4.0")


@pytest.fixture
def resolver_config():
    """Resolver rules independent of the environment."""
    return ResolverConfig()


@pytest.fixture
def gradle_config():
    """Gradle script reader settings independent of the environment."""
    return GradleScriptConfig()
