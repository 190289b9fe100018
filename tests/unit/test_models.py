"""Unit tests for core models."""

import json
from pathlib import Path

import pytest

from gradleforge.models.build import (
    BuildConfig,
    Declaration,
    LanguageCompatibility,
    normalize_level,
)
from gradleforge.models.gradle import DependencyOverride, GradlePlugin
from gradleforge.services.resolver import ConfigResolver


class TestNormalizeLevel:
    """Tests for compatibility level normalization."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("11", "11"),
            (11, "11"),
            ("VERSION_11", "11"),
            ("JavaVersion.VERSION_17", "17"),
            ("JavaVersion.VERSION_11.toString()", "11"),
            ("1.8", "1.8"),
            ("8", "1.8"),
            ("VERSION_1_8", "1.8"),
            ("1.11", "11"),
            (" 21 ", "21"),
            ("11.0", "11"),
            ("11.0.0", "11"),
            ("1.8.0", "1.8"),
        ],
    )
    def test_known_spellings(self, raw, expected):
        assert normalize_level(raw) == expected

    @pytest.mark.parametrize("raw", ["", "eleven", "11.1", "11.0.1", "VERSION_", "0", "1.x", None])
    def test_unrecognized(self, raw):
        assert normalize_level(raw) is None


class TestDeclaration:
    """Tests for the raw declaration model."""

    def test_camel_case_aliases(self, declaration_data):
        """Test declaration parsing from a camelCase document.

        Verifies that document keys map onto the snake_case fields and the
        source root becomes a Path.
        """
        declaration = Declaration.model_validate(declaration_data)

        assert declaration.application_id == "com.example.michaelesp32"
        assert declaration.min_sdk_version == 21
        assert declaration.source_root == Path("../..")
        assert declaration.language_compatibility.source == "11"

    def test_unknown_field_rejected(self, declaration_data):
        with pytest.raises(Exception):
            Declaration.model_validate({**declaration_data, "minSdk": 21})

    def test_empty_toolchain_version_rejected(self, declaration_data):
        with pytest.raises(Exception):
            Declaration.model_validate({**declaration_data, "nativeToolchainVersion": ""})

    def test_signing_configs_accept_set(self, declaration_data):
        declaration = Declaration.model_validate({**declaration_data, "signingConfigs": {"debug"}})

        assert declaration.signing_configs == ["debug"]

    def test_numeric_levels_coerced(self):
        compatibility = LanguageCompatibility.model_validate({"source": 11, "target": 1.8})

        assert compatibility.source == "11"
        assert compatibility.target == "1.8"


class TestBuildConfig:
    """Tests for the resolved configuration model."""

    @pytest.fixture
    def build_config(self, declaration, version_info, resolver_config):
        return ConfigResolver(resolver_config).resolve(declaration, version_info)

    def test_json_uses_camel_case(self, build_config):
        data = json.loads(build_config.to_json())

        assert data["applicationId"] == "com.example.michaelesp32"
        assert data["compileSdkVersion"] == 35
        assert data["minSdkVersion"] == 21
        assert data["versionCode"] == 7
        assert data["languageCompatibility"] == {"source": "11", "target": "11", "jvmTarget": None}
        assert data["dependencyOverrides"] == {"androidx.core:core": "1.9.0"}
        assert data["sourceRoot"] == "../.."

    def test_json_round_trip(self, build_config):
        """Test that serializing then parsing gives an equal value."""
        assert BuildConfig.from_json(build_config.to_json()) == build_config

    def test_compact_json_round_trip(self, build_config):
        assert BuildConfig.from_json(build_config.to_json(indent=None)) == build_config


class TestGradleModels:
    """Tests for Gradle value types."""

    def test_plugin_declaration(self):
        assert GradlePlugin(plugin_id="kotlin-android").declaration == 'id("kotlin-android")'

    def test_kotlin_plugin_uses_accessor(self):
        plugin = GradlePlugin.from_kotlin_shorthand("android")

        assert plugin.plugin_id == "org.jetbrains.kotlin.android"
        assert plugin.declaration == 'kotlin("android")'

    def test_override_from_notation(self):
        override = DependencyOverride.from_notation("androidx.core:core:1.9.0")

        assert override.coordinate == "androidx.core:core"
        assert override.version == "1.9.0"
        assert override.declaration == 'force("androidx.core:core:1.9.0")'

    def test_override_from_coordinate(self):
        override = DependencyOverride.from_coordinate("androidx.core:core", "1.9.0")

        assert override.notation == "androidx.core:core:1.9.0"

    @pytest.mark.parametrize("notation", ["androidx.core:core", "a:b:c:d"])
    def test_override_bad_notation(self, notation):
        with pytest.raises(ValueError):
            DependencyOverride.from_notation(notation)
