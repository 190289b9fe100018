"""Unit tests for declaration loading."""

import json

import pytest
import yaml

from gradleforge.core.exceptions import DeclarationError
from gradleforge.services.declaration import dump_declaration, load_declaration, parse_declaration


class TestLoadDeclaration:
    """Tests for reading declaration files."""

    def test_load_json(self, temp_dir, declaration_data, declaration):
        path = temp_dir / "declaration.json"
        path.write_text(json.dumps(declaration_data))

        assert load_declaration(path) == declaration

    def test_load_yaml(self, temp_dir, declaration_data, declaration):
        """Test reading a YAML declaration.

        Verifies that unquoted numeric levels (``source: 11``) are accepted.
        """
        data = {**declaration_data, "languageCompatibility": {"source": 11, "target": 11}}
        path = temp_dir / "declaration.yaml"
        path.write_text(yaml.safe_dump(data))

        loaded = load_declaration(path)

        assert loaded.language_compatibility.source == "11"
        assert loaded.signing_assignment == declaration.signing_assignment

    def test_load_gradle_script(self, temp_dir, flutter_app_script, gradle_config):
        path = temp_dir / "build.gradle.kts"
        path.write_text(flutter_app_script)

        declaration = load_declaration(path, gradle_config)

        assert declaration.forced_dependencies == ["androidx.core:core:1.9.0"]

    def test_unsupported_suffix(self, temp_dir):
        path = temp_dir / "declaration.toml"
        path.write_text("")

        with pytest.raises(DeclarationError):
            load_declaration(path)

    def test_malformed_json(self, temp_dir):
        path = temp_dir / "declaration.json"
        path.write_text("{not json")

        with pytest.raises(DeclarationError) as exc_info:
            load_declaration(path)

        assert "Malformed" in exc_info.value.message

    def test_duplicate_override_json(self, temp_dir, declaration_data):
        """Test that a coordinate listed twice in one JSON object is refused."""
        body = json.dumps({**declaration_data, "dependencyOverrides": {}})
        body = body.replace(
            '"dependencyOverrides": {}',
            '"dependencyOverrides": {"androidx.core:core": "1.9.0", "androidx.core:core": "1.10.0"}',
        )
        path = temp_dir / "declaration.json"
        path.write_text(body)

        with pytest.raises(DeclarationError) as exc_info:
            load_declaration(path)

        assert "androidx.core:core" in exc_info.value.message

    def test_duplicate_override_yaml(self, temp_dir, declaration_data):
        data = {key: value for key, value in declaration_data.items() if key != "dependencyOverrides"}
        path = temp_dir / "declaration.yaml"
        path.write_text(
            yaml.safe_dump(data)
            + "dependencyOverrides:\n"
            + "  androidx.core:core: 1.9.0\n"
            + "  androidx.core:core: 1.10.0\n"
        )

        with pytest.raises(DeclarationError) as exc_info:
            load_declaration(path)

        assert "duplicate key" in exc_info.value.message

    def test_yaml_merge_keys_allowed(self, temp_dir, declaration_data):
        data = {key: value for key, value in declaration_data.items() if key != "signingAssignment"}
        path = temp_dir / "declaration.yaml"
        path.write_text(
            yaml.safe_dump(data)
            + "defaults: &defaults\n  release: debug\n"
            + "signingAssignment:\n  <<: *defaults\n  release: debug\n"
        )

        with pytest.raises(DeclarationError) as exc_info:
            load_declaration(path)

        assert exc_info.value.field_name == "defaults"

    def test_missing_file(self, temp_dir):
        with pytest.raises(DeclarationError):
            load_declaration(temp_dir / "absent.json")


class TestParseDeclaration:
    """Tests for typing decoded documents."""

    def test_not_a_mapping(self):
        with pytest.raises(DeclarationError):
            parse_declaration(["plugins"])

    def test_wrong_type_reports_field(self, declaration_data):
        with pytest.raises(DeclarationError) as exc_info:
            parse_declaration({**declaration_data, "minSdkVersion": "twenty-one"})

        assert exc_info.value.field_name == "minSdkVersion"
        assert exc_info.value.exit_code == 2

    def test_missing_field_reports_field(self, declaration_data):
        data = dict(declaration_data)
        del data["namespace"]

        with pytest.raises(DeclarationError) as exc_info:
            parse_declaration(data)

        assert exc_info.value.field_name == "namespace"


class TestDumpDeclaration:
    """Tests for writing declaration documents."""

    def test_json_dump_reloads(self, declaration):
        assert parse_declaration(json.loads(dump_declaration(declaration))) == declaration

    def test_yaml_dump_reloads(self, declaration):
        assert parse_declaration(yaml.safe_load(dump_declaration(declaration, "yaml"))) == declaration

    def test_dump_uses_camel_case(self, declaration):
        data = json.loads(dump_declaration(declaration))

        assert "applicationId" in data
        assert "jvmTarget" not in data["languageCompatibility"]
