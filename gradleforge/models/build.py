"""
Build configuration data models.

These models represent the raw declaration read from an application's build
script or declaration file, the release metadata supplied alongside it, and the
validated, immutable BuildConfig handed to the build tool.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

from ..core.types import Coordinate, VariantName

_LEVEL_PATTERN = re.compile(r"(\d+)(?:\.(\d+))?(?:\.(\d+))?\Z")


def normalize_level(value: str | int | None) -> str | None:
    """Normalize a Java compatibility level to its canonical spelling.

    Accepts the forms a build script uses for the same level
    (``JavaVersion.VERSION_11``, ``VERSION_11``, ``"11"``, ``11``, ``"11.0.0"``) and returns
    the string Gradle prints for it: ``"1.8"`` for 8 and below, ``"11"`` for
    9 and above. A semantic version names a level only when its minor (above
    1) and patch parts are zero.

    Args:
        value: Raw compatibility level.

    Returns:
        The canonical level, or None if the value is not a recognizable level.
    """
    if value is None:
        return None
    text = str(value).strip()
    if text.endswith(".toString()"):
        text = text[: -len(".toString()")]
    text = text.removeprefix("JavaVersion.").removeprefix("VERSION_").replace("_", ".")

    match = _LEVEL_PATTERN.match(text)
    if not match:
        return None
    major, minor, patch = (int(part) if part is not None else None for part in match.groups())
    if patch:
        return None
    if major == 1 and minor is not None:
        major = minor
    elif minor:
        return None
    if major < 1:
        return None
    return f"1.{major}" if major <= 8 else str(major)


class LanguageCompatibility(BaseModel):
    """Source/target language level pair, plus the Kotlin JVM target."""

    source: str = Field(description="Java source compatibility level")
    target: str = Field(description="Java target compatibility level")
    jvm_target: str | None = Field(default=None, description="Kotlin jvmTarget, if declared")

    model_config = {"alias_generator": to_camel, "populate_by_name": True, "frozen": True}

    @field_validator("source", "target", "jvm_target", mode="before")
    @classmethod
    def _coerce_level(cls, value: Any) -> Any:
        # YAML reads `source: 11` as an int
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class VersionInfo(BaseModel):
    """Release metadata supplied by the release-metadata provider."""

    version_code: int = Field(description="Monotonically increasing release number")
    version_name: str = Field(description="Human-readable release name")

    model_config = {"alias_generator": to_camel, "populate_by_name": True, "frozen": True}


class Declaration(BaseModel):
    """Raw, unvalidated build declaration.

    Field names follow the build script's vocabulary; JSON and YAML documents
    use the camelCase aliases (``applicationId``, ``minSdkVersion``...).
    """

    plugins: list[str] = Field(default_factory=list, description="Applied plugin ids")
    application_id: str = Field(description="Reverse-domain application id")
    namespace: str = Field(description="Namespace for generated code")
    compile_sdk_version: int
    target_sdk_version: int
    min_sdk_version: int
    native_toolchain_version: str = Field(min_length=1, description="NDK version tag")
    language_compatibility: LanguageCompatibility
    signing_configs: list[str] = Field(default_factory=list, description="Declared signing config ids")
    signing_assignment: dict[str, str] = Field(
        default_factory=dict, description="Build variant -> signing config id"
    )
    dependency_overrides: dict[str, str] = Field(
        default_factory=dict, description="group:artifact -> forced version"
    )
    forced_dependencies: list[str] = Field(
        default_factory=list, description="force() notations, group:artifact:version"
    )
    source_root: Path = Field(default=Path("../.."), description="Shared application source tree")

    model_config = {"alias_generator": to_camel, "populate_by_name": True, "extra": "forbid"}


class BuildConfig(BaseModel):
    """Validated build configuration consumed by the build tool.

    Instances are produced only by the resolver and are immutable. The JSON
    form uses the camelCase names the build tool expects.
    """

    application_id: str
    namespace: str
    compile_sdk_version: int
    target_sdk_version: int
    min_sdk_version: int
    native_toolchain_version: str
    language_compatibility: LanguageCompatibility
    version_code: int
    version_name: str
    plugins: list[str] = Field(default_factory=list)
    signing_configs: list[str] = Field(default_factory=list)
    signing_assignment: dict[VariantName, str] = Field(default_factory=dict)
    dependency_overrides: dict[Coordinate, str] = Field(default_factory=dict)
    source_root: Path

    model_config = {"alias_generator": to_camel, "populate_by_name": True, "frozen": True}

    @property
    def sdk_range(self) -> tuple[int, int, int]:
        """Get (min, target, compile) SDK versions."""
        return self.min_sdk_version, self.target_sdk_version, self.compile_sdk_version

    @property
    def forced_notations(self) -> list[str]:
        """Get dependency overrides in Gradle force() notation.

        Returns:
            list[str]: ``group:artifact:version`` strings, sorted by coordinate.
        """
        return [f"{coordinate}:{version}" for coordinate, version in self.dependency_overrides.items()]

    def signing_config_for(self, variant: VariantName) -> str | None:
        """Get the signing config assigned to a build variant.

        Args:
            variant: Build variant name (e.g., "release").

        Returns:
            The signing config id, or None if the variant has no assignment.
        """
        return self.signing_assignment.get(variant)

    def to_json(self, indent: int | None = 2) -> str:
        """Serialize to the JSON shape the build tool reads."""
        return self.model_dump_json(by_alias=True, indent=indent)

    @classmethod
    def from_json(cls, content: str | bytes) -> BuildConfig:
        """Parse a BuildConfig previously produced by to_json."""
        return cls.model_validate_json(content)
