"""
Configuration management for gradleforge.

Provides centralized, type-safe configuration with environment variable overrides
and sensible defaults for the resolver, the Gradle script reader and the CLI.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Load .env file if it exists (looks in cwd and parent directories)
load_dotenv()

DEFAULT_REQUIRED_PLUGINS = [
    "com.android.application",
    "kotlin-android",
    "dev.flutter.flutter-gradle-plugin",
]

DEFAULT_PLUGIN_ALIASES = {
    "kotlin-android": "org.jetbrains.kotlin.android",
    "kotlin-kapt": "org.jetbrains.kotlin.kapt",
    "kotlin-parcelize": "org.jetbrains.kotlin.plugin.parcelize",
}


class ResolverConfig(BaseModel):
    """Rules applied by the configuration resolver."""

    required_plugins: list[str] = Field(
        default_factory=lambda: list(DEFAULT_REQUIRED_PLUGINS),
        description="Plugin ids that must be declared",
    )
    plugin_aliases: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_PLUGIN_ALIASES),
        description="Legacy plugin id -> canonical plugin id",
    )


class GradleScriptConfig(BaseModel):
    """Gradle Kotlin script reader configuration."""

    # Values the Flutter Gradle plugin exposes as flutter.<name>
    flutter_defaults: dict[str, str] = Field(
        default_factory=lambda: {
            "compileSdkVersion": "35",
            "targetSdkVersion": "35",
            "minSdkVersion": "21",
            "ndkVersion": "27.0.12077973",
        },
        description="Substitutions for flutter.* references",
    )
    implicit_signing_configs: list[str] = Field(
        default_factory=lambda: ["debug"],
        description="Signing configs the Android Gradle plugin always provides",
    )


class OutputConfig(BaseModel):
    """Output configuration for resolved artifacts."""

    base_path: Path = Field(default=Path("./build-config"), description="Artifact directory")
    config_file_name: str = Field(default="build-config.json")
    script_file_name: str = Field(default="build.gradle.kts")
    indent: int = Field(default=2, ge=0, le=8, description="JSON indentation")


class Config(BaseModel):
    """Root configuration for gradleforge."""

    project_name: str = Field(default="gradleforge", description="Project identifier")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Logging level"
    )
    resolver: ResolverConfig = Field(default_factory=ResolverConfig)
    gradle: GradleScriptConfig = Field(default_factory=GradleScriptConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    model_config = {"extra": "ignore"}

    @classmethod
    def from_env(cls) -> Config:
        """Create configuration from environment variables."""
        resolver = ResolverConfig()
        required = os.environ.get("GF_REQUIRED_PLUGINS")
        if required is not None:
            resolver.required_plugins = [p.strip() for p in required.split(",") if p.strip()]

        gradle = GradleScriptConfig()
        for env_name, key in (
            ("GF_FLUTTER_COMPILE_SDK", "compileSdkVersion"),
            ("GF_FLUTTER_TARGET_SDK", "targetSdkVersion"),
            ("GF_FLUTTER_MIN_SDK", "minSdkVersion"),
            ("GF_FLUTTER_NDK_VERSION", "ndkVersion"),
        ):
            if env_name in os.environ:
                gradle.flutter_defaults[key] = os.environ[env_name]

        return cls(
            log_level=os.environ.get("GF_LOG_LEVEL", "INFO"),  # type: ignore
            resolver=resolver,
            gradle=gradle,
            output=OutputConfig(
                base_path=Path(os.environ.get("GF_OUTPUT_PATH", "./build-config")),
            ),
        )


@lru_cache(maxsize=1)
def get_config() -> Config:
    """Get cached configuration instance."""
    return Config.from_env()
