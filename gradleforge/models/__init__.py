"""
gradleforge data models.

Pydantic models for the raw declaration, the release metadata and the
resolved build configuration, plus the Gradle value types used when
rendering a build script.
"""

from .build import (
    BuildConfig,
    Declaration,
    LanguageCompatibility,
    VersionInfo,
    normalize_level,
)
from .gradle import DependencyOverride, GradlePlugin

__all__ = [
    # Build models
    "BuildConfig",
    "Declaration",
    "LanguageCompatibility",
    "VersionInfo",
    "normalize_level",
    # Gradle models
    "DependencyOverride",
    "GradlePlugin",
]
