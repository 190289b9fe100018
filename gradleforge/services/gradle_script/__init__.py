"""Gradle Kotlin script reader."""

from .service import GradleScriptReader

__all__ = ["GradleScriptReader"]
