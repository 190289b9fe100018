"""
gradleforge: Declarative Android build configuration resolver.

Validates the build declaration of an Android application wrapper, combines it
with externally supplied release metadata, and emits a normalized, immutable
build configuration for the build tool to consume.
"""

__version__ = "1.0.0"
__author__ = "gradleforge Team"
