"""Build script rendering."""

from .service import BuildScriptRenderer, java_version_constant

__all__ = ["BuildScriptRenderer", "java_version_constant"]
