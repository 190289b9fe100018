"""
Gradle declaration models.

Small value types for the pieces of a build script the renderer writes:
plugin applications and forced dependency versions.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, Field


_KOTLIN_ESCAPES = {"\\": "\\\\", '"': '\\"', "$": "\\$", "\n": "\\n", "\r": "\\r", "\t": "\\t"}
_KOTLIN_UNESCAPES = {"\\": "\\", '"': '"', "'": "'", "$": "$", "n": "\n", "r": "\r", "t": "\t", "b": "\b"}
_KOTLIN_ESCAPE_PATTERN = re.compile(r"\\u([0-9a-fA-F]{4})|\\(.)")


def kotlin_string(value: str) -> str:
    """Quote value as a Kotlin string literal, with ``$`` templates escaped."""
    return '"' + "".join(_KOTLIN_ESCAPES.get(ch, ch) for ch in value) + '"'


def kotlin_unescape(body: str) -> str:
    """Decode the escapes in the text between a Kotlin literal's quotes."""

    def replace(match: re.Match[str]) -> str:
        if match.group(1):
            return chr(int(match.group(1), 16))
        return _KOTLIN_UNESCAPES.get(match.group(2), match.group(0))

    return _KOTLIN_ESCAPE_PATTERN.sub(replace, body)


KOTLIN_PLUGIN_PREFIX = "org.jetbrains.kotlin."


class GradlePlugin(BaseModel):
    """A plugin applied in the app module's ``plugins {}`` block."""

    plugin_id: str = Field(description="Fully qualified plugin id")

    @classmethod
    def from_kotlin_shorthand(cls, name: str) -> GradlePlugin:
        """Expand ``kotlin("android")`` to ``org.jetbrains.kotlin.android``."""
        return cls(plugin_id=KOTLIN_PLUGIN_PREFIX + name)

    @property
    def declaration(self) -> str:
        """Line for the plugins block; Kotlin plugins use the ``kotlin()`` accessor."""
        if self.plugin_id.startswith(KOTLIN_PLUGIN_PREFIX):
            return f"kotlin({kotlin_string(self.plugin_id[len(KOTLIN_PLUGIN_PREFIX):])})"
        return f"id({kotlin_string(self.plugin_id)})"


class DependencyOverride(BaseModel):
    """A forced dependency version."""

    group: str = Field(description="Maven group, e.g. androidx.core")
    artifact: str = Field(description="Maven artifact name")
    version: str = Field(description="Forced version")

    @property
    def coordinate(self) -> str:
        return f"{self.group}:{self.artifact}"

    @property
    def notation(self) -> str:
        """Get Gradle dependency notation (group:artifact:version)."""
        return f"{self.group}:{self.artifact}:{self.version}"

    @property
    def declaration(self) -> str:
        """Get the resolutionStrategy force() call."""
        return f"force({kotlin_string(self.notation)})"

    @classmethod
    def from_coordinate(cls, coordinate: str, version: str) -> DependencyOverride:
        """Build an override from a ``group:artifact`` key and its version.

        Raises:
            ValueError: If the coordinate does not have exactly two parts.
        """
        parts = coordinate.split(":")
        if len(parts) != 2:
            raise ValueError(f"expected group:artifact, got {coordinate!r}")
        return cls(group=parts[0], artifact=parts[1], version=version)

    @classmethod
    def from_notation(cls, notation: str) -> DependencyOverride:
        """Build an override from ``group:artifact:version`` notation.

        Raises:
            ValueError: If the notation does not have exactly three parts.
        """
        parts = notation.split(":")
        if len(parts) != 3:
            raise ValueError(f"expected group:artifact:version, got {notation!r}")
        return cls(group=parts[0], artifact=parts[1], version=parts[2])
