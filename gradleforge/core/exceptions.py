"""
Custom exception hierarchy for gradleforge.

All exceptions inherit from GradleForgeError to enable consistent error handling.
Resolution failures derive from ConfigError; each kind carries the process exit
code the CLI reports for it, along with the offending field and the constraint
that was violated.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar


@dataclass
class GradleForgeError(Exception):
    """Base exception for all gradleforge errors."""

    message: str
    context: dict[str, Any] = field(default_factory=dict)
    cause: Exception | None = None

    exit_code: ClassVar[int] = 1

    def __str__(self) -> str:
        ctx = f" | context: {self.context}" if self.context else ""
        cause = f" | caused by: {self.cause}" if self.cause else ""
        return f"{self.message}{ctx}{cause}"


@dataclass
class DeclarationError(GradleForgeError):
    """Raised when a declaration cannot be read or has the wrong shape."""

    source: str = ""
    field_name: str | None = None

    exit_code: ClassVar[int] = 2

    def __str__(self) -> str:
        base = super().__str__()
        where = f" in {self.source}" if self.source else ""
        if self.field_name:
            return f"Invalid declaration{where} at '{self.field_name}': {base}"
        return f"Invalid declaration{where}: {base}"


@dataclass
class ConfigError(GradleForgeError):
    """Base for every build configuration resolution failure."""

    field_name: str = ""
    constraint: str = ""
    actual_value: Any = None

    @property
    def kind(self) -> str:
        return type(self).__name__

    def __str__(self) -> str:
        base = super().__str__()
        constraint = f" (constraint: {self.constraint})" if self.constraint else ""
        return f"{self.kind} on '{self.field_name}': {base}{constraint}"


@dataclass
class MissingPluginError(ConfigError):
    """A required plugin is absent from the declared plugin set."""

    exit_code: ClassVar[int] = 10


@dataclass
class SdkRangeError(ConfigError):
    """SDK version ordering invariant violated."""

    exit_code: ClassVar[int] = 11


@dataclass
class CompatibilityMismatchError(ConfigError):
    """Source and target compatibility levels differ."""

    exit_code: ClassVar[int] = 12


@dataclass
class UnknownSigningConfigError(ConfigError):
    """A signing assignment references an undeclared signing config."""

    exit_code: ClassVar[int] = 13


@dataclass
class InvalidDependencyOverrideError(ConfigError):
    """Malformed dependency coordinate or empty forced version."""

    exit_code: ClassVar[int] = 14


@dataclass
class InvalidIdentifierError(ConfigError):
    """Malformed applicationId or namespace."""

    exit_code: ClassVar[int] = 15


@dataclass
class InvalidVersionInfoError(ConfigError):
    """Release metadata outside the range the platform accepts."""

    exit_code: ClassVar[int] = 16
