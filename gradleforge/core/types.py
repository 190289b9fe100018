"""
Shared types for gradleforge services.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from .exceptions import ConfigError

Coordinate = str  # "group:artifact"
VariantName = str  # build type, e.g. "release"
Hash = str  # hex SHA-256

T = TypeVar("T")


@dataclass
class ServiceResult(Generic[T]):
    """Outcome of a service call.

    A failed result carries the error kind and the process exit code for it,
    so callers can report a rejection without catching exceptions.
    """

    success: bool
    data: T | None = None
    error: str | None = None
    error_kind: str | None = None
    exit_code: int = 0
    metadata: dict[str, Any] = field(default_factory=dict)
    duration_ms: float = 0.0

    @classmethod
    def ok(cls, data: T, **metadata: Any) -> ServiceResult[T]:
        return cls(success=True, data=data, metadata=metadata)

    @classmethod
    def fail(cls, error: str, kind: str | None = None, exit_code: int = 1, **metadata: Any) -> ServiceResult[T]:
        return cls(success=False, error=error, error_kind=kind, exit_code=exit_code, metadata=metadata)

    @classmethod
    def rejected(cls, error: ConfigError) -> ServiceResult[T]:
        """Build a failed result from a configuration rule violation."""
        return cls.fail(
            str(error),
            kind=error.kind,
            exit_code=error.exit_code,
            field=error.field_name,
            constraint=error.constraint,
        )
