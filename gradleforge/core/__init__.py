"""Core infrastructure components for gradleforge."""

from .config import Config, get_config
from .exceptions import (
    CompatibilityMismatchError,
    ConfigError,
    DeclarationError,
    GradleForgeError,
    InvalidDependencyOverrideError,
    InvalidIdentifierError,
    InvalidVersionInfoError,
    MissingPluginError,
    SdkRangeError,
    UnknownSigningConfigError,
)
from .logging import get_logger, setup_logging
from .types import Coordinate, Hash, ServiceResult, VariantName

__all__ = [
    "Config",
    "get_config",
    "CompatibilityMismatchError",
    "ConfigError",
    "DeclarationError",
    "GradleForgeError",
    "InvalidDependencyOverrideError",
    "InvalidIdentifierError",
    "InvalidVersionInfoError",
    "MissingPluginError",
    "SdkRangeError",
    "UnknownSigningConfigError",
    "get_logger",
    "setup_logging",
    "Coordinate",
    "Hash",
    "ServiceResult",
    "VariantName",
]
