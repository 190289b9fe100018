"""
Configuration Resolver Service.

Turns a raw build declaration plus release metadata into a validated, immutable
BuildConfig, or fails with the first ConfigError it finds. Resolution is pure:
it never touches the filesystem, the network or signing material.
"""

from __future__ import annotations

import re
import time

from ...core.config import ResolverConfig, get_config
from ...core.exceptions import (
    CompatibilityMismatchError,
    ConfigError,
    InvalidDependencyOverrideError,
    InvalidIdentifierError,
    InvalidVersionInfoError,
    MissingPluginError,
    SdkRangeError,
    UnknownSigningConfigError,
)
from ...core.logging import get_logger
from ...core.types import Coordinate, ServiceResult
from ...models.build import BuildConfig, Declaration, LanguageCompatibility, VersionInfo, normalize_level
from ...models.gradle import DependencyOverride

logger = get_logger(__name__)

_IDENTIFIER_PATTERN = re.compile(r"[A-Za-z][A-Za-z0-9_]*(\.[A-Za-z][A-Za-z0-9_]*)+")
_COORDINATE_PART_PATTERN = re.compile(r"[^\s:]+")

# Highest versionCode Google Play accepts
MAX_VERSION_CODE = 2_100_000_000


class ConfigResolver:
    """Validates declarations and produces BuildConfig values.

    Checks run in a fixed order so that the reported error is stable:
    1. Required plugins
    2. SDK version ordering
    3. Language compatibility
    4. Signing assignment
    5. Dependency overrides
    6. applicationId / namespace
    7. Release metadata

    The resolver holds no per-call state, so one instance can resolve any
    number of variants, concurrently if the caller wishes.
    """

    def __init__(self, config: ResolverConfig | None = None) -> None:
        """Initialize the resolver.

        Args:
            config: Resolver rules. Defaults to the global configuration.
        """
        self.config = config or get_config().resolver

    def resolve(self, declaration: Declaration, version_info: VersionInfo) -> BuildConfig:
        """Resolve a declaration into a BuildConfig.

        Args:
            declaration: Raw build declaration
            version_info: versionCode/versionName from the release-metadata provider

        Returns:
            The validated, immutable build configuration

        Raises:
            ConfigError: The specific kind for the first rule violated.
        """
        plugins = self._check_plugins(declaration.plugins)
        self._check_sdk_range(declaration)
        compatibility = self._check_compatibility(declaration.language_compatibility)
        signing_configs = self._check_signing(declaration)
        overrides = self._resolve_overrides(declaration)
        self._check_identifier("applicationId", declaration.application_id)
        self._check_identifier("namespace", declaration.namespace)
        self._check_version_info(version_info)

        build_config = BuildConfig(
            application_id=declaration.application_id,
            namespace=declaration.namespace,
            compile_sdk_version=declaration.compile_sdk_version,
            target_sdk_version=declaration.target_sdk_version,
            min_sdk_version=declaration.min_sdk_version,
            native_toolchain_version=declaration.native_toolchain_version,
            language_compatibility=compatibility,
            version_code=version_info.version_code,
            version_name=version_info.version_name,
            plugins=plugins,
            signing_configs=signing_configs,
            signing_assignment=dict(declaration.signing_assignment),
            dependency_overrides=overrides,
            source_root=declaration.source_root,
        )

        logger.info(
            "Build configuration resolved",
            application_id=build_config.application_id,
            sdk_range=build_config.sdk_range,
            version_code=build_config.version_code,
        )
        return build_config

    def _canonical_plugin(self, plugin_id: str) -> str:
        return self.config.plugin_aliases.get(plugin_id, plugin_id)

    def _check_plugins(self, plugins: list[str]) -> list[str]:
        """Confirm every required plugin is declared.

        Args:
            plugins: Declared plugin ids, in declaration order.

        Returns:
            The declared plugins with duplicates removed, order preserved.

        Raises:
            MissingPluginError: If a required plugin is absent.
        """
        declared = {self._canonical_plugin(p) for p in plugins}
        missing = [
            required
            for required in self.config.required_plugins
            if self._canonical_plugin(required) not in declared
        ]
        logger.debug("Checked plugins", declared=len(declared), missing=missing)

        if missing:
            raise MissingPluginError(
                message=f"Required plugin(s) not applied: {', '.join(missing)}",
                field_name="plugins",
                constraint="required plugins must be declared",
                actual_value=missing,
            )
        return list(dict.fromkeys(plugins))

    def _check_sdk_range(self, declaration: Declaration) -> None:
        """Confirm 1 <= minSdkVersion <= targetSdkVersion <= compileSdkVersion."""
        levels = {
            "minSdkVersion": declaration.min_sdk_version,
            "targetSdkVersion": declaration.target_sdk_version,
            "compileSdkVersion": declaration.compile_sdk_version,
        }
        for name, level in levels.items():
            if level < 1:
                raise SdkRangeError(
                    message=f"{name} must be a positive API level, got {level}",
                    field_name=name,
                    constraint=f"{name} >= 1",
                    actual_value=level,
                )

        if declaration.min_sdk_version > declaration.target_sdk_version:
            raise SdkRangeError(
                message=(
                    f"minSdkVersion {declaration.min_sdk_version} is above "
                    f"targetSdkVersion {declaration.target_sdk_version}"
                ),
                field_name="minSdkVersion",
                constraint="minSdkVersion <= targetSdkVersion",
                actual_value=declaration.min_sdk_version,
            )
        if declaration.target_sdk_version > declaration.compile_sdk_version:
            raise SdkRangeError(
                message=(
                    f"targetSdkVersion {declaration.target_sdk_version} is above "
                    f"compileSdkVersion {declaration.compile_sdk_version}"
                ),
                field_name="targetSdkVersion",
                constraint="targetSdkVersion <= compileSdkVersion",
                actual_value=declaration.target_sdk_version,
            )
        logger.debug("Checked SDK range", **levels)

    def _check_compatibility(self, compatibility: LanguageCompatibility) -> LanguageCompatibility:
        """Confirm source, target and jvmTarget share one pinned level.

        Returns:
            The compatibility pair with every level in canonical form.

        Raises:
            CompatibilityMismatchError: If a level is malformed or the levels differ.
        """
        normalized: dict[str, str | None] = {}
        for name, raw in (
            ("source", compatibility.source),
            ("target", compatibility.target),
            ("jvmTarget", compatibility.jvm_target),
        ):
            if raw is None:
                normalized[name] = None
                continue
            level = normalize_level(raw)
            if level is None:
                raise CompatibilityMismatchError(
                    message=f"Unrecognized compatibility level {raw!r}",
                    field_name=f"languageCompatibility.{name}",
                    constraint="level must be a Java version such as 11 or 1.8",
                    actual_value=raw,
                )
            normalized[name] = level

        if normalized["source"] != normalized["target"]:
            raise CompatibilityMismatchError(
                message=(
                    f"source level {normalized['source']} differs from "
                    f"target level {normalized['target']}"
                ),
                field_name="languageCompatibility",
                constraint="source == target",
                actual_value=(compatibility.source, compatibility.target),
            )
        if normalized["jvmTarget"] is not None and normalized["jvmTarget"] != normalized["source"]:
            raise CompatibilityMismatchError(
                message=(
                    f"Kotlin jvmTarget {normalized['jvmTarget']} differs from "
                    f"pinned level {normalized['source']}"
                ),
                field_name="languageCompatibility.jvmTarget",
                constraint="jvmTarget == source",
                actual_value=compatibility.jvm_target,
            )

        logger.debug("Checked language compatibility", level=normalized["source"])
        return LanguageCompatibility(
            source=normalized["source"],
            target=normalized["target"],
            jvm_target=normalized["jvmTarget"],
        )

    def _check_signing(self, declaration: Declaration) -> list[str]:
        """Confirm each variant's signing config is declared.

        Returns:
            The declared signing config ids, sorted and de-duplicated.

        Raises:
            UnknownSigningConfigError: If a variant references an undeclared config.
        """
        known = set(declaration.signing_configs)
        for variant, signing_config in declaration.signing_assignment.items():
            if signing_config not in known:
                raise UnknownSigningConfigError(
                    message=(
                        f"Variant '{variant}' uses signing config '{signing_config}', "
                        f"declared: {sorted(known) or 'none'}"
                    ),
                    field_name=f"signingAssignment.{variant}",
                    constraint="signing config must be declared in signingConfigs",
                    actual_value=signing_config,
                )
        logger.debug("Checked signing assignment", variants=sorted(declaration.signing_assignment))
        return sorted(known)

    def _resolve_overrides(self, declaration: Declaration) -> dict[Coordinate, str]:
        """Validate and merge explicit overrides with force() notations.

        Returns:
            Mapping of coordinate to forced version, sorted by coordinate.

        Raises:
            InvalidDependencyOverrideError: On a malformed coordinate, an empty
                version, or one coordinate forced to two different versions.
        """
        entries: list[tuple[str, DependencyOverride]] = []

        for coordinate, version in declaration.dependency_overrides.items():
            field_name = f"dependencyOverrides.{coordinate}"
            try:
                override = DependencyOverride.from_coordinate(coordinate, version)
            except ValueError as e:
                raise InvalidDependencyOverrideError(
                    message=f"Malformed dependency coordinate {coordinate!r}",
                    field_name=field_name,
                    constraint="key must be group:artifact",
                    actual_value=coordinate,
                    cause=e,
                )
            entries.append((field_name, override))

        for index, notation in enumerate(declaration.forced_dependencies):
            field_name = f"forcedDependencies[{index}]"
            try:
                override = DependencyOverride.from_notation(notation)
            except ValueError as e:
                raise InvalidDependencyOverrideError(
                    message=f"Malformed force() notation {notation!r}",
                    field_name=field_name,
                    constraint="notation must be group:artifact:version",
                    actual_value=notation,
                    cause=e,
                )
            entries.append((field_name, override))

        merged: dict[Coordinate, str] = {}
        for field_name, override in entries:
            for part_name in ("group", "artifact"):
                part = getattr(override, part_name)
                if not _COORDINATE_PART_PATTERN.fullmatch(part):
                    raise InvalidDependencyOverrideError(
                        message=f"Dependency {part_name} {part!r} is empty or contains whitespace",
                        field_name=field_name,
                        constraint=f"{part_name} must be non-empty",
                        actual_value=override.coordinate,
                    )
            if not _COORDINATE_PART_PATTERN.fullmatch(override.version):
                raise InvalidDependencyOverrideError(
                    message=f"Forced version for {override.coordinate} is empty or contains whitespace",
                    field_name=field_name,
                    constraint="version must be a non-empty version string",
                    actual_value=override.version,
                )

            existing = merged.get(override.coordinate)
            if existing is not None and existing != override.version:
                raise InvalidDependencyOverrideError(
                    message=(
                        f"{override.coordinate} is forced to both {existing} "
                        f"and {override.version}"
                    ),
                    field_name=field_name,
                    constraint="each coordinate is forced to one version",
                    actual_value=override.version,
                )
            merged[override.coordinate] = override.version

        logger.debug("Resolved dependency overrides", count=len(merged))
        return dict(sorted(merged.items()))

    def _check_identifier(self, field_name: str, value: str) -> None:
        if not _IDENTIFIER_PATTERN.fullmatch(value):
            raise InvalidIdentifierError(
                message=f"{field_name} {value!r} is not a dotted identifier",
                field_name=field_name,
                constraint="two or more segments, each [A-Za-z][A-Za-z0-9_]*",
                actual_value=value,
            )
        logger.debug("Checked identifier", field=field_name, value=value)

    def _check_version_info(self, version_info: VersionInfo) -> None:
        if not 1 <= version_info.version_code <= MAX_VERSION_CODE:
            raise InvalidVersionInfoError(
                message=f"versionCode {version_info.version_code} is out of range",
                field_name="versionCode",
                constraint=f"1 <= versionCode <= {MAX_VERSION_CODE}",
                actual_value=version_info.version_code,
            )
        if not version_info.version_name.strip():
            raise InvalidVersionInfoError(
                message="versionName is empty",
                field_name="versionName",
                constraint="versionName must be non-empty",
                actual_value=version_info.version_name,
            )


class ResolverService:
    """Service wrapper that reports resolution as a ServiceResult."""

    def __init__(self, resolver: ConfigResolver | None = None) -> None:
        self.resolver = resolver or ConfigResolver()

    def run(self, declaration: Declaration, version_info: VersionInfo) -> ServiceResult[BuildConfig]:
        """Resolve a declaration, converting ConfigError into a failed result.

        Args:
            declaration: Raw build declaration
            version_info: Release metadata

        Returns:
            ServiceResult containing the BuildConfig, or the error kind,
            message and exit code of the violated rule
        """
        start_time = time.perf_counter()

        try:
            build_config = self.resolver.resolve(declaration, version_info)
        except ConfigError as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.warning(
                "Build configuration rejected",
                kind=e.kind,
                field=e.field_name,
                constraint=e.constraint,
            )
            result: ServiceResult[BuildConfig] = ServiceResult.rejected(e)
            result.duration_ms = duration_ms
            return result

        duration_ms = (time.perf_counter() - start_time) * 1000
        result = ServiceResult.ok(build_config, application_id=build_config.application_id)
        result.duration_ms = duration_ms
        return result


def resolve(
    declaration: Declaration,
    version_info: VersionInfo,
    config: ResolverConfig | None = None,
) -> BuildConfig:
    """Resolve a declaration with a one-off resolver."""
    return ConfigResolver(config).resolve(declaration, version_info)
