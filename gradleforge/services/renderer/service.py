"""
Build Script Renderer.

Renders a resolved BuildConfig as the app module's build.gradle.kts, in the
layout a Flutter Android wrapper uses. Release metadata is written as
literals, so the rendered script builds without the Flutter tool.
"""

from __future__ import annotations

from ...core.config import GradleScriptConfig, get_config
from ...core.logging import get_logger
from ...models.build import BuildConfig
from ...models.gradle import DependencyOverride, GradlePlugin, kotlin_string

logger = get_logger(__name__)

# Build types every Android module has without a create() call
DEFAULT_BUILD_TYPES = {"debug", "release"}


def java_version_constant(level: str) -> str:
    """Get the JavaVersion constant for a canonical level ("11" -> VERSION_11)."""
    return f"JavaVersion.VERSION_{level.replace('.', '_')}"


class BuildScriptRenderer:
    """Renders BuildConfig values as Gradle Kotlin scripts."""

    def __init__(self, config: GradleScriptConfig | None = None) -> None:
        self.config = config or get_config().gradle

    def _plugins_block(self, build_config: BuildConfig) -> str:
        plugins = [GradlePlugin(plugin_id=p).declaration for p in build_config.plugins]
        plugins_block = "\n    ".join(plugins)
        return f'''plugins {{
    {plugins_block}
}}
'''

    def _signing_configs_block(self, build_config: BuildConfig) -> str:
        """Declare signing configs the Android plugin does not provide itself.

        Key material is supplied by the build environment, so each config
        is declared empty.
        """
        created = [
            name for name in build_config.signing_configs
            if name not in self.config.implicit_signing_configs
        ]
        if not created:
            return ""
        configs = "\n".join(f"        create({kotlin_string(name)}) {{\n        }}" for name in created)
        return f'''
    signingConfigs {{
{configs}
    }}
'''

    def _build_types_block(self, build_config: BuildConfig) -> str:
        if not build_config.signing_assignment:
            return ""
        types: list[str] = []
        for variant, signing_config in build_config.signing_assignment.items():
            header = variant if variant in DEFAULT_BUILD_TYPES else f"create({kotlin_string(variant)})"
            types.append(
                f'''        {header} {{
            signingConfig = signingConfigs.getByName({kotlin_string(signing_config)})
        }}'''
            )
        build_types = "\n".join(types)
        return f'''
    buildTypes {{
{build_types}
    }}
'''

    def _configurations_block(self, build_config: BuildConfig) -> str:
        if not build_config.dependency_overrides:
            return ""
        forces = "\n                ".join(
            DependencyOverride.from_coordinate(coordinate, version).declaration
            for coordinate, version in build_config.dependency_overrides.items()
        )
        return f'''
    configurations {{
        all {{
            resolutionStrategy {{
                {forces}
            }}
        }}
    }}
'''

    def render(self, build_config: BuildConfig) -> str:
        """Render the app module build script.

        Args:
            build_config: Resolved configuration

        Returns:
            build.gradle.kts content
        """
        compatibility = build_config.language_compatibility
        source_level = java_version_constant(compatibility.source)
        target_level = java_version_constant(compatibility.target)

        kotlin_options = ""
        if compatibility.jvm_target is not None:
            kotlin_options = f'''
    kotlinOptions {{
        jvmTarget = {java_version_constant(compatibility.jvm_target)}.toString()
    }}
'''

        script = f'''{self._plugins_block(build_config)}
android {{
    namespace = {kotlin_string(build_config.namespace)}
    compileSdk = {build_config.compile_sdk_version}
    ndkVersion = {kotlin_string(build_config.native_toolchain_version)}

    compileOptions {{
        sourceCompatibility = {source_level}
        targetCompatibility = {target_level}
    }}
{kotlin_options}{self._signing_configs_block(build_config)}
    defaultConfig {{
        applicationId = {kotlin_string(build_config.application_id)}
        minSdk = {build_config.min_sdk_version}
        targetSdk = {build_config.target_sdk_version}
        versionCode = {build_config.version_code}
        versionName = {kotlin_string(build_config.version_name)}
    }}
{self._build_types_block(build_config)}{self._configurations_block(build_config)}}}

flutter {{
    source = {kotlin_string(build_config.source_root.as_posix())}
}}
'''
        logger.debug("Rendered build script", application_id=build_config.application_id, lines=script.count("\n"))
        return script
