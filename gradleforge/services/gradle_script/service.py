"""
Gradle Script Reader Service.

Extracts a build Declaration from an app module's build.gradle.kts. Only the
declarative subset an application wrapper uses is understood: the plugins
block, the android block (namespace, compileSdk, ndkVersion, compileOptions,
kotlinOptions, defaultConfig, signingConfigs, buildTypes, resolutionStrategy
force() calls) and the flutter { source } block.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from ...core.config import GradleScriptConfig, get_config
from ...core.exceptions import DeclarationError
from ...core.logging import get_logger
from ...models.build import Declaration, VersionInfo
from ...models.gradle import GradlePlugin, kotlin_unescape

logger = get_logger(__name__)

# Kotlin string literal body, escapes included
_STRING = r'"((?:[^"\\\n]|\\.)*)"'
_STRING_LITERAL_PATTERN = re.compile(_STRING)
_PLUGIN_ID_PATTERN = re.compile(rf"\bid\s*\(\s*{_STRING}\s*\)")
_KOTLIN_PLUGIN_PATTERN = re.compile(rf"\bkotlin\s*\(\s*{_STRING}\s*\)")
_FORCE_PATTERN = re.compile(rf"\bforce\s*\(\s*{_STRING}\s*\)")
_SIGNING_REF_PATTERN = re.compile(
    r"\bsigningConfig\s*=\s*signingConfigs"
    rf"(?:\.getByName\(\s*{_STRING}\s*\)|\[\s*{_STRING}\s*\]|\.(\w+))"
)
_BLOCK_NAME_PATTERN = re.compile(
    rf"(?:(?:getByName|create|maybeCreate|register)\s*\(\s*{_STRING}\s*\)|(\w+))\s*$"
)
_INT_PATTERN = re.compile(r"-?\d+")


def _strip_comments(text: str) -> str:
    """Remove // and /* */ comments, leaving string literals intact."""
    out: list[str] = []
    i = 0
    in_string = False
    while i < len(text):
        ch = text[i]
        if in_string:
            out.append(ch)
            if ch == "\\" and i + 1 < len(text):
                out.append(text[i + 1])
                i += 2
                continue
            if ch == '"':
                in_string = False
            i += 1
            continue
        if ch == '"':
            in_string = True
            out.append(ch)
            i += 1
        elif text.startswith("//", i):
            end = text.find("\n", i)
            i = len(text) if end == -1 else end
        elif text.startswith("/*", i):
            end = text.find("*/", i + 2)
            i = len(text) if end == -1 else end + 2
        else:
            out.append(ch)
            i += 1
    return "".join(out)


def _matching_brace(text: str, open_index: int) -> int:
    """Return the index of the brace closing the one at open_index."""
    depth = 0
    in_string = False
    i = open_index
    while i < len(text):
        ch = text[i]
        if in_string:
            if ch == "\\":
                i += 2
                continue
            if ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i
        i += 1
    raise DeclarationError(message="Unbalanced braces in build script", source="build.gradle.kts")


def _child_blocks(body: str) -> list[tuple[str, str]]:
    """List the blocks directly nested in body as (name, inner text) pairs.

    A block's name is the identifier before its brace (``release {``) or the
    string argument of a container call (``create("staging") {``).
    """
    blocks: list[tuple[str, str]] = []
    i = 0
    statement_start = 0
    in_string = False
    while i < len(body):
        ch = body[i]
        if in_string:
            if ch == "\\":
                i += 2
                continue
            if ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch == "\n" or ch == ";":
            statement_start = i + 1
        elif ch == "{":
            close = _matching_brace(body, i)
            header = body[statement_start:i].strip()
            match = _BLOCK_NAME_PATTERN.search(header)
            if match:
                name = kotlin_unescape(match.group(1)) if match.group(1) is not None else match.group(2)
                blocks.append((name, body[i + 1 : close]))
            i = close + 1
            statement_start = i
            continue
        i += 1
    return blocks


def _block(body: str | None, name: str) -> str | None:
    if body is None:
        return None
    for block_name, inner in _child_blocks(body):
        if block_name == name:
            return inner
    return None


def _open_brace(text: str, start: int) -> int:
    """Index of the next ``{`` outside a string literal, or -1."""
    in_string = False
    i = start
    while i < len(text):
        ch = text[i]
        if in_string:
            if ch == "\\":
                i += 2
                continue
            if ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch == "{":
            return i
        i += 1
    return -1


def _top_level(body: str) -> str:
    """Return body with the contents of nested blocks removed."""
    parts: list[str] = []
    i = 0
    while True:
        brace = _open_brace(body, i)
        if brace == -1:
            parts.append(body[i:])
            break
        parts.append(body[i:brace])
        i = _matching_brace(body, brace) + 1
    return "\n".join(parts)


def _assignment(body: str, name: str) -> str | None:
    """Raw right-hand side of ``name = value`` in body."""
    match = re.search(rf"(?m)^\s*{re.escape(name)}\s*=\s*(.+?)\s*$", body)
    return match.group(1) if match else None


class GradleScriptReader:
    """Reads build.gradle.kts text into a Declaration.

    Values that reference the Flutter Gradle plugin (``flutter.minSdkVersion``
    and friends) are substituted from the configured Flutter defaults.
    Release metadata (versionCode/versionName) is not part of the declaration;
    read_version_info returns it for scripts that pin literal values.
    """

    def __init__(self, config: GradleScriptConfig | None = None) -> None:
        """Initialize the reader.

        Args:
            config: Reader settings. Defaults to the global configuration.
        """
        self.config = config or get_config().gradle
        self._source = "build.gradle.kts"

    def read_file(self, path: Path) -> Declaration:
        """Read a build script from disk.

        Raises:
            DeclarationError: If the file cannot be read or parsed.
        """
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise DeclarationError(message=f"Cannot read build script: {e}", source=str(path), cause=e)
        return self.read(text, source=str(path))

    def read(self, text: str, source: str = "build.gradle.kts") -> Declaration:
        """Parse build script text.

        Args:
            text: Contents of build.gradle.kts
            source: Name used in error messages

        Returns:
            The declaration found in the script

        Raises:
            DeclarationError: If a required value is missing or not a literal.
        """
        script = _strip_comments(text)
        self._source = source

        plugins_block = _block(script, "plugins") or ""
        android = _block(script, "android")
        if android is None:
            raise DeclarationError(message="No android block found", source=source, field_name="android")
        android_top = _top_level(android)

        default_config = _block(android, "defaultConfig")
        if default_config is None:
            raise DeclarationError(
                message="No defaultConfig block found", source=source, field_name="android.defaultConfig"
            )
        default_top = _top_level(default_config)

        compile_options = _top_level(_block(android, "compileOptions") or "")
        kotlin_options = _top_level(_block(android, "kotlinOptions") or "")

        namespace = self._value(android_top, "namespace", required=True)
        application_id = self._value(default_top, "applicationId") or namespace

        data: dict[str, Any] = {
            "plugins": self._plugins(plugins_block),
            "application_id": application_id,
            "namespace": namespace,
            "compile_sdk_version": self._int(android_top, ("compileSdk", "compileSdkVersion")),
            "target_sdk_version": self._int(default_top, ("targetSdk", "targetSdkVersion")),
            "min_sdk_version": self._int(default_top, ("minSdk", "minSdkVersion")),
            "native_toolchain_version": self._value(android_top, "ndkVersion", required=True),
            "language_compatibility": {
                "source": self._value(compile_options, "sourceCompatibility", required=True),
                "target": self._value(compile_options, "targetCompatibility", required=True),
                "jvm_target": self._value(kotlin_options, "jvmTarget"),
            },
            "signing_configs": self._signing_configs(android),
            "signing_assignment": self._signing_assignment(android),
            "forced_dependencies": [kotlin_unescape(notation) for notation in _FORCE_PATTERN.findall(script)],
        }

        flutter = _block(script, "flutter")
        if flutter is not None:
            source_root = self._value(_top_level(flutter), "source")
            if source_root:
                data["source_root"] = source_root

        try:
            declaration = Declaration.model_validate(data)
        except PydanticValidationError as e:
            first = e.errors()[0]
            raise DeclarationError(
                message=first["msg"],
                source=source,
                field_name=".".join(str(part) for part in first["loc"]),
                cause=e,
            )

        logger.info(
            "Read build script",
            source=source,
            plugins=len(declaration.plugins),
            forced=len(declaration.forced_dependencies),
        )
        return declaration

    def read_version_info(self, text: str) -> VersionInfo | None:
        """Get versionCode/versionName when the script pins both as literals.

        Scripts that defer to the Flutter tool (``versionCode =
        flutter.versionCode``) give None; the release-metadata provider
        supplies those values instead.
        """
        default_config = _block(_block(_strip_comments(text), "android"), "defaultConfig")
        if default_config is None:
            return None
        default_top = _top_level(default_config)

        code = _assignment(default_top, "versionCode")
        name = _assignment(default_top, "versionName")
        if code is None or name is None or not _INT_PATTERN.fullmatch(code):
            return None
        literal = _STRING_LITERAL_PATTERN.fullmatch(name)
        if literal is None:
            return None
        return VersionInfo(version_code=int(code), version_name=kotlin_unescape(literal.group(1)))

    def _plugins(self, body: str) -> list[str]:
        plugins: list[tuple[int, str]] = []
        for match in _PLUGIN_ID_PATTERN.finditer(body):
            plugins.append((match.start(), kotlin_unescape(match.group(1))))
        for match in _KOTLIN_PLUGIN_PATTERN.finditer(body):
            plugin = GradlePlugin.from_kotlin_shorthand(kotlin_unescape(match.group(1)))
            plugins.append((match.start(), plugin.plugin_id))
        return [plugin_id for _, plugin_id in sorted(plugins)]

    def _signing_configs(self, android: str) -> list[str]:
        declared = list(self.config.implicit_signing_configs)
        for name, _ in _child_blocks(_block(android, "signingConfigs") or ""):
            if name not in declared:
                declared.append(name)
        return declared

    def _signing_assignment(self, android: str) -> dict[str, str]:
        assignment: dict[str, str] = {}
        for variant, inner in _child_blocks(_block(android, "buildTypes") or ""):
            match = _SIGNING_REF_PATTERN.search(_top_level(inner))
            if match:
                by_name, by_index, by_property = match.groups()
                if by_property is not None:
                    assignment[variant] = by_property
                else:
                    assignment[variant] = kotlin_unescape(by_name if by_name is not None else by_index)
        return assignment

    def _value(self, body: str, name: str, required: bool = False) -> str | None:
        """Get the right-hand side of ``name = value`` with flutter.* substituted."""
        value = _assignment(body, name)
        if value is None:
            if required:
                raise DeclarationError(message=f"{name} is not set", source=self._source, field_name=name)
            return None

        if value.startswith("flutter."):
            key = value.removeprefix("flutter.")
            if key not in self.config.flutter_defaults:
                raise DeclarationError(
                    message=f"No value configured for {value}",
                    source=self._source,
                    field_name=name,
                )
            return self.config.flutter_defaults[key]
        literal = _STRING_LITERAL_PATTERN.fullmatch(value)
        if literal:
            return kotlin_unescape(literal.group(1))
        return value

    def _int(self, body: str, names: tuple[str, ...]) -> int:
        for name in names:
            value = self._value(body, name)
            if value is None:
                continue
            if not _INT_PATTERN.fullmatch(value):
                raise DeclarationError(
                    message=f"{name} must be an integer literal, got {value!r}",
                    source=self._source,
                    field_name=name,
                )
            return int(value)
        raise DeclarationError(message=f"{names[0]} is not set", source=self._source, field_name=names[0])
