"""
Release Metadata Provider.

Supplies versionCode and versionName the way a Flutter Android build receives
them: explicit values first, then ``flutter.versionCode``/``flutter.versionName``
from the Android project's local.properties, then the ``version:`` line of
pubspec.yaml (``<versionName>+<versionCode>``), then the Flutter defaults.
"""

from __future__ import annotations

import re
from pathlib import Path

import yaml

from ...core.exceptions import DeclarationError
from ...core.logging import get_logger
from ...models.build import VersionInfo

logger = get_logger(__name__)

DEFAULT_VERSION_CODE = 1
DEFAULT_VERSION_NAME = "1.0"

_PUBSPEC_VERSION_PATTERN = re.compile(r"(?P<name>[^+\s]+)(?:\+(?P<code>\S+))?")


def read_properties(path: Path) -> dict[str, str]:
    """Read a Java .properties file.

    Supports ``key=value`` and ``key:value`` entries, ``#``/``!`` comments and
    backslash-escaped separators, which covers what Android tooling writes.

    Raises:
        DeclarationError: If the file cannot be read.
    """
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except OSError as e:
        raise DeclarationError(message=f"Cannot read properties: {e}", source=str(path), cause=e)

    properties: dict[str, str] = {}
    for line in lines:
        stripped = line.strip()
        if not stripped or stripped[0] in "#!":
            continue
        match = re.match(r"^((?:\\.|[^=:\s\\])+)\s*[=:\s]\s*(.*)$", stripped)
        if match:
            key, value = match.group(1), match.group(2)
        else:
            key, value = stripped, ""
        properties[_unescape(key)] = _unescape(value)
    return properties


def _unescape(text: str) -> str:
    return re.sub(r"\\(.)", r"\1", text)


class ReleaseMetadataProvider:
    """Looks up release metadata for one application.

    Example:
        provider = ReleaseMetadataProvider(
            local_properties=Path("android/local.properties"),
            pubspec=Path("pubspec.yaml"),
        )
        version_info = provider.load()
    """

    def __init__(self, local_properties: Path | None = None, pubspec: Path | None = None) -> None:
        """Initialize the provider.

        Args:
            local_properties: Android project's local.properties, if any
            pubspec: Flutter project's pubspec.yaml, if any
        """
        self.local_properties = local_properties
        self.pubspec = pubspec

    @classmethod
    def discover(cls, script_dir: Path, source_root: Path) -> ReleaseMetadataProvider:
        """Locate metadata files relative to an app module.

        Args:
            script_dir: Directory holding the app module's build script
                (e.g. android/app)
            source_root: The declaration's source root, relative to script_dir

        Returns:
            A provider for whichever of the files exist
        """
        local_properties = script_dir.parent / "local.properties"
        pubspec = script_dir / source_root / "pubspec.yaml"
        return cls(
            local_properties=local_properties if local_properties.is_file() else None,
            pubspec=pubspec if pubspec.is_file() else None,
        )

    def from_local_properties(self) -> tuple[str | None, str | None]:
        """Get (versionCode, versionName) strings from local.properties."""
        if self.local_properties is None:
            return None, None
        properties = read_properties(self.local_properties)
        return properties.get("flutter.versionCode"), properties.get("flutter.versionName")

    def from_pubspec(self) -> tuple[str | None, str | None]:
        """Get (versionCode, versionName) strings from pubspec.yaml.

        Raises:
            DeclarationError: If pubspec.yaml is unreadable or its version
                line is malformed.
        """
        if self.pubspec is None:
            return None, None
        try:
            document = yaml.safe_load(self.pubspec.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as e:
            raise DeclarationError(message=f"Cannot read pubspec: {e}", source=str(self.pubspec), cause=e)

        version = document.get("version") if isinstance(document, dict) else None
        if version is None:
            return None, None

        match = _PUBSPEC_VERSION_PATTERN.fullmatch(str(version).strip())
        if not match:
            raise DeclarationError(
                message=f"Malformed version {version!r}",
                source=str(self.pubspec),
                field_name="version",
            )
        return match.group("code"), match.group("name")

    def load(self, version_code: int | None = None, version_name: str | None = None) -> VersionInfo:
        """Resolve release metadata.

        Args:
            version_code: Explicit versionCode, wins over every file
            version_name: Explicit versionName, wins over every file

        Returns:
            The release metadata

        Raises:
            DeclarationError: If a versionCode found in a file is not an integer.
        """
        code: str | int | None = version_code
        name = version_name
        origin = {"versionCode": "explicit", "versionName": "explicit"}

        for label, lookup in (
            ("local.properties", self.from_local_properties),
            ("pubspec.yaml", self.from_pubspec),
        ):
            if code is not None and name is not None:
                break
            found_code, found_name = lookup()
            if code is None and found_code is not None:
                code, origin["versionCode"] = found_code, label
            if name is None and found_name is not None:
                name, origin["versionName"] = found_name, label

        if code is None:
            code, origin["versionCode"] = DEFAULT_VERSION_CODE, "default"
        if name is None:
            name, origin["versionName"] = DEFAULT_VERSION_NAME, "default"

        try:
            code = int(code)
        except ValueError as e:
            raise DeclarationError(
                message=f"versionCode must be an integer, got {code!r}",
                source=origin["versionCode"],
                field_name="versionCode",
                cause=e,
            )

        logger.debug("Release metadata loaded", version_code=code, version_name=name, origin=origin)
        return VersionInfo(version_code=code, version_name=name)
