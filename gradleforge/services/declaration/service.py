"""
Declaration Loader Service.

Reads a build declaration from a JSON or YAML document, or from the app
module's build.gradle.kts, and validates its shape. Consistency rules are
left to the resolver; this layer only rejects input it cannot type.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from ...core.config import GradleScriptConfig
from ...core.exceptions import DeclarationError
from ...core.logging import get_logger
from ...models.build import Declaration
from ..gradle_script import GradleScriptReader

logger = get_logger(__name__)

JSON_SUFFIXES = {".json"}
YAML_SUFFIXES = {".yaml", ".yml"}
GRADLE_SUFFIXES = {".kts"}


def _unique_object(pairs: list[tuple[str, Any]]) -> dict[str, Any]:
    """json object hook that refuses a key repeated within one object."""
    obj: dict[str, Any] = {}
    for key, value in pairs:
        if key in obj:
            raise ValueError(f"duplicate key {key!r}")
        obj[key] = value
    return obj


class _UniqueKeyLoader(yaml.SafeLoader):
    """SafeLoader that refuses a key repeated within one mapping."""

    def construct_mapping(self, node: yaml.MappingNode, deep: bool = False) -> dict[Any, Any]:
        seen: set[Any] = set()
        for key_node, _ in node.value:
            if key_node.tag == "tag:yaml.org,2002:merge":
                continue
            key = self.construct_object(key_node, deep=deep)
            if key in seen:
                raise yaml.constructor.ConstructorError(
                    "while constructing a mapping",
                    node.start_mark,
                    f"found duplicate key {key!r}",
                    key_node.start_mark,
                )
            seen.add(key)
        return super().construct_mapping(node, deep=deep)


def parse_declaration(data: Any, source: str = "<declaration>") -> Declaration:
    """Validate a decoded document as a Declaration.

    Args:
        data: Decoded JSON/YAML document
        source: Name used in error messages

    Returns:
        The typed declaration

    Raises:
        DeclarationError: If the document is not a mapping or a field has the
            wrong type, is missing, or is unknown.
    """
    if not isinstance(data, dict):
        raise DeclarationError(
            message=f"expected a mapping, got {type(data).__name__}",
            source=source,
        )
    try:
        return Declaration.model_validate(data)
    except PydanticValidationError as e:
        first = e.errors()[0]
        raise DeclarationError(
            message=first["msg"],
            source=source,
            field_name=".".join(str(part) for part in first["loc"]),
            context={"error_count": e.error_count()},
            cause=e,
        )


def load_declaration(path: Path, gradle_config: GradleScriptConfig | None = None) -> Declaration:
    """Load a declaration file, choosing the format by file suffix.

    ``.json`` and ``.yaml``/``.yml`` documents use the camelCase field names;
    ``.kts`` files are read as Gradle Kotlin build scripts.

    Args:
        path: Declaration file
        gradle_config: Settings for reading build scripts

    Returns:
        The typed declaration

    Raises:
        DeclarationError: If the file cannot be read, decoded or typed.
    """
    suffix = path.suffix.lower()
    logger.debug("Loading declaration", path=str(path), format=suffix)

    if suffix in GRADLE_SUFFIXES:
        return GradleScriptReader(gradle_config).read_file(path)

    if suffix not in JSON_SUFFIXES | YAML_SUFFIXES:
        raise DeclarationError(
            message=f"Unsupported declaration format '{suffix or path.name}'",
            source=str(path),
            context={"supported": sorted(JSON_SUFFIXES | YAML_SUFFIXES | GRADLE_SUFFIXES)},
        )

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise DeclarationError(message=f"Cannot read declaration: {e}", source=str(path), cause=e)

    try:
        if suffix in JSON_SUFFIXES:
            data = json.loads(content, object_pairs_hook=_unique_object)
        else:
            data = yaml.load(content, Loader=_UniqueKeyLoader)
    except (ValueError, yaml.YAMLError) as e:
        raise DeclarationError(message=f"Malformed document: {e}", source=str(path), cause=e)

    return parse_declaration(data, source=str(path))


def dump_declaration(declaration: Declaration, fmt: str = "json") -> str:
    """Serialize a declaration in the document shape load_declaration reads.

    Args:
        declaration: Declaration to serialize
        fmt: "json" or "yaml"

    Returns:
        The serialized document
    """
    data = declaration.model_dump(mode="json", by_alias=True, exclude_none=True)
    if fmt == "yaml":
        return yaml.safe_dump(data, sort_keys=False)
    return json.dumps(data, indent=2)
