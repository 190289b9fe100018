"""
Filesystem-backed artifact store.

Each artifact ``<key>`` is written under the output directory together with
``<key>.meta.json`` holding its content hash, length and write time.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, TypeVar

import aiofiles
from pydantic import BaseModel

from ..core.logging import get_logger
from .interface import ArtifactStore

logger = get_logger(__name__)

M = TypeVar("M", bound=BaseModel)

METADATA_SUFFIX = ".meta.json"


class LocalArtifactStore(ArtifactStore):
    """Writes artifacts into an output directory."""

    def __init__(self, base_path: Path, indent: int = 2) -> None:
        """
        Args:
            base_path: Output directory, created on first write
            indent: JSON indentation for stored models; 0 writes compact JSON
        """
        self.base_path = base_path.resolve()
        self.indent = indent

    def _path_for(self, key: str) -> Path:
        """Map a key into the output directory.

        ``..`` and ``.`` segments and drive separators are dropped. A key that
        still lands outside the directory (through a symlink) is flattened
        into one file name.
        """
        segments = key.replace(":", "").replace("\\", "/").split("/")
        parts = [part for part in segments if part not in ("", ".", "..")]
        path = self.base_path.joinpath(*parts).resolve()
        if not path.is_relative_to(self.base_path):
            path = self.base_path / "_".join(parts)
        return path

    async def _write(self, path: Path, content: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        async with aiofiles.open(path, "w", encoding="utf-8") as f:
            await f.write(content)

    async def _read(self, path: Path) -> str:
        async with aiofiles.open(path, "r", encoding="utf-8") as f:
            return await f.read()

    async def store_text(self, key: str, content: str, metadata: dict[str, Any] | None = None) -> str:
        path = self._path_for(key)
        await self._write(path, content)

        record = {
            **(metadata or {}),
            "size_chars": len(content),
            "hash": self.compute_hash(content.encode("utf-8")),
            "_stored_at": datetime.now(timezone.utc).isoformat(),
            "_key": key,
        }
        await self._write(self._path_for(key + METADATA_SUFFIX), json.dumps(record, indent=2, default=str))

        logger.debug("Stored artifact", key=key, path=str(path), hash=record["hash"][:12])
        return key

    async def store_model(self, key: str, model: BaseModel, metadata: dict[str, Any] | None = None) -> str:
        content = model.model_dump_json(by_alias=True, indent=self.indent or None)
        return await self.store_text(key, content, {**(metadata or {}), "model_type": type(model).__name__})

    async def load_text(self, key: str) -> str:
        path = self._path_for(key)
        if not path.is_file():
            raise FileNotFoundError(f"No artifact stored under {key!r}")
        return await self._read(path)

    async def load_model(self, key: str, model_type: type[M]) -> M:
        return model_type.model_validate_json(await self.load_text(key))

    async def exists(self, key: str) -> bool:
        return self._path_for(key).is_file()

    async def list_keys(self, prefix: str = "") -> list[str]:
        root = self._path_for(prefix) if prefix else self.base_path
        if not root.exists():
            return []
        return sorted(
            path.relative_to(self.base_path).as_posix()
            for path in root.rglob("*")
            if path.is_file() and not path.name.endswith(METADATA_SUFFIX)
        )

    async def get_metadata(self, key: str) -> dict[str, Any]:
        meta_path = self._path_for(key + METADATA_SUFFIX)
        if not meta_path.is_file():
            return {}
        return json.loads(await self._read(meta_path))

    def get_local_path(self, key: str) -> Path | None:
        path = self._path_for(key)
        return path if path.is_file() else None
