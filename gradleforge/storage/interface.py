"""
Artifact store interface.

A store holds the outputs of a resolution run (``build-config.json`` and the
rendered ``build.gradle.kts``) under string keys, next to a small metadata
record per artifact.
"""

from __future__ import annotations

import hashlib
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, TypeVar

from pydantic import BaseModel

from ..core.types import Hash

M = TypeVar("M", bound=BaseModel)


class ArtifactStore(ABC):
    """Where resolved build artifacts are kept for the build tool."""

    @abstractmethod
    async def store_text(self, key: str, content: str, metadata: dict[str, Any] | None = None) -> str:
        """Write an artifact.

        Args:
            key: Relative artifact name, e.g. ``build.gradle.kts``
            content: Artifact text
            metadata: Extra fields recorded alongside the content hash

        Returns:
            The key the artifact was written under
        """

    @abstractmethod
    async def store_model(self, key: str, model: BaseModel, metadata: dict[str, Any] | None = None) -> str:
        """Write a model as camelCase JSON."""

    @abstractmethod
    async def load_text(self, key: str) -> str:
        """Read an artifact back; raises FileNotFoundError for unknown keys."""

    @abstractmethod
    async def load_model(self, key: str, model_type: type[M]) -> M:
        ...

    @abstractmethod
    async def exists(self, key: str) -> bool:
        ...

    @abstractmethod
    async def list_keys(self, prefix: str = "") -> list[str]:
        """Artifact keys under ``prefix``, sorted, without metadata records."""

    @abstractmethod
    async def get_metadata(self, key: str) -> dict[str, Any]:
        ...

    @abstractmethod
    def get_local_path(self, key: str) -> Path | None:
        """Path of a written artifact on disk, or None if it was never written."""

    @staticmethod
    def compute_hash(data: bytes) -> Hash:
        return hashlib.sha256(data).hexdigest()
