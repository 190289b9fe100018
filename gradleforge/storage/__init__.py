"""Artifact storage for gradleforge."""

from .interface import ArtifactStore
from .local import LocalArtifactStore

__all__ = ["ArtifactStore", "LocalArtifactStore"]
