"""Services package for gradleforge."""

from .declaration import load_declaration, parse_declaration
from .gradle_script import GradleScriptReader
from .release_metadata import ReleaseMetadataProvider
from .renderer import BuildScriptRenderer
from .resolver import ConfigResolver, ResolverService, resolve

__all__ = [
    "load_declaration",
    "parse_declaration",
    "GradleScriptReader",
    "ReleaseMetadataProvider",
    "BuildScriptRenderer",
    "ConfigResolver",
    "ResolverService",
    "resolve",
]
