"""Configuration resolver."""

from .service import ConfigResolver, ResolverService, resolve

__all__ = ["ConfigResolver", "ResolverService", "resolve"]
