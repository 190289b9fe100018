"""Release metadata provider."""

from .service import ReleaseMetadataProvider, read_properties

__all__ = ["ReleaseMetadataProvider", "read_properties"]
