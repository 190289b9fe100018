"""Declaration loading."""

from .service import dump_declaration, load_declaration, parse_declaration

__all__ = ["dump_declaration", "load_declaration", "parse_declaration"]
