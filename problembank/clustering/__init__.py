"""Problem clustering."""

from .builder import ClusterBuilder, slugify, theme_slug

__all__ = ["ClusterBuilder", "slugify", "theme_slug"]
