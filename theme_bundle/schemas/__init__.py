"""Schema definitions for theme configuration and bundle manifests."""

from .theme import Region, ThemeConfiguration, ThemeManifest

__all__ = [
    "Region",
    "ThemeConfiguration",
    "ThemeManifest",
]
