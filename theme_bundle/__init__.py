"""Theme bundling: parse a theme's sources and package them into a size-checked zip."""

__version__ = "0.1.0"
from .bundle.builder import BundleBuilder, build_bundle
from .context import BuildOptions, ThemeContext, load_theme_context
from .errors import (
    BundleError,
    BundleIOError,
    CycleDetectedError,
    ObjectReferenceError,
    ProducerTaskError,
    SizeLimitError,
    ThemeValidationError,
)
from .schemas.theme import ThemeConfiguration, ThemeManifest

__all__ = [
    "__version__",
    "BuildOptions",
    "BundleBuilder",
    "BundleError",
    "BundleIOError",
    "CycleDetectedError",
    "ObjectReferenceError",
    "ProducerTaskError",
    "SizeLimitError",
    "ThemeConfiguration",
    "ThemeContext",
    "ThemeManifest",
    "ThemeValidationError",
    "build_bundle",
    "load_theme_context",
]
