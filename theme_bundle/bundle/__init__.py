"""Bundle assembly pipeline."""

from .builder import PRODUCER_TASKS, BundleBuilder, build_bundle
from .cycles import DependencyGraph, detect_cycles
from .manifest import build_manifest, list_template_paths, load_manifest

__all__ = [
    "PRODUCER_TASKS",
    "BundleBuilder",
    "DependencyGraph",
    "build_bundle",
    "build_manifest",
    "detect_cycles",
    "list_template_paths",
    "load_manifest",
]
