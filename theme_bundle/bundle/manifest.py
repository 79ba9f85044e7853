"""Manifest helpers for bundle assembly."""

from __future__ import annotations

import json
from pathlib import Path
from typing import List, Mapping, Sequence

from ..assemblers.regions import RegionExtractor
from ..assemblers.templates import TEMPLATE_SUFFIX, ParsedTemplate
from ..errors import BundleIOError
from ..schemas.theme import ThemeManifest


def list_template_paths(templates_root: Path) -> List[str]:
    """Return every ``.html`` file under ``templates_root`` as a unix path without extension."""

    root = Path(templates_root)
    if not root.is_dir():
        raise BundleIOError(f"Templates directory not found: {root}")
    try:
        return sorted(
            path.relative_to(root).as_posix()[: -len(TEMPLATE_SUFFIX)]
            for path in root.rglob(f"*{TEMPLATE_SUFFIX}")
            if path.is_file()
        )
    except OSError as exc:
        raise BundleIOError(f"Unable to list templates in {root}: {exc}") from exc


def build_manifest(
    templates: Mapping[str, ParsedTemplate],
    template_paths: Sequence[str],
    region_extractor: RegionExtractor,
) -> ThemeManifest:
    regions = region_extractor.fetch_regions(templates, template_paths)
    return ThemeManifest.model_validate({"regions": regions, "templates": list(template_paths)})


def load_manifest(payload: bytes | str) -> ThemeManifest:
    """Parse a ``manifest.json`` document."""

    return ThemeManifest.model_validate(json.loads(payload))
