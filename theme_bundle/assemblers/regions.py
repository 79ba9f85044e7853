"""Region extraction for the bundle manifest."""

from __future__ import annotations

import re
from typing import Dict, List, Mapping, Protocol, Sequence

from .templates import ParsedTemplate

REGION_PATTERN = re.compile(r"""\{\{\{\s*region\s+name=["']([^"']+)["']\s*\}\}\}""")
PAGE_PREFIX = "pages/"

RegionMap = Dict[str, List[Dict[str, str]]]


class RegionExtractor(Protocol):
    def fetch_regions(
        self,
        templates: Mapping[str, ParsedTemplate],
        template_paths: Sequence[str],
    ) -> RegionMap: ...


class PageRegionExtractor:
    """Collects ``{{{region name="..."}}}`` declarations reachable from each page template."""

    def fetch_regions(
        self,
        templates: Mapping[str, ParsedTemplate],
        template_paths: Sequence[str],
    ) -> RegionMap:
        regions: RegionMap = {}
        for path in template_paths:
            if not path.startswith(PAGE_PREFIX) or path not in templates:
                continue
            names: List[str] = []
            for node in templates[path].walk():
                for name in REGION_PATTERN.findall(node.content):
                    if name not in names:
                        names.append(name)
            regions[path] = [{"name": name} for name in names]
        return regions
