"""Language file assembly."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Protocol

from ..utils import read_json


class LangAssembler(Protocol):
    def assemble(self, theme_root: Path) -> Any: ...


class JsonLangAssembler:
    """Merges ``lang/<locale>.json`` files into one ``{locale: document}`` mapping."""

    def assemble(self, theme_root: Path) -> Dict[str, Any]:
        lang_dir = Path(theme_root) / "lang"
        if not lang_dir.is_dir():
            raise FileNotFoundError(f"Language directory not found: {lang_dir}")

        translations: Dict[str, Any] = {}
        for path in sorted(lang_dir.glob("*.json")):
            translations[path.stem.lower()] = read_json(path)
        return translations
