"""Theme configuration provider backed by JSON files in the theme root."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Protocol

from ..utils import read_json


class ThemeConfigProvider(Protocol):
    def get_schema(self) -> Any: ...

    def get_schema_translations(self) -> Any: ...


class FileThemeConfig:
    """Reads ``schema.json`` and ``schemaTranslations.json`` on demand."""

    SCHEMA_FILE = "schema.json"
    SCHEMA_TRANSLATIONS_FILE = "schemaTranslations.json"

    def __init__(self, theme_root: Path) -> None:
        self.theme_root = Path(theme_root)

    def get_schema(self) -> Any:
        path = self.theme_root / self.SCHEMA_FILE
        if not path.exists():
            return []
        return read_json(path)

    def get_schema_translations(self) -> Any:
        path = self.theme_root / self.SCHEMA_TRANSLATIONS_FILE
        if not path.exists():
            return {}
        return read_json(path)
