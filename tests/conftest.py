from __future__ import annotations

import json
from pathlib import Path
from typing import Callable, Mapping, Optional, Union

import pytest

FileContent = Union[str, bytes]

BASE_TEMPLATES: dict[str, str] = {
    "layout/base": "<html><head>{{{head.scripts}}}</head><body>{{{block 'page'}}}{{{footer.scripts}}}</body></html>",
    "pages/home": (
        '{{#> layout/base}}{{{region name="home_below_menu"}}}'
        "{{> components/card}}{{/layout/base}}"
    ),
    "components/card": '<div class="card">{{> components/price}}{{{region name="card_footer"}}}</div>',
    "components/price": "<span>{{price.value}}</span>",
}

BASE_CONFIG: dict[str, object] = {
    "name": "Cornerstone",
    "version": "1.0.0",
    "css_compiler": "scss",
    "meta": {"composed_image": "composed.png"},
}


def write_files(root: Path, files: Mapping[str, FileContent]) -> None:
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")


@pytest.fixture
def make_theme(tmp_path: Path) -> Callable[..., Path]:
    def _make(
        name: str = "theme",
        *,
        config: Optional[Mapping[str, object]] = None,
        templates: Optional[Mapping[str, str]] = None,
        files: Optional[Mapping[str, FileContent]] = None,
    ) -> Path:
        root = tmp_path / name
        root.mkdir(parents=True)
        write_files(
            root,
            {
                "config.json": json.dumps(BASE_CONFIG if config is None else config),
                "schema.json": json.dumps([{"name": "Colors", "settings": []}]),
                "schemaTranslations.json": json.dumps({"i18n.Colors": {"default": "Colors"}}),
                "lang/en.json": json.dumps({"header": {"welcome": "Welcome"}}),
                "lang/fr.json": json.dumps({"header": {"welcome": "Bienvenue"}}),
                "assets/scss/theme.scss": '@import "settings";\nbody { color: $primary; }\n',
                "assets/scss/_settings.scss": "$primary: #333;\n",
                "assets/js/app.js": "console.log('app');\n",
                "assets/js/app.js.map": "{}",
                "assets/cdn/vendor.js": "// cdn\n",
                "meta/composed.png": b"\x89PNG\r\n",
                "README.md": "# Theme\n",
                "package.json": "{}",
                "notes.txt": "not bundled\n",
                "node_modules/lib/index.js": "module.exports = {};\n",
            },
        )
        write_files(
            root,
            {
                f"templates/{path}.html": content
                for path, content in (BASE_TEMPLATES if templates is None else templates).items()
            },
        )
        if files:
            write_files(root, files)
        return root

    return _make


@pytest.fixture
def theme_root(make_theme: Callable[..., Path]) -> Path:
    return make_theme()
