from __future__ import annotations

import json
from pathlib import Path

import pytest

from theme_bundle.assemblers import (
    CommandBuildWorker,
    FileThemeConfig,
    HandlebarsTemplateAssembler,
    JsonLangAssembler,
    ScssAssembler,
    StencilThemeValidator,
)
from theme_bundle.assemblers.templates import find_partials
from theme_bundle.context import BuildOptions, load_theme_context
from theme_bundle.errors import ObjectReferenceError, ThemeValidationError

from .conftest import write_files


def test_find_partials_in_first_use_order() -> None:
    content = "{{#> layout/base}}{{> components/a}}{{~> components/b}}{{> components/a}}{{/layout/base}}"

    assert find_partials(content) == ["layout/base", "components/a", "components/b"]


def test_template_assembler_expands_nested_partials(theme_root: Path) -> None:
    parsed = HandlebarsTemplateAssembler().assemble(theme_root / "templates", "pages/home")

    assert parsed.includes == ["layout/base", "components/card"]
    card = parsed.partials["components/card"]
    assert card.includes == ["components/price"]
    assert "components/price" in card.partials
    assert list(parsed.to_payload()) == ["pages/home", "layout/base", "components/card", "components/price"]


def test_template_assembler_keeps_loop_and_dangling_references_unexpanded(tmp_path: Path) -> None:
    write_files(
        tmp_path,
        {
            "templates/a.html": "{{> b}}{{> missing}}",
            "templates/b.html": "{{> a}}",
        },
    )

    parsed = HandlebarsTemplateAssembler().assemble(tmp_path / "templates", "a")

    assert parsed.includes == ["b", "missing"]
    assert list(parsed.partials) == ["b"]
    assert parsed.partials["b"].includes == ["a"]
    assert parsed.partials["b"].partials == {}


def test_template_assembler_missing_template(tmp_path: Path) -> None:
    (tmp_path / "templates").mkdir()

    with pytest.raises(FileNotFoundError):
        HandlebarsTemplateAssembler().assemble(tmp_path / "templates", "pages/home")


def test_scss_assembler_follows_imports(tmp_path: Path) -> None:
    write_files(
        tmp_path,
        {
            "theme.scss": '@import "settings", "components/buttons";\n@import "https://fonts.example/x";\nbody {}\n',
            "_settings.scss": "$a: 1;\n",
            "components/_buttons.scss": '@import "mixins";\n',
            "components/mixins.scss": "@mixin m {}\n",
        },
    )

    tree = ScssAssembler().assemble("theme.scss", tmp_path, "scss", {"bundle": True})

    assert tree["entry"] == "theme.scss"
    assert list(tree["files"]) == [
        "theme.scss",
        "_settings.scss",
        "components/_buttons.scss",
        "components/mixins.scss",
    ]
    assert tree["unresolved"] == ["https://fonts.example/x"]


def test_scss_assembler_without_bundle_option(tmp_path: Path) -> None:
    write_files(tmp_path, {"theme.scss": '@import "settings";\n', "_settings.scss": ""})

    tree = ScssAssembler().assemble("theme.scss", tmp_path, "scss", {})

    assert list(tree["files"]) == ["theme.scss"]


def test_lang_assembler_merges_locales(theme_root: Path) -> None:
    write_files(theme_root, {"lang/pt-BR.json": json.dumps({"hello": "Olá"})})

    translations = JsonLangAssembler().assemble(theme_root)

    assert list(translations) == ["en", "fr", "pt-br"]
    assert translations["pt-br"] == {"hello": "Olá"}


def test_lang_assembler_rejects_malformed_json(theme_root: Path) -> None:
    write_files(theme_root, {"lang/de.json": "{not json"})

    with pytest.raises(ValueError, match="de.json"):
        JsonLangAssembler().assemble(theme_root)


def test_file_theme_config_defaults(tmp_path: Path) -> None:
    config = FileThemeConfig(tmp_path)

    assert config.get_schema() == []
    assert config.get_schema_translations() == {}


def test_validator_accepts_sample_theme(theme_root: Path) -> None:
    context = load_theme_context(theme_root, BuildOptions(marketplace=True))

    StencilThemeValidator().validate_theme(context)


def test_validator_reports_missing_structure(theme_root: Path) -> None:
    (theme_root / "schema.json").unlink()
    (theme_root / "meta" / "composed.png").unlink()
    context = load_theme_context(theme_root, BuildOptions(marketplace=True))

    with pytest.raises(ThemeValidationError) as excinfo:
        StencilThemeValidator().validate_theme(context)

    assert excinfo.value.errors == [
        "missing required file schema.json",
        "composed image not found: meta/composed.png",
    ]


def test_marketplace_rules_only_apply_when_requested(make_theme) -> None:
    root = make_theme(config={"css_compiler": "scss"})

    StencilThemeValidator().validate_theme(load_theme_context(root))
    with pytest.raises(ThemeValidationError):
        StencilThemeValidator().validate_theme(load_theme_context(root, BuildOptions(marketplace=True)))


def test_object_check_reports_dangling_partials_and_required_objects(tmp_path: Path) -> None:
    write_files(tmp_path, {"templates/pages/home.html": "{{> components/missing}}{{{head.scripts}}}"})
    parsed = HandlebarsTemplateAssembler().assemble(tmp_path / "templates", "pages/home")

    with pytest.raises(ObjectReferenceError) as excinfo:
        StencilThemeValidator().validate_objects({"pages/home": parsed})

    assert excinfo.value.problems == [
        "pages/home includes missing partial 'components/missing'",
        "missing required object 'footer.scripts'",
    ]


def test_command_build_worker_raises_on_failure(tmp_path: Path) -> None:
    worker = CommandBuildWorker(command=["sh", "-c", "echo broken >&2; exit 3"], cwd=tmp_path)

    with pytest.raises(RuntimeError, match="exit 3"):
        worker.production()


def test_template_assembler_shares_partials_reached_along_several_chains(tmp_path: Path) -> None:
    depth = 18
    files = {}
    for level in range(depth):
        for side in "ab":
            if level + 1 < depth:
                content = f"{{{{> l{level + 1}a}}}}{{{{> l{level + 1}b}}}}"
            else:
                content = f"<p>{side}</p>"
            files[f"templates/l{level}{side}.html"] = content
    write_files(tmp_path, files)

    parsed = HandlebarsTemplateAssembler().assemble(tmp_path / "templates", "l0a")

    nodes = list(parsed.walk())
    assert len(nodes) == 1 + 2 * (depth - 1)
    assert len({node.path for node in nodes}) == len(nodes)
    assert parsed.partials["l1a"].partials["l2b"] is parsed.partials["l1b"].partials["l2b"]
    assert len(parsed.to_payload()) == len(nodes)
