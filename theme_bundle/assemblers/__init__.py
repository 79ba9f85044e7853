"""Collaborators that turn raw theme sources into structured data."""

from dataclasses import dataclass, field

from .config import FileThemeConfig, ThemeConfigProvider
from .lang import JsonLangAssembler, LangAssembler
from .regions import PageRegionExtractor, RegionExtractor, RegionMap
from .styles import ScssAssembler, StyleAssembler
from .templates import HandlebarsTemplateAssembler, ParsedTemplate, TemplateAssembler
from .validator import StencilThemeValidator, ThemeValidator
from .worker import BuildWorker, CommandBuildWorker


@dataclass(slots=True)
class Collaborators:
    """The set of assemblers a bundle run delegates parsing and checks to."""

    style_assembler: StyleAssembler = field(default_factory=ScssAssembler)
    template_assembler: TemplateAssembler = field(default_factory=HandlebarsTemplateAssembler)
    lang_assembler: LangAssembler = field(default_factory=JsonLangAssembler)
    validator: ThemeValidator = field(default_factory=StencilThemeValidator)
    region_extractor: RegionExtractor = field(default_factory=PageRegionExtractor)


__all__ = [
    "BuildWorker",
    "Collaborators",
    "CommandBuildWorker",
    "FileThemeConfig",
    "HandlebarsTemplateAssembler",
    "JsonLangAssembler",
    "LangAssembler",
    "PageRegionExtractor",
    "ParsedTemplate",
    "RegionExtractor",
    "RegionMap",
    "ScssAssembler",
    "StencilThemeValidator",
    "StyleAssembler",
    "TemplateAssembler",
    "ThemeConfigProvider",
    "ThemeValidator",
]
