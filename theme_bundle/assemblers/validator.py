"""Theme structure and template object checks."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, List, Mapping, Protocol, Set

from ..errors import ObjectReferenceError, ThemeValidationError
from .templates import ParsedTemplate

if TYPE_CHECKING:
    from ..context import ThemeContext

logger = logging.getLogger(__name__)

REQUIRED_FILES = ("config.json", "schema.json")
REQUIRED_OBJECTS = ("head.scripts", "footer.scripts")
OBJECT_PATTERN = re.compile(r"\{\{\{?~?\s*([A-Za-z_][\w]*(?:\.[\w]+)+)\s*~?\}?\}\}")


class ThemeValidator(Protocol):
    def validate_theme(self, context: "ThemeContext") -> None: ...

    def validate_objects(self, templates: Mapping[str, ParsedTemplate]) -> None: ...


class StencilThemeValidator:
    """Checks required files before parsing and object references after it.

    Marketplace builds additionally require theme identity and a composed
    preview image under ``meta/``.
    """

    def validate_theme(self, context: "ThemeContext") -> None:
        root = context.theme_root
        errors: List[str] = []
        for name in REQUIRED_FILES:
            if not (root / name).is_file():
                errors.append(f"missing required file {name}")
        if not context.templates_root.is_dir():
            errors.append("missing templates directory")

        if context.options.marketplace:
            config = context.raw_config
            if not config.name:
                errors.append("config.json must define 'name'")
            if not config.version:
                errors.append("config.json must define 'version'")
            image = config.meta.get("composed_image")
            if not image:
                errors.append("config.json must define 'meta.composed_image'")
            elif not (root / "meta" / str(image)).is_file():
                errors.append(f"composed image not found: meta/{image}")

        if errors:
            raise ThemeValidationError("Theme validation failed: " + "; ".join(errors), errors=errors)

    def validate_objects(self, templates: Mapping[str, ParsedTemplate]) -> None:
        problems: List[str] = []
        found: Set[str] = set()
        for path in templates:
            for node in templates[path].walk():
                found.update(OBJECT_PATTERN.findall(node.content))
                for include in node.includes:
                    if include not in templates:
                        problem = f"{node.path} includes missing partial '{include}'"
                        if problem not in problems:
                            problems.append(problem)

        for name in REQUIRED_OBJECTS:
            if name not in found:
                problems.append(f"missing required object '{name}'")

        if problems:
            for problem in problems:
                logger.error("error %s", problem)
            raise ObjectReferenceError("Template object check failed: " + "; ".join(problems), problems=problems)
