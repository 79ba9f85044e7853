"""Immutable inputs shared by every stage of a bundle run."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from pydantic import ValidationError

from .assemblers.config import FileThemeConfig, ThemeConfigProvider
from .errors import ThemeValidationError
from .utils import read_json
from .schemas.theme import ThemeConfiguration

if TYPE_CHECKING:
    from .assemblers.worker import BuildWorker

CONFIG_FILE = "config.json"
DEFAULT_BUNDLE_NAME = "Theme.zip"


@dataclass(frozen=True, slots=True)
class BuildOptions:
    """Caller-supplied options for one bundle run."""

    name: Optional[str] = None
    dest: Optional[Path] = None
    marketplace: bool = False
    style_concurrency: Optional[int] = None


@dataclass(frozen=True, slots=True)
class ThemeContext:
    theme_root: Path
    theme_config: ThemeConfigProvider
    raw_config: ThemeConfiguration
    options: BuildOptions = field(default_factory=BuildOptions)
    build_worker: Optional["BuildWorker"] = None

    @property
    def templates_root(self) -> Path:
        return self.theme_root / "templates"

    @property
    def bundle_name(self) -> str:
        if self.options.name is not None:
            return f"{self.options.name}.zip"
        if self.raw_config.name and self.raw_config.version:
            return f"{self.raw_config.name}-{self.raw_config.version}.zip"
        return DEFAULT_BUNDLE_NAME

    @property
    def bundle_path(self) -> Path:
        output_dir = self.options.dest if self.options.dest is not None else self.theme_root
        return (Path(output_dir) / self.bundle_name).resolve()


def load_theme_context(
    theme_root: Path,
    options: Optional[BuildOptions] = None,
    *,
    build_worker: Optional["BuildWorker"] = None,
) -> ThemeContext:
    """Read ``config.json`` from ``theme_root`` and build the run context."""

    root = Path(theme_root).resolve()
    config_path = root / CONFIG_FILE
    if not config_path.is_file():
        raise ThemeValidationError(f"Theme config not found: {config_path}", errors=[f"missing {CONFIG_FILE}"])
    try:
        raw_config = ThemeConfiguration.model_validate(read_json(config_path))
    except (ValueError, ValidationError) as exc:
        raise ThemeValidationError(f"Invalid theme config {config_path}: {exc}", errors=[str(exc)]) from exc

    return ThemeContext(
        theme_root=root,
        theme_config=FileThemeConfig(root),
        raw_config=raw_config,
        options=options or BuildOptions(),
        build_worker=build_worker,
    )
