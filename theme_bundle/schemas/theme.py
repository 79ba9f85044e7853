"""Pydantic models describing theme configuration and bundle metadata."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class ThemeConfiguration(BaseModel):
    """Raw contents of a theme's ``config.json``."""

    name: Optional[str] = None
    version: Optional[Union[str, int, float]] = None
    css_compiler: Optional[str] = Field(default=None, description="Style compiler id, e.g. 'scss'.")
    meta: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(extra="allow", frozen=True)


class Region(BaseModel):
    name: str

    model_config = ConfigDict(extra="forbid")


class ThemeManifest(BaseModel):
    regions: Dict[str, List[Region]] = Field(default_factory=dict)
    templates: List[str] = Field(default_factory=list, description="Template paths, unix style, extension stripped.")

    model_config = ConfigDict(extra="forbid")
