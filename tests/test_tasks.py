from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

import pytest

from theme_bundle.assemblers import Collaborators
from theme_bundle.bundle.builder import PRODUCER_TASKS, BundleBuilder
from theme_bundle.bundle.tasks import TaskSpec, call_collaborator, run_producers, select_tasks, settle_all
from theme_bundle.context import ThemeContext, load_theme_context
from theme_bundle.errors import ProducerTaskError
from theme_bundle.schemas.theme import ThemeConfiguration


class _StaticConfig:
    def get_schema(self) -> list:
        return []

    def get_schema_translations(self) -> dict:
        return {}


class _Worker:
    def production(self) -> None:
        return None


def _context(tmp_path: Path, **config: Any) -> ThemeContext:
    return ThemeContext(
        theme_root=tmp_path,
        theme_config=_StaticConfig(),
        raw_config=ThemeConfiguration(**config),
    )


def test_style_task_requires_compiler(tmp_path: Path) -> None:
    names = [spec.name for spec in select_tasks(PRODUCER_TASKS, _context(tmp_path))]

    assert names == ["templates", "lang", "schema", "schemaTranslations"]


def test_all_tasks_selected_with_compiler_and_worker(tmp_path: Path) -> None:
    context = ThemeContext(
        theme_root=tmp_path,
        theme_config=_StaticConfig(),
        raw_config=ThemeConfiguration(css_compiler="scss"),
        build_worker=_Worker(),
    )

    builder = BundleBuilder(context)

    assert builder.task_names == ["css", "templates", "lang", "schema", "schemaTranslations", "theme"]


def test_task_membership_is_fixed_at_construction(theme_root: Path) -> None:
    context = load_theme_context(theme_root)
    builder = BundleBuilder(context)

    assert "css" in builder.task_names
    assert "theme" not in builder.task_names


def test_run_producers_returns_results_in_registry_order(tmp_path: Path) -> None:
    async def slow(context: ThemeContext, collaborators: Collaborators) -> str:
        await asyncio.sleep(0.02)
        return "slow"

    async def fast(context: ThemeContext, collaborators: Collaborators) -> str:
        return "fast"

    tasks = [TaskSpec("slow", slow), TaskSpec("fast", fast)]
    results = asyncio.run(run_producers(tasks, _context(tmp_path), Collaborators()))

    assert list(results) == ["slow", "fast"]
    assert results == {"slow": "slow", "fast": "fast"}


def test_failure_is_tagged_and_siblings_are_not_cancelled(tmp_path: Path) -> None:
    finished: list[str] = []

    async def broken(context: ThemeContext, collaborators: Collaborators) -> None:
        raise OSError("unreadable source")

    async def sibling(context: ThemeContext, collaborators: Collaborators) -> str:
        await asyncio.sleep(0.05)
        finished.append("sibling")
        return "done"

    tasks = [TaskSpec("css", broken), TaskSpec("lang", sibling)]
    with pytest.raises(ProducerTaskError) as excinfo:
        asyncio.run(run_producers(tasks, _context(tmp_path), Collaborators()))

    assert excinfo.value.task == "css"
    assert isinstance(excinfo.value.cause, OSError)
    assert isinstance(excinfo.value.__cause__, OSError)
    assert finished == ["sibling"]


def test_settle_all_raises_first_failure_to_surface() -> None:
    async def fail_later() -> None:
        await asyncio.sleep(0.05)
        raise ValueError("late")

    async def fail_first() -> None:
        await asyncio.sleep(0.01)
        raise KeyError("early")

    with pytest.raises(KeyError):
        asyncio.run(settle_all({"late": fail_later(), "early": fail_first()}))


def test_settle_all_with_nothing_to_run() -> None:
    assert asyncio.run(settle_all({})) == {}


def test_call_collaborator_accepts_sync_and_async_callables() -> None:
    def sync_double(value: int) -> int:
        return value * 2

    async def async_double(value: int) -> int:
        return value * 2

    async def run() -> tuple[int, int]:
        return await call_collaborator(sync_double, 2), await call_collaborator(async_double, 3)

    assert asyncio.run(run()) == (4, 6)
