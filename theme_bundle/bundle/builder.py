"""Bundle assembly orchestration."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence

from ..assemblers import Collaborators
from ..assemblers.templates import ParsedTemplate
from ..context import ThemeContext
from ..errors import BundleError, ThemeValidationError
from ..schemas.theme import ThemeManifest
from .archive import SizeReport, collect_theme_files, generated_entries, write_archive
from .cycles import detect_cycles
from .manifest import build_manifest, list_template_paths
from .tasks import TaskSpec, call_collaborator, run_producers, select_tasks, settle_all

logger = logging.getLogger(__name__)

STYLE_OPTIONS = {"bundle": True}


async def assemble_styles(context: ThemeContext, collaborators: Collaborators) -> Dict[str, Any]:
    compiler = context.raw_config.css_compiler or ""
    base_path = context.theme_root / "assets" / compiler
    logger.info("%s Parsing Started...", compiler.upper())

    suffix = f".{compiler}"
    files = sorted(path.name for path in base_path.iterdir() if path.is_file() and path.name.endswith(suffix))

    limit = context.options.style_concurrency
    semaphore = asyncio.Semaphore(limit) if limit else None

    async def parse(filename: str) -> Any:
        assemble = collaborators.style_assembler.assemble
        if semaphore is None:
            return await call_collaborator(assemble, filename, base_path, compiler, STYLE_OPTIONS)
        async with semaphore:
            return await call_collaborator(assemble, filename, base_path, compiler, STYLE_OPTIONS)

    results = await settle_all({filename: parse(filename) for filename in files})
    logger.info("ok -- %s Parsing Finished", compiler.upper())
    return results


async def assemble_templates(context: ThemeContext, collaborators: Collaborators) -> Dict[str, ParsedTemplate]:
    logger.info("Template Parsing Started...")
    templates_root = context.templates_root
    names = await asyncio.to_thread(list_template_paths, templates_root)

    assemble = collaborators.template_assembler.assemble
    results = await settle_all({name: call_collaborator(assemble, templates_root, name) for name in names})

    await settle_all(
        {
            "objects": call_collaborator(collaborators.validator.validate_objects, results),
            "cycles": call_collaborator(detect_cycles, results),
        }
    )
    logger.info("ok -- Template Parsing Finished")
    return results


async def assemble_lang(context: ThemeContext, collaborators: Collaborators) -> Any:
    logger.info("Language Files Parsing Started...")
    results = await call_collaborator(collaborators.lang_assembler.assemble, context.theme_root)
    logger.info("ok -- Language Files Parsing Finished")
    return results


async def assemble_schema(context: ThemeContext, collaborators: Collaborators) -> Any:
    logger.info("Building Theme Schema File...")
    schema = await call_collaborator(context.theme_config.get_schema)
    logger.info("ok -- Theme Schema Building Finished")
    return schema


async def assemble_schema_translations(context: ThemeContext, collaborators: Collaborators) -> Any:
    logger.info("Schema Translations Parsing Started...")
    translations = await call_collaborator(context.theme_config.get_schema_translations)
    logger.info("ok -- Schema Translations Parsing Finished")
    return translations


async def run_theme_build(context: ThemeContext, collaborators: Collaborators) -> None:
    await call_collaborator(context.build_worker.production)


PRODUCER_TASKS: Sequence[TaskSpec] = (
    TaskSpec("css", assemble_styles, lambda context: bool(context.raw_config.css_compiler)),
    TaskSpec("templates", assemble_templates),
    TaskSpec("lang", assemble_lang),
    TaskSpec("schema", assemble_schema),
    TaskSpec("schemaTranslations", assemble_schema_translations),
    TaskSpec("theme", run_theme_build, lambda context: context.build_worker is not None),
)


class BundleBuilder:
    """Coordinates theme validation, producer tasks and archive creation."""

    def __init__(
        self,
        context: ThemeContext,
        *,
        collaborators: Optional[Collaborators] = None,
        tasks: Sequence[TaskSpec] = PRODUCER_TASKS,
    ) -> None:
        self.context = context
        self.collaborators = collaborators or Collaborators()
        self.tasks = select_tasks(tasks, context)

    @property
    def task_names(self) -> list[str]:
        return [spec.name for spec in self.tasks]

    async def build(self) -> Path:
        """Build the bundle and return the absolute archive path."""

        try:
            await self.validate()
            results = await run_producers(self.tasks, self.context, self.collaborators)
            manifest = await self.generate_manifest(results)
            return await self.write_bundle(results, manifest)
        except BundleError as exc:
            logger.error("failed -- %s", exc)
            raise

    async def validate(self) -> None:
        logger.info("Validating theme...")
        try:
            await call_collaborator(self.collaborators.validator.validate_theme, self.context)
        except ThemeValidationError:
            raise
        except Exception as exc:
            raise ThemeValidationError(f"Theme validation failed: {exc}", errors=[str(exc)]) from exc

    async def generate_manifest(self, results: Mapping[str, Any]) -> ThemeManifest:
        logger.info("Generating Manifest Started...")
        template_paths = await asyncio.to_thread(list_template_paths, self.context.templates_root)
        manifest = await call_collaborator(
            build_manifest,
            results.get("templates", {}),
            template_paths,
            self.collaborators.region_extractor,
        )
        logger.info("ok -- Manifest Generation Finished")
        return manifest

    async def write_bundle(self, results: Mapping[str, Any], manifest: ThemeManifest) -> Path:
        archive_path = self.context.bundle_path
        logger.info("Zipping Files Started...")

        raw_entries = await asyncio.to_thread(collect_theme_files, self.context.theme_root)
        entries, offending = generated_entries({**results, "manifest": manifest})
        total_bytes = await asyncio.to_thread(write_archive, archive_path, [*raw_entries, *entries])

        SizeReport(offending_templates=offending, total_bytes=total_bytes).enforce(archive_path)
        logger.info("ok -- Zipping Files Finished")
        return archive_path


def build_bundle(context: ThemeContext, *, collaborators: Optional[Collaborators] = None) -> Path:
    """Blocking entry point: build the bundle for ``context`` on a fresh event loop."""

    return asyncio.run(BundleBuilder(context, collaborators=collaborators).build())
