"""Command-line helpers for building and checking theme bundles."""

from __future__ import annotations

import argparse
import json
import logging
import shlex
import sys
import zipfile
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence

from theme_bundle.assemblers.worker import CommandBuildWorker
from theme_bundle.bundle.archive import PARSED_TEMPLATES_DIR
from theme_bundle.bundle.builder import build_bundle
from theme_bundle.bundle.manifest import load_manifest
from theme_bundle.context import BuildOptions, load_theme_context
from theme_bundle.errors import (
    BundleError,
    CycleDetectedError,
    ProducerTaskError,
    SizeLimitError,
    ThemeValidationError,
)
from theme_bundle.utils import compute_sha256, template_digest


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args)

    if args.command == "build":
        return _handle_build(args)
    if args.command == "manifest":
        if args.manifest_command == "validate":
            return _handle_manifest_validate(args)
        parser.error("manifest command requires a subcommand")

    parser.error(f"Unknown command '{args.command}'")
    return 1


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="theme-bundle", description="Theme bundling helpers.")
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("--quiet", action="store_true", help="Only log warnings and errors.")
    verbosity.add_argument("--verbose", action="store_true", help="Log debug detail.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    build = subparsers.add_parser("build", help="Bundle a theme into a zip archive.")
    build.add_argument("--theme-root", default=".")
    build.add_argument("--name", help="Archive name without the .zip extension.")
    build.add_argument("--dest", help="Output directory (defaults to the theme root).")
    build.add_argument("--marketplace", action="store_true", help="Apply marketplace validation rules.")
    build.add_argument("--build-command", help="Production build command run alongside parsing.")
    build.add_argument("--style-concurrency", type=int, help="Maximum style sources parsed at once.")

    manifest = subparsers.add_parser("manifest", help="Manifest utilities.")
    manifest_sub = manifest.add_subparsers(dest="manifest_command", required=True)
    manifest_validate = manifest_sub.add_parser("validate", help="Validate the manifest inside a bundle.")
    manifest_validate.add_argument("--archive", required=True)

    return parser


def _configure_logging(args: argparse.Namespace) -> None:
    level = logging.INFO
    if args.quiet:
        level = logging.WARNING
    elif args.verbose:
        level = logging.DEBUG
    logging.basicConfig(level=level, stream=sys.stderr, format="%(levelname)s %(name)s: %(message)s")


def _handle_build(args: argparse.Namespace) -> int:
    theme_root = Path(args.theme_root).resolve()
    options = BuildOptions(
        name=args.name,
        dest=Path(args.dest).resolve() if args.dest else None,
        marketplace=args.marketplace,
        style_concurrency=args.style_concurrency,
    )
    worker = (
        CommandBuildWorker(command=shlex.split(args.build_command), cwd=theme_root)
        if args.build_command
        else None
    )

    try:
        context = load_theme_context(theme_root, options, build_worker=worker)
        archive_path = build_bundle(context)
    except BundleError as exc:
        _print_json(_failure_payload(exc))
        return 1

    payload = {
        "status": "ok",
        "archive_path": str(archive_path),
        "size": archive_path.stat().st_size,
        "checksum": {"sha256": compute_sha256(archive_path)},
        "logs": [f"Archive written to {archive_path}"],
    }
    _print_json(payload)
    return 0


def _failure_payload(exc: BundleError) -> Dict[str, object]:
    payload: Dict[str, object] = {"status": "failed", "error": str(exc)}
    cause: BaseException = exc
    if isinstance(exc, ProducerTaskError):
        payload["task"] = exc.task
        cause = exc.cause
    if isinstance(cause, CycleDetectedError):
        payload["cycle"] = cause.cycle
    if isinstance(exc, ThemeValidationError):
        payload["errors"] = exc.errors
    if isinstance(exc, SizeLimitError):
        payload["archive_path"] = str(exc.archive_path)
        payload["offending_templates"] = exc.offending_templates
        payload["total_bytes"] = exc.total_bytes
    return payload


def _handle_manifest_validate(args: argparse.Namespace) -> int:
    archive_path = Path(args.archive).resolve()
    errors: List[str] = []
    manifest = None

    if not archive_path.is_file():
        errors.append(f"Archive not found: {archive_path}")
    else:
        try:
            with zipfile.ZipFile(archive_path) as archive:
                names = set(archive.namelist())
                manifest = load_manifest(archive.read("manifest.json"))
        except KeyError:
            errors.append("manifest.json missing from archive")
        except (zipfile.BadZipFile, ValueError) as exc:
            errors.append(str(exc))
        else:
            for template in manifest.templates:
                entry = f"{PARSED_TEMPLATES_DIR}/{template_digest(template)}.json"
                if entry not in names:
                    errors.append(f"Parsed template missing for '{template}': {entry}")

    valid = not errors
    payload = {
        "archive_path": str(archive_path),
        "valid": valid,
        "errors": errors,
        "manifest": manifest.model_dump(mode="json") if manifest else None,
    }
    _print_json(payload)
    return 0 if valid else 1


def _print_json(payload: Mapping[str, object]) -> None:
    print(json.dumps(payload, indent=2, default=str))
