"""Archive layout, writing and post-write size policy."""

from __future__ import annotations

import logging
import re
import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple

from ..errors import BundleIOError, SizeLimitError
from ..utils import encode_json, serialized_size, template_digest

logger = logging.getLogger(__name__)

MEGABYTE = 1024 * 1024
MAX_TEMPLATE_BYTES = MEGABYTE
MAX_BUNDLE_BYTES = 50 * MEGABYTE


@dataclass(frozen=True, slots=True)
class IncludePattern:
    pattern: str
    ignore: Tuple[str, ...] = ()


PATHS_TO_ZIP: Tuple[IncludePattern, ...] = (
    IncludePattern("assets/**/*", ignore=("assets/cdn/**", "assets/**/*.js.map")),
    IncludePattern("CHANGELOG.md"),
    IncludePattern("config.json"),
    IncludePattern(".eslintrc"),
    IncludePattern(".eslintignore"),
    IncludePattern("Gruntfile.js"),
    IncludePattern("karma.conf.js"),
    IncludePattern("lang/*"),
    IncludePattern("meta/**/*"),
    IncludePattern("package.json"),
    IncludePattern("README.md"),
    IncludePattern(".scss-lint.yml"),
    IncludePattern("stencil.conf.js"),
    IncludePattern("templates/**/*"),
    IncludePattern("webpack.*.js"),
)

PARSED_SCSS_DIR = "parsed/scss"
PARSED_TEMPLATES_DIR = "parsed/templates"
GENERATED_PATHS = {
    "lang": "parsed/lang.json",
    "schema": "schema.json",
    "schemaTranslations": "schemaTranslations.json",
    "manifest": "manifest.json",
}


@dataclass(slots=True)
class ArchiveEntry:
    """One archive member: a file copied from the theme or generated bytes."""

    name: str
    source: Optional[Path] = None
    data: Optional[bytes] = None


@dataclass(slots=True)
class SizeReport:
    offending_templates: List[str] = field(default_factory=list)
    total_bytes: int = 0

    def enforce(self, archive_path: Path, *, max_bundle_bytes: Optional[int] = None) -> None:
        """Raise :class:`SizeLimitError` if the written archive breaks a limit."""

        limit = MAX_BUNDLE_BYTES if max_bundle_bytes is None else max_bundle_bytes
        if self.offending_templates:
            listing = "\n".join(self.offending_templates)
            raise SizeLimitError(
                "Your bundle failed as templates generated from the files below are greater than "
                f"or equal to 1 megabyte in size:\n{listing}",
                archive_path=archive_path,
                offending_templates=self.offending_templates,
                total_bytes=self.total_bytes,
            )
        if self.total_bytes > limit:
            raise SizeLimitError(
                f"Your bundle of size {self.total_bytes} bytes is above the max size of {limit} bytes",
                archive_path=archive_path,
                total_bytes=self.total_bytes,
            )


def compile_glob(pattern: str) -> re.Pattern[str]:
    """Translate a theme glob into a regex over posix relative paths.

    ``**/`` spans zero or more directories, ``*`` and ``?`` stay inside one
    segment, and wildcards never match a segment that starts with a dot.
    """

    regex = ""
    index = 0
    segment_start = True
    while index < len(pattern):
        char = pattern[index]
        if pattern.startswith("**/", index):
            regex += r"(?:(?!\.)[^/]*/)*"
            index += 3
            segment_start = True
            continue
        if pattern.startswith("**", index):
            regex += r"(?!\.).*" if segment_start else ".*"
            index += 2
            segment_start = False
            continue
        if char == "*":
            regex += r"(?!\.)[^/]*" if segment_start else "[^/]*"
        elif char == "?":
            regex += r"(?!\.)[^/]" if segment_start else "[^/]"
        else:
            regex += re.escape(char)
        segment_start = char == "/"
        index += 1
    return re.compile(regex + r"\Z")


def collect_theme_files(
    theme_root: Path,
    patterns: Sequence[IncludePattern] = PATHS_TO_ZIP,
) -> List[ArchiveEntry]:
    """Select raw theme files for the archive, in pattern order."""

    root = Path(theme_root)
    try:
        candidates = sorted(_candidate_files(root, patterns))
    except OSError as exc:
        raise BundleIOError(f"Unable to list theme files in {root}: {exc}") from exc

    entries: List[ArchiveEntry] = []
    selected = set()
    for spec in patterns:
        include = compile_glob(spec.pattern)
        ignores = [compile_glob(ignore) for ignore in spec.ignore]
        for name in candidates:
            if name in selected or not include.match(name):
                continue
            if any(ignore.match(name) for ignore in ignores):
                continue
            selected.add(name)
            entries.append(ArchiveEntry(name=name, source=root / name))
    return entries


def _candidate_files(root: Path, patterns: Sequence[IncludePattern]) -> set:
    # Walk only the top-level directories a pattern can reach.
    names = set()
    scanned = set()
    for spec in patterns:
        head, sep, _ = spec.pattern.partition("/")
        if not sep:
            base, recursive = root, False
        elif any(char in head for char in "*?["):
            base, recursive = root, True
        else:
            base, recursive = root / head, True
        if (base, recursive) in scanned or not base.is_dir():
            continue
        scanned.add((base, recursive))
        paths = base.rglob("*") if recursive else base.iterdir()
        names.update(path.relative_to(root).as_posix() for path in paths if path.is_file())
    return names


def generated_entries(
    results: Mapping[str, Any],
    *,
    max_template_bytes: Optional[int] = None,
) -> Tuple[List[ArchiveEntry], List[str]]:
    """Serialize task results into archive entries.

    Returns the entries and the template paths whose compact JSON is at
    least ``max_template_bytes`` long.
    """

    threshold = MAX_TEMPLATE_BYTES if max_template_bytes is None else max_template_bytes
    entries: List[ArchiveEntry] = []
    offending: List[str] = []
    for task, data in results.items():
        if task == "css":
            for filename, tree in data.items():
                entries.append(ArchiveEntry(name=f"{PARSED_SCSS_DIR}/{filename}.json", data=encode_json(tree)))
        elif task == "templates":
            for path, parsed in data.items():
                entries.append(
                    ArchiveEntry(name=f"{PARSED_TEMPLATES_DIR}/{template_digest(path)}.json", data=encode_json(parsed))
                )
                if serialized_size(parsed) >= threshold:
                    offending.append(path)
        elif task in GENERATED_PATHS:
            entries.append(ArchiveEntry(name=GENERATED_PATHS[task], data=encode_json(data)))
    return entries, sorted(offending)


def write_archive(archive_path: Path, entries: Iterable[ArchiveEntry]) -> int:
    """Write every entry into a new zip file and return its size once closed."""

    count = 0
    try:
        archive_path.parent.mkdir(parents=True, exist_ok=True)
        # Files older than 1980 are stored with the earliest zip timestamp.
        with zipfile.ZipFile(
            archive_path, "w", compression=zipfile.ZIP_DEFLATED, strict_timestamps=False
        ) as archive:
            for entry in entries:
                if entry.source is not None:
                    archive.write(entry.source, arcname=entry.name)
                else:
                    archive.writestr(entry.name, entry.data or b"")
                count += 1
        size = archive_path.stat().st_size
    except (OSError, ValueError) as exc:
        archive_path.unlink(missing_ok=True)
        raise BundleIOError(f"Unable to write bundle {archive_path}: {exc}") from exc
    logger.debug("Wrote %d entries (%d bytes) to %s", count, size, archive_path)
    return size
