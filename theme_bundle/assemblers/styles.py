"""Style source assembly: follows ``@import`` chains from an entry file."""

from __future__ import annotations

import re
from pathlib import Path, PurePosixPath
from typing import Any, Dict, List, Mapping, Optional, Protocol

IMPORT_PATTERN = re.compile(r"""@import\s+((?:['"][^'"]+['"]\s*,?\s*)+);""")
IMPORT_TARGET = re.compile(r"""['"]([^'"]+)['"]""")


class StyleAssembler(Protocol):
    def assemble(
        self,
        source_file: str,
        base_path: Path,
        compiler: str,
        options: Mapping[str, Any],
    ) -> Any: ...


def find_imports(content: str) -> List[str]:
    targets: List[str] = []
    for statement in IMPORT_PATTERN.finditer(content):
        targets.extend(IMPORT_TARGET.findall(statement.group(1)))
    return targets


class ScssAssembler:
    """Collects an entry file and everything it imports from ``base_path``.

    Returns ``{"entry", "files", "unresolved"}`` where ``files`` maps paths
    relative to ``base_path`` to their source text, in discovery order.
    """

    def assemble(
        self,
        source_file: str,
        base_path: Path,
        compiler: str,
        options: Mapping[str, Any],
    ) -> Dict[str, Any]:
        base = Path(base_path)
        files: Dict[str, str] = {source_file: (base / source_file).read_text(encoding="utf-8")}
        unresolved: List[str] = []
        if not options.get("bundle", False):
            return {"entry": source_file, "files": files, "unresolved": unresolved}

        queue = [source_file]
        while queue:
            current = queue.pop(0)
            parent = PurePosixPath(current).parent
            for target in find_imports(files[current]):
                resolved = self._resolve(base, parent, target, compiler)
                if resolved is None:
                    if target not in unresolved:
                        unresolved.append(target)
                    continue
                if resolved in files:
                    continue
                files[resolved] = (base / resolved).read_text(encoding="utf-8")
                queue.append(resolved)

        return {"entry": source_file, "files": files, "unresolved": unresolved}

    @staticmethod
    def _resolve(base: Path, parent: PurePosixPath, target: str, compiler: str) -> Optional[str]:
        if target.startswith(("http://", "https://", "//", "url(")) or target.endswith(".css"):
            return None
        relative = parent / target
        suffix = f".{compiler}"
        stem = relative.name
        candidates = [
            relative if relative.suffix == suffix else relative.with_name(stem + suffix),
            relative.with_name(f"_{stem}{suffix}"),
            relative / f"_index{suffix}",
        ]
        for candidate in candidates:
            if (base / candidate).is_file():
                return candidate.as_posix()
        return None
