"""Template loading and partial expansion."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Protocol

logger = logging.getLogger(__name__)

TEMPLATE_SUFFIX = ".html"
PARTIAL_PATTERN = re.compile(r"\{\{~?#?>\s*([\w./-]+)")


@dataclass(slots=True, eq=False)
class ParsedTemplate:
    """One template with the parsed forms of the partials it includes.

    ``includes`` lists every partial referenced directly by this template.
    ``partials`` holds parsed forms for the includes that exist and do not
    lead back to an ancestor; the rest are references only. Within one
    assembled template each partial path maps to a single shared object.
    """

    path: str
    content: str
    includes: List[str] = field(default_factory=list)
    partials: Dict[str, "ParsedTemplate"] = field(default_factory=dict)

    def walk(self) -> Iterator["ParsedTemplate"]:
        """Yield this template and every nested partial once, depth first."""

        seen = set()
        stack = [self]
        while stack:
            node = stack.pop()
            if id(node) in seen:
                continue
            seen.add(id(node))
            yield node
            for name in reversed(node.includes):
                child = node.partials.get(name)
                if child is not None:
                    stack.append(child)

    def to_payload(self) -> Dict[str, str]:
        payload: Dict[str, str] = {}
        for node in self.walk():
            payload.setdefault(node.path, node.content)
        return payload


class TemplateAssembler(Protocol):
    def assemble(self, templates_root: Path, name: str) -> ParsedTemplate: ...


def find_partials(content: str) -> List[str]:
    """Return partial names referenced by ``content`` in first-use order."""

    names: List[str] = []
    for match in PARTIAL_PATTERN.finditer(content):
        name = match.group(1)
        if name not in names:
            names.append(name)
    return names


class HandlebarsTemplateAssembler:
    """Reads ``<templates_root>/<name>.html`` and expands ``{{> partial}}`` references."""

    def assemble(self, templates_root: Path, name: str) -> ParsedTemplate:
        root = Path(templates_root)
        parsed: Dict[str, ParsedTemplate] = {}

        def load(template: str) -> ParsedTemplate:
            node = ParsedTemplate(
                path=template,
                content=(root / f"{template}{TEMPLATE_SUFFIX}").read_text(encoding="utf-8"),
            )
            node.includes = find_partials(node.content)
            parsed[template] = node
            return node

        top = load(name)

        # A partial reached along several chains is parsed once and shared.
        # Each stack entry carries the ancestors of its first expansion.
        stack = [(top, (name,))]
        while stack:
            node, ancestors = stack.pop()
            for include in node.includes:
                if include in ancestors:
                    continue
                child = parsed.get(include)
                if child is None:
                    if not (root / f"{include}{TEMPLATE_SUFFIX}").is_file():
                        logger.debug("Template %s references missing partial %s", node.path, include)
                        continue
                    child = load(include)
                    stack.append((child, ancestors + (include,)))
                node.partials[include] = child
        return top
