"""Partial inclusion graph and cycle detection."""

from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from ..assemblers.templates import ParsedTemplate
from ..errors import CycleDetectedError

_UNVISITED = 0
_IN_PROGRESS = 1
_FINISHED = 2


class DependencyGraph:
    """Directed "includes" graph between template paths.

    Only partial identifiers are stored; template content never enters the
    graph.
    """

    def __init__(self) -> None:
        self._edges: Dict[str, Dict[str, None]] = {}

    @classmethod
    def from_templates(cls, templates: Mapping[str, ParsedTemplate]) -> "DependencyGraph":
        graph = cls()
        expanded = set()
        for path, parsed in templates.items():
            graph.add_node(path)
            for node in parsed.walk():
                if node.path in expanded:
                    continue
                expanded.add(node.path)
                for include in node.includes:
                    graph.add_edge(node.path, include)
        return graph

    @property
    def nodes(self) -> List[str]:
        return list(self._edges)

    def add_node(self, node: str) -> None:
        self._edges.setdefault(node, {})

    def add_edge(self, source: str, target: str) -> None:
        self.add_node(target)
        self._edges.setdefault(source, {})[target] = None

    def successors(self, node: str) -> List[str]:
        return list(self._edges.get(node, ()))

    def edge_count(self) -> int:
        return sum(len(targets) for targets in self._edges.values())

    def find_cycle(self) -> Optional[List[str]]:
        """Return the first cycle found as an ordered node list, or ``None``.

        Iterative depth-first search with three-state marking. The returned
        path starts at the node the search re-entered and ends at the node
        whose edge closed the loop.
        """

        state: Dict[str, int] = {node: _UNVISITED for node in self._edges}
        for start in self._edges:
            if state[start] != _UNVISITED:
                continue
            state[start] = _IN_PROGRESS
            path: List[str] = [start]
            position: Dict[str, int] = {start: 0}
            stack: List[Tuple[str, Iterable[str]]] = [(start, iter(self._edges[start]))]
            while stack:
                node, successors = stack[-1]
                advanced = False
                for target in successors:
                    target_state = state[target]
                    if target_state == _IN_PROGRESS:
                        return path[position[target]:]
                    if target_state == _UNVISITED:
                        state[target] = _IN_PROGRESS
                        position[target] = len(path)
                        path.append(target)
                        stack.append((target, iter(self._edges[target])))
                        advanced = True
                        break
                if not advanced:
                    stack.pop()
                    state[node] = _FINISHED
                    path.pop()
                    del position[node]
        return None

    def detect(self) -> None:
        """Raise :class:`CycleDetectedError` if any partial includes itself transitively."""

        cycle = self.find_cycle()
        if cycle is not None:
            raise CycleDetectedError(cycle)


def detect_cycles(templates: Mapping[str, ParsedTemplate]) -> None:
    DependencyGraph.from_templates(templates).detect()
