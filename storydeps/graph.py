"""Dependency graph construction and analysis.

The graph is a plain ``Dict[str, DependencyNode]`` keyed by story id, in
the order the stories were supplied. It has no lifecycle of its own: every
caller rebuilds it from the current story list.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Set

from .models import DependencyNode, Story, TieBreak

logger = logging.getLogger("storydeps.graph")


def build_graph(stories: Iterable[Story]) -> Dict[str, DependencyNode]:
    """Build the dependency graph for a story list.

    Dependency ids that do not resolve within ``stories`` are skipped; they
    usually point at stories outside the current filtered view.
    """
    graph: Dict[str, DependencyNode] = {}
    for story in stories:
        if story.id in graph:
            logger.warning(f"Duplicate story id ignored: {story.id}")
            continue
        graph[story.id] = DependencyNode(story=story)

    for node in graph.values():
        for dep_id in node.story.dependencies:
            dep_node = graph.get(dep_id)
            if dep_node is None:
                logger.debug(f"Story {node.id} depends on {dep_id}, which is not in the current set")
                continue
            node.dependencies.append(dep_node.story)
            dep_node.dependents.append(node.story)

    return graph


@dataclass(slots=True)
class _Frame:
    node: DependencyNode
    depth: int
    index: int
    pending: Iterator[Story]
    best: Optional[int] = None
    cycle_depth: Optional[int] = None
    low: int = 0

    def __post_init__(self) -> None:
        self.low = self.index

    def offer(self, level: int) -> None:
        if self.best is None or level > self.best:
            self.best = level

    def offer_cycle(self, depth: int, low: int) -> None:
        if self.cycle_depth is None or depth > self.cycle_depth:
            self.cycle_depth = depth
        self.low = min(self.low, low)

    def level(self) -> int:
        found = [value for value in (self.best, self.cycle_depth) if value is not None]
        return max(found) if found else 0


def _mark_cycle(stack: List[_Frame], story_id: str) -> List[_Frame]:
    """Flag every node on the stack from ``story_id`` to the top."""
    for index in range(len(stack) - 1, -1, -1):
        if stack[index].node.id == story_id:
            participants = stack[index:]
            break
    else:
        return []

    for frame in participants:
        frame.node.has_circular = True
    return participants


def resolve_levels(graph: Dict[str, DependencyNode]) -> None:
    """Compute ``level`` and ``has_circular`` for every node in place.

    A node without resolved dependencies has level 0; otherwise its level is
    one more than the deepest dependency. When the walk reaches a node that
    is still on the stack, the nodes of that cycle are flagged and take the
    depth at which the cycle was found, so levels stay finite. A cycle
    member's level is never lower than 1 + the level of a dependency outside
    its cycle. Finished nodes are memoized, giving O(V + E) overall.
    """
    visited: Set[str] = set()
    visiting: Set[str] = set()

    for node in graph.values():
        node.level = 0
        node.has_circular = False

    for root_id, root in graph.items():
        if root_id in visited:
            continue

        visiting.add(root_id)
        stack = [_Frame(root, 0, 0, iter(root.dependencies))]

        while stack:
            frame = stack[-1]
            dep = next(frame.pending, None)

            if dep is None:
                stack.pop()
                node = frame.node
                node.level = frame.level()
                visiting.discard(node.id)
                visited.add(node.id)
                if stack:
                    parent = stack[-1]
                    if frame.low <= parent.index:
                        # Parent sits on the same open cycle.
                        parent.offer_cycle(node.level, frame.low)
                    else:
                        parent.offer(node.level + 1)
                continue

            child_depth = frame.depth + 1
            if dep.id in visiting:
                cycle = _mark_cycle(stack, dep.id)
                path = [member.node.id for member in cycle] + [dep.id]
                logger.debug(f"Circular dependency detected: {' -> '.join(path)}")
                frame.offer_cycle(child_depth, cycle[0].index)
            elif dep.id in visited:
                frame.offer(graph[dep.id].level + 1)
            else:
                child = graph[dep.id]
                visiting.add(child.id)
                stack.append(_Frame(child, child_depth, len(stack), iter(child.dependencies)))


def _ordered(nodes: List[DependencyNode], tie_break: TieBreak) -> List[DependencyNode]:
    if tie_break == TieBreak.ID:
        return sorted(nodes, key=lambda n: n.id)
    return nodes


def _deepest(nodes: List[DependencyNode]) -> DependencyNode:
    # Strict comparison keeps the first node among equals.
    best = nodes[0]
    for node in nodes[1:]:
        if node.level > best.level:
            best = node
    return best


def critical_path(
    graph: Dict[str, DependencyNode],
    tie_break: TieBreak = TieBreak.INPUT_ORDER,
) -> List[Story]:
    """Return the longest dependency chain, ordered from root to leaf.

    Starts at the deepest node and repeatedly steps to its deepest
    dependency. Ties go to the first node in input order, or to the
    smallest id with ``TieBreak.ID``. The walk stops early if it would
    revisit a story already on the path.
    """
    if not graph:
        return []

    tie_break = TieBreak(tie_break)
    current = _deepest(_ordered(list(graph.values()), tie_break))
    path = [current.story]
    on_path = {current.id}

    while current.dependencies:
        candidates = _ordered([graph[dep.id] for dep in current.dependencies], tie_break)
        next_node = _deepest(candidates)
        if next_node.id in on_path:
            break
        path.insert(0, next_node.story)
        on_path.add(next_node.id)
        current = next_node

    return path
