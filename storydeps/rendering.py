"""Plain-text rendering of dependency analyses."""

from __future__ import annotations

from typing import List, Optional, Sequence, Set

from .models import DependencyAnalysis, Story

INDENT = "  "
CIRCULAR_MARKER = "Circular dependency detected"


def _format_points(points: Optional[float]) -> str:
    if points is None:
        return ""
    if float(points).is_integer():
        return f", {int(points)} pts"
    return f", {points} pts"


def format_story(story: Story, *, blocked: bool = False, circular: bool = False) -> str:
    label = story.id if not story.title else f"{story.id} {story.title}"
    line = f"{label} [{story.status}, {story.priority}{_format_points(story.story_points)}]"
    if blocked:
        line += " (blocked)"
    if circular:
        line += " (circular)"
    return line


def render_critical_path(path: Sequence[Story]) -> str:
    return " -> ".join(story.id for story in path)


def render_tree(analysis: DependencyAnalysis) -> str:
    """Render the view as a tree from root stories down to their dependents.

    Each branch carries its own visited set; a story seen again on the same
    branch prints a circular marker instead of recursing.
    """
    blocked_ids = {story.id for story in analysis.blocked}
    lines: List[str] = []

    def render(story: Story, depth: int, visited: Set[str]) -> None:
        prefix = INDENT * depth + "- "
        if story.id in visited:
            lines.append(f"{prefix}{CIRCULAR_MARKER} ({story.id})")
            return

        visited.add(story.id)
        node = analysis.graph.get(story.id)
        lines.append(prefix + format_story(
            story,
            blocked=story.id in blocked_ids,
            circular=bool(node and node.has_circular),
        ))
        if node is None:
            return
        for dependent in node.dependents:
            render(dependent, depth + 1, set(visited))

    starts = analysis.root_stories or analysis.stories_with_dependencies
    if not starts:
        return "No stories found in current filter"

    for story in starts:
        render(story, 0, set())

    if analysis.critical_path:
        lines.append("")
        lines.append(
            f"Critical path ({len(analysis.critical_path)} stories): "
            + render_critical_path(analysis.critical_path)
        )

    return "\n".join(lines)
