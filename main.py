"""MCP server exposing story dependency analysis tools."""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

from mcp.server.fastmcp import FastMCP

from storydeps import (
    AnalysisOptions,
    DependencyEditor,
    RecurrencePattern,
    Story,
    StoryDepsError,
    TieBreak,
    analyze,
    next_due_date,
)
from storydeps.config import load_settings
from storydeps.models import STORY_PRIORITIES, STORY_STATUSES
from storydeps.rendering import render_tree
from storydeps.storydeps_logging import setup_logging

mcp = FastMCP("storydeps")


def _parse_stories(stories: List[Dict[str, Any]]) -> List[Story]:
    parsed = []
    for item in stories:
        story = Story.from_dict(item)
        story.ensure_valid()
        parsed.append(story)
    return parsed


def _options(
    sprint_id: Optional[str],
    epic_id: Optional[str],
    tie_break: Optional[str],
) -> AnalysisOptions:
    chosen = TieBreak(tie_break) if tie_break else load_settings().tie_break
    return AnalysisOptions(sprint_id=sprint_id, epic_id=epic_id, tie_break=chosen)


def _error(error: Exception, suggestion: str) -> Dict[str, Any]:
    return {
        "error": str(error),
        "error_type": type(error).__name__,
        "suggestion": suggestion,
    }


STORY_SUGGESTION = (
    "Each story needs an 'id'; 'dependencies' must be a list of distinct story ids, "
    "'status' one of: " + ", ".join(STORY_STATUSES) + "; "
    "'priority' one of: " + ", ".join(STORY_PRIORITIES) + "; "
    "'storyPoints' a non-negative number and 'tie_break' one of: input_order, id"
)


@mcp.tool()
def analyze_dependencies(
    stories: List[Dict[str, Any]],
    sprint_id: Optional[str] = None,
    epic_id: Optional[str] = None,
    tie_break: Optional[str] = None,
) -> Dict[str, Any]:
    """Compute dependency levels, cycles, the critical path and blocked stories.

    Stories are filtered by sprint and epic ('all' or omitted means no filter);
    blocked stories are still judged against the full list."""

    try:
        analysis = analyze(_parse_stories(stories), _options(sprint_id, epic_id, tie_break))
    except ValueError as e:
        return _error(e, STORY_SUGGESTION)

    result = analysis.to_dict()
    result["workflow_tip"] = (
        "Break the circular dependencies listed in 'circular_stories' with remove_dependency"
        if analysis.has_cycles()
        else "Finish stories on the critical path first to shorten delivery"
    )
    return result


@mcp.tool()
def get_critical_path(
    stories: List[Dict[str, Any]],
    sprint_id: Optional[str] = None,
    epic_id: Optional[str] = None,
    tie_break: Optional[str] = None,
) -> Dict[str, Any]:
    """Return the longest dependency chain, ordered from root to leaf."""

    try:
        analysis = analyze(_parse_stories(stories), _options(sprint_id, epic_id, tie_break))
    except ValueError as e:
        return _error(e, STORY_SUGGESTION)

    return {
        "critical_path": [story.to_dict() for story in analysis.critical_path],
        "length": len(analysis.critical_path),
        "total_story_points": sum(story.story_points or 0 for story in analysis.critical_path),
    }


@mcp.tool()
def get_blocked_stories(
    stories: List[Dict[str, Any]],
    sprint_id: Optional[str] = None,
    epic_id: Optional[str] = None,
) -> Dict[str, Any]:
    """List stories waiting on at least one dependency that is not done."""

    try:
        parsed = _parse_stories(stories)
        analysis = analyze(parsed, _options(sprint_id, epic_id, TieBreak.INPUT_ORDER.value))
    except ValueError as e:
        return _error(e, STORY_SUGGESTION)

    editor = DependencyEditor(parsed)
    blocked = []
    for story in analysis.blocked:
        blocked.append({
            "story": story.to_dict(),
            "blocked_by": [
                dep.id for dep in editor.get_dependencies(story.id) if not dep.is_done
            ],
        })
    return {"blocked": blocked, "count": len(blocked)}


@mcp.tool()
def check_dependency(stories: List[Dict[str, Any]], story_id: str, depends_on_id: str) -> Dict[str, Any]:
    """Report whether story_id could depend on depends_on_id without closing a cycle."""

    try:
        editor = DependencyEditor(_parse_stories(stories))
    except StoryDepsError as e:
        return _error(e, STORY_SUGGESTION)

    story = editor.get_story(story_id)
    return {
        "story_id": story_id,
        "depends_on_id": depends_on_id,
        "exists": bool(story and depends_on_id in story.dependencies),
        "would_create_cycle": editor.would_create_cycle(story_id, depends_on_id),
        "can_start": editor.can_start(story_id),
    }


@mcp.tool()
def add_dependency(stories: List[Dict[str, Any]], story_id: str, depends_on_id: str) -> Dict[str, Any]:
    """Add a dependency edge and return the updated story list.
    Edges that would create a circular dependency are rejected."""

    try:
        editor = DependencyEditor(_parse_stories(stories))
        added = editor.add_dependency(story_id, depends_on_id)
    except StoryDepsError as e:
        return _error(e, "Use check_dependency to test an edge before adding it")

    return {
        "added": added,
        "stories": [story.to_dict() for story in editor.stories],
        "message": (
            f"{story_id} now depends on {depends_on_id}" if added
            else f"{story_id} already depends on {depends_on_id}"
        ),
    }


@mcp.tool()
def remove_dependency(stories: List[Dict[str, Any]], story_id: str, depends_on_id: str) -> Dict[str, Any]:
    """Remove a dependency edge and return the updated story list."""

    try:
        editor = DependencyEditor(_parse_stories(stories))
    except StoryDepsError as e:
        return _error(e, STORY_SUGGESTION)

    removed = editor.remove_dependency(story_id, depends_on_id)
    return {
        "removed": removed,
        "stories": [story.to_dict() for story in editor.stories],
    }


@mcp.tool()
def dependency_chain(stories: List[Dict[str, Any]], story_id: str) -> Dict[str, Any]:
    """Return a story with its direct dependencies and dependents."""

    try:
        editor = DependencyEditor(_parse_stories(stories))
    except StoryDepsError as e:
        return _error(e, STORY_SUGGESTION)

    chain = editor.dependency_chain(story_id)
    if chain is None:
        return {"error": f"Story '{story_id}' not found"}

    return {
        "story": chain["story"].to_dict(),
        "dependencies": [story.to_dict() for story in chain["dependencies"]],
        "dependents": [story.to_dict() for story in chain["dependents"]],
        "can_start": editor.can_start(story_id),
    }


@mcp.tool()
def render_dependency_tree(
    stories: List[Dict[str, Any]],
    sprint_id: Optional[str] = None,
    epic_id: Optional[str] = None,
) -> Dict[str, Any]:
    """Render the dependency tree of the filtered view as indented text."""

    try:
        analysis = analyze(_parse_stories(stories), _options(sprint_id, epic_id, None))
    except ValueError as e:
        return _error(e, STORY_SUGGESTION)

    return {"tree": render_tree(analysis), "summary": analysis.summary()}


@mcp.tool()
def next_recurrence(
    from_date: str,
    frequency: str,
    interval: int = 1,
    days_of_week: Optional[List[int]] = None,
    day_of_month: Optional[int] = None,
    end_date: Optional[str] = None,
) -> Dict[str, Any]:
    """Compute the next due date of a recurring item (dates as YYYY-MM-DD, weekdays 0=Sunday)."""

    try:
        pattern = RecurrencePattern(
            frequency=frequency,
            interval=interval,
            days_of_week=tuple(days_of_week or ()),
            day_of_month=day_of_month,
            end_date=date.fromisoformat(end_date) if end_date else None,
        )
        due = next_due_date(date.fromisoformat(from_date), pattern)
    except ValueError as e:
        return _error(e, "Frequency must be one of daily, weekly, monthly, yearly, custom")

    return {
        "from_date": from_date,
        "next_due_date": due.isoformat(),
        "capped_by_end_date": pattern.end_date is not None and due == pattern.end_date,
    }


@mcp.tool()
def get_analysis_guide() -> Dict[str, Any]:
    """Get guidance on the available dependency tools."""
    return {
        "overview": "Stories are passed inline; every call recomputes from the list it receives",
        "tools": [
            {"tool": "analyze_dependencies", "purpose": "Levels, cycles, critical path and blocked stories"},
            {"tool": "get_critical_path", "purpose": "Longest chain of dependent stories"},
            {"tool": "get_blocked_stories", "purpose": "Stories waiting on unfinished dependencies"},
            {"tool": "check_dependency", "purpose": "Test an edge before adding it"},
            {"tool": "add_dependency", "purpose": "Add an edge; circular edges are rejected"},
            {"tool": "remove_dependency", "purpose": "Remove an edge"},
            {"tool": "dependency_chain", "purpose": "Direct dependencies and dependents of one story"},
            {"tool": "render_dependency_tree", "purpose": "Text tree from root stories to dependents"},
            {"tool": "next_recurrence", "purpose": "Next due date of a recurring item"},
        ],
        "story_fields": ["id", "status", "dependencies", "story_points", "priority", "title", "sprint_id", "epic_id"],
    }


if __name__ == "__main__":
    settings = load_settings()
    setup_logging(settings.log_level, settings.log_file)
    mcp.run(transport="stdio")
