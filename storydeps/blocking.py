"""Blocked-story detection.

Independent of the dependency graph: a story is blocked when any of its
declared dependencies, looked up in the complete story list, is not done.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence

from .models import Story


def index_stories(stories: Iterable[Story]) -> Dict[str, Story]:
    """Map story ids to stories, keeping the first story for a repeated id."""
    index: Dict[str, Story] = {}
    for story in stories:
        index.setdefault(story.id, story)
    return index


def blocking_dependencies(story: Story, index: Dict[str, Story]) -> List[Story]:
    """Return the unfinished dependencies of ``story``.

    Dependency ids missing from ``index`` cannot block and are ignored.
    """
    blockers = []
    for dep_id in story.dependencies:
        dep = index.get(dep_id)
        if dep is not None and not dep.is_done:
            blockers.append(dep)
    return blockers


def is_blocked(story: Story, index: Dict[str, Story]) -> bool:
    return bool(story.dependencies) and bool(blocking_dependencies(story, index))


def blocked_stories(
    stories: Sequence[Story],
    all_stories: Optional[Sequence[Story]] = None,
) -> List[Story]:
    """Return the stories in ``stories`` that wait on an unfinished dependency.

    ``stories`` is usually a filtered view; dependencies are resolved against
    ``all_stories`` (the unfiltered list), which defaults to ``stories``.
    """
    index = index_stories(all_stories if all_stories is not None else stories)
    return [story for story in stories if is_blocked(story, index)]
