"""Editing dependency edges on a story list.

``DependencyEditor`` works on the complete, unfiltered story list and
mutates ``Story.dependencies`` in place. It refuses edges that would close
a cycle, so lists edited only through it stay acyclic.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Any, Dict, Iterable, List, Optional, Set

from .blocking import blocking_dependencies, index_stories
from .errors import CircularDependencyError, StoryNotFoundError
from .models import Story
from .storydeps_logging import (
    log_dependency_added,
    log_dependency_removed,
    log_error_with_context,
)

logger = logging.getLogger("storydeps.editing")


class DependencyEditor:
    """Add, remove and inspect dependencies between stories."""

    def __init__(self, stories: Iterable[Story]):
        self.stories: List[Story] = list(stories)
        self._index: Dict[str, Story] = index_stories(self.stories)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_story(self, story_id: str) -> Optional[Story]:
        return self._index.get(story_id)

    def _require(self, story_id: str) -> Story:
        story = self._index.get(story_id)
        if story is None:
            raise StoryNotFoundError(story_id)
        return story

    def get_dependencies(self, story_id: str) -> List[Story]:
        """Stories that ``story_id`` depends on, in declaration order."""
        story = self.get_story(story_id)
        if story is None:
            return []
        return [self._index[dep_id] for dep_id in story.dependencies if dep_id in self._index]

    def get_dependents(self, story_id: str) -> List[Story]:
        """Stories that declare a dependency on ``story_id``."""
        return [story for story in self.stories if story_id in story.dependencies]

    def can_start(self, story_id: str) -> bool:
        """True when every dependency of ``story_id`` is done."""
        return all(dep.is_done for dep in self.get_dependencies(story_id))

    def dependency_chain(self, story_id: str) -> Optional[Dict[str, Any]]:
        story = self.get_story(story_id)
        if story is None:
            return None
        return {
            "story": story,
            "dependencies": self.get_dependencies(story_id),
            "dependents": self.get_dependents(story_id),
        }

    # ------------------------------------------------------------------
    # Cycle checks
    # ------------------------------------------------------------------

    def would_create_cycle(self, story_id: str, depends_on_id: str) -> bool:
        """Check whether ``story_id -> depends_on_id`` would close a cycle.

        Breadth-first search from ``depends_on_id`` through existing
        dependencies; reaching ``story_id`` means the new edge closes a loop.
        """
        visited: Set[str] = set()
        queue = deque([depends_on_id])

        while queue:
            current_id = queue.popleft()
            if current_id == story_id:
                return True
            if current_id in visited:
                continue
            visited.add(current_id)
            queue.extend(dep.id for dep in self.get_dependencies(current_id))

        return False

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_dependency(self, story_id: str, depends_on_id: str) -> bool:
        """Make ``story_id`` depend on ``depends_on_id``.

        Returns False when the dependency already exists.
        """
        try:
            story = self._require(story_id)
            self._require(depends_on_id)

            if depends_on_id in story.dependencies:
                return False

            if self.would_create_cycle(story_id, depends_on_id):
                raise CircularDependencyError(story_id, depends_on_id)

            story.dependencies.append(depends_on_id)
            logger.info(f"Added dependency {story_id} -> {depends_on_id}")
            log_dependency_added(story_id, depends_on_id)
            return True

        except CircularDependencyError as e:
            logger.warning(str(e))
            raise
        except Exception as e:
            log_error_with_context(e, {
                "operation": "add_dependency",
                "story_id": story_id,
                "depends_on_id": depends_on_id,
            })
            raise

    def remove_dependency(self, story_id: str, depends_on_id: str) -> bool:
        """Drop the dependency; returns False if there was nothing to remove."""
        story = self.get_story(story_id)
        if story is None or depends_on_id not in story.dependencies:
            return False

        story.dependencies[:] = [dep_id for dep_id in story.dependencies if dep_id != depends_on_id]
        logger.info(f"Removed dependency {story_id} -> {depends_on_id}")
        log_dependency_removed(story_id, depends_on_id)
        return True

    # ------------------------------------------------------------------
    # Reports
    # ------------------------------------------------------------------

    def blocked_report(self) -> List[Dict[str, Any]]:
        """List unfinished stories together with the dependencies holding them up."""
        report = []
        for story in self.stories:
            if story.is_done or not story.dependencies:
                continue
            blockers = blocking_dependencies(story, self._index)
            if blockers:
                report.append({"story": story, "blocked_by": blockers})
        return report
