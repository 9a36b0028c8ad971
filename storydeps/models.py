"""Data models for storydeps.

This module contains the core data structures used throughout storydeps:
stories as supplied by the story store, the derived dependency nodes,
analysis options and results, and recurrence patterns.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .errors import InvalidStoryError, InvalidRecurrenceError

STATUS_DONE = "done"

STORY_STATUSES = ("backlog", "todo", "in-progress", "review", "testing", "done", "blocked")
STORY_PRIORITIES = ("low", "medium", "high", "critical")
RECURRENCE_FREQUENCIES = ("daily", "weekly", "monthly", "yearly", "custom")


class TieBreak(str, Enum):
    """How the critical path picks between nodes of equal level."""

    INPUT_ORDER = "input_order"
    ID = "id"


def _first_present(data: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return default


@dataclass(slots=True)
class Story:
    """A unit of product work with optional predecessor dependencies."""

    id: str
    status: str = "backlog"
    dependencies: List[str] = field(default_factory=list)
    story_points: Optional[float] = None
    priority: str = "medium"
    title: str = ""
    sprint_id: Optional[str] = None
    epic_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "status": self.status,
            "dependencies": list(self.dependencies),
            "story_points": self.story_points,
            "priority": self.priority,
            "title": self.title,
            "sprint_id": self.sprint_id,
            "epic_id": self.epic_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Story":
        """Create from dictionary representation.

        Accepts both snake_case keys and the camelCase keys used by the
        story store (``storyPoints``, ``sprintId``, ``epicId``).
        """
        if not isinstance(data, dict):
            raise InvalidStoryError(f"Story record must be a mapping, got {type(data).__name__}")

        story_id = data.get("id")
        if not story_id:
            raise InvalidStoryError("Story id is required")

        dependencies = data.get("dependencies")
        if dependencies is None:
            dependencies = []
        if not isinstance(dependencies, (list, tuple)):
            raise InvalidStoryError(f"dependencies for story '{story_id}' must be a list")

        return cls(
            id=str(story_id),
            status=data.get("status", "backlog"),
            dependencies=[str(dep) for dep in dependencies],
            story_points=_first_present(data, "story_points", "storyPoints"),
            priority=data.get("priority", "medium"),
            title=data.get("title", ""),
            sprint_id=_first_present(data, "sprint_id", "sprintId"),
            epic_id=_first_present(data, "epic_id", "epicId"),
        )

    @property
    def is_done(self) -> bool:
        return self.status == STATUS_DONE

    def validate(self) -> List[str]:
        """Validate story data and return any issues."""
        issues = []

        if not self.id:
            issues.append("Story ID is required")
        if self.status not in STORY_STATUSES:
            issues.append(f"Invalid status: {self.status}")
        if self.priority not in STORY_PRIORITIES:
            issues.append(f"Invalid priority: {self.priority}")
        if self.story_points is not None:
            if isinstance(self.story_points, bool) or not isinstance(self.story_points, (int, float)):
                issues.append(f"Story points must be a number, got: {self.story_points!r}")
            elif self.story_points < 0:
                issues.append("Story points must not be negative")
        if len(set(self.dependencies)) != len(self.dependencies):
            issues.append("Duplicate dependency ids")

        return issues

    def ensure_valid(self) -> None:
        issues = self.validate()
        if issues:
            raise InvalidStoryError(f"Story '{self.id}': " + "; ".join(issues))


@dataclass(slots=True)
class DependencyNode:
    """A story wrapped with its resolved links and computed depth."""

    story: Story
    dependencies: List[Story] = field(default_factory=list)
    dependents: List[Story] = field(default_factory=list)
    level: int = 0
    has_circular: bool = False

    @property
    def id(self) -> str:
        return self.story.id

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "id": self.story.id,
            "level": self.level,
            "has_circular": self.has_circular,
            "dependencies": [dep.id for dep in self.dependencies],
            "dependents": [dep.id for dep in self.dependents],
        }


@dataclass(slots=True)
class AnalysisOptions:
    """Filter selections and policy for one analysis run."""

    sprint_id: Optional[str] = None
    epic_id: Optional[str] = None
    tie_break: TieBreak = TieBreak.INPUT_ORDER

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "AnalysisOptions":
        data = data or {}
        return cls(
            sprint_id=_first_present(data, "sprint_id", "sprintId"),
            epic_id=_first_present(data, "epic_id", "epicId"),
            tie_break=TieBreak(data.get("tie_break", TieBreak.INPUT_ORDER.value)),
        )


@dataclass(slots=True)
class DependencyAnalysis:
    """Result of analysing one filtered view of the story list."""

    stories: List[Story]
    graph: Dict[str, DependencyNode]
    critical_path: List[Story] = field(default_factory=list)
    blocked: List[Story] = field(default_factory=list)
    root_stories: List[Story] = field(default_factory=list)
    stories_with_dependencies: List[Story] = field(default_factory=list)
    circular_stories: List[Story] = field(default_factory=list)
    max_level: int = 0

    def summary(self) -> Dict[str, int]:
        """Get counts for the view."""
        return {
            "total_stories": len(self.stories),
            "stories_with_dependencies": len(self.stories_with_dependencies),
            "root_stories": len(self.root_stories),
            "blocked_stories": len(self.blocked),
            "circular_stories": len(self.circular_stories),
            "critical_path_length": len(self.critical_path),
            "max_level": self.max_level,
        }

    def has_cycles(self) -> bool:
        return bool(self.circular_stories)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "summary": self.summary(),
            "nodes": {story_id: node.to_dict() for story_id, node in self.graph.items()},
            "critical_path": [story.id for story in self.critical_path],
            "blocked": [story.id for story in self.blocked],
            "root_stories": [story.id for story in self.root_stories],
            "stories_with_dependencies": [story.id for story in self.stories_with_dependencies],
            "circular_stories": [story.id for story in self.circular_stories],
        }


@dataclass(slots=True)
class RecurrencePattern:
    """How often a recurring work item comes due."""

    frequency: str
    interval: int = 1
    days_of_week: Tuple[int, ...] = ()  # 0 = Sunday ... 6 = Saturday
    day_of_month: Optional[int] = None
    end_date: Optional[date] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RecurrencePattern":
        """Create from dictionary representation."""
        end_date = _first_present(data, "end_date", "endDate")
        if isinstance(end_date, str):
            end_date = date.fromisoformat(end_date[:10])
        return cls(
            frequency=data.get("frequency", ""),
            interval=int(data.get("interval", 1)),
            days_of_week=tuple(_first_present(data, "days_of_week", "daysOfWeek", default=()) or ()),
            day_of_month=_first_present(data, "day_of_month", "dayOfMonth"),
            end_date=end_date,
        )

    def validate(self) -> List[str]:
        """Validate the pattern and return any issues."""
        issues = []

        if self.frequency not in RECURRENCE_FREQUENCIES:
            issues.append(f"Invalid frequency: {self.frequency}")
        if self.interval < 1:
            issues.append(f"Interval must be at least 1, got: {self.interval}")
        for day in self.days_of_week:
            if not 0 <= day <= 6:
                issues.append(f"Day of week must be 0-6, got: {day}")
        if self.day_of_month is not None and not 1 <= self.day_of_month <= 31:
            issues.append(f"Day of month must be 1-31, got: {self.day_of_month}")

        return issues

    def ensure_valid(self) -> None:
        issues = self.validate()
        if issues:
            raise InvalidRecurrenceError("; ".join(issues))
