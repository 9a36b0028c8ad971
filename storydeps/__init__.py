"""storydeps - story dependency analysis package."""

from .analysis import analyze, filter_stories
from .blocking import blocked_stories, blocking_dependencies
from .editing import DependencyEditor
from .errors import (
    CircularDependencyError,
    InvalidRecurrenceError,
    InvalidStoryError,
    StoryDepsError,
    StoryNotFoundError,
)
from .graph import build_graph, critical_path, resolve_levels
from .models import (
    AnalysisOptions,
    DependencyAnalysis,
    DependencyNode,
    RecurrencePattern,
    Story,
    TieBreak,
)
from .recurrence import next_due_date

__all__ = [
    "AnalysisOptions",
    "CircularDependencyError",
    "DependencyAnalysis",
    "DependencyEditor",
    "DependencyNode",
    "InvalidRecurrenceError",
    "InvalidStoryError",
    "RecurrencePattern",
    "Story",
    "StoryDepsError",
    "StoryNotFoundError",
    "TieBreak",
    "analyze",
    "blocked_stories",
    "blocking_dependencies",
    "build_graph",
    "critical_path",
    "filter_stories",
    "next_due_date",
    "resolve_levels",
]
