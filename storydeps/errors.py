"""Exceptions raised by storydeps.

Every exception derives from ``ValueError`` so callers that already guard
story input with ``except ValueError`` keep working.
"""


class StoryDepsError(ValueError):
    """Base class for storydeps errors."""
    pass


class InvalidStoryError(StoryDepsError):
    """A story record could not be interpreted."""
    pass


class StoryNotFoundError(StoryDepsError):
    """A story id does not exist in the story list."""

    def __init__(self, story_id: str):
        super().__init__(f"Story '{story_id}' not found")
        self.story_id = story_id


class CircularDependencyError(StoryDepsError):
    """Adding a dependency would close a cycle."""

    def __init__(self, story_id: str, depends_on_id: str):
        super().__init__(
            f"Adding dependency {story_id} -> {depends_on_id} would create a circular dependency"
        )
        self.story_id = story_id
        self.depends_on_id = depends_on_id


class InvalidRecurrenceError(StoryDepsError):
    """A recurrence pattern cannot produce a next date."""
    pass
