"""Unit tests for storydeps models.

This module tests the core data structures and their validation,
serialization, and helper methods.
"""

import pytest

from storydeps.errors import InvalidStoryError
from storydeps.models import (
    AnalysisOptions,
    DependencyNode,
    Story,
    TieBreak,
)


class TestStory:
    """Test cases for Story model."""

    def test_story_defaults(self):
        """Test creating a story with defaults."""
        story = Story("S-1")

        assert story.status == "backlog"
        assert story.dependencies == []
        assert story.priority == "medium"
        assert story.story_points is None
        assert story.is_done is False

    def test_dependencies_are_not_shared(self):
        first, second = Story("A"), Story("B")
        first.dependencies.append("B")

        assert second.dependencies == []

    def test_story_from_dict_camel_case(self):
        """Test creating a story from store-style keys."""
        story = Story.from_dict({
            "id": "S-2",
            "status": "in-progress",
            "dependencies": ["S-1"],
            "storyPoints": 5,
            "priority": "high",
            "title": "Checkout",
            "sprintId": "sprint-1",
            "epicId": "epic-1",
        })

        assert story.id == "S-2"
        assert story.status == "in-progress"
        assert story.dependencies == ["S-1"]
        assert story.story_points == 5
        assert story.sprint_id == "sprint-1"
        assert story.epic_id == "epic-1"

    def test_story_round_trip(self):
        story = Story("S-3", status="done", dependencies=["S-1"], story_points=3, title="Login")

        assert Story.from_dict(story.to_dict()) == story

    def test_from_dict_missing_dependencies(self):
        story = Story.from_dict({"id": "S-4", "dependencies": None})

        assert story.dependencies == []

    def test_from_dict_requires_id(self):
        with pytest.raises(InvalidStoryError, match="id is required"):
            Story.from_dict({"status": "todo"})

    def test_from_dict_rejects_non_list_dependencies(self):
        with pytest.raises(InvalidStoryError, match="must be a list"):
            Story.from_dict({"id": "S-5", "dependencies": "S-1"})

    def test_from_dict_rejects_non_mapping(self):
        with pytest.raises(InvalidStoryError):
            Story.from_dict(["S-6"])

    def test_validate_success(self):
        story = Story("S-7", status="todo", priority="critical", story_points=8)

        assert story.validate() == []

    def test_validate_failures(self):
        """Test validation failures for Story."""
        story = Story(
            "",
            status="archived",
            priority="urgent",
            story_points=-1,
            dependencies=["A", "A"],
        )

        issues = story.validate()

        assert "Story ID is required" in issues
        assert "Invalid status: archived" in issues
        assert "Invalid priority: urgent" in issues
        assert "Story points must not be negative" in issues
        assert "Duplicate dependency ids" in issues

    def test_validate_non_numeric_points(self):
        story = Story("S-8", story_points="5")

        assert story.validate() == ["Story points must be a number, got: '5'"]

    def test_ensure_valid_raises(self):
        with pytest.raises(InvalidStoryError, match="Invalid status: finished"):
            Story("S-9", status="finished").ensure_valid()


class TestDependencyNode:
    """Test cases for DependencyNode model."""

    def test_node_to_dict(self):
        a, b, c = Story("A"), Story("B"), Story("C")
        node = DependencyNode(story=b, dependencies=[a], dependents=[c], level=1)

        assert node.id == "B"
        assert node.to_dict() == {
            "id": "B",
            "level": 1,
            "has_circular": False,
            "dependencies": ["A"],
            "dependents": ["C"],
        }


class TestAnalysisOptions:
    """Test cases for AnalysisOptions."""

    def test_defaults(self):
        options = AnalysisOptions()

        assert options.sprint_id is None
        assert options.epic_id is None
        assert options.tie_break == TieBreak.INPUT_ORDER

    def test_from_dict(self):
        options = AnalysisOptions.from_dict({"sprintId": "s1", "tie_break": "id"})

        assert options.sprint_id == "s1"
        assert options.tie_break == TieBreak.ID

    def test_from_dict_invalid_tie_break(self):
        with pytest.raises(ValueError):
            AnalysisOptions.from_dict({"tie_break": "random"})
