"""Unit tests for DependencyEditor."""

import pytest

from storydeps.editing import DependencyEditor
from storydeps.errors import CircularDependencyError, StoryNotFoundError
from storydeps.storydeps_logging import observability_hooks
from storydeps.models import Story


def ids(stories):
    return [story.id for story in stories]


@pytest.fixture
def editor():
    return DependencyEditor([
        Story("A", status="done"),
        Story("B", status="todo", dependencies=["A"]),
        Story("C", status="todo", dependencies=["B", "ghost"]),
        Story("D", status="in-progress"),
    ])


class TestLookups:
    """Test cases for dependency lookups."""

    def test_get_dependencies_skips_unknown_ids(self, editor):
        assert ids(editor.get_dependencies("C")) == ["B"]

    def test_get_dependencies_unknown_story(self, editor):
        assert editor.get_dependencies("nope") == []

    def test_get_dependents(self, editor):
        assert ids(editor.get_dependents("A")) == ["B"]
        assert editor.get_dependents("D") == []

    def test_can_start(self, editor):
        """Test that a story can start only when its dependencies are done."""
        assert editor.can_start("A") is True
        assert editor.can_start("B") is True
        assert editor.can_start("C") is False

    def test_dependency_chain(self, editor):
        chain = editor.dependency_chain("B")

        assert chain["story"].id == "B"
        assert ids(chain["dependencies"]) == ["A"]
        assert ids(chain["dependents"]) == ["C"]

    def test_dependency_chain_unknown(self, editor):
        assert editor.dependency_chain("nope") is None


class TestWouldCreateCycle:
    """Test cases for would_create_cycle."""

    def test_transitive_cycle(self, editor):
        """Test that A -> C closes A <- B <- C."""
        assert editor.would_create_cycle("A", "C") is True

    def test_direct_cycle(self, editor):
        assert editor.would_create_cycle("A", "B") is True

    def test_self_edge(self, editor):
        assert editor.would_create_cycle("D", "D") is True

    def test_safe_edge(self, editor):
        assert editor.would_create_cycle("D", "C") is False
        assert editor.would_create_cycle("C", "A") is False


class TestMutations:
    """Test cases for adding and removing dependencies."""

    def test_add_dependency(self, editor):
        assert editor.add_dependency("D", "C") is True
        assert editor.get_story("D").dependencies == ["C"]
        assert ids(editor.get_dependents("C")) == ["D"]

    def test_add_existing_dependency(self, editor):
        assert editor.add_dependency("B", "A") is False
        assert editor.get_story("B").dependencies == ["A"]

    def test_add_circular_dependency_rejected(self, editor):
        """Test that cycle-closing edges raise and leave stories unchanged."""
        with pytest.raises(CircularDependencyError) as excinfo:
            editor.add_dependency("A", "C")

        assert excinfo.value.story_id == "A"
        assert excinfo.value.depends_on_id == "C"
        assert editor.get_story("A").dependencies == []

    def test_add_self_dependency_rejected(self, editor):
        with pytest.raises(CircularDependencyError):
            editor.add_dependency("D", "D")

    def test_add_unknown_story(self, editor):
        with pytest.raises(StoryNotFoundError, match="nope"):
            editor.add_dependency("nope", "A")
        with pytest.raises(StoryNotFoundError):
            editor.add_dependency("A", "nope")

    def test_errors_are_value_errors(self, editor):
        with pytest.raises(ValueError):
            editor.add_dependency("A", "B")

    def test_remove_dependency(self, editor):
        assert editor.remove_dependency("C", "B") is True
        assert editor.get_story("C").dependencies == ["ghost"]

    def test_remove_missing_dependency(self, editor):
        assert editor.remove_dependency("D", "A") is False
        assert editor.remove_dependency("nope", "A") is False

    def test_add_emits_event(self, editor):
        received = []

        def on_added(**data):
            received.append((data["story_id"], data["depends_on_id"]))

        observability_hooks.register_hook("dependency_added", on_added)
        try:
            editor.add_dependency("D", "A")
        finally:
            observability_hooks.unregister_hook("dependency_added", on_added)

        assert received == [("D", "A")]


class TestBlockedReport:
    """Test cases for blocked_report."""

    def test_lists_blockers(self, editor):
        report = editor.blocked_report()

        assert len(report) == 1
        assert report[0]["story"].id == "C"
        assert ids(report[0]["blocked_by"]) == ["B"]

    def test_done_stories_are_skipped(self):
        editor = DependencyEditor([
            Story("A", status="todo"),
            Story("B", status="done", dependencies=["A"]),
        ])

        assert editor.blocked_report() == []
