"""Dependency analysis for a filtered view of the story list.

This module ties the graph builder, level resolver, critical path and
blocked-story calculation together into a single recompute-on-read call.
"""

from __future__ import annotations

import logging
from collections.abc import Sized
from typing import Any, List, Optional, Sequence

from .blocking import blocked_stories
from .graph import build_graph, critical_path, resolve_levels
from .models import AnalysisOptions, DependencyAnalysis, Story, TieBreak
from .storydeps_logging import (
    log_cycle_detected,
    log_error_with_context,
    log_graph_analysis,
    log_operation,
    log_performance,
)

logger = logging.getLogger("storydeps.analysis")

ALL = "all"


def _matches(value: Optional[str], selected: Optional[str]) -> bool:
    return selected is None or selected == ALL or value == selected


def filter_stories(stories: Sequence[Story], options: Optional[AnalysisOptions] = None) -> List[Story]:
    """Keep the stories matching the sprint and epic selections."""
    options = options or AnalysisOptions()
    return [
        story for story in stories
        if _matches(story.sprint_id, options.sprint_id) and _matches(story.epic_id, options.epic_id)
    ]


def _story_count(stories: Sequence[Story], *args: Any, **kwargs: Any) -> Optional[int]:
    return len(stories) if isinstance(stories, Sized) else None


@log_performance("analyze_dependencies", size_of=_story_count)
def analyze(stories: Sequence[Story], options: Optional[AnalysisOptions] = None) -> DependencyAnalysis:
    """Analyse story dependencies for the view selected by ``options``.

    Blocked stories are resolved against the full ``stories`` list, so a
    dependency filtered out of the view still counts when it is not done.
    """
    options = options or AnalysisOptions()
    all_stories = list(stories)

    try:
        with log_operation(
            "analyze_dependencies",
            story_count=len(all_stories),
            sprint_id=options.sprint_id,
            epic_id=options.epic_id,
            tie_break=TieBreak(options.tie_break).value,
        ) as results:
            view = filter_stories(all_stories, options)
            graph = build_graph(view)
            resolve_levels(graph)

            path = critical_path(graph, options.tie_break)
            circular = [node.story for node in graph.values() if node.has_circular]

            analysis = DependencyAnalysis(
                stories=view,
                graph=graph,
                critical_path=path,
                blocked=blocked_stories(view, all_stories),
                root_stories=[story for story in view if not story.dependencies],
                stories_with_dependencies=[
                    story for story in view
                    if story.dependencies or graph[story.id].dependents
                ],
                circular_stories=circular,
                max_level=max((node.level for node in graph.values()), default=0),
            )
            results.update(
                node_count=len(graph),
                max_level=analysis.max_level,
                critical_path=[story.id for story in path],
                circular_stories=[story.id for story in circular],
            )

            if circular:
                logger.warning(f"{len(circular)} stories are part of a dependency cycle")
                log_cycle_detected([story.id for story in circular])

            log_graph_analysis(
                story_count=len(all_stories),
                node_count=len(graph),
                max_level=analysis.max_level,
                blocked_count=len(analysis.blocked),
            )
            return analysis

    except Exception as e:
        log_error_with_context(e, {
            "operation": "analyze_dependencies",
            "story_count": len(all_stories),
        })
        raise
