"""Expand milestone relationships into plain finish-to-start dependencies.

A milestone gathers contributing work items (``MilestoneLink``); a work item
may in turn wait on a milestone (``MilestoneDependency``). For scheduling,
each such wait becomes one zero-lag finish-to-start edge from every
contributor to the waiting item.
"""

from __future__ import annotations

from collections.abc import Iterable

from workplan_scheduler.domain.models import (
    Dependency,
    DependencyType,
    MilestoneDependency,
    MilestoneLink,
)


def expand_milestone_dependencies(
    links: Iterable[MilestoneLink],
    milestone_dependencies: Iterable[MilestoneDependency],
    *,
    existing: Iterable[Dependency] = (),
) -> tuple[Dependency, ...]:
    """
    Return synthetic finish-to-start edges for every milestone wait.

    Self-references are skipped, as are pairs already covered by a zero-lag
    finish-to-start edge in ``existing`` or earlier in the expansion.
    """

    contributors: dict[str, list[str]] = {}
    for link in links:
        contributors.setdefault(link.milestone_id, []).append(link.work_item_id)

    seen: set[tuple[str, str]] = {
        (dependency.predecessor_id, dependency.successor_id)
        for dependency in existing
        if dependency.dependency_type is DependencyType.FINISH_TO_START
        and dependency.lead_lag_days == 0
    }
    synthetic: list[Dependency] = []
    for waiting in milestone_dependencies:
        for contributor_id in contributors.get(waiting.milestone_id, ()):
            if contributor_id == waiting.work_item_id:
                continue
            key = (contributor_id, waiting.work_item_id)
            if key in seen:
                continue
            seen.add(key)
            synthetic.append(
                Dependency(
                    predecessor_id=contributor_id,
                    successor_id=waiting.work_item_id,
                    dependency_type=DependencyType.FINISH_TO_START,
                    lead_lag_days=0,
                )
            )
    return tuple(synthetic)


__all__ = ["MilestoneDependency", "MilestoneLink", "expand_milestone_dependencies"]
