"""Unit tests for milestone dependency expansion."""

from __future__ import annotations

from datetime import date

from workplan_scheduler.domain.models import (
    Dependency,
    DependencyType,
    MilestoneDependency,
    MilestoneLink,
    ScheduleMode,
    ScheduleParams,
    WorkItemNode,
)
from workplan_scheduler.scheduling import expand_milestone_dependencies, schedule


def _pairs(dependencies: tuple[Dependency, ...]) -> list[tuple[str, str]]:
    return [(d.predecessor_id, d.successor_id) for d in dependencies]


def test_each_contributor_gets_a_finish_to_start_edge() -> None:
    links = [
        MilestoneLink(milestone_id="M1", work_item_id="A"),
        MilestoneLink(milestone_id="M1", work_item_id="B"),
        MilestoneLink(milestone_id="M2", work_item_id="C"),
    ]
    waits = [MilestoneDependency(work_item_id="D", milestone_id="M1")]

    synthetic = expand_milestone_dependencies(links, waits)

    assert _pairs(synthetic) == [("A", "D"), ("B", "D")]
    assert all(d.dependency_type is DependencyType.FINISH_TO_START for d in synthetic)
    assert all(d.lead_lag_days == 0 for d in synthetic)


def test_self_references_and_existing_edges_are_skipped() -> None:
    links = [
        MilestoneLink(milestone_id="M1", work_item_id="A"),
        MilestoneLink(milestone_id="M1", work_item_id="B"),
        MilestoneLink(milestone_id="M1", work_item_id="C"),
    ]
    waits = [
        MilestoneDependency(work_item_id="C", milestone_id="M1"),
        MilestoneDependency(work_item_id="C", milestone_id="M1"),
    ]
    existing = [
        Dependency(predecessor_id="A", successor_id="C"),
        Dependency(predecessor_id="B", successor_id="C", lead_lag_days=2),
    ]

    synthetic = expand_milestone_dependencies(links, waits, existing=existing)

    # B -> C exists only with lag, so the zero-lag edge is still added.
    assert _pairs(synthetic) == [("B", "C")]


def test_unknown_milestone_expands_to_nothing() -> None:
    waits = [MilestoneDependency(work_item_id="D", milestone_id="missing")]

    assert expand_milestone_dependencies([], waits) == ()


def test_expanded_edges_drive_the_schedule() -> None:
    items = (
        WorkItemNode(id="A", duration_days=3),
        WorkItemNode(id="B", duration_days=6),
        WorkItemNode(id="D", duration_days=1),
    )
    synthetic = expand_milestone_dependencies(
        [
            MilestoneLink(milestone_id=1, work_item_id="A"),  # type: ignore[arg-type]
            MilestoneLink(milestone_id=1, work_item_id="B"),  # type: ignore[arg-type]
        ],
        [MilestoneDependency(work_item_id="D", milestone_id="1")],
    )
    result = schedule(
        ScheduleParams(
            mode=ScheduleMode.FULL,
            work_items=items,
            dependencies=synthetic,
            today=date(2026, 1, 1),
        )
    )

    assert result.items_by_id()["D"].scheduled_start_date == date(2026, 1, 7)
    assert result.critical_path == ("B", "D")
