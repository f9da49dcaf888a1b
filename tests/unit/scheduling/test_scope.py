"""Unit tests for scheduling scope resolution."""

from __future__ import annotations

from datetime import date

import pytest

from workplan_scheduler.domain.models import (
    Dependency,
    ScheduleMode,
    ScheduleParams,
    WorkItemNode,
)
from workplan_scheduler.scheduling.scope import (
    ScheduleScope,
    ScheduleValidationError,
    resolve_scope,
)


def _params(
    mode: ScheduleMode,
    edges: list[tuple[str, str]],
    anchor: str | None = None,
) -> ScheduleParams:
    return ScheduleParams(
        mode=mode,
        work_items=tuple(WorkItemNode(id=node_id) for node_id in ("X", "A", "B", "C", "Z")),
        dependencies=tuple(
            Dependency(predecessor_id=parent, successor_id=child) for parent, child in edges
        ),
        today=date(2026, 1, 1),
        anchor_work_item_id=anchor,
    )


def test_full_mode_keeps_every_item_and_usable_edge() -> None:
    scope = resolve_scope(_params(ScheduleMode.FULL, [("X", "A"), ("A", "ghost")]))

    assert [item.id for item in scope.work_items] == ["X", "A", "B", "C", "Z"]
    assert [(d.predecessor_id, d.successor_id) for d in scope.dependencies] == [("X", "A")]
    assert [(d.predecessor_id, d.successor_id) for d in scope.dangling] == [("A", "ghost")]
    assert scope.is_empty is False


def test_cascade_keeps_anchor_closure_in_caller_order() -> None:
    edges = [("X", "A"), ("A", "C"), ("C", "B"), ("Z", "B")]
    scope = resolve_scope(_params(ScheduleMode.CASCADE, edges, anchor="A"))

    assert [item.id for item in scope.work_items] == ["A", "B", "C"]
    assert [(d.predecessor_id, d.successor_id) for d in scope.dependencies] == [
        ("A", "C"),
        ("C", "B"),
    ]


def test_cascade_without_anchor_raises() -> None:
    with pytest.raises(ScheduleValidationError) as error:
        resolve_scope(_params(ScheduleMode.CASCADE, []))
    assert str(error.value) == "anchorWorkItemId is required for cascade mode"


def test_cascade_with_unknown_anchor_is_empty() -> None:
    scope = resolve_scope(_params(ScheduleMode.CASCADE, [("X", "A")], anchor="nope"))

    assert scope.is_empty is True
    assert scope.dependencies == ()


def test_build_graph_is_fresh_per_call() -> None:
    scope = ScheduleScope(
        work_items=(WorkItemNode(id="A"), WorkItemNode(id="B")),
        dependencies=(Dependency(predecessor_id="A", successor_id="B"),),
    )

    first = scope.build_graph()
    second = scope.build_graph()

    assert first is not second
    assert first.nodes == ("A", "B")
    assert first.edges == (("A", "B"),)
    assert second.topological_sort() == ("A", "B")
