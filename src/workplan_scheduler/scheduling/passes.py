"""CPM forward and backward passes plus float resolution.

Both passes walk a precomputed topological order of the in-scope items.
The forward pass fixes earliest start/finish (ES/EF) and lateness; the
backward pass fixes latest start/finish (LS/LF) against the project finish;
``resolve_float`` derives total float and the critical path from both.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date, timedelta

from workplan_scheduler.domain.models import (
    Dependency,
    ScheduledItem,
    WorkItemNode,
    WorkItemStatus,
)
from workplan_scheduler.scheduling import rules
from workplan_scheduler.scheduling.warnings import WarningCollector


@dataclass(slots=True)
class NodeTiming:
    """Mutable per-node working state shared by both passes."""

    duration: int
    earliest_start: date
    earliest_finish: date
    is_late: bool = False
    latest_start: date | None = None
    latest_finish: date | None = None


def index_dependencies(
    dependencies: Sequence[Dependency],
) -> tuple[dict[str, list[Dependency]], dict[str, list[Dependency]]]:
    """Return ``(incoming, outgoing)`` edge lists keyed by work item id."""

    incoming: dict[str, list[Dependency]] = {}
    outgoing: dict[str, list[Dependency]] = {}
    for dependency in dependencies:
        incoming.setdefault(dependency.successor_id, []).append(dependency)
        outgoing.setdefault(dependency.predecessor_id, []).append(dependency)
    return incoming, outgoing


def forward_pass(
    order: Sequence[str],
    items: Mapping[str, WorkItemNode],
    incoming: Mapping[str, Sequence[Dependency]],
    *,
    today: date,
    collector: WarningCollector,
) -> dict[str, NodeTiming]:
    """Compute ES/EF and lateness for every id in ``order``."""

    timings: dict[str, NodeTiming] = {}
    for work_item_id in order:
        item = items[work_item_id]
        if item.duration_days is None:
            collector.no_duration(work_item_id)

        timing = _forward_node(item, incoming.get(work_item_id, ()), timings, today=today)
        timings[work_item_id] = timing

        if item.start_before is not None and timing.earliest_start > item.start_before:
            collector.start_before_violated(
                work_item_id,
                scheduled_start=timing.earliest_start,
                start_before=item.start_before,
            )
        if item.status is WorkItemStatus.COMPLETED and _completed_dates_change(item, timing):
            collector.already_completed(work_item_id)

    return timings


def backward_pass(
    order: Sequence[str],
    outgoing: Mapping[str, Sequence[Dependency]],
    timings: Mapping[str, NodeTiming],
) -> date | None:
    """Fill LS/LF in reverse topological order; return the project finish."""

    if not order:
        return None

    project_finish = max(
        timings[work_item_id].earliest_finish
        for work_item_id in order
        if not outgoing.get(work_item_id)
    )

    for work_item_id in reversed(order):
        timing = timings[work_item_id]
        successors = outgoing.get(work_item_id, ())
        if not successors:
            latest_finish = project_finish
        else:
            latest_finish = min(
                _backward_edge(dependency, timing.duration, timings) for dependency in successors
            )
        timing.latest_finish = latest_finish
        timing.latest_start = latest_finish - timedelta(days=timing.duration)

    return project_finish


def resolve_float(
    order: Sequence[str],
    items: Mapping[str, WorkItemNode],
    timings: Mapping[str, NodeTiming],
) -> tuple[tuple[ScheduledItem, ...], tuple[str, ...]]:
    """Build scheduled items and the critical path, both in topological order."""

    scheduled: list[ScheduledItem] = []
    critical_path: list[str] = []
    for work_item_id in order:
        item = items[work_item_id]
        timing = timings[work_item_id]
        if timing.latest_start is None or timing.latest_finish is None:
            raise ValueError(f"backward pass has not visited {work_item_id!r}")

        total_float = max(0, (timing.latest_start - timing.earliest_start).days)
        is_critical = total_float == 0
        if is_critical:
            critical_path.append(work_item_id)

        scheduled.append(
            ScheduledItem(
                work_item_id=work_item_id,
                previous_start_date=item.start_date,
                previous_end_date=item.end_date,
                scheduled_start_date=timing.earliest_start,
                scheduled_end_date=timing.earliest_finish,
                latest_start_date=timing.latest_start,
                latest_finish_date=timing.latest_finish,
                total_float=total_float,
                is_critical=is_critical,
                is_late=timing.is_late,
            )
        )
    return tuple(scheduled), tuple(critical_path)


def _forward_node(
    item: WorkItemNode,
    predecessors: Sequence[Dependency],
    timings: Mapping[str, NodeTiming],
    *,
    today: date,
) -> NodeTiming:
    duration = item.duration
    is_late = False

    if item.actual_start_date is not None:
        earliest_start = item.actual_start_date
    else:
        if not predecessors:
            if item.status is WorkItemStatus.COMPLETED:
                earliest_start = today
            else:
                earliest_start = item.start_date if item.start_date is not None else today
        else:
            earliest_start = max(
                _forward_edge(dependency, duration, timings) for dependency in predecessors
            )
        if item.start_after is not None and item.start_after > earliest_start:
            earliest_start = item.start_after

    # An actual start fixes ES; any actual date keeps the item from being late.
    uses_actual = item.has_actual_dates
    if (
        item.actual_start_date is None
        and item.status is WorkItemStatus.NOT_STARTED
        and earliest_start < today
    ):
        earliest_start = today
        is_late = not uses_actual

    if item.actual_end_date is not None:
        earliest_finish = item.actual_end_date
    else:
        earliest_finish = earliest_start + timedelta(days=duration)

    if (
        not uses_actual
        and item.status is WorkItemStatus.IN_PROGRESS
        and earliest_finish < today
    ):
        earliest_finish = today
        is_late = True

    return NodeTiming(
        duration=duration,
        earliest_start=earliest_start,
        earliest_finish=earliest_finish,
        is_late=is_late,
    )


def _forward_edge(
    dependency: Dependency,
    successor_duration: int,
    timings: Mapping[str, NodeTiming],
) -> date:
    predecessor = timings[dependency.predecessor_id]
    return rules.forward_start(
        dependency.dependency_type,
        predecessor_start=predecessor.earliest_start,
        predecessor_finish=predecessor.earliest_finish,
        lag_days=dependency.lead_lag_days,
        successor_duration=successor_duration,
    )


def _backward_edge(
    dependency: Dependency,
    predecessor_duration: int,
    timings: Mapping[str, NodeTiming],
) -> date:
    successor = timings[dependency.successor_id]
    if successor.latest_start is None or successor.latest_finish is None:
        raise ValueError(f"successor {dependency.successor_id!r} visited out of order")
    return rules.backward_finish(
        dependency.dependency_type,
        successor_latest_start=successor.latest_start,
        successor_latest_finish=successor.latest_finish,
        lag_days=dependency.lead_lag_days,
        predecessor_duration=predecessor_duration,
    )


def _completed_dates_change(item: WorkItemNode, timing: NodeTiming) -> bool:
    start_changes = item.start_date is not None and item.start_date != timing.earliest_start
    end_changes = item.end_date is not None and item.end_date != timing.earliest_finish
    return start_changes or end_changes


__all__ = [
    "NodeTiming",
    "backward_pass",
    "forward_pass",
    "index_dependencies",
    "resolve_float",
]
