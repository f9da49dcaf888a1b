"""
Reschedule planning: diff computed dates against stored ones.

Callers own persistence. ``plan_reschedule`` runs a full-mode schedule
(milestone waits expanded into edges) and returns only the items whose
stored dates would change; ``DailyRescheduleTracker`` gates such a run to at
most once per calendar day.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from datetime import date
from typing import Any, TypeVar

import structlog

from workplan_scheduler.domain.models import (
    CanonicalModel,
    Dependency,
    MilestoneDependency,
    MilestoneLink,
    ScheduleMode,
    ScheduleParams,
    ScheduleResult,
    WorkItemNode,
)
from workplan_scheduler.scheduling.engine import schedule
from workplan_scheduler.scheduling.milestones import expand_milestone_dependencies

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class DateChange(CanonicalModel):
    """Stored versus newly computed dates for one work item."""

    work_item_id: str
    previous_start_date: date | None
    previous_end_date: date | None
    new_start_date: date
    new_end_date: date

    @property
    def start_changed(self) -> bool:
        return self.previous_start_date != self.new_start_date

    @property
    def end_changed(self) -> bool:
        return self.previous_end_date != self.new_end_date


def collect_date_changes(
    work_items: Iterable[WorkItemNode],
    result: ScheduleResult,
) -> tuple[DateChange, ...]:
    """Return a change for each scheduled item whose start or end differs from storage."""

    if result.has_cycle:
        return ()

    stored = {item.id: item for item in work_items}
    changes: list[DateChange] = []
    for scheduled in result.scheduled_items:
        item = stored.get(scheduled.work_item_id)
        if item is None:
            continue
        if (
            item.start_date == scheduled.scheduled_start_date
            and item.end_date == scheduled.scheduled_end_date
        ):
            continue
        changes.append(
            DateChange(
                work_item_id=item.id,
                previous_start_date=item.start_date,
                previous_end_date=item.end_date,
                new_start_date=scheduled.scheduled_start_date,
                new_end_date=scheduled.scheduled_end_date,
            )
        )
    return tuple(changes)


def plan_reschedule(
    work_items: Sequence[WorkItemNode],
    dependencies: Sequence[Dependency],
    today: date,
    *,
    milestone_links: Iterable[MilestoneLink] = (),
    milestone_dependencies: Iterable[MilestoneDependency] = (),
    logger: Any | None = None,
) -> tuple[DateChange, ...]:
    """
    Schedule the whole plan and return the date changes to persist.

    A cyclic plan yields no changes; the cycle is logged by the engine.
    """

    if not work_items:
        return ()

    synthetic = expand_milestone_dependencies(
        milestone_links,
        milestone_dependencies,
        existing=dependencies,
    )
    params = ScheduleParams(
        mode=ScheduleMode.FULL,
        work_items=tuple(work_items),
        dependencies=(*dependencies, *synthetic),
        today=today,
    )
    result = schedule(params, logger=logger)
    changes = collect_date_changes(work_items, result)

    log = logger if logger is not None else structlog.get_logger(__name__)
    log.info(
        "reschedule.planned",
        synthetic_dependency_count=len(synthetic),
        changed_count=len(changes),
        cycle_detected=result.has_cycle,
    )
    return changes


class DailyRescheduleTracker:
    """Runs a reschedule action at most once per calendar day.

    The lock is held while the action runs, so concurrent callers on the same
    day wait and then skip. A failing action does not mark the day as done.
    """

    __slots__ = ("_lock", "_last_run")

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._last_run: date | None = None

    @property
    def last_run(self) -> date | None:
        with self._lock:
            return self._last_run

    def ensure(self, today: date, action: Callable[[], T]) -> T | None:
        """Run ``action`` unless it already ran for ``today``; return its result or ``None``."""
        with self._lock:
            if self._last_run == today:
                return None
            outcome = action()
            self._last_run = today
            return outcome

    def reset(self) -> None:
        with self._lock:
            self._last_run = None


__all__ = [
    "DailyRescheduleTracker",
    "DateChange",
    "collect_date_changes",
    "plan_reschedule",
]
