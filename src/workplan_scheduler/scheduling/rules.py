"""Dependency-type date formulas for the forward and backward passes.

Forward formulas give the earliest start a successor may take given one
incoming edge; backward formulas mirror them and give the latest finish a
predecessor may take given one outgoing edge. All arithmetic is in whole
calendar days.
"""

from __future__ import annotations

from datetime import date, timedelta

from workplan_scheduler.domain.models import DependencyType


def forward_start(
    dependency_type: DependencyType,
    *,
    predecessor_start: date,
    predecessor_finish: date,
    lag_days: int,
    successor_duration: int,
) -> date:
    """Earliest successor start implied by one incoming edge."""

    lag = timedelta(days=lag_days)
    duration = timedelta(days=successor_duration)
    if dependency_type is DependencyType.FINISH_TO_START:
        return predecessor_finish + lag
    if dependency_type is DependencyType.START_TO_START:
        return predecessor_start + lag
    if dependency_type is DependencyType.FINISH_TO_FINISH:
        return predecessor_finish + lag - duration
    if dependency_type is DependencyType.START_TO_FINISH:
        return predecessor_start + lag - duration
    raise ValueError(f"unsupported dependency type: {dependency_type!r}")


def backward_finish(
    dependency_type: DependencyType,
    *,
    successor_latest_start: date,
    successor_latest_finish: date,
    lag_days: int,
    predecessor_duration: int,
) -> date:
    """Latest predecessor finish implied by one outgoing edge."""

    lag = timedelta(days=lag_days)
    duration = timedelta(days=predecessor_duration)
    if dependency_type is DependencyType.FINISH_TO_START:
        return successor_latest_start - lag
    if dependency_type is DependencyType.START_TO_START:
        return successor_latest_start - lag + duration
    if dependency_type is DependencyType.FINISH_TO_FINISH:
        return successor_latest_finish - lag
    if dependency_type is DependencyType.START_TO_FINISH:
        return successor_latest_finish - lag + duration
    raise ValueError(f"unsupported dependency type: {dependency_type!r}")


__all__ = ["backward_finish", "forward_start"]
