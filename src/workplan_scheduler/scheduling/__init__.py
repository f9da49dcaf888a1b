"""Scheduling layer: CPM passes, scope control, and reschedule helpers."""

from __future__ import annotations

from workplan_scheduler.scheduling.engine import schedule
from workplan_scheduler.scheduling.milestones import expand_milestone_dependencies
from workplan_scheduler.scheduling.reschedule import (
    DailyRescheduleTracker,
    DateChange,
    collect_date_changes,
    plan_reschedule,
)
from workplan_scheduler.scheduling.scope import (
    ScheduleScope,
    ScheduleValidationError,
    resolve_scope,
)
from workplan_scheduler.scheduling.timeline import DateRange, compute_date_range
from workplan_scheduler.scheduling.warnings import WarningCollector

__all__ = [
    "DailyRescheduleTracker",
    "DateChange",
    "DateRange",
    "ScheduleScope",
    "ScheduleValidationError",
    "WarningCollector",
    "collect_date_changes",
    "compute_date_range",
    "expand_milestone_dependencies",
    "plan_reschedule",
    "resolve_scope",
    "schedule",
]
