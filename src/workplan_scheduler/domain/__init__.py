"""Domain types shared across the scheduler: work items, dependencies, results.

The domain layer is free of IO side effects and depends only on the stdlib.
"""

from __future__ import annotations

from workplan_scheduler.domain.models import (
    CanonicalModel,
    Dependency,
    DependencyType,
    MilestoneDependency,
    MilestoneLink,
    ScheduledItem,
    ScheduleMode,
    ScheduleParams,
    ScheduleResult,
    ScheduleWarning,
    WarningType,
    WorkItemNode,
    WorkItemStatus,
)

__all__ = [
    "CanonicalModel",
    "Dependency",
    "DependencyType",
    "MilestoneDependency",
    "MilestoneLink",
    "ScheduleMode",
    "ScheduleParams",
    "ScheduleResult",
    "ScheduleWarning",
    "ScheduledItem",
    "WarningType",
    "WorkItemNode",
    "WorkItemStatus",
]
