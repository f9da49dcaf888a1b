"""
workplan-scheduler: deterministic critical-path scheduling for work plans.

The public surface is ``schedule(params) -> ScheduleResult`` plus the domain
models it consumes and produces. Importing the package has no side effects;
logging and configuration are set up explicitly by the CLI or the caller.
"""

from __future__ import annotations

from workplan_scheduler.domain.models import (
    Dependency,
    DependencyType,
    ScheduledItem,
    ScheduleMode,
    ScheduleParams,
    ScheduleResult,
    ScheduleWarning,
    WarningType,
    WorkItemNode,
    WorkItemStatus,
)
from workplan_scheduler.scheduling.engine import schedule
from workplan_scheduler.scheduling.scope import ScheduleValidationError

__version__ = "0.1.0"

__all__ = [
    "Dependency",
    "DependencyType",
    "ScheduleMode",
    "ScheduleParams",
    "ScheduleResult",
    "ScheduleValidationError",
    "ScheduleWarning",
    "ScheduledItem",
    "WarningType",
    "WorkItemNode",
    "WorkItemStatus",
    "__version__",
    "schedule",
]
