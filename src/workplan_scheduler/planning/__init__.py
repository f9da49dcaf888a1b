"""Planning layer: the dependency graph the scheduling passes walk."""

from __future__ import annotations

from workplan_scheduler.planning.task_graph import CycleError, TaskGraph

__all__ = ["CycleError", "TaskGraph"]
