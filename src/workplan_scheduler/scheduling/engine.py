"""
Scheduling engine entry point.

``schedule`` is a pure function of its ``ScheduleParams``: it builds a fresh
graph per call, never mutates its inputs and keeps no module state, so
concurrent callers need no locking. The only side effect is decision logging
through ``structlog``.

Pipeline: scope -> graph -> cycle check -> forward pass -> backward pass ->
float/critical path. A cycle short-circuits into a result carrying
``cycle_nodes``; it is never raised.
"""

from __future__ import annotations

from typing import Any

import structlog

from workplan_scheduler.domain.models import ScheduleParams, ScheduleResult
from workplan_scheduler.planning.task_graph import CycleError
from workplan_scheduler.scheduling.passes import (
    backward_pass,
    forward_pass,
    index_dependencies,
    resolve_float,
)
from workplan_scheduler.scheduling.scope import resolve_scope
from workplan_scheduler.scheduling.warnings import WarningCollector


def schedule(params: ScheduleParams, *, logger: Any | None = None) -> ScheduleResult:
    """
    Compute CPM dates for ``params``.

    Raises ``ScheduleValidationError`` when cascade mode is requested without an
    anchor. Every other condition (cycles, violated soft constraints, completed
    items that would move) is reported inside the returned result.
    """

    log = logger if logger is not None else structlog.get_logger(__name__)
    log.info(
        "schedule.start",
        mode=params.mode.value,
        anchor_work_item_id=params.anchor_work_item_id,
        work_item_count=len(params.work_items),
        dependency_count=len(params.dependencies),
        today=params.today.isoformat(),
    )

    scope = resolve_scope(params)
    for dependency in scope.dangling:
        log.debug(
            "schedule.dangling_dependency_dropped",
            predecessor_id=dependency.predecessor_id,
            successor_id=dependency.successor_id,
        )

    if scope.is_empty:
        log.info("schedule.complete", scheduled_count=0, critical_count=0, warning_count=0)
        return ScheduleResult()

    graph = scope.build_graph()
    try:
        order = graph.topological_sort()
    except CycleError:
        cycle_nodes = graph.cycle_nodes()
        log.warning("schedule.cycle_detected", cycle_nodes=list(cycle_nodes))
        return ScheduleResult(cycle_nodes=cycle_nodes)

    items = {item.id: item for item in scope.work_items}
    incoming, outgoing = index_dependencies(scope.dependencies)
    collector = WarningCollector()

    timings = forward_pass(order, items, incoming, today=params.today, collector=collector)
    project_finish = backward_pass(order, outgoing, timings)
    scheduled_items, critical_path = resolve_float(order, items, timings)

    log.info(
        "schedule.complete",
        scheduled_count=len(scheduled_items),
        critical_count=len(critical_path),
        warning_count=len(collector),
        project_finish=project_finish.isoformat() if project_finish is not None else None,
    )
    return ScheduleResult(
        scheduled_items=scheduled_items,
        critical_path=critical_path,
        warnings=collector.warnings,
    )


__all__ = ["schedule"]
