"""Mode controller: decide which work items and edges a scheduling run covers."""

from __future__ import annotations

from dataclasses import dataclass

from workplan_scheduler.constants import CASCADE_ANCHOR_REQUIRED_MESSAGE
from workplan_scheduler.domain.models import (
    Dependency,
    ScheduleMode,
    ScheduleParams,
    WorkItemNode,
)
from workplan_scheduler.planning.task_graph import TaskGraph


class ScheduleValidationError(ValueError):
    """Raised when scheduling parameters are structurally unusable."""


@dataclass(frozen=True, slots=True)
class ScheduleScope:
    """Work items and edges in scope for one run, in caller order."""

    work_items: tuple[WorkItemNode, ...]
    dependencies: tuple[Dependency, ...]
    dangling: tuple[Dependency, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.work_items

    def build_graph(self) -> TaskGraph:
        """Return a fresh graph over the in-scope items and edges."""
        graph = TaskGraph(nodes=(item.id for item in self.work_items))
        for dependency in self.dependencies:
            graph.add_edge(dependency.predecessor_id, dependency.successor_id)
        return graph


def resolve_scope(params: ScheduleParams) -> ScheduleScope:
    """
    Restrict ``params`` to the items a run must schedule.

    ``full`` mode keeps every item. ``cascade`` mode keeps the anchor and
    everything reachable from it along successor edges; edges whose predecessor
    falls outside that set are dropped so in-scope items act as roots. An anchor
    that is not among the work items yields an empty scope.

    Edges naming an unknown work item are never scheduled and are reported in
    ``dangling``.
    """

    known_ids = {item.id for item in params.work_items}
    usable: list[Dependency] = []
    dangling: list[Dependency] = []
    for dependency in params.dependencies:
        if dependency.predecessor_id in known_ids and dependency.successor_id in known_ids:
            usable.append(dependency)
        else:
            dangling.append(dependency)

    if params.mode is ScheduleMode.FULL:
        return ScheduleScope(
            work_items=params.work_items,
            dependencies=tuple(usable),
            dangling=tuple(dangling),
        )

    anchor_id = params.anchor_work_item_id
    if anchor_id is None:
        raise ScheduleValidationError(CASCADE_ANCHOR_REQUIRED_MESSAGE)

    if anchor_id not in known_ids:
        return ScheduleScope(work_items=(), dependencies=(), dangling=tuple(dangling))

    full_scope = ScheduleScope(work_items=params.work_items, dependencies=tuple(usable))
    in_scope = set(full_scope.build_graph().reachable_from(anchor_id))
    return ScheduleScope(
        work_items=tuple(item for item in params.work_items if item.id in in_scope),
        dependencies=tuple(
            dependency
            for dependency in usable
            if dependency.predecessor_id in in_scope and dependency.successor_id in in_scope
        ),
        dangling=tuple(dangling),
    )


__all__ = ["ScheduleScope", "ScheduleValidationError", "resolve_scope"]
