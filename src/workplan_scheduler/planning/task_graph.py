"""Index-based dependency graph with deterministic traversal.

Node ids are mapped to integer handles in insertion order. Every traversal
(topological order, cycle detection, reachability) visits nodes and edges in
that order, so the same input always yields the same output.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from heapq import heapify, heappop, heappush

_WHITE = 0
_GREY = 1
_BLACK = 2


class CycleError(ValueError):
    """Raised when a cycle is detected in the task graph."""

    cycles: tuple[tuple[str, ...], ...]

    def __init__(self, cycles: Iterable[Sequence[str]]) -> None:
        normalized: tuple[tuple[str, ...], ...] = tuple(tuple(path) for path in cycles)
        self.cycles = normalized

        if not normalized:
            message = "Task graph contains at least one cycle."
        else:
            preview = ", ".join(" -> ".join(path) for path in normalized[:3])
            suffix = "..." if len(normalized) > 3 else ""
            message = f"Task graph contains cycle(s): {preview}{suffix}"
        super().__init__(message)


class TaskGraph:
    """Directed graph of work item ids keyed by stable integer handles."""

    __slots__ = ("_ids", "_index", "_children", "_parents", "_edges")

    def __init__(
        self,
        nodes: Iterable[str] | None = None,
        edges: Iterable[tuple[str, str]] | None = None,
    ) -> None:
        self._ids: list[str] = []
        self._index: dict[str, int] = {}
        self._children: list[list[int]] = []
        self._parents: list[list[int]] = []
        self._edges: dict[tuple[int, int], None] = {}

        if nodes is not None:
            for node_id in nodes:
                self.add_node(node_id)

        if edges is not None:
            for parent, child in edges:
                self.add_edge(parent, child)

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._index

    @property
    def nodes(self) -> tuple[str, ...]:
        """All node ids in insertion order."""
        return tuple(self._ids)

    @property
    def edges(self) -> tuple[tuple[str, str], ...]:
        """All edges as ``(parent, child)`` pairs in insertion order."""
        return tuple((self._ids[parent], self._ids[child]) for parent, child in self._edges)

    def index_of(self, node_id: str) -> int:
        """Return the integer handle assigned to ``node_id``."""
        self._assert_node_exists(node_id)
        return self._index[node_id]

    def add_node(self, node_id: str) -> int:
        """Add a node if it does not already exist and return its handle."""
        self._validate_node_id(node_id)
        existing = self._index.get(node_id)
        if existing is not None:
            return existing

        handle = len(self._ids)
        self._ids.append(node_id)
        self._index[node_id] = handle
        self._children.append([])
        self._parents.append([])
        return handle

    def add_edge(self, parent: str, child: str) -> None:
        """Add a directed edge ``parent -> child``; parallel edges collapse into one."""
        parent_index = self.add_node(parent)
        child_index = self.add_node(child)

        key = (parent_index, child_index)
        if key in self._edges:
            return

        self._edges[key] = None
        self._children[parent_index].append(child_index)
        self._parents[child_index].append(parent_index)

    def topological_sort(self) -> tuple[str, ...]:
        """Return a deterministic topological ordering or raise ``CycleError``.

        Ready nodes are released lowest handle first, so independent items keep
        their insertion order.
        """
        indegree = [len(parents) for parents in self._parents]
        ready = [index for index, degree in enumerate(indegree) if degree == 0]
        heapify(ready)

        order: list[int] = []
        while ready:
            node = heappop(ready)
            order.append(node)

            for child in self._children[node]:
                indegree[child] -= 1
                if indegree[child] == 0:
                    heappush(ready, child)

        if len(order) != len(self._ids):
            raise CycleError(self.detect_cycles())

        return tuple(self._ids[index] for index in order)

    def detect_cycles(self) -> tuple[tuple[str, ...], ...]:
        """
        Detect directed cycles with an iterative three-colour depth-first search.

        Every back edge yields one closed path, e.g. ``("A", "B", "C", "A")``,
        rotated to start at its earliest-inserted node.
        """
        state = [_WHITE] * len(self._ids)
        stack: list[int] = []
        stack_index: dict[int, int] = {}
        cycles: dict[tuple[int, ...], None] = {}

        for start in range(len(self._ids)):
            if state[start] != _WHITE:
                continue

            state[start] = _GREY
            stack_index[start] = len(stack)
            stack.append(start)
            frames: list[tuple[int, Iterator[int]]] = [(start, iter(self._children[start]))]

            while frames:
                node, child_iter = frames[-1]

                try:
                    child = next(child_iter)
                except StopIteration:
                    frames.pop()
                    state[node] = _BLACK
                    stack.pop()
                    del stack_index[node]
                    continue

                if state[child] == _WHITE:
                    state[child] = _GREY
                    stack_index[child] = len(stack)
                    stack.append(child)
                    frames.append((child, iter(self._children[child])))
                    continue

                if state[child] == _GREY:
                    cycle = stack[stack_index[child] :] + [child]
                    cycles[self._canonicalize_cycle(cycle)] = None

        return tuple(tuple(self._ids[index] for index in cycle) for cycle in sorted(cycles))

    def cycle_nodes(self) -> tuple[str, ...]:
        """Return the ids lying on any detected cycle, in insertion order."""
        members: set[str] = set()
        for cycle in self.detect_cycles():
            members.update(cycle)
        return tuple(node_id for node_id in self._ids if node_id in members)

    def reachable_from(self, node_id: str) -> tuple[str, ...]:
        """Return ``node_id`` plus every node reachable along successor edges.

        The closure is returned in insertion order, not traversal order.
        """
        start = self.index_of(node_id)
        visited: set[int] = {start}
        pending: list[int] = list(self._children[start])

        while pending:
            node = pending.pop()
            if node in visited:
                continue

            visited.add(node)
            for child in self._children[node]:
                if child not in visited:
                    pending.append(child)

        return tuple(self._ids[index] for index in sorted(visited))

    def find_path(self, source: str, target: str) -> tuple[str, ...] | None:
        """Return a ``source -> ... -> target`` path along successor edges, if any."""
        source_index = self.index_of(source)
        target_index = self.index_of(target)

        came_from: dict[int, int | None] = {source_index: None}
        pending: list[int] = [source_index]
        while pending:
            node = pending.pop()
            if node == target_index:
                path: list[str] = []
                cursor: int | None = node
                while cursor is not None:
                    path.append(self._ids[cursor])
                    cursor = came_from[cursor]
                path.reverse()
                return tuple(path)
            for child in reversed(self._children[node]):
                if child not in came_from:
                    came_from[child] = node
                    pending.append(child)
        return None

    def would_create_cycle(self, predecessor: str, successor: str) -> tuple[str, ...] | None:
        """
        Check whether adding ``predecessor -> successor`` would close a cycle.

        Returns the closing path ``(predecessor, ..., successor)`` when it would,
        otherwise ``None``. Unknown ids are treated as isolated nodes.
        """
        self._validate_node_id(predecessor)
        self._validate_node_id(successor)
        if predecessor == successor:
            return (predecessor, successor)
        if predecessor not in self._index or successor not in self._index:
            return None

        back_path = self.find_path(successor, predecessor)
        if back_path is None:
            return None
        return (predecessor, *back_path)

    @staticmethod
    def _canonicalize_cycle(cycle: Sequence[int]) -> tuple[int, ...]:
        if len(cycle) < 2:
            raise ValueError("Cycle path must contain at least two nodes.")

        core = tuple(cycle[:-1])
        if len(core) == 1:
            return (core[0], core[0])

        offset = core.index(min(core))
        rotated = core[offset:] + core[:offset]
        return rotated + (rotated[0],)

    @staticmethod
    def _validate_node_id(node_id: str) -> None:
        if not isinstance(node_id, str) or not node_id:
            raise ValueError("Node ID must be a non-empty string.")

    def _assert_node_exists(self, node_id: str) -> None:
        if node_id not in self._index:
            raise KeyError(f"Unknown node: {node_id}")


__all__ = ["CycleError", "TaskGraph"]
