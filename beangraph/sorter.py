"""
TopologicalSorter

This module computes the instantiation order of a dependency graph.

Cycles are found by a depth-first traversal that marks nodes as
unvisited, in progress, or done; an edge into an in-progress node closes
a cycle. A cycle made only of constructor edges has no valid order and
is rejected. A cycle with a setter or field edge on a singleton is broken
at the earliest declared such edge: that edge is deferred and filled in
once every member of the cycle has been allocated.

The remaining acyclic graph is ordered with Kahn's algorithm, breaking
ties by registration order so identical input always yields an identical
sequence.
"""

import heapq
import logging
from collections import defaultdict
from typing import Dict, FrozenSet, List, Optional, Set, Tuple

from .definition import BeanDefinition
from .exceptions import CircularDependencyError
from .graph import DependencyEdge, DependencyGraph

logger = logging.getLogger(__name__)

_UNVISITED, _IN_PROGRESS, _DONE = 0, 1, 2


def format_cycle(cycle: List[DependencyEdge]) -> str:
    names = [edge.dependent.display_name for edge in cycle]
    names.append(cycle[0].dependent.display_name)
    return " -> ".join(names)


class InstantiationPlan:
    """Result of sorting a dependency graph.

    Attributes:
        order: Definitions in instantiation order
        deferred_edges: Edges filled in after allocation to break cycles
    """

    def __init__(
        self,
        order: List[BeanDefinition],
        deferred_edges: FrozenSet[DependencyEdge],
        groups: Dict[BeanDefinition, Tuple[BeanDefinition, ...]],
    ):
        self.order = order
        self.deferred_edges = deferred_edges
        self._groups = groups
        self._positions = {definition: i for i, definition in enumerate(order)}

    def group_of(self, definition: BeanDefinition) -> Tuple[BeanDefinition, ...]:
        """Members of the cycle group containing definition, in plan order.

        Returns an empty tuple when the definition is not part of a cycle.
        """
        return self._groups.get(definition, ())

    def is_deferred(self, edge: DependencyEdge) -> bool:
        return edge in self.deferred_edges

    def position_of(self, definition: BeanDefinition) -> int:
        return self._positions[definition]

    def __len__(self) -> int:
        return len(self.order)


class TopologicalSorter:
    """Compute an :class:`InstantiationPlan` or prove that none exists."""

    def sort(self, graph: DependencyGraph) -> InstantiationPlan:
        """Sort the graph, breaking resolvable cycles.

        Raises:
            CircularDependencyError: When a cycle consists only of
                constructor edges, passes through a prototype bean, or
                has no setter/field edge on a singleton to break at
        """
        deferred: Set[DependencyEdge] = set()
        while True:
            cycle = self.find_cycle(graph, deferred)
            if cycle is None:
                break
            edge = self._choose_break_edge(graph, cycle)
            deferred.add(edge)
            logger.warning(
                "Circular dependency %s broken at %r; it will be injected after allocation",
                format_cycle(cycle), edge,
            )

        order = self._order(graph, deferred)
        groups = self._cycle_groups(graph, order)
        self._reject_prototype_groups(groups)
        return InstantiationPlan(order, frozenset(deferred), groups)

    @staticmethod
    def find_cycle(
        graph: DependencyGraph,
        ignored: Optional[Set[DependencyEdge]] = None,
    ) -> Optional[List[DependencyEdge]]:
        """Return the first cycle found as a list of edges, or None.

        Nodes are visited in registration order and edges in declaration
        order. Edges in ``ignored`` are skipped.
        """
        ignored = ignored or set()
        state: Dict[BeanDefinition, int] = defaultdict(int)

        for root in graph.nodes:
            if state[root] != _UNVISITED:
                continue

            state[root] = _IN_PROGRESS
            path_nodes = [root]
            path_edges: List[DependencyEdge] = []
            work = [iter(graph.edges_from(root))]

            while work:
                edge = next(work[-1], None)
                if edge is None:
                    state[path_nodes.pop()] = _DONE
                    work.pop()
                    if path_edges:
                        path_edges.pop()
                    continue

                if edge in ignored:
                    continue

                target = edge.dependency
                if state[target] == _IN_PROGRESS:
                    start = path_nodes.index(target)
                    return path_edges[start:] + [edge]
                if state[target] == _UNVISITED:
                    state[target] = _IN_PROGRESS
                    path_nodes.append(target)
                    path_edges.append(edge)
                    work.append(iter(graph.edges_from(target)))

        return None

    @staticmethod
    def _choose_break_edge(graph: DependencyGraph, cycle: List[DependencyEdge]) -> DependencyEdge:
        prototypes = [e.dependent for e in cycle if not e.dependent.is_singleton]
        if prototypes:
            raise CircularDependencyError(
                f"Circular dependency detected: {format_cycle(cycle)}\n"
                f"Prototype beans cannot take part in a cycle: "
                f"{', '.join(p.display_name for p in prototypes)}"
            )

        candidates = [e for e in cycle if not e.is_constructor]
        if not candidates:
            raise CircularDependencyError(
                f"Circular dependency detected: {format_cycle(cycle)}\n"
                f"Every edge on the cycle is constructor injection. "
                f"Hint: switch one dependency to setter or field injection"
            )

        return min(candidates, key=graph.declaration_key)

    @staticmethod
    def _reject_prototype_groups(groups: Dict[BeanDefinition, Tuple[BeanDefinition, ...]]) -> None:
        """Fail on a cycle group holding a prototype.

        Breaking one cycle can hide an overlapping one from the cycle
        search, so every group is checked as a whole.
        """
        for members in groups.values():
            prototypes = [m for m in members if not m.is_singleton]
            if prototypes:
                raise CircularDependencyError(
                    f"Circular dependency detected among: "
                    f"{', '.join(m.display_name for m in members)}\n"
                    f"Prototype beans cannot take part in a cycle: "
                    f"{', '.join(p.display_name for p in prototypes)}"
                )

    @staticmethod
    def _order(graph: DependencyGraph, deferred: Set[DependencyEdge]) -> List[BeanDefinition]:
        remaining: Dict[BeanDefinition, int] = {node: 0 for node in graph.nodes}
        dependents: Dict[BeanDefinition, List[BeanDefinition]] = defaultdict(list)
        for edge in graph.edges():
            if edge in deferred:
                continue
            remaining[edge.dependent] += 1
            dependents[edge.dependency].append(edge.dependent)

        by_rank = graph.nodes
        ready = [graph.rank(node) for node, count in remaining.items() if count == 0]
        heapq.heapify(ready)

        order: List[BeanDefinition] = []
        while ready:
            node = by_rank[heapq.heappop(ready)]
            order.append(node)
            for dependent in dependents[node]:
                remaining[dependent] -= 1
                if remaining[dependent] == 0:
                    heapq.heappush(ready, graph.rank(dependent))

        return order

    @staticmethod
    def _cycle_groups(
        graph: DependencyGraph,
        order: List[BeanDefinition],
    ) -> Dict[BeanDefinition, Tuple[BeanDefinition, ...]]:
        """Strongly connected components (Tarjan) that contain a cycle."""
        positions = {definition: i for i, definition in enumerate(order)}
        index_of: Dict[BeanDefinition, int] = {}
        low: Dict[BeanDefinition, int] = {}
        stack: List[BeanDefinition] = []
        on_stack: Set[BeanDefinition] = set()
        groups: Dict[BeanDefinition, Tuple[BeanDefinition, ...]] = {}

        def successors(node):
            return iter([edge.dependency for edge in graph.edges_from(node)])

        def visit(node):
            index_of[node] = low[node] = len(index_of)
            stack.append(node)
            on_stack.add(node)

        for root in graph.nodes:
            if root in index_of:
                continue
            visit(root)
            work = [(root, successors(root))]

            while work:
                node, children = work[-1]
                descended = False
                for child in children:
                    if child not in index_of:
                        visit(child)
                        work.append((child, successors(child)))
                        descended = True
                        break
                    if child in on_stack:
                        low[node] = min(low[node], index_of[child])
                if descended:
                    continue

                work.pop()
                if work:
                    parent = work[-1][0]
                    low[parent] = min(low[parent], low[node])

                if low[node] == index_of[node]:
                    component = []
                    while True:
                        member = stack.pop()
                        on_stack.discard(member)
                        component.append(member)
                        if member is node:
                            break
                    self_loop = any(e.dependency is node for e in graph.edges_from(node))
                    if len(component) > 1 or self_loop:
                        members = tuple(sorted(component, key=positions.__getitem__))
                        for member in members:
                            groups[member] = members

        return groups
