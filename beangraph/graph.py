"""
DependencyGraph

This module turns a registry into a directed dependency graph. An edge
A -> B means "A requires B to exist first". Every reference is resolved
through the registry while the graph is built, so missing and ambiguous
dependencies are reported before any object is created.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterator, List, Tuple

from .definition import BeanDefinition, BeanReference
from .exceptions import AmbiguousDefinitionError, BeanNotFoundError
from .registry import BeanDefinitionRegistry
from .strategy import InjectionStrategy

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class DependencyEdge:
    """A resolved dependency of one bean on another.

    Attributes:
        dependent: The bean that declares the dependency
        dependency: The bean it resolved to
        strategy: Injection strategy the edge was declared with
        position: Index of the reference in the dependent's dependency list
        reference: The declared reference
    """
    dependent: BeanDefinition
    dependency: BeanDefinition
    strategy: InjectionStrategy
    position: int
    reference: BeanReference

    @property
    def is_constructor(self) -> bool:
        return self.strategy == InjectionStrategy.CONSTRUCTOR

    def __repr__(self) -> str:
        return (
            f"<DependencyEdge {self.dependent.display_name} -> "
            f"{self.dependency.display_name} ({self.strategy.value.lower()})>"
        )


class DependencyGraph:
    """Directed graph over bean definitions.

    Nodes are kept in registration order and outgoing edges in
    declaration order, so every traversal is deterministic.
    """

    def __init__(self, nodes: List[BeanDefinition]):
        self._nodes: List[BeanDefinition] = list(nodes)
        self._ranks: Dict[BeanDefinition, int] = {node: i for i, node in enumerate(self._nodes)}
        self._edges: Dict[BeanDefinition, List[DependencyEdge]] = {node: [] for node in nodes}

    def add_edge(self, edge: DependencyEdge) -> None:
        self._edges[edge.dependent].append(edge)

    @property
    def nodes(self) -> List[BeanDefinition]:
        return list(self._nodes)

    def rank(self, node: BeanDefinition) -> int:
        """Registration position of node within this graph."""
        return self._ranks[node]

    def declaration_key(self, edge: DependencyEdge) -> Tuple[int, int]:
        """Order edges by dependent registration, then reference position."""
        return (self._ranks[edge.dependent], edge.position)

    def edges_from(self, node: BeanDefinition) -> List[DependencyEdge]:
        return list(self._edges[node])

    def edges(self) -> Iterator[DependencyEdge]:
        for node in self._nodes:
            yield from self._edges[node]

    def dependency_of(self, node: BeanDefinition, position: int) -> BeanDefinition:
        return self._edges[node][position].dependency

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node: BeanDefinition) -> bool:
        return node in self._edges


class DependencyGraphBuilder:
    """Resolve a registry into a :class:`DependencyGraph`."""

    def build(self, registry: BeanDefinitionRegistry) -> DependencyGraph:
        """Build the dependency graph for every registered definition.

        Args:
            registry: Registry holding all definitions

        Returns:
            The resolved DependencyGraph

        Raises:
            BeanNotFoundError: When a reference matches no definition
            AmbiguousDefinitionError: When a reference matches several
                definitions, or primary markers conflict
        """
        registry.validate()

        graph = DependencyGraph(registry.definitions)
        for definition in registry:
            for position, reference in enumerate(definition.dependencies):
                dependency = self._resolve_reference(registry, definition, reference)
                graph.add_edge(DependencyEdge(
                    dependent=definition,
                    dependency=dependency,
                    strategy=definition.strategy_for(reference),
                    position=position,
                    reference=reference,
                ))

        logger.debug(
            "Built dependency graph: %d beans, %d edges",
            len(graph), sum(1 for _ in graph.edges()),
        )
        return graph

    @staticmethod
    def _resolve_reference(
        registry: BeanDefinitionRegistry,
        definition: BeanDefinition,
        reference: BeanReference,
    ) -> BeanDefinition:
        try:
            return registry.lookup(reference.type_key, reference.qualifier)
        except BeanNotFoundError as e:
            raise BeanNotFoundError(
                f"Unresolved dependency {reference} of {definition.display_name}: {e}"
            ) from e
        except AmbiguousDefinitionError as e:
            raise AmbiguousDefinitionError(
                f"Ambiguous dependency {reference} of {definition.display_name}: {e}"
            ) from e
