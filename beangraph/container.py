"""
Container

This module provides the container facade. A Container owns a registry
of bean definitions, the instantiation plan computed from it, and the
singleton cache. It follows a strict lifecycle:

    UNBUILT --build()--> BUILT --shutdown()--> SHUT_DOWN

- ``register()`` / ``load_modules()`` are only valid while UNBUILT
- ``build()`` resolves the dependency graph and computes the plan once
- ``get()`` is only valid while BUILT
- ``shutdown()`` runs destroy hooks in reverse creation order

Example::

    module = BeanModule()
    with module:
        module.single[Engine](Engine)
        module.single[Car](Car, dependencies=[Engine])

    with Container(modules=[module]) as container:
        container.build()
        car = container.get(Car)
"""

import logging
import threading
from typing import Any, Dict, Hashable, Iterable, List, Optional

from .definition import BeanDefinition, TypeKey
from .exceptions import IllegalStateError, InstantiationError, ShutdownError
from .get_proxy import GetProxy
from .graph import DependencyGraph, DependencyGraphBuilder
from .instantiator import Instantiator, Resolved, constructor_positions
from .lifecycle import ContainerState
from .module import BeanModule
from .registry import BeanDefinitionRegistry
from .resolution_context import resolving
from .scope_manager import ScopeManager
from .sorter import InstantiationPlan, TopologicalSorter

logger = logging.getLogger(__name__)


class Container:
    """Dependency injection container.

    Multiple containers can coexist; each one owns its definitions and
    instances.

    Attributes:
        _registry: Definitions known to this container
        _graph: Dependency graph, set by build()
        _plan: Instantiation plan, set by build()
        _scopes: Singleton cache and construction locks
        _state: Current lifecycle state
    """

    def __init__(self, modules: Optional[List[BeanModule]] = None):
        """Initialize an unbuilt container.

        Args:
            modules: BeanModules whose definitions are registered immediately
        """
        self._registry = BeanDefinitionRegistry()
        self._graph_builder = DependencyGraphBuilder()
        self._sorter = TopologicalSorter()
        self._instantiator = Instantiator()
        self._graph: Optional[DependencyGraph] = None
        self._plan: Optional[InstantiationPlan] = None
        self._scopes = ScopeManager(lock_key=self._lock_key, on_rejected=self._destroy_rejected)
        self._state = ContainerState.UNBUILT
        self._state_lock = threading.Lock()

        if modules:
            self.load_modules(modules)

    # Registration

    def register(self, definition: BeanDefinition) -> None:
        """Register a single bean definition.

        Raises:
            IllegalStateError: When the container has already been built
            DuplicateDefinitionError: When the qualified definition already exists
        """
        self._ensure_unbuilt("register()")
        self._registry.register(definition)

    def load_modules(self, modules: Iterable[BeanModule]) -> None:
        """Register every definition of the given modules, in order.

        Raises:
            IllegalStateError: When the container has already been built
            DuplicateDefinitionError: When a qualified definition already exists
        """
        self._ensure_unbuilt("load_modules()")
        for module in modules:
            for definition in module.definitions:
                self._registry.register(definition)

    # Build

    def build(self) -> None:
        """Resolve the dependency graph and compute the instantiation order.

        Every dependency is resolved here, so missing, ambiguous and
        circular dependencies are reported before any bean is created.
        On failure the container stays UNBUILT. On success, singletons
        marked ``created_at_start`` are created in plan order.

        Raises:
            IllegalStateError: When build() was already called
            BeanNotFoundError: When a dependency cannot be resolved
            AmbiguousDefinitionError: When a dependency or type is ambiguous
            CircularDependencyError: When a cycle cannot be broken
            InstantiationError: When an eager singleton fails to build
        """
        self._ensure_unbuilt("build()")

        graph = self._graph_builder.build(self._registry)
        plan = self._sorter.sort(graph)

        with self._state_lock:
            self._ensure_unbuilt("build()")
            self._graph = graph
            self._plan = plan
            self._registry.freeze()
            self._state = ContainerState.BUILT

        logger.info(
            "Container built: %d beans, %d deferred edges",
            len(plan), len(plan.deferred_edges),
        )
        self._eager_initialize()

    def _eager_initialize(self) -> None:
        for definition in self._plan.order:
            if definition.is_singleton and definition.created_at_start:
                self._resolve(definition)

    # Resolution

    @property
    def get(self) -> GetProxy:
        """Accessor for beans.

        Supports both call and subscript syntax::

            car = container.get(Car)
            engine = container.get(Engine, "v8")
            engine = container.get[Engine]("v8")

        Raises:
            IllegalStateError: When the container is not built
            BeanNotFoundError: When no definition matches
            AmbiguousDefinitionError: When several definitions match
            InstantiationError: When the bean (or one of its dependencies)
                cannot be constructed
        """
        return GetProxy(self)

    def resolve(self, type_key: TypeKey, qualifier: Optional[str] = None) -> Any:
        """Look up and return a bean. Backs ``get``."""
        self._ensure_built("get()")
        definition = self._registry.lookup(type_key, qualifier)
        return self._resolve(definition)

    def contains(self, type_key: TypeKey, qualifier: Optional[str] = None) -> bool:
        """Check whether at least one definition satisfies the request."""
        return bool(self._registry.candidates(type_key, qualifier))

    def _resolve(self, definition: BeanDefinition) -> Any:
        if definition.is_singleton:
            return self._scopes.get_or_create(
                definition, lambda: self._create_singleton(definition)
            )
        return self._scopes.create(definition, lambda: self._create(definition))

    def _create_singleton(self, definition: BeanDefinition) -> Any:
        if self._plan.group_of(definition):
            return self._create_group(definition)
        return self._create(definition)

    def _create(self, definition: BeanDefinition) -> Any:
        with resolving(definition):
            resolved = {
                position: self._resolve(self._graph.dependency_of(definition, position))
                for position in range(len(definition.dependencies))
            }
            return self._instantiator.build(
                definition,
                resolved,
                on_allocated=lambda instance: self._scopes.expose_early(definition, instance),
            )

    def _create_group(self, requested: BeanDefinition) -> Any:
        """Build every singleton of a cycle group together.

        Phase one allocates each member in plan order with its constructor
        dependencies. Phase two writes every setter and field dependency,
        including the deferred edges that close the cycle. Members are
        published only once the whole group is wired.
        """
        members = self._plan.group_of(requested)
        logger.debug(
            "Building cycle group: %s", ", ".join(m.display_name for m in members)
        )
        allocated: Dict[BeanDefinition, Any] = {}

        try:
            for member in members:
                with resolving(member):
                    resolved = self._resolve_in_group(
                        member, constructor_positions(member), allocated
                    )
                    allocated[member] = self._instantiator.allocate(member, resolved)
                self._scopes.expose_early(member, allocated[member])

            for member in members:
                with resolving(member):
                    wired_positions = [
                        position for position in range(len(member.dependencies))
                        if position not in constructor_positions(member)
                    ]
                    resolved = self._resolve_in_group(member, wired_positions, allocated)
                    self._instantiator.wire(member, allocated[member], resolved)

            for member in members:
                self._instantiator.initialize(member, allocated[member])
        except Exception as e:
            own_failure = isinstance(e, InstantiationError) and e.definition in members
            for member in members:
                self._scopes.discard_early(member)
                if own_failure:
                    self._scopes.mark_failed(member, e)
            raise

        self._scopes.publish_all([(member, allocated[member]) for member in members])
        return allocated[requested]

    def _resolve_in_group(
        self,
        member: BeanDefinition,
        positions: Iterable[int],
        allocated: Dict[BeanDefinition, Any],
    ) -> Resolved:
        resolved: Resolved = {}
        for position in positions:
            dependency = self._graph.dependency_of(member, position)
            if dependency in allocated:
                resolved[position] = allocated[dependency]
            else:
                resolved[position] = self._resolve(dependency)
        return resolved

    def _lock_key(self, definition: BeanDefinition) -> Hashable:
        group = self._plan.group_of(definition) if self._plan is not None else ()
        return group[0] if group else definition

    # Shutdown

    def shutdown(self) -> None:
        """Shut the container down and run destroy hooks.

        Destroy hooks of created singletons run in reverse creation order,
        so a bean's dependencies still exist while it is torn down. Every
        hook runs even if an earlier one fails. Prototype instances are
        owned by their callers and are not destroyed.

        This method is idempotent - calling it multiple times has no effect.

        Raises:
            ShutdownError: When one or more destroy hooks failed
        """
        with self._state_lock:
            if self._state == ContainerState.SHUT_DOWN:
                return
            self._state = ContainerState.SHUT_DOWN

        failures = []
        for definition, instance in reversed(self._scopes.close()):
            try:
                self._instantiator.destroy(definition, instance)
            except Exception as e:
                logger.exception("Destroy hook of %s failed", definition.display_name)
                failures.append((definition, e))

        logger.info("Container shut down")
        if failures:
            names = ", ".join(definition.display_name for definition, _ in failures)
            raise ShutdownError(
                f"{len(failures)} destroy hook(s) failed: {names}", failures
            ) from failures[0][1]

    def _destroy_rejected(self, definition: BeanDefinition, instance: Any) -> None:
        """Tear down a singleton that finished building after shutdown()."""
        try:
            self._instantiator.destroy(definition, instance)
        except Exception:
            logger.exception("Destroy hook of %s failed", definition.display_name)

    def __enter__(self) -> 'Container':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        """Shut the container down. Exceptions are not suppressed."""
        self.shutdown()
        return False

    # State

    def _ensure_unbuilt(self, action: str) -> None:
        if self._state != ContainerState.UNBUILT:
            raise IllegalStateError(
                f"{action} is only valid before build(); the container is {self._state.value}"
            )

    def _ensure_built(self, action: str) -> None:
        if self._state != ContainerState.BUILT:
            hint = "call build() first" if self._state == ContainerState.UNBUILT else "the container is shut down"
            raise IllegalStateError(
                f"{action} is only valid after build(); {hint}"
            )

    @property
    def state(self) -> ContainerState:
        return self._state

    @property
    def is_built(self) -> bool:
        return self._state == ContainerState.BUILT

    @property
    def is_shut_down(self) -> bool:
        return self._state == ContainerState.SHUT_DOWN

    @property
    def definitions(self) -> List[BeanDefinition]:
        return self._registry.definitions

    @property
    def instantiation_order(self) -> List[BeanDefinition]:
        """Definitions in the order the plan instantiates them.

        Raises:
            IllegalStateError: When the container has not been built
        """
        if self._plan is None:
            raise IllegalStateError("instantiation_order is only available after build()")
        return list(self._plan.order)
