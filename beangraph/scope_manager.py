"""
ScopeManager

Decides, per bean definition, whether a request returns a cached instance
(singleton) or a freshly built one (prototype).

Singleton construction happens at most once per definition, even when
many threads request the same bean concurrently: the first caller builds
it while holding the definition's lock, the others block on that lock
and then receive the published instance. Requests for different
definitions never share a lock, except for members of one cycle group,
which are built together.

A definition whose construction failed is remembered; later requests
re-raise the same InstantiationError without building again.
"""

import logging
import threading
from typing import Any, Callable, Dict, Hashable, List, Optional, Tuple

from .definition import BeanDefinition
from .exceptions import IllegalStateError, InstantiationError

logger = logging.getLogger(__name__)

_MISSING = object()


class ScopeManager:
    """Singleton cache, per-definition locks and failure bookkeeping.

    Attributes:
        _instances: Fully built singletons
        _early: Allocated singletons whose wiring is still in progress
        _failures: Definitions whose construction failed
        _created: Singletons in publication order, for teardown
        _locks: One reentrant lock per lock key
        _closed: Set by close(); nothing is stored afterwards
    """

    def __init__(
        self,
        lock_key: Optional[Callable[[BeanDefinition], Hashable]] = None,
        on_rejected: Optional[Callable[[BeanDefinition, Any], None]] = None,
    ):
        """Initialize an empty scope manager.

        Args:
            lock_key: Maps a definition to the key of the lock guarding its
                construction. Defaults to the definition itself.
            on_rejected: Receives each singleton finished after close()
        """
        self._instances: Dict[BeanDefinition, Any] = {}
        self._early: Dict[BeanDefinition, Any] = {}
        self._failures: Dict[BeanDefinition, InstantiationError] = {}
        self._created: List[BeanDefinition] = []
        self._locks: Dict[Hashable, threading.RLock] = {}
        self._guard = threading.Lock()
        self._lock_key = lock_key or (lambda definition: definition)
        self._on_rejected = on_rejected
        self._closed = False

    def lock_for(self, definition: BeanDefinition) -> threading.RLock:
        key = self._lock_key(definition)
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.RLock()
            return lock

    def get_or_create(self, definition: BeanDefinition, creator: Callable[[], Any]) -> Any:
        """Return the singleton for definition, building it at most once.

        Args:
            definition: A singleton definition
            creator: Builds the instance; called while holding the lock

        Raises:
            InstantiationError: When construction fails now or failed before
        """
        instance = self._instances.get(definition, _MISSING)
        if instance is not _MISSING:
            return instance
        self.raise_if_failed(definition)

        with self.lock_for(definition):
            instance = self._instances.get(definition, _MISSING)
            if instance is not _MISSING:
                return instance
            self.raise_if_failed(definition)

            # Reentrant request from the thread wiring this bean
            instance = self._early.get(definition, _MISSING)
            if instance is not _MISSING:
                return instance

            try:
                instance = creator()
            except Exception as e:
                self.discard_early(definition)
                if isinstance(e, InstantiationError) and e.definition is definition:
                    self.mark_failed(definition, e)
                raise

            self.publish(definition, instance)
            return instance

    def create(self, definition: BeanDefinition, creator: Callable[[], Any]) -> Any:
        """Build a prototype instance. Nothing is cached."""
        self.raise_if_failed(definition)
        try:
            return creator()
        except InstantiationError as e:
            if e.definition is definition:
                self.mark_failed(definition, e)
            raise

    def expose_early(self, definition: BeanDefinition, instance: Any) -> None:
        """Make an allocated, not yet wired singleton visible to its builder."""
        if definition.is_singleton:
            self._early[definition] = instance

    def early_instance(self, definition: BeanDefinition) -> Any:
        return self._early.get(definition, _MISSING)

    def discard_early(self, definition: BeanDefinition) -> None:
        self._early.pop(definition, None)

    def publish(self, definition: BeanDefinition, instance: Any) -> None:
        """Store a fully built singleton. Publishing twice keeps the first.

        Raises:
            IllegalStateError: When the manager was closed while the
                instance was being built
        """
        self.publish_all([(definition, instance)])

    def publish_all(self, built: List[Tuple[BeanDefinition, Any]]) -> None:
        """Store fully built singletons together, in the given order.

        Prototypes are never stored. Once the manager is closed nothing is
        stored: the instances are handed to ``on_rejected`` in reverse
        order and IllegalStateError is raised.
        """
        for definition, _ in built:
            self._early.pop(definition, None)
        singletons = [(d, instance) for d, instance in built if d.is_singleton]

        with self._guard:
            closed = self._closed
            if not closed:
                for definition, instance in singletons:
                    if definition in self._instances:
                        continue
                    self._instances[definition] = instance
                    self._created.append(definition)

        if closed:
            self._reject(singletons)
        for definition, _ in singletons:
            logger.debug("Published singleton %s", definition.display_name)

    def _reject(self, singletons: List[Tuple[BeanDefinition, Any]]) -> None:
        if self._on_rejected is not None:
            for definition, instance in reversed(singletons):
                self._on_rejected(definition, instance)
        names = ", ".join(d.display_name for d, _ in singletons)
        raise IllegalStateError(
            f"The container was shut down while {names} was being built; "
            f"the instance was not kept"
        )

    def mark_failed(self, definition: BeanDefinition, error: InstantiationError) -> None:
        with self._guard:
            self._failures.setdefault(definition, error)
        logger.debug("Marked %s as failed: %s", definition.display_name, error)

    def raise_if_failed(self, definition: BeanDefinition) -> None:
        error = self._failures.get(definition)
        if error is not None:
            raise error

    def is_failed(self, definition: BeanDefinition) -> bool:
        return definition in self._failures

    def has_instance(self, definition: BeanDefinition) -> bool:
        return definition in self._instances

    def instance_of(self, definition: BeanDefinition) -> Any:
        return self._instances[definition]

    def instances_in_creation_order(self) -> List[Tuple[BeanDefinition, Any]]:
        with self._guard:
            return [(d, self._instances[d]) for d in self._created]

    def close(self) -> List[Tuple[BeanDefinition, Any]]:
        """Stop storing singletons and hand back the published ones.

        Returns:
            (definition, instance) pairs in publication order
        """
        with self._guard:
            self._closed = True
            created = [(d, self._instances[d]) for d in self._created]
            self._instances.clear()
            self._early.clear()
            self._created.clear()
        return created

    @property
    def is_closed(self) -> bool:
        return self._closed
