"""
Instantiator

Creates bean instances from a definition and its already resolved
dependencies, applying the declared injection strategy.

Construction is split in two phases so that cycles broken at a setter or
field edge can be built:

1. ``allocate()`` calls the constructor (or factory) with the constructor
   dependencies only.
2. ``wire()`` writes every setter and field dependency into the instance.

``build()`` runs both phases plus the init hook for a single bean.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from .definition import BeanDefinition, BeanReference, Hook, default_attribute_name
from .exceptions import BeanGraphError, InstantiationError
from .strategy import InjectionStrategy

logger = logging.getLogger(__name__)

# Dependency instances keyed by their position in definition.dependencies
Resolved = Dict[int, Any]


def constructor_positions(definition: BeanDefinition) -> List[int]:
    return [
        position for position, reference in enumerate(definition.dependencies)
        if definition.strategy_for(reference) == InjectionStrategy.CONSTRUCTOR
    ]


def call_hook(hook: Hook, instance: Any) -> Any:
    if isinstance(hook, str):
        return getattr(instance, hook)()
    return hook(instance)


class Instantiator:
    """Builds bean instances.

    Exceptions raised by user code are wrapped in InstantiationError.
    BeanGraph errors raised by nested resolution pass through unchanged.
    """

    def build(
        self,
        definition: BeanDefinition,
        resolved: Resolved,
        on_allocated: Optional[Callable[[Any], None]] = None,
    ) -> Any:
        """Allocate, wire and initialize one bean.

        Args:
            definition: The definition to build
            resolved: Dependency instances keyed by declaration position
            on_allocated: Called with the instance after allocation and
                before any setter/field dependency is written

        Returns:
            The fully wired instance

        Raises:
            InstantiationError: When the constructor, factory, a setter,
                a field write or the init hook fails
        """
        instance = self.allocate(definition, resolved)
        if on_allocated is not None:
            on_allocated(instance)
        self.wire(definition, instance, resolved)
        self.initialize(definition, instance)
        return instance

    def allocate(self, definition: BeanDefinition, resolved: Resolved) -> Any:
        """Create the instance with its constructor dependencies."""
        args, kwargs = self._constructor_arguments(definition, resolved)
        kind = "Factory" if definition.is_factory else "Constructor"
        try:
            instance = definition.target(*args, **kwargs)
        except BeanGraphError:
            raise
        except Exception as e:
            raise InstantiationError(
                f"{kind} for {definition.display_name} raised {type(e).__name__}: {e}",
                definition,
                e,
            ) from e

        logger.debug("Allocated %s", definition.display_name)
        return instance

    def wire(self, definition: BeanDefinition, instance: Any, resolved: Resolved) -> None:
        """Write setter and field dependencies into an allocated instance."""
        for position, reference in enumerate(definition.dependencies):
            strategy = definition.strategy_for(reference)
            if strategy == InjectionStrategy.CONSTRUCTOR:
                continue
            self._inject(definition, instance, reference, strategy, resolved[position])

    def initialize(self, definition: BeanDefinition, instance: Any) -> None:
        """Run the init hook, if any."""
        if definition.init_method is None:
            return
        try:
            call_hook(definition.init_method, instance)
        except BeanGraphError:
            raise
        except Exception as e:
            raise InstantiationError(
                f"Init hook of {definition.display_name} raised {type(e).__name__}: {e}",
                definition,
                e,
            ) from e

    def destroy(self, definition: BeanDefinition, instance: Any) -> None:
        """Run the destroy hook, if any. Exceptions propagate unchanged."""
        if definition.destroy_method is not None:
            call_hook(definition.destroy_method, instance)

    @staticmethod
    def _constructor_arguments(
        definition: BeanDefinition,
        resolved: Resolved,
    ) -> Tuple[List[Any], Dict[str, Any]]:
        args: List[Any] = []
        kwargs: Dict[str, Any] = {}
        for position in constructor_positions(definition):
            reference = definition.dependencies[position]
            if reference.name is not None:
                kwargs[reference.name] = resolved[position]
            else:
                args.append(resolved[position])
        return args, kwargs

    @staticmethod
    def _inject(
        definition: BeanDefinition,
        instance: Any,
        reference: BeanReference,
        strategy: InjectionStrategy,
        value: Any,
    ) -> None:
        attribute = reference.name or default_attribute_name(reference.type_key)
        try:
            if strategy == InjectionStrategy.SETTER:
                setter = reference.name or f"set_{attribute}"
                getattr(instance, setter)(value)
            else:
                setattr(instance, attribute, value)
        except BeanGraphError:
            raise
        except Exception as e:
            raise InstantiationError(
                f"{strategy.value.capitalize()} injection of {reference} into "
                f"{definition.display_name} raised {type(e).__name__}: {e}",
                definition,
                e,
            ) from e

        logger.debug("Injected %s into %s (%s)", reference, definition.display_name, strategy.value.lower())
