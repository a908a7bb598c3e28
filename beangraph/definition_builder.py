"""
DefinitionBuilder

This module provides the builder behind the type parameter syntax of a
BeanModule (e.g., single[Type], prototype[Type]).

The DefinitionBuilder performs:
- Type key extraction via __getitem__
- Telling classes apart from factory functions
- Definition creation and registration

A module holds one builder per scope; the scope is fixed at construction.
"""

from typing import Any, Callable, Iterable, Optional, Type, TypeVar, TYPE_CHECKING, Union

from .definition import BeanDefinition, BeanReference, Hook, TypeKey
from .lifecycle import BeanScope
from .strategy import InjectionStrategy

if TYPE_CHECKING:
    from .module import BeanModule

T = TypeVar('T')

Dependency = Union[BeanReference, TypeKey, tuple]


class DefinitionBuilder:
    """Builder for one scope, supporting type parameters.

    Attributes:
        module: The BeanModule to register definitions to
        scope: The scope (SINGLETON or PROTOTYPE) for created definitions

    Note:
        This class is not used directly. Use module.single or
        module.prototype instead.
    """

    def __init__(self, module: 'BeanModule', scope: BeanScope):
        self.module = module
        self.scope = scope

    def __getitem__(self, type_key: Union[Type[T], str]) -> Callable[..., BeanDefinition]:
        """Enable subscript syntax: builder[Type](...).

        The returned function accepts the class to construct or a factory
        function. When omitted, the type key itself is constructed.

        Args:
            type_key: The type (or string name) to register

        Returns:
            A registration function returning the created BeanDefinition

        Example::

            # Construct the class itself
            module.single[Engine]()

            # Construct an implementation class
            module.single[Engine](V8Engine, qualifier="v8", primary=True)

            # Use a factory with resolved constructor arguments
            module.single[Car](
                lambda engine: Car(engine),
                dependencies=[Engine],
            )

            # Eager creation at build() time
            module.single[Database](Database, created_at_start=True)
        """

        def register(
            implementation_or_factory: Optional[Callable[..., Any]] = None,
            *,
            dependencies: Iterable[Dependency] = (),
            strategy: InjectionStrategy = InjectionStrategy.CONSTRUCTOR,
            qualifier: Optional[str] = None,
            primary: bool = False,
            created_at_start: Optional[bool] = None,
            init_method: Optional[Hook] = None,
            destroy_method: Optional[Hook] = None,
        ) -> BeanDefinition:
            # Determine effective created_at_start value:
            # - If explicitly specified at definition level, use that
            # - Otherwise, inherit from module's default
            # - Only applies to SINGLETON scope
            effective_created_at_start = (
                created_at_start if created_at_start is not None
                else self.module.created_at_start
            ) if self.scope == BeanScope.SINGLETON else False

            if isinstance(implementation_or_factory, type):
                implementation, factory = implementation_or_factory, None
            else:
                implementation, factory = None, implementation_or_factory

            definition = BeanDefinition(
                type_key=type_key,
                implementation=implementation,
                factory=factory,
                dependencies=list(dependencies),
                strategy=strategy,
                scope=self.scope,
                qualifier=qualifier,
                primary=primary,
                created_at_start=effective_created_at_start,
                init_method=init_method,
                destroy_method=destroy_method,
            )
            self.module.add_definition(definition)
            return definition

        return register
