"""
Definition

Data classes describing beans and their dependency references
"""

import re
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Tuple, Type, Union

from .lifecycle import BeanScope
from .strategy import InjectionStrategy


# Type key: either a class or a string name
TypeKey = Union[Type, str]

# Lifecycle hook: a callable taking the instance, or the name of a method on it
Hook = Union[str, Callable[[Any], Any]]

_CAMEL_BOUNDARY = re.compile(r'(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])')


def type_key_name(type_key: TypeKey) -> str:
    """Human readable name of a type key."""
    return type_key.__name__ if hasattr(type_key, '__name__') else str(type_key)


def default_attribute_name(type_key: TypeKey) -> str:
    """Attribute name used for field injection when none is given.

    ``Engine`` becomes ``engine`` and ``HttpClient`` becomes ``http_client``.
    String keys are used as they are.
    """
    if isinstance(type_key, str):
        return type_key
    return _CAMEL_BOUNDARY.sub('_', type_key_name(type_key)).lower()


@dataclass(frozen=True)
class BeanReference:
    """A reference from one bean to another.

    Attributes:
        type_key: The requested type (class or string name)
        qualifier: Optional qualifier narrowing the match
        strategy: Injection strategy override for this reference only.
            ``None`` uses the strategy of the owning definition.
        name: Keyword argument, attribute or setter method the dependency
            is written to. ``None`` picks a default from the type key.
    """
    type_key: TypeKey
    qualifier: Optional[str] = None
    strategy: Optional[InjectionStrategy] = None
    name: Optional[str] = None

    def __str__(self) -> str:
        name = type_key_name(self.type_key)
        if self.qualifier is not None:
            return f"{name}('{self.qualifier}')"
        return name


def ref(
    type_key: TypeKey,
    qualifier: Optional[str] = None,
    *,
    strategy: Optional[InjectionStrategy] = None,
    name: Optional[str] = None,
) -> BeanReference:
    """Shorthand for building a BeanReference.

    Example::

        module.single[Car](Car, dependencies=[
            Engine,
            ref(Wheel, "front"),
            ref(Radio, strategy=InjectionStrategy.FIELD, name="radio"),
        ])
    """
    return BeanReference(type_key, qualifier, strategy, name)


def as_reference(value: Union[BeanReference, TypeKey, Tuple[TypeKey, str]]) -> BeanReference:
    """Normalize a dependency declaration into a BeanReference.

    Accepts a BeanReference, a bare type key, or a ``(type_key, qualifier)`` tuple.
    """
    if isinstance(value, BeanReference):
        return value
    if isinstance(value, tuple):
        type_key, qualifier = value
        return BeanReference(type_key, qualifier)
    return BeanReference(value)


@dataclass(eq=False)
class BeanDefinition:
    """Declarative description of how to build a bean.

    Definitions compare and hash by identity; two definitions are the
    same bean only if they are the same object.
    """
    type_key: TypeKey
    implementation: Optional[Type] = None
    factory: Optional[Callable[..., Any]] = None
    dependencies: List[BeanReference] = field(default_factory=list)
    strategy: InjectionStrategy = InjectionStrategy.CONSTRUCTOR
    scope: BeanScope = BeanScope.SINGLETON
    qualifier: Optional[str] = None
    primary: bool = False
    created_at_start: bool = False  # Eager initialization flag (singletons only)
    init_method: Optional[Hook] = None
    destroy_method: Optional[Hook] = None

    def __post_init__(self):
        if self.implementation is not None and self.factory is not None:
            raise ValueError("Provide either `implementation` or `factory`, not both.")

        if self.implementation is None and self.factory is None:
            if not isinstance(self.type_key, type):
                raise ValueError(
                    f"Definition for '{self.type_key}' needs an `implementation` or a `factory`."
                )
            self.implementation = self.type_key

        self.dependencies = [as_reference(d) for d in self.dependencies]

    @property
    def is_factory(self) -> bool:
        return self.factory is not None

    @property
    def is_singleton(self) -> bool:
        return self.scope == BeanScope.SINGLETON

    @property
    def target(self) -> Callable[..., Any]:
        """The callable that allocates the bean."""
        return self.factory if self.factory is not None else self.implementation

    def strategy_for(self, reference: BeanReference) -> InjectionStrategy:
        return reference.strategy or self.strategy

    @property
    def display_name(self) -> str:
        name = type_key_name(self.type_key)
        if self.qualifier is not None:
            return f"{name}('{self.qualifier}')"
        return name

    def __repr__(self) -> str:
        return f"<BeanDefinition {self.display_name} {self.scope.value.lower()}>"
