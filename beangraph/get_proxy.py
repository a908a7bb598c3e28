"""
GetProxy

This module provides the object returned by ``Container.get``. It
supports both call and subscript syntax for bean retrieval:

    car = container.get(Car)
    car = container.get[Car]()
    engine = container.get[Engine]("v8")
"""

from typing import Any, Callable, Optional, Type, TypeVar, TYPE_CHECKING, Union

if TYPE_CHECKING:
    from .container import Container

T = TypeVar('T')


class GetProxy:
    """Proxy object supporting ``get(Type)`` and ``get[Type]()`` syntax.

    Attributes:
        _container: The container beans are resolved from
    """

    def __init__(self, container: 'Container'):
        self._container = container

    def __call__(self, type_key: Union[Type[T], str], qualifier: Optional[str] = None) -> Any:
        """Resolve a bean by type key and optional qualifier."""
        return self._container.resolve(type_key, qualifier)

    def __getitem__(self, type_key: Type[T]) -> Callable[..., T]:
        """Enable subscript access for type-safe bean retrieval.

        Returns:
            A callable taking an optional qualifier

        Example::

            # This expression:
            getter = container.get[Engine]

            # Returns a callable, and this:
            engine = getter("v8")

            # Is equivalent to:
            engine = container.get(Engine, "v8")
        """
        def getter(qualifier: Optional[str] = None) -> T:
            return self._container.resolve(type_key, qualifier)
        return getter
