"""
BeanGraph Exceptions

Custom exception hierarchy for the BeanGraph DI container
"""

from typing import Any, Optional


class BeanGraphError(Exception):
    """
    Base exception for all BeanGraph errors.

    All BeanGraph-specific exceptions inherit from this class.
    You can catch this to handle any container error generically.

    Example:
        >>> try:
        ...     car = container.get(Car)
        ... except BeanGraphError as e:
        ...     print(f"DI error: {e}")
    """

    pass


class DuplicateDefinitionError(BeanGraphError):
    """
    Raised when the same (type, qualifier) pair is registered twice.

    Common causes:
        - Registering the same qualified bean in two modules
        - Loading the same module twice

    Solution:
        Give each definition its own qualifier, or mark one of several
        unqualified definitions of a type as ``primary``::

            module.single[DataSource](PostgresDataSource, qualifier="main")
            module.single[DataSource](SqliteDataSource, qualifier="cache")
    """

    pass


class BeanNotFoundError(BeanGraphError):
    """
    Raised when no definition satisfies a requested type and qualifier.

    Raised at ``build()`` time for unresolved dependency references, and
    at ``get()`` time for top-level requests.

    Common causes:
        - Forgetting to register the type
        - A typo in the qualifier
        - The module containing the type was not loaded

    Note:
        The error message includes the list of registered types
        to help identify available beans.
    """

    pass


class AmbiguousDefinitionError(BeanGraphError):
    """
    Raised when more than one definition satisfies a request.

    Common causes:
        - Two definitions of the same type without a qualifier and
          without exactly one of them marked ``primary``
        - Several definitions marked ``primary`` for the same type
        - A base class requested while several subclasses are registered

    Solution:
        Request the bean with a qualifier, or mark exactly one
        definition as primary::

            module.single[Engine](V8Engine, primary=True)
            module.single[Engine](ElectricEngine, qualifier="electric")
    """

    pass


class CircularDependencyError(BeanGraphError):
    """
    Raised when a dependency cycle cannot be broken.

    A cycle is fatal when every edge on it is a constructor edge, since
    neither bean can be allocated before the other exists. A cycle that
    passes through a prototype bean is fatal as well.

    Example of a fatal cycle::

        module.single[ServiceA](ServiceA, dependencies=[ServiceB])
        module.single[ServiceB](ServiceB, dependencies=[ServiceA])

    Solution:
        Switch one edge of the cycle to setter or field injection on a
        singleton bean::

            module.single[ServiceB](
                ServiceB,
                dependencies=[ref(ServiceA, strategy=InjectionStrategy.SETTER)],
            )
    """

    pass


class InstantiationError(BeanGraphError):
    """
    Raised when a constructor, factory, setter or init hook fails.

    The original exception is available as ``cause`` (and ``__cause__``).
    The failing definition is marked as failed for the remaining lifetime
    of the container; further requests re-raise this error without
    running the constructor again.

    Attributes:
        definition: The BeanDefinition whose construction failed
        cause: The underlying exception
    """

    def __init__(
        self,
        message: str,
        definition: Optional[Any] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.definition = definition
        self.cause = cause


class IllegalStateError(BeanGraphError):
    """
    Raised when the container API is used in the wrong lifecycle state.

    Common causes:
        - Calling ``register()`` or ``load_modules()`` after ``build()``
        - Calling ``build()`` twice
        - Calling ``get()`` before ``build()`` or after ``shutdown()``

    Solution:
        Register everything first, then call ``build()`` exactly once::

            container = Container(modules=[module])
            container.build()
            car = container.get(Car)
    """

    pass


class ShutdownError(BeanGraphError):
    """
    Raised when one or more destruction hooks fail during ``shutdown()``.

    Every hook is still run; the container ends up shut down regardless.

    Attributes:
        failures: List of (definition, exception) pairs in teardown order
    """

    def __init__(self, message: str, failures: Optional[list] = None):
        super().__init__(message)
        self.failures = failures or []
