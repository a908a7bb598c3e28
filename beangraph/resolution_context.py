"""
ResolutionContext

This module tracks the chain of beans being resolved on the current
thread. The chain is used for:

- Error messages showing how a failing bean was reached
- Detecting re-entrant construction of a bean that is still being built

The context is stored in a ContextVar for thread-safety and is
automatically managed by the container during resolution.
"""

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, List, Optional, TYPE_CHECKING

from .exceptions import CircularDependencyError

if TYPE_CHECKING:
    from .definition import BeanDefinition


class ResolutionContext:
    """Chain of definitions currently being resolved.

    Attributes:
        resolving: Definitions in the order they were entered

    Note:
        This class is used internally by the Container.
        Users should not need to interact with it directly.
    """

    def __init__(self, resolving: Optional[List['BeanDefinition']] = None):
        self.resolving: List['BeanDefinition'] = list(resolving or [])

    def chain(self, last: Optional['BeanDefinition'] = None) -> str:
        names = [d.display_name for d in self.resolving]
        if last is not None:
            names.append(last.display_name)
        return " -> ".join(names)

    def enter(self, definition: 'BeanDefinition') -> 'ResolutionContext':
        """Return a child context with definition appended.

        Raises:
            CircularDependencyError: When definition is already being resolved
        """
        if definition in self.resolving:
            raise CircularDependencyError(
                f"Circular dependency detected while resolving: {self.chain(definition)}"
            )
        return ResolutionContext(self.resolving + [definition])


# Resolution chain of the current thread / task
_resolution_context: ContextVar[Optional[ResolutionContext]] = ContextVar(
    '_BEANGRAPH_RESOLUTION_CONTEXT',
    default=None
)


def current_context() -> ResolutionContext:
    return _resolution_context.get() or ResolutionContext()


@contextmanager
def resolving(definition: 'BeanDefinition') -> Iterator[ResolutionContext]:
    """Enter definition in the resolution chain for the duration of the block."""
    ctx = current_context().enter(definition)
    token = _resolution_context.set(ctx)
    try:
        yield ctx
    finally:
        _resolution_context.reset(token)
