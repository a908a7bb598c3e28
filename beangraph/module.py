"""
BeanModule

This module provides the DI module class for declaring beans.
A BeanModule is a list of bean definitions, which are then loaded into
a Container.

Key features:
- Koin-style DSL syntax: module.single[Type](...) and module.prototype[Type](...)
- Module-wide default for eager singleton creation
- Context manager support for cleaner definition blocks

Example::

    module = BeanModule()
    with module:
        module.single[Engine](Engine)
        module.prototype[Car](Car, dependencies=[Engine])

    container = Container(modules=[module])
    container.build()
"""

from typing import List

from .definition import BeanDefinition
from .definition_builder import DefinitionBuilder
from .lifecycle import BeanScope


class BeanModule:
    """DI Module for declaring bean definitions.

    This class provides the Koin-style DSL for registering beans:
    - single[Type]: Register a singleton (same instance reused)
    - prototype[Type]: Register a prototype (new instance per request)

    Attributes:
        single: Builder for singleton registrations
        prototype: Builder for prototype registrations
        _definitions: Internal list of declared definitions

    Example::

        module = BeanModule()
        with module:
            # Singleton - same instance every time
            module.single[Engine](Engine)

            # Prototype - new instance every time
            module.prototype[Car](Car, dependencies=[Engine])

            # Factory function instead of a class
            module.single[Config](lambda: Config.from_env())
    """

    def __init__(self, created_at_start: bool = False):
        """Initialize a new module with empty definitions.

        Args:
            created_at_start: If True, all singleton definitions in this module
                will be eagerly created at build() time. Defaults to False.
        """
        self._definitions: List[BeanDefinition] = []
        self._created_at_start: bool = created_at_start
        self.single = DefinitionBuilder(self, BeanScope.SINGLETON)
        self.prototype = DefinitionBuilder(self, BeanScope.PROTOTYPE)

    def __enter__(self) -> 'BeanModule':
        """Open a definition block. Purely visual; registration works without it."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        return False

    @property
    def definitions(self) -> List[BeanDefinition]:
        """Get declared definitions (read-only access for container)."""
        return list(self._definitions)

    @property
    def created_at_start(self) -> bool:
        return self._created_at_start

    def add_definition(self, definition: BeanDefinition) -> None:
        """Append a definition. Duplicates are detected by the registry on load."""
        self._definitions.append(definition)

    def __len__(self) -> int:
        return len(self._definitions)
