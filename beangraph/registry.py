"""
BeanDefinitionRegistry

Holds the declarative metadata of every known bean and answers lookups
by (type, qualifier). The registry is frozen once the container is built.
"""

import logging
from collections import defaultdict
from typing import Dict, Iterator, List, Optional, Tuple

from .definition import BeanDefinition, TypeKey, type_key_name
from .exceptions import (
    AmbiguousDefinitionError,
    BeanNotFoundError,
    DuplicateDefinitionError,
    IllegalStateError,
)

logger = logging.getLogger(__name__)


def _satisfies(registered: TypeKey, requested: TypeKey) -> bool:
    if registered == requested:
        return True
    return (
        isinstance(registered, type)
        and isinstance(requested, type)
        and issubclass(registered, requested)
    )


class BeanDefinitionRegistry:
    """Registry of bean definitions in registration order.

    Attributes:
        _definitions: Definitions in registration order
        _qualified: Index of qualified definitions by (type_key, qualifier)
        _indices: Registration position of each definition
        _frozen: Set once the owning container has been built
    """

    def __init__(self):
        self._definitions: List[BeanDefinition] = []
        self._qualified: Dict[Tuple[TypeKey, str], BeanDefinition] = {}
        self._indices: Dict[BeanDefinition, int] = {}
        self._frozen: bool = False

    def register(self, definition: BeanDefinition) -> None:
        """Register a definition and record its registration index.

        Raises:
            DuplicateDefinitionError: When a definition with the same
                type and qualifier is already registered
            IllegalStateError: When the registry is frozen
        """
        if self._frozen:
            raise IllegalStateError(
                f"Cannot register {definition.display_name}: the registry is frozen after build()"
            )

        if definition.qualifier is not None:
            identity = (definition.type_key, definition.qualifier)
            if identity in self._qualified:
                raise DuplicateDefinitionError(
                    f"{definition.display_name} is already registered"
                )
            self._qualified[identity] = definition

        self._indices[definition] = len(self._definitions)
        self._definitions.append(definition)
        logger.debug("Registered %r", definition)

    def lookup(self, type_key: TypeKey, qualifier: Optional[str] = None) -> BeanDefinition:
        """Return the unique definition satisfying type_key and qualifier.

        Raises:
            BeanNotFoundError: When no definition matches
            AmbiguousDefinitionError: When several definitions match and
                the ambiguity cannot be settled by exactly one primary
        """
        candidates = self.candidates(type_key, qualifier)
        if not candidates:
            self._raise_not_found(type_key, qualifier)

        if len(candidates) == 1:
            return candidates[0]

        names = ", ".join(d.display_name for d in candidates)
        if qualifier is None:
            primaries = [d for d in candidates if d.primary]
            if len(primaries) == 1:
                return primaries[0]
            if len(primaries) > 1:
                raise AmbiguousDefinitionError(
                    f"Multiple primary definitions for {type_key_name(type_key)}: {names}"
                )
            raise AmbiguousDefinitionError(
                f"{len(candidates)} definitions satisfy {type_key_name(type_key)}: {names}\n"
                f"Hint: request it with a qualifier or mark one definition primary=True"
            )

        raise AmbiguousDefinitionError(
            f"{len(candidates)} definitions satisfy {type_key_name(type_key)}"
            f"('{qualifier}'): {names}"
        )

    def candidates(self, type_key: TypeKey, qualifier: Optional[str] = None) -> List[BeanDefinition]:
        """All definitions satisfying type_key (and qualifier, if given).

        A definition satisfies a requested class when its type key is that
        class or a subclass of it. String keys match by equality.
        """
        found = [d for d in self._definitions if _satisfies(d.type_key, type_key)]
        if qualifier is not None:
            found = [d for d in found if d.qualifier == qualifier]
        return found

    def index_of(self, definition: BeanDefinition) -> int:
        """Registration position of definition in this registry.

        A definition shared by several containers has one index per registry.
        """
        return self._indices[definition]

    def _raise_not_found(self, type_key: TypeKey, qualifier: Optional[str]) -> None:
        registered = ", ".join(d.display_name for d in self._definitions) or "None"
        requested = type_key_name(type_key)
        if qualifier is not None:
            requested = f"{requested}('{qualifier}')"
        raise BeanNotFoundError(
            f"{requested} is not registered.\n"
            f"Registered types: {registered}"
        )

    def validate(self) -> None:
        """Check primary markers across definitions sharing a type key.

        Unqualified definitions of the same type key must contain exactly
        one primary, and no type key may have more than one primary.

        Raises:
            AmbiguousDefinitionError: On a violation
        """
        unqualified: Dict[TypeKey, List[BeanDefinition]] = defaultdict(list)
        primaries: Dict[TypeKey, List[BeanDefinition]] = defaultdict(list)
        for definition in self._definitions:
            if definition.qualifier is None:
                unqualified[definition.type_key].append(definition)
            if definition.primary:
                primaries[definition.type_key].append(definition)

        for type_key, group in primaries.items():
            if len(group) > 1:
                raise AmbiguousDefinitionError(
                    f"Multiple primary definitions for {type_key_name(type_key)}: "
                    f"{', '.join(d.display_name for d in group)}"
                )

        for type_key, group in unqualified.items():
            if len(group) > 1 and not any(d.primary for d in group):
                raise AmbiguousDefinitionError(
                    f"{len(group)} unqualified definitions of {type_key_name(type_key)} "
                    f"and none is primary.\n"
                    f"Hint: add a qualifier or mark one definition primary=True"
                )

    def freeze(self) -> None:
        self._frozen = True

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    @property
    def definitions(self) -> List[BeanDefinition]:
        """Definitions in registration order (read-only view)."""
        return list(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)

    def __iter__(self) -> Iterator[BeanDefinition]:
        return iter(self._definitions)

    def __contains__(self, type_key: TypeKey) -> bool:
        return any(_satisfies(d.type_key, type_key) for d in self._definitions)
