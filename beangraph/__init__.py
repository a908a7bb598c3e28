# Public API
from .container import Container
from .definition import BeanDefinition, BeanReference, ref
from .exceptions import (
    AmbiguousDefinitionError,
    BeanGraphError,
    BeanNotFoundError,
    CircularDependencyError,
    DuplicateDefinitionError,
    IllegalStateError,
    InstantiationError,
    ShutdownError,
)
from .graph import DependencyEdge, DependencyGraph, DependencyGraphBuilder
from .instantiator import Instantiator
from .lifecycle import BeanScope, ContainerState
from .module import BeanModule
from .registry import BeanDefinitionRegistry
from .scope_manager import ScopeManager
from .sorter import InstantiationPlan, TopologicalSorter
from .strategy import InjectionStrategy

__all__ = [
    "Container",
    "BeanModule",
    "BeanDefinition",
    "BeanReference",
    "ref",
    "BeanScope",
    "ContainerState",
    "InjectionStrategy",
    # Building blocks
    "BeanDefinitionRegistry",
    "DependencyEdge",
    "DependencyGraph",
    "DependencyGraphBuilder",
    "InstantiationPlan",
    "TopologicalSorter",
    "Instantiator",
    "ScopeManager",
    # Exceptions
    "BeanGraphError",
    "DuplicateDefinitionError",
    "BeanNotFoundError",
    "AmbiguousDefinitionError",
    "CircularDependencyError",
    "InstantiationError",
    "IllegalStateError",
    "ShutdownError",
]

__version__ = '0.1.0'
