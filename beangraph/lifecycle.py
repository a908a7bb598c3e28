"""
Lifecycle Enums

Defines the scope of beans and the states of a container
"""

from enum import Enum


class BeanScope(Enum):
    """Scope of beans"""
    SINGLETON = "SINGLETON"
    PROTOTYPE = "PROTOTYPE"


class ContainerState(Enum):
    """Lifecycle states of a Container"""
    UNBUILT = "UNBUILT"
    BUILT = "BUILT"
    SHUT_DOWN = "SHUT_DOWN"
