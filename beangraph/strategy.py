"""
InjectionStrategy Enum

Defines the point at which a dependency is supplied to a bean
"""

from enum import Enum


class InjectionStrategy(Enum):
    """How a dependency is injected"""
    CONSTRUCTOR = "CONSTRUCTOR"  # passed at allocation
    SETTER = "SETTER"  # set_<name>(dependency) after allocation
    FIELD = "FIELD"  # direct attribute write after allocation
