"""
Test Configuration and Utilities

Common base classes and helper functions for BeanGraph tests
"""

import unittest
from typing import List, Optional

from beangraph import BeanDefinition, BeanModule, Container


class BeanGraphTestCase(unittest.TestCase):
    """
    Base test case class for BeanGraph tests.

    Tracks every container created through the helpers and shuts them
    down after each test.
    """

    def setUp(self):
        """Start each test with no containers"""
        self._containers: List[Container] = []

    def tearDown(self):
        """Shut down containers created during the test"""
        for container in self._containers:
            if not container.is_shut_down:
                container.shutdown()

    def make_container(
        self,
        *modules: BeanModule,
        definitions: Optional[List[BeanDefinition]] = None,
    ) -> Container:
        """Create an unbuilt container from modules and loose definitions."""
        container = Container(modules=list(modules))
        for definition in definitions or []:
            container.register(definition)
        self._containers.append(container)
        return container

    def build_container(
        self,
        *modules: BeanModule,
        definitions: Optional[List[BeanDefinition]] = None,
    ) -> Container:
        """Create and build a container."""
        container = self.make_container(*modules, definitions=definitions)
        container.build()
        return container


def create_simple_module(*bean_classes: type) -> BeanModule:
    """
    Create a module with singleton registrations for the given classes.

    Classes must have no dependencies (no-arg constructor).

    Example:
        >>> module = create_simple_module(Engine, Wheel)
        >>> container = Container(modules=[module])
    """
    module = BeanModule()
    with module:
        for cls in bean_classes:
            module.single[cls](cls)
    return module
