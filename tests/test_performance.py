"""
Performance Tests

Tests for performance characteristics of BeanGraph.
Verifies that large and deep graphs build and resolve quickly.
"""

import unittest
import time
from typing import List

from beangraph import BeanModule, Container, InjectionStrategy


class Link:
    """Node of a dependency chain."""

    def __init__(self, previous=None):
        self.previous = previous


class TestLargeGraphs(unittest.TestCase):
    """Test performance with large numbers of definitions."""

    def test_build_many_definitions(self):
        """Can build 500 independent definitions efficiently."""
        module = BeanModule()
        with module:
            for i in range(500):
                cls = type(f"Service{i}", (), {})
                module.single[cls]()

        container = Container(modules=[module])
        start = time.perf_counter()
        container.build()
        elapsed = time.perf_counter() - start
        container.shutdown()

        self.assertLess(elapsed, 1.0, "Building 500 definitions should be fast")

    def test_deep_chain(self):
        """A chain deeper than the recursion limit builds and resolves."""
        depth = 1500
        module = BeanModule()
        with module:
            module.single["link0"](Link)
            for i in range(1, depth):
                module.single[f"link{i}"](Link, dependencies=[f"link{i - 1}"])

        container = Container(modules=[module])
        container.build()

        order: List[str] = [d.type_key for d in container.instantiation_order]
        self.assertEqual(order[0], "link0")
        self.assertEqual(order[-1], f"link{depth - 1}")

        # Resolve bottom-up so each request only goes one level deep
        for i in range(depth):
            container.get(f"link{i}")
        self.assertIsNotNone(container.get(f"link{depth - 1}").previous)
        container.shutdown()

    def test_long_cycle(self):
        """A cycle through many beans is detected and broken once."""
        size = 200
        module = BeanModule()
        with module:
            module.single["node0"](
                Link, dependencies=[f"node{size - 1}"], strategy=InjectionStrategy.FIELD
            )
            for i in range(1, size):
                module.single[f"node{i}"](Link, dependencies=[f"node{i - 1}"])

        container = Container(modules=[module])
        container.build()

        first = container.get("node0")
        link = first.node199
        for _ in range(size - 1):
            link = link.previous
        self.assertIs(link, first)
        container.shutdown()


if __name__ == '__main__':
    unittest.main()
