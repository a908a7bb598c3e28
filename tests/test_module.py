"""
BeanModule DSL Tests

Tests for the single[Type] / prototype[Type] registration syntax
"""

import unittest

from beangraph import BeanModule, BeanReference, BeanScope, InjectionStrategy, ref
from fixtures import Car, Engine, V8Engine


class TestRegistrationSyntax(unittest.TestCase):
    """Tests for the subscript builders"""

    def test_builders_carry_their_scope(self):
        module = BeanModule()

        self.assertEqual(module.single.scope, BeanScope.SINGLETON)
        self.assertEqual(module.prototype.scope, BeanScope.PROTOTYPE)
        self.assertIs(module.single.module, module)

    def test_single_registers_singleton(self):
        module = BeanModule()
        with module:
            definition = module.single[Engine]()

        self.assertEqual(module.definitions, [definition])
        self.assertEqual(definition.scope, BeanScope.SINGLETON)
        self.assertIs(definition.implementation, Engine)

    def test_prototype_registers_prototype(self):
        module = BeanModule()
        with module:
            definition = module.prototype[Car](Car, dependencies=[Engine])

        self.assertEqual(definition.scope, BeanScope.PROTOTYPE)
        self.assertEqual(definition.dependencies, [BeanReference(Engine)])

    def test_class_becomes_implementation(self):
        module = BeanModule()
        with module:
            definition = module.single[Engine](V8Engine)

        self.assertIs(definition.type_key, Engine)
        self.assertIs(definition.implementation, V8Engine)
        self.assertIsNone(definition.factory)

    def test_callable_becomes_factory(self):
        factory = lambda: V8Engine()  # noqa: E731
        module = BeanModule()
        with module:
            definition = module.single[Engine](factory)

        self.assertIs(definition.factory, factory)
        self.assertIsNone(definition.implementation)
        self.assertTrue(definition.is_factory)

    def test_options_are_passed_through(self):
        module = BeanModule()
        with module:
            definition = module.single[Engine](
                V8Engine,
                dependencies=[ref(Car, "main", strategy=InjectionStrategy.FIELD)],
                strategy=InjectionStrategy.SETTER,
                qualifier="v8",
                primary=True,
                init_method="start",
                destroy_method="stop",
            )

        self.assertEqual(definition.qualifier, "v8")
        self.assertTrue(definition.primary)
        self.assertEqual(definition.strategy, InjectionStrategy.SETTER)
        self.assertEqual(definition.init_method, "start")
        self.assertEqual(definition.destroy_method, "stop")
        self.assertEqual(
            definition.strategy_for(definition.dependencies[0]), InjectionStrategy.FIELD
        )

    def test_definitions_keep_declaration_order(self):
        module = BeanModule()
        with module:
            module.single[Engine]()
            module.prototype[Car](Car, dependencies=[Engine])

        self.assertEqual([d.type_key for d in module.definitions], [Engine, Car])
        self.assertEqual(len(module), 2)

    def test_definitions_is_a_copy(self):
        module = BeanModule()
        with module:
            module.single[Engine]()

        module.definitions.clear()

        self.assertEqual(len(module), 1)

    def test_module_without_context_manager(self):
        module = BeanModule()
        module.single[Engine]()

        self.assertEqual(len(module), 1)

    def test_string_key_requires_factory_or_implementation(self):
        module = BeanModule()

        with self.assertRaises(ValueError):
            module.single["config"]()


if __name__ == '__main__':
    unittest.main()
