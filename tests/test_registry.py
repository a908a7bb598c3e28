"""
Registry Tests

Tests for BeanDefinitionRegistry registration, lookup and validation
"""

import unittest

from beangraph import (
    AmbiguousDefinitionError,
    BeanDefinition,
    BeanDefinitionRegistry,
    BeanNotFoundError,
    DuplicateDefinitionError,
    IllegalStateError,
)
from fixtures import Car, ElectricEngine, Engine, Radio, V8Engine


class TestRegistration(unittest.TestCase):
    """Tests for register()"""

    def setUp(self):
        self.registry = BeanDefinitionRegistry()

    def test_register_assigns_index(self):
        """Registration order becomes the definition index"""
        engine = BeanDefinition(Engine)
        car = BeanDefinition(Car, dependencies=[Engine])

        self.registry.register(engine)
        self.registry.register(car)

        self.assertEqual(self.registry.index_of(engine), 0)
        self.assertEqual(self.registry.index_of(car), 1)
        self.assertEqual(self.registry.definitions, [engine, car])
        self.assertEqual(len(self.registry), 2)

    def test_index_is_per_registry(self):
        """A definition shared by two registries keeps an index in each"""
        engine = BeanDefinition(Engine)
        radio = BeanDefinition(Radio)
        other = BeanDefinitionRegistry()

        self.registry.register(engine)
        self.registry.register(radio)
        other.register(radio)
        other.register(engine)

        self.assertEqual(self.registry.index_of(engine), 0)
        self.assertEqual(self.registry.index_of(radio), 1)
        self.assertEqual(other.index_of(engine), 1)
        self.assertEqual(other.index_of(radio), 0)

    def test_duplicate_qualified_definition(self):
        """Same (type, qualifier) pair twice raises DuplicateDefinitionError"""
        self.registry.register(BeanDefinition(Engine, qualifier="v8"))

        with self.assertRaises(DuplicateDefinitionError) as ctx:
            self.registry.register(BeanDefinition(Engine, qualifier="v8"))

        self.assertIn("Engine('v8')", str(ctx.exception))

    def test_unqualified_definitions_accepted_at_registration(self):
        """Unqualified duplicates are checked by validate(), not register()"""
        self.registry.register(BeanDefinition(Engine))
        self.registry.register(BeanDefinition(Engine))

        self.assertEqual(len(self.registry), 2)

    def test_register_after_freeze(self):
        """A frozen registry rejects new definitions"""
        self.registry.freeze()

        with self.assertRaises(IllegalStateError):
            self.registry.register(BeanDefinition(Engine))
        self.assertTrue(self.registry.is_frozen)


class TestLookup(unittest.TestCase):
    """Tests for lookup()"""

    def setUp(self):
        self.registry = BeanDefinitionRegistry()

    def test_lookup_single_match(self):
        definition = BeanDefinition(Engine)
        self.registry.register(definition)

        self.assertIs(self.registry.lookup(Engine), definition)

    def test_lookup_not_found_lists_registered_types(self):
        self.registry.register(BeanDefinition(Engine))

        with self.assertRaises(BeanNotFoundError) as ctx:
            self.registry.lookup(Car)

        message = str(ctx.exception)
        self.assertIn("Car is not registered", message)
        self.assertIn("Registered types: Engine", message)

    def test_lookup_empty_registry(self):
        with self.assertRaises(BeanNotFoundError) as ctx:
            self.registry.lookup(Engine)

        self.assertIn("Registered types: None", str(ctx.exception))

    def test_lookup_by_qualifier(self):
        v8 = BeanDefinition(Engine, implementation=V8Engine, qualifier="v8")
        electric = BeanDefinition(Engine, implementation=ElectricEngine, qualifier="electric")
        self.registry.register(v8)
        self.registry.register(electric)

        self.assertIs(self.registry.lookup(Engine, "v8"), v8)
        self.assertIs(self.registry.lookup(Engine, "electric"), electric)

        with self.assertRaises(BeanNotFoundError):
            self.registry.lookup(Engine, "diesel")

    def test_lookup_ambiguous_without_qualifier(self):
        self.registry.register(BeanDefinition(Engine, qualifier="v8"))
        self.registry.register(BeanDefinition(Engine, qualifier="electric"))

        with self.assertRaises(AmbiguousDefinitionError) as ctx:
            self.registry.lookup(Engine)

        self.assertIn("2 definitions satisfy Engine", str(ctx.exception))

    def test_lookup_primary_wins(self):
        primary = BeanDefinition(Engine, qualifier="v8", primary=True)
        self.registry.register(primary)
        self.registry.register(BeanDefinition(Engine, qualifier="electric"))

        self.assertIs(self.registry.lookup(Engine), primary)

    def test_lookup_multiple_primaries(self):
        self.registry.register(BeanDefinition(Engine, qualifier="v8", primary=True))
        self.registry.register(BeanDefinition(Engine, qualifier="electric", primary=True))

        with self.assertRaises(AmbiguousDefinitionError) as ctx:
            self.registry.lookup(Engine)

        self.assertIn("Multiple primary definitions", str(ctx.exception))

    def test_lookup_matches_subclasses(self):
        """A base class request is satisfied by a registered subclass"""
        v8 = BeanDefinition(V8Engine)
        self.registry.register(v8)

        self.assertIs(self.registry.lookup(Engine), v8)
        self.assertIn(Engine, self.registry)

    def test_lookup_subclasses_ambiguous(self):
        self.registry.register(BeanDefinition(V8Engine))
        self.registry.register(BeanDefinition(ElectricEngine))

        with self.assertRaises(AmbiguousDefinitionError):
            self.registry.lookup(Engine)

        # Exact requests stay unique
        self.assertIs(self.registry.lookup(V8Engine).type_key, V8Engine)

    def test_lookup_string_keys(self):
        definition = BeanDefinition("engine", implementation=Engine)
        self.registry.register(definition)

        self.assertIs(self.registry.lookup("engine"), definition)
        with self.assertRaises(BeanNotFoundError):
            self.registry.lookup(Engine)

    def test_candidates(self):
        self.registry.register(BeanDefinition(V8Engine, qualifier="fast"))
        self.registry.register(BeanDefinition(ElectricEngine, qualifier="quiet"))

        self.assertEqual(len(self.registry.candidates(Engine)), 2)
        self.assertEqual(len(self.registry.candidates(Engine, "quiet")), 1)
        self.assertEqual(self.registry.candidates(Car), [])


class TestValidate(unittest.TestCase):
    """Tests for validate()"""

    def setUp(self):
        self.registry = BeanDefinitionRegistry()

    def test_unqualified_duplicates_without_primary(self):
        self.registry.register(BeanDefinition(Engine, implementation=V8Engine))
        self.registry.register(BeanDefinition(Engine, implementation=ElectricEngine))

        with self.assertRaises(AmbiguousDefinitionError) as ctx:
            self.registry.validate()

        self.assertIn("none is primary", str(ctx.exception))

    def test_unqualified_duplicates_with_primary(self):
        primary = BeanDefinition(Engine, implementation=V8Engine, primary=True)
        self.registry.register(primary)
        self.registry.register(BeanDefinition(Engine, implementation=ElectricEngine))

        self.registry.validate()
        self.assertIs(self.registry.lookup(Engine), primary)

    def test_multiple_primaries_for_type(self):
        self.registry.register(BeanDefinition(Engine, primary=True))
        self.registry.register(BeanDefinition(Engine, qualifier="spare", primary=True))

        with self.assertRaises(AmbiguousDefinitionError):
            self.registry.validate()

    def test_distinct_types_are_valid(self):
        self.registry.register(BeanDefinition(Engine))
        self.registry.register(BeanDefinition(Car, dependencies=[Engine]))

        self.registry.validate()


if __name__ == '__main__':
    unittest.main()
