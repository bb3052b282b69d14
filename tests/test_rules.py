"""Tests for key and value rule sets."""

import numbers
from decimal import Decimal
from fractions import Fraction

import pytest

from coercive_dict import ABSTRACT_CORE_TYPES, KeyCoercionRules, Symbol, ValueCoercionRules
from coercive_dict._rules import iter_subclasses


class Vehicle:
    pass


class Car(Vehicle):
    pass


class SportsCar(Car):
    pass


class Garage:
    def __init__(self, vehicle):
        self.vehicle = vehicle


class TestKeyCoercionRules:

    def test_register_every_key(self, key_rules):
        key_rules.register(["a", "b"], int)
        assert key_rules.lookup("a") is int
        assert key_rules.lookup("b") is int
        assert key_rules.lookup("c") is None

    def test_strings_and_symbols_share_a_rule(self, key_rules):
        key_rules.register([Symbol("user")], dict)
        assert key_rules.lookup("user") is dict
        assert "user" in key_rules

    def test_later_rule_overwrites(self, key_rules):
        key_rules.register(["a"], int)
        key_rules.register(["a"], float)
        assert key_rules.lookup("a") is float
        assert len(key_rules) == 1

    def test_non_string_keys(self, key_rules):
        key_rules.register([1, ("x", "y")], str)
        assert key_rules.lookup(1) is str
        assert key_rules.lookup(("x", "y")) is str

    def test_unhashable_key_has_no_rule(self, key_rules):
        assert key_rules.lookup(["a"]) is None

    def test_snapshot_is_independent(self, key_rules):
        key_rules.register(["a"], int)
        copy = key_rules.snapshot()
        key_rules.register(["b"], int)
        copy.register(["c"], int)
        assert copy.lookup("a") is int
        assert copy.lookup("b") is None
        assert key_rules.lookup("c") is None

    def test_as_dict_uses_canonical_keys(self, key_rules):
        key_rules.register(["a"], int)
        rules = key_rules.as_dict()
        assert rules == {"a": int}
        assert all(isinstance(key, Symbol) for key in rules)


class TestValueCoercionRules:

    def test_strict_matches_exact_class_only(self, value_rules):
        value_rules.register(Vehicle, Garage, strict=True)
        assert value_rules.lookup(Vehicle()) is Garage
        assert value_rules.lookup(Car()) is None

    def test_lenient_matches_subclasses(self, value_rules):
        value_rules.register(Vehicle, Garage, strict=False)
        assert value_rules.lookup(Vehicle()) is Garage
        assert value_rules.lookup(Car()) is Garage
        assert value_rules.lookup(SportsCar()) is Garage
        assert set(value_rules.lenient) >= {Vehicle, Car, SportsCar}

    def test_lenient_does_not_reach_ancestors(self, value_rules):
        value_rules.register(Car, Garage, strict=False)
        assert value_rules.lookup(Vehicle()) is None
        assert value_rules.lookup(SportsCar()) is Garage

    def test_lenient_only_knows_subclasses_defined_at_registration(self, value_rules):
        value_rules.register(Vehicle, Garage, strict=False)

        class Truck(Vehicle):
            pass

        assert value_rules.lookup(Truck()) is None

    def test_strict_rule_is_checked_first(self, value_rules):
        value_rules.register(Vehicle, Garage, strict=False)
        value_rules.register(Car, str, strict=True)
        assert value_rules.lookup(Car()) is str
        assert value_rules.lookup(SportsCar()) is Garage

    def test_lenient_object_is_refused(self, value_rules):
        with pytest.raises(ValueError):
            value_rules.register(object, str, strict=False)

    def test_rules_are_keyed_by_class(self, value_rules):
        with pytest.raises(TypeError):
            value_rules.register("int", str)

    def test_abstract_integer_expands(self, value_rules):
        value_rules.register(numbers.Integral, str)
        assert value_rules.lookup(3) is str
        assert value_rules.lookup(10 ** 40) is str
        assert numbers.Integral not in value_rules.strict
        assert value_rules.lookup(True) is None

    def test_abstract_number_expands_to_every_member(self, value_rules):
        value_rules.register(numbers.Number, str, strict=False)
        for value in (1, 1.5, 1j, Fraction(1, 2), Decimal("1")):
            assert value_rules.lookup(value) is str
        assert numbers.Number not in value_rules.lenient
        assert set(value_rules.lenient) >= set(ABSTRACT_CORE_TYPES[numbers.Number])

    def test_no_rule(self, value_rules):
        assert value_rules.lookup("text") is None
        assert len(value_rules) == 0


def test_iter_subclasses_walks_the_whole_tree():
    assert list(iter_subclasses(SportsCar)) == [SportsCar]
    assert set(iter_subclasses(Vehicle)) >= {Vehicle, Car, SportsCar}
