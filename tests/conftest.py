"""Shared fixtures for the coercive_dict test-suite."""

import pytest

from coercive_dict import (
    CoercionEngine,
    KeyCoercionRules,
    TypeConverterRegistry,
    ValueCoercionRules,
    reset_default_registry,
)


@pytest.fixture(autouse=True)
def _fresh_default_registry():
    """Every test starts and ends with a pristine process wide registry."""
    reset_default_registry()
    yield
    reset_default_registry()


@pytest.fixture
def key_rules():
    return KeyCoercionRules()


@pytest.fixture
def value_rules():
    return ValueCoercionRules()


@pytest.fixture
def engine(key_rules, value_rules):
    """A standalone engine with empty rule sets and its own registry."""
    return CoercionEngine(key_rules, value_rules, registry=TypeConverterRegistry())


@pytest.fixture
def writes():
    """Records the (key, value) pairs handed to a raw writer."""
    recorded = []

    def write(key, value):
        recorded.append((key, value))

    write.recorded = recorded
    return write
