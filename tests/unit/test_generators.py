"""
Unit tests for value generation rules.
"""
import random

import pytest

from opcua_simulator.hierarchy.definitions import SemanticType
from opcua_simulator.simulation.generators import (
    GENERATORS,
    SimulationState,
    generate_value,
    has_rule,
)


@pytest.fixture
def state():
    return SimulationState()


class TestCounter:
    """Test the shared Integer counter."""

    def test_increments_from_one(self, state, rng):
        values = [generate_value(SemanticType.INTEGER, 5, state, rng) for _ in range(3)]
        assert values == [1, 2, 3]

    def test_wraps_to_one_after_max(self, state, rng):
        values = [generate_value(SemanticType.INTEGER, 3, state, rng) for _ in range(5)]
        assert values == [1, 2, 3, 1, 2]

    def test_shared_across_variables(self, state, rng):
        first = generate_value(SemanticType.INTEGER, 100, state, rng)
        second = generate_value(SemanticType.INTEGER, 100, state, rng)
        assert (first, second) == (1, 2)
        assert state.counter == 2

    def test_smaller_bound_wraps_shared_counter(self, state, rng):
        state.counter = 10
        assert generate_value(SemanticType.INTEGER, 5, state, rng) == 1

    def test_zero_max_always_one(self, state, rng):
        values = [generate_value(SemanticType.INTEGER, 0, state, rng) for _ in range(3)]
        assert values == [1, 1, 1]

    def test_reset(self, state, rng):
        generate_value(SemanticType.INTEGER, 5, state, rng)
        state.reset()
        assert state.counter == 0


class TestRandomRules:
    """Test the random draws."""

    def test_double_within_bound(self, state, rng):
        for _ in range(200):
            value = generate_value(SemanticType.DOUBLE, 50, state, rng)
            assert 0.0 <= value <= 50.0
            assert round(value, 2) == value

    def test_double_clamped_to_max(self, state, rng):
        values = {generate_value(SemanticType.DOUBLE, 0, state, rng) for _ in range(20)}
        assert values == {0.0}

    def test_double_default_bound(self, state, rng):
        for _ in range(200):
            assert 0.0 <= generate_value(SemanticType.DOUBLE, 100, state, rng) < 100.0

    def test_boolean_domain(self, state, rng):
        values = {generate_value(SemanticType.BOOLEAN, 100, state, rng) for _ in range(100)}
        assert values == {True, False}

    def test_int32_range(self, state, rng):
        values = {generate_value(SemanticType.INT32, 5, state, rng) for _ in range(200)}
        assert values == {0, 1, 2, 3, 4}

    def test_int32_zero_max(self, state, rng):
        assert generate_value(SemanticType.INT32, 0, state, rng) == 0

    def test_string_format(self, state, rng):
        for _ in range(50):
            value = generate_value(SemanticType.STRING, 10, state, rng)
            prefix, number = value.split("_")
            assert prefix == "Invalid"
            assert 0 <= int(number) < 10

    def test_string_zero_max(self, state, rng):
        assert generate_value(SemanticType.STRING, 0, state, rng) == "Invalid_0"

    def test_random_rules_leave_counter_alone(self, state, rng):
        for data_type in (SemanticType.DOUBLE, SemanticType.BOOLEAN,
                          SemanticType.INT32, SemanticType.STRING):
            generate_value(data_type, 10, state, rng)
        assert state.counter == 0

    def test_seeded_draws_repeat(self, state):
        first, second = random.Random(7), random.Random(7)
        assert [generate_value(SemanticType.DOUBLE, 100, state, first) for _ in range(5)] == \
            [generate_value(SemanticType.DOUBLE, 100, state, second) for _ in range(5)]


class TestNoRule:
    """Test types without a generation rule."""

    @pytest.mark.parametrize(
        "data_type",
        [SemanticType.FLOAT, SemanticType.DATETIME, SemanticType.UINT16, SemanticType.INT64],
    )
    def test_produces_none(self, state, rng, data_type):
        assert has_rule(data_type) is False
        assert generate_value(data_type, 100, state, rng) is None

    def test_rule_table(self):
        assert set(GENERATORS) == {
            SemanticType.INTEGER,
            SemanticType.DOUBLE,
            SemanticType.BOOLEAN,
            SemanticType.INT32,
            SemanticType.STRING,
        }
