"""
Per-type value generation rules.

One rule per semantic type, looked up in a dispatch table. Types
without a rule produce no value.
"""
import random
from dataclasses import dataclass
from typing import Any, Callable, Dict

from ..hierarchy.definitions import SemanticType


@dataclass
class SimulationState:
    """Mutable state shared by all generation rules."""
    # Shared by every Integer variable
    counter: int = 0

    def reset(self) -> None:
        self.counter = 0


Generator = Callable[[int, SimulationState, random.Random], Any]


def next_counter(max_value: int, state: SimulationState, rng: random.Random) -> int:
    """Advance the shared counter, wrapping to 1 once it passes max_value."""
    state.counter += 1
    if state.counter > max_value:
        state.counter = 1
    return state.counter


def random_double(max_value: int, state: SimulationState, rng: random.Random) -> float:
    """Uniform draw in [0, 100) rounded to 2 places, clamped to max_value."""
    value = round(rng.random() * 100, 2)
    if value > max_value:
        return float(max_value)
    return value


def random_bool(max_value: int, state: SimulationState, rng: random.Random) -> bool:
    return rng.randint(0, 1) == 1


def random_int32(max_value: int, state: SimulationState, rng: random.Random) -> int:
    """Uniform integer in [0, max_value); 0 when the range is empty."""
    if max_value <= 0:
        return 0
    return rng.randrange(max_value)


def random_string(max_value: int, state: SimulationState, rng: random.Random) -> str:
    return f"Invalid_{random_int32(max_value, state, rng)}"


GENERATORS: Dict[SemanticType, Generator] = {
    SemanticType.INTEGER: next_counter,
    SemanticType.DOUBLE: random_double,
    SemanticType.BOOLEAN: random_bool,
    SemanticType.INT32: random_int32,
    SemanticType.STRING: random_string,
}


def has_rule(data_type: SemanticType) -> bool:
    return data_type in GENERATORS


def generate_value(
    data_type: SemanticType,
    max_value: int,
    state: SimulationState,
    rng: random.Random,
) -> Any:
    """
    Produce the next value for a variable.

    Args:
        data_type: Variable's semantic type.
        max_value: Variable's bound.
        state: Shared simulation state.
        rng: Random source.

    Returns:
        The generated value, or None for types without a rule.
    """
    generator = GENERATORS.get(data_type)
    if generator is None:
        return None
    return generator(max_value, state, rng)
