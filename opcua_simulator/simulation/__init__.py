"""
Tick-driven value simulation.
"""
from .generators import GENERATORS, SimulationState, generate_value
from .engine import DEFAULT_TICK_INTERVAL_MS, SimulationEngine, TickResult

__all__ = [
    "GENERATORS",
    "SimulationState",
    "generate_value",
    "DEFAULT_TICK_INTERVAL_MS",
    "SimulationEngine",
    "TickResult",
]
