"""
OPC UA Simulator - live tag simulation for protocol testing.

Builds an address-space tree from a hierarchy definition and keeps
its variables changing on a fixed tick.
"""
from .config import SimulatorSettings, get_settings
from .main import SimulatorServer

__all__ = [
    "SimulatorSettings",
    "get_settings",
    "SimulatorServer",
]
