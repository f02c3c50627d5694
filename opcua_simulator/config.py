"""
Configuration for the OPC UA simulator.

Provides settings for the server endpoint, namespace, hierarchy
file and tag update interval.
"""
from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_UPDATE_INTERVAL_MS = 1000


class SimulatorSettings(BaseSettings):
    """Main configuration for the simulator."""

    model_config = SettingsConfigDict(
        env_prefix="SIMULATOR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    server_name: str = Field(default="SimulationOpcUaServer")
    log_level: str = Field(default="INFO")

    # Server
    endpoint: str = Field(
        default="opc.tcp://localhost:4840/SimulationOpcUaServer",
        description="Endpoint URL clients connect to",
    )
    namespace_uri: str = Field(
        default="http://xyz.com/SimulationOpcUaServer",
        description="Namespace for all simulated nodes",
    )

    # Simulation
    hierarchy_file: Path = Field(
        default=Path("data/opcnodes.xml"),
        description="Folder/variable hierarchy definition (XML or YAML)",
    )
    update_interval_ms: int = Field(
        default=DEFAULT_UPDATE_INTERVAL_MS,
        description="Tag update interval in milliseconds",
    )

    @field_validator("update_interval_ms")
    @classmethod
    def _default_non_positive_interval(cls, value: int) -> int:
        if value <= 0:
            return DEFAULT_UPDATE_INTERVAL_MS
        return value

    def validate_paths(self) -> List[str]:
        """
        Validate that required paths exist.

        Returns:
            List of error messages for missing paths.
        """
        errors = []

        if not self.hierarchy_file.exists():
            errors.append(f"Hierarchy file not found: {self.hierarchy_file}")

        return errors


@lru_cache()
def get_settings() -> SimulatorSettings:
    """
    Get cached simulator settings.

    Uses LRU cache to avoid re-reading environment variables on every access.
    """
    return SimulatorSettings()
