"""
Unit tests for simulator settings.
"""
from pathlib import Path

import pytest

from opcua_simulator.config import DEFAULT_UPDATE_INTERVAL_MS, SimulatorSettings, get_settings


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep a stray .env or SIMULATOR_ variables out of the tests."""
    monkeypatch.chdir(tmp_path)
    for name in ("ENDPOINT", "NAMESPACE_URI", "HIERARCHY_FILE", "UPDATE_INTERVAL_MS"):
        monkeypatch.delenv(f"SIMULATOR_{name}", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestSimulatorSettings:
    """Test settings defaults and overrides."""

    def test_defaults(self):
        settings = SimulatorSettings()

        assert settings.endpoint == "opc.tcp://localhost:4840/SimulationOpcUaServer"
        assert settings.namespace_uri == "http://xyz.com/SimulationOpcUaServer"
        assert settings.hierarchy_file == Path("data/opcnodes.xml")
        assert settings.update_interval_ms == DEFAULT_UPDATE_INTERVAL_MS

    @pytest.mark.parametrize("interval", [0, -250])
    def test_non_positive_interval_uses_default(self, interval):
        settings = SimulatorSettings(update_interval_ms=interval)
        assert settings.update_interval_ms == DEFAULT_UPDATE_INTERVAL_MS

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("SIMULATOR_UPDATE_INTERVAL_MS", "250")
        monkeypatch.setenv("SIMULATOR_HIERARCHY_FILE", "nodes.yaml")

        settings = SimulatorSettings()

        assert settings.update_interval_ms == 250
        assert settings.hierarchy_file == Path("nodes.yaml")

    def test_validate_paths(self, tmp_path):
        missing = SimulatorSettings(hierarchy_file=tmp_path / "missing.xml")
        assert missing.validate_paths() == [f"Hierarchy file not found: {tmp_path / 'missing.xml'}"]

        present = tmp_path / "nodes.xml"
        present.write_text("<OpcUaHierarchy />", encoding="utf-8")
        assert SimulatorSettings(hierarchy_file=present).validate_paths() == []

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()
