"""
Integration tests for SimulatorServer.

The asyncua server is initialized for real; only its network start and
stop are replaced so nothing binds a port.
"""
import asyncio
import logging
from unittest.mock import AsyncMock, MagicMock

import pytest
from asyncua import Server

from opcua_simulator import main as main_module
from opcua_simulator.config import SimulatorSettings
from opcua_simulator.main import SimulatorServer, configure_logging
from opcua_simulator.nodes.tree import TagStatus


@pytest.fixture
def settings(tmp_path, monkeypatch, sample_xml):
    monkeypatch.chdir(tmp_path)
    hierarchy = tmp_path / "opcnodes.xml"
    hierarchy.write_text(sample_xml, encoding="utf-8")
    return SimulatorSettings(hierarchy_file=hierarchy, update_interval_ms=10)


@pytest.fixture
def offline_server(monkeypatch):
    """Replace the network start/stop of the asyncua server."""
    start = AsyncMock()
    stop = AsyncMock()
    monkeypatch.setattr(Server, "start", start)
    monkeypatch.setattr(Server, "stop", stop)
    return start, stop


class TestSimulatorServer:
    """Test server orchestration."""

    @pytest.mark.asyncio
    async def test_setup_builds_address_space(self, settings):
        simulator = SimulatorServer(settings)

        await simulator.setup()

        assert len(simulator.tree) == 8
        temp = simulator.tree.find("Temp")[0]
        node = simulator.address_space.get_node(temp.node_id)
        assert await node.read_value() == 21.5
        assert temp.status == TagStatus.GOOD

    @pytest.mark.asyncio
    async def test_setup_missing_file(self, settings, tmp_path):
        settings.hierarchy_file = tmp_path / "missing.xml"
        simulator = SimulatorServer(settings)

        with pytest.raises(FileNotFoundError, match="Hierarchy file not found"):
            await simulator.setup()

        assert simulator.server is None

    @pytest.mark.asyncio
    async def test_start_and_stop(self, settings, offline_server):
        start, stop = offline_server
        simulator = SimulatorServer(settings)

        await simulator.start()
        await asyncio.sleep(0.05)

        stats = simulator.get_stats()
        assert stats["running"] is True
        assert stats["simulation"]["ticks"] >= 1
        start.assert_awaited_once()

        await simulator.stop()

        stop.assert_awaited_once()
        assert simulator.get_stats()["running"] is False
        assert not simulator.engine.is_running

    @pytest.mark.asyncio
    async def test_serve_forever_returns_on_stop(self, settings, offline_server):
        simulator = SimulatorServer(settings)
        await simulator.start()

        serving = asyncio.create_task(simulator.serve_forever())
        await simulator.stop()

        await asyncio.wait_for(serving, timeout=1.0)

    @pytest.mark.asyncio
    async def test_stop_before_start_is_noop(self, settings, offline_server):
        _, stop = offline_server
        simulator = SimulatorServer(settings)

        await simulator.stop()

        stop.assert_not_awaited()


class TestConfigureLogging:
    """Test logging setup."""

    def test_level_from_name(self, monkeypatch):
        basic_config = MagicMock()
        monkeypatch.setattr(main_module.logging, "basicConfig", basic_config)

        configure_logging("debug")

        assert basic_config.call_args.kwargs["level"] == logging.DEBUG

    def test_unknown_level_defaults_to_info(self, monkeypatch):
        basic_config = MagicMock()
        monkeypatch.setattr(main_module.logging, "basicConfig", basic_config)

        configure_logging("loud")

        assert basic_config.call_args.kwargs["level"] == logging.INFO
