"""
OPC UA Simulator - Main Entry Point.

Starts an OPC UA server that:
1. Builds its address space from a hierarchy definition file
2. Updates dynamic tags on a fixed interval
"""
import asyncio
import logging
import signal
import sys
from typing import Any, Dict, Optional

from asyncua import Server, ua

from .address_space.asyncua_sink import AsyncuaAddressSpace
from .config import SimulatorSettings, get_settings
from .hierarchy.loader import HierarchyLoader
from .nodes.builder import TreeBuilder
from .nodes.tree import NodeTree
from .simulation.engine import SimulationEngine

logger = logging.getLogger(__name__)


class SimulatorServer:
    """
    Main simulator orchestrator.

    Wires the hierarchy loader, tree builder and simulation engine
    to an asyncua server.
    """

    def __init__(
        self,
        settings: Optional[SimulatorSettings] = None,
    ):
        """
        Initialize the simulator server.

        Args:
            settings: Simulator settings.
        """
        self.settings = settings or get_settings()

        # Core components
        self.server: Optional[Server] = None
        self.address_space: Optional[AsyncuaAddressSpace] = None
        self.tree: Optional[NodeTree] = None
        self.engine: Optional[SimulationEngine] = None

        # State
        self._running = False
        self._shutdown_event = asyncio.Event()

    async def setup(self) -> None:
        """
        Build the address space without accepting connections.

        Raises:
            FileNotFoundError: If the hierarchy file doesn't exist.
        """
        errors = self.settings.validate_paths()
        if errors:
            raise FileNotFoundError("; ".join(errors))

        definition = HierarchyLoader().load_from_file(self.settings.hierarchy_file)

        self.server = Server()
        await self.server.init()
        self.server.set_endpoint(self.settings.endpoint)
        self.server.set_server_name(self.settings.server_name)
        self.server.set_security_policy([ua.SecurityPolicyType.NoSecurity])

        self.address_space = await AsyncuaAddressSpace.create(
            self.server, self.settings.namespace_uri
        )

        builder = TreeBuilder(self.address_space)
        self.tree = await builder.build(definition)
        logger.info(self.tree.summary())

    async def start(self) -> None:
        """
        Start the simulator.

        Raises:
            FileNotFoundError: If the hierarchy file doesn't exist.
        """
        logger.info(f"Starting {self.settings.server_name}...")

        if self.server is None:
            await self.setup()

        await self.server.start()

        self.engine = SimulationEngine(self.tree, self.address_space)
        await self.engine.start(self.settings.update_interval_ms)

        self._running = True
        logger.info(f"Server url '{self.settings.endpoint}'")

    async def stop(self) -> None:
        """Stop the simulator."""
        if not self._running:
            return

        logger.info(f"Stopping {self.settings.server_name}...")
        self._running = False
        self._shutdown_event.set()

        if self.engine:
            await self.engine.stop()

        if self.server:
            await self.server.stop()

        logger.info(f"{self.settings.server_name} stopped: {self.get_stats()}")

    async def serve_forever(self) -> None:
        """Run the server until shutdown."""
        await self._shutdown_event.wait()

    def get_stats(self) -> Dict[str, Any]:
        """Get server statistics."""
        stats: Dict[str, Any] = {
            "running": self._running,
            "endpoint": self.settings.endpoint,
        }

        if self.engine:
            stats["simulation"] = self.engine.get_stats()

        return stats


def setup_signal_handlers(server: SimulatorServer, loop: asyncio.AbstractEventLoop):
    """Setup signal handlers for graceful shutdown."""
    def signal_handler():
        logger.info("Received shutdown signal")
        loop.create_task(server.stop())

    # Handle both SIGINT and SIGTERM
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, signal_handler)
        except NotImplementedError:
            # Windows doesn't support add_signal_handler
            signal.signal(sig, lambda s, f: loop.call_soon_threadsafe(signal_handler))


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )


async def main():
    """Main entry point."""
    settings = get_settings()
    configure_logging(settings.log_level)

    server = SimulatorServer(settings)
    setup_signal_handlers(server, asyncio.get_running_loop())

    try:
        await server.start()
        await server.serve_forever()
    except FileNotFoundError as e:
        logger.error(str(e))
    except KeyboardInterrupt:
        logger.info("Interrupted")
    finally:
        await server.stop()


def run() -> None:
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
