"""
Simulation engine.

Periodically regenerates the values of all dynamic variables in a
node tree and publishes them to the address space.
"""
import asyncio
import logging
import random
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from ..address_space.base import AddressSpaceSink
from ..nodes.tree import NodeTree, TagStatus, Variable
from .generators import SimulationState, generate_value, has_rule

logger = logging.getLogger(__name__)

DEFAULT_TICK_INTERVAL_MS = 1000


def normalize_interval(interval_ms: Optional[int]) -> int:
    """Fall back to the default for unset or non-positive intervals."""
    if interval_ms is None or interval_ms <= 0:
        return DEFAULT_TICK_INTERVAL_MS
    return interval_ms


@dataclass
class TickResult:
    """
    Outcome of a single tick.

    ``failed`` is the variable whose update was in progress when the
    error escaped, not the last variable that completed. Variables in
    ``updated`` finished before the failure and keep their new samples;
    the ones after ``failed`` are left as they were.
    """
    timestamp: datetime
    updated: List[Variable] = field(default_factory=list)
    skipped: int = 0
    failed: Optional[Variable] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def changed(self) -> List[Variable]:
        """Variables to publish: everything updated plus a degraded one."""
        if self.failed is None:
            return list(self.updated)
        return self.updated + [self.failed]


class SimulationEngine:
    """
    Drives value changes for every dynamic variable.

    Each tick walks the variable index in order without suspending,
    then publishes the changed variables. If a tick fails, the variable
    being processed is marked Bad and the loop carries on.
    """

    def __init__(
        self,
        tree: NodeTree,
        sink: AddressSpaceSink,
        state: Optional[SimulationState] = None,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], datetime]] = None,
        generator: Callable[..., Any] = generate_value,
    ):
        """
        Initialize the engine.

        Args:
            tree: Node tree to animate.
            sink: Address space receiving change notifications.
            state: Shared simulation state (counter). A fresh one if omitted.
            rng: Random source.
            clock: Source of tick timestamps. Defaults to UTC now.
            generator: Value generation function.
        """
        self.tree = tree
        self.sink = sink
        self.state = state or SimulationState()
        self._rng = rng or random.Random()
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._generate = generator

        # Loop state
        self._running = False
        self._shutdown_event = asyncio.Event()
        self._task: Optional[asyncio.Task] = None

        # Metrics
        self.tick_count = 0
        self.failed_ticks = 0
        self.last_tick: Optional[datetime] = None

    @property
    def is_running(self) -> bool:
        return self._running

    def tick(self) -> TickResult:
        """
        Run one simulation pass over all variables.

        Returns:
            TickResult with the updated variables, and the degraded
            variable and error if the pass failed.
        """
        now = self._clock()
        result = TickResult(timestamp=now)
        current: Optional[Variable] = None

        try:
            for variable in self.tree:
                if variable.is_static:
                    result.skipped += 1
                    continue

                current = variable
                if has_rule(variable.data_type):
                    value = self._generate(
                        variable.data_type, variable.max_value, self.state, self._rng
                    )
                    variable.update(value, TagStatus.GOOD, now)
                else:
                    variable.touch(now)
                result.updated.append(variable)
                current = None

        except Exception as e:
            result.error = e
            self._handle_tick_failure(result, current)

        self.tick_count += 1
        self.last_tick = now
        return result

    def _handle_tick_failure(
        self,
        result: TickResult,
        current: Optional[Variable],
    ) -> None:
        self.failed_ticks += 1
        if current is not None:
            current.mark_bad(self._clock())
            result.failed = current
            logger.error(
                f"Tick failed on '{current.name}' ({current.node_id}), "
                f"marked Bad: {result.error}"
            )
        else:
            logger.error(f"Tick failed: {result.error}")

    async def publish(self, result: TickResult) -> None:
        """Send change notifications for a tick's variables."""
        for variable in result.changed:
            try:
                await self.sink.notify_changed(variable)
            except Exception as e:
                logger.error(f"Failed to publish '{variable.name}': {e}")

    async def run(self, tick_interval_ms: Optional[int] = DEFAULT_TICK_INTERVAL_MS) -> None:
        """
        Tick until stopped.

        Args:
            tick_interval_ms: Delay between ticks in milliseconds.
        """
        interval = normalize_interval(tick_interval_ms) / 1000.0
        self._running = True
        logger.info(
            f"Simulation started for {len(self.tree)} variables "
            f"(interval={interval}s)"
        )

        try:
            while not self._shutdown_event.is_set():
                result = self.tick()
                await self.publish(result)

                try:
                    await asyncio.wait_for(self._shutdown_event.wait(), timeout=interval)
                except asyncio.TimeoutError:
                    pass
        finally:
            self._running = False

        logger.info("Simulation stopped")

    async def start(self, tick_interval_ms: Optional[int] = DEFAULT_TICK_INTERVAL_MS) -> None:
        """Run the tick loop as a background task."""
        if self._task and not self._task.done():
            logger.warning("Simulation already running")
            return

        self._running = True
        self._shutdown_event.clear()
        self._task = asyncio.create_task(
            self.run(tick_interval_ms),
            name="simulation_tick_loop",
        )

    async def stop(self) -> None:
        """Stop the tick loop, letting the current tick finish."""
        self._running = False
        self._shutdown_event.set()

        if self._task:
            try:
                await asyncio.wait_for(self._task, timeout=5.0)
            except asyncio.TimeoutError:
                self._task.cancel()
                try:
                    await self._task
                except asyncio.CancelledError:
                    pass
            self._task = None

    def get_stats(self) -> Dict[str, Any]:
        """
        Get simulation statistics.

        Returns:
            Dictionary of statistics.
        """
        return {
            "running": self._running,
            "variables": len(self.tree),
            "ticks": self.tick_count,
            "failed_ticks": self.failed_ticks,
            "counter": self.state.counter,
            "last_tick": self.last_tick.isoformat() if self.last_tick else None,
        }
