############################################################
#
# etlive - ET Live Data Server
#
# scheduler.py: Periodic collection scheduler
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Collection scheduler - one gated poll per node per tick."""

import asyncio
import time
from typing import Dict, List, Optional

from backend.app.core.collector import metrics
from backend.app.core.collector.cache import MeasurementCache
from backend.app.core.collector.exceptions import PollError
from backend.app.core.collector.gates import AdmissionGates
from backend.app.core.collector.models import Measurement, NodeDescriptor
from backend.app.core.collector.poll_client import PollClient
from backend.app.core.collector.registry import NodeRegistry
from backend.app.core.collector.shutdown import ShutdownCoordinator
from backend.app.logging_config import get_logger

logger = get_logger(__name__)


class CollectionScheduler:
    """
    Drives the periodic collection of every configured node.

    Each tick offers every node an admission through its gate. Admitted
    nodes get a poll task of their own, so a slow or hanging node never
    holds up the tick loop or any other node. Poll failures become absent
    cache values; they never escape this class.
    """

    def __init__(
        self,
        registry: NodeRegistry,
        cache: MeasurementCache,
        gates: AdmissionGates,
        client: PollClient,
        coordinator: ShutdownCoordinator,
        interval: float = 1.0,
    ):
        self._registry = registry
        self._cache = cache
        self._gates = gates
        self._client = client
        self._coordinator = coordinator
        self._interval = interval
        self._tick_task: Optional[asyncio.Task] = None
        self._poll_tasks: Dict[str, asyncio.Task] = {}
        self.ticks = 0

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def in_flight(self) -> List[str]:
        """Ids of nodes with an outstanding poll."""
        return sorted(nid for nid, t in self._poll_tasks.items() if not t.done())

    @property
    def is_running(self) -> bool:
        return self._tick_task is not None and not self._tick_task.done()

    def start(self) -> None:
        """Start the tick loop."""
        if self.is_running:
            return
        self._tick_task = asyncio.create_task(self._tick_loop(), name="collection-ticks")
        logger.info(
            "collection_started",
            nodes=len(self._registry),
            interval=self._interval,
        )

    async def tick(self) -> int:
        """
        Offer every node one admission.

        Returns:
            Number of polls launched
        """
        launched = 0
        for node in self._registry:
            if not await self._gates.try_acquire(node.id):
                metrics.POLLS_SKIPPED.labels(node=node.id).inc()
                logger.debug("node_busy_skipped", node_id=node.id)
                continue
            self._poll_tasks[node.id] = asyncio.create_task(
                self._poll_node(node), name=f"poll-{node.id}"
            )
            launched += 1
        self.ticks += 1
        return launched

    async def _tick_loop(self) -> None:
        """Fire ``tick`` at a fixed rate until the shutdown signal is set."""
        loop = asyncio.get_running_loop()
        next_tick = loop.time()
        while not self._coordinator.is_triggered:
            try:
                await self.tick()
            except Exception as e:
                logger.error("tick_error", error=str(e))

            next_tick += self._interval
            delay = next_tick - loop.time()
            if delay < 0:
                # Fell behind; resume the cadence from now
                next_tick = loop.time()
                delay = 0
            if await self._coordinator.wait(timeout=delay):
                break
        logger.info("collection_ticks_stopped", ticks=self.ticks)

    async def _poll_node(self, node: NodeDescriptor) -> None:
        """Poll one node and record the result. Always releases the node's gate."""
        started = time.monotonic()
        outcome = "success"
        value: Optional[Measurement] = None
        try:
            try:
                value = await self._client.fetch(node.endpoint)
            except PollError as e:
                outcome = e.outcome
                logger.debug("poll_failed", node_id=node.id, outcome=outcome, error=str(e))
            except Exception as e:
                outcome = "error"
                logger.warning("poll_error", node_id=node.id, error=str(e))

            await self._cache.set(node.id, value)
            metrics.POLLS_TOTAL.labels(node=node.id, outcome=outcome).inc()
            metrics.POLL_DURATION.labels(node=node.id).observe(time.monotonic() - started)
            if value is not None:
                logger.debug("poll_succeeded", node_id=node.id, timestamp=value.timestamp)
        finally:
            self._gates.release(node.id)

    async def wait_closed(self) -> None:
        """Wait for the tick loop to stop and all outstanding polls to finish."""
        if self._tick_task is not None:
            await asyncio.wait({self._tick_task})
        pending = {t for t in self._poll_tasks.values() if not t.done()}
        if pending:
            logger.info("collection_draining", polls=len(pending))
            await asyncio.wait(pending)

    async def abandon(self) -> int:
        """
        Cancel whatever is still running after the shutdown deadline.

        Returns:
            Number of polls cancelled
        """
        pending = {nid: t for nid, t in self._poll_tasks.items() if not t.done()}
        tasks = list(pending.values())
        if self._tick_task is not None and not self._tick_task.done():
            tasks.append(self._tick_task)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        # A poll cancelled before its first step never reaches its finally
        for node_id in pending:
            if self._gates.is_busy(node_id):
                self._gates.release(node_id)
        if pending:
            logger.warning("collection_polls_abandoned", polls=len(pending))
        return len(pending)
