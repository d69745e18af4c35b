############################################################
#
# etlive - ET Live Data Server
#
# service.py: Collector service wiring and lifecycle
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Collector service - owns the registry, cache, gates, client and scheduler."""

from typing import Optional

import httpx

from backend.app.core.collector.cache import MeasurementCache
from backend.app.core.collector.gates import AdmissionGates
from backend.app.core.collector.node_config import load_node_config
from backend.app.core.collector.poll_client import PollClient
from backend.app.core.collector.registry import NodeRegistry
from backend.app.core.collector.scheduler import CollectionScheduler
from backend.app.core.collector.shutdown import ShutdownCoordinator
from backend.app.logging_config import get_logger
from backend.app.settings import Settings

logger = get_logger(__name__)


class CollectorService:
    """
    The collection core, as one explicitly owned object.

    Responsibilities:
    - Build the per-node cache entries and admission gates from the registry
    - Run the collection scheduler
    - Wind down within the shutdown deadline

    The API layer receives this object from the application; there is no
    module-level instance.
    """

    def __init__(
        self,
        registry: NodeRegistry,
        poll_interval: float = 1.0,
        poll_timeout: float = 10.0,
        shutdown_deadline: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.registry = registry
        self.cache = MeasurementCache()
        self.cache.initialize(registry.node_ids)
        self.gates = AdmissionGates(registry.node_ids)
        self.client = PollClient(timeout=poll_timeout, transport=transport)
        self.coordinator = ShutdownCoordinator(deadline=shutdown_deadline)
        self.scheduler = CollectionScheduler(
            registry=registry,
            cache=self.cache,
            gates=self.gates,
            client=self.client,
            coordinator=self.coordinator,
            interval=poll_interval,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "CollectorService":
        """
        Build the service from application settings.

        Raises:
            ConfigError: if the node configuration is missing or invalid
        """
        entries = load_node_config(settings.nodes_config_path)
        registry = NodeRegistry.from_config(entries)
        return cls(
            registry,
            poll_interval=settings.poll_interval_seconds,
            poll_timeout=settings.poll_timeout_seconds,
            shutdown_deadline=settings.shutdown_deadline_seconds,
        )

    async def start(self) -> None:
        """Begin polling."""
        self.coordinator.bind_loop()
        self.scheduler.start()
        logger.info("collector_started", nodes=list(self.registry.node_ids))

    async def stop(self) -> bool:
        """
        Stop polling and wait for outstanding polls, up to the deadline.

        Returns:
            True if collection wound down before the deadline
        """
        self.coordinator.trigger("service stop")
        finished = await self.coordinator.drain(self.scheduler.wait_closed())
        if not finished:
            logger.error(
                "collection_task_did_not_finish_in_time",
                in_flight=self.scheduler.in_flight,
            )
            await self.scheduler.abandon()

        await self.client.close()
        logger.info("collector_stopped", clean=finished)
        return finished
