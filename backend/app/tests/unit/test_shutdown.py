############################################################
#
# etlive - ET Live Data Server
#
# test_shutdown.py: Unit tests for shutdown coordination
#
############################################################

"""Unit tests for ShutdownCoordinator and CollectorService.stop."""

import asyncio
import os
import signal

import pytest

from backend.app.core.collector.service import CollectorService
from backend.app.core.collector.shutdown import ShutdownCoordinator


class TestShutdownCoordinator:
    """Test the cancellation signal."""

    def test_initially_unset(self):
        assert ShutdownCoordinator().is_triggered is False

    def test_trigger_is_idempotent(self):
        coordinator = ShutdownCoordinator()
        coordinator.trigger("first")
        coordinator.trigger("second")
        assert coordinator.is_triggered
        assert coordinator.reason == "first"

    @pytest.mark.asyncio
    async def test_wait_times_out_when_unset(self):
        coordinator = ShutdownCoordinator()
        assert await coordinator.wait(timeout=0.01) is False

    @pytest.mark.asyncio
    async def test_wait_returns_when_triggered(self):
        coordinator = ShutdownCoordinator()
        asyncio.get_running_loop().call_later(0.01, coordinator.trigger, "test")
        assert await coordinator.wait(timeout=1.0) is True

    @pytest.mark.asyncio
    async def test_trigger_threadsafe(self):
        coordinator = ShutdownCoordinator()
        coordinator.bind_loop()

        await asyncio.to_thread(coordinator.trigger_threadsafe, "from thread")

        assert await coordinator.wait(timeout=1.0) is True
        assert coordinator.reason == "from thread"

    @pytest.mark.asyncio
    @pytest.mark.skipif(not hasattr(signal, "SIGTERM") or os.name != "posix", reason="POSIX only")
    async def test_sigterm_triggers(self):
        coordinator = ShutdownCoordinator()
        coordinator.install_signal_handlers()
        loop = asyncio.get_running_loop()
        try:
            os.kill(os.getpid(), signal.SIGTERM)
            assert await coordinator.wait(timeout=1.0) is True
            assert coordinator.reason == "SIGTERM"
        finally:
            loop.remove_signal_handler(signal.SIGINT)
            loop.remove_signal_handler(signal.SIGTERM)

    @pytest.mark.asyncio
    async def test_drain_completes_in_time(self):
        coordinator = ShutdownCoordinator(deadline=1.0)
        assert await coordinator.drain(asyncio.sleep(0.01)) is True

    @pytest.mark.asyncio
    async def test_drain_deadline_exceeded(self):
        coordinator = ShutdownCoordinator(deadline=0.05)
        loop = asyncio.get_running_loop()
        started = loop.time()

        assert await coordinator.drain(asyncio.sleep(10)) is False
        assert loop.time() - started < 1.0

    @pytest.mark.asyncio
    async def test_drain_reports_failed_work_as_finished(self):
        async def broken():
            raise RuntimeError("boom")

        coordinator = ShutdownCoordinator(deadline=1.0)
        assert await coordinator.drain(broken()) is True


class TestCollectorStop:
    """Test the shutdown protocol end to end."""

    @pytest.mark.asyncio
    async def test_clean_stop_waits_for_inflight_polls(
        self, registry, node_simulator, payload_factory
    ):
        node_simulator.behaviours["node-a"] = 0.1
        node_simulator.behaviours["node-b"] = payload_factory(2000)
        collector = CollectorService(
            registry,
            poll_interval=0.05,
            poll_timeout=1.0,
            shutdown_deadline=2.0,
            transport=node_simulator.transport(),
        )

        await collector.start()
        await asyncio.sleep(0.02)
        assert "ET1002" in collector.scheduler.in_flight

        assert await collector.stop() is True
        # The slow poll was allowed to finish and its result recorded
        assert (await collector.cache.get("ET1002")).value.timestamp == 1000
        assert collector.scheduler.in_flight == []

    @pytest.mark.asyncio
    async def test_stop_respects_deadline_with_hanging_node(
        self, registry, node_simulator, payload_factory
    ):
        node_simulator.behaviours["node-a"] = "hang"
        node_simulator.behaviours["node-b"] = payload_factory(2000)
        collector = CollectorService(
            registry,
            poll_interval=0.05,
            poll_timeout=30.0,
            shutdown_deadline=0.2,
            transport=node_simulator.transport(),
        )

        await collector.start()
        await asyncio.sleep(0.1)

        loop = asyncio.get_running_loop()
        started = loop.time()
        assert await collector.stop() is False
        assert loop.time() - started < 1.0
        assert collector.scheduler.in_flight == []
        assert collector.gates.busy_count() == 0
        assert not collector.scheduler.is_running

    @pytest.mark.asyncio
    async def test_no_new_polls_after_trigger(self, registry, node_simulator, payload_factory):
        node_simulator.behaviours["node-a"] = payload_factory(1)
        node_simulator.behaviours["node-b"] = payload_factory(2)
        collector = CollectorService(
            registry,
            poll_interval=0.05,
            poll_timeout=1.0,
            transport=node_simulator.transport(),
        )

        await collector.start()
        await asyncio.sleep(0.12)
        await collector.stop()
        calls = dict(node_simulator.calls)

        await asyncio.sleep(0.2)
        assert node_simulator.calls == calls
