############################################################
#
# etlive - ET Live Data Server
#
# shutdown.py: Process-wide cancellation signal and shutdown deadline
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Shutdown coordination.

The signal is cooperative: the scheduler checks it between ticks and stops
admitting polls. Polls already running are bounded only by their own
timeout. ``drain`` waits for the collection machinery up to a deadline and
reports whether it made it; the process exits either way.
"""

import asyncio
import signal
from typing import Awaitable, Optional

from backend.app.logging_config import get_logger

logger = get_logger(__name__)


class ShutdownCoordinator:
    """Cancellation signal shared by the scheduler and the server."""

    def __init__(self, deadline: float = 5.0):
        self.deadline = deadline
        self._event = asyncio.Event()
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self.reason: Optional[str] = None

    @property
    def is_triggered(self) -> bool:
        return self._event.is_set()

    def bind_loop(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        """Remember the event loop that owns the signal (for thread-safe triggers)."""
        self._loop = loop or asyncio.get_running_loop()

    def trigger(self, reason: str = "requested") -> None:
        """Set the cancellation signal. Idempotent."""
        if self._event.is_set():
            return
        self.reason = reason
        logger.info("shutdown_triggered", reason=reason)
        self._event.set()

    def trigger_threadsafe(self, reason: str = "signal") -> None:
        """Trigger from a signal handler or another thread."""
        if self._loop is None or self._loop.is_closed():
            self.trigger(reason)
            return
        self._loop.call_soon_threadsafe(self.trigger, reason)

    def install_signal_handlers(self) -> None:
        """Trigger on SIGINT/SIGTERM delivered to the running loop."""
        loop = asyncio.get_running_loop()
        self.bind_loop(loop)
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self.trigger, sig.name)
            except NotImplementedError:
                # Windows event loops have no add_signal_handler
                signal.signal(
                    sig, lambda signum, frame: self.trigger_threadsafe(signal.Signals(signum).name)
                )

    async def wait(self, timeout: Optional[float] = None) -> bool:
        """Wait for the signal. Returns True if it was set within ``timeout``."""
        if timeout is None:
            await self._event.wait()
            return True
        try:
            await asyncio.wait_for(self._event.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            return False
        return True

    async def drain(self, work: Awaitable, deadline: Optional[float] = None) -> bool:
        """
        Wait for ``work`` to finish, but no longer than the shutdown deadline.

        Returns:
            True if the work completed in time, False if the deadline expired
        """
        deadline = self.deadline if deadline is None else deadline
        task = asyncio.ensure_future(work)
        done, _ = await asyncio.wait({task}, timeout=deadline)
        if task in done:
            if not task.cancelled() and task.exception() is not None:
                logger.error("collection_shutdown_error", error=str(task.exception()))
            return True

        task.cancel()
        logger.error("collection_shutdown_deadline_exceeded", deadline=deadline)
        return False
