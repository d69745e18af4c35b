############################################################
#
# etlive - ET Live Data Server
#
# gates.py: Per-node admission gates (one in-flight poll per node)
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Per-node admission gates."""

import asyncio
from typing import Dict, Iterable

from backend.app.core.collector.exceptions import NodeNotFoundError
from backend.app.core.collector.registry import normalize_node_id


class AdmissionGates:
    """
    One binary gate per node, built once from the registry.

    ``try_acquire`` never waits: a node whose previous poll is still
    outstanding is reported busy and skipped for that tick, so a slow node
    never accumulates parallel requests.
    """

    def __init__(self, node_ids: Iterable[str]):
        self._gates: Dict[str, asyncio.Lock] = {
            normalize_node_id(node_id): asyncio.Lock() for node_id in node_ids
        }

    def _gate(self, node_id: str) -> asyncio.Lock:
        try:
            return self._gates[normalize_node_id(node_id)]
        except KeyError:
            raise NodeNotFoundError(node_id) from None

    async def try_acquire(self, node_id: str) -> bool:
        """Admit a poll for the node. Returns False if one is outstanding."""
        gate = self._gate(node_id)
        if gate.locked():
            return False
        # An unheld lock is taken without suspending
        await gate.acquire()
        return True

    def release(self, node_id: str) -> None:
        """Release the node's gate. Raises RuntimeError if it is not held."""
        self._gate(node_id).release()

    def is_busy(self, node_id: str) -> bool:
        return self._gate(node_id).locked()

    def busy_count(self) -> int:
        return sum(1 for gate in self._gates.values() if gate.locked())
