############################################################
#
# etlive - ET Live Data Server
#
# cache.py: Shared latest-measurement cache
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Latest-value cache shared by the scheduler and the read API.

Entries are immutable CacheEntry objects replaced whole under the lock, so
a reader always sees either the previous or the new entry. The lock is only
held for a dict lookup or assignment, never across network I/O.
"""

import asyncio
from typing import Dict, Iterable, List, Optional

from backend.app.core.collector.exceptions import NodeNotFoundError
from backend.app.core.collector.models import CacheEntry, Measurement
from backend.app.core.collector.registry import normalize_node_id


class MeasurementCache:
    """Map of node id -> latest measurement, or absent."""

    def __init__(self):
        self._lock = asyncio.Lock()
        self._entries: Dict[str, CacheEntry] = {}
        self._initialized = False

    def initialize(self, node_ids: Iterable[str]) -> None:
        """
        Populate every configured node with an absent value.

        Must be called exactly once, before polling or reads begin. The key
        set is fixed from here on.
        """
        if self._initialized:
            raise RuntimeError("cache already initialized")
        entries = {}
        for node_id in sorted(normalize_node_id(n) for n in node_ids):
            entries[node_id] = CacheEntry(node_id=node_id)
        self._entries = entries
        self._initialized = True

    @property
    def node_ids(self) -> List[str]:
        return list(self._entries)

    async def get(self, node_id: str) -> CacheEntry:
        """Get the current entry for a configured node."""
        key = normalize_node_id(node_id)
        async with self._lock:
            entry = self._entries.get(key)
        if entry is None:
            raise NodeNotFoundError(node_id)
        return entry

    async def get_all(self) -> List[CacheEntry]:
        """Snapshot of every entry, sorted by node id."""
        async with self._lock:
            return list(self._entries.values())

    async def set(self, node_id: str, value: Optional[Measurement]) -> None:
        """Replace a node's value (last writer wins). Never inserts."""
        key = normalize_node_id(node_id)
        entry = CacheEntry(node_id=key, value=value)
        async with self._lock:
            if key not in self._entries:
                raise NodeNotFoundError(node_id)
            self._entries[key] = entry

    async def count_online(self) -> int:
        """Number of nodes with a cached value."""
        async with self._lock:
            return sum(1 for e in self._entries.values() if e.has_value)
