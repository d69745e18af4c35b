############################################################
#
# etlive - ET Live Data Server
#
# read_api.py: Cache views served to the front end
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Read-only views over the cache. Never contacts the nodes."""

from typing import List

from backend.app.core.collector.cache import MeasurementCache
from backend.app.core.collector.exceptions import NoDataError
from backend.app.core.collector.models import (
    CacheEntry,
    NodeDescriptor,
    NodeEntry,
    NodeStatus,
)
from backend.app.core.collector.registry import NodeRegistry


def build_node_entry(node: NodeDescriptor, entry: CacheEntry) -> NodeEntry:
    """Combine a node's descriptor with its cache entry."""
    if entry.value is None:
        return NodeEntry(
            node_id=node.id,
            status=NodeStatus.OFFLINE,
            location=node.location,
            last_update=0,
            data=None,
        )
    return NodeEntry(
        node_id=node.id,
        status=NodeStatus.ONLINE,
        location=node.location,
        last_update=entry.value.timestamp or 0,
        data=entry.value,
    )


async def get_all_entries(
    registry: NodeRegistry, cache: MeasurementCache
) -> List[NodeEntry]:
    """Every node's entry, sorted by node id."""
    entries = await cache.get_all()
    return [build_node_entry(registry.get(e.node_id), e) for e in entries]


async def get_node_entry(
    registry: NodeRegistry, cache: MeasurementCache, node_id: str
) -> NodeEntry:
    """
    One node's entry.

    Raises:
        NodeNotFoundError: the node is not configured
        NoDataError: the node has no cached measurement
    """
    node = registry.get(node_id)
    entry = await cache.get(node.id)
    if entry.value is None:
        raise NoDataError(node.id)
    return build_node_entry(node, entry)
