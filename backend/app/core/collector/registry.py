############################################################
#
# etlive - ET Live Data Server
#
# registry.py: Static registry of configured telemetry nodes
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Node registry - the immutable set of nodes to poll."""

from types import MappingProxyType
from typing import Iterable, Iterator, List, Mapping, Tuple

from backend.app.core.collector.exceptions import ConfigError, NodeNotFoundError
from backend.app.core.collector.models import NodeDescriptor
from backend.app.core.collector.node_config import NodeConfigEntry


def normalize_node_id(node_id: str) -> str:
    """Canonical form of a node id (lookups are case-insensitive)."""
    return node_id.strip().upper()


class NodeRegistry:
    """
    Immutable mapping from node id to its descriptor.

    Built once at startup and shared read-only by the scheduler, the
    admission gates and the read API. Iteration is in sorted id order.
    """

    def __init__(self, nodes: Mapping[str, NodeDescriptor]):
        self._nodes = MappingProxyType(dict(sorted(nodes.items())))

    @classmethod
    def from_entries(cls, entries: Iterable[Tuple[str, str, str]]) -> "NodeRegistry":
        """
        Build a registry from ``(id, endpoint, location)`` tuples.

        Raises:
            ConfigError: if no entries are given or two ids collide after
                normalization
        """
        nodes = {}
        for raw_id, endpoint, location in entries:
            node_id = normalize_node_id(raw_id)
            if node_id in nodes:
                raise ConfigError(f"duplicate node id '{node_id}'")
            nodes[node_id] = NodeDescriptor(
                id=node_id,
                endpoint=endpoint,
                location=location,
            )

        if not nodes:
            raise ConfigError("no nodes configured")
        return cls(nodes)

    @classmethod
    def from_config(cls, entries: List[NodeConfigEntry]) -> "NodeRegistry":
        """Build a registry from validated config file entries."""
        return cls.from_entries(
            (e.node_id, e.data_endpoint, e.location) for e in entries
        )

    @property
    def node_ids(self) -> Tuple[str, ...]:
        return tuple(self._nodes)

    def get(self, node_id: str) -> NodeDescriptor:
        """Look up a node by (case-insensitive) id."""
        try:
            return self._nodes[normalize_node_id(node_id)]
        except KeyError:
            raise NodeNotFoundError(node_id) from None

    def __contains__(self, node_id: object) -> bool:
        return isinstance(node_id, str) and normalize_node_id(node_id) in self._nodes

    def __iter__(self) -> Iterator[NodeDescriptor]:
        return iter(self._nodes.values())

    def __len__(self) -> int:
        return len(self._nodes)
