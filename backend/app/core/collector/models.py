############################################################
#
# etlive - ET Live Data Server
#
# models.py: Node, measurement and cache entry data models
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Collector data models.

Measurement and the response envelopes are pydantic models. Registry and
cache records are plain frozen dataclasses.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


@dataclass(frozen=True)
class NodeDescriptor:
    """A configured remote telemetry node."""

    id: str
    endpoint: str
    location: str


class MeasurementFlags(BaseModel):
    """Status flags reported alongside a measurement."""

    model_config = ConfigDict(frozen=True)

    has_gps_fix: bool
    is_clipping: bool


class Measurement(BaseModel):
    """Latest data point reported by a node.

    Wire names follow the node firmware: ``fix`` for the GPS fix quality and
    ``data`` for the sample block.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    timestamp: Optional[int] = None
    sample_rate: float
    flags: MeasurementFlags
    latitude: float
    longitude: float
    elevation: float
    speed: float
    angle: float
    fix_quality: int = Field(alias="fix")
    samples: List[float] = Field(alias="data")


class LastDataResponse(BaseModel):
    """Envelope returned by a node's latest-measurement endpoint."""

    data: Measurement


@dataclass(frozen=True)
class CacheEntry:
    """Latest known value for one node; ``value`` is None when absent."""

    node_id: str
    value: Optional[Measurement] = None

    @property
    def has_value(self) -> bool:
        return self.value is not None


class NodeStatus(str, Enum):
    """Node availability as seen by API consumers."""
    ONLINE = "online"
    OFFLINE = "offline"


class NodeEntry(BaseModel):
    """Read-API view of one node's cache entry."""

    node_id: str
    status: NodeStatus
    location: str
    last_update: int
    data: Optional[Measurement] = None


class AllDataResponse(BaseModel):
    """Read-API view of every node's cache entry."""

    data: List[NodeEntry]
