############################################################
#
# etlive - ET Live Data Server
#
# __init__.py: Node collection and caching package exports
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Node polling, admission gating and the latest-value cache."""

from backend.app.core.collector.cache import MeasurementCache
from backend.app.core.collector.gates import AdmissionGates
from backend.app.core.collector.models import CacheEntry, Measurement, NodeDescriptor
from backend.app.core.collector.poll_client import PollClient
from backend.app.core.collector.registry import NodeRegistry
from backend.app.core.collector.scheduler import CollectionScheduler
from backend.app.core.collector.service import CollectorService
from backend.app.core.collector.shutdown import ShutdownCoordinator

__all__ = [
    "AdmissionGates",
    "CacheEntry",
    "CollectionScheduler",
    "CollectorService",
    "Measurement",
    "MeasurementCache",
    "NodeDescriptor",
    "NodeRegistry",
    "PollClient",
    "ShutdownCoordinator",
]
