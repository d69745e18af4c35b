############################################################
#
# etlive - ET Live Data Server
#
# test_read_api.py: Unit tests for the cache read views
#
############################################################

"""Unit tests for get_all_entries / get_node_entry."""

import pytest

from backend.app.core.collector.cache import MeasurementCache
from backend.app.core.collector.exceptions import NoDataError, NodeNotFoundError
from backend.app.core.collector.models import CacheEntry, NodeStatus
from backend.app.core.collector.read_api import (
    build_node_entry,
    get_all_entries,
    get_node_entry,
)


@pytest.fixture
def cache(registry):
    cache = MeasurementCache()
    cache.initialize(registry.node_ids)
    return cache


class TestBuildNodeEntry:
    def test_absent_value_is_offline(self, registry):
        node = registry.get("ET1002")
        entry = build_node_entry(node, CacheEntry(node_id="ET1002"))

        assert entry.status == NodeStatus.OFFLINE
        assert entry.last_update == 0
        assert entry.data is None
        assert entry.location == "Glennan Building, CWRU, OH"

    def test_value_is_online(self, registry, measurement_factory):
        node = registry.get("ET1002")
        entry = build_node_entry(
            node, CacheEntry(node_id="ET1002", value=measurement_factory(1000))
        )

        assert entry.status == NodeStatus.ONLINE
        assert entry.last_update == 1000
        assert entry.data.timestamp == 1000

    def test_missing_timestamp_reports_zero(self, registry, measurement_factory):
        node = registry.get("ET1002")
        entry = build_node_entry(
            node, CacheEntry(node_id="ET1002", value=measurement_factory(None))
        )

        assert entry.status == NodeStatus.ONLINE
        assert entry.last_update == 0


class TestGetAllEntries:
    @pytest.mark.asyncio
    async def test_every_node_sorted(self, registry, cache, measurement_factory):
        await cache.set("ET1002", measurement_factory(1000))

        entries = await get_all_entries(registry, cache)

        assert [e.node_id for e in entries] == ["ET0002", "ET1002"]
        assert [e.status for e in entries] == [NodeStatus.OFFLINE, NodeStatus.ONLINE]


class TestGetNodeEntry:
    @pytest.mark.asyncio
    async def test_known_node_with_value(self, registry, cache, measurement_factory):
        await cache.set("ET0002", measurement_factory(2000))

        entry = await get_node_entry(registry, cache, "et0002")

        assert entry.node_id == "ET0002"
        assert entry.status == NodeStatus.ONLINE
        assert entry.last_update == 2000

    @pytest.mark.asyncio
    async def test_known_node_without_value(self, registry, cache):
        with pytest.raises(NoDataError):
            await get_node_entry(registry, cache, "ET0002")

    @pytest.mark.asyncio
    async def test_unknown_node(self, registry, cache):
        with pytest.raises(NodeNotFoundError):
            await get_node_entry(registry, cache, "ET9999")
