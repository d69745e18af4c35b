############################################################
#
# etlive - ET Live Data Server
#
# conftest.py: Pytest configuration and shared test fixtures
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Pytest configuration and shared fixtures for ET Live tests."""

import asyncio
import json
from typing import Callable, Dict, Optional

import httpx
import pytest

from backend.app.core.collector.models import Measurement
from backend.app.core.collector.registry import NodeRegistry
from backend.app.settings import Settings


def make_payload(timestamp: Optional[int] = 1000, **overrides) -> dict:
    """A node's latest-data response body, as the firmware sends it."""
    data = {
        "timestamp": timestamp,
        "sample_rate": 100.0,
        "flags": {"has_gps_fix": True, "is_clipping": False},
        "latitude": 41.5045,
        "longitude": -81.6086,
        "elevation": 210.0,
        "speed": 0.0,
        "angle": 0.0,
        "fix": 1,
        "data": [0.1, -0.2, 0.3],
    }
    data.update(overrides)
    return {"data": data}


def make_measurement(timestamp: Optional[int] = 1000) -> Measurement:
    return Measurement.model_validate(make_payload(timestamp)["data"])


class NodeSimulator:
    """
    Programmable set of fake node endpoints for httpx.MockTransport.

    Each host maps to a behaviour: a payload dict (200 JSON), an int (bare
    status code), raw bytes (200 with that body), a float (answer with the
    default payload after that many seconds) or "hang" (never answers).
    """

    def __init__(self, behaviours: Optional[Dict[str, object]] = None):
        self.behaviours: Dict[str, object] = dict(behaviours or {})
        self.calls: Dict[str, int] = {}
        self.active: Dict[str, int] = {}
        self.max_active: Dict[str, int] = {}

    async def handler(self, request: httpx.Request) -> httpx.Response:
        host = request.url.host
        self.calls[host] = self.calls.get(host, 0) + 1
        self.active[host] = self.active.get(host, 0) + 1
        self.max_active[host] = max(self.max_active.get(host, 0), self.active[host])
        try:
            behaviour = self.behaviours.get(host, 404)
            if behaviour == "hang":
                await asyncio.Event().wait()
            if isinstance(behaviour, float):
                await asyncio.sleep(behaviour)
                return httpx.Response(200, content=json.dumps(make_payload()).encode())
            if isinstance(behaviour, int):
                return httpx.Response(behaviour)
            if isinstance(behaviour, bytes):
                return httpx.Response(200, content=behaviour)
            return httpx.Response(200, content=json.dumps(behaviour).encode())
        finally:
            self.active[host] -= 1

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def node_simulator() -> NodeSimulator:
    return NodeSimulator()


@pytest.fixture
def registry() -> NodeRegistry:
    """Two-node registry; ids given in mixed case on purpose."""
    return NodeRegistry.from_entries(
        [
            ("et1002", "http://node-a/api/last", "Glennan Building, CWRU, OH"),
            ("ET0002", "http://node-b/api/last", "Village House 3, 232D"),
        ]
    )


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Settings isolated from the environment and any .env file."""
    config_path = tmp_path / "config.toml"
    config_path.write_text(
        '[[nodes]]\n'
        'node_id = "ET1002"\n'
        'data_endpoint = "http://127.0.0.1:9/api/last"\n'
        'location = "Glennan Building, CWRU, OH"\n'
    )
    return Settings(
        _env_file=None,
        nodes_config_path=str(config_path),
        poll_interval_seconds=0.05,
        poll_timeout_seconds=0.5,
        shutdown_deadline_seconds=1.0,
        static_dir=None,
        log_format="console",
    )


@pytest.fixture
def payload_factory() -> Callable[..., dict]:
    return make_payload


@pytest.fixture
def measurement_factory() -> Callable[..., Measurement]:
    return make_measurement
