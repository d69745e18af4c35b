############################################################
#
# etlive - ET Live Data Server
#
# test_gates.py: Unit tests for per-node admission gates
#
############################################################

"""Unit tests for AdmissionGates."""

import pytest

from backend.app.core.collector.exceptions import NodeNotFoundError
from backend.app.core.collector.gates import AdmissionGates


@pytest.fixture
def gates():
    return AdmissionGates(["ET1002", "ET0002"])


@pytest.mark.asyncio
async def test_first_acquire_admitted(gates):
    assert await gates.try_acquire("ET1002") is True
    assert gates.is_busy("ET1002")


@pytest.mark.asyncio
async def test_second_acquire_busy_until_release(gates):
    assert await gates.try_acquire("ET1002") is True
    assert await gates.try_acquire("ET1002") is False
    assert await gates.try_acquire("et1002") is False

    gates.release("ET1002")

    assert await gates.try_acquire("ET1002") is True


@pytest.mark.asyncio
async def test_gates_are_independent(gates):
    assert await gates.try_acquire("ET1002") is True
    assert await gates.try_acquire("ET0002") is True
    assert gates.busy_count() == 2

    gates.release("ET0002")
    assert gates.busy_count() == 1
    assert gates.is_busy("ET1002")
    assert not gates.is_busy("ET0002")


def test_release_unheld_gate_raises(gates):
    with pytest.raises(RuntimeError):
        gates.release("ET1002")


@pytest.mark.asyncio
async def test_unknown_node(gates):
    with pytest.raises(NodeNotFoundError):
        await gates.try_acquire("ET9999")
    with pytest.raises(NodeNotFoundError):
        gates.release("ET9999")
