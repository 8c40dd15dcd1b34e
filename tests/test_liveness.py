import asyncio

import pytest

from buddyguard.core.liveness import LivenessMonitor
from conftest import FakeStore


@pytest.mark.asyncio
async def test_check_records_result():
    store = FakeStore()
    monitor = LivenessMonitor(store, interval=30)

    assert await monitor.check() is True
    assert monitor.is_live is True
    assert monitor.checked_at is not None

    store.reachable = False
    assert await monitor.check() is False
    assert monitor.is_live is False


@pytest.mark.asyncio
async def test_polls_until_stopped():
    store = FakeStore()
    monitor = LivenessMonitor(store, interval=0.01)

    monitor.start()
    assert monitor.running
    await asyncio.sleep(0.1)
    await monitor.stop()

    pings = store.calls.count(("ping_reachable",))
    assert pings >= 2
    assert not monitor.running

    # no task left behind after stop (one in-flight ping may still land)
    await asyncio.sleep(0.05)
    assert store.calls.count(("ping_reachable",)) <= pings + 1


@pytest.mark.asyncio
async def test_start_is_idempotent_and_stop_without_start():
    monitor = LivenessMonitor(FakeStore(), interval=10)
    await monitor.stop()

    monitor.start()
    first = monitor._task
    monitor.start()
    assert monitor._task is first
    await monitor.stop()
