"""Event channel, connectivity monitor and attribution adapters."""

import asyncio
import threading

import pytest

from conftest import FakeProbe
from eggprofit.attribution import StaticAttributionCollector, is_organic
from eggprofit.connectivity import ConnectivityMonitor
from eggprofit.events import (
    ConnectivityChanged,
    ConversionDataFailed,
    ConversionDataReceived,
    EventChannel,
    RetryRequested,
)


class TestEventChannel:
    @pytest.mark.asyncio
    async def test_push_from_other_thread(self):
        channel = EventChannel()
        channel.bind(asyncio.get_running_loop())
        thread = threading.Thread(target=channel.push, args=(RetryRequested(),))
        thread.start()
        thread.join()
        assert await channel.get(timeout=1.0) == RetryRequested()

    @pytest.mark.asyncio
    async def test_get_timeout(self):
        with pytest.raises(asyncio.TimeoutError):
            await EventChannel().get(timeout=0.01)

    def test_unbound_push(self):
        channel = EventChannel()
        channel.push(RetryRequested())
        assert channel.get_nowait() == RetryRequested()
        assert channel.get_nowait() is None


class TestConnectivityMonitor:
    @pytest.mark.asyncio
    async def test_check_updates_status(self):
        monitor = ConnectivityMonitor(FakeProbe(False), interval=0.01)
        assert monitor.online is None
        assert await monitor.check() is False
        assert monitor.online is False

    @pytest.mark.asyncio
    async def test_check_with_failing_probe_is_offline(self):
        def probe() -> bool:
            raise RuntimeError("path monitor unavailable")

        monitor = ConnectivityMonitor(probe, interval=0.01)
        assert await monitor.check() is False
        assert monitor.online is False

    @pytest.mark.asyncio
    async def test_watch_pushes_changes_only(self):
        probe = FakeProbe(True)
        channel = EventChannel()
        channel.bind(asyncio.get_running_loop())
        monitor = ConnectivityMonitor(probe, interval=0.01)
        monitor.start(channel)
        try:
            assert await channel.get(timeout=1.0) == ConnectivityChanged(online=True)
            probe.online = False
            assert await channel.get(timeout=1.0) == ConnectivityChanged(online=False)
            await asyncio.sleep(0.05)
            assert channel.empty()
        finally:
            monitor.stop()

    @pytest.mark.asyncio
    async def test_failing_probe_reads_offline(self):
        def probe() -> bool:
            raise RuntimeError("no route")

        channel = EventChannel()
        channel.bind(asyncio.get_running_loop())
        monitor = ConnectivityMonitor(probe, interval=0.01)
        monitor.start(channel)
        try:
            assert await channel.get(timeout=1.0) == ConnectivityChanged(online=False)
        finally:
            monitor.stop()


class TestAttribution:
    def test_is_organic(self):
        assert is_organic({"af_status": "Organic"})
        assert not is_organic({"af_status": "Non-organic"})
        assert not is_organic({})

    def test_static_collector_payload(self):
        channel = EventChannel()
        StaticAttributionCollector("id", payload={"af_status": "Organic"}).start(channel)
        assert channel.get_nowait() == ConversionDataReceived(payload={"af_status": "Organic"})

    def test_static_collector_failure(self):
        channel = EventChannel()
        StaticAttributionCollector("id", error="sdk timeout").start(channel)
        assert channel.get_nowait() == ConversionDataFailed(reason="sdk timeout")
