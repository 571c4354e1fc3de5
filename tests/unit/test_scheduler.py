"""Unit tests for ScanScheduler."""

import asyncio

import pytest

from feedmonitor.events.types import ErrorEvent
from feedmonitor.pipeline.scheduler import ScanScheduler


class GatedScanner:
    """Scanner stub whose scans block until released."""

    def __init__(self):
        self.scans = 0
        self.gate = asyncio.Event()

    async def scan(self) -> int:
        self.scans += 1
        await self.gate.wait()
        return 0


class CrashingScanner:
    def __init__(self):
        self.scans = 0

    async def scan(self) -> int:
        self.scans += 1
        raise RuntimeError("registry unavailable")


@pytest.mark.asyncio
class TestScanScheduler:
    """Tests for ScanScheduler."""

    async def test_tick_skipped_while_scan_in_flight(self, bus):
        scanner = GatedScanner()
        scheduler = ScanScheduler(scanner, bus, rate_seconds=60)

        assert await scheduler.tick() is True
        await asyncio.sleep(0)
        assert scheduler.busy

        # Skipped, not queued
        assert await scheduler.tick() is False
        assert await scheduler.tick() is False

        scanner.gate.set()
        await scheduler.wait_idle()
        assert scanner.scans == 1
        assert not scheduler.busy

        assert await scheduler.tick() is True
        await scheduler.wait_idle()
        assert scanner.scans == 2

    async def test_scan_failure_does_not_stop_ticks(self, bus, recorder):
        scanner = CrashingScanner()
        scheduler = ScanScheduler(scanner, bus, rate_seconds=60)

        assert await scheduler.tick() is True
        await scheduler.wait_idle()
        assert await scheduler.tick() is True
        await scheduler.wait_idle()

        assert scanner.scans == 2
        errors = recorder.of(ErrorEvent)
        assert len(errors) == 2
        assert all(isinstance(e.cause, RuntimeError) for e in errors)

    async def test_interval_drives_scans(self, bus):
        scanner = GatedScanner()
        scanner.gate.set()
        scheduler = ScanScheduler(scanner, bus, rate_seconds=0.1)

        scheduler.start()
        try:
            await asyncio.sleep(0.5)
        finally:
            await scheduler.shutdown()

        assert scanner.scans >= 2
        assert not scheduler.started

    async def test_shutdown_waits_for_in_flight_scan(self, bus):
        scanner = GatedScanner()
        scheduler = ScanScheduler(scanner, bus, rate_seconds=60)
        scheduler.start()
        await scheduler.tick()

        async def release():
            await asyncio.sleep(0.05)
            scanner.gate.set()

        releaser = asyncio.create_task(release())
        await scheduler.shutdown()

        assert not scheduler.busy
        await releaser

    async def test_wait_idle_without_scan(self, bus):
        await ScanScheduler(GatedScanner(), bus, rate_seconds=60).wait_idle()
