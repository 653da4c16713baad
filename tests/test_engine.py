"""Tests for the audio engine helpers: valid_duration() and PositionPoller.

WHY: Pull-style players feed the synchronizer through the poller. If the
poller stops delivering, or delivers after stop(), the highlight freezes
or flickers after the screen is gone.

HOW: The poller runs on a real event loop inside asyncio.run() with a
tiny interval; readers are plain functions or coroutine functions.
"""

from __future__ import annotations

import asyncio
import math

import pytest

from transcript_sync.errors import AudioEngineError
from transcript_sync.playback.engine import PositionPoller, PositionUpdate, valid_duration


class TestValidDuration:
    @pytest.mark.parametrize("value", [None, 0, 0.0, -1.0, math.nan, math.inf, True, "abc"])
    def test_unusable(self, value):
        assert valid_duration(value) is None

    def test_usable(self):
        assert valid_duration(12.5) == 12.5
        assert valid_duration(3) == 3.0


class TestPositionPoller:
    def test_delivers_updates_until_stopped(self):
        received = []
        positions = iter([0.1, 0.2, 0.3, 0.4, 0.5, 0.6, 0.7, 0.8, 0.9, 1.0] * 10)

        def _read():
            return PositionUpdate(next(positions), True)

        async def _run():
            poller = PositionPoller(_read, interval_s=0.001)
            poller.subscribe(received.append)
            poller.start()
            assert poller.running
            await asyncio.sleep(0.02)
            await poller.stop()
            count = len(received)
            await asyncio.sleep(0.01)
            return poller, count

        poller, count = asyncio.run(_run())
        assert count >= 2
        assert len(received) == count
        assert not poller.running
        assert received[0].position_s == 0.1

    def test_async_reader_and_none_results(self):
        received = []
        calls = {"n": 0}

        async def _read():
            calls["n"] += 1
            if calls["n"] % 2:
                return None
            return PositionUpdate(float(calls["n"]), False)

        async def _run():
            poller = PositionPoller(_read, interval_s=0.001)
            poller.subscribe(received.append)
            poller.start()
            await asyncio.sleep(0.02)
            await poller.stop()

        asyncio.run(_run())
        assert received
        assert all(u.position_s % 2 == 0 for u in received)

    def test_reader_error_skips_one_tick(self):
        received = []
        calls = {"n": 0}

        def _read():
            calls["n"] += 1
            if calls["n"] == 2:
                raise AudioEngineError("status", "transient")
            return PositionUpdate(float(calls["n"]), True)

        async def _run():
            poller = PositionPoller(_read, interval_s=0.001)
            poller.subscribe(received.append)
            poller.start()
            await asyncio.sleep(0.03)
            assert poller.running
            await poller.stop()

        asyncio.run(_run())
        assert calls["n"] >= 3
        assert len(received) >= 2
        assert 2.0 not in [u.position_s for u in received]
        assert received[1].position_s == 3.0

    def test_unsubscribe(self):
        received = []

        async def _run():
            poller = PositionPoller(lambda: PositionUpdate(1.0, True), interval_s=0.001)
            unsubscribe = poller.subscribe(received.append)
            unsubscribe()
            unsubscribe()
            poller.start()
            await asyncio.sleep(0.01)
            await poller.stop()

        asyncio.run(_run())
        assert received == []

    def test_interval_respects_engine_granularity(self, engine):
        engine.update_interval_s = 0.25
        poller = PositionPoller.for_engine(engine, interval_s=0.1)
        assert poller.interval_s == 0.25

    def test_for_engine_reads_getters(self, engine):
        engine.position = 4.5
        engine.playing = True
        received = []

        async def _run():
            poller = PositionPoller.for_engine(engine, interval_s=0.001)
            poller.subscribe(received.append)
            poller.start()
            await asyncio.sleep(0.01)
            await poller.stop()

        asyncio.run(_run())
        assert received[0] == PositionUpdate(4.5, True)

    def test_stop_without_start(self):
        poller = PositionPoller(lambda: None)
        asyncio.run(poller.stop())
        assert not poller.running
