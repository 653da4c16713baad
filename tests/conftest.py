"""Shared test fixtures for the transcript_sync test suite.

WHY: Most test modules need the same small word streams and a
controllable audio engine. Centralizing them here keeps the scenarios
consistent between the core and playback tests.

HOW: Module-level constants hold raw provider payloads (as the upload
pipeline stores them). Fixtures return fresh copies. FakeEngine is an
in-memory AudioEngine that records every call and lets each test decide
when the audio becomes ready.

RULES:
- Payload constants are never mutated; fixtures hand out copies
- FakeEngine readiness is counted in is_loaded() polls; load() only
  sleeps when load_delay_s is set
- Times are float seconds
"""

from __future__ import annotations

import asyncio
import copy
import json
from typing import Any, Callable, Dict, List, Optional

import pytest

from transcript_sync.core.ir import TimedWord, WordKind
from transcript_sync.errors import AudioEngineError
from transcript_sync.playback.engine import AudioEngine, PositionCallback, PositionUpdate


# ---------------------------------------------------------------------------
# Sample payloads
# ---------------------------------------------------------------------------

TWO_SPEAKER_WORDS: List[Dict[str, Any]] = [
    {"text": "Hello",   "start": 0.0, "end": 0.4, "type": "word",    "speaker_id": "speaker_1"},
    {"text": " ",       "start": 0.4, "end": 0.5, "type": "spacing", "speaker_id": "speaker_1"},
    {"text": "world.",  "start": 0.5, "end": 1.0, "type": "word",    "speaker_id": "speaker_1"},
    {"text": " ",       "start": 1.0, "end": 1.1, "type": "spacing", "speaker_id": "speaker_2"},
    {"text": "Hi",      "start": 1.1, "end": 1.4, "type": "word",    "speaker_id": "speaker_2"},
    {"text": " ",       "start": 1.4, "end": 1.5, "type": "spacing", "speaker_id": "speaker_2"},
    {"text": "there.",  "start": 1.5, "end": 2.0, "type": "word",    "speaker_id": "speaker_2"},
]

LEGACY_SEGMENTS_PAYLOAD: Dict[str, Any] = {
    "segments": [
        {"text": "A", "start": 0, "end": 1},
        {"text": "B", "start": 1, "end": 2},
    ]
}


def _word(
    text: str,
    start: float,
    end: float,
    speaker_id: Optional[str] = None,
) -> TimedWord:
    """Build a WORD token."""
    return TimedWord(text=text, start=start, end=end, kind=WordKind.WORD, speaker_id=speaker_id)


def _spacing(
    start: float,
    end: float,
    text: str = " ",
    speaker_id: Optional[str] = None,
) -> TimedWord:
    """Build a SPACING token."""
    return TimedWord(text=text, start=start, end=end, kind=WordKind.SPACING, speaker_id=speaker_id)


def _words_payload(entries: List[Dict[str, Any]]) -> str:
    """Serialize word entries as the stored JSON blob."""
    return json.dumps({"words": entries})


@pytest.fixture
def make_word():
    """Factory for WORD tokens: make_word(text, start, end, speaker_id=None)."""
    return _word


@pytest.fixture
def make_spacing():
    """Factory for SPACING tokens: make_spacing(start, end, text=" ", speaker_id=None)."""
    return _spacing


@pytest.fixture
def make_words_payload():
    """Factory serializing word entries as the stored JSON blob."""
    return _words_payload


@pytest.fixture
def two_speaker_entries():
    """Raw word entries for a two-speaker exchange."""
    return copy.deepcopy(TWO_SPEAKER_WORDS)


@pytest.fixture
def two_speaker_payload():
    """Stored JSON blob for the two-speaker exchange."""
    return _words_payload(copy.deepcopy(TWO_SPEAKER_WORDS))


@pytest.fixture
def legacy_segments_payload():
    """Stored JSON blob in the legacy pre-cut segments shape."""
    return json.dumps(copy.deepcopy(LEGACY_SEGMENTS_PAYLOAD))


# ---------------------------------------------------------------------------
# Fake audio engine
# ---------------------------------------------------------------------------


class FakeEngine(AudioEngine):
    """In-memory AudioEngine that records calls.

    Args:
        loaded_url: URL considered already loaded (and ready) at start.
        polls_until_ready: After load(), is_loaded() answers False this
            many times before answering True. None means never ready.
        duration: Value returned by get_duration().
        fail_on: Operation names that raise AudioEngineError.
        load_delay_s: How long load() takes before it returns.
    """

    def __init__(
        self,
        loaded_url: Optional[str] = None,
        polls_until_ready: Optional[int] = 0,
        duration: Optional[float] = 120.0,
        fail_on: tuple = (),
        load_delay_s: float = 0.0,
    ) -> None:
        self._loaded_url = loaded_url
        self._pending_polls = 0
        self.polls_until_ready = polls_until_ready
        self.duration = duration
        self.fail_on = set(fail_on)
        self.load_delay_s = load_delay_s
        self.position = 0.0
        self.playing = False

        self.loads: List[str] = []
        self.seeks: List[float] = []
        self.plays = 0
        self.pauses = 0
        self._callbacks: List[PositionCallback] = []

    @property
    def loaded_url(self) -> Optional[str]:
        return self._loaded_url

    def _check(self, operation: str) -> None:
        if operation in self.fail_on:
            raise AudioEngineError(operation, "simulated failure")

    async def load(self, url: str) -> None:
        self._check("load")
        self.loads.append(url)
        if self.load_delay_s > 0:
            await asyncio.sleep(self.load_delay_s)
        self._loaded_url = url
        self._pending_polls = self.polls_until_ready

    async def play(self) -> None:
        self._check("play")
        self.plays += 1
        self.playing = True

    async def pause(self) -> None:
        self._check("pause")
        self.pauses += 1
        self.playing = False

    async def seek(self, seconds: float) -> None:
        self._check("seek")
        self.seeks.append(seconds)
        self.position = seconds

    def get_position(self) -> float:
        return self.position

    def get_duration(self) -> Optional[float]:
        return self.duration

    def is_loaded(self) -> bool:
        if self._loaded_url is None:
            return False
        if self._pending_polls is None:
            return False
        if self._pending_polls > 0:
            self._pending_polls -= 1
            return False
        return True

    def is_playing(self) -> bool:
        return self.playing

    def make_ready(self) -> None:
        self._pending_polls = 0

    def on_position_update(self, callback: PositionCallback) -> Callable[[], None]:
        self._callbacks.append(callback)

        def _unsubscribe() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return _unsubscribe

    def emit(self, position_s: float, is_playing: bool = True, did_just_finish: bool = False) -> None:
        update = PositionUpdate(position_s, is_playing, did_just_finish)
        for callback in list(self._callbacks):
            callback(update)


class FakeScheduler:
    """Collects call_later-style requests so tests can fire them by hand."""

    def __init__(self) -> None:
        self.calls: List["FakeHandle"] = []

    def __call__(self, delay_s: float, callback: Callable[[], None]) -> "FakeHandle":
        handle = FakeHandle(delay_s, callback)
        self.calls.append(handle)
        return handle

    def fire_all(self) -> None:
        for handle in list(self.calls):
            handle.fire()


class FakeHandle:
    def __init__(self, delay_s: float, callback: Callable[[], None]) -> None:
        self.delay_s = delay_s
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        if not self.cancelled and not self.fired:
            self.fired = True
            self.callback()


@pytest.fixture
def engine():
    """A FakeEngine with nothing loaded that becomes ready immediately."""
    return FakeEngine()


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def make_engine():
    """Factory for FakeEngines with non-default readiness or failures."""
    return FakeEngine
