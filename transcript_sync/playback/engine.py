"""AudioEngine port, position updates, and a poller for pull-style engines.

WHY: Decoding and streaming audio belong to a platform player, not to
this package. The synchronizer and controller only need to load a URL,
start/pause/seek, and hear about the playhead. Some players push status
callbacks, others only answer "where are you?"; the rest of the
package must not care which.

HOW: AudioEngine is an ABC describing the consumed contract. Push-style
adapters call their subscribers directly; pull-style adapters can
delegate on_position_update() to a PositionPoller, which reads status
on an asyncio timer and fans it out to subscribers.

RULES:
- Control methods (load/play/pause/seek) are coroutines and may raise
  AudioEngineError
- get_duration() returns None when the duration is unknown
- on_position_update() returns an unsubscribe callable
- A poller never runs faster than the engine's own update granularity
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional, Union

from transcript_sync.config import POSITION_POLL_INTERVAL_S
from transcript_sync.errors import AudioEngineError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PositionUpdate:
    """One playhead report from the audio engine.

    RULES:
    - position_s: seconds from the start of the audio
    - is_playing: False while paused, stopped, or not loaded
    - did_just_finish: True once, on the report where playback reached the end
    """

    position_s: float
    is_playing: bool
    did_just_finish: bool = False


PositionCallback = Callable[[PositionUpdate], None]


def valid_duration(value: Optional[float]) -> Optional[float]:
    """Return value if it is a usable duration (finite, > 0), else None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(seconds) or seconds <= 0:
        return None
    return seconds


class AudioEngine(ABC):
    """Abstract audio transport consumed by the playback layer.

    To add a platform player:
    1. Subclass AudioEngine
    2. Implement the control coroutines and the status getters
    3. Implement on_position_update() (push) or delegate to a PositionPoller (pull)
    """

    update_interval_s: float = POSITION_POLL_INTERVAL_S
    """Granularity of the engine's own position reports."""

    @property
    @abstractmethod
    def loaded_url(self) -> Optional[str]:
        """URL of the currently loaded audio, or None."""

    @abstractmethod
    async def load(self, url: str) -> None:
        """Start loading url. Readiness is reported through is_loaded()."""

    @abstractmethod
    async def play(self) -> None:
        """Start or resume playback."""

    @abstractmethod
    async def pause(self) -> None:
        """Pause playback, keeping the position."""

    @abstractmethod
    async def seek(self, seconds: float) -> None:
        """Move the playhead to seconds."""

    @abstractmethod
    def get_position(self) -> float:
        """Current playhead position in seconds."""

    @abstractmethod
    def get_duration(self) -> Optional[float]:
        """Duration in seconds, or None while unknown."""

    @abstractmethod
    def is_loaded(self) -> bool:
        """True once the loaded audio is ready to play and seek."""

    @abstractmethod
    def is_playing(self) -> bool:
        """True while audio is actively playing."""

    @abstractmethod
    def on_position_update(self, callback: PositionCallback) -> Callable[[], None]:
        """Subscribe to position updates; returns an unsubscribe callable."""


StatusReader = Callable[[], Union[Optional[PositionUpdate], Awaitable[Optional[PositionUpdate]]]]


class PositionPoller:
    """Turn a pull-style status getter into a position update subscription.

    WHY: Players that cannot push status (or push it unreliably) still
    need to feed the synchronizer at a steady cadence.

    HOW: start() spawns an asyncio task that calls read_status() every
    interval and hands non-None results to each subscriber. The reader
    may be a plain function or a coroutine function.

    RULES:
    - interval = max(interval_s, min_interval_s)
    - start() needs a running event loop; calling it twice is a no-op
    - stop() cancels the task and waits for it to finish
    - An AudioEngineError from the reader skips that tick; polling continues
    """

    def __init__(
        self,
        read_status: StatusReader,
        interval_s: float = POSITION_POLL_INTERVAL_S,
        min_interval_s: float = 0.0,
    ) -> None:
        self._read_status = read_status
        self.interval_s = max(interval_s, min_interval_s)
        self._callbacks: List[PositionCallback] = []
        self._task: Optional[asyncio.Task] = None

    @classmethod
    def for_engine(cls, engine: AudioEngine, interval_s: float = POSITION_POLL_INTERVAL_S) -> PositionPoller:
        """Build a poller reading an engine's getters at its own granularity."""

        def _read() -> PositionUpdate:
            return PositionUpdate(
                position_s=engine.get_position(),
                is_playing=engine.is_playing(),
            )

        return cls(_read, interval_s=interval_s, min_interval_s=engine.update_interval_s)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def subscribe(self, callback: PositionCallback) -> Callable[[], None]:
        self._callbacks.append(callback)

        def _unsubscribe() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return _unsubscribe

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _run(self) -> None:
        while True:
            try:
                update = self._read_status()
                if inspect.isawaitable(update):
                    update = await update
            except AudioEngineError as exc:
                logger.warning("Position read failed, retrying next tick: %s", exc)
                update = None
            if update is not None:
                for callback in list(self._callbacks):
                    callback(update)
            await asyncio.sleep(self.interval_s)
