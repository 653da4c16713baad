"""Transcript controller: one owner for playback and interaction state.

WHY: Hover, selection and the active highlight all react to the same
taps and position reports. A single controller owning PlaybackState and
InteractionState, mutated only through its own transition methods,
keeps the rules in one place and makes the whole flow testable without
a UI.

HOW: load_transcript() builds the transcript and index and resets all
state. Position updates go to the PlaybackSynchronizer. Gestures go to
the InteractionStateMachine; a SEEK action runs the load-then-seek
sequence against the AudioEngine port: load if needed, poll readiness
with a bounded wait, then seek to the segment start.

RULES:
- Every pending seek is tagged with (upload_id, generation); loading a
  transcript or tapping again bumps the generation, and a seek whose
  tag no longer matches is discarded when readiness arrives
- load() plus the readiness polls (every LOAD_POLL_INTERVAL_S) share one
  LOAD_TIMEOUT_S deadline; expiry reports one SEEK_UNAVAILABLE failure
- AudioEngineError is reported once as ENGINE_ERROR, never re-raised,
  never retried
- Seek targets are clamped to [0, duration] when the duration is valid
- Playback finishing or stop() clears interaction state
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Callable, Dict, Optional, Tuple, Union

from transcript_sync.config import LOAD_POLL_INTERVAL_S, LOAD_TIMEOUT_S, SegmentLimits
from transcript_sync.core.index import SegmentIndex
from transcript_sync.core.ir import PayloadKind, SegmentId, Transcript
from transcript_sync.core.paragraphs import build_transcript
from transcript_sync.errors import (
    AudioEngineError,
    FailureReason,
    PlaybackFailure,
    SeekUnavailableError,
)
from transcript_sync.playback.engine import AudioEngine, PositionUpdate, valid_duration
from transcript_sync.playback.interaction import (
    Highlight,
    InteractionState,
    InteractionStateMachine,
    Scheduler,
    TapAction,
    resolve_highlight,
)
from transcript_sync.playback.synchronizer import PlaybackState, PlaybackSynchronizer

logger = logging.getLogger(__name__)

_Tag = Tuple[Optional[str], int]


class TranscriptController:
    """Drives one displayed transcript against one audio engine."""

    def __init__(
        self,
        engine: AudioEngine,
        on_active_change: Optional[Callable[[Optional[SegmentId]], None]] = None,
        on_interaction_change: Optional[Callable[[InteractionState], None]] = None,
        on_failure: Optional[Callable[[PlaybackFailure], None]] = None,
        scheduler: Optional[Scheduler] = None,
        load_timeout_s: float = LOAD_TIMEOUT_S,
        load_poll_interval_s: float = LOAD_POLL_INTERVAL_S,
    ) -> None:
        self.engine = engine
        self._on_failure = on_failure
        self.load_timeout_s = load_timeout_s
        self.load_poll_interval_s = load_poll_interval_s

        self.transcript = Transcript(source_kind=PayloadKind.EMPTY)
        self.index = SegmentIndex([])
        self.upload_id: Optional[str] = None
        self.audio_url: Optional[str] = None

        self.synchronizer = PlaybackSynchronizer(self.index, on_active_change)
        self.interaction = InteractionStateMachine(on_interaction_change, scheduler)

        self._generation = 0
        self._unsubscribe: Optional[Callable[[], None]] = None

    # ------------------------------------------------------------------
    # State accessors
    # ------------------------------------------------------------------

    @property
    def playback_state(self) -> PlaybackState:
        return self.synchronizer.state

    @property
    def interaction_state(self) -> InteractionState:
        return self.interaction.state

    def highlight_for(self, seg_id: SegmentId) -> Highlight:
        return resolve_highlight(
            seg_id, self.synchronizer.active_segment_id, self.interaction.state
        )

    # ------------------------------------------------------------------
    # Engine subscription
    # ------------------------------------------------------------------

    def attach(self) -> None:
        """Subscribe to the engine's position updates."""
        if self._unsubscribe is None:
            self._unsubscribe = self.engine.on_position_update(self.handle_position_update)

    def detach(self) -> None:
        unsubscribe, self._unsubscribe = self._unsubscribe, None
        if unsubscribe is not None:
            unsubscribe()

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def load_transcript(
        self,
        upload_id: str,
        payload: Union[str, bytes, Dict[str, Any], None],
        audio_url: Optional[str] = None,
        limits: Optional[SegmentLimits] = None,
    ) -> Transcript:
        """Build and display a new transcript, discarding all previous state."""
        self._generation += 1
        self.upload_id = upload_id
        self.audio_url = audio_url
        self.transcript = build_transcript(payload, limits)
        self.index = SegmentIndex.from_transcript(self.transcript)

        self.interaction.reset()
        self.synchronizer.set_index(self.index)

        logger.info(
            "Loaded transcript for upload %s: %d paragraphs, %d segments (%s)",
            upload_id,
            len(self.transcript.paragraphs),
            len(self.index),
            self.transcript.source_kind.value,
        )
        return self.transcript

    def handle_position_update(self, update: PositionUpdate) -> Optional[SegmentId]:
        active = self.synchronizer.handle_update(update)
        if update.did_just_finish:
            self.interaction.reset()
        return active

    def long_press(self, seg_id: SegmentId) -> None:
        if seg_id not in self.index:
            logger.debug("Ignoring long press on unknown segment %s", seg_id)
            return
        self.interaction.long_press(seg_id)

    async def tap(self, seg_id: SegmentId) -> Optional[TapAction]:
        """Apply a tap; a second tap on the selected segment seeks to it.

        Returns the action taken, or None for an unknown segment.
        """
        if seg_id not in self.index:
            logger.debug("Ignoring tap on unknown segment %s", seg_id)
            return None

        action = self.interaction.tap(seg_id)
        self._generation += 1
        if action is TapAction.SEEK:
            await self.seek_to_segment(seg_id)
        return action

    async def stop(self) -> None:
        """Pause playback and clear every highlight."""
        self._generation += 1
        try:
            await self.engine.pause()
        except AudioEngineError as exc:
            self._fail(FailureReason.ENGINE_ERROR, str(exc))
        self.synchronizer.stop()
        self.interaction.reset()

    # ------------------------------------------------------------------
    # Load-then-seek
    # ------------------------------------------------------------------

    async def seek_to_segment(self, seg_id: SegmentId) -> bool:
        """Seek the engine to a segment's start, loading audio first if needed.

        Returns True if a seek was issued, False if it failed or was discarded.
        """
        segment = self.index.get(seg_id)
        if segment is None:
            return False

        tag = self._tag()
        try:
            await self._ensure_loaded(tag)
            if not self._is_current(tag):
                logger.debug("Discarding stale seek to %s (upload %s)", seg_id.key, tag[0])
                return False
            await self.engine.seek(self._clamp(segment.start))
        except SeekUnavailableError as exc:
            return self._fail_if_current(tag, FailureReason.SEEK_UNAVAILABLE, str(exc))
        except AudioEngineError as exc:
            return self._fail_if_current(tag, FailureReason.ENGINE_ERROR, str(exc))
        except _NoAudioSource as exc:
            return self._fail_if_current(tag, FailureReason.NO_AUDIO_SOURCE, str(exc))
        return True

    async def _ensure_loaded(self, tag: _Tag) -> None:
        engine = self.engine
        if self.audio_url is None:
            if engine.is_loaded():
                return
            raise _NoAudioSource(
                "No audio source for upload {}".format(self.upload_id)
            )
        if engine.is_loaded() and engine.loaded_url == self.audio_url:
            return

        logger.debug("Loading audio %s before seek", self.audio_url)
        started = time.monotonic()
        try:
            await asyncio.wait_for(engine.load(self.audio_url), self.load_timeout_s)
        except asyncio.TimeoutError:
            raise SeekUnavailableError(
                "Audio {} did not load within {:.1f}s".format(self.audio_url, self.load_timeout_s)
            ) from None

        while not engine.is_loaded():
            if not self._is_current(tag):
                return
            elapsed = time.monotonic() - started
            if elapsed >= self.load_timeout_s:
                raise SeekUnavailableError(
                    "Audio {} not ready after {:.1f}s".format(self.audio_url, elapsed)
                )
            await asyncio.sleep(self.load_poll_interval_s)

        if self._is_current(tag):
            await engine.play()

    def _clamp(self, seconds: float) -> float:
        target = max(0.0, seconds)
        duration = valid_duration(self.engine.get_duration())
        if duration is not None:
            target = min(target, duration)
        return target

    def _tag(self) -> _Tag:
        return (self.upload_id, self._generation)

    def _is_current(self, tag: _Tag) -> bool:
        return tag == self._tag()

    def _fail_if_current(self, tag: _Tag, reason: FailureReason, message: str) -> bool:
        if self._is_current(tag):
            self._fail(reason, message)
        else:
            logger.debug("Dropping failure for stale request: %s", message)
        return False

    def _fail(self, reason: FailureReason, message: str) -> None:
        logger.warning("Playback failure (%s) for upload %s: %s", reason.value, self.upload_id, message)
        if self._on_failure is not None:
            self._on_failure(PlaybackFailure(reason=reason, message=message, upload_id=self.upload_id))


class _NoAudioSource(Exception):
    """Nothing is loaded and no audio URL is known for the transcript."""
