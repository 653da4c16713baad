"""Playback synchronizer: keep the active segment in step with the audio.

WHY: The UI highlights the segment under the playhead. Re-rendering on
every position report would be wasteful, and a stale highlight while
paused is misleading. The synchronizer owns PlaybackState and emits a
change event only when the active segment actually changes.

HOW: Two states: Idle (no active segment) and Tracking. Each position
update while playing re-runs the index lookup; a differing result
transitions and emits once. Any update that is not playing forces Idle.

RULES:
- on_active_change fires only on change (edge-triggered)
- Not playing → active is None, emitted once if it was set
- did_just_finish → position resets to 0.0 and active to None
- Non-finite positions are ignored for bookkeeping and resolve to None
- set_index() (transcript rebuilt) and stop() force Idle
"""

from __future__ import annotations

import enum
import logging
import math
from dataclasses import dataclass
from typing import Callable, Optional

from transcript_sync.core.index import SegmentIndex
from transcript_sync.core.ir import SegmentId
from transcript_sync.playback.engine import PositionUpdate

logger = logging.getLogger(__name__)


class SyncState(str, enum.Enum):
    IDLE = "idle"
    TRACKING = "tracking"


@dataclass
class PlaybackState:
    """Playhead position and the segment currently under it."""

    position_s: float = 0.0
    active_segment_id: Optional[SegmentId] = None
    is_playing: bool = False


class PlaybackSynchronizer:
    """Edge-triggered mapping from position updates to the active segment."""

    def __init__(
        self,
        index: SegmentIndex,
        on_active_change: Optional[Callable[[Optional[SegmentId]], None]] = None,
    ) -> None:
        self._index = index
        self._on_active_change = on_active_change
        self.state = PlaybackState()

    @property
    def sync_state(self) -> SyncState:
        if self.state.active_segment_id is None:
            return SyncState.IDLE
        return SyncState.TRACKING

    @property
    def active_segment_id(self) -> Optional[SegmentId]:
        return self.state.active_segment_id

    def handle_update(self, update: PositionUpdate) -> Optional[SegmentId]:
        """Apply one position update and return the resulting active id."""
        if math.isfinite(update.position_s):
            self.state.position_s = update.position_s
        self.state.is_playing = update.is_playing

        if update.did_just_finish:
            self.state.position_s = 0.0
            self.state.is_playing = False
            self._transition(None)
            return None

        if not update.is_playing:
            self._transition(None)
            return None

        self._transition(self._index.locate(update.position_s))
        return self.state.active_segment_id

    def set_index(self, index: SegmentIndex) -> None:
        """Swap in the index of a rebuilt transcript and go Idle."""
        self._index = index
        self._transition(None)

    def stop(self) -> None:
        self.state.position_s = 0.0
        self.state.is_playing = False
        self._transition(None)

    def _transition(self, new_id: Optional[SegmentId]) -> None:
        if new_id == self.state.active_segment_id:
            return
        logger.debug("Active segment %s -> %s", self.state.active_segment_id, new_id)
        self.state.active_segment_id = new_id
        if self._on_active_change is not None:
            self._on_active_change(new_id)
