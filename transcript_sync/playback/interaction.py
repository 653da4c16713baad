"""Interaction state machine: hover, selection, and the two-tap seek.

WHY: Tapping a segment should not yank the audio around by accident.
The first tap highlights (selects) a segment; only a second tap on the
same segment asks for a seek. A long press gives a short hover preview.
These states are independent of the playback highlight and need their
own small, testable state machine.

HOW: InteractionState holds the hovered and selected ids. tap() returns
a TapAction telling the caller whether to seek. long_press() sets the
hover and schedules its clearing through an injectable scheduler
(asyncio call_later by default). resolve_highlight() decides how one
segment is drawn when several states apply.

RULES:
- Second consecutive tap on the selected segment → TapAction.SEEK
  (selection is kept); any other tap selects and → TapAction.SELECT
- Long press hovers for HOVER_PREVIEW_S, then clears; a newer long
  press cancels the pending clear of the older one
- reset() clears both ids and any pending hover clear
- The default scheduler requires a running event loop; synchronous
  callers inject their own
- on_change fires only when the state actually changes
- Precedence: selected > hovered > active > plain
"""

from __future__ import annotations

import asyncio
import enum
from dataclasses import dataclass, replace
from typing import Any, Callable, Optional

from transcript_sync.config import HOVER_PREVIEW_S
from transcript_sync.core.ir import SegmentId

Scheduler = Callable[[float, Callable[[], None]], Any]


def _loop_scheduler(delay_s: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
    return asyncio.get_running_loop().call_later(delay_s, callback)


class TapAction(str, enum.Enum):
    SELECT = "select"
    SEEK = "seek"


class Highlight(str, enum.Enum):
    """How a single segment should be drawn."""

    SELECTED = "selected"
    HOVERED = "hovered"
    ACTIVE = "active"
    PLAIN = "plain"


@dataclass(frozen=True)
class InteractionState:
    hovered_segment_id: Optional[SegmentId] = None
    selected_segment_id: Optional[SegmentId] = None


def resolve_highlight(
    seg_id: SegmentId,
    active_id: Optional[SegmentId],
    state: InteractionState,
) -> Highlight:
    """Pick one highlight for seg_id; active styling yields to the others."""
    if state.selected_segment_id == seg_id:
        return Highlight.SELECTED
    if state.hovered_segment_id == seg_id:
        return Highlight.HOVERED
    if active_id == seg_id:
        return Highlight.ACTIVE
    return Highlight.PLAIN


class InteractionStateMachine:
    """Owns InteractionState and applies tap / long-press / reset transitions."""

    def __init__(
        self,
        on_change: Optional[Callable[[InteractionState], None]] = None,
        scheduler: Optional[Scheduler] = None,
        hover_preview_s: float = HOVER_PREVIEW_S,
    ) -> None:
        self._on_change = on_change
        self._schedule = scheduler or _loop_scheduler
        self.hover_preview_s = hover_preview_s
        self.state = InteractionState()
        self._hover_handle: Any = None

    def tap(self, seg_id: SegmentId) -> TapAction:
        if self.state.selected_segment_id == seg_id:
            return TapAction.SEEK
        self._set(replace(self.state, selected_segment_id=seg_id))
        return TapAction.SELECT

    def long_press(self, seg_id: SegmentId) -> None:
        """Hover seg_id and schedule the hover to clear after hover_preview_s.

        The default scheduler needs a running event loop; outside one this
        raises RuntimeError and leaves the state untouched. Pass a scheduler
        to drive the machine from synchronous code.
        """
        self._cancel_hover_clear()

        def _clear() -> None:
            if self.state.hovered_segment_id != seg_id:
                return
            self._hover_handle = None
            self._set(replace(self.state, hovered_segment_id=None))

        self._hover_handle = self._schedule(self.hover_preview_s, _clear)
        self._set(replace(self.state, hovered_segment_id=seg_id))

    def reset(self) -> None:
        self._cancel_hover_clear()
        self._set(InteractionState())

    def _cancel_hover_clear(self) -> None:
        handle, self._hover_handle = self._hover_handle, None
        if handle is not None:
            handle.cancel()

    def _set(self, new_state: InteractionState) -> None:
        if new_state == self.state:
            return
        self.state = new_state
        if self._on_change is not None:
            self._on_change(new_state)
