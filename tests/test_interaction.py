"""Tests for the interaction state machine and highlight precedence.

WHY: The two-tap seek is the only path from a gesture to the audio,
and the hover preview must clear itself without leaking timers.

HOW: The scheduler fixture (a FakeScheduler) stands in for loop.call_later, so
hover clears are fired explicitly instead of waiting.
"""

from __future__ import annotations

import asyncio
from unittest.mock import MagicMock

import pytest

from transcript_sync.core.ir import SegmentId
from transcript_sync.playback.interaction import (
    Highlight,
    InteractionState,
    InteractionStateMachine,
    TapAction,
    resolve_highlight,
)

A = SegmentId(0, 0)
B = SegmentId(0, 1)


class TestTap:
    def test_first_tap_selects_second_seeks(self, scheduler):
        machine = InteractionStateMachine(scheduler=scheduler)
        assert machine.tap(A) is TapAction.SELECT
        assert machine.state.selected_segment_id == A
        assert machine.tap(A) is TapAction.SEEK
        assert machine.state.selected_segment_id == A

    def test_tap_elsewhere_moves_selection(self, scheduler):
        machine = InteractionStateMachine(scheduler=scheduler)
        machine.tap(A)
        assert machine.tap(B) is TapAction.SELECT
        assert machine.state.selected_segment_id == B
        assert machine.tap(A) is TapAction.SELECT

    def test_on_change_only_on_change(self, scheduler):
        on_change = MagicMock()
        machine = InteractionStateMachine(on_change, scheduler=scheduler)
        machine.tap(A)
        machine.tap(A)
        assert on_change.call_count == 1
        assert on_change.call_args.args[0] == InteractionState(selected_segment_id=A)


class TestLongPress:
    def test_hover_then_auto_clear(self, scheduler):
        machine = InteractionStateMachine(scheduler=scheduler, hover_preview_s=0.2)
        machine.long_press(A)
        assert machine.state.hovered_segment_id == A
        assert scheduler.calls[0].delay_s == 0.2
        scheduler.fire_all()
        assert machine.state.hovered_segment_id is None

    def test_newer_press_cancels_older_clear(self, scheduler):
        machine = InteractionStateMachine(scheduler=scheduler)
        machine.long_press(A)
        machine.long_press(B)
        first, second = scheduler.calls
        assert first.cancelled
        scheduler.fire_all()
        assert not first.fired
        assert second.fired
        assert machine.state.hovered_segment_id is None

    def test_stale_clear_leaves_newer_hover(self, scheduler):
        machine = InteractionStateMachine(scheduler=scheduler)
        machine.long_press(A)
        clear_a = scheduler.calls[0]
        machine.long_press(B)
        clear_a.callback()
        assert machine.state.hovered_segment_id == B

    def test_default_scheduler_uses_event_loop(self):
        async def _run():
            machine = InteractionStateMachine(hover_preview_s=0.01)
            machine.long_press(A)
            assert machine.state.hovered_segment_id == A
            await asyncio.sleep(0.05)
            return machine.state.hovered_segment_id

        assert asyncio.run(_run()) is None

    def test_default_scheduler_outside_loop_leaves_state(self):
        on_change = MagicMock()
        machine = InteractionStateMachine(on_change)
        with pytest.raises(RuntimeError):
            machine.long_press(A)
        assert machine.state == InteractionState()
        on_change.assert_not_called()


class TestReset:
    def test_reset_clears_everything(self, scheduler):
        machine = InteractionStateMachine(scheduler=scheduler)
        machine.tap(A)
        machine.long_press(B)
        machine.reset()
        assert machine.state == InteractionState()
        assert scheduler.calls[0].cancelled


class TestResolveHighlight:
    def test_precedence(self):
        both = InteractionState(hovered_segment_id=A, selected_segment_id=A)
        assert resolve_highlight(A, A, both) is Highlight.SELECTED
        hovered = InteractionState(hovered_segment_id=A)
        assert resolve_highlight(A, A, hovered) is Highlight.HOVERED
        assert resolve_highlight(A, A, InteractionState()) is Highlight.ACTIVE
        assert resolve_highlight(B, A, hovered) is Highlight.PLAIN
