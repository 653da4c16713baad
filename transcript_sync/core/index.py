"""Segment index: map a playback position to the segment containing it.

WHY: The synchronizer asks "which segment is under the playhead?" ten
times a second. The answer must be the same segment the UI addresses,
so lookup works on the built paragraphs and returns SegmentIds.

HOW: The paragraphs are flattened once into (SegmentId, start, end)
entries in display order. locate() scans them and returns the first
entry whose closed interval contains the position.

RULES:
- Intervals are inclusive at both ends
- First match in paragraph-then-segment order wins, so pathological
  overlapping spans resolve to the earlier segment
- A position in a gap (or a non-finite position) returns None; that
  is the normal state during pauses, not an error
"""

from __future__ import annotations

import math
from typing import Iterator, List, Optional, Sequence, Tuple

from transcript_sync.core.ir import Paragraph, Segment, SegmentId, Transcript


class SegmentIndex:
    """Position → SegmentId lookup over one built transcript."""

    def __init__(self, paragraphs: Sequence[Paragraph]) -> None:
        self._entries: List[Tuple[SegmentId, Segment]] = [
            (SegmentId(p_index, s_index), segment)
            for p_index, paragraph in enumerate(paragraphs)
            for s_index, segment in enumerate(paragraph.segments)
        ]
        self._by_id = dict(self._entries)

    @classmethod
    def from_transcript(cls, transcript: Transcript) -> SegmentIndex:
        return cls(transcript.paragraphs)

    def locate(self, position_s: float) -> Optional[SegmentId]:
        """Return the id of the first segment whose span contains position_s."""
        if position_s is None or not math.isfinite(position_s):
            return None
        for seg_id, segment in self._entries:
            if segment.start <= position_s <= segment.end:
                return seg_id
        return None

    def get(self, seg_id: SegmentId) -> Optional[Segment]:
        return self._by_id.get(SegmentId(*seg_id))

    def __contains__(self, seg_id: object) -> bool:
        return seg_id in self._by_id

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Tuple[SegmentId, Segment]]:
        return iter(self._entries)
