"""Segment splitter: cut a run of timed words into tappable segments.

WHY: A speaker paragraph can run for minutes. Listeners tap and follow
along phrase by phrase, so each paragraph is re-cut into short spans at
natural boundaries (sentence ends and audible pauses) with hard caps on
duration and length so no single highlight stays lit for too long.

HOW: A single greedy left-to-right pass. Each word is appended to the
in-progress segment, then five independent boundary checks run; if any
holds, the segment is closed. Closing trims the text and drops the
segment when nothing but whitespace is left.

RULES:
- 1. A WORD token whose trimmed text ends in . ! ? ends the segment
- 2. A following SPACING token longer than pause_threshold_s ends it
- 3. Running duration above max_duration_s ends it
- 4. Running length above max_chars ends it at a soft break
     (punctuation path: WORD ending in , ; : and spacing path: SPACING
     token containing a space)
- 5. The last word always ends it
- Start/end come from the accumulated words, not from the trimmed text
- Output preserves word order; words are never duplicated or reordered
"""

from __future__ import annotations

import re
from typing import List, Optional, Sequence

from transcript_sync.config import (
    PARAGRAPH_LIMITS,
    SOFT_BREAK_SPACING,
    SegmentLimits,
)
from transcript_sync.core.ir import Segment, TimedWord, WordKind

_SENTENCE_END_RE = re.compile(r"[.!?]$")
_SOFT_PUNCT_RE = re.compile(r"[,;:]$")


def ends_sentence(word: TimedWord) -> bool:
    """True for a WORD token whose trimmed text ends in . ! or ?."""
    return word.kind is WordKind.WORD and bool(_SENTENCE_END_RE.search(word.text.strip()))


def is_pause(word: Optional[TimedWord], threshold_s: float) -> bool:
    """True if word is a SPACING token longer than threshold_s."""
    return (
        word is not None
        and word.kind is WordKind.SPACING
        and word.duration > threshold_s
    )


def is_soft_break(word: TimedWord, limits: SegmentLimits) -> bool:
    """True if a length-capped segment may end at this token."""
    if limits.soft_break == SOFT_BREAK_SPACING:
        return word.kind is WordKind.SPACING and " " in word.text
    return word.kind is WordKind.WORD and bool(_SOFT_PUNCT_RE.search(word.text.strip()))


class _Accumulator:
    """In-progress segment; raw text and the word span it came from."""

    __slots__ = ("text", "start", "end", "words")

    def __init__(self, word: TimedWord) -> None:
        self.text = word.text
        self.start = word.start
        self.end = word.end
        self.words = [word]

    def append(self, word: TimedWord) -> None:
        self.text += word.text
        self.end = word.end
        self.words.append(word)

    def close(self) -> Optional[Segment]:
        text = self.text.strip()
        if not text:
            return None
        return Segment(text=text, start=self.start, end=self.end, words=list(self.words))


def split_segments(
    words: Sequence[TimedWord],
    limits: SegmentLimits = PARAGRAPH_LIMITS,
) -> List[Segment]:
    """Split an ordered run of words into display segments.

    Args:
        words: Words of one paragraph (or of the whole stream when no
            speaker metadata exists), ordered by start.
        limits: Thresholds for this path: PARAGRAPH_LIMITS inside a
            speaker paragraph, STANDALONE_LIMITS otherwise.

    Returns:
        Segments in word order. Pure-whitespace spans are dropped.
    """
    segments: List[Segment] = []
    current: Optional[_Accumulator] = None
    last_index = len(words) - 1

    for i, word in enumerate(words):
        if current is None:
            current = _Accumulator(word)
        else:
            current.append(word)

        next_word = words[i + 1] if i < last_index else None

        should_end = (
            ends_sentence(word)
            or is_pause(next_word, limits.pause_threshold_s)
            or (current.end - current.start) > limits.max_duration_s
            or (len(current.text) > limits.max_chars and is_soft_break(word, limits))
            or i == last_index
        )

        if should_end:
            segment = current.close()
            if segment is not None:
                segments.append(segment)
            current = None

    return segments
