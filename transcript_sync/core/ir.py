"""Intermediate representation dataclasses for segmented transcripts.

WHY: Provider payloads come in several shapes, but the index, the
synchronizer, the interaction machine and every formatter want the same
structure: paragraphs (one per speaker run) containing segments (one
per tappable phrase) containing timed words. The IR is that single,
well-typed form.

HOW: A small hierarchy:
  TimedWord: one word or spacing token with timing and speaker
  Segment: contiguous words presented as one tappable unit
  Paragraph: a maximal run of words from one speaker, with its segments
  Transcript: all paragraphs plus the payload shape they came from
  SegmentId: (paragraph_index, segment_index) address of a segment

RULES:
- TimedWord is frozen; the normalizer is its only producer
- All times are float seconds from the start of the audio
- Segment.text is the concatenation of word texts (spacing tokens carry
  their own spaces), trimmed when the segment is closed
- SegmentId is recomputed on every build and never persisted
- Paragraphs and segments are replaced, never mutated, when the payload changes
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Iterator, List, NamedTuple, Optional, Tuple


class WordKind(str, enum.Enum):
    """Token kind as reported by the provider."""

    WORD = "word"
    SPACING = "spacing"


@dataclass(frozen=True)
class TimedWord:
    """A single lexical token (word or inter-word spacing) with timing.

    WHY: Providers emit the spaces between words as their own timed
    tokens. Keeping them lets the splitter detect pauses and lets text be
    rebuilt by plain concatenation.

    RULES:
    - start <= end
    - speaker_id is None when the provider did not diarize
    - confidence is None when the provider reports none
    """

    text: str
    start: float
    end: float
    kind: WordKind = WordKind.WORD
    speaker_id: Optional[str] = None
    confidence: Optional[float] = None

    @property
    def duration(self) -> float:
        return self.end - self.start


@dataclass
class Segment:
    """A contiguous span of words shown as one tappable unit.

    RULES:
    - start is the first word's start, end is the last word's end
    - words is a contiguous sub-run of one paragraph's words
    - speaker is only set for pre-cut segments from legacy payloads
    """

    text: str
    start: float
    end: float
    words: List[TimedWord] = field(default_factory=list)
    speaker: Optional[str] = None

    @property
    def duration(self) -> float:
        return self.end - self.start


@dataclass
class Paragraph:
    """A maximal run of consecutive words attributed to one speaker.

    RULES:
    - every word's speaker (or the default speaker) equals speaker_id
    - text is the raw concatenation of the words (untrimmed)
    - segments cover the words in order with no overlap
    """

    speaker_id: str
    start: float
    end: float
    text: str = ""
    words: List[TimedWord] = field(default_factory=list)
    segments: List[Segment] = field(default_factory=list)


class SegmentId(NamedTuple):
    """Address of a segment within one built transcript."""

    paragraph_index: int
    segment_index: int

    @property
    def key(self) -> str:
        """String form used by the UI layer, e.g. ``"0-3"``."""
        return "{}-{}".format(self.paragraph_index, self.segment_index)

    @classmethod
    def parse(cls, key: str) -> SegmentId:
        """Inverse of ``key``. Raises ValueError on malformed input."""
        parts = key.split("-")
        if len(parts) != 2:
            raise ValueError("Malformed segment key: {!r}".format(key))
        return cls(int(parts[0]), int(parts[1]))


class PayloadKind(str, enum.Enum):
    """Which payload shape a transcript was built from."""

    SEGMENTS = "segments"
    TIMESTAMPS = "timestamps"
    WORDS = "words"
    TEXT = "text"
    RAW_TEXT = "raw_text"
    EMPTY = "empty"


@dataclass
class Transcript:
    """The complete built transcript handed to the sync and render layers.

    RULES:
    - paragraphs are ordered by start and never overlap
    - source_kind records which payload shape produced them
    """

    source_kind: PayloadKind
    paragraphs: List[Paragraph] = field(default_factory=list)

    def segments(self) -> Iterator[Tuple[SegmentId, Segment]]:
        """Yield every segment with its id, in display order."""
        for p_index, paragraph in enumerate(self.paragraphs):
            for s_index, segment in enumerate(paragraph.segments):
                yield SegmentId(p_index, s_index), segment

    def segment(self, seg_id: SegmentId) -> Optional[Segment]:
        """Return the segment at seg_id, or None if it does not exist."""
        p_index, s_index = seg_id
        if not 0 <= p_index < len(self.paragraphs):
            return None
        paragraph = self.paragraphs[p_index]
        if not 0 <= s_index < len(paragraph.segments):
            return None
        return paragraph.segments[s_index]

    @property
    def duration_s(self) -> float:
        """End of the last segment, 0.0 for an empty transcript."""
        ends = [segment.end for _, segment in self.segments()]
        return max(ends) if ends else 0.0

    @property
    def is_empty(self) -> bool:
        return not any(p.segments for p in self.paragraphs)
