"""Speaker paragraph building and Transcript IR construction.

WHY: The normalizer produces either a flat word stream or a ready-made
segment list. The UI shows a transcript as speaker paragraphs, each cut
into tappable segments, and the index needs the same structure to
address segments by (paragraph, segment). This module bridges the gap.

HOW: build_paragraphs() walks the word stream and starts a new
paragraph whenever the speaker changes, handing each closed paragraph's
words to the segment splitter. build_transcript() is the pipeline entry
point: it normalizes a raw payload and either builds paragraphs from
words or wraps pre-cut segments into paragraphs unchanged.

RULES:
- Missing speaker ids default to DEFAULT_SPEAKER_ID ("speaker_0")
- A new paragraph starts exactly where the speaker changes
- Non-adjacent runs of the same speaker are never merged
- The final paragraph is always flushed, even with a single word
- No speaker metadata anywhere → standalone limits (8 s / 150 chars)
- Pre-cut segments (segments, timestamps, text) are never re-split
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence, Union

from transcript_sync.config import (
    DEFAULT_SPEAKER_ID,
    PARAGRAPH_LIMITS,
    STANDALONE_LIMITS,
    SegmentLimits,
)
from transcript_sync.core.ir import Paragraph, PayloadKind, Segment, TimedWord, Transcript
from transcript_sync.core.normalizer import normalize_payload
from transcript_sync.core.splitter import split_segments

logger = logging.getLogger(__name__)


def speaker_of(word: TimedWord) -> str:
    """Speaker id of a word, with the default sentinel for unlabeled words."""
    return word.speaker_id or DEFAULT_SPEAKER_ID


def choose_limits(words: Sequence[TimedWord]) -> SegmentLimits:
    """Pick the paragraph limits if any word is diarized, else standalone."""
    if any(w.speaker_id for w in words):
        return PARAGRAPH_LIMITS
    return STANDALONE_LIMITS


def build_paragraphs(
    words: Sequence[TimedWord],
    limits: Optional[SegmentLimits] = None,
) -> List[Paragraph]:
    """Group a word stream into speaker paragraphs and segment each one.

    Args:
        words: Canonical word sequence from the normalizer.
        limits: Splitter thresholds. When None, chosen by choose_limits().

    Returns:
        Paragraphs in input order, each with its segments filled in.
    """
    if limits is None:
        limits = choose_limits(words)

    paragraphs: List[Paragraph] = []
    current: Optional[Paragraph] = None

    def _close() -> None:
        if current is not None:
            current.segments = split_segments(current.words, limits)
            paragraphs.append(current)

    for word in words:
        speaker = speaker_of(word)
        if current is None or current.speaker_id != speaker:
            _close()
            current = Paragraph(
                speaker_id=speaker,
                start=word.start,
                end=word.end,
                text=word.text,
                words=[word],
            )
        else:
            current.text += word.text
            current.end = word.end
            current.words.append(word)

    _close()
    return paragraphs


def wrap_segments(segments: Sequence[Segment]) -> List[Paragraph]:
    """Wrap pre-cut segments into paragraphs without re-segmenting them.

    Adjacent segments with the same speaker label share a paragraph.
    """
    paragraphs: List[Paragraph] = []
    for segment in segments:
        speaker = segment.speaker or DEFAULT_SPEAKER_ID
        if paragraphs and paragraphs[-1].speaker_id == speaker:
            paragraph = paragraphs[-1]
            paragraph.end = max(paragraph.end, segment.end)
            paragraph.text += " " + segment.text
            paragraph.segments.append(segment)
        else:
            paragraphs.append(Paragraph(
                speaker_id=speaker,
                start=segment.start,
                end=segment.end,
                text=segment.text,
                segments=[segment],
            ))
    return paragraphs


def build_transcript(
    payload: Union[str, bytes, Dict[str, Any], None],
    limits: Optional[SegmentLimits] = None,
) -> Transcript:
    """Run the full normalize → paragraph → segment pipeline.

    WHY: Callers (the controller, formatters, tests) want one call that
    turns a stored transcription blob into something displayable.

    HOW: normalize_payload() decides the shape. Word streams go through
    build_paragraphs(); every other shape is wrapped as-is.

    RULES:
    - Deterministic: identical input gives equal output
    - Never raises for malformed payloads

    Args:
        payload: The raw transcription blob.
        limits: Optional splitter thresholds override for word streams.

    Returns:
        A Transcript IR; empty (no paragraphs) when nothing was usable.
    """
    normalized = normalize_payload(payload)

    if normalized.kind is PayloadKind.WORDS:
        paragraphs = build_paragraphs(normalized.words, limits)
    else:
        paragraphs = wrap_segments(normalized.segments)

    logger.debug(
        "Built transcript from %s payload: %d paragraphs, %d segments",
        normalized.kind.value,
        len(paragraphs),
        sum(len(p.segments) for p in paragraphs),
    )
    return Transcript(source_kind=normalized.kind, paragraphs=paragraphs)
