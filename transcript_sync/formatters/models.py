"""Pydantic view models for the rendering layer.

WHY: The UI layer receives the transcript as data, not Python objects.
Pydantic models give the payload a typed, documented schema (also
exportable as JSON Schema) and handle serialization.

HOW: Three nested models mirror the IR: TranscriptView holds
ParagraphViews holding SegmentViews. Each segment carries its string
id ("p-s"), a time label, and its current highlight.

RULES:
- All fields use Field(description=...)
- Views are built from the IR, never the other way round
- Word-level detail is not exposed; segments are the tappable unit
"""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field

from transcript_sync.playback.interaction import Highlight


class SegmentView(BaseModel):
    """One tappable segment as displayed."""

    id: str = Field(description="Segment key '<paragraph>-<segment>', stable for this build.")
    paragraph_index: int = Field(description="Index of the containing paragraph.")
    segment_index: int = Field(description="Index of the segment within its paragraph.")
    text: str = Field(description="Trimmed segment text.")
    start: float = Field(description="Start time in seconds.")
    end: float = Field(description="End time in seconds.")
    time_label: str = Field(description="Start time formatted as m:ss.")
    highlight: Highlight = Field(
        default=Highlight.PLAIN,
        description="How the segment is drawn: selected, hovered, active or plain.",
    )


class ParagraphView(BaseModel):
    """A speaker turn and its segments."""

    speaker_id: str = Field(description="Speaker id from the provider (or 'speaker_0').")
    speaker_label: str = Field(description="Display name, 'Speaker N' by first appearance.")
    start: float = Field(description="Start time of the first word in seconds.")
    end: float = Field(description="End time of the last word in seconds.")
    time_label: str = Field(description="Start time formatted as m:ss.")
    segments: List[SegmentView] = Field(description="Segments in display order.")


class TranscriptView(BaseModel):
    """The complete transcript as handed to the UI."""

    source_kind: str = Field(description="Payload shape the transcript was built from.")
    duration: float = Field(description="End of the last segment in seconds.")
    paragraphs: List[ParagraphView] = Field(description="Speaker paragraphs in order.")

