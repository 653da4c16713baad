"""JSON view formatter: the transcript as the UI layer consumes it.

WHY: The rendering layer needs paragraphs, segment ids, time labels
and the current highlight of every segment in one serializable payload.

HOW: Builds a TranscriptView (pydantic) from the IR, asking the
optional highlight resolver for each segment's state, and dumps it
with model_dump_json().

RULES:
- Segment ids use SegmentId.key ("p-s")
- Without a resolver every segment is "plain"
- Output suffix: "-transcript.json"
"""

from __future__ import annotations

from typing import List, Optional

from transcript_sync.core.ir import SegmentId, Transcript
from transcript_sync.formatters.base import BaseFormatter, FormatterOutput, HighlightResolver
from transcript_sync.formatters.labels import build_speaker_names, format_time
from transcript_sync.formatters.models import ParagraphView, SegmentView, TranscriptView
from transcript_sync.playback.interaction import Highlight


def build_view(
    transcript: Transcript,
    highlight: Optional[HighlightResolver] = None,
) -> TranscriptView:
    """Convert a Transcript IR into its pydantic view model."""
    speaker_names = build_speaker_names(transcript.paragraphs)
    paragraphs: List[ParagraphView] = []

    for p_index, paragraph in enumerate(transcript.paragraphs):
        segments: List[SegmentView] = []
        for s_index, segment in enumerate(paragraph.segments):
            seg_id = SegmentId(p_index, s_index)
            segments.append(SegmentView(
                id=seg_id.key,
                paragraph_index=p_index,
                segment_index=s_index,
                text=segment.text,
                start=segment.start,
                end=segment.end,
                time_label=format_time(segment.start),
                highlight=highlight(seg_id) if highlight else Highlight.PLAIN,
            ))
        paragraphs.append(ParagraphView(
            speaker_id=paragraph.speaker_id,
            speaker_label=speaker_names[paragraph.speaker_id],
            start=paragraph.start,
            end=paragraph.end,
            time_label=format_time(paragraph.start),
            segments=segments,
        ))

    return TranscriptView(
        source_kind=transcript.source_kind.value,
        duration=transcript.duration_s,
        paragraphs=paragraphs,
    )


class JsonViewFormatter(BaseFormatter):
    """Formatter producing the TranscriptView JSON."""

    @property
    def name(self) -> str:
        return "JSON View"

    def format(
        self,
        transcript: Transcript,
        highlight: Optional[HighlightResolver] = None,
    ) -> List[FormatterOutput]:
        view = build_view(transcript, highlight)
        return [
            FormatterOutput(
                suffix="-transcript.json",
                content=view.model_dump_json(indent=2),
                media_type="application/json",
            )
        ]
