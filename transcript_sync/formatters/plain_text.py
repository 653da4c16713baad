"""Plain text transcript formatter with speaker-labeled paragraphs.

WHY: Users copy and share transcripts. A readable text form with one
block per speaker turn and a time label per block is the simplest
rendering and the baseline proof that the formatter pattern works.

HOW: Walks the paragraphs in order. Each paragraph becomes a
"Speaker N [m:ss]:" header followed by one line per segment. A blank
line separates paragraphs. Speaker numbers follow first appearance.

RULES:
- One block per paragraph (speaker turn)
- Segment text is written as built (already trimmed)
- Double newline between blocks, single trailing newline
- Output suffix: "-transcript.txt"
- Media type: "text/plain"
"""

from __future__ import annotations

from typing import List, Optional

from transcript_sync.core.ir import Transcript
from transcript_sync.formatters.base import BaseFormatter, FormatterOutput, HighlightResolver
from transcript_sync.formatters.labels import build_speaker_names, format_time


class PlainTextFormatter(BaseFormatter):
    """Formatter that produces speaker-labeled plain text blocks."""

    @property
    def name(self) -> str:
        return "Plain Text"

    def format(
        self,
        transcript: Transcript,
        highlight: Optional[HighlightResolver] = None,
    ) -> List[FormatterOutput]:
        speaker_names = build_speaker_names(transcript.paragraphs)
        blocks: List[str] = []

        for paragraph in transcript.paragraphs:
            lines = [segment.text for segment in paragraph.segments if segment.text]
            if not lines:
                continue
            header = "{name} [{time}]:".format(
                name=speaker_names[paragraph.speaker_id],
                time=format_time(paragraph.start),
            )
            blocks.append("\n".join([header] + lines))

        content = "\n\n".join(blocks)
        if content:
            content += "\n"

        return [
            FormatterOutput(
                suffix="-transcript.txt",
                content=content,
                media_type="text/plain",
            )
        ]
