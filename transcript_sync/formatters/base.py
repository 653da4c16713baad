"""Abstract base formatter and output container.

WHY: The rendering layer consumes the same built Transcript in more than
one form (a JSON view model for the UI, plain text for copy/share). A
base class keeps every formatter interchangeable.

HOW: BaseFormatter is an ABC with a ``name`` property and a ``format()``
method that also receives the current highlight resolver, so views can
carry per-segment highlight state. FormatterOutput bundles the content
with a suffix and MIME type.

RULES:
- Subclasses MUST implement ``name`` and ``format()``
- ``format()`` returns a list; most formatters return one item
- ``suffix`` starts with a hyphen, e.g. ``"-transcript.txt"``
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional

from transcript_sync.core.ir import SegmentId, Transcript
from transcript_sync.playback.interaction import Highlight

HighlightResolver = Callable[[SegmentId], Highlight]


@dataclass
class FormatterOutput:
    """One rendered output.

    Attributes:
        suffix: Suffix appended to the upload name, e.g. ``"-transcript.json"``.
        content: The rendered content.
        media_type: MIME type for the content, e.g. ``"application/json"``.
    """

    suffix: str
    content: str
    media_type: str


class BaseFormatter(ABC):
    """Abstract base for all transcript formatters.

    To add a new output format:
    1. Create a new file in formatters/
    2. Subclass BaseFormatter
    3. Implement format() and name
    4. Register in FORMATTERS dict in formatters/__init__.py
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable format name, e.g. 'Plain Text'."""

    @abstractmethod
    def format(
        self,
        transcript: Transcript,
        highlight: Optional[HighlightResolver] = None,
    ) -> list[FormatterOutput]:
        """Render the transcript.

        Args:
            transcript: The built transcript.
            highlight: Optional resolver giving each segment's current
                highlight (usually ``TranscriptController.highlight_for``).
                When None every segment is plain.

        Returns:
            List of FormatterOutput objects.
        """
