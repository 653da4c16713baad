"""Display helpers shared by the formatters: time labels and speaker names."""

from __future__ import annotations

import math
from typing import Dict, List

from transcript_sync.core.ir import Paragraph


def format_time(seconds: float) -> str:
    """Format seconds as ``m:ss``, or ``h:mm:ss`` past 99 minutes.

    Invalid values (negative, NaN, infinite, None) render as ``0:00``.
    """
    if seconds is None or not math.isfinite(seconds) or seconds < 0:
        return "0:00"

    whole = int(seconds)
    minutes, secs = divmod(whole, 60)
    if minutes > 99:
        hours, minutes = divmod(minutes, 60)
        return "{}:{:02d}:{:02d}".format(hours, minutes, secs)
    return "{}:{:02d}".format(minutes, secs)


def build_speaker_names(paragraphs: List[Paragraph]) -> Dict[str, str]:
    """Map speaker ids to "Speaker N" in order of first appearance."""
    names: Dict[str, str] = {}
    for paragraph in paragraphs:
        if paragraph.speaker_id not in names:
            names[paragraph.speaker_id] = "Speaker {}".format(len(names) + 1)
    return names
