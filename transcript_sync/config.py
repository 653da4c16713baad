"""Configuration constants, segmentation limits, and .env loading.

WHY: The segmentation heuristics and playback timings are tuning knobs.
The two segmentation paths use different thresholds
(6 s vs 8 s, 100 vs 150 chars). Keeping every number in one module,
overridable from the environment, keeps them side by side and easy to
adjust without touching algorithm code.

HOW: python-dotenv loads the .env file on import. Each value is read
with os.getenv and parsed to its type. The two segmentation presets
(speaker paragraph path and standalone path) are SegmentLimits objects
collected in LIMIT_PRESETS.

RULES:
- Algorithm modules never hard-code a threshold; they import from here
- All defaults can be overridden via environment variables
- Invalid numeric values raise ValueError at import with the variable name
- SegmentLimits is frozen; build a new one with dataclasses.replace()
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Dict

from dotenv import load_dotenv

# Load .env from the project root (where the process is started from)
load_dotenv()


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(
            "Invalid value for {}: {!r} (expected a number)".format(name, raw)
        ) from None


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(
            "Invalid value for {}: {!r} (expected an integer)".format(name, raw)
        ) from None


# ---------------------------------------------------------------------------
# Transcript defaults
# ---------------------------------------------------------------------------

DEFAULT_SPEAKER_ID = os.getenv("TRANSCRIPT_DEFAULT_SPEAKER", "speaker_0")
"""Speaker id assigned to words that carry no speaker label."""

# ---------------------------------------------------------------------------
# Segmentation limits
# ---------------------------------------------------------------------------

SOFT_BREAK_PUNCTUATION = "punctuation"
SOFT_BREAK_SPACING = "spacing"


@dataclass(frozen=True)
class SegmentLimits:
    """Boundary thresholds for one segmentation path.

    WHY: The splitter runs with two parameter sets: inside a speaker
    paragraph, and over a bare word stream with no speaker metadata.
    Bundling the thresholds keeps the splitter signature small and
    makes presets comparable.

    RULES:
    - pause_threshold_s: a following spacing token longer than this ends the segment
    - max_duration_s: running duration above this ends the segment
    - max_chars: running length above this ends the segment at a soft break
    - soft_break: "punctuation" (word ending in , ; :) or "spacing"
      (spacing token containing a space)
    """

    name: str
    pause_threshold_s: float
    max_duration_s: float
    max_chars: int
    soft_break: str


PAUSE_THRESHOLD_S = _env_float("SEGMENT_PAUSE_THRESHOLD_S", 0.5)

PARAGRAPH_LIMITS = SegmentLimits(
    name="paragraph",
    pause_threshold_s=PAUSE_THRESHOLD_S,
    max_duration_s=_env_float("SEGMENT_PARAGRAPH_MAX_DURATION_S", 6.0),
    max_chars=_env_int("SEGMENT_PARAGRAPH_MAX_CHARS", 100),
    soft_break=SOFT_BREAK_PUNCTUATION,
)

STANDALONE_LIMITS = SegmentLimits(
    name="standalone",
    pause_threshold_s=PAUSE_THRESHOLD_S,
    max_duration_s=_env_float("SEGMENT_STANDALONE_MAX_DURATION_S", 8.0),
    max_chars=_env_int("SEGMENT_STANDALONE_MAX_CHARS", 150),
    soft_break=SOFT_BREAK_SPACING,
)

LIMIT_PRESETS: Dict[str, SegmentLimits] = {
    "paragraph": PARAGRAPH_LIMITS,
    "standalone": STANDALONE_LIMITS,
}

# ---------------------------------------------------------------------------
# Playback and interaction timing
# ---------------------------------------------------------------------------

POSITION_POLL_INTERVAL_S = _env_float("PLAYBACK_POLL_INTERVAL_S", 0.1)
"""Reference cadence for re-reading the audio position (highlight latency)."""

LOAD_TIMEOUT_S = _env_float("PLAYBACK_LOAD_TIMEOUT_S", 2.0)
LOAD_POLL_INTERVAL_S = _env_float("PLAYBACK_LOAD_POLL_INTERVAL_S", 0.1)

HOVER_PREVIEW_S = _env_float("INTERACTION_HOVER_PREVIEW_S", 0.2)
"""How long a long-press hover preview stays before it auto-clears."""


def get_limits(name: str) -> SegmentLimits:
    """Look up a segmentation preset by name.

    Raises ValueError for unknown names, listing the available presets.
    """
    if name not in LIMIT_PRESETS:
        raise ValueError(
            "Unknown segmentation preset '{}'. Available: {}".format(
                name, ", ".join(LIMIT_PRESETS.keys())
            )
        )
    return LIMIT_PRESETS[name]
