"""Transcript Sync: speaker-grouped, playback-synchronized transcripts.

WHY: Speech-to-text providers return an unstructured stream of timed
words (with optional speaker labels) or, for older records, a handful of
pre-cut segments. A listening UI needs stable, tappable display units
that light up as the audio plays. This package turns any of those
payload shapes into paragraphs of segments and keeps an "active segment"
highlight in step with the audio position.

HOW: Three stages: normalize (payload shape detection), build (speaker
paragraphs, each re-segmented by pause/punctuation/length heuristics),
and sync (segment index + playback synchronizer + interaction state
machine, owned by one controller). Formatters render the result for the
UI layer.

RULES:
- The build stage is a pure function of its input (deterministic)
- Data-shape problems never raise; they degrade to plain text or empty
- Only genuine audio engine failures are reported, as failure events
"""

__version__ = "0.1.0"
