"""Payload shape detection and word stream normalization.

WHY: Transcription records were written by several generations of the
upload pipeline. Old records hold pre-cut ``segments``, some hold
sentence ``timestamps``, current ones hold a ``words`` array with
spacing tokens and speaker ids, and a few only hold ``text`` or are
not JSON at all. Downstream stages need exactly one of two things: a
canonical word sequence, or a ready-made segment list.

HOW: The input is parsed leniently (invalid JSON means plain text). A
JSON object is matched against one JSON Schema per shape, in priority
order; the first shape that validates wins. Entries are then coerced
field by field, tolerating missing or mistyped values.

RULES:
- Priority: segments > timestamps > words > text > raw string
- A shape only counts when its field is a non-empty array of objects
  (an empty ``{}`` or ``[]`` falls through to the next shape)
- segments / timestamps map 1:1 to Segment objects, text untouched
- text and raw strings become one zero-duration segment at 0.0
- Never raises for data problems; no usable data means EMPTY
- Words are returned ordered by start (stable for equal starts)
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

import jsonschema

from transcript_sync.core.ir import PayloadKind, Segment, TimedWord, WordKind

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Shape schemas (checked in priority order)
# ---------------------------------------------------------------------------


def _array_shape(field_name: str) -> Dict[str, Any]:
    return {
        "type": "object",
        "required": [field_name],
        "properties": {
            field_name: {
                "type": "array",
                "minItems": 1,
                "items": {"type": "object"},
            },
        },
    }


_TEXT_SHAPE: Dict[str, Any] = {
    "type": "object",
    "required": ["text"],
    "properties": {
        "text": {"type": "string", "pattern": r"\S"},
    },
}

_SHAPE_VALIDATORS = [
    (PayloadKind.SEGMENTS, jsonschema.Draft7Validator(_array_shape("segments"))),
    (PayloadKind.TIMESTAMPS, jsonschema.Draft7Validator(_array_shape("timestamps"))),
    (PayloadKind.WORDS, jsonschema.Draft7Validator(_array_shape("words"))),
    (PayloadKind.TEXT, jsonschema.Draft7Validator(_TEXT_SHAPE)),
]


@dataclass
class NormalizedPayload:
    """The canonical form of one transcription payload.

    RULES:
    - kind WORDS: ``words`` is filled, ``segments`` is empty
    - any other non-empty kind: ``segments`` is filled, ``words`` is empty
    - kind EMPTY: both are empty
    """

    kind: PayloadKind
    words: List[TimedWord] = field(default_factory=list)
    segments: List[Segment] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.words and not self.segments


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def normalize_payload(raw: Union[str, bytes, Dict[str, Any], None]) -> NormalizedPayload:
    """Detect the payload shape and return its canonical form.

    WHY: This is the single entry point the pipeline uses, so every
    fallback decision lives in one place.

    HOW: Strings and bytes are parsed as JSON; parse failures fall back
    to plain text. Parsed objects go through shape detection. A JSON
    string literal is treated as plain text; other non-object JSON
    (arrays, numbers, null) carries no usable data.

    Args:
        raw: The stored transcription blob: a JSON string, bytes, an
            already-decoded dict, or None.

    Returns:
        NormalizedPayload describing the shape that was used.
    """
    if raw is None:
        return NormalizedPayload(kind=PayloadKind.EMPTY)

    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")

    if isinstance(raw, str):
        if not raw.strip():
            return NormalizedPayload(kind=PayloadKind.EMPTY)
        try:
            data = json.loads(raw)
        except (ValueError, RecursionError):
            # JSONDecodeError, int digit limit, or nesting too deep
            logger.debug("Payload is not JSON; treating %d chars as plain text", len(raw))
            return _plain_text(raw, PayloadKind.RAW_TEXT)
    else:
        data = raw

    if isinstance(data, str):
        if not data.strip():
            return NormalizedPayload(kind=PayloadKind.EMPTY)
        return _plain_text(data, PayloadKind.RAW_TEXT)

    if not isinstance(data, dict):
        logger.debug("Payload JSON is a %s; no usable transcript data", type(data).__name__)
        return NormalizedPayload(kind=PayloadKind.EMPTY)

    return _normalize_object(data)


def _normalize_object(data: Dict[str, Any]) -> NormalizedPayload:
    """Apply shape detection to a decoded JSON object."""
    for kind, validator in _SHAPE_VALIDATORS:
        if not validator.is_valid(data):
            continue

        if kind is PayloadKind.SEGMENTS:
            return NormalizedPayload(
                kind=kind,
                segments=[_entry_to_segment(e, with_speaker=True) for e in data["segments"]],
            )
        if kind is PayloadKind.TIMESTAMPS:
            return NormalizedPayload(
                kind=kind,
                segments=[_entry_to_segment(e, with_speaker=False) for e in data["timestamps"]],
            )
        if kind is PayloadKind.WORDS:
            words = _entries_to_words(data["words"])
            if words:
                return NormalizedPayload(kind=kind, words=words)
            logger.debug("Payload words array held no usable entries")
            continue
        return _plain_text(data["text"], PayloadKind.TEXT)

    return NormalizedPayload(kind=PayloadKind.EMPTY)


# ---------------------------------------------------------------------------
# Entry coercion helpers
# ---------------------------------------------------------------------------


def _plain_text(text: str, kind: PayloadKind) -> NormalizedPayload:
    return NormalizedPayload(
        kind=kind,
        segments=[Segment(text=text, start=0.0, end=0.0)],
    )


def _as_seconds(value: Any, default: float) -> float:
    """Coerce a time value to finite float seconds, else return default."""
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        return default
    try:
        seconds = float(value)
    except (ValueError, OverflowError):
        return default
    if not math.isfinite(seconds):
        return default
    return seconds


def _finite_number(value: Any) -> Optional[float]:
    """Return value as a finite float, or None for non-numbers and overflow."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        number = float(value)
    except OverflowError:
        return None
    return number if math.isfinite(number) else None


def _speaker_of(entry: Dict[str, Any], *keys: str) -> Optional[str]:
    for key in keys:
        value = entry.get(key)
        if value is None or isinstance(value, bool):
            continue
        if isinstance(value, (str, int)):
            try:
                text = str(value)
            except ValueError:
                continue
            if text:
                return text
    return None


def _confidence_of(entry: Dict[str, Any]) -> Optional[float]:
    """Read confidence directly, or derive it from a log-probability."""
    confidence = _finite_number(entry.get("confidence"))
    if confidence is not None:
        return confidence
    logprob = _finite_number(entry.get("logprob"))
    if logprob is not None:
        return math.exp(min(0.0, logprob))
    return None


def _entry_to_segment(entry: Dict[str, Any], with_speaker: bool) -> Segment:
    text = entry.get("text")
    start = _as_seconds(entry.get("start"), 0.0)
    end = _as_seconds(entry.get("end"), start)
    return Segment(
        text=text if isinstance(text, str) else "",
        start=start,
        end=end,
        speaker=_speaker_of(entry, "speaker", "speakerId", "speaker_id") if with_speaker else None,
    )


def _entries_to_words(entries: List[Dict[str, Any]]) -> List[TimedWord]:
    words: List[TimedWord] = []
    for entry in entries:
        text = entry.get("text")
        if not isinstance(text, str):
            continue

        start = _as_seconds(entry.get("start"), 0.0)
        end = max(start, _as_seconds(entry.get("end"), start))

        kind_value = entry.get("type", entry.get("kind"))
        kind = WordKind.SPACING if kind_value == WordKind.SPACING.value else WordKind.WORD

        words.append(TimedWord(
            text=text,
            start=start,
            end=end,
            kind=kind,
            speaker_id=_speaker_of(entry, "speakerId", "speaker_id", "speaker"),
            confidence=_confidence_of(entry),
        ))

    ordered = sorted(words, key=lambda w: w.start)
    if ordered != words:
        logger.debug("Reordered %d words by start time", len(words))
    return ordered
