"""Exception types and the playback failure event.

WHY: The core never raises for bad transcript data, but the audio engine
is a real external resource that can refuse to load or seek. Callers
need typed exceptions at the engine seam and a single event object the
UI layer can display.

HOW: Engine adapters raise AudioEngineError. The controller converts
that, and its own readiness timeout (SeekUnavailableError), into one
PlaybackFailure delivered through the on_failure callback.

RULES:
- AudioEngineError is raised by adapters, never by transcript code
- SeekUnavailableError never escapes the controller
- One PlaybackFailure per failed operation, no automatic retry
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional


class AudioEngineError(Exception):
    """Raised when the audio engine refuses an operation.

    WHY: Callers need to distinguish engine failures (bad URL, codec,
    device) from programming errors.

    RULES:
    - operation names the refused call ("load", "play", "seek", ...)
    - message is a human-readable summary from the adapter
    """

    def __init__(self, operation: str, message: str) -> None:
        self.operation = operation
        self.message = message
        super().__init__(f"Audio engine {operation} failed: {message}")


class SeekUnavailableError(TimeoutError):
    """Raised when the engine does not become ready within the load timeout.

    RULES:
    - Message includes the audio URL and the elapsed wait
    """


class FailureReason(str, enum.Enum):
    """Why a playback request could not be honoured."""

    SEEK_UNAVAILABLE = "seek_unavailable"
    ENGINE_ERROR = "engine_error"
    NO_AUDIO_SOURCE = "no_audio_source"


@dataclass(frozen=True)
class PlaybackFailure:
    """A recoverable playback failure reported to the UI layer.

    RULES:
    - reason: one of FailureReason
    - message: human-readable description
    - upload_id: the transcript/upload the failed request targeted
    """

    reason: FailureReason
    message: str
    upload_id: Optional[str] = None
