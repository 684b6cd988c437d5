"""
Session error classification.

Rules:
- Stable identifiers surfaced to clients in SessionState.error.
- User-facing wording lives in orchestrator.errors.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Why the last recognition session did not produce an intent."""

    UNSUPPORTED = "unsupported"
    START_FAILED = "start_failed"

    NO_SPEECH = "no_speech"
    AUDIO_CAPTURE = "audio_capture"
    NOT_ALLOWED = "not_allowed"
    NETWORK = "network"
    CAPTURE_ERROR = "capture_error"

    TIMEOUT = "timeout"
