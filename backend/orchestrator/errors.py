"""
Capture error mapping.

Collaborator error codes -> ErrorKind -> stable user-facing message.
"""

from __future__ import annotations

from typing import Final

from constants import CAPTURE_ERROR_ABORTED
from orchestrator.enums.error_kind import ErrorKind


ERROR_MESSAGES: Final[dict[ErrorKind, str]] = {
    ErrorKind.UNSUPPORTED: "Voice control not supported",
    ErrorKind.START_FAILED: "Failed to start listening",
    ErrorKind.NO_SPEECH: "No speech detected",
    ErrorKind.AUDIO_CAPTURE: "Microphone not available",
    ErrorKind.NOT_ALLOWED: "Microphone access denied",
    ErrorKind.NETWORK: "Network error",
    ErrorKind.CAPTURE_ERROR: "An error occurred",
    ErrorKind.TIMEOUT: "Listening timed out",
}

_CAPTURE_CODES: Final[dict[str, ErrorKind]] = {
    "no-speech": ErrorKind.NO_SPEECH,
    "audio-capture": ErrorKind.AUDIO_CAPTURE,
    "not-allowed": ErrorKind.NOT_ALLOWED,
    "network": ErrorKind.NETWORK,
}


def classify_capture_error(code: str) -> ErrorKind | None:
    """
    Map a collaborator error code to an ErrorKind.

    Returns None for "aborted", which is the expected echo of our own
    stop/abort and is not an error. Unrecognized codes map to the generic
    CAPTURE_ERROR.
    """
    if code == CAPTURE_ERROR_ABORTED:
        return None
    return _CAPTURE_CODES.get(code, ErrorKind.CAPTURE_ERROR)


def error_message(kind: ErrorKind) -> str:
    return ERROR_MESSAGES[kind]
