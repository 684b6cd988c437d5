"""
Behavioral constants
--------------------
Single source of truth for every value that changes runtime behavior.

Rules:
- If changing a value changes runtime behavior, it belongs here.
- No magic numbers elsewhere in the codebase.
- Deployment-specific overrides live in config.AppConfig, which defaults
  to the values below.
"""

from __future__ import annotations

from typing import Final

# =============================================================================
# Recognition session timing
# =============================================================================

# Window between a successful start and the final result before the
# controller forcibly stops capture.
LISTEN_TIMEOUT_MS_DEFAULT: Final[int] = 5_000

# How long to wait for capture to confirm end after the controller asked it
# to stop before aborting it and returning to idle.
END_ACK_TIMEOUT_MS_DEFAULT: Final[int] = 2_000

# =============================================================================
# Intent scoring
# =============================================================================

# score = len(keyword) * KEYWORD_LENGTH_WEIGHT + priority
# The weight must exceed the priority spread of the command table so that a
# longer keyword always beats a shorter one.
KEYWORD_LENGTH_WEIGHT: Final[int] = 10

SEARCH_QUERY_MIN_CHARS: Final[int] = 2

# =============================================================================
# Dispatch
# =============================================================================

VOLUME_STEP_DEFAULT: Final[float] = 0.1
MUTE_VOLUME_DELTA: Final[float] = -1.0

VOLUME_MIN: Final[float] = 0.0
VOLUME_MAX: Final[float] = 1.0
VOLUME_INITIAL: Final[float] = 0.7

SEARCH_RESULT_LIMIT_DEFAULT: Final[int] = 5

# =============================================================================
# Capture error codes reported by the speech-capture collaborator
# =============================================================================

# Expected echo of our own stop/abort; never surfaced as an error.
CAPTURE_ERROR_ABORTED: Final[str] = "aborted"

# =============================================================================
# User-facing messages
# =============================================================================

MSG_COMMAND_NOT_RECOGNIZED: Final[str] = "Command not recognized"
MSG_SEARCH_UNAVAILABLE: Final[str] = "Search not available"
MSG_NOTHING_TO_PLAY: Final[str] = "Nothing to play"
MSG_SEARCH_COMMAND_FEEDBACK: Final[str] = "Search and play a song"

# =============================================================================
# Session identity
# =============================================================================

SESSION_ID_PREFIX: Final[str] = "sess_"
SESSION_ID_HEX_LEN: Final[int] = 12
