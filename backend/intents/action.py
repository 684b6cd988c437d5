"""
Action identifier enumeration.

Rules:
- Closed set: every resolved intent carries exactly one of these.
- Wire values are the camelCase names the client already understands.
- No behavior here; the dispatcher owns the action -> engine mapping.
"""

from __future__ import annotations

from enum import Enum


class ActionId(str, Enum):
    """Recognizable playback actions plus the two resolver fallbacks."""

    NEXT = "next"
    PREVIOUS = "previous"
    SHUFFLE = "shuffle"
    REPEAT = "repeat"
    CLEAR_QUEUE = "clearQueue"
    VOLUME_UP = "volumeUp"
    VOLUME_DOWN = "volumeDown"
    MUTE = "mute"
    PAUSE = "pause"
    PLAY = "play"

    # Resolver fallbacks (never present in the command table)
    SEARCH = "search"
    UNKNOWN = "unknown"
