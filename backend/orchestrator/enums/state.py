"""
Authoritative recognition-session state enumeration.

Rules:
- This enum defines ONLY the control-plane states.
- No behavior, no helper methods, no side effects.
- Transitions are defined exclusively in the reducer.
"""

from __future__ import annotations

from enum import Enum


class State(str, Enum):
    """
    Lifecycle of a single recognition session.

        IDLE -> LISTENING -> (FINALIZING | ERRORING | TIMING_OUT) -> IDLE

    The three intermediate states wait for the capture collaborator to
    confirm end before returning to IDLE.
    """

    IDLE = "IDLE"
    LISTENING = "LISTENING"
    FINALIZING = "FINALIZING"
    ERRORING = "ERRORING"
    TIMING_OUT = "TIMING_OUT"
