"""
Event definitions for the recognition-session reducer.

Rules:
- Events describe facts that have occurred.
- Events carry data only (no behavior).
- All reducer decisions are based on these events.
- No clocks, no timers, no async, no side effects.

Timer events carry the run_id they were armed for, so a timer that fires
after its session ended is recognizably stale.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


# =============================================================================
# Event Type Enumeration
# =============================================================================

class EventType(str, Enum):
    """
    Canonical event types understood by the reducer.

    Every (state, event_type) pair must be explicitly handled
    or explicitly ignored by the reducer.
    """

    # ------------------------------------------------------------------
    # Caller control
    # ------------------------------------------------------------------
    START_REQUESTED = "START_REQUESTED"
    STOP_REQUESTED = "STOP_REQUESTED"
    RESET_REQUESTED = "RESET_REQUESTED"
    TEARDOWN = "TEARDOWN"

    # ------------------------------------------------------------------
    # Speech-capture collaborator
    # ------------------------------------------------------------------
    CAPTURE_STARTED = "CAPTURE_STARTED"
    CAPTURE_RESULT = "CAPTURE_RESULT"
    CAPTURE_ERROR = "CAPTURE_ERROR"
    CAPTURE_ENDED = "CAPTURE_ENDED"
    CAPTURE_START_FAILED = "CAPTURE_START_FAILED"
    CAPTURE_STOP_FAILED = "CAPTURE_STOP_FAILED"

    # ------------------------------------------------------------------
    # Timers
    # ------------------------------------------------------------------
    LISTEN_TIMEOUT = "LISTEN_TIMEOUT"
    END_ACK_TIMEOUT = "END_ACK_TIMEOUT"


# =============================================================================
# Base Event
# =============================================================================

@dataclass(frozen=True)
class Event:
    """
    Base event type.

    All events must specify:
    - event_type: discriminant
    - ts_ms: timestamp provided by the source (or fake in tests)
    """

    event_type: EventType
    ts_ms: int


# =============================================================================
# Caller Control Events
# =============================================================================

@dataclass(frozen=True)
class StartRequested(Event):
    """
    Caller asked to begin listening.

    capture_available is False when the capability provider found no
    speech-capture collaborator on this host.
    """
    capture_available: bool = True


@dataclass(frozen=True)
class StopRequested(Event):
    """Caller asked to stop listening."""


@dataclass(frozen=True)
class ResetRequested(Event):
    """Caller asked to discard the session and return to idle defaults."""


@dataclass(frozen=True)
class Teardown(Event):
    """Controller is being disposed."""


# =============================================================================
# Capture Events
# =============================================================================

@dataclass(frozen=True)
class CaptureStarted(Event):
    """Collaborator confirmed it is capturing audio."""


@dataclass(frozen=True)
class CaptureResult(Event):
    """
    Transcript for the current utterance.

    Interim results (is_final=False) may repeat and be revised; at most one
    final result arrives per utterance.
    """
    text: str
    is_final: bool = False


@dataclass(frozen=True)
class CaptureError(Event):
    """Collaborator reported an error code mid-session."""
    code: str


@dataclass(frozen=True)
class CaptureEnded(Event):
    """Collaborator confirmed capture has ended."""


@dataclass(frozen=True)
class CaptureStartFailed(Event):
    """
    Collaborator rejected start() for a reason other than already running.

    Emitted by the controller runtime, never by the collaborator itself.
    """
    run_id: int
    reason: str


@dataclass(frozen=True)
class CaptureStopFailed(Event):
    """
    Collaborator raised from stop().

    Emitted by the controller runtime, never by the collaborator itself.
    """
    run_id: int
    reason: str


# =============================================================================
# Timer Events
# =============================================================================

@dataclass(frozen=True)
class ListenTimeout(Event):
    """No final result arrived within the listen window."""
    run_id: int


@dataclass(frozen=True)
class EndAckTimeout(Event):
    """Capture was asked to stop but never confirmed end."""
    run_id: int
