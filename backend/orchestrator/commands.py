"""
Side-effect command definitions for the recognition session.

Rules:
- Commands are declarative requests for side effects.
- Commands are emitted by the reducer and executed by the controller.
- No behavior, no async, no I/O, no clocks.
Invariant:
    - All concrete Command subclasses MUST be frozen dataclasses.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from intents.resolved import ResolvedIntent
from orchestrator.events import EventType


# =============================================================================
# Command Type Enumeration
# =============================================================================

class CommandType(str, Enum):
    """
    Canonical command types emitted by the reducer.

    Stable discriminants used for logging and controller dispatch.
    """

    # Capture
    START_CAPTURE = "START_CAPTURE"
    STOP_CAPTURE = "STOP_CAPTURE"
    ABORT_CAPTURE = "ABORT_CAPTURE"

    # Timers
    START_TIMER = "START_TIMER"
    CANCEL_TIMER = "CANCEL_TIMER"

    # Intent delivery
    DELIVER_INTENT = "DELIVER_INTENT"

    # Observability
    LOG_EVENT = "LOG_EVENT"


# =============================================================================
# Base Command
# =============================================================================

class Command:
    """
    Base command type.

    command_type is an explicit discriminant and must never be inferred
    from Python type identity.
    """

    command_type: CommandType


# =============================================================================
# Capture Commands
# =============================================================================

@dataclass(frozen=True)
class StartCapture(Command):
    """Ask the collaborator to begin capturing."""
    run_id: int
    command_type: CommandType = CommandType.START_CAPTURE


@dataclass(frozen=True)
class StopCapture(Command):
    """Ask the collaborator to stop, letting it deliver a pending result."""
    run_id: int
    command_type: CommandType = CommandType.STOP_CAPTURE


@dataclass(frozen=True)
class AbortCapture(Command):
    """Ask the collaborator to stop immediately and discard results."""
    run_id: int
    command_type: CommandType = CommandType.ABORT_CAPTURE


# =============================================================================
# Timer Commands
# =============================================================================

@dataclass(frozen=True)
class StartTimer(Command):
    """
    Start (or replace) a named timer.

    On expiration the controller injects timeout_event_type carrying run_id.
    """
    timer_id: str
    duration_ms: int
    run_id: int
    timeout_event_type: EventType
    command_type: CommandType = CommandType.START_TIMER


@dataclass(frozen=True)
class CancelTimer(Command):
    """Cancel a named timer. Idempotent."""
    timer_id: str
    command_type: CommandType = CommandType.CANCEL_TIMER


# =============================================================================
# Intent Delivery
# =============================================================================

@dataclass(frozen=True)
class DeliverIntent(Command):
    """Hand a finalized, non-null intent to the command callback."""
    run_id: int
    intent: ResolvedIntent
    command_type: CommandType = CommandType.DELIVER_INTENT


# =============================================================================
# Observability Commands
# =============================================================================

@dataclass(frozen=True)
class LogEvent(Command):
    """Request to emit a structured observability event."""
    event: dict[str, Any]
    command_type: CommandType = CommandType.LOG_EVENT
