"""
Authoritative recognition-session state container.

Rules:
- This dataclass is a pure data model.
- It contains ALL state the reducer may ever need.
- Only the reducer produces new instances; the controller swaps them in.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from constants import END_ACK_TIMEOUT_MS_DEFAULT, LISTEN_TIMEOUT_MS_DEFAULT
from intents.resolved import ResolvedIntent, intent_to_dict
from orchestrator.enums.error_kind import ErrorKind
from orchestrator.enums.state import State


@dataclass(frozen=True)
class SessionState:
    """Immutable snapshot of one controller's recognition session."""

    # ------------------------------------------------------------------
    # Control state
    # ------------------------------------------------------------------
    state: State = State.IDLE

    # Bumped on every accepted start; never reused. Timer events armed
    # for an older run are ignored.
    run_id: int = 0

    # True once StopCapture has been issued for the current run
    stop_requested: bool = False

    # True after teardown; every later event is ignored
    disposed: bool = False

    # ------------------------------------------------------------------
    # Utterance
    # ------------------------------------------------------------------
    transcript: str = ""
    last_intent: ResolvedIntent | None = None

    # ------------------------------------------------------------------
    # Error handling
    # ------------------------------------------------------------------
    error: ErrorKind | None = None
    error_message: str | None = None

    # ------------------------------------------------------------------
    # Configuration carried with the state (reducer stays pure)
    # ------------------------------------------------------------------
    listen_timeout_ms: int = LISTEN_TIMEOUT_MS_DEFAULT
    end_ack_timeout_ms: int = END_ACK_TIMEOUT_MS_DEFAULT

    @property
    def is_listening(self) -> bool:
        return self.state in (State.LISTENING, State.FINALIZING)

    def to_dict(self) -> dict[str, Any]:
        """Client-facing snapshot."""
        return {
            "state": self.state.value,
            "is_listening": self.is_listening,
            "transcript": self.transcript,
            "last_intent": intent_to_dict(self.last_intent),
            "error": self.error.value if self.error is not None else None,
            "error_message": self.error_message,
        }
