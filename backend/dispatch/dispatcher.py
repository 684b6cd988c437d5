"""
Command dispatcher.

ResolvedIntent -> one PlaybackEngine operation -> DispatchResult

Rules:
- Each ActionId maps to exactly one engine operation.
- play/pause consult engine.is_playing first and skip when the engine is
  already in the target state (noop result, no toggle). play that leaves
  the engine stopped (nothing queued) is a failed result.
- Unknown or missing intents produce a failed result and no engine call.
- Engine exceptions propagate to the caller.
- An action with no handler is a command-table / dispatcher mismatch and
  raises DispatchTableMismatch.
"""

from __future__ import annotations

import time
from typing import Callable

from constants import (
    MSG_COMMAND_NOT_RECOGNIZED,
    MSG_NOTHING_TO_PLAY,
    MSG_SEARCH_UNAVAILABLE,
    MUTE_VOLUME_DELTA,
    VOLUME_STEP_DEFAULT,
)
from dispatch.engine import PlaybackEngine, SearchHandler
from dispatch.result import DispatchResult
from intents.action import ActionId
from intents.command_table import DEFAULT_COMMAND_TABLE, CommandTable
from intents.resolved import ResolvedIntent, SearchIntent
from observability.logger import log_event
from observability.metrics import timed


class DispatchTableMismatch(RuntimeError):
    """An intent action has no dispatcher handler."""

    def __init__(self, action: ActionId) -> None:
        super().__init__(f"No dispatch handler for action '{action.value}'")
        self.action = action


Handler = Callable[[ResolvedIntent], DispatchResult]


class CommandDispatcher:
    """Maps resolved intents onto a PlaybackEngine."""

    def __init__(
        self,
        engine: PlaybackEngine,
        *,
        search: SearchHandler | None = None,
        table: CommandTable = DEFAULT_COMMAND_TABLE,
        volume_step: float = VOLUME_STEP_DEFAULT,
        session_id: str | None = None,
    ) -> None:
        self._engine = engine
        self._search = search
        self._table = table
        self._volume_step = volume_step
        self._session_id = session_id

        self._handlers: dict[ActionId, Handler] = {
            ActionId.PLAY: self._play,
            ActionId.PAUSE: self._pause,
            ActionId.NEXT: self._forward(engine.next),
            ActionId.PREVIOUS: self._forward(engine.previous),
            ActionId.SHUFFLE: self._forward(engine.toggle_shuffle),
            ActionId.REPEAT: self._forward(engine.toggle_repeat),
            ActionId.CLEAR_QUEUE: self._forward(engine.clear_queue),
            ActionId.VOLUME_UP: self._volume(self._volume_step),
            ActionId.VOLUME_DOWN: self._volume(-self._volume_step),
            ActionId.MUTE: self._volume(MUTE_VOLUME_DELTA),
            ActionId.SEARCH: self._search_request,
        }

        missing = table.actions() - self._handlers.keys()
        if missing:
            raise DispatchTableMismatch(sorted(missing, key=lambda a: a.value)[0])

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def execute(self, intent: ResolvedIntent | None) -> DispatchResult:
        """
        Perform the engine operation for an intent.

        Returns a structured result for every expected input. Raises
        DispatchTableMismatch for an action this dispatcher cannot map.
        """
        if intent is None or intent.action is ActionId.UNKNOWN:
            result = DispatchResult.failed(
                MSG_COMMAND_NOT_RECOGNIZED,
                action=intent.action if intent is not None else None,
            )
            self._log(result, intent)
            return result

        handler = self._handlers.get(intent.action)
        if handler is None:
            raise DispatchTableMismatch(intent.action)

        with timed(
            "dispatch_latency",
            session_id=self._session_id,
            details={"action": intent.action.value},
        ):
            result = handler(intent)

        self._log(result, intent)
        return result

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def _play(self, intent: ResolvedIntent) -> DispatchResult:
        message = self._feedback(intent)
        if self._engine.is_playing:
            return DispatchResult.skipped(ActionId.PLAY, message)
        self._engine.toggle_play_pause()
        if not self._engine.is_playing:
            return DispatchResult.failed(MSG_NOTHING_TO_PLAY, action=ActionId.PLAY)
        return DispatchResult.ok(ActionId.PLAY, message)

    def _pause(self, intent: ResolvedIntent) -> DispatchResult:
        message = self._feedback(intent)
        if not self._engine.is_playing:
            return DispatchResult.skipped(ActionId.PAUSE, message)
        self._engine.toggle_play_pause()
        return DispatchResult.ok(ActionId.PAUSE, message)

    def _forward(self, operation: Callable[[], None]) -> Handler:
        def handler(intent: ResolvedIntent) -> DispatchResult:
            operation()
            return DispatchResult.ok(intent.action, self._feedback(intent))
        return handler

    def _volume(self, delta: float) -> Handler:
        def handler(intent: ResolvedIntent) -> DispatchResult:
            self._engine.adjust_volume(delta)
            return DispatchResult.ok(intent.action, self._feedback(intent))
        return handler

    def _search_request(self, intent: ResolvedIntent) -> DispatchResult:
        if self._search is None or not isinstance(intent, SearchIntent):
            return DispatchResult.failed(MSG_SEARCH_UNAVAILABLE, action=ActionId.SEARCH)
        outcome = self._search.play_matches(intent.query)
        return DispatchResult(
            success=outcome.success,
            message=outcome.message,
            action=ActionId.SEARCH,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _feedback(self, intent: ResolvedIntent) -> str:
        entry = self._table.get(intent.action)
        if entry is not None:
            return entry.feedback
        return intent.feedback

    def _log(self, result: DispatchResult, intent: ResolvedIntent | None) -> None:
        log_event({
            "ts_ms": time.time_ns() // 1_000_000,
            "event_type": "COMMAND_DISPATCHED",
            "session_id": self._session_id,
            "action": intent.action.value if intent is not None else None,
            "success": result.success,
            "noop": result.noop,
            "message": result.message,
        })
