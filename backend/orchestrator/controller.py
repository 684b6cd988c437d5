"""
Session controller: runtime shell for one recognition session.

Responsibilities:
- Own the authoritative SessionState
- Call the pure reducer
- Execute commands with side effects (capture calls, timers, intent
  delivery, logging)
- Convert timer expiry and capture start/stop failures into events

Non-responsibilities:
- No transition logic (reducer only)
- No playback (the command callback owns dispatch)
"""

from __future__ import annotations

import asyncio
import time
from typing import Awaitable, Callable

from adapters.capture.base import (
    CaptureAlreadyStartedError,
    CaptureFactory,
    SpeechCapture,
)
from constants import END_ACK_TIMEOUT_MS_DEFAULT, LISTEN_TIMEOUT_MS_DEFAULT
from intents.resolved import ResolvedIntent
from intents.resolver import IntentResolver
from observability.logger import log_event
from orchestrator.commands import (
    AbortCapture,
    CancelTimer,
    Command,
    DeliverIntent,
    LogEvent,
    StartCapture,
    StartTimer,
    StopCapture,
)
from orchestrator.events import (
    CaptureStartFailed,
    CaptureStopFailed,
    EndAckTimeout,
    Event,
    EventType,
    ListenTimeout,
    ResetRequested,
    StartRequested,
    StopRequested,
    Teardown,
)
from orchestrator.reducer import reduce
from orchestrator.state_dataclass import SessionState


CommandCallback = Callable[[ResolvedIntent], Awaitable[None]]
StateListener = Callable[[SessionState], None]

_TIMER_EVENTS: dict[EventType, type[ListenTimeout] | type[EndAckTimeout]] = {
    EventType.LISTEN_TIMEOUT: ListenTimeout,
    EventType.END_ACK_TIMEOUT: EndAckTimeout,
}


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


class SessionController:
    """
    Runtime boundary for a single recognition session.

    Architectural role:
    The controller bridges the pure reducer and the imperative world
    (capture collaborator, timers, callback, logging).

    Guarantees:
    - Reducer is called exactly once per incoming event
    - State is swapped in before any side effect executes
    - Commands execute in reducer-emitted order
    - Timers re-enter through handle_event (single entry point)
    - Capture errors end up in SessionState.error; nothing is raised past
      this boundary except exceptions from the command callback itself
    """

    def __init__(
        self,
        *,
        capture_factory: CaptureFactory,
        on_command: CommandCallback | None = None,
        listen_timeout_ms: int = LISTEN_TIMEOUT_MS_DEFAULT,
        end_ack_timeout_ms: int = END_ACK_TIMEOUT_MS_DEFAULT,
        resolver: IntentResolver | None = None,
        session_id: str | None = None,
        on_state_change: StateListener | None = None,
    ) -> None:
        self._state = SessionState(
            listen_timeout_ms=listen_timeout_ms,
            end_ack_timeout_ms=end_ack_timeout_ms,
        )
        self._on_command = on_command
        self._on_state_change = on_state_change
        self._resolver = resolver or IntentResolver()
        self._session_id = session_id
        self._timers: dict[str, asyncio.Task[None]] = {}

        # Capability detection happens once, at construction
        self._capture: SpeechCapture | None = capture_factory(self.handle_event)

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        """
        Current immutable session state.

        Only the reducer produces new states; callers must treat the
        returned snapshot as read-only.
        """
        return self._state

    @property
    def is_supported(self) -> bool:
        return self._capture is not None

    @property
    def active_timer_ids(self) -> frozenset[str]:
        return frozenset(self._timers)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Begin a session. No-op while a session is already active."""
        await self.handle_event(
            StartRequested(
                event_type=EventType.START_REQUESTED,
                ts_ms=_now_ms(),
                capture_available=self.is_supported,
            )
        )

    async def stop(self) -> None:
        """Request stop; the session ends when capture confirms end."""
        await self.handle_event(
            StopRequested(event_type=EventType.STOP_REQUESTED, ts_ms=_now_ms())
        )

    async def reset(self) -> None:
        """Abort any active capture and return to idle defaults."""
        await self.handle_event(
            ResetRequested(event_type=EventType.RESET_REQUESTED, ts_ms=_now_ms())
        )

    async def shutdown(self) -> None:
        """
        Dispose of the controller.

        Cancels every timer and asks the collaborator to abort. Events
        arriving afterwards are ignored.
        """
        await self.handle_event(
            Teardown(event_type=EventType.TEARDOWN, ts_ms=_now_ms())
        )

        for timer_id in list(self._timers):
            self._cancel_timer(timer_id)

    async def handle_event(self, event: Event) -> None:
        """
        Process a single event through the reducer.

        All event sources converge here: caller control, the capture
        collaborator and timers.
        """
        prev_state = self._state
        new_state, commands = reduce(self._state, event, resolver=self._resolver)
        self._state = new_state

        for cmd in commands:
            await self._execute_command(cmd)

        if self._on_state_change is not None and new_state != prev_state:
            self._on_state_change(self._state)

    # ------------------------------------------------------------------
    # Command execution (side effects)
    # ------------------------------------------------------------------

    async def _execute_command(self, cmd: Command) -> None:
        if isinstance(cmd, LogEvent):
            log_event({**cmd.event, "session_id": self._session_id})

        elif isinstance(cmd, StartTimer):
            self._start_timer(
                timer_id=cmd.timer_id,
                duration_ms=cmd.duration_ms,
                run_id=cmd.run_id,
                event_type=cmd.timeout_event_type,
            )

        elif isinstance(cmd, CancelTimer):
            self._cancel_timer(cmd.timer_id)

        elif isinstance(cmd, StartCapture):
            await self._start_capture(cmd.run_id)

        elif isinstance(cmd, StopCapture):
            await self._stop_capture(cmd.run_id)

        elif isinstance(cmd, AbortCapture):
            await self._abort_capture(cmd.run_id)

        elif isinstance(cmd, DeliverIntent):
            if self._on_command is not None:
                await self._on_command(cmd.intent)

        else:
            log_event({
                "ts_ms": _now_ms(),
                "event_type": "UNHANDLED_COMMAND",
                "session_id": self._session_id,
                "command_type": cmd.command_type.value,
            })

    async def _start_capture(self, run_id: int) -> None:
        assert self._capture is not None, "capture collaborator missing"
        try:
            await self._capture.start()
        except CaptureAlreadyStartedError:
            # Already capturing is not a failure; the session stays LISTENING.
            log_event({
                "ts_ms": _now_ms(),
                "event_type": "CAPTURE_ALREADY_STARTED",
                "session_id": self._session_id,
                "run_id": run_id,
            })
        except Exception as exc:  # pylint: disable=broad-exception-caught
            await self.handle_event(
                CaptureStartFailed(
                    event_type=EventType.CAPTURE_START_FAILED,
                    ts_ms=_now_ms(),
                    run_id=run_id,
                    reason=f"{type(exc).__name__}: {exc}",
                )
            )

    async def _stop_capture(self, run_id: int) -> None:
        assert self._capture is not None, "capture collaborator missing"
        try:
            await self._capture.stop()
        except Exception as exc:  # pylint: disable=broad-exception-caught
            log_event({
                "ts_ms": _now_ms(),
                "event_type": "CAPTURE_STOP_FAILED",
                "session_id": self._session_id,
                "run_id": run_id,
                "error": str(exc),
            })
            await self.handle_event(
                CaptureStopFailed(
                    event_type=EventType.CAPTURE_STOP_FAILED,
                    ts_ms=_now_ms(),
                    run_id=run_id,
                    reason=f"{type(exc).__name__}: {exc}",
                )
            )

    async def _abort_capture(self, run_id: int) -> None:
        if self._capture is None:
            return
        try:
            await self._capture.abort()
        except Exception as exc:  # pylint: disable=broad-exception-caught
            # Best-effort cleanup
            log_event({
                "ts_ms": _now_ms(),
                "event_type": "CAPTURE_ABORT_FAILED",
                "session_id": self._session_id,
                "run_id": run_id,
                "error": str(exc),
            })

    # ------------------------------------------------------------------
    # Timers
    # ------------------------------------------------------------------

    def _start_timer(
        self,
        *,
        timer_id: str,
        duration_ms: int,
        run_id: int,
        event_type: EventType,
    ) -> None:
        """Start or replace a timer that injects its timeout event for run_id."""
        self._cancel_timer(timer_id)
        timer_event_cls = _TIMER_EVENTS[event_type]

        async def _timer_task() -> None:
            try:
                await asyncio.sleep(duration_ms / 1000.0)
            except asyncio.CancelledError:
                return

            # Fired timers are forgotten before re-entry so a CancelTimer
            # emitted during handling never cancels this running task.
            if self._timers.get(timer_id) is asyncio.current_task():
                del self._timers[timer_id]

            await self.handle_event(
                timer_event_cls(
                    event_type=event_type,
                    ts_ms=_now_ms(),
                    run_id=run_id,
                )
            )

        self._timers[timer_id] = asyncio.create_task(_timer_task())

    def _cancel_timer(self, timer_id: str) -> None:
        """Cancel an in-flight timer if it exists. Idempotent."""
        task = self._timers.pop(timer_id, None)
        if task is not None and not task.done():
            task.cancel()
