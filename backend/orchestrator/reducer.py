"""
Pure recognition-session reducer.

(state, event) -> (new_state, commands)

Rules:
- Pure: no side effects, no IO, no clocks.
- Deterministic: output depends only on inputs.
- Total: every (state, event) pair is handled or explicitly ignored (logged).
"""

# The listen timer is cancelled on every exit from LISTENING (final, error,
# stop, end, reset, teardown). The end-ack timer is armed whenever capture is
# asked to stop and cancelled once capture ends. The controller only cancels
# timers when told.

from __future__ import annotations

from dataclasses import replace
from typing import Any

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
from orchestrator.enums.error_kind import ErrorKind
from orchestrator.enums.state import State
from orchestrator.errors import classify_capture_error, error_message
from orchestrator.events import (
    CaptureEnded,
    CaptureError,
    CaptureResult,
    CaptureStarted,
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
from orchestrator.state_dataclass import SessionState

from intents.resolver import IntentResolver


# =============================================================================
# Timer IDs
# =============================================================================

TIMER_LISTEN = "listen_timeout"
TIMER_END_ACK = "end_ack_timeout"

_DEFAULT_RESOLVER = IntentResolver()


# =============================================================================
# Small helpers
# =============================================================================

def _log(
    state: SessionState,
    event: Event,
    decision: str,
    details: dict[str, Any] | None = None,
) -> LogEvent:
    return LogEvent(
        event={
            "ts_ms": event.ts_ms,
            "state": state.state.value,
            "event_type": event.event_type.value,
            "decision": decision,
            "run_id": state.run_id,
            "details": details or {},
        }
    )


def _state_changed(
    old: SessionState,
    new: SessionState,
    event: Event,
    source: str,
) -> LogEvent:
    return _log(
        new,
        event,
        "state_changed",
        {
            "from_state": old.state.value,
            "to_state": new.state.value,
            "source": source,
        },
    )


def _ignore(
    state: SessionState, event: Event, reason: str
) -> tuple[SessionState, tuple[Command, ...]]:
    return state, (_log(state, event, "ignore", {"reason": reason}),)


def _with_error(state: SessionState, kind: ErrorKind) -> SessionState:
    return replace(state, error=kind, error_message=error_message(kind))


def _idle_defaults(state: SessionState) -> SessionState:
    """Fresh idle state that keeps run_id monotonic and the configuration."""
    return SessionState(
        run_id=state.run_id,
        listen_timeout_ms=state.listen_timeout_ms,
        end_ack_timeout_ms=state.end_ack_timeout_ms,
    )


def _arm_end_ack(state: SessionState) -> StartTimer:
    return StartTimer(
        timer_id=TIMER_END_ACK,
        duration_ms=state.end_ack_timeout_ms,
        run_id=state.run_id,
        timeout_event_type=EventType.END_ACK_TIMEOUT,
    )


# =============================================================================
# Caller control
# =============================================================================

def _on_start_requested(
    state: SessionState, event: StartRequested
) -> tuple[SessionState, tuple[Command, ...]]:
    if state.state is not State.IDLE:
        return _ignore(state, event, "session_already_active")

    if not event.capture_available:
        new_state = _with_error(state, ErrorKind.UNSUPPORTED)
        return new_state, (
            _log(new_state, event, "capture_unsupported"),
        )

    run_id = state.run_id + 1
    new_state = replace(
        _idle_defaults(state),
        state=State.LISTENING,
        run_id=run_id,
    )

    # Timer is armed before capture starts so a start failure can cancel it.
    return new_state, (
        StartTimer(
            timer_id=TIMER_LISTEN,
            duration_ms=state.listen_timeout_ms,
            run_id=run_id,
            timeout_event_type=EventType.LISTEN_TIMEOUT,
        ),
        StartCapture(run_id=run_id),
        _log(new_state, event, "idle_to_listening", {"timeout_ms": state.listen_timeout_ms}),
        _state_changed(state, new_state, event, "start"),
    )


def _on_stop_requested(
    state: SessionState, event: StopRequested
) -> tuple[SessionState, tuple[Command, ...]]:
    if state.state is State.IDLE:
        return _ignore(state, event, "not_listening")

    if state.stop_requested:
        return state, (
            CancelTimer(TIMER_LISTEN),
            _log(state, event, "ignore", {"reason": "stop_already_requested"}),
        )

    new_state = replace(state, stop_requested=True)
    # End-ack guard is armed before stopping so a stop failure can cancel it.
    return new_state, (
        CancelTimer(TIMER_LISTEN),
        _arm_end_ack(state),
        StopCapture(run_id=state.run_id),
        _log(new_state, event, "stop_requested"),
    )


def _on_reset_requested(
    state: SessionState, event: ResetRequested
) -> tuple[SessionState, tuple[Command, ...]]:
    new_state = _idle_defaults(state)
    commands: tuple[Command, ...] = (
        CancelTimer(TIMER_LISTEN),
        CancelTimer(TIMER_END_ACK),
    )
    if state.state is not State.IDLE:
        commands += (AbortCapture(run_id=state.run_id),)
    commands += (_log(new_state, event, "reset"),)
    if state.state is not State.IDLE:
        commands += (_state_changed(state, new_state, event, "reset"),)
    return new_state, commands


def _on_teardown(
    state: SessionState, event: Teardown
) -> tuple[SessionState, tuple[Command, ...]]:
    new_state = replace(_idle_defaults(state), disposed=True)
    return new_state, (
        CancelTimer(TIMER_LISTEN),
        CancelTimer(TIMER_END_ACK),
        AbortCapture(run_id=state.run_id),
        _log(new_state, event, "teardown", {"from_state": state.state.value}),
    )


# =============================================================================
# Capture events
# =============================================================================

def _on_capture_started(
    state: SessionState, event: CaptureStarted
) -> tuple[SessionState, tuple[Command, ...]]:
    if state.state is not State.LISTENING:
        return _ignore(state, event, "start_confirmation_outside_listening")
    return state, (_log(state, event, "capture_started"),)


def _on_capture_result(
    state: SessionState,
    event: CaptureResult,
    resolver: IntentResolver,
) -> tuple[SessionState, tuple[Command, ...]]:
    if state.state is State.FINALIZING:
        return _ignore(state, event, "utterance_already_finalized")
    if state.state is not State.LISTENING:
        return _ignore(state, event, "result_outside_listening")

    if not event.is_final:
        new_state = replace(state, transcript=event.text)
        return new_state, (
            _log(new_state, event, "interim_result", {"transcript": event.text}),
        )

    intent = resolver.resolve(event.text)
    new_state = replace(
        state,
        state=State.FINALIZING,
        transcript=event.text,
        last_intent=intent,
    )

    commands: tuple[Command, ...] = (CancelTimer(TIMER_LISTEN),)
    if intent is not None:
        commands += (DeliverIntent(run_id=state.run_id, intent=intent),)

    return new_state, commands + (
        _log(
            new_state,
            event,
            "final_result",
            {
                "transcript": event.text,
                "action": intent.action.value if intent is not None else None,
            },
        ),
        _state_changed(state, new_state, event, "final_result"),
    )


def _on_capture_error(
    state: SessionState, event: CaptureError
) -> tuple[SessionState, tuple[Command, ...]]:
    kind = classify_capture_error(event.code)
    if kind is None:
        return _ignore(state, event, "aborted_is_expected")

    if state.state is State.IDLE:
        return _ignore(state, event, "error_outside_session")
    if state.state is State.ERRORING:
        return _ignore(state, event, "already_erroring")
    if state.state is State.TIMING_OUT:
        # The timeout stays the reported cause.
        return _ignore(state, event, "error_while_timing_out")

    new_state = replace(_with_error(state, kind), state=State.ERRORING)
    return new_state, (
        CancelTimer(TIMER_LISTEN),
        _log(new_state, event, "capture_error", {"code": event.code, "error": kind.value}),
        _state_changed(state, new_state, event, "capture_error"),
    )


def _on_capture_ended(
    state: SessionState, event: CaptureEnded
) -> tuple[SessionState, tuple[Command, ...]]:
    if state.state is State.IDLE:
        return _ignore(state, event, "end_outside_session")

    # Keep the outcome of the session visible; clear the control flags.
    new_state = replace(state, state=State.IDLE, stop_requested=False)
    return new_state, (
        CancelTimer(TIMER_LISTEN),
        CancelTimer(TIMER_END_ACK),
        _log(new_state, event, "session_ended"),
        _state_changed(state, new_state, event, "capture_ended"),
    )


def _on_capture_start_failed(
    state: SessionState, event: CaptureStartFailed
) -> tuple[SessionState, tuple[Command, ...]]:
    if event.run_id != state.run_id or state.state is not State.LISTENING:
        return _ignore(state, event, "stale_start_failure")

    new_state = replace(
        _with_error(state, ErrorKind.START_FAILED),
        state=State.IDLE,
    )
    return new_state, (
        CancelTimer(TIMER_LISTEN),
        _log(new_state, event, "start_failed", {"reason": event.reason}),
        _state_changed(state, new_state, event, "start_failed"),
    )


def _on_capture_stop_failed(
    state: SessionState, event: CaptureStopFailed
) -> tuple[SessionState, tuple[Command, ...]]:
    if event.run_id != state.run_id or state.state is State.IDLE:
        return _ignore(state, event, "stale_stop_failure")

    failed = state if state.error is not None else _with_error(state, ErrorKind.CAPTURE_ERROR)
    new_state = replace(failed, state=State.IDLE, stop_requested=False)
    return new_state, (
        CancelTimer(TIMER_LISTEN),
        CancelTimer(TIMER_END_ACK),
        AbortCapture(run_id=state.run_id),
        _log(new_state, event, "stop_failed", {"reason": event.reason}),
        _state_changed(state, new_state, event, "stop_failed"),
    )


# =============================================================================
# Timers
# =============================================================================

def _on_listen_timeout(
    state: SessionState, event: ListenTimeout
) -> tuple[SessionState, tuple[Command, ...]]:
    if event.run_id != state.run_id:
        return _ignore(state, event, "stale_timer")
    if state.state is not State.LISTENING:
        return _ignore(state, event, "timer_after_listening")

    new_state = replace(
        _with_error(state, ErrorKind.TIMEOUT),
        state=State.TIMING_OUT,
        stop_requested=True,
    )
    return new_state, (
        _arm_end_ack(state),
        StopCapture(run_id=state.run_id),
        _log(new_state, event, "listen_timeout", {"timeout_ms": state.listen_timeout_ms}),
        _state_changed(state, new_state, event, "listen_timeout"),
    )


def _on_end_ack_timeout(
    state: SessionState, event: EndAckTimeout
) -> tuple[SessionState, tuple[Command, ...]]:
    if event.run_id != state.run_id:
        return _ignore(state, event, "stale_timer")
    if state.state is State.IDLE:
        return _ignore(state, event, "end_already_confirmed")

    # Keep the outcome of the session visible; capture is abandoned.
    new_state = replace(state, state=State.IDLE, stop_requested=False)
    return new_state, (
        AbortCapture(run_id=state.run_id),
        _log(new_state, event, "end_not_confirmed", {"timeout_ms": state.end_ack_timeout_ms}),
        _state_changed(state, new_state, event, "end_ack_timeout"),
    )


# =============================================================================
# Entry point
# =============================================================================

def reduce(
    state: SessionState,
    event: Event,
    *,
    resolver: IntentResolver = _DEFAULT_RESOLVER,
) -> tuple[SessionState, tuple[Command, ...]]:
    """
    Apply one event to the session state.

    The resolver is a pure function of the transcript, so passing it in
    keeps the reducer deterministic.
    """
    if state.disposed:
        return _ignore(state, event, "controller_disposed")

    if isinstance(event, StartRequested):
        return _on_start_requested(state, event)
    if isinstance(event, StopRequested):
        return _on_stop_requested(state, event)
    if isinstance(event, ResetRequested):
        return _on_reset_requested(state, event)
    if isinstance(event, Teardown):
        return _on_teardown(state, event)

    if isinstance(event, CaptureStarted):
        return _on_capture_started(state, event)
    if isinstance(event, CaptureResult):
        return _on_capture_result(state, event, resolver)
    if isinstance(event, CaptureError):
        return _on_capture_error(state, event)
    if isinstance(event, CaptureEnded):
        return _on_capture_ended(state, event)
    if isinstance(event, CaptureStartFailed):
        return _on_capture_start_failed(state, event)
    if isinstance(event, CaptureStopFailed):
        return _on_capture_stop_failed(state, event)

    if isinstance(event, ListenTimeout):
        return _on_listen_timeout(state, event)
    if isinstance(event, EndAckTimeout):
        return _on_end_ack_timeout(state, event)

    return _ignore(state, event, "unhandled_event_type")
