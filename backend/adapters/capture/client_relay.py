"""
Client-relayed speech capture.

The acoustic recognizer runs in the client (browser speech recognition).
This adapter bridges it to the controller:

- start/stop/abort become CAPTURE_START / CAPTURE_STOP / CAPTURE_ABORT
  control messages queued for the client, tagged with the capture_id of
  the relayed capture
- CAPTURE_* messages received from the client become capture events
  emitted into the controller; messages echoing an older capture_id are
  stale and rejected

No timers, no intent logic, no state machine decisions.
"""

from __future__ import annotations

import time
from typing import Any, Callable

from adapters.capture.base import CaptureAlreadyStartedError, EventSink, SpeechCapture
from orchestrator.events import (
    CaptureEnded,
    CaptureError,
    CaptureResult,
    CaptureStarted,
    Event,
    EventType,
)


ControlSink = Callable[[dict[str, Any]], None]

# Client -> server message types handled here
CLIENT_CAPTURE_MESSAGES = frozenset({
    "CAPTURE_STARTED",
    "CAPTURE_RESULT",
    "CAPTURE_ERROR",
    "CAPTURE_ENDED",
})


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


class ClientRelayCapture(SpeechCapture):
    """
    Speech capture performed by the connected client.

    _active tracks whether the client has been asked to capture and has not
    yet reported CAPTURE_ENDED or been aborted; a second start() in that
    window raises CaptureAlreadyStartedError, as the browser recognizer
    would.

    _capture_id increases with every start. Clients echo it so late
    messages from an aborted capture cannot reach the next one.
    """

    def __init__(
        self,
        *,
        emit_event: EventSink,
        send_control: ControlSink,
        session_id: str,
    ) -> None:
        self._emit_event = emit_event
        self._send_control = send_control
        self._session_id = session_id
        self._active = False
        self._capture_id = 0

    @property
    def active(self) -> bool:
        return self._active

    @property
    def capture_id(self) -> int:
        return self._capture_id

    # ------------------------------------------------------------------
    # SpeechCapture
    # ------------------------------------------------------------------

    async def start(self) -> None:
        if self._active:
            raise CaptureAlreadyStartedError("client capture already running")
        self._active = True
        self._capture_id += 1
        self._send_control(self._control("CAPTURE_START"))

    async def stop(self) -> None:
        if not self._active:
            return
        self._send_control(self._control("CAPTURE_STOP"))

    async def abort(self) -> None:
        if not self._active:
            return
        # Aborted captures discard results; a late end must not block a new start.
        self._active = False
        self._send_control(self._control("CAPTURE_ABORT"))

    # ------------------------------------------------------------------
    # Inbound (called by the gateway)
    # ------------------------------------------------------------------

    async def on_client_message(self, data: dict[str, Any]) -> bool:
        """
        Translate one client message into a capture event.

        Returns False when the message is not a capture message, is
        malformed or belongs to an earlier capture; the caller logs and
        drops it. Messages without a capture_id are attributed to the
        current capture.
        """
        capture_id = data.get("capture_id")
        if capture_id is not None and capture_id != self._capture_id:
            return False

        event = self._to_event(data)
        if event is None:
            return False

        if isinstance(event, CaptureEnded):
            self._active = False

        await self._emit_event(event)
        return True

    def _control(self, msg_type: str) -> dict[str, Any]:
        return {"type": msg_type, "ts_ms": _now_ms(), "capture_id": self._capture_id}

    def _to_event(self, data: dict[str, Any]) -> Event | None:
        msg_type = data.get("type")
        ts_ms = data.get("ts_ms", _now_ms())

        if msg_type == "CAPTURE_STARTED":
            return CaptureStarted(event_type=EventType.CAPTURE_STARTED, ts_ms=ts_ms)

        if msg_type == "CAPTURE_RESULT":
            text = data.get("text")
            if not isinstance(text, str):
                return None
            return CaptureResult(
                event_type=EventType.CAPTURE_RESULT,
                ts_ms=ts_ms,
                text=text,
                is_final=bool(data.get("is_final", False)),
            )

        if msg_type == "CAPTURE_ERROR":
            return CaptureError(
                event_type=EventType.CAPTURE_ERROR,
                ts_ms=ts_ms,
                code=str(data.get("error", "")),
            )

        if msg_type == "CAPTURE_ENDED":
            return CaptureEnded(event_type=EventType.CAPTURE_ENDED, ts_ms=ts_ms)

        return None
