"""
Session gateway.

Responsibilities:
- Owns VoiceSession lifecycle
- Tracks connection_status independently of recognition state
- Routes inbound JSON messages -> controller calls / capture events
- Wires the per-session collaborators (capture relay, controller,
  dispatcher, playback engine, search)
- Turns dispatch outcomes and state changes into outbound messages
- Hands timer-driven output to the transport via next_pushed()

NOT responsible for:
- Any state machine logic (reducer)
- Intent resolution
- Playback semantics (dispatcher / engine)
"""

from __future__ import annotations

import json
import time
from dataclasses import dataclass
from typing import Any, TYPE_CHECKING
from uuid import uuid4

from adapters.capture.base import EventSink
from adapters.capture.client_relay import CLIENT_CAPTURE_MESSAGES, ClientRelayCapture
from adapters.playback.in_memory import InMemoryPlaybackEngine, Song
from constants import SESSION_ID_HEX_LEN, SESSION_ID_PREFIX
from dispatch.dispatcher import CommandDispatcher
from intents.command_table import supported_commands
from intents.resolved import ResolvedIntent, intent_to_dict
from observability.logger import log_event
from orchestrator.controller import SessionController
from orchestrator.state_dataclass import SessionState
from services.search_service import DEMO_CATALOG, SongSearchService
from session.connection_status import ConnectionStatus
from session.voice_session import VoiceSession

if TYPE_CHECKING:
    from config import AppConfig


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------

def _now_ms() -> int:
    return time.time_ns() // 1_000_000


def _new_session_id() -> str:
    return f"{SESSION_ID_PREFIX}{uuid4().hex[:SESSION_ID_HEX_LEN]}"


# ------------------------------------------------------------------
# Gateway result
# ------------------------------------------------------------------

@dataclass(frozen=True)
class GatewayResult:
    """
    Return value for gateway boundary methods.

    outbound_json:
        JSON messages to send to the client, in order
    """
    outbound_json: tuple[dict[str, Any], ...] = ()


# ------------------------------------------------------------------
# SessionGateway
# ------------------------------------------------------------------

class SessionGateway:
    """One gateway == one WebSocket connection == one voice session."""

    def __init__(
        self,
        *,
        config: AppConfig,
        catalog: tuple[Song, ...] = DEMO_CATALOG,
        speech_supported: bool = True,
    ) -> None:
        self._config = config
        self._catalog = catalog
        self._speech_supported = speech_supported
        self.session: VoiceSession | None = None

    async def on_ws_connect(self) -> GatewayResult:
        """Called when a WebSocket connection is established."""
        session_id = _new_session_id()

        self.session = VoiceSession(session_id=session_id)
        self.session.connection_status = ConnectionStatus.UP

        engine = InMemoryPlaybackEngine()
        search = SongSearchService(
            self._catalog,
            engine,
            limit=self._config.search_result_limit,
            session_id=session_id,
        )
        self.session.engine = engine
        self.session.dispatcher = CommandDispatcher(
            engine,
            search=search,
            volume_step=self._config.volume_step,
            session_id=session_id,
        )

        controller = SessionController(
            capture_factory=self._capture_factory,
            on_command=self._on_command,
            listen_timeout_ms=self._config.listen_timeout_ms,
            end_ack_timeout_ms=self._config.end_ack_timeout_ms,
            session_id=session_id,
            on_state_change=self._on_state_change,
        )
        # Must be attached after the dispatcher
        self.session.attach_controller(controller)

        log_event({
            "ts_ms": _now_ms(),
            "event_type": "WS_CONNECTED",
            **self.session.log_context(),
            "speech_supported": controller.is_supported,
        })

        init_msg: dict[str, Any] = {
            "type": "SESSION_INIT",
            "session_id": session_id,
            "speech_supported": controller.is_supported,
            "commands": supported_commands(),
            "voice": controller.state.to_dict(),
            "player": engine.snapshot(),
        }

        return GatewayResult(outbound_json=(init_msg,) + self._drain_control_out())

    async def on_ws_disconnect(self, reason: str | None = None) -> GatewayResult:
        """Called when the WebSocket disconnects."""
        if self.session is None:
            log_event({
                "ts_ms": _now_ms(),
                "event_type": "WS_DISCONNECT_WITHOUT_SESSION",
                "reason": reason,
            })
            return GatewayResult()

        controller = self.session.controller
        if controller is not None:
            await controller.shutdown()

        self.session.connection_status = ConnectionStatus.DOWN

        log_event({
            "ts_ms": _now_ms(),
            "event_type": "WS_DISCONNECTED",
            **self.session.log_context(),
            "reason": reason,
        })

        return GatewayResult(outbound_json=self._drain_control_out())

    async def on_json_message(self, payload: str) -> GatewayResult:
        """Route inbound JSON to the controller or the capture relay."""
        if self.session is None:
            log_event({
                "ts_ms": _now_ms(),
                "event_type": "MESSAGE_WITHOUT_SESSION",
                "payload_preview": payload[:100],
            })
            return GatewayResult()

        try:
            data = json.loads(payload)
        except json.JSONDecodeError as e:
            log_event({
                "ts_ms": _now_ms(),
                "event_type": "JSON_DECODE_ERROR",
                "session_id": self.session.session_id,
                "error": str(e),
                "payload_preview": payload[:100],
            })
            return GatewayResult()

        if not isinstance(data, dict):
            log_event({
                "ts_ms": _now_ms(),
                "event_type": "MALFORMED_MESSAGE",
                "session_id": self.session.session_id,
                "payload_preview": payload[:100],
            })
            return GatewayResult()

        controller = self.session.controller
        assert controller is not None, "Controller must exist before messages"

        msg_type = data.get("type")

        if msg_type == "VOICE_START":
            await controller.start()
        elif msg_type == "VOICE_STOP":
            await controller.stop()
        elif msg_type == "VOICE_RESET":
            await controller.reset()
        elif msg_type in CLIENT_CAPTURE_MESSAGES:
            await self._relay_capture_message(data)
        else:
            log_event({
                "ts_ms": _now_ms(),
                "event_type": "UNKNOWN_MESSAGE_TYPE",
                "msg_type": msg_type,
                "session_id": self.session.session_id,
            })
            return GatewayResult()

        return GatewayResult(outbound_json=self._drain_control_out())

    async def next_pushed(self) -> GatewayResult:
        """
        Wait for output produced outside a client request and drain it.

        Timer expiry (listen timeout, end-ack guard) queues capture control
        and VOICE_STATE messages with no inbound message to carry them.
        The result is empty when a request handler drained the queue first.
        """
        if self.session is None:
            return GatewayResult()
        await self.session.wait_control()
        return GatewayResult(outbound_json=self._drain_control_out())

    # ------------------------------------------------------------------
    # Capture relay
    # ------------------------------------------------------------------

    def _capture_factory(self, emit_event: EventSink) -> ClientRelayCapture | None:
        """Capability provider handed to the controller."""
        assert self.session is not None
        if not self._speech_supported:
            self.session.attach_capture(None)
            return None

        capture = ClientRelayCapture(
            emit_event=emit_event,
            send_control=self.session.enqueue_control,
            session_id=self.session.session_id,
        )
        self.session.attach_capture(capture)
        return capture

    async def _relay_capture_message(self, data: dict[str, Any]) -> None:
        assert self.session is not None
        capture = self.session.capture
        accepted = capture is not None and await capture.on_client_message(data)
        if not accepted:
            log_event({
                "ts_ms": _now_ms(),
                "event_type": "CAPTURE_MESSAGE_DROPPED",
                "session_id": self.session.session_id,
                "msg_type": data.get("type"),
                "capture_id": data.get("capture_id"),
                "speech_supported": capture is not None,
            })

    # ------------------------------------------------------------------
    # Controller callbacks
    # ------------------------------------------------------------------

    async def _on_command(self, intent: ResolvedIntent) -> None:
        """Dispatch a finalized intent and report the outcome."""
        assert self.session is not None
        dispatcher = self.session.dispatcher
        engine = self.session.engine
        assert dispatcher is not None and engine is not None

        result = dispatcher.execute(intent)

        self.session.enqueue_control({
            "type": "COMMAND_RESULT",
            "ts_ms": _now_ms(),
            "intent": intent_to_dict(intent),
            "result": result.to_dict(),
            "player": engine.snapshot(),
        })

    def _on_state_change(self, state: SessionState) -> None:
        assert self.session is not None
        self.session.enqueue_control({
            "type": "VOICE_STATE",
            "ts_ms": _now_ms(),
            "voice": state.to_dict(),
        })

    def _drain_control_out(self) -> tuple[dict[str, Any], ...]:
        if self.session is None:
            return ()
        return self.session.drain_control()
