"""
Voice session container.

- Owns the per-connection collaborators (controller, dispatcher, engine)
- Owns connection status (mutable, gateway-controlled)
- Owned and mutated by SessionGateway
- NOT a state machine
- Contains no orchestration logic
"""

from __future__ import annotations

import asyncio
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Any

from adapters.capture.client_relay import ClientRelayCapture
from adapters.playback.in_memory import InMemoryPlaybackEngine
from dispatch.dispatcher import CommandDispatcher
from orchestrator.controller import SessionController
from session.connection_status import ConnectionStatus


@dataclass
class VoiceSession:
    """Mutable runtime container for a single voice-control session."""

    # ------------------------------------------------------------------
    # Identity / lifecycle
    # ------------------------------------------------------------------

    session_id: str
    created_at: float = field(default_factory=time.time)

    # ------------------------------------------------------------------
    # Connection / gateway-controlled state
    # ------------------------------------------------------------------

    connection_status: ConnectionStatus = ConnectionStatus.DOWN

    # ------------------------------------------------------------------
    # Collaborators (wired by SessionGateway)
    # ------------------------------------------------------------------

    engine: InMemoryPlaybackEngine | None = None
    dispatcher: CommandDispatcher | None = None
    capture: ClientRelayCapture | None = None
    controller: SessionController | None = None

    def __post_init__(self) -> None:
        self._control_out: deque[dict[str, Any]] = deque()
        self._control_ready = asyncio.Event()

    # ------------------------------------------------------------------
    # Wiring helpers (called by SessionGateway)
    # ------------------------------------------------------------------

    def attach_capture(self, capture: ClientRelayCapture | None) -> None:
        """Attach the client-relayed capture adapter (None if unsupported)."""
        self.capture = capture

    def attach_controller(self, controller: SessionController) -> None:
        """
        Attach the recognition controller.

        Must be called after the dispatcher is attached; the controller's
        command callback dispatches through it.
        """
        self.controller = controller

    # ------------------------------------------------------------------
    # Observability helpers (read-only)
    # ------------------------------------------------------------------

    def log_context(self) -> dict[str, Any]:
        """Standard logging context for gateway enrichment."""
        return {
            "session_id": self.session_id,
            "connection_status": self.connection_status.value,
        }

    # ------------------------------------------------------------------
    # Outbound control queue
    # ------------------------------------------------------------------

    def enqueue_control(self, msg: dict[str, Any]) -> None:
        """
        Enqueue a message for gateway delivery to the client.

        Messages are buffered in FIFO order and later retrieved via
        drain_control(). Wakes any wait_control() caller.
        """
        self._control_out.append(msg)
        self._control_ready.set()

    def drain_control(self) -> tuple[dict[str, Any], ...]:
        """
        Drain all pending messages in FIFO order.

        Returns an empty tuple if nothing is pending; the queue is empty
        afterwards.
        """
        self._control_ready.clear()
        if not self._control_out:
            return ()
        out = tuple(self._control_out)
        self._control_out.clear()
        return out

    async def wait_control(self) -> None:
        """Block until at least one message has been enqueued."""
        await self._control_ready.wait()
