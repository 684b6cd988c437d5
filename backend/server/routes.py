"""
Route registration for the voice control API.

Responsibilities:
- Define HTTP and WebSocket endpoints
- Wire gateway to WebSocket lifecycle
- Push gateway output produced by timers, outside any client request
- Pull dependencies from app.state
"""

from __future__ import annotations

import asyncio
import json
from typing import Any

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from pydantic import BaseModel

from intents.command_table import supported_commands
from intents.resolved import intent_to_dict
from intents.resolver import resolve
from observability.logger import log_event
from session.gateway import GatewayResult, SessionGateway


class ResolveRequest(BaseModel):
    transcript: str | None = None


def register_routes(app: FastAPI) -> None:
    """Register all routes on the FastAPI app."""
    @app.get("/health")
    async def health() -> dict[str, str]: # pyright: ignore[reportUnusedFunction]
        return {"status": "ok"}

    @app.get("/commands")
    async def commands() -> list[dict[str, Any]]: # pyright: ignore[reportUnusedFunction]
        return supported_commands()

    @app.post("/resolve")
    async def resolve_transcript(body: ResolveRequest) -> dict[str, Any] | None: # pyright: ignore[reportUnusedFunction]
        return intent_to_dict(resolve(body.transcript))

    @app.websocket("/ws")
    async def websocket_endpoint(ws: WebSocket) -> None: # pyright: ignore[reportUnusedFunction]
        await ws.accept()

        # Clients without speech recognition connect with ?speech=0
        speech_supported = ws.query_params.get("speech", "1") != "0"

        gateway = SessionGateway(
            config=app.state.config,
            catalog=app.state.catalog,
            speech_supported=speech_supported,
        )
        # Request replies and pushed output share the socket; sends are serialized.
        send_lock = asyncio.Lock()

        try:
            result = await gateway.on_ws_connect()
            await _flush_gateway_result(ws, result, send_lock)

            pusher = asyncio.create_task(_push_gateway_output(ws, gateway, send_lock))
            try:
                while True:
                    msg = await ws.receive()

                    if msg["type"] == "websocket.disconnect":
                        raise WebSocketDisconnect()

                    if msg.get("text") is not None:
                        result = await gateway.on_json_message(msg["text"])
                        await _flush_gateway_result(ws, result, send_lock)

                    elif msg.get("bytes") is not None:
                        log_event({
                            "event_type": "BINARY_MESSAGE_IGNORED",
                            "session_id": gateway.session.session_id if gateway.session else None,
                            "payload_len": len(msg["bytes"]),
                        })
            finally:
                pusher.cancel()

        except WebSocketDisconnect:
            await gateway.on_ws_disconnect(reason="client_disconnect")

        except Exception as exc:  # pylint: disable=broad-exception-caught
            log_event({
                "event_type": "WS_FATAL_ERROR",
                "session_id": gateway.session.session_id if gateway.session else None,
                "exception": type(exc).__name__,
                "message": str(exc),
            })
            await gateway.on_ws_disconnect(reason="server_error")


async def _flush_gateway_result(
    ws: WebSocket,
    result: GatewayResult,
    send_lock: asyncio.Lock,
) -> None:
    async with send_lock:
        for msg in result.outbound_json:
            await ws.send_text(json.dumps(msg))


async def _push_gateway_output(
    ws: WebSocket,
    gateway: SessionGateway,
    send_lock: asyncio.Lock,
) -> None:
    """Send timer-driven output as soon as the session queues it."""
    while True:
        result = await gateway.next_pushed()
        try:
            await _flush_gateway_result(ws, result, send_lock)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            # The receive loop sees the disconnect and tears the session down.
            log_event({
                "event_type": "WS_PUSH_FAILED",
                "session_id": gateway.session.session_id if gateway.session else None,
                "exception": type(exc).__name__,
                "message": str(exc),
            })
            return
