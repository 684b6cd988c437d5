"""
Connection status tracking for voice sessions.

Connection lifecycle is tracked separately from the recognition state
machine: a session can be IDLE with either status.

This is pure data owned by SessionGateway, not by SessionState.
"""
from enum import Enum


class ConnectionStatus(Enum):
    DOWN = "DOWN"  # Not connected / torn down
    UP = "UP"      # Active WebSocket connection
