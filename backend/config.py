"""
Application configuration.

Responsibilities:
- Load deployment-specific configuration
- Read environment variables
- Provide a typed, immutable config object

Non-responsibilities:
- No session logic
- No behavioral constants (see constants.py)
- No runtime mutation
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from constants import (
    END_ACK_TIMEOUT_MS_DEFAULT,
    LISTEN_TIMEOUT_MS_DEFAULT,
    SEARCH_RESULT_LIMIT_DEFAULT,
    VOLUME_STEP_DEFAULT,
)


@dataclass(frozen=True)
class AppConfig:
    """
    Immutable application configuration.

    Constructed once at process startup.
    Passed downward to the gateway, which hands the relevant pieces to
    the controller, dispatcher and search service.
    """

    # ------------------------------------------------------------------
    # Environment
    # ------------------------------------------------------------------

    env: str = "dev"
    log_level: str = "INFO"

    # ------------------------------------------------------------------
    # Recognition session
    # ------------------------------------------------------------------

    listen_timeout_ms: int = LISTEN_TIMEOUT_MS_DEFAULT
    end_ack_timeout_ms: int = END_ACK_TIMEOUT_MS_DEFAULT

    # ------------------------------------------------------------------
    # Dispatch / playback
    # ------------------------------------------------------------------

    volume_step: float = VOLUME_STEP_DEFAULT
    search_result_limit: int = SEARCH_RESULT_LIMIT_DEFAULT
    song_catalog_path: str | None = None

    # ------------------------------------------------------------------
    # Observability
    # ------------------------------------------------------------------

    enable_json_logs: bool = True

    # ------------------------------------------------------------------
    # Server
    # ------------------------------------------------------------------

    host: str = "0.0.0.0"
    port: int = 8000

    # ------------------------------------------------------------------
    # Factory
    # ------------------------------------------------------------------

    @staticmethod
    def load_from_env() -> AppConfig:
        """
        Load configuration from environment variables.

        Raises:
            ValueError if a numeric variable cannot be parsed.
        """
        return AppConfig(
            env=os.environ.get("ENV", "dev"),
            log_level=os.environ.get("LOG_LEVEL", "INFO"),

            listen_timeout_ms=int(
                os.environ.get("LISTEN_TIMEOUT_MS", str(LISTEN_TIMEOUT_MS_DEFAULT))
            ),
            end_ack_timeout_ms=int(
                os.environ.get("END_ACK_TIMEOUT_MS", str(END_ACK_TIMEOUT_MS_DEFAULT))
            ),

            volume_step=float(
                os.environ.get("VOLUME_STEP", str(VOLUME_STEP_DEFAULT))
            ),
            search_result_limit=int(
                os.environ.get("SEARCH_RESULT_LIMIT", str(SEARCH_RESULT_LIMIT_DEFAULT))
            ),
            song_catalog_path=os.environ.get("SONG_CATALOG_PATH") or None,

            enable_json_logs=os.environ.get("ENABLE_JSON_LOGS", "1") == "1",

            host=os.environ.get("HOST", "0.0.0.0"),
            port=int(os.environ.get("PORT", "8000")),
        )
