"""
FastAPI app factory.

Responsibilities:
- Create and configure FastAPI app
- Set up middleware
- Initialize shared resources (config, song catalog, log sink)
- Register routes
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import AppConfig
from observability import logger
from services.search_service import load_catalog

from server.routes import register_routes


def create_app(config: AppConfig | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Passing a config skips the environment, which is how tests build apps.
    """
    if config is None:
        config = AppConfig.load_from_env()

    logger.set_enabled(config.enable_json_logs)

    app = FastAPI(title="Voice Control API")

    app.state.config = config

    # Middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # tighten later
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Catalog is read ONCE per process and shared read-only by sessions
    app.state.catalog = load_catalog(config.song_catalog_path)

    # Routes
    register_routes(app)

    return app
