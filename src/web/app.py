"""
FastAPI application factory for the occupancy monitor.

Routes:
- /api/* -> read-only REST snapshot API (tracks, stats, events, status, export)
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .routes import api


def create_app() -> FastAPI:
    """Create the FastAPI app and wire routes."""
    app = FastAPI(
        title="SmartRoom Monitor",
        version="0.1.0",
        description="Room occupancy tracking snapshot API",
    )

    # CORS for a separately served dashboard
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    app.include_router(api.router, prefix="/api")

    return app
