"""
snitch.api.main — Read-only status API
=======================================

A tiny FastAPI app that exposes the bot's in-memory state: health, the
current roster of every tracked channel, and every known voice placement.
State lives in the bot process, so the app is served **in-process** by
:func:`build_server` rather than by a separate ``uvicorn`` command.

Enabled by the optional ``listener`` section of ``config.yaml``.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from snitch.api.routes.status import router as status_router
from snitch.config import SnitchConfig
from snitch.engine.notifications import NotificationCache
from snitch.engine.presence import PresenceStore

logger = logging.getLogger(__name__)


def create_app(
    cfg: SnitchConfig,
    presence: PresenceStore,
    notifications: NotificationCache,
) -> FastAPI:
    """Build the status app around the bot's runtime state."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Snitch status API started — %d tracked channel(s)", len(cfg.tracked_channel_ids))
        yield
        logger.info("Snitch status API shutting down")

    app = FastAPI(title="Snitch Status API", version="1.0.0", lifespan=lifespan)
    app.state.cfg = cfg
    app.state.presence = presence
    app.state.notifications = notifications

    app.include_router(status_router, prefix="/api")

    @app.get("/api/health")
    def health():
        return {"status": "ok"}

    return app


def build_server(app: FastAPI, host: str, port: int) -> uvicorn.Server:
    """Return a uvicorn server for *app*.

    ``await server.serve()`` runs it on the current loop; set
    ``server.should_exit = True`` to stop it.  ``log_config=None`` keeps
    uvicorn on the process-wide logging setup.
    """
    config = uvicorn.Config(app, host=host, port=port, log_config=None, access_log=False)
    return uvicorn.Server(config)
