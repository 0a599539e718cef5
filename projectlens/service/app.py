"""FastAPI application exposing the project-analysis message channel."""

from __future__ import annotations

import asyncio
import json
from typing import Callable

import uvicorn
from fastapi import FastAPI, WebSocket, WebSocketDisconnect

from .. import __version__
from ..config import ServerConfig
from ..logging import get_logger
from .dispatcher import MessageDispatcher
from .protocol import HealthResponse


def create_app(
    config: ServerConfig | None = None,
    dispatcher_factory: Callable[[], MessageDispatcher] | None = None,
) -> FastAPI:
    """Create the FastAPI application with the WebSocket channel at ``/``."""

    settings = config or ServerConfig()
    factory = dispatcher_factory or (lambda: MessageDispatcher(settings))
    logger = get_logger("service")

    app = FastAPI(title="projectlens", version=__version__)

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.websocket("/")
    async def channel(websocket: WebSocket) -> None:
        await websocket.accept()
        client = f"{websocket.client.host}:{websocket.client.port}" if websocket.client else "unknown"
        logger.info("Client connected: %s", client)

        # One dispatcher per connection; nothing is shared between clients.
        dispatcher = factory()
        loop = asyncio.get_running_loop()
        try:
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    break
                raw = message.get("text")
                if raw is None:
                    raw = (message.get("bytes") or b"").decode("utf-8", errors="replace")
                response = await loop.run_in_executor(None, dispatcher.dispatch, raw)
                await websocket.send_text(json.dumps(response, default=str))
        except WebSocketDisconnect:
            pass
        finally:
            logger.info("Client disconnected: %s", client)

    return app


def run_service(config: ServerConfig | None = None) -> None:  # pragma: no cover - integration path
    settings = config or ServerConfig()
    app = create_app(settings)
    get_logger("service").info("Listening on ws://%s:%d/", settings.host, settings.port)
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        timeout_graceful_shutdown=1,
    )
