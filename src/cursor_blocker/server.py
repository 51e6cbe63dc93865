"""HTTP and WebSocket relay for the browser extension.

Routes:
- ``GET /status``: the current StateMessage as JSON.
- ``/ws``: pushes the current state on connect and every change after it,
  and answers ``{"type": "ping"}`` with ``{"type": "pong"}``.
"""

import asyncio
from typing import Any

import uvicorn
from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ValidationError

from cursor_blocker.core.config import DEFAULT_HOST, DEFAULT_PORT
from cursor_blocker.core.logging import ErrorIds, logEvent, logForDebugging
from cursor_blocker.core.state import CursorState
from cursor_blocker.models.message import ClientMessage, PongMessage, StateMessage


def _wire(message: BaseModel) -> dict[str, Any]:
    return message.model_dump(mode="json", by_alias=True)


def handle_client_message(raw: str) -> PongMessage | None:
    """Parse one client frame and return the reply, if any.

    Frames that are not valid client messages are ignored.
    """
    try:
        message = ClientMessage.model_validate_json(raw)
    except ValidationError:
        logForDebugging(f"[{ErrorIds.CLIENT_MESSAGE_INVALID}] ignoring client frame: {raw[:80]!r}")
        return None
    if message.type == "ping":
        return PongMessage()
    return None


async def _drain(ws: WebSocket, outbox: "asyncio.Queue[dict[str, Any]]") -> None:
    while True:
        await ws.send_json(await outbox.get())


def create_app(state: CursorState) -> FastAPI:
    """Build the relay app around an existing CursorState.

    The caller owns the state's lifecycle (start/aclose).
    """
    app = FastAPI(title="cursor-blocker")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )
    app.state.cursor_state = state

    @app.get("/status")
    def status() -> dict[str, Any]:
        return _wire(state.get_status())

    @app.websocket("/ws")
    async def state_ws(ws: WebSocket) -> None:
        await ws.accept()
        logEvent("extension_connected")
        loop = asyncio.get_running_loop()
        outbox: asyncio.Queue[dict[str, Any]] = asyncio.Queue()

        # Listeners may fire on another thread; hand frames to this socket's loop
        def on_state(message: StateMessage) -> None:
            loop.call_soon_threadsafe(outbox.put_nowait, _wire(message))

        unsubscribe = state.subscribe(on_state)
        sender = asyncio.create_task(_drain(ws, outbox))
        try:
            while True:
                reply = handle_client_message(await ws.receive_text())
                if reply is not None:
                    outbox.put_nowait(_wire(reply))
        except WebSocketDisconnect:
            return
        finally:
            unsubscribe()
            sender.cancel()
            await asyncio.gather(sender, return_exceptions=True)
            logEvent("extension_disconnected")

    return app


async def serve(state: CursorState, host: str = DEFAULT_HOST, port: int = DEFAULT_PORT) -> None:
    """Serve the relay until uvicorn is told to exit."""
    config = uvicorn.Config(create_app(state), host=host, port=port, log_level="warning")
    await uvicorn.Server(config).serve()
