"""FastAPI transport: the /ws signal channel plus a small authenticated HTTP API."""

import asyncio
import logging
from contextlib import asynccontextmanager, suppress

from fastapi import Depends, FastAPI, Query, WebSocket, WebSocketDisconnect

from whalecopy.channel.auth import WS_UNAUTHORIZED, bearer_guard, token_matches
from whalecopy.channel.broadcaster import Subscription
from whalecopy.channel.messages import parse_message
from whalecopy.pipeline.copy_engine import CopyTradeEngine

logger = logging.getLogger(__name__)


def create_app(
    engine: CopyTradeEngine, auth_token: str = "", manage_engine: bool = True
) -> FastAPI:
    """Build the app around an engine. With `manage_engine` the app starts and stops it."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if manage_engine:
            await engine.start()
        logger.info("Copy-trade server ready")
        try:
            yield
        finally:
            if manage_engine:
                await engine.stop()

    app = FastAPI(title="Whale Copy-Trade Engine", version="0.1.0", lifespan=lifespan)
    app.state.engine = engine
    guard = bearer_guard(auth_token)

    @app.get("/api/status", dependencies=[Depends(guard)])
    def get_status():
        """Engine status, execution capability, wallet and last balance."""
        return engine.status_summary()

    @app.get("/api/activity", dependencies=[Depends(guard)])
    def get_activity(limit: int = Query(default=50, ge=1, le=500)):
        """Recent order lifecycle events, newest first."""
        return engine.activity.recent(limit)

    @app.websocket("/ws")
    async def signal_channel(ws: WebSocket, token: str | None = None):
        await ws.accept()
        if not token_matches(auth_token, token):
            logger.warning("Rejected observer: bad or missing token")
            await ws.close(code=WS_UNAUTHORIZED, reason="Unauthorized")
            return

        sub = engine.broadcaster.subscribe()
        logger.info("Observer connected (%d total)", len(engine.broadcaster))
        pump = None
        try:
            for message in engine.snapshot_messages():
                await ws.send_json(message)
            pump = asyncio.create_task(_pump(ws, sub))
            while True:
                frame = await ws.receive()
                if frame["type"] == "websocket.disconnect":
                    break
                raw = frame.get("text")
                if raw is None:
                    raw = frame.get("bytes")
                if raw is None:
                    continue
                parsed = parse_message(raw, engine.defaults)
                if parsed is not None:
                    engine.on_signal(*parsed)
        except WebSocketDisconnect:
            pass
        finally:
            if pump is not None:
                pump.cancel()
                with suppress(asyncio.CancelledError):
                    await pump
            engine.broadcaster.unsubscribe(sub)
            logger.info("Observer disconnected (%d total)", len(engine.broadcaster))

    return app


async def _pump(ws: WebSocket, sub: Subscription) -> None:
    """Forward queued broadcasts to one socket until it goes away."""
    while True:
        payload = await sub.queue.get()
        try:
            await ws.send_text(payload)
        except (WebSocketDisconnect, RuntimeError):
            return
