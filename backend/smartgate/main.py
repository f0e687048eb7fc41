"""Smart Gate Relay Application.

This is the main entry point for the Smart Gate relay service.

Modules:
    - rooms: room registry, reservation endpoints, idle room cleanup
    - relay: WebSocket sessions, device/viewer fan-out, liveness probing
"""
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from smartgate import __version__
from smartgate.config import get_config
from smartgate.relay import BroadcastRelay, LivenessMonitor, SessionRegistry
from smartgate.relay.router import router as relay_router
from smartgate.rooms import IdleReaper, RoomStore
from smartgate.rooms.router import router as rooms_router

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the liveness monitor and idle reaper; stop them on shutdown."""
    config = get_config()

    configured_level = getattr(logging, config.logging.level.upper(), None)
    if configured_level is not None:
        logging.getLogger().setLevel(configured_level)
        logger.info("Root logger level set to %s", config.logging.level.upper())

    monitor = LivenessMonitor(
        app.state.sessions,
        interval=config.relay.heartbeat_interval_seconds,
    )
    reaper = IdleReaper(
        app.state.room_store,
        max_idle_seconds=config.rooms.max_idle_seconds,
        interval=config.rooms.sweep_interval_seconds,
    )
    monitor.start()
    reaper.start()
    app.state.liveness_monitor = monitor
    app.state.idle_reaper = reaper

    logger.info(f"HTTP  : http://{config.server.host}:{config.server.port}")
    logger.info(
        f"WS    : ws://{config.server.host}:{config.server.port}/ws?roomId=<name-123>&role=device|viewer"
    )

    yield  # Application runs here

    await monitor.stop()
    await reaper.stop()
    logger.info("Application shutdown complete")


app = FastAPI(
    title="Smart Gate Relay",
    description="Realtime relay between smart gate controllers and remote viewers",
    version=__version__,
    lifespan=lifespan,
)

# Process-wide state; nothing is persisted across restarts
app.state.room_store = RoomStore()
app.state.sessions = SessionRegistry()
app.state.relay = BroadcastRelay()

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_config().server.allowed_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(rooms_router)
app.include_router(relay_router)


@app.get("/health")
async def health(request: Request) -> dict:
    """Health check endpoint.

    Returns:
        dict: ``{"ok": true, "rooms": <number of reserved rooms>}``.
    """
    return {"ok": True, "rooms": request.app.state.room_store.size()}


@app.get("/", response_class=PlainTextResponse)
async def index() -> str:
    return "Smart Gate server running. Use /api/register and /ws."


def run() -> None:
    """Serve the app with the transport limits from the settings."""
    config = get_config()
    uvicorn.run(
        "smartgate.main:app",
        host=config.server.host,
        port=config.server.port,
        ws_max_size=config.relay.max_message_bytes,
        ws_per_message_deflate=config.relay.per_message_deflate,
        # Transport-level heartbeat; drops dead peers that never send a pong
        ws_ping_interval=config.relay.heartbeat_interval_seconds,
        ws_ping_timeout=config.relay.heartbeat_interval_seconds,
        log_level=config.logging.level.lower(),
    )


if __name__ == "__main__":
    run()
