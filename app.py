from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError
from contextlib import asynccontextmanager
from typing import Dict, Iterable, Optional
from routers.rooms import rooms_router
from routers.signaling import dispatch, expire_idle_rooms, handle_disconnect
from schemas.rooms import InboundFrame, OutboundMessage
from backend import RoomRegistry
from events import DISCONNECT
from constants import CORS_ORIGINS, HEALTH_MESSAGE, LOG_FILE, LOG_LEVEL, ROOM_IDLE_TIMEOUT, ROOM_SWEEP_INTERVAL
from logging_config import get_logger, setup_logging
import asyncio
import json
import uuid

setup_logging(log_level=LOG_LEVEL, log_file=LOG_FILE)
logger = get_logger(__name__)


class ConnectionManager:
    """Tracks the open WebSocket for each connection id on this process."""

    def __init__(self):
        self.connections: Dict[str, WebSocket] = {}

    def register(self, websocket: WebSocket) -> str:
        connection_id = uuid.uuid4().hex
        self.connections[connection_id] = websocket
        logger.debug(f"Registered connection {connection_id} (open connections: {len(self.connections)})")
        return connection_id

    def unregister(self, connection_id: str):
        if self.connections.pop(connection_id, None) is not None:
            logger.debug(f"Unregistered connection {connection_id} (open connections: {len(self.connections)})")

    async def send_to(self, connection_id: str, event: str, data=None):
        """Send one event to a connection. Unknown or closed targets are skipped silently."""
        await self.deliver([OutboundMessage(target=connection_id, event=event, data=data)])

    async def deliver(self, messages: Iterable[OutboundMessage]):
        for message in messages:
            websocket = self.connections.get(message.target)
            if websocket is None:
                logger.debug(f"Dropping {message.event} for {message.target}: connection not open")
                continue
            try:
                await websocket.send_text(json.dumps(message.frame()))
            except Exception as e:
                logger.warning(f"Error sending {message.event} to connection {message.target}: {e}")


async def sweep_idle_rooms(registry: RoomRegistry, manager: ConnectionManager, idle_timeout: float, interval: float):
    """Background task evicting rooms idle longer than `idle_timeout` seconds."""
    logger.info(f"Idle room sweeper started: timeout={idle_timeout}s, interval={interval}s")
    try:
        while True:
            await asyncio.sleep(interval)
            outbound = expire_idle_rooms(registry, idle_timeout)
            if outbound:
                await manager.deliver(outbound)
    except asyncio.CancelledError:
        logger.info("Idle room sweeper stopped")
        raise


def create_app(
    registry: Optional[RoomRegistry] = None,
    idle_timeout: float = ROOM_IDLE_TIMEOUT,
    sweep_interval: float = ROOM_SWEEP_INTERVAL,
) -> FastAPI:
    registry = registry if registry is not None else RoomRegistry()
    manager = ConnectionManager()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        sweeper = None
        if idle_timeout > 0:
            sweeper = asyncio.create_task(sweep_idle_rooms(registry, manager, idle_timeout, sweep_interval))
        try:
            yield
        finally:
            if sweeper is not None:
                sweeper.cancel()
                try:
                    await sweeper
                except asyncio.CancelledError:
                    pass

    app = FastAPI(lifespan=lifespan)
    app.state.registry = registry
    app.state.connections = manager

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=False,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    app.include_router(rooms_router)

    @app.get("/", response_class=PlainTextResponse)
    async def health():
        return HEALTH_MESSAGE

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket):
        """Signaling channel. Frames are JSON objects: {"event": <name>, "data": <payload>}."""
        await websocket.accept()
        connection_id = manager.register(websocket)
        logger.info(f"Client connected: {connection_id}")

        try:
            while True:
                try:
                    message = await websocket.receive()
                except WebSocketDisconnect:
                    logger.info(f"Client disconnected: {connection_id}")
                    break
                except Exception as e:
                    logger.error(f"Error receiving from connection {connection_id}: {e}", exc_info=True)
                    break

                if message["type"] == "websocket.disconnect":
                    logger.info(f"Client disconnected: {connection_id}")
                    break

                raw = message.get("text")
                if raw is None:
                    logger.debug(f"Ignoring non-text frame from {connection_id}")
                    continue

                try:
                    frame = InboundFrame.model_validate(json.loads(raw))
                except (json.JSONDecodeError, ValidationError):
                    logger.debug(f"Ignoring malformed frame from {connection_id}")
                    continue

                if frame.event == DISCONNECT:
                    # only the transport may report a disconnect
                    logger.debug(f"Ignoring client-sent {DISCONNECT} from {connection_id}")
                    continue

                try:
                    outbound = dispatch(registry, connection_id, frame.event, frame.data)
                    await manager.deliver(outbound)
                except Exception as e:
                    logger.error(f"Error handling {frame.event} from connection {connection_id}: {e}", exc_info=True)
        finally:
            # unregister first so the leaving client's own notification is a no-op
            manager.unregister(connection_id)
            await manager.deliver(handle_disconnect(registry, connection_id))

    logger.info("FastAPI application initialized")
    return app


app = create_app()
