from __future__ import annotations

import asyncio
import itertools
import json
import sys
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Dict, List, Optional

import uvicorn
from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from loguru import logger

from ludo_master.config import Config
from ludo_master.exceptions import RoomNotFoundError
from ludo_master.scheduler import AsyncioScheduler

from .config import ServerConfig, server_config
from .coordinator import SessionCoordinator
from .messages import Envelope

VERSION = "1.0.0"


class ConnectionHub:
    """Live sockets with one outbound queue each, so sends keep their order."""

    def __init__(self, coordinator: SessionCoordinator):
        self.coordinator = coordinator
        self._sockets: Dict[str, WebSocket] = {}
        self._queues: Dict[str, asyncio.Queue] = {}
        self._ids = itertools.count(1)

    @property
    def count(self) -> int:
        return len(self._sockets)

    def register(self, websocket: WebSocket) -> str:
        connection_id = f"conn-{next(self._ids)}"
        self._sockets[connection_id] = websocket
        self._queues[connection_id] = asyncio.Queue()
        return connection_id

    def unregister(self, connection_id: str) -> None:
        self._sockets.pop(connection_id, None)
        self._queues.pop(connection_id, None)

    def deliver(self, envelopes: List[Envelope]) -> None:
        for envelope in envelopes:
            for connection_id in self.coordinator.recipients(envelope):
                queue = self._queues.get(connection_id)
                if queue is not None:
                    queue.put_nowait(envelope.wire())

    async def pump(self, connection_id: str) -> None:
        websocket = self._sockets[connection_id]
        queue = self._queues[connection_id]
        while True:
            message = await queue.get()
            try:
                await websocket.send_json(message)
            except (WebSocketDisconnect, RuntimeError) as exc:
                logger.warning(f"Dropping outbound messages for {connection_id}: {exc}")
                return


def create_app(
    settings: Optional[ServerConfig] = None,
    engine_settings: Optional[Config] = None,
    coordinator: Optional[SessionCoordinator] = None,
) -> FastAPI:
    settings = settings or server_config
    coordinator = coordinator or SessionCoordinator(
        AsyncioScheduler(), settings=settings, engine_settings=engine_settings
    )
    hub = ConnectionHub(coordinator)
    coordinator.sink = hub.deliver

    async def sweeper():
        while True:
            await asyncio.sleep(settings.CLEANUP_INTERVAL)
            coordinator.sweep_inactive()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting Ludo Master server")
        task = asyncio.create_task(sweeper())
        yield
        task.cancel()
        coordinator.shutdown()
        logger.info("Ludo Master server stopped")

    app = FastAPI(title="Ludo Master Server", version=VERSION, lifespan=lifespan)
    app.state.coordinator = coordinator
    app.state.hub = hub

    @app.get("/")
    async def root():
        return {
            "message": "Ludo Master Server is running!",
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "version": VERSION,
        }

    @app.get("/health")
    async def health():
        return coordinator.health(connected_clients=hub.count)

    @app.get("/rooms/{room_id}")
    async def room_info(room_id: str):
        try:
            return coordinator.room_info(room_id)
        except RoomNotFoundError:
            raise HTTPException(status_code=404, detail="Room not found")

    @app.get("/rooms/{room_id}/stats")
    async def room_stats(room_id: str):
        try:
            return coordinator.room_stats(room_id)
        except RoomNotFoundError:
            raise HTTPException(status_code=404, detail="Room not found")

    @app.websocket("/ws")
    async def ws_endpoint(websocket: WebSocket):
        await websocket.accept()
        connection_id = hub.register(websocket)
        sender_task = asyncio.create_task(hub.pump(connection_id))
        logger.debug(f"Socket connected: {connection_id}")
        try:
            while True:
                raw = await websocket.receive_text()
                try:
                    message = json.loads(raw)
                except json.JSONDecodeError:
                    logger.warning(f"Malformed frame from {connection_id}")
                    hub.deliver(
                        [Envelope.to_connection(connection_id, "error", {"message": "Malformed message"})]
                    )
                    continue
                hub.deliver(coordinator.handle(connection_id, message))
        except WebSocketDisconnect:
            logger.debug(f"Socket closed: {connection_id}")
        finally:
            sender_task.cancel()
            hub.unregister(connection_id)
            hub.deliver(coordinator.disconnect(connection_id))

    return app


def main() -> None:
    logger.remove()
    logger.add(sys.stderr, level=server_config.LOG_LEVEL.upper())
    uvicorn.run(create_app(), host=server_config.HOST, port=server_config.PORT)


if __name__ == "__main__":
    main()
