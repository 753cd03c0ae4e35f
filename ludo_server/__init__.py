"""Authoritative multiplayer server for Ludo Master."""

from ludo_server.config import ServerConfig, server_config
from ludo_server.coordinator import SessionCoordinator
from ludo_server.messages import Envelope
from ludo_server.rooms import Room, RoomManager, RoomStatus, SessionPlayer

__all__ = [
    "ServerConfig",
    "server_config",
    "SessionCoordinator",
    "Envelope",
    "Room",
    "RoomManager",
    "RoomStatus",
    "SessionPlayer",
]
