"""
Room bookkeeping for the multiplayer server.

A room holds up to four members, each bound to one color in join order. The
manager only tracks membership and lifecycle; matches live in the
coordinator.
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Dict, List, Optional

from ludo_master.constants import Colors, GameConstants
from ludo_master.exceptions import (
    GameInProgressError,
    NameTakenError,
    PlayerNotFoundError,
    RoomExistsError,
    RoomFullError,
    RoomNotFoundError,
)

Clock = Callable[[], float]


def iso_time(timestamp: float) -> str:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat()


class RoomStatus(Enum):
    WAITING = "waiting"
    PLAYING = "playing"
    FINISHED = "finished"


@dataclass
class SessionPlayer:
    """A room member; `id` is stable across reconnects, `connection_id` is not."""

    id: str
    connection_id: Optional[str]
    name: str
    color: str
    is_ready: bool = False
    connected: bool = True
    is_host: bool = False
    joined_at: float = 0.0

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "isReady": self.is_ready,
            "connected": self.connected,
            "isHost": self.is_host,
        }


@dataclass
class Room:
    id: str
    max_players: int
    is_private: bool
    created_at: float
    last_activity: float
    status: RoomStatus = RoomStatus.WAITING
    players: List[SessionPlayer] = field(default_factory=list)

    def get_player(self, player_id: str) -> Optional[SessionPlayer]:
        return next((p for p in self.players if p.id == player_id), None)

    def player_by_connection(self, connection_id: str) -> Optional[SessionPlayer]:
        return next((p for p in self.players if p.connection_id == connection_id), None)

    @property
    def is_full(self) -> bool:
        return len(self.players) >= self.max_players

    @property
    def all_disconnected(self) -> bool:
        return all(not p.connected for p in self.players)

    def free_colors(self) -> List[str]:
        used = {p.color for p in self.players}
        return [c for c in Colors.ALL_COLORS if c not in used]

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "maxPlayers": self.max_players,
            "isPrivate": self.is_private,
            "gameStatus": self.status.value,
            "players": [p.to_dict() for p in self.players],
            "createdAt": iso_time(self.created_at),
            "lastActivity": iso_time(self.last_activity),
        }


class RoomManager:
    def __init__(self, clock: Optional[Clock] = None):
        self.rooms: Dict[str, Room] = {}
        self.clock = clock or time.time

    def create_room(self, room_id: str, max_players: int = 4, is_private: bool = False) -> Room:
        if room_id in self.rooms:
            raise RoomExistsError()
        max_players = max(GameConstants.MIN_PLAYERS, min(max_players, GameConstants.MAX_PLAYERS))
        now = self.clock()
        room = Room(
            id=room_id,
            max_players=max_players,
            is_private=is_private,
            created_at=now,
            last_activity=now,
        )
        self.rooms[room_id] = room
        return room

    def get_room(self, room_id: str) -> Room:
        room = self.rooms.get(room_id)
        if room is None:
            raise RoomNotFoundError()
        return room

    def add_player(self, room_id: str, connection_id: Optional[str], name: str) -> SessionPlayer:
        """Seat a new member; all checks run before anything changes."""
        room = self.get_room(room_id)
        if room.is_full:
            raise RoomFullError()
        if room.status is RoomStatus.PLAYING:
            raise GameInProgressError()
        if any(p.name == name for p in room.players):
            raise NameTakenError()
        colors = room.free_colors()
        if not colors:
            raise RoomFullError("No available colors")

        now = self.clock()
        player = SessionPlayer(
            id=str(uuid.uuid4()),
            connection_id=connection_id,
            name=name,
            color=colors[0],
            is_host=not room.players,
            joined_at=now,
        )
        room.players.append(player)
        room.last_activity = now
        return player

    def remove_player(self, room_id: str, player_id: str) -> SessionPlayer:
        room = self.get_room(room_id)
        player = room.get_player(player_id)
        if player is None:
            raise PlayerNotFoundError()
        room.players.remove(player)
        if player.is_host and room.players:
            room.players[0].is_host = True
        room.last_activity = self.clock()
        return player

    def get_player(self, room_id: str, player_id: str) -> SessionPlayer:
        player = self.get_room(room_id).get_player(player_id)
        if player is None:
            raise PlayerNotFoundError()
        return player

    def set_ready(self, room_id: str, player_id: str, ready: bool) -> SessionPlayer:
        player = self.get_player(room_id, player_id)
        player.is_ready = ready
        self.touch(room_id)
        return player

    def set_connected(
        self, room_id: str, player_id: str, connected: bool, connection_id: Optional[str] = None
    ) -> SessionPlayer:
        player = self.get_player(room_id, player_id)
        player.connected = connected
        player.connection_id = connection_id if connected else None
        self.touch(room_id)
        return player

    def set_status(self, room_id: str, status: RoomStatus) -> None:
        self.get_room(room_id).status = status
        self.touch(room_id)

    def touch(self, room_id: str) -> None:
        room = self.rooms.get(room_id)
        if room is not None:
            room.last_activity = self.clock()

    def can_start(self, room_id: str) -> bool:
        room = self.rooms.get(room_id)
        if room is None:
            return False
        return (
            len(room.players) >= GameConstants.MIN_PLAYERS
            and all(p.is_ready and p.connected for p in room.players)
            and room.status is RoomStatus.WAITING
        )

    def delete_room(self, room_id: str) -> bool:
        return self.rooms.pop(room_id, None) is not None

    def active_rooms_count(self) -> int:
        return len(self.rooms)

    def inactive_room_ids(self, timeout: float) -> List[str]:
        cutoff = self.clock() - timeout
        return [rid for rid, room in self.rooms.items() if room.last_activity < cutoff]

    def room_info(self, room_id: str) -> Dict:
        room = self.get_room(room_id)
        return {
            "id": room.id,
            "playerCount": len(room.players),
            "maxPlayers": room.max_players,
            "status": room.status.value,
            "isPrivate": room.is_private,
        }

    def room_stats(self, room_id: str) -> Dict:
        room = self.get_room(room_id)
        return {
            **self.room_info(room_id),
            "connectedPlayers": sum(1 for p in room.players if p.connected),
            "readyPlayers": sum(1 for p in room.players if p.is_ready),
            "canStart": self.can_start(room_id),
            "createdAt": iso_time(room.created_at),
            "lastActivity": iso_time(room.last_activity),
        }
