"""Wire messages: inbound payload models and outbound envelopes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ClientMessage(BaseModel):
    """Envelope sent by clients: {"event": ..., "data": {...}}."""

    event: str = Field(min_length=1)
    data: Dict[str, Any] = Field(default_factory=dict)


class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class EmptyPayload(_Payload):
    pass


class CreateRoomPayload(_Payload):
    name: str = Field(min_length=1, max_length=32)
    max_players: int = Field(default=4, alias="maxPlayers")
    is_private: bool = Field(default=False, alias="isPrivate")

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Name must not be blank")
        return value


class JoinRoomPayload(_Payload):
    room_id: str = Field(min_length=1, alias="roomId")
    name: str = Field(min_length=1, max_length=32)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Name must not be blank")
        return value


class ReadyPayload(_Payload):
    ready: bool


class MoveTokenPayload(_Payload):
    token_id: str = Field(min_length=1, alias="tokenId")


class SendMessagePayload(_Payload):
    text: str


class ReconnectPayload(_Payload):
    room_id: str = Field(min_length=1, alias="roomId")
    player_id: str = Field(min_length=1, alias="playerId")


INBOUND_PAYLOADS: Dict[str, Type[_Payload]] = {
    "create-room": CreateRoomPayload,
    "join-room": JoinRoomPayload,
    "leave-room": EmptyPayload,
    "player-ready": ReadyPayload,
    "start-game": EmptyPayload,
    "roll-dice": EmptyPayload,
    "move-token": MoveTokenPayload,
    "send-message": SendMessagePayload,
    "reconnect-to-room": ReconnectPayload,
}


@dataclass(slots=True)
class Envelope:
    """One outbound message and who receives it.

    Exactly one of `connection_id` (a single socket) or `room_id` (every
    connected member, minus `exclude`) is set.
    """

    event: str
    data: Dict[str, Any]
    connection_id: Optional[str] = None
    room_id: Optional[str] = None
    exclude: Optional[str] = None

    @classmethod
    def to_connection(cls, connection_id: str, event: str, data: Dict[str, Any]) -> "Envelope":
        return cls(event=event, data=data, connection_id=connection_id)

    @classmethod
    def to_room(
        cls, room_id: str, event: str, data: Dict[str, Any], exclude: Optional[str] = None
    ) -> "Envelope":
        return cls(event=event, data=data, room_id=room_id, exclude=exclude)

    def wire(self) -> Dict[str, Any]:
        return {"event": self.event, "data": self.data}
