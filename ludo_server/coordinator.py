"""
Session coordinator: rooms, one match per room, and turn ownership.

Every handler validates first and mutates only once all checks passed, so a
rejected action leaves rooms and matches untouched. Handlers return the
envelopes to deliver; continuations that fire later (AI seats, no-move
pauses) push theirs through `sink`.
"""

from __future__ import annotations

import random
import uuid
from datetime import datetime, timezone
from functools import partial
from typing import Any, Callable, Dict, List, Optional, Tuple

from loguru import logger
from pydantic import ValidationError as PayloadError

from ludo_master.config import Config
from ludo_master.controller import PlayerSpec, TurnController
from ludo_master.driver import MatchDriver
from ludo_master.exceptions import (
    CannotStartError,
    GameInProgressError,
    GameNotStartedError,
    GameOverError,
    LudoError,
    NotInRoomError,
    NotYourTurnError,
    RoomError,
    ValidationError,
)
from ludo_master.player import AIDifficulty, PlayerColor
from ludo_master.scheduler import ScheduledTask, Scheduler

from .config import ServerConfig, server_config
from .messages import INBOUND_PAYLOADS, ClientMessage, Envelope
from .rooms import Clock, Room, RoomManager, RoomStatus, SessionPlayer

Sink = Callable[[List[Envelope]], None]


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class SessionCoordinator:
    def __init__(
        self,
        scheduler: Scheduler,
        settings: Optional[ServerConfig] = None,
        engine_settings: Optional[Config] = None,
        clock: Optional[Clock] = None,
        rng_factory: Optional[Callable[[], random.Random]] = None,
        room_id_factory: Optional[Callable[[], str]] = None,
        sink: Optional[Sink] = None,
    ):
        self.scheduler = scheduler
        self.settings = settings or server_config
        self.engine_settings = engine_settings
        self.rooms = RoomManager(clock)
        self.games: Dict[str, MatchDriver] = {}
        # connection id -> (room id, player id)
        self.bindings: Dict[str, Tuple[str, str]] = {}
        self.sink = sink
        self._rng_factory = rng_factory or random.Random
        self._room_id_factory = room_id_factory or self._new_room_id
        self._grace: Dict[str, ScheduledTask] = {}

    # --- Wire entry point ---
    def handle(self, connection_id: str, message: Any) -> List[Envelope]:
        """Validate one inbound envelope and route it to its handler.

        Any rejection becomes a single `error` envelope for the requester.
        """
        event = "?"
        try:
            parsed = ClientMessage.model_validate(message)
            event = parsed.event
            model = INBOUND_PAYLOADS.get(event)
            if model is None:
                raise ValidationError(f"Unknown event: {event}")
            payload = model.model_validate(parsed.data)
            return self._dispatch(connection_id, event, payload)
        except PayloadError as exc:
            first = exc.errors()[0]
            field = ".".join(str(part) for part in first.get("loc", ())) or "message"
            reason = f"Invalid {event} payload: {field} {first.get('msg', 'is invalid')}"
        except LudoError as exc:
            reason = str(exc)
        logger.warning(f"Rejected {event} from {connection_id}: {reason}")
        return [self._error(connection_id, reason)]

    def _dispatch(self, connection_id: str, event: str, payload) -> List[Envelope]:
        if event == "create-room":
            return self.create_room(
                connection_id, payload.name, payload.max_players, payload.is_private
            )
        if event == "join-room":
            return self.join_room(connection_id, payload.room_id, payload.name)
        if event == "leave-room":
            return self.leave_room(connection_id)
        if event == "player-ready":
            return self.set_ready(connection_id, payload.ready)
        if event == "start-game":
            return self.start_game(connection_id)
        if event == "roll-dice":
            return self.roll_dice(connection_id)
        if event == "move-token":
            return self.move_token(connection_id, payload.token_id)
        if event == "send-message":
            return self.send_message(connection_id, payload.text)
        if event == "reconnect-to-room":
            return self.reconnect(connection_id, payload.room_id, payload.player_id)
        raise ValidationError(f"Unknown event: {event}")

    # --- Room lifecycle ---
    def create_room(
        self, connection_id: str, name: str, max_players: int = 4, is_private: bool = False
    ) -> List[Envelope]:
        self._require_unbound(connection_id)
        room_id = self._room_id_factory()
        room = self.rooms.create_room(room_id, max_players, is_private)
        player = self.rooms.add_player(room.id, connection_id, name)
        self.bindings[connection_id] = (room.id, player.id)
        logger.info(f"Room created: {room.id} by {name}")
        return [
            Envelope.to_connection(
                connection_id,
                "room-created",
                {"roomId": room.id, "player": player.to_dict(), "room": room.to_dict()},
            )
        ]

    def join_room(self, connection_id: str, room_id: str, name: str) -> List[Envelope]:
        self._require_unbound(connection_id)
        player = self.rooms.add_player(room_id, connection_id, name)
        self.bindings[connection_id] = (room_id, player.id)
        room = self.rooms.get_room(room_id)
        logger.info(f"{name} joined room: {room_id} as {player.color}")
        data = {"player": player.to_dict(), "room": room.to_dict()}
        return [
            Envelope.to_connection(connection_id, "room-joined", data),
            Envelope.to_room(room_id, "player-joined", data, exclude=connection_id),
        ]

    def leave_room(self, connection_id: str) -> List[Envelope]:
        room, player = self._member(connection_id)
        driver = self.games.get(room.id)

        self.rooms.remove_player(room.id, player.id)
        del self.bindings[connection_id]
        envelopes = [Envelope.to_connection(connection_id, "room-left", {"roomId": room.id})]
        logger.info(f"{player.name} left room: {room.id}")

        if not room.players:
            self.teardown(room.id)
            return envelopes

        data: Dict[str, Any] = {"playerId": player.id, "room": room.to_dict()}
        if driver is not None and room.status is RoomStatus.PLAYING:
            seat = driver.state.player_by_color(player.color)
            if seat is not None and not driver.controller.is_over:
                seat.hand_to_ai(AIDifficulty.MEDIUM)
                driver.refresh()
                logger.info(f"{player.color} seat in {room.id} handed to AI")
            data["gameState"] = driver.state.to_dict()
        if room.all_disconnected:
            self._schedule_grace(room.id)
        envelopes.append(Envelope.to_room(room.id, "player-left", data))
        return envelopes

    def set_ready(self, connection_id: str, ready: bool) -> List[Envelope]:
        room, player = self._member(connection_id)
        if room.status is RoomStatus.FINISHED:
            raise RoomError("Game has already finished")
        if room.status is not RoomStatus.WAITING:
            raise GameInProgressError()
        self.rooms.set_ready(room.id, player.id, ready)
        return [
            Envelope.to_room(
                room.id,
                "player-ready-changed",
                {"playerId": player.id, "ready": ready, "room": room.to_dict()},
            )
        ]

    def can_start(self, room_id: str) -> bool:
        return self.rooms.can_start(room_id)

    def start_game(self, connection_id: str) -> List[Envelope]:
        room, _ = self._member(connection_id)
        if room.status is RoomStatus.PLAYING:
            raise GameInProgressError()
        if not self.rooms.can_start(room.id):
            raise CannotStartError()

        specs = [PlayerSpec(name=p.name, color=PlayerColor(p.color)) for p in room.players]
        controller = TurnController.new_match(specs, rng=self._rng_factory())
        driver = MatchDriver(
            controller,
            self.scheduler,
            settings=self.engine_settings,
            on_event=partial(self._on_match_event, room.id),
        )
        self.games[room.id] = driver
        driver.start()
        self.rooms.set_status(room.id, RoomStatus.PLAYING)
        logger.info(f"Game started in room: {room.id} with {len(specs)} players")
        return [
            Envelope.to_room(
                room.id,
                "game-started",
                {"gameState": driver.state.to_dict(), "room": room.to_dict()},
            )
        ]

    # --- Match actions ---
    def roll_dice(self, connection_id: str, dice: Optional[int] = None) -> List[Envelope]:
        room, player = self._member(connection_id)
        driver = self._require_turn(room, player)
        result = driver.roll(dice)
        self.rooms.touch(room.id)
        return [Envelope.to_room(room.id, "dice-rolled", self._roll_data(driver, result))]

    def move_token(self, connection_id: str, token_id: str) -> List[Envelope]:
        room, player = self._member(connection_id)
        driver = self._require_turn(room, player)
        result = driver.move(token_id)
        self.rooms.touch(room.id)
        envelopes = [Envelope.to_room(room.id, "token-moved", self._move_data(driver, result))]
        if result.game_over:
            envelopes.append(self._finish(room.id, driver))
        return envelopes

    def send_message(self, connection_id: str, text: str) -> List[Envelope]:
        room, player = self._member(connection_id)
        text = text.strip()
        if not text:
            raise ValidationError("Message cannot be empty")
        if len(text) > self.settings.MAX_CHAT_LENGTH:
            raise ValidationError(
                f"Message too long (max {self.settings.MAX_CHAT_LENGTH} characters)"
            )
        self.rooms.touch(room.id)
        return [
            Envelope.to_room(
                room.id,
                "message-received",
                {
                    "id": str(uuid.uuid4()),
                    "playerId": player.id,
                    "playerName": player.name,
                    "text": text,
                    "timestamp": _now_iso(),
                },
            )
        ]

    # --- Connections ---
    def reconnect(self, connection_id: str, room_id: str, player_id: str) -> List[Envelope]:
        room = self.rooms.get_room(room_id)
        player = self.rooms.get_player(room_id, player_id)
        current = self.bindings.get(connection_id)
        if current is not None and current != (room_id, player_id):
            raise RoomError("Already in a room")

        if player.connection_id is not None:
            self.bindings.pop(player.connection_id, None)
        self.rooms.set_connected(room_id, player_id, True, connection_id)
        self.bindings[connection_id] = (room_id, player_id)
        self._cancel_grace(room_id)

        driver = self.games.get(room_id)
        logger.info(f"Player reconnected: {player.name} to room: {room_id}")
        return [
            Envelope.to_connection(
                connection_id,
                "reconnected",
                {
                    "room": room.to_dict(),
                    "gameState": driver.state.to_dict() if driver else None,
                },
            ),
            Envelope.to_room(
                room_id,
                "player-reconnected",
                {"playerId": player_id, "room": room.to_dict()},
                exclude=connection_id,
            ),
        ]

    def disconnect(self, connection_id: str) -> List[Envelope]:
        binding = self.bindings.pop(connection_id, None)
        if binding is None:
            return []
        room_id, player_id = binding
        room = self.rooms.rooms.get(room_id)
        if room is None or room.get_player(player_id) is None:
            return []
        self.rooms.set_connected(room_id, player_id, False)
        logger.info(f"Player disconnected: {player_id} from room: {room_id}")

        if room.all_disconnected:
            self._schedule_grace(room_id)
        return [
            Envelope.to_room(
                room_id,
                "player-disconnected",
                {"playerId": player_id, "room": room.to_dict()},
            )
        ]

    # --- Maintenance ---
    def teardown(self, room_id: str) -> None:
        driver = self.games.pop(room_id, None)
        if driver is not None:
            driver.cancel()
        self._cancel_grace(room_id)
        for connection_id, (bound_room, _) in list(self.bindings.items()):
            if bound_room == room_id:
                del self.bindings[connection_id]
        if self.rooms.delete_room(room_id):
            logger.info(f"Cleaned up room: {room_id}")

    def sweep_inactive(self) -> int:
        """Tear down rooms idle for longer than the inactivity timeout."""
        stale = self.rooms.inactive_room_ids(self.settings.ROOM_INACTIVITY_TIMEOUT)
        for room_id in stale:
            self.teardown(room_id)
        if stale:
            logger.info(f"Cleaned up {len(stale)} inactive rooms")
        return len(stale)

    def shutdown(self) -> None:
        for room_id in list(self.rooms.rooms):
            self.teardown(room_id)

    def health(self, connected_clients: Optional[int] = None) -> Dict[str, Any]:
        return {
            "status": "ok",
            "timestamp": _now_iso(),
            "activeRooms": self.rooms.active_rooms_count(),
            "activeGames": len(self.games),
            "connectedClients": (
                len(self.bindings) if connected_clients is None else connected_clients
            ),
        }

    def recipients(self, envelope: Envelope) -> List[str]:
        """Connection ids an envelope should be delivered to."""
        if envelope.connection_id is not None:
            return [envelope.connection_id]
        room = self.rooms.rooms.get(envelope.room_id)
        if room is None:
            return []
        return [
            p.connection_id
            for p in room.players
            if p.connected and p.connection_id and p.connection_id != envelope.exclude
        ]

    def room_info(self, room_id: str) -> Dict[str, Any]:
        return self.rooms.room_info(room_id)

    def room_stats(self, room_id: str) -> Dict[str, Any]:
        stats = self.rooms.room_stats(room_id)
        driver = self.games.get(room_id)
        stats["game"] = driver.state.stats() if driver else None
        return stats

    # --- Deferred match events ---
    def _on_match_event(self, room_id: str, kind: str, payload: Dict[str, Any]) -> None:
        driver = self.games.get(room_id)
        if driver is None:
            return
        self.rooms.touch(room_id)
        if kind == "turn-passed":
            envelopes = [
                Envelope.to_room(
                    room_id,
                    "turn-passed",
                    {"gameState": driver.state.to_dict(), "reroll": payload["reroll"]},
                )
            ]
        elif kind == "dice-rolled":
            envelopes = [
                Envelope.to_room(room_id, "dice-rolled", self._roll_data(driver, payload["roll"]))
            ]
        elif kind == "token-moved":
            envelopes = [
                Envelope.to_room(room_id, "token-moved", self._move_data(driver, payload["turn"]))
            ]
        elif kind == "game-ended":
            envelopes = [self._finish(room_id, driver)]
        else:
            logger.warning(f"Unhandled match event {kind} in room {room_id}")
            return
        if self.sink is not None:
            self.sink(envelopes)

    # --- Internals ---
    def _member(self, connection_id: str) -> Tuple[Room, SessionPlayer]:
        binding = self.bindings.get(connection_id)
        if binding is None:
            raise NotInRoomError()
        room_id, player_id = binding
        return self.rooms.get_room(room_id), self.rooms.get_player(room_id, player_id)

    def _require_unbound(self, connection_id: str) -> None:
        if connection_id in self.bindings:
            raise RoomError("Already in a room")

    def _require_turn(self, room: Room, player: SessionPlayer) -> MatchDriver:
        driver = self.games.get(room.id)
        if driver is None:
            raise GameNotStartedError()
        if driver.controller.is_over:
            raise GameOverError()
        if driver.controller.current_player.id != player.color:
            raise NotYourTurnError()
        return driver

    def _finish(self, room_id: str, driver: MatchDriver) -> Envelope:
        self.rooms.set_status(room_id, RoomStatus.FINISHED)
        winner = driver.state.winner
        logger.info(f"Game ended in room: {room_id}, winner: {winner.value if winner else None}")
        return Envelope.to_room(
            room_id,
            "game-ended",
            {"gameState": driver.state.to_dict(), "winner": winner.value if winner else None},
        )

    @staticmethod
    def _roll_data(driver: MatchDriver, result) -> Dict[str, Any]:
        return {
            "gameState": driver.state.to_dict(),
            "diceValue": result.dice_value,
            "availableMoves": [m.to_dict() for m in result.moves],
            "currentPlayer": result.player_color,
        }

    @staticmethod
    def _move_data(driver: MatchDriver, result) -> Dict[str, Any]:
        return {
            "gameState": driver.state.to_dict(),
            "move": result.move.to_dict(),
            "gainedExtraTurn": result.gained_extra_turn,
        }

    def _schedule_grace(self, room_id: str) -> None:
        self._cancel_grace(room_id)
        self._grace[room_id] = self.scheduler.call_later(
            self.settings.DISCONNECT_GRACE_PERIOD, partial(self._grace_expired, room_id)
        )

    def _cancel_grace(self, room_id: str) -> None:
        task = self._grace.pop(room_id, None)
        if task is not None:
            task.cancel()

    def _grace_expired(self, room_id: str) -> None:
        self._grace.pop(room_id, None)
        room = self.rooms.rooms.get(room_id)
        if room is not None and room.all_disconnected:
            logger.info(f"Every member of {room_id} stayed away; removing room")
            self.teardown(room_id)

    def _new_room_id(self) -> str:
        return uuid.uuid4().hex[: self.settings.ROOM_ID_LENGTH].upper()

    @staticmethod
    def _error(connection_id: str, message: str) -> Envelope:
        return Envelope.to_connection(connection_id, "error", {"message": message})
