"""
Match state: players, whose turn it is, and the explicit turn phase.

The phase is a tagged value rather than a set of booleans, so a state such as
"rolled but moves are pending" cannot be confused with "waiting for a roll".
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union

from .player import Player, PlayerColor
from .types import Move


class GameStatus(Enum):
    SETUP = "SETUP"
    PLAYING = "PLAYING"
    GAMEOVER = "GAMEOVER"


@dataclass(frozen=True, slots=True)
class Setup:
    pass


@dataclass(frozen=True, slots=True)
class AwaitingRoll:
    pass


@dataclass(frozen=True, slots=True)
class AwaitingMove:
    moves: Tuple[Move, ...]

    def find(self, token_id: str) -> Optional[Move]:
        return next((m for m in self.moves if m.token_id == token_id), None)


@dataclass(frozen=True, slots=True)
class NoMoves:
    """Rolled without any legal move; waiting for the deferred continuation."""

    reroll: bool


@dataclass(frozen=True, slots=True)
class Finished:
    winner: PlayerColor


TurnPhase = Union[Setup, AwaitingRoll, AwaitingMove, NoMoves, Finished]


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class GameState:
    """Authoritative state of a single match."""

    players: List[Player]
    current_player_index: int = 0
    dice_value: Optional[int] = None
    phase: TurnPhase = field(default_factory=Setup)
    message: str = "Waiting for the game to start."
    turn_number: int = 0
    game_start_time: Optional[str] = None
    turn_start_time: Optional[str] = None

    @property
    def status(self) -> GameStatus:
        if isinstance(self.phase, Setup):
            return GameStatus.SETUP
        if isinstance(self.phase, Finished):
            return GameStatus.GAMEOVER
        return GameStatus.PLAYING

    @property
    def has_rolled(self) -> bool:
        return isinstance(self.phase, (AwaitingMove, NoMoves))

    @property
    def available_moves(self) -> List[Move]:
        if isinstance(self.phase, AwaitingMove):
            return list(self.phase.moves)
        return []

    @property
    def winner(self) -> Optional[PlayerColor]:
        if isinstance(self.phase, Finished):
            return self.phase.winner
        return None

    @property
    def current_player(self) -> Player:
        return self.players[self.current_player_index]

    def player_by_color(self, color: str) -> Optional[Player]:
        return next((p for p in self.players if p.color.value == color), None)

    def mark_turn_start(self) -> None:
        self.turn_start_time = _now_iso()
        if self.game_start_time is None:
            self.game_start_time = self.turn_start_time

    def to_dict(self) -> Dict:
        """Full snapshot sent to clients; never a delta."""
        winner = self.winner
        return {
            "players": [p.to_dict() for p in self.players],
            "currentPlayerIndex": self.current_player_index,
            "diceValue": self.dice_value,
            "hasRolled": self.has_rolled,
            "winner": winner.value if winner else None,
            "status": self.status.value,
            "availableMoves": [m.to_dict() for m in self.available_moves],
            "message": self.message,
            "turnNumber": self.turn_number,
            "gameStartTime": self.game_start_time,
            "turnStartTime": self.turn_start_time,
        }

    def stats(self) -> Dict:
        return {
            "status": self.status.value,
            "currentPlayer": self.current_player.id,
            "currentPlayerName": self.current_player.name,
            "turnNumber": self.turn_number,
            "diceValue": self.dice_value,
            "hasRolled": self.has_rolled,
            "winner": self.winner.value if self.winner else None,
            "playerStats": [
                {"id": p.id, "name": p.name, **p.token_counts()} for p in self.players
            ],
        }
