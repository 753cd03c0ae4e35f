from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List


@dataclass(frozen=True, slots=True)
class Move:
    """A candidate move; valid only for the roll that produced it."""

    token_id: str
    new_position: int

    def to_dict(self) -> Dict[str, object]:
        return {"tokenId": self.token_id, "newPosition": self.new_position}


@dataclass(slots=True)
class Capture:
    token_id: str
    player_color: str
    player_name: str
    position: int

    def to_dict(self) -> Dict[str, object]:
        return {
            "tokenId": self.token_id,
            "playerId": self.player_color,
            "playerName": self.player_name,
            "position": self.position,
        }


@dataclass(slots=True)
class MoveResult:
    player_color: str
    token_id: str
    old_position: int
    new_position: int
    captured: List[Capture] = field(default_factory=list)
    reached_finish: bool = False
    moved_out_of_home: bool = False
    won: bool = False

    def to_dict(self) -> Dict[str, object]:
        return {
            "playerId": self.player_color,
            "tokenId": self.token_id,
            "from": self.old_position,
            "to": self.new_position,
            "capturedTokens": [c.to_dict() for c in self.captured],
            "reachedFinish": self.reached_finish,
            "movedOutOfHome": self.moved_out_of_home,
        }


@dataclass(slots=True)
class RollResult:
    player_color: str
    dice_value: int
    moves: List[Move]
    # Only meaningful when no moves are available
    reroll: bool = False


@dataclass(slots=True)
class TurnResult:
    """Outcome of a move once the controller decided who plays next."""

    move: MoveResult
    gained_extra_turn: bool
    game_over: bool
