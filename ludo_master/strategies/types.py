from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence

import numpy as np

from ..player import Player
from ..types import Move


@dataclass(slots=True)
class MoveOption:
    """Structured metadata about a legal move."""

    move: Move
    current_pos: int
    new_pos: int
    progress: float
    safety: float
    capture_count: int
    exits_home: bool
    finishes: bool
    lands_safe: bool
    in_finish_lane: bool
    opponent_reach: int
    reasons: List[str] = field(default_factory=list)

    @property
    def token_id(self) -> str:
        return self.move.token_id


@dataclass(slots=True)
class StrategyContext:
    """Input payload shared by the strategies."""

    players: Sequence[Player]
    current_player: Player
    opponent_counts: np.ndarray  # shape (52,)
    opponent_reach: np.ndarray  # shape (52,)
    moves: List[MoveOption]
