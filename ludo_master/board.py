"""
Board representation for Ludo game.
Walks tokens along the ring and finish lanes and answers occupancy queries.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

import numpy as np

from .constants import BoardConstants, GameConstants
from .player import Player
from .token import Token


def advance(color: str, position: int, steps: int) -> Optional[int]:
    """Walk `steps` cells from a ring or lane position for a token of `color`.

    The walk goes one cell at a time because entering the finish lane depends
    on the color's entry square, not on a fixed offset. Returns None when the
    walk would overshoot the lane's terminal cell.
    """
    entry = BoardConstants.FINISH_LANE_ENTRIES[color]
    base = BoardConstants.FINISH_LANE_BASES[color]
    terminal = base + GameConstants.FINISH_LANE_SIZE

    current = position
    for _ in range(steps):
        if current == terminal:
            return None
        if base + 1 <= current < terminal:
            current += 1
        elif current == entry:
            current = base + 1
        else:
            current = (current + 1) % GameConstants.MAIN_BOARD_SIZE
    return current


def iter_tokens(players: Iterable[Player]) -> Iterable[Token]:
    for player in players:
        yield from player.tokens


def tokens_at(
    players: Iterable[Player], position: int, exclude_color: Optional[str] = None
) -> List[Token]:
    """Active tokens standing on `position`, optionally ignoring one color."""
    return [
        t
        for t in iter_tokens(players)
        if t.is_active()
        and t.position == position
        and (exclude_color is None or t.player_color != exclude_color)
    ]


def ring_occupancy(
    players: Iterable[Player], exclude_color: Optional[str] = None
) -> np.ndarray:
    """(52,) count of active tokens per ring cell."""
    counts = np.zeros(GameConstants.MAIN_BOARD_SIZE, dtype=np.int64)
    for token in iter_tokens(players):
        if exclude_color is not None and token.player_color == exclude_color:
            continue
        if token.is_active() and BoardConstants.is_ring_position(token.position):
            counts[token.position] += 1
    return counts


def reach_counts(
    players: Iterable[Player], exclude_color: Optional[str] = None
) -> np.ndarray:
    """(52,) number of (token, roll) pairs able to land on each ring cell.

    Each active token contributes once per roll 1..6 whose walk ends on a ring
    cell; walks ending in a finish lane or overshooting are ignored.
    """
    reach = np.zeros(GameConstants.MAIN_BOARD_SIZE, dtype=np.int64)
    for token in iter_tokens(players):
        if exclude_color is not None and token.player_color == exclude_color:
            continue
        if not token.is_active():
            continue
        for roll in range(GameConstants.DICE_MIN, GameConstants.DICE_MAX + 1):
            landing = advance(token.player_color, token.position, roll)
            if landing is not None and BoardConstants.is_ring_position(landing):
                reach[landing] += 1
    return reach
