from __future__ import annotations

from typing import Sequence

import numpy as np

from ..board import reach_counts, ring_occupancy
from ..constants import BoardConstants, GameConstants, StrategyConstants
from ..player import Player
from ..rules import can_capture_at
from ..types import Move
from .types import MoveOption, StrategyContext


def progress_score(color: str, position: int) -> float:
    """Progress toward the goal on a 0..100 scale.

    Finish lane cells score far above any ring cell.
    """
    if position == GameConstants.HOME_POSITION:
        return 0.0
    terminal = BoardConstants.finish_lane_terminal(color)
    if position in (GameConstants.FINISHED_POSITION, terminal):
        return StrategyConstants.FINISHED_PROGRESS
    base = BoardConstants.FINISH_LANE_BASES[color]
    if base + 1 <= position < terminal:
        return (
            StrategyConstants.FINISH_LANE_PROGRESS_BASE
            + (position - base) * StrategyConstants.FINISH_LANE_PROGRESS_STEP
        )
    entry = BoardConstants.FINISH_LANE_ENTRIES[color]
    distance = (entry - position) % GameConstants.MAIN_BOARD_SIZE
    return max(0.0, StrategyConstants.RING_PROGRESS_CAP - distance)


def safety_score(position: int) -> float:
    """Safety of a landing square; the home yard itself is never safe."""
    if position == GameConstants.HOME_POSITION:
        return StrategyConstants.HOME_SAFETY
    if BoardConstants.is_safe_position(position):
        return StrategyConstants.SAFE_ZONE_SAFETY
    if BoardConstants.is_finish_lane_position(position):
        return StrategyConstants.FINISH_LANE_SAFETY
    return StrategyConstants.OPEN_RING_SAFETY


def _create_move_option(
    move: Move,
    player: Player,
    opponent_counts: np.ndarray,
    opponent_reach: np.ndarray,
) -> MoveOption:
    token = player.get_token(move.token_id)
    color = player.id
    new_pos = move.new_position
    exits_home = token.is_in_home() and new_pos == player.start_position
    finishes = new_pos == BoardConstants.finish_lane_terminal(color)
    on_ring = BoardConstants.is_ring_position(new_pos)

    capture_count = int(opponent_counts[new_pos]) if can_capture_at(new_pos) else 0
    reach = int(opponent_reach[new_pos]) if on_ring else 0

    return MoveOption(
        move=move,
        current_pos=token.position,
        new_pos=new_pos,
        progress=progress_score(color, new_pos),
        safety=safety_score(new_pos),
        capture_count=capture_count,
        exits_home=exits_home,
        finishes=finishes,
        lands_safe=BoardConstants.is_safe_position(new_pos),
        in_finish_lane=BoardConstants.is_finish_lane_position(new_pos),
        opponent_reach=reach,
    )


def build_move_options(
    moves: Sequence[Move], players: Sequence[Player], current_player: Player
) -> StrategyContext:
    """Convert the board and the legal moves into a strategy context."""
    opponent_counts = ring_occupancy(players, exclude_color=current_player.id)
    opponent_reach = reach_counts(players, exclude_color=current_player.id)
    options = [
        _create_move_option(move, current_player, opponent_counts, opponent_reach)
        for move in moves
    ]
    return StrategyContext(
        players=players,
        current_player=current_player,
        opponent_counts=opponent_counts,
        opponent_reach=opponent_reach,
        moves=options,
    )
