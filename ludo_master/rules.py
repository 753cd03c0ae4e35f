"""
Rules engine: legal move generation and move application.

These functions are the single source of truth for the game rules; the
local harness and the multiplayer server both reach them through the
TurnController.
"""

from __future__ import annotations

from typing import List

from loguru import logger

from .board import advance, tokens_at
from .constants import BoardConstants, GameConstants
from .exceptions import InvalidMoveError, MustRollFirstError
from .player import Player
from .state import AwaitingMove, Finished, GameState
from .types import Capture, Move, MoveResult


def legal_moves(player: Player, dice_value: int) -> List[Move]:
    """All moves `player` may make with `dice_value`, one per movable token."""
    moves: List[Move] = []
    for token in player.tokens:
        if token.is_finished():
            continue
        if token.is_in_home():
            if dice_value == GameConstants.EXIT_HOME_ROLL:
                moves.append(Move(token.token_id, player.start_position))
            continue
        destination = advance(token.player_color, token.position, dice_value)
        if destination is None:
            # overshoots the finish lane
            continue
        moves.append(Move(token.token_id, destination))
    return moves


def can_capture_at(position: int) -> bool:
    """Captures never happen on safe squares or inside finish lanes."""
    return BoardConstants.is_ring_position(
        position
    ) and not BoardConstants.is_safe_position(position)


def apply_move(state: GameState, token_id: str) -> MoveResult:
    """Apply the pending move of `token_id` for the current player.

    Raises InvalidMoveError, without touching the state, when the token has
    no pending move for this roll. On a win the state's phase becomes
    Finished; otherwise the caller decides who plays next.
    """
    if not isinstance(state.phase, AwaitingMove):
        raise MustRollFirstError()
    move = state.phase.find(token_id)
    if move is None:
        raise InvalidMoveError(f"Invalid move: token {token_id} cannot move")

    player = state.current_player
    token = player.get_token(token_id)
    if token is None:
        raise InvalidMoveError(f"Invalid move: unknown token {token_id}")

    old_position = token.position
    result = MoveResult(
        player_color=player.id,
        token_id=token_id,
        old_position=old_position,
        new_position=move.new_position,
        moved_out_of_home=token.is_in_home(),
    )

    if move.new_position == BoardConstants.finish_lane_terminal(player.id):
        token.finish()
        result.reached_finish = True
    else:
        token.place(move.new_position)

    if token.is_active() and can_capture_at(token.position):
        for victim in tokens_at(state.players, token.position, exclude_color=player.id):
            owner = state.player_by_color(victim.player_color)
            victim.send_home()
            result.captured.append(
                Capture(
                    token_id=victim.token_id,
                    player_color=victim.player_color,
                    player_name=owner.name if owner else victim.player_color,
                    position=move.new_position,
                )
            )

    logger.debug(
        f"{player.id} moved {token_id}: {old_position} -> {token.position}"
        f" (captured={len(result.captured)}, finished={result.reached_finish})"
    )

    if player.has_won():
        result.won = True
        state.phase = Finished(winner=player.color)
        state.message = f"{player.name} wins!"

    return result


def grants_extra_turn(dice_value: int, result: MoveResult) -> bool:
    """The mover keeps the turn after a six, a capture, or finishing a token."""
    return (
        dice_value == GameConstants.DICE_MAX
        or bool(result.captured)
        or result.reached_finish
    )
