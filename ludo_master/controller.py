"""
Turn controller: roll -> move -> capture/extra turn -> next player.

One controller drives one match. It is used unchanged by the local harness
and by the multiplayer session coordinator, so both authorities produce the
same outcomes for the same dice.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Optional, Sequence

from loguru import logger

from .constants import Colors, GameConstants
from .exceptions import (
    AlreadyRolledError,
    GameNotStartedError,
    GameOverError,
    InvalidActionError,
    MustRollFirstError,
)
from .player import AIDifficulty, Player, PlayerColor
from .rules import apply_move, grants_extra_turn, legal_moves
from .state import (
    AwaitingMove,
    AwaitingRoll,
    Finished,
    GameState,
    NoMoves,
    Setup,
)
from .types import RollResult, TurnResult


@dataclass(slots=True)
class PlayerSpec:
    """Seat description used to build a match."""

    name: Optional[str] = None
    is_ai: bool = False
    ai_difficulty: Optional[AIDifficulty] = None
    color: Optional[PlayerColor] = None


class TurnController:
    def __init__(self, state: GameState, rng: Optional[random.Random] = None):
        self.state = state
        self.rng = rng or random.Random()

    @classmethod
    def new_match(
        cls, specs: Sequence[PlayerSpec], rng: Optional[random.Random] = None
    ) -> "TurnController":
        """Create a match; seats without an explicit color get the next free one."""
        if not GameConstants.MIN_PLAYERS <= len(specs) <= GameConstants.MAX_PLAYERS:
            raise InvalidActionError("Number of players must be between 2 and 4")

        taken = {s.color for s in specs if s.color is not None}
        if len(taken) != sum(1 for s in specs if s.color is not None):
            raise InvalidActionError("Each player needs a distinct color")
        free = [PlayerColor(c) for c in Colors.ALL_COLORS if PlayerColor(c) not in taken]

        players = []
        for spec in specs:
            color = spec.color or free.pop(0)
            players.append(
                Player(
                    color=color,
                    name=spec.name,
                    is_ai=spec.is_ai,
                    ai_difficulty=spec.ai_difficulty,
                )
            )
        return cls(GameState(players=players), rng=rng)

    # --- Queries ---
    @property
    def current_player(self) -> Player:
        return self.state.current_player

    @property
    def is_over(self) -> bool:
        return isinstance(self.state.phase, Finished)

    # --- Transitions ---
    def start(self) -> None:
        if not isinstance(self.state.phase, Setup):
            raise InvalidActionError("Game already started")
        self.state.current_player_index = 0
        self._begin_turn()
        logger.info(
            f"Match started with {len(self.state.players)} players: "
            f"{', '.join(p.name for p in self.state.players)}"
        )

    def roll(self, dice: Optional[int] = None) -> RollResult:
        """Roll for the current player; `dice` forces the value (tests, replays)."""
        phase = self.state.phase
        if isinstance(phase, Setup):
            raise GameNotStartedError()
        if isinstance(phase, Finished):
            raise GameOverError()
        if not isinstance(phase, AwaitingRoll):
            raise AlreadyRolledError()

        if dice is None:
            dice = self.rng.randint(GameConstants.DICE_MIN, GameConstants.DICE_MAX)
        elif not GameConstants.DICE_MIN <= dice <= GameConstants.DICE_MAX:
            raise InvalidActionError(f"Dice value out of range: {dice}")

        player = self.current_player
        moves = legal_moves(player, dice)
        self.state.dice_value = dice

        if moves:
            self.state.phase = AwaitingMove(moves=tuple(moves))
            self.state.message = f"{player.name} rolled {dice}. Choose a token to move."
            return RollResult(player_color=player.id, dice_value=dice, moves=moves)

        reroll = dice == GameConstants.DICE_MAX
        self.state.phase = NoMoves(reroll=reroll)
        self.state.message = (
            f"{player.name} rolled {dice} but has no valid moves. "
            + ("Roll again." if reroll else "Turn passes.")
        )
        logger.debug(self.state.message)
        return RollResult(
            player_color=player.id, dice_value=dice, moves=[], reroll=reroll
        )

    def resolve_no_moves(self) -> bool:
        """Deferred continuation of a roll without moves.

        Returns False when there is nothing to resolve (the match ended or the
        phase already moved on), so a stale continuation is harmless.
        """
        phase = self.state.phase
        if not isinstance(phase, NoMoves):
            return False
        if not phase.reroll:
            self.state.turn_number += 1
            self._advance_player()
        self._begin_turn()
        return True

    def move(self, token_id: str) -> TurnResult:
        phase = self.state.phase
        if isinstance(phase, Setup):
            raise GameNotStartedError()
        if isinstance(phase, Finished):
            raise GameOverError()
        if not isinstance(phase, AwaitingMove):
            raise MustRollFirstError()

        dice = self.state.dice_value
        result = apply_move(self.state, token_id)
        self.state.turn_number += 1

        if result.won:
            logger.info(f"{self.current_player.name} won the match")
            return TurnResult(move=result, gained_extra_turn=False, game_over=True)

        extra = grants_extra_turn(dice, result)
        if not extra:
            self._advance_player()
        self._begin_turn()
        return TurnResult(move=result, gained_extra_turn=extra, game_over=False)

    # --- Internals ---
    def _advance_player(self) -> None:
        total = len(self.state.players)
        self.state.current_player_index = (self.state.current_player_index + 1) % total

    def _begin_turn(self) -> None:
        self.state.phase = AwaitingRoll()
        self.state.dice_value = None
        self.state.mark_turn_start()
        self.state.message = f"{self.current_player.name}'s turn. Roll the dice."
