from __future__ import annotations

import random
from typing import ClassVar, List, Optional, Sequence, Tuple

from loguru import logger

from ..constants import StrategyConstants
from ..player import Player
from ..types import Move
from .features import build_move_options
from .types import MoveOption, StrategyContext


class BaseStrategy:
    """Base class for AI strategies with shared move selection.

    Every candidate is scored, the list is sorted best first and the final
    pick is uniform among the top few, so equal boards do not always produce
    the same move.
    """

    name: ClassVar[str] = "base"
    description: ClassVar[str] = ""
    top_candidates: ClassVar[int] = StrategyConstants.TOP_CANDIDATES

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def select_move(
        self, moves: Sequence[Move], players: Sequence[Player], current_player: Player
    ) -> Optional[Move]:
        if not moves:
            return None
        ctx = build_move_options(moves, players, current_player)
        option = self.choose(ctx)
        return option.move if option else None

    def choose(self, ctx: StrategyContext) -> Optional[MoveOption]:
        ranked = self.rank(ctx)
        if not ranked:
            return None
        for option, score in ranked:
            logger.debug(
                f"[{self.name}] {ctx.current_player.id} {option.token_id} -> "
                f"{option.new_pos}: {score:.1f} ({self.reasoning(option)})"
            )
        top = ranked[: self.top_candidates]
        return self.rng.choice(top)[0]

    def rank(self, ctx: StrategyContext) -> List[Tuple[MoveOption, float]]:
        scored = [(option, self._score_move(ctx, option)) for option in ctx.moves]
        scored.sort(key=lambda item: item[1], reverse=True)
        return scored

    @staticmethod
    def reasoning(option: MoveOption) -> str:
        return ", ".join(option.reasons) if option.reasons else "advance"

    def _score_move(
        self, ctx: StrategyContext, move: MoveOption
    ) -> float:  # pragma: no cover - abstract
        raise NotImplementedError
