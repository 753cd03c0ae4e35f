from __future__ import annotations

from typing import ClassVar, Optional

from .base import BaseStrategy
from .types import MoveOption, StrategyContext


class RandomStrategy(BaseStrategy):
    """Picks uniformly among all legal moves; useful as a baseline opponent."""

    name: ClassVar[str] = "random"
    description: ClassVar[str] = "Uniformly random legal move"

    def choose(self, ctx: StrategyContext) -> Optional[MoveOption]:
        if not ctx.moves:
            return None
        return self.rng.choice(ctx.moves)

    def _score_move(self, ctx: StrategyContext, move: MoveOption) -> float:
        return 0.0
