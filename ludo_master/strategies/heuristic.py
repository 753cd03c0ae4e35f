from __future__ import annotations

import random
from typing import ClassVar, Optional

from ..constants import StrategyConstants
from ..player import AIDifficulty
from .base import BaseStrategy
from .types import MoveOption, StrategyContext


class HeuristicStrategy(BaseStrategy):
    """Weighted progress/safety scorer shared by the three difficulty tiers.

    Easier tiers add more uniform noise to every score; only the hard tier
    rewards landing where opponents can follow up.
    """

    name: ClassVar[str] = "heuristic"
    difficulty: ClassVar[AIDifficulty] = AIDifficulty.MEDIUM

    def __init__(self, rng: Optional[random.Random] = None):
        super().__init__(rng)
        self.noise = StrategyConstants.NOISE_AMPLITUDE[self.difficulty.value]

    def _score_move(self, ctx: StrategyContext, move: MoveOption) -> float:
        reasons = []
        score = (
            move.progress * StrategyConstants.PROGRESS_WEIGHT
            + move.safety * StrategyConstants.SAFETY_WEIGHT
        )
        if move.lands_safe:
            reasons.append("safe square")
        elif move.in_finish_lane and not move.finishes:
            reasons.append("finish lane")

        if move.capture_count:
            score += StrategyConstants.CAPTURE_BONUS * move.capture_count
            reasons.append(f"captures {move.capture_count}")
        if move.exits_home:
            score += StrategyConstants.EXIT_HOME_BONUS
            reasons.append("exits home")
        if move.finishes:
            score += StrategyConstants.FINISH_TOKEN_BONUS
            reasons.append("finishes token")

        if self.difficulty is AIDifficulty.HARD and not move.lands_safe:
            if move.opponent_reach:
                score += StrategyConstants.BLOCKING_BONUS * move.opponent_reach
                reasons.append(f"contests {move.opponent_reach} opponent rolls")

        if self.noise:
            score += self.rng.uniform(-self.noise, self.noise)

        move.reasons = reasons
        return score


class EasyStrategy(HeuristicStrategy):
    name: ClassVar[str] = AIDifficulty.EASY.value
    description: ClassVar[str] = "Noisy scorer that often misses the best move"
    difficulty: ClassVar[AIDifficulty] = AIDifficulty.EASY


class MediumStrategy(HeuristicStrategy):
    name: ClassVar[str] = AIDifficulty.MEDIUM.value
    description: ClassVar[str] = "Balanced scorer with light noise"
    difficulty: ClassVar[AIDifficulty] = AIDifficulty.MEDIUM


class HardStrategy(HeuristicStrategy):
    name: ClassVar[str] = AIDifficulty.HARD.value
    description: ClassVar[str] = "Noise-free scorer that also contests opponent landing squares"
    difficulty: ClassVar[AIDifficulty] = AIDifficulty.HARD
