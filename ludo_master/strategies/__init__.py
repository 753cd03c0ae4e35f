"""AI move selection strategies for computer-controlled seats."""

from .base import BaseStrategy
from .features import build_move_options, progress_score, safety_score
from .heuristic import EasyStrategy, HardStrategy, HeuristicStrategy, MediumStrategy
from .random_strategy import RandomStrategy
from .registry import STRATEGY_REGISTRY
from .types import MoveOption, StrategyContext

STRATEGIES = STRATEGY_REGISTRY

__all__ = [
    "MoveOption",
    "StrategyContext",
    "build_move_options",
    "progress_score",
    "safety_score",
    "BaseStrategy",
    "HeuristicStrategy",
    "EasyStrategy",
    "MediumStrategy",
    "HardStrategy",
    "RandomStrategy",
    "STRATEGIES",
    "STRATEGY_REGISTRY",
]
