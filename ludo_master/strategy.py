"""
Strategic decision-making for AI seats.
Strategy factory and the move selection entry point.
"""

import random
from typing import Dict, List, Optional, Sequence, Union

from .player import AIDifficulty, Player
from .strategies import STRATEGIES, BaseStrategy
from .types import Move


class StrategyFactory:
    """Factory class for creating strategy instances."""

    _strategies = STRATEGIES

    @classmethod
    def create_strategy(
        cls, strategy_name: str, rng: Optional[random.Random] = None
    ) -> BaseStrategy:
        """
        Create a strategy instance by name.

        Args:
            strategy_name: Name of the strategy to create
            rng: Optional random source, shared for reproducible matches

        Returns:
            BaseStrategy: Instance of the requested strategy

        Raises:
            ValueError: If strategy name is not recognized
        """
        strategy_name = strategy_name.lower()
        if strategy_name not in cls._strategies:
            available = list(cls._strategies.keys())
            raise ValueError(
                f"Unknown strategy '{strategy_name}'. Available: {available}"
            )

        return cls._strategies[strategy_name](rng=rng)

    @classmethod
    def get_available_strategies(cls) -> List[str]:
        """Get list of available strategy names."""
        return list(cls._strategies.keys())

    @classmethod
    def get_strategy_descriptions(cls) -> Dict[str, str]:
        """Get descriptions of all available strategies."""
        return {name: cls_.description for name, cls_ in cls._strategies.items()}


def select_move(
    legal_moves: Sequence[Move],
    players: Sequence[Player],
    current_player: Player,
    difficulty: Union[AIDifficulty, str] = AIDifficulty.MEDIUM,
    rng: Optional[random.Random] = None,
) -> Optional[Move]:
    """Pick a move for an AI seat; None only when there is nothing to move."""
    name = difficulty.value if isinstance(difficulty, AIDifficulty) else difficulty
    strategy = StrategyFactory.create_strategy(name, rng=rng)
    return strategy.select_move(legal_moves, players, current_player)
