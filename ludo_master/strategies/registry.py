from __future__ import annotations

from typing import Dict, Type

from .base import BaseStrategy
from .heuristic import EasyStrategy, HardStrategy, MediumStrategy
from .random_strategy import RandomStrategy

STRATEGY_REGISTRY: Dict[str, Type[BaseStrategy]] = {
    EasyStrategy.name: EasyStrategy,
    MediumStrategy.name: MediumStrategy,
    HardStrategy.name: HardStrategy,
    RandomStrategy.name: RandomStrategy,
}
