"""
Ludo Master engine
Rules, turn control and AI seats shared by the local harness and the server.
"""

from ludo_master.board import advance, reach_counts, ring_occupancy
from ludo_master.config import Config, config
from ludo_master.constants import BoardConstants, Colors, GameConstants, StrategyConstants
from ludo_master.controller import PlayerSpec, TurnController
from ludo_master.driver import MatchDriver
from ludo_master.player import AIDifficulty, Player, PlayerColor
from ludo_master.rules import apply_move, grants_extra_turn, legal_moves
from ludo_master.scheduler import AsyncioScheduler, ManualScheduler
from ludo_master.state import GameState, GameStatus
from ludo_master.strategy import StrategyFactory, select_move
from ludo_master.token import Token, TokenState
from ludo_master.types import Move, MoveResult, RollResult, TurnResult

__all__ = [
    "advance",
    "reach_counts",
    "ring_occupancy",
    "Config",
    "config",
    "BoardConstants",
    "Colors",
    "GameConstants",
    "StrategyConstants",
    "PlayerSpec",
    "TurnController",
    "MatchDriver",
    "AIDifficulty",
    "Player",
    "PlayerColor",
    "apply_move",
    "grants_extra_turn",
    "legal_moves",
    "AsyncioScheduler",
    "ManualScheduler",
    "GameState",
    "GameStatus",
    "StrategyFactory",
    "select_move",
    "Token",
    "TokenState",
    "Move",
    "MoveResult",
    "RollResult",
    "TurnResult",
]
