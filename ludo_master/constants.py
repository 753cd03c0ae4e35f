"""
Constants and configuration values for the Ludo game.
Centralized location for all game rules and board layout constants.
"""

from typing import Dict, FrozenSet, Optional


class GameConstants:
    """Core game constants and rules."""

    # Board dimensions
    MAIN_BOARD_SIZE = 52
    FINISH_LANE_SIZE = 6
    TOKENS_PER_PLAYER = 4
    MIN_PLAYERS = 2
    MAX_PLAYERS = 4

    # Dice
    DICE_MIN = 1
    DICE_MAX = 6
    EXIT_HOME_ROLL = 6

    # Win condition
    TOKENS_TO_WIN = 4

    # Special positions
    HOME_POSITION = -1  # Tokens start in the home yard
    FINISHED_POSITION = 999  # Token reached the center and left play


class Colors:
    """Player color constants."""

    RED = "red"
    GREEN = "green"
    YELLOW = "yellow"
    BLUE = "blue"

    # Join order / seat order
    ALL_COLORS = [RED, GREEN, YELLOW, BLUE]


class BoardConstants:
    """Board layout and position constants."""

    # Safe squares on the shared ring (starting squares + stars)
    SAFE_SQUARES: FrozenSet[int] = frozenset({1, 9, 14, 22, 27, 35, 40, 48})

    # Ring index where each color enters the board from its home yard
    START_POSITIONS: Dict[str, int] = {
        Colors.RED: 1,
        Colors.GREEN: 14,
        Colors.YELLOW: 27,
        Colors.BLUE: 40,
    }

    # Last ring index before entering the color's finish lane
    FINISH_LANE_ENTRIES: Dict[str, int] = {
        Colors.RED: 51,
        Colors.GREEN: 12,
        Colors.YELLOW: 25,
        Colors.BLUE: 38,
    }

    # Finish lane cells are base + 1 .. base + FINISH_LANE_SIZE
    FINISH_LANE_BASES: Dict[str, int] = {
        Colors.RED: 100,
        Colors.GREEN: 200,
        Colors.YELLOW: 300,
        Colors.BLUE: 400,
    }

    @classmethod
    def is_safe_position(cls, position: int) -> bool:
        """Check if a ring position is a safe square."""
        return position in cls.SAFE_SQUARES

    @classmethod
    def is_ring_position(cls, position: int) -> bool:
        return 0 <= position < GameConstants.MAIN_BOARD_SIZE

    @classmethod
    def is_finish_lane_position(cls, position: int) -> bool:
        """Check if a position is a cell of any color's finish lane."""
        return cls.finish_lane_owner(position) is not None

    @classmethod
    def finish_lane_owner(cls, position: int) -> Optional[str]:
        """Return the color owning the finish lane cell, or None."""
        for color, base in cls.FINISH_LANE_BASES.items():
            if base + 1 <= position <= base + GameConstants.FINISH_LANE_SIZE:
                return color
        return None

    @classmethod
    def finish_lane_terminal(cls, color: str) -> int:
        """Last cell of the color's finish lane; landing here finishes a token."""
        return cls.FINISH_LANE_BASES[color] + GameConstants.FINISH_LANE_SIZE


class StrategyConstants:
    """Constants for AI strategy calculations."""

    # Weights of the base components
    PROGRESS_WEIGHT = 0.4
    SAFETY_WEIGHT = 0.2

    # Safety scores per landing square type
    SAFE_ZONE_SAFETY = 10.0
    FINISH_LANE_SAFETY = 8.0
    OPEN_RING_SAFETY = 3.0
    HOME_SAFETY = 0.0

    # Progress scale (0..100)
    FINISHED_PROGRESS = 100.0
    FINISH_LANE_PROGRESS_BASE = 80.0
    FINISH_LANE_PROGRESS_STEP = 4.0
    RING_PROGRESS_CAP = 50.0

    # Bonuses
    CAPTURE_BONUS = 25.0
    EXIT_HOME_BONUS = 15.0
    FINISH_TOKEN_BONUS = 50.0
    BLOCKING_BONUS = 5.0

    # Difficulty noise (uniform +/- amplitude)
    NOISE_AMPLITUDE: Dict[str, float] = {
        "easy": 10.0,
        "medium": 5.0,
        "hard": 0.0,
    }

    # Candidates considered for the final random pick
    TOP_CANDIDATES = 3
