"""
Player representation for Ludo game.
Each player has a color and controls 4 tokens.
"""

from enum import Enum
from typing import Dict, List, Optional

from .constants import BoardConstants, Colors, GameConstants
from .token import Token, TokenState


class PlayerColor(Enum):
    """Available player colors in Ludo, in seat order."""

    RED = Colors.RED
    GREEN = Colors.GREEN
    YELLOW = Colors.YELLOW
    BLUE = Colors.BLUE


class AIDifficulty(Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class Player:
    """
    Represents a player in the Ludo game.
    """

    def __init__(
        self,
        color: PlayerColor,
        name: Optional[str] = None,
        is_ai: bool = False,
        ai_difficulty: Optional[AIDifficulty] = None,
    ):
        """
        Initialize a player with their color and 4 tokens.

        Args:
            color: Player's color; also the player's id for the match
            name: Display name, defaults to the capitalized color
            is_ai: Whether the seat is driven by the AI move selector
            ai_difficulty: Difficulty tier for AI seats (defaults to medium)
        """
        self.color = color
        self.name = name or color.value.capitalize()
        self.is_ai = is_ai
        self.ai_difficulty = ai_difficulty
        if is_ai and ai_difficulty is None:
            self.ai_difficulty = AIDifficulty.MEDIUM

        self.tokens: List[Token] = [
            Token(
                token_id=Token.make_id(color.value, i),
                player_color=color.value,
                state=TokenState.HOME,
            )
            for i in range(GameConstants.TOKENS_PER_PLAYER)
        ]

        self.start_position = BoardConstants.START_POSITIONS[color.value]

    @property
    def id(self) -> str:
        return self.color.value

    def hand_to_ai(self, difficulty: AIDifficulty = AIDifficulty.MEDIUM) -> None:
        """Let the AI selector play this seat from now on."""
        self.is_ai = True
        self.ai_difficulty = difficulty

    def get_token(self, token_id: str) -> Optional[Token]:
        return next((t for t in self.tokens if t.token_id == token_id), None)

    def get_finished_tokens_count(self) -> int:
        """Get the number of tokens that have reached the center."""
        return sum(1 for token in self.tokens if token.is_finished())

    def has_won(self) -> bool:
        """Check if player has won (all 4 tokens finished)."""
        return self.get_finished_tokens_count() == GameConstants.TOKENS_TO_WIN

    def token_counts(self) -> Dict[str, int]:
        return {
            "tokensHome": sum(1 for t in self.tokens if t.is_in_home()),
            "tokensActive": sum(1 for t in self.tokens if t.is_active()),
            "tokensFinished": self.get_finished_tokens_count(),
        }

    def to_dict(self) -> Dict:
        """Wire representation of the player."""
        return {
            "id": self.id,
            "name": self.name,
            "tokens": [token.to_dict() for token in self.tokens],
            "isAI": self.is_ai,
            "aiDifficulty": self.ai_difficulty.value if self.ai_difficulty else None,
        }

    def __str__(self) -> str:
        """String representation of the player."""
        return f"Player({self.color.value}, tokens: {[str(token) for token in self.tokens]})"
