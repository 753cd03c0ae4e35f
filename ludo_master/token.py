"""
Token representation for Ludo game.
Each player has 4 tokens that move around the board.
"""

from dataclasses import dataclass
from enum import Enum

from .constants import GameConstants


class TokenState(Enum):
    """Possible states of a token."""

    HOME = "HOME"  # Token is in the home yard
    ACTIVE = "ACTIVE"  # Token is on the ring or in its finish lane
    FINISHED = "FINISHED"  # Token has reached the center


@dataclass
class Token:
    """
    Represents a single token/piece in the Ludo game.

    Position encoding: -1 home yard, 0-51 ring, base+1..base+6 the color's
    finish lane, 999 finished.
    """

    token_id: str  # "<color>_<n>"
    player_color: str
    state: TokenState = TokenState.HOME
    position: int = GameConstants.HOME_POSITION

    def __post_init__(self):
        """Keep position consistent with a HOME or FINISHED state."""
        if self.state == TokenState.HOME:
            self.position = GameConstants.HOME_POSITION
        elif self.state == TokenState.FINISHED:
            self.position = GameConstants.FINISHED_POSITION

    @staticmethod
    def make_id(color: str, index: int) -> str:
        return f"{color}_{index}"

    def is_in_home(self) -> bool:
        """Check if token is still in the home yard."""
        return self.state == TokenState.HOME

    def is_active(self) -> bool:
        """Check if token is in play (ring or finish lane)."""
        return self.state == TokenState.ACTIVE

    def is_finished(self) -> bool:
        """Check if token has reached the center."""
        return self.state == TokenState.FINISHED

    def send_home(self) -> None:
        self.state = TokenState.HOME
        self.position = GameConstants.HOME_POSITION

    def finish(self) -> None:
        self.state = TokenState.FINISHED
        self.position = GameConstants.FINISHED_POSITION

    def place(self, position: int) -> None:
        self.state = TokenState.ACTIVE
        self.position = position

    def to_dict(self) -> dict:
        """Wire representation of the token."""
        return {
            "id": self.token_id,
            "color": self.player_color,
            "position": self.position,
            "state": self.state.value,
        }

    def __str__(self) -> str:
        return f"Token({self.token_id}: {self.state.value} at {self.position})"
