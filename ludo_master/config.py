import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


@dataclass(slots=True)
class Config:
    # --- Pacing of deferred continuations (seconds) ---
    NO_MOVE_DELAY: float = float(os.getenv("NO_MOVE_DELAY", 1.5))
    AI_DELAY_EASY: float = float(os.getenv("AI_DELAY_EASY", 2.0))
    AI_DELAY_MEDIUM: float = float(os.getenv("AI_DELAY_MEDIUM", 1.5))
    AI_DELAY_HARD: float = float(os.getenv("AI_DELAY_HARD", 1.0))
    AI_DELAY_JITTER: float = float(os.getenv("AI_DELAY_JITTER", 0.5))

    # Safety cap for local simulations
    MAX_TURNS: int = int(os.getenv("MAX_TURNS", 1000))

    def __post_init__(self):
        if self.NO_MOVE_DELAY < 0 or self.AI_DELAY_JITTER < 0:
            raise ValueError("Delays must be non-negative")

    def ai_delay(self, difficulty: str) -> float:
        """Base artificial delay before an AI seat acts; harder AIs act faster."""
        delays = {
            "easy": self.AI_DELAY_EASY,
            "medium": self.AI_DELAY_MEDIUM,
            "hard": self.AI_DELAY_HARD,
        }
        return delays.get(difficulty, self.AI_DELAY_MEDIUM)


config = Config()
