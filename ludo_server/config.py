import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


@dataclass(slots=True)
class ServerConfig:
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", 3001))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Room lifecycle (seconds)
    ROOM_INACTIVITY_TIMEOUT: float = float(os.getenv("ROOM_INACTIVITY_TIMEOUT", 3600))
    CLEANUP_INTERVAL: float = float(os.getenv("CLEANUP_INTERVAL", 1800))
    DISCONNECT_GRACE_PERIOD: float = float(os.getenv("DISCONNECT_GRACE_PERIOD", 300))

    ROOM_ID_LENGTH: int = int(os.getenv("ROOM_ID_LENGTH", 8))
    MAX_CHAT_LENGTH: int = int(os.getenv("MAX_CHAT_LENGTH", 500))

    def __post_init__(self):
        if not 1 <= self.ROOM_ID_LENGTH <= 32:
            raise ValueError("ROOM_ID_LENGTH must be between 1 and 32")
        if self.CLEANUP_INTERVAL <= 0:
            raise ValueError("CLEANUP_INTERVAL must be positive")


server_config = ServerConfig()
