"""Application configuration using environment variables."""
import os
from functools import lru_cache
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    # Server
    HOST: str = os.getenv("HOST", "127.0.0.1")
    PORT: int = int(os.getenv("PORT", "8000"))
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # CORS - Frontend URL
    FRONTEND_URL: str = os.getenv("FRONTEND_URL", "http://localhost:3000")

    # Game Constants
    GRID_ROWS: int = int(os.getenv("GRID_ROWS", "3"))
    GRID_COLS: int = int(os.getenv("GRID_COLS", "3"))
    CASTLE_HP: int = int(os.getenv("CASTLE_HP", "50"))
    STARTING_MAX_MANA: int = int(os.getenv("STARTING_MAX_MANA", "3"))
    MANA_CAP: int = int(os.getenv("MANA_CAP", "10"))
    STARTING_HAND_SIZE: int = int(os.getenv("STARTING_HAND_SIZE", "5"))
    TURN_LIMIT: int = int(os.getenv("TURN_LIMIT", "50"))  # 0 disables the turn limit

    # AI tuning
    AI_VARIANCE_FACTOR: float = float(os.getenv("AI_VARIANCE_FACTOR", "0.3"))
    AI_MEMORY_SIZE: int = int(os.getenv("AI_MEMORY_SIZE", "5"))


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
