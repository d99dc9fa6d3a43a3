"""
Centralized configuration for the Nine-Card Golf engine.

Configuration is loaded from (in order of precedence):
1. Environment variables
2. .env file (if exists)
3. Default values

Usage:
    from config import config
    print(config.TOTAL_HANDS)
    print(config.SHUFFLE_SEED)
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

env_path = Path(__file__).parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)


def get_env(key: str, default: str = "") -> str:
    """Get environment variable with default."""
    return os.environ.get(key, default)


def get_env_int(key: str, default: int = 0) -> int:
    """Get integer environment variable."""
    try:
        return int(os.environ.get(key, str(default)))
    except ValueError:
        return default


def get_env_optional_int(key: str) -> Optional[int]:
    """Get integer environment variable, or None if unset or malformed."""
    raw = os.environ.get(key, "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


@dataclass
class MatchDefaults:
    """Default match settings."""
    total_hands: int = 9
    player_names: list[str] = field(default_factory=list)


@dataclass
class EngineConfig:
    """Engine configuration."""
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"

    # Seed for every shuffle in a session; None means pick one at random
    SHUFFLE_SEED: Optional[int] = None

    match_defaults: MatchDefaults = field(default_factory=MatchDefaults)

    @property
    def TOTAL_HANDS(self) -> int:
        return self.match_defaults.total_hands

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """Load configuration from environment variables."""
        names_str = get_env("PLAYER_NAMES", "")
        player_names = [n.strip() for n in names_str.split(",") if n.strip()]

        return cls(
            LOG_LEVEL=get_env("LOG_LEVEL", "INFO"),
            ENVIRONMENT=get_env("ENVIRONMENT", "development"),
            SHUFFLE_SEED=get_env_optional_int("SHUFFLE_SEED"),
            match_defaults=MatchDefaults(
                total_hands=get_env_int("TOTAL_HANDS", 9),
                player_names=player_names,
            ),
        )


# Global config instance - loaded once at module import
config = EngineConfig.from_env()


def reload_config() -> EngineConfig:
    """Reload configuration from environment (useful for testing)."""
    global config
    config = EngineConfig.from_env()
    return config


def get_config() -> EngineConfig:
    """Current configuration, including any reload since import."""
    return config
