"""Configuration settings for the scheduler."""
import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

# Load environment variables from .env file
env_file = ".env.test" if os.getenv("ENV") == "test" else ".env"
load_dotenv(env_file)


# Scheduling constants
BASE_WORD_MIN_DEGREE = 4  # combos a word needs to count as a base word
MAX_CARDS_PER_ANCHOR = 3
MIN_PARTNER_DEGREE = 2  # last-card bias ignores partners below this degree
MAX_BRIDGE_LENGTH = 10  # combos


def _optional_int(name: str) -> Optional[int]:
    value = os.getenv(name)
    return int(value) if value else None


@dataclass
class DatabaseSettings:
    """Database configuration settings."""
    url: str = os.getenv("DATABASE_URL", "sqlite:///bigbean.db")
    echo: bool = os.getenv("DATABASE_ECHO", "false").lower() == "true"


@dataclass
class LoggingSettings:
    """Logging configuration settings."""
    level: str = os.getenv("LOG_LEVEL", "INFO")
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    dir: Optional[str] = os.getenv("LOG_DIR", None)
    rotation: str = os.getenv("LOG_ROTATION", "midnight")
    interval: int = int(os.getenv("LOG_INTERVAL", "1"))
    backup_count: int = int(os.getenv("LOG_BACKUP_COUNT", "7"))


@dataclass
class SchedulerSettings:
    """Anchor scheduling settings."""
    base_word_min_degree: int = int(os.getenv("BASE_WORD_MIN_DEGREE", str(BASE_WORD_MIN_DEGREE)))
    max_cards_per_anchor: int = int(os.getenv("MAX_CARDS_PER_ANCHOR", str(MAX_CARDS_PER_ANCHOR)))
    min_partner_degree: int = int(os.getenv("MIN_PARTNER_DEGREE", str(MIN_PARTNER_DEGREE)))
    max_bridge_length: int = int(os.getenv("MAX_BRIDGE_LENGTH", str(MAX_BRIDGE_LENGTH)))
    history_limit: int = int(os.getenv("HISTORY_LIMIT", "500"))
    seed: Optional[int] = field(default_factory=lambda: _optional_int("SCHEDULER_SEED"))


def get_database_settings() -> DatabaseSettings:
    """Get database settings."""
    return DatabaseSettings()


def get_logging_settings() -> LoggingSettings:
    """Get logging settings."""
    return LoggingSettings()


def get_scheduler_settings() -> SchedulerSettings:
    """Get scheduler settings."""
    return SchedulerSettings()


@dataclass
class Settings:
    """Main settings class that combines all configuration settings."""
    database: DatabaseSettings = field(default_factory=get_database_settings)
    logging: LoggingSettings = field(default_factory=get_logging_settings)
    scheduler: SchedulerSettings = field(default_factory=get_scheduler_settings)

    def validate(self) -> None:
        """Validate settings and raise ValueError if invalid."""
        if not self.database.url:
            raise ValueError("DATABASE_URL is required")

        if self.scheduler.base_word_min_degree < 1:
            raise ValueError("BASE_WORD_MIN_DEGREE must be positive")

        if self.scheduler.max_cards_per_anchor < 1:
            raise ValueError("MAX_CARDS_PER_ANCHOR must be positive")

        if self.scheduler.min_partner_degree < 0:
            raise ValueError("MIN_PARTNER_DEGREE cannot be negative")

        if self.scheduler.max_bridge_length < 1:
            raise ValueError("MAX_BRIDGE_LENGTH must be positive")

        if self.scheduler.history_limit < 1:
            raise ValueError("HISTORY_LIMIT must be positive")


# Create global settings instance
settings = Settings()
settings.validate()
