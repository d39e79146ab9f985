"""Configuration management"""
import os
from pathlib import Path
from dotenv import load_dotenv

from levelfit.exceptions import ConfigurationError

load_dotenv()

# Storage
DATA_PATH: Path = Path(os.getenv("DATA_PATH", "./data"))

# Logging
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

# Calendar boundaries (daily quest reset, screen time prompt) are evaluated in this zone
TIMEZONE: str = os.getenv("TIMEZONE", "UTC")

# Urgent quests
URGENT_QUEST_CHANCE: float = float(os.getenv("URGENT_QUEST_CHANCE", "0.2"))
MAX_URGENT_QUESTS: int = int(os.getenv("MAX_URGENT_QUESTS", "2"))

# Screen time thresholds (hours per day)
SCREEN_TIME_WARNING_HOURS: int = int(os.getenv("SCREEN_TIME_WARNING_HOURS", "3"))
SCREEN_TIME_PENALTY_HOURS: int = int(os.getenv("SCREEN_TIME_PENALTY_HOURS", "4"))
SCREEN_TIME_SEVERE_HOURS: int = int(os.getenv("SCREEN_TIME_SEVERE_HOURS", "6"))

# Days without a logged workout before an inactivity penalty is due
INACTIVITY_THRESHOLD_DAYS: int = int(os.getenv("INACTIVITY_THRESHOLD_DAYS", "3"))


# Validation
def validate_config() -> None:
    """Validate configuration values"""
    if not 0.0 <= URGENT_QUEST_CHANCE <= 1.0:
        raise ConfigurationError(
            f"URGENT_QUEST_CHANCE must be between 0 and 1, got {URGENT_QUEST_CHANCE}",
            config_key="URGENT_QUEST_CHANCE",
        )
    if MAX_URGENT_QUESTS < 0:
        raise ConfigurationError("MAX_URGENT_QUESTS must not be negative", config_key="MAX_URGENT_QUESTS")
    if not SCREEN_TIME_WARNING_HOURS <= SCREEN_TIME_PENALTY_HOURS <= SCREEN_TIME_SEVERE_HOURS:
        raise ConfigurationError(
            "Screen time thresholds must satisfy WARNING <= PENALTY <= SEVERE",
            config_key="SCREEN_TIME_PENALTY_HOURS",
        )
    if INACTIVITY_THRESHOLD_DAYS < 1:
        raise ConfigurationError(
            "INACTIVITY_THRESHOLD_DAYS must be at least 1", config_key="INACTIVITY_THRESHOLD_DAYS"
        )
    if LOG_LEVEL.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        raise ConfigurationError(f"Unknown LOG_LEVEL '{LOG_LEVEL}'", config_key="LOG_LEVEL")
