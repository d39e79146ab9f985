"""Player model: the single mutable record every engine reads and writes"""
import logging
from datetime import date, datetime
from typing import Optional

from pydantic import Field, field_validator, model_validator

from levelfit.models.base import SaveModel
from levelfit.models.debuff import DebuffRecord, record_from_legacy
from levelfit.models.stats import ALL_STATS, Stat

logger = logging.getLogger(__name__)

STARTER_TITLE = "Novice"
DEFAULT_STAT_VALUE = 10


class Player(SaveModel):
    """Character progression, stats, debuffs and titles"""
    level: int = Field(default=1, ge=1)
    experience: int = Field(default=0, ge=0)
    stat_points: int = Field(default=0, ge=0)

    strength: int = Field(default=DEFAULT_STAT_VALUE, ge=1)
    agility: int = Field(default=DEFAULT_STAT_VALUE, ge=1)
    vitality: int = Field(default=DEFAULT_STAT_VALUE, ge=1)
    intelligence: int = Field(default=DEFAULT_STAT_VALUE, ge=1)
    luck: int = Field(default=DEFAULT_STAT_VALUE, ge=1)

    # debuff key -> record
    debuffs: dict[str, DebuffRecord] = Field(default_factory=dict)

    daily_quest_streak: int = Field(default=0, ge=0)
    total_reps_completed: int = Field(default=0, ge=0)
    unlocked_titles: set[str] = Field(default_factory=lambda: {STARTER_TITLE})
    current_title: str = STARTER_TITLE

    last_screen_time_check_day: Optional[date] = None

    @field_validator("debuffs", mode="before")
    @classmethod
    def _migrate_legacy_debuffs(cls, value):
        """Older saves stored `key -> expiry ms`; convert those to records"""
        if not isinstance(value, dict):
            return value
        migrated = {}
        for key, entry in value.items():
            if isinstance(entry, int):
                migrated[key] = record_from_legacy(key, entry)
            else:
                migrated[key] = entry
        return migrated

    @model_validator(mode="after")
    def _ensure_titles(self) -> "Player":
        self.unlocked_titles.add(STARTER_TITLE)
        if self.current_title not in self.unlocked_titles:
            logger.warning(f"Active title '{self.current_title}' is not unlocked, reverting to {STARTER_TITLE}")
            self.current_title = STARTER_TITLE
        return self

    def get_stat(self, stat: Stat) -> int:
        return getattr(self, Stat.parse(stat).value)

    def set_stat(self, stat: Stat, value: int) -> None:
        setattr(self, Stat.parse(stat).value, max(1, value))

    def stat_values(self) -> dict[Stat, int]:
        return {stat: self.get_stat(stat) for stat in ALL_STATS}

    @property
    def total_stats(self) -> int:
        return sum(self.stat_values().values())

    @property
    def highest_stat(self) -> int:
        return max(self.stat_values().values())

    @property
    def lifetime_experience(self) -> int:
        """Cumulative XP: (level - 1) * 100 + experience"""
        return (self.level - 1) * 100 + self.experience

    def active_debuffs(self, now: datetime) -> dict[str, DebuffRecord]:
        return {key: record for key, record in self.debuffs.items() if record.is_active(now)}
