"""Quest models for daily and urgent quests"""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field

from levelfit.models.base import SaveModel
from levelfit.models.stats import Stat
from levelfit.utils.datetime_helpers import from_epoch_ms, to_epoch_ms


class QuestKind(str, Enum):
    """Types of quests available"""
    DAILY = "daily"
    URGENT = "urgent"


class Quest(SaveModel):
    """
    A single quest. Exactly one of target_reps / target_duration_seconds is
    nonzero; current_progress counts in that dimension.
    """
    id: str
    name: str
    description: str
    kind: QuestKind
    exercise: Optional[str] = None
    target_reps: int = Field(default=0, ge=0)
    target_duration_seconds: int = Field(default=0, ge=0)
    xp_reward: int
    stat_rewards: dict[Stat, int] = Field(default_factory=dict)
    current_progress: int = Field(default=0, ge=0)
    completed: bool = False
    claimed: bool = False
    failed: bool = False
    created_at: int  # epoch ms
    expires_at: Optional[int] = None  # epoch ms, urgent quests only

    @property
    def target(self) -> int:
        if self.target_reps > 0:
            return self.target_reps
        return self.target_duration_seconds

    @property
    def is_timed(self) -> bool:
        return self.target_reps == 0 and self.target_duration_seconds > 0

    @property
    def can_complete(self) -> bool:
        return self.target > 0 and self.current_progress >= self.target

    @property
    def progress_ratio(self) -> float:
        if self.target <= 0:
            return 0.0
        return min(1.0, self.current_progress / self.target)

    def is_expired(self, now: datetime) -> bool:
        if self.expires_at is None:
            return False
        return to_epoch_ms(now) > self.expires_at

    @property
    def expires_at_datetime(self) -> Optional[datetime]:
        return from_epoch_ms(self.expires_at) if self.expires_at is not None else None


class QuestBoard(SaveModel):
    """Both quest pools plus the last daily reset instant"""
    daily: list[Quest] = Field(default_factory=list)
    urgent: list[Quest] = Field(default_factory=list)
    last_reset_at: Optional[int] = None  # epoch ms

    def find(self, quest_id: str) -> Optional[Quest]:
        for quest in self.daily:
            if quest.id == quest_id:
                return quest
        for quest in self.urgent:
            if quest.id == quest_id:
                return quest
        return None
