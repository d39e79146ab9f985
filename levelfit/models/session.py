"""Workout and mobility session logs"""
from datetime import date
from typing import Optional

from pydantic import Field

from levelfit.models.base import SaveModel


class WorkoutSet(SaveModel):
    """Individual set within a workout session"""
    reps: int = Field(ge=0)
    rpe: float = Field(ge=0.0, le=10.0)  # Rate of Perceived Exertion
    rest_seconds: int = Field(default=0, ge=0)

    @property
    def base_xp(self) -> float:
        """Unrounded XP for the set: reps * RPE * 2"""
        return self.reps * self.rpe * 2


class WorkoutSession(SaveModel):
    """Workout session log for rep tracking"""
    id: str
    exercise_name: str
    sets: list[WorkoutSet] = Field(default_factory=list)
    completed_at: int  # epoch ms
    total_xp_gained: int = 0

    @property
    def total_reps(self) -> int:
        return sum(s.reps for s in self.sets)

    @property
    def average_rpe(self) -> float:
        if not self.sets:
            return 0.0
        return sum(s.rpe for s in self.sets) / len(self.sets)


class MobilitySession(SaveModel):
    """Mobility/stretching session"""
    id: str
    activity_name: str
    duration_minutes: int = Field(ge=0)
    completed_at: int  # epoch ms
    notes: str = ""


class ScreenTimeLog(SaveModel):
    """Reported screen time hours per calendar day, plus the player's daily goal"""
    days: dict[date, int] = Field(default_factory=dict)
    daily_goal: Optional[int] = Field(default=None, ge=0)


def make_session_id(prefix: str, completed_at_ms: int, existing: Optional[set] = None) -> str:
    """
    Unique id for a logged session: {prefix}_{completedAtMs}

    A -n suffix is appended when two sessions share the same millisecond.
    """
    base = f"{prefix}_{completed_at_ms}"
    if not existing or base not in existing:
        return base
    n = 2
    while f"{base}-{n}" in existing:
        n += 1
    return f"{base}-{n}"
