"""
Workout Logging

XP for a workout session:
- Base: sum of reps * RPE * 2 over all sets
- Effort multiplier: high RPE, high volume, many sets, steady moderate effort
- Stat multiplier: STR helps strength work, AGI/VIT help cardio, INT helps
  everything, LUK gives a chance at +50%
- Rounded once, after both multipliers
"""

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, List, Optional
import logging

from levelfit.gamification.stat_engine import LevelUpOutcome, grant_experience
from levelfit.models.player import Player
from levelfit.models.session import WorkoutSession, WorkoutSet, make_session_id
from levelfit.utils.datetime_helpers import (
    calendar_day,
    consecutive_day_streak,
    from_epoch_ms,
    start_of_week,
    to_epoch_ms,
)
from levelfit.utils.random_source import RandomSource
from levelfit.utils.rounding import clamp, round_half_up

logger = logging.getLogger(__name__)

STRENGTH_EXERCISES = (
    "push-up", "pull-up", "squat", "deadlift", "bench press",
    "overhead press", "dip", "chin-up", "row",
)

CARDIO_EXERCISES = (
    "burpee", "jumping jack", "mountain climber", "high knee",
    "running", "sprint", "cardio", "hiit",
)

STATS_WINDOW = timedelta(days=30)
RPE_HISTORY_SESSIONS = 3
DEFAULT_RPE = 7.0
DELOAD_RPE = 7.5


@dataclass
class WorkoutResult:
    """Result of logging a complete workout session"""
    session: WorkoutSession
    xp_gained: int
    level_up: LevelUpOutcome
    total_reps: int
    average_rpe: float


@dataclass
class SetResult:
    """XP preview for a single set; nothing is granted"""
    set: WorkoutSet
    xp_gained: int
    exercise_name: str


@dataclass
class PersonalBest:
    exercise: str
    max_reps: int
    max_xp: int
    best_rpe: float
    achieved_at: datetime


@dataclass
class WorkoutStats:
    total_sessions: int = 0
    total_reps: int = 0
    total_xp_gained: int = 0
    average_rpe: float = 0.0
    favorite_exercise: str = "None"
    current_streak: int = 0
    sessions_this_week: int = 0
    personal_bests: Dict[str, PersonalBest] = field(default_factory=dict)


def is_strength_exercise(exercise_name: str) -> bool:
    name = exercise_name.lower()
    return any(exercise in name for exercise in STRENGTH_EXERCISES)


def is_cardio_exercise(exercise_name: str) -> bool:
    name = exercise_name.lower()
    return any(exercise in name for exercise in CARDIO_EXERCISES)


def effort_multiplier(average_rpe: float, total_reps: int, set_count: int) -> float:
    """Multiplier for effort and volume, starting at 1.0"""
    multiplier = 1.0

    if average_rpe >= 8.0:
        multiplier += 0.25
    elif average_rpe >= 7.0:
        multiplier += 0.15

    if total_reps >= 100:
        multiplier += 0.20
    elif total_reps >= 50:
        multiplier += 0.10

    if set_count >= 5:
        multiplier += 0.15
    elif set_count >= 3:
        multiplier += 0.10

    # Consistency bonus: moderate RPE with good volume
    if 6.0 <= average_rpe <= 8.0 and total_reps >= 30:
        multiplier += 0.10

    return multiplier


def stat_multiplier(player: Player, exercise_name: str, rng: RandomSource) -> float:
    """
    Multiplier from the player's base stats

    Consumes one random draw for the luck bonus.
    """
    multiplier = 1.0

    if is_strength_exercise(exercise_name):
        multiplier += (player.strength - 10) * 0.01

    if is_cardio_exercise(exercise_name):
        multiplier += (player.agility - 10) * 0.008
        multiplier += (player.vitality - 10) * 0.008

    multiplier += (player.intelligence - 10) * 0.005

    if rng.uniform_float() < player.luck / 1000:
        logger.debug("Lucky bonus triggered (+50%)")
        multiplier += 0.5

    return multiplier


def calculate_workout_xp(player: Player, exercise_name: str, sets: List[WorkoutSet], rng: RandomSource) -> int:
    """XP for a list of sets; no sets means no XP and no luck roll"""
    if not sets:
        return 0

    base_xp = sum(s.base_xp for s in sets)
    total_reps = sum(s.reps for s in sets)
    average_rpe = sum(s.rpe for s in sets) / len(sets)

    multiplier = effort_multiplier(average_rpe, total_reps, len(sets)) * stat_multiplier(player, exercise_name, rng)
    return max(0, round_half_up(base_xp * multiplier))


def log_workout(
    player: Player,
    exercise_name: str,
    sets: List[WorkoutSet],
    now: datetime,
    rng: RandomSource,
    existing_ids: Optional[set] = None,
) -> WorkoutResult:
    """
    Log a complete workout session

    Adds the reps to the player's lifetime total and grants the XP. Routing
    reps to quests is left to the caller.

    Args:
        player: Player to mutate
        exercise_name: Free-text exercise name ("Push-ups", "HIIT circuit", ...)
        sets: Sets performed
        now: Completion instant
        rng: Random source for the luck bonus
        existing_ids: Ids already in the session log, kept unique

    Returns:
        WorkoutResult with the stored session and the level-up outcome
    """
    xp_gained = calculate_workout_xp(player, exercise_name, sets, rng)

    session = WorkoutSession(
        id=make_session_id("workout", to_epoch_ms(now), existing_ids),
        exercise_name=exercise_name,
        sets=list(sets),
        completed_at=to_epoch_ms(now),
        total_xp_gained=xp_gained,
    )

    player.total_reps_completed += session.total_reps
    level_up = grant_experience(player, xp_gained)

    logger.info(
        f"Logged {exercise_name}: {len(sets)} sets, {session.total_reps} reps, "
        f"avg RPE {session.average_rpe:.1f}, +{xp_gained} XP"
    )

    return WorkoutResult(
        session=session,
        xp_gained=xp_gained,
        level_up=level_up,
        total_reps=session.total_reps,
        average_rpe=session.average_rpe,
    )


def preview_single_set(player: Player, exercise_name: str, reps: int, rpe: float,
                       rng: RandomSource, rest_seconds: int = 0) -> SetResult:
    """XP a single set would earn on its own"""
    workout_set = WorkoutSet(reps=reps, rpe=rpe, rest_seconds=rest_seconds)
    return SetResult(
        set=workout_set,
        xp_gained=calculate_workout_xp(player, exercise_name, [workout_set], rng),
        exercise_name=exercise_name,
    )


def recommended_rest_seconds(rpe: float) -> int:
    if rpe >= 9.0:
        return 180
    if rpe >= 7.0:
        return 120
    if rpe >= 5.0:
        return 90
    return 60


def recommended_rpe(sessions: List[WorkoutSession], exercise_name: str) -> float:
    """
    Target RPE for the next session of an exercise

    Based on the average RPE of the last few sessions for the same exercise:
    half a point above it, to the nearest half point, within 6.0-8.5. Recent
    near-max efforts (average 9+) back off to 7.5. No history gives 7.0.
    """
    name = exercise_name.strip().lower()
    history = sorted(
        (s for s in sessions if s.exercise_name.strip().lower() == name and s.sets),
        key=lambda s: s.completed_at,
    )[-RPE_HISTORY_SESSIONS:]
    if not history:
        return DEFAULT_RPE

    average = sum(s.average_rpe for s in history) / len(history)
    if average >= 9.0:
        return DELOAD_RPE
    return clamp(round_half_up((average + 0.5) * 2) / 2, 6.0, 8.5)


def _personal_bests(sessions: List[WorkoutSession]) -> Dict[str, PersonalBest]:
    bests: Dict[str, PersonalBest] = {}
    for session in sorted(sessions, key=lambda s: s.completed_at):
        current = bests.get(session.exercise_name)
        if current is None or session.total_reps > current.max_reps:
            bests[session.exercise_name] = PersonalBest(
                exercise=session.exercise_name,
                max_reps=session.total_reps,
                max_xp=max(session.total_xp_gained, current.max_xp if current else 0),
                best_rpe=session.average_rpe,
                achieved_at=from_epoch_ms(session.completed_at),
            )
        else:
            current.max_xp = max(current.max_xp, session.total_xp_gained)
    return bests


def workout_stats(
    sessions: List[WorkoutSession],
    now: datetime,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    tz_name: Optional[str] = None,
) -> WorkoutStats:
    """
    Aggregate workout sessions in a window (default: the last 30 days)

    The streak counts consecutive calendar days with at least one session,
    ending today or yesterday.
    """
    start_ms = to_epoch_ms(start or now - STATS_WINDOW)
    end_ms = to_epoch_ms(end or now)
    window = [s for s in sessions if start_ms <= s.completed_at <= end_ms]

    if not window:
        return WorkoutStats()

    today = calendar_day(now, tz_name)
    session_days = [calendar_day(from_epoch_ms(s.completed_at), tz_name) for s in window]
    week_start = start_of_week(today)

    exercise_counts = Counter(s.exercise_name for s in window)

    return WorkoutStats(
        total_sessions=len(window),
        total_reps=sum(s.total_reps for s in window),
        total_xp_gained=sum(s.total_xp_gained for s in window),
        average_rpe=sum(s.average_rpe for s in window) / len(window),
        favorite_exercise=exercise_counts.most_common(1)[0][0],
        current_streak=consecutive_day_streak(session_days, today),
        sessions_this_week=sum(1 for day in session_days if day >= week_start),
        personal_bests=_personal_bests(window),
    )
