"""
Mobility Logging

Mobility and stretching sessions:
- XP: minutes * 1.5, scaled by activity type and session length, rounded once
- Every active debuff is shortened by 2 minutes per minute of mobility
- Recommendations adapt to stat imbalances and active debuffs
"""

from collections import Counter, defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Dict, List, Optional
import logging

from levelfit.gamification.debuff_ledger import DebuffLedger, MOBILITY_REDUCTION_PER_MINUTE
from levelfit.gamification.stat_engine import LevelUpOutcome, grant_experience
from levelfit.models.player import Player
from levelfit.models.session import MobilitySession, make_session_id
from levelfit.utils.datetime_helpers import (
    calendar_day,
    consecutive_day_streak,
    from_epoch_ms,
    start_of_week,
    to_epoch_ms,
)
from levelfit.utils.rounding import round_half_up

logger = logging.getLogger(__name__)

XP_PER_MINUTE = 1.5
STATS_WINDOW = timedelta(days=30)

# activity name -> (multiplier, benefits)
ACTIVITY_BONUSES: Dict[str, tuple] = {
    "yoga": (1.3, ["Mental clarity", "Stress relief", "Balance"]),
    "yoga flow": (1.3, ["Mental clarity", "Stress relief", "Balance"]),
    "dynamic warm-up": (1.1, ["Injury prevention", "Performance boost"]),
    "warm-up": (1.1, ["Injury prevention", "Performance boost"]),
    "stretching": (1.2, ["Flexibility", "Recovery"]),
    "full body stretch": (1.2, ["Flexibility", "Recovery"]),
    "foam rolling": (1.4, ["Muscle recovery", "Tension relief"]),
    "pilates": (1.25, ["Core strength", "Posture"]),
}


class MobilityPriority(str, Enum):
    URGENT = "urgent"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return list(MobilityPriority).index(self)


class MobilityAchievementType(str, Enum):
    SESSIONS = "sessions"
    DURATION = "duration"
    STREAK = "streak"


@dataclass
class MobilityBenefits:
    xp_bonus: int
    debuff_reduction_minutes: int
    recovery_bonus: int
    specific_benefits: List[str]


@dataclass
class MobilityResult:
    """Result of logging a mobility session"""
    session: MobilitySession
    benefits: MobilityBenefits
    debuffs_reduced: int
    level_up: Optional[LevelUpOutcome] = None


@dataclass
class MobilityStats:
    total_sessions: int = 0
    total_minutes: int = 0
    average_duration: float = 0.0
    favorite_activity: str = "None"
    current_streak: int = 0
    sessions_this_week: int = 0
    activity_breakdown: Dict[str, int] = field(default_factory=dict)
    longest_session: int = 0


@dataclass
class MobilityRecommendation:
    name: str
    description: str
    recommended_duration: int
    benefits: List[str]
    priority: MobilityPriority


@dataclass
class MobilityAchievement:
    name: str
    description: str
    type: MobilityAchievementType


def calculate_mobility_benefits(duration_minutes: int, activity_name: str) -> MobilityBenefits:
    """
    Benefits of a mobility session

    Args:
        duration_minutes: Session length
        activity_name: Activity (matched case-insensitively against known activities)

    Returns:
        MobilityBenefits with XP, debuff reduction and recovery bonus
    """
    multiplier, benefits = ACTIVITY_BONUSES.get(activity_name.strip().lower(), (1.0, ["General mobility"]))
    benefits = list(benefits)

    if duration_minutes >= 45:
        multiplier += 0.3
        benefits.append("Extended session bonus")
    elif duration_minutes >= 30:
        multiplier += 0.2
    elif duration_minutes >= 20:
        multiplier += 0.1

    reduction = MOBILITY_REDUCTION_PER_MINUTE * duration_minutes

    return MobilityBenefits(
        xp_bonus=round_half_up(duration_minutes * XP_PER_MINUTE * multiplier),
        debuff_reduction_minutes=int(reduction.total_seconds() // 60),
        recovery_bonus=round_half_up(duration_minutes * 0.5),
        specific_benefits=benefits,
    )


def log_mobility(
    player: Player,
    activity_name: str,
    duration_minutes: int,
    now: datetime,
    ledger: DebuffLedger,
    notes: str = "",
    existing_ids: Optional[set] = None,
) -> MobilityResult:
    """Log a session: shorten debuffs, then grant the XP bonus"""
    session = MobilitySession(
        id=make_session_id("mobility", to_epoch_ms(now), existing_ids),
        activity_name=activity_name,
        duration_minutes=duration_minutes,
        completed_at=to_epoch_ms(now),
        notes=notes,
    )

    benefits = calculate_mobility_benefits(duration_minutes, activity_name)
    debuffs_reduced = ledger.apply_mobility_bonus(player, duration_minutes, now)

    level_up = None
    if benefits.xp_bonus > 0:
        level_up = grant_experience(player, benefits.xp_bonus)

    logger.info(
        f"Logged {activity_name} for {duration_minutes} min: +{benefits.xp_bonus} XP, "
        f"{debuffs_reduced} debuffs reduced"
    )

    return MobilityResult(
        session=session,
        benefits=benefits,
        debuffs_reduced=debuffs_reduced,
        level_up=level_up,
    )


def mobility_stats(
    sessions: List[MobilitySession],
    now: datetime,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    tz_name: Optional[str] = None,
) -> MobilityStats:
    """Aggregate mobility sessions in a window (default: the last 30 days)"""
    start_ms = to_epoch_ms(start or now - STATS_WINDOW)
    end_ms = to_epoch_ms(end or now)
    window = [s for s in sessions if start_ms <= s.completed_at <= end_ms]

    if not window:
        return MobilityStats()

    today = calendar_day(now, tz_name)
    session_days = [calendar_day(from_epoch_ms(s.completed_at), tz_name) for s in window]
    week_start = start_of_week(today)

    breakdown: Dict[str, int] = defaultdict(int)
    for session in window:
        breakdown[session.activity_name] += session.duration_minutes

    total_minutes = sum(s.duration_minutes for s in window)

    return MobilityStats(
        total_sessions=len(window),
        total_minutes=total_minutes,
        average_duration=total_minutes / len(window),
        favorite_activity=Counter(s.activity_name for s in window).most_common(1)[0][0],
        current_streak=consecutive_day_streak(session_days, today),
        sessions_this_week=sum(1 for day in session_days if day >= week_start),
        activity_breakdown=dict(breakdown),
        longest_session=max(s.duration_minutes for s in window),
    )


def recommended_activities(player: Player, now: datetime) -> List[MobilityRecommendation]:
    """Mobility suggestions ordered by priority (urgent first)"""
    active_count = len(player.active_debuffs(now))
    base_priority = MobilityPriority.HIGH if active_count else MobilityPriority.MEDIUM

    recommendations = [
        MobilityRecommendation(
            name="Dynamic Warm-up",
            description="Prepare your body for exercise",
            recommended_duration=10,
            benefits=["Injury prevention", "Better performance"],
            priority=base_priority,
        ),
        MobilityRecommendation(
            name="Full Body Stretch",
            description="Complete stretching routine",
            recommended_duration=20,
            benefits=["Flexibility", "Debuff reduction", "Recovery"],
            priority=base_priority,
        ),
        MobilityRecommendation(
            name="Yoga Flow",
            description="Flowing yoga sequence",
            recommended_duration=30,
            benefits=["Flexibility", "Mental clarity", "Stress relief"],
            priority=MobilityPriority.MEDIUM,
        ),
    ]

    if player.agility < player.strength:
        recommendations.append(MobilityRecommendation(
            name="Agility Mobility",
            description="Focus on movement quality and speed",
            recommended_duration=15,
            benefits=["Agility improvement", "Movement quality"],
            priority=MobilityPriority.HIGH,
        ))

    if player.vitality < player.strength:
        recommendations.append(MobilityRecommendation(
            name="Recovery Stretching",
            description="Gentle stretches for recovery",
            recommended_duration=25,
            benefits=["Recovery", "Vitality boost", "Fatigue reduction"],
            priority=MobilityPriority.HIGH,
        ))

    if active_count >= 2:
        recommendations.append(MobilityRecommendation(
            name="Debuff Cleansing Routine",
            description="Intensive mobility work to clear penalties",
            recommended_duration=45,
            benefits=["Major debuff reduction", "Stat recovery"],
            priority=MobilityPriority.URGENT,
        ))

    recommendations.sort(key=lambda r: r.priority.rank)
    return recommendations


def check_mobility_achievements(stats: MobilityStats) -> List[MobilityAchievement]:
    achievements = []

    if stats.total_sessions >= 100:
        achievements.append(MobilityAchievement("Flexibility Master", "Complete 100 mobility sessions",
                                                MobilityAchievementType.SESSIONS))
    elif stats.total_sessions >= 50:
        achievements.append(MobilityAchievement("Mobility Enthusiast", "Complete 50 mobility sessions",
                                                MobilityAchievementType.SESSIONS))
    elif stats.total_sessions >= 10:
        achievements.append(MobilityAchievement("Flexibility Seeker", "Complete 10 mobility sessions",
                                                MobilityAchievementType.SESSIONS))

    if stats.total_minutes >= 1000:
        achievements.append(MobilityAchievement("Time Master", "Spend 1000+ minutes on mobility",
                                                MobilityAchievementType.DURATION))

    if stats.current_streak >= 30:
        achievements.append(MobilityAchievement("Consistency King", "30-day mobility streak",
                                                MobilityAchievementType.STREAK))
    elif stats.current_streak >= 7:
        achievements.append(MobilityAchievement("Weekly Warrior", "7-day mobility streak",
                                                MobilityAchievementType.STREAK))

    return achievements
