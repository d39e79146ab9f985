"""
Screen Time Tracking

One report per calendar day:
- <= 2h: +50 XP
- <= 3h: +25 XP
- 3-4h: warning only
- >= 4h: screen time debuff on INT or LUK (12h + 2h per reported hour)

Also provides period statistics, a weekly letter grade and a daily goal.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum
from typing import List, Optional
import logging

from levelfit.config import (
    SCREEN_TIME_PENALTY_HOURS,
    SCREEN_TIME_SEVERE_HOURS,
    SCREEN_TIME_WARNING_HOURS,
)
from levelfit.exceptions import ValidationError
from levelfit.gamification.debuff_ledger import AppliedDebuff, DebuffLedger
from levelfit.gamification.stat_engine import LevelUpOutcome, grant_experience
from levelfit.models.player import Player
from levelfit.models.session import ScreenTimeLog
from levelfit.utils.datetime_helpers import calendar_day, start_of_week

logger = logging.getLogger(__name__)

EXCELLENT_HOURS = 2
EXCELLENT_XP_BONUS = 50
GOOD_XP_BONUS = 25
STATS_WINDOW = timedelta(days=30)


class ScreenTimeThreshold(str, Enum):
    EXCELLENT = "excellent"  # 0-2 hours
    GOOD = "good"            # 2-3 hours
    WARNING = "warning"      # 3-4 hours
    PENALTY = "penalty"      # 4-6 hours
    SEVERE = "severe"        # 6+ hours


THRESHOLD_MESSAGES = {
    ScreenTimeThreshold.EXCELLENT: "Outstanding digital wellness! You're a role model.",
    ScreenTimeThreshold.GOOD: "Great job managing your screen time!",
    ScreenTimeThreshold.WARNING: "Screen time is getting a bit high. Consider taking breaks.",
    ScreenTimeThreshold.PENALTY: "Excessive screen time detected. This will affect your stats.",
    ScreenTimeThreshold.SEVERE: "Dangerously high screen time! Severe penalties applied.",
}


@dataclass
class ScreenTimeResult:
    """Result of processing a daily screen time report"""
    screen_time_hours: int
    threshold: ScreenTimeThreshold
    message: str
    has_reward: bool = False
    has_penalty: bool = False
    xp_bonus: int = 0
    debuff_applied: Optional[AppliedDebuff] = None
    level_up: Optional[LevelUpOutcome] = None


@dataclass
class DailyScreenTime:
    day: date
    hours: int
    threshold: ScreenTimeThreshold


@dataclass
class ScreenTimeStats:
    daily_data: List[DailyScreenTime] = field(default_factory=list)
    average_hours: float = 0.0
    total_hours: int = 0
    days_tracked: int = 0
    good_days: int = 0
    warning_days: int = 0
    penalty_days: int = 0
    current_streak: int = 0


@dataclass
class WeeklyScreenTimeSummary:
    week_start: date
    week_end: date
    total_hours: int
    average_hours: float
    days_tracked: int
    grade: str
    recommendation: str


def threshold_level(hours: int) -> ScreenTimeThreshold:
    if hours <= EXCELLENT_HOURS:
        return ScreenTimeThreshold.EXCELLENT
    if hours <= SCREEN_TIME_WARNING_HOURS:
        return ScreenTimeThreshold.GOOD
    if hours <= SCREEN_TIME_PENALTY_HOURS:
        return ScreenTimeThreshold.WARNING
    if hours <= SCREEN_TIME_SEVERE_HOURS:
        return ScreenTimeThreshold.PENALTY
    return ScreenTimeThreshold.SEVERE


def should_prompt(player: Player, now: datetime, tz_name: Optional[str] = None) -> bool:
    """True once per calendar day, until a report is processed"""
    last_day = player.last_screen_time_check_day
    return last_day is None or last_day != calendar_day(now, tz_name)


def process_screen_time(
    player: Player,
    log: ScreenTimeLog,
    screen_time_hours: int,
    now: datetime,
    ledger: DebuffLedger,
    tz_name: Optional[str] = None,
) -> ScreenTimeResult:
    """
    Record today's screen time and apply the reward or penalty

    Args:
        player: Player to mutate
        log: Date-keyed screen time log to record into
        screen_time_hours: Hours reported for today
        now: Current instant
        ledger: Debuff ledger for penalties

    Returns:
        ScreenTimeResult

    Raises:
        ValidationError: negative hours
    """
    if screen_time_hours < 0:
        raise ValidationError(
            message=f"Screen time cannot be negative, got {screen_time_hours}",
            field="screen_time_hours",
            value=screen_time_hours,
        )

    today = calendar_day(now, tz_name)
    player.last_screen_time_check_day = today
    log.days[today] = screen_time_hours

    threshold = threshold_level(screen_time_hours)
    result = ScreenTimeResult(
        screen_time_hours=screen_time_hours,
        threshold=threshold,
        message=THRESHOLD_MESSAGES[threshold],
    )

    if screen_time_hours <= EXCELLENT_HOURS:
        result.has_reward = True
        result.xp_bonus = EXCELLENT_XP_BONUS
        result.message = "Excellent self-control! Bonus XP awarded."
    elif screen_time_hours <= SCREEN_TIME_WARNING_HOURS:
        result.has_reward = True
        result.xp_bonus = GOOD_XP_BONUS
        result.message = "Good screen time management! Small XP bonus."
    elif screen_time_hours >= SCREEN_TIME_SEVERE_HOURS:
        result.has_penalty = True
        result.debuff_applied = ledger.apply_screen_time_penalty(player, now, screen_time_hours)
        result.message = "Excessive screen time! Severe stat penalty applied."
    elif screen_time_hours >= SCREEN_TIME_PENALTY_HOURS:
        result.has_penalty = True
        result.debuff_applied = ledger.apply_screen_time_penalty(player, now, screen_time_hours)
        result.message = "Too much screen time. Stat penalty applied."
    else:
        result.message = "Screen time is getting high. Be careful!"

    if result.xp_bonus:
        result.level_up = grant_experience(player, result.xp_bonus)

    logger.info(f"Screen time for {today.isoformat()}: {screen_time_hours}h ({threshold.value})")
    return result


def _good_streak(daily_data: List[DailyScreenTime]) -> int:
    streak = 0
    for day in sorted(daily_data, key=lambda d: d.day, reverse=True):
        if day.threshold not in (ScreenTimeThreshold.EXCELLENT, ScreenTimeThreshold.GOOD):
            break
        streak += 1
    return streak


def screen_time_stats(log: ScreenTimeLog, start_day: date, end_day: date) -> ScreenTimeStats:
    """Statistics over the tracked days in [start_day, end_day]"""
    daily_data = [
        DailyScreenTime(day=day, hours=hours, threshold=threshold_level(hours))
        for day, hours in sorted(log.days.items())
        if start_day <= day <= end_day
    ]

    if not daily_data:
        return ScreenTimeStats()

    stats = ScreenTimeStats(daily_data=daily_data)
    for entry in daily_data:
        stats.total_hours += entry.hours
        if entry.hours <= SCREEN_TIME_WARNING_HOURS:
            stats.good_days += 1
        elif entry.hours <= SCREEN_TIME_PENALTY_HOURS:
            stats.warning_days += 1
        else:
            stats.penalty_days += 1

    stats.days_tracked = len(daily_data)
    stats.average_hours = stats.total_hours / stats.days_tracked
    stats.current_streak = _good_streak(daily_data)
    return stats


def recent_screen_time_stats(log: ScreenTimeLog, now: datetime, tz_name: Optional[str] = None) -> ScreenTimeStats:
    today = calendar_day(now, tz_name)
    return screen_time_stats(log, today - STATS_WINDOW, today)


def weekly_grade(stats: ScreenTimeStats) -> str:
    if stats.days_tracked == 0:
        return "N/A"

    good_ratio = stats.good_days / stats.days_tracked
    for cutoff, grade in ((0.9, "A+"), (0.8, "A"), (0.7, "B+"), (0.6, "B"), (0.5, "C+"), (0.4, "C"), (0.3, "D")):
        if good_ratio >= cutoff:
            return grade
    return "F"


def weekly_recommendation(stats: ScreenTimeStats) -> str:
    if stats.penalty_days > stats.good_days:
        return "Focus on reducing screen time. Try setting specific times for device use."
    elif stats.warning_days > 2:
        return "You're doing well, but watch out for those warning days. Set reminders to take breaks."
    return "Excellent screen time management! Keep up the great work."


def weekly_summary(log: ScreenTimeLog, now: datetime, tz_name: Optional[str] = None) -> WeeklyScreenTimeSummary:
    """Summary for the Monday-Sunday week containing now"""
    week_start = start_of_week(calendar_day(now, tz_name))
    week_end = week_start + timedelta(days=6)
    stats = screen_time_stats(log, week_start, week_end)

    return WeeklyScreenTimeSummary(
        week_start=week_start,
        week_end=week_end,
        total_hours=stats.total_hours,
        average_hours=stats.average_hours,
        days_tracked=stats.days_tracked,
        grade=weekly_grade(stats),
        recommendation=weekly_recommendation(stats),
    )


def set_goal(log: ScreenTimeLog, daily_goal_hours: int) -> None:
    if daily_goal_hours < 0:
        raise ValidationError(
            message=f"Daily goal cannot be negative, got {daily_goal_hours}",
            field="daily_goal_hours",
            value=daily_goal_hours,
        )
    log.daily_goal = daily_goal_hours
    logger.info(f"Screen time goal set to {daily_goal_hours}h")


def get_goal(log: ScreenTimeLog) -> int:
    """Daily goal in hours, defaulting to the penalty threshold"""
    return log.daily_goal if log.daily_goal is not None else SCREEN_TIME_PENALTY_HOURS


def met_goal_today(log: ScreenTimeLog, now: datetime, tz_name: Optional[str] = None) -> bool:
    """Unreported days count as zero hours"""
    return log.days.get(calendar_day(now, tz_name), 0) <= get_goal(log)
