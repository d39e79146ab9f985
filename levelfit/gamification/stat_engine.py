"""
Stat and Leveling Engine

Leveling Curve:
- XP required to leave level L: L * 100
- One grant can cross several levels; the remainder carries over
- 2 stat points per level gained

Effective stats:
- base stat minus the number of active debuffs targeting it
- never below 1
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Dict
import logging

from levelfit.models.player import DEFAULT_STAT_VALUE, Player
from levelfit.models.stats import ALL_STATS, Stat
from levelfit.utils.rounding import round_half_up

logger = logging.getLogger(__name__)

XP_PER_LEVEL = 100
STAT_POINTS_PER_LEVEL = 2
MIN_EFFECTIVE_STAT = 1


@dataclass
class LevelUpOutcome:
    """Result of granting experience"""
    levels_gained: int
    stat_points_gained: int
    new_level: int

    @property
    def leveled_up(self) -> bool:
        return self.levels_gained > 0


def experience_required_for_level(level: int) -> int:
    """XP needed to advance from `level` to `level + 1`"""
    return level * XP_PER_LEVEL


def experience_to_next_level(player: Player) -> int:
    return experience_required_for_level(player.level)


def grant_experience(player: Player, amount: int) -> LevelUpOutcome:
    """
    Add XP to the player and process every level crossed

    Args:
        player: Player to mutate
        amount: XP to add (non-negative)

    Returns:
        LevelUpOutcome with levels and stat points gained and the new level
    """
    old_level = player.level
    player.experience += max(0, amount)

    levels_gained = 0
    while player.experience >= experience_required_for_level(player.level):
        player.experience -= experience_required_for_level(player.level)
        player.level += 1
        levels_gained += 1

    stat_points_gained = levels_gained * STAT_POINTS_PER_LEVEL
    player.stat_points += stat_points_gained

    logger.info(
        f"Granted {amount} XP. Level: {player.level}, "
        f"XP: {player.experience}/{experience_to_next_level(player)}"
    )
    if levels_gained:
        logger.info(f"Player leveled up from {old_level} to {player.level} (+{stat_points_gained} stat points)")

    return LevelUpOutcome(
        levels_gained=levels_gained,
        stat_points_gained=stat_points_gained,
        new_level=player.level,
    )


def allocate_stat_point(player: Player, stat: Stat, points: int) -> bool:
    """
    Spend unallocated stat points on one stat

    Returns:
        False (and no change) if the player lacks the points or points is not positive
    """
    stat = Stat.parse(stat)
    if points <= 0 or points > player.stat_points:
        logger.debug(f"Rejected allocation of {points} points to {stat.value}, pool has {player.stat_points}")
        return False

    player.stat_points -= points
    player.set_stat(stat, player.get_stat(stat) + points)
    logger.info(f"Allocated {points} points to {stat.value} (now {player.get_stat(stat)})")
    return True


def debuff_count_on_stat(player: Player, stat: Stat, now: datetime) -> int:
    stat = Stat.parse(stat)
    return sum(
        1 for record in player.debuffs.values()
        if record.target_stat == stat and record.is_active(now)
    )


def effective_stat(player: Player, stat: Stat, now: datetime) -> int:
    """Base stat minus active debuffs on it, floored at 1"""
    stat = Stat.parse(stat)
    return max(MIN_EFFECTIVE_STAT, player.get_stat(stat) - debuff_count_on_stat(player, stat, now))


def cumulative_experience(player: Player) -> int:
    """All XP ever granted: the thresholds of every level passed plus the current remainder"""
    return XP_PER_LEVEL * player.level * (player.level - 1) // 2 + player.experience


def power_level(player: Player, now: datetime) -> int:
    """Sum of all effective stats"""
    return sum(effective_stat(player, stat, now) for stat in ALL_STATS)


def apply_stat_rewards(player: Player, rewards: Dict[Stat, int]) -> None:
    """Add quest stat rewards to base stats"""
    for stat, points in rewards.items():
        stat = Stat.parse(stat)
        player.set_stat(stat, player.get_stat(stat) + points)
    if rewards:
        logger.info(f"Applied stat rewards: {', '.join(f'{Stat.parse(s).value}+{p}' for s, p in rewards.items())}")


def reset_stats(player: Player) -> None:
    """Return stats and progression to a fresh character (admin function)"""
    for stat in ALL_STATS:
        player.set_stat(stat, DEFAULT_STAT_VALUE)
    player.level = 1
    player.experience = 0
    player.stat_points = 0
    logger.info("Player stats reset")


def quest_stat_rewards(exercise_kind: str, difficulty: int) -> Dict[Stat, int]:
    """
    Stat rewards for an exercise category at a given difficulty

    Args:
        exercise_kind: exercise or category name (push-ups, cardio, plank, ...)
        difficulty: reward scale

    Returns:
        {Stat: points}
    """
    kind = exercise_kind.lower()

    if kind in ("strength", "push-ups", "pull-ups"):
        return {Stat.STRENGTH: difficulty}
    elif kind in ("cardio", "running", "burpees"):
        return {Stat.AGILITY: difficulty, Stat.VITALITY: round_half_up(difficulty * 0.5)}
    elif kind in ("endurance", "plank"):
        return {Stat.VITALITY: difficulty}
    elif kind in ("flexibility", "stretching"):
        return {Stat.AGILITY: round_half_up(difficulty * 0.5)}

    # Balanced reward for mixed exercises
    return {
        Stat.STRENGTH: round_half_up(difficulty * 0.3),
        Stat.AGILITY: round_half_up(difficulty * 0.3),
        Stat.VITALITY: round_half_up(difficulty * 0.4),
    }
