"""
Debuff Ledger

Manages time-bound stat penalties stored on the player.

Categories and defaults:
- quest_failure: 24h, severity 1, any stat
- screen_time: 12h + 2h per reported hour, severity 1, intelligence or luck
- urgent_failure: 48h, severity 2, weighted toward physical stats
- inactivity: 24h per idle day, severity 3, physical stats

A debuff is active while its expiry is in the future. Expired entries are
harmless until swept; sweeping only keeps the save file small.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import List, Optional
import logging

from levelfit.models.debuff import (
    CATEGORY_LABELS,
    DebuffCategory,
    DebuffRecord,
    make_debuff_key,
    severity_for,
)
from levelfit.models.player import Player
from levelfit.models.stats import Stat
from levelfit.utils.datetime_helpers import to_epoch_ms
from levelfit.utils.random_source import RandomSource, pick
from levelfit.utils.rounding import clamp

logger = logging.getLogger(__name__)

MAX_RESISTANCE = 0.5
MOBILITY_REDUCTION_PER_MINUTE = timedelta(minutes=2)


class TargetPolicy(Enum):
    """Which stats a new debuff may land on; duplicates weight the draw"""
    ALL = (Stat.STRENGTH, Stat.AGILITY, Stat.VITALITY, Stat.INTELLIGENCE, Stat.LUCK)
    MENTAL = (Stat.INTELLIGENCE, Stat.LUCK)
    PHYSICAL = (Stat.STRENGTH, Stat.AGILITY, Stat.VITALITY)
    PHYSICAL_WEIGHTED = (
        Stat.STRENGTH, Stat.STRENGTH,
        Stat.AGILITY, Stat.AGILITY,
        Stat.VITALITY, Stat.VITALITY,
        Stat.INTELLIGENCE, Stat.LUCK,
    )


CATEGORY_POLICY: dict[DebuffCategory, TargetPolicy] = {
    DebuffCategory.QUEST_FAILURE: TargetPolicy.ALL,
    DebuffCategory.SCREEN_TIME: TargetPolicy.MENTAL,
    DebuffCategory.URGENT_FAILURE: TargetPolicy.PHYSICAL_WEIGHTED,
    DebuffCategory.INACTIVITY: TargetPolicy.PHYSICAL,
}


@dataclass
class AppliedDebuff:
    """Debuff written to the player"""
    id: str
    category: DebuffCategory
    target_stat: Stat
    severity: int
    duration: timedelta
    applied_at: datetime
    expires_at: datetime
    description: str


@dataclass
class ActiveDebuff:
    """Debuff that is still in effect"""
    id: str
    category: DebuffCategory
    target_stat: Stat
    severity: int
    remaining_time: timedelta
    expires_at: datetime

    @property
    def description(self) -> str:
        return f"{CATEGORY_LABELS[self.category]}: {self.target_stat.value} -{self.severity}"

    @property
    def remaining_time_string(self) -> str:
        total_minutes = int(self.remaining_time.total_seconds() // 60)
        days, rem_minutes = divmod(total_minutes, 24 * 60)
        hours, minutes = divmod(rem_minutes, 60)
        if days > 0:
            return f"{days}d {hours}h"
        elif hours > 0:
            return f"{hours}h {minutes}m"
        return f"{minutes}m"


@dataclass
class ClearedDebuff:
    """Debuff removed by an expiry sweep"""
    id: str
    category: DebuffCategory
    target_stat: Stat
    cleared_at: datetime


class DebuffLedger:
    """Applies, lists, decays and sweeps debuffs on a player"""

    def __init__(self, rng: RandomSource):
        self.rng = rng

    def apply(
        self,
        player: Player,
        category: DebuffCategory,
        now: datetime,
        duration: timedelta,
        target_policy: Optional[TargetPolicy] = None,
        severity: Optional[int] = None,
        reason: Optional[str] = None,
    ) -> AppliedDebuff:
        """
        Write a new debuff to the player

        Args:
            player: Player to mutate
            category: Debuff category
            now: Current instant
            duration: How long the debuff lasts
            target_policy: Stat selection policy (defaults per category)
            severity: Override for the category severity
            reason: Text prefix for the description

        Returns:
            AppliedDebuff describing what landed where
        """
        policy = target_policy or CATEGORY_POLICY[category]
        target_stat = pick(self.rng, policy.value)
        severity = severity if severity is not None else severity_for(category)

        created_at_ms = to_epoch_ms(now)
        expires_at = now + duration
        key = make_debuff_key(category, target_stat, created_at_ms, set(player.debuffs))

        player.debuffs[key] = DebuffRecord(
            category=category,
            target_stat=target_stat,
            severity=severity,
            created_at=created_at_ms,
            expires_at=to_epoch_ms(expires_at),
        )

        description = f"{reason or CATEGORY_LABELS[category]} - {target_stat.value} reduced by {severity}"
        logger.info(f"Applied debuff {key}: {description}, expires {expires_at.isoformat()}")

        return AppliedDebuff(
            id=key,
            category=category,
            target_stat=target_stat,
            severity=severity,
            duration=duration,
            applied_at=now,
            expires_at=expires_at,
            description=description,
        )

    def apply_quest_failure(self, player: Player, now: datetime,
                            duration: timedelta = timedelta(hours=24)) -> AppliedDebuff:
        return self.apply(player, DebuffCategory.QUEST_FAILURE, now, duration, reason="Failed to complete quest")

    def apply_screen_time_penalty(self, player: Player, now: datetime, screen_time_hours: int) -> AppliedDebuff:
        """Longer penalty for more screen time: 12h + 2h per reported hour"""
        duration = timedelta(hours=12 + screen_time_hours * 2)
        return self.apply(
            player, DebuffCategory.SCREEN_TIME, now, duration,
            reason=f"Excessive screen time ({screen_time_hours} hours)",
        )

    def apply_urgent_failure(self, player: Player, now: datetime,
                             duration: timedelta = timedelta(hours=48)) -> AppliedDebuff:
        return self.apply(player, DebuffCategory.URGENT_FAILURE, now, duration, reason="Failed urgent quest")

    def apply_inactivity(self, player: Player, now: datetime, days_since_last_workout: int) -> AppliedDebuff:
        """Duration scales with inactivity: 24h per idle day"""
        duration = timedelta(hours=24 * max(1, days_since_last_workout))
        return self.apply(
            player, DebuffCategory.INACTIVITY, now, duration,
            reason=f"Inactivity for {days_since_last_workout} days",
        )

    def sweep_expired(self, player: Player, now: datetime) -> List[ClearedDebuff]:
        """Remove every debuff whose expiry is at or before now"""
        now_ms = to_epoch_ms(now)
        expired = [key for key, record in player.debuffs.items() if record.expires_at <= now_ms]

        cleared = []
        for key in expired:
            record = player.debuffs.pop(key)
            cleared.append(ClearedDebuff(
                id=key,
                category=record.category,
                target_stat=record.target_stat,
                cleared_at=now,
            ))

        if cleared:
            logger.info(f"Cleared {len(cleared)} expired debuffs: {', '.join(expired)}")

        return cleared

    def list_active(self, player: Player, now: datetime) -> List[ActiveDebuff]:
        """Active debuffs with remaining time, soonest expiry first"""
        active = [
            ActiveDebuff(
                id=key,
                category=record.category,
                target_stat=record.target_stat,
                severity=record.severity,
                remaining_time=timedelta(milliseconds=record.remaining_ms(now)),
                expires_at=record.expires_at_datetime,
            )
            for key, record in player.debuffs.items()
            if record.is_active(now)
        ]
        active.sort(key=lambda d: d.expires_at)
        return active

    def total_debuff_on_stat(self, player: Player, stat: Stat, now: datetime) -> int:
        """Sum of severities of active debuffs targeting exactly this stat"""
        stat = Stat.parse(stat)
        return sum(
            record.severity for record in player.debuffs.values()
            if record.target_stat == stat and record.is_active(now)
        )

    def remove(self, player: Player, debuff_id: str) -> bool:
        if debuff_id not in player.debuffs:
            return False
        del player.debuffs[debuff_id]
        logger.info(f"Removed debuff {debuff_id}")
        return True

    def reduce_duration(self, player: Player, debuff_id: str, reduction: timedelta, now: datetime) -> bool:
        """
        Shorten a debuff; if it would end at or before now it is removed

        Returns:
            False if no such debuff exists
        """
        record = player.debuffs.get(debuff_id)
        if record is None:
            return False

        new_expiry = record.expires_at - int(reduction.total_seconds() * 1000)
        if new_expiry <= to_epoch_ms(now):
            del player.debuffs[debuff_id]
            logger.info(f"Debuff {debuff_id} reduced past expiry, removed")
        else:
            record.expires_at = new_expiry
            logger.debug(f"Debuff {debuff_id} reduced by {reduction}")
        return True

    def apply_mobility_bonus(self, player: Player, mobility_minutes: int, now: datetime) -> int:
        """Shorten every debuff by 2 minutes per mobility minute; returns debuffs affected"""
        reduction = MOBILITY_REDUCTION_PER_MINUTE * mobility_minutes
        if reduction <= timedelta(0):
            return 0

        affected = 0
        for debuff_id in list(player.debuffs):
            if self.reduce_duration(player, debuff_id, reduction, now):
                affected += 1
        return affected

    @staticmethod
    def resistance(player: Player) -> float:
        """Vitality and intelligence resist new debuffs, capped at 50%"""
        return clamp((player.vitality + player.intelligence - 20) * 0.01, 0.0, MAX_RESISTANCE)

    def should_apply(self, player: Player) -> bool:
        """One draw against resistance; True means the debuff lands"""
        return self.rng.uniform_float() > self.resistance(player)
