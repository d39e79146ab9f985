"""Debuff records stored on the player"""
import logging
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field

from levelfit.models.base import SaveModel
from levelfit.models.stats import Stat
from levelfit.utils.datetime_helpers import from_epoch_ms, to_epoch_ms

logger = logging.getLogger(__name__)


class DebuffCategory(str, Enum):
    """Why a debuff was applied"""
    QUEST_FAILURE = "quest_failure"
    SCREEN_TIME = "screen_time"
    URGENT_FAILURE = "urgent_failure"
    INACTIVITY = "inactivity"


CATEGORY_SEVERITY: dict[DebuffCategory, int] = {
    DebuffCategory.INACTIVITY: 3,
    DebuffCategory.URGENT_FAILURE: 2,
    DebuffCategory.SCREEN_TIME: 1,
    DebuffCategory.QUEST_FAILURE: 1,
}

CATEGORY_LABELS: dict[DebuffCategory, str] = {
    DebuffCategory.QUEST_FAILURE: "Quest Failure",
    DebuffCategory.SCREEN_TIME: "Screen Time Penalty",
    DebuffCategory.URGENT_FAILURE: "Urgent Quest Failure",
    DebuffCategory.INACTIVITY: "Inactivity Penalty",
}


def severity_for(category: DebuffCategory) -> int:
    """Severity is fixed per category"""
    return CATEGORY_SEVERITY.get(category, 1)


class DebuffRecord(SaveModel):
    """One time-bound penalty; active while expires_at > now"""
    category: DebuffCategory
    target_stat: Stat
    severity: int = Field(default=1, ge=1)
    created_at: int  # epoch ms
    expires_at: int  # epoch ms

    def is_active(self, now: datetime) -> bool:
        return self.expires_at > to_epoch_ms(now)

    def remaining_ms(self, now: datetime) -> int:
        return max(0, self.expires_at - to_epoch_ms(now))

    @property
    def expires_at_datetime(self) -> datetime:
        return from_epoch_ms(self.expires_at)

    @property
    def created_at_datetime(self) -> datetime:
        return from_epoch_ms(self.created_at)


def make_debuff_key(category: DebuffCategory, stat: Stat, created_at_ms: int, existing: Optional[set] = None) -> str:
    """
    Opaque unique reference for a debuff: {category}_{stat}_{createdAtMs}

    A -n suffix is appended when two debuffs share the same millisecond.
    """
    base = f"{category.value}_{stat.value}_{created_at_ms}"
    if not existing or base not in existing:
        return base
    n = 2
    while f"{base}-{n}" in existing:
        n += 1
    return f"{base}-{n}"


def parse_debuff_key(key: str) -> tuple[DebuffCategory, Stat, Optional[int]]:
    """
    Recover category, stat and creation time from a legacy debuff key

    Older save files stored only `key -> expiry` and encoded everything else in
    the key. Used once, when such a save file is loaded.

    Raises:
        ValueError: the key names no known stat
    """
    category = DebuffCategory.QUEST_FAILURE
    remainder = key
    # Longest prefix first so "urgent_failure" is not read as something shorter
    for candidate in sorted(DebuffCategory, key=lambda c: len(c.value), reverse=True):
        if key.startswith(candidate.value + "_"):
            category = candidate
            remainder = key[len(candidate.value) + 1:]
            break
    else:
        # Unknown categories fall back to quest failure; skip their first token
        remainder = key.split("_", 1)[1] if "_" in key else ""
        logger.warning(f"Debuff key '{key}' has unknown category, treating as {category.value}")

    parts = remainder.split("_")
    try:
        stat = Stat(parts[0])
    except ValueError:
        raise ValueError(f"Debuff key '{key}' does not name a known stat")

    created_at = None
    if len(parts) > 1:
        stamp = parts[1].split("-", 1)[0]
        if stamp.isdigit():
            created_at = int(stamp)

    return category, stat, created_at


def record_from_legacy(key: str, expires_at_ms: int) -> DebuffRecord:
    """Build an explicit record from a legacy `key -> expiry` entry"""
    category, stat, created_at = parse_debuff_key(key)
    return DebuffRecord(
        category=category,
        target_stat=stat,
        severity=severity_for(category),
        created_at=created_at if created_at is not None else expires_at_ms,
        expires_at=expires_at_ms,
    )
