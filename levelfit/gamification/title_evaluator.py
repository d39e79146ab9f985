"""
Title Evaluator

Static catalog of titles and their unlock predicates:
- Level, total reps, daily quest streak, stat total, highest stat, lifetime XP
- Special conditions (balanced stats, no debuffs, stat focus, shame titles)

Titles are never revoked once unlocked. Every title whose predicate holds is
unlocked in the same evaluation.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Union
import logging

from levelfit.models.debuff import DebuffCategory
from levelfit.models.player import Player
from levelfit.models.stats import Stat
from levelfit.utils.rounding import clamp

logger = logging.getLogger(__name__)

BALANCED_MAX_SPREAD = 5
FOCUS_RATIO = 1.5
SHAME_DEBUFF_COUNT = 2


class TitleRarity(str, Enum):
    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    LEGENDARY = "legendary"

    @property
    def rank(self) -> int:
        return list(TitleRarity).index(self)


class TitleType(str, Enum):
    """What a title's threshold is measured against"""
    LEVEL = "level"
    TOTAL_REPS = "total_reps"
    QUEST_STREAK = "quest_streak"
    STAT_TOTAL = "stat_total"
    SINGLE_STAT = "single_stat"
    EXPERIENCE = "experience"
    SPECIAL = "special"


@dataclass(frozen=True)
class TitleDefinition:
    name: str
    description: str
    rarity: TitleRarity
    type: TitleType
    value: int
    requirement_text: str
    special_condition: Optional[str] = None


@dataclass
class UnlockedTitle:
    """Title unlocked during an evaluation"""
    title: str
    description: str
    rarity: TitleRarity
    unlocked_at: datetime
    requirement: str


@dataclass
class TitleInfo:
    """Catalog entry with the player's status"""
    title: str
    description: str
    rarity: TitleRarity
    requirement_text: str
    is_unlocked: bool
    is_active: bool
    progress: float


@dataclass
class TitleStats:
    total_titles: int
    unlocked_titles: int
    completion_percentage: float
    unlocked_by_rarity: Dict[TitleRarity, int]
    total_by_rarity: Dict[TitleRarity, int]
    current_title: str


# ============================================
# Title Catalog
# ============================================

TITLE_CATALOG: List[TitleDefinition] = [
    # Starter titles
    TitleDefinition("Novice", "Just starting your journey", TitleRarity.COMMON, TitleType.LEVEL, 1, "Reach level 1"),
    TitleDefinition("Apprentice", "Learning the basics", TitleRarity.COMMON, TitleType.LEVEL, 5, "Reach level 5"),
    TitleDefinition("Trainee", "Getting into the routine", TitleRarity.COMMON, TitleType.TOTAL_REPS, 100,
                    "Complete 100 total reps"),

    # Progress titles
    TitleDefinition("Dedicated", "Showing commitment", TitleRarity.COMMON, TitleType.QUEST_STREAK, 7,
                    "Complete daily quests for 7 days straight"),
    TitleDefinition("Warrior", "A true fighter emerges", TitleRarity.UNCOMMON, TitleType.LEVEL, 10, "Reach level 10"),
    TitleDefinition("Repslayer", "Destroyer of repetitions", TitleRarity.UNCOMMON, TitleType.TOTAL_REPS, 1000,
                    "Complete 1,000 total reps"),
    TitleDefinition("Consistent", "Reliability incarnate", TitleRarity.UNCOMMON, TitleType.QUEST_STREAK, 14,
                    "Complete daily quests for 14 days straight"),

    # Advanced titles
    TitleDefinition("Elite", "Among the best", TitleRarity.RARE, TitleType.LEVEL, 25, "Reach level 25"),
    TitleDefinition("Unstoppable", "Nothing can stop you", TitleRarity.RARE, TitleType.QUEST_STREAK, 30,
                    "Complete daily quests for 30 days straight"),
    TitleDefinition("Rep Master", "Master of repetitions", TitleRarity.RARE, TitleType.TOTAL_REPS, 5000,
                    "Complete 5,000 total reps"),
    TitleDefinition("Powerhouse", "Raw power unleashed", TitleRarity.RARE, TitleType.STAT_TOTAL, 100,
                    "Reach 100 total stat points"),

    # Legendary titles
    TitleDefinition("Shadow Monarch", "Ruler of shadows", TitleRarity.LEGENDARY, TitleType.LEVEL, 50,
                    "Reach level 50"),
    TitleDefinition("Immortal", "Transcended mortality", TitleRarity.LEGENDARY, TitleType.QUEST_STREAK, 100,
                    "Complete daily quests for 100 days straight"),
    TitleDefinition("Rep God", "Divine repetition mastery", TitleRarity.LEGENDARY, TitleType.TOTAL_REPS, 25000,
                    "Complete 25,000 total reps"),
    TitleDefinition("Apex Hunter", "Peak of evolution", TitleRarity.LEGENDARY, TitleType.STAT_TOTAL, 250,
                    "Reach 250 total stat points"),

    # Special titles
    TitleDefinition("Balanced", "Perfect harmony", TitleRarity.RARE, TitleType.SPECIAL, 0,
                    "Keep all stats within 5 points of each other", "balanced_stats"),
    TitleDefinition("Pure", "Untainted by weakness", TitleRarity.UNCOMMON, TitleType.SPECIAL, 0,
                    "Have no active debuffs", "no_debuffs"),
    TitleDefinition("Berserker", "Strength above all", TitleRarity.RARE, TitleType.SPECIAL, 0,
                    "Focus heavily on strength", "strength_focus"),
    TitleDefinition("Speedster", "Swift as the wind", TitleRarity.RARE, TitleType.SPECIAL, 0,
                    "Focus heavily on agility", "agility_focus"),
    TitleDefinition("Tank", "Unbreakable endurance", TitleRarity.RARE, TitleType.SPECIAL, 0,
                    "Focus heavily on vitality", "vitality_focus"),
    TitleDefinition("Sage", "Wisdom incarnate", TitleRarity.RARE, TitleType.SPECIAL, 0,
                    "Focus heavily on intelligence", "intelligence_focus"),
    TitleDefinition("Lucky", "Fortune favors you", TitleRarity.RARE, TitleType.SPECIAL, 0,
                    "Focus heavily on luck", "luck_focus"),

    # Shame titles
    TitleDefinition("Slacker", "Needs more motivation", TitleRarity.COMMON, TitleType.SPECIAL, 0,
                    "Fail multiple quests", "multiple_failures"),
    TitleDefinition("Couch Potato", "Too much screen time", TitleRarity.COMMON, TitleType.SPECIAL, 0,
                    "Excessive screen time penalties", "screen_time_addict"),
]

TITLES_BY_NAME: Dict[str, TitleDefinition] = {t.name: t for t in TITLE_CATALOG}


def get_title(name: str) -> Optional[TitleDefinition]:
    return TITLES_BY_NAME.get(name)


# ============================================
# Predicates
# ============================================

def _measured_value(player: Player, title_type: TitleType) -> int:
    if title_type == TitleType.LEVEL:
        return player.level
    elif title_type == TitleType.TOTAL_REPS:
        return player.total_reps_completed
    elif title_type == TitleType.QUEST_STREAK:
        return player.daily_quest_streak
    elif title_type == TitleType.STAT_TOTAL:
        return player.total_stats
    elif title_type == TitleType.SINGLE_STAT:
        return player.highest_stat
    elif title_type == TitleType.EXPERIENCE:
        return player.lifetime_experience
    raise ValueError(f"{title_type.value} titles have no measured value")


def _count_active_debuffs(player: Player, now: datetime, categories: tuple) -> int:
    return sum(1 for record in player.active_debuffs(now).values() if record.category in categories)


def _check_special(player: Player, condition: str, now: datetime) -> bool:
    stats = player.stat_values()

    if condition == "balanced_stats":
        return max(stats.values()) - min(stats.values()) <= BALANCED_MAX_SPREAD

    if condition == "no_debuffs":
        return not player.active_debuffs(now)

    if condition.endswith("_focus"):
        focus = Stat(condition[:-len("_focus")])
        others = [value for stat, value in stats.items() if stat != focus]
        return stats[focus] >= sum(others) / len(others) * FOCUS_RATIO

    if condition == "multiple_failures":
        failures = (DebuffCategory.QUEST_FAILURE, DebuffCategory.URGENT_FAILURE)
        return _count_active_debuffs(player, now, failures) >= SHAME_DEBUFF_COUNT

    if condition == "screen_time_addict":
        return _count_active_debuffs(player, now, (DebuffCategory.SCREEN_TIME,)) >= SHAME_DEBUFF_COUNT

    logger.warning(f"Unknown special title condition: {condition}")
    return False


def meets_requirement(player: Player, title: TitleDefinition, now: datetime) -> bool:
    if title.type == TitleType.SPECIAL:
        return _check_special(player, title.special_condition or "", now)
    return _measured_value(player, title.type) >= title.value


def progress(player: Player, title: Union[str, TitleDefinition], now: datetime) -> float:
    """
    Progress toward a title in [0, 1]

    Accepts a catalog title name or a definition. Unlocked titles report 1.0.
    Special titles are all-or-nothing.
    """
    definition = title if isinstance(title, TitleDefinition) else get_title(title)
    if definition is None:
        return 0.0
    if definition.name in player.unlocked_titles:
        return 1.0

    if definition.type == TitleType.SPECIAL:
        return 1.0 if meets_requirement(player, definition, now) else 0.0

    if definition.value <= 0:
        return 1.0
    return clamp(_measured_value(player, definition.type) / definition.value, 0.0, 1.0)


# ============================================
# Evaluation & activation
# ============================================

def evaluate(player: Player, now: datetime) -> List[UnlockedTitle]:
    """
    Unlock every locked title whose predicate holds

    Returns:
        Titles unlocked by this call, in catalog order
    """
    newly_unlocked = []

    for title in TITLE_CATALOG:
        if title.name in player.unlocked_titles:
            continue
        if not meets_requirement(player, title, now):
            continue

        player.unlocked_titles.add(title.name)
        newly_unlocked.append(UnlockedTitle(
            title=title.name,
            description=title.description,
            rarity=title.rarity,
            unlocked_at=now,
            requirement=title.requirement_text,
        ))
        logger.info(f"Title unlocked: {title.name} ({title.rarity.value})")

    return newly_unlocked


def set_active_title(player: Player, title: str) -> bool:
    """Activate an unlocked title; False for locked or unknown titles"""
    if title not in player.unlocked_titles:
        logger.debug(f"Cannot activate locked title '{title}'")
        return False
    player.current_title = title
    logger.info(f"Active title set to {title}")
    return True


def catalog_overview(player: Player, now: datetime) -> List[TitleInfo]:
    """All titles with status and progress: unlocked first, then by rarity"""
    infos = [
        TitleInfo(
            title=t.name,
            description=t.description,
            rarity=t.rarity,
            requirement_text=t.requirement_text,
            is_unlocked=t.name in player.unlocked_titles,
            is_active=player.current_title == t.name,
            progress=progress(player, t.name, now),
        )
        for t in TITLE_CATALOG
    ]
    # sort is stable, so catalog order survives within a rarity
    infos.sort(key=lambda info: (not info.is_unlocked, info.rarity.rank))
    return infos


def titles_by_rarity(player: Player, rarity: TitleRarity, now: datetime) -> List[TitleInfo]:
    return [info for info in catalog_overview(player, now) if info.rarity == rarity]


def title_stats(player: Player) -> TitleStats:
    total_by_rarity = {rarity: 0 for rarity in TitleRarity}
    unlocked_by_rarity = {rarity: 0 for rarity in TitleRarity}

    for title in TITLE_CATALOG:
        total_by_rarity[title.rarity] += 1
        if title.name in player.unlocked_titles:
            unlocked_by_rarity[title.rarity] += 1

    unlocked = sum(unlocked_by_rarity.values())
    return TitleStats(
        total_titles=len(TITLE_CATALOG),
        unlocked_titles=unlocked,
        completion_percentage=unlocked / len(TITLE_CATALOG) * 100,
        unlocked_by_rarity=unlocked_by_rarity,
        total_by_rarity=total_by_rarity,
        current_title=player.current_title,
    )
