"""
Quest Director - daily and urgent quests

Daily quests:
- 3-5 per calendar day, drawn from templates with replacement
- Scaled by level: reps +10%/level (1-200), duration +5%/level (30-3600s),
  XP +15%/level
- Replaced wholesale at the first tick of a new calendar day; incomplete ones
  fail with a 24h penalty and reset the daily streak

Urgent quests:
- 20% chance per check while fewer than 2 are live
- Reps x1.5, duration x1.2, XP x2.0 on top of level scaling, stat rewards x1.5
- Expire 2-6 hours after creation; failing one costs a 48h penalty

Quest lifecycle: active -> completed | failed. Terminal states are final.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, List, Optional
import logging

from levelfit.config import MAX_URGENT_QUESTS, URGENT_QUEST_CHANCE
from levelfit.models.debuff import DebuffCategory
from levelfit.models.player import Player
from levelfit.models.quest import Quest, QuestBoard, QuestKind
from levelfit.models.stats import Stat
from levelfit.utils.datetime_helpers import from_epoch_ms, is_new_day, to_epoch_ms
from levelfit.utils.random_source import RandomSource, pick
from levelfit.utils.rounding import clamp, round_half_up

logger = logging.getLogger(__name__)

DAILY_FAILURE_PENALTY = timedelta(hours=24)
URGENT_FAILURE_PENALTY = timedelta(hours=48)


@dataclass(frozen=True)
class QuestTemplate:
    """Template for generating quests"""
    name: str
    description: str
    exercise: str
    base_reps: int
    base_duration_seconds: int
    base_xp: int
    stat_rewards: Dict[Stat, int] = field(default_factory=dict)


@dataclass
class QuestReward:
    """Reward given for completing a quest"""
    quest_id: str
    quest_name: str
    quest_kind: QuestKind
    xp_gained: int
    stat_rewards: Dict[Stat, int]


@dataclass
class QuestPenalty:
    """Penalty request for a failed quest, applied by the caller"""
    quest_id: str
    quest_name: str
    quest_kind: QuestKind
    category: DebuffCategory
    duration: timedelta


# ============================================
# Quest Template Library
# ============================================

DAILY_QUEST_TEMPLATES: List[QuestTemplate] = [
    QuestTemplate("Push-up Challenge", "Complete push-ups to build upper body strength",
                  "push-up", 20, 0, 50, {Stat.STRENGTH: 1}),
    QuestTemplate("Squat Power", "Perform squats for leg strength",
                  "squat", 25, 0, 45, {Stat.STRENGTH: 1, Stat.VITALITY: 1}),
    QuestTemplate("Plank Hold", "Hold plank position for core strength",
                  "plank", 0, 60, 40, {Stat.VITALITY: 2}),
    QuestTemplate("Burpee Blast", "High-intensity burpees for cardio",
                  "burpee", 15, 0, 60, {Stat.AGILITY: 1, Stat.VITALITY: 1}),
    QuestTemplate("Mountain Climbers", "Fast mountain climbers for cardio",
                  "mountain climber", 30, 0, 55, {Stat.AGILITY: 2}),
    QuestTemplate("Jumping Jacks", "Classic cardio exercise",
                  "jumping jack", 50, 0, 35, {Stat.AGILITY: 1}),
    QuestTemplate("Wall Sit", "Isometric leg exercise",
                  "wall sit", 0, 45, 40, {Stat.VITALITY: 1, Stat.STRENGTH: 1}),
    QuestTemplate("High Knees", "Running in place with high knees",
                  "high knee", 0, 30, 30, {Stat.AGILITY: 1}),
]

URGENT_QUEST_TEMPLATES: List[QuestTemplate] = [
    QuestTemplate("Shadow Clone Training", "Intense push-up session",
                  "push-up", 50, 0, 100, {Stat.STRENGTH: 3}),
    QuestTemplate("Speed of Light", "Lightning-fast burpees",
                  "burpee", 30, 0, 120, {Stat.AGILITY: 2, Stat.VITALITY: 2}),
    QuestTemplate("Iron Will", "Extended plank challenge",
                  "plank", 0, 180, 90, {Stat.VITALITY: 3, Stat.INTELLIGENCE: 1}),
    QuestTemplate("Hunter's Endurance", "Non-stop cardio session",
                  "cardio", 0, 300, 150, {Stat.AGILITY: 2, Stat.VITALITY: 3}),
    QuestTemplate("Monarch's Trial", "Mixed exercise gauntlet",
                  "mixed", 100, 0, 200, {Stat.STRENGTH: 2, Stat.AGILITY: 2, Stat.VITALITY: 2}),
]


# ============================================
# Level Scaling
# ============================================

def scale_reps_for_level(base_reps: int, level: int, multiplier: float = 1.0) -> int:
    if base_reps == 0:
        return 0
    scaled = base_reps * (1 + (level - 1) * 0.1) * multiplier
    return clamp(round_half_up(scaled), 1, 200)


def scale_duration_for_level(base_seconds: int, level: int, multiplier: float = 1.0) -> int:
    if base_seconds == 0:
        return 0
    scaled = base_seconds * (1 + (level - 1) * 0.05) * multiplier
    return clamp(round_half_up(scaled), 30, 3600)


def scale_xp_for_level(base_xp: int, level: int, multiplier: float = 1.0) -> int:
    return round_half_up(base_xp * (1 + (level - 1) * 0.15) * multiplier)


def enhance_stat_rewards(base_rewards: Dict[Stat, int], multiplier: float = 1.5) -> Dict[Stat, int]:
    return {stat: round_half_up(value * multiplier) for stat, value in base_rewards.items()}


class QuestDirector:
    """Generates quests, tracks progress and detects failures on a QuestBoard"""

    def __init__(
        self,
        rng: RandomSource,
        board: Optional[QuestBoard] = None,
        urgent_chance: float = URGENT_QUEST_CHANCE,
        max_urgent: int = MAX_URGENT_QUESTS,
        tz_name: Optional[str] = None,
    ):
        self.rng = rng
        self.board = board or QuestBoard()
        self.urgent_chance = urgent_chance
        self.max_urgent = max_urgent
        self.tz_name = tz_name

    # ------------------------------------------
    # Generation
    # ------------------------------------------

    def generate_daily_batch(self, player: Player, now: datetime) -> List[Quest]:
        """Replace the daily pool with 3-5 freshly scaled quests"""
        created_ms = to_epoch_ms(now)
        quest_count = 3 + self.rng.uniform_int(3)

        quests = []
        for i in range(quest_count):
            template = pick(self.rng, DAILY_QUEST_TEMPLATES)
            quests.append(Quest(
                id=f"daily_{created_ms}_{i}",
                name=template.name,
                description=template.description,
                kind=QuestKind.DAILY,
                exercise=template.exercise,
                target_reps=scale_reps_for_level(template.base_reps, player.level),
                target_duration_seconds=scale_duration_for_level(template.base_duration_seconds, player.level),
                xp_reward=scale_xp_for_level(template.base_xp, player.level),
                stat_rewards=dict(template.stat_rewards),
                created_at=created_ms,
            ))

        self.board.daily = quests
        logger.info(f"Generated {len(quests)} daily quests for level {player.level}: "
                    f"{', '.join(q.name for q in quests)}")
        return quests

    def _next_urgent_id(self, created_ms: int) -> str:
        """urgent_{ms}_{n}, with n the first index not already on the board"""
        existing = {q.id for q in self.board.urgent}
        n = len(self.board.urgent)
        while f"urgent_{created_ms}_{n}" in existing:
            n += 1
        return f"urgent_{created_ms}_{n}"

    def live_urgent_quests(self, now: datetime) -> List[Quest]:
        return [q for q in self.board.urgent if not q.is_expired(now)]

    def maybe_generate_urgent_quest(self, player: Player, now: datetime) -> Optional[Quest]:
        """
        Roll for a new urgent quest

        Returns:
            The new quest, or None if the cap is reached or the roll failed
        """
        if len(self.live_urgent_quests(now)) >= self.max_urgent:
            logger.debug("Urgent quest cap reached, skipping roll")
            return None

        if self.rng.uniform_float() > self.urgent_chance:
            return None

        template = pick(self.rng, URGENT_QUEST_TEMPLATES)
        expires_at = now + timedelta(hours=2 + self.rng.uniform_int(5))

        quest = Quest(
            id=self._next_urgent_id(to_epoch_ms(now)),
            name=f"⚡ {template.name}",
            description=f"{template.description}\n⚠️ LIMITED TIME QUEST!",
            kind=QuestKind.URGENT,
            exercise=template.exercise,
            target_reps=scale_reps_for_level(template.base_reps, player.level, 1.5),
            target_duration_seconds=scale_duration_for_level(template.base_duration_seconds, player.level, 1.2),
            xp_reward=scale_xp_for_level(template.base_xp, player.level, 2.0),
            stat_rewards=enhance_stat_rewards(template.stat_rewards),
            created_at=to_epoch_ms(now),
            expires_at=to_epoch_ms(expires_at),
        )

        self.board.urgent.append(quest)
        logger.info(f"Urgent quest issued: {quest.name} (expires {expires_at.isoformat()})")
        return quest

    # ------------------------------------------
    # Progress & completion
    # ------------------------------------------

    def report_progress(self, quest_id: str, delta: int) -> bool:
        """
        Add progress to a quest in either pool

        Progress is not clamped to the target and `completed` never reverts.

        Returns:
            False if no quest has this id
        """
        quest = self.board.find(quest_id)
        if quest is None:
            return False

        if quest.failed:
            logger.debug(f"Ignoring progress on failed quest {quest_id}")
            return True

        quest.current_progress += max(0, delta)
        if quest.can_complete and not quest.completed:
            quest.completed = True
            logger.info(f"Quest {quest.name} ({quest_id}) reached its target")
        return True

    def report_exercise(self, exercise_name: str, reps: int) -> List[Quest]:
        """Route logged reps to every open rep-based quest for that exercise"""
        name = exercise_name.lower()
        updated = []
        for quest in self.board.daily + self.board.urgent:
            if quest.completed or quest.failed or quest.is_timed or not quest.exercise:
                continue
            if quest.exercise in name:
                self.report_progress(quest.id, reps)
                updated.append(quest)
        return updated

    def complete(self, quest_id: str, player: Player, now: Optional[datetime] = None) -> Optional[QuestReward]:
        """
        Claim the reward for a quest whose target has been met

        Returns:
            QuestReward, or None if the quest is unknown, already claimed,
            failed, expired, or short of its target
        """
        quest = self.board.find(quest_id)
        if quest is None or quest.claimed or quest.failed or not quest.can_complete:
            return None
        if now is not None and quest.is_expired(now):
            return None

        quest.completed = True
        quest.claimed = True

        if quest.kind == QuestKind.DAILY:
            player.daily_quest_streak += 1

        logger.info(f"Quest completed: {quest.name} (+{quest.xp_reward} XP), "
                    f"daily streak {player.daily_quest_streak}")

        return QuestReward(
            quest_id=quest.id,
            quest_name=quest.name,
            quest_kind=quest.kind,
            xp_gained=quest.xp_reward,
            stat_rewards=dict(quest.stat_rewards),
        )

    # ------------------------------------------
    # Failure detection & daily cadence
    # ------------------------------------------

    def _day_changed(self, now: datetime) -> bool:
        last_reset = from_epoch_ms(self.board.last_reset_at) if self.board.last_reset_at is not None else None
        return is_new_day(last_reset, now, self.tz_name)

    def sweep_failures(self, player: Player, now: datetime) -> List[QuestPenalty]:
        """
        Fail quests whose window has closed

        Daily quests fail when the calendar day has changed since the last
        reset; urgent quests fail once expired and leave the pool. Penalties are
        returned, not applied.
        """
        penalties = []

        if self._day_changed(now):
            for quest in self.board.daily:
                if quest.completed or quest.failed:
                    continue
                quest.failed = True
                penalties.append(QuestPenalty(
                    quest_id=quest.id,
                    quest_name=quest.name,
                    quest_kind=QuestKind.DAILY,
                    category=DebuffCategory.QUEST_FAILURE,
                    duration=DAILY_FAILURE_PENALTY,
                ))
                player.daily_quest_streak = 0

        remaining = []
        for quest in self.board.urgent:
            if quest.is_expired(now) and not quest.completed:
                quest.failed = True
                penalties.append(QuestPenalty(
                    quest_id=quest.id,
                    quest_name=quest.name,
                    quest_kind=QuestKind.URGENT,
                    category=DebuffCategory.URGENT_FAILURE,
                    duration=URGENT_FAILURE_PENALTY,
                ))
            else:
                remaining.append(quest)
        self.board.urgent = remaining

        if penalties:
            logger.info(f"{len(penalties)} quests failed: {', '.join(p.quest_name for p in penalties)}")

        return penalties

    def reset_daily_if_needed(self, player: Player, now: datetime) -> bool:
        """Regenerate the daily batch on the first call of a new calendar day"""
        if not self._day_changed(now):
            return False

        self.generate_daily_batch(player, now)
        self.board.last_reset_at = to_epoch_ms(now)
        return True

    def prune_expired_urgent(self, now: datetime) -> List[Quest]:
        """Drop expired urgent quests that were completed; incomplete ones belong to sweep_failures"""
        pruned = [q for q in self.board.urgent if q.is_expired(now) and q.completed]
        if pruned:
            self.board.urgent = [q for q in self.board.urgent if q not in pruned]
        return pruned

    def active_quests(self, now: datetime) -> List[Quest]:
        """Open quests across both pools"""
        return [
            q for q in self.board.daily + self.board.urgent
            if not q.completed and not q.failed and not q.is_expired(now)
        ]
