"""
GameService - Game Loop and Activity Orchestration

Wires the rules engines to a store. Every public method is one
load -> mutate -> save sequence, so callers never handle partial state.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from levelfit.config import INACTIVITY_THRESHOLD_DAYS
from levelfit.gamification import mobility, screen_time, stat_engine, title_evaluator, workout_log
from levelfit.gamification.debuff_ledger import ActiveDebuff, AppliedDebuff, ClearedDebuff, DebuffLedger
from levelfit.gamification.quest_director import QuestDirector, QuestPenalty, QuestReward
from levelfit.gamification.stat_engine import LevelUpOutcome
from levelfit.gamification.title_evaluator import UnlockedTitle
from levelfit.models.debuff import DebuffCategory
from levelfit.models.player import Player
from levelfit.models.quest import Quest
from levelfit.models.session import WorkoutSet
from levelfit.models.stats import ALL_STATS, Stat
from levelfit.storage.base import RecordStore
from levelfit.utils.datetime_helpers import Clock, calendar_day, from_epoch_ms
from levelfit.utils.random_source import RandomSource

logger = logging.getLogger(__name__)


@dataclass
class TickReport:
    """Everything that happened during one tick"""
    now: datetime
    cleared_debuffs: List[ClearedDebuff] = field(default_factory=list)
    failed_quests: List[QuestPenalty] = field(default_factory=list)
    applied_debuffs: List[AppliedDebuff] = field(default_factory=list)
    resisted_penalties: List[QuestPenalty] = field(default_factory=list)
    daily_reset: bool = False
    new_daily_quests: List[Quest] = field(default_factory=list)
    urgent_quest: Optional[Quest] = None
    unlocked_titles: List[UnlockedTitle] = field(default_factory=list)
    screen_time_prompt: bool = False


@dataclass
class ActivityReport:
    """Result of an activity plus its side effects on quests and titles"""
    result: Any
    updated_quests: List[Quest] = field(default_factory=list)
    unlocked_titles: List[UnlockedTitle] = field(default_factory=list)


@dataclass
class QuestCompletion:
    reward: QuestReward
    level_up: LevelUpOutcome
    unlocked_titles: List[UnlockedTitle] = field(default_factory=list)


class GameService:
    """
    Service for the game loop.

    Responsibilities:
    - Periodic tick (debuff expiry, quest failures and resets, urgent quests, titles)
    - Activity logging (workouts, mobility, screen time)
    - Player actions (quest progress and completion, stat allocation, titles)
    """

    def __init__(self, store: RecordStore, clock: Clock, rng: RandomSource, tz_name: Optional[str] = None):
        """
        Initialize GameService.

        Args:
            store: Game state store
            clock: Source of the current instant
            rng: Source of randomness for quests, debuffs and luck
            tz_name: Timezone for calendar-day boundaries (defaults to TIMEZONE)
        """
        self.store = store
        self.clock = clock
        self.rng = rng
        self.tz_name = tz_name
        self.ledger = DebuffLedger(rng)
        logger.debug("GameService initialized")

    async def _load_director(self) -> QuestDirector:
        board = await self.store.load_quest_board()
        return QuestDirector(self.rng, board=board, tz_name=self.tz_name)

    # ------------------------------------------
    # Game loop
    # ------------------------------------------

    async def tick(self) -> TickReport:
        """
        Advance the game to the current instant

        Order: sweep expired debuffs, fail missed quests, apply their penalties
        (each may be resisted), reset the daily batch on a new day, roll for an
        urgent quest, re-evaluate titles.
        """
        now = self.clock.now()
        player = await self.store.load_player()
        director = await self._load_director()
        report = TickReport(now=now)

        report.cleared_debuffs = self.ledger.sweep_expired(player, now)

        report.failed_quests = director.sweep_failures(player, now)
        for penalty in report.failed_quests:
            if not self.ledger.should_apply(player):
                logger.info(f"Penalty for '{penalty.quest_name}' resisted")
                report.resisted_penalties.append(penalty)
                continue
            report.applied_debuffs.append(self._apply_penalty(player, penalty, now))

        if director.reset_daily_if_needed(player, now):
            report.daily_reset = True
            report.new_daily_quests = list(director.board.daily)

        director.prune_expired_urgent(now)
        report.urgent_quest = director.maybe_generate_urgent_quest(player, now)
        report.unlocked_titles = title_evaluator.evaluate(player, now)
        report.screen_time_prompt = screen_time.should_prompt(player, now, self.tz_name)

        await self.store.save_player(player)
        await self.store.save_quest_board(director.board)

        logger.info(
            f"Tick at {now.isoformat()}: {len(report.cleared_debuffs)} debuffs cleared, "
            f"{len(report.failed_quests)} quests failed, {len(report.applied_debuffs)} penalties applied, "
            f"daily reset={report.daily_reset}, urgent={'yes' if report.urgent_quest else 'no'}"
        )
        return report

    def _apply_penalty(self, player: Player, penalty: QuestPenalty, now: datetime) -> AppliedDebuff:
        if penalty.category == DebuffCategory.URGENT_FAILURE:
            return self.ledger.apply_urgent_failure(player, now, penalty.duration)
        return self.ledger.apply_quest_failure(player, now, penalty.duration)

    # ------------------------------------------
    # Activities
    # ------------------------------------------

    async def log_workout(self, exercise_name: str, sets: List[WorkoutSet]) -> ActivityReport:
        """Log a workout, route its reps to matching quests, re-evaluate titles"""
        now = self.clock.now()
        player = await self.store.load_player()
        director = await self._load_director()
        existing_ids = {s.id for s in await self.store.load_workout_sessions()}

        result = workout_log.log_workout(player, exercise_name, sets, now, self.rng, existing_ids)
        updated = director.report_exercise(exercise_name, result.total_reps) if result.total_reps else []
        unlocked = title_evaluator.evaluate(player, now)

        await self.store.append_workout_session(result.session)
        await self.store.save_player(player)
        await self.store.save_quest_board(director.board)

        return ActivityReport(result=result, updated_quests=updated, unlocked_titles=unlocked)

    async def log_mobility(self, activity_name: str, duration_minutes: int, notes: str = "") -> ActivityReport:
        now = self.clock.now()
        player = await self.store.load_player()
        existing_ids = {s.id for s in await self.store.load_mobility_sessions()}

        result = mobility.log_mobility(player, activity_name, duration_minutes, now, self.ledger, notes, existing_ids)
        unlocked = title_evaluator.evaluate(player, now)

        await self.store.append_mobility_session(result.session)
        await self.store.save_player(player)

        return ActivityReport(result=result, unlocked_titles=unlocked)

    async def submit_screen_time(self, hours: int) -> Optional[ActivityReport]:
        """
        Process today's screen time report

        Returns:
            ActivityReport, or None if today's report was already processed
        """
        now = self.clock.now()
        player = await self.store.load_player()
        if not screen_time.should_prompt(player, now, self.tz_name):
            logger.info("Screen time already reported today, ignoring resubmission")
            return None

        log = await self.store.load_screen_time()

        result = screen_time.process_screen_time(player, log, hours, now, self.ledger, self.tz_name)
        unlocked = title_evaluator.evaluate(player, now)

        await self.store.save_screen_time(log)
        await self.store.save_player(player)

        return ActivityReport(result=result, unlocked_titles=unlocked)

    # ------------------------------------------
    # Player actions
    # ------------------------------------------

    async def report_quest_progress(self, quest_id: str, delta: int) -> bool:
        director = await self._load_director()
        found = director.report_progress(quest_id, delta)
        if found:
            await self.store.save_quest_board(director.board)
        return found

    async def complete_quest(self, quest_id: str) -> Optional[QuestCompletion]:
        """
        Claim a quest's reward: XP, stat rewards, then a title check

        Returns:
            QuestCompletion, or None if the quest cannot be completed
        """
        now = self.clock.now()
        player = await self.store.load_player()
        director = await self._load_director()

        reward = director.complete(quest_id, player, now)
        if reward is None:
            return None

        level_up = stat_engine.grant_experience(player, reward.xp_gained)
        stat_engine.apply_stat_rewards(player, reward.stat_rewards)
        unlocked = title_evaluator.evaluate(player, now)

        await self.store.save_player(player)
        await self.store.save_quest_board(director.board)

        return QuestCompletion(reward=reward, level_up=level_up, unlocked_titles=unlocked)

    async def allocate_stat_point(self, stat: Stat, points: int = 1) -> bool:
        now = self.clock.now()
        player = await self.store.load_player()
        if not stat_engine.allocate_stat_point(player, stat, points):
            return False
        title_evaluator.evaluate(player, now)
        await self.store.save_player(player)
        return True

    async def set_active_title(self, title: str) -> bool:
        player = await self.store.load_player()
        if not title_evaluator.set_active_title(player, title):
            return False
        await self.store.save_player(player)
        return True

    async def apply_inactivity_penalty(self) -> Optional[AppliedDebuff]:
        """
        Penalize a long gap since the last workout

        Applies at most one active inactivity debuff at a time. Players with no
        workout history are not penalized.
        """
        now = self.clock.now()
        sessions = await self.store.load_workout_sessions()
        if not sessions:
            return None

        last_workout = from_epoch_ms(max(s.completed_at for s in sessions))
        idle_days = (calendar_day(now, self.tz_name) - calendar_day(last_workout, self.tz_name)).days
        if idle_days < INACTIVITY_THRESHOLD_DAYS:
            return None

        player = await self.store.load_player()
        if any(r.category == DebuffCategory.INACTIVITY for r in player.active_debuffs(now).values()):
            logger.debug("Inactivity debuff already active")
            return None
        if not self.ledger.should_apply(player):
            logger.info(f"Inactivity penalty for {idle_days} days resisted")
            return None

        applied = self.ledger.apply_inactivity(player, now, idle_days)
        await self.store.save_player(player)
        return applied

    # ------------------------------------------
    # Read-only views
    # ------------------------------------------

    async def recommended_rpe(self, exercise_name: str) -> float:
        sessions = await self.store.load_workout_sessions()
        return workout_log.recommended_rpe(sessions, exercise_name)

    async def status(self) -> Dict[str, Any]:
        """Player summary for display"""
        now = self.clock.now()
        player = await self.store.load_player()
        director = await self._load_director()

        active: List[ActiveDebuff] = self.ledger.list_active(player, now)
        return {
            "level": player.level,
            "experience": player.experience,
            "experience_to_next_level": stat_engine.experience_to_next_level(player),
            "stat_points": player.stat_points,
            "title": player.current_title,
            "stats": {stat.value: player.get_stat(stat) for stat in ALL_STATS},
            "effective_stats": {stat.value: stat_engine.effective_stat(player, stat, now) for stat in ALL_STATS},
            "power_level": stat_engine.power_level(player, now),
            "daily_quest_streak": player.daily_quest_streak,
            "total_reps": player.total_reps_completed,
            "debuffs": [f"{d.description} ({d.remaining_time_string} left)" for d in active],
            "quests": [
                f"{q.name}: {q.current_progress}/{q.target}" + (" [done]" if q.completed else "")
                for q in director.board.daily + director.board.urgent
            ],
        }
