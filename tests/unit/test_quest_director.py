"""Unit tests for the quest director (levelfit/gamification/quest_director.py)"""
import pytest
from datetime import timedelta

from levelfit.gamification.quest_director import (
    DAILY_QUEST_TEMPLATES,
    QuestDirector,
    URGENT_QUEST_TEMPLATES,
    enhance_stat_rewards,
    scale_duration_for_level,
    scale_reps_for_level,
    scale_xp_for_level,
)
from levelfit.models.debuff import DebuffCategory
from levelfit.models.player import Player
from levelfit.models.quest import Quest, QuestBoard, QuestKind
from levelfit.models.stats import Stat
from levelfit.utils.datetime_helpers import to_epoch_ms
from levelfit.utils.random_source import SeededRandom


def _quest(quest_id="q1", kind=QuestKind.DAILY, target_reps=20, duration=0, expires_at=None, exercise="push-up"):
    return Quest(
        id=quest_id,
        name="Push-up Challenge",
        description="Complete push-ups",
        kind=kind,
        exercise=exercise,
        target_reps=target_reps,
        target_duration_seconds=duration,
        xp_reward=50,
        stat_rewards={Stat.STRENGTH: 1},
        created_at=0,
        expires_at=expires_at,
    )


@pytest.fixture
def director(rng):
    return QuestDirector(rng, tz_name="UTC")


# ============================================================================
# Scaling Tests
# ============================================================================

def test_reps_scaling():
    assert scale_reps_for_level(20, 1) == 20
    assert scale_reps_for_level(20, 5) == 28
    assert scale_reps_for_level(20, 11) == 40
    assert scale_reps_for_level(20, 100) == 200
    assert scale_reps_for_level(0, 30) == 0


def test_duration_scaling_clamps():
    assert scale_duration_for_level(60, 5) == 72
    assert scale_duration_for_level(30, 1) == 30
    assert scale_duration_for_level(0, 10) == 0
    assert scale_duration_for_level(300, 200, 1.2) == 3600


def test_xp_scaling():
    assert scale_xp_for_level(50, 1) == 50
    assert scale_xp_for_level(50, 5) == 80
    assert scale_xp_for_level(100, 1, 2.0) == 200


def test_enhanced_stat_rewards_round_half_up():
    assert enhance_stat_rewards({Stat.STRENGTH: 3, Stat.AGILITY: 1}) == {Stat.STRENGTH: 5, Stat.AGILITY: 2}


# ============================================================================
# Generation Tests
# ============================================================================

def test_generate_daily_batch(now, scripted_rng):
    rng = scripted_rng(ints=[2, 0, 2, 4, 7, 1])
    director = QuestDirector(rng, tz_name="UTC")
    player = Player(level=5)

    quests = director.generate_daily_batch(player, now)

    assert len(quests) == 5
    assert [q.name for q in quests] == [
        "Push-up Challenge", "Plank Hold", "Mountain Climbers", "High Knees", "Squat Power",
    ]
    assert rng.int_bounds == [3] + [len(DAILY_QUEST_TEMPLATES)] * 5

    push_ups, plank = quests[0], quests[1]
    assert push_ups.target_reps == 28
    assert push_ups.target_duration_seconds == 0
    assert push_ups.xp_reward == 80
    assert push_ups.kind == QuestKind.DAILY
    assert push_ups.exercise == "push-up"
    assert plank.target_reps == 0
    assert plank.target_duration_seconds == 72
    assert all(q.created_at == to_epoch_ms(now) for q in quests)
    assert len({q.id for q in quests}) == 5
    assert director.board.daily == quests


def test_generate_daily_batch_replaces_previous(director, player, now):
    director.board.daily = [_quest("old")]
    director.generate_daily_batch(player, now)
    assert director.board.find("old") is None
    assert 3 <= len(director.board.daily) <= 5


def test_daily_templates_have_single_target():
    for template in DAILY_QUEST_TEMPLATES + URGENT_QUEST_TEMPLATES:
        assert (template.base_reps > 0) != (template.base_duration_seconds > 0)


def test_urgent_quest_generated(player, now, scripted_rng):
    director = QuestDirector(scripted_rng(floats=[0.1], ints=[0, 4]), tz_name="UTC")

    quest = director.maybe_generate_urgent_quest(player, now)

    assert quest is not None
    assert quest.kind == QuestKind.URGENT
    assert quest.name == "⚡ Shadow Clone Training"
    assert quest.description.endswith("LIMITED TIME QUEST!")
    assert quest.target_reps == 75
    assert quest.xp_reward == 200
    assert quest.stat_rewards == {Stat.STRENGTH: 5}
    assert quest.expires_at == to_epoch_ms(now + timedelta(hours=6))
    assert director.board.urgent == [quest]


def test_urgent_timed_quest_scaling(player, now, scripted_rng):
    director = QuestDirector(scripted_rng(floats=[0.0], ints=[2, 0]), tz_name="UTC")

    quest = director.maybe_generate_urgent_quest(player, now)

    assert quest.name == "⚡ Iron Will"
    assert quest.target_duration_seconds == 216
    assert quest.stat_rewards == {Stat.VITALITY: 5, Stat.INTELLIGENCE: 2}
    assert quest.expires_at == to_epoch_ms(now + timedelta(hours=2))


def test_urgent_roll_boundary(player, now, scripted_rng):
    assert QuestDirector(scripted_rng(floats=[0.2])).maybe_generate_urgent_quest(player, now) is not None
    assert QuestDirector(scripted_rng(floats=[0.21])).maybe_generate_urgent_quest(player, now) is None


def test_same_seed_gives_identical_urgent_quests(player, now):
    first = QuestDirector(SeededRandom(7), urgent_chance=1.0).maybe_generate_urgent_quest(player, now)
    second = QuestDirector(SeededRandom(7), urgent_chance=1.0).maybe_generate_urgent_quest(player, now)

    assert first is not None
    assert first == second
    assert first.id == f"urgent_{to_epoch_ms(now)}_0"


def test_urgent_ids_unique_within_one_instant(player, now, scripted_rng):
    director = QuestDirector(scripted_rng(floats=[0.0, 0.0]), max_urgent=5)

    first = director.maybe_generate_urgent_quest(player, now)
    second = director.maybe_generate_urgent_quest(player, now)

    assert first.id != second.id
    assert second.id == f"urgent_{to_epoch_ms(now)}_1"


def test_urgent_cap_skips_roll(player, now, scripted_rng):
    rng = scripted_rng(floats=[0.0])
    live = to_epoch_ms(now + timedelta(hours=1))
    board = QuestBoard(urgent=[
        _quest("u1", QuestKind.URGENT, expires_at=live),
        _quest("u2", QuestKind.URGENT, expires_at=live),
    ])
    director = QuestDirector(rng, board=board)

    assert director.maybe_generate_urgent_quest(player, now) is None
    assert list(rng.floats) == [0.0]


def test_expired_urgent_quests_do_not_count_toward_cap(player, now, scripted_rng):
    expired = to_epoch_ms(now - timedelta(minutes=1))
    board = QuestBoard(urgent=[
        _quest("u1", QuestKind.URGENT, expires_at=expired),
        _quest("u2", QuestKind.URGENT, expires_at=expired),
    ])
    director = QuestDirector(scripted_rng(floats=[0.0]), board=board)

    assert director.maybe_generate_urgent_quest(player, now) is not None


# ============================================================================
# Progress & Completion Tests
# ============================================================================

def test_progress_is_sticky_and_unclamped(director):
    director.board.daily = [_quest(target_reps=20)]

    assert director.report_progress("q1", 15) is True
    quest = director.board.find("q1")
    assert not quest.completed

    director.report_progress("q1", 5)
    assert quest.completed
    assert quest.current_progress == 20

    director.report_progress("q1", 5)
    assert quest.completed
    assert quest.current_progress == 25


def test_progress_unknown_quest(director):
    assert director.report_progress("missing", 5) is False


def test_progress_never_decreases(director):
    director.board.daily = [_quest()]
    director.report_progress("q1", 10)
    director.report_progress("q1", -4)
    assert director.board.find("q1").current_progress == 10


def test_progress_on_urgent_pool(director):
    director.board.urgent = [_quest("u1", QuestKind.URGENT, target_reps=0, duration=60)]
    director.report_progress("u1", 60)
    assert director.board.find("u1").completed


def test_report_exercise_routes_reps(director):
    director.board.daily = [
        _quest("push", exercise="push-up"),
        _quest("squat", exercise="squat"),
        _quest("plank", target_reps=0, duration=60, exercise="plank"),
    ]

    updated = director.report_exercise("Push-ups", 12)

    assert [q.id for q in updated] == ["push"]
    assert director.board.find("push").current_progress == 12
    assert director.board.find("squat").current_progress == 0


def test_complete_daily_quest(director, player):
    director.board.daily = [_quest()]
    director.report_progress("q1", 20)

    reward = director.complete("q1", player)

    assert reward is not None
    assert reward.xp_gained == 50
    assert reward.stat_rewards == {Stat.STRENGTH: 1}
    assert reward.quest_kind == QuestKind.DAILY
    assert player.daily_quest_streak == 1


def test_complete_twice_returns_none(director, player):
    director.board.daily = [_quest()]
    director.report_progress("q1", 20)
    director.complete("q1", player)

    assert director.complete("q1", player) is None
    assert player.daily_quest_streak == 1


def test_complete_requires_target(director, player):
    director.board.daily = [_quest()]
    director.report_progress("q1", 19)
    assert director.complete("q1", player) is None
    assert director.complete("missing", player) is None


def test_complete_urgent_does_not_bump_streak(director, player, now):
    director.board.urgent = [_quest("u1", QuestKind.URGENT, expires_at=to_epoch_ms(now + timedelta(hours=1)))]
    director.report_progress("u1", 20)

    assert director.complete("u1", player, now) is not None
    assert player.daily_quest_streak == 0


def test_complete_expired_urgent_returns_none(director, player, now):
    director.board.urgent = [_quest("u1", QuestKind.URGENT, expires_at=to_epoch_ms(now - timedelta(seconds=1)))]
    director.report_progress("u1", 20)

    assert director.complete("u1", player, now) is None


# ============================================================================
# Failure & Reset Tests
# ============================================================================

def test_no_daily_failures_on_same_day(director, player, now):
    director.board.daily = [_quest()]
    director.board.last_reset_at = to_epoch_ms(now - timedelta(hours=2))

    assert director.sweep_failures(player, now) == []


def test_daily_failures_on_new_day(director, now):
    player = Player(daily_quest_streak=4)
    director.board.daily = [_quest("a"), _quest("b")]
    director.board.last_reset_at = to_epoch_ms(now)
    director.report_progress("a", 20)

    penalties = director.sweep_failures(player, now + timedelta(days=1))

    assert [p.quest_id for p in penalties] == ["b"]
    assert penalties[0].category == DebuffCategory.QUEST_FAILURE
    assert penalties[0].duration == timedelta(hours=24)
    assert player.daily_quest_streak == 0


def test_daily_failures_are_reported_once(director, player, now):
    director.board.daily = [_quest()]
    director.board.last_reset_at = to_epoch_ms(now)
    tomorrow = now + timedelta(days=1)

    assert len(director.sweep_failures(player, tomorrow)) == 1
    assert director.sweep_failures(player, tomorrow) == []


def test_failed_quest_ignores_progress(director, player, now):
    director.board.daily = [_quest()]
    director.board.last_reset_at = to_epoch_ms(now)
    director.sweep_failures(player, now + timedelta(days=1))

    director.report_progress("q1", 50)
    assert director.board.find("q1").current_progress == 0
    assert director.complete("q1", player) is None


def test_expired_urgent_failures_removed(director, player, now):
    director.board.last_reset_at = to_epoch_ms(now)
    director.board.urgent = [
        _quest("late", QuestKind.URGENT, expires_at=to_epoch_ms(now - timedelta(minutes=5))),
        _quest("live", QuestKind.URGENT, expires_at=to_epoch_ms(now + timedelta(hours=1))),
    ]

    penalties = director.sweep_failures(player, now)

    assert [p.quest_id for p in penalties] == ["late"]
    assert penalties[0].category == DebuffCategory.URGENT_FAILURE
    assert penalties[0].duration == timedelta(hours=48)
    assert [q.id for q in director.board.urgent] == ["live"]


def test_completed_expired_urgent_is_pruned_not_failed(director, player, now):
    director.board.last_reset_at = to_epoch_ms(now)
    director.board.urgent = [_quest("done", QuestKind.URGENT, expires_at=to_epoch_ms(now - timedelta(minutes=5)))]
    director.report_progress("done", 20)

    assert director.sweep_failures(player, now) == []
    assert [q.id for q in director.prune_expired_urgent(now)] == ["done"]
    assert director.board.urgent == []


def test_reset_daily_uses_calendar_day(director, player, now):
    assert director.reset_daily_if_needed(player, now) is True
    assert director.board.last_reset_at == to_epoch_ms(now)

    # 09:00 -> 23:59 same day: no reset
    assert director.reset_daily_if_needed(player, now.replace(hour=23, minute=59)) is False

    # Only 15 hours later, but a new calendar day
    next_day = now.replace(hour=0, minute=1) + timedelta(days=1)
    assert director.reset_daily_if_needed(player, next_day) is True


def test_active_quests_excludes_finished(director, player, now):
    director.board.daily = [_quest("open"), _quest("done")]
    director.board.urgent = [_quest("late", QuestKind.URGENT, expires_at=to_epoch_ms(now - timedelta(minutes=1)))]
    director.report_progress("done", 20)

    assert [q.id for q in director.active_quests(now)] == ["open"]
