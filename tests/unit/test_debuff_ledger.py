"""Unit tests for the debuff ledger (levelfit/gamification/debuff_ledger.py)"""
import pytest
from datetime import timedelta

from levelfit.gamification.debuff_ledger import DebuffLedger, TargetPolicy
from levelfit.models.debuff import DebuffCategory
from levelfit.models.player import Player
from levelfit.models.stats import Stat
from levelfit.utils.datetime_helpers import to_epoch_ms


# ============================================================================
# Apply Tests
# ============================================================================

def test_apply_writes_record(player, now, scripted_rng):
    ledger = DebuffLedger(scripted_rng(ints=[2]))

    applied = ledger.apply(player, DebuffCategory.QUEST_FAILURE, now, timedelta(hours=24))

    assert applied.target_stat == Stat.VITALITY
    assert applied.severity == 1
    assert applied.expires_at == now + timedelta(hours=24)
    record = player.debuffs[applied.id]
    assert record.category == DebuffCategory.QUEST_FAILURE
    assert record.target_stat == Stat.VITALITY
    assert record.created_at == to_epoch_ms(now)
    assert record.expires_at == to_epoch_ms(now + timedelta(hours=24))


@pytest.mark.parametrize("category,expected_severity", [
    (DebuffCategory.QUEST_FAILURE, 1),
    (DebuffCategory.SCREEN_TIME, 1),
    (DebuffCategory.URGENT_FAILURE, 2),
    (DebuffCategory.INACTIVITY, 3),
])
def test_severity_follows_category(player, now, ledger, category, expected_severity):
    applied = ledger.apply(player, category, now, timedelta(hours=1))
    assert applied.severity == expected_severity


def test_category_default_policies(player, now, scripted_rng):
    rng = scripted_rng(ints=[1, 1, 7, 2])
    ledger = DebuffLedger(rng)

    assert ledger.apply(player, DebuffCategory.SCREEN_TIME, now, timedelta(hours=1)).target_stat == Stat.LUCK
    assert ledger.apply(player, DebuffCategory.INACTIVITY, now, timedelta(hours=1)).target_stat == Stat.AGILITY
    assert ledger.apply(player, DebuffCategory.URGENT_FAILURE, now, timedelta(hours=1)).target_stat == Stat.LUCK
    assert ledger.apply(player, DebuffCategory.QUEST_FAILURE, now, timedelta(hours=1)).target_stat == Stat.VITALITY

    assert rng.int_bounds == [2, 3, 8, 5]


def test_explicit_policy_overrides_category(player, now, scripted_rng):
    ledger = DebuffLedger(scripted_rng(ints=[0]))
    applied = ledger.apply(player, DebuffCategory.SCREEN_TIME, now, timedelta(hours=1),
                           target_policy=TargetPolicy.PHYSICAL)
    assert applied.target_stat == Stat.STRENGTH


def test_same_millisecond_debuffs_get_distinct_keys(player, now, ledger):
    first = ledger.apply(player, DebuffCategory.QUEST_FAILURE, now, timedelta(hours=1))
    second = ledger.apply(player, DebuffCategory.QUEST_FAILURE, now, timedelta(hours=1))

    assert first.id != second.id
    assert len(player.debuffs) == 2


def test_convenience_durations(player, now, ledger):
    assert ledger.apply_quest_failure(player, now).duration == timedelta(hours=24)
    assert ledger.apply_urgent_failure(player, now).duration == timedelta(hours=48)
    assert ledger.apply_screen_time_penalty(player, now, 5).duration == timedelta(hours=22)
    assert ledger.apply_inactivity(player, now, 4).duration == timedelta(hours=96)


# ============================================================================
# Active Listing & Sweep Tests
# ============================================================================

def test_screen_time_debuff_lifecycle(player, now, ledger):
    """12h debuff: active with ~1h left at +11h, gone after a sweep at +13h"""
    ledger.apply(player, DebuffCategory.SCREEN_TIME, now, timedelta(hours=12))

    active = ledger.list_active(player, now + timedelta(hours=11))
    assert len(active) == 1
    assert active[0].remaining_time == timedelta(hours=1)
    assert active[0].remaining_time_string == "1h 0m"

    later = now + timedelta(hours=13)
    cleared = ledger.sweep_expired(player, later)
    assert len(cleared) == 1
    assert ledger.list_active(player, later) == []
    assert player.debuffs == {}


def test_sweep_keeps_unexpired(player, now, ledger):
    applied = ledger.apply(player, DebuffCategory.URGENT_FAILURE, now, timedelta(hours=2))

    assert ledger.sweep_expired(player, now + timedelta(hours=1)) == []
    assert applied.id in player.debuffs


def test_sweep_at_exact_expiry_clears_matching_record(player, now, ledger):
    applied = ledger.apply(player, DebuffCategory.INACTIVITY, now, timedelta(hours=2))

    cleared = ledger.sweep_expired(player, now + timedelta(hours=2))

    assert len(cleared) == 1
    assert cleared[0].id == applied.id
    assert cleared[0].category == DebuffCategory.INACTIVITY
    assert cleared[0].target_stat == applied.target_stat


def test_list_active_sorted_by_expiry(player, now, ledger):
    ledger.apply(player, DebuffCategory.QUEST_FAILURE, now, timedelta(hours=24))
    ledger.apply(player, DebuffCategory.QUEST_FAILURE, now, timedelta(hours=2))

    active = ledger.list_active(player, now)
    assert [d.remaining_time for d in active] == [timedelta(hours=2), timedelta(hours=24)]
    assert active[1].remaining_time_string == "1d 0h"


def test_total_debuff_on_stat_uses_exact_stat_and_severity(player, now, scripted_rng):
    ledger = DebuffLedger(scripted_rng(ints=[0, 0, 1]))
    ledger.apply(player, DebuffCategory.URGENT_FAILURE, now, timedelta(hours=5))  # strength, severity 2
    ledger.apply(player, DebuffCategory.QUEST_FAILURE, now, timedelta(hours=5))   # strength, severity 1
    ledger.apply(player, DebuffCategory.QUEST_FAILURE, now, timedelta(hours=5))   # agility

    assert ledger.total_debuff_on_stat(player, Stat.STRENGTH, now) == 3
    assert ledger.total_debuff_on_stat(player, Stat.AGILITY, now) == 1
    assert ledger.total_debuff_on_stat(player, Stat.LUCK, now) == 0
    assert ledger.total_debuff_on_stat(player, Stat.STRENGTH, now + timedelta(hours=6)) == 0


# ============================================================================
# Removal & Reduction Tests
# ============================================================================

def test_remove_unknown_returns_false(player, ledger):
    assert ledger.remove(player, "missing") is False


def test_remove_existing(player, now, ledger):
    applied = ledger.apply_quest_failure(player, now)
    assert ledger.remove(player, applied.id) is True
    assert player.debuffs == {}


def test_reduce_duration_shortens(player, now, ledger):
    applied = ledger.apply_quest_failure(player, now)

    assert ledger.reduce_duration(player, applied.id, timedelta(hours=4), now) is True
    assert player.debuffs[applied.id].expires_at == to_epoch_ms(now + timedelta(hours=20))


def test_reduce_duration_past_now_removes(player, now, ledger):
    applied = ledger.apply(player, DebuffCategory.SCREEN_TIME, now, timedelta(minutes=30))

    assert ledger.reduce_duration(player, applied.id, timedelta(minutes=30), now) is True
    assert applied.id not in player.debuffs


def test_reduce_duration_unknown_id(player, now, ledger):
    assert ledger.reduce_duration(player, "nope", timedelta(hours=1), now) is False


def test_mobility_bonus_reduces_every_debuff(player, now, ledger):
    long_one = ledger.apply(player, DebuffCategory.QUEST_FAILURE, now, timedelta(hours=24))
    short_one = ledger.apply(player, DebuffCategory.SCREEN_TIME, now, timedelta(minutes=20))

    affected = ledger.apply_mobility_bonus(player, 15, now)

    assert affected == 2
    assert short_one.id not in player.debuffs
    assert player.debuffs[long_one.id].expires_at == to_epoch_ms(now + timedelta(hours=24, minutes=-30))


def test_mobility_bonus_zero_minutes(player, now, ledger):
    ledger.apply_quest_failure(player, now)
    assert ledger.apply_mobility_bonus(player, 0, now) == 0


# ============================================================================
# Resistance Tests
# ============================================================================

@pytest.mark.parametrize("vitality,intelligence,expected", [
    (10, 10, 0.0),
    (1, 1, 0.0),
    (20, 15, 0.15),
    (40, 30, 0.5),
    (500, 500, 0.5),
])
def test_resistance_bounds(vitality, intelligence, expected):
    player = Player(vitality=vitality, intelligence=intelligence)
    assert DebuffLedger.resistance(player) == pytest.approx(expected)


def test_should_apply_compares_draw_with_resistance(scripted_rng):
    player = Player(vitality=30, intelligence=20)  # resistance 0.3
    ledger = DebuffLedger(scripted_rng(floats=[0.31, 0.3, 0.1]))

    assert ledger.should_apply(player) is True
    assert ledger.should_apply(player) is False
    assert ledger.should_apply(player) is False
