"""Global test fixtures and utilities for levelfit tests"""
import pytest
from collections import deque
from datetime import datetime, timezone

from levelfit.gamification.debuff_ledger import DebuffLedger
from levelfit.models.player import Player
from levelfit.storage.memory_store import InMemoryStore
from levelfit.utils.datetime_helpers import FixedClock


class ScriptedRandom:
    """
    RandomSource that replays queued draws

    When a queue runs dry the default is returned: 0.99 for floats (no luck
    bonus, no urgent quest, debuffs not resisted) and 0 for ints.
    """

    def __init__(self, floats=(), ints=(), default_float=0.99, default_int=0):
        self.floats = deque(floats)
        self.ints = deque(ints)
        self.default_float = default_float
        self.default_int = default_int
        self.int_bounds = []

    def uniform_float(self) -> float:
        return self.floats.popleft() if self.floats else self.default_float

    def uniform_int(self, bound: int) -> int:
        self.int_bounds.append(bound)
        value = self.ints.popleft() if self.ints else self.default_int
        assert 0 <= value < bound, f"scripted int {value} out of range for bound {bound}"
        return value


# ============================================================================
# Time Fixtures
# ============================================================================

@pytest.fixture
def now():
    """Tuesday 2026-03-10 09:00 UTC"""
    return datetime(2026, 3, 10, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock(now):
    return FixedClock(now)


# ============================================================================
# Randomness Fixtures
# ============================================================================

@pytest.fixture
def rng():
    return ScriptedRandom()


@pytest.fixture
def scripted_rng():
    """Factory for ScriptedRandom with queued draws"""
    return ScriptedRandom


@pytest.fixture
def ledger(rng):
    return DebuffLedger(rng)


# ============================================================================
# Game State Fixtures
# ============================================================================

@pytest.fixture
def player():
    """Fresh level 1 player, all stats 10"""
    return Player()


@pytest.fixture
def store():
    return InMemoryStore()
