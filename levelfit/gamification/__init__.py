"""
Progression & penalty rules for LevelFit

This package implements the game rules that turn real-world activity into
character progression:
- Stat engine (XP, levels, stat points, effective stats)
- Debuff ledger (time-bound stat penalties)
- Quest director (daily and urgent quests)
- Title evaluator (unlockable titles)
- Activity logging (workouts, mobility, screen time)
"""

from levelfit.gamification.stat_engine import grant_experience, allocate_stat_point, effective_stat
from levelfit.gamification.debuff_ledger import DebuffLedger, TargetPolicy
from levelfit.gamification.quest_director import QuestDirector
from levelfit.gamification.title_evaluator import evaluate, progress, set_active_title

__all__ = [
    "grant_experience",
    "allocate_stat_point",
    "effective_stat",
    "DebuffLedger",
    "TargetPolicy",
    "QuestDirector",
    "evaluate",
    "progress",
    "set_active_title",
]
