"""
Service Layer Package

Services combine the rules engines with persistence:
- GameService: game loop tick, activity logging, player actions
"""

from levelfit.services.game_service import ActivityReport, GameService, QuestCompletion, TickReport

__all__ = [
    "GameService",
    "TickReport",
    "ActivityReport",
    "QuestCompletion",
]
