"""Game state persistence"""

from levelfit.storage.base import PlayerStore, QuestStore, RecordStore, ScreenTimeStore, SessionStore
from levelfit.storage.json_store import JsonFileStore
from levelfit.storage.memory_store import InMemoryStore

__all__ = [
    "PlayerStore",
    "QuestStore",
    "SessionStore",
    "ScreenTimeStore",
    "RecordStore",
    "JsonFileStore",
    "InMemoryStore",
]
