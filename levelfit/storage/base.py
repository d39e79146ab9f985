"""
Storage interfaces for game state

Game state is persisted as a handful of JSON records, one per key:

    player_data             Player
    daily_quests            list of Quest
    urgent_quests           list of Quest
    last_daily_quest_reset  epoch ms or null
    workout_sessions        list of WorkoutSession
    mobility_sessions       list of MobilitySession
    screen_time_data        ScreenTimeLog

RecordStore implements the typed load/save methods on top of two primitives,
`_read(key)` and `_write(key, data)`, which concrete stores provide.
"""
import logging
from typing import Any, List, Optional, Protocol

from pydantic import ValidationError as PydanticValidationError

from levelfit.exceptions import wrap_storage_exception
from levelfit.models.player import Player
from levelfit.models.quest import Quest, QuestBoard
from levelfit.models.session import MobilitySession, ScreenTimeLog, WorkoutSession

logger = logging.getLogger(__name__)

PLAYER_KEY = "player_data"
DAILY_QUESTS_KEY = "daily_quests"
URGENT_QUESTS_KEY = "urgent_quests"
LAST_RESET_KEY = "last_daily_quest_reset"
WORKOUT_SESSIONS_KEY = "workout_sessions"
MOBILITY_SESSIONS_KEY = "mobility_sessions"
SCREEN_TIME_KEY = "screen_time_data"


class PlayerStore(Protocol):
    async def load_player(self) -> Player: ...

    async def save_player(self, player: Player) -> None: ...


class QuestStore(Protocol):
    async def load_daily(self) -> List[Quest]: ...

    async def save_daily(self, quests: List[Quest]) -> None: ...

    async def load_urgent(self) -> List[Quest]: ...

    async def save_urgent(self, quests: List[Quest]) -> None: ...

    async def load_last_reset(self) -> Optional[int]: ...

    async def save_last_reset(self, reset_at_ms: Optional[int]) -> None: ...


class SessionStore(Protocol):
    async def load_workout_sessions(self) -> List[WorkoutSession]: ...

    async def append_workout_session(self, session: WorkoutSession) -> None: ...

    async def load_mobility_sessions(self) -> List[MobilitySession]: ...

    async def append_mobility_session(self, session: MobilitySession) -> None: ...


class ScreenTimeStore(Protocol):
    async def load_screen_time(self) -> ScreenTimeLog: ...

    async def save_screen_time(self, log: ScreenTimeLog) -> None: ...


class RecordStore:
    """Typed game-state records over a key/value backend"""

    async def _read(self, key: str) -> Optional[Any]:
        """Return the decoded record for key, or None if absent"""
        raise NotImplementedError

    async def _write(self, key: str, data: Any) -> None:
        raise NotImplementedError

    async def _load_model(self, key: str, model, operation: str):
        raw = await self._read(key)
        if raw is None:
            return None
        try:
            return model.model_validate(raw)
        except PydanticValidationError as e:
            raise wrap_storage_exception(e, operation=operation, key=key)

    async def _load_list(self, key: str, model, operation: str) -> list:
        raw = await self._read(key)
        if raw is None:
            return []
        try:
            return [model.model_validate(item) for item in raw]
        except (PydanticValidationError, TypeError) as e:
            raise wrap_storage_exception(e, operation=operation, key=key)

    # ------------------------------------------
    # Player
    # ------------------------------------------

    async def load_player(self) -> Player:
        """Saved player, or a fresh level 1 player if nothing is stored"""
        player = await self._load_model(PLAYER_KEY, Player, "load_player")
        if player is None:
            logger.info("No saved player found, starting a new character")
            return Player()
        return player

    async def save_player(self, player: Player) -> None:
        await self._write(PLAYER_KEY, player.to_record())

    # ------------------------------------------
    # Quests
    # ------------------------------------------

    async def load_daily(self) -> List[Quest]:
        return await self._load_list(DAILY_QUESTS_KEY, Quest, "load_daily_quests")

    async def save_daily(self, quests: List[Quest]) -> None:
        await self._write(DAILY_QUESTS_KEY, [q.to_record() for q in quests])

    async def load_urgent(self) -> List[Quest]:
        return await self._load_list(URGENT_QUESTS_KEY, Quest, "load_urgent_quests")

    async def save_urgent(self, quests: List[Quest]) -> None:
        await self._write(URGENT_QUESTS_KEY, [q.to_record() for q in quests])

    async def load_last_reset(self) -> Optional[int]:
        raw = await self._read(LAST_RESET_KEY)
        if raw is None:
            return None
        if not isinstance(raw, int):
            raise wrap_storage_exception(
                TypeError(f"expected epoch milliseconds, got {type(raw).__name__}"),
                operation="load_last_reset",
                key=LAST_RESET_KEY,
            )
        return raw

    async def save_last_reset(self, reset_at_ms: Optional[int]) -> None:
        await self._write(LAST_RESET_KEY, reset_at_ms)

    async def load_quest_board(self) -> QuestBoard:
        return QuestBoard(
            daily=await self.load_daily(),
            urgent=await self.load_urgent(),
            last_reset_at=await self.load_last_reset(),
        )

    async def save_quest_board(self, board: QuestBoard) -> None:
        await self.save_daily(board.daily)
        await self.save_urgent(board.urgent)
        await self.save_last_reset(board.last_reset_at)

    # ------------------------------------------
    # Activity logs
    # ------------------------------------------

    async def load_workout_sessions(self) -> List[WorkoutSession]:
        return await self._load_list(WORKOUT_SESSIONS_KEY, WorkoutSession, "load_workout_sessions")

    async def append_workout_session(self, session: WorkoutSession) -> None:
        sessions = await self.load_workout_sessions()
        sessions.append(session)
        await self._write(WORKOUT_SESSIONS_KEY, [s.to_record() for s in sessions])

    async def load_mobility_sessions(self) -> List[MobilitySession]:
        return await self._load_list(MOBILITY_SESSIONS_KEY, MobilitySession, "load_mobility_sessions")

    async def append_mobility_session(self, session: MobilitySession) -> None:
        sessions = await self.load_mobility_sessions()
        sessions.append(session)
        await self._write(MOBILITY_SESSIONS_KEY, [s.to_record() for s in sessions])

    async def load_screen_time(self) -> ScreenTimeLog:
        log = await self._load_model(SCREEN_TIME_KEY, ScreenTimeLog, "load_screen_time")
        return log or ScreenTimeLog()

    async def save_screen_time(self, log: ScreenTimeLog) -> None:
        await self._write(SCREEN_TIME_KEY, log.to_record())
