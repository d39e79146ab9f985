"""
In-memory storage

Keeps the same JSON-compatible records the file store writes, so models go
through a full dump/validate cycle on every load. Nothing survives the
process; intended for tests and for embedding the engine in another app.
"""

import copy
import logging
from typing import Any, Dict, Optional

from levelfit.storage.base import RecordStore

logger = logging.getLogger(__name__)


class InMemoryStore(RecordStore):
    """Dictionary-backed game state store"""

    def __init__(self, records: Optional[Dict[str, Any]] = None):
        self._records: Dict[str, Any] = copy.deepcopy(records) if records else {}

    async def _read(self, key: str) -> Optional[Any]:
        return copy.deepcopy(self._records.get(key))

    async def _write(self, key: str, data: Any) -> None:
        self._records[key] = copy.deepcopy(data)
        logger.debug(f"Stored {key} in memory (NOT PERSISTED)")

    def raw(self, key: str) -> Optional[Any]:
        """Stored record as written, for inspection"""
        return self._records.get(key)
