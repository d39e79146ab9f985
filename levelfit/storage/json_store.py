"""JSON file storage: one `<key>.json` file per record under DATA_PATH"""
import json
import logging
from pathlib import Path
from typing import Any, Optional

from levelfit.config import DATA_PATH
from levelfit.exceptions import wrap_storage_exception
from levelfit.storage.base import RecordStore

logger = logging.getLogger(__name__)


class JsonFileStore(RecordStore):
    """Persist game state as JSON files"""

    def __init__(self, data_path: Path = DATA_PATH):
        self.data_path = Path(data_path)

    def get_path(self, key: str) -> Path:
        return self.data_path / f"{key}.json"

    async def _read(self, key: str) -> Optional[Any]:
        filepath = self.get_path(key)
        if not filepath.exists():
            return None
        try:
            return json.loads(filepath.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise wrap_storage_exception(e, operation=f"read_{key}", key=key, context={"path": str(filepath)})

    async def _write(self, key: str, data: Any) -> None:
        filepath = self.get_path(key)
        tmp_path = filepath.with_suffix(".json.tmp")
        try:
            self.data_path.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
            tmp_path.replace(filepath)
        except OSError as e:
            raise wrap_storage_exception(e, operation=f"write_{key}", key=key, context={"path": str(filepath)})
        logger.debug(f"Wrote {filepath}")
