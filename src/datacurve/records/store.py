"""Key-value store of JSON documents on top of RecordDatabase."""

import json
import time
from typing import Any

from datacurve.logging import get_logger
from datacurve.records.database import RecordDatabase

logger = get_logger(__name__)


class RecordStore:
    """get/set of whole JSON documents by key.

    Each set() replaces the document atomically; there is no partial update.
    """

    def __init__(self, database: RecordDatabase) -> None:
        self._database = database

    async def get(self, key: str, default: Any = None) -> Any:
        cursor = await self._database.db.execute(
            "SELECT body FROM documents WHERE key = ?", (key,)
        )
        row = await cursor.fetchone()
        if row is None:
            return default
        return json.loads(row[0])

    async def set(self, key: str, document: Any) -> None:
        await self._database.db.execute(
            "INSERT INTO documents (key, body, updated_at) VALUES (?, ?, ?) "
            "ON CONFLICT(key) DO UPDATE SET body = excluded.body, "
            "updated_at = excluded.updated_at",
            (key, json.dumps(document), int(time.time() * 1000)),
        )
        await self._database.db.commit()
        logger.debug("document_saved", key=key)
