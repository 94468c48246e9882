"""aiosqlite connection for the record documents.

One connection serves the whole process. WAL journaling lets the listing
endpoint read while an upload is committing its records.
"""

import os
from typing import Self

import aiosqlite

from datacurve.logging import get_logger

logger = get_logger(__name__)

SCHEMA_VERSION = 1

# Index i upgrades a database from version i to version i + 1.
_MIGRATIONS: list[str] = [
    """
    CREATE TABLE documents (
        key TEXT PRIMARY KEY,
        body TEXT NOT NULL,
        updated_at INTEGER NOT NULL
    );
    """,
]


class RecordDatabase:
    """Owns the SQLite file holding dataset and curve documents.

    Usage:
        async with RecordDatabase("data/records.db") as database:
            store = RecordStore(database)
    """

    def __init__(self, db_path: str = "data/records.db") -> None:
        self._db_path = db_path
        self._connection: aiosqlite.Connection | None = None

    @property
    def db(self) -> aiosqlite.Connection:
        """The open connection. Raises RuntimeError before connect()."""
        if self._connection is None:
            raise RuntimeError("Record database not connected. Call connect() first.")
        return self._connection

    async def connect(self) -> None:
        if self._connection is not None:
            return
        parent = os.path.dirname(self._db_path)
        if parent:
            os.makedirs(parent, exist_ok=True)

        connection = await aiosqlite.connect(self._db_path)
        await connection.execute("PRAGMA journal_mode=WAL")
        await connection.execute("PRAGMA synchronous=NORMAL")
        self._connection = connection

        version = await self._migrate()
        logger.info("records_db_connected", db_path=self._db_path, schema_version=version)

    async def close(self) -> None:
        if self._connection is None:
            return
        await self._connection.close()
        self._connection = None
        logger.info("records_db_closed", db_path=self._db_path)

    async def _migrate(self) -> int:
        """Apply pending migrations and return the resulting schema version."""
        cursor = await self.db.execute("PRAGMA user_version")
        row = await cursor.fetchone()
        current = row[0] if row else 0

        for version in range(current, SCHEMA_VERSION):
            await self.db.executescript(_MIGRATIONS[version])
            # PRAGMA does not accept bound parameters
            await self.db.execute(f"PRAGMA user_version = {version + 1}")
            await self.db.commit()
            logger.info("records_db_migrated", schema_version=version + 1)

        return max(current, SCHEMA_VERSION)

    async def __aenter__(self) -> Self:
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # type: ignore[no-untyped-def]
        await self.close()
