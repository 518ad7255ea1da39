from __future__ import annotations

import time
from pathlib import Path
from typing import (
    Any,
    Optional,
    Union,
)

import anyio

from swrcache._core._storages._async_base import AsyncBaseStorage
from swrcache._core._storages._packing import pack, unpack
from swrcache._core.models import CacheKey, Response
from swrcache._utils import ensure_cache_dict

try:
    import anysqlite

    class AsyncSqliteStorage(AsyncBaseStorage):
        """
        Storage backed by a SQLite database accessed through ``anysqlite``.

        Each cache key owns exactly one row. Writing a key replaces the row in a
        single ``INSERT OR REPLACE`` statement, so readers never see a partially
        written entry.

        Args:
            connection: An already opened connection. When omitted, one is opened
                lazily at ``database_path`` inside the ``.cache/swrcache`` directory.
            database_path: Location of the database file used when no connection
                is supplied.
        """

        def __init__(
            self,
            *,
            connection: Optional[anysqlite.Connection] = None,
            database_path: Union[str, Path] = "swrcache.db",
        ) -> None:
            self.connection = connection
            self.database_path: Path = database_path if isinstance(database_path, Path) else Path(database_path)
            self._initialized = False
            self._connect_lock = anyio.Lock()

        async def _ensure_connection(self) -> anysqlite.Connection:
            """Open the connection and create the schema once, even under concurrent first use."""
            async with self._connect_lock:
                if self.connection is None:
                    parent = self.database_path.parent if self.database_path.parent != Path(".") else None
                    full_path = ensure_cache_dict(parent) / self.database_path.name
                    self.connection = await anysqlite.connect(str(full_path))
                if not self._initialized:
                    await self._initialize_database()
                    self._initialized = True
                return self.connection

        async def _initialize_database(self) -> None:
            """Initialize the database schema."""
            assert self.connection is not None
            cursor = await self.connection.cursor()

            await cursor.execute("""
                CREATE TABLE IF NOT EXISTS entries (
                    cache_key TEXT PRIMARY KEY,
                    url TEXT NOT NULL,
                    data BLOB NOT NULL,
                    stored_at REAL NOT NULL
                )
            """)

            await self.connection.commit()

        async def match(self, key: CacheKey) -> Optional[Response]:
            connection = await self._ensure_connection()
            cursor = await connection.cursor()
            await cursor.execute(
                "SELECT data FROM entries WHERE cache_key = ?",
                (key.hash(),),
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return unpack(row[0])

        async def put(self, key: CacheKey, response: Response) -> None:
            body = await response.aread()

            connection = await self._ensure_connection()
            cursor = await connection.cursor()
            await cursor.execute(
                "INSERT OR REPLACE INTO entries (cache_key, url, data, stored_at) VALUES (?, ?, ?, ?)",
                (key.hash(), key.url, pack(response, body), time.time()),
            )
            await connection.commit()

        async def close(self) -> None:
            if self.connection is not None:
                await self.connection.close()
                self.connection = None
                self._initialized = False

except ImportError:

    class AsyncSqliteStorage:  # type: ignore[no-redef]
        def __init__(self, *args: Any, **kwargs: Any) -> None:
            raise ImportError(
                "The 'anysqlite' library is required to use the `AsyncSqliteStorage` integration. "
                "Install swrcache with 'pip install swrcache[async]'."
            )
