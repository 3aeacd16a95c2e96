"""Collection persistence over an opaque key-value store.

The archive engine talks to storage only through StorageService:
- get_collection / save_collection
- get_selection_state / save_selection_state

Each call reads or writes one whole record (read-modify-write). There is
no locking here; callers serialize imports and exports themselves.

Two key-value backends:
- MemoryKeyValueStore (tests, embedding)
- SqliteKeyValueStore (local installs, default path from PROMPTOPS_STORAGE_PATH)
"""

import asyncio
import json
import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Optional, Protocol

from src import config
from src.archive.schemas import Collection, SelectionState

logger = logging.getLogger(__name__)

COLLECTION_KEY = "promptops/collection"
SELECTION_KEY = "promptops/selection"


class KeyValueStore(Protocol):
    async def get(self, key: str) -> Optional[Any]: ...

    async def set(self, key: str, value: Any) -> None: ...


class MemoryKeyValueStore:
    """In-process store. Values are JSON round-tripped like a real backend."""

    def __init__(self):
        self._data: dict[str, str] = {}

    async def get(self, key: str) -> Optional[Any]:
        raw = self._data.get(key)
        return json.loads(raw) if raw is not None else None

    async def set(self, key: str, value: Any) -> None:
        self._data[key] = json.dumps(value, ensure_ascii=False)


class SqliteKeyValueStore:
    """Key-value store in a single SQLite table, one connection per call."""

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path is not None else config.STORAGE_PATH
        self._initialized = False

    @contextmanager
    def _connect(self):
        conn = sqlite3.connect(str(self.path), check_same_thread=False)
        try:
            yield conn
        finally:
            conn.close()

    def _init(self, conn: sqlite3.Connection) -> None:
        if self._initialized:
            return
        conn.execute(
            "CREATE TABLE IF NOT EXISTS kv (key TEXT PRIMARY KEY, value TEXT NOT NULL)"
        )
        conn.commit()
        self._initialized = True
        logger.info(f"Key-value store ready at {self.path}")

    def _get_sync(self, key: str) -> Optional[Any]:
        with self._connect() as conn:
            self._init(conn)
            row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
        return json.loads(row[0]) if row else None

    def _set_sync(self, key: str, value: Any) -> None:
        with self._connect() as conn:
            self._init(conn)
            conn.execute(
                "INSERT INTO kv (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (key, json.dumps(value, ensure_ascii=False)),
            )
            conn.commit()

    # sqlite3 blocks, so calls run in a worker thread
    async def get(self, key: str) -> Optional[Any]:
        return await asyncio.to_thread(self._get_sync, key)

    async def set(self, key: str, value: Any) -> None:
        await asyncio.to_thread(self._set_sync, key, value)


class StorageService:
    """Typed access to the stored collection and selection state."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    async def get_collection(self) -> Collection:
        """Stored collection, or an empty one when nothing was saved yet."""
        data = await self.store.get(COLLECTION_KEY)
        if data is None:
            logger.info("No stored collection, starting empty")
            return Collection()
        return Collection.model_validate(data)

    async def save_collection(self, collection: Collection) -> None:
        await self.store.set(
            COLLECTION_KEY, collection.model_dump(mode="json", by_alias=True, exclude_none=True)
        )
        logger.debug(
            f"Saved collection: {len(collection.frameworks)} frameworks, "
            f"{len(collection.prompts)} prompts"
        )

    async def get_selection_state(self) -> Optional[SelectionState]:
        data = await self.store.get(SELECTION_KEY)
        if data is None:
            return None
        return SelectionState.model_validate(data)

    async def save_selection_state(self, state: SelectionState) -> None:
        await self.store.set(SELECTION_KEY, state.model_dump(mode="json"))


# Global storage instance
_storage: Optional[StorageService] = None


def get_storage() -> StorageService:
    """Get the global storage service (SQLite-backed)."""
    global _storage
    if _storage is None:
        _storage = StorageService(SqliteKeyValueStore())
    return _storage
