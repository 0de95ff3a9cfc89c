"""SQLite implementation of the CheckpointStore protocol."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import aiosqlite

from ft_sniper.errors import CheckpointUnavailable, PersistenceError

# Namespaced so several projects can share one database
KEY_NAMESPACE = "ft_sniper"
SYNCED_BLOCK_KEY = f"{KEY_NAMESPACE}_latest_block_number"
SYNCED_EXTERNAL_CURSOR_KEY = f"{KEY_NAMESPACE}_latest_user_id"

SCHEMA = """
CREATE TABLE IF NOT EXISTS checkpoints (
    key TEXT PRIMARY KEY,
    value INTEGER NOT NULL,
    updated_at TEXT NOT NULL DEFAULT (datetime('now'))
);
"""


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class SQLiteCheckpointStore:
    """SQLite-backed implementation of the CheckpointStore protocol."""

    def __init__(
        self,
        db_path: str,
        default_synced_block: int = 0,
        default_external_cursor: int = 0,
    ) -> None:
        self._db_path = db_path
        self._default_synced_block = default_synced_block
        self._default_external_cursor = default_external_cursor
        self._db: aiosqlite.Connection | None = None

    async def initialize(self) -> None:
        if self._db_path != ":memory:":
            Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)
        self._db = await aiosqlite.connect(self._db_path)
        self._db.row_factory = aiosqlite.Row
        await self._db.executescript(SCHEMA)
        await self._db.commit()

    async def close(self) -> None:
        if self._db:
            await self._db.close()
            self._db = None

    @property
    def db(self) -> aiosqlite.Connection:
        assert self._db is not None, "Store not initialized. Call initialize() first."
        return self._db

    # ── Raw keys ───────────────────────────────────────────

    async def get(self, key: str) -> int | None:
        try:
            async with self.db.execute(
                "SELECT value FROM checkpoints WHERE key=?", (key,)
            ) as cur:
                row = await cur.fetchone()
        except aiosqlite.Error as exc:
            raise CheckpointUnavailable(f"could not read {key}: {exc}") from exc
        return row["value"] if row else None

    async def set(self, key: str, value: int) -> None:
        try:
            cur = await self.db.execute(
                "INSERT INTO checkpoints (key, value, updated_at) VALUES (?, ?, ?)"
                " ON CONFLICT(key) DO UPDATE SET value=excluded.value,"
                " updated_at=excluded.updated_at",
                (key, value, _now()),
            )
            changed = cur.rowcount
            await cur.close()
            await self.db.commit()
        except aiosqlite.Error as exc:
            raise PersistenceError(f"could not store {key}={value}: {exc}") from exc
        if changed != 1:
            raise PersistenceError(f"write of {key}={value} not confirmed")

    # ── Named cursors ──────────────────────────────────────

    async def get_synced_block(self) -> int:
        value = await self.get(SYNCED_BLOCK_KEY)
        return self._default_synced_block if value is None else value

    async def set_synced_block(self, height: int) -> None:
        await self.set(SYNCED_BLOCK_KEY, height)

    async def get_synced_external_cursor(self) -> int:
        value = await self.get(SYNCED_EXTERNAL_CURSOR_KEY)
        return self._default_external_cursor if value is None else value

    async def set_synced_external_cursor(self, value: int) -> None:
        await self.set(SYNCED_EXTERNAL_CURSOR_KEY, value)
