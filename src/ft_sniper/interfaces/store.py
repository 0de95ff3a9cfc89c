"""CheckpointStore protocol - durable sync cursors."""

from __future__ import annotations

from typing import Protocol


class CheckpointStore(Protocol):
    """Persists the block cursor (and the profile backfill cursor) across restarts."""

    # ── Lifecycle ──────────────────────────────────────────

    async def initialize(self) -> None:
        """Create tables if they don't exist."""
        ...

    async def close(self) -> None:
        ...

    # ── Raw keys ───────────────────────────────────────────

    async def get(self, key: str) -> int | None:
        ...

    async def set(self, key: str, value: int) -> None:
        """Persist a value. Raises PersistenceError if the write is not confirmed."""
        ...

    # ── Named cursors ──────────────────────────────────────

    async def get_synced_block(self) -> int:
        """Last synced block height, or the configured default on first run."""
        ...

    async def set_synced_block(self, height: int) -> None:
        ...

    async def get_synced_external_cursor(self) -> int:
        ...

    async def set_synced_external_cursor(self, value: int) -> None:
        ...
