"""Block range syncer - walks the chain in bounded windows behind a durable cursor."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Iterable, Iterator

from ft_sniper.errors import RpcBatchError
from ft_sniper.interfaces.chain import ChainClient
from ft_sniper.interfaces.store import CheckpointStore
from ft_sniper.models.chain import BlockRange, RawBlock
from ft_sniper.models.events import QualifyingTransaction
from ft_sniper.models.records import PassReport
from ft_sniper.notify.dispatcher import NotificationDispatcher
from ft_sniper.policy.filter import STATIC_REJECTIONS, FirstBuyClassifier

log = logging.getLogger(__name__)


class SyncState(str, Enum):
    """Where the syncer is within a pass."""

    IDLE = "idle"
    COMPUTING_RANGE = "computing_range"
    FETCHING = "fetching"
    SCANNING = "scanning"
    PERSISTING = "persisting"


class BlockRangeSyncer:
    """Incrementally scans new blocks for first-buy transactions.

    Each pass:
    1. Reads the chain head and the synced-block cursor
    2. Clamps the start to ``catch_up_threshold`` blocks behind the head when
       too far behind, persisting the head immediately
    3. Picks a window of at most ``window_size`` blocks ``[start, end)``
    4. Fetches the window, classifies every transaction in block order
    5. Dispatches qualifying transactions, then persists ``end``

    Any failure leaves the cursor where it was, so the next pass retries the
    same window. Passes must not overlap; the driver awaits each one.
    """

    def __init__(
        self,
        chain: ChainClient,
        store: CheckpointStore,
        classifier: FirstBuyClassifier,
        dispatcher: NotificationDispatcher,
        catch_up_threshold: int = 10_000,
        window_size: int = 100,
    ) -> None:
        if window_size <= 0:
            raise ValueError("window_size must be positive")
        if catch_up_threshold <= 0:
            raise ValueError("catch_up_threshold must be positive")
        self._chain = chain
        self._store = store
        self._classifier = classifier
        self._dispatcher = dispatcher
        self._catch_up_threshold = catch_up_threshold
        self._window_size = window_size
        self._synced_block: int | None = None
        self._state = SyncState.IDLE

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def cached_synced_block(self) -> int | None:
        return self._synced_block

    async def get_synced_block(self) -> int:
        """Cursor for the next pass, read from the store on first use only."""
        if self._synced_block is None:
            self._synced_block = await self._store.get_synced_block()
        return self._synced_block

    async def run_pass(self) -> PassReport:
        """Run one pass. Errors are logged with range context and re-raised."""
        try:
            self._state = SyncState.COMPUTING_RANGE
            head = await self._chain.get_chain_head()
            start = await self.get_synced_block()

            clamped = False
            if head - start > self._catch_up_threshold:
                # Recent history only: skip the backlog instead of replaying it
                log.warning(
                    "Synced block %d is %d behind head %d, jumping to %d",
                    start, head - start, head, head - self._catch_up_threshold,
                )
                start = head - self._catch_up_threshold
                await self._store.set_synced_block(head)
                clamped = True

            diff = head - start
            log.info("Remaining blocks to sync: %d", diff)
            if diff <= 0:
                return PassReport(status="idle", head=head, start=start, clamped=clamped)

            block_range = BlockRange(start, start + min(diff, self._window_size))
            return await self._sync_and_persist(block_range, head, clamped)
        finally:
            self._state = SyncState.IDLE

    async def sync_range(self, block_range: BlockRange) -> list[QualifyingTransaction]:
        """Fetch and scan a range without touching the cursor.

        The syncer's state is restored on return, so a standalone replay
        leaves it ``IDLE``.
        """
        log.info(
            "Collecting %d blocks: %d -> %d",
            len(block_range), block_range.start, block_range.end,
        )
        previous = self._state
        try:
            self._state = SyncState.FETCHING
            blocks = await self._chain.fetch_blocks(block_range.heights())
            if len(blocks) != len(block_range):
                raise RpcBatchError(
                    0, f"expected {len(block_range)} blocks, node returned {len(blocks)}"
                )

            self._state = SyncState.SCANNING
            return list(self.scan(blocks))
        finally:
            self._state = previous

    def scan(self, blocks: Iterable[RawBlock]) -> Iterator[QualifyingTransaction]:
        """Yield qualifying transactions in block order, then in-block order."""
        for block in blocks:
            for tx in block.transactions:
                result = self._classifier.evaluate(tx)
                if not result.accepted:
                    if result.reason not in STATIC_REJECTIONS:
                        log.debug("Skipped %s: %s", tx.hash, result.reason)
                    continue
                yield QualifyingTransaction(
                    hash=tx.hash,
                    block_number=block.number,
                    block_timestamp=block.timestamp,
                    trader=tx.from_address.lower(),
                    subject=result.subject or "",
                    amount=result.amount or 0,
                    value=tx.value,
                )

    async def _sync_and_persist(
        self, block_range: BlockRange, head: int, clamped: bool,
    ) -> PassReport:
        try:
            qualifying = await self.sync_range(block_range)

            self._state = SyncState.PERSISTING
            dispatched = await self._dispatcher.dispatch(qualifying)
            await self._store.set_synced_block(block_range.end)
        except Exception as exc:
            log.error(
                "Error when syncing range %d -> %d: %s",
                block_range.start, block_range.end, exc,
            )
            raise

        self._synced_block = block_range.end
        log.info(
            "Synced %d -> %d: %d first buys",
            block_range.start, block_range.end, len(qualifying),
        )
        return PassReport(
            status="synced",
            head=head,
            start=block_range.start,
            end=block_range.end,
            clamped=clamped,
            blocks_scanned=len(block_range),
            qualifying=len(qualifying),
            delivered=dispatched.delivered,
            failed_deliveries=dispatched.failed,
        )
