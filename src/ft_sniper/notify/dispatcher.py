"""Notification dispatcher - delivers a pass worth of transactions, never raises."""

from __future__ import annotations

import asyncio
import logging
from typing import Sequence

from ft_sniper.interfaces.notifier import Notifier
from ft_sniper.models.events import QualifyingTransaction
from ft_sniper.models.records import DispatchReport
from ft_sniper.utils import chunks

log = logging.getLogger(__name__)


class NotificationDispatcher:
    """Sends notifications in small concurrent chunks to stay under webhook rate limits.

    Every notification in a call is attempted and awaited before returning.
    Failures are logged and counted, never propagated.
    """

    def __init__(
        self,
        notifier: Notifier,
        batch_size: int = 5,
        batch_delay: float = 0.1,
    ) -> None:
        self._notifier = notifier
        self._batch_size = batch_size
        self._batch_delay = batch_delay

    async def dispatch(self, txs: Sequence[QualifyingTransaction]) -> DispatchReport:
        report = DispatchReport(attempted=len(txs))
        batches = list(chunks(txs, self._batch_size))

        for i, batch in enumerate(batches):
            results = await asyncio.gather(
                *(self._notifier.notify(tx) for tx in batch),
                return_exceptions=True,
            )
            for tx, result in zip(batch, results):
                if isinstance(result, asyncio.CancelledError):
                    raise result
                if isinstance(result, BaseException):
                    report.failed += 1
                    log.error("Notification failed for %s: %s", tx.hash, result)
                else:
                    report.delivered += 1

            if i < len(batches) - 1 and self._batch_delay > 0:
                await asyncio.sleep(self._batch_delay)

        if report.attempted:
            log.info(
                "Dispatched %d notifications (%d failed)",
                report.attempted, report.failed,
            )
        return report
