"""Log-only notifier, used when no webhook is configured."""

from __future__ import annotations

import logging

from ft_sniper.models.events import QualifyingTransaction

log = logging.getLogger(__name__)


class LogNotifier:
    async def notify(self, tx: QualifyingTransaction) -> None:
        log.info(
            "First buy: trader=%s block=%d tx=%s",
            tx.trader, tx.block_number, tx.hash,
        )
