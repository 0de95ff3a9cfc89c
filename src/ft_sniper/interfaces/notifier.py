"""Notifier protocol - downstream sink for qualifying transactions."""

from __future__ import annotations

from typing import Protocol

from ft_sniper.models.events import QualifyingTransaction


class Notifier(Protocol):
    async def notify(self, tx: QualifyingTransaction) -> None:
        """Deliver one transaction. Raises NotifierError on failure."""
        ...
