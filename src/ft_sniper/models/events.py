"""Events emitted by the syncer for downstream notifiers."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class QualifyingTransaction:
    """A buyShares call where a trader bought the first share of their own subject."""

    hash: str
    block_number: int
    block_timestamp: int
    trader: str  # lowercased sender address
    subject: str  # lowercased decoded sharesSubject
    amount: int
    value: int  # wei attached to the call
