"""Operation results reported by the classifier, dispatcher and syncer."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ClassifyResult:
    """Result of evaluating one transaction against the first-buy rules."""

    accepted: bool
    reason: str  # "wrong_contract", "assumed_reverted", "not_first_share", etc.
    tx_hash: str
    subject: str | None = None
    amount: int | None = None


@dataclass
class DispatchReport:
    """Outcome of delivering one pass worth of notifications."""

    attempted: int = 0
    delivered: int = 0
    failed: int = 0


@dataclass
class PassReport:
    """Outcome of a single sync pass."""

    status: str  # "idle" or "synced"
    head: int
    start: int
    end: int | None = None
    clamped: bool = False
    blocks_scanned: int = 0
    qualifying: int = 0
    delivered: int = 0
    failed_deliveries: int = 0
