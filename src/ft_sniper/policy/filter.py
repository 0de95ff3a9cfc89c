"""First-buy classifier - static address/selector filter plus decoded business rules."""

from __future__ import annotations

import logging

from ft_sniper.chain.decoder import CalldataDecoder
from ft_sniper.errors import MalformedCalldata
from ft_sniper.models.chain import RawTransaction
from ft_sniper.models.records import ClassifyResult

log = logging.getLogger(__name__)

FIRST_SHARE_AMOUNT = 1

# Reasons decided before any decoding
STATIC_REJECTIONS = frozenset({"wrong_contract", "wrong_selector"})


class FirstBuyClassifier:
    """Decides whether a transaction is a subject buying their own first share.

    Checks, cheapest first:
    1. Destination is the tracked contract (case-insensitive)
    2. Calldata starts with the tracked method selector
    3. Parameters decode as (subject, amount)
    4. Sender is the subject
    5. Amount is exactly one share
    6. No native value is attached to the call

    Truncated calldata is treated as a reverted call and skipped when
    ``skip_malformed`` is set. No receipt is fetched to confirm the revert,
    so a successful call with an unexpected calldata shape is skipped too.
    """

    def __init__(
        self,
        contract_address: str,
        decoder: CalldataDecoder,
        skip_malformed: bool = True,
    ) -> None:
        self._contract_address = contract_address.lower()
        self._decoder = decoder
        self._skip_malformed = skip_malformed

    @property
    def contract_address(self) -> str:
        return self._contract_address

    def matches(self, tx: RawTransaction) -> bool:
        """Static filter. True when the transaction is worth decoding."""
        return self._static_rejection(tx) is None

    def evaluate(self, tx: RawTransaction) -> ClassifyResult:
        """Classify a transaction. DecodeError propagates to the caller."""
        rejection = self._static_rejection(tx)
        if rejection is not None:
            return ClassifyResult(accepted=False, reason=rejection, tx_hash=tx.hash)

        try:
            subject, amount = self._decoder.decode(tx.input)
        except MalformedCalldata as exc:
            if not self._skip_malformed:
                raise
            log.debug("Skipping %s, calldata assumed reverted: %s", tx.hash, exc)
            return ClassifyResult(accepted=False, reason="assumed_reverted", tx_hash=tx.hash)

        subject = str(subject).lower()
        if tx.from_address.lower() != subject:
            return ClassifyResult(
                accepted=False, reason="not_self_buy", tx_hash=tx.hash,
                subject=subject, amount=amount,
            )
        if amount != FIRST_SHARE_AMOUNT:
            return ClassifyResult(
                accepted=False, reason="not_first_share", tx_hash=tx.hash,
                subject=subject, amount=amount,
            )
        if tx.value != 0:
            return ClassifyResult(
                accepted=False, reason="value_attached", tx_hash=tx.hash,
                subject=subject, amount=amount,
            )

        return ClassifyResult(
            accepted=True, reason="accepted", tx_hash=tx.hash,
            subject=subject, amount=amount,
        )

    def _static_rejection(self, tx: RawTransaction) -> str | None:
        if tx.to_address is None or tx.to_address.lower() != self._contract_address:
            return "wrong_contract"
        if not self._decoder.matches_selector(tx.input):
            return "wrong_selector"
        return None
