"""Exception hierarchy for the block syncer and its collaborators."""

from __future__ import annotations


class SniperError(Exception):
    """Base class for every error the sync engine knows how to report."""


class ChainHeadUnavailable(SniperError):
    """The node could not report its latest block height."""


class RpcBatchError(SniperError):
    """A sub-batch of block requests failed as a whole."""

    def __init__(self, batch_index: int, message: str) -> None:
        super().__init__(f"sub-batch {batch_index}: {message}")
        self.batch_index = batch_index


class DecodeError(SniperError):
    """Calldata could not be decoded for a reason other than short data.

    Usually means the tracked signature no longer matches the contract ABI,
    so it is never skipped silently.
    """


class MalformedCalldata(SniperError):
    """Calldata was truncated or pointed past the end of the payload."""


class CheckpointUnavailable(SniperError):
    """The checkpoint store could not be read."""


class PersistenceError(SniperError):
    """A checkpoint write could not be confirmed."""


class NotifierError(SniperError):
    """A notification could not be delivered."""


class BalanceUnavailable(SniperError):
    """The node could not report a wallet balance."""
