"""Block sync engine."""

from ft_sniper.sync.syncer import BlockRangeSyncer, SyncState

__all__ = ["BlockRangeSyncer", "SyncState"]
