"""Protocol interfaces for the ft_sniper collaborators."""

from ft_sniper.interfaces.chain import ChainClient
from ft_sniper.interfaces.notifier import Notifier
from ft_sniper.interfaces.store import CheckpointStore

__all__ = ["ChainClient", "CheckpointStore", "Notifier"]
