"""Data models for the ft_sniper daemon."""

from ft_sniper.models.chain import BlockRange, RawBlock, RawTransaction
from ft_sniper.models.config import SniperConfig
from ft_sniper.models.events import QualifyingTransaction
from ft_sniper.models.records import ClassifyResult, DispatchReport, PassReport

__all__ = [
    "BlockRange", "RawBlock", "RawTransaction",
    "SniperConfig",
    "QualifyingTransaction",
    "ClassifyResult", "DispatchReport", "PassReport",
]
