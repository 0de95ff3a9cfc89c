"""ChainClient protocol - the two node calls the syncer needs."""

from __future__ import annotations

from typing import Protocol, Sequence

from ft_sniper.models.chain import RawBlock


class ChainClient(Protocol):
    """Reads the chain head and full blocks from an EVM JSON-RPC node."""

    async def get_chain_head(self) -> int:
        """Latest block height. Raises ChainHeadUnavailable on failure."""
        ...

    async def fetch_blocks(self, heights: Sequence[int]) -> list[RawBlock]:
        """Blocks with transactions, the i-th result matching the i-th height."""
        ...
