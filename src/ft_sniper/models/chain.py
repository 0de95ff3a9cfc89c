"""Chain data as returned by the node, plus the block window the syncer walks."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class BlockRange:
    """Half-open height range ``[start, end)``."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0 or self.end <= self.start:
            raise ValueError(f"invalid block range {self.start} -> {self.end}")

    def __len__(self) -> int:
        return self.end - self.start

    def heights(self) -> list[int]:
        return list(range(self.start, self.end))


@dataclass(frozen=True)
class RawTransaction:
    hash: str
    from_address: str
    to_address: str | None  # None for contract creation
    input: bytes
    value: int  # wei
    block_number: int


@dataclass(frozen=True)
class RawBlock:
    number: int
    timestamp: int
    transactions: tuple[RawTransaction, ...] = field(default_factory=tuple)
