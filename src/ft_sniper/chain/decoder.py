"""Calldata decoder for a single contract method."""

from __future__ import annotations

from typing import Any, Sequence

from eth_abi import decode
from eth_abi.exceptions import DecodingError, InsufficientDataBytes

from ft_sniper.chain.codec import decode_data
from ft_sniper.errors import DecodeError, MalformedCalldata

SELECTOR_SIZE = 4


class CalldataDecoder:
    """Decodes the parameter tuple of one method, identified by its 4-byte selector."""

    def __init__(
        self,
        selector: str | bytes,
        types: Sequence[str] = ("address", "uint256"),
    ) -> None:
        if isinstance(selector, str):
            selector = decode_data(selector)
        if len(selector) != SELECTOR_SIZE:
            raise ValueError(f"selector must be {SELECTOR_SIZE} bytes, got {len(selector)}")
        self._selector = selector
        self._types = tuple(types)

    @property
    def selector(self) -> bytes:
        return self._selector

    @property
    def types(self) -> tuple[str, ...]:
        return self._types

    def matches_selector(self, data: bytes) -> bool:
        return data[:SELECTOR_SIZE] == self._selector

    def decode(self, data: bytes) -> tuple[Any, ...]:
        """Decode the parameters following the selector.

        Raises MalformedCalldata when the payload is too short for the
        parameter tuple, DecodeError for every other decoding failure.
        """
        try:
            return tuple(decode(self._types, data[SELECTOR_SIZE:]))
        except InsufficientDataBytes as exc:
            raise MalformedCalldata(str(exc)) from exc
        except DecodingError as exc:
            raise DecodeError(f"{self._types}: {exc}") from exc
