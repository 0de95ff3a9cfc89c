"""Hex codecs for JSON-RPC quantities and data fields."""

from __future__ import annotations


def encode_quantity(value: int) -> str:
    """Encode a block height as a JSON-RPC quantity (``0x``-prefixed, no padding)."""
    if value < 0:
        raise ValueError(f"negative quantity: {value}")
    return hex(value)


def decode_quantity(value: str | int) -> int:
    """Decode a JSON-RPC quantity. A missing field is an error, never zero."""
    if isinstance(value, int):
        return value
    return int(value, 16)


def decode_data(value: str | None) -> bytes:
    """Decode a hex data field such as calldata. ``None`` and ``0x`` give empty bytes."""
    if not value:
        return b""
    if value.startswith(("0x", "0X")):
        value = value[2:]
    return bytes.fromhex(value)


def normalize_address(value: str | None) -> str | None:
    return value.lower() if value else None
