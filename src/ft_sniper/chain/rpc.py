"""JSON-RPC batch client - chain head and full blocks from an EVM node."""

from __future__ import annotations

import logging
from typing import Any, Sequence

import httpx

from ft_sniper.chain.codec import (
    decode_data,
    decode_quantity,
    encode_quantity,
    normalize_address,
)
from ft_sniper.errors import BalanceUnavailable, ChainHeadUnavailable, RpcBatchError
from ft_sniper.models.chain import RawBlock, RawTransaction
from ft_sniper.utils import chunks

log = logging.getLogger(__name__)

# Nodes reject batches of 1000+ requests
DEFAULT_BATCH_SIZE = 950


def _parse_transaction(raw: dict[str, Any], block_number: int) -> RawTransaction:
    return RawTransaction(
        hash=raw["hash"],
        from_address=normalize_address(raw["from"]) or "",
        to_address=normalize_address(raw.get("to")),
        input=decode_data(raw.get("input")),
        value=decode_quantity(raw["value"]),
        block_number=block_number,
    )


def _parse_block(raw: dict[str, Any]) -> RawBlock:
    """Parse an eth_getBlockByNumber result fetched with full transactions."""
    number = decode_quantity(raw["number"])
    txs = raw.get("transactions") or []
    return RawBlock(
        number=number,
        timestamp=decode_quantity(raw["timestamp"]),
        transactions=tuple(_parse_transaction(tx, number) for tx in txs),
    )


class JsonRpcBatchClient:
    """Talks to an EVM node over HTTP JSON-RPC.

    Block requests are sent as JSON-RPC batches split into sub-batches of at
    most ``batch_size`` items. Sub-batches are posted one after another and
    their results concatenated in request order, so the i-th returned block
    always belongs to the i-th requested height.
    """

    def __init__(
        self,
        rpc_url: str,
        batch_size: int = DEFAULT_BATCH_SIZE,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")
        self._rpc_url = rpc_url
        self._batch_size = batch_size
        self._timeout = timeout
        self._transport = transport

    @property
    def batch_size(self) -> int:
        return self._batch_size

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self._timeout, connect=10),
            transport=self._transport,
        )

    async def get_chain_head(self) -> int:
        """Latest block height via eth_blockNumber."""
        payload = {"jsonrpc": "2.0", "id": 1, "method": "eth_blockNumber", "params": []}
        try:
            async with self._client() as client:
                resp = await client.post(self._rpc_url, json=payload)
                resp.raise_for_status()
                body = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            log.error("Failed to collect chain head number: %s", exc)
            raise ChainHeadUnavailable(f"could not collect chain head: {exc}") from exc

        if not isinstance(body, dict) or "error" in body or body.get("result") is None:
            error = body.get("error") if isinstance(body, dict) else body
            log.error("Node returned no chain head: %s", error)
            raise ChainHeadUnavailable(f"node returned no chain head: {error}")

        try:
            return decode_quantity(body["result"])
        except (TypeError, ValueError) as exc:
            raise ChainHeadUnavailable(f"bad chain head {body['result']!r}") from exc

    async def get_balance(self, address: str) -> int:
        """Latest wallet balance in wei via eth_getBalance."""
        payload = {
            "jsonrpc": "2.0",
            "id": 1,
            "method": "eth_getBalance",
            "params": [address, "latest"],
        }
        try:
            async with self._client() as client:
                resp = await client.post(self._rpc_url, json=payload)
                resp.raise_for_status()
                body = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise BalanceUnavailable(f"could not collect balance of {address}: {exc}") from exc

        if not isinstance(body, dict) or "error" in body or body.get("result") is None:
            error = body.get("error") if isinstance(body, dict) else body
            raise BalanceUnavailable(f"node returned no balance for {address}: {error}")

        try:
            return decode_quantity(body["result"])
        except (TypeError, ValueError) as exc:
            raise BalanceUnavailable(f"bad balance {body['result']!r}") from exc

    async def fetch_blocks(self, heights: Sequence[int]) -> list[RawBlock]:
        """Fetch full blocks for ``heights``, preserving order."""
        blocks: list[RawBlock] = []
        if not heights:
            return blocks

        async with self._client() as client:
            for index, batch in enumerate(chunks(heights, self._batch_size)):
                blocks.extend(await self._fetch_batch(client, index, batch))
        return blocks

    async def _fetch_batch(
        self,
        client: httpx.AsyncClient,
        index: int,
        heights: Sequence[int],
    ) -> list[RawBlock]:
        requests = [
            {
                "jsonrpc": "2.0",
                "id": i,
                "method": "eth_getBlockByNumber",
                # true => include full transaction objects
                "params": [encode_quantity(height), True],
            }
            for i, height in enumerate(heights)
        ]
        log.debug(
            "Posting sub-batch %d: %d blocks (%d -> %d)",
            index, len(heights), heights[0], heights[-1],
        )

        try:
            resp = await client.post(self._rpc_url, json=requests)
            resp.raise_for_status()
            body = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise RpcBatchError(index, f"request failed: {exc}") from exc

        if not isinstance(body, list):
            raise RpcBatchError(index, f"expected a batch response, got {body!r:.200}")

        # Batch responses may arrive in any order; ids are request positions
        by_id: dict[int, dict[str, Any]] = {}
        for item in body:
            if isinstance(item, dict) and isinstance(item.get("id"), int):
                by_id[item["id"]] = item

        blocks: list[RawBlock] = []
        for i, height in enumerate(heights):
            item = by_id.get(i)
            if item is None:
                raise RpcBatchError(index, f"no response for block {height}")
            if "error" in item:
                raise RpcBatchError(index, f"block {height}: {item['error']}")
            result = item.get("result")
            if result is None:
                raise RpcBatchError(index, f"block {height} not found")
            try:
                block = _parse_block(result)
            except (KeyError, TypeError, ValueError) as exc:
                raise RpcBatchError(index, f"block {height} unparsable: {exc}") from exc
            if block.number != height:
                raise RpcBatchError(
                    index, f"asked for block {height}, node returned {block.number}"
                )
            blocks.append(block)
        return blocks
