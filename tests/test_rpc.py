"""JSON-RPC batch client against an in-process mock node."""

from __future__ import annotations

import json

import httpx
import pytest

from ft_sniper.chain.rpc import JsonRpcBatchClient
from ft_sniper.errors import BalanceUnavailable, ChainHeadUnavailable, RpcBatchError

from tests.factories import CONTRACT, TRADER, make_buy_input, rpc_block, rpc_tx

RPC_URL = "http://node.test"


class MockNode:
    """httpx handler emulating eth_blockNumber, eth_getBalance and batched eth_getBlockByNumber."""

    def __init__(self, head: int = 1_000) -> None:
        self.head = head
        self.batches: list[list[dict]] = []
        self.txs: dict[int, list[dict]] = {}
        self.error_heights: set[int] = set()
        self.missing_heights: set[int] = set()
        self.reverse = False
        self.balances: dict[str, int] = {}

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        if isinstance(body, dict):
            if body["method"] == "eth_getBalance":
                address, tag = body["params"]
                assert tag == "latest"
                result = hex(self.balances.get(address, 0))
            else:
                assert body["method"] == "eth_blockNumber"
                result = hex(self.head)
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": result})

        self.batches.append(body)
        responses = [self._block_response(item) for item in body]
        if self.reverse:
            responses.reverse()
        return httpx.Response(200, json=responses)

    def _block_response(self, item: dict) -> dict:
        assert item["method"] == "eth_getBlockByNumber"
        height_hex, full_txs = item["params"]
        assert full_txs is True
        height = int(height_hex, 16)
        if height in self.error_heights:
            return {"jsonrpc": "2.0", "id": item["id"], "error": {"code": -32000, "message": "header not found"}}
        if height in self.missing_heights:
            return {"jsonrpc": "2.0", "id": item["id"], "result": None}
        return {"jsonrpc": "2.0", "id": item["id"], "result": rpc_block(height, self.txs.get(height))}


def make_client(handler, batch_size: int = 950) -> JsonRpcBatchClient:
    return JsonRpcBatchClient(RPC_URL, batch_size=batch_size, transport=httpx.MockTransport(handler))


# ── Chain head ────────────────────────────────────────────────────


async def test_chain_head_is_decoded_from_hex():
    client = make_client(MockNode(head=0x1234))

    assert await client.get_chain_head() == 0x1234


async def test_chain_head_network_failure():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(ChainHeadUnavailable):
        await make_client(handler).get_chain_head()


async def test_chain_head_rpc_error():
    def handler(request):
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "error": {"code": -32603, "message": "down"}})

    with pytest.raises(ChainHeadUnavailable):
        await make_client(handler).get_chain_head()


async def test_chain_head_http_error():
    with pytest.raises(ChainHeadUnavailable):
        await make_client(lambda request: httpx.Response(503)).get_chain_head()


# ── Batching ──────────────────────────────────────────────────────


async def test_heights_are_sent_as_hex_quantities():
    node = MockNode()
    await make_client(node).fetch_blocks([0, 102, 4096])

    assert [item["params"][0] for item in node.batches[0]] == ["0x0", "0x66", "0x1000"]


async def test_2000_heights_split_into_three_sub_batches():
    node = MockNode()
    heights = list(range(5_000, 7_000))

    blocks = await make_client(node, batch_size=950).fetch_blocks(heights)

    assert [len(batch) for batch in node.batches] == [950, 950, 100]
    assert [block.number for block in blocks] == heights


async def test_out_of_order_batch_response_is_reassembled():
    node = MockNode()
    node.reverse = True

    blocks = await make_client(node, batch_size=3).fetch_blocks([10, 11, 12, 13, 14])

    assert [block.number for block in blocks] == [10, 11, 12, 13, 14]


async def test_empty_request_makes_no_calls():
    node = MockNode()

    assert await make_client(node).fetch_blocks([]) == []
    assert node.batches == []


async def test_item_error_fails_whole_call_with_sub_batch_index():
    node = MockNode()
    node.error_heights = {15}

    with pytest.raises(RpcBatchError) as exc_info:
        await make_client(node, batch_size=5).fetch_blocks(list(range(5, 25)))

    assert exc_info.value.batch_index == 2
    # Later sub-batches are not attempted
    assert len(node.batches) == 3


async def test_missing_block_is_a_batch_error():
    node = MockNode()
    node.missing_heights = {3}

    with pytest.raises(RpcBatchError) as exc_info:
        await make_client(node).fetch_blocks([1, 2, 3])

    assert exc_info.value.batch_index == 0


async def test_non_batch_body_is_a_batch_error():
    def handler(request):
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": None, "error": {"code": -32600}})

    with pytest.raises(RpcBatchError):
        await make_client(handler).fetch_blocks([1, 2])


async def test_transport_failure_is_a_batch_error():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(RpcBatchError) as exc_info:
        await make_client(handler).fetch_blocks([1])

    assert exc_info.value.batch_index == 0


async def test_http_status_failure_is_a_batch_error():
    with pytest.raises(RpcBatchError):
        await make_client(lambda request: httpx.Response(429)).fetch_blocks([1])


def test_rejects_non_positive_batch_size():
    with pytest.raises(ValueError):
        JsonRpcBatchClient(RPC_URL, batch_size=0)


# ── Parsing ───────────────────────────────────────────────────────


async def test_transactions_are_parsed():
    node = MockNode()
    node.txs[7] = [
        rpc_tx(tx_hash="0xbuy", from_address=TRADER.upper().replace("0X", "0x"), value=0),
        {
            "hash": "0xdeploy",
            "from": TRADER,
            "to": None,
            "input": "0x6080",
            "value": "0x2386f26fc10000",
        },
    ]

    (block,) = await make_client(node).fetch_blocks([7])

    assert block.number == 7
    assert block.timestamp == 1_700_000_007
    buy, deploy = block.transactions
    assert buy.hash == "0xbuy"
    assert buy.from_address == TRADER
    assert buy.to_address == CONTRACT.lower()
    assert buy.input == make_buy_input()
    assert buy.value == 0
    assert buy.block_number == 7
    assert deploy.to_address is None
    assert deploy.input == bytes.fromhex("6080")
    assert deploy.value == 10**16


async def test_transaction_without_value_is_a_batch_error():
    node = MockNode()
    tx = rpc_tx()
    del tx["value"]
    node.txs[7] = [tx]

    with pytest.raises(RpcBatchError) as exc_info:
        await make_client(node).fetch_blocks([7])

    assert "unparsable" in str(exc_info.value)


# ── Balances ──────────────────────────────────────────────────────


async def test_balance_is_decoded_from_hex():
    node = MockNode()
    node.balances[TRADER] = 3 * 10**17

    assert await make_client(node).get_balance(TRADER) == 3 * 10**17


async def test_balance_rpc_error():
    def handler(request):
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "error": {"code": -32000, "message": "busy"}})

    with pytest.raises(BalanceUnavailable):
        await make_client(handler).get_balance(TRADER)


async def test_balance_network_failure():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(BalanceUnavailable):
        await make_client(handler).get_balance(TRADER)
