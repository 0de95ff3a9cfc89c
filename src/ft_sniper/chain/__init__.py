"""EVM node access and calldata decoding."""

from ft_sniper.chain.decoder import CalldataDecoder
from ft_sniper.chain.rpc import JsonRpcBatchClient

__all__ = ["CalldataDecoder", "JsonRpcBatchClient"]
