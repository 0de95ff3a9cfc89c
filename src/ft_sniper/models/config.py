"""Configuration models for the sniper daemon."""

from __future__ import annotations

from dataclasses import dataclass

# friend.tech FriendtechSharesV1 on Base
FRIENDTECH_CONTRACT = "0xCF205808Ed36593aa40a44F10c7f7C2F67d4A4d4"
BUY_SHARES_SIGNATURE = "0x6945b123"  # buyShares(address,uint256)
CONTRACT_DEPLOY_BLOCK = 2_430_440


@dataclass
class SniperConfig:
    """Complete daemon configuration."""

    # Daemon
    sync_interval: float = 0.5  # seconds between passes
    log_level: str = "info"

    # Chain
    rpc_url: str = ""
    contract_address: str = FRIENDTECH_CONTRACT
    buy_signature: str = BUY_SHARES_SIGNATURE
    request_timeout: float = 30.0  # seconds
    rpc_batch_size: int = 950  # node rejects batches of 1000+

    # Sync
    default_start_block: int = CONTRACT_DEPLOY_BLOCK - 1
    catch_up_threshold: int = 10_000
    window_size: int = 100

    # Notify
    discord_webhook_url: str = ""
    notify_batch_size: int = 5
    notify_batch_delay: float = 0.1  # seconds between notification chunks

    # Storage
    db_path: str = "~/.ft_sniper/state.db"
    default_external_cursor: int = 11
