"""Configuration loading: TOML file + environment variables."""

from __future__ import annotations

import os
from pathlib import Path

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:
    import tomli as tomllib  # type: ignore[no-redef]

from ft_sniper.models.config import SniperConfig


def load_config(
    config_path: str | Path | None = None,
    env_prefix: str = "FT_SNIPER_",
) -> SniperConfig:
    """Load daemon configuration from a TOML file and env vars.

    Priority (highest wins):
        1. Environment variables (FT_SNIPER_RPC_URL, etc.; plain RPC_URL too)
        2. TOML config file
        3. Defaults from SniperConfig
    """
    raw: dict = {}
    if config_path is not None:
        p = Path(config_path).expanduser()
        if p.exists():
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    cfg = SniperConfig()

    # ── Daemon section ─────────────────────────────────────
    daemon = raw.get("daemon", {})
    if (v := daemon.get("sync_interval")) is not None:
        cfg.sync_interval = float(v)
    if v := daemon.get("log_level"):
        cfg.log_level = str(v)

    # ── Chain section ──────────────────────────────────────
    chain = raw.get("chain", {})
    if v := chain.get("rpc_url"):
        cfg.rpc_url = str(v)
    if v := chain.get("contract_address"):
        cfg.contract_address = str(v)
    if v := chain.get("buy_signature"):
        cfg.buy_signature = str(v)
    if v := chain.get("request_timeout"):
        cfg.request_timeout = float(v)
    if v := chain.get("rpc_batch_size"):
        cfg.rpc_batch_size = int(v)

    # ── Sync section ───────────────────────────────────────
    sync = raw.get("sync", {})
    if (v := sync.get("default_start_block")) is not None:
        cfg.default_start_block = int(v)
    if v := sync.get("catch_up_threshold"):
        cfg.catch_up_threshold = int(v)
    if v := sync.get("window_size"):
        cfg.window_size = int(v)

    # ── Notify section ─────────────────────────────────────
    notify = raw.get("notify", {})
    if v := notify.get("discord_webhook_url"):
        cfg.discord_webhook_url = str(v)
    if v := notify.get("notify_batch_size"):
        cfg.notify_batch_size = int(v)
    if (v := notify.get("notify_batch_delay")) is not None:
        cfg.notify_batch_delay = float(v)

    # ── Storage section ────────────────────────────────────
    storage = raw.get("storage", {})
    if v := storage.get("db_path"):
        cfg.db_path = str(v)
    if (v := storage.get("default_external_cursor")) is not None:
        cfg.default_external_cursor = int(v)

    # ── Environment variable overrides (highest priority) ──
    if rpc := os.environ.get(f"{env_prefix}RPC_URL") or os.environ.get("RPC_URL"):
        cfg.rpc_url = rpc
    if contract := os.environ.get(f"{env_prefix}CONTRACT_ADDRESS"):
        cfg.contract_address = contract
    if webhook := os.environ.get(f"{env_prefix}DISCORD_WEBHOOK_URL"):
        cfg.discord_webhook_url = webhook
    if db_path := os.environ.get(f"{env_prefix}DB_PATH"):
        cfg.db_path = db_path

    # Expand ~ in paths
    if cfg.db_path != ":memory:":
        cfg.db_path = str(Path(cfg.db_path).expanduser())

    return cfg
