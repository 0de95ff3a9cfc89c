"""Main daemon loop - wires all components together."""

from __future__ import annotations

import asyncio
import logging
import signal

from ft_sniper.chain.decoder import CalldataDecoder
from ft_sniper.chain.rpc import JsonRpcBatchClient
from ft_sniper.errors import SniperError
from ft_sniper.interfaces.notifier import Notifier
from ft_sniper.models.config import SniperConfig
from ft_sniper.notify.discord import BalanceLookup, DiscordWebhookNotifier
from ft_sniper.notify.dispatcher import NotificationDispatcher
from ft_sniper.notify.log import LogNotifier
from ft_sniper.policy.filter import FirstBuyClassifier
from ft_sniper.storage.sqlite import SQLiteCheckpointStore
from ft_sniper.sync.syncer import BlockRangeSyncer

log = logging.getLogger(__name__)


def build_notifier(cfg: SniperConfig, balance_lookup: BalanceLookup | None = None) -> Notifier:
    if cfg.discord_webhook_url:
        return DiscordWebhookNotifier(cfg.discord_webhook_url, balance_lookup=balance_lookup)
    return LogNotifier()


class SniperDaemon:
    """First-buy sniper daemon.

    Runs one sync pass at a time on a fixed cadence, whatever the outcome of
    the previous pass.
    """

    def __init__(self, cfg: SniperConfig) -> None:
        self._cfg = cfg
        self._running = False
        self.passes = 0

        self.store = SQLiteCheckpointStore(
            cfg.db_path,
            default_synced_block=cfg.default_start_block,
            default_external_cursor=cfg.default_external_cursor,
        )
        self.chain = JsonRpcBatchClient(
            cfg.rpc_url, batch_size=cfg.rpc_batch_size, timeout=cfg.request_timeout,
        )
        self.classifier = FirstBuyClassifier(
            cfg.contract_address, CalldataDecoder(cfg.buy_signature),
        )
        self.dispatcher = NotificationDispatcher(
            build_notifier(cfg, balance_lookup=self.chain.get_balance),
            batch_size=cfg.notify_batch_size,
            batch_delay=cfg.notify_batch_delay,
        )
        self.syncer = BlockRangeSyncer(
            self.chain,
            self.store,
            self.classifier,
            self.dispatcher,
            catch_up_threshold=cfg.catch_up_threshold,
            window_size=cfg.window_size,
        )

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Initialize the store and run the main loop."""
        log.info("Starting ft_sniper daemon")
        log.info("  Contract: %s", self._cfg.contract_address)
        log.info("  Signature: %s", self._cfg.buy_signature)
        log.info("  RPC: %s", self._cfg.rpc_url)
        log.info("  Notifier: %s", "discord" if self._cfg.discord_webhook_url else "log")

        await self.store.initialize()
        self._running = True
        try:
            await self._main_loop()
        finally:
            await self.store.close()
            log.info("Daemon shut down cleanly")

    async def stop(self) -> None:
        """Signal the daemon to stop after the current pass."""
        log.info("Stop requested")
        self._running = False

    async def _main_loop(self) -> None:
        while self._running:
            try:
                await self.syncer.run_pass()
            except asyncio.CancelledError:
                log.info("Main loop cancelled")
                break
            except SniperError as exc:
                log.error("Sync pass failed: %s", exc)
            except Exception as exc:
                log.error("Sync pass error: %s", exc, exc_info=True)
            self.passes += 1

            if not self._running:
                break
            log.debug("Sleeping TxSync for %.0fms", self._cfg.sync_interval * 1000)
            await asyncio.sleep(self._cfg.sync_interval)


async def run_daemon(cfg: SniperConfig) -> None:
    """Entry point for running the daemon."""
    daemon = SniperDaemon(cfg)

    loop = asyncio.get_running_loop()

    def _signal_handler():
        asyncio.ensure_future(daemon.stop())

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _signal_handler)
        except NotImplementedError:
            # Windows doesn't support add_signal_handler
            pass

    await daemon.start()
