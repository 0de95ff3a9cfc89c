"""CLI entry point for the ft_sniper daemon."""

from __future__ import annotations

import asyncio
import logging
import sys

import click

from ft_sniper.config import load_config
from ft_sniper.daemon import SniperDaemon, run_daemon
from ft_sniper.errors import SniperError
from ft_sniper.storage.sqlite import SQLiteCheckpointStore


def _require_rpc(cfg):
    """Exit with error if no RPC URL is configured."""
    if not cfg.rpc_url:
        click.echo("Error: No RPC URL configured.", err=True)
        click.echo("Set FT_SNIPER_RPC_URL (or RPC_URL) or rpc_url in config.", err=True)
        sys.exit(1)


def _open_store(cfg) -> SQLiteCheckpointStore:
    return SQLiteCheckpointStore(
        cfg.db_path,
        default_synced_block=cfg.default_start_block,
        default_external_cursor=cfg.default_external_cursor,
    )


@click.group()
@click.option("-c", "--config", "config_path", default=None, help="Path to config TOML file")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """ft_sniper - friend.tech first-buy sniper for Base."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["verbose"] = verbose

    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


# ── Daemon ─────────────────────────────────────────────


@cli.command()
@click.pass_context
def run(ctx: click.Context) -> None:
    """Start the sync daemon."""
    cfg = load_config(ctx.obj["config_path"])
    _require_rpc(cfg)

    click.echo(f"Starting ft_sniper daemon (contract: {cfg.contract_address})")
    asyncio.run(run_daemon(cfg))


@cli.command("sync-once")
@click.pass_context
def sync_once(ctx: click.Context) -> None:
    """Run a single sync pass and print its report."""
    cfg = load_config(ctx.obj["config_path"])
    _require_rpc(cfg)

    async def _once():
        daemon = SniperDaemon(cfg)
        await daemon.store.initialize()
        try:
            return await daemon.syncer.run_pass()
        finally:
            await daemon.store.close()

    try:
        report = asyncio.run(_once())
    except SniperError as exc:
        click.echo(f"Pass failed: {exc}", err=True)
        sys.exit(1)

    click.echo(f"Status:     {report.status}")
    click.echo(f"Head:       {report.head}")
    if report.end is not None:
        click.echo(f"Range:      {report.start} -> {report.end}")
    click.echo(f"Clamped:    {report.clamped}")
    click.echo(f"First buys: {report.qualifying} ({report.failed_deliveries} failed deliveries)")


# ── Info ───────────────────────────────────────────────


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show daemon configuration."""
    cfg = load_config(ctx.obj["config_path"])
    click.echo(f"RPC URL:        {cfg.rpc_url or '(not set)'}")
    click.echo(f"Contract:       {cfg.contract_address}")
    click.echo(f"Signature:      {cfg.buy_signature}")
    click.echo(f"Start block:    {cfg.default_start_block}")
    click.echo(f"Catch-up limit: {cfg.catch_up_threshold} blocks")
    click.echo(f"Window:         {cfg.window_size} blocks")
    click.echo(f"RPC batch size: {cfg.rpc_batch_size}")
    click.echo(f"Interval:       {cfg.sync_interval}s")
    click.echo(f"Notifier:       {'discord' if cfg.discord_webhook_url else 'log'}")
    click.echo(f"DB path:        {cfg.db_path}")


@cli.command()
@click.pass_context
def head(ctx: click.Context) -> None:
    """Print the chain head height reported by the node."""
    cfg = load_config(ctx.obj["config_path"])
    _require_rpc(cfg)
    daemon = SniperDaemon(cfg)

    try:
        height = asyncio.run(daemon.chain.get_chain_head())
    except SniperError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)
    click.echo(str(height))


@cli.command()
@click.option("--set", "new_height", type=int, default=None,
              help="Overwrite the synced block checkpoint")
@click.pass_context
def checkpoint(ctx: click.Context, new_height: int | None) -> None:
    """Show (or overwrite) the synced block checkpoint."""
    cfg = load_config(ctx.obj["config_path"])

    async def _checkpoint():
        store = _open_store(cfg)
        await store.initialize()
        try:
            if new_height is not None:
                await store.set_synced_block(new_height)
            return (
                await store.get_synced_block(),
                await store.get_synced_external_cursor(),
            )
        finally:
            await store.close()

    if new_height is not None and new_height < 0:
        click.echo("Error: checkpoint must be non-negative.", err=True)
        sys.exit(1)

    synced_block, external_cursor = asyncio.run(_checkpoint())
    click.echo(f"Synced block:    {synced_block}")
    click.echo(f"External cursor: {external_cursor}")


if __name__ == "__main__":
    cli()
