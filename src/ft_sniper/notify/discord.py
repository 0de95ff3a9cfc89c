"""Discord webhook notifier - posts an embed per first-buy transaction."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable

import httpx

from ft_sniper.errors import BalanceUnavailable, NotifierError
from ft_sniper.models.events import QualifyingTransaction

log = logging.getLogger(__name__)

FT_ROOM_URL = "https://friend.tech/rooms/{address}"
BASESCAN_ADDRESS_URL = "https://basescan.org/address/{address}"
BASESCAN_TX_URL = "https://basescan.org/tx/{hash}"

WEI_PER_ETHER = 10**18

# Wallet balance signals, in ether
BALANCE_GOOD = 0.2
BALANCE_GREAT = 0.75
SIGNAL_GOOD = "\U0001F7E2"  # green circle
SIGNAL_GREAT = "\U0001F7E3"  # purple circle

BalanceLookup = Callable[[str], Awaitable[int]]


def format_ether(wei: int) -> str:
    return f"`{wei / WEI_PER_ETHER:.5f}Ξ`"


def balance_signal(wei: int) -> str | None:
    """Signal line for a wallet balance, or None below the lowest threshold."""
    ether = wei / WEI_PER_ETHER
    if ether >= BALANCE_GREAT:
        return f"{SIGNAL_GREAT} High wallet balance {format_ether(wei)}"
    if ether >= BALANCE_GOOD:
        return f"{SIGNAL_GOOD} Moderate wallet balance {format_ether(wei)}"
    return None


def build_embed(tx: QualifyingTransaction, balance_wei: int | None = None) -> dict:
    """Build the webhook payload for a first-buy transaction.

    The wallet balance field and its signal are only added when a balance
    is known.
    """
    room_url = FT_ROOM_URL.format(address=tx.trader)
    explorer_url = BASESCAN_ADDRESS_URL.format(address=tx.trader)
    tx_url = BASESCAN_TX_URL.format(hash=tx.hash)
    posted = datetime.now(timezone.utc).strftime("%a, %d %b %Y %H:%M:%S GMT")

    fields = [
        {
            "name": "Address",
            "value": f"[{tx.trader}]({explorer_url})",
            "inline": False,
        },
        {"name": "Block", "value": str(tx.block_number), "inline": True},
        {
            "name": "Bought",
            "value": f"<t:{tx.block_timestamp}:R>",
            "inline": True,
        },
    ]
    if balance_wei is not None:
        fields.append(
            {"name": "Wallet Balance", "value": format_ether(balance_wei), "inline": True}
        )
        signal = balance_signal(balance_wei)
        if signal:
            fields.append({"name": "Signals", "value": signal, "inline": False})
    fields.append(
        {
            "name": "Links",
            "value": f"[FT Room]({room_url}) | [Transaction]({tx_url})"
                     f" | [BaseScan]({explorer_url})",
            "inline": False,
        }
    )

    return {
        "content": "",
        "embeds": [
            {
                "title": f"`{tx.trader[:10]}` bought their first key",
                "fields": fields,
                "footer": {"text": f"Posted on {posted}"},
            }
        ],
    }


class DiscordWebhookNotifier:
    """Posts first-buy embeds to a Discord webhook.

    Network errors and 429 responses are retried with exponential backoff,
    honouring the Retry-After header when Discord sends one. When a
    ``balance_lookup`` is given, the trader's wallet balance is added to the
    embed; a failed lookup only drops that field.
    """

    def __init__(
        self,
        webhook_url: str,
        retries: int = 3,
        retry_base_delay: float = 1.0,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
        balance_lookup: BalanceLookup | None = None,
    ) -> None:
        self._webhook_url = webhook_url
        self._retries = retries
        self._retry_base_delay = retry_base_delay
        self._timeout = timeout
        self._transport = transport
        self._balance_lookup = balance_lookup

    async def notify(self, tx: QualifyingTransaction) -> None:
        payload = build_embed(tx, await self._wallet_balance(tx.trader))
        last_error = ""
        retry_after: str | None = None

        async with httpx.AsyncClient(
            timeout=self._timeout, transport=self._transport,
        ) as client:
            for attempt in range(self._retries + 1):
                if attempt:
                    await asyncio.sleep(self._backoff(attempt, retry_after))
                    retry_after = None
                try:
                    resp = await client.post(self._webhook_url, json=payload)
                except httpx.TransportError as exc:
                    last_error = f"network error: {exc}"
                    log.warning(
                        "Webhook attempt %d for %s failed: %s",
                        attempt + 1, tx.hash, exc,
                    )
                    continue

                if resp.status_code == 429:
                    last_error = "rate limited"
                    retry_after = resp.headers.get("retry-after")
                    log.warning("Webhook rate limited for %s", tx.hash)
                    continue
                if resp.is_error:
                    raise NotifierError(
                        f"webhook rejected {tx.hash}: HTTP {resp.status_code}"
                    )
                return

        raise NotifierError(
            f"webhook gave up on {tx.hash} after {self._retries + 1} attempts: {last_error}"
        )

    def _backoff(self, attempt: int, retry_after: str | None) -> float:
        base = self._retry_base_delay
        if retry_after:
            try:
                base = float(retry_after)
            except ValueError:
                log.debug("Ignoring unparsable Retry-After %r", retry_after)
        return (2 ** attempt) * base

    async def _wallet_balance(self, address: str) -> int | None:
        if self._balance_lookup is None:
            return None
        try:
            return await self._balance_lookup(address)
        except BalanceUnavailable as exc:
            log.warning("Posting without wallet balance: %s", exc)
            return None
