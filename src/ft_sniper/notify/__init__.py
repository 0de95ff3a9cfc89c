"""Downstream notification sinks."""

from ft_sniper.notify.discord import DiscordWebhookNotifier
from ft_sniper.notify.dispatcher import NotificationDispatcher
from ft_sniper.notify.log import LogNotifier

__all__ = ["DiscordWebhookNotifier", "LogNotifier", "NotificationDispatcher"]
