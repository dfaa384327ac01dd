"""Digest delivery channels"""
from typing import List, Optional

from ...config_loader import ChannelSettings, load_channel_settings
from .base import (
    ChannelDeliveryError,
    ChannelResult,
    DigestChannel,
    split_message,
    utf8_size,
)
from .telegram import TelegramAPIError, TelegramChannel, TelegramClient
from .webhook import WebhookChannel, discord_channel, twitter_channel
from .wecom import WeComChannel


def default_channels(settings: Optional[ChannelSettings] = None) -> List[DigestChannel]:
    """Chat bot broadcast first, then the webhook channels."""
    settings = settings or load_channel_settings()
    return [
        TelegramChannel(settings),
        discord_channel(settings),
        twitter_channel(settings),
        WeComChannel(settings),
    ]


__all__ = [
    "ChannelDeliveryError",
    "ChannelResult",
    "DigestChannel",
    "split_message",
    "utf8_size",
    "TelegramAPIError",
    "TelegramChannel",
    "TelegramClient",
    "WebhookChannel",
    "discord_channel",
    "twitter_channel",
    "WeComChannel",
    "default_channels",
]
