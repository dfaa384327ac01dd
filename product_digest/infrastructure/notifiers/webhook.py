"""Generic JSON webhook channels (Discord, Twitter publish relay)"""
from typing import Optional

import httpx
from loguru import logger

from ...config_loader import ChannelSettings, load_channel_settings
from .base import ChannelDeliveryError, DigestChannel, split_message

DISCORD_MESSAGE_LIMIT = 2000


class WebhookChannel(DigestChannel):
    """
    POST ``{body_key: message}`` as JSON to a configured endpoint.

    Any non-2xx answer is a failed delivery. When ``max_length`` is set the
    message is posted in several chunks.
    """

    def __init__(
        self,
        name: str,
        url: str,
        env_var: str,
        body_key: str = "text",
        label: Optional[str] = None,
        max_length: Optional[int] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.name = name
        self.url = url
        self.env_var = env_var
        self.body_key = body_key
        self.label = label or name.capitalize()
        self.max_length = max_length
        self.timeout = timeout
        self._transport = transport

    def is_configured(self) -> bool:
        return bool(self.url)

    def skip_reason(self) -> str:
        return f"{self.env_var} not set"

    async def deliver(self, message: str) -> None:
        chunks = split_message(message, self.max_length) if self.max_length else [message]
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            for chunk in chunks:
                resp = await client.post(self.url, json={self.body_key: chunk})
                if resp.is_error:
                    raise ChannelDeliveryError(
                        f"{self.label} publish failed: {resp.status_code} {resp.text}"
                    )
        logger.debug(f"[publisher] {self.name} accepted {len(chunks)} message(s)")


def discord_channel(
    settings: Optional[ChannelSettings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> WebhookChannel:
    settings = settings or load_channel_settings()
    return WebhookChannel(
        name="discord",
        url=settings.discord_webhook_url,
        env_var="DISCORD_WEBHOOK_URL",
        body_key="content",
        label="Discord",
        max_length=DISCORD_MESSAGE_LIMIT,
        timeout=settings.http_timeout,
        transport=transport,
    )


def twitter_channel(
    settings: Optional[ChannelSettings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> WebhookChannel:
    settings = settings or load_channel_settings()
    return WebhookChannel(
        name="twitter",
        url=settings.twitter_publish_webhook,
        env_var="TWITTER_PUBLISH_WEBHOOK",
        body_key="text",
        label="Twitter",
        timeout=settings.http_timeout,
        transport=transport,
    )
