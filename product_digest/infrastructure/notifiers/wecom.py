from typing import Optional

import httpx
from loguru import logger

from ...config_loader import ChannelSettings, load_channel_settings
from .base import ChannelDeliveryError, DigestChannel, split_message, utf8_size

# Markdown content cap, in UTF-8 bytes.
WECOM_MESSAGE_LIMIT = 4096


class WeComChannel(DigestChannel):
    """
    Send the digest to an Enterprise WeChat group via robot webhook.

    Docs (CN): https://developer.work.weixin.qq.com/document/path/91770
    """

    name = "wecom"

    def __init__(
        self,
        settings: Optional[ChannelSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = settings or load_channel_settings()
        self.webhook = settings.wecom_webhook
        self.timeout = settings.http_timeout
        self._transport = transport

    def is_configured(self) -> bool:
        return bool(self.webhook)

    def skip_reason(self) -> str:
        return "WECOM_WEBHOOK not set"

    async def deliver(self, message: str) -> None:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            for chunk in split_message(message, WECOM_MESSAGE_LIMIT, size=utf8_size):
                payload = {"msgtype": "markdown", "markdown": {"content": chunk}}
                resp = await client.post(self.webhook, json=payload)
                try:
                    data = resp.json()
                except ValueError as exc:
                    raise ChannelDeliveryError(
                        f"WeCom publish failed: {resp.status_code} {resp.text[:200]}"
                    ) from exc

                if data.get("errcode") != 0:
                    raise ChannelDeliveryError(
                        f"WeCom publish failed: {data.get('errcode')} {data.get('errmsg', '')}".strip()
                    )
        logger.info("[publisher] WeCom robot message sent successfully.")
