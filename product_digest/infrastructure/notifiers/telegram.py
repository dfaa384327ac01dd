"""Telegram Bot API client and broadcast channel"""
from typing import Any, Dict, Optional

import httpx
from loguru import logger

from ...config_loader import ChannelSettings, load_channel_settings
from .base import ChannelDeliveryError, DigestChannel, split_message

TELEGRAM_API_BASE = "https://api.telegram.org"
TELEGRAM_MESSAGE_LIMIT = 4096


class TelegramAPIError(ChannelDeliveryError):
    """The Bot API answered with ``ok: false`` or a non-JSON body."""


class TelegramClient:
    """Minimal Telegram Bot API client"""

    def __init__(
        self,
        token: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.token = token
        self.timeout = timeout
        self._transport = transport

    def _url(self, method: str) -> str:
        return f"{TELEGRAM_API_BASE}/bot{self.token}/{method}"

    async def call(self, method: str, payload: Dict[str, Any]) -> Any:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            resp = await client.post(self._url(method), json=payload)
        try:
            data = resp.json()
        except ValueError as exc:
            raise TelegramAPIError(
                f"Telegram {method} failed: {resp.status_code} {resp.text[:200]}"
            ) from exc

        if not data.get("ok"):
            raise TelegramAPIError(
                f"Telegram {method} failed: {data.get('error_code', resp.status_code)} "
                f"{data.get('description', '')}".strip()
            )
        return data.get("result")

    async def send_message(self, chat_id: str, text: str) -> None:
        for chunk in split_message(text, TELEGRAM_MESSAGE_LIMIT):
            await self.call(
                "sendMessage",
                {"chat_id": chat_id, "text": chunk, "disable_web_page_preview": True},
            )

    async def set_webhook(self, url: str, secret_token: Optional[str] = None) -> None:
        payload: Dict[str, Any] = {"url": url, "allowed_updates": ["message"]}
        if secret_token:
            payload["secret_token"] = secret_token
        await self.call("setWebhook", payload)
        logger.info(f"[telegram] Webhook registered: {url}")


class TelegramChannel(DigestChannel):
    """Broadcast the digest to the primary Telegram chat."""

    name = "telegram"

    def __init__(
        self,
        settings: Optional[ChannelSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = settings or load_channel_settings()
        self.chat_id = settings.telegram_chat_id
        self.client = TelegramClient(
            settings.telegram_bot_token,
            timeout=settings.http_timeout,
            transport=transport,
        )

    def is_configured(self) -> bool:
        return bool(self.client.token and self.chat_id)

    def skip_reason(self) -> str:
        return "TELEGRAM_BOT_TOKEN or TELEGRAM_CHAT_ID not set"

    async def deliver(self, message: str) -> None:
        await self.client.send_message(self.chat_id, message)
