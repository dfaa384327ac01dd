from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Header, HTTPException
from loguru import logger

from ...config_loader import load_admin_ids, load_channel_settings
from ...infrastructure.notifiers import TelegramClient
from ...services.bot_commands import BotCommandHandler
from ...services.digest_service import get_digest_service

router = APIRouter()


def get_command_handler() -> BotCommandHandler:
    return BotCommandHandler(get_digest_service(), load_admin_ids())


def get_telegram_client() -> TelegramClient:
    settings = load_channel_settings()
    return TelegramClient(settings.telegram_bot_token, timeout=settings.http_timeout)


@router.post("/webhook")
async def telegram_webhook(
    update: Dict[str, Any] = Body(...),
    x_telegram_bot_api_secret_token: Optional[str] = Header(default=None),
    handler: BotCommandHandler = Depends(get_command_handler),
    client: TelegramClient = Depends(get_telegram_client),
):
    """
    Telegram update intake.

    Telegram sends the secret configured via setWebhook in the
    X-Telegram-Bot-Api-Secret-Token header; updates without it are rejected
    when TELEGRAM_WEBHOOK_SECRET is set.
    """
    secret = load_channel_settings().telegram_webhook_secret
    if secret and x_telegram_bot_api_secret_token != secret:
        raise HTTPException(status_code=403, detail="Not authorized")

    reply = await handler.handle_update(update)
    if reply is None:
        return {"ok": True}

    chat_id, text = reply
    if not client.token:
        logger.warning("[telegram] TELEGRAM_BOT_TOKEN not set, reply dropped")
        return {"ok": True}

    try:
        await client.send_message(chat_id, text)
    except Exception as e:  # noqa: BLE001
        logger.error(f"[telegram] Failed to send reply to chat {chat_id}: {e}")
    # Telegram redelivers updates that are not answered with 200.
    return {"ok": True}
