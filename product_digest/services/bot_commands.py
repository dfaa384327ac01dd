"""Telegram operator commands"""

from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from loguru import logger

from .digest_data import to_date_key
from .digest_service import DigestService
from .publish_log import PublishLogRepository

STATUS_LIMIT = 20

HELP_TEXT = (
    "KimiAxe digest bot commands:\n"
    "/publish_now - publish today's digest to every channel (operators only)\n"
    "/status - list today's publish attempts (operators only)\n"
    "/help - show this message"
)
NOT_AUTHORIZED_TEXT = "⛔ Not authorized."


class BotCommandHandler:
    """Parse a Telegram update and produce the reply text."""

    def __init__(
        self,
        digest_service: DigestService,
        admin_ids: List[str],
        session_factory: Optional[Callable] = None,
    ):
        self.digest_service = digest_service
        self.admin_ids = {str(admin_id) for admin_id in admin_ids}
        self._session_factory = session_factory

    def _sessions(self):
        if self._session_factory is None:
            from ..db.database import AsyncSessionLocal

            return AsyncSessionLocal()
        return self._session_factory()

    def is_operator(self, user_id: Any) -> bool:
        return user_id is not None and str(user_id) in self.admin_ids

    @staticmethod
    def parse_command(text: str) -> Optional[str]:
        """``/publish_now@SomeBot arg`` -> ``publish_now``"""
        if not text or not text.startswith("/"):
            return None
        command = text.split()[0][1:]
        return command.split("@", 1)[0].lower() or None

    async def handle_update(self, update: Dict[str, Any]) -> Optional[tuple]:
        """
        Returns ``(chat_id, reply_text)`` or None when the update carries no command.
        """
        message = update.get("message") or update.get("edited_message") or {}
        command = self.parse_command(message.get("text", ""))
        chat_id = (message.get("chat") or {}).get("id")
        if command is None or chat_id is None:
            return None

        user_id = (message.get("from") or {}).get("id")
        logger.info(f"[telegram] Command /{command} from user {user_id} in chat {chat_id}")
        return chat_id, await self.handle_command(command, user_id)

    async def handle_command(self, command: str, user_id: Any) -> str:
        if command in ("start", "help"):
            return HELP_TEXT

        if command not in ("publish_now", "status"):
            return f"Unknown command /{command}. Use /help to see all commands."

        if not self.is_operator(user_id):
            logger.warning(f"[telegram] Unauthorized /{command} from user {user_id}")
            return NOT_AUTHORIZED_TEXT

        if command == "publish_now":
            return await self.publish_now()
        return await self.status()

    async def publish_now(self) -> str:
        try:
            result = await self.digest_service.run_daily_digest(force=True)
        except Exception as exc:  # noqa: BLE001
            logger.exception(f"[telegram] /publish_now failed: {exc}")
            return f"❌ Digest publish error: {exc}"

        publish_result = result.publish_result
        if publish_result.ok:
            return (
                f"✅ Digest published to {publish_result.delivered_count}/"
                f"{len(publish_result.channels)} channels."
            )
        return f"❌ Digest publish failed: {publish_result.error_summary or 'no channel configured'}"

    async def status(self, now: Optional[datetime] = None) -> str:
        date_key = to_date_key(now or datetime.now(timezone.utc))
        async with self._sessions() as session:
            rows = await PublishLogRepository(session).list_for_day(date_key, limit=STATUS_LIMIT)

        if not rows:
            return "No publish attempts today."

        lines = [f"Publish log for {date_key}:"]
        for row in rows:
            stamp = row.published_at.strftime("%H:%M:%S") if row.published_at else "--:--:--"
            lines.append(f"• {row.channel} — {row.status} — {stamp} UTC")
        return "\n".join(lines)
