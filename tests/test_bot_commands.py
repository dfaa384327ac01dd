"""Telegram operator command tests"""
from datetime import datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from product_digest.domain.digest import DigestRunResult
from product_digest.infrastructure.notifiers import ChannelResult
from product_digest.services.bot_commands import (
    HELP_TEXT,
    NOT_AUTHORIZED_TEXT,
    STATUS_LIMIT,
    BotCommandHandler,
)
from product_digest.services.publish_log import PublishLogRepository
from product_digest.services.publisher import PublishResult

OPERATOR_ID = 1001
STRANGER_ID = 2002


def _update(text, user_id=OPERATOR_ID, chat_id=-500):
    return {
        "update_id": 1,
        "message": {
            "message_id": 10,
            "from": {"id": user_id, "is_bot": False},
            "chat": {"id": chat_id, "type": "group"},
            "text": text,
        },
    }


@pytest.fixture
def digest_service():
    service = MagicMock()
    service.run_daily_digest = AsyncMock()
    return service


@pytest.fixture
def handler(digest_service, session_factory):
    return BotCommandHandler(digest_service, [str(OPERATOR_ID)], session_factory=session_factory)


class TestParseCommand:
    """BotCommandHandler.parse_command"""

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("/publish_now", "publish_now"),
            ("/publish_now@KimiAxeBot", "publish_now"),
            ("/STATUS extra args", "status"),
            ("hello", None),
            ("", None),
            ("/", None),
        ],
    )
    def test_parse(self, text, expected):
        assert BotCommandHandler.parse_command(text) == expected


class TestHandleUpdate:
    """BotCommandHandler.handle_update"""

    @pytest.mark.asyncio
    async def test_help_is_public(self, handler):
        chat_id, reply = await handler.handle_update(_update("/help", user_id=STRANGER_ID))
        assert chat_id == -500
        assert reply == HELP_TEXT

    @pytest.mark.asyncio
    async def test_plain_text_is_ignored(self, handler):
        assert await handler.handle_update(_update("good morning")) is None

    @pytest.mark.asyncio
    async def test_unknown_command(self, handler):
        _, reply = await handler.handle_update(_update("/deploy"))
        assert reply == "Unknown command /deploy. Use /help to see all commands."

    @pytest.mark.asyncio
    async def test_publish_now_requires_operator(self, handler, digest_service):
        _, reply = await handler.handle_update(_update("/publish_now", user_id=STRANGER_ID))

        assert reply == NOT_AUTHORIZED_TEXT
        digest_service.run_daily_digest.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_status_requires_operator(self, handler):
        _, reply = await handler.handle_update(_update("/status", user_id=STRANGER_ID))
        assert reply == NOT_AUTHORIZED_TEXT

    @pytest.mark.asyncio
    async def test_update_without_sender_is_not_operator(self, handler):
        update = _update("/publish_now")
        del update["message"]["from"]
        _, reply = await handler.handle_update(update)
        assert reply == NOT_AUTHORIZED_TEXT


class TestPublishNow:
    """/publish_now"""

    @pytest.mark.asyncio
    async def test_success_summary(self, handler, digest_service):
        digest_service.run_daily_digest.return_value = DigestRunResult(
            skipped=False,
            publish_result=PublishResult(
                ok=True,
                channels=[
                    ChannelResult("telegram", ok=True),
                    ChannelResult("discord", ok=False, error="403"),
                    ChannelResult("twitter", ok=False, skipped=True, reason="not set"),
                ],
            ),
        )

        _, reply = await handler.handle_update(_update("/publish_now"))

        assert reply == "✅ Digest published to 1/3 channels."
        digest_service.run_daily_digest.assert_awaited_once_with(force=True)

    @pytest.mark.asyncio
    async def test_failure_summary(self, handler, digest_service):
        digest_service.run_daily_digest.return_value = DigestRunResult(
            skipped=False,
            publish_result=PublishResult(
                ok=False, channels=[ChannelResult("discord", ok=False, error="timeout")]
            ),
        )

        reply = await handler.handle_command("publish_now", OPERATOR_ID)

        assert reply == "❌ Digest publish failed: discord: timeout"

    @pytest.mark.asyncio
    async def test_nothing_configured(self, handler, digest_service):
        digest_service.run_daily_digest.return_value = DigestRunResult(
            skipped=False,
            publish_result=PublishResult(
                ok=False,
                channels=[ChannelResult("telegram", ok=False, skipped=True, reason="not set")],
            ),
        )

        reply = await handler.handle_command("publish_now", OPERATOR_ID)

        assert reply == "❌ Digest publish failed: no channel configured"

    @pytest.mark.asyncio
    async def test_pipeline_error_is_reported(self, handler, digest_service):
        digest_service.run_daily_digest.side_effect = RuntimeError("database is locked")

        reply = await handler.handle_command("publish_now", str(OPERATOR_ID))

        assert reply == "❌ Digest publish error: database is locked"


class TestStatus:
    """/status"""

    @pytest.mark.asyncio
    async def test_no_attempts(self, handler):
        reply = await handler.status(now=datetime(2024, 6, 1, 12, 0))
        assert reply == "No publish attempts today."

    @pytest.mark.asyncio
    async def test_lists_todays_rows_newest_first(self, handler, session_factory):
        async with session_factory() as session:
            repo = PublishLogRepository(session)
            await repo.append("social-bot", "daily-digest", "m", {}, "failed",
                              published_at=datetime(2024, 6, 1, 8, 0, 5))
            await repo.append("daily-job", "daily-digest", "m", {}, "failed",
                              published_at=datetime(2024, 6, 1, 8, 0, 6))
            await repo.append("daily-job", "daily-digest", "m", {}, "success",
                              published_at=datetime(2024, 5, 31, 8, 0, 6))

        reply = await handler.status(now=datetime(2024, 6, 1, 12, 0))

        assert reply.splitlines() == [
            "Publish log for 2024-06-01:",
            "• daily-job — failed — 08:00:06 UTC",
            "• social-bot — failed — 08:00:05 UTC",
        ]

    @pytest.mark.asyncio
    async def test_lists_at_most_twenty_rows(self, handler, session_factory):
        first = datetime(2024, 6, 1, 9, 0, 0)
        async with session_factory() as session:
            repo = PublishLogRepository(session)
            for i in range(25):
                await repo.append("social-bot", "daily-digest", "m", {}, "success",
                                  published_at=first + timedelta(minutes=i))

        reply = await handler.status(now=datetime(2024, 6, 1, 12, 0))

        lines = reply.splitlines()
        assert STATUS_LIMIT == 20
        assert len(lines) == 1 + STATUS_LIMIT
        assert lines[1] == "• social-bot — success — 09:24:00 UTC"
        assert lines[-1] == "• social-bot — success — 09:05:00 UTC"
