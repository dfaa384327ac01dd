"""Append-only publish audit log"""

from datetime import date, datetime, time, timedelta
from typing import Any, List, Optional

from loguru import logger
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.models import DigestRunClaim, PublishLog, utcnow

DAILY_JOB_CHANNEL = "daily-job"
SOCIAL_BOT_CHANNEL = "social-bot"
DAILY_DIGEST_POST_TYPE = "daily-digest"

STATUS_SUCCESS = "success"
STATUS_FAILED = "failed"


def _day_bounds(date_key: str) -> tuple:
    start = datetime.combine(date.fromisoformat(date_key), time.min)
    return start, start + timedelta(days=1)


class PublishLogRepository:
    """Publish log rows are only ever inserted, never updated or deleted."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def append(
        self,
        channel: str,
        post_type: str,
        message_body: str,
        payload: Any,
        status: str,
        error_message: Optional[str] = None,
        published_at: Optional[datetime] = None,
    ) -> PublishLog:
        """``published_at`` is naive UTC and defaults to now."""
        entry = PublishLog(
            channel=channel,
            post_type=post_type,
            message_body=message_body,
            payload=payload,
            status=status,
            error_message=error_message,
            published_at=published_at or utcnow(),
        )
        self.session.add(entry)
        await self.session.commit()
        logger.info(f"[publish-log] {channel}/{post_type} -> {status}")
        return entry

    async def exists_for_day(self, channel: str, post_type: str, date_key: str) -> bool:
        start, end = _day_bounds(date_key)
        stmt = (
            select(PublishLog.id)
            .where(
                PublishLog.channel == channel,
                PublishLog.post_type == post_type,
                PublishLog.published_at >= start,
                PublishLog.published_at < end,
            )
            .limit(1)
        )
        return (await self.session.execute(stmt)).first() is not None

    async def list_for_day(self, date_key: str, limit: int = 20) -> List[PublishLog]:
        start, end = _day_bounds(date_key)
        stmt = (
            select(PublishLog)
            .where(PublishLog.published_at >= start, PublishLog.published_at < end)
            .order_by(PublishLog.published_at.desc(), PublishLog.id.desc())
            .limit(limit)
        )
        return list((await self.session.execute(stmt)).scalars().all())

    async def claim_run(self, job: str, date_key: str) -> bool:
        """
        Atomically claim ``job`` for ``date_key``.

        Returns False when another run already holds the claim.
        """
        self.session.add(DigestRunClaim(job=job, date_key=date_key))
        try:
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            logger.info(f"[publish-log] {job} already claimed for {date_key}")
            return False
        return True

    async def release_claim(self, job: str, date_key: str) -> None:
        await self.session.execute(
            delete(DigestRunClaim).where(
                DigestRunClaim.job == job, DigestRunClaim.date_key == date_key
            )
        )
        await self.session.commit()
