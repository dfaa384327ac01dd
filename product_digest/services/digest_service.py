"""Daily digest job: eligibility checks and the publish pipeline"""

from datetime import datetime, timezone
from typing import Callable, Optional

from loguru import logger

from ..config_loader import DigestSchedule, load_digest_schedule
from ..domain.digest import DigestRunResult, SchedulerState, format_digest_message
from .digest_data import get_digest_data, to_date_key
from .publish_log import (
    DAILY_DIGEST_POST_TYPE,
    DAILY_JOB_CHANNEL,
    STATUS_FAILED,
    STATUS_SUCCESS,
    PublishLogRepository,
)
from .publisher import MultiChannelPublisher


def _as_utc(now: datetime) -> datetime:
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc)


def should_run_now(now: datetime, schedule: DigestSchedule) -> bool:
    """True when ``now`` (UTC) is inside the configured run minute."""
    now = _as_utc(now)
    return now.hour == schedule.hour and now.minute == schedule.minute


class DigestService:
    """Daily digest service"""

    def __init__(
        self,
        session_factory: Optional[Callable] = None,
        publisher: Optional[MultiChannelPublisher] = None,
        schedule: Optional[DigestSchedule] = None,
        state: Optional[SchedulerState] = None,
    ):
        """
        Args:
            session_factory: callable returning an AsyncSession context manager
            publisher: channel fan-out, shares ``session_factory`` by default
            schedule: run time; loaded from the environment when omitted
            state: in-memory last-run marker
        """
        self._session_factory = session_factory
        self.publisher = publisher or MultiChannelPublisher(session_factory=session_factory)
        self.schedule = schedule or load_digest_schedule()
        self.state = state or SchedulerState()

    def _sessions(self):
        if self._session_factory is None:
            from ..db.database import AsyncSessionLocal

            return AsyncSessionLocal()
        return self._session_factory()

    async def build_preview(self, now: Optional[datetime] = None) -> dict:
        """Snapshot plus formatted message for ``now``. Publishes nothing, writes nothing."""
        now = _as_utc(now or datetime.now(timezone.utc))
        async with self._sessions() as session:
            digest = await get_digest_data(session, now)
        return {**digest.to_dict(), "message": format_digest_message(digest)}

    async def run_daily_digest(
        self, force: bool = False, now: Optional[datetime] = None
    ) -> DigestRunResult:
        """
        Run the daily digest pipeline.

        A scheduled (non-forced) call only runs inside the configured minute,
        once per UTC day; it claims the day with an insert-if-not-exists row
        before publishing. ``force=True`` skips every check and always appends
        a new ``daily-job`` log row.

        Scheduled delivery is at most once per day. A failed pipeline releases
        its claim, but a process that dies between the claim and the audit
        append leaves the claim behind and the day's scheduled run is lost;
        ``/publish_now`` or ``POST /updates/digest/publish`` recovers it.
        """
        now = _as_utc(now or datetime.now(timezone.utc))
        date_key = to_date_key(now)

        if not force:
            if not should_run_now(now, self.schedule):
                return DigestRunResult(skipped=True, reason="outside schedule")
            if self.state.last_run_date == date_key:
                return DigestRunResult(skipped=True, reason="already ran in memory")

        claimed = False
        if not force:
            async with self._sessions() as session:
                repo = PublishLogRepository(session)
                if await repo.exists_for_day(DAILY_JOB_CHANNEL, DAILY_DIGEST_POST_TYPE, date_key):
                    self.state.last_run_date = date_key
                    return DigestRunResult(skipped=True, reason="already ran in db")
                if not await repo.claim_run(DAILY_DIGEST_POST_TYPE, date_key):
                    self.state.last_run_date = date_key
                    return DigestRunResult(skipped=True, reason="already claimed")
            claimed = True

        logger.info(f"[daily-digest] Running digest for {date_key} (force={force})")
        published_at = now.replace(tzinfo=None)
        try:
            async with self._sessions() as session:
                digest = await get_digest_data(session, now)
            message = format_digest_message(digest)
            publish_result = await self.publisher.publish_update_digest(
                message, published_at=published_at
            )
            async with self._sessions() as session:
                await PublishLogRepository(session).append(
                    channel=DAILY_JOB_CHANNEL,
                    post_type=DAILY_DIGEST_POST_TYPE,
                    message_body=message,
                    payload=publish_result.to_dict(),
                    status=STATUS_SUCCESS if publish_result.ok else STATUS_FAILED,
                    error_message=publish_result.error_summary,
                    published_at=published_at,
                )
        except Exception:
            if claimed:
                await self._release_claim(date_key)
            raise

        self.state.last_run_date = date_key
        logger.info(
            f"[daily-digest] Digest for {date_key} finished: "
            f"{'success' if publish_result.ok else 'failed'}"
        )
        return DigestRunResult(
            skipped=False,
            digest=digest,
            message=message,
            publish_result=publish_result,
        )

    async def _release_claim(self, date_key: str) -> None:
        try:
            async with self._sessions() as session:
                await PublishLogRepository(session).release_claim(DAILY_DIGEST_POST_TYPE, date_key)
        except Exception as exc:  # noqa: BLE001
            logger.error(f"[daily-digest] Failed to release claim for {date_key}: {exc}")

    async def tick(self) -> None:
        """Scheduler job: one eligibility check, errors are logged and the next tick retries."""
        try:
            result = await self.run_daily_digest(force=False)
        except Exception as exc:  # noqa: BLE001
            logger.exception(f"[daily-digest] Scheduled run failed: {exc}")
            return

        if result.skipped:
            logger.debug(f"[daily-digest] Tick skipped: {result.reason}")


_digest_service: Optional[DigestService] = None


def get_digest_service() -> DigestService:
    """Process-wide service shared by the scheduler, HTTP routes and bot commands."""
    global _digest_service
    if _digest_service is None:
        _digest_service = DigestService()
    return _digest_service
