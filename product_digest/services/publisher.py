"""Multi-channel digest publisher"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from loguru import logger

from ..infrastructure.notifiers import ChannelResult, DigestChannel, default_channels
from .publish_log import (
    DAILY_DIGEST_POST_TYPE,
    SOCIAL_BOT_CHANNEL,
    STATUS_FAILED,
    STATUS_SUCCESS,
    PublishLogRepository,
)


@dataclass
class PublishResult:
    ok: bool
    channels: List[ChannelResult] = field(default_factory=list)

    @property
    def error_summary(self) -> Optional[str]:
        failures = [f"{c.channel}: {c.error}" for c in self.channels if c.error]
        return " | ".join(failures) or None

    @property
    def delivered_count(self) -> int:
        return sum(1 for c in self.channels if c.ok)

    def to_dict(self) -> Dict[str, Any]:
        return {"ok": self.ok, "channels": [c.to_dict() for c in self.channels]}


class MultiChannelPublisher:
    """Fan a digest message out to every channel and log the attempt once."""

    def __init__(
        self,
        channels: Optional[List[DigestChannel]] = None,
        session_factory: Optional[Callable] = None,
    ):
        self._channels = channels
        self._session_factory = session_factory

    @property
    def channels(self) -> List[DigestChannel]:
        # Channel settings are re-read from .env on every publish.
        if self._channels is not None:
            return self._channels
        return default_channels()

    def _sessions(self):
        if self._session_factory is None:
            from ..db.database import AsyncSessionLocal

            return AsyncSessionLocal()
        return self._session_factory()

    async def publish_update_digest(
        self, message: str, published_at: Optional[datetime] = None
    ) -> PublishResult:
        """
        Deliver ``message`` to all channels and append one ``social-bot`` log row.

        Channels run concurrently and independently; the aggregate is ok when
        at least one channel delivered. ``published_at`` (naive UTC) stamps
        the log row and defaults to now.
        """
        channels = self.channels
        logger.info(f"[publisher] Publishing digest to {len(channels)} channel(s)")

        results = list(await asyncio.gather(*(channel.send(message) for channel in channels)))
        result = PublishResult(ok=any(r.ok for r in results), channels=results)

        async with self._sessions() as session:
            await PublishLogRepository(session).append(
                channel=SOCIAL_BOT_CHANNEL,
                post_type=DAILY_DIGEST_POST_TYPE,
                message_body=message,
                payload={"channels": [r.to_dict() for r in results]},
                status=STATUS_SUCCESS if result.ok else STATUS_FAILED,
                error_message=result.error_summary,
                published_at=published_at,
            )

        if result.ok:
            logger.info(
                f"[publisher] Digest delivered to {result.delivered_count}/{len(results)} channel(s)"
            )
        else:
            logger.warning(f"[publisher] Digest not delivered to any channel: {result.error_summary}")
        return result
