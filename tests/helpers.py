"""Test helpers: database shortcuts and a scripted channel"""
from sqlalchemy import select

from product_digest.db.models import PublishLog, WebsiteUpdate
from product_digest.infrastructure.notifiers import ChannelDeliveryError, DigestChannel


async def add_update(factory, **fields) -> int:
    defaults = {"summary": "", "update_type": "feature"}
    defaults.update(fields)
    async with factory() as session:
        update = WebsiteUpdate(**defaults)
        session.add(update)
        await session.commit()
        return update.id


async def fetch_logs(factory, channel=None):
    async with factory() as session:
        stmt = select(PublishLog).order_by(PublishLog.id)
        if channel:
            stmt = stmt.where(PublishLog.channel == channel)
        return list((await session.execute(stmt)).scalars().all())


class FakeChannel(DigestChannel):
    """Channel with scripted behaviour: 'ok', 'fail', 'raise' or 'unconfigured'"""

    def __init__(self, name: str, behaviour: str = "ok", error: str = "boom"):
        self.name = name
        self.behaviour = behaviour
        self.error = error
        self.sent = []

    def is_configured(self) -> bool:
        return self.behaviour != "unconfigured"

    def skip_reason(self) -> str:
        return f"{self.name.upper()}_URL not set"

    async def deliver(self, message: str) -> None:
        self.sent.append(message)
        if self.behaviour == "fail":
            raise ChannelDeliveryError(self.error)
        if self.behaviour == "raise":
            raise RuntimeError(self.error)
