"""Digest data provider: released-today and upcoming updates"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Union

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.models import SiteRegistry, WebsiteUpdate
from ..domain.digest import DigestItem, DigestSnapshot

UPCOMING_WINDOW_DAYS = 7


def _to_utc_date(moment: Union[date, datetime, None]) -> date:
    if moment is None:
        return datetime.now(timezone.utc).date()
    if isinstance(moment, datetime):
        if moment.tzinfo is not None:
            moment = moment.astimezone(timezone.utc)
        return moment.date()
    return moment


def to_date_key(moment: Union[date, datetime, None] = None) -> str:
    """Normalize a moment to its UTC calendar day, ``YYYY-MM-DD``. Naive datetimes are UTC."""
    return _to_utc_date(moment).isoformat()


def _to_item(update: WebsiteUpdate, site: SiteRegistry) -> DigestItem:
    return DigestItem(
        id=update.id,
        website_key=update.website_key,
        website_name=site.website_name,
        primary_domain=site.primary_domain,
        title=update.title,
        summary=update.summary,
        update_type=update.update_type or "feature",
        released_at=update.released_at,
        target_date=update.target_date,
    )


async def get_digest_data(
    session: AsyncSession,
    reference_date: Optional[Union[date, datetime]] = None,
) -> DigestSnapshot:
    """
    Build the digest snapshot for the UTC day of ``reference_date``.

    - released_today: released updates whose released_at falls on that day, newest first
    - upcoming: planned updates with a target date in [day, day + 7], soonest first

    Updates whose site key is not in the registry are left out.
    """
    day = _to_utc_date(reference_date)
    day_start = datetime.combine(day, time.min)
    next_day_start = day_start + timedelta(days=1)

    released_stmt = (
        select(WebsiteUpdate, SiteRegistry)
        .join(SiteRegistry, SiteRegistry.website_key == WebsiteUpdate.website_key)
        .where(
            WebsiteUpdate.status == "released",
            WebsiteUpdate.released_at >= day_start,
            WebsiteUpdate.released_at < next_day_start,
        )
        .order_by(WebsiteUpdate.released_at.desc(), WebsiteUpdate.id.desc())
    )
    upcoming_stmt = (
        select(WebsiteUpdate, SiteRegistry)
        .join(SiteRegistry, SiteRegistry.website_key == WebsiteUpdate.website_key)
        .where(
            WebsiteUpdate.status == "planned",
            WebsiteUpdate.target_date.is_not(None),
            WebsiteUpdate.target_date >= day,
            WebsiteUpdate.target_date <= day + timedelta(days=UPCOMING_WINDOW_DAYS),
        )
        .order_by(WebsiteUpdate.target_date.asc(), WebsiteUpdate.id.asc())
    )

    released_rows = (await session.execute(released_stmt)).all()
    upcoming_rows = (await session.execute(upcoming_stmt)).all()

    return DigestSnapshot(
        date_key=day.isoformat(),
        released_today=tuple(_to_item(update, site) for update, site in released_rows),
        upcoming=tuple(_to_item(update, site) for update, site in upcoming_rows),
    )
