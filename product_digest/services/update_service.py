"""Site registry and product update queries used by the admin API"""

from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.models import SiteRegistry, WebsiteUpdate, utcnow

EDITABLE_FIELDS = (
    "title",
    "summary",
    "details",
    "update_type",
    "status",
    "target_date",
    "released_at",
)


def normalize_released_at(value: Optional[datetime]) -> Optional[datetime]:
    """Store timestamps as naive UTC."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _stamp_release(update: WebsiteUpdate) -> None:
    """Released updates always carry a release timestamp; default it to now."""
    if update.status == "released" and update.released_at is None:
        update.released_at = utcnow()


async def list_sites(session: AsyncSession) -> List[SiteRegistry]:
    stmt = select(SiteRegistry).order_by(SiteRegistry.website_name.asc())
    return list((await session.execute(stmt)).scalars().all())


async def get_site(session: AsyncSession, website_key: str) -> Optional[SiteRegistry]:
    return await session.get(SiteRegistry, website_key)


async def create_update(
    session: AsyncSession,
    website_key: str,
    title: str,
    summary: str,
    details: Optional[str] = None,
    update_type: str = "feature",
    status: str = "planned",
    target_date: Optional[date] = None,
    released_at: Optional[datetime] = None,
    created_by: Optional[str] = None,
) -> WebsiteUpdate:
    update = WebsiteUpdate(
        website_key=website_key,
        title=title,
        summary=summary,
        details=details,
        update_type=update_type,
        status=status,
        target_date=target_date,
        released_at=normalize_released_at(released_at),
        created_by=created_by,
    )
    _stamp_release(update)
    session.add(update)
    await session.commit()
    await session.refresh(update)
    return update


async def list_updates(
    session: AsyncSession,
    website_key: Optional[str] = None,
    status: Optional[str] = None,
    limit: int = 50,
) -> List[Dict[str, Any]]:
    """Updates joined with their site, most relevant timestamp first."""
    sort_key = func.coalesce(
        WebsiteUpdate.released_at, WebsiteUpdate.target_date, WebsiteUpdate.created_at
    )
    stmt = select(WebsiteUpdate, SiteRegistry).join(
        SiteRegistry, SiteRegistry.website_key == WebsiteUpdate.website_key
    )
    if website_key:
        stmt = stmt.where(WebsiteUpdate.website_key == website_key)
    if status:
        stmt = stmt.where(WebsiteUpdate.status == status)
    stmt = stmt.order_by(sort_key.desc(), WebsiteUpdate.id.desc()).limit(limit)

    rows = (await session.execute(stmt)).all()
    return [
        {
            **update.to_dict(),
            "website_name": site.website_name,
            "primary_domain": site.primary_domain,
        }
        for update, site in rows
    ]


async def patch_update(
    session: AsyncSession, update_id: int, changes: Dict[str, Any]
) -> Optional[WebsiteUpdate]:
    """Apply the non-null fields of ``changes``; returns None when the update does not exist."""
    update = await session.get(WebsiteUpdate, update_id)
    if update is None:
        return None

    for name in EDITABLE_FIELDS:
        value = changes.get(name)
        if value is None:
            continue
        if name == "released_at":
            value = normalize_released_at(value)
        setattr(update, name, value)

    _stamp_release(update)
    await session.commit()
    await session.refresh(update)
    return update
