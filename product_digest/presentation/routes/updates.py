from datetime import date, datetime
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query
from loguru import logger
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from ...config_loader import load_admin_code
from ...db.database import get_db
from ...services import update_service
from ...services.digest_service import DigestService, get_digest_service

router = APIRouter()


def _require_admin(x_admin_code: Optional[str] = Header(default=None)) -> Optional[str]:
    """
    Admin check for write endpoints.

    - Clients send the code in the X-Admin-Code header
    - The expected code comes from DIGEST_ADMIN_CODE
    - When DIGEST_ADMIN_CODE is not set, the check is disabled (local development)
    """
    admin_code = load_admin_code()
    if not admin_code:
        return None

    if x_admin_code != admin_code:
        raise HTTPException(status_code=403, detail="Not authorized")
    return "admin"


class CreateUpdateRequest(BaseModel):
    website_key: Optional[str] = None
    title: Optional[str] = None
    summary: Optional[str] = None
    details: Optional[str] = None
    update_type: str = "feature"
    status: str = "planned"
    target_date: Optional[date] = None
    released_at: Optional[datetime] = None


class PatchUpdateRequest(BaseModel):
    title: Optional[str] = None
    summary: Optional[str] = None
    details: Optional[str] = None
    update_type: Optional[str] = None
    status: Optional[str] = None
    target_date: Optional[date] = None
    released_at: Optional[datetime] = None


@router.get("/sites")
async def list_sites(db: AsyncSession = Depends(get_db)):
    try:
        sites = await update_service.list_sites(db)
    except Exception as e:  # noqa: BLE001
        logger.error(f"Sites list error: {e}")
        raise HTTPException(status_code=500, detail="Internal server error.")
    return {"sites": [site.to_dict() for site in sites]}


@router.get("/digest")
async def preview_digest(service: DigestService = Depends(get_digest_service)):
    """
    Digest snapshot and formatted message for now. Nothing is published or logged.
    """
    try:
        return await service.build_preview()
    except Exception as e:  # noqa: BLE001
        logger.error(f"Digest fetch error: {e}")
        raise HTTPException(status_code=500, detail="Internal server error.")


@router.post("/digest/publish")
async def publish_digest(
    admin: Optional[str] = Depends(_require_admin),
    service: DigestService = Depends(get_digest_service),
):
    """
    Publish today's digest now, bypassing the schedule and duplicate checks.
    """
    try:
        logger.info("[manual-publish] Manual digest publish requested")
        result = await service.run_daily_digest(force=True)
    except Exception as e:  # noqa: BLE001
        logger.exception(f"[manual-publish] Manual digest publish failed: {e}")
        raise HTTPException(status_code=500, detail="Internal server error.")
    return result.to_dict()


@router.post("/updates", status_code=201)
async def create_update(
    request: CreateUpdateRequest,
    admin: Optional[str] = Depends(_require_admin),
    db: AsyncSession = Depends(get_db),
):
    if not request.website_key or not request.title or not request.summary:
        raise HTTPException(
            status_code=400, detail="website_key, title and summary are required."
        )

    try:
        site = await update_service.get_site(db, request.website_key)
        if site is None:
            raise HTTPException(status_code=404, detail="Website key not found in registry.")

        update = await update_service.create_update(
            db,
            website_key=request.website_key,
            title=request.title,
            summary=request.summary,
            details=request.details,
            update_type=request.update_type,
            status=request.status,
            target_date=request.target_date,
            released_at=request.released_at,
            created_by=admin,
        )
    except HTTPException:
        raise
    except Exception as e:  # noqa: BLE001
        logger.error(f"Create update error: {e}")
        raise HTTPException(status_code=500, detail="Internal server error.")
    return {"update": update.to_dict()}


@router.get("/updates")
async def list_updates(
    website_key: Optional[str] = None,
    status: Optional[str] = None,
    limit: int = Query(default=50, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
):
    try:
        updates = await update_service.list_updates(
            db, website_key=website_key, status=status, limit=limit
        )
    except Exception as e:  # noqa: BLE001
        logger.error(f"List updates error: {e}")
        raise HTTPException(status_code=500, detail="Internal server error.")
    return {"updates": updates}


@router.patch("/updates/{update_id}")
async def patch_update(
    update_id: int,
    request: PatchUpdateRequest,
    admin: Optional[str] = Depends(_require_admin),
    db: AsyncSession = Depends(get_db),
):
    try:
        update = await update_service.patch_update(
            db, update_id, request.model_dump(exclude_none=True)
        )
    except Exception as e:  # noqa: BLE001
        logger.error(f"Update patch error: {e}")
        raise HTTPException(status_code=500, detail="Internal server error.")

    if update is None:
        raise HTTPException(status_code=404, detail="Update not found.")
    return {"update": update.to_dict()}
