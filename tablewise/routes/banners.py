"""
Banner Routes for Tablewise
===========================

Promotional banners shown in the carousel at the top of the customer menu.

Endpoints:
----------
- GET /banners/{restaurant_id}: List banners, newest first (no auth)
- POST /banners: Create a banner
- PUT /banners/{id}: Update a banner
- DELETE /banners/{id}: Delete a banner

The customer menu passes ?active_only=true; the dashboard lists everything
so hidden banners can be switched back on.
"""

import logging
from typing import Dict, List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..auth import AdminPrincipal, ensure_restaurant_access, get_current_principal
from ..db import get_db
from ..models import Banner
from ..schemas.engagement import BannerCreate, BannerOut, BannerUpdate
from ..services.helpers import get_owned_or_404, get_restaurant_or_404


logger = logging.getLogger(__name__)

banners_router = APIRouter(prefix="/banners", tags=["Banners"])


@banners_router.get("/{restaurant_id}", response_model=List[BannerOut])
def list_banners(
    restaurant_id: str,
    active_only: bool = Query(False, description="Only return active banners"),
    db: Session = Depends(get_db),
) -> List[BannerOut]:
    query = db.query(Banner).filter(Banner.restaurant_id == restaurant_id)
    if active_only:
        query = query.filter(Banner.is_active.is_(True))
    return [BannerOut.model_validate(b) for b in query.order_by(Banner.created_at.desc()).all()]


@banners_router.post("", response_model=BannerOut, status_code=201)
def create_banner(
    payload: BannerCreate,
    db: Session = Depends(get_db),
    principal: AdminPrincipal = Depends(get_current_principal),
) -> BannerOut:
    if not payload.restaurant_id or not payload.image_url:
        raise HTTPException(status_code=400, detail="Missing required fields (restaurant_id, image_url)")
    ensure_restaurant_access(principal, payload.restaurant_id)
    get_restaurant_or_404(db, payload.restaurant_id)

    banner = Banner(
        restaurant_id=payload.restaurant_id,
        image_url=payload.image_url,
        title=payload.title,
        is_active=payload.is_active if payload.is_active is not None else True,
    )
    db.add(banner)
    db.commit()
    db.refresh(banner)
    logger.info("Created banner %s (restaurant=%s)", banner.id, banner.restaurant_id)
    return BannerOut.model_validate(banner)


@banners_router.put("/{banner_id}", response_model=BannerOut)
def update_banner(
    banner_id: str,
    payload: BannerUpdate,
    db: Session = Depends(get_db),
    principal: AdminPrincipal = Depends(get_current_principal),
) -> BannerOut:
    banner = get_owned_or_404(db, Banner, banner_id, principal, "Banner")

    if payload.image_url is not None:
        banner.image_url = payload.image_url
    if payload.title is not None:
        banner.title = payload.title
    if payload.is_active is not None:
        banner.is_active = payload.is_active

    db.commit()
    db.refresh(banner)
    logger.info("Updated banner %s", banner.id)
    return BannerOut.model_validate(banner)


@banners_router.delete("/{banner_id}")
def delete_banner(
    banner_id: str,
    db: Session = Depends(get_db),
    principal: AdminPrincipal = Depends(get_current_principal),
) -> Dict[str, bool]:
    banner = get_owned_or_404(db, Banner, banner_id, principal, "Banner")
    db.delete(banner)
    db.commit()
    logger.info("Deleted banner %s", banner_id)
    return {"success": True}
