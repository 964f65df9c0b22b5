"""
AI Upsell Routes for Tablewise
==============================

Endpoints:
----------
- POST /ai-upsell/recommend: Cross-sell suggestions for a cart (no auth)
- POST /ai-upsell/sync-menu: Regenerate cross-sell links with the LLM (background)
- POST /ai-upsell/pick-flash-items: Let the LLM pick the two popup items

recommend never calls the LLM; it reads the links sync-menu stored on each
menu item, so it is fast enough to run on every cart change.

Sync runs after the response is sent (FastAPI BackgroundTasks) with its own
database session; a large menu can take several LLM calls.
"""

import logging
from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from .. import db as db_module
from .. import llm_client
from ..auth import AdminPrincipal, ensure_restaurant_access, get_current_principal
from ..config import get_rate_limit_ai, get_rate_limit_public
from ..db import get_db
from ..rate_limit import limiter
from ..schemas.ai import (
    MessageOut,
    PickFlashItemsOut,
    PickFlashItemsRequest,
    RecommendRequest,
    SyncMenuRequest,
)
from ..schemas.menu import MenuItemOut
from ..services import upsell
from ..services.helpers import get_restaurant_or_404, serialize_menu_item


logger = logging.getLogger(__name__)

ai_upsell_router = APIRouter(prefix="/ai-upsell", tags=["AI Upsell"])


@ai_upsell_router.post("/recommend", response_model=List[MenuItemOut])
@limiter.limit(get_rate_limit_public)
def recommend(
    request: Request,
    payload: RecommendRequest,
    db: Session = Depends(get_db),
) -> List[MenuItemOut]:
    if not payload.restaurant_id or not payload.cart_items:
        raise HTTPException(status_code=400, detail="Missing required fields")
    restaurant = get_restaurant_or_404(db, payload.restaurant_id)
    if not restaurant.ai_upsell_enabled:
        raise HTTPException(status_code=403, detail="AI Upsell is disabled")

    menu = upsell.available_menu(db, restaurant.id)
    return [serialize_menu_item(m) for m in upsell.recommend_for_cart(menu, payload.cart_items)]


@ai_upsell_router.post("/sync-menu", response_model=MessageOut)
@limiter.limit(get_rate_limit_ai)
def sync_menu(
    request: Request,
    payload: SyncMenuRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    principal: AdminPrincipal = Depends(get_current_principal),
) -> MessageOut:
    if not payload.restaurant_id:
        raise HTTPException(status_code=400, detail="Missing restaurant_id")
    ensure_restaurant_access(principal, payload.restaurant_id)
    restaurant = get_restaurant_or_404(db, payload.restaurant_id)

    items = upsell.available_menu(db, restaurant.id)
    if not items:
        raise HTTPException(status_code=404, detail="No available menu items to sync")

    try:
        llm_client.resolve_provider(payload.api_key, payload.provider)
    except llm_client.LLMError as e:
        raise HTTPException(status_code=500, detail=str(e))

    background_tasks.add_task(
        upsell.run_menu_sync_job,
        db_module.SessionLocal,
        restaurant.id,
        payload.api_key,
        payload.provider,
    )
    logger.info("Queued AI menu sync for restaurant %s (%d items)", restaurant.id, len(items))
    return MessageOut(
        message=f"AI sync started for {len(items)} items. Recommendations will update in the background."
    )


@ai_upsell_router.post("/pick-flash-items", response_model=PickFlashItemsOut)
@limiter.limit(get_rate_limit_ai)
def pick_flash_items(
    request: Request,
    payload: PickFlashItemsRequest,
    db: Session = Depends(get_db),
    principal: AdminPrincipal = Depends(get_current_principal),
) -> PickFlashItemsOut:
    if not payload.restaurant_id:
        raise HTTPException(status_code=400, detail="Missing restaurant_id")
    ensure_restaurant_access(principal, payload.restaurant_id)
    restaurant = get_restaurant_or_404(db, payload.restaurant_id)

    try:
        first, second = upsell.pick_flash_items(
            db, restaurant, api_key=payload.api_key, provider=payload.provider
        )
    except (llm_client.LLMError, upsell.UpsellError) as e:
        raise HTTPException(status_code=500, detail=str(e))

    return PickFlashItemsOut(success=True, popup_item1_id=first, popup_item2_id=second)
