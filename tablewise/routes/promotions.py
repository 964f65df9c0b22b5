"""
Promotion Routes for Tablewise
==============================

Public endpoints the customer menu uses to run its upsell features.

Endpoints:
----------
- GET /promotions/{restaurant_id}: Popup schedule, dessert prompt, gift,
  mystery box and category discounts in one payload
- POST /promotions/{restaurant_id}/mystery-box/reveal: Randomly pick the
  item a mystery box contains
- GET /orders/{order_id}/dessert-prompt: Whether a placed order is due for
  the dessert nudge

Mystery Box:
------------
The reveal is cosmetic: the customer pays the mystery box price whatever
comes out. The pick is drawn from the configured pool, else items worth at
least the box price, else any available item.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from ..config import get_rate_limit_public
from ..db import get_db
from ..rate_limit import limiter
from ..schemas.marketing import (
    DessertConfigOut,
    GiftConfigOut,
    MysteryBoxConfigOut,
    MysteryBoxRevealOut,
    PopupOut,
    PromotionConfigOut,
)
from ..schemas.orders import DessertPromptOut
from ..services import promotions
from ..services.helpers import get_restaurant_or_404, serialize_menu_item
from ..services.order import get_order


logger = logging.getLogger(__name__)

promotions_router = APIRouter(prefix="/promotions", tags=["Promotions"])
dessert_router = APIRouter(prefix="/orders", tags=["Promotions"])


@promotions_router.get("/{restaurant_id}", response_model=PromotionConfigOut)
def get_promotions(restaurant_id: str, db: Session = Depends(get_db)) -> PromotionConfigOut:
    restaurant = get_restaurant_or_404(db, restaurant_id)

    popups = [
        PopupOut(
            slot=p.slot,
            item=serialize_menu_item(p.item),
            text=p.text,
            delay_seconds=p.delay_seconds,
        )
        for p in promotions.popup_schedule(db, restaurant)
    ]

    gift = None
    gift_item = promotions.get_gift_item(db, restaurant)
    if restaurant.gift_threshold and gift_item is not None and gift_item.is_available:
        gift = GiftConfigOut(threshold=restaurant.gift_threshold, item=serialize_menu_item(gift_item))

    minutes = restaurant.dessert_prompt_minutes
    dessert = DessertConfigOut(
        enabled=bool(restaurant.dessert_prompt_enabled),
        minutes=minutes,
        items=[serialize_menu_item(m) for m in promotions.dessert_items(db, restaurant)],
    )

    return PromotionConfigOut(
        popups=popups,
        dessert_prompt=dessert,
        gift=gift,
        mystery_box=MysteryBoxConfigOut(
            enabled=bool(restaurant.mystery_box_enabled),
            price=restaurant.mystery_box_price,
        ),
        category_discounts={
            c.id: c.fake_discount_pct
            for c in restaurant.categories
            if c.fake_discount_pct and c.fake_discount_pct > 0
        },
    )


@promotions_router.post("/{restaurant_id}/mystery-box/reveal", response_model=MysteryBoxRevealOut)
@limiter.limit(get_rate_limit_public)
def reveal_mystery_box(
    request: Request,
    restaurant_id: str,
    db: Session = Depends(get_db),
) -> MysteryBoxRevealOut:
    restaurant = get_restaurant_or_404(db, restaurant_id)
    if not restaurant.mystery_box_enabled:
        raise HTTPException(status_code=403, detail="Mystery box is not enabled")

    item = promotions.pick_mystery_box_item(db, restaurant)
    if item is None:
        raise HTTPException(status_code=404, detail="No items available for the mystery box")

    logger.info("Mystery box revealed %s for restaurant %s", item.id, restaurant.id)
    return MysteryBoxRevealOut(price=restaurant.mystery_box_price, item=serialize_menu_item(item))


@dessert_router.get("/{order_id}/dessert-prompt", response_model=DessertPromptOut)
def get_dessert_prompt(order_id: str, db: Session = Depends(get_db)) -> DessertPromptOut:
    order = get_order(db, order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    restaurant = get_restaurant_or_404(db, order.restaurant_id)

    state = promotions.dessert_prompt(restaurant, order.created_at)
    items = []
    if state["enabled"]:
        items = [serialize_menu_item(m) for m in promotions.dessert_items(db, restaurant)]
    return DessertPromptOut(**state, items=items)
