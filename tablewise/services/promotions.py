"""
Promotion logic for average-order-value features.

Covers the pieces of the customer menu that nudge spend upward:

- Fake discounts: a category-level "was" price shown next to the real price.
- Gift threshold: a free item added once the subtotal reaches a threshold.
- Mystery box: a fixed-price add-on that reveals a random menu item.
- Popups: up to two timed item offers while the customer browses.
- Dessert prompt: a reminder some minutes after an order is placed.

These functions only read restaurant settings and menu rows; pricing.py
decides how the results land on a cart.
"""

import logging
import math
import random
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from .. import config
from ..models import Category, MenuItem, Restaurant

logger = logging.getLogger(__name__)

MYSTERY_BOX_ID = "mystery_box"
MYSTERY_BOX_NAME = "Mystery Box"
MYSTERY_BOX_DESCRIPTION = "Surprise Add-on"
SPECIALS_CATEGORY_NAME = "Specials"
SPECIALS_CATEGORY_ICON = "fas fa-star"

REWARD_SOURCE = "REWARD"
MYSTERY_BOX_SOURCE = "MYSTERY_BOX"


# =============================================================================
# Fake Discounts
# =============================================================================

def fake_original_price(price: Optional[float], pct: Optional[float]) -> Optional[float]:
    """
    Inflated "was" price such that ``price`` looks like a ``pct`` % discount.

    Rounded half-up to a whole currency unit. Returns None when there is no
    discount to show.
    """
    if price is None or not pct or pct <= 0 or pct >= 100:
        return None
    return float(math.floor(price / (1 - pct / 100) + 0.5))


# =============================================================================
# Gift Threshold
# =============================================================================

def gift_eligible(restaurant: Restaurant, subtotal: float) -> bool:
    """True when a gift is configured and the subtotal has reached it."""
    if not restaurant.gift_threshold or not restaurant.gift_item_id:
        return False
    return subtotal >= restaurant.gift_threshold


def get_gift_item(db: Session, restaurant: Restaurant) -> Optional[MenuItem]:
    if not restaurant.gift_item_id:
        return None
    return (
        db.query(MenuItem)
        .filter(
            MenuItem.id == restaurant.gift_item_id,
            MenuItem.restaurant_id == restaurant.id,
        )
        .first()
    )


# =============================================================================
# Mystery Box
# =============================================================================

def _available_items(db: Session, restaurant: Restaurant):
    return db.query(MenuItem).filter(
        MenuItem.restaurant_id == restaurant.id,
        MenuItem.is_available.is_(True),
        MenuItem.name != MYSTERY_BOX_NAME,
    )


def mystery_box_pool(db: Session, restaurant: Restaurant) -> List[MenuItem]:
    """
    Candidate items for a mystery box reveal.

    Preference order:
    1. Admin-configured mystery_box_item_ids that are still available
    2. Available items priced at or above the mystery box price
    3. Any available item
    """
    configured_ids = list(restaurant.mystery_box_item_ids or [])
    if configured_ids:
        pool = _available_items(db, restaurant).filter(MenuItem.id.in_(configured_ids)).all()
        if pool:
            return pool

    pool = (
        _available_items(db, restaurant)
        .filter(MenuItem.full_price >= restaurant.mystery_box_price)
        .all()
    )
    if pool:
        return pool

    return _available_items(db, restaurant).all()


def pick_mystery_box_item(
    db: Session,
    restaurant: Restaurant,
    rng: random.Random = None,
) -> Optional[MenuItem]:
    """Randomly pick the item a mystery box reveals, or None if nothing qualifies."""
    pool = mystery_box_pool(db, restaurant)
    if not pool:
        return None
    chooser = rng or random
    return chooser.choice(pool)


def get_or_create_mystery_box_item(
    db: Session,
    restaurant: Restaurant,
    price: Optional[float] = None,
) -> MenuItem:
    """
    Return the restaurant's "Mystery Box" menu row, creating it on first use.

    Order lines need a real menu_item_id, so the mystery box is stored as an
    ordinary item in the restaurant's first category (a "Specials" category
    is created if the restaurant has none). The caller commits.
    """
    item = (
        db.query(MenuItem)
        .filter(
            MenuItem.restaurant_id == restaurant.id,
            MenuItem.name == MYSTERY_BOX_NAME,
        )
        .first()
    )
    if item:
        return item

    category = (
        db.query(Category)
        .filter(Category.restaurant_id == restaurant.id)
        .order_by(Category.position.asc())
        .first()
    )
    if not category:
        category = Category(
            restaurant_id=restaurant.id,
            name=SPECIALS_CATEGORY_NAME,
            icon=SPECIALS_CATEGORY_ICON,
        )
        db.add(category)
        db.flush()
        logger.info("Created %s category for restaurant %s", SPECIALS_CATEGORY_NAME, restaurant.id)

    item = MenuItem(
        restaurant_id=restaurant.id,
        category_id=category.id,
        name=MYSTERY_BOX_NAME,
        description=MYSTERY_BOX_DESCRIPTION,
        full_price=price or config.DEFAULT_MYSTERY_BOX_PRICE,
        is_available=True,
        is_veg=True,
        recommended_item_ids=[],
    )
    db.add(item)
    db.flush()
    logger.info("Created mystery box item for restaurant %s", restaurant.id)
    return item


# =============================================================================
# Popups
# =============================================================================

@dataclass
class ScheduledPopup:
    slot: int
    item: MenuItem
    text: Optional[str]
    delay_seconds: int


def popup_schedule(db: Session, restaurant: Restaurant) -> List[ScheduledPopup]:
    """
    Timed popups for the customer menu.

    Popup 1 appears POPUP_FIRST_DELAY_SECONDS after the menu opens. Popup 2
    appears POPUP_SECOND_DELAY_SECONDS after popup 1 is dismissed. Nothing is
    scheduled unless popups are enabled and the first item is set; a popup
    whose item is missing or unavailable is skipped.
    """
    if not restaurant.ai_upsell_popup_enabled or not restaurant.popup_item1_id:
        return []

    slots = [
        (1, restaurant.popup_item1_id, restaurant.popup1_text, config.POPUP_FIRST_DELAY_SECONDS),
        (2, restaurant.popup_item2_id, restaurant.popup2_text, config.POPUP_SECOND_DELAY_SECONDS),
    ]
    popups = []
    for slot, item_id, text, delay in slots:
        if not item_id:
            continue
        item = _available_items(db, restaurant).filter(MenuItem.id == item_id).first()
        if item is None:
            logger.debug("Popup %d item %s unavailable for restaurant %s", slot, item_id, restaurant.id)
            continue
        popups.append(ScheduledPopup(slot=slot, item=item, text=text, delay_seconds=delay))
    return popups


# =============================================================================
# Dessert Prompt
# =============================================================================

def dessert_items(db: Session, restaurant: Restaurant) -> List[MenuItem]:
    ids = list(restaurant.dessert_prompt_item_ids or [])
    if not ids:
        return []
    return _available_items(db, restaurant).filter(MenuItem.id.in_(ids)).all()


def dessert_prompt(
    restaurant: Restaurant,
    ordered_at: Optional[datetime],
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    When to nudge a seated customer towards dessert.

    Returns:
        {"enabled", "minutes", "due_at", "is_due"}
    """
    minutes = restaurant.dessert_prompt_minutes or config.DEFAULT_DESSERT_PROMPT_MINUTES
    if not restaurant.dessert_prompt_enabled or ordered_at is None:
        return {"enabled": False, "minutes": minutes, "due_at": None, "is_due": False}

    if ordered_at.tzinfo is None:
        ordered_at = ordered_at.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    due_at = ordered_at + timedelta(minutes=minutes)
    return {
        "enabled": True,
        "minutes": minutes,
        "due_at": due_at,
        "is_due": now >= due_at,
    }
