"""
AI Upsell Service for Tablewise
===============================

Cross-sell and popup selection backed by an LLM.

Key Functions:
--------------
- recommend_for_cart: Instant suggestions from precomputed links (no LLM call)
- sync_menu_recommendations: Ask the LLM for 3 complementary items per menu
  item and store them on MenuItem.recommended_item_ids
- pick_flash_items: Ask the LLM for the two items to feature in popups

Recommendation Flow:
--------------------
The LLM is consulted offline (sync) rather than per cart, so the customer
menu gets suggestions without waiting on an API call:

1. Admin triggers sync; each available item gets 3 recommended item ids.
2. When a customer's cart changes, the ids recommended by the cart items
   are counted, and the 3 most frequent (ties keep first-seen order) are
   returned, skipping anything whose name is already in the cart.
"""

import json
import logging
from collections import Counter
from typing import Dict, List, Optional, Sequence

from sqlalchemy.orm import Session

from .. import config, llm_client
from ..models import MenuItem, Restaurant
from .promotions import MYSTERY_BOX_NAME

logger = logging.getLogger(__name__)

MAX_RECOMMENDATIONS = 3

SYNC_PROMPT = """
You are an expert restaurant up-seller.
Available Restaurant Menu:
{menu}

I want recommendations ONLY for the following item IDs:
{chunk_ids}

For EACH of these specific item IDs, suggest EXACTLY 3 other complementary item IDs from the Available Restaurant Menu.
Return ONLY a raw JSON object where keys are the specific item IDs requested, and values are arrays of 3 recommended string IDs.
Example:
{{
  "item_id_1": ["rec_id_1", "rec_id_2", "rec_id_3"],
  "item_id_2": ["rec_id_4", "rec_id_5", "rec_id_6"]
}}
Absolutely no markdown formatting, no text, just the raw JSON object.
"""

FLASH_PROMPT = """
You are an expert restaurant up-seller.
Available Restaurant Menu:
{menu}

Task: Select EXACTLY 2 menu items from the available menu that are visually appealing or highly recommended for up-selling.
Return ONLY a raw JSON array of the 2 selected IDs.
Example: ["item_id_1", "item_id_2"]
Absolutely no markdown formatting, no text, just the raw JSON array.
"""


class UpsellError(Exception):
    """Raised when the LLM output cannot be turned into a usable selection."""


def available_menu(db: Session, restaurant_id: str) -> List[MenuItem]:
    return (
        db.query(MenuItem)
        .filter(
            MenuItem.restaurant_id == restaurant_id,
            MenuItem.is_available.is_(True),
            MenuItem.name != MYSTERY_BOX_NAME,
        )
        .all()
    )


def _menu_context(items: Sequence[MenuItem]) -> str:
    return json.dumps([
        {"id": m.id, "name": m.name, "price": m.full_price, "isVeg": m.is_veg}
        for m in items
    ])


# =============================================================================
# Recommendations
# =============================================================================

def recommend_for_cart(
    menu: Sequence[MenuItem],
    cart_items: Sequence,
    limit: int = MAX_RECOMMENDATIONS,
) -> List[MenuItem]:
    """
    Pick up to ``limit`` items to suggest for a cart.

    Args:
        menu: The restaurant's available menu items
        cart_items: Objects with ``id`` and optional ``name``
    """
    by_id: Dict[str, MenuItem] = {m.id: m for m in menu}

    counts: Counter = Counter()
    for cart_item in cart_items:
        menu_item = by_id.get(cart_item.id)
        if menu_item is None:
            continue
        for rec_id in menu_item.recommended_item_ids or []:
            counts[str(rec_id)] += 1

    # Counter.most_common keeps insertion order among equal counts
    top_ids = [rec_id for rec_id, _ in counts.most_common(limit)]

    cart_names = set()
    for cart_item in cart_items:
        if cart_item.name:
            cart_names.add(cart_item.name)
        elif cart_item.id in by_id:
            cart_names.add(by_id[cart_item.id].name)

    return [
        by_id[rec_id]
        for rec_id in top_ids
        if rec_id in by_id and by_id[rec_id].name not in cart_names
    ]


# =============================================================================
# Menu Sync
# =============================================================================

def sync_menu_recommendations(
    db: Session,
    restaurant_id: str,
    api_key: Optional[str] = None,
    provider: Optional[str] = None,
    chunk_size: Optional[int] = None,
) -> int:
    """
    Regenerate recommended_item_ids for a restaurant's available menu.

    The full menu is sent as context with every chunk; each chunk asks for
    recommendations for up to ``chunk_size`` items. Chunks whose reply can't
    be parsed are skipped. Only ids that exist on this restaurant's menu are
    stored.

    Returns:
        Number of menu items updated
    """
    chunk_size = chunk_size or config.UPSELL_SYNC_CHUNK_SIZE
    items = available_menu(db, restaurant_id)
    if not items:
        return 0

    menu_json = _menu_context(items)
    valid_ids = {m.id for m in items}
    recommendations: Dict[str, List[str]] = {}

    for start in range(0, len(items), chunk_size):
        chunk_ids = [m.id for m in items[start:start + chunk_size]]
        prompt = SYNC_PROMPT.format(menu=menu_json, chunk_ids=json.dumps(chunk_ids))
        text = llm_client.call_llm(
            prompt,
            api_key=api_key,
            provider=provider,
            temperature=0.2,
            system="You return pure JSON objects of IDs.",
            json_mode=True,
        )
        parsed = llm_client.parse_json_response(text, default=None)
        if not isinstance(parsed, dict):
            logger.error("Skipping unparseable sync chunk for restaurant %s", restaurant_id)
            continue
        for item_id, rec_ids in parsed.items():
            if item_id in chunk_ids and isinstance(rec_ids, list):
                recommendations[item_id] = [
                    str(r) for r in rec_ids if str(r) in valid_ids and str(r) != item_id
                ]

    updated = 0
    for item in items:
        rec_ids = recommendations.get(item.id)
        if rec_ids:
            item.recommended_item_ids = rec_ids
            updated += 1
    db.commit()

    logger.info("AI menu sync updated %d items for restaurant %s", updated, restaurant_id)
    return updated


def run_menu_sync_job(
    session_factory,
    restaurant_id: str,
    api_key: Optional[str] = None,
    provider: Optional[str] = None,
) -> None:
    """Background task wrapper: own session, log failures instead of raising."""
    db = session_factory()
    try:
        sync_menu_recommendations(db, restaurant_id, api_key=api_key, provider=provider)
    except Exception:
        db.rollback()
        logger.exception("Background AI menu sync failed for restaurant %s", restaurant_id)
    finally:
        db.close()


# =============================================================================
# Flash Items
# =============================================================================

def pick_flash_items(
    db: Session,
    restaurant: Restaurant,
    api_key: Optional[str] = None,
    provider: Optional[str] = None,
) -> List[str]:
    """
    Ask the LLM for the two popup items and save them on the restaurant.

    Raises:
        UpsellError: If the reply is not a JSON array of at least 2 known ids
    """
    items = available_menu(db, restaurant.id)
    prompt = FLASH_PROMPT.format(menu=_menu_context(items))
    text = llm_client.call_llm(
        prompt,
        api_key=api_key,
        provider=provider,
        temperature=0.5,
        system="You return pure JSON arrays of 2 IDs.",
    )
    parsed = llm_client.parse_json_response(text, default=None)
    if parsed is None:
        raise UpsellError("Failed to process AI response")
    if not isinstance(parsed, list):
        raise UpsellError("AI did not return exactly 2 items")

    valid_ids = {m.id for m in items}
    picked = [str(i) for i in parsed if str(i) in valid_ids]
    if len(picked) < 2:
        raise UpsellError("AI did not return exactly 2 items")

    restaurant.popup_item1_id, restaurant.popup_item2_id = picked[0], picked[1]
    db.commit()
    logger.info("AI picked popup items for restaurant %s", restaurant.id)
    return picked[:2]
