"""
Marketing Rule Routes for Tablewise
===================================

CRUD for a restaurant's marketing rules (cross-sell, up-sell, impulse,
combo, mystery box and popup offers).

Endpoints:
----------
- GET /marketing/{restaurant_id}: List rules, newest first
- POST /marketing: Create a rule
- PUT /marketing/{id}: Update a rule
- DELETE /marketing/{id}: Delete a rule

Discount Caps:
--------------
discount_pct is always 0-100. When the restaurant has AI marketing enabled,
rules flagged is_ai_managed may not exceed max_ai_discount_pct; rules
created by staff are not capped.
"""

import logging
from typing import Dict, List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..auth import AdminPrincipal, ensure_restaurant_access, get_current_principal
from ..db import get_db
from ..models import MarketingRule, MenuItem, Restaurant
from ..schemas.marketing import MarketingRuleCreate, MarketingRuleOut, MarketingRuleUpdate
from ..services.helpers import get_owned_or_404, get_restaurant_or_404


logger = logging.getLogger(__name__)

marketing_router = APIRouter(prefix="/marketing", tags=["Marketing"])


def _check_ai_discount(restaurant: Restaurant, discount_pct: float, is_ai_managed: bool) -> None:
    if restaurant.ai_marketing_enabled and is_ai_managed and discount_pct > restaurant.max_ai_discount_pct:
        raise HTTPException(
            status_code=400,
            detail=f"AI-managed discount cannot exceed {restaurant.max_ai_discount_pct:g}%",
        )


def _check_items(db: Session, restaurant_id: str, *item_ids) -> None:
    for item_id in item_ids:
        if not item_id:
            continue
        exists = (
            db.query(MenuItem.id)
            .filter(MenuItem.id == item_id, MenuItem.restaurant_id == restaurant_id)
            .first()
        )
        if not exists:
            raise HTTPException(status_code=400, detail=f"Unknown menu item: {item_id}")


@marketing_router.get("/{restaurant_id}", response_model=List[MarketingRuleOut])
def list_rules(
    restaurant_id: str,
    db: Session = Depends(get_db),
    principal: AdminPrincipal = Depends(get_current_principal),
) -> List[MarketingRuleOut]:
    ensure_restaurant_access(principal, restaurant_id)
    rules = (
        db.query(MarketingRule)
        .filter(MarketingRule.restaurant_id == restaurant_id)
        .order_by(MarketingRule.created_at.desc())
        .all()
    )
    return [MarketingRuleOut.model_validate(r) for r in rules]


@marketing_router.post("", response_model=MarketingRuleOut)
def create_rule(
    payload: MarketingRuleCreate,
    db: Session = Depends(get_db),
    principal: AdminPrincipal = Depends(get_current_principal),
) -> MarketingRuleOut:
    ensure_restaurant_access(principal, payload.restaurant_id)
    restaurant = get_restaurant_or_404(db, payload.restaurant_id)
    _check_ai_discount(restaurant, payload.discount_pct, payload.is_ai_managed)
    _check_items(db, restaurant.id, payload.trigger_item_id, payload.target_item_id)

    rule = MarketingRule(
        restaurant_id=restaurant.id,
        type=payload.type,
        trigger_item_id=payload.trigger_item_id,
        target_item_id=payload.target_item_id,
        discount_pct=payload.discount_pct,
        is_active=payload.is_active,
        is_ai_managed=payload.is_ai_managed,
    )
    db.add(rule)
    db.commit()
    db.refresh(rule)
    logger.info("Created %s marketing rule %s (restaurant=%s)", rule.type, rule.id, restaurant.id)
    return MarketingRuleOut.model_validate(rule)


@marketing_router.put("/{rule_id}", response_model=MarketingRuleOut)
def update_rule(
    rule_id: str,
    payload: MarketingRuleUpdate,
    db: Session = Depends(get_db),
    principal: AdminPrincipal = Depends(get_current_principal),
) -> MarketingRuleOut:
    rule = get_owned_or_404(db, MarketingRule, rule_id, principal, "Marketing rule")
    restaurant = get_restaurant_or_404(db, rule.restaurant_id)

    discount_pct = payload.discount_pct if payload.discount_pct is not None else rule.discount_pct
    is_ai_managed = payload.is_ai_managed if payload.is_ai_managed is not None else rule.is_ai_managed
    _check_ai_discount(restaurant, discount_pct, is_ai_managed)
    _check_items(db, restaurant.id, payload.trigger_item_id, payload.target_item_id)

    if payload.type is not None:
        rule.type = payload.type
    if payload.trigger_item_id is not None:
        rule.trigger_item_id = payload.trigger_item_id
    if payload.target_item_id is not None:
        rule.target_item_id = payload.target_item_id
    rule.discount_pct = discount_pct
    rule.is_ai_managed = is_ai_managed
    if payload.is_active is not None:
        rule.is_active = payload.is_active

    db.commit()
    db.refresh(rule)
    logger.info("Updated marketing rule %s", rule.id)
    return MarketingRuleOut.model_validate(rule)


@marketing_router.delete("/{rule_id}")
def delete_rule(
    rule_id: str,
    db: Session = Depends(get_db),
    principal: AdminPrincipal = Depends(get_current_principal),
) -> Dict[str, bool]:
    rule = get_owned_or_404(db, MarketingRule, rule_id, principal, "Marketing rule")
    db.delete(rule)
    db.commit()
    logger.info("Deleted marketing rule %s", rule_id)
    return {"success": True}
