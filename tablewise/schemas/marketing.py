"""
Marketing Schemas for Tablewise
===============================

Pydantic models for marketing rules and the public promotion configuration
read by the customer menu.

Rule Types:
-----------
- CROSS_SELL: Suggest target item when trigger item is in the cart
- UP_SELL: Suggest a pricier alternative to the trigger item
- IMPULSE: Cheap add-on shown near checkout
- COMBO: Trigger + target sold together at a discount
- MYSTERY_BOX: Mystery box offer
- POPUP: Timed popup offer

Promotion Config:
-----------------
GET /promotions/{restaurant_id} bundles everything the menu needs to run
its timers and badges: popup schedule, dessert prompt, gift threshold,
mystery box price and per-category fake discounts.
"""

from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from .menu import MenuItemOut


RULE_TYPES = ("CROSS_SELL", "UP_SELL", "IMPULSE", "COMBO", "MYSTERY_BOX", "POPUP")

RuleType = Literal["CROSS_SELL", "UP_SELL", "IMPULSE", "COMBO", "MYSTERY_BOX", "POPUP"]


class MarketingRuleOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    restaurant_id: str
    type: str
    trigger_item_id: Optional[str] = None
    target_item_id: Optional[str] = None
    discount_pct: float
    is_active: bool
    is_ai_managed: bool
    created_at: Optional[datetime] = None


class MarketingRuleCreate(BaseModel):
    restaurant_id: str
    type: RuleType
    trigger_item_id: Optional[str] = None
    target_item_id: Optional[str] = None
    discount_pct: float = Field(0.0, ge=0, le=100)
    is_active: bool = True
    is_ai_managed: bool = False


class MarketingRuleUpdate(BaseModel):
    type: Optional[RuleType] = None
    trigger_item_id: Optional[str] = None
    target_item_id: Optional[str] = None
    discount_pct: Optional[float] = Field(None, ge=0, le=100)
    is_active: Optional[bool] = None
    is_ai_managed: Optional[bool] = None


class PopupOut(BaseModel):
    """
    One timed popup.

    Attributes:
        slot: 1 or 2
        delay_seconds: For slot 1, seconds after the menu opens. For slot 2,
            seconds after popup 1 is dismissed.
    """
    slot: int
    item: MenuItemOut
    text: Optional[str] = None
    delay_seconds: int


class GiftConfigOut(BaseModel):
    threshold: float
    item: MenuItemOut


class MysteryBoxConfigOut(BaseModel):
    enabled: bool
    price: float


class DessertConfigOut(BaseModel):
    enabled: bool
    minutes: int
    items: List[MenuItemOut] = []


class PromotionConfigOut(BaseModel):
    popups: List[PopupOut] = []
    dessert_prompt: DessertConfigOut
    gift: Optional[GiftConfigOut] = None
    mystery_box: MysteryBoxConfigOut
    category_discounts: Dict[str, float] = {}


class MysteryBoxRevealOut(BaseModel):
    price: float
    item: MenuItemOut
