"""
AI Feature Schemas for Tablewise
================================

Request/response models for the AI-assisted features.

Endpoint Coverage:
------------------
- POST /ai-upsell/recommend: Cross-sell suggestions for a cart (customer)
- POST /ai-upsell/sync-menu: Regenerate cross-sell links in background (admin)
- POST /ai-upsell/pick-flash-items: Let the LLM choose the two popup items (admin)
- POST /ai/analyst: Ask business questions about a restaurant's data (admin)
- POST /ai/master: Natural-language platform administration (super admin)
- POST /ai/master/apply: Execute a confirmed master action (super admin)

API Keys:
---------
Every request may carry api_key and provider. When omitted the server's
configured keys are used.

Master Actions:
---------------
The master assistant never mutates data itself. It returns a typed action
which the super admin confirms and posts back to /ai/master/apply:

- RESPONSE: {message}
- FETCH_MENU: {restaurant_id, restaurant_name, reason}
- CONFIRM_DELETE: {item_id, item_name, restaurant_id}
- CONFIRM_UPDATE_PRICE: {item_id, item_name, new_price, restaurant_id}
- CONFIRM_DELETE_RESTAURANT: {restaurant_id, restaurant_name}
- CONFIRM_ADD_ITEM: {restaurant_id, restaurant_name, name, price, description, is_veg}
- CONFIRM_UPDATE_RESTAURANT: {restaurant_id, restaurant_name, updates}
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class UpsellCartItem(BaseModel):
    id: str
    name: Optional[str] = None


class RecommendRequest(BaseModel):
    restaurant_id: Optional[str] = None
    cart_items: List[UpsellCartItem] = []


class AIRequestBase(BaseModel):
    provider: Optional[str] = None
    api_key: Optional[str] = None


class SyncMenuRequest(AIRequestBase):
    restaurant_id: Optional[str] = None


class PickFlashItemsRequest(AIRequestBase):
    restaurant_id: Optional[str] = None


class PickFlashItemsOut(BaseModel):
    success: bool
    popup_item1_id: str
    popup_item2_id: str


class MessageOut(BaseModel):
    message: str


class AnalystRequest(AIRequestBase):
    restaurant_id: str
    query: str


class AnalystOut(BaseModel):
    answer: str


class ChatTurn(BaseModel):
    role: str
    content: str


class MasterRequest(AIRequestBase):
    query: str
    restaurant_id: Optional[str] = None
    history: List[ChatTurn] = []


class MasterAction(BaseModel):
    """An action returned by the master assistant; fields vary by type."""
    model_config = ConfigDict(extra="allow")

    type: str
    message: Optional[str] = None


class ApplyActionOut(BaseModel):
    success: bool
    type: str
    detail: Dict[str, Any] = {}
