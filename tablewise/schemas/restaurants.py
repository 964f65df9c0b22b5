"""
Restaurant Schemas for Tablewise
================================

This module defines Pydantic models for restaurant (tenant) management.
Each restaurant is an isolated tenant with its own menu, orders, banners,
marketing configuration and admin login.

Endpoint Coverage:
------------------
- GET /restaurants: List all restaurants (super admin)
- GET /restaurants/stats: Platform-wide totals (super admin)
- POST /restaurants: Create a restaurant (super admin)
- GET /restaurants/{id}: Restaurant details (restaurant admin)
- PUT /restaurants/{id}: Update any field (super admin)
- PUT /restaurants/{id}/settings: Update settings (restaurant admin)
- DELETE /restaurants/{id}: Remove a restaurant and its data (super admin)
- GET /restaurants/slug/{slug}: Public menu for customers
- GET /restaurants/{id}/qr: Table QR code (restaurant admin)
- POST /auth/login: Resolve admin credentials to a role

Settings vs Account Fields:
---------------------------
Restaurant admins may change their own settings (contact details, pricing,
order preferences, promotions). Account fields (slug, is_active, trial end,
login credentials) are reserved for the super admin.

Passwords:
----------
Passwords are accepted on create/update and stored hashed. No response model
exposes the password or its hash.
"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from .menu import CategoryWithItemsOut, MenuItemOut


PopupMode = Literal["manual", "ai"]
BusinessType = Literal["restaurant", "hotel"]


class RestaurantSettingsUpdate(BaseModel):
    """
    Request model for the settings a restaurant admin may change.

    All fields are optional; only provided fields are updated.
    """
    name: Optional[str] = None
    owner_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    logo_url: Optional[str] = None
    business_type: Optional[BusinessType] = None

    tax_enabled: Optional[bool] = None
    tax_percentage: Optional[float] = Field(None, ge=0, le=100)
    delivery_charges_enabled: Optional[bool] = None
    delivery_charges: Optional[float] = Field(None, ge=0)
    delivery_free_threshold: Optional[float] = Field(None, ge=0)

    dine_in_enabled: Optional[bool] = None
    takeaway_enabled: Optional[bool] = None
    delivery_enabled: Optional[bool] = None
    require_table_number: Optional[bool] = None

    ai_upsell_enabled: Optional[bool] = None
    ai_upsell_popup_enabled: Optional[bool] = None
    popup_mode: Optional[PopupMode] = None
    popup_item1_id: Optional[str] = None
    popup_item2_id: Optional[str] = None
    popup1_text: Optional[str] = None
    popup2_text: Optional[str] = None

    gift_threshold: Optional[float] = Field(None, ge=0)
    gift_item_id: Optional[str] = None
    ai_marketing_enabled: Optional[bool] = None
    max_ai_discount_pct: Optional[float] = Field(None, ge=0, le=100)

    mystery_box_enabled: Optional[bool] = None
    mystery_box_price: Optional[float] = Field(None, ge=0)
    mystery_box_item_ids: Optional[List[str]] = None

    dessert_prompt_enabled: Optional[bool] = None
    dessert_prompt_minutes: Optional[int] = Field(None, ge=1)
    dessert_prompt_item_ids: Optional[List[str]] = None

    ai_custom_prompt: Optional[str] = None


class RestaurantUpdate(RestaurantSettingsUpdate):
    """Super admin update: settings plus account fields."""
    slug: Optional[str] = None
    is_active: Optional[bool] = None
    trial_end_date: Optional[datetime] = None
    username: Optional[str] = None
    password: Optional[str] = Field(None, min_length=4)


class RestaurantCreate(RestaurantUpdate):
    """
    Request model for creating a restaurant.

    Only name is required. The slug is derived from the name when omitted.

    Example:
        {
            "name": "Spice Route",
            "owner_name": "Asha Rao",
            "email": "asha@spiceroute.in",
            "phone": "9876543210",
            "username": "spiceroute",
            "password": "changeme"
        }
    """
    name: str = Field(..., min_length=1)


class RestaurantOut(BaseModel):
    """Full restaurant record (without credentials)."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    slug: str
    owner_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    username: Optional[str] = None
    is_active: bool
    business_type: str
    address: Optional[str] = None
    logo_url: Optional[str] = None
    trial_end_date: Optional[datetime] = None
    created_at: Optional[datetime] = None

    tax_enabled: bool
    tax_percentage: float
    delivery_charges_enabled: bool
    delivery_charges: float
    delivery_free_threshold: float

    dine_in_enabled: bool
    takeaway_enabled: bool
    delivery_enabled: bool
    require_table_number: bool

    ai_upsell_enabled: bool
    ai_upsell_popup_enabled: bool
    popup_mode: str
    popup_item1_id: Optional[str] = None
    popup_item2_id: Optional[str] = None
    popup1_text: Optional[str] = None
    popup2_text: Optional[str] = None

    gift_threshold: Optional[float] = None
    gift_item_id: Optional[str] = None
    ai_marketing_enabled: bool
    max_ai_discount_pct: float

    mystery_box_enabled: bool
    mystery_box_price: float
    mystery_box_item_ids: List[str] = []

    dessert_prompt_enabled: bool
    dessert_prompt_minutes: int
    dessert_prompt_item_ids: List[str] = []

    ai_custom_prompt: Optional[str] = None


class RestaurantSummaryOut(RestaurantOut):
    """Restaurant row for the super admin list, with usage counts."""
    menu_item_count: int = 0
    order_count: int = 0


class PublicMenuOut(RestaurantOut):
    """Customer-facing menu: restaurant settings, categories and items."""
    categories: List[CategoryWithItemsOut] = []
    menu_items: List[MenuItemOut] = []


class PlatformStatsOut(BaseModel):
    total_restaurants: int
    active_restaurants: int
    total_orders: int
    total_revenue: float


class QRCodeOut(BaseModel):
    url: str
    qr_code: str


class LoginOut(BaseModel):
    username: str
    role: str
    restaurant_id: Optional[str] = None
    restaurant_slug: Optional[str] = None
