"""
Restaurant Routes for Tablewise
===============================

Tenant management for the super admin, self-service settings for
restaurant admins, and the public menu customers load from a QR code.

Endpoints:
----------
- GET /restaurants: All restaurants with usage counts (super admin)
- GET /restaurants/stats: Platform totals (super admin)
- GET /restaurants/slug/{slug}: Public menu for a restaurant (no auth)
- GET /restaurants/{id}: One restaurant (owner or super admin)
- POST /restaurants: Create a restaurant (super admin)
- PUT /restaurants/{id}: Update any field (super admin)
- PUT /restaurants/{id}/settings: Update settings (owner or super admin)
- DELETE /restaurants/{id}: Delete a restaurant and all its data (super admin)
- GET /restaurants/{id}/qr: Table QR code for the customer menu

Public Menu:
------------
The slug endpoint is what the customer app calls on load. It returns the
restaurant's settings (tax, order types, popups, gift, mystery box) along
with categories and items, so the client can render the menu and run the
promotions without further calls. Inactive restaurants return 404.

Credentials:
------------
A restaurant gets a login when the super admin sets username + password.
Passwords are hashed with werkzeug.security before storage and never returned.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import func
from sqlalchemy.orm import Session

from ..auth import (
    AdminPrincipal,
    ensure_restaurant_access,
    get_current_principal,
    hash_password,
    verify_admin_credentials,
)
from ..db import get_db
from ..models import MenuItem, Order, Restaurant
from ..schemas.menu import CategoryWithItemsOut
from ..schemas.restaurants import (
    PlatformStatsOut,
    PublicMenuOut,
    QRCodeOut,
    RestaurantCreate,
    RestaurantOut,
    RestaurantSettingsUpdate,
    RestaurantSummaryOut,
    RestaurantUpdate,
)
from ..services.helpers import get_restaurant_or_404, serialize_menu_item, slugify
from ..services.order import platform_stats
from ..services.qr import menu_url, qr_data_url


logger = logging.getLogger(__name__)

restaurants_router = APIRouter(prefix="/restaurants", tags=["Restaurants"])

# Nullable columns an update may reset to null; other fields ignore nulls
CLEARABLE_FIELDS = {
    "owner_name",
    "email",
    "phone",
    "address",
    "logo_url",
    "popup_item1_id",
    "popup_item2_id",
    "popup1_text",
    "popup2_text",
    "gift_threshold",
    "gift_item_id",
    "ai_custom_prompt",
    "trial_end_date",
}


# =============================================================================
# Helper Functions
# =============================================================================

def _apply_updates(restaurant: Restaurant, data: Dict[str, Any]) -> None:
    for field_name, value in data.items():
        if field_name == "password":
            if value:
                restaurant.password_hash = hash_password(value)
            continue
        if value is None and field_name not in CLEARABLE_FIELDS:
            continue
        setattr(restaurant, field_name, value)


def _check_unique(
    db: Session,
    slug: Optional[str],
    username: Optional[str],
    exclude_id: Optional[str] = None,
) -> None:
    """Raise 400 if another restaurant already uses the slug or username."""
    if slug:
        q = db.query(Restaurant).filter(Restaurant.slug == slug)
        if exclude_id:
            q = q.filter(Restaurant.id != exclude_id)
        if q.first():
            raise HTTPException(status_code=400, detail=f"Slug '{slug}' is already taken")
    if username:
        q = db.query(Restaurant).filter(Restaurant.username == username)
        if exclude_id:
            q = q.filter(Restaurant.id != exclude_id)
        if q.first():
            raise HTTPException(status_code=400, detail=f"Username '{username}' is already taken")


def build_public_menu(restaurant: Restaurant) -> PublicMenuOut:
    categories = []
    for category in restaurant.categories:
        items = [serialize_menu_item(m, category.fake_discount_pct) for m in category.menu_items]
        categories.append(CategoryWithItemsOut(
            id=category.id,
            restaurant_id=category.restaurant_id,
            name=category.name,
            icon=category.icon,
            fake_discount_pct=category.fake_discount_pct or 0.0,
            menu_items=items,
        ))

    base = RestaurantOut.model_validate(restaurant).model_dump()
    return PublicMenuOut(
        **base,
        categories=categories,
        menu_items=[item for c in categories for item in c.menu_items],
    )


# =============================================================================
# Super Admin Endpoints
# =============================================================================

@restaurants_router.get("", response_model=List[RestaurantSummaryOut])
def list_restaurants(
    db: Session = Depends(get_db),
    _admin: str = Depends(verify_admin_credentials),
) -> List[RestaurantSummaryOut]:
    """List all restaurants, newest first, with menu and order counts."""
    item_counts = dict(
        db.query(MenuItem.restaurant_id, func.count(MenuItem.id)).group_by(MenuItem.restaurant_id).all()
    )
    order_counts = dict(
        db.query(Order.restaurant_id, func.count(Order.id)).group_by(Order.restaurant_id).all()
    )
    restaurants = db.query(Restaurant).order_by(Restaurant.created_at.desc()).all()
    return [
        RestaurantSummaryOut(
            **RestaurantOut.model_validate(r).model_dump(),
            menu_item_count=item_counts.get(r.id, 0),
            order_count=order_counts.get(r.id, 0),
        )
        for r in restaurants
    ]


@restaurants_router.get("/stats", response_model=PlatformStatsOut)
def get_platform_stats(
    db: Session = Depends(get_db),
    _admin: str = Depends(verify_admin_credentials),
) -> PlatformStatsOut:
    return PlatformStatsOut(**platform_stats(db))


@restaurants_router.post("", response_model=RestaurantOut)
def create_restaurant(
    payload: RestaurantCreate,
    db: Session = Depends(get_db),
    _admin: str = Depends(verify_admin_credentials),
) -> RestaurantOut:
    """Create a restaurant. The slug defaults to the slugified name."""
    slug = slugify(payload.slug or payload.name)
    if not slug:
        raise HTTPException(status_code=400, detail="Could not derive a slug from the name")
    _check_unique(db, slug, payload.username)

    data = payload.model_dump(exclude_unset=True)
    data["slug"] = slug
    restaurant = Restaurant()
    _apply_updates(restaurant, data)
    db.add(restaurant)
    db.commit()
    db.refresh(restaurant)
    logger.info("Created restaurant: %s (id=%s)", restaurant.name, restaurant.id)
    return RestaurantOut.model_validate(restaurant)


@restaurants_router.put("/{restaurant_id}", response_model=RestaurantOut)
def update_restaurant(
    restaurant_id: str,
    payload: RestaurantUpdate,
    db: Session = Depends(get_db),
    _admin: str = Depends(verify_admin_credentials),
) -> RestaurantOut:
    """Update any restaurant field, including activation, trial and login."""
    restaurant = get_restaurant_or_404(db, restaurant_id)
    data = payload.model_dump(exclude_unset=True)
    if data.get("slug"):
        data["slug"] = slugify(data["slug"])
    _check_unique(db, data.get("slug"), data.get("username"), exclude_id=restaurant.id)

    _apply_updates(restaurant, data)
    db.commit()
    db.refresh(restaurant)
    logger.info("Updated restaurant: %s (id=%s)", restaurant.name, restaurant.id)
    return RestaurantOut.model_validate(restaurant)


@restaurants_router.delete("/{restaurant_id}")
def delete_restaurant(
    restaurant_id: str,
    db: Session = Depends(get_db),
    _admin: str = Depends(verify_admin_credentials),
) -> Dict[str, bool]:
    """Delete a restaurant with its menu, orders, banners and notifications."""
    restaurant = get_restaurant_or_404(db, restaurant_id)
    name = restaurant.name
    db.delete(restaurant)
    db.commit()
    logger.info("Deleted restaurant: %s (id=%s)", name, restaurant_id)
    return {"success": True}


# =============================================================================
# Public Endpoints
# =============================================================================

@restaurants_router.get("/slug/{slug}", response_model=PublicMenuOut)
def get_public_menu(slug: str, db: Session = Depends(get_db)) -> PublicMenuOut:
    restaurant = db.query(Restaurant).filter(Restaurant.slug == slug).first()
    if not restaurant or not restaurant.is_active:
        raise HTTPException(status_code=404, detail="Restaurant not found")
    return build_public_menu(restaurant)


# =============================================================================
# Restaurant Admin Endpoints
# =============================================================================

@restaurants_router.get("/{restaurant_id}", response_model=RestaurantOut)
def get_restaurant(
    restaurant_id: str,
    db: Session = Depends(get_db),
    principal: AdminPrincipal = Depends(get_current_principal),
) -> RestaurantOut:
    ensure_restaurant_access(principal, restaurant_id)
    return RestaurantOut.model_validate(get_restaurant_or_404(db, restaurant_id))


@restaurants_router.put("/{restaurant_id}/settings", response_model=RestaurantOut)
def update_settings(
    restaurant_id: str,
    payload: RestaurantSettingsUpdate,
    db: Session = Depends(get_db),
    principal: AdminPrincipal = Depends(get_current_principal),
) -> RestaurantOut:
    """Update a restaurant's own settings (pricing, order types, promotions)."""
    ensure_restaurant_access(principal, restaurant_id)
    restaurant = get_restaurant_or_404(db, restaurant_id)

    _apply_updates(restaurant, payload.model_dump(exclude_unset=True))
    db.commit()
    db.refresh(restaurant)
    logger.info("Settings updated for restaurant %s by %s", restaurant.id, principal.username)
    return RestaurantOut.model_validate(restaurant)


@restaurants_router.get("/{restaurant_id}/qr", response_model=QRCodeOut)
def get_qr_code(
    restaurant_id: str,
    table: Optional[str] = Query(None, description="Table number to pre-fill"),
    db: Session = Depends(get_db),
    principal: AdminPrincipal = Depends(get_current_principal),
) -> QRCodeOut:
    """QR code (PNG data URL) that opens the customer menu, optionally for a table."""
    ensure_restaurant_access(principal, restaurant_id)
    restaurant = get_restaurant_or_404(db, restaurant_id)
    url = menu_url(restaurant, table)
    return QRCodeOut(url=url, qr_code=qr_data_url(url))
