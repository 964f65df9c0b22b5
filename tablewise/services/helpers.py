"""
Helper Functions for Tablewise
==============================

Shared lookups and serializers used across routes and services.

Key Functions:
--------------
- get_restaurant_or_404: Load a restaurant or raise 404
- get_owned_or_404: Load a tenant-scoped row and check the caller may touch it
- slugify: Turn a restaurant name into a URL slug
- serialize_menu_item: MenuItem ORM object -> MenuItemOut (with fake discount)
- format_order: Order ORM object -> OrderOut
- as_utc: Normalize datetimes read back from SQLite (naive) to aware UTC

Usage:
------
    from tablewise.services.helpers import get_restaurant_or_404, format_order

    restaurant = get_restaurant_or_404(db, restaurant_id)
    return format_order(order)
"""

import re
from datetime import datetime, timezone
from typing import Optional, Type, TypeVar

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ..auth import AdminPrincipal, ensure_restaurant_access
from ..models import Base, MenuItem, Order, Restaurant
from ..schemas.menu import MenuItemOut
from ..schemas.orders import OrderItemOut, OrderOut
from .promotions import fake_original_price

ModelT = TypeVar("ModelT", bound=Base)


def get_restaurant_or_404(db: Session, restaurant_id: Optional[str]) -> Restaurant:
    restaurant = None
    if restaurant_id:
        restaurant = db.query(Restaurant).filter(Restaurant.id == restaurant_id).first()
    if not restaurant:
        raise HTTPException(status_code=404, detail="Restaurant not found")
    return restaurant


def get_owned_or_404(
    db: Session,
    model: Type[ModelT],
    object_id: str,
    principal: AdminPrincipal,
    label: str,
) -> ModelT:
    """
    Load a tenant-scoped row by id and verify the principal owns its tenant.

    Raises:
        HTTPException (404): If no row has that id.
        HTTPException (403): If it belongs to another restaurant.
    """
    obj = db.query(model).filter(model.id == object_id).first()
    if not obj:
        raise HTTPException(status_code=404, detail=f"{label} not found")
    ensure_restaurant_access(principal, obj.restaurant_id)
    return obj


def slugify(name: str) -> str:
    """
    Lowercase, drop punctuation, and join words with single hyphens.

    >>> slugify("  Tony's Pizza & Grill ")
    'tonys-pizza-grill'
    """
    slug = name.lower().strip()
    slug = re.sub(r"[^\w\s-]", "", slug)
    slug = re.sub(r"[\s_-]+", "-", slug)
    return slug.strip("-")


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def serialize_menu_item(item: MenuItem, discount_pct: Optional[float] = None) -> MenuItemOut:
    """Convert a MenuItem to its response model, adding the fake "was" price."""
    if discount_pct is None:
        discount_pct = item.category.fake_discount_pct if item.category else 0.0

    return MenuItemOut(
        id=item.id,
        restaurant_id=item.restaurant_id,
        category_id=item.category_id,
        name=item.name,
        description=item.description,
        full_price=float(item.full_price),
        half_price=float(item.half_price) if item.half_price is not None else None,
        image_url=item.image_url,
        is_veg=item.is_veg,
        is_available=item.is_available,
        recommended_item_ids=list(item.recommended_item_ids or []),
        fake_original_price=fake_original_price(item.full_price, discount_pct),
    )


def format_order(order: Order) -> OrderOut:
    """Convert an Order and its lines to the order desk format."""
    items = [
        OrderItemOut(
            id=line.menu_item_id,
            name=line.menu_item_name,
            price=line.price,
            quantity=line.quantity,
            portion_type=line.portion or "full",
            is_upsell=bool(line.is_upsell),
            marketing_source=line.marketing_source,
        )
        for line in order.items
    ]
    created_at = as_utc(order.created_at)

    return OrderOut(
        id=order.id,
        restaurant_id=order.restaurant_id,
        customer_name=order.customer_name,
        customer_phone=order.customer_phone,
        subtotal=order.subtotal,
        tax_amount=order.tax_amount,
        delivery_fee=order.delivery_fee,
        total_amount=order.total_amount,
        status=(order.status or "pending").lower(),
        order_type=order.order_type,
        table_number=order.table_number,
        address=order.address,
        payment_status=order.payment_status,
        created_at=created_at,
        timestamp=created_at,
        items=items,
    )
