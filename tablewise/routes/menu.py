"""
Menu Routes for Tablewise
=========================

Category and menu item management for a restaurant's dashboard.

Endpoints:
----------
- GET /menu/categories/{restaurant_id}: List categories
- POST /menu/categories: Create a category
- POST /menu/categories/bulk: Create several categories at once
- PUT /menu/categories/{id}: Update a category
- DELETE /menu/categories/{id}: Delete a category and its items
- GET /menu/items/{restaurant_id}: List menu items
- POST /menu/items: Create a menu item
- PUT /menu/items/{id}: Update a menu item
- DELETE /menu/items/{id}: Delete a menu item

Authentication:
---------------
Every endpoint needs a principal with access to the owning restaurant:
the super admin, or that restaurant's own admin (see auth.py).

Category Order:
---------------
Categories keep the order they were created in (position column). The
public menu and the first-category fallbacks (mystery box placeholder,
master AI item creation) rely on that order.
"""

import logging
from typing import Dict, List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session

from ..auth import AdminPrincipal, ensure_restaurant_access, get_current_principal
from ..db import get_db
from ..models import Category, MenuItem
from ..schemas.menu import (
    CategoryBulkCreate,
    CategoryCreate,
    CategoryOut,
    CategoryUpdate,
    MenuItemCreate,
    MenuItemOut,
    MenuItemUpdate,
)
from ..services.helpers import get_owned_or_404, get_restaurant_or_404, serialize_menu_item


logger = logging.getLogger(__name__)

menu_router = APIRouter(prefix="/menu", tags=["Menu"])

DEFAULT_CATEGORY_ICON = "utensils"


def _next_position(db: Session, restaurant_id: str) -> int:
    highest = (
        db.query(func.max(Category.position))
        .filter(Category.restaurant_id == restaurant_id)
        .scalar()
    )
    return 0 if highest is None else highest + 1


# =============================================================================
# Category Endpoints
# =============================================================================

@menu_router.get("/categories/{restaurant_id}", response_model=List[CategoryOut])
def list_categories(
    restaurant_id: str,
    db: Session = Depends(get_db),
    principal: AdminPrincipal = Depends(get_current_principal),
) -> List[CategoryOut]:
    ensure_restaurant_access(principal, restaurant_id)
    categories = (
        db.query(Category)
        .filter(Category.restaurant_id == restaurant_id)
        .order_by(Category.position.asc())
        .all()
    )
    return [CategoryOut.model_validate(c) for c in categories]


@menu_router.post("/categories", response_model=CategoryOut)
def create_category(
    payload: CategoryCreate,
    db: Session = Depends(get_db),
    principal: AdminPrincipal = Depends(get_current_principal),
) -> CategoryOut:
    ensure_restaurant_access(principal, payload.restaurant_id)
    get_restaurant_or_404(db, payload.restaurant_id)

    category = Category(
        restaurant_id=payload.restaurant_id,
        name=payload.name,
        icon=payload.icon or DEFAULT_CATEGORY_ICON,
        fake_discount_pct=payload.fake_discount_pct,
        position=_next_position(db, payload.restaurant_id),
    )
    db.add(category)
    db.commit()
    db.refresh(category)
    logger.info("Created category: %s (restaurant=%s)", category.name, category.restaurant_id)
    return CategoryOut.model_validate(category)


@menu_router.post("/categories/bulk", response_model=List[CategoryOut])
def create_categories_bulk(
    payload: CategoryBulkCreate,
    db: Session = Depends(get_db),
    principal: AdminPrincipal = Depends(get_current_principal),
) -> List[CategoryOut]:
    """Create several categories in one transaction, in the order given."""
    ensure_restaurant_access(principal, payload.restaurant_id)
    get_restaurant_or_404(db, payload.restaurant_id)
    if not payload.categories:
        raise HTTPException(status_code=400, detail="No categories provided")

    position = _next_position(db, payload.restaurant_id)
    created = []
    for offset, entry in enumerate(payload.categories):
        category = Category(
            restaurant_id=payload.restaurant_id,
            name=entry.name,
            icon=entry.icon or DEFAULT_CATEGORY_ICON,
            position=position + offset,
        )
        db.add(category)
        created.append(category)
    db.commit()

    logger.info("Bulk created %d categories (restaurant=%s)", len(created), payload.restaurant_id)
    return [CategoryOut.model_validate(c) for c in created]


@menu_router.put("/categories/{category_id}", response_model=CategoryOut)
def update_category(
    category_id: str,
    payload: CategoryUpdate,
    db: Session = Depends(get_db),
    principal: AdminPrincipal = Depends(get_current_principal),
) -> CategoryOut:
    category = get_owned_or_404(db, Category, category_id, principal, "Category")

    if payload.name is not None:
        category.name = payload.name
    if payload.icon is not None:
        category.icon = payload.icon
    if payload.fake_discount_pct is not None:
        category.fake_discount_pct = payload.fake_discount_pct

    db.commit()
    db.refresh(category)
    logger.info("Updated category: %s (id=%s)", category.name, category.id)
    return CategoryOut.model_validate(category)


@menu_router.delete("/categories/{category_id}")
def delete_category(
    category_id: str,
    db: Session = Depends(get_db),
    principal: AdminPrincipal = Depends(get_current_principal),
) -> Dict[str, bool]:
    """Delete a category. Its menu items are deleted with it."""
    category = get_owned_or_404(db, Category, category_id, principal, "Category")
    name = category.name
    db.delete(category)
    db.commit()
    logger.info("Deleted category: %s (id=%s)", name, category_id)
    return {"success": True}


# =============================================================================
# Menu Item Endpoints
# =============================================================================

@menu_router.get("/items/{restaurant_id}", response_model=List[MenuItemOut])
def list_menu_items(
    restaurant_id: str,
    db: Session = Depends(get_db),
    principal: AdminPrincipal = Depends(get_current_principal),
) -> List[MenuItemOut]:
    ensure_restaurant_access(principal, restaurant_id)
    items = (
        db.query(MenuItem)
        .filter(MenuItem.restaurant_id == restaurant_id)
        .order_by(MenuItem.name.asc())
        .all()
    )
    return [serialize_menu_item(m) for m in items]


@menu_router.post("/items", response_model=MenuItemOut)
def create_menu_item(
    payload: MenuItemCreate,
    db: Session = Depends(get_db),
    principal: AdminPrincipal = Depends(get_current_principal),
) -> MenuItemOut:
    """Create a menu item. The category must belong to the same restaurant."""
    ensure_restaurant_access(principal, payload.restaurant_id)
    category = db.query(Category).filter(Category.id == payload.category_id).first()
    if not category or category.restaurant_id != payload.restaurant_id:
        raise HTTPException(status_code=400, detail="Category does not belong to this restaurant")

    item = MenuItem(
        restaurant_id=payload.restaurant_id,
        category_id=payload.category_id,
        name=payload.name,
        description=payload.description,
        full_price=payload.full_price,
        half_price=payload.half_price,
        image_url=payload.image_url,
        is_veg=payload.is_veg,
        is_available=payload.is_available,
    )
    db.add(item)
    db.commit()
    db.refresh(item)
    logger.info("Created menu item: %s (id=%s)", item.name, item.id)
    return serialize_menu_item(item)


@menu_router.put("/items/{item_id}", response_model=MenuItemOut)
def update_menu_item(
    item_id: str,
    payload: MenuItemUpdate,
    db: Session = Depends(get_db),
    principal: AdminPrincipal = Depends(get_current_principal),
) -> MenuItemOut:
    item = get_owned_or_404(db, MenuItem, item_id, principal, "Menu item")

    if payload.category_id is not None:
        category = db.query(Category).filter(Category.id == payload.category_id).first()
        if not category or category.restaurant_id != item.restaurant_id:
            raise HTTPException(status_code=400, detail="Category does not belong to this restaurant")
        item.category_id = payload.category_id
    if payload.name is not None:
        item.name = payload.name
    if payload.description is not None:
        item.description = payload.description
    if payload.full_price is not None:
        item.full_price = payload.full_price
    if "half_price" in payload.model_fields_set:
        # null clears the half portion
        item.half_price = payload.half_price
    if payload.image_url is not None:
        item.image_url = payload.image_url
    if payload.is_veg is not None:
        item.is_veg = payload.is_veg
    if payload.is_available is not None:
        item.is_available = payload.is_available
    if payload.recommended_item_ids is not None:
        item.recommended_item_ids = payload.recommended_item_ids

    db.commit()
    db.refresh(item)
    logger.info("Updated menu item: %s (id=%s)", item.name, item.id)
    return serialize_menu_item(item)


@menu_router.delete("/items/{item_id}")
def delete_menu_item(
    item_id: str,
    db: Session = Depends(get_db),
    principal: AdminPrincipal = Depends(get_current_principal),
) -> Dict[str, bool]:
    item = get_owned_or_404(db, MenuItem, item_id, principal, "Menu item")
    name = item.name
    db.delete(item)
    db.commit()
    logger.info("Deleted menu item: %s (id=%s)", name, item_id)
    return {"success": True}
