"""
Menu Schemas for Tablewise
==========================

Pydantic models for categories and menu items.

Endpoint Coverage:
------------------
- GET /menu/categories/{restaurant_id}: List categories
- POST /menu/categories: Create a category
- POST /menu/categories/bulk: Create several categories at once
- PUT /menu/categories/{id}: Update a category
- DELETE /menu/categories/{id}: Delete a category and its items
- GET /menu/items/{restaurant_id}: List menu items
- POST /menu/items: Create a menu item
- PUT /menu/items/{id}: Update a menu item
- DELETE /menu/items/{id}: Delete a menu item

Pricing:
--------
Items have a full_price and an optional half_price. Ordering a half portion
of an item without a half_price charges the full price.

Fake Discounts:
---------------
A category may carry fake_discount_pct. Items in that category are shown
with a struck-through fake_original_price computed from their real price;
the amount charged never changes.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CategoryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    restaurant_id: str
    name: str
    icon: str
    fake_discount_pct: float = 0.0


class CategoryCreate(BaseModel):
    restaurant_id: str
    name: str = Field(..., min_length=1)
    icon: Optional[str] = None
    fake_discount_pct: float = Field(0.0, ge=0, lt=100)


class CategoryBulkEntry(BaseModel):
    name: str = Field(..., min_length=1)
    icon: Optional[str] = None


class CategoryBulkCreate(BaseModel):
    restaurant_id: str
    categories: List[CategoryBulkEntry]


class CategoryUpdate(BaseModel):
    name: Optional[str] = None
    icon: Optional[str] = None
    fake_discount_pct: Optional[float] = Field(None, ge=0, lt=100)


class MenuItemOut(BaseModel):
    """
    Response model for a menu item.

    Attributes:
        fake_original_price: Inflated "was" price shown next to the real
            price when the item's category has a fake discount, else null.
    """
    model_config = ConfigDict(from_attributes=True)

    id: str
    restaurant_id: str
    category_id: str
    name: str
    description: Optional[str] = None
    full_price: float
    half_price: Optional[float] = None
    image_url: Optional[str] = None
    is_veg: bool
    is_available: bool
    recommended_item_ids: List[str] = []
    fake_original_price: Optional[float] = None


class CategoryWithItemsOut(CategoryOut):
    menu_items: List[MenuItemOut] = []


class MenuItemCreate(BaseModel):
    """
    Request model for creating a menu item.

    Example:
        {
            "restaurant_id": "5f0c...",
            "category_id": "a81e...",
            "name": "Paneer Tikka",
            "full_price": 280,
            "half_price": 160,
            "is_veg": true
        }
    """
    restaurant_id: str
    category_id: str
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    full_price: float = Field(..., ge=0)
    half_price: Optional[float] = Field(None, ge=0)
    image_url: Optional[str] = None
    is_veg: bool = True
    is_available: bool = True


class MenuItemUpdate(BaseModel):
    category_id: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    full_price: Optional[float] = Field(None, ge=0)
    half_price: Optional[float] = Field(None, ge=0)
    image_url: Optional[str] = None
    is_veg: Optional[bool] = None
    is_available: Optional[bool] = None
    recommended_item_ids: Optional[List[str]] = None
