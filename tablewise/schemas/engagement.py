"""
Banner and Notification Schemas for Tablewise
=============================================

Banners are promotional images shown at the top of the customer menu.
Notifications are table-side requests (call a waiter, ask for the bill)
surfaced on the restaurant dashboard until staff resolve them.

Notification Types:
-------------------
- WAITER_CALL: Customer pressed "call waiter"
- BILL_REQUEST: Customer asked for the bill

Duplicate Suppression:
----------------------
A second identical request from the same table while the first is still
pending returns the existing notification instead of creating another.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator


NOTIFICATION_TYPES = ("WAITER_CALL", "BILL_REQUEST")


class BannerOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    restaurant_id: str
    image_url: str
    title: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None


class BannerCreate(BaseModel):
    # Optional so that missing values produce a 400 like the other tenant endpoints
    restaurant_id: Optional[str] = None
    image_url: Optional[str] = None
    title: Optional[str] = None
    is_active: Optional[bool] = None


class BannerUpdate(BaseModel):
    image_url: Optional[str] = None
    title: Optional[str] = None
    is_active: Optional[bool] = None


class NotificationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    restaurant_id: str
    table_number: str
    type: str
    status: str
    created_at: Optional[datetime] = None


class NotificationCreate(BaseModel):
    restaurant_id: Optional[str] = None
    table_number: Optional[str] = None
    type: str = "WAITER_CALL"

    @field_validator("table_number", mode="before")
    @classmethod
    def coerce_table_number(cls, v):
        if v is None:
            return None
        return str(v).strip() or None
