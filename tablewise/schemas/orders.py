"""
Order Schemas for Tablewise
===========================

This module defines Pydantic models for placing orders, quoting carts and
managing orders from the restaurant order desk.

Endpoint Coverage:
------------------
- POST /cart/quote: Price a cart without placing it (customer)
- POST /orders: Place an order (customer)
- GET /orders/{restaurant_id}: Paginated order desk listing (admin)
- PATCH /orders/{id}/status: Move an order through the kitchen flow (admin)
- PATCH /orders/{id}/payment-status: Mark paid/failed (admin)
- GET /orders/{restaurant_id}/stats: Dashboard counters (admin)
- GET /orders/{restaurant_id}/table/{table}/bill: Open table bill (customer)

Order States:
-------------
- pending: Placed by the customer, not yet acknowledged
- preparing: Accepted by the kitchen
- ready: Ready for pickup/serving
- delivered: Handed to the customer (terminal)
- cancelled: Cancelled (terminal)

Order Types:
------------
- dine-in: Requires a table number when the restaurant asks for one
- takeaway: Collected at the counter
- delivery: Requires address and phone; may carry a delivery fee

Cart Lines:
-----------
A line references a menu item by id. The special id "mystery_box" buys the
restaurant's mystery box at its configured price. Prices are always taken
from the menu on the server; any client-side price is ignored.
"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .menu import MenuItemOut


ORDER_STATUSES = ("pending", "preparing", "ready", "delivered", "cancelled")
ORDER_TYPES = ("dine-in", "takeaway", "delivery")
PAYMENT_STATUSES = ("pending", "paid", "failed")

OrderType = Literal["dine-in", "takeaway", "delivery"]
PortionType = Literal["full", "half"]


class CartLineIn(BaseModel):
    """One line of a cart or order request."""
    id: str
    quantity: int = Field(1, ge=1)
    portion_type: PortionType = "full"
    is_upsell: bool = False
    marketing_source: Optional[str] = None


class CartQuoteRequest(BaseModel):
    restaurant_id: str
    order_type: OrderType = "dine-in"
    items: List[CartLineIn] = []


class CartLineOut(BaseModel):
    id: str
    name: str
    price: float
    quantity: int
    portion_type: str
    is_upsell: bool = False
    marketing_source: Optional[str] = None
    line_total: float


class CartQuoteOut(BaseModel):
    """
    Priced cart.

    Attributes:
        order_type: The order type actually used, which may differ from the
            requested one when the restaurant has it disabled.
        gift_applied: True when the subtotal reached the gift threshold and the
            free gift line is included.
    """
    items: List[CartLineOut]
    subtotal: float
    tax: float
    delivery_fee: float
    total: float
    order_type: str
    gift_applied: bool = False
    warnings: List[str] = []


class OrderCreate(BaseModel):
    """
    Request model for placing an order.

    restaurant_id is optional at the schema level so a missing value can be
    reported as a 400 with a clear message rather than a 422.
    """
    restaurant_id: Optional[str] = None
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    order_type: OrderType = "dine-in"
    table_number: Optional[str] = None
    address: Optional[str] = None
    payment_status: Literal["pending", "paid", "failed"] = "pending"
    items: List[CartLineIn] = []

    @field_validator("table_number", mode="before")
    @classmethod
    def coerce_table_number(cls, v):
        """Tables are often sent as numbers by QR menu clients."""
        if v is None:
            return None
        return str(v).strip() or None


class OrderItemOut(BaseModel):
    id: Optional[str] = None
    name: str
    price: float
    quantity: int
    portion_type: str
    is_upsell: bool = False
    marketing_source: Optional[str] = None


class OrderOut(BaseModel):
    """
    Formatted order as shown on the order desk and the customer tracker.

    timestamp mirrors created_at for clients that sort on it.
    """
    model_config = ConfigDict(from_attributes=True)

    id: str
    restaurant_id: str
    customer_name: str
    customer_phone: str
    subtotal: float
    tax_amount: float
    delivery_fee: float
    total_amount: float
    status: str
    order_type: str
    table_number: Optional[str] = None
    address: Optional[str] = None
    payment_status: str
    created_at: Optional[datetime] = None
    timestamp: Optional[datetime] = None
    items: List[OrderItemOut] = []


class OrderListResponse(BaseModel):
    """Paginated response for the order desk."""
    items: List[OrderOut]
    page: int
    page_size: int
    total: int
    has_next: bool


class OrderStatusUpdate(BaseModel):
    status: str


class PaymentStatusUpdate(BaseModel):
    status: str


class OrderStatsOut(BaseModel):
    total_orders: int
    total_revenue: float
    pending: int = 0
    preparing: int = 0
    ready: int = 0
    delivered: int = 0
    cancelled: int = 0


class TableBillOut(BaseModel):
    table_number: str
    orders: List[OrderOut]
    total: float


class DessertPromptOut(BaseModel):
    enabled: bool
    minutes: int
    due_at: Optional[datetime] = None
    is_due: bool = False
    items: List[MenuItemOut] = []
