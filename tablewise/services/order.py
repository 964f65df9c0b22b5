"""
Order Service for Tablewise
===========================

This module contains the order lifecycle: placing an order from a customer
cart, moving it through the kitchen flow, payment status, dashboard counters
and the open bill for a dine-in table.

Key Functions:
--------------
- place_order: Validate checkout, price the cart and persist the order
- transition_status: Apply a kitchen status change
- set_payment_status: Mark an order paid / failed / pending
- order_stats: Dashboard counters for a restaurant
- table_bill: Unpaid dine-in orders for one table
- platform_stats: Super admin counters across every tenant

Order Lifecycle:
----------------
    pending -> preparing -> ready -> delivered
       |           |          |
       +-----------+----------+--> cancelled

delivered and cancelled are terminal. Setting the current status again is
a no-op.

Pricing:
--------
Line prices and totals always come from pricing.build_cart; clients never
dictate prices. Totals are stored on the order (subtotal, tax, delivery fee,
total) so later menu changes do not alter historical orders.
"""

import logging
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..models import Order, OrderItem, Restaurant
from ..schemas.orders import ORDER_STATUSES, PAYMENT_STATUSES
from .pricing import build_cart, round_money, validate_checkout


logger = logging.getLogger(__name__)

DEFAULT_CUSTOMER_PHONE = "0000000000"

ALLOWED_TRANSITIONS: Dict[str, tuple] = {
    "pending": ("preparing", "cancelled"),
    "preparing": ("ready", "cancelled"),
    "ready": ("delivered", "cancelled"),
    "delivered": (),
    "cancelled": (),
}


class InvalidStatusTransition(Exception):
    """Raised when an order cannot move from its current status to the requested one."""

    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot change order status from {current} to {requested}")


def place_order(db: Session, restaurant: Restaurant, payload) -> Order:
    """
    Persist a customer order.

    Args:
        db: Database session
        restaurant: The restaurant the order is placed with
        payload: OrderCreate request body

    Returns:
        The committed Order with its items loaded

    Raises:
        CheckoutError: If the checkout form or cart is invalid
    """
    validate_checkout(
        restaurant,
        customer_name=payload.customer_name,
        order_type=payload.order_type,
        table_number=payload.table_number,
        address=payload.address,
        phone=payload.customer_phone,
    )

    cart = build_cart(
        db,
        restaurant,
        payload.items,
        payload.order_type,
        resolve_mystery_box=True,
    )

    order = Order(
        restaurant_id=restaurant.id,
        customer_name=payload.customer_name.strip(),
        customer_phone=(payload.customer_phone or "").strip() or DEFAULT_CUSTOMER_PHONE,
        subtotal=cart.totals.subtotal,
        tax_amount=cart.totals.tax,
        delivery_fee=cart.totals.delivery_fee,
        total_amount=cart.totals.total,
        status="pending",
        order_type=cart.order_type,
        table_number=payload.table_number,
        address=payload.address if cart.order_type == "delivery" else None,
        payment_status=payload.payment_status,
    )
    for line in cart.lines:
        order.items.append(OrderItem(
            menu_item_id=line.menu_item_id,
            menu_item_name=line.name,
            quantity=line.quantity,
            price=line.price,
            portion=line.portion,
            is_upsell=line.is_upsell,
            marketing_source=line.marketing_source,
        ))

    db.add(order)
    db.commit()
    db.refresh(order)
    logger.info(
        "Order %s placed for restaurant %s (%s, %d lines, total=%.2f)",
        order.id,
        restaurant.id,
        order.order_type,
        len(order.items),
        order.total_amount,
    )
    return order


def transition_status(db: Session, order: Order, requested: str) -> Order:
    """
    Move an order to a new kitchen status.

    Raises:
        ValueError: If the status is not a known order status
        InvalidStatusTransition: If the flow does not allow the move
    """
    requested = (requested or "").lower()
    if requested not in ORDER_STATUSES:
        raise ValueError(f"Invalid status: {requested}")

    current = (order.status or "pending").lower()
    if requested == current:
        return order
    if requested not in ALLOWED_TRANSITIONS.get(current, ()):
        raise InvalidStatusTransition(current, requested)

    order.status = requested
    db.commit()
    db.refresh(order)
    logger.info("Order %s status %s -> %s", order.id, current, requested)
    return order


def set_payment_status(db: Session, order: Order, requested: str) -> Order:
    requested = (requested or "").lower()
    if requested not in PAYMENT_STATUSES:
        raise ValueError(f"Invalid payment status: {requested}")
    order.payment_status = requested
    db.commit()
    db.refresh(order)
    logger.info("Order %s payment status set to %s", order.id, requested)
    return order


def order_stats(db: Session, restaurant_id: str) -> Dict[str, float]:
    """Counts per status plus revenue from non-cancelled orders."""
    rows = (
        db.query(Order.status, func.count(Order.id), func.coalesce(func.sum(Order.total_amount), 0.0))
        .filter(Order.restaurant_id == restaurant_id)
        .group_by(Order.status)
        .all()
    )
    stats: Dict[str, float] = {status: 0 for status in ORDER_STATUSES}
    total_orders = 0
    revenue = 0.0
    for status, count, amount in rows:
        status = (status or "pending").lower()
        stats[status] = stats.get(status, 0) + count
        total_orders += count
        if status != "cancelled":
            revenue += float(amount or 0.0)

    stats["total_orders"] = total_orders
    stats["total_revenue"] = round_money(revenue)
    return stats


def table_bill(db: Session, restaurant_id: str, table_number: str) -> List[Order]:
    """Dine-in orders at a table that are neither paid nor cancelled, oldest first."""
    return (
        db.query(Order)
        .filter(
            Order.restaurant_id == restaurant_id,
            Order.order_type == "dine-in",
            Order.table_number == table_number,
            Order.payment_status != "paid",
            Order.status != "cancelled",
        )
        .order_by(Order.created_at.asc())
        .all()
    )


def bill_total(orders: List[Order]) -> float:
    return round_money(sum(o.total_amount for o in orders))


def get_order(db: Session, order_id: str) -> Optional[Order]:
    return db.query(Order).filter(Order.id == order_id).first()


def platform_stats(db: Session) -> Dict[str, float]:
    """Super admin counters across every tenant."""
    total_restaurants = db.query(func.count(Restaurant.id)).scalar() or 0
    active_restaurants = (
        db.query(func.count(Restaurant.id)).filter(Restaurant.is_active.is_(True)).scalar() or 0
    )
    total_orders = db.query(func.count(Order.id)).scalar() or 0
    revenue = (
        db.query(func.coalesce(func.sum(Order.total_amount), 0.0))
        .filter(Order.status != "cancelled")
        .scalar()
    )
    return {
        "total_restaurants": total_restaurants,
        "active_restaurants": active_restaurants,
        "total_orders": total_orders,
        "total_revenue": round_money(float(revenue or 0.0)),
    }
