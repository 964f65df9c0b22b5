"""
Order Routes for Tablewise
==========================

Order placement for customers and the order desk for restaurant staff.

Endpoints:
----------
- POST /orders: Place an order (no auth, rate limited)
- GET /orders/{restaurant_id}: Paginated order desk, newest first
- PATCH /orders/{id}/status: Move an order through the kitchen flow
- PATCH /orders/{id}/payment-status: Mark paid / failed / pending
- GET /orders/{restaurant_id}/stats: Counters for the dashboard header
- GET /orders/{restaurant_id}/table/{table_number}/bill: Open bill for a table (no auth)
- GET /orders/{id}/kot: Printable Kitchen Order Ticket (HTML)

Status Changes:
---------------
Unknown statuses return 400. Known statuses that the order cannot move to
from where it is (e.g. delivered -> pending) return 409.

Pagination:
-----------
    GET /orders/{restaurant_id}?page=1&page_size=50&status=pending

Response:
    {
        "items": [...],
        "page": 1,
        "page_size": 50,
        "total": 120,
        "has_next": true
    }
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from ..auth import AdminPrincipal, ensure_restaurant_access, get_current_principal
from ..config import get_rate_limit_public
from ..db import get_db
from ..models import Order, Restaurant
from ..rate_limit import limiter
from ..schemas.orders import (
    ORDER_STATUSES,
    OrderCreate,
    OrderListResponse,
    OrderOut,
    OrderStatsOut,
    OrderStatusUpdate,
    PaymentStatusUpdate,
    TableBillOut,
)
from ..services import order as order_service
from ..services.helpers import format_order, get_owned_or_404, get_restaurant_or_404
from ..services.kot import render_kot
from ..services.pricing import CheckoutError


logger = logging.getLogger(__name__)

orders_router = APIRouter(prefix="/orders", tags=["Orders"])


# =============================================================================
# Customer Endpoints
# =============================================================================

@orders_router.post("", response_model=OrderOut)
@limiter.limit(get_rate_limit_public)
def create_order(
    request: Request,
    payload: OrderCreate,
    db: Session = Depends(get_db),
) -> OrderOut:
    """Place an order. Prices are computed on the server from the menu."""
    if not payload.restaurant_id:
        raise HTTPException(status_code=400, detail="restaurant_id is required")
    restaurant = db.query(Restaurant).filter(Restaurant.id == payload.restaurant_id).first()
    if not restaurant or not restaurant.is_active:
        raise HTTPException(status_code=400, detail="Unknown restaurant")

    try:
        order = order_service.place_order(db, restaurant, payload)
    except CheckoutError as e:
        db.rollback()
        logger.info("Rejected order for restaurant %s: %s", restaurant.id, e)
        raise HTTPException(status_code=400, detail=str(e))

    return format_order(order)


@orders_router.get("/{restaurant_id}/table/{table_number}/bill", response_model=TableBillOut)
def get_table_bill(
    restaurant_id: str,
    table_number: str,
    db: Session = Depends(get_db),
) -> TableBillOut:
    """Everything a dine-in table has ordered and not yet paid for."""
    get_restaurant_or_404(db, restaurant_id)
    orders = order_service.table_bill(db, restaurant_id, table_number)
    return TableBillOut(
        table_number=table_number,
        orders=[format_order(o) for o in orders],
        total=order_service.bill_total(orders),
    )


# =============================================================================
# Order Desk Endpoints
# =============================================================================

@orders_router.get("/{restaurant_id}", response_model=OrderListResponse)
def list_orders(
    restaurant_id: str,
    status: Optional[str] = Query(None, description="Filter by status"),
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db),
    principal: AdminPrincipal = Depends(get_current_principal),
) -> OrderListResponse:
    ensure_restaurant_access(principal, restaurant_id)

    query = db.query(Order).filter(Order.restaurant_id == restaurant_id)
    if status:
        status = status.lower()
        if status not in ORDER_STATUSES:
            raise HTTPException(status_code=400, detail=f"Invalid status: {status}")
        query = query.filter(Order.status == status)

    total = query.count()
    orders = (
        query.order_by(Order.created_at.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return OrderListResponse(
        items=[format_order(o) for o in orders],
        page=page,
        page_size=page_size,
        total=total,
        has_next=page * page_size < total,
    )


@orders_router.get("/{restaurant_id}/stats", response_model=OrderStatsOut)
def get_order_stats(
    restaurant_id: str,
    db: Session = Depends(get_db),
    principal: AdminPrincipal = Depends(get_current_principal),
) -> OrderStatsOut:
    ensure_restaurant_access(principal, restaurant_id)
    return OrderStatsOut(**order_service.order_stats(db, restaurant_id))


@orders_router.patch("/{order_id}/status", response_model=OrderOut)
def update_order_status(
    order_id: str,
    payload: OrderStatusUpdate,
    db: Session = Depends(get_db),
    principal: AdminPrincipal = Depends(get_current_principal),
) -> OrderOut:
    order = get_owned_or_404(db, Order, order_id, principal, "Order")
    try:
        order = order_service.transition_status(db, order, payload.status)
    except order_service.InvalidStatusTransition as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return format_order(order)


@orders_router.patch("/{order_id}/payment-status", response_model=OrderOut)
def update_payment_status(
    order_id: str,
    payload: PaymentStatusUpdate,
    db: Session = Depends(get_db),
    principal: AdminPrincipal = Depends(get_current_principal),
) -> OrderOut:
    order = get_owned_or_404(db, Order, order_id, principal, "Order")
    try:
        order = order_service.set_payment_status(db, order, payload.status)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return format_order(order)


@orders_router.get("/{order_id}/kot", response_class=HTMLResponse)
def print_kot(
    order_id: str,
    db: Session = Depends(get_db),
    principal: AdminPrincipal = Depends(get_current_principal),
) -> HTMLResponse:
    """Kitchen Order Ticket for an 80mm thermal printer; prints on load."""
    order = get_owned_or_404(db, Order, order_id, principal, "Order")
    restaurant = get_restaurant_or_404(db, order.restaurant_id)
    return HTMLResponse(content=render_kot(order, restaurant))
