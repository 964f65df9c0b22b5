"""
Cart Routes for Tablewise
=========================

- POST /cart/quote: Price a cart without placing an order (no auth)

The customer menu calls this whenever the cart changes so the totals it
shows (tax, delivery fee, gift, mystery box) are exactly what order
placement will charge. Nothing is written to the database.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from ..config import get_rate_limit_public
from ..db import get_db
from ..rate_limit import limiter
from ..schemas.orders import CartLineOut, CartQuoteOut, CartQuoteRequest
from ..services.helpers import get_restaurant_or_404
from ..services.pricing import CheckoutError, build_cart, resolve_order_type


logger = logging.getLogger(__name__)

cart_router = APIRouter(prefix="/cart", tags=["Cart"])


@cart_router.post("/quote", response_model=CartQuoteOut)
@limiter.limit(get_rate_limit_public)
def quote_cart(
    request: Request,
    payload: CartQuoteRequest,
    db: Session = Depends(get_db),
) -> CartQuoteOut:
    restaurant = get_restaurant_or_404(db, payload.restaurant_id)
    order_type = resolve_order_type(restaurant, payload.order_type)

    try:
        cart = build_cart(db, restaurant, payload.items, order_type)
    except CheckoutError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return CartQuoteOut(
        items=[
            CartLineOut(
                id=line.menu_item_id,
                name=line.name,
                price=line.price,
                quantity=line.quantity,
                portion_type=line.portion,
                is_upsell=line.is_upsell,
                marketing_source=line.marketing_source,
                line_total=line.line_total,
            )
            for line in cart.lines
        ],
        subtotal=cart.totals.subtotal,
        tax=cart.totals.tax,
        delivery_fee=cart.totals.delivery_fee,
        total=cart.totals.total,
        order_type=cart.order_type,
        gift_applied=cart.gift_applied,
        warnings=cart.warnings,
    )
