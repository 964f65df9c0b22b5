"""
Cart pricing and checkout validation.

Prices are always resolved from the menu on the server. A cart goes through:

1. Line pricing: each line becomes a PricedLine at the menu price for its
   portion (half falls back to full when the item has no half price).
2. Mystery box lines: charged at the restaurant's mystery box price.
3. Subtotal, then the gift reward line when the subtotal reaches the
   restaurant's gift threshold.
4. Tax and delivery fee from the restaurant settings.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from ..models import MenuItem, Restaurant
from .promotions import (
    MYSTERY_BOX_ID,
    MYSTERY_BOX_NAME,
    MYSTERY_BOX_SOURCE,
    REWARD_SOURCE,
    get_gift_item,
    get_or_create_mystery_box_item,
    gift_eligible,
)

logger = logging.getLogger(__name__)

ORDER_TYPE_PREFERENCE = ("dine-in", "takeaway", "delivery")


class CheckoutError(ValueError):
    """Raised when a cart or checkout form cannot be accepted."""


def round_money(amount: float) -> float:
    """Round to 2 decimal places for currency."""
    return round(amount, 2)


@dataclass
class CartTotals:
    subtotal: float
    tax: float
    delivery_fee: float

    @property
    def total(self) -> float:
        return round_money(self.subtotal + self.tax + self.delivery_fee)


@dataclass
class PricedLine:
    menu_item_id: Optional[str]
    name: str
    price: float
    quantity: int
    portion: str = "full"
    is_upsell: bool = False
    marketing_source: Optional[str] = None

    @property
    def line_total(self) -> float:
        return round_money(self.price * self.quantity)


@dataclass
class PricedCart:
    lines: List[PricedLine]
    totals: CartTotals
    order_type: str
    gift_applied: bool = False
    warnings: List[str] = field(default_factory=list)


# =============================================================================
# Prices and Totals
# =============================================================================

def portion_price(item: MenuItem, portion: str) -> float:
    """Half portions use half_price when the item has one, else full_price."""
    if portion == "half" and item.half_price is not None:
        return float(item.half_price)
    return float(item.full_price)


def calculate_totals(restaurant: Restaurant, subtotal: float, order_type: str) -> CartTotals:
    """
    Apply tax and delivery charges to a subtotal.

    Delivery is charged only on delivery orders with charges enabled, and is
    waived once the subtotal exceeds a positive free-delivery threshold.
    """
    tax = 0.0
    if restaurant.tax_enabled:
        tax = subtotal * (restaurant.tax_percentage or 0.0) / 100

    delivery_fee = 0.0
    if order_type == "delivery" and restaurant.delivery_charges_enabled:
        threshold = restaurant.delivery_free_threshold or 0.0
        if not (threshold > 0 and subtotal > threshold):
            delivery_fee = restaurant.delivery_charges or 0.0

    return CartTotals(
        subtotal=round_money(subtotal),
        tax=round_money(tax),
        delivery_fee=round_money(delivery_fee),
    )


def enabled_order_types(restaurant: Restaurant) -> List[str]:
    flags = {
        "dine-in": restaurant.dine_in_enabled,
        "takeaway": restaurant.takeaway_enabled,
        "delivery": restaurant.delivery_enabled,
    }
    return [t for t in ORDER_TYPE_PREFERENCE if flags[t]]


def resolve_order_type(restaurant: Restaurant, requested: Optional[str]) -> str:
    """Use the requested type if enabled, else the first enabled one."""
    enabled = enabled_order_types(restaurant)
    if requested in enabled:
        return requested
    return enabled[0] if enabled else "dine-in"


# =============================================================================
# Checkout Validation
# =============================================================================

def validate_checkout(
    restaurant: Restaurant,
    customer_name: Optional[str],
    order_type: str,
    table_number: Optional[str] = None,
    address: Optional[str] = None,
    phone: Optional[str] = None,
) -> None:
    """Raise CheckoutError describing the first problem with a checkout form."""
    if not customer_name or not customer_name.strip():
        raise CheckoutError("Customer name is required")

    if order_type not in enabled_order_types(restaurant):
        raise CheckoutError(f"Order type '{order_type}' is not available")

    if order_type == "dine-in" and restaurant.require_table_number and not table_number:
        raise CheckoutError("Table number is required for dine-in orders")

    if order_type == "delivery":
        if not address or not address.strip():
            raise CheckoutError("Delivery address is required")
        if not phone or not phone.strip():
            raise CheckoutError("Phone number is required for delivery")


# =============================================================================
# Cart Building
# =============================================================================

def _is_reward_line(line, restaurant: Restaurant) -> bool:
    return (
        line.marketing_source == REWARD_SOURCE
        and restaurant.gift_item_id is not None
        and line.id == restaurant.gift_item_id
    )


def build_cart(
    db: Session,
    restaurant: Restaurant,
    lines: Iterable,
    order_type: str,
    resolve_mystery_box: bool = False,
) -> PricedCart:
    """
    Price a cart for a restaurant.

    Args:
        db: Database session
        restaurant: Owning restaurant
        lines: Objects with id, quantity, portion_type, is_upsell, marketing_source
        order_type: dine-in / takeaway / delivery
        resolve_mystery_box: When placing an order, mystery box lines are
            bound to the restaurant's "Mystery Box" menu row (created on
            demand). Quotes leave them unbound so they never write.

    Raises:
        CheckoutError: Empty cart, unknown/foreign item, unavailable item,
            or mystery box ordered while disabled.
    """
    priced: List[PricedLine] = []
    requested_gift = False

    for line in lines:
        if line.id == MYSTERY_BOX_ID:
            if not restaurant.mystery_box_enabled:
                raise CheckoutError("Mystery box is not available")
            item_id = None
            if resolve_mystery_box:
                item_id = get_or_create_mystery_box_item(db, restaurant, restaurant.mystery_box_price).id
            priced.append(PricedLine(
                menu_item_id=item_id or MYSTERY_BOX_ID,
                name=MYSTERY_BOX_NAME,
                price=float(restaurant.mystery_box_price),
                quantity=line.quantity,
                portion="full",
                is_upsell=True,
                marketing_source=MYSTERY_BOX_SOURCE,
            ))
            continue

        if _is_reward_line(line, restaurant):
            # Re-added below only if the subtotal still qualifies
            requested_gift = True
            continue

        item = (
            db.query(MenuItem)
            .filter(MenuItem.id == line.id, MenuItem.restaurant_id == restaurant.id)
            .first()
        )
        if not item:
            raise CheckoutError(f"Unknown menu item: {line.id}")
        if not item.is_available:
            raise CheckoutError(f"{item.name} is currently unavailable")

        priced.append(PricedLine(
            menu_item_id=item.id,
            name=item.name,
            price=portion_price(item, line.portion_type),
            quantity=line.quantity,
            portion=line.portion_type,
            is_upsell=bool(line.is_upsell),
            marketing_source=line.marketing_source,
        ))

    if not priced:
        raise CheckoutError("Cart is empty")

    subtotal = sum(p.price * p.quantity for p in priced)
    warnings: List[str] = []

    gift_applied = False
    if gift_eligible(restaurant, subtotal):
        gift = get_gift_item(db, restaurant)
        if gift is not None and gift.is_available:
            priced.append(PricedLine(
                menu_item_id=gift.id,
                name=gift.name,
                price=0.0,
                quantity=1,
                portion="full",
                is_upsell=True,
                marketing_source=REWARD_SOURCE,
            ))
            gift_applied = True
        else:
            logger.warning("Gift item %s missing or unavailable for restaurant %s",
                           restaurant.gift_item_id, restaurant.id)
    elif requested_gift:
        warnings.append("Gift removed: cart total is below the gift threshold")
        logger.info("Dropped reward line below threshold for restaurant %s", restaurant.id)

    totals = calculate_totals(restaurant, subtotal, order_type)
    return PricedCart(
        lines=priced,
        totals=totals,
        order_type=order_type,
        gift_applied=gift_applied,
        warnings=warnings,
    )
