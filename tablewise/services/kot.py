"""
Kitchen Order Ticket rendering.

Produces a self-printing HTML page sized for 80mm thermal printers. The
dashboard opens it in a popup window; the page calls window.print() on load.
"""

import logging
import math
from datetime import datetime
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from .. import config
from ..models import Order, Restaurant
from .helpers import as_utc

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

_env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(["html"]),
)


def format_amount(amount: float) -> str:
    """Whole currency units rounded half-up (kitchen copies don't need paise)."""
    return str(math.floor(amount + 0.5))


def render_kot(order: Order, restaurant: Restaurant, printed_at: Optional[datetime] = None) -> str:
    """Render the kitchen copy for an order as HTML."""
    stamp = as_utc(printed_at or order.created_at) or datetime.now()
    lines = [
        {
            "quantity": line.quantity,
            "name": line.menu_item_name,
            "portion": line.portion or "full",
            "total": format_amount(line.price * line.quantity),
        }
        for line in order.items
    ]

    html = _env.get_template("kot.html").render(
        restaurant_name=restaurant.name,
        printed_at=stamp.strftime("%d/%m/%Y %I:%M %p"),
        short_id=order.id[-6:].upper(),
        order_type=(order.order_type or "").upper(),
        table_number=order.table_number,
        customer_name=order.customer_name,
        is_delivery=order.order_type == "delivery",
        address=order.address,
        phone=order.customer_phone,
        lines=lines,
        total=format_amount(order.total_amount),
        currency=config.CURRENCY_SYMBOL,
    )
    logger.debug("Rendered KOT for order %s", order.id)
    return html
