"""
Services Package for Tablewise
==============================

Business logic shared by the routes. Routes translate the exceptions raised
here into HTTP errors; services themselves know nothing about HTTP except
the 404/403 lookups in helpers.

Available Services:
-------------------
- **helpers**: Tenant-scoped lookups and response serializers
- **pricing**: Cart pricing, totals and checkout validation
- **promotions**: Fake discounts, gift threshold, mystery box, popups, dessert prompt
- **order**: Order placement, status flow, stats, table bill
- **kot**: Kitchen Order Ticket rendering
- **qr**: Table QR codes
- **query_console**: Super admin SQL console
- **upsell**: AI cross-sell sync and popup item selection
- **assistants**: Analyst, SQL generation and master AI

Usage:
------
    from tablewise.services.pricing import build_cart, CheckoutError
    from tablewise.services import order, promotions
"""

from . import helpers
from . import pricing
from . import promotions
from . import order
from . import kot
from . import qr
from . import query_console
from . import upsell
from . import assistants

__all__ = [
    "helpers",
    "pricing",
    "promotions",
    "order",
    "kot",
    "qr",
    "query_console",
    "upsell",
    "assistants",
]
