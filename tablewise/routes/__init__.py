"""
Routes Package for Tablewise
============================

This package contains all API route definitions organized by domain. Each module
defines a FastAPI APIRouter with related endpoints grouped together.

Architecture Overview:
----------------------
**Customer-Facing Routes (no auth):**
- restaurants.py: Public menu by slug
- cart.py: Cart pricing
- orders.py: Order placement and table bill
- promotions.py: Popups, gift, mystery box, dessert prompt
- banners.py: Menu carousel
- notifications.py: Waiter call / bill request
- ai_upsell.py: Cart recommendations

**Restaurant Admin Routes (owner or super admin):**
- menu.py, marketing.py, orders.py (order desk, KOT), banners.py,
  notifications.py, upload.py, ai_upsell.py (sync, flash items),
  ai_assistants.py (analyst), restaurants.py (settings, QR)

**Super Admin Routes:**
- restaurants.py: Tenant management and platform stats
- query.py: SQL console
- ai_assistants.py: Master AI

Router Registration:
--------------------
create_app() registers every router under two prefixes:
1. /api/v1/* - Versioned API (recommended)
2. /api/* - Unversioned paths used by existing clients

Route Dependencies:
-------------------
Common dependencies are injected via FastAPI's Depends():
- get_db: Database session for queries
- verify_admin_credentials: Super admin authentication
- get_current_principal: Either admin role, checked per tenant with
  ensure_restaurant_access
- limiter.limit(): Rate limiting on anonymous and LLM-backed endpoints

Error Handling:
---------------
Routes raise HTTPException for error conditions:
- 400: Bad request (validation errors)
- 401: Unauthorized (invalid credentials)
- 403: Forbidden (other tenant, disabled feature, blocked SQL)
- 404: Not found (invalid ID)
- 409: Conflict (invalid order status transition)
- 429: Too many requests (rate limited)
- 500: LLM failure
- 503: Service unavailable (missing configuration)
"""

from .auth import auth_router
from .restaurants import restaurants_router
from .menu import menu_router
from .cart import cart_router
from .promotions import promotions_router, dessert_router
from .marketing import marketing_router
from .orders import orders_router
from .banners import banners_router
from .notifications import notifications_router
from .upload import upload_router
from .query import query_router
from .ai_upsell import ai_upsell_router
from .ai_assistants import ai_router

__all__ = [
    "auth_router",
    "restaurants_router",
    "menu_router",
    "cart_router",
    "promotions_router",
    "dessert_router",
    "marketing_router",
    "orders_router",
    "banners_router",
    "notifications_router",
    "upload_router",
    "query_router",
    "ai_upsell_router",
    "ai_router",
]

ALL_ROUTERS = [
    auth_router,
    restaurants_router,
    menu_router,
    cart_router,
    promotions_router,
    dessert_router,
    marketing_router,
    orders_router,
    banners_router,
    notifications_router,
    upload_router,
    query_router,
    ai_upsell_router,
    ai_router,
]
