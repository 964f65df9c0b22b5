"""
Schemas Package for Tablewise
=============================

This package contains all Pydantic models (schemas) used for API request
validation and response serialization. Response models control exactly
what is returned to clients; in particular no restaurant response carries
login credentials.

Schema Organization:
--------------------
- **restaurants.py**: Tenant management, public menu, login
- **menu.py**: Category and menu item CRUD
- **orders.py**: Cart quotes, order placement and the order desk
- **marketing.py**: Marketing rules and promotion configuration
- **engagement.py**: Banners and table notifications
- **query.py**: Super admin SQL console
- **ai.py**: AI upsell, analyst and master assistant

Naming Conventions:
-------------------
- *Out: Response models
- *Create: Request body for creating a record
- *Update: Request body for partial updates (all fields optional)
- *Request: Request body for action endpoints
"""

from .restaurants import (
    RestaurantOut,
    RestaurantSummaryOut,
    RestaurantCreate,
    RestaurantUpdate,
    RestaurantSettingsUpdate,
    PublicMenuOut,
    PlatformStatsOut,
    QRCodeOut,
    LoginOut,
)
from .menu import (
    CategoryOut,
    CategoryCreate,
    CategoryBulkCreate,
    CategoryUpdate,
    CategoryWithItemsOut,
    MenuItemOut,
    MenuItemCreate,
    MenuItemUpdate,
)
from .orders import (
    CartLineIn,
    CartQuoteRequest,
    CartQuoteOut,
    OrderCreate,
    OrderOut,
    OrderItemOut,
    OrderListResponse,
    OrderStatusUpdate,
    PaymentStatusUpdate,
    OrderStatsOut,
    TableBillOut,
    DessertPromptOut,
)
from .marketing import (
    MarketingRuleOut,
    MarketingRuleCreate,
    MarketingRuleUpdate,
    PromotionConfigOut,
    MysteryBoxRevealOut,
)
from .engagement import (
    BannerOut,
    BannerCreate,
    BannerUpdate,
    NotificationOut,
    NotificationCreate,
)
from .query import (
    PredefinedQueryOut,
    SchemaOut,
    QueryExecuteRequest,
    QueryResultOut,
    GenerateSqlRequest,
    GenerateSqlOut,
)
from .ai import (
    RecommendRequest,
    SyncMenuRequest,
    PickFlashItemsRequest,
    PickFlashItemsOut,
    MessageOut,
    AnalystRequest,
    AnalystOut,
    MasterRequest,
    MasterAction,
    ApplyActionOut,
)

__all__ = [
    # Restaurants
    "RestaurantOut",
    "RestaurantSummaryOut",
    "RestaurantCreate",
    "RestaurantUpdate",
    "RestaurantSettingsUpdate",
    "PublicMenuOut",
    "PlatformStatsOut",
    "QRCodeOut",
    "LoginOut",
    # Menu
    "CategoryOut",
    "CategoryCreate",
    "CategoryBulkCreate",
    "CategoryUpdate",
    "CategoryWithItemsOut",
    "MenuItemOut",
    "MenuItemCreate",
    "MenuItemUpdate",
    # Orders
    "CartLineIn",
    "CartQuoteRequest",
    "CartQuoteOut",
    "OrderCreate",
    "OrderOut",
    "OrderItemOut",
    "OrderListResponse",
    "OrderStatusUpdate",
    "PaymentStatusUpdate",
    "OrderStatsOut",
    "TableBillOut",
    "DessertPromptOut",
    # Marketing
    "MarketingRuleOut",
    "MarketingRuleCreate",
    "MarketingRuleUpdate",
    "PromotionConfigOut",
    "MysteryBoxRevealOut",
    # Engagement
    "BannerOut",
    "BannerCreate",
    "BannerUpdate",
    "NotificationOut",
    "NotificationCreate",
    # Query console
    "PredefinedQueryOut",
    "SchemaOut",
    "QueryExecuteRequest",
    "QueryResultOut",
    "GenerateSqlRequest",
    "GenerateSqlOut",
    # AI
    "RecommendRequest",
    "SyncMenuRequest",
    "PickFlashItemsRequest",
    "PickFlashItemsOut",
    "MessageOut",
    "AnalystRequest",
    "AnalystOut",
    "MasterRequest",
    "MasterAction",
    "ApplyActionOut",
]
