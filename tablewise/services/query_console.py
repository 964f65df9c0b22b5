"""
Super Admin Query Console
=========================

Lets the platform operator run canned reports or ad-hoc SQL against the
database from the super admin dashboard.

Safety Rules:
-------------
- Statements containing ``;`` are always rejected, so one request can never
  chain several statements.
- With QUERY_CONSOLE_READ_ONLY (the default) only SELECT / WITH statements
  that contain no data-modifying keyword are accepted.

Predefined Reports:
-------------------
The canned reports are written in SQL that runs on both PostgreSQL and
SQLite. Anything time-relative (today, last 7 days, now) is passed as a
bound parameter instead of using dialect-specific date arithmetic.
"""

import logging
import re
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import config

logger = logging.getLogger(__name__)

_WRITE_KEYWORDS = re.compile(
    r"\b(insert|update|delete|drop|alter|truncate|create|grant|revoke|merge)\b",
    re.IGNORECASE,
)
_LEADING_KEYWORD = re.compile(r"^\s*\(*\s*([a-zA-Z]+)")


class QueryBlockedError(Exception):
    """Raised when a statement fails the console safety rules."""


class QueryExecutionError(Exception):
    """Raised when the database rejects a statement."""


DB_SCHEMA = """
Tables in the database:

1. restaurants - id, name, slug, owner_name, email, phone, username, is_active, business_type (restaurant/hotel), address, logo_url, tax_enabled, tax_percentage, delivery_charges_enabled, delivery_charges, delivery_free_threshold, dine_in_enabled, takeaway_enabled, delivery_enabled, require_table_number, ai_upsell_enabled, mystery_box_enabled, mystery_box_price, gift_threshold, trial_end_date, created_at

2. categories - id, restaurant_id, name, icon, fake_discount_pct

3. menu_items - id, restaurant_id, category_id, name, description, full_price, half_price, image_url, is_veg, is_available, recommended_item_ids

4. orders - id, restaurant_id, customer_name, customer_phone, subtotal, tax_amount, delivery_fee, total_amount, status (pending/preparing/ready/delivered/cancelled), order_type (dine-in/takeaway/delivery), table_number, address, payment_status (pending/paid/failed), created_at

5. order_items - id, order_id, menu_item_id, menu_item_name, quantity, price, portion (full/half), is_upsell, marketing_source

6. notifications - id, restaurant_id, table_number, type (WAITER_CALL/BILL_REQUEST), status (pending/resolved), created_at

7. banners - id, restaurant_id, image_url, title, is_active, created_at

8. marketing_rules - id, restaurant_id, type, trigger_item_id, target_item_id, discount_pct, is_active, is_ai_managed, created_at
"""


def _start_of_today(now: datetime) -> datetime:
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


@dataclass
class PredefinedQuery:
    label: str
    sql: str
    description: str
    params: Callable[[datetime], Dict[str, Any]] = field(default=lambda now: {})


PREDEFINED_QUERIES: Dict[str, PredefinedQuery] = {
    "all-restaurants": PredefinedQuery(
        label="All Restaurants & Hotels",
        sql=(
            "SELECT name, owner_name, email, phone, business_type, is_active, trial_end_date, created_at "
            "FROM restaurants ORDER BY created_at DESC"
        ),
        description="List all registered businesses with their details",
    ),
    "total-revenue": PredefinedQuery(
        label="Revenue by Restaurant",
        sql=(
            "SELECT r.name, r.business_type, COUNT(o.id) AS total_orders, "
            "COALESCE(SUM(o.total_amount), 0) AS total_revenue "
            "FROM restaurants r LEFT JOIN orders o ON r.id = o.restaurant_id AND o.payment_status = 'paid' "
            "GROUP BY r.id, r.name, r.business_type ORDER BY total_revenue DESC"
        ),
        description="Revenue breakdown per restaurant/hotel",
    ),
    "orders-today": PredefinedQuery(
        label="Today's Orders",
        sql=(
            "SELECT r.name, o.customer_name, o.total_amount, o.status, o.order_type, o.table_number, "
            "o.payment_status, o.created_at "
            "FROM orders o JOIN restaurants r ON r.id = o.restaurant_id "
            "WHERE o.created_at >= :today ORDER BY o.created_at DESC"
        ),
        description="All orders placed today across all businesses",
        params=lambda now: {"today": _start_of_today(now)},
    ),
    "menu-overview": PredefinedQuery(
        label="Menu Items Overview",
        sql=(
            "SELECT r.name AS restaurant, COUNT(m.id) AS total_items, "
            "SUM(CASE WHEN m.is_veg THEN 1 ELSE 0 END) AS veg_items, "
            "SUM(CASE WHEN m.is_veg THEN 0 ELSE 1 END) AS nonveg_items, "
            "SUM(CASE WHEN m.is_available THEN 1 ELSE 0 END) AS available, "
            "ROUND(CAST(AVG(m.full_price) AS NUMERIC), 0) AS avg_price "
            "FROM menu_items m JOIN restaurants r ON r.id = m.restaurant_id "
            "GROUP BY r.id, r.name ORDER BY total_items DESC"
        ),
        description="Menu statistics per restaurant",
    ),
    "top-items": PredefinedQuery(
        label="Top Selling Items",
        sql=(
            "SELECT oi.menu_item_name AS item_name, r.name AS restaurant, COUNT(oi.id) AS times_ordered, "
            "SUM(oi.quantity) AS total_qty, SUM(oi.price * oi.quantity) AS total_revenue "
            "FROM order_items oi JOIN orders o ON o.id = oi.order_id "
            "JOIN restaurants r ON r.id = o.restaurant_id "
            "GROUP BY oi.menu_item_name, r.name ORDER BY total_qty DESC LIMIT 20"
        ),
        description="Most ordered items across all businesses",
    ),
    "trial-status": PredefinedQuery(
        label="Trial Status",
        sql=(
            "SELECT name, business_type, trial_end_date, "
            "CASE WHEN trial_end_date IS NULL THEN 'No Trial' "
            "WHEN trial_end_date < :now THEN 'EXPIRED' ELSE 'ACTIVE' END AS trial_status, is_active "
            "FROM restaurants "
            "ORDER BY CASE WHEN trial_end_date IS NULL THEN 1 ELSE 0 END, trial_end_date ASC"
        ),
        description="Trial expiry status for all businesses",
        params=lambda now: {"now": now},
    ),
    "daily-stats": PredefinedQuery(
        label="Daily Order Stats (7 days)",
        sql=(
            "SELECT DATE(o.created_at) AS date, COUNT(o.id) AS total_orders, "
            "COALESCE(SUM(o.total_amount), 0) AS total_revenue, "
            "COUNT(CASE WHEN o.payment_status = 'paid' THEN 1 END) AS paid_orders "
            "FROM orders o WHERE o.created_at >= :since "
            "GROUP BY DATE(o.created_at) ORDER BY date DESC"
        ),
        description="Order & revenue stats for the last 7 days",
        params=lambda now: {"since": _start_of_today(now) - timedelta(days=7)},
    ),
    "customer-insights": PredefinedQuery(
        label="Top Customers",
        sql=(
            "SELECT o.customer_name, o.customer_phone, COUNT(o.id) AS total_orders, "
            "SUM(o.total_amount) AS total_spent, MAX(o.created_at) AS last_order "
            "FROM orders o WHERE o.customer_name IS NOT NULL AND o.customer_name != '' "
            "GROUP BY o.customer_name, o.customer_phone ORDER BY total_orders DESC LIMIT 20"
        ),
        description="Most frequent customers across all businesses",
    ),
    "order-types": PredefinedQuery(
        label="Order Type Breakdown",
        sql=(
            "SELECT r.name, r.business_type, o.order_type, COUNT(o.id) AS count, "
            "COALESCE(SUM(o.total_amount), 0) AS revenue "
            "FROM orders o JOIN restaurants r ON r.id = o.restaurant_id "
            "GROUP BY r.name, r.business_type, o.order_type ORDER BY r.name, count DESC"
        ),
        description="Dine-in vs Takeaway vs Delivery breakdown",
    ),
    "notifications": PredefinedQuery(
        label="Recent Notifications",
        sql=(
            "SELECT r.name, n.table_number, n.type, n.status, n.created_at "
            "FROM notifications n JOIN restaurants r ON r.id = n.restaurant_id "
            "ORDER BY n.created_at DESC LIMIT 30"
        ),
        description="Latest waiter calls and bill requests",
    ),
}


def list_predefined() -> List[Dict[str, str]]:
    return [
        {"key": key, "label": q.label, "description": q.description}
        for key, q in PREDEFINED_QUERIES.items()
    ]


def check_query_safety(sql: str, read_only: Optional[bool] = None) -> None:
    """
    Raise QueryBlockedError if the statement may not run.

    Args:
        sql: Statement text
        read_only: Override QUERY_CONSOLE_READ_ONLY (for tests)
    """
    if read_only is None:
        read_only = config.QUERY_CONSOLE_READ_ONLY

    if ";" in sql:
        raise QueryBlockedError("Semicolons not allowed (prevents query chaining)")

    if read_only:
        match = _LEADING_KEYWORD.match(sql)
        keyword = match.group(1).lower() if match else ""
        if keyword not in ("select", "with") or _WRITE_KEYWORDS.search(sql):
            raise QueryBlockedError("Only read-only SELECT queries are allowed")


def _jsonable(value: Any) -> Any:
    if isinstance(value, Decimal):
        return float(value)
    return value


def execute_query(
    db: Session,
    query_key: Optional[str] = None,
    custom_sql: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Run a predefined report or custom SQL.

    Returns:
        {"label", "sql", "data", "row_count", "execution_time"}

    Raises:
        ValueError: Neither query_key nor custom_sql supplied
        QueryBlockedError: Statement rejected by the safety rules
        QueryExecutionError: Database error while executing
    """
    now = now or datetime.now(timezone.utc)
    params: Dict[str, Any] = {}

    if query_key and query_key in PREDEFINED_QUERIES:
        predefined = PREDEFINED_QUERIES[query_key]
        sql = predefined.sql
        label = predefined.label
        params = predefined.params(now)
    elif custom_sql and custom_sql.strip():
        sql = custom_sql.strip()
        label = "Custom SQL Query"
    else:
        raise ValueError("Provide either query_key or custom_sql")

    check_query_safety(sql)

    started = time.perf_counter()
    try:
        result = db.execute(text(sql), params)
        if result.returns_rows:
            rows = [
                {key: _jsonable(value) for key, value in row.items()}
                for row in result.mappings().all()
            ]
        else:
            rows = []
            db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning("Query console statement failed: %s", type(e).__name__)
        raise QueryExecutionError(str(getattr(e, "orig", e))) from e
    elapsed_ms = int((time.perf_counter() - started) * 1000)

    logger.info("Query console ran %s: %d rows in %dms", query_key or "custom SQL", len(rows), elapsed_ms)
    return {
        "label": label,
        "sql": sql,
        "data": rows,
        "row_count": len(rows),
        "execution_time": f"{elapsed_ms}ms",
    }
