"""
Notification Routes for Tablewise
=================================

Table service requests raised from the customer menu ("call waiter",
"request bill") and resolved from the order desk.

Endpoints:
----------
- GET /notifications?restaurant_id=...: Pending requests, oldest first
- POST /notifications: Raise a request from a table (no auth, rate limited)
- PATCH /notifications/{id}/resolve: Mark a request handled

Repeated taps on the same button while a request is still pending return
the existing notification instead of queuing duplicates.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from ..auth import AdminPrincipal, ensure_restaurant_access, get_current_principal
from ..config import get_rate_limit_public
from ..db import get_db
from ..models import Notification
from ..rate_limit import limiter
from ..schemas.engagement import NOTIFICATION_TYPES, NotificationCreate, NotificationOut
from ..services.helpers import get_owned_or_404, get_restaurant_or_404


logger = logging.getLogger(__name__)

notifications_router = APIRouter(prefix="/notifications", tags=["Notifications"])


@notifications_router.get("", response_model=List[NotificationOut])
def list_notifications(
    restaurant_id: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    principal: AdminPrincipal = Depends(get_current_principal),
) -> List[NotificationOut]:
    if not restaurant_id:
        raise HTTPException(status_code=400, detail="Restaurant ID is required")
    ensure_restaurant_access(principal, restaurant_id)

    notifications = (
        db.query(Notification)
        .filter(Notification.restaurant_id == restaurant_id, Notification.status == "pending")
        .order_by(Notification.created_at.asc())
        .all()
    )
    return [NotificationOut.model_validate(n) for n in notifications]


@notifications_router.post("", response_model=NotificationOut)
@limiter.limit(get_rate_limit_public)
def create_notification(
    request: Request,
    payload: NotificationCreate,
    db: Session = Depends(get_db),
) -> NotificationOut:
    if not payload.restaurant_id or not payload.table_number:
        raise HTTPException(status_code=400, detail="Missing required fields")
    notification_type = (payload.type or "").upper()
    if notification_type not in NOTIFICATION_TYPES:
        raise HTTPException(status_code=400, detail=f"Invalid notification type: {payload.type}")
    get_restaurant_or_404(db, payload.restaurant_id)

    existing = (
        db.query(Notification)
        .filter(
            Notification.restaurant_id == payload.restaurant_id,
            Notification.table_number == payload.table_number,
            Notification.type == notification_type,
            Notification.status == "pending",
        )
        .first()
    )
    if existing:
        return NotificationOut.model_validate(existing)

    notification = Notification(
        restaurant_id=payload.restaurant_id,
        table_number=payload.table_number,
        type=notification_type,
        status="pending",
    )
    db.add(notification)
    db.commit()
    db.refresh(notification)
    logger.info(
        "%s from table %s (restaurant=%s)",
        notification_type,
        notification.table_number,
        notification.restaurant_id,
    )
    return NotificationOut.model_validate(notification)


@notifications_router.patch("/{notification_id}/resolve", response_model=NotificationOut)
def resolve_notification(
    notification_id: str,
    db: Session = Depends(get_db),
    principal: AdminPrincipal = Depends(get_current_principal),
) -> NotificationOut:
    notification = get_owned_or_404(db, Notification, notification_id, principal, "Notification")
    notification.status = "resolved"
    db.commit()
    db.refresh(notification)
    logger.info("Resolved notification %s", notification.id)
    return NotificationOut.model_validate(notification)
