"""
Login Route for Tablewise
=========================

The dashboard has a single login screen for both admin roles. It posts the
HTTP Basic credentials here to learn which dashboard to open:

- SUPER_ADMIN: the platform console
- RESTAURANT_ADMIN: that restaurant's dashboard (restaurant_id / slug set)

Failures use the same codes as every other admin endpoint (401 for bad
credentials, 403 for an inactive account or expired trial).
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import AdminPrincipal, get_current_principal
from ..db import get_db
from ..models import Restaurant
from ..schemas.restaurants import LoginOut


logger = logging.getLogger(__name__)

auth_router = APIRouter(prefix="/auth", tags=["Auth"])


@auth_router.post("/login", response_model=LoginOut)
def login(
    db: Session = Depends(get_db),
    principal: AdminPrincipal = Depends(get_current_principal),
) -> LoginOut:
    slug = None
    if principal.restaurant_id:
        restaurant = db.query(Restaurant).filter(Restaurant.id == principal.restaurant_id).first()
        slug = restaurant.slug if restaurant else None

    logger.info("Login: %s as %s", principal.username, principal.role)
    return LoginOut(
        username=principal.username,
        role=principal.role,
        restaurant_id=principal.restaurant_id,
        restaurant_slug=slug,
    )
