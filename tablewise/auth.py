"""
Authentication Module for Tablewise
===================================

This module handles authentication and tenant authorization for the admin
surfaces of the platform. Both admin roles use HTTP Basic Authentication.

Roles:
------
1. **SUPER_ADMIN**: The platform operator. Credentials are configured via
   environment variables (ADMIN_USERNAME, ADMIN_PASSWORD). Has access to every
   restaurant plus the platform-only endpoints (restaurant management, SQL
   console, master AI).

2. **RESTAURANT_ADMIN**: A single restaurant's staff. Credentials are the
   username and password stored on the Restaurant record. Access is limited
   to that restaurant's data.

Security Features:
------------------
- **Timing Attack Prevention**: `secrets.compare_digest()` for the super admin
  credentials; werkzeug compares password hashes in constant time.

- **Hashed Passwords**: Restaurant passwords are stored as salted hashes
  produced by werkzeug.security (``method$salt$hash``); the plaintext is
  never stored or returned.

- **Fail Closed**: If ADMIN_PASSWORD is not configured, super admin endpoints
  return 503 Service Unavailable rather than allowing unauthenticated access.

- **Tenant Isolation**: ensure_restaurant_access() rejects a restaurant admin
  touching another restaurant's rows with 403.

Usage:
------
    from tablewise.auth import (
        AdminPrincipal,
        ensure_restaurant_access,
        get_current_principal,
        verify_admin_credentials,
    )

    @router.get("/orders/{restaurant_id}")
    def list_orders(
        restaurant_id: str,
        principal: AdminPrincipal = Depends(get_current_principal),
    ):
        ensure_restaurant_access(principal, restaurant_id)
        ...
"""

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from sqlalchemy.orm import Session
from werkzeug.security import check_password_hash, generate_password_hash

from . import config
from .db import get_db
from .models import Restaurant


logger = logging.getLogger(__name__)

SUPER_ADMIN = "SUPER_ADMIN"
RESTAURANT_ADMIN = "RESTAURANT_ADMIN"


# =============================================================================
# HTTP Basic Auth Setup
# =============================================================================
# The realm is shared across all admin routes so browsers cache credentials.

security = HTTPBasic(realm="Tablewise Admin")


@dataclass
class AdminPrincipal:
    """The authenticated caller of an admin endpoint."""

    username: str
    role: str
    restaurant_id: Optional[str] = None

    @property
    def is_super_admin(self) -> bool:
        return self.role == SUPER_ADMIN


# =============================================================================
# Password Hashing
# =============================================================================

def hash_password(password: str) -> str:
    """Return a salted hash suitable for Restaurant.password_hash."""
    return generate_password_hash(password)


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    """Check a plaintext password against a stored hash."""
    if not password_hash:
        return False
    try:
        return check_password_hash(password_hash, password)
    except ValueError:
        logger.warning("Unsupported password hash method encountered")
        return False


# =============================================================================
# Credential Checks
# =============================================================================

def _is_super_admin(credentials: HTTPBasicCredentials) -> bool:
    if not config.ADMIN_PASSWORD:
        return False
    username_correct = secrets.compare_digest(
        credentials.username.encode("utf-8"),
        config.ADMIN_USERNAME.encode("utf-8"),
    )
    password_correct = secrets.compare_digest(
        credentials.password.encode("utf-8"),
        config.ADMIN_PASSWORD.encode("utf-8"),
    )
    return username_correct and password_correct


def _unauthorized(detail: str = "Invalid admin credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Basic"},
    )


def trial_expired(restaurant: Restaurant, now: Optional[datetime] = None) -> bool:
    """True when the restaurant has a trial end date in the past."""
    if restaurant.trial_end_date is None:
        return False
    end = restaurant.trial_end_date
    if end.tzinfo is None:
        end = end.replace(tzinfo=timezone.utc)
    return end < (now or datetime.now(timezone.utc))


# =============================================================================
# Dependencies
# =============================================================================

def verify_admin_credentials(
    credentials: HTTPBasicCredentials = Depends(security),
) -> str:
    """
    Verify HTTP Basic Auth credentials for super admin endpoints.

    Returns:
        str: The authenticated username if credentials are valid.

    Raises:
        HTTPException (503): If ADMIN_PASSWORD is not set.
        HTTPException (401): If credentials are invalid.
    """
    # Fail closed: if password not configured, deny all access
    if not config.ADMIN_PASSWORD:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Admin authentication not configured. Set ADMIN_PASSWORD environment variable.",
        )

    if not _is_super_admin(credentials):
        raise _unauthorized()

    return credentials.username


def get_current_principal(
    credentials: HTTPBasicCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> AdminPrincipal:
    """
    Resolve HTTP Basic credentials to a super admin or restaurant admin.

    The super admin is checked first. Otherwise the username is looked up on
    the restaurants table and the password verified against its hash.

    Raises:
        HTTPException (401): Unknown username or wrong password.
        HTTPException (403): Restaurant is deactivated or its trial expired.
    """
    if _is_super_admin(credentials):
        return AdminPrincipal(username=credentials.username, role=SUPER_ADMIN)

    restaurant = (
        db.query(Restaurant)
        .filter(Restaurant.username == credentials.username)
        .first()
    )
    if not restaurant or not verify_password(credentials.password, restaurant.password_hash):
        raise _unauthorized()

    if not restaurant.is_active:
        logger.info("Rejected login for inactive restaurant %s", restaurant.id)
        raise HTTPException(status_code=403, detail="Restaurant account is inactive")
    if trial_expired(restaurant):
        logger.info("Rejected login for restaurant %s with expired trial", restaurant.id)
        raise HTTPException(status_code=403, detail="Trial period has expired")

    return AdminPrincipal(
        username=credentials.username,
        role=RESTAURANT_ADMIN,
        restaurant_id=restaurant.id,
    )


def ensure_restaurant_access(principal: AdminPrincipal, restaurant_id: Optional[str]) -> None:
    """Raise 403 unless the principal may act on the given restaurant."""
    if principal.is_super_admin:
        return
    if restaurant_id is None or principal.restaurant_id != restaurant_id:
        logger.warning(
            "Restaurant admin %s denied access to restaurant %s",
            principal.username,
            restaurant_id,
        )
        raise HTTPException(status_code=403, detail="Not allowed for this restaurant")
