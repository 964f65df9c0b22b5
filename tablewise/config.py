"""
Configuration Module for Tablewise
==================================

This module centralizes configuration settings, environment variables, and
constants used throughout the Tablewise ordering platform. All environment
variables and their defaults live here so there is one place to look when
deploying a new environment.

Configuration Categories:
-------------------------
- **Rate Limiting**: Throttles the anonymous customer endpoints (order
  placement, waiter calls, AI recommendations) and the admin AI endpoints
  that cost money per call.

- **CORS Settings**: Cross-Origin Resource Sharing configuration for the
  customer menu and admin dashboard frontends.

- **Admin Authentication**: Platform super-admin credentials. Restaurant
  admins authenticate with credentials stored on their restaurant record.

- **Uploads**: Where menu/banner images are written and what is accepted.

- **AI Providers**: API keys and model names for OpenAI and Gemini.

- **Promotions**: Timing and pricing defaults for popups, mystery boxes and
  dessert prompts.

Environment Variables:
----------------------
- RATE_LIMIT_PUBLIC: Anonymous endpoint rate limit (default: "60 per minute")
- RATE_LIMIT_AI: Admin AI endpoint rate limit (default: "10 per minute")
- RATE_LIMIT_ENABLED: Enable/disable rate limiting (default: "true")
- CORS_ORIGINS: Comma-separated allowed origins (default: "*")
- ADMIN_USERNAME: Super admin username (default: "admin")
- ADMIN_PASSWORD: Super admin password (required for super admin access)
- UPLOAD_DIR: Directory for uploaded images (default: "uploads")
- MAX_UPLOAD_BYTES: Largest accepted upload (default: 5 MB)
- PUBLIC_MENU_BASE_URL: Base URL of the customer menu, used in QR codes
- OPENAI_API_KEY / GEMINI_API_KEY: Server-side LLM keys
- OPENAI_MODEL / OPENAI_ANALYST_MODEL / GEMINI_MODEL: Model names
- QUERY_CONSOLE_READ_ONLY: Restrict the SQL console to SELECT (default: "true")

Usage:
------
    from tablewise import config

    if config.RATE_LIMIT_ENABLED:
        ...
"""

import os
from typing import List


# =============================================================================
# Rate Limiting Configuration
# =============================================================================
# Customer-facing endpoints are unauthenticated, so they are throttled per IP.
# Uses slowapi with in-memory storage (use Redis for multi-worker prod).

RATE_LIMIT_PUBLIC: str = os.getenv("RATE_LIMIT_PUBLIC", "60 per minute")
RATE_LIMIT_AI: str = os.getenv("RATE_LIMIT_AI", "10 per minute")
RATE_LIMIT_ENABLED: bool = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"


def get_rate_limit_public() -> str:
    """Return the current public endpoint rate limit."""
    return RATE_LIMIT_PUBLIC


def get_rate_limit_ai() -> str:
    """Return the current AI endpoint rate limit."""
    return RATE_LIMIT_AI


# =============================================================================
# CORS Configuration
# =============================================================================
# Format: comma-separated list of origins, e.g., "https://menu.example.com"
# Default "*" allows all origins (suitable for development only)

_cors_origins_env = os.getenv("CORS_ORIGINS", "")
CORS_ORIGINS: List[str] = [
    origin.strip()
    for origin in _cors_origins_env.split(",")
    if origin.strip()
] or ["*"]


# =============================================================================
# Admin Authentication Configuration
# =============================================================================
# Super admin credentials for HTTP Basic Auth on platform-wide endpoints.
# ADMIN_PASSWORD must be set in production for super admin access to work.

ADMIN_USERNAME: str = os.getenv("ADMIN_USERNAME", "admin")
ADMIN_PASSWORD: str = os.getenv("ADMIN_PASSWORD", "")


# =============================================================================
# Upload Configuration
# =============================================================================

UPLOAD_DIR: str = os.getenv("UPLOAD_DIR", "uploads")
MAX_UPLOAD_BYTES: int = int(os.getenv("MAX_UPLOAD_BYTES", str(5 * 1024 * 1024)))

ALLOWED_IMAGE_TYPES = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}


# =============================================================================
# Customer Menu Links
# =============================================================================
# QR codes printed on tables encode {PUBLIC_MENU_BASE_URL}/r/{slug}?table=N

PUBLIC_MENU_BASE_URL: str = os.getenv("PUBLIC_MENU_BASE_URL", "http://localhost:3000").rstrip("/")


# =============================================================================
# AI Provider Configuration
# =============================================================================
# Requests may carry their own api_key; these are the server-side fallbacks.

OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
OPENAI_MODEL: str = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
OPENAI_ANALYST_MODEL: str = os.getenv("OPENAI_ANALYST_MODEL", "gpt-4o")
GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")
GEMINI_API_BASE: str = os.getenv(
    "GEMINI_API_BASE", "https://generativelanguage.googleapis.com/v1beta"
)
LLM_TIMEOUT_SECONDS: int = int(os.getenv("LLM_TIMEOUT_SECONDS", "60"))

# Menu items per LLM request when syncing cross-sell recommendations
UPSELL_SYNC_CHUNK_SIZE: int = int(os.getenv("UPSELL_SYNC_CHUNK_SIZE", "40"))


# =============================================================================
# Query Console Configuration
# =============================================================================

QUERY_CONSOLE_READ_ONLY: bool = os.getenv("QUERY_CONSOLE_READ_ONLY", "true").lower() == "true"


# =============================================================================
# Promotion Defaults
# =============================================================================

POPUP_FIRST_DELAY_SECONDS: int = int(os.getenv("POPUP_FIRST_DELAY_SECONDS", "20"))
POPUP_SECOND_DELAY_SECONDS: int = int(os.getenv("POPUP_SECOND_DELAY_SECONDS", "10"))
DEFAULT_MYSTERY_BOX_PRICE: float = float(os.getenv("DEFAULT_MYSTERY_BOX_PRICE", "49"))
DEFAULT_DESSERT_PROMPT_MINUTES: int = int(os.getenv("DEFAULT_DESSERT_PROMPT_MINUTES", "15"))

CURRENCY_SYMBOL: str = os.getenv("CURRENCY_SYMBOL", "₹")
