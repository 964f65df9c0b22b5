"""
Application factory for Tablewise.

Builds the FastAPI app: logging, rate limiting, CORS, request IDs, the API
routers (mounted under /api/v1 and /api) and the /uploads static mount.
"""

import logging
import os
from typing import Optional

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from . import config
from .logging_config import setup_logging
from .middleware import RequestIDMiddleware
from .rate_limit import limiter
from .routes import ALL_ROUTERS

logger = logging.getLogger(__name__)

API_PREFIXES = ("/api/v1", "/api")


def create_app(upload_dir: Optional[str] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        upload_dir: Directory served at /uploads. Defaults to UPLOAD_DIR.

    Returns:
        Configured FastAPI application
    """
    setup_logging()

    app = FastAPI(
        title="Tablewise API",
        description="Multi-tenant restaurant ordering and upsell platform",
        version="1.0.0",
        openapi_tags=[
            {"name": "Health", "description": "Health check endpoints"},
            {"name": "Restaurants", "description": "Tenant management and public menus"},
            {"name": "Orders", "description": "Order placement and the order desk"},
            {"name": "Query Console", "description": "Super admin SQL console"},
        ],
    )

    # Add rate limit exception handler
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestIDMiddleware)

    for prefix in API_PREFIXES:
        api = APIRouter(prefix=prefix)
        for router in ALL_ROUTERS:
            api.include_router(router)
        app.include_router(api)

    upload_dir = upload_dir or config.UPLOAD_DIR
    os.makedirs(upload_dir, exist_ok=True)
    app.mount("/uploads", StaticFiles(directory=upload_dir), name="uploads")

    @app.get("/health", tags=["Health"])
    def health_check():
        return {"status": "ok"}

    logger.info("Application created with %d routers", len(ALL_ROUTERS))
    return app
