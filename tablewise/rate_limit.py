"""
Shared slowapi limiter.

Routes decorate anonymous endpoints with ``@limiter.limit(get_rate_limit_public)``
(or get_rate_limit_ai for LLM-backed admin endpoints). The decorated handler
must take a ``request: Request`` argument. create_app() registers the limiter
on app.state and installs the 429 handler.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from .config import RATE_LIMIT_ENABLED

# In-memory storage; with several workers use Limiter(..., storage_uri="redis://...")
limiter = Limiter(key_func=get_remote_address, enabled=RATE_LIMIT_ENABLED)
