"""Storefront Reviews FastAPI application.

Web server for the Reviews & Ratings service that processes commands
synchronously via HTTP. Each request is wrapped in the reviews domain
context by the middleware installed in ``create_app``.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

import structlog

from reviews.api.application import create_app
from reviews.domain import reviews
from reviews.utils.logging import configure_logging

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV controls which config overlay is applied:
#   - unset        → in-memory providers, fake email
#   - "staging"    → PostgreSQL, fake email
#   - "production" → PostgreSQL, SMTP email
configure_logging()
reviews.init()

logger = structlog.get_logger(__name__)
logger.info("Reviews domain initialized", domain=reviews.name)

app = create_app(reviews)
